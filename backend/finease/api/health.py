from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])

@router.get("/", response_class=PlainTextResponse)
async def greeting(request: Request):
    return f"Hello {request.app.state.settings.APP_NAME}! Running"

# Simple liveness endpoint for containers/monitors; touches no collaborator.
@router.get("/healthz")
async def health():
    return {"status": "ok"}
