# backend/finease/core/errors.py

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

class ApiError(Exception):
    """Base for every failure the API reports to a client as {"message": ...}."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Unauthorized: No token provided"

class InvalidCredential(ApiError):
    # Never say why the token was rejected
    status_code = 401
    default_message = "Invalid or expired token"

class InvalidArgument(ApiError):
    status_code = 400
    default_message = "Invalid request"

class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"

class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"

class ServiceUnavailable(ApiError):
    status_code = 503
    default_message = "Service unavailable"

class Internal(ApiError):
    status_code = 500

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

def describe_validation_error(errors) -> str:
    # First error is enough for the client; full list goes to the log
    if not errors:
        return InvalidArgument.default_message
    loc = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
    detail = " ".join(part for part in (loc, errors[0].get("msg", "")) if part)
    return f"Invalid request: {detail}" if detail else InvalidArgument.default_message

async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.info("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content={"message": describe_validation_error(errors)})

def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
