import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

def configure_logging(level: str = "INFO") -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    # basicConfig is a no-op once the root logger has handlers (uvicorn, pytest)
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger("finease").setLevel(lvl)
