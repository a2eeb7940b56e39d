import logging
import typing as t

from logzio.handler import LogzioHandler

from ..config import Config

logger = logging.getLogger("uvicorn.app")

QUIET_PATHS = ["/metrics", "/bus-positions"]

class EndpointFilter(logging.Filter):
    def __init__(
        self,
        path: str,
        *args: t.Any,
        **kwargs: t.Any,
    ):
        super().__init__(*args, **kwargs)
        self._path = path

    def filter(self, record: logging.LogRecord) -> bool:
        return record.getMessage().find(self._path) == -1

class LogFilter(logging.Filter):
    def filter(self, record):
        record.app = "vehicle-positions"
        record.env = Config.RUNNING_ENV
        return True

def create_logzio_handler(log_type):
    handler = LogzioHandler(Config.LOGZIO_TOKEN, log_type, 5, Config.LOGZIO_URL)
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler

def setup_logging():
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn_access_logger = logging.getLogger("uvicorn.access")
    uvicorn_error_logger = logging.getLogger("uvicorn.error")
    for path in QUIET_PATHS:
        uvicorn_access_logger.addFilter(EndpointFilter(path=path))

    if not Config.LOGZIO_TOKEN:
        logger.info('LOGZIO_TOKEN not set, shipping logs to stdout only')
        return
    try:
        uvicorn_access_logger.addHandler(create_logzio_handler('uvicorn.access'))
        uvicorn_error_logger.addHandler(create_logzio_handler('uvicorn.error'))
        logger.addHandler(create_logzio_handler('fastapi.app'))

        uvicorn_access_logger.addFilter(LogFilter())
        uvicorn_error_logger.addFilter(LogFilter())
        logger.addFilter(LogFilter())
    except Exception as e:
        logger.warning(f"Failed to set up logging: {e}")
