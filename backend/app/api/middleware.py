import logging
import time
from fastapi import FastAPI, Request
from app.core.config import settings

logger = logging.getLogger("app.requests")


def register_request_logging(app: FastAPI) -> None:
    """Log one line per request; requests slower than SLOW_REQUEST_MS are logged as warnings"""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        line = f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms"
        if duration_ms > settings.SLOW_REQUEST_MS:
            logger.warning(f"Slow request: {line}")
        else:
            logger.info(line)
        return response
