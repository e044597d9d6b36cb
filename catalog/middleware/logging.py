"""
HTTP request logging middleware.
"""
import time
from typing import Callable
from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from catalog.utils.metrics import record_request_error


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every HTTP request and its response.

    Records method, path, query string and client on the way in, and status
    code and duration on the way out. Unhandled errors are logged and
    re-raised.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        access_log = logger.bind(access=True)

        access_log.info(
            f"→ {request.method} {request.url.path}"
            + (f"?{request.query_params}" if request.query_params else "")
            + f" from {client_host}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            access_log.error(
                f"✗ {request.method} {request.url.path} - ERROR {type(e).__name__}: {e} - {duration:.3f}s"
            )
            record_request_error(type(e).__name__)
            raise

        duration = time.time() - start_time
        log_func = access_log.info if response.status_code < 400 else access_log.warning
        log_func(f"← {request.method} {request.url.path} - {response.status_code} - {duration:.3f}s")

        response.headers["X-Process-Time"] = f"{duration:.3f}"
        return response
