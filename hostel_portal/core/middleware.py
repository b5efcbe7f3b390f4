"""
Core middleware and exception handler registration for the FastAPI application.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from hostel_portal.config.logging import get_logger
from hostel_portal.core.constants import HEADER_REQUEST_ID
from hostel_portal.core.exceptions import BaseAppException

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an id, reusing one supplied by an upstream proxy.

    The id is stored in ``request.state.request_id`` and echoed in the
    response headers.
    """

    def __init__(self, app: ASGIApp, header_name: str = HEADER_REQUEST_ID):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Log each request with its duration and add ``X-Process-Time``."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        logger.info(
            "Request completed",
            extra={
                "request_id": get_request_id(request),
                "method": request.method,
                "url": str(request.url.path),
                "status_code": response.status_code,
                "process_time": f"{process_time:.4f}s",
            }
        )
        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Log error responses and unhandled exceptions."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request processing failed: {exc}",
                extra={
                    "request_id": get_request_id(request),
                    "method": request.method,
                    "url": str(request.url.path),
                    "error_type": type(exc).__name__,
                },
                exc_info=True
            )
            raise

        if response.status_code >= 400:
            logger.warning(
                f"Request returned error status {response.status_code}",
                extra={
                    "request_id": get_request_id(request),
                    "method": request.method,
                    "url": str(request.url.path),
                    "status_code": response.status_code,
                }
            )
        return response


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_middlewares(app: FastAPI) -> None:
    """
    Register the core middlewares and the application exception handler.

    Middlewares run in reverse order of registration: the request id
    middleware is outermost, so the id is set before timing and error
    logging, and error logging is innermost.
    """
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(BaseAppException, app_exception_handler)
    logger.debug("Core middlewares registered")


def get_request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


__all__ = [
    "RequestIDMiddleware",
    "TimingMiddleware",
    "ErrorLoggingMiddleware",
    "app_exception_handler",
    "register_middlewares",
    "get_request_id",
]
