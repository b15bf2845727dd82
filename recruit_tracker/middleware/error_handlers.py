"""
Global Exception Handler Middleware for the Recruit Tracker API
"""
import time
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import ValidationError

from recruit_tracker.utils.exceptions import TrackerBaseException, map_to_http_exception
from recruit_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)


def error_response(request_id: str, status_code: int, detail: Any) -> JSONResponse:
    """Standard error envelope shared by every failure path"""
    if isinstance(detail, str):
        detail = {"message": detail}
    elif not isinstance(detail, dict):
        detail = {"message": str(detail)}

    content = {
        "success": False,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "status_code": status_code,
        **detail
    }
    return JSONResponse(status_code=status_code, content=content, headers={"X-Request-ID": request_id})


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Turns domain exceptions into JSON error responses and tags every response with a request id"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "client_ip": request.client.host if request.client else "unknown"
            }
        )

        try:
            response = await call_next(request)
            logger.info(
                f"Request completed: {request.method} {request.url.path} - {response.status_code}",
                extra={"request_id": request_id, "status_code": response.status_code}
            )
            response.headers["X-Request-ID"] = request_id
            return response

        except TrackerBaseException as exc:
            http_exc = map_to_http_exception(exc)
            log = logger.error if http_exc.status_code >= 500 else logger.warning
            log(
                f"{exc.__class__.__name__} in {request.method} {request.url.path}: {exc.message}",
                extra={"request_id": request_id, "error_code": exc.error_code, "details": exc.details}
            )
            return error_response(request_id, http_exc.status_code, http_exc.detail)

        except ValidationError as exc:
            # pydantic errors raised while building models from stored documents
            logger.error(
                f"Data validation error in {request.method} {request.url.path}: {exc}",
                extra={"request_id": request_id}
            )
            return error_response(request_id, 500, {
                "error": "Data validation failed",
                "message": "Stored data did not match the expected format",
                "validation_errors": exc.errors(include_url=False, include_context=False),
            })

        except HTTPException as exc:
            logger.warning(
                f"HTTP exception in {request.method} {request.url.path}: {exc.detail}",
                extra={"request_id": request_id, "status_code": exc.status_code}
            )
            return error_response(request_id, exc.status_code, exc.detail)

        except Exception as exc:
            logger.error(
                f"Unhandled exception in {request.method} {request.url.path}: {str(exc)}",
                extra={"request_id": request_id, "traceback": traceback.format_exc()},
                exc_info=True
            )
            return error_response(request_id, 500, {
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later."
            })


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Middleware for performance monitoring"""

    def __init__(self, app, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        processing_time = time.time() - start_time

        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} took {processing_time:.3f}s",
                extra={"processing_time": processing_time, "threshold": self.slow_request_threshold}
            )
        else:
            logger.debug(f"Request performance: {request.method} {request.url.path} - {processing_time:.3f}s")

        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"
        return response


class HealthCheckMiddleware(BaseHTTPMiddleware):
    """Short-circuits health probes before the logging middleware sees them"""

    HEALTH_PATHS = ["/health", "/healthz", "/ping"]

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.HEALTH_PATHS and request.method in ("GET", "HEAD"):
            return JSONResponse({"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()})
        return await call_next(request)
