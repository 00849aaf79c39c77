"""
Centralized Error Handling and Logging
Maps exceptions to HTTP responses and writes structured error logs.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union
from contextvars import ContextVar

from fastapi import Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from services.base_service import NotFoundError

# Context variables for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

logger = logging.getLogger(__name__)


class ErrorHandlingConfig:
    """Redaction rules for error logs"""

    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization',
        'auth', 'bearer', 'credential', 'api_key'
    ]
    MAX_BODY_LOG_SIZE = 5000  # Truncate large bodies

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        """Check if a field contains sensitive data"""
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively sanitize sensitive data from logs"""
        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(str(key)) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data


def map_exception(exc: Exception) -> Tuple[int, Dict[str, Any]]:
    """Map a raised condition to an HTTP status code and response body.

    Pure function: no logging, no request state. Anything that is not a
    known condition becomes a 500 whose body does not leak internals.
    """
    if isinstance(exc, NotFoundError):
        return 404, {"error": "Not Found", "message": exc.message}

    if isinstance(exc, HTTPException):
        return exc.status_code, {"error": f"HTTP {exc.status_code}", "message": exc.detail}

    if isinstance(exc, RequestValidationError):
        details = [
            {
                "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
                "message": error.get("msg", "Unknown validation error"),
                "type": error.get("type", "unknown"),
            }
            for error in exc.errors()
        ]
        return 422, {
            "error": "Validation Error",
            "message": "Request validation failed",
            "detail": details,
            "error_count": len(details),
        }

    return 500, {"error": "Internal Server Error", "message": "An unexpected error occurred"}


class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True,
        level: int = logging.ERROR
    ) -> str:
        """Log structured error with full context"""

        trace_id = request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": logging.getLevelName(level)
        }

        if request:
            headers = dict(request.headers)
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(headers),
                "client_ip": request.client.host if request.client else None,
            }

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
                "module": getattr(exception, '__module__', 'unknown')
            }

            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        logger.log(level, json.dumps(log_entry, indent=2, default=str))

        return trace_id


def _captured_body(request: Request) -> Optional[str]:
    body = getattr(request.state, 'captured_body', None)
    if not body:
        return None
    try:
        return body.decode('utf-8')
    except UnicodeDecodeError:
        return "DECODE_ERROR"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture request context and add request IDs"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)

        # Store request body for potential error logging
        request.state.captured_body = await request.body()
        request.state.trace_id = trace_id

        response = await call_next(request)
        # Add trace ID to response headers for client-side debugging
        response.headers["X-Trace-ID"] = trace_id
        return response


def _build_response(request: Request, exc: Exception, level: int, include_traceback: bool) -> JSONResponse:
    status_code, content = map_exception(exc)

    body_str = _captured_body(request)
    trace_id = StructuredLogger.log_error(
        f"http_{status_code}",
        f"HTTP {status_code}: {exc}",
        request=request,
        exception=exc,
        extra_context={
            "status_code": status_code,
            "request_body": ErrorHandlingConfig.sanitize_data(body_str) if body_str else None
        },
        include_traceback=include_traceback,
        level=level
    )

    content["trace_id"] = trace_id
    content["timestamp"] = datetime.now(timezone.utc).isoformat()

    headers = getattr(exc, "headers", None)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


# Global Exception Handlers
async def not_found_exception_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing records (HTTP 404)"""
    return _build_response(request, exc, logging.INFO, include_traceback=False)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with logging"""
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    return _build_response(request, exc, level, include_traceback=exc.status_code >= 500)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI validation errors (HTTP 422)"""
    return _build_response(request, exc, logging.WARNING, include_traceback=False)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions, store failures included"""
    return _build_response(request, exc, logging.ERROR, include_traceback=True)


def setup_error_handling(app):
    """Setup error handling for FastAPI app"""

    app.add_middleware(RequestContextMiddleware)

    # Most specific first
    app.add_exception_handler(NotFoundError, not_found_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling initialized")
