"""
Safe error responses

Every error leaving the API has the same body::

    {"error": {"code": "E007", "message": "...", "trace_id": "...", "timestamp": "..."}}

Internal details (driver errors, gateway addresses, stack traces) only go to
the log, tagged with the trace id returned to the client.

Usage:
    from repairdesk.security.error_handler import SecureError, secure_exception_handler

    raise SecureError("E003", message="Failed to send message")

    app.add_exception_handler(SecureError, secure_exception_handler)
"""

import uuid
import logging
from typing import Optional, Dict, Any
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from repairdesk.utils.clock import utcnow

logger = logging.getLogger(__name__)


# Client-facing messages per error code
ERROR_CODES: Dict[str, str] = {
    "E001": "An internal server error occurred. Please try again later.",
    "E002": "The ticket database is unavailable. Please try again later.",
    "E003": "The messaging gateway is unavailable. Please try again.",
    "E004": "Invalid request format. Please check your input.",
    "E005": "Authentication required.",
    "E006": "Your role is not allowed to do this.",
    "E007": "The requested ticket, customer or user was not found.",
    "E008": "Too many requests. Please wait before trying again.",
    "E009": "Validation error. Please check the provided data.",
}

# HTTP status for each code, also used to pick a code for HTTPExceptions
STATUS_BY_CODE: Dict[str, int] = {
    "E001": 500,
    "E002": 503,
    "E003": 502,
    "E004": 400,
    "E005": 401,
    "E006": 403,
    "E007": 404,
    "E008": 429,
    "E009": 422,
}
CODE_BY_STATUS: Dict[int, str] = {status: code for code, status in STATUS_BY_CODE.items()}

# Fragments that mark a message as leaking internals
UNSAFE_FRAGMENTS = (
    "traceback",
    "file \"",
    "exception:",
    "at 0x",
    "/usr/",
    "/home/",
    "/srv/",
    "pymongo",
    "motor",
    "mongodb",
    "localhost",
    "127.0.0.1",
    ".py",
)


def generate_trace_id() -> str:
    return str(uuid.uuid4())


def error_body(code: str, message: str, trace_id: str) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "trace_id": trace_id,
            "timestamp": utcnow().isoformat(),
        }
    }


def is_safe_message(message: str) -> bool:
    """True when a message can be shown to clients as-is"""
    lowered = message.lower()
    return not any(fragment in lowered for fragment in UNSAFE_FRAGMENTS)


class SecureError(Exception):
    """
    Error with a client-safe message

    Attributes:
        code: Error code (E001-E009)
        message: Message returned to the client (defaults to the code's message)
        status_code: HTTP status (defaults to the code's status)
        internal_message: Logged, never returned
        context: Extra fields for the log record
    """

    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        internal_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message or ERROR_CODES.get(code, ERROR_CODES["E001"])
        self.status_code = status_code or STATUS_BY_CODE.get(code, 500)
        self.trace_id = generate_trace_id()
        self.internal_message = internal_message
        self.context = context or {}
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        return error_body(self.code, self.message, self.trace_id)


async def secure_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Turn any exception into the safe error body

    Register it for SecureError, Starlette's HTTPException and Exception.
    """
    if isinstance(exc, SecureError):
        logger.error(
            f"SecureError [{exc.code}] trace_id={exc.trace_id}: {exc.internal_message or exc.message}",
            extra={"trace_id": exc.trace_id, "path": request.url.path, **exc.context},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    trace_id = generate_trace_id()

    if isinstance(exc, StarletteHTTPException):
        code = CODE_BY_STATUS.get(exc.status_code, "E001")
        detail = str(exc.detail)
        logger.warning(
            f"HTTP {exc.status_code} [{code}] trace_id={trace_id} {request.method} {request.url.path}: {detail}",
            extra={"trace_id": trace_id},
        )
        message = detail if is_safe_message(detail) else ERROR_CODES[code]
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, message, trace_id),
            headers=getattr(exc, "headers", None),
        )

    logger.error(
        f"Unhandled {type(exc).__name__} trace_id={trace_id} {request.method} {request.url.path}",
        extra={"trace_id": trace_id},
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=error_body("E001", ERROR_CODES["E001"], trace_id))


__all__ = [
    'SecureError',
    'ERROR_CODES',
    'STATUS_BY_CODE',
    'generate_trace_id',
    'is_safe_message',
    'secure_exception_handler',
]
