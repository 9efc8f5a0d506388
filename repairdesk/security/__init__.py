"""
Security module: role capabilities and safe error handling
"""
from .permissions import Operation, CAPABILITIES, is_allowed
from .error_handler import (
    SecureError,
    ERROR_CODES,
    STATUS_BY_CODE,
    generate_trace_id,
    secure_exception_handler,
)

__all__ = [
    # Capabilities
    "Operation",
    "CAPABILITIES",
    "is_allowed",
    # Error handling
    "SecureError",
    "ERROR_CODES",
    "STATUS_BY_CODE",
    "generate_trace_id",
    "secure_exception_handler",
]
