"""
Utility functions
"""
from .clock import utcnow
from .ticket_ids import date_key, format_ticket_id, parse_ticket_id
from .jwt_handler import create_jwt_token, verify_jwt_token
from .secure_logging import (
    mask_text,
    SensitiveDataFilter,
    SecureFormatter,
    JSONSecureFormatter,
    SENSITIVE_PATTERNS,
    configure_secure_logging,
)

__all__ = [
    # Clock
    "utcnow",
    # Ticket IDs
    "date_key",
    "format_ticket_id",
    "parse_ticket_id",
    # JWT
    "create_jwt_token",
    "verify_jwt_token",
    # Secure Logging
    "SensitiveDataFilter",
    "SecureFormatter",
    "JSONSecureFormatter",
    "SENSITIVE_PATTERNS",
    "mask_text",
    "configure_secure_logging",
]
