"""
Log masking for credentials and customer contact data

Staff tokens, password hashes and the customer phone numbers and e-mails that
flow through ticket intake and messaging must not reach the logs in clear.
``configure_secure_logging`` installs a root handler whose filter rewrites
every record before it is formatted.

Usage:
    configure_secure_logging(level=logging.INFO, format_type="json")
    logger.info(f"Sending sms to {customer.phone}")  # -> "Sending sms to ******3210"
"""

import re
import logging
import json
from typing import Any, Callable, List, Optional, Tuple, Union
from logging import LogRecord, Filter, Formatter

Replacement = Union[str, Callable[[re.Match], str]]


def _mask_email(match: re.Match) -> str:
    return f"{match.group(1)[:1]}***@***.{match.group(3)}"


# Applied in order; earlier patterns may hide text later ones would match
SENSITIVE_PATTERNS: List[Tuple[re.Pattern, Replacement]] = [
    (re.compile(r'eyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+'), '[JWT_REDACTED]'),
    (re.compile(r'(Bearer\s+)[a-zA-Z0-9_.-]+', re.IGNORECASE), r'\1[TOKEN_REDACTED]'),
    (re.compile(r'(Authorization:\s*)[^\s]+', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(password|passwd|pwd|secret|token)["\s:=]+["\']?([^\s"\']{4,})["\']?', re.IGNORECASE), r'\1=[REDACTED]'),
    # bcrypt hashes from the users collection
    (re.compile(r'\$2[aby]?\$\d{2}\$[./A-Za-z0-9]{53}'), '[HASH_REDACTED]'),
    (re.compile(r'mongodb(\+srv)?://([^:]+):([^@]+)@'), r'mongodb\1://[USER]:[PASS]@'),
    (re.compile(r'([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+)\.([a-zA-Z]{2,})'), _mask_email),
    # Indian mobile numbers with optional +91 / 0 prefix; last 4 digits stay readable
    (re.compile(r'(?<!\d)(?:\+?91[\s-]?|0)?([6-9]\d{5})(\d{4})(?!\d)'), r'******\2'),
]


def mask_text(text: str, patterns: Optional[List[Tuple[re.Pattern, Replacement]]] = None) -> str:
    """Apply the masking patterns to a string"""
    if not text:
        return text
    for pattern, replacement in patterns or SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SensitiveDataFilter(Filter):
    """Masks the message and its arguments; never drops a record"""

    def __init__(self, name: str = '', additional_patterns: Optional[List[Tuple[re.Pattern, Replacement]]] = None):
        super().__init__(name)
        self.patterns = SENSITIVE_PATTERNS + list(additional_patterns or [])

    def filter(self, record: LogRecord) -> bool:
        if record.msg:
            record.msg = self._mask_sensitive(str(record.msg))

        if isinstance(record.args, dict):
            record.args = {k: self._mask_sensitive(str(v)) for k, v in record.args.items()}
        elif record.args:
            record.args = tuple(self._mask_sensitive(str(arg)) for arg in record.args)

        return True

    def _mask_sensitive(self, text: str) -> str:
        return mask_text(text, self.patterns)


class SecureFormatter(Formatter):
    """Plain text formatter with a trace id column"""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, include_trace_id: bool = True):
        if fmt is None:
            trace = ' - [%(trace_id)s]' if include_trace_id else ''
            fmt = f'%(asctime)s - %(name)s - %(levelname)s{trace} - %(message)s'
        super().__init__(fmt, datefmt)
        self.include_trace_id = include_trace_id

    def format(self, record: LogRecord) -> str:
        if self.include_trace_id and not hasattr(record, 'trace_id'):
            record.trace_id = '-'
        return super().format(record)


class JSONSecureFormatter(Formatter):
    """One JSON object per line, for log shippers"""

    def __init__(self):
        super().__init__()
        self._sensitive_filter = SensitiveDataFilter()

    def format(self, record: LogRecord) -> str:
        self._sensitive_filter.filter(record)

        log_data: dict = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        trace_id: Any = getattr(record, 'trace_id', None)
        if trace_id:
            log_data['trace_id'] = trace_id
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_secure_logging(
    level: int = logging.INFO,
    format_type: str = 'text',  # 'text' or 'json'
    include_trace_id: bool = True,
    additional_patterns: Optional[List[Tuple[re.Pattern, Replacement]]] = None,
) -> None:
    """
    Replace the root handlers with a single masking console handler

    Args:
        level: Logging level
        format_type: 'text' for humans, 'json' for log aggregation
        include_trace_id: Add the trace id column to text output
        additional_patterns: Extra (pattern, replacement) pairs to mask
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.addFilter(SensitiveDataFilter(additional_patterns=additional_patterns))
    if format_type == 'json':
        console_handler.setFormatter(JSONSecureFormatter())
    else:
        console_handler.setFormatter(SecureFormatter(include_trace_id=include_trace_id))

    root_logger.addHandler(console_handler)


__all__ = [
    'SensitiveDataFilter',
    'SecureFormatter',
    'JSONSecureFormatter',
    'SENSITIVE_PATTERNS',
    'mask_text',
    'configure_secure_logging',
]
