"""
Ticket identifier formatting

Ticket IDs look like ``SATY-20240301-0001``: a shop prefix, the UTC calendar
day the ticket was opened and the per-day sequence number. Sequences above
9999 widen the numeric field instead of wrapping.
"""
import re
from datetime import date, datetime
from typing import Tuple, Union

from repairdesk.config import settings

SEQUENCE_WIDTH = 4

_TICKET_ID_PATTERN = re.compile(r"^(?P<prefix>[A-Za-z0-9]+)-(?P<date>\d{8})-(?P<sequence>\d{4,})$")


def date_key(day: Union[date, datetime]) -> str:
    """
    Build the per-day sequence key

    Args:
        day: Date (or datetime) the ticket is opened on

    Returns:
        Day formatted as YYYYMMDD
    """
    return day.strftime("%Y%m%d")


def format_ticket_id(day: Union[date, datetime], sequence: int, prefix: str = None) -> str:
    """
    Format a ticket ID from its day and sequence number

    Args:
        day: Date the ticket is opened on
        sequence: Per-day sequence number (1-based)
        prefix: Shop prefix (defaults to settings.ticket_id_prefix)

    Returns:
        Ticket ID string

    Raises:
        ValueError: If sequence is lower than 1
    """
    if sequence < 1:
        raise ValueError(f"Ticket sequence must be >= 1, got {sequence}")

    prefix = prefix or settings.ticket_id_prefix
    return f"{prefix}-{date_key(day)}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_ticket_id(ticket_id: str) -> Tuple[date, int]:
    """
    Split a ticket ID back into its day and sequence number

    Raises:
        ValueError: If the ticket ID is malformed
    """
    match = _TICKET_ID_PATTERN.match(ticket_id or "")
    if not match:
        raise ValueError(f"Malformed ticket ID: {ticket_id!r}")

    day = datetime.strptime(match.group("date"), "%Y%m%d").date()
    return day, int(match.group("sequence"))
