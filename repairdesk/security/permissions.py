"""
Role capabilities

Single place that decides which staff role may perform which operation. The
HTTP layer asks ``is_allowed`` before touching any store.
"""
from enum import Enum
from typing import Dict, FrozenSet

from repairdesk.models import UserRole


class Operation(str, Enum):
    """Operations exposed by the API"""
    CREATE_TICKET = "create_ticket"
    VIEW_TICKET = "view_ticket"
    LIST_TICKETS = "list_tickets"
    UPDATE_TICKET_STATUS = "update_ticket_status"
    LIST_CUSTOMERS = "list_customers"
    CREATE_CUSTOMER = "create_customer"
    VIEW_STATS = "view_stats"
    VIEW_REPORTS = "view_reports"
    SEND_MESSAGE = "send_message"


CAPABILITIES: Dict[UserRole, FrozenSet[Operation]] = {
    UserRole.FRONTDESK: frozenset(Operation),
    UserRole.TECHNICIAN: frozenset({
        Operation.VIEW_TICKET,
        Operation.LIST_TICKETS,
        Operation.UPDATE_TICKET_STATUS,
        Operation.VIEW_STATS,
    }),
}


def is_allowed(role: UserRole, operation: Operation) -> bool:
    """
    Check whether a role may perform an operation

    Args:
        role: Staff role of the caller
        operation: Requested operation

    Returns:
        True if allowed; unknown roles are denied everything
    """
    return operation in CAPABILITIES.get(role, frozenset())
