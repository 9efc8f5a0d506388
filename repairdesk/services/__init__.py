"""
Business services
"""
from .ticket_service import TicketService
from .reporting import ReportingService
from .notifications import (
    NotificationSender,
    LoggingNotificationSender,
    HttpNotificationSender,
    CustomerMessenger,
    get_notification_sender,
)

__all__ = [
    "TicketService",
    "ReportingService",
    "NotificationSender",
    "LoggingNotificationSender",
    "HttpNotificationSender",
    "CustomerMessenger",
    "get_notification_sender",
]
