"""
Pydantic models for data validation
"""
from .ticket import (
    Ticket,
    TicketCreate,
    TicketFields,
    TicketStatusUpdate,
    TicketWithCustomer,
    TicketSequenceCounter,
    ServiceNote,
    ServiceStatus,
    TicketPriority,
    PaymentStatus,
)
from .customer import Customer, CustomerCreate
from .user import User, UserCreate, UserRole, PublicUser, LoginRequest, LoginResponse, AuthContext
from .stats import (
    DashboardStats,
    FrontdeskStats,
    TechnicianStats,
    RoleStats,
    Report,
    ReportSummary,
    RevenueBreakdown,
    StatusBreakdown,
    IssueCount,
)
from .notification import MessageChannel, SendMessageRequest, SendMessageResponse

__all__ = [
    "Ticket",
    "TicketCreate",
    "TicketFields",
    "TicketStatusUpdate",
    "TicketWithCustomer",
    "TicketSequenceCounter",
    "ServiceNote",
    "ServiceStatus",
    "TicketPriority",
    "PaymentStatus",
    "Customer",
    "CustomerCreate",
    "User",
    "UserCreate",
    "UserRole",
    "PublicUser",
    "LoginRequest",
    "LoginResponse",
    "AuthContext",
    "DashboardStats",
    "FrontdeskStats",
    "TechnicianStats",
    "RoleStats",
    "Report",
    "ReportSummary",
    "RevenueBreakdown",
    "StatusBreakdown",
    "IssueCount",
    "MessageChannel",
    "SendMessageRequest",
    "SendMessageResponse",
]
