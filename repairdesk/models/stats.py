"""
Dashboard statistics and report models
"""
from pydantic import BaseModel, Field
from typing import List, Literal, Union

from repairdesk.models.ticket import TicketWithCustomer


class DashboardStats(BaseModel):
    """Counters shown on every dashboard"""
    role: str
    total_tickets: int = 0
    pending_tickets: int = 0
    in_progress_tickets: int = 0
    completed_tickets: int = 0
    delivered_tickets: int = 0
    total_customers: int = 0
    today_completed: int = 0
    total_revenue: float = 0.0


class FrontdeskStats(DashboardStats):
    """Front desk dashboard"""
    role: Literal["frontdesk"] = "frontdesk"


class TechnicianStats(DashboardStats):
    """Technician dashboard, adds the technician's own workload"""
    role: Literal["technician"] = "technician"
    assigned_to_me: int = 0
    my_in_progress: int = 0
    my_completed_today: int = 0


RoleStats = Union[FrontdeskStats, TechnicianStats]


class ReportSummary(BaseModel):
    total_tickets: int
    total_customers: int
    total_revenue: float
    avg_resolution_days: int


class RevenueBreakdown(BaseModel):
    today: float = 0.0
    this_week: float = 0.0
    this_month: float = 0.0


class StatusBreakdown(BaseModel):
    pending: int = 0
    in_progress: int = 0
    waiting_for_parts: int = 0
    testing: int = 0
    completed: int = 0
    delivered: int = 0


class IssueCount(BaseModel):
    category: str
    count: int


class Report(BaseModel):
    """Front desk report"""
    summary: ReportSummary
    revenue: RevenueBreakdown
    status_breakdown: StatusBreakdown
    top_issues: List[IssueCount] = Field(default_factory=list)
    recent_tickets: List[TicketWithCustomer] = Field(default_factory=list)
