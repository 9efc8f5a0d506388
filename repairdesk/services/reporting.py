"""
Dashboard statistics and reports, derived by scanning the ticket store
"""
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from repairdesk.database.base import CustomerDirectory, TicketStore
from repairdesk.models import (
    FrontdeskStats,
    IssueCount,
    Report,
    ReportSummary,
    RevenueBreakdown,
    RoleStats,
    ServiceStatus,
    StatusBreakdown,
    TechnicianStats,
    TicketWithCustomer,
    UserRole,
)
from repairdesk.utils.clock import Clock, utcnow

TOP_ISSUES_LIMIT = 5
RECENT_TICKETS_LIMIT = 10
SECONDS_PER_DAY = 24 * 60 * 60


def _count(tickets: Iterable[TicketWithCustomer], status: ServiceStatus) -> int:
    return sum(1 for t in tickets if t.service_status == status)


def _completed_on(ticket: TicketWithCustomer, day: date) -> bool:
    return ticket.completed_at is not None and ticket.completed_at.date() == day


def _delivered_revenue(tickets: Iterable[TicketWithCustomer], since: Optional[datetime] = None) -> float:
    """Sum final costs of delivered tickets, dated by completion (or creation)"""
    total = 0.0
    for ticket in tickets:
        if ticket.service_status != ServiceStatus.DELIVERED or not ticket.final_cost:
            continue
        if since is not None and (ticket.completed_at or ticket.created_at) < since:
            continue
        total += ticket.final_cost
    return total


class ReportingService:
    """Read-only aggregation over tickets and customers"""

    def __init__(self, tickets: TicketStore, customers: CustomerDirectory, clock: Clock = utcnow):
        self.tickets = tickets
        self.customers = customers
        self.clock = clock

    async def dashboard_stats(self, role: UserRole, user_id: str) -> RoleStats:
        """
        Dashboard counters for the given staff member

        Args:
            role: Role of the requesting user
            user_id: Id of the requesting user

        Returns:
            TechnicianStats for technicians, FrontdeskStats otherwise
        """
        all_tickets = await self.tickets.list_all()
        total_customers = len(await self.customers.list())
        today = self.clock().date()

        common = dict(
            total_tickets=len(all_tickets),
            pending_tickets=_count(all_tickets, ServiceStatus.PENDING),
            in_progress_tickets=_count(all_tickets, ServiceStatus.IN_PROGRESS),
            completed_tickets=_count(all_tickets, ServiceStatus.COMPLETED),
            delivered_tickets=_count(all_tickets, ServiceStatus.DELIVERED),
            total_customers=total_customers,
            today_completed=sum(1 for t in all_tickets if _completed_on(t, today)),
            total_revenue=_delivered_revenue(all_tickets),
        )

        if role == UserRole.TECHNICIAN:
            mine = [t for t in all_tickets if t.assigned_technician == user_id]
            return TechnicianStats(
                **common,
                assigned_to_me=len(mine),
                my_in_progress=_count(mine, ServiceStatus.IN_PROGRESS),
                my_completed_today=sum(1 for t in mine if _completed_on(t, today)),
            )

        return FrontdeskStats(**common)

    async def build_report(self) -> Report:
        """Revenue, status breakdown, top issues and recent tickets"""
        all_tickets = await self.tickets.list_all()
        total_customers = len(await self.customers.list())

        now = self.clock()
        start_of_day = datetime(now.year, now.month, now.day)
        # Weeks start on Sunday
        start_of_week = start_of_day - timedelta(days=(start_of_day.weekday() + 1) % 7)
        start_of_month = datetime(now.year, now.month, 1)

        today_revenue = sum(
            t.final_cost
            for t in all_tickets
            if t.service_status == ServiceStatus.DELIVERED and t.final_cost and _completed_on(t, now.date())
        )

        return Report(
            summary=ReportSummary(
                total_tickets=len(all_tickets),
                total_customers=total_customers,
                total_revenue=_delivered_revenue(all_tickets),
                avg_resolution_days=self._avg_resolution_days(all_tickets),
            ),
            revenue=RevenueBreakdown(
                today=today_revenue,
                this_week=_delivered_revenue(all_tickets, since=start_of_week),
                this_month=_delivered_revenue(all_tickets, since=start_of_month),
            ),
            status_breakdown=StatusBreakdown(
                pending=_count(all_tickets, ServiceStatus.PENDING),
                in_progress=_count(all_tickets, ServiceStatus.IN_PROGRESS),
                waiting_for_parts=_count(all_tickets, ServiceStatus.WAITING_FOR_PARTS),
                testing=_count(all_tickets, ServiceStatus.TESTING),
                completed=_count(all_tickets, ServiceStatus.COMPLETED),
                delivered=_count(all_tickets, ServiceStatus.DELIVERED),
            ),
            top_issues=self._top_issues(all_tickets),
            recent_tickets=all_tickets[:RECENT_TICKETS_LIMIT],
        )

    @staticmethod
    def _avg_resolution_days(tickets: List[TicketWithCustomer]) -> int:
        resolved = [t for t in tickets if t.completed_at]
        if not resolved:
            return 0
        total_seconds = sum((t.completed_at - t.created_at).total_seconds() for t in resolved)
        return round(total_seconds / len(resolved) / SECONDS_PER_DAY)

    @staticmethod
    def _top_issues(tickets: List[TicketWithCustomer]) -> List[IssueCount]:
        # Counter.most_common keeps first-seen order between equal counts
        counts = Counter(t.issue_category for t in tickets)
        return [
            IssueCount(category=category, count=count)
            for category, count in counts.most_common(TOP_ISSUES_LIMIT)
        ]
