"""
Dashboard statistics and reports
"""
from fastapi import APIRouter, Depends, Request

from repairdesk.api.dependencies import get_reporting_service
from repairdesk.middleware.auth import require_capability
from repairdesk.middleware.rate_limiter import get_rate_limit, limiter
from repairdesk.models import AuthContext, Report, RoleStats
from repairdesk.security.permissions import Operation
from repairdesk.services import ReportingService

router = APIRouter(prefix="/api", tags=["reports"])


@router.get("/stats", response_model=RoleStats)
@limiter.limit(get_rate_limit("read"))
async def get_stats(
    request: Request,
    current_user: AuthContext = Depends(require_capability(Operation.VIEW_STATS)),
    reporting: ReportingService = Depends(get_reporting_service),
) -> RoleStats:
    """
    Dashboard counters

    Technicians also get counters for the tickets assigned to them; the
    ``role`` field tells the two shapes apart.
    """
    return await reporting.dashboard_stats(current_user.role, current_user.user_id)


@router.get("/reports", response_model=Report)
@limiter.limit(get_rate_limit("read"))
async def get_report(
    request: Request,
    current_user: AuthContext = Depends(require_capability(Operation.VIEW_REPORTS)),
    reporting: ReportingService = Depends(get_reporting_service),
) -> Report:
    """Revenue, status breakdown, top issue categories and recent tickets"""
    return await reporting.build_report()
