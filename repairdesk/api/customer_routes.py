"""
Customer directory endpoints
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status

from repairdesk.api.dependencies import get_customer_directory
from repairdesk.database import CustomerDirectory
from repairdesk.middleware.auth import require_capability
from repairdesk.middleware.rate_limiter import get_rate_limit, limiter
from repairdesk.models import AuthContext, Customer, CustomerCreate
from repairdesk.security.permissions import Operation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["customers"])


@router.get("/customers", response_model=List[Customer])
@limiter.limit(get_rate_limit("read"))
async def list_customers(
    request: Request,
    current_user: AuthContext = Depends(require_capability(Operation.LIST_CUSTOMERS)),
    customers: CustomerDirectory = Depends(get_customer_directory),
) -> List[Customer]:
    """All customers, newest first"""
    return await customers.list()


@router.post("/customers", response_model=Customer, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("write"))
async def create_customer(
    request: Request,
    payload: CustomerCreate,
    current_user: AuthContext = Depends(require_capability(Operation.CREATE_CUSTOMER)),
    customers: CustomerDirectory = Depends(get_customer_directory),
) -> Customer:
    """
    Register a customer directly

    No phone lookup happens here, so a second customer with the same phone
    can be created. Ticket intake always reuses the oldest one.
    """
    customer = await customers.create(payload)
    logger.info(f"User {current_user.user_id} created customer {customer.id}")
    return customer
