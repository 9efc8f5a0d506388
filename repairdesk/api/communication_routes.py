"""
Outbound customer messages (SMS / WhatsApp)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from repairdesk.api.dependencies import get_customer_messenger
from repairdesk.middleware.auth import require_capability
from repairdesk.middleware.rate_limiter import get_rate_limit, limiter
from repairdesk.models import AuthContext, SendMessageRequest, SendMessageResponse
from repairdesk.security.error_handler import SecureError
from repairdesk.security.permissions import Operation
from repairdesk.services import CustomerMessenger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/communication", tags=["communication"])


@router.post("/send", response_model=SendMessageResponse)
@limiter.limit(get_rate_limit("message"))
async def send_message(
    request: Request,
    payload: SendMessageRequest,
    current_user: AuthContext = Depends(require_capability(Operation.SEND_MESSAGE)),
    messenger: CustomerMessenger = Depends(get_customer_messenger),
) -> SendMessageResponse:
    """
    Send a message to the customer who owns a ticket

    Returns:
        200: Message accepted
        404: Unknown ticket or customer
        502: The gateway did not accept the message
    """
    result = await messenger.send_ticket_message(
        payload.ticket_id,
        payload.message_type,
        payload.message,
    )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket or customer not found"
        )

    customer, delivered = result

    if not delivered:
        raise SecureError(
            "E003",
            message="Failed to send message",
            internal_message=f"Gateway refused {payload.message_type.value} for ticket {payload.ticket_id}",
        )

    logger.info(f"User {current_user.user_id} messaged customer {customer.id} via {payload.message_type.value}")
    return SendMessageResponse(
        success=True,
        message=f"{payload.message_type.value.upper()} sent successfully to {customer.name}",
    )
