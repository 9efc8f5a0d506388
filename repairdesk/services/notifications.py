"""
Customer notifications over SMS / WhatsApp

Real delivery is handled by an external gateway. Without a configured gateway
the message is only logged.
"""
from abc import ABC, abstractmethod
from typing import Optional, Tuple
import logging

import httpx

from repairdesk.config import settings
from repairdesk.database.base import CustomerDirectory, TicketStore
from repairdesk.models import Customer, MessageChannel
from repairdesk.utils.http_client import HTTPClient, get_http_client

logger = logging.getLogger(__name__)


class NotificationSender(ABC):
    """Delivers a text message to a phone number"""

    @abstractmethod
    async def send(self, phone: str, channel: MessageChannel, text: str) -> bool:
        """
        Send a message

        Returns:
            True if the message was accepted for delivery
        """


class LoggingNotificationSender(NotificationSender):
    """Writes the message to the log instead of delivering it"""

    async def send(self, phone: str, channel: MessageChannel, text: str) -> bool:
        logger.info(f"Sending {channel.value} to {phone}: {text}")
        return True


class HttpNotificationSender(NotificationSender):
    """
    Posts messages to an SMS/WhatsApp HTTP gateway

    The gateway receives ``{"to", "channel", "text"}`` as JSON and is expected
    to answer with a 2xx status when it accepts the message.
    """

    def __init__(
        self,
        gateway_url: str,
        api_token: Optional[str] = None,
        client: Optional[HTTPClient] = None,
    ):
        self.gateway_url = gateway_url
        self.api_token = api_token
        self.client = client or get_http_client()

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def send(self, phone: str, channel: MessageChannel, text: str) -> bool:
        payload = {"to": phone, "channel": channel.value, "text": text}
        try:
            response = await self.client.post(self.gateway_url, json=payload, headers=self._get_headers())
        except httpx.HTTPError as e:
            logger.error(f"Notification gateway unreachable: {e}")
            return False

        if response.is_success:
            logger.info(f"{channel.value} accepted by gateway for {phone}")
            return True

        logger.warning(f"Notification gateway rejected {channel.value} message: HTTP {response.status_code}")
        return False


def get_notification_sender() -> NotificationSender:
    """Gateway sender when one is configured, logging sender otherwise"""
    if settings.notification_gateway_url:
        return HttpNotificationSender(
            gateway_url=settings.notification_gateway_url,
            api_token=settings.notification_gateway_token,
        )
    return LoggingNotificationSender()


class CustomerMessenger:
    """Sends a message to the customer who owns a ticket"""

    def __init__(self, tickets: TicketStore, customers: CustomerDirectory, sender: NotificationSender):
        self.tickets = tickets
        self.customers = customers
        self.sender = sender

    async def send_ticket_message(
        self,
        ticket_id: str,
        channel: MessageChannel,
        text: str,
    ) -> Optional[Tuple[Customer, bool]]:
        """
        Message the customer behind a ticket

        Args:
            ticket_id: Public ticket ID
            channel: sms or whatsapp
            text: Message body

        Returns:
            Tuple of (customer, delivered), or None if the ticket or its
            customer does not exist
        """
        ticket = await self.tickets.get_by_ticket_id(ticket_id)
        if ticket is None:
            return None

        customer = await self.customers.get_by_id(ticket.customer_id)
        if customer is None:
            logger.error(f"Ticket {ticket_id} has no resolvable customer {ticket.customer_id}")
            return None

        delivered = await self.sender.send(customer.phone, channel, text)
        return customer, delivered
