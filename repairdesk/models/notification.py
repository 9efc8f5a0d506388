"""
Customer messaging models
"""
from pydantic import BaseModel, Field
from enum import Enum


class MessageChannel(str, Enum):
    """Channels a customer can be reached on"""
    SMS = "sms"
    WHATSAPP = "whatsapp"


class SendMessageRequest(BaseModel):
    ticket_id: str = Field(..., min_length=1, description="Ticket the message is about")
    message_type: MessageChannel = Field(..., description="sms or whatsapp")
    message: str = Field(..., min_length=1, description="Message text")


class SendMessageResponse(BaseModel):
    success: bool
    message: str
