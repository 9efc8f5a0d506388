"""
Ticket models
"""
from pydantic import AliasChoices, BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional
from enum import Enum
import uuid

from repairdesk.models.customer import Customer
from repairdesk.utils.clock import utcnow


class ServiceStatus(str, Enum):
    """Repair progress of a ticket"""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    WAITING_FOR_PARTS = "Waiting for Parts"
    TESTING = "Testing"
    COMPLETED = "Completed"
    DELIVERED = "Delivered"


class TicketPriority(str, Enum):
    """Ticket priority levels"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class PaymentStatus(str, Enum):
    """Payment state of a ticket"""
    PENDING = "Pending"
    ADVANCE_PAID = "Advance Paid"
    PAID = "Paid"


def _blank_to_none(value):
    # Form posts send "" for untouched optional inputs
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ServiceNote(BaseModel):
    """Technician annotation appended to a ticket"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    note: str
    technician_id: str
    timestamp: datetime = Field(default_factory=utcnow)
    photos: List[str] = Field(default_factory=list)


class TicketFields(BaseModel):
    """Device and issue details of a ticket"""
    device_type: str = Field(..., min_length=1)
    device_model: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_date: Optional[str] = None
    issue_category: str = Field(..., min_length=1)
    problem_description: str = Field(..., min_length=1)
    priority: Optional[TicketPriority] = None
    service_status: Optional[ServiceStatus] = None
    payment_status: Optional[PaymentStatus] = None
    estimated_cost: Optional[float] = None
    final_cost: Optional[float] = None
    assigned_technician: Optional[str] = None

    @field_validator(
        "device_model",
        "serial_number",
        "purchase_date",
        "estimated_cost",
        "final_cost",
        "assigned_technician",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class TicketCreate(TicketFields):
    """Ticket intake form: device details plus the embedded customer"""
    customer_name: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=1)
    customer_email: Optional[str] = None
    customer_address: Optional[str] = None
    priority: TicketPriority = TicketPriority.MEDIUM

    def split_customer(self) -> tuple:
        """
        Separate the embedded customer data from the ticket fields

        Returns:
            Tuple of (customer data dict, TicketFields)
        """
        customer_data = {
            "name": self.customer_name,
            "phone": self.customer_phone,
            "email": self.customer_email,
            "address": self.customer_address,
        }
        fields = TicketFields(**self.model_dump(include=set(TicketFields.model_fields)))
        return customer_data, fields

    class Config:
        json_schema_extra = {
            "example": {
                "customer_name": "Anita Rao",
                "customer_phone": "9876543210",
                "device_type": "Laptop",
                "device_model": "ThinkPad T480",
                "issue_category": "Hardware",
                "problem_description": "Does not power on",
                "priority": "High",
                "estimated_cost": 1500,
            }
        }


class TicketStatusUpdate(BaseModel):
    """Status update submitted by staff"""
    service_status: ServiceStatus
    priority: Optional[TicketPriority] = None
    payment_status: Optional[PaymentStatus] = None
    final_cost: Optional[float] = None
    service_note: Optional[str] = None
    photos: Optional[List[str]] = None

    @field_validator("final_cost", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class Ticket(BaseModel):
    """Complete ticket record"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), validation_alias=AliasChoices("id", "_id"))
    ticket_id: str
    customer_id: str
    device_type: str
    device_model: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_date: Optional[str] = None
    issue_category: str
    problem_description: str
    priority: TicketPriority = TicketPriority.MEDIUM
    service_status: ServiceStatus = ServiceStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    estimated_cost: Optional[float] = None
    final_cost: Optional[float] = None
    assigned_technician: Optional[str] = None
    service_notes: List[ServiceNote] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    class Config:
        populate_by_name = True


class TicketWithCustomer(Ticket):
    """Ticket joined with its customer and technician name"""
    customer: Customer
    assigned_technician_name: Optional[str] = None


class TicketSequenceCounter(BaseModel):
    """Per-day counter behind ticket IDs"""
    date: str = Field(..., validation_alias=AliasChoices("date", "_id"))
    sequence: int

    class Config:
        populate_by_name = True
