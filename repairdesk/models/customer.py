"""
Customer Model
"""
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from repairdesk.utils.clock import utcnow


class CustomerCreate(BaseModel):
    """Data needed to register a customer"""

    name: str = Field(..., min_length=1, description="Customer name")
    phone: str = Field(..., min_length=1, description="Phone number, used to find returning customers")
    email: Optional[str] = Field(None, description="Customer email")
    address: Optional[str] = Field(None, description="Postal address")

    @field_validator("email", "address", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Customer(CustomerCreate):
    """Customer registered at the shop"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), validation_alias=AliasChoices("id", "_id"))
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        populate_by_name = True
