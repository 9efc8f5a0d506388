"""
User model for shop staff authentication
"""
from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum
from passlib.context import CryptContext
import uuid

from repairdesk.utils.clock import utcnow

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, Enum):
    """Staff roles"""
    FRONTDESK = "frontdesk"
    TECHNICIAN = "technician"


class User(BaseModel):
    """Shop staff account"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), validation_alias=AliasChoices("id", "_id"))
    username: str
    password_hash: str
    role: UserRole
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash password with bcrypt

        Args:
            password: Plain text password

        Returns:
            Hashed password

        Note:
            bcrypt has a 72-byte limit. Passwords are automatically truncated.
        """
        password_bytes = password.encode('utf-8')[:72]
        password_truncated = password_bytes.decode('utf-8', errors='ignore')
        return pwd_context.hash(password_truncated)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify password against hash

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password from database

        Returns:
            True if password matches, False otherwise
        """
        # Apply same truncation as hash_password
        password_bytes = plain_password.encode('utf-8')[:72]
        password_truncated = password_bytes.decode('utf-8', errors='ignore')
        return pwd_context.verify(password_truncated, hashed_password)

    def public(self) -> "PublicUser":
        """User data that is safe to return to clients"""
        return PublicUser(
            id=self.id,
            username=self.username,
            full_name=self.full_name,
            role=self.role,
            email=self.email,
            phone=self.phone,
        )

    class Config:
        populate_by_name = True


class UserCreate(BaseModel):
    """User provisioning request"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: UserRole
    full_name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "username": "ravi",
                "password": "SecurePassword123!",
                "role": "technician",
                "full_name": "Ravi Kumar",
            }
        }


class PublicUser(BaseModel):
    """User profile returned by the auth endpoints"""
    id: str
    username: str
    full_name: str
    role: UserRole
    email: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    """Login form payload"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: UserRole


class LoginResponse(BaseModel):
    """Successful login"""
    user: PublicUser
    token: str


class AuthContext(BaseModel):
    """Identity attached to an authenticated request"""
    user_id: str
    username: str
    role: UserRole
