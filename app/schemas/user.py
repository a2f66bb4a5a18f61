"""
Pydantic schemas for staff account requests and responses.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from app.models.user import UserRole, MIN_PASSWORD_LENGTH


class UserBase(BaseModel):
    """Base user schema with common fields."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User's display name",
        examples=["Sarah Benali"]
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["agent@example.com"]
    )

    phone: Optional[str] = Field(None, max_length=50, description="Phone number")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class UserCreate(UserBase):
    """Schema used by an admin to register a new account."""

    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=128,
        description=f"Password (minimum {MIN_PASSWORD_LENGTH} characters)"
    )

    role: UserRole = Field(
        UserRole.AGENT,
        description="Account role",
        examples=["agent"]
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Sarah Benali",
                "email": "agent@example.com",
                "password": "agent123",
                "role": "agent",
                "phone": "+216 20 000 000"
            }
        }
    }


class UserUpdate(BaseModel):
    """
    Schema for updating an account. Only the fields sent are changed;
    role and is_active are reserved to admins.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    phone: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip() if v else v


class UserStatusUpdate(BaseModel):
    is_active: bool = Field(..., description="Activate or deactivate the account")


class PasswordChangeRequest(BaseModel):
    """Password change by the account owner."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)


class PasswordResetResponse(BaseModel):
    """Temporary password issued by an admin reset."""

    message: str
    temp_password: str = Field(..., description="Temporary password to hand over to the user")


class UserResponse(BaseModel):
    """User response schema (excluding sensitive data)."""

    id: UUID
    name: str
    email: EmailStr
    role: UserRole
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
