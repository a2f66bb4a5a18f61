"""
Pydantic schemas for clients, client needs and interactions.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from app.models.client import (
    ClientRole,
    ClientStatus,
    ContactMethod,
    NeedsUrgency,
    InteractionType,
    InteractionOutcome,
)
from app.models.property import PropertyType


class ClientNeedsInput(BaseModel):
    """Search profile of a buyer or tenant."""

    property_types: List[PropertyType] = Field(default_factory=list)
    min_surface: int = Field(0, ge=0)
    max_surface: int = Field(0, ge=0)
    min_price: Decimal = Field(Decimal("0"), ge=0)
    max_price: Decimal = Field(Decimal("0"), ge=0)
    locations: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    urgency: NeedsUrgency = NeedsUrgency.MEDIUM
    timeline: Optional[str] = Field(None, max_length=255)


class ClientNeedsResponse(ClientNeedsInput):
    id: UUID
    client_id: UUID


class ClientBase(BaseModel):
    secondary_phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    budget: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None
    source: Optional[str] = Field(None, max_length=100, examples=["website"])
    assigned_agent: Optional[UUID] = None


class ClientCreate(ClientBase):
    """Schema for creating a client."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Karim Haddad"])
    email: EmailStr = Field(..., examples=["karim@example.com"])
    phone: str = Field(..., min_length=1, max_length=50, examples=["+216 22 123 456"])
    role: ClientRole
    status: ClientStatus = ClientStatus.PROSPECT
    preferred_contact_method: ContactMethod = ContactMethod.PHONE
    needs: Optional[ClientNeedsInput] = Field(
        None,
        description="Search profile, stored only for buyers and tenants"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator("name", "phone")
    @classmethod
    def strip_required(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class ClientUpdate(BaseModel):
    """Partial client update; only fields sent are changed."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=50)
    secondary_phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    role: Optional[ClientRole] = None
    status: Optional[ClientStatus] = None
    tags: Optional[List[str]] = None
    budget: Optional[Decimal] = Field(None, ge=0)
    preferred_contact_method: Optional[ContactMethod] = None
    notes: Optional[str] = None
    source: Optional[str] = Field(None, max_length=100)
    assigned_agent: Optional[UUID] = None
    needs: Optional[ClientNeedsInput] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip() if v else v


class InteractionCreate(BaseModel):
    """Schema for logging an interaction with a client."""

    type: InteractionType
    notes: str = Field(..., min_length=1)
    outcome: Optional[InteractionOutcome] = None
    follow_up_date: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0, description="Minutes")
    location: Optional[str] = Field(None, max_length=255)
    attachments: List[str] = Field(default_factory=list)


class InteractionResponse(BaseModel):
    id: UUID
    client_id: UUID
    user_id: Optional[UUID] = None
    user_name: Optional[str] = None
    type: InteractionType
    date: datetime
    notes: str
    outcome: Optional[InteractionOutcome] = None
    follow_up_date: Optional[datetime] = None
    duration: Optional[int] = None
    location: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)


class ClientResponse(BaseModel):
    """Client with needs and interaction history."""

    id: UUID
    name: str
    email: str
    phone: str
    secondary_phone: Optional[str] = None
    address: Optional[str] = None
    role: ClientRole
    status: ClientStatus
    tags: List[str] = Field(default_factory=list)
    budget: Optional[float] = None
    preferred_contact_method: ContactMethod
    notes: Optional[str] = None
    source: Optional[str] = None
    assigned_agent: Optional[UUID] = None
    needs: Optional[ClientNeedsResponse] = None
    interactions: List[InteractionResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ClientListResponse(BaseModel):
    clients: List[ClientResponse]
    total: int
    limit: int
    offset: int
