"""
Pydantic schemas for property requests and responses.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from app.models.property import (
    PropertyType,
    ConditionStatus,
    TransactionType,
    PropertyStatus,
    MediaType,
)


class PropertyBase(BaseModel):
    """Fields shared by create and response schemas."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Sea view apartment in La Marsa"])
    description: Optional[str] = Field(None, max_length=10000)
    type: PropertyType = Field(..., examples=["apartment"])
    condition_status: ConditionStatus = Field(..., examples=["good_condition"])
    transaction_type: TransactionType = Field(..., examples=["rental"])
    surface: int = Field(..., ge=1, description="Surface in square meters", examples=[120])
    rooms: int = Field(0, ge=0, le=100)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, examples=[1500])
    location: str = Field(..., min_length=1, max_length=255, examples=["La Marsa, Tunis"])
    features: List[str] = Field(default_factory=list, examples=[["parking", "elevator"]])
    owner_id: Optional[UUID] = Field(None, description="Owning client")
    status: PropertyStatus = PropertyStatus.AVAILABLE


class PropertyCreate(PropertyBase):
    """Schema for creating a property."""

    property_id: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Agency reference code, unique",
        examples=["APT-2024-001"]
    )

    @field_validator("property_id", "title", "location")
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("features")
    @classmethod
    def clean_features(cls, v):
        return [feature.strip() for feature in v if feature and feature.strip()]


class PropertyUpdate(BaseModel):
    """Partial property update. ``remove_media`` lists media ids to delete."""

    property_id: Optional[str] = Field(None, min_length=1, max_length=50)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=10000)
    type: Optional[PropertyType] = None
    condition_status: Optional[ConditionStatus] = None
    transaction_type: Optional[TransactionType] = None
    surface: Optional[int] = Field(None, ge=1)
    rooms: Optional[int] = Field(None, ge=0, le=100)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    features: Optional[List[str]] = None
    owner_id: Optional[UUID] = None
    status: Optional[PropertyStatus] = None
    remove_media: List[UUID] = Field(default_factory=list, description="Media ids to delete")


class PropertyMediaResponse(BaseModel):
    id: UUID
    type: MediaType
    file_path: str
    file_name: Optional[str] = None
    file_size: int
    mime_type: Optional[str] = None


class PropertyResponse(PropertyBase):
    """Property with owner contact and media."""

    id: UUID
    property_id: str
    price: float
    owner_name: Optional[str] = None
    owner_phone: Optional[str] = None
    owner_email: Optional[str] = None
    created_by: Optional[UUID] = None
    photos: List[PropertyMediaResponse] = Field(default_factory=list)
    videos: List[PropertyMediaResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PropertyListResponse(BaseModel):
    properties: List[PropertyResponse]
    total: int
    limit: int
    offset: int


class PropertyListFilters(BaseModel):
    """Query filters for the property listing."""

    status: Optional[PropertyStatus] = None
    type: Optional[PropertyType] = None
    transaction_type: Optional[TransactionType] = None
    location: Optional[str] = None
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    owner_id: Optional[UUID] = None

    @model_validator(mode="after")
    def validate_price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price cannot be greater than max_price")
        return self
