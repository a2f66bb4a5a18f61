"""
Pydantic schemas for calendar visits.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from app.models.visit import (
    VisitStatus,
    VisitType,
    VisitOutcome,
    DEFAULT_VISIT_DURATION,
    MIN_VISIT_DURATION,
    MAX_VISIT_DURATION,
    as_utc,
)


class VisitCreate(BaseModel):
    """Schema for scheduling a visit."""

    property_id: UUID
    client_id: UUID
    agent_id: Optional[UUID] = None
    scheduled_date: datetime = Field(..., examples=["2024-06-01T10:00:00Z"])
    duration: int = Field(
        DEFAULT_VISIT_DURATION,
        ge=MIN_VISIT_DURATION,
        le=MAX_VISIT_DURATION,
        description="Duration in minutes"
    )
    status: VisitStatus = VisitStatus.SCHEDULED
    type: VisitType
    notes: Optional[str] = None
    outcome: Optional[VisitOutcome] = None

    @field_validator("scheduled_date")
    @classmethod
    def normalize_date(cls, v):
        return as_utc(v)


class VisitUpdate(BaseModel):
    property_id: Optional[UUID] = None
    client_id: Optional[UUID] = None
    agent_id: Optional[UUID] = None
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=MIN_VISIT_DURATION, le=MAX_VISIT_DURATION)
    status: Optional[VisitStatus] = None
    type: Optional[VisitType] = None
    notes: Optional[str] = None
    outcome: Optional[VisitOutcome] = None
    reminder_sent: Optional[bool] = None

    @field_validator("scheduled_date")
    @classmethod
    def normalize_date(cls, v):
        return as_utc(v) if v else v


class VisitResponse(BaseModel):
    id: UUID
    property_id: UUID
    property_title: Optional[str] = None
    property_location: Optional[str] = None
    client_id: UUID
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    agent_id: Optional[UUID] = None
    agent_name: Optional[str] = None
    scheduled_date: datetime
    duration: int
    status: VisitStatus
    type: VisitType
    notes: Optional[str] = None
    outcome: Optional[VisitOutcome] = None
    reminder_sent: bool
    created_at: datetime
    updated_at: datetime


class VisitListResponse(BaseModel):
    visits: List[VisitResponse]
    total: int
    limit: int
    offset: int
