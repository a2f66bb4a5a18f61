"""
Pydantic schemas for maintenance requests.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from app.models.maintenance import MaintenanceCategory, MaintenancePriority, MaintenanceStatus


class MaintenanceCreate(BaseModel):
    """Schema for reporting a maintenance request."""

    property_id: UUID
    contract_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    title: str = Field(..., min_length=1, max_length=255, examples=["Water leak in kitchen"])
    description: str = Field(..., min_length=1)
    category: MaintenanceCategory
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    status: MaintenanceStatus = MaintenanceStatus.REPORTED
    reported_date: Optional[datetime] = Field(None, description="Defaults to now")
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    cost: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    assigned_to: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class MaintenanceUpdate(BaseModel):
    property_id: Optional[UUID] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[MaintenanceCategory] = None
    priority: Optional[MaintenancePriority] = None
    status: Optional[MaintenanceStatus] = None
    contract_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    reported_date: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    cost: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    assigned_to: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class MaintenancePhotoResponse(BaseModel):
    id: UUID
    file_path: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None


class MaintenanceResponse(BaseModel):
    id: UUID
    property_id: UUID
    property_title: Optional[str] = None
    property_location: Optional[str] = None
    contract_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    title: str
    description: str
    category: MaintenanceCategory
    priority: MaintenancePriority
    status: MaintenanceStatus
    reported_date: datetime
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    cost: Optional[float] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    photos: List[MaintenancePhotoResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class MaintenanceListResponse(BaseModel):
    requests: List[MaintenanceResponse]
    total: int
