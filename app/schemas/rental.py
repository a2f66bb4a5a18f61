"""
Pydantic schemas for rental contracts, contract documents, payments and alerts.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from app.models.rental import (
    ContractStatus,
    RentalDocumentType,
    PaymentStatus,
    PaymentMethod,
    AlertType,
    AlertPriority,
)


class ContractCreate(BaseModel):
    """Schema for creating a rental contract."""

    property_id: UUID
    tenant_id: UUID
    owner_id: UUID
    start_date: date = Field(..., examples=["2024-01-01"])
    end_date: date = Field(..., examples=["2024-12-31"])
    monthly_rent: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, examples=[1200])
    deposit: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    status: ContractStatus = ContractStatus.PENDING
    payment_day: int = Field(1, ge=1, le=31, description="Day of the month rent is due")
    contract_terms: Optional[str] = None
    special_conditions: Optional[str] = None

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ContractUpdate(BaseModel):
    """Partial contract update. Date order is re-checked in the service."""

    property_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    owner_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_rent: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    deposit: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[ContractStatus] = None
    payment_day: Optional[int] = Field(None, ge=1, le=31)
    contract_terms: Optional[str] = None
    special_conditions: Optional[str] = None

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class RentalDocumentResponse(BaseModel):
    id: UUID
    contract_id: UUID
    type: RentalDocumentType
    name: str
    file_path: str
    file_size: int
    mime_type: Optional[str] = None
    description: Optional[str] = None
    uploaded_by: Optional[UUID] = None
    created_at: datetime


class ContractResponse(BaseModel):
    """Contract with property, tenant and owner details."""

    id: UUID
    property_id: UUID
    property_title: Optional[str] = None
    property_location: Optional[str] = None
    tenant_id: UUID
    tenant_name: Optional[str] = None
    tenant_phone: Optional[str] = None
    tenant_email: Optional[str] = None
    owner_id: UUID
    owner_name: Optional[str] = None
    owner_phone: Optional[str] = None
    start_date: date
    end_date: date
    monthly_rent: float
    deposit: float
    status: ContractStatus
    payment_day: int
    contract_terms: Optional[str] = None
    special_conditions: Optional[str] = None
    documents: List[RentalDocumentResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ContractListResponse(BaseModel):
    contracts: List[ContractResponse]
    total: int


class PaymentCreate(BaseModel):
    contract_id: UUID
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    due_date: date
    paid_date: Optional[date] = None
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    receipt_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    late_fee: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    receipt_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    late_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class ContractSummary(BaseModel):
    id: UUID
    monthly_rent: float
    status: ContractStatus
    property_title: Optional[str] = None
    property_location: Optional[str] = None
    tenant_name: Optional[str] = None
    tenant_phone: Optional[str] = None


class PaymentResponse(BaseModel):
    id: UUID
    contract_id: UUID
    amount: float
    due_date: date
    paid_date: Optional[date] = None
    status: PaymentStatus
    payment_method: Optional[PaymentMethod] = None
    receipt_number: Optional[str] = None
    notes: Optional[str] = None
    late_fee: float
    contract: Optional[ContractSummary] = None
    created_at: datetime
    updated_at: datetime


class PaymentListResponse(BaseModel):
    payments: List[PaymentResponse]
    total: int


class AlertResponse(BaseModel):
    id: UUID
    type: AlertType
    contract_id: Optional[UUID] = None
    message: str
    priority: AlertPriority
    is_read: bool
    due_date: Optional[date] = None
    created_at: datetime


class AlertListResponse(BaseModel):
    alerts: List[AlertResponse]
    total: int
