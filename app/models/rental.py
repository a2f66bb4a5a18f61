"""
Rental management models: contracts, their documents, rent payments and alerts.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, Date, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from datetime import date
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.property import Property


class ContractStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"
    TERMINATED = "terminated"
    RENEWED = "renewed"


class RentalDocumentType(str, enum.Enum):
    CONTRACT = "contract"
    RECEIPT = "receipt"
    INVENTORY = "inventory"
    INSURANCE = "insurance"
    IDENTITY = "identity"
    INCOME_PROOF = "income_proof"
    OTHER = "other"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    LATE = "late"
    OVERDUE = "overdue"
    PARTIAL = "partial"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CARD = "card"
    MOBILE_PAYMENT = "mobile_payment"


class AlertType(str, enum.Enum):
    PAYMENT_DUE = "payment_due"
    PAYMENT_OVERDUE = "payment_overdue"
    CONTRACT_EXPIRING = "contract_expiring"
    MAINTENANCE_REQUIRED = "maintenance_required"
    DOCUMENT_EXPIRING = "document_expiring"
    RENT_INCREASE = "rent_increase"


class AlertPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Statuses after which the property is back on the market
RELEASING_STATUSES = (ContractStatus.TERMINATED, ContractStatus.EXPIRED)


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class RentalContract(Base):
    """Lease binding a tenant to an owner's property."""

    __tablename__ = "rental_contracts"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    deposit: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False, default=0)
    status: Mapped[ContractStatus] = mapped_column(
        SQLEnum(ContractStatus),
        nullable=False,
        default=ContractStatus.PENDING,
        index=True
    )
    payment_day: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    contract_terms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    special_conditions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    property_rel: Mapped["Property"] = relationship("Property", lazy="joined")
    tenant: Mapped["Client"] = relationship("Client", foreign_keys=[tenant_id], lazy="joined")
    owner: Mapped["Client"] = relationship("Client", foreign_keys=[owner_id], lazy="joined")
    documents: Mapped[List["RentalDocument"]] = relationship(
        "RentalDocument",
        lazy="selectin",
        passive_deletes=True,
        order_by="RentalDocument.created_at.desc()"
    )

    def __repr__(self) -> str:
        return f"<RentalContract(id={self.id}, property_id={self.property_id}, status={self.status})>"

    @property
    def is_active(self) -> bool:
        return self.status == ContractStatus.ACTIVE

    def to_summary(self) -> dict:
        return {
            "id": str(self.id),
            "monthly_rent": _money(self.monthly_rent),
            "status": self.status.value,
            "property_title": self.property_rel.title if self.property_rel else None,
            "property_location": self.property_rel.location if self.property_rel else None,
            "tenant_name": self.tenant.name if self.tenant else None,
            "tenant_phone": self.tenant.phone if self.tenant else None,
        }

    def to_dict(self, include_documents: bool = True) -> dict:
        data = {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "property_title": self.property_rel.title if self.property_rel else None,
            "property_location": self.property_rel.location if self.property_rel else None,
            "tenant_id": str(self.tenant_id),
            "tenant_name": self.tenant.name if self.tenant else None,
            "tenant_phone": self.tenant.phone if self.tenant else None,
            "tenant_email": self.tenant.email if self.tenant else None,
            "owner_id": str(self.owner_id),
            "owner_name": self.owner.name if self.owner else None,
            "owner_phone": self.owner.phone if self.owner else None,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "monthly_rent": _money(self.monthly_rent),
            "deposit": _money(self.deposit),
            "status": self.status.value,
            "payment_day": self.payment_day,
            "contract_terms": self.contract_terms,
            "special_conditions": self.special_conditions,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if include_documents:
            data["documents"] = [document.to_dict() for document in self.documents]
        return data


class RentalDocument(Base):
    """File attached to a rental contract."""

    __tablename__ = "rental_documents"

    contract_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rental_contracts.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type: Mapped[RentalDocumentType] = mapped_column(SQLEnum(RentalDocumentType), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "contract_id": str(self.contract_id),
            "type": self.type.value,
            "name": self.name,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "description": self.description,
            "uploaded_by": str(self.uploaded_by) if self.uploaded_by else None,
            "created_at": self.created_at.isoformat(),
        }


class RentalPayment(Base):
    """A rent installment due under a contract."""

    __tablename__ = "rental_payments"

    contract_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rental_contracts.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    paid_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True
    )
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(SQLEnum(PaymentMethod), nullable=True)
    receipt_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    late_fee: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False, default=0)

    contract: Mapped["RentalContract"] = relationship("RentalContract", lazy="joined")

    def to_dict(self) -> dict:
        contract = self.contract
        return {
            "id": str(self.id),
            "contract_id": str(self.contract_id),
            "amount": _money(self.amount),
            "due_date": self.due_date.isoformat(),
            "paid_date": _iso(self.paid_date),
            "status": self.status.value,
            "payment_method": self.payment_method.value if self.payment_method else None,
            "receipt_number": self.receipt_number,
            "notes": self.notes,
            "late_fee": _money(self.late_fee),
            "contract": contract.to_summary() if contract else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class RentalAlert(Base):
    """Notification raised for a contract (payment, expiry, maintenance...)."""

    __tablename__ = "rental_alerts"

    type: Mapped[AlertType] = mapped_column(SQLEnum(AlertType), nullable=False)
    contract_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("rental_contracts.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[AlertPriority] = mapped_column(
        SQLEnum(AlertPriority),
        nullable=False,
        default=AlertPriority.MEDIUM,
        index=True
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "type": self.type.value,
            "contract_id": str(self.contract_id) if self.contract_id else None,
            "message": self.message,
            "priority": self.priority.value,
            "is_read": self.is_read,
            "due_date": _iso(self.due_date),
            "created_at": self.created_at.isoformat(),
        }
