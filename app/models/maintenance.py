"""
Maintenance request model with attached photos.
"""

from sqlalchemy import String, Text, Integer, Numeric, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from app.models.rental import AlertPriority
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from app.models.property import Property


class MaintenanceCategory(str, enum.Enum):
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    HEATING = "heating"
    APPLIANCES = "appliances"
    STRUCTURAL = "structural"
    CLEANING = "cleaning"
    GARDEN = "garden"
    SECURITY = "security"
    OTHER = "other"


class MaintenancePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class MaintenanceStatus(str, enum.Enum):
    REPORTED = "reported"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Request priorities that raise a rental alert, and the alert priority they map to
ALERTING_PRIORITIES = {
    MaintenancePriority.EMERGENCY: AlertPriority.URGENT,
    MaintenancePriority.HIGH: AlertPriority.HIGH,
}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class MaintenanceRequest(Base):
    """Repair or upkeep job reported on a property."""

    __tablename__ = "maintenance_requests"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    contract_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("rental_contracts.id", ondelete="SET NULL"),
        nullable=True
    )
    tenant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[MaintenanceCategory] = mapped_column(SQLEnum(MaintenanceCategory), nullable=False, index=True)
    priority: Mapped[MaintenancePriority] = mapped_column(
        SQLEnum(MaintenancePriority),
        nullable=False,
        default=MaintenancePriority.MEDIUM,
        index=True
    )
    status: Mapped[MaintenanceStatus] = mapped_column(
        SQLEnum(MaintenanceStatus),
        nullable=False,
        default=MaintenanceStatus.REPORTED,
        index=True
    )

    reported_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=10, scale=2), nullable=True)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="Contractor or staff name")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    property_rel: Mapped["Property"] = relationship("Property", lazy="joined")
    photos: Mapped[List["MaintenancePhoto"]] = relationship(
        "MaintenancePhoto",
        lazy="selectin",
        passive_deletes=True,
        order_by="MaintenancePhoto.created_at.asc()"
    )

    def __repr__(self) -> str:
        return f"<MaintenanceRequest(id={self.id}, priority={self.priority}, status={self.status})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "property_title": self.property_rel.title if self.property_rel else None,
            "property_location": self.property_rel.location if self.property_rel else None,
            "contract_id": str(self.contract_id) if self.contract_id else None,
            "tenant_id": str(self.tenant_id) if self.tenant_id else None,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "reported_date": self.reported_date.isoformat(),
            "scheduled_date": _iso(self.scheduled_date),
            "completed_date": _iso(self.completed_date),
            "cost": float(self.cost) if self.cost is not None else None,
            "assigned_to": self.assigned_to,
            "notes": self.notes,
            "photos": [photo.to_dict() for photo in self.photos],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class MaintenancePhoto(Base):
    """Picture attached to a maintenance request."""

    __tablename__ = "maintenance_photos"

    request_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("maintenance_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "file_path": self.file_path,
            "file_size": self.file_size,
            "width": self.width,
            "height": self.height,
        }
