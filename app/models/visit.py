"""
Property visit model backing the agency calendar.
"""

from sqlalchemy import Integer, Text, Boolean, DateTime, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from datetime import datetime, timedelta, timezone
from typing import Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.property import Property
    from app.models.user import User


class VisitStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"


class VisitType(str, enum.Enum):
    FIRST_VIEWING = "first_viewing"
    SECOND_VIEWING = "second_viewing"
    FINAL_INSPECTION = "final_inspection"
    PROPERTY_EVALUATION = "property_evaluation"
    MAINTENANCE_CHECK = "maintenance_check"
    HANDOVER = "handover"


class VisitOutcome(str, enum.Enum):
    INTERESTED = "interested"
    VERY_INTERESTED = "very_interested"
    NOT_INTERESTED = "not_interested"
    NEEDS_MORE_TIME = "needs_more_time"
    WANTS_SECOND_VIEWING = "wants_second_viewing"
    READY_TO_PROCEED = "ready_to_proceed"
    PRICE_NEGOTIATION = "price_negotiation"


# Visits in these states never block a slot
NON_BLOCKING_STATUSES = (VisitStatus.CANCELLED, VisitStatus.NO_SHOW)

DEFAULT_VISIT_DURATION = 60
MIN_VISIT_DURATION = 15
MAX_VISIT_DURATION = 480


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PropertyVisit(Base):
    """A scheduled visit of a property with a client."""

    __tablename__ = "property_visits"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    agent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    scheduled_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    duration: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=DEFAULT_VISIT_DURATION,
        comment="Minutes"
    )

    status: Mapped[VisitStatus] = mapped_column(
        SQLEnum(VisitStatus),
        nullable=False,
        default=VisitStatus.SCHEDULED,
        index=True
    )
    type: Mapped[VisitType] = mapped_column(SQLEnum(VisitType), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    outcome: Mapped[Optional[VisitOutcome]] = mapped_column(SQLEnum(VisitOutcome), nullable=True)
    reminder_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    property_rel: Mapped["Property"] = relationship("Property", lazy="joined")
    client: Mapped["Client"] = relationship("Client", lazy="joined")
    agent: Mapped[Optional["User"]] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<PropertyVisit(id={self.id}, property_id={self.property_id}, scheduled_date={self.scheduled_date})>"

    @property
    def starts_at(self) -> datetime:
        return as_utc(self.scheduled_date)

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """
        Check whether this visit collides with the slot [start, end].

        Bounds are inclusive: a visit ending exactly when the slot starts
        still counts as a collision.

        Args:
            start: Slot start
            end: Slot end

        Returns:
            True if the slot and this visit overlap
        """
        start, end = as_utc(start), as_utc(end)
        existing_start = self.starts_at
        if existing_start <= end and self.ends_at >= start:
            return True
        return start <= existing_start <= end

    def to_conflict_dict(self) -> dict:
        return {
            "id": str(self.id),
            "scheduled_date": self.starts_at.isoformat(),
            "duration": self.duration,
            "status": self.status.value,
            "client_name": self.client.name if self.client else None,
        }

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "property_title": self.property_rel.title if self.property_rel else None,
            "property_location": self.property_rel.location if self.property_rel else None,
            "client_id": str(self.client_id),
            "client_name": self.client.name if self.client else None,
            "client_phone": self.client.phone if self.client else None,
            "agent_id": str(self.agent_id) if self.agent_id else None,
            "agent_name": self.agent.name if self.agent else None,
            "scheduled_date": self.starts_at.isoformat(),
            "duration": self.duration,
            "status": self.status.value,
            "type": self.type.value,
            "notes": self.notes,
            "outcome": self.outcome.value if self.outcome else None,
            "reminder_sent": self.reminder_sent,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


property_schedule_index = Index(
    "idx_property_visits_property_schedule",
    PropertyVisit.property_id,
    PropertyVisit.scheduled_date
)
