"""
Client models: clients, their property needs and the interaction log.
"""

from sqlalchemy import String, Text, Integer, Numeric, DateTime, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from app.models.user import User


class ClientRole(str, enum.Enum):
    TENANT = "tenant"
    OWNER = "owner"
    BUYER = "buyer"


class ClientStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PROSPECT = "prospect"
    CONVERTED = "converted"
    ARCHIVED = "archived"


class ContactMethod(str, enum.Enum):
    PHONE = "phone"
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    SMS = "sms"


class NeedsUrgency(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class InteractionType(str, enum.Enum):
    CALL = "call"
    APPOINTMENT = "appointment"
    WHATSAPP = "whatsapp"
    EMAIL = "email"
    PROPERTY_VIEWING = "property_viewing"
    CONTRACT_SIGNING = "contract_signing"
    FOLLOW_UP = "follow_up"
    COMPLAINT = "complaint"
    PAYMENT = "payment"


class InteractionOutcome(str, enum.Enum):
    SUCCESSFUL = "successful"
    NO_ANSWER = "no_answer"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    FOLLOW_UP_REQUIRED = "follow_up_required"
    CONVERTED = "converted"
    CANCELLED = "cancelled"


# Only these roles carry a search profile
ROLES_WITH_NEEDS = (ClientRole.BUYER, ClientRole.TENANT)


def _as_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


class Client(Base):
    """
    A tenant, owner or buyer tracked by the agency.
    """

    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    secondary_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    role: Mapped[ClientRole] = mapped_column(SQLEnum(ClientRole), nullable=False, index=True)
    status: Mapped[ClientStatus] = mapped_column(
        SQLEnum(ClientStatus),
        nullable=False,
        default=ClientStatus.PROSPECT,
        index=True
    )

    tags: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    budget: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=12, scale=2), nullable=True)
    preferred_contact_method: Mapped[ContactMethod] = mapped_column(
        SQLEnum(ContactMethod),
        nullable=False,
        default=ContactMethod.PHONE
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    assigned_agent: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Collections are loaded explicitly by the client repository
    needs: Mapped[Optional["ClientNeeds"]] = relationship(
        "ClientNeeds",
        uselist=False,
        passive_deletes=True
    )
    interactions: Mapped[List["Interaction"]] = relationship(
        "Interaction",
        order_by="Interaction.date.desc()",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def accepts_needs(self) -> bool:
        return self.role in ROLES_WITH_NEEDS

    def to_summary(self) -> dict:
        """Contact fields shown next to related records."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
        }

    def to_dict(self, include_details: bool = False) -> dict:
        """
        Convert client to dictionary.

        Args:
            include_details: Include needs and interactions. Both must be loaded.

        Returns:
            Dictionary representation of the client
        """
        data = {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "secondary_phone": self.secondary_phone,
            "address": self.address,
            "role": self.role.value,
            "status": self.status.value,
            "tags": self.tags or [],
            "budget": _as_float(self.budget),
            "preferred_contact_method": self.preferred_contact_method.value,
            "notes": self.notes,
            "source": self.source,
            "assigned_agent": str(self.assigned_agent) if self.assigned_agent else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if include_details:
            data["needs"] = self.needs.to_dict() if self.needs else None
            data["interactions"] = [interaction.to_dict() for interaction in self.interactions]
        return data


class ClientNeeds(Base):
    """Search profile of a buyer or tenant."""

    __tablename__ = "client_needs"

    client_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    property_types: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    min_surface: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_surface: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_price: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False, default=0)
    max_price: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False, default=0)
    locations: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    features: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    urgency: Mapped[NeedsUrgency] = mapped_column(
        SQLEnum(NeedsUrgency),
        nullable=False,
        default=NeedsUrgency.MEDIUM
    )
    timeline: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "client_id": str(self.client_id),
            "property_types": self.property_types or [],
            "min_surface": self.min_surface,
            "max_surface": self.max_surface,
            "min_price": _as_float(self.min_price),
            "max_price": _as_float(self.max_price),
            "locations": self.locations or [],
            "features": self.features or [],
            "notes": self.notes,
            "urgency": self.urgency.value,
            "timeline": self.timeline,
        }


class Interaction(Base):
    """A logged contact with a client (call, viewing, complaint...)."""

    __tablename__ = "interactions"

    client_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    type: Mapped[InteractionType] = mapped_column(SQLEnum(InteractionType), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    outcome: Mapped[Optional[InteractionOutcome]] = mapped_column(SQLEnum(InteractionOutcome), nullable=True)
    follow_up_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Minutes")
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    attachments: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    user: Mapped[Optional["User"]] = relationship("User", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "client_id": str(self.client_id),
            "user_id": str(self.user_id) if self.user_id else None,
            "user_name": self.user.name if self.user else None,
            "type": self.type.value,
            "date": self.date.isoformat(),
            "notes": self.notes,
            "outcome": self.outcome.value if self.outcome else None,
            "follow_up_date": self.follow_up_date.isoformat() if self.follow_up_date else None,
            "duration": self.duration,
            "location": self.location,
            "attachments": self.attachments or [],
        }
