"""
Property model for sale and rental listings.
Handles property data, owner linkage and the attached photo/video media.
"""

from sqlalchemy import String, Text, Integer, Numeric, JSON, Enum as SQLEnum, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from app.models.client import Client


class PropertyType(str, enum.Enum):
    """Kind of building or plot."""
    APARTMENT = "apartment"
    DUPLEX = "duplex"
    HOUSE = "house"
    BUILDING = "building"
    VILLA = "villa"
    PREMISES = "premises"
    OFFICE = "office"
    LAND = "land"


class ConditionStatus(str, enum.Enum):
    NEW = "new"
    RENOVATED = "renovated"
    GOOD_CONDITION = "good_condition"
    TO_RENOVATE = "to_renovate"


class TransactionType(str, enum.Enum):
    SALE = "sale"
    RENTAL = "rental"
    SEASONAL_RENTAL = "seasonal_rental"


class PropertyStatus(str, enum.Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"
    RENTED = "rented"
    ARCHIVED = "archived"


class MediaType(str, enum.Enum):
    PHOTO = "photo"
    VIDEO = "video"


class Property(Base):
    """
    Property model for managing sale and rental listings.
    `property_id` is the agency's human-facing reference code.
    """

    __tablename__ = "properties"

    property_id: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="Agency reference code"
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    type: Mapped[PropertyType] = mapped_column(SQLEnum(PropertyType), nullable=False, index=True)
    condition_status: Mapped[ConditionStatus] = mapped_column(SQLEnum(ConditionStatus), nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(
        SQLEnum(TransactionType),
        nullable=False,
        index=True
    )

    surface: Mapped[int] = mapped_column(Integer, nullable=False, comment="Surface in square meters")
    rooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True
    )

    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    features: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True
    )

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    owner: Mapped[Optional["Client"]] = relationship("Client", lazy="joined")

    media: Mapped[List["PropertyMedia"]] = relationship(
        "PropertyMedia",
        lazy="selectin",
        passive_deletes=True,
        order_by="PropertyMedia.created_at.asc()"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, property_id={self.property_id}, price={self.price})>"

    @property
    def photos(self) -> List["PropertyMedia"]:
        return [item for item in self.media if item.type == MediaType.PHOTO]

    @property
    def videos(self) -> List["PropertyMedia"]:
        return [item for item in self.media if item.type == MediaType.VIDEO]

    def to_summary(self) -> dict:
        """Fields shown next to visits, contracts and maintenance requests."""
        return {
            "id": str(self.id),
            "property_id": self.property_id,
            "title": self.title,
            "location": self.location,
        }

    def to_dict(self) -> dict:
        """
        Convert property to dictionary with owner contact and media lists.

        Returns:
            Dictionary representation of property
        """
        owner = self.owner
        return {
            "id": str(self.id),
            "property_id": self.property_id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "condition_status": self.condition_status.value,
            "transaction_type": self.transaction_type.value,
            "surface": self.surface,
            "rooms": self.rooms,
            "price": float(self.price),
            "location": self.location,
            "features": self.features or [],
            "owner_id": str(self.owner_id) if self.owner_id else None,
            "owner_name": owner.name if owner else None,
            "owner_phone": owner.phone if owner else None,
            "owner_email": owner.email if owner else None,
            "status": self.status.value,
            "created_by": str(self.created_by) if self.created_by else None,
            "photos": [item.to_dict() for item in self.photos],
            "videos": [item.to_dict() for item in self.videos],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class PropertyMedia(Base):
    """Photo or video file attached to a property."""

    __tablename__ = "property_media"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type: Mapped[MediaType] = mapped_column(SQLEnum(MediaType), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="Original file name")
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "type": self.type.value,
            "file_path": self.file_path,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
        }


# Listing filters combine status and type, or status and price
status_type_index = Index(
    "idx_properties_status_type",
    Property.status,
    Property.type
)

status_price_index = Index(
    "idx_properties_status_price",
    Property.status,
    Property.price
)
