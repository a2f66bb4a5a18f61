"""
General document library model.
Files can optionally point at a property, client, contract or maintenance request.
"""

from sqlalchemy import String, Text, Integer, Boolean, Date, JSON, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from datetime import date
from typing import Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from app.models.user import User


class DocumentType(str, enum.Enum):
    PDF = "pdf"
    IMAGE = "image"
    VIDEO = "video"
    SPREADSHEET = "spreadsheet"
    DOCUMENT = "document"
    OTHER = "other"


class DocumentCategory(str, enum.Enum):
    CONTRACT = "contract"
    RECEIPT = "receipt"
    INVENTORY = "inventory"
    INSURANCE = "insurance"
    IDENTITY = "identity"
    INCOME_PROOF = "income_proof"
    PROPERTY_PHOTOS = "property_photos"
    MAINTENANCE = "maintenance"
    LEGAL = "legal"
    MARKETING = "marketing"
    OTHER = "other"


class DocumentStatus(str, enum.Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class RelatedEntityType(str, enum.Enum):
    PROPERTY = "property"
    CLIENT = "client"
    CONTRACT = "contract"
    MAINTENANCE = "maintenance"


class Document(Base):
    """Uploaded file with classification metadata."""

    __tablename__ = "documents"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[DocumentType] = mapped_column(SQLEnum(DocumentType), nullable=False, index=True)
    category: Mapped[Optional[DocumentCategory]] = mapped_column(SQLEnum(DocumentCategory), nullable=True, index=True)

    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="Original file name")
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    related_entity_type: Mapped[Optional[RelatedEntityType]] = mapped_column(SQLEnum(RelatedEntityType), nullable=True)
    related_entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)

    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tags: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[DocumentStatus] = mapped_column(
        SQLEnum(DocumentStatus),
        nullable=False,
        default=DocumentStatus.ACTIVE,
        index=True
    )
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    uploader: Mapped[Optional["User"]] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, name={self.name}, type={self.type})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "type": self.type.value,
            "category": self.category.value if self.category else None,
            "file_path": self.file_path,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "related_entity_type": self.related_entity_type.value if self.related_entity_type else None,
            "related_entity_id": str(self.related_entity_id) if self.related_entity_id else None,
            "uploaded_by": str(self.uploaded_by) if self.uploaded_by else None,
            "uploaded_by_name": self.uploader.name if self.uploader else None,
            "is_public": self.is_public,
            "tags": self.tags or [],
            "description": self.description,
            "download_count": self.download_count,
            "version": self.version,
            "status": self.status.value,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


related_entity_index = Index(
    "idx_documents_related_entity",
    Document.related_entity_type,
    Document.related_entity_id
)
