"""
Pydantic schemas for the document library.
Uploads arrive as multipart forms, so only updates and responses are modelled here.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID
from app.models.document import DocumentType, DocumentCategory, DocumentStatus, RelatedEntityType


class DocumentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[DocumentType] = None
    category: Optional[DocumentCategory] = None
    status: Optional[DocumentStatus] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None
    expiry_date: Optional[date] = None
    related_entity_type: Optional[RelatedEntityType] = None
    related_entity_id: Optional[UUID] = None


class DocumentResponse(BaseModel):
    id: UUID
    name: str
    type: DocumentType
    category: Optional[DocumentCategory] = None
    file_path: str
    file_name: Optional[str] = None
    file_size: int
    mime_type: Optional[str] = None
    related_entity_type: Optional[RelatedEntityType] = None
    related_entity_id: Optional[UUID] = None
    uploaded_by: Optional[UUID] = None
    uploaded_by_name: Optional[str] = None
    is_public: bool
    tags: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    download_count: int
    version: int
    status: DocumentStatus
    expiry_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(BaseModel):
    documents: List[DocumentResponse]
    total: int
    limit: int
    offset: int
