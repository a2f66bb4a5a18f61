"""
Document service for the shared file library.
"""

from typing import Optional, Tuple, List
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.repositories.document import DocumentRepository
from app.models.document import (
    Document,
    DocumentType,
    DocumentCategory,
    DocumentStatus,
    RelatedEntityType,
)
from app.models.user import User
from app.schemas.document import DocumentUpdate
from app.utils.file_utils import FileValidator, FileStorage, DOCUMENTS
from app.utils.exceptions import (
    NotFoundError,
    ValidationError,
    BadRequestError,
    FileUploadError,
)
from datetime import date
from pathlib import Path
import json
import uuid
import logging

logger = logging.getLogger(__name__)


def parse_tags(raw: Optional[str]) -> List[str]:
    """
    Read tags sent in a form field, either as a JSON list or comma separated.

    Args:
        raw: Raw form value

    Returns:
        List of non-empty tags
    """
    if not raw or not raw.strip():
        return []
    raw = raw.strip()
    if raw.startswith("["):
        try:
            values = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError("Tags must be a JSON list or a comma separated string")
        if not isinstance(values, list):
            raise ValidationError("Tags must be a JSON list or a comma separated string")
        return [str(tag).strip() for tag in values if str(tag).strip()]
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


class DocumentService:
    """Service layer for documents."""

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.document_repo = DocumentRepository(db_session)
        self.storage = storage or FileStorage()

    async def _get(self, document_id: uuid.UUID, refresh: bool = False) -> Document:
        document = await self.document_repo.get_by_id(document_id, refresh=refresh)
        if not document:
            raise NotFoundError("Document", str(document_id))
        return document

    async def list_documents(
        self,
        type: Optional[DocumentType] = None,
        category: Optional[DocumentCategory] = None,
        status: Optional[DocumentStatus] = None,
        related_entity_type: Optional[RelatedEntityType] = None,
        related_entity_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Document], int]:
        filters = {
            "type": type,
            "category": category,
            "status": status,
            "related_entity_type": related_entity_type,
            "related_entity_id": related_entity_id,
        }
        documents = await self.document_repo.list_documents(**filters, skip=skip, limit=limit)
        total = await self.document_repo.count(filters=filters)
        return documents, total

    async def fetch_document(self, document_id: uuid.UUID) -> Document:
        """
        Get a document and count the access as a download.

        Raises:
            NotFoundError: If the document doesn't exist
        """
        await self._get(document_id)
        await self.document_repo.increment_download_count(document_id)
        return await self._get(document_id, refresh=True)

    async def open_for_download(self, document_id: uuid.UUID) -> Tuple[Document, Path]:
        """
        Resolve the stored file of a document and count the download.

        Returns:
            Tuple of (document, path on disk)

        Raises:
            NotFoundError: If the document or its file is missing
        """
        document = await self._get(document_id)
        path = self.storage.resolve(document.file_path)
        if not path.is_file():
            logger.warning(f"File missing on disk for document {document_id}: {document.file_path}")
            raise NotFoundError("File", str(document_id))

        await self.document_repo.increment_download_count(document_id)
        return document, path

    async def upload_document(
        self,
        upload: Optional[UploadFile],
        name: str,
        type: DocumentType,
        category: DocumentCategory,
        current_user: User,
        related_entity_type: Optional[RelatedEntityType] = None,
        related_entity_id: Optional[uuid.UUID] = None,
        description: Optional[str] = None,
        tags: Optional[str] = None,
        is_public: bool = False,
        expiry_date: Optional[date] = None
    ) -> Document:
        """
        Store an uploaded file and register it in the library.

        Raises:
            FileUploadError: If no file is sent or it is too large
            ValidationError: If the tags cannot be read
        """
        if upload is None or not upload.filename:
            raise FileUploadError("No file uploaded")
        if not name or not name.strip():
            raise ValidationError("Document name is required", [{"field": "name", "message": "Field required"}])

        tag_list = parse_tags(tags)
        content = await FileValidator.read_upload(upload, settings.document_max_size)
        path = await self.storage.save(content, DOCUMENTS, upload.filename)

        try:
            document = await self.document_repo.create({
                "name": name.strip(),
                "type": type,
                "category": category,
                "file_path": path,
                "file_name": upload.filename,
                "file_size": len(content),
                "mime_type": upload.content_type,
                "related_entity_type": related_entity_type,
                "related_entity_id": related_entity_id,
                "uploaded_by": current_user.id,
                "is_public": is_public,
                "tags": tag_list,
                "description": description,
                "expiry_date": expiry_date,
                "status": DocumentStatus.ACTIVE,
                "version": 1,
            })
        except Exception as e:
            self.storage.delete_file(path)
            logger.error(f"Failed to register document {name}: {e}", exc_info=True)
            raise BadRequestError("Failed to upload document")

        logger.info(
            f"Document uploaded by {current_user.email}: {document.name}",
            extra={"document_id": str(document.id), "size": document.file_size}
        )
        return await self._get(document.id, refresh=True)

    async def update_document(
        self,
        document_id: uuid.UUID,
        update_data: DocumentUpdate,
        current_user: User
    ) -> Document:
        document = await self._get(document_id)
        changes = update_data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No valid fields to update")
        for required in ("name", "type", "status", "is_public"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required} cannot be empty")

        try:
            await self.document_repo.update(document, changes)
        except Exception as e:
            logger.error(f"Failed to update document {document_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to update document")

        logger.info(f"Document {document_id} updated by {current_user.email}", extra={"fields": sorted(changes)})
        return await self._get(document_id, refresh=True)

    async def delete_document(self, document_id: uuid.UUID, current_user: User) -> None:
        """Delete the document row, then its file."""
        document = await self._get(document_id)
        file_path = document.file_path

        await self.document_repo.delete(document_id)
        self.storage.delete_file(file_path)
        logger.info(f"Document {document_id} deleted by {current_user.email}")
