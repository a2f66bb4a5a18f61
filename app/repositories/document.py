"""
Document repository for the shared document library.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from app.repositories.base import BaseRepository
from app.models.document import (
    Document,
    DocumentType,
    DocumentCategory,
    DocumentStatus,
    RelatedEntityType,
)
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class DocumentRepository(BaseRepository[Document]):
    """Repository for documents."""

    def __init__(self, db: AsyncSession):
        super().__init__(Document, db)

    async def list_documents(
        self,
        type: Optional[DocumentType] = None,
        category: Optional[DocumentCategory] = None,
        status: Optional[DocumentStatus] = None,
        related_entity_type: Optional[RelatedEntityType] = None,
        related_entity_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Document]:
        return await self.get_multi(
            skip=skip,
            limit=limit,
            filters={
                "type": type,
                "category": category,
                "status": status,
                "related_entity_type": related_entity_type,
                "related_entity_id": related_entity_id,
            }
        )

    async def increment_download_count(self, document_id: uuid.UUID) -> None:
        """Increment the counter in a single UPDATE statement."""
        stmt = (
            update(Document)
            .where(Document.id == document_id)
            .values(download_count=Document.download_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
        await self.db.commit()
        logger.debug(f"Incremented download count of document {document_id}")
