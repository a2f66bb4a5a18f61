"""
Rental repositories: contracts (with documents), payments and alerts.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.base import BaseRepository
from app.models.rental import (
    RentalContract,
    RentalDocument,
    RentalPayment,
    RentalAlert,
    ContractStatus,
    PaymentStatus,
    AlertPriority,
    AlertType,
)
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class ContractRepository(BaseRepository[RentalContract]):
    """Repository for rental contracts and their documents."""

    def __init__(self, db: AsyncSession):
        super().__init__(RentalContract, db)
        self.documents = BaseRepository(RentalDocument, db)

    async def list_contracts(
        self,
        status: Optional[ContractStatus] = None,
        property_id: Optional[uuid.UUID] = None,
        tenant_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[RentalContract]:
        return await self.get_multi(
            skip=skip,
            limit=limit,
            filters={"status": status, "property_id": property_id, "tenant_id": tenant_id}
        )

    async def add_document(self, document_data: Dict[str, Any]) -> RentalDocument:
        document = await self.documents.create(document_data)
        logger.info(f"Attached {document.type.value} document {document.id} to contract {document.contract_id}")
        return document

    async def delete_contract_cascade(self, contract_id: uuid.UUID) -> bool:
        """
        Delete documents, payments and the contract. Flushes only; the caller commits.

        Returns:
            True if the contract row was deleted
        """
        await self.documents.delete_where(RentalDocument.contract_id == contract_id, commit=False)
        await BaseRepository(RentalPayment, self.db).delete_where(
            RentalPayment.contract_id == contract_id,
            commit=False
        )
        return await self.delete(contract_id, commit=False)


class PaymentRepository(BaseRepository[RentalPayment]):
    """Repository for rent payments."""

    def __init__(self, db: AsyncSession):
        super().__init__(RentalPayment, db)

    async def list_payments(
        self,
        status: Optional[PaymentStatus] = None,
        contract_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[RentalPayment]:
        return await self.get_multi(
            skip=skip,
            limit=limit,
            filters={"status": status, "contract_id": contract_id},
            order_by=RentalPayment.due_date.desc()
        )


class AlertRepository(BaseRepository[RentalAlert]):
    """Repository for rental alerts."""

    def __init__(self, db: AsyncSession):
        super().__init__(RentalAlert, db)

    async def list_alerts(
        self,
        priority: Optional[AlertPriority] = None,
        is_read: Optional[bool] = None,
        type: Optional[AlertType] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[RentalAlert]:
        return await self.get_multi(
            skip=skip,
            limit=limit,
            filters={"priority": priority, "is_read": is_read, "type": type}
        )
