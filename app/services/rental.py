"""
Rental service: contracts and their documents, rent payments and alerts.
Contract writes and the resulting property status change share one transaction.
"""

from typing import Optional, Tuple, List
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import unit_of_work
from app.repositories.rental import ContractRepository, PaymentRepository, AlertRepository
from app.repositories.property import PropertyRepository
from app.repositories.client import ClientRepository
from app.models.rental import (
    RentalContract,
    RentalDocument,
    RentalPayment,
    RentalAlert,
    ContractStatus,
    RentalDocumentType,
    PaymentStatus,
    AlertPriority,
    AlertType,
    RELEASING_STATUSES,
)
from app.models.property import Property, PropertyStatus
from app.models.user import User
from app.schemas.rental import ContractCreate, ContractUpdate, PaymentCreate, PaymentUpdate
from app.utils.file_utils import FileValidator, FileStorage, RENTAL_DOCUMENTS
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    ValidationError,
    BadRequestError,
    FileUploadError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


class RentalService:
    """
    Service layer for rental management.

    Property status follows the contract: an active contract marks the
    property rented, a terminated or expired one puts it back on the market.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.contract_repo = ContractRepository(db_session)
        self.payment_repo = PaymentRepository(db_session)
        self.alert_repo = AlertRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.client_repo = ClientRepository(db_session)
        self.storage = storage or FileStorage()

    # Contracts

    async def get_contract(self, contract_id: uuid.UUID, refresh: bool = False) -> RentalContract:
        contract = await self.contract_repo.get_by_id(contract_id, refresh=refresh)
        if not contract:
            raise NotFoundError("Contract", str(contract_id))
        return contract

    async def list_contracts(
        self,
        status: Optional[ContractStatus] = None,
        property_id: Optional[uuid.UUID] = None,
        tenant_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[RentalContract], int]:
        contracts = await self.contract_repo.list_contracts(
            status=status, property_id=property_id, tenant_id=tenant_id, skip=skip, limit=limit
        )
        total = await self.contract_repo.count(
            filters={"status": status, "property_id": property_id, "tenant_id": tenant_id}
        )
        return contracts, total

    async def create_contract(self, contract_data: ContractCreate, current_user: User) -> RentalContract:
        """
        Create a contract; an active one marks the property rented.

        Args:
            contract_data: Contract creation data
            current_user: User creating the contract

        Returns:
            Created contract

        Raises:
            ValidationError: If the property, tenant or owner does not exist
        """
        try:
            property_obj = await self._load_references(
                contract_data.property_id, contract_data.tenant_id, contract_data.owner_id
            )

            data = contract_data.model_dump()
            data["created_by"] = current_user.id

            async with unit_of_work(self.db):
                contract = await self.contract_repo.create(data, commit=False)
                if contract.status == ContractStatus.ACTIVE:
                    await self.property_repo.set_status(property_obj, PropertyStatus.RENTED, commit=False)

            logger.info(
                f"Contract created by {current_user.email} for property {contract.property_id}",
                extra={"contract_id": str(contract.id), "status": contract.status.value}
            )
            return await self.get_contract(contract.id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create contract: {e}", exc_info=True)
            raise BadRequestError("Failed to create contract")

    async def update_contract(
        self,
        contract_id: uuid.UUID,
        update_data: ContractUpdate,
        current_user: User
    ) -> RentalContract:
        """
        Update a contract and move the property status with it.

        Raises:
            NotFoundError: If the contract doesn't exist
            ValidationError: If the dates end up out of order or a new
                property, tenant or owner does not exist
        """
        try:
            contract = await self.get_contract(contract_id)
            changes = update_data.model_dump(exclude_unset=True)
            if not changes:
                raise ValidationError("No valid fields to update")

            for required in (
                "property_id", "tenant_id", "owner_id",
                "start_date", "end_date", "monthly_rent", "deposit", "status", "payment_day"
            ):
                if required in changes and changes[required] is None:
                    raise ValidationError(f"{required} cannot be empty")

            start = changes.get("start_date", contract.start_date)
            end = changes.get("end_date", contract.end_date)
            if end <= start:
                raise ValidationError("end_date must be after start_date")

            new_property = await self._load_references(
                changes.get("property_id"), changes.get("tenant_id"), changes.get("owner_id")
            )
            target_property = new_property or contract.property_rel

            new_status = changes.get("status")
            status_changed = new_status is not None and new_status != contract.status
            async with unit_of_work(self.db):
                await self.contract_repo.update(contract, changes, commit=False)
                if status_changed:
                    await self._sync_property_status(target_property, new_status)

            logger.info(
                f"Contract {contract_id} updated by {current_user.email}",
                extra={"contract_id": str(contract_id), "fields": sorted(changes)}
            )
            return await self.get_contract(contract_id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update contract {contract_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to update contract")

    async def delete_contract(self, contract_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a contract with its documents and payments. Deleting an active
        contract makes the property available again.

        Raises:
            NotFoundError: If the contract doesn't exist
        """
        contract = await self.get_contract(contract_id)
        file_paths = [document.file_path for document in contract.documents]

        try:
            async with unit_of_work(self.db):
                if contract.is_active and contract.property_rel:
                    await self.property_repo.set_status(
                        contract.property_rel, PropertyStatus.AVAILABLE, commit=False
                    )
                await self.contract_repo.delete_contract_cascade(contract_id)
        except Exception as e:
            logger.error(f"Failed to delete contract {contract_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to delete contract")

        self.storage.delete_files(file_paths)
        logger.info(f"Contract {contract_id} deleted by {current_user.email}", extra={"contract_id": str(contract_id)})

    async def upload_contract_document(
        self,
        contract_id: uuid.UUID,
        upload: Optional[UploadFile],
        document_type: RentalDocumentType,
        name: str,
        description: Optional[str],
        current_user: User
    ) -> RentalDocument:
        """
        Attach a file to a contract.

        Raises:
            NotFoundError: If the contract doesn't exist
            FileUploadError: If no file is sent or it is rejected
        """
        await self.get_contract(contract_id)
        if upload is None or not upload.filename:
            raise FileUploadError("No file uploaded")

        content = await FileValidator.read_upload(upload, settings.rental_document_max_size)
        path = await self.storage.save(content, RENTAL_DOCUMENTS, upload.filename)

        try:
            return await self.contract_repo.add_document({
                "contract_id": contract_id,
                "type": document_type,
                "name": name,
                "file_path": path,
                "file_size": len(content),
                "mime_type": upload.content_type,
                "description": description,
                "uploaded_by": current_user.id,
            })
        except Exception as e:
            self.storage.delete_file(path)
            logger.error(f"Failed to record document for contract {contract_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to upload document")

    # Payments

    async def get_payment(self, payment_id: uuid.UUID, refresh: bool = False) -> RentalPayment:
        payment = await self.payment_repo.get_by_id(payment_id, refresh=refresh)
        if not payment:
            raise NotFoundError("Payment", str(payment_id))
        return payment

    async def list_payments(
        self,
        status: Optional[PaymentStatus] = None,
        contract_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[RentalPayment], int]:
        payments = await self.payment_repo.list_payments(status=status, contract_id=contract_id, skip=skip, limit=limit)
        total = await self.payment_repo.count(filters={"status": status, "contract_id": contract_id})
        return payments, total

    async def create_payment(self, payment_data: PaymentCreate, current_user: User) -> RentalPayment:
        """
        Record a rent payment.

        Raises:
            ValidationError: If the contract does not exist
        """
        if not await self.contract_repo.exists(payment_data.contract_id):
            raise ValidationError(
                "Contract not found",
                [{"field": "contract_id", "message": "Contract does not exist"}]
            )

        try:
            payment = await self.payment_repo.create(payment_data.model_dump())
        except Exception as e:
            logger.error(f"Failed to create payment: {e}", exc_info=True)
            raise BadRequestError("Failed to create payment")

        logger.info(
            f"Payment recorded by {current_user.email} on contract {payment.contract_id}",
            extra={"payment_id": str(payment.id), "status": payment.status.value}
        )
        return await self.get_payment(payment.id, refresh=True)

    async def update_payment(
        self,
        payment_id: uuid.UUID,
        update_data: PaymentUpdate,
        current_user: User
    ) -> RentalPayment:
        payment = await self.get_payment(payment_id)
        changes = update_data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No valid fields to update")
        for required in ("amount", "due_date", "status", "late_fee"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required} cannot be empty")

        try:
            await self.payment_repo.update(payment, changes)
        except Exception as e:
            logger.error(f"Failed to update payment {payment_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to update payment")

        logger.info(f"Payment {payment_id} updated by {current_user.email}", extra={"fields": sorted(changes)})
        return await self.get_payment(payment_id, refresh=True)

    async def delete_payment(self, payment_id: uuid.UUID, current_user: User) -> None:
        if not await self.payment_repo.delete(payment_id):
            raise NotFoundError("Payment", str(payment_id))
        logger.info(f"Payment {payment_id} deleted by {current_user.email}")

    # Alerts

    async def list_alerts(
        self,
        priority: Optional[AlertPriority] = None,
        is_read: Optional[bool] = None,
        type: Optional[AlertType] = None,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[RentalAlert], int]:
        alerts = await self.alert_repo.list_alerts(priority=priority, is_read=is_read, type=type, skip=skip, limit=limit)
        total = await self.alert_repo.count(filters={"priority": priority, "is_read": is_read, "type": type})
        return alerts, total

    async def mark_alert_read(self, alert_id: uuid.UUID) -> RentalAlert:
        alert = await self.alert_repo.get_by_id(alert_id)
        if not alert:
            raise NotFoundError("Alert", str(alert_id))
        await self.alert_repo.update(alert, {"is_read": True})
        return await self.alert_repo.get_by_id(alert_id, refresh=True)

    async def _load_references(
        self,
        property_id: Optional[uuid.UUID] = None,
        tenant_id: Optional[uuid.UUID] = None,
        owner_id: Optional[uuid.UUID] = None
    ) -> Optional[Property]:
        errors = []
        property_obj = None
        if property_id is not None:
            property_obj = await self.property_repo.get_by_id(property_id)
            if not property_obj:
                errors.append({"field": "property_id", "message": "Property does not exist"})
        if tenant_id is not None and not await self.client_repo.exists(tenant_id):
            errors.append({"field": "tenant_id", "message": "Tenant does not exist"})
        if owner_id is not None and not await self.client_repo.exists(owner_id):
            errors.append({"field": "owner_id", "message": "Owner does not exist"})
        if errors:
            raise ValidationError("Invalid contract references", errors)
        return property_obj

    async def _sync_property_status(self, property_obj: Optional[Property], contract_status: ContractStatus) -> None:
        if property_obj is None:
            return
        if contract_status == ContractStatus.ACTIVE:
            await self.property_repo.set_status(property_obj, PropertyStatus.RENTED, commit=False)
        elif contract_status in RELEASING_STATUSES:
            await self.property_repo.set_status(property_obj, PropertyStatus.AVAILABLE, commit=False)
