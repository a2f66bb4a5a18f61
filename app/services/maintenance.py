"""
Maintenance service: repair requests, their photos and the alerts urgent ones raise.
"""

from typing import Optional, Tuple, List
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import unit_of_work
from app.repositories.maintenance import MaintenanceRepository
from app.repositories.rental import AlertRepository, ContractRepository
from app.repositories.property import PropertyRepository
from app.repositories.client import ClientRepository
from app.models.maintenance import (
    MaintenanceRequest,
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
    ALERTING_PRIORITIES,
)
from app.models.rental import AlertType
from app.models.user import User
from app.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate
from app.utils.file_utils import FileValidator, FileStorage, MAINTENANCE_PHOTOS
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    ValidationError,
    BadRequestError,
    FileUploadError,
    ResourceLimitExceededError,
)
from datetime import datetime, timezone
import uuid
import logging

logger = logging.getLogger(__name__)

MAX_PHOTOS_PER_UPLOAD = 10


class MaintenanceService:
    """Service layer for maintenance requests."""

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.request_repo = MaintenanceRepository(db_session)
        self.alert_repo = AlertRepository(db_session)
        self.contract_repo = ContractRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.client_repo = ClientRepository(db_session)
        self.storage = storage or FileStorage()

    async def get_request(self, request_id: uuid.UUID, refresh: bool = False) -> MaintenanceRequest:
        request = await self.request_repo.get_by_id(request_id, refresh=refresh)
        if not request:
            raise NotFoundError("Maintenance request", str(request_id))
        return request

    async def list_requests(
        self,
        status: Optional[MaintenanceStatus] = None,
        priority: Optional[MaintenancePriority] = None,
        category: Optional[MaintenanceCategory] = None,
        property_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[MaintenanceRequest], int]:
        filters = {"status": status, "priority": priority, "category": category, "property_id": property_id}
        requests = await self.request_repo.list_requests(**filters, skip=skip, limit=limit)
        total = await self.request_repo.count(filters=filters)
        return requests, total

    async def create_request(self, request_data: MaintenanceCreate, current_user: User) -> MaintenanceRequest:
        """
        Report a maintenance request.

        High and emergency requests raise a ``maintenance_required`` alert in
        the same transaction.

        Args:
            request_data: Request creation data
            current_user: Reporting user

        Returns:
            Created request

        Raises:
            ValidationError: If the property, contract or tenant does not exist
        """
        try:
            await self._validate_references(
                request_data.property_id, request_data.contract_id, request_data.tenant_id
            )

            data = request_data.model_dump()
            data["reported_date"] = data["reported_date"] or datetime.now(timezone.utc)
            if data["status"] == MaintenanceStatus.COMPLETED and not data["completed_date"]:
                data["completed_date"] = datetime.now(timezone.utc)

            async with unit_of_work(self.db):
                request = await self.request_repo.create(data, commit=False)
                alert_priority = ALERTING_PRIORITIES.get(request.priority)
                if alert_priority is not None:
                    await self.alert_repo.create({
                        "type": AlertType.MAINTENANCE_REQUIRED,
                        "contract_id": request.contract_id,
                        "message": f"Maintenance request: {request.title} ({request.priority.value} priority)",
                        "priority": alert_priority,
                    }, commit=False)

            logger.info(
                f"Maintenance request reported by {current_user.email}: {request.title}",
                extra={
                    "request_id": str(request.id),
                    "priority": request.priority.value,
                    "alert_raised": alert_priority is not None,
                }
            )
            return await self.get_request(request.id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create maintenance request: {e}", exc_info=True)
            raise BadRequestError("Failed to create maintenance request")

    async def update_request(
        self,
        request_id: uuid.UUID,
        update_data: MaintenanceUpdate,
        current_user: User
    ) -> MaintenanceRequest:
        """
        Update a request; completing it without a date stamps ``completed_date`` with now.

        Raises:
            NotFoundError: If the request doesn't exist
            ValidationError: If a new property, contract or tenant does not exist
        """
        try:
            request = await self.get_request(request_id)
            changes = update_data.model_dump(exclude_unset=True)
            if not changes:
                raise ValidationError("No valid fields to update")

            for required in ("property_id", "title", "description", "category", "priority", "status", "reported_date"):
                if required in changes and changes[required] is None:
                    raise ValidationError(f"{required} cannot be empty")

            await self._validate_references(
                changes.get("property_id"), changes.get("contract_id"), changes.get("tenant_id")
            )

            if (
                changes.get("status") == MaintenanceStatus.COMPLETED
                and not changes.get("completed_date")
                and not request.completed_date
            ):
                changes["completed_date"] = datetime.now(timezone.utc)

            await self.request_repo.update(request, changes)
            logger.info(
                f"Maintenance request {request_id} updated by {current_user.email}",
                extra={"request_id": str(request_id), "fields": sorted(changes)}
            )
            return await self.get_request(request_id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update maintenance request {request_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to update maintenance request")

    async def delete_request(self, request_id: uuid.UUID, current_user: User) -> None:
        """Delete a request and its photo rows, then the photo files."""
        request = await self.get_request(request_id)
        file_paths = [photo.file_path for photo in request.photos]

        try:
            async with unit_of_work(self.db):
                await self.request_repo.delete_request_cascade(request_id)
        except Exception as e:
            logger.error(f"Failed to delete maintenance request {request_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to delete maintenance request")

        self.storage.delete_files(file_paths)
        logger.info(f"Maintenance request {request_id} deleted by {current_user.email}")

    async def upload_photos(
        self,
        request_id: uuid.UUID,
        photos: List[UploadFile],
        current_user: User
    ) -> MaintenanceRequest:
        """
        Attach photos to a request.

        Raises:
            NotFoundError: If the request doesn't exist
            FileUploadError: If no file is sent or a file is not an image
        """
        await self.get_request(request_id)

        if not photos:
            raise FileUploadError("No file uploaded")
        if len(photos) > MAX_PHOTOS_PER_UPLOAD:
            raise ResourceLimitExceededError("Photo", MAX_PHOTOS_PER_UPLOAD)

        pending = []
        for upload in photos:
            content = await FileValidator.read_upload(upload, settings.maintenance_photo_max_size, ["image/"])
            width, height = FileValidator.read_image_dimensions(content)
            pending.append((upload, content, width, height))

        saved_paths = []
        try:
            rows = []
            for upload, content, width, height in pending:
                path = await self.storage.save(content, MAINTENANCE_PHOTOS, upload.filename)
                saved_paths.append(path)
                rows.append({
                    "request_id": request_id,
                    "file_path": path,
                    "file_size": len(content),
                    "width": width,
                    "height": height,
                })
            await self.request_repo.photos.bulk_create(rows)
        except FileUploadError:
            self.storage.delete_files(saved_paths)
            raise
        except Exception as e:
            self.storage.delete_files(saved_paths)
            logger.error(f"Failed to store photos for request {request_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to upload photos")

        logger.info(f"{len(pending)} photos attached to maintenance request {request_id} by {current_user.email}")
        return await self.get_request(request_id, refresh=True)

    async def _validate_references(
        self,
        property_id: Optional[uuid.UUID],
        contract_id: Optional[uuid.UUID],
        tenant_id: Optional[uuid.UUID]
    ) -> None:
        if property_id and not await self.property_repo.exists(property_id):
            raise ValidationError(
                "Property not found",
                [{"field": "property_id", "message": "Property does not exist"}]
            )
        if contract_id and not await self.contract_repo.exists(contract_id):
            raise ValidationError(
                "Contract not found",
                [{"field": "contract_id", "message": "Contract does not exist"}]
            )
        if tenant_id and not await self.client_repo.exists(tenant_id):
            raise ValidationError(
                "Tenant not found",
                [{"field": "tenant_id", "message": "Tenant does not exist"}]
            )
