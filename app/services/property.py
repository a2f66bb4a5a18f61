"""
Property service for managing listings and their photo/video media.
Handles CRUD operations, reference-code uniqueness and media storage.
"""

from typing import Optional, List, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import unit_of_work
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.client import ClientRepository
from app.models.property import Property, MediaType
from app.models.user import User
from app.schemas.property import PropertyCreate, PropertyUpdate, PropertyListFilters
from app.utils.file_utils import FileValidator, FileStorage, PROPERTY_MEDIA
from app.utils.exceptions import (
    NotFoundError,
    ValidationError,
    BadRequestError,
    DuplicateResourceError,
    FileUploadError,
    ResourceLimitExceededError,
)
import uuid
import logging

logger = logging.getLogger(__name__)

MAX_PHOTOS_PER_UPLOAD = 10
MAX_VIDEOS_PER_UPLOAD = 5


class PropertyService:
    """
    Property service for managing listings.
    Media files are written before their rows and removed after the rows are gone.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.client_repo = ClientRepository(db_session)
        self.storage = storage or FileStorage()

    async def get_property(self, property_id: uuid.UUID, refresh: bool = False) -> Property:
        """
        Get a property by id.

        Raises:
            NotFoundError: If the property doesn't exist
        """
        property_obj = await self.property_repo.get_by_id(property_id, refresh=refresh)
        if not property_obj:
            raise NotFoundError("Property", str(property_id))
        return property_obj

    async def list_properties(
        self,
        filters: PropertyListFilters,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Property], int]:
        """
        List properties matching the query filters.

        Args:
            filters: Validated query filters
            skip: Offset
            limit: Page size

        Returns:
            Tuple of (properties, total matching)
        """
        search = PropertySearchFilters(**filters.model_dump())
        properties = await self.property_repo.list_properties(search, skip=skip, limit=limit)
        total = await self.property_repo.count_properties(search)
        return properties, total

    async def create_property(self, property_data: PropertyCreate, current_user: User) -> Property:
        """
        Create a new property listing.

        Args:
            property_data: Property creation data
            current_user: User creating the property

        Returns:
            Created property instance

        Raises:
            DuplicateResourceError: If the reference code is taken
            ValidationError: If the owner does not exist
        """
        try:
            if await self.property_repo.reference_taken(property_data.property_id):
                raise DuplicateResourceError("Property ID already exists", field="property_id")

            await self._validate_owner(property_data.owner_id)

            create_data = property_data.model_dump()
            create_data["created_by"] = current_user.id
            property_obj = await self.property_repo.create(create_data)

            logger.info(
                f"Property created by user {current_user.email}: {property_obj.title} (ID: {property_obj.id})",
                extra={"property_id": str(property_obj.id), "reference": property_obj.property_id}
            )
            return await self.get_property(property_obj.id, refresh=True)

        except DuplicateResourceError:
            raise
        except ValidationError:
            raise
        except Exception as e:
            logger.error(f"Failed to create property: {e}", exc_info=True)
            raise BadRequestError("Failed to create property")

    async def update_property(
        self,
        property_id: uuid.UUID,
        update_data: PropertyUpdate,
        current_user: User
    ) -> Property:
        """
        Update a property and drop the media listed in ``remove_media``.

        Raises:
            NotFoundError: If the property doesn't exist
            DuplicateResourceError: If the new reference code is taken
        """
        try:
            property_obj = await self.get_property(property_id)
            changes = update_data.model_dump(exclude_unset=True, exclude={"remove_media"})

            for required in ("property_id", "title", "type", "condition_status", "transaction_type",
                             "surface", "price", "location", "status", "rooms"):
                if required in changes and changes[required] is None:
                    raise ValidationError(f"{required} cannot be empty")

            if "property_id" in changes and await self.property_repo.reference_taken(
                changes["property_id"], exclude_id=property_id
            ):
                raise DuplicateResourceError("Property ID already exists", field="property_id")

            if changes.get("owner_id"):
                await self._validate_owner(changes["owner_id"])

            removed = []
            if update_data.remove_media:
                removed = await self.property_repo.get_media_items(property_id, update_data.remove_media)

            if not changes and not removed:
                raise ValidationError("No valid fields to update")

            async with unit_of_work(self.db):
                if changes:
                    await self.property_repo.update(property_obj, changes, commit=False)
                await self.property_repo.delete_media_items([media.id for media in removed], commit=False)

            self.storage.delete_files(media.file_path for media in removed)

            logger.info(
                f"Property {property_id} updated by {current_user.email}",
                extra={"property_id": str(property_id), "removed_media": len(removed)}
            )
            return await self.get_property(property_id, refresh=True)

        except NotFoundError:
            raise
        except DuplicateResourceError:
            raise
        except ValidationError:
            raise
        except Exception as e:
            logger.error(f"Failed to update property {property_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to update property")

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a property with its media rows, then its media files.

        Raises:
            NotFoundError: If the property doesn't exist
        """
        property_obj = await self.get_property(property_id)
        file_paths = [media.file_path for media in property_obj.media]

        try:
            async with unit_of_work(self.db):
                await self.property_repo.delete_property_cascade(property_id)
        except Exception as e:
            logger.error(f"Failed to delete property {property_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to delete property")

        self.storage.delete_files(file_paths)
        logger.info(
            f"Property deleted by user {current_user.email}: {property_id}",
            extra={"property_id": str(property_id), "files": len(file_paths)}
        )

    async def upload_media(
        self,
        property_id: uuid.UUID,
        photos: List[UploadFile],
        videos: List[UploadFile],
        current_user: User
    ) -> Property:
        """
        Store uploaded photos and videos and attach them to a property.

        Args:
            property_id: Target property
            photos: Image uploads (at most 10)
            videos: Video uploads (at most 5)
            current_user: Uploading user

        Returns:
            The property with its refreshed media lists

        Raises:
            NotFoundError: If the property doesn't exist
            ResourceLimitExceededError: If too many files are sent
            FileUploadError: If a file is rejected
        """
        await self.get_property(property_id)

        if not photos and not videos:
            raise FileUploadError("No file uploaded")
        if len(photos) > MAX_PHOTOS_PER_UPLOAD:
            raise ResourceLimitExceededError("Photo", MAX_PHOTOS_PER_UPLOAD)
        if len(videos) > MAX_VIDEOS_PER_UPLOAD:
            raise ResourceLimitExceededError("Video", MAX_VIDEOS_PER_UPLOAD)

        # Validate everything before writing anything
        pending = []
        for upload in photos:
            content = await FileValidator.read_upload(upload, settings.property_media_max_size, ["image/"])
            FileValidator.read_image_dimensions(content)
            pending.append((MediaType.PHOTO, upload, content))
        for upload in videos:
            content = await FileValidator.read_upload(upload, settings.property_media_max_size, ["video/"])
            pending.append((MediaType.VIDEO, upload, content))

        saved_paths = []
        try:
            rows = []
            for media_type, upload, content in pending:
                path = await self.storage.save(content, PROPERTY_MEDIA, upload.filename)
                saved_paths.append(path)
                rows.append({
                    "property_id": property_id,
                    "type": media_type,
                    "file_path": path,
                    "file_name": upload.filename,
                    "file_size": len(content),
                    "mime_type": upload.content_type,
                })
            await self.property_repo.add_media(rows)
        except Exception as e:
            self.storage.delete_files(saved_paths)
            if isinstance(e, FileUploadError):
                raise
            logger.error(f"Failed to store media for property {property_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to upload media")

        logger.info(
            f"{len(pending)} media files uploaded by {current_user.email} to property {property_id}",
            extra={"property_id": str(property_id)}
        )
        return await self.get_property(property_id, refresh=True)

    async def delete_media(self, property_id: uuid.UUID, media_id: uuid.UUID, current_user: User) -> None:
        """
        Remove one media item of a property.

        Raises:
            NotFoundError: If the property or the media item doesn't exist
        """
        await self.get_property(property_id)
        items = await self.property_repo.get_media_items(property_id, [media_id])
        if not items:
            raise NotFoundError("Media", str(media_id))

        await self.property_repo.delete_media_items([media_id])
        self.storage.delete_files(item.file_path for item in items)
        logger.info(f"Media {media_id} removed from property {property_id} by {current_user.email}")

    async def _validate_owner(self, owner_id: Optional[uuid.UUID]) -> None:
        if owner_id and not await self.client_repo.exists(owner_id):
            raise ValidationError("Owner not found", [{"field": "owner_id", "message": "Client does not exist"}])
