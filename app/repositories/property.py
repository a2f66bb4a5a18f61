"""
Property repository for listings, filtering and the attached media.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_
from app.repositories.base import BaseRepository
from app.models.property import Property, PropertyMedia, PropertyType, PropertyStatus, TransactionType
from typing import Optional, List, Dict, Any
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertySearchFilters:
    """Data class for property listing filters."""

    def __init__(
        self,
        status: Optional[PropertyStatus] = None,
        type: Optional[PropertyType] = None,
        transaction_type: Optional[TransactionType] = None,
        location: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        owner_id: Optional[uuid.UUID] = None,
    ):
        self.status = status
        self.type = type
        self.transaction_type = transaction_type
        self.location = location
        self.min_price = min_price
        self.max_price = max_price
        self.owner_id = owner_id


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property management with filtering.
    Owner contact and media are eager-loaded by the model relationships.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)
        self.media = BaseRepository(PropertyMedia, db)

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQL filter conditions from search filters.

        Args:
            filters: Search filters

        Returns:
            List of SQLAlchemy filter conditions
        """
        conditions = []

        if filters.status:
            conditions.append(Property.status == filters.status)

        if filters.type:
            conditions.append(Property.type == filters.type)

        if filters.transaction_type:
            conditions.append(Property.transaction_type == filters.transaction_type)

        if filters.location:
            conditions.append(Property.location.ilike(f"%{filters.location.strip()}%"))

        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)

        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.owner_id:
            conditions.append(Property.owner_id == filters.owner_id)

        return conditions

    async def list_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 50
    ) -> List[Property]:
        """
        List properties matching the filters, newest first.

        Args:
            filters: Search filters
            skip: Offset
            limit: Page size

        Returns:
            List of properties
        """
        conditions = self._build_filter_conditions(filters)
        properties = await self.get_multi(
            skip=skip,
            limit=limit,
            conditions=[and_(*conditions)] if conditions else None
        )
        logger.debug(f"Property listing returned {len(properties)} rows")
        return properties

    async def count_properties(self, filters: PropertySearchFilters) -> int:
        return await self.count(conditions=self._build_filter_conditions(filters))

    async def reference_taken(self, reference: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        conditions = [Property.property_id == reference]
        if exclude_id is not None:
            conditions.append(Property.id != exclude_id)
        return await self.count(conditions=conditions) > 0

    async def set_status(self, property_obj: Property, status: PropertyStatus, commit: bool = True) -> Property:
        logger.info(f"Property {property_obj.id} status {property_obj.status.value} -> {status.value}")
        return await self.update(property_obj, {"status": status}, commit=commit)

    async def add_media(self, media_rows: List[Dict[str, Any]], commit: bool = True) -> List[PropertyMedia]:
        return await self.media.bulk_create(media_rows, commit=commit)

    async def get_media_items(self, property_id: uuid.UUID, media_ids: Optional[List[uuid.UUID]] = None) -> List[PropertyMedia]:
        """
        Media rows of a property, optionally restricted to some ids.

        Args:
            property_id: Owning property
            media_ids: Only these media rows when given

        Returns:
            Media rows
        """
        conditions = [PropertyMedia.property_id == property_id]
        if media_ids is not None:
            conditions.append(PropertyMedia.id.in_(media_ids))
        return await self.media.get_multi(limit=None, conditions=conditions, order_by=PropertyMedia.created_at.asc())

    async def delete_media_items(self, media_ids: List[uuid.UUID], commit: bool = True) -> int:
        if not media_ids:
            return 0
        return await self.media.delete_where(PropertyMedia.id.in_(media_ids), commit=commit)

    async def delete_property_cascade(self, property_id: uuid.UUID) -> bool:
        """
        Delete the media rows and the property. Flushes only; the caller commits.

        Returns:
            True if the property row was deleted
        """
        await self.media.delete_where(PropertyMedia.property_id == property_id, commit=False)
        return await self.delete(property_id, commit=False)
