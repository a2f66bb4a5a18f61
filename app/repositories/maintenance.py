"""
Maintenance repository: requests and their photos.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.base import BaseRepository
from app.models.maintenance import (
    MaintenanceRequest,
    MaintenancePhoto,
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
)
from typing import Optional, List
import uuid


class MaintenanceRepository(BaseRepository[MaintenanceRequest]):
    """Repository for maintenance requests."""

    def __init__(self, db: AsyncSession):
        super().__init__(MaintenanceRequest, db)
        self.photos = BaseRepository(MaintenancePhoto, db)

    async def list_requests(
        self,
        status: Optional[MaintenanceStatus] = None,
        priority: Optional[MaintenancePriority] = None,
        category: Optional[MaintenanceCategory] = None,
        property_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[MaintenanceRequest]:
        return await self.get_multi(
            skip=skip,
            limit=limit,
            filters={
                "status": status,
                "priority": priority,
                "category": category,
                "property_id": property_id,
            },
            order_by=MaintenanceRequest.reported_date.desc()
        )

    async def delete_request_cascade(self, request_id: uuid.UUID) -> bool:
        """
        Delete photo rows and the request. Flushes only; the caller commits.

        Returns:
            True if the request row was deleted
        """
        await self.photos.delete_where(MaintenancePhoto.request_id == request_id, commit=False)
        return await self.delete(request_id, commit=False)
