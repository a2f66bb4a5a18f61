"""
Visit repository: calendar listing and slot-conflict lookups.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.base import BaseRepository
from app.models.visit import (
    PropertyVisit,
    VisitStatus,
    VisitType,
    NON_BLOCKING_STATUSES,
    MAX_VISIT_DURATION,
)
from datetime import datetime, timedelta
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class VisitRepository(BaseRepository[PropertyVisit]):
    """Repository for property visits."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyVisit, db)

    async def list_visits(
        self,
        status: Optional[VisitStatus] = None,
        type: Optional[VisitType] = None,
        property_id: Optional[uuid.UUID] = None,
        client_id: Optional[uuid.UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[PropertyVisit]:
        """
        List visits, latest scheduled first.

        Args:
            status: Filter by visit status
            type: Filter by visit type
            property_id: Filter by property
            client_id: Filter by client
            start_date: Only visits scheduled at or after this instant
            end_date: Only visits scheduled at or before this instant
            skip: Offset
            limit: Page size

        Returns:
            List of visits
        """
        conditions = []
        if start_date is not None:
            conditions.append(PropertyVisit.scheduled_date >= start_date)
        if end_date is not None:
            conditions.append(PropertyVisit.scheduled_date <= end_date)

        return await self.get_multi(
            skip=skip,
            limit=limit,
            filters={
                "status": status,
                "type": type,
                "property_id": property_id,
                "client_id": client_id,
            },
            conditions=conditions,
            order_by=PropertyVisit.scheduled_date.desc()
        )

    async def find_conflicts(
        self,
        property_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_id: Optional[uuid.UUID] = None
    ) -> List[PropertyVisit]:
        """
        Find blocking visits on a property that collide with [start, end].

        The query narrows candidates to visits starting between
        ``start - MAX_VISIT_DURATION`` and ``end``; the exact inclusive
        overlap test is ``PropertyVisit.overlaps``.

        Args:
            property_id: Property being booked
            start: Slot start (UTC)
            end: Slot end (UTC)
            exclude_id: Visit being rescheduled, ignored in the check

        Returns:
            Conflicting visits ordered by start time
        """
        conditions = [
            PropertyVisit.property_id == property_id,
            PropertyVisit.status.not_in(NON_BLOCKING_STATUSES),
            PropertyVisit.scheduled_date >= start - timedelta(minutes=MAX_VISIT_DURATION),
            PropertyVisit.scheduled_date <= end,
        ]
        if exclude_id is not None:
            conditions.append(PropertyVisit.id != exclude_id)

        candidates = await self.get_multi(
            limit=None,
            conditions=conditions,
            order_by=PropertyVisit.scheduled_date.asc()
        )
        conflicts = [visit for visit in candidates if visit.overlaps(start, end)]
        if conflicts:
            logger.debug(f"Found {len(conflicts)} conflicting visits for property {property_id}")
        return conflicts
