"""
Calendar service: scheduling property visits without double-booking a property.
"""

from typing import Optional, Tuple, List
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.visit import VisitRepository
from app.repositories.property import PropertyRepository
from app.repositories.client import ClientRepository
from app.repositories.user import UserRepository
from app.models.visit import PropertyVisit, VisitStatus, VisitType, NON_BLOCKING_STATUSES, as_utc
from app.models.user import User
from app.schemas.visit import VisitCreate, VisitUpdate
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    ValidationError,
    BadRequestError,
    SchedulingConflictError,
)
from datetime import datetime, timedelta
import uuid
import logging

logger = logging.getLogger(__name__)

# Changing any of these re-runs the conflict check
SLOT_FIELDS = {"scheduled_date", "duration", "property_id", "status"}


class CalendarService:
    """Service layer for property visits."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.visit_repo = VisitRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.client_repo = ClientRepository(db_session)
        self.user_repo = UserRepository(db_session)

    async def get_visit(self, visit_id: uuid.UUID, refresh: bool = False) -> PropertyVisit:
        visit = await self.visit_repo.get_by_id(visit_id, refresh=refresh)
        if not visit:
            raise NotFoundError("Visit", str(visit_id))
        return visit

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
    ) -> Tuple[List[PropertyVisit], int]:
        start_date = as_utc(start_date) if start_date else None
        end_date = as_utc(end_date) if end_date else None
        visits = await self.visit_repo.list_visits(
            status=status,
            type=type,
            property_id=property_id,
            client_id=client_id,
            start_date=start_date,
            end_date=end_date,
            skip=skip,
            limit=limit
        )
        conditions = []
        if start_date:
            conditions.append(PropertyVisit.scheduled_date >= start_date)
        if end_date:
            conditions.append(PropertyVisit.scheduled_date <= end_date)
        total = await self.visit_repo.count(
            filters={"status": status, "type": type, "property_id": property_id, "client_id": client_id},
            conditions=conditions
        )
        return visits, total

    async def check_conflicts(
        self,
        property_id: uuid.UUID,
        scheduled_date: datetime,
        duration: int,
        exclude_id: Optional[uuid.UUID] = None
    ) -> None:
        """
        Refuse a slot that collides with a blocking visit on the same property.

        Args:
            property_id: Property being booked
            scheduled_date: Slot start
            duration: Slot length in minutes
            exclude_id: Visit being moved, never in conflict with itself

        Raises:
            SchedulingConflictError: If at least one visit overlaps
        """
        start = as_utc(scheduled_date)
        end = start + timedelta(minutes=duration)
        conflicts = await self.visit_repo.find_conflicts(property_id, start, end, exclude_id=exclude_id)
        if conflicts:
            logger.warning(
                f"Scheduling conflict on property {property_id} at {start.isoformat()}",
                extra={"property_id": str(property_id), "conflicts": len(conflicts)}
            )
            raise SchedulingConflictError([visit.to_conflict_dict() for visit in conflicts])

    async def create_visit(self, visit_data: VisitCreate, current_user: User) -> PropertyVisit:
        """
        Schedule a visit.

        Raises:
            ValidationError: If the property, client or agent does not exist
            SchedulingConflictError: If the slot is taken
        """
        try:
            await self._validate_references(visit_data.property_id, visit_data.client_id, visit_data.agent_id)

            if visit_data.status not in NON_BLOCKING_STATUSES:
                await self.check_conflicts(visit_data.property_id, visit_data.scheduled_date, visit_data.duration)

            data = visit_data.model_dump()
            data["reminder_sent"] = False
            visit = await self.visit_repo.create(data)

            logger.info(
                f"Visit scheduled by {current_user.email} on property {visit.property_id}",
                extra={"visit_id": str(visit.id), "scheduled_date": visit.starts_at.isoformat()}
            )
            return await self.get_visit(visit.id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create visit: {e}", exc_info=True)
            raise BadRequestError("Failed to create visit")

    async def update_visit(self, visit_id: uuid.UUID, update_data: VisitUpdate, current_user: User) -> PropertyVisit:
        """
        Update a visit. Moving it re-checks conflicts against every other visit.

        Raises:
            NotFoundError: If the visit doesn't exist
            SchedulingConflictError: If the new slot is taken
        """
        try:
            visit = await self.get_visit(visit_id)
            changes = update_data.model_dump(exclude_unset=True)
            if not changes:
                raise ValidationError("No valid fields to update")

            for required in ("property_id", "client_id", "scheduled_date", "duration", "status", "type"):
                if required in changes and changes[required] is None:
                    raise ValidationError(f"{required} cannot be empty")

            await self._validate_references(
                changes.get("property_id"),
                changes.get("client_id"),
                changes.get("agent_id")
            )

            status = changes.get("status", visit.status)
            if SLOT_FIELDS & changes.keys() and status not in NON_BLOCKING_STATUSES:
                await self.check_conflicts(
                    changes.get("property_id", visit.property_id),
                    changes.get("scheduled_date", visit.scheduled_date),
                    changes.get("duration", visit.duration),
                    exclude_id=visit_id
                )

            await self.visit_repo.update(visit, changes)
            logger.info(
                f"Visit {visit_id} updated by {current_user.email}",
                extra={"visit_id": str(visit_id), "fields": sorted(changes)}
            )
            return await self.get_visit(visit_id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update visit {visit_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to update visit")

    async def delete_visit(self, visit_id: uuid.UUID, current_user: User) -> None:
        if not await self.visit_repo.delete(visit_id):
            raise NotFoundError("Visit", str(visit_id))
        logger.info(f"Visit {visit_id} deleted by {current_user.email}")

    async def _validate_references(
        self,
        property_id: Optional[uuid.UUID],
        client_id: Optional[uuid.UUID],
        agent_id: Optional[uuid.UUID]
    ) -> None:
        errors = []
        if property_id and not await self.property_repo.exists(property_id):
            errors.append({"field": "property_id", "message": "Property does not exist"})
        if client_id and not await self.client_repo.exists(client_id):
            errors.append({"field": "client_id", "message": "Client does not exist"})
        if agent_id and not await self.user_repo.exists(agent_id):
            errors.append({"field": "agent_id", "message": "Agent does not exist"})
        if errors:
            raise ValidationError("Invalid visit references", errors)
