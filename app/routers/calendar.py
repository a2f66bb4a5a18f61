"""
Visit scheduling endpoints.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional
from datetime import datetime
from uuid import UUID

from app.config import settings
from app.models.user import User
from app.models.visit import VisitStatus, VisitType
from app.services.calendar import CalendarService
from app.services.error_handler import get_error_responses
from app.schemas.visit import VisitCreate, VisitUpdate, VisitResponse, VisitListResponse
from app.utils.dependencies import get_current_active_user, get_calendar_service


router = APIRouter(prefix="/calendar", tags=["Calendar"])


@router.get(
    "",
    response_model=VisitListResponse,
    summary="List visits",
    description="Visits ordered by scheduled date, optionally limited to a date window",
    responses=get_error_responses(400, 401)
)
async def list_visits(
    status: Optional[VisitStatus] = Query(None),
    type: Optional[VisitType] = Query(None),
    property_id: Optional[UUID] = Query(None),
    client_id: Optional[UUID] = Query(None),
    start_date: Optional[datetime] = Query(None, description="Earliest scheduled date"),
    end_date: Optional[datetime] = Query(None, description="Latest scheduled date"),
    limit: int = Query(100, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    calendar_service: CalendarService = Depends(get_calendar_service)
) -> VisitListResponse:
    visits, total = await calendar_service.list_visits(
        status=status,
        type=type,
        property_id=property_id,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        skip=offset,
        limit=limit
    )
    return VisitListResponse(
        visits=[VisitResponse.model_validate(visit.to_dict()) for visit in visits],
        total=total,
        limit=limit,
        offset=offset
    )


@router.post(
    "",
    response_model=VisitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a visit",
    responses=get_error_responses(400, 401)
)
async def create_visit(
    visit_data: VisitCreate,
    current_user: User = Depends(get_current_active_user),
    calendar_service: CalendarService = Depends(get_calendar_service)
) -> VisitResponse:
    """
    Schedule a property visit.

    Args:
        visit_data: Visit creation data
        current_user: Current authenticated user
        calendar_service: Calendar service instance

    Returns:
        Created visit

    Raises:
        SchedulingConflictError: If another visit on the property overlaps the slot
    """
    visit = await calendar_service.create_visit(visit_data, current_user)
    return VisitResponse.model_validate(visit.to_dict())


@router.get(
    "/{visit_id}",
    response_model=VisitResponse,
    summary="Get a visit",
    responses=get_error_responses(401, 404)
)
async def get_visit(
    visit_id: UUID,
    current_user: User = Depends(get_current_active_user),
    calendar_service: CalendarService = Depends(get_calendar_service)
) -> VisitResponse:
    visit = await calendar_service.get_visit(visit_id)
    return VisitResponse.model_validate(visit.to_dict())


@router.put(
    "/{visit_id}",
    response_model=VisitResponse,
    summary="Update a visit",
    responses=get_error_responses(400, 401, 404)
)
async def update_visit(
    visit_id: UUID,
    update_data: VisitUpdate,
    current_user: User = Depends(get_current_active_user),
    calendar_service: CalendarService = Depends(get_calendar_service)
) -> VisitResponse:
    visit = await calendar_service.update_visit(visit_id, update_data, current_user)
    return VisitResponse.model_validate(visit.to_dict())


@router.delete(
    "/{visit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a visit",
    responses=get_error_responses(401, 404)
)
async def delete_visit(
    visit_id: UUID,
    current_user: User = Depends(get_current_active_user),
    calendar_service: CalendarService = Depends(get_calendar_service)
) -> Response:
    await calendar_service.delete_visit(visit_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
