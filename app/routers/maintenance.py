"""
Maintenance request endpoints.
"""

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from typing import Optional, List
from uuid import UUID

from app.config import settings
from app.models.user import User
from app.models.maintenance import MaintenanceStatus, MaintenancePriority, MaintenanceCategory
from app.services.maintenance import MaintenanceService
from app.services.error_handler import get_error_responses
from app.schemas.maintenance import (
    MaintenanceCreate,
    MaintenanceUpdate,
    MaintenanceResponse,
    MaintenanceListResponse,
)
from app.utils.dependencies import get_current_active_user, get_maintenance_service


router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.get(
    "",
    response_model=MaintenanceListResponse,
    summary="List maintenance requests",
    responses=get_error_responses(400, 401)
)
async def list_requests(
    status: Optional[MaintenanceStatus] = Query(None),
    priority: Optional[MaintenancePriority] = Query(None),
    category: Optional[MaintenanceCategory] = Query(None),
    property_id: Optional[UUID] = Query(None),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> MaintenanceListResponse:
    requests, total = await maintenance_service.list_requests(
        status=status,
        priority=priority,
        category=category,
        property_id=property_id,
        skip=offset,
        limit=limit
    )
    return MaintenanceListResponse(
        requests=[MaintenanceResponse.model_validate(request.to_dict()) for request in requests],
        total=total
    )


@router.post(
    "",
    response_model=MaintenanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a maintenance issue",
    description="High and urgent requests also raise a rental alert",
    responses=get_error_responses(400, 401)
)
async def create_request(
    request_data: MaintenanceCreate,
    current_user: User = Depends(get_current_active_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> MaintenanceResponse:
    request = await maintenance_service.create_request(request_data, current_user)
    return MaintenanceResponse.model_validate(request.to_dict())


@router.get(
    "/{request_id}",
    response_model=MaintenanceResponse,
    summary="Get a maintenance request",
    responses=get_error_responses(401, 404)
)
async def get_request(
    request_id: UUID,
    current_user: User = Depends(get_current_active_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> MaintenanceResponse:
    request = await maintenance_service.get_request(request_id)
    return MaintenanceResponse.model_validate(request.to_dict())


@router.put(
    "/{request_id}",
    response_model=MaintenanceResponse,
    summary="Update a maintenance request",
    responses=get_error_responses(400, 401, 404)
)
async def update_request(
    request_id: UUID,
    update_data: MaintenanceUpdate,
    current_user: User = Depends(get_current_active_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> MaintenanceResponse:
    request = await maintenance_service.update_request(request_id, update_data, current_user)
    return MaintenanceResponse.model_validate(request.to_dict())


@router.delete(
    "/{request_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a maintenance request",
    responses=get_error_responses(401, 404)
)
async def delete_request(
    request_id: UUID,
    current_user: User = Depends(get_current_active_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> Response:
    await maintenance_service.delete_request(request_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{request_id}/photos",
    response_model=MaintenanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Attach photos",
    description="Up to 10 images per call, 5MB each",
    responses=get_error_responses(400, 401, 404)
)
async def upload_photos(
    request_id: UUID,
    photos: List[UploadFile] = File(default=[], description="Image files"),
    current_user: User = Depends(get_current_active_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> MaintenanceResponse:
    request = await maintenance_service.upload_photos(request_id, photos, current_user)
    return MaintenanceResponse.model_validate(request.to_dict())
