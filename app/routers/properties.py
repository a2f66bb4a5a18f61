"""
Property management API endpoints for CRUD operations, filtering and media uploads.
"""

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from typing import Optional, List
from decimal import Decimal
from uuid import UUID
from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.models.user import User
from app.models.property import PropertyType, PropertyStatus, TransactionType
from app.services.property import PropertyService
from app.services.error_handler import get_error_responses
from app.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyListFilters,
)
from app.utils.dependencies import get_current_active_user, get_property_service
from app.utils.exceptions import ValidationError


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List properties with filtering",
    description="Properties with owner contact and media, newest first",
    responses=get_error_responses(400, 401)
)
async def list_properties(
    status: Optional[PropertyStatus] = Query(None, description="Listing status"),
    type: Optional[PropertyType] = Query(None, description="Property type"),
    transaction_type: Optional[TransactionType] = Query(None, description="Sale or rental"),
    location: Optional[str] = Query(None, max_length=255, description="Case-insensitive substring of the location"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum price"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum price"),
    owner_id: Optional[UUID] = Query(None, description="Owning client"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Get paginated list of properties.

    Args:
        Query filters and pagination
        current_user: Current authenticated user
        property_service: Property service instance

    Returns:
        Page of properties with the total count
    """
    try:
        filters = PropertyListFilters(
            status=status,
            type=type,
            transaction_type=transaction_type,
            location=location,
            min_price=min_price,
            max_price=max_price,
            owner_id=owner_id
        )
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid filters",
            [{"field": ".".join(str(part) for part in err["loc"]) or "filters", "message": err["msg"]} for err in e.errors()]
        )

    properties, total = await property_service.list_properties(filters, skip=offset, limit=limit)
    return PropertyListResponse(
        properties=[PropertyResponse.model_validate(prop.to_dict()) for prop in properties],
        total=total,
        limit=limit,
        offset=offset
    )


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    responses=get_error_responses(400, 401)
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a new property listing.

    Args:
        property_data: Property creation data
        current_user: Current authenticated user
        property_service: Property service instance

    Returns:
        Created property with details

    Raises:
        DuplicateResourceError: If the reference code is taken
    """
    property_obj = await property_service.create_property(property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get property by ID",
    responses=get_error_responses(401, 404)
)
async def get_property(
    property_id: UUID,
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.get_property(property_id)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description="Partial update; media ids listed in remove_media are deleted with their files",
    responses=get_error_responses(400, 401, 404)
)
async def update_property(
    property_id: UUID,
    update_data: PropertyUpdate,
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.update_property(property_id, update_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    responses=get_error_responses(401, 404)
)
async def delete_property(
    property_id: UUID,
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Response:
    await property_service.delete_property(property_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{property_id}/media",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload photos and videos",
    description="Multipart upload: up to 10 images in `photos` and 5 videos in `videos`, 10MB each",
    responses=get_error_responses(400, 401, 404)
)
async def upload_media(
    property_id: UUID,
    photos: List[UploadFile] = File(default=[], description="Image files"),
    videos: List[UploadFile] = File(default=[], description="Video files"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.upload_media(property_id, photos, videos, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.delete(
    "/{property_id}/media/{media_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove one media item",
    responses=get_error_responses(401, 404)
)
async def delete_media(
    property_id: UUID,
    media_id: UUID,
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Response:
    await property_service.delete_media(property_id, media_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
