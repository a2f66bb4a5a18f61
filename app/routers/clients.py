"""
Client management endpoints: clients, needs and interaction log.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional
from uuid import UUID

from app.config import settings
from app.models.user import User
from app.models.client import ClientRole, ClientStatus
from app.services.client import ClientService
from app.services.error_handler import get_error_responses
from app.schemas.client import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    ClientListResponse,
    InteractionCreate,
    InteractionResponse,
)
from app.utils.dependencies import get_current_active_user, get_client_service


router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get(
    "",
    response_model=ClientListResponse,
    summary="List clients",
    description="Clients with their needs and interactions, newest first",
    responses=get_error_responses(400, 401)
)
async def list_clients(
    role: Optional[ClientRole] = Query(None, description="Filter by client role"),
    status: Optional[ClientStatus] = Query(None, description="Filter by client status"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    client_service: ClientService = Depends(get_client_service)
) -> ClientListResponse:
    clients, total = await client_service.list_clients(role=role, status=status, skip=offset, limit=limit)
    return ClientListResponse(
        clients=[ClientResponse.model_validate(client.to_dict(include_details=True)) for client in clients],
        total=total,
        limit=limit,
        offset=offset
    )


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create client",
    description="Create a client. Needs are stored only for buyers and tenants.",
    responses=get_error_responses(400, 401)
)
async def create_client(
    client_data: ClientCreate,
    current_user: User = Depends(get_current_active_user),
    client_service: ClientService = Depends(get_client_service)
) -> ClientResponse:
    """
    Create a new client.

    Args:
        client_data: Client creation data
        current_user: Current authenticated user
        client_service: Client service instance

    Returns:
        Created client with needs and interactions

    Raises:
        DuplicateResourceError: If the email is already used
    """
    client = await client_service.create_client(client_data, current_user)
    return ClientResponse.model_validate(client.to_dict(include_details=True))


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Get client",
    responses=get_error_responses(401, 404)
)
async def get_client(
    client_id: UUID,
    current_user: User = Depends(get_current_active_user),
    client_service: ClientService = Depends(get_client_service)
) -> ClientResponse:
    client = await client_service.get_client(client_id)
    return ClientResponse.model_validate(client.to_dict(include_details=True))


@router.put(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Update client",
    responses=get_error_responses(400, 401, 404)
)
async def update_client(
    client_id: UUID,
    update_data: ClientUpdate,
    current_user: User = Depends(get_current_active_user),
    client_service: ClientService = Depends(get_client_service)
) -> ClientResponse:
    client = await client_service.update_client(client_id, update_data, current_user)
    return ClientResponse.model_validate(client.to_dict(include_details=True))


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete client",
    description="Delete a client together with its needs and interactions",
    responses=get_error_responses(401, 404)
)
async def delete_client(
    client_id: UUID,
    current_user: User = Depends(get_current_active_user),
    client_service: ClientService = Depends(get_client_service)
) -> Response:
    await client_service.delete_client(client_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{client_id}/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log interaction",
    responses=get_error_responses(400, 401, 404)
)
async def add_interaction(
    client_id: UUID,
    interaction_data: InteractionCreate,
    current_user: User = Depends(get_current_active_user),
    client_service: ClientService = Depends(get_client_service)
) -> InteractionResponse:
    interaction = await client_service.add_interaction(client_id, interaction_data, current_user)
    return InteractionResponse.model_validate(interaction.to_dict())
