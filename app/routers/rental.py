"""
Rental management endpoints: contracts and their documents, rent payments and alerts.
"""

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from typing import Optional
from uuid import UUID

from app.config import settings
from app.models.user import User
from app.models.rental import (
    ContractStatus,
    RentalDocumentType,
    PaymentStatus,
    AlertType,
    AlertPriority,
)
from app.services.rental import RentalService
from app.services.error_handler import get_error_responses
from app.schemas.rental import (
    ContractCreate,
    ContractUpdate,
    ContractResponse,
    ContractListResponse,
    RentalDocumentResponse,
    PaymentCreate,
    PaymentUpdate,
    PaymentResponse,
    PaymentListResponse,
    AlertResponse,
    AlertListResponse,
)
from app.utils.dependencies import get_current_active_user, get_rental_service


router = APIRouter(prefix="/rental", tags=["Rental"])


# Contracts

@router.get(
    "/contracts",
    response_model=ContractListResponse,
    summary="List rental contracts",
    responses=get_error_responses(400, 401)
)
async def list_contracts(
    status: Optional[ContractStatus] = Query(None),
    property_id: Optional[UUID] = Query(None),
    tenant_id: Optional[UUID] = Query(None),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> ContractListResponse:
    contracts, total = await rental_service.list_contracts(
        status=status, property_id=property_id, tenant_id=tenant_id, skip=offset, limit=limit
    )
    return ContractListResponse(
        contracts=[ContractResponse.model_validate(contract.to_dict()) for contract in contracts],
        total=total
    )


@router.post(
    "/contracts",
    response_model=ContractResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a rental contract",
    description="An active contract marks its property as rented",
    responses=get_error_responses(400, 401)
)
async def create_contract(
    contract_data: ContractCreate,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> ContractResponse:
    contract = await rental_service.create_contract(contract_data, current_user)
    return ContractResponse.model_validate(contract.to_dict())


@router.get(
    "/contracts/{contract_id}",
    response_model=ContractResponse,
    summary="Get a contract",
    responses=get_error_responses(401, 404)
)
async def get_contract(
    contract_id: UUID,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> ContractResponse:
    contract = await rental_service.get_contract(contract_id)
    return ContractResponse.model_validate(contract.to_dict())


@router.put(
    "/contracts/{contract_id}",
    response_model=ContractResponse,
    summary="Update a contract",
    description="Activating a contract marks the property rented; terminating or expiring it frees the property",
    responses=get_error_responses(400, 401, 404)
)
async def update_contract(
    contract_id: UUID,
    update_data: ContractUpdate,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> ContractResponse:
    contract = await rental_service.update_contract(contract_id, update_data, current_user)
    return ContractResponse.model_validate(contract.to_dict())


@router.delete(
    "/contracts/{contract_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a contract",
    responses=get_error_responses(401, 404)
)
async def delete_contract(
    contract_id: UUID,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> Response:
    await rental_service.delete_contract(contract_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/contracts/{contract_id}/documents",
    response_model=RentalDocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Attach a document to a contract",
    responses=get_error_responses(400, 401, 404)
)
async def upload_contract_document(
    contract_id: UUID,
    type: RentalDocumentType = Form(...),
    name: str = Form(..., min_length=1, max_length=255),
    description: Optional[str] = Form(None),
    document: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> RentalDocumentResponse:
    """
    Upload a contract document.

    Args:
        contract_id: Contract UUID
        type: Kind of document (lease, inventory, receipt...)
        name: Display name
        description: Optional description
        document: The file itself

    Returns:
        Stored document metadata

    Raises:
        NotFoundError: If the contract doesn't exist
        FileUploadError: If no file is sent or it exceeds the size limit
    """
    rental_document = await rental_service.upload_contract_document(
        contract_id, document, type, name, description, current_user
    )
    return RentalDocumentResponse.model_validate(rental_document.to_dict())


# Payments

@router.get(
    "/payments",
    response_model=PaymentListResponse,
    summary="List rent payments",
    responses=get_error_responses(400, 401)
)
async def list_payments(
    status: Optional[PaymentStatus] = Query(None),
    contract_id: Optional[UUID] = Query(None),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> PaymentListResponse:
    payments, total = await rental_service.list_payments(
        status=status, contract_id=contract_id, skip=offset, limit=limit
    )
    return PaymentListResponse(
        payments=[PaymentResponse.model_validate(payment.to_dict()) for payment in payments],
        total=total
    )


@router.post(
    "/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a payment",
    responses=get_error_responses(400, 401)
)
async def create_payment(
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> PaymentResponse:
    payment = await rental_service.create_payment(payment_data, current_user)
    return PaymentResponse.model_validate(payment.to_dict())


@router.get(
    "/payments/{payment_id}",
    response_model=PaymentResponse,
    summary="Get a payment",
    responses=get_error_responses(401, 404)
)
async def get_payment(
    payment_id: UUID,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> PaymentResponse:
    payment = await rental_service.get_payment(payment_id)
    return PaymentResponse.model_validate(payment.to_dict())


@router.put(
    "/payments/{payment_id}",
    response_model=PaymentResponse,
    summary="Update a payment",
    responses=get_error_responses(400, 401, 404)
)
async def update_payment(
    payment_id: UUID,
    update_data: PaymentUpdate,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> PaymentResponse:
    payment = await rental_service.update_payment(payment_id, update_data, current_user)
    return PaymentResponse.model_validate(payment.to_dict())


@router.delete(
    "/payments/{payment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a payment",
    responses=get_error_responses(401, 404)
)
async def delete_payment(
    payment_id: UUID,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> Response:
    await rental_service.delete_payment(payment_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Alerts

@router.get(
    "/alerts",
    response_model=AlertListResponse,
    summary="List alerts",
    responses=get_error_responses(400, 401)
)
async def list_alerts(
    priority: Optional[AlertPriority] = Query(None),
    is_read: Optional[bool] = Query(None),
    type: Optional[AlertType] = Query(None),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> AlertListResponse:
    alerts, total = await rental_service.list_alerts(
        priority=priority, is_read=is_read, type=type, skip=offset, limit=limit
    )
    return AlertListResponse(
        alerts=[AlertResponse.model_validate(alert.to_dict()) for alert in alerts],
        total=total
    )


@router.put(
    "/alerts/{alert_id}/read",
    response_model=AlertResponse,
    summary="Mark an alert as read",
    responses=get_error_responses(401, 404)
)
async def mark_alert_read(
    alert_id: UUID,
    current_user: User = Depends(get_current_active_user),
    rental_service: RentalService = Depends(get_rental_service)
) -> AlertResponse:
    alert = await rental_service.mark_alert_read(alert_id)
    return AlertResponse.model_validate(alert.to_dict())
