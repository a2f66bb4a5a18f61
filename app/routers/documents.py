"""
Document library endpoints: upload, browse, download and metadata updates.
"""

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import FileResponse
from typing import Optional
from datetime import date
from uuid import UUID

from app.config import settings
from app.models.user import User
from app.models.document import DocumentType, DocumentCategory, DocumentStatus, RelatedEntityType
from app.services.document import DocumentService
from app.services.error_handler import get_error_responses
from app.schemas.document import DocumentUpdate, DocumentResponse, DocumentListResponse
from app.utils.dependencies import get_current_active_user, get_document_service


router = APIRouter(prefix="/documents", tags=["Documents"])


@router.get(
    "",
    response_model=DocumentListResponse,
    summary="List documents",
    responses=get_error_responses(400, 401)
)
async def list_documents(
    type: Optional[DocumentType] = Query(None),
    category: Optional[DocumentCategory] = Query(None),
    status: Optional[DocumentStatus] = Query(None),
    related_entity_type: Optional[RelatedEntityType] = Query(None),
    related_entity_id: Optional[UUID] = Query(None),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    document_service: DocumentService = Depends(get_document_service)
) -> DocumentListResponse:
    documents, total = await document_service.list_documents(
        type=type,
        category=category,
        status=status,
        related_entity_type=related_entity_type,
        related_entity_id=related_entity_id,
        skip=offset,
        limit=limit
    )
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(document.to_dict()) for document in documents],
        total=total,
        limit=limit,
        offset=offset
    )


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document",
    description="Multipart upload. `tags` accepts a JSON array or a comma separated list.",
    responses=get_error_responses(400, 401)
)
async def upload_document(
    name: str = Form(..., max_length=255),
    type: DocumentType = Form(...),
    category: DocumentCategory = Form(...),
    related_entity_type: Optional[RelatedEntityType] = Form(None),
    related_entity_id: Optional[UUID] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    is_public: bool = Form(False),
    expiry_date: Optional[date] = Form(None),
    document: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_active_user),
    document_service: DocumentService = Depends(get_document_service)
) -> DocumentResponse:
    """
    Store a document in the library.

    Returns:
        Created document metadata

    Raises:
        FileUploadError: If no file is sent or it exceeds the size limit
        ValidationError: If the tags cannot be parsed
    """
    created = await document_service.upload_document(
        document,
        name,
        type,
        category,
        current_user,
        related_entity_type=related_entity_type,
        related_entity_id=related_entity_id,
        description=description,
        tags=tags,
        is_public=is_public,
        expiry_date=expiry_date
    )
    return DocumentResponse.model_validate(created.to_dict())


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Get a document",
    description="Returns the metadata and counts the access as a download",
    responses=get_error_responses(401, 404)
)
async def get_document(
    document_id: UUID,
    current_user: User = Depends(get_current_active_user),
    document_service: DocumentService = Depends(get_document_service)
) -> DocumentResponse:
    document = await document_service.fetch_document(document_id)
    return DocumentResponse.model_validate(document.to_dict())


@router.get(
    "/{document_id}/download",
    response_class=FileResponse,
    summary="Download the stored file",
    responses=get_error_responses(401, 404)
)
async def download_document(
    document_id: UUID,
    current_user: User = Depends(get_current_active_user),
    document_service: DocumentService = Depends(get_document_service)
) -> FileResponse:
    document, path = await document_service.open_for_download(document_id)
    return FileResponse(
        path,
        media_type=document.mime_type or "application/octet-stream",
        filename=document.file_name
    )


@router.put(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Update document metadata",
    responses=get_error_responses(400, 401, 404)
)
async def update_document(
    document_id: UUID,
    update_data: DocumentUpdate,
    current_user: User = Depends(get_current_active_user),
    document_service: DocumentService = Depends(get_document_service)
) -> DocumentResponse:
    document = await document_service.update_document(document_id, update_data, current_user)
    return DocumentResponse.model_validate(document.to_dict())


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a document",
    description="Removes the record and the stored file",
    responses=get_error_responses(401, 404)
)
async def delete_document(
    document_id: UUID,
    current_user: User = Depends(get_current_active_user),
    document_service: DocumentService = Depends(get_document_service)
) -> Response:
    await document_service.delete_document(document_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
