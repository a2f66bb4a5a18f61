"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    LoginRequest,
    RefreshTokenRequest,
    AccessTokenResponse,
    LoginResponse,
    MessageResponse
)

# User schemas
from .user import (
    UserBase,
    UserCreate,
    UserUpdate,
    UserStatusUpdate,
    PasswordChangeRequest,
    PasswordResetResponse,
    UserResponse,
    UserListResponse
)

# Client schemas
from .client import (
    ClientNeedsInput,
    ClientNeedsResponse,
    ClientCreate,
    ClientUpdate,
    InteractionCreate,
    InteractionResponse,
    ClientResponse,
    ClientListResponse
)

# Property schemas
from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyUpdate,
    PropertyMediaResponse,
    PropertyResponse,
    PropertyListResponse,
    PropertyListFilters
)

# Visit schemas
from .visit import (
    VisitCreate,
    VisitUpdate,
    VisitResponse,
    VisitListResponse
)

# Rental schemas
from .rental import (
    ContractCreate,
    ContractUpdate,
    RentalDocumentResponse,
    ContractResponse,
    ContractListResponse,
    PaymentCreate,
    PaymentUpdate,
    PaymentResponse,
    PaymentListResponse,
    AlertResponse,
    AlertListResponse
)

# Maintenance schemas
from .maintenance import (
    MaintenanceCreate,
    MaintenanceUpdate,
    MaintenancePhotoResponse,
    MaintenanceResponse,
    MaintenanceListResponse
)

# Document schemas
from .document import (
    DocumentUpdate,
    DocumentResponse,
    DocumentListResponse
)

__all__ = [
    # Authentication
    "LoginRequest",
    "RefreshTokenRequest",
    "AccessTokenResponse",
    "LoginResponse",
    "MessageResponse",

    # User
    "UserBase",
    "UserCreate",
    "UserUpdate",
    "UserStatusUpdate",
    "PasswordChangeRequest",
    "PasswordResetResponse",
    "UserResponse",
    "UserListResponse",

    # Client
    "ClientNeedsInput",
    "ClientNeedsResponse",
    "ClientCreate",
    "ClientUpdate",
    "InteractionCreate",
    "InteractionResponse",
    "ClientResponse",
    "ClientListResponse",

    # Property
    "PropertyBase",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyMediaResponse",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertyListFilters",

    # Visit
    "VisitCreate",
    "VisitUpdate",
    "VisitResponse",
    "VisitListResponse",

    # Rental
    "ContractCreate",
    "ContractUpdate",
    "RentalDocumentResponse",
    "ContractResponse",
    "ContractListResponse",
    "PaymentCreate",
    "PaymentUpdate",
    "PaymentResponse",
    "PaymentListResponse",
    "AlertResponse",
    "AlertListResponse",

    # Maintenance
    "MaintenanceCreate",
    "MaintenanceUpdate",
    "MaintenancePhotoResponse",
    "MaintenanceResponse",
    "MaintenanceListResponse",

    # Document
    "DocumentUpdate",
    "DocumentResponse",
    "DocumentListResponse"
]
