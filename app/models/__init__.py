"""
Database models for the Real Estate CRM API.
Importing this package registers every table on the shared metadata.
"""

from app.models.user import User, UserRole
from app.models.client import (
    Client,
    ClientNeeds,
    Interaction,
    ClientRole,
    ClientStatus,
    ContactMethod,
    NeedsUrgency,
    InteractionType,
    InteractionOutcome,
)
from app.models.property import (
    Property,
    PropertyMedia,
    PropertyType,
    ConditionStatus,
    TransactionType,
    PropertyStatus,
    MediaType,
)
from app.models.visit import PropertyVisit, VisitStatus, VisitType, VisitOutcome
from app.models.rental import (
    RentalContract,
    RentalDocument,
    RentalPayment,
    RentalAlert,
    ContractStatus,
    RentalDocumentType,
    PaymentStatus,
    PaymentMethod,
    AlertType,
    AlertPriority,
)
from app.models.maintenance import (
    MaintenanceRequest,
    MaintenancePhoto,
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
)
from app.models.document import (
    Document,
    DocumentType,
    DocumentCategory,
    DocumentStatus,
    RelatedEntityType,
)

__all__ = [
    "User",
    "UserRole",
    "Client",
    "ClientNeeds",
    "Interaction",
    "ClientRole",
    "ClientStatus",
    "ContactMethod",
    "NeedsUrgency",
    "InteractionType",
    "InteractionOutcome",
    "Property",
    "PropertyMedia",
    "PropertyType",
    "ConditionStatus",
    "TransactionType",
    "PropertyStatus",
    "MediaType",
    "PropertyVisit",
    "VisitStatus",
    "VisitType",
    "VisitOutcome",
    "RentalContract",
    "RentalDocument",
    "RentalPayment",
    "RentalAlert",
    "ContractStatus",
    "RentalDocumentType",
    "PaymentStatus",
    "PaymentMethod",
    "AlertType",
    "AlertPriority",
    "MaintenanceRequest",
    "MaintenancePhoto",
    "MaintenanceCategory",
    "MaintenancePriority",
    "MaintenanceStatus",
    "Document",
    "DocumentType",
    "DocumentCategory",
    "DocumentStatus",
    "RelatedEntityType",
]
