"""
Repository layer for data access operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.repositories.client import ClientRepository
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.visit import VisitRepository
from app.repositories.rental import ContractRepository, PaymentRepository, AlertRepository
from app.repositories.maintenance import MaintenanceRepository
from app.repositories.document import DocumentRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ClientRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "VisitRepository",
    "ContractRepository",
    "PaymentRepository",
    "AlertRepository",
    "MaintenanceRepository",
    "DocumentRepository",
]
