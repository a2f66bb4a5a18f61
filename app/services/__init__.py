"""
Service layer for business logic implementation.
"""

from .auth import AuthService
from .client import ClientService
from .property import PropertyService
from .calendar import CalendarService
from .rental import RentalService
from .maintenance import MaintenanceService
from .document import DocumentService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "ClientService",
    "PropertyService",
    "CalendarService",
    "RentalService",
    "MaintenanceService",
    "DocumentService",
    "ErrorHandlerService",
]
