"""
API route handlers for the Real Estate CRM API.
One router per resource, mounted under the API prefix.
"""

from .auth import router as auth_router
from .clients import router as clients_router
from .properties import router as properties_router
from .calendar import router as calendar_router
from .rental import router as rental_router
from .maintenance import router as maintenance_router
from .documents import router as documents_router

__all__ = [
    "auth_router",
    "clients_router",
    "properties_router",
    "calendar_router",
    "rental_router",
    "maintenance_router",
    "documents_router",
]
