"""
Middleware package for the Real Estate CRM API.
"""

from .validation import ValidationMiddleware

__all__ = ["ValidationMiddleware"]
