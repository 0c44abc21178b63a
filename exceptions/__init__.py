"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Catalog
    CatalogNotFoundError,
    CatalogRemoteError,
    CatalogNotConfiguredError,

    # Store
    StoreError,

    # Import requests
    ImportRequestError,
    ImportProgressNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Catalog
    "CatalogNotFoundError",
    "CatalogRemoteError",
    "CatalogNotConfiguredError",

    # Store
    "StoreError",

    # Import requests
    "ImportRequestError",
    "ImportProgressNotFoundError",
]
