"""
Custom exception classes for the application.

Catalog and store errors are raised by the client and the import services;
the orchestrators downgrade them to structured stage errors.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# CATALOG ERRORS
# ===================

class CatalogNotFoundError(NotFoundError):
    """Remote catalog answered 404 for the requested key."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            resource=resource,
            identifier=str(identifier),
            code=f"CATALOG_{resource.upper()}_NOT_FOUND"
        )
        self.resource = resource
        self.identifier = identifier
        self.message = f"{resource} {identifier} not found in catalog"


class CatalogRemoteError(ExternalServiceError):
    """
    Remote catalog answered with a non-2xx, non-404 status.

    status is None when the request never produced a response
    (connection error, timeout).
    """

    def __init__(
        self,
        resource: str,
        identifier: Any,
        status: Optional[int] = None,
        reason: Optional[str] = None
    ):
        if status is not None:
            message = f"Catalog API error fetching {resource} {identifier} (status {status})"
        else:
            message = f"Catalog API request for {resource} {identifier} failed: {reason}"
        super().__init__(
            service="catalog",
            message=message,
            details={"resource": resource, "id": str(identifier), "status": status}
        )
        self.resource = resource
        self.identifier = identifier
        self.status = status


class CatalogNotConfiguredError(ExternalServiceError):
    """Catalog credentials are missing from settings."""

    def __init__(self):
        super().__init__(
            service="catalog",
            message="VTEX credentials are not configured",
            details={
                "required": [
                    "VTEX_ACCOUNT_NAME",
                    "VTEX_ENVIRONMENT",
                    "VTEX_APP_KEY",
                    "VTEX_APP_TOKEN",
                ]
            }
        )


# ===================
# STORE ERRORS
# ===================

class StoreError(DatabaseError):
    """Local store read or write failed for one table."""

    def __init__(self, operation: str, table: str, message: str):
        super().__init__(
            operation=operation,
            message=message,
            details={"table": table}
        )
        self.table = table


# ===================
# IMPORT REQUEST ERRORS
# ===================

class ImportRequestError(ValidationError):
    """Import request rejected before any stage ran."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="IMPORT_REQUEST_INVALID",
            message=message,
            details=details
        )


class ImportProgressNotFoundError(NotFoundError):
    """Progress record unknown or expired."""

    def __init__(self, progress_id: str):
        super().__init__(
            resource="Import progress",
            identifier=progress_id,
            code="IMPORT_PROGRESS_NOT_FOUND"
        )
