"""Custom exceptions and error response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standardized error response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(None, description="Additional context")


class AppError(Exception):
    """Base exception for all app-level errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> ErrorDetail:
        """Convert to API response schema."""
        return ErrorDetail(
            code=self.code,
            message=self.message,
            details=self.details if self.details else None,
        )


class ValidationError(AppError):
    """Raised when request validation fails."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=422,
            details=details,
        )


class NotFoundError(AppError):
    """Raised when resource doesn't exist."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource} with ID {resource_id} not found",
            status_code=404,
            details={"resource": resource, "resource_id": resource_id},
        )


class ConflictError(AppError):
    """Raised when resource already exists or operation conflicts."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="CONFLICT",
            message=message,
            status_code=409,
            details=details,
        )


class InvalidStateError(AppError):
    """Raised when operation conflicts with resource state."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_STATE",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(AppError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class ForbiddenError(AppError):
    """Raised when user lacks permission."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
        )


class InsufficientStockError(AppError):
    """Raised when a sale or usage would take an item's stock below zero.

    The whole operation is aborted; details tell the caller which item failed and
    how much was available versus requested.
    """

    def __init__(self, item_name: str, item_id: int, available: int, requested: int):
        self.item_name = item_name
        self.item_id = item_id
        self.available = available
        self.requested = requested
        super().__init__(
            code="INSUFFICIENT_STOCK",
            message=(
                f"Not enough stock for {item_name}: "
                f"{available} available, {requested} requested"
            ),
            status_code=409,
            details={
                "product": item_name,
                "item_id": item_id,
                "available": available,
                "requested": requested,
            },
        )


class ConcurrencyConflictError(AppError):
    """Raised when a per-day row was inserted concurrently by another request.

    Recovered locally by the caller (retry as read/update); never surfaced to clients.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="CONCURRENCY_CONFLICT",
            message=message,
            status_code=409,
            details=details,
        )


class TransientInfrastructureError(AppError):
    """Raised when the datastore fails mid-operation; the client may resubmit."""

    def __init__(self, message: str = "Temporary failure, please retry"):
        super().__init__(
            code="TRANSIENT_FAILURE",
            message=message,
            status_code=503,
            details={"retryable": True},
        )
