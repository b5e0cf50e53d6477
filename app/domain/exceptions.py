"""Domain exceptions for the e-shop application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class EShopException(Exception):
    """Base exception for all e-shop application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(EShopException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(EShopException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: int | str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'product', 'order').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicateResourceException(EShopException):
    """Raised when a write violates a uniqueness rule (product name, customer email)."""

    def __init__(self, resource_type: str, field: str, value: Any) -> None:
        """Initialize with the conflicting field.

        Args:
            resource_type: Type of resource being written.
            field: Unique field that collided.
            value: The duplicate value.
        """
        super().__init__(
            f"{resource_type} with {field} '{value}' already exists",
            "DUPLICATE_RESOURCE",
            {"resource_type": resource_type, "field": field, "value": value},
        )


class RelatedResourceMissingException(EShopException):
    """Raised when a write references a row that does not exist (e.g. order for unknown customer)."""

    def __init__(self, resource_type: str, resource_id: int | str) -> None:
        super().__init__(
            f"Referenced {resource_type} does not exist: {resource_id}",
            "RELATED_RESOURCE_MISSING",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ResourceInUseException(EShopException):
    """Raised when a delete is blocked by rows that still reference the resource."""

    def __init__(self, resource_type: str, resource_id: int | str, referenced_by: str) -> None:
        super().__init__(
            f"{resource_type} {resource_id} is still referenced by {referenced_by}",
            "RESOURCE_IN_USE",
            {
                "resource_type": resource_type,
                "resource_id": resource_id,
                "referenced_by": referenced_by,
            },
        )
