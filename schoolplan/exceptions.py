"""Application exceptions."""

from typing import Any, Optional


class AppError(Exception):
    """Base exception for application errors."""


class FieldValidationError(AppError):
    """Raised when client input breaks a field-level rule.

    Carries a mapping of field name to error messages so the client can
    point at the exact input that needs correcting.
    """

    def __init__(
        self,
        errors: dict[str, list[str]],
        message: Optional[str] = None,
    ):
        self.errors = errors
        if message is None:
            message = "; ".join(
                f"{field}: {', '.join(messages)}" for field, messages in errors.items()
            )
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "FieldValidationError":
        """Build an error for a single field."""
        return cls({field: [message]}, message=message)


class RelatedRecordNotFoundError(FieldValidationError):
    """Raised when a related record (FK) is not found."""

    def __init__(self, field: str, record_id: Any):
        self.field = field
        self.record_id = record_id
        message = f"Related record for '{field}' with id={record_id} not found"
        super().__init__({field: [message]}, message=message)


class ModelError(AppError):
    """Base exception for model/database operations."""


class RecordNotFoundError(ModelError):
    """Raised when a record is not found in the database."""

    def __init__(self, model_name: str, record_id: int):
        self.model_name = model_name
        self.record_id = record_id
        super().__init__(f"{model_name} with id={record_id} not found")


class DuplicateRecordError(ModelError):
    """Raised when a write would violate a uniqueness (natural key) constraint."""

    def __init__(
        self,
        model_name: str,
        key: Optional[dict[str, Any]] = None,
        detail: Optional[str] = None,
    ):
        self.model_name = model_name
        self.key = key or {}
        if detail is None:
            detail = f"{model_name} with key {self.key} already exists"
        super().__init__(detail)


class DatabaseConnectionError(ModelError):
    """Raised when database connection fails."""


class InvalidFilterError(ModelError):
    """Raised when invalid filter is provided."""
