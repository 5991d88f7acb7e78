# avocado_api/core/exceptions.py

from typing import Any, Dict, Optional


class AvocadoApiError(Exception):
    """Base class for application errors.

    ``message`` is safe to return to clients; ``context`` is only logged.
    """

    def __init__(self, message: str = "An unexpected error occurred", context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class RecordValidationError(AvocadoApiError):
    """A create payload is missing required fields (HTTP 400)."""

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = missing_fields
        super().__init__("All fields are required", context={"missing_fields": missing_fields})


class DuplicateRecordError(AvocadoApiError):
    """A unique index rejected an insert (HTTP 409)."""

    def __init__(self, key_value: Optional[Dict[str, Any]] = None):
        self.key_value = key_value or {}
        super().__init__("Duplicate ID: An entry with this ID already exists", context={"key_value": self.key_value})


class DatabaseOperationError(AvocadoApiError):
    """Any other failure talking to MongoDB, or a document the schema rejects.

    ``details`` carries the underlying error text and is returned to clients.
    """

    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Database error during operation: {operation}", context={"details": details})


class InvalidRecordError(AvocadoApiError):
    """A payload passed the presence check but does not fit the record schema (HTTP 400)."""

    def __init__(self, details: str):
        self.details = details
        super().__init__("Failed to create avocado sale entry", context={"details": details})
