"""
Custom exception classes for the MAGE local store.
Provides structured error handling with specific exception types.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class MageStoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, error_code: str | None = None, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class PersistenceFailure(MageStoreError):
    """Raised (or reported through a save completion) when a durable write fails."""


class DatabaseError(MageStoreError):
    """Raised when database operations fail."""


class DataIntegrityError(MageStoreError):
    """Raised when data integrity is compromised."""


class ValidationError(MageStoreError):
    """Raised when input validation fails."""


class GeometryValidationError(ValidationError):
    """Raised when a geometry payload is not valid GeoJSON."""


class LocationValidationError(ValidationError):
    """Raised when a location feature cannot be stored."""


class ConfigurationError(MageStoreError):
    """Raised when configuration is invalid."""


class ErrorCodes(StrEnum):
    """Standardized error codes."""

    # Validation errors
    INVALID_FORMAT = "INVALID_FORMAT"
    MISSING_REQUIRED = "MISSING_REQUIRED"

    # Database errors
    DB_QUERY_FAILED = "DB_QUERY_FAILED"
    DB_INTEGRITY_VIOLATION = "DB_INTEGRITY_VIOLATION"
    DB_SAVE_FAILED = "DB_SAVE_FAILED"
    DB_SAVE_CANCELLED = "DB_SAVE_CANCELLED"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_UNKNOWN_KEY = "CONFIG_UNKNOWN_KEY"
