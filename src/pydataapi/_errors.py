"""Exception hierarchy for the Data API document model."""

from __future__ import annotations

from typing import Any


class DataAPIError(Exception):
    """Base exception for Data API client-side errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class InvalidArgumentError(DataAPIError, ValueError):
    """Raised when an argument is null, empty or out of range."""


class InvalidFieldExpressionError(DataAPIError):
    """Raised when an escaped field path is malformed."""

    def __init__(self, path: str, reason: str, position: int | None = None) -> None:
        super().__init__(
            f"{ERR_MSG_INVALID_FIELD_EXPRESSION}: {reason}",
            f"field expression {path!r} is invalid: {reason}",
        )
        self.path = path
        self.reason = reason
        self.position = position


class InvalidFilterExpressionError(DataAPIError):
    """Raised when a CEL filter expression cannot be parsed."""


class UnsupportedExpressionError(DataAPIError):
    """Raised when a CEL expression has no Data API filter equivalent."""


class MaxDepthExceededError(DataAPIError):
    """Raised when recursion depth limit is exceeded."""


class InvalidProjectionError(DataAPIError):
    """Raised when a projection clause is inconsistent."""


class InvalidSortError(DataAPIError):
    """Raised when a sort clause carries no ordering value."""


class InvalidVectorError(DataAPIError):
    """Raised when packed vector bytes cannot be decoded."""


class SerializationError(DataAPIError):
    """Raised when a value cannot be marshalled to or from JSON."""


class InvalidSchemaError(DataAPIError):
    """Raised when there is a problem with a table or collection definition."""


class InsertManyError(DataAPIError):
    """Raised when a chunk of a chunked insert fails.

    ``results`` holds the outcome of every chunk that completed, in chunk
    order, with ``None`` for chunks that failed or never ran.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        results: list[Any] | None = None,
    ) -> None:
        super().__init__(user_message, internal_details, wrapped)
        self.results = results or []


# Sanitized user-facing error message constants
ERR_MSG_INVALID_FIELD_EXPRESSION = "invalid field expression"
ERR_MSG_EMPTY_FIELD_NAME = "field name should not be null or empty"
ERR_MSG_UNSUPPORTED_EXPRESSION = "unsupported expression type"
ERR_MSG_INVALID_FILTER = "invalid filter expression"
ERR_MSG_INVALID_ARGUMENTS = "invalid function arguments"
ERR_MSG_SERIALIZATION_FAILED = "serialization failed"
ERR_MSG_SCHEMA_VALIDATION_FAILED = "schema validation failed"
