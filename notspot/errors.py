"""Typed store errors.

Services raise these instead of returning ``None`` so callers (routers, tests,
batch helpers) can tell a missing record from a malformed request or a
constraint violation without string matching.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for store failures; also wraps unexpected I/O errors."""

    category = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(StoreError):
    """Object type, object, association type or label is absent."""

    category = "OBJECT_NOT_FOUND"
    status_code = 404


class ValidationError(StoreError):
    """Malformed request: search limits, bad operator, bad cursor, missing field."""

    category = "VALIDATION_ERROR"
    status_code = 400


class ConflictError(StoreError):
    """Unique constraint violated (duplicate schema, property or label)."""

    category = "CONFLICT"
    status_code = 409
