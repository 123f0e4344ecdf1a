"""
Error types raised by the database layer and the request handlers.

The HTTP mapping lives in `main.py`.
"""

from __future__ import annotations


class DatabaseError(RuntimeError):
    pass


class DBConnectionError(DatabaseError):
    """The pool could not hand out a connection."""


class QueryError(DatabaseError):
    """A statement failed at the database."""

    def __init__(self, message: str, *, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


class SetupError(DatabaseError):
    """Schema setup or maintenance failed. Reported, never raised to callers."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class ValidationError(ValueError):
    pass


INVALID_PARAMETERS = "Invalid parameters supplied"
