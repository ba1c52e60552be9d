"""Typed failures raised by the library catalog.

Every catalog operation either succeeds or raises exactly one of the
exceptions below.  Each carries a short machine readable ``code`` (the
same vocabulary the old JSON API used in its ``{"detail", "code"}``
payloads) plus a human readable message.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LibraryError(Exception):
    """Base class for all catalog errors."""

    code = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.details}


class ValidationError(LibraryError):
    """A required book or user field is missing or has the wrong type."""

    code = "invalid"

    def __init__(self, field: str, reason: str = "is required"):
        super().__init__(f"Field '{field}' {reason}", details={"field": field})


class DuplicateIdError(LibraryError):
    code = "duplicate_id"

    def __init__(self, kind: str, identifier: str):
        super().__init__(
            f'{kind.capitalize()} with ID "{identifier}" already exists',
            details={"kind": kind, "id": identifier},
        )


class NotFoundError(LibraryError):
    code = "not_found"


class UserNotFound(NotFoundError):
    def __init__(self, user_name: str):
        super().__init__(f'User "{user_name}" not found', details={"user": user_name})


class BookNotFound(NotFoundError):
    def __init__(self, book_id: str):
        super().__init__(f'Book with ID "{book_id}" not found', details={"book_id": book_id})


class BookUnavailable(LibraryError):
    """Borrow attempted on a book somebody currently holds."""

    code = "unavailable"

    def __init__(self, book_id: str, title: str):
        super().__init__(f'"{title}" is currently unavailable', details={"book_id": book_id})


class AlreadyBorrowed(LibraryError):
    code = "duplicate_loan"

    def __init__(self, user_name: str, book_id: str, title: str):
        super().__init__(
            f'"{user_name}" has already borrowed "{title}"',
            details={"user": user_name, "book_id": book_id},
        )


class NotBorrowedByUser(LibraryError):
    code = "not_borrowed"

    def __init__(self, user_name: str, book_id: str, title: str):
        super().__init__(
            f'"{user_name}" did not borrow "{title}"',
            details={"user": user_name, "book_id": book_id},
        )


class BookCurrentlyBorrowed(LibraryError):
    code = "currently_borrowed"

    def __init__(self, book_id: str, title: str):
        super().__init__(
            f'Cannot remove "{title}" as it is currently borrowed',
            details={"book_id": book_id},
        )


class InvalidQuery(LibraryError):
    """Unsupported search field, or a non-numeric value for a numeric field."""

    code = "invalid_query"


class SeedError(LibraryError):
    """A seed file could not be read or contains malformed records."""

    code = "invalid_seed"
