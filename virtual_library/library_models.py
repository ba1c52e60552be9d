"""Data models for the virtual library.

Books, users and the borrow entries linking them are plain dataclasses
owned and mutated by :class:`catalog.LibraryCatalog`.  The remaining
classes are read-only result payloads handed back to callers so that
rendering stays outside the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union


DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


@dataclass
class Book:
    """Represents a book in the library.

    Attributes:
        id: unique identifier, never changes once the book is added.
        title, author, genre: free text.
        rating: numeric score, nominally 1-5.
        publication_year: year the book was published.
        is_available: False while a user holds the book.
        borrow_count: number of successful borrows over the book's life.
    """

    id: str
    title: str
    author: str
    genre: str
    rating: float
    publication_year: int
    is_available: bool = True
    borrow_count: int = 0


@dataclass
class BorrowEntry:
    """A book currently held by a user."""

    book_id: str
    borrow_date: datetime
    due_date: datetime

    def days_overdue(self, today: DateLike) -> int:
        """Whole days past the due date, comparing dates only (0 if not late)."""
        delta = (_as_date(today) - _as_date(self.due_date)).days
        return max(delta, 0)

    def is_overdue(self, today: DateLike) -> bool:
        return self.days_overdue(today) > 0


@dataclass
class User:
    id: str
    name: str
    borrowed_books: List[BorrowEntry] = field(default_factory=list)
    penalty_points: int = 0

    def entry_for(self, book_id: str) -> Optional[BorrowEntry]:
        return next((e for e in self.borrowed_books if e.book_id == book_id), None)

    def holds(self, book_id: str) -> bool:
        return self.entry_for(book_id) is not None


@dataclass(frozen=True)
class ReturnReceipt:
    """Outcome of a successful return."""

    book: Book
    user: User
    days_overdue: int = 0
    penalty: int = 0

    @property
    def was_overdue(self) -> bool:
        return self.days_overdue > 0


@dataclass(frozen=True)
class OverdueRecord:
    user: User
    book: Book
    days_overdue: int


@dataclass(frozen=True)
class LoanStatus:
    book: Book
    entry: BorrowEntry
    days_overdue: int = 0

    @property
    def is_overdue(self) -> bool:
        return self.days_overdue > 0


@dataclass(frozen=True)
class UserSummary:
    user: User
    penalty_points: int
    loans: List[LoanStatus] = field(default_factory=list)
