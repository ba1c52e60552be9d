"""In-memory library catalog.

:class:`LibraryCatalog` owns the books and users of one library and
implements every borrowing rule.  It never prints or logs; operations
return model objects (see :mod:`library_models`) or raise one of the typed errors
from :mod:`library_errors`, and a failed call leaves the catalog untouched.

Time comes from an injectable ``clock`` so overdue behaviour can be
exercised without waiting two weeks.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from library_errors import (
    AlreadyBorrowed,
    BookCurrentlyBorrowed,
    BookNotFound,
    BookUnavailable,
    DuplicateIdError,
    NotBorrowedByUser,
    UserNotFound,
    ValidationError,
)
from library_models import (
    Book,
    BorrowEntry,
    LoanStatus,
    OverdueRecord,
    ReturnReceipt,
    User,
    UserSummary,
)
import library_utils


LOAN_PERIOD_DAYS = 14
PENALTY_PER_DAY = 5
RECOMMENDATION_FALLBACK_LIMIT = 5

REQUIRED_TEXT_FIELDS = ("id", "title", "author", "genre")


def _validate_book(candidate: Union[Mapping[str, Any], Book]) -> Book:
    data: Dict[str, Any] = dict(candidate.__dict__ if isinstance(candidate, Book) else candidate)
    for name in REQUIRED_TEXT_FIELDS:
        value = data.get(name)
        if not value:
            raise ValidationError(name)
        if not isinstance(value, str):
            raise ValidationError(name, "must be a string")
    rating = data.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, (int, float)) or math.isnan(rating):
        raise ValidationError("rating", "must be a number")
    year = data.get("publication_year")
    if not year:
        raise ValidationError("publication_year")
    if isinstance(year, bool) or (isinstance(year, float) and not year.is_integer()):
        raise ValidationError("publication_year", "must be an integer")
    try:
        year = int(year)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("publication_year", "must be an integer") from None
    return Book(
        id=data["id"],
        title=data["title"],
        author=data["author"],
        genre=data["genre"],
        rating=rating,
        publication_year=year,
    )


def _check_user(user_id: str, name: str, taken_ids: Set[str], taken_names: Set[str]) -> None:
    if not user_id:
        raise ValidationError("id")
    if not name:
        raise ValidationError("name")
    if not isinstance(user_id, str) or not isinstance(name, str):
        raise ValidationError("id" if not isinstance(user_id, str) else "name", "must be a string")
    if user_id in taken_ids:
        raise DuplicateIdError("user", user_id)
    if name.lower() in taken_names:
        raise DuplicateIdError("user", name)


class LibraryCatalog:
    """Books, users and the borrowing rules between them."""

    def __init__(
        self,
        loan_period_days: int = LOAN_PERIOD_DAYS,
        penalty_per_day: int = PENALTY_PER_DAY,
        fallback_limit: int = RECOMMENDATION_FALLBACK_LIMIT,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.loan_period_days = loan_period_days
        self.penalty_per_day = penalty_per_day
        self.fallback_limit = fallback_limit
        self.clock = clock
        self._books: List[Book] = []
        self._users: List[User] = []

    # Lookups

    def find_book(self, book_id: str) -> Optional[Book]:
        return next((b for b in self._books if b.id == book_id), None)

    def find_user(self, user_name: str) -> Optional[User]:
        """Return the user whose name matches case-insensitively, or None."""
        wanted = user_name.lower()
        return next((u for u in self._users if u.name.lower() == wanted), None)

    def get_book(self, book_id: str) -> Book:
        book = self.find_book(book_id)
        if book is None:
            raise BookNotFound(book_id)
        return book

    def get_user(self, user_name: str) -> User:
        user = self.find_user(user_name)
        if user is None:
            raise UserNotFound(user_name)
        return user

    # Catalog maintenance

    def add_book(self, candidate: Union[Mapping[str, Any], Book]) -> Book:
        """Validate ``candidate`` and add it as a new, available book."""
        book = _validate_book(candidate)
        if self.find_book(book.id) is not None:
            raise DuplicateIdError("book", book.id)
        self._books.append(book)
        return book

    def register_user(self, user_id: str, name: str) -> User:
        _check_user(
            user_id,
            name,
            {u.id for u in self._users},
            {u.name.lower() for u in self._users},
        )
        user = User(id=user_id, name=name)
        self._users.append(user)
        return user

    def load(
        self,
        books: Iterable[Union[Mapping[str, Any], Book]],
        users: Iterable[Mapping[str, Any]],
    ) -> None:
        """Add a batch of books and users, all or nothing.

        Every record is validated against the catalog and the rest of the
        batch before anything is added.
        """
        book_ids = {b.id for b in self._books}
        new_books: List[Book] = []
        for candidate in books:
            book = _validate_book(candidate)
            if book.id in book_ids:
                raise DuplicateIdError("book", book.id)
            book_ids.add(book.id)
            new_books.append(book)

        user_ids = {u.id for u in self._users}
        user_names = {u.name.lower() for u in self._users}
        new_users: List[User] = []
        for raw in users:
            user_id, name = raw.get("id", ""), raw.get("name", "")
            _check_user(user_id, name, user_ids, user_names)
            user_ids.add(user_id)
            user_names.add(name.lower())
            new_users.append(User(id=user_id, name=name))

        self._books.extend(new_books)
        self._users.extend(new_users)

    def remove_book(self, book_id: str) -> Book:
        book = self.get_book(book_id)
        if not book.is_available:
            raise BookCurrentlyBorrowed(book.id, book.title)
        self._books.remove(book)
        return book

    # Borrowing

    def borrow_book(self, user_name: str, book_id: str) -> BorrowEntry:
        user = self.get_user(user_name)
        book = self.get_book(book_id)
        if not book.is_available:
            raise BookUnavailable(book.id, book.title)
        # Unreachable while the availability invariant holds.
        if user.holds(book.id):
            raise AlreadyBorrowed(user_name, book.id, book.title)

        now = self.clock()
        entry = BorrowEntry(
            book_id=book.id,
            borrow_date=now,
            due_date=now + timedelta(days=self.loan_period_days),
        )
        book.is_available = False
        book.borrow_count += 1
        user.borrowed_books.append(entry)
        return entry

    def return_book(self, user_name: str, book_id: str) -> ReturnReceipt:
        """Give a book back, charging penalty points when it is late."""
        user = self.get_user(user_name)
        book = self.get_book(book_id)
        entry = user.entry_for(book.id)
        if entry is None:
            raise NotBorrowedByUser(user_name, book.id, book.title)

        days_overdue = entry.days_overdue(self.clock())
        penalty = days_overdue * self.penalty_per_day
        user.borrowed_books.remove(entry)
        book.is_available = True
        user.penalty_points += penalty
        return ReturnReceipt(book=book, user=user, days_overdue=days_overdue, penalty=penalty)

    # Queries

    def search(self, query: library_utils.SearchQuery) -> List[Book]:
        return library_utils.apply_book_search(self._books, query)

    def search_books_by(self, field: str, value: Any) -> List[Book]:
        """Search by ``author``, ``genre``, ``rating`` or ``year``.

        Raises InvalidQuery for any other field, or when rating/year is
        given a value that is not a number.  Results keep catalog order.
        """
        return self.search(library_utils.SearchQuery.parse(field, value))

    def get_top_rated_books(self, limit: int) -> List[Book]:
        return library_utils.take(library_utils.apply_book_order(self._books, "-rating"), limit)

    def get_most_popular_books(self, limit: int) -> List[Book]:
        return library_utils.take(library_utils.apply_book_order(self._books, "-borrow_count"), limit)

    def check_overdue_users(self) -> List[OverdueRecord]:
        today = self.clock()
        overdue: List[OverdueRecord] = []
        for user in self._users:
            for entry in user.borrowed_books:
                book = self.find_book(entry.book_id)
                if book is None:
                    continue
                days = entry.days_overdue(today)
                if days > 0:
                    overdue.append(OverdueRecord(user=user, book=book, days_overdue=days))
        return overdue

    def recommend_books(self, user_name: str) -> List[Book]:
        """Suggest available books in the genres the user is currently reading.

        Falls back to the best rated available books the user does not hold
        when they hold nothing, or nothing in their genres is on the shelf.
        """
        user = self.get_user(user_name)
        genres = set()
        for entry in user.borrowed_books:
            book = self.find_book(entry.book_id)
            if book is not None:
                genres.add(book.genre)

        candidates = [b for b in self._books if b.is_available and not user.holds(b.id)]
        by_rating = library_utils.apply_book_order(candidates, "-rating")
        matching = [b for b in by_rating if b.genre in genres]
        if matching:
            return matching
        return library_utils.take(by_rating, self.fallback_limit)

    def get_user_summary(self, user_name: str) -> UserSummary:
        user = self.get_user(user_name)
        today = self.clock()
        loans = []
        for entry in user.borrowed_books:
            book = self.find_book(entry.book_id)
            if book is not None:
                loans.append(LoanStatus(book=book, entry=entry, days_overdue=entry.days_overdue(today)))
        return UserSummary(user=user, penalty_points=user.penalty_points, loans=loans)

    def list_all_books(self) -> List[Book]:
        return list(self._books)

    def list_all_users(self) -> List[User]:
        return list(self._users)
