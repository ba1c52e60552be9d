"""Utility functions for book searching and ordering."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Union

from library_errors import InvalidQuery
from library_models import Book


class SearchField(Enum):
    AUTHOR = "author"
    GENRE = "genre"
    RATING = "rating"
    YEAR = "year"


NUMERIC_FIELDS = {SearchField.RATING, SearchField.YEAR}


def _coerce_number(value: Any, field: SearchField) -> float:
    if isinstance(value, bool):
        raise InvalidQuery(f"{field.value.capitalize()} search value must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            raise InvalidQuery(
                f"{field.value.capitalize()} search value must be a number",
                details={"field": field.value, "value": value},
            ) from None
    if math.isnan(number):
        raise InvalidQuery(f"{field.value.capitalize()} search value must be a number")
    return number


@dataclass(frozen=True)
class SearchQuery:
    """A search criterion: the field searched on plus a value of the right type.

    Text fields carry a ``str``; rating and year carry a number.  Numeric
    strings are converted on construction, anything else raises InvalidQuery.
    """

    field: SearchField
    value: Union[str, float]

    def __post_init__(self) -> None:
        if not isinstance(self.field, SearchField):
            raise InvalidQuery(f'Invalid search field "{self.field}"', details={"field": self.field})
        if self.field in NUMERIC_FIELDS:
            object.__setattr__(self, "value", _coerce_number(self.value, self.field))
        elif not isinstance(self.value, str):
            raise InvalidQuery(
                f"{self.field.value.capitalize()} search value must be text",
                details={"field": self.field.value, "value": self.value},
            )

    @classmethod
    def parse(cls, field: Any, value: Any) -> "SearchQuery":
        try:
            search_field = SearchField(str(field).strip().lower())
        except ValueError:
            raise InvalidQuery(
                f'Invalid search parameter "{field}". '
                "Valid parameters are 'author', 'genre', 'rating', 'year'",
                details={"field": field},
            ) from None
        if search_field in NUMERIC_FIELDS:
            return cls(search_field, value)
        return cls(search_field, str(value))

    def matches(self, book: Book) -> bool:
        if self.field is SearchField.AUTHOR:
            return self.value.lower() in book.author.lower()
        if self.field is SearchField.GENRE:
            return book.genre.lower() == self.value.lower()
        if self.field is SearchField.RATING:
            return book.rating >= self.value
        # Year means "published on or after".
        return book.publication_year >= self.value


def apply_book_search(books: List[Book], query: SearchQuery) -> List[Book]:
    return [b for b in books if query.matches(b)]


BOOK_ORDER_KEYS: Dict[str, Callable[[Book], Any]] = {
    "rating": lambda b: b.rating,
    "borrow_count": lambda b: b.borrow_count,
}


def apply_book_order(books: List[Book], ordering: str) -> List[Book]:
    """Sort books by a field name, ``-`` prefix for descending.

    Sorting is stable in both directions, so ties keep their current order.
    """
    reverse = ordering.startswith("-")
    field = ordering.lstrip("-")
    return sorted(books, key=BOOK_ORDER_KEYS[field], reverse=reverse)


def take(items: List[Any], limit: int) -> List[Any]:
    """First ``limit`` items; a non-positive limit yields nothing."""
    if limit <= 0:
        return []
    return items[:limit]
