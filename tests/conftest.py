"""
Test configuration and fixtures
"""

from datetime import datetime, timedelta

import pytest

from library_catalog import LibraryCatalog
import library_seed


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 10, 15, 30))


@pytest.fixture
def catalog(clock):
    """Empty catalog driven by the fake clock"""
    return LibraryCatalog(clock=clock)


@pytest.fixture
def demo_catalog(catalog):
    """Catalog holding the eight demo books and three demo users"""
    return library_seed.load_demo_data(catalog)


def make_book(book_id, rating=4.0, genre="Fantasy", year=2000, **overrides):
    data = {
        "id": book_id,
        "title": f"Title {book_id}",
        "author": "Some Author",
        "genre": genre,
        "rating": rating,
        "publication_year": year,
    }
    data.update(overrides)
    return data
