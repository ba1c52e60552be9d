"""
Tests for search, rankings, overdue reports, recommendations and summaries.
"""

import pytest

from conftest import make_book
from library_errors import InvalidQuery, UserNotFound
from library_utils import SearchField, SearchQuery


@pytest.fixture
def three_books(catalog):
    catalog.add_book(make_book("B1", rating=4.5, genre="Fantasy", year=2005, author="Alice Wonderland"))
    catalog.add_book(make_book("B2", rating=4.8, genre="Technology", year=2020, author="Bob Builder"))
    catalog.add_book(make_book("B3", rating=3.9, genre="Mystery", year=1998, author="Charlie Chaplin"))
    return catalog


def ids(books):
    return [b.id for b in books]


class TestSearchQuery:
    def test_parse_text_field(self):
        query = SearchQuery.parse("Author", "alice")
        assert query.field is SearchField.AUTHOR
        assert query.value == "alice"

    def test_parse_numeric_field_from_string(self):
        assert SearchQuery.parse("rating", "4.5").value == 4.5

    @pytest.mark.parametrize("value", ["abc", "", True, float("nan")])
    def test_numeric_field_rejects_non_numbers(self, value):
        with pytest.raises(InvalidQuery):
            SearchQuery.parse("year", value)

    def test_direct_construction_converts_numeric_strings(self):
        assert SearchQuery(SearchField.YEAR, "2010").value == 2010.0

    @pytest.mark.parametrize(
        "field, value",
        [
            (SearchField.YEAR, "recent"),
            (SearchField.RATING, None),
            (SearchField.AUTHOR, 42),
            ("year", 2010),
        ],
    )
    def test_direct_construction_validates(self, field, value):
        with pytest.raises(InvalidQuery):
            SearchQuery(field, value)

    def test_unknown_field(self):
        with pytest.raises(InvalidQuery) as exc_info:
            SearchQuery.parse("title", "x")
        assert exc_info.value.code == "invalid_query"


class TestSearchBooksBy:
    def test_rating_at_or_above(self, three_books):
        assert ids(three_books.search_books_by("rating", 4.5)) == ["B1", "B2"]

    def test_author_substring_case_insensitive(self, three_books):
        assert ids(three_books.search_books_by("author", "BUILD")) == ["B2"]

    def test_genre_exact_case_insensitive(self, three_books):
        assert ids(three_books.search_books_by("genre", "fantasy")) == ["B1"]
        assert three_books.search_books_by("genre", "fant") == []

    def test_year_on_or_after(self, three_books):
        assert ids(three_books.search_books_by("year", 2005)) == ["B1", "B2"]

    def test_invalid_queries(self, three_books):
        with pytest.raises(InvalidQuery):
            three_books.search_books_by("rating", "high")
        with pytest.raises(InvalidQuery):
            three_books.search_books_by("publisher", "x")

    def test_search_with_built_query(self, three_books):
        query = SearchQuery(SearchField.YEAR, 2010)
        assert ids(three_books.search(query)) == ["B2"]
        assert ids(three_books.search(SearchQuery(SearchField.YEAR, "2010"))) == ["B2"]


class TestRankings:
    def test_top_rated_sorted_and_stable(self, catalog):
        catalog.add_book(make_book("A", rating=4.0))
        catalog.add_book(make_book("B", rating=5.0))
        catalog.add_book(make_book("C", rating=4.0))
        catalog.add_book(make_book("D", rating=3.0))
        assert ids(catalog.get_top_rated_books(3)) == ["B", "A", "C"]
        assert ids(catalog.get_top_rated_books(10)) == ["B", "A", "C", "D"]

    @pytest.mark.parametrize("limit", [0, -2])
    def test_non_positive_limit(self, three_books, limit):
        assert three_books.get_top_rated_books(limit) == []
        assert three_books.get_most_popular_books(limit) == []

    def test_empty_catalog(self, catalog):
        assert catalog.get_top_rated_books(5) == []

    def test_most_popular(self, three_books, clock):
        three_books.register_user("U1", "Alice")
        for _ in range(2):
            three_books.borrow_book("Alice", "B3")
            three_books.return_book("Alice", "B3")
        three_books.borrow_book("Alice", "B2")
        assert ids(three_books.get_most_popular_books(2)) == ["B3", "B2"]
        assert ids(three_books.get_most_popular_books(3)) == ["B3", "B2", "B1"]


class TestOverdue:
    def test_reports_only_overdue_entries(self, demo_catalog, clock):
        demo_catalog.borrow_book("John Doe", "B001")
        clock.advance(days=5)
        demo_catalog.borrow_book("Jane Smith", "B002")
        clock.advance(days=11)

        records = demo_catalog.check_overdue_users()
        assert len(records) == 1
        assert records[0].user.name == "John Doe"
        assert records[0].book.id == "B001"
        assert records[0].days_overdue == 2

    def test_nothing_overdue(self, demo_catalog):
        demo_catalog.borrow_book("John Doe", "B001")
        assert demo_catalog.check_overdue_users() == []

    def test_check_does_not_charge_penalties(self, demo_catalog, clock):
        demo_catalog.borrow_book("John Doe", "B001")
        clock.advance(days=30)
        demo_catalog.check_overdue_users()
        assert demo_catalog.get_user("John Doe").penalty_points == 0


class TestRecommendBooks:
    def test_no_history_returns_top_five_by_rating(self, demo_catalog):
        demo_catalog.register_user("U004", "Bob")
        books = demo_catalog.recommend_books("Bob")
        assert ids(books) == ["B008", "B002", "B004", "B007", "B001"]

    def test_matches_genres_currently_held(self, demo_catalog):
        demo_catalog.borrow_book("John Doe", "B001")
        demo_catalog.borrow_book("John Doe", "B003")
        books = demo_catalog.recommend_books("john doe")
        assert ids(books) == ["B007", "B005"]

    def test_genre_match_is_not_capped(self, catalog):
        catalog.register_user("U1", "Alice")
        catalog.add_book(make_book("H0", genre="Horror", rating=1.0))
        for i in range(7):
            catalog.add_book(make_book(f"H{i + 1}", genre="Horror", rating=3.0 + i * 0.1))
        catalog.borrow_book("Alice", "H0")
        assert len(catalog.recommend_books("Alice")) == 7

    def test_falls_back_when_no_genre_match(self, demo_catalog):
        demo_catalog.borrow_book("John Doe", "B006")
        books = demo_catalog.recommend_books("John Doe")
        assert ids(books) == ["B008", "B002", "B004", "B007", "B001"]

    def test_skips_books_held_by_others(self, demo_catalog):
        demo_catalog.borrow_book("Jane Smith", "B008")
        demo_catalog.register_user("U004", "Bob")
        books = demo_catalog.recommend_books("Bob")
        assert "B008" not in ids(books)
        assert len(books) == 5
        ratings = [b.rating for b in books]
        assert ratings == sorted(ratings, reverse=True)

    def test_unknown_user(self, demo_catalog):
        with pytest.raises(UserNotFound):
            demo_catalog.recommend_books("Nobody")


class TestUserSummary:
    def test_summary_with_overdue_loan(self, demo_catalog, clock):
        demo_catalog.borrow_book("Jane Smith", "B004")
        clock.advance(days=10)
        demo_catalog.borrow_book("Jane Smith", "B005")
        clock.advance(days=7)

        summary = demo_catalog.get_user_summary("jane smith")
        assert summary.penalty_points == 0
        assert [loan.book.id for loan in summary.loans] == ["B004", "B005"]
        assert summary.loans[0].is_overdue is True
        assert summary.loans[0].days_overdue == 3
        assert summary.loans[1].is_overdue is False

    def test_summary_without_loans(self, demo_catalog):
        summary = demo_catalog.get_user_summary("Peter Jones")
        assert summary.loans == []

    def test_unknown_user(self, demo_catalog):
        with pytest.raises(UserNotFound):
            demo_catalog.get_user_summary("Nobody")


def test_listings_keep_insertion_order(demo_catalog):
    assert ids(demo_catalog.list_all_books())[:3] == ["B001", "B002", "B003"]
    assert [u.name for u in demo_catalog.list_all_users()] == ["John Doe", "Jane Smith", "Peter Jones"]


def test_empty_listings(catalog):
    assert catalog.list_all_books() == []
    assert catalog.list_all_users() == []
