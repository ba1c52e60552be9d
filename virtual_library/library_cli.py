"""Line oriented command front-end for the library catalog.

:class:`CommandDispatcher` turns one line of text into a catalog call and
renders the result (or the catalog's typed error) as text.  It keeps no
library state of its own.  Arguments are split with :mod:`shlex`, so
multi-word titles, authors and names are given in quotes.
"""

from __future__ import annotations

import shlex
from datetime import datetime
from typing import Callable, Dict, List, Sequence, TextIO, Tuple, Union

import structlog

from library_catalog import LibraryCatalog
from library_errors import LibraryError
from library_models import Book


logger = structlog.get_logger(__name__)

HELP_TEXT = """
--- Available Commands ---
addBook <id> <title> <author> <genre> <rating> <year>
registerUser <id> <name>
borrowBook <userName> <bookId>
returnBook <userName> <bookId>
searchBooksBy <param> <value>
getTopRatedBooks <limit>
getMostPopularBooks <limit>
checkOverdueUsers
recommendBooks <userName>
removeBook <bookId>
printUserSummary <userName>
listAllBooks
listAllUsers
help - Display this help message
exit - Exit the application
------------------------""".strip("\n")

USAGE = {
    "addBook": "addBook <id> <title> <author> <genre> <rating> <year>",
    "registerUser": "registerUser <id> <name>",
    "borrowBook": "borrowBook <userName> <bookId>",
    "returnBook": "returnBook <userName> <bookId>",
    "searchBooksBy": "searchBooksBy <param> <value>",
    "getTopRatedBooks": "getTopRatedBooks <limit>",
    "getMostPopularBooks": "getMostPopularBooks <limit>",
    "recommendBooks": "recommendBooks <userName>",
    "removeBook": "removeBook <bookId>",
    "printUserSummary": "printUserSummary <userName>",
}


class UsageError(Exception):
    """Raised by a command handler when its arguments do not fit."""


def format_date(value: datetime) -> str:
    return value.strftime("%a %b %d %Y")


def format_book(book: Book) -> str:
    return (
        f'ID: {book.id}, Title: "{book.title}", Author: {book.author}, Genre: {book.genre}, '
        f"Rating: {book.rating}/5, Year: {book.publication_year}, "
        f"Available: {'Yes' if book.is_available else 'No'}, Borrowed: {book.borrow_count} times"
    )


def _parse_float(token: str) -> Union[float, str]:
    try:
        return float(token)
    except ValueError:
        return token


def _parse_int(token: str) -> Union[int, str]:
    try:
        return int(token)
    except ValueError:
        return token


def _parse_limit(args: Sequence[str]) -> int:
    if len(args) != 1:
        raise UsageError
    try:
        return int(args[0])
    except ValueError:
        raise UsageError from None


class CommandDispatcher:
    """Parses and executes text commands against a :class:`LibraryCatalog`."""

    def __init__(self, catalog: LibraryCatalog) -> None:
        self.catalog = catalog
        self.running = True
        self._handlers: Dict[str, Callable[[List[str]], str]] = {
            "addBook": self._add_book,
            "registerUser": self._register_user,
            "borrowBook": self._borrow_book,
            "returnBook": self._return_book,
            "searchBooksBy": self._search_books_by,
            "getTopRatedBooks": self._top_rated,
            "getMostPopularBooks": self._most_popular,
            "checkOverdueUsers": self._check_overdue_users,
            "recommendBooks": self._recommend_books,
            "removeBook": self._remove_book,
            "printUserSummary": self._print_user_summary,
            "listAllBooks": self._list_all_books,
            "listAllUsers": self._list_all_users,
            "help": lambda args: HELP_TEXT,
            "exit": self._exit,
        }

    def dispatch(self, line: str) -> str:
        """Execute one command line and return the text to show the user."""
        try:
            parts = shlex.split(line)
        except ValueError as exc:
            return f"Error: {exc}"
        if not parts:
            return ""
        command, args = parts[0], parts[1:]
        handler = self._handlers.get(command)
        if handler is None:
            logger.info("unknown command", command=command)
            return f"Unknown command: \"{command}\". Type 'help' for a list of commands."
        logger.debug("command received", command=command, args=args)
        try:
            return handler(args)
        except UsageError:
            return f"Usage: {USAGE[command]}"
        except LibraryError as exc:
            logger.info("command failed", command=command, code=exc.code, detail=exc.message)
            return f"Error: {exc.message}."

    def run(self, input_func: Callable[[str], str], output: TextIO) -> None:
        """Prompt for and dispatch commands until ``exit`` or end of input."""
        output.write(HELP_TEXT + "\n")
        while self.running:
            try:
                line = input_func("> ")
            except EOFError:
                break
            text = self.dispatch(line)
            if text:
                output.write(text + "\n")

    # Argument helpers

    def _split_name_and_book(self, args: List[str]) -> Tuple[str, str]:
        if len(args) < 2:
            raise UsageError
        return " ".join(args[:-1]), args[-1]

    def _split_book_args(self, args: List[str]) -> Dict[str, object]:
        if len(args) != 6:
            raise UsageError
        book_id, title, author, genre, rating, year = args
        return {
            "id": book_id,
            "title": title,
            "author": author,
            "genre": genre,
            "rating": _parse_float(rating),
            "publication_year": _parse_int(year),
        }

    # Handlers

    def _add_book(self, args: List[str]) -> str:
        book = self.catalog.add_book(self._split_book_args(args))
        return f'Added book: "{book.title}" by {book.author}'

    def _register_user(self, args: List[str]) -> str:
        if len(args) < 2:
            raise UsageError
        user = self.catalog.register_user(args[0], " ".join(args[1:]))
        return f"Registered user: {user.name} (ID: {user.id})"

    def _borrow_book(self, args: List[str]) -> str:
        user_name, book_id = self._split_name_and_book(args)
        entry = self.catalog.borrow_book(user_name, book_id)
        book = self.catalog.get_book(entry.book_id)
        return f'Success: "{user_name}" borrowed "{book.title}". Due date: {format_date(entry.due_date)}.'

    def _return_book(self, args: List[str]) -> str:
        user_name, book_id = self._split_name_and_book(args)
        receipt = self.catalog.return_book(user_name, book_id)
        if receipt.was_overdue:
            return (
                f'Returned: "{receipt.book.title}" by "{user_name}". '
                f"It was {receipt.days_overdue} day(s) overdue. {receipt.penalty} penalty points added. "
                f"Total penalty: {receipt.user.penalty_points}."
            )
        return f'Returned: "{receipt.book.title}" by "{user_name}". Thank you!'

    def _search_books_by(self, args: List[str]) -> str:
        if len(args) < 2:
            raise UsageError
        param, value = args[0], " ".join(args[1:])
        results = self.catalog.search_books_by(param, value)
        lines = [f'Searching books by {param}: "{value}"']
        if param.lower() == "year":
            lines.append("Note: year search returns books published ON or AFTER the given year.")
        if not results:
            lines.append("No books found matching your criteria.")
        for book in results:
            lines.append(
                f'- "{book.title}" by {book.author} ({book.publication_year}), Genre: {book.genre}, '
                f"Rating: {book.rating}/5, Available: {'Yes' if book.is_available else 'No'}"
            )
        return "\n".join(lines)

    def _top_rated(self, args: List[str]) -> str:
        limit = _parse_limit(args)
        books = self.catalog.get_top_rated_books(limit)
        lines = [f"Getting Top {limit} Rated Books:"]
        if not books:
            lines.append("No books available to rate.")
        lines.extend(f'- "{b.title}" ({b.rating}/5) by {b.author}' for b in books)
        return "\n".join(lines)

    def _most_popular(self, args: List[str]) -> str:
        limit = _parse_limit(args)
        books = self.catalog.get_most_popular_books(limit)
        lines = [f"Getting Top {limit} Most Popular Books:"]
        if not books:
            lines.append("No books available to track popularity.")
        lines.extend(f'- "{b.title}" (Borrowed {b.borrow_count} times) by {b.author}' for b in books)
        return "\n".join(lines)

    def _check_overdue_users(self, args: List[str]) -> str:
        records = self.catalog.check_overdue_users()
        lines = ["--- Checking for Overdue Books ---"]
        if not records:
            lines.append("No overdue books found.")
        for record in records:
            lines.append(
                f'- User "{record.user.name}" has "{record.book.title}" overdue by {record.days_overdue} day(s).'
            )
        return "\n".join(lines)

    def _recommend_books(self, args: List[str]) -> str:
        if not args:
            raise UsageError
        user_name = " ".join(args)
        books = self.catalog.recommend_books(user_name)
        lines = [f'--- Recommending Books for "{user_name}" ---']
        if not books:
            lines.append("No recommendations available.")
        lines.extend(
            f'- "{b.title}" by {b.author} (Genre: {b.genre}, Rating: {b.rating}/5)' for b in books
        )
        return "\n".join(lines)

    def _remove_book(self, args: List[str]) -> str:
        if len(args) != 1:
            raise UsageError
        book = self.catalog.remove_book(args[0])
        return f'Removed book: "{book.title}".'

    def _print_user_summary(self, args: List[str]) -> str:
        if not args:
            raise UsageError
        summary = self.catalog.get_user_summary(" ".join(args))
        lines = [
            f"--- User Summary for {summary.user.name} ---",
            f"Total Penalty Points: {summary.penalty_points}",
        ]
        if not summary.loans:
            lines.append("Currently Borrowed Books: None.")
            return "\n".join(lines)
        lines.append("Currently Borrowed Books:")
        for loan in summary.loans:
            line = f'- "{loan.book.title}" by {loan.book.author} (Due: {format_date(loan.entry.due_date)})'
            if loan.is_overdue:
                line += f" (OVERDUE by {loan.days_overdue} days)"
            lines.append(line)
        return "\n".join(lines)

    def _list_all_books(self, args: List[str]) -> str:
        books = self.catalog.list_all_books()
        if not books:
            return "--- All Books in Library ---\nThe library is empty."
        return "\n".join(["--- All Books in Library ---"] + [format_book(b) for b in books])

    def _list_all_users(self, args: List[str]) -> str:
        users = self.catalog.list_all_users()
        lines = ["--- All Users in Library System ---"]
        if not users:
            lines.append("No users registered in the system.")
        lines.extend(f"ID: {u.id}, Name: {u.name}, Penalty Points: {u.penalty_points}" for u in users)
        return "\n".join(lines)

    def _exit(self, args: List[str]) -> str:
        self.running = False
        return "Exiting virtual library. Goodbye!"
