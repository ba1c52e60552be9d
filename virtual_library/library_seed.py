"""Initial data for a catalog.

A fresh catalog can be filled with the built-in demo collection or from a
JSON seed file of the form::

    {
      "books": [{"id": "B001", "title": "...", "author": "...", "genre": "...",
                 "rating": 4.5, "publication_year": 2005}],
      "users": [{"id": "U001", "name": "John Doe"}]
    }

Seed files are only ever read; the catalog itself is not persisted.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import structlog

from library_catalog import LibraryCatalog
from library_errors import LibraryError, SeedError


logger = structlog.get_logger(__name__)


DEMO_BOOKS: List[Dict[str, Any]] = [
    {"id": "B001", "title": "The Great Adventure", "author": "Alice Wonderland", "genre": "Fantasy", "rating": 4.5, "publication_year": 2005},
    {"id": "B002", "title": "Code Master", "author": "Bob Builder", "genre": "Technology", "rating": 4.8, "publication_year": 2020},
    {"id": "B003", "title": "Mystery of the Old House", "author": "Charlie Chaplin", "genre": "Mystery", "rating": 3.9, "publication_year": 1998},
    {"id": "B004", "title": "Galactic Odyssey", "author": "Alice Wonderland", "genre": "Sci-Fi", "rating": 4.7, "publication_year": 2015},
    {"id": "B005", "title": "The Silent Witness", "author": "David Detective", "genre": "Mystery", "rating": 4.2, "publication_year": 2010},
    {"id": "B006", "title": "Historical Echoes", "author": "Eve Historian", "genre": "History", "rating": 4.1, "publication_year": 2001},
    {"id": "B007", "title": "Fantasy Realm", "author": "Alice Wonderland", "genre": "Fantasy", "rating": 4.6, "publication_year": 2008},
    {"id": "B008", "title": "AI Revolution", "author": "Bob Builder", "genre": "Technology", "rating": 4.9, "publication_year": 2023},
]

DEMO_USERS: List[Dict[str, str]] = [
    {"id": "U001", "name": "John Doe"},
    {"id": "U002", "name": "Jane Smith"},
    {"id": "U003", "name": "Peter Jones"},
]


def load_demo_data(catalog: LibraryCatalog) -> LibraryCatalog:
    catalog.load(DEMO_BOOKS, DEMO_USERS)
    logger.debug("demo data loaded", books=len(DEMO_BOOKS), users=len(DEMO_USERS))
    return catalog


def _load_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as exc:
        raise SeedError(f"Cannot read seed file {path}: {exc.strerror}", details={"path": str(path)}) from exc
    except json.JSONDecodeError as exc:
        raise SeedError(f"Seed file {path} is not valid JSON: {exc.msg}", details={"path": str(path)}) from exc


def load_seed_file(catalog: LibraryCatalog, path: Union[str, Path]) -> LibraryCatalog:
    """Add the books and users listed in a JSON seed file to ``catalog``."""
    path = Path(path)
    raw = _load_json(path)
    if not isinstance(raw, dict):
        raise SeedError(f"Seed file {path} must contain a JSON object", details={"path": str(path)})
    books = raw.get("books", [])
    users = raw.get("users", [])
    if not isinstance(books, list) or not isinstance(users, list):
        raise SeedError(f"'books' and 'users' in {path} must be lists", details={"path": str(path)})
    if not all(isinstance(item, dict) for item in books + users):
        raise SeedError(f"Every record in {path} must be a JSON object", details={"path": str(path)})
    try:
        catalog.load(books, users)
    except LibraryError as exc:
        raise SeedError(f"Bad record in {path}: {exc.message}", details={"path": str(path), "cause": exc.code}) from exc
    logger.info("seed file loaded", path=str(path), books=len(books), users=len(users))
    return catalog
