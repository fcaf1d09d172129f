"""SQLite-backed storage for books, rubrics and images."""

from catalog.storage.book_store import BookStore, SqliteBookStore
from catalog.storage.database import get_connection, initialize_database
from catalog.storage.image_store import SqliteImageStore

__all__ = [
    "BookStore",
    "SqliteBookStore",
    "SqliteImageStore",
    "get_connection",
    "initialize_database",
]
