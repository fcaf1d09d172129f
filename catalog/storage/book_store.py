"""Book store: persistence of books, their search index and rubrics."""

import logging
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from catalog.errors import BookNotFound, ImageNotFound, StoreUnavailable
from catalog.models.book import Book
from catalog.models.rubric import Rubric
from catalog.storage.database import get_connection

logger = logging.getLogger(__name__)


class BookStore(ABC):
    """Owns book records keyed by id.

    Every method returns fresh model instances, so callers only ever
    share ids with the store.
    """

    @abstractmethod
    def save(self, book: Book) -> Book:
        """Insert a new book or update an existing one in place."""

    @abstractmethod
    def get(self, book_id: int) -> Book:
        """Return the book stored under ``book_id``."""

    @abstractmethod
    def select_all(self) -> list[Book]:
        """Return every stored book."""

    @abstractmethod
    def select_candidates(self, query: str) -> list[Book]:
        """Return books whose index entry contains ``query``."""

    @abstractmethod
    def delete(self, book_id: int) -> None:
        """Delete the book record only."""

    @abstractmethod
    def delete_index_entry(self, book_id: int) -> None:
        """Delete the book's search index entry only."""

    @abstractmethod
    def delete_with_index(self, book_id: int) -> None:
        """Delete the book record and its index entry atomically."""

    @abstractmethod
    def save_rubric(self, rubric: Rubric) -> Rubric:
        """Store a rubric together with its synonyms."""

    @abstractmethod
    def resolve_rubric(self, synonym: str) -> int | None:
        """Map a rubric synonym to its rubric id, or None if unknown."""


def build_search_text(book: Book) -> str:
    """Build the casefolded text indexed for substring search."""
    return "\n".join([book.name, book.author, book.description]).casefold()


class SqliteBookStore(BookStore):
    """BookStore backed by the SQLite schema from ``initialize_database``.

    A connection is opened per operation, so one store may be used from
    several threads at once.

    Args:
        db_path: Path to an initialized SQLite database.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction.

        Raises:
            StoreUnavailable: On any sqlite3 error.
        """
        try:
            conn = get_connection(self.db_path)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Cannot open book store {self.db_path}: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            logger.error("Book store operation failed on %s: %s", self.db_path, exc)
            raise StoreUnavailable(str(exc)) from exc
        finally:
            conn.close()

    # ── Books ───────────────────────────────────────────────────────────────

    def save(self, book: Book) -> Book:
        """Insert or update a book and rewrite its index entry.

        A book without an id, or with an id that is not stored yet, is
        inserted and receives the next ``added_order``. An existing book
        keeps its ``added_order`` and ``created_at``. The write lock is
        taken before ``added_order`` is read, so concurrent saves never
        share a value.

        Args:
            book: The book to persist.

        Returns:
            The stored book with id, added_order and created_at set.

        Raises:
            ImageNotFound: If ``book.image_id`` is not a stored image.
            StoreUnavailable: If the database cannot be written.
        """
        with self._session() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                book_id, added_order, created_at = self._write_book(conn, book)
            except sqlite3.IntegrityError as exc:
                # image_id is the only foreign key on books
                if "FOREIGN KEY" not in str(exc):
                    raise
                raise ImageNotFound(f"Image {book.image_id} does not exist") from exc

            conn.execute(
                "INSERT OR REPLACE INTO book_index (book_id, search_text) VALUES (?, ?)",
                (book_id, build_search_text(book)),
            )

        return book.model_copy(
            update={"id": book_id, "added_order": added_order, "created_at": created_at}
        )

    def _write_book(
        self, conn: sqlite3.Connection, book: Book
    ) -> tuple[int, int, datetime | None]:
        """Insert or update the ``books`` row inside an open transaction."""
        existing = None
        if book.id is not None:
            existing = conn.execute(
                "SELECT added_order, created_at FROM books WHERE id = ?",
                (book.id,),
            ).fetchone()

        if existing is None:
            added_order = conn.execute(
                "SELECT COALESCE(MAX(added_order), 0) + 1 FROM books"
            ).fetchone()[0]
            created_at = book.created_at or datetime.now()
            cursor = conn.execute(
                """
                INSERT INTO books (id, name, author, description, rubric_id,
                                   image_id, price, is_busy, added_order, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    book.id,
                    book.name,
                    book.author,
                    book.description,
                    book.rubric_id,
                    book.image_id,
                    str(book.price),
                    int(book.is_busy),
                    added_order,
                    created_at.isoformat(sep=" "),
                ),
            )
            book_id = cursor.lastrowid if book.id is None else book.id
            logger.debug("Inserted book %s (added_order=%s)", book_id, added_order)
        else:
            book_id = book.id
            added_order = existing["added_order"]
            created_at = _parse_timestamp(existing["created_at"])
            conn.execute(
                """
                UPDATE books
                   SET name = ?, author = ?, description = ?, rubric_id = ?,
                       image_id = ?, price = ?, is_busy = ?
                 WHERE id = ?
                """,
                (
                    book.name,
                    book.author,
                    book.description,
                    book.rubric_id,
                    book.image_id,
                    str(book.price),
                    int(book.is_busy),
                    book_id,
                ),
            )
            logger.debug("Updated book %s", book_id)

        return book_id, added_order, created_at

    def get(self, book_id: int) -> Book:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        if row is None:
            raise BookNotFound(f"Book {book_id} does not exist")
        return _row_to_book(row)

    def select_all(self) -> list[Book]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM books ORDER BY id").fetchall()
        return [_row_to_book(row) for row in rows]

    def select_candidates(self, query: str) -> list[Book]:
        """Return books whose indexed text contains ``query``.

        The comparison is case-insensitive. An empty query returns every
        book. Books without an index entry are never returned for a
        non-empty query.
        """
        if not query:
            return self.select_all()
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT b.* FROM books AS b
                  JOIN book_index AS i ON i.book_id = b.id
                 WHERE instr(i.search_text, ?) > 0
                 ORDER BY b.id
                """,
                (query.casefold(),),
            ).fetchall()
        return [_row_to_book(row) for row in rows]

    def delete(self, book_id: int) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
        logger.debug("Deleted book record %s", book_id)

    def delete_index_entry(self, book_id: int) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM book_index WHERE book_id = ?", (book_id,))
        logger.debug("Deleted index entry for book %s", book_id)

    def delete_with_index(self, book_id: int) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM book_index WHERE book_id = ?", (book_id,))
            conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
        logger.debug("Deleted book %s with its index entry", book_id)

    # ── Rubrics ─────────────────────────────────────────────────────────────

    def save_rubric(self, rubric: Rubric) -> Rubric:
        """Store a rubric and (re)assign its synonyms to it.

        A synonym already used by another rubric moves to this one.
        """
        labels = rubric.all_labels()
        with self._session() as conn:
            if rubric.id is None:
                cursor = conn.execute("INSERT INTO rubrics (name) VALUES (?)", (rubric.name,))
                rubric_id = cursor.lastrowid
            else:
                rubric_id = rubric.id
                conn.execute(
                    """
                    INSERT INTO rubrics (id, name) VALUES (?, ?)
                    ON CONFLICT(id) DO UPDATE SET name = excluded.name
                    """,
                    (rubric_id, rubric.name),
                )
            conn.execute("DELETE FROM rubric_synonyms WHERE rubric_id = ?", (rubric_id,))
            conn.executemany(
                "INSERT OR REPLACE INTO rubric_synonyms (synonym, rubric_id) VALUES (?, ?)",
                [(label.casefold(), rubric_id) for label in labels],
            )
        return rubric.model_copy(update={"id": rubric_id, "synonyms": labels[1:]})

    def resolve_rubric(self, synonym: str) -> int | None:
        key = synonym.strip().casefold()
        if not key:
            return None
        with self._session() as conn:
            row = conn.execute(
                "SELECT rubric_id FROM rubric_synonyms WHERE synonym = ?", (key,)
            ).fetchone()
        return row["rubric_id"] if row else None


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _row_to_book(row: sqlite3.Row) -> Book:
    return Book(
        id=row["id"],
        name=row["name"],
        author=row["author"],
        description=row["description"],
        rubric_id=row["rubric_id"],
        image_id=row["image_id"],
        price=Decimal(row["price"]),
        is_busy=bool(row["is_busy"]),
        added_order=row["added_order"],
        created_at=_parse_timestamp(row["created_at"]),
    )
