"""Book service: saving, deleting and exporting catalog books."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

from catalog.export.assembler import assemble
from catalog.export.matching import filter_books
from catalog.export.xml_exporter import render
from catalog.models.book import Book
from catalog.models.filter import BookFilter, ensure_valid
from catalog.storage.book_store import BookStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BookService:
    """Front door to the catalog.

    Export runs store read, filtering, ordering and rendering in sequence
    for each call and keeps no state between calls, so concurrent exports
    need no coordination.

    Args:
        store: Book store collaborator.
        clock: Returns the local time written into ``ExportTime``.
    """

    def __init__(self, store: BookStore, clock: Callable[[], datetime] = datetime.now) -> None:
        self.store = store
        self.clock = clock

    def save_book(self, book: Book) -> Book:
        saved = self.store.save(book)
        logger.info("Saved book %s (%s)", saved.id, saved.name)
        return saved

    def get_book(self, book_id: int) -> Book:
        return self.store.get(book_id)

    def delete_book(self, book_id: int) -> None:
        """Remove a book and its index entry in one transaction."""
        self.store.delete_with_index(book_id)
        logger.info("Deleted book %s", book_id)

    async def select_books(
        self,
        book_filter: BookFilter | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[Book]:
        """Return the filtered, ordered and paginated books.

        Raises:
            InvalidFilter: Before the store is touched.
            StoreUnavailable: If the store cannot be read.
            asyncio.CancelledError: If ``cancel_event`` is set before the
                store read completes.
        """
        book_filter = ensure_valid(book_filter if book_filter is not None else BookFilter())
        _raise_if_cancelled(cancel_event)

        candidates, rubric_id = await _await_unless_cancelled(
            asyncio.to_thread(self._read, book_filter), cancel_event
        )
        _raise_if_cancelled(cancel_event)

        matched = filter_books(candidates, book_filter, lambda _synonym: rubric_id)
        books = assemble(matched, book_filter)
        logger.debug(
            "Filter matched %d of %d candidates, %d after pagination",
            len(matched),
            len(candidates),
            len(books),
        )
        return books

    async def export_books_to_xml(
        self,
        book_filter: BookFilter | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Export the books selected by a filter as an XML document.

        Args:
            book_filter: Query to run; defaults to ``BookFilter()``, i.e.
                every available book.
            cancel_event: Setting it aborts the export; no document is
                returned.

        Returns:
            The XML text described in ``catalog.export.xml_exporter``.

        Raises:
            InvalidFilter: If the filter is malformed.
            StoreUnavailable: If the store cannot be read.
            SerializationError: If a book cannot be rendered.
            asyncio.CancelledError: If the export was cancelled.
        """
        books = await self.select_books(book_filter, cancel_event)
        xml_text = render(books, self.clock())
        logger.info("Exported %d books to XML", len(books))
        return xml_text

    def _read(self, book_filter: BookFilter) -> tuple[list[Book], int | None]:
        candidates = self.store.select_candidates(book_filter.query)
        rubric_id = None
        if book_filter.rubric_synonym:
            rubric_id = self.store.resolve_rubric(book_filter.rubric_synonym)
            if rubric_id is None:
                logger.warning("Unknown rubric synonym %r", book_filter.rubric_synonym)
        return candidates, rubric_id


def _raise_if_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.warning("Export cancelled")
        raise asyncio.CancelledError()


async def _await_unless_cancelled(coro: Awaitable[T], cancel_event: asyncio.Event | None) -> T:
    """Await ``coro``, giving up as soon as ``cancel_event`` is set."""
    task = asyncio.ensure_future(coro)
    if cancel_event is None:
        return await task

    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task not in done:
        task.cancel()
        logger.warning("Export cancelled while reading the store")
        raise asyncio.CancelledError()
    return task.result()
