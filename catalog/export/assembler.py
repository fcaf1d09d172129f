"""Result assembly: ordering and pagination of matched books."""

from collections.abc import Callable, Iterable
from typing import Any

from catalog.models.book import Book
from catalog.models.filter import BookFilter, BookOrder

# Every key ends with the book id so equal primary keys sort deterministically.
SORT_KEYS: dict[BookOrder, Callable[[Book], Any]] = {
    BookOrder.BY_LAST_ADDING: lambda book: (-book.added_order, book.id or 0),
    BookOrder.BY_TITLE: lambda book: (book.name.casefold(), book.id or 0),
    BookOrder.BY_PRICE_ASCENDING: lambda book: (book.price, book.id or 0),
    BookOrder.BY_PRICE_DESCENDING: lambda book: (-book.price, book.id or 0),
}


def assemble(matched_books: Iterable[Book], book_filter: BookFilter) -> list[Book]:
    """Order matched books and apply offset and limit.

    Args:
        matched_books: Books that already satisfy the filter.
        book_filter: Supplies ``order``, ``offset`` and ``limit``.

    Returns:
        A list of at most ``limit`` books, empty when ``offset`` runs past
        the end.
    """
    ordered = sorted(matched_books, key=SORT_KEYS[book_filter.order])
    end = None if book_filter.limit is None else book_filter.offset + book_filter.limit
    return ordered[book_filter.offset:end]
