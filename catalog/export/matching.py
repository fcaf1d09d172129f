"""Filter evaluation: decides whether a book belongs to a filter's result."""

from collections.abc import Callable

from catalog.models.book import Book
from catalog.models.filter import BookFilter

RubricResolver = Callable[[str], int | None]


def matches_query(book: Book, query: str) -> bool:
    """Case-insensitive substring match on title, author and description."""
    if not query:
        return True
    needle = query.casefold()
    fields = (book.name, book.author, book.description)
    return any(needle in (field or "").casefold() for field in fields)


def matches_rubric(book: Book, rubric_id: int | None) -> bool:
    return rubric_id is not None and book.rubric_id == rubric_id


def matches(book: Book, book_filter: BookFilter, resolve_rubric: RubricResolver) -> bool:
    """Check a book against every predicate of a filter.

    Args:
        book: Candidate book.
        book_filter: The query. An empty ``query`` or ``rubric_synonym``
            matches every book; ``is_busy`` must be equal.
        resolve_rubric: Maps a rubric synonym to a rubric id. An unknown
            synonym (None) matches no book.

    Returns:
        True if the text, rubric and busy predicates all hold.
    """
    if book.is_busy != book_filter.is_busy:
        return False
    if not matches_query(book, book_filter.query):
        return False
    if book_filter.rubric_synonym:
        return matches_rubric(book, resolve_rubric(book_filter.rubric_synonym))
    return True


def filter_books(
    books: list[Book], book_filter: BookFilter, resolve_rubric: RubricResolver
) -> list[Book]:
    """Return the books that match, resolving the rubric synonym once."""
    if book_filter.rubric_synonym:
        rubric_id = resolve_rubric(book_filter.rubric_synonym)
        return [book for book in books if matches(book, book_filter, lambda _: rubric_id)]
    return [book for book in books if matches(book, book_filter, resolve_rubric)]
