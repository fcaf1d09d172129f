"""Book query filter model."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from catalog.errors import InvalidFilter


class BookOrder(str, Enum):
    """Sort modes for filtered books."""

    BY_LAST_ADDING = "ByLastAdding"
    BY_TITLE = "ByTitle"
    BY_PRICE_ASCENDING = "ByPriceAscending"
    BY_PRICE_DESCENDING = "ByPriceDescending"


class BookFilter(BaseModel):
    """An immutable query over the catalog.

    ``is_busy`` defaults to False, so a default filter selects only
    available books. ``limit=None`` means no cap.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    rubric_synonym: str = ""
    is_busy: bool = False
    limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)
    order: BookOrder = BookOrder.BY_LAST_ADDING

    @classmethod
    def build(cls, **params: Any) -> "BookFilter":
        """Create a filter, raising InvalidFilter on bad parameters."""
        try:
            return cls(**params)
        except ValidationError as exc:
            raise InvalidFilter(_describe(exc)) from exc


def ensure_valid(book_filter: BookFilter) -> BookFilter:
    """Re-validate a filter that may have bypassed construction checks.

    Args:
        book_filter: Filter to check, possibly built with ``model_construct``.

    Returns:
        A validated filter.

    Raises:
        InvalidFilter: If any field is out of range or malformed.
    """
    if not isinstance(book_filter, BookFilter):
        raise InvalidFilter(f"Expected BookFilter, got {type(book_filter).__name__}")
    try:
        return BookFilter.model_validate(dict(book_filter.__dict__))
    except ValidationError as exc:
        raise InvalidFilter(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "filter"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
