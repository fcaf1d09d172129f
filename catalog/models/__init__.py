"""Data models for the book catalog."""

from catalog.models.book import Book
from catalog.models.filter import BookFilter, BookOrder, ensure_valid
from catalog.models.image import Image
from catalog.models.rubric import Rubric

__all__ = [
    "Book",
    "BookFilter",
    "BookOrder",
    "Image",
    "Rubric",
    "ensure_valid",
]
