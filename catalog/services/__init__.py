"""Catalog services."""

from catalog.services.book_service import BookService

__all__ = ["BookService"]
