"""Exceptions raised by the catalog."""


class CatalogError(Exception):
    """Base class for catalog failures."""


class StoreUnavailable(CatalogError):
    """The book store could not be read or written."""


class SerializationError(CatalogError):
    """A book could not be rendered into the XML export."""


class InvalidFilter(CatalogError, ValueError):
    """A book filter has a negative offset/limit or an unknown order."""


class ImageNotFound(CatalogError):
    """A book references an image that is not stored."""


class BookNotFound(CatalogError):
    """No book is stored under the requested id."""
