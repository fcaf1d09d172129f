"""XML export of ordered books.

Document layout::

    <Books>
      <ExportTime>2024-05-01 12:30:00</ExportTime>
      <Book>
        <Title>...</Title>
        <Author>...</Author>
        <Description>...</Description>
        <RubricId>...</RubricId>
        <ImageId>...</ImageId>
        <Price>...</Price>
        <IsBusy>false</IsBusy>
      </Book>
    </Books>

Every ``Book`` carries all seven children; missing optional values are
written as empty elements.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from lxml import etree
from pydantic import BaseModel, Field

from catalog.errors import SerializationError
from catalog.models.book import Book

logger = logging.getLogger(__name__)

EXPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

BOOK_ELEMENTS: tuple[str, ...] = (
    "Title",
    "Author",
    "Description",
    "RubricId",
    "ImageId",
    "Price",
    "IsBusy",
)


class ExportDocument(BaseModel):
    """A parsed export: the header time and one field mapping per book."""

    export_time: datetime
    books: list[dict[str, str]] = Field(default_factory=list)


def format_export_time(export_time: datetime) -> str:
    """Format a timestamp as local wall-clock time with second precision."""
    if not isinstance(export_time, datetime):
        raise SerializationError(f"Export time must be a datetime, got {export_time!r}")
    return export_time.strftime(EXPORT_TIME_FORMAT)


def _invalid(book: Book, message: str) -> SerializationError:
    return SerializationError(f"Book {getattr(book, 'id', None)}: {message}")


def _text(book: Book, field: str, required: bool = False) -> str:
    value = getattr(book, field, None)
    if value is None and not required:
        return ""
    if not isinstance(value, str):
        raise _invalid(book, f"{field} must be text, got {value!r}")
    return value


def _integer(book: Book, field: str, required: bool = False) -> str:
    value = getattr(book, field, None)
    if value is None and not required:
        return ""
    if not isinstance(value, int) or isinstance(value, bool):
        raise _invalid(book, f"{field} must be an integer, got {value!r}")
    return str(value)


def _price(book: Book) -> str:
    value = getattr(book, "price", None)
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float)):
        raise _invalid(book, f"price must be a number, got {value!r}")
    try:
        price = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation as exc:
        raise _invalid(book, f"invalid price {value!r}") from exc
    if not price.is_finite() or price < 0:
        raise _invalid(book, f"invalid price {value!r}")
    return format(price, "f")


def _flag(book: Book) -> str:
    value = getattr(book, "is_busy", None)
    if not isinstance(value, bool):
        raise _invalid(book, f"is_busy must be a boolean, got {value!r}")
    return "true" if value else "false"


def book_values(book: Book) -> list[str]:
    """Return the element texts of a book, in ``BOOK_ELEMENTS`` order.

    Raises:
        SerializationError: If a field does not have an exportable value.
    """
    return [
        _text(book, "name", required=True),
        _text(book, "author"),
        _text(book, "description"),
        _integer(book, "rubric_id"),
        _integer(book, "image_id", required=True),
        _price(book),
        _flag(book),
    ]


def build_tree(ordered_books: Iterable[Book], export_time: datetime) -> etree._Element:
    """Build the ``Books`` element tree without serializing it."""
    root = etree.Element("Books")
    etree.SubElement(root, "ExportTime").text = format_export_time(export_time)

    for book in ordered_books:
        book_element = etree.SubElement(root, "Book")
        for tag, value in zip(BOOK_ELEMENTS, book_values(book)):
            child = etree.SubElement(book_element, tag)
            try:
                child.text = value
            except ValueError as exc:
                # lxml rejects control characters and NUL bytes
                raise _invalid(book, f"{tag} is not XML compatible") from exc
    return root


def render(ordered_books: Iterable[Book], export_time: datetime) -> str:
    """Serialize books into the export document.

    The whole tree is built before serialization, so a failure never
    yields a partial document.

    Args:
        ordered_books: Books in their final export order.
        export_time: Timestamp written to ``ExportTime``.

    Returns:
        The XML document as text, without an XML declaration.

    Raises:
        SerializationError: If any book cannot be exported.
    """
    root = build_tree(ordered_books, export_time)
    logger.debug("Rendering export with %d books", len(root) - 1)
    return etree.tostring(root, encoding="unicode", pretty_print=True)


def _element_text(element: etree._Element, tag: str) -> str:
    child = element.find(tag)
    if child is None:
        raise SerializationError(f"Book element is missing <{tag}>")
    return child.text or ""


def parse_export(xml_text: str) -> ExportDocument:
    """Read an export document back into an ExportDocument.

    Raises:
        SerializationError: If the text is not a well-formed export.
    """
    try:
        root = etree.fromstring(xml_text)
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise SerializationError(f"Export is not well-formed XML: {exc}") from exc

    if root.tag != "Books":
        raise SerializationError(f"Unexpected root element <{root.tag}>")
    time_element = root.find("ExportTime")
    if time_element is None or not time_element.text:
        raise SerializationError("Export is missing <ExportTime>")
    try:
        export_time = datetime.strptime(time_element.text, EXPORT_TIME_FORMAT)
    except ValueError as exc:
        raise SerializationError(f"Bad export time {time_element.text!r}") from exc

    books: list[dict[str, Any]] = [
        {tag: _element_text(element, tag) for tag in BOOK_ELEMENTS}
        for element in root.findall("Book")
    ]
    return ExportDocument(export_time=export_time, books=books)
