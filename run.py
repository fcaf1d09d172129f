"""Entry point: export the catalog's available books as XML."""

import asyncio
import logging
import sys
from pathlib import Path

from catalog.config import load_config
from catalog.models.filter import BookFilter
from catalog.services.book_service import BookService
from catalog.storage.book_store import SqliteBookStore
from catalog.storage.database import initialize_database


def main() -> None:
    """Initialize the database and write an export with the default filter."""
    config = load_config()
    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize SQLite database
    initialize_database(config.storage.sqlite_path)

    service = BookService(SqliteBookStore(config.storage.sqlite_path))
    book_filter = BookFilter.build(limit=config.export.default_limit)
    xml_text = asyncio.run(service.export_books_to_xml(book_filter))

    if config.export.output_path:
        output = Path(config.export.output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(xml_text, encoding="utf-8")
        logging.getLogger(__name__).info("Export written to %s", output)
    else:
        sys.stdout.write(xml_text)


if __name__ == "__main__":
    main()
