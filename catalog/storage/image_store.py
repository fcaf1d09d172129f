"""Image store: binary images referenced by books."""

import logging
import sqlite3
from pathlib import Path

from catalog.errors import StoreUnavailable
from catalog.models.image import Image
from catalog.storage.database import get_connection

logger = logging.getLogger(__name__)


class SqliteImageStore:
    """Stores images in the ``images`` table.

    Args:
        db_path: Path to an initialized SQLite database.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)

    def save(self, image: Image) -> Image:
        """Insert an image, or replace the data of an existing id.

        Returns:
            The stored image with its id assigned.
        """
        try:
            conn = get_connection(self.db_path)
            try:
                with conn:
                    if image.id is None:
                        cursor = conn.execute(
                            "INSERT INTO images (data) VALUES (?)", (image.data,)
                        )
                        image_id = cursor.lastrowid
                    else:
                        image_id = image.id
                        conn.execute(
                            """
                            INSERT INTO images (id, data) VALUES (?, ?)
                            ON CONFLICT(id) DO UPDATE SET data = excluded.data
                            """,
                            (image_id, image.data),
                        )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Cannot save image: {exc}") from exc

        logger.debug("Saved image %s (%d bytes)", image_id, len(image.data))
        return image.model_copy(update={"id": image_id})

    def get(self, image_id: int) -> Image | None:
        try:
            conn = get_connection(self.db_path)
            try:
                row = conn.execute(
                    "SELECT id, data FROM images WHERE id = ?", (image_id,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Cannot read image {image_id}: {exc}") from exc

        if row is None:
            return None
        return Image(id=row["id"], data=bytes(row["data"]))
