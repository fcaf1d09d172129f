"""Image data model."""

from pydantic import BaseModel


class Image(BaseModel):
    """Binary cover image referenced by books."""

    id: int | None = None
    data: bytes = b""
