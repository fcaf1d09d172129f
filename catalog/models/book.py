"""Book data model."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class Book(BaseModel):
    """A catalog item.

    ``id``, ``added_order`` and ``created_at`` are assigned by the store
    on the first save and preserved by later updates.
    """

    id: int | None = None
    name: str
    author: str = ""
    description: str = ""
    rubric_id: int | None = None
    image_id: int
    price: Decimal = Field(default=Decimal("0"), ge=0)
    is_busy: bool = False
    added_order: int = 0
    created_at: datetime | None = None
