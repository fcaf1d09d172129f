"""Rubric data model."""

from pydantic import BaseModel, Field


class Rubric(BaseModel):
    """A book category.

    Each synonym is an alternate label resolving to this rubric. The
    rubric's own name always resolves too.
    """

    id: int | None = None
    name: str
    synonyms: list[str] = Field(default_factory=list)

    def all_labels(self) -> list[str]:
        """Return the name followed by the synonyms, without duplicates."""
        labels: list[str] = []
        seen: set[str] = set()
        for label in [self.name, *self.synonyms]:
            key = label.strip().casefold()
            if key and key not in seen:
                seen.add(key)
                labels.append(label.strip())
        return labels
