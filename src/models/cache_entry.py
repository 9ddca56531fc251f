"""Models for document cache content."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """Model representing cached content of one category.

    Attributes:
        category: Category name.
        raw_text: Concatenated text of all fetched sources in the category.
        condensed_text: Text derived from raw_text by the content extractor.
        document_count: Number of sources that returned any text.
    """

    model_config = ConfigDict(frozen=True)

    category: str
    raw_text: str = ""
    condensed_text: str = ""
    document_count: int = 0

    @property
    def loaded(self) -> bool:
        """Check if the category has any content."""
        return bool(self.raw_text)


class CacheSnapshot(BaseModel):
    """Immutable view of the whole document cache.

    A snapshot is replaced as a whole on refresh, so raw and condensed text
    of all categories always come from the same refresh cycle.
    """

    model_config = ConfigDict(frozen=True)

    entries: dict[str, CacheEntry] = Field(default_factory=dict)
    refreshed_at: Optional[datetime] = None

    @property
    def empty(self) -> bool:
        """Check if the snapshot was produced by any refresh cycle."""
        return self.refreshed_at is None


class SearchHit(BaseModel):
    """Segments of one category matching a search query."""

    category: str = Field(description="Category name", examples=["financial"])
    matches: list[str] = Field(
        description="Matching segments in document order",
        examples=[["Step 1: Find a niche\nStep 2: Validate demand"]],
    )
