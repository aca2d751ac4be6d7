"""
Collection database artifact.

The artifact is the enriched, indexed output of a build. Consumers look
items up by position, by item index, by metadata URI, or by display name.

INVARIANTS:
- items are stored in ascending index order
- byMetadataUri and byName map non-empty keys to positions in items
- len(items) == total
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from rarityforge.config import COLLECTION_DB_VERSION
from rarityforge.models.catalog import CatalogItem

# Display names such as "Martian #0042" carry a 1-based collection number
_NAME_NUMBER_PATTERN = re.compile(r"#(\d+)$")


class DBItem(CatalogItem):
    """A catalog item augmented with its rarity score and rank."""

    attributes: list[Any] = Field(default_factory=list)  # type: ignore[assignment]
    score: float
    rank: int = Field(..., ge=1)


class ExtremeItem(BaseModel):
    """Identifies the item that attained an observed score extreme."""

    model_config = ConfigDict(populate_by_name=True)

    index: int
    name: str
    metadata_uri: str | None = Field(default=None, alias="metadataUri")


class OverallStats(BaseModel):
    """Collection-wide observed and theoretical score statistics."""

    model_config = ConfigDict(populate_by_name=True)

    avg_observed: float = Field(default=0.0, alias="avgObserved")
    min_observed: float = Field(default=0.0, alias="minObserved")
    max_observed: float = Field(default=0.0, alias="maxObserved")
    min_item: ExtremeItem | None = Field(default=None, alias="minItem")
    max_item: ExtremeItem | None = Field(default=None, alias="maxItem")
    avg_theoretical: float = Field(default=0.0, alias="avgTheoretical")
    min_theoretical: float = Field(default=0.0, alias="minTheoretical")
    max_theoretical: float = Field(default=0.0, alias="maxTheoretical")


@dataclass
class LookupIndices:
    """Secondary indices over the stored item array."""

    by_metadata_uri: dict[str, int] = field(default_factory=dict)
    by_name: dict[str, int] = field(default_factory=dict)
    duplicate_keys: list[tuple[str, str]] = field(default_factory=list)  # (index name, key)


def build_lookup_indices(items: list[DBItem]) -> LookupIndices:
    """
    Build position indices over items, in stored order.

    Empty keys are never indexed. When a key repeats, the first position
    wins and the repeat is reported in duplicate_keys.
    """
    indices = LookupIndices()
    for position, item in enumerate(items):
        if item.metadata_uri:
            if item.metadata_uri in indices.by_metadata_uri:
                indices.duplicate_keys.append(("byMetadataUri", item.metadata_uri))
            else:
                indices.by_metadata_uri[item.metadata_uri] = position
        if item.name:
            if item.name in indices.by_name:
                indices.duplicate_keys.append(("byName", item.name))
            else:
                indices.by_name[item.name] = position
    return indices


class CollectionDB(BaseModel):
    """The assembled, queryable collection database."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = COLLECTION_DB_VERSION
    collection_id: str = Field(..., alias="collectionId")
    generated_at: datetime = Field(..., alias="generatedAt")
    total: int = 0
    overall: OverallStats = Field(default_factory=OverallStats)
    traits: dict[str, dict[str, int]] = Field(default_factory=dict)
    trait_avg: dict[str, float] = Field(default_factory=dict, alias="traitAvg")
    items: list[DBItem] = Field(default_factory=list)
    by_metadata_uri: dict[str, int] = Field(default_factory=dict, alias="byMetadataUri")
    by_name: dict[str, int] = Field(default_factory=dict, alias="byName")

    _position_by_index: dict[int, int] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._position_by_index = {item.index: pos for pos, item in enumerate(self.items)}
        # Artifacts written without indices get them rebuilt on load
        if self.items and not self.by_metadata_uri and not self.by_name:
            indices = build_lookup_indices(self.items)
            self.by_metadata_uri = indices.by_metadata_uri
            self.by_name = indices.by_name

    def get_item_by_position(self, position: int) -> DBItem | None:
        """Get the item stored at a position of the items array."""
        if 0 <= position < len(self.items):
            return self.items[position]
        return None

    def get_item_by_index(self, index: int) -> DBItem | None:
        """Get an item by its collection index."""
        position = self._position_by_index.get(index)
        return self.items[position] if position is not None else None

    def get_item_by_metadata_uri(self, metadata_uri: str) -> DBItem | None:
        """Get an item by the URI of its attribute document."""
        position = self.by_metadata_uri.get(metadata_uri)
        return self.items[position] if position is not None else None

    def get_item_by_name(self, name: str) -> DBItem | None:
        """
        Get an item by display name.

        Falls back to the trailing "#NNNN" collection number in the name,
        which is 1-based while item indices are 0-based.
        """
        position = self.by_name.get(name)
        if position is not None:
            return self.items[position]

        match = _NAME_NUMBER_PATTERN.search(name)
        if not match:
            return None
        return self.get_item_by_index(int(match.group(1)) - 1)

    def get_item_by_uri_or_name(
        self,
        metadata_uri: str | None = None,
        name: str | None = None,
    ) -> DBItem | None:
        """Get an item by metadata URI, falling back to an exact name match."""
        if metadata_uri and metadata_uri in self.by_metadata_uri:
            return self.items[self.by_metadata_uri[metadata_uri]]
        if name and name in self.by_name:
            return self.items[self.by_name[name]]
        return None
