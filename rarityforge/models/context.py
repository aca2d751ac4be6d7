from dataclasses import dataclass, field
from typing import Any

from rarityforge.config import Settings
from rarityforge.models.catalog import Catalog, CatalogItem


@dataclass
class BuildContext:
    """
    Per-build state.

    Created once per build invocation and discarded afterwards, so nothing
    fetched or computed leaks into the next build.

    Attributes:
        settings: Effective settings for this build
        collection_id: Identifier the artifact is written under
        catalog: The loaded item list
        attributes: Raw attribute lists keyed by item index
        degraded: Indices whose attribute document could not be fetched
    """

    settings: Settings
    collection_id: str
    catalog: Catalog
    attributes: dict[int, list[Any]] = field(default_factory=dict)
    degraded: set[int] = field(default_factory=set)

    @property
    def total(self) -> int:
        """Collection size."""
        return self.catalog.total

    def attributes_in_index_order(self) -> list[list[Any]]:
        """Attribute lists in canonical (ascending index) order."""
        return [self.attributes.get(item.index, []) for item in self.sorted_items()]

    def sorted_items(self) -> list[CatalogItem]:
        """Catalog items in ascending index order."""
        return sorted(self.catalog.items, key=lambda item: item.index)
