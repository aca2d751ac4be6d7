from rarityforge.models.catalog import Catalog, CatalogItem
from rarityforge.models.collection_db import (
    CollectionDB,
    DBItem,
    ExtremeItem,
    LookupIndices,
    OverallStats,
    build_lookup_indices,
)
from rarityforge.models.context import BuildContext
from rarityforge.models.failure import (
    ArtifactWriteError,
    ConfigurationError,
    FailureKind,
    KnownError,
)

__all__ = [
    "ArtifactWriteError",
    "BuildContext",
    "Catalog",
    "CatalogItem",
    "CollectionDB",
    "ConfigurationError",
    "DBItem",
    "ExtremeItem",
    "FailureKind",
    "KnownError",
    "LookupIndices",
    "OverallStats",
    "build_lookup_indices",
]
