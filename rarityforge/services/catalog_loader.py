"""
Catalog loading.

Reads the item list of a collection from disk. Two layouts are accepted:

Catalog file:
    {"collectionMint": "...", "total": N, "items": [{"index": "0", "name": ...,
     "image": ..., "metadata": ..., "attributes": [...], "minted": true}, ...]}

Upload cache:
    {"program": {"collectionMint": "..."}, "items": {"-1": {...},
     "0": {"name": ..., "image_link": ..., "metadata_link": ...}, ...}}
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rarityforge.models.catalog import Catalog, CatalogItem
from rarityforge.models.failure import ConfigurationError, FailureKind

logger = logging.getLogger(__name__)

# Upload caches reserve this key for the collection NFT itself
_COLLECTION_ROW_KEY = "-1"


def load_catalog(path: Path) -> Catalog:
    """
    Load a catalog from a catalog file or an upload cache.

    Args:
        path: JSON file to read

    Returns:
        Validated Catalog

    Raises:
        ConfigurationError: If the file is missing, not JSON, or has invalid items
    """
    if not path.exists():
        raise ConfigurationError(
            f"Catalog not found at {path}",
            kind=FailureKind.NOT_FOUND,
            suggestion="Pass --catalog with the path to a catalog or cache file.",
        )

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Catalog at {path} is unreadable or corrupted",
            detail=str(e),
            kind=FailureKind.INVALID_INPUT,
        ) from e

    return parse_catalog(raw, source=str(path))


def parse_catalog(raw: Any, source: str = "<memory>") -> Catalog:
    """
    Validate a decoded catalog document.

    Raises:
        ConfigurationError: If the document is not a catalog or cache, or if
            item indices repeat
    """
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Catalog {source} must be a JSON object",
            kind=FailureKind.INVALID_INPUT,
        )

    try:
        if isinstance(raw.get("items"), dict):
            catalog = _catalog_from_cache(raw)
        else:
            catalog = Catalog.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Catalog {source} contains invalid items",
            detail=str(e),
            kind=FailureKind.INVALID_INPUT,
        ) from e

    _check_unique_indices(catalog, source)
    logger.info("Loaded catalog %s: %d items", source, catalog.total)
    return catalog


def _catalog_from_cache(raw: dict[str, Any]) -> Catalog:
    program = raw.get("program") if isinstance(raw.get("program"), dict) else {}
    items: list[CatalogItem] = []

    for key, entry in raw["items"].items():
        if key == _COLLECTION_ROW_KEY or not isinstance(entry, dict):
            continue
        metadata_uri = entry.get("metadata_link")
        if not metadata_uri:
            continue
        items.append(
            CatalogItem.model_validate(
                {
                    "index": key,
                    "name": entry.get("name") or f"#{key}",
                    "image": entry.get("image_link"),
                    "metadata": metadata_uri,
                }
            )
        )

    return Catalog(collection_id=program.get("collectionMint"), items=items)


def _check_unique_indices(catalog: Catalog, source: str) -> None:
    seen: set[int] = set()
    for item in catalog.items:
        if item.index in seen:
            raise ConfigurationError(
                f"Catalog {source} repeats item index {item.index}",
                kind=FailureKind.INVALID_INPUT,
            )
        seen.add(item.index)
