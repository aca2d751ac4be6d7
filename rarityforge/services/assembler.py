"""
Collection database assembly.

Merges scored, ranked items with the trait table and statistics into one
artifact and writes it as a single JSON file. Pure assembly: no network,
no concurrency. The only failure mode is the final write, which is fatal.
"""

import logging
import os
import tempfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rarityforge.models.catalog import CatalogItem
from rarityforge.models.collection_db import (
    CollectionDB,
    DBItem,
    OverallStats,
    build_lookup_indices,
)
from rarityforge.models.failure import ArtifactWriteError
from rarityforge.rarity.frequency import TraitFrequencyTable

logger = logging.getLogger(__name__)


def assemble_collection_db(
    collection_id: str,
    items: Sequence[CatalogItem],
    attributes: dict[int, list[Any]],
    scores: Sequence[float],
    ranks: Sequence[int],
    traits: TraitFrequencyTable,
    trait_avg: dict[str, float],
    overall: OverallStats,
    generated_at: datetime | None = None,
) -> CollectionDB:
    """
    Build the collection database.

    Args:
        collection_id: Identifier embedded in the artifact
        items: Catalog items; scores and ranks are aligned with this order
        attributes: Hydrated attribute lists by item index
        scores: Score per item
        ranks: Rank per item
        traits: Frequency table
        trait_avg: Mean per-value score by trait type
        overall: Collection statistics
        generated_at: Generation timestamp; defaults to now (UTC)

    Returns:
        CollectionDB with items in ascending index order and lookup indices
        pointing into that order.
    """
    if not (len(items) == len(scores) == len(ranks)):
        raise ValueError(
            f"Misaligned inputs: {len(items)} items, {len(scores)} scores, {len(ranks)} ranks"
        )

    db_items = [
        DBItem(
            index=item.index,
            name=item.name,
            image=item.image,
            metadata_uri=item.metadata_uri,
            attributes=attributes.get(item.index, []),
            minted=item.minted,
            score=score,
            rank=rank,
        )
        for item, score, rank in zip(items, scores, ranks, strict=True)
    ]
    # Storage order is index order, not rank order
    db_items.sort(key=lambda it: it.index)

    indices = build_lookup_indices(db_items)
    for index_name, key in indices.duplicate_keys:
        logger.warning("Duplicate %s key %r; keeping first occurrence", index_name, key)

    return CollectionDB(
        collection_id=collection_id,
        generated_at=generated_at or datetime.now(UTC),
        total=len(db_items),
        overall=overall,
        traits=traits,
        trait_avg=trait_avg,
        items=db_items,
        by_metadata_uri=indices.by_metadata_uri,
        by_name=indices.by_name,
    )


def artifact_path(output_dir: Path, collection_id: str) -> Path:
    """Where the artifact for a collection is stored."""
    return output_dir / f"{collection_id}.json"


def serialize_collection_db(db: CollectionDB) -> str:
    """Compact JSON form of the artifact."""
    return db.model_dump_json(by_alias=True)


def write_collection_db(db: CollectionDB, output_dir: Path) -> Path:
    """
    Write the artifact to <output_dir>/<collection_id>.json.

    The file is written to a temporary sibling and moved into place, so a
    failed write never leaves a truncated artifact behind.

    Returns:
        Path of the written artifact

    Raises:
        ArtifactWriteError: If the artifact cannot be written
    """
    path = artifact_path(output_dir, db.collection_id)
    payload = serialize_collection_db(db)

    tmp_name: str | None = None
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=output_dir, prefix=f".{db.collection_id}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ArtifactWriteError(path, len(db.items), e) from e

    logger.info("Wrote %s (%.2f MB)", path, len(payload.encode("utf-8")) / 1024 / 1024)
    return path
