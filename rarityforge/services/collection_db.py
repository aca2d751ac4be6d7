"""
Collection database reader.

Loads built artifacts for read-only lookups. Parsed artifacts are cached
per file modification time, so a rebuilt artifact is picked up on the next
lookup without re-parsing an unchanged one.
"""

import json
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from rarityforge.models.collection_db import CollectionDB
from rarityforge.services.assembler import artifact_path


class CollectionNotFoundError(FileNotFoundError):
    """Raised when no artifact exists for a collection."""

    pass


def _not_found(path: Path) -> CollectionNotFoundError:
    return CollectionNotFoundError(
        f"Collection database not found at {path}. "
        "Run `python -m rarityforge.jobs.build_collection_db` first."
    )


def load_collection_db(path: Path) -> CollectionDB:
    """
    Load a collection database from file.

    Args:
        path: Artifact JSON file

    Returns:
        CollectionDB with lookup indices available

    Raises:
        CollectionNotFoundError: If the file does not exist
        ValueError: If the file is not a valid artifact
    """
    if not path.exists():
        raise _not_found(path)

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        return CollectionDB.model_validate(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Collection database at {path} is corrupted: {e}") from e
    except ValidationError as e:
        raise ValueError(f"Collection database at {path} is not a valid artifact: {e}") from e


@lru_cache(maxsize=8)
def load_collection_db_cached(path: Path, mtime_ns: int) -> CollectionDB:
    """
    Cached load_collection_db.

    mtime_ns is part of the cache key only; a rewritten file gets a new
    key. Failed loads are not cached.
    """
    return load_collection_db(path)


def get_collection_db(output_dir: Path, collection_id: str) -> CollectionDB:
    """
    Get the artifact written for collection_id under output_dir.

    The returned database is shared between callers and must not be mutated.

    Raises:
        CollectionNotFoundError: If no artifact exists
        ValueError: If the artifact is not valid
    """
    path = artifact_path(output_dir, collection_id)
    try:
        mtime_ns = path.stat().st_mtime_ns
    except FileNotFoundError as e:
        raise _not_found(path) from e
    return load_collection_db_cached(path, mtime_ns)
