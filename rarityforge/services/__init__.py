"""
RarityForge services.

Network hydration, catalog input, and artifact assembly and reading.
"""

from rarityforge.services.assembler import (
    artifact_path,
    assemble_collection_db,
    serialize_collection_db,
    write_collection_db,
)
from rarityforge.services.attribute_fetcher import (
    FetchReport,
    create_client,
    extract_attributes,
    fetch_attributes_with_retry,
    fetch_missing_attributes,
    retry_policy_from_settings,
)
from rarityforge.services.catalog_loader import load_catalog, parse_catalog
from rarityforge.services.collection_db import (
    CollectionNotFoundError,
    get_collection_db,
    load_collection_db,
    load_collection_db_cached,
)
from rarityforge.services.retry import RetryPolicy

__all__ = [
    "CollectionNotFoundError",
    "FetchReport",
    "RetryPolicy",
    "artifact_path",
    "assemble_collection_db",
    "create_client",
    "extract_attributes",
    "fetch_attributes_with_retry",
    "fetch_missing_attributes",
    "get_collection_db",
    "load_catalog",
    "load_collection_db",
    "load_collection_db_cached",
    "parse_catalog",
    "retry_policy_from_settings",
    "serialize_collection_db",
    "write_collection_db",
]
