"""
Build a collection database.

Loads a catalog, hydrates missing attributes, computes the rarity model and
writes <out-dir>/<collection-id>.json. Runs as a one-shot batch.

Usage:
    python -m rarityforge.jobs.build_collection_db \
        --catalog ./public/collection/<COLLECTION>-catalog.json \
        --out-dir ./public/db \
        --concurrency 24
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from rarityforge.config import Settings, settings
from rarityforge.models.catalog import Catalog
from rarityforge.models.collection_db import CollectionDB
from rarityforge.models.context import BuildContext
from rarityforge.models.failure import ConfigurationError, FailureKind, KnownError
from rarityforge.rarity.frequency import build_trait_table
from rarityforge.rarity.ranker import assign_ranks
from rarityforge.rarity.scoring import score_items
from rarityforge.rarity.stats import compute_overall, compute_trait_averages
from rarityforge.services.assembler import assemble_collection_db, write_collection_db
from rarityforge.services.attribute_fetcher import (
    create_client,
    fetch_missing_attributes,
    retry_policy_from_settings,
)
from rarityforge.services.catalog_loader import load_catalog

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of a successful build."""

    output_path: Path
    total: int
    degraded: int
    db: CollectionDB


def create_build_context(build_settings: Settings, catalog: Catalog) -> BuildContext:
    """
    Validate configuration and start a fresh build context.

    Raises:
        ConfigurationError: If no collection id is available or concurrency is invalid
    """
    collection_id = build_settings.collection_id or catalog.collection_id
    if not collection_id:
        raise ConfigurationError(
            "Collection id missing",
            suggestion="Pass --collection-id or include collectionMint in the catalog.",
        )
    if build_settings.concurrency < 1:
        raise ConfigurationError(
            f"Concurrency must be at least 1, got {build_settings.concurrency}",
            kind=FailureKind.INVALID_INPUT,
        )
    if build_settings.max_attempts < 1:
        raise ConfigurationError(
            f"Max attempts must be at least 1, got {build_settings.max_attempts}",
            kind=FailureKind.INVALID_INPUT,
        )
    return BuildContext(settings=build_settings, collection_id=collection_id, catalog=catalog)


async def hydrate_attributes(
    context: BuildContext,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Fill context.attributes for every item, fetching where not embedded."""
    build_settings = context.settings

    async def _fetch(http: httpx.AsyncClient) -> None:
        report = await fetch_missing_attributes(
            context.catalog.items,
            http,
            concurrency=build_settings.concurrency,
            retry_policy=retry_policy_from_settings(build_settings),
            deadline=build_settings.fetch_deadline,
        )
        context.attributes = report.attributes
        context.degraded = report.degraded
        logger.info(
            "Hydrated %d items: %d embedded, %d fetched, %d degraded",
            context.total,
            report.embedded,
            report.fetched,
            len(report.degraded),
        )

    if client is not None:
        await _fetch(client)
        return
    async with create_client(build_settings) as http:
        await _fetch(http)


def compute_collection_db(context: BuildContext) -> CollectionDB:
    """
    Run the synchronous rarity passes over hydrated attributes.

    Items are processed in ascending index order, which is also the
    tie-break order for ranking.
    """
    items = context.sorted_items()
    attributes = context.attributes_in_index_order()
    total = len(items)

    traits = build_trait_table(attributes)
    scores = score_items(attributes, traits)
    ranks = assign_ranks(scores)
    overall = compute_overall(scores, items, traits, total)
    trait_avg = compute_trait_averages(traits, total)

    logger.info(
        "Scored %d items across %d trait types (avg %.2f, min %.2f, max %.2f)",
        total,
        len(traits),
        overall.avg_observed,
        overall.min_observed,
        overall.max_observed,
    )

    return assemble_collection_db(
        context.collection_id,
        items,
        context.attributes,
        scores,
        ranks,
        traits,
        trait_avg,
        overall,
    )


async def run_build(
    build_settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> BuildResult:
    """
    Run a full build.

    Args:
        build_settings: Effective settings; catalog_path is required
        client: Optional HTTP client (a new one is created otherwise)

    Returns:
        BuildResult describing the written artifact

    Raises:
        ConfigurationError: Before any work, if configuration or input is invalid
        ArtifactWriteError: After all computation, if the artifact cannot be written
    """
    if build_settings.catalog_path is None:
        raise ConfigurationError(
            "Catalog path missing",
            suggestion="Pass --catalog or set RARITYFORGE_CATALOG_PATH.",
        )

    catalog = load_catalog(build_settings.catalog_path)
    context = create_build_context(build_settings, catalog)
    logger.info("Building collection %s from %d items", context.collection_id, context.total)

    await hydrate_attributes(context, client)
    db = compute_collection_db(context)
    output_path = write_collection_db(db, build_settings.output_dir)

    logger.info(
        "Build complete: %d items processed, %d degraded, written to %s",
        db.total,
        len(context.degraded),
        output_path,
    )
    return BuildResult(
        output_path=output_path, total=db.total, degraded=len(context.degraded), db=db
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a precomputed collection rarity database")
    parser.add_argument(
        "--catalog",
        type=Path,
        help="Catalog or upload cache JSON file",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        help=f"Directory for the artifact (default: {settings.output_dir})",
    )
    parser.add_argument(
        "--collection-id",
        help="Collection identifier (default: collectionMint from the catalog)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help=f"Concurrent metadata fetches (default: {settings.concurrency})",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        help=f"Fetch attempts per item (default: {settings.max_attempts})",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        help="Overall fetch deadline in seconds (default: none)",
    )
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Apply command-line overrides on top of environment settings."""
    overrides: dict[str, Any] = {
        "catalog_path": args.catalog,
        "output_dir": args.out_dir,
        "collection_id": args.collection_id,
        "concurrency": args.concurrency,
        "max_attempts": args.max_attempts,
        "fetch_deadline": args.deadline,
    }
    update = {key: value for key, value in overrides.items() if value is not None}
    return (base or settings).model_copy(update=update)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    build_settings = settings_from_args(_parse_args(argv))

    try:
        asyncio.run(run_build(build_settings))
    except KnownError as e:
        logger.error("Build failed: %s", e.describe())
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
