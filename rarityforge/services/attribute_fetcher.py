"""
Attribute hydration.

Fetches the attribute documents of catalog items that do not embed their
attributes, using a fixed pool of concurrent workers.

INVARIANTS:
- Items with embedded attributes are never fetched
- Each item is handled by exactly one worker; each index is written once
- A failed item degrades to an empty attribute list and never aborts the batch
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from rarityforge.config import FETCH_PROGRESS_EVERY, Settings
from rarityforge.models.catalog import CatalogItem
from rarityforge.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 24
USER_AGENT = "RarityForge/1.0"

# Failures that count against the retry budget
_RETRYABLE_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


@dataclass
class FetchReport:
    """
    Result of hydrating a catalog.

    Attributes:
        attributes: Raw attribute list per item index (every item present)
        degraded: Indices that fell back to an empty list after failing
        fetched: Documents fetched successfully
        embedded: Items that already carried attributes
    """

    attributes: dict[int, list[Any]] = field(default_factory=dict)
    degraded: set[int] = field(default_factory=set)
    fetched: int = 0
    embedded: int = 0


def create_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client configured for metadata fetches."""
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        timeout=settings.request_timeout,
    )


def retry_policy_from_settings(settings: Settings) -> RetryPolicy:
    """Build the retry policy described by settings."""
    return RetryPolicy(
        max_attempts=settings.max_attempts,
        base_delay=settings.retry_base_delay,
        factor=settings.retry_factor,
        jitter=settings.retry_jitter,
    )


def extract_attributes(document: Any) -> list[Any]:
    """
    Pull the attributes array out of a metadata document.

    Returns:
        The attributes list, or an empty list if absent or not a list.
    """
    if isinstance(document, dict):
        attributes = document.get("attributes")
        if isinstance(attributes, list):
            return attributes
    return []


async def fetch_metadata_document(client: httpx.AsyncClient, url: str) -> Any:
    """
    Fetch and decode one metadata document.

    Raises:
        httpx.HTTPError: If the request fails or the status is not 2xx
        ValueError: If the body is not valid JSON
    """
    response = await client.get(url)
    response.raise_for_status()
    return response.json()


async def fetch_attributes_with_retry(
    client: httpx.AsyncClient,
    url: str,
    policy: RetryPolicy,
) -> list[Any] | None:
    """
    Fetch an item's attributes, retrying transient failures.

    Args:
        client: HTTP client
        url: Metadata document URL
        policy: Attempt budget and backoff

    Returns:
        The attribute list, or None once every attempt has failed.
    """
    last_error: Exception | None = None

    for attempt in range(policy.max_attempts):
        try:
            document = await fetch_metadata_document(client, url)
        except _RETRYABLE_ERRORS as e:
            last_error = e
            logger.debug(
                "Attempt %d/%d for %s failed: %s", attempt + 1, policy.max_attempts, url, e
            )
            if policy.should_retry(attempt):
                await policy.wait(attempt)
            continue
        return extract_attributes(document)

    logger.warning(
        "Failed to fetch %s after %d attempts: %s",
        url,
        policy.max_attempts,
        last_error,
    )
    return None


async def fetch_missing_attributes(
    items: Sequence[CatalogItem],
    client: httpx.AsyncClient,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    retry_policy: RetryPolicy | None = None,
    deadline: float | None = None,
    progress_every: int = FETCH_PROGRESS_EVERY,
) -> FetchReport:
    """
    Hydrate attributes for every item.

    Args:
        items: Catalog items
        client: HTTP client shared by all workers
        concurrency: Maximum number of concurrent fetches
        retry_policy: Attempt budget and backoff; defaults to RetryPolicy()
        deadline: Optional limit in seconds for the whole pool. Items still
            unfinished when it expires are degraded.
        progress_every: Log progress every N completed fetches

    Returns:
        FetchReport with an attribute list for every item.

    Raises:
        ValueError: If concurrency is less than 1
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")
    policy = retry_policy or RetryPolicy()

    report = FetchReport()
    queue: asyncio.Queue[tuple[int, str]] = asyncio.Queue()

    for item in items:
        if item.has_embedded_attributes:
            report.attributes[item.index] = list(item.attributes or [])
            report.embedded += 1
        elif not item.metadata_uri:
            logger.warning("Item %d has no metadata URI; using empty attributes", item.index)
            report.attributes[item.index] = []
            report.degraded.add(item.index)
        else:
            queue.put_nowait((item.index, item.metadata_uri))

    pending = queue.qsize()
    if pending == 0:
        return report

    logger.info(
        "Fetching metadata for %d of %d items (concurrency %d)", pending, len(items), concurrency
    )
    completed = 0

    async def worker() -> None:
        nonlocal completed
        while True:
            try:
                index, url = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            try:
                attributes = await fetch_attributes_with_retry(client, url, policy)
            except Exception as e:
                logger.warning("Unexpected error fetching item %d: %s", index, e)
                attributes = None

            if attributes is None:
                report.degraded.add(index)
                attributes = []
            else:
                report.fetched += 1
            report.attributes[index] = attributes

            completed += 1
            if completed % progress_every == 0:
                logger.info("Fetched metadata for %d/%d items", completed, pending)

    workers = [asyncio.create_task(worker()) for _ in range(min(concurrency, pending))]
    try:
        async with asyncio.timeout(deadline):
            await asyncio.gather(*workers)
    except TimeoutError:
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        unfinished = [item.index for item in items if item.index not in report.attributes]
        logger.warning(
            "Fetch deadline of %.1fs expired; degrading %d unfinished items",
            deadline,
            len(unfinished),
        )
        for index in unfinished:
            report.attributes[index] = []
            report.degraded.add(index)

    return report
