import json
from pathlib import Path
from typing import Any

import pytest

from rarityforge.models.catalog import Catalog, CatalogItem
from rarityforge.services.collection_db import load_collection_db_cached
from rarityforge.services.retry import RetryPolicy


@pytest.fixture(autouse=True)
def clear_collection_db_cache():
    """Parsed artifacts must not leak between tests."""
    load_collection_db_cached.cache_clear()
    yield
    load_collection_db_cached.cache_clear()


class FakeClock:
    """Records requested sleeps instead of waiting."""

    def __init__(self) -> None:
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fast_retry(fake_clock: FakeClock) -> RetryPolicy:
    """Three attempts with no real waiting."""
    return RetryPolicy(max_attempts=3, base_delay=0.2, factor=2.0, sleep=fake_clock.sleep)


def make_item(
    index: int, attributes: list[dict[str, Any]] | None = None, **kwargs: Any
) -> CatalogItem:
    """Catalog item with predictable name and URIs."""
    data: dict[str, Any] = {
        "index": index,
        "name": f"Martian #{index + 1:04d}",
        "image": f"https://example.com/{index}.png",
        "metadata": f"https://example.com/{index}.json",
        "attributes": attributes,
    }
    data.update(kwargs)
    return CatalogItem.model_validate(data)


@pytest.fixture
def item_factory():
    """Factory for catalog items."""
    return make_item


@pytest.fixture
def scenario_a_items() -> list[CatalogItem]:
    """Red, Blue, and an item without attributes."""
    return [
        make_item(0, [{"trait_type": "Background", "value": "Red"}]),
        make_item(1, [{"trait_type": "Background", "value": "Blue"}]),
        make_item(2, []),
    ]


@pytest.fixture
def scenario_b_items() -> list[CatalogItem]:
    """Three Caps and one Crown."""
    return [
        make_item(0, [{"trait_type": "Hat", "value": "Cap"}]),
        make_item(1, [{"trait_type": "Hat", "value": "Cap"}]),
        make_item(2, [{"trait_type": "Hat", "value": "Crown"}]),
        make_item(3, [{"trait_type": "Hat", "value": "Cap"}]),
    ]


@pytest.fixture
def mixed_catalog() -> Catalog:
    """Items with embedded attributes and items that must be fetched."""
    return Catalog(
        collection_id="MARTIANS",
        items=[
            make_item(
                0,
                [
                    {"trait_type": "Background", "value": "Red"},
                    {"trait_type": "Eyes", "value": "Laser"},
                ],
            ),
            make_item(1, None),
            make_item(2, [{"trait_type": "Background", "value": "Blue"}]),
            make_item(3, None),
        ],
    )


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a JSON document to a file under tmp_path."""

    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f)
        return path

    return _write
