"""Tests for the collection database build job."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
import respx

from rarityforge.config import Settings
from rarityforge.jobs.build_collection_db import (
    create_build_context,
    main,
    run_build,
    settings_from_args,
    _parse_args,
)
from rarityforge.models.catalog import Catalog
from rarityforge.models.failure import ArtifactWriteError, ConfigurationError

HAT_DOC = {"attributes": [{"trait_type": "Hat", "value": "Crown"}]}


@pytest.fixture
def catalog_path(write_json) -> Path:
    """Two embedded items and two that must be fetched."""
    return write_json(
        "catalog.json",
        {
            "collectionMint": "MARTIANS",
            "items": [
                {"index": "3", "name": "Martian #0004", "metadata": "https://example.com/3.json"},
                {
                    "index": "0",
                    "name": "Martian #0001",
                    "metadata": "https://example.com/0.json",
                    "attributes": [{"trait_type": "Hat", "value": "Cap"}],
                },
                {
                    "index": "1",
                    "name": "Martian #0002",
                    "metadata": "https://example.com/1.json",
                    "attributes": [{"trait_type": "Hat", "value": "Cap"}],
                },
                {"index": "2", "name": "Martian #0003", "metadata": "https://example.com/2.json"},
            ],
        },
    )


def _settings(catalog_path: Path | None, out_dir: Path, **overrides) -> Settings:
    return Settings(
        catalog_path=catalog_path,
        output_dir=out_dir,
        retry_base_delay=0.0,
        **overrides,
    )


class TestCreateBuildContext:
    def test_collection_id_from_catalog(self, tmp_path: Path) -> None:
        context = create_build_context(_settings(None, tmp_path), Catalog(collection_id="A"))
        assert context.collection_id == "A"

    def test_settings_override_catalog_id(self, tmp_path: Path) -> None:
        context = create_build_context(
            _settings(None, tmp_path, collection_id="B"), Catalog(collection_id="A")
        )
        assert context.collection_id == "B"

    def test_missing_collection_id_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Collection id missing"):
            create_build_context(_settings(None, tmp_path), Catalog())

    def test_invalid_concurrency_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Concurrency"):
            create_build_context(
                _settings(None, tmp_path, concurrency=0), Catalog(collection_id="A")
            )


class TestRunBuild:
    @pytest.mark.asyncio
    @respx.mock
    async def test_builds_and_writes_artifact(self, catalog_path: Path, tmp_path: Path) -> None:
        respx.get("https://example.com/2.json").mock(return_value=httpx.Response(200, json=HAT_DOC))
        respx.get("https://example.com/3.json").mock(return_value=httpx.Response(200, json={}))

        result = await run_build(_settings(catalog_path, tmp_path / "db"))

        assert result.output_path == tmp_path / "db" / "MARTIANS.json"
        assert result.total == 4
        assert result.degraded == 0

        data = json.loads(result.output_path.read_text(encoding="utf-8"))
        assert [item["index"] for item in data["items"]] == [0, 1, 2, 3]
        assert data["traits"] == {"Hat": {"Cap": 2, "Crown": 1, "None": 1}}
        # Crown and absent both occur once; the lower index wins the tie
        assert data["items"][2]["rank"] == 1
        assert data["items"][3]["rank"] == 2
        assert data["items"][2]["attributes"] == HAT_DOC["attributes"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_fetch_degrades(self, catalog_path: Path, tmp_path: Path) -> None:
        """An unreachable item is scored from None buckets and the build completes."""
        respx.get("https://example.com/2.json").mock(return_value=httpx.Response(200, json=HAT_DOC))
        respx.get("https://example.com/3.json").mock(side_effect=httpx.ConnectError("refused"))

        result = await run_build(_settings(catalog_path, tmp_path, max_attempts=2))

        assert result.degraded == 1
        item = result.db.get_item_by_index(3)
        assert item is not None
        assert item.attributes == []
        assert item.score == 4.0

    @pytest.mark.asyncio
    @respx.mock
    async def test_uses_supplied_client(self, catalog_path: Path, tmp_path: Path) -> None:
        respx.get("https://example.com/2.json").mock(return_value=httpx.Response(200, json=HAT_DOC))
        respx.get("https://example.com/3.json").mock(return_value=httpx.Response(200, json=HAT_DOC))

        async with httpx.AsyncClient() as client:
            result = await run_build(_settings(catalog_path, tmp_path), client=client)

        assert result.db.traits["Hat"] == {"Cap": 2, "Crown": 2}

    @pytest.mark.asyncio
    async def test_empty_catalog_succeeds(self, write_json, tmp_path: Path) -> None:
        path = write_json("empty.json", {"collectionMint": "EMPTY", "items": []})

        result = await run_build(_settings(path, tmp_path / "db"))

        data = json.loads(result.output_path.read_text(encoding="utf-8"))
        assert data["items"] == []
        assert data["traits"] == {}
        assert data["overall"]["avgObserved"] == 0
        assert data["overall"]["minObserved"] == 0
        assert data["overall"]["maxObserved"] == 0

    @pytest.mark.asyncio
    async def test_missing_catalog_path_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Catalog path missing"):
            await run_build(_settings(None, tmp_path))

    @pytest.mark.asyncio
    async def test_missing_catalog_file_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            await run_build(_settings(tmp_path / "nope.json", tmp_path))

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, write_json, tmp_path: Path) -> None:
        path = write_json("empty.json", {"collectionMint": "EMPTY", "items": []})

        with patch("rarityforge.services.assembler.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(ArtifactWriteError):
                await run_build(_settings(path, tmp_path / "db"))

    @pytest.mark.asyncio
    async def test_logs_summary(self, write_json, tmp_path: Path, caplog) -> None:
        path = write_json("empty.json", {"collectionMint": "EMPTY", "items": []})

        with caplog.at_level(logging.INFO, logger="rarityforge.jobs.build_collection_db"):
            await run_build(_settings(path, tmp_path))

        assert "0 items processed, 0 degraded" in caplog.text


class TestCli:
    def test_args_override_settings(self, tmp_path: Path) -> None:
        args = _parse_args(["--catalog", "c.json", "--concurrency", "8", "--collection-id", "X"])
        base = _settings(None, tmp_path, concurrency=24)

        effective = settings_from_args(args, base)

        assert effective.catalog_path == Path("c.json")
        assert effective.concurrency == 8
        assert effective.collection_id == "X"
        assert effective.output_dir == tmp_path

    def test_main_returns_zero_on_success(self, write_json, tmp_path: Path) -> None:
        path = write_json("empty.json", {"collectionMint": "EMPTY", "items": []})

        code = main(["--catalog", str(path), "--out-dir", str(tmp_path / "db")])

        assert code == 0
        assert (tmp_path / "db" / "EMPTY.json").exists()

    def test_main_returns_one_on_configuration_error(self, tmp_path: Path) -> None:
        code = main(["--catalog", str(tmp_path / "missing.json"), "--out-dir", str(tmp_path)])
        assert code == 1

    def test_main_returns_one_without_collection_id(self, write_json, tmp_path: Path) -> None:
        path = write_json("anon.json", {"items": []})
        assert main(["--catalog", str(path), "--out-dir", str(tmp_path)]) == 1
