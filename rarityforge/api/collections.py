"""
Collection lookup endpoints.

Read-only access to built collection databases: by item index, by rank,
by metadata URI or display name, plus per-item trait breakdowns.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi import Path as PathParam
from pydantic import BaseModel, ConfigDict, Field

from rarityforge.api.deps import get_output_dir
from rarityforge.models.collection_db import CollectionDB, DBItem, OverallStats
from rarityforge.rarity.scoring import trait_breakdown
from rarityforge.services.collection_db import CollectionNotFoundError, get_collection_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collections", tags=["collections"])

CollectionId = Annotated[str, PathParam(pattern=r"^[A-Za-z0-9_\-]+$")]


class CollectionSummary(BaseModel):
    """Collection-level data without the item list."""

    model_config = ConfigDict(populate_by_name=True)

    collection_id: str = Field(..., alias="collectionId")
    generated_at: datetime = Field(..., alias="generatedAt")
    total: int
    overall: OverallStats
    traits: dict[str, dict[str, int]]
    trait_avg: dict[str, float] = Field(..., alias="traitAvg")


class TraitStatResponse(BaseModel):
    """Rarity of a single attribute of an item."""

    model_config = ConfigDict(populate_by_name=True)

    trait_type: str = Field(..., alias="traitType")
    value: str
    count: int
    pct: float
    score: float


def _load(output_dir: Path, collection_id: str) -> CollectionDB:
    try:
        return get_collection_db(output_dir, collection_id)
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        logger.error("Unreadable collection database %s: %s", collection_id, e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Collection database {collection_id} is unreadable. Rebuild it and retry.",
        ) from e


def _require(item: DBItem | None, what: str) -> DBItem:
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No item {what}")
    return item


@router.get("/{collection_id}", response_model=CollectionSummary)
async def get_collection(
    collection_id: CollectionId,
    output_dir: Annotated[Path, Depends(get_output_dir)],
) -> CollectionSummary:
    """Get collection statistics and the trait table."""
    db = _load(output_dir, collection_id)
    return CollectionSummary(
        collection_id=db.collection_id,
        generated_at=db.generated_at,
        total=db.total,
        overall=db.overall,
        traits=db.traits,
        trait_avg=db.trait_avg,
    )


@router.get("/{collection_id}/items/{index}", response_model=DBItem)
async def get_item(
    collection_id: CollectionId,
    index: int,
    output_dir: Annotated[Path, Depends(get_output_dir)],
) -> DBItem:
    """Get an item by its collection index."""
    db = _load(output_dir, collection_id)
    return _require(db.get_item_by_index(index), f"with index {index}")


@router.get("/{collection_id}/ranks/{rank}", response_model=DBItem)
async def get_item_by_rank(
    collection_id: CollectionId,
    rank: int,
    output_dir: Annotated[Path, Depends(get_output_dir)],
) -> DBItem:
    """Get the item holding a rarity rank (1 = rarest)."""
    db = _load(output_dir, collection_id)
    item = next((it for it in db.items if it.rank == rank), None)
    return _require(item, f"with rank {rank}")


@router.get("/{collection_id}/lookup", response_model=DBItem)
async def lookup_item(
    collection_id: CollectionId,
    output_dir: Annotated[Path, Depends(get_output_dir)],
    uri: Annotated[str | None, Query(description="Metadata URI")] = None,
    name: Annotated[str | None, Query(description="Display name")] = None,
) -> DBItem:
    """Get an item by metadata URI, falling back to display name."""
    if not uri and not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide a uri or name query parameter",
        )
    db = _load(output_dir, collection_id)
    return _require(db.get_item_by_uri_or_name(uri, name), "matching lookup")


@router.get("/{collection_id}/items/{index}/traits", response_model=list[TraitStatResponse])
async def get_item_traits(
    collection_id: CollectionId,
    index: int,
    output_dir: Annotated[Path, Depends(get_output_dir)],
) -> list[TraitStatResponse]:
    """Get per-attribute rarity for an item."""
    db = _load(output_dir, collection_id)
    item = _require(db.get_item_by_index(index), f"with index {index}")
    return [
        TraitStatResponse(
            trait_type=stat.trait_type,
            value=stat.value,
            count=stat.count,
            pct=stat.pct,
            score=stat.score,
        )
        for stat in trait_breakdown(item.attributes, db.traits, db.total)
    ]
