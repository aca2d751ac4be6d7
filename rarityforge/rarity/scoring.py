"""
Rarity scoring.

An item's score is the sum, over every trait type in the collection, of
total / count(value). Items lacking a trait type are scored against that
type's "None" bucket. Higher is rarer.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from rarityforge.rarity.frequency import TraitFrequencyTable
from rarityforge.rarity.normalize import NONE_VALUE, iter_normalized, normalize_attributes


@dataclass(frozen=True)
class TraitStat:
    """Rarity of one attribute of an item."""

    trait_type: str
    value: str
    count: int
    pct: float  # share of the collection carrying this value, 0-100
    score: float


def score_attributes(
    attributes: Sequence[Any] | None,
    table: TraitFrequencyTable,
    total: int,
) -> float:
    """
    Score one item against a finished frequency table.

    Args:
        attributes: The item's raw attribute list
        table: Frequency table for the whole collection
        total: Collection size

    Returns:
        Rarity score (higher = rarer)
    """
    total_safe = max(1, total)
    values = normalize_attributes(attributes)
    score = 0.0
    for trait_type, counts in table.items():
        value = values.get(trait_type, NONE_VALUE)
        score += total_safe / max(1, counts.get(value, 0))
    return score


def score_items(
    attributes_by_item: Sequence[Sequence[Any] | None],
    table: TraitFrequencyTable,
) -> list[float]:
    """Score every item, in the order given."""
    total = len(attributes_by_item)
    return [score_attributes(attributes, table, total) for attributes in attributes_by_item]


def trait_breakdown(
    attributes: Sequence[Any] | None,
    table: TraitFrequencyTable,
    total: int,
) -> list[TraitStat]:
    """
    Per-attribute rarity for display.

    Only the attributes the item actually declares are listed, in the
    order declared.
    """
    total_safe = max(1, total)
    stats: list[TraitStat] = []
    for trait_type, value in iter_normalized(attributes):
        count = table.get(trait_type, {}).get(value, 0)
        safe = max(1, count)
        stats.append(
            TraitStat(
                trait_type=trait_type,
                value=value,
                count=count,
                pct=safe / total_safe * 100.0,
                score=total_safe / safe,
            )
        )
    return stats
