"""
Collection-wide rarity statistics.

Observed statistics come from the realized item scores. Theoretical
statistics come from the frequency table alone.

NOTE: avgTheoretical is the sum of distinct-value counts per trait type,
not an expected score. It does not share units with minTheoretical and
maxTheoretical; it is kept this way because existing consumers read it.
"""

from collections.abc import Sequence

from rarityforge.models.catalog import CatalogItem
from rarityforge.models.collection_db import ExtremeItem, OverallStats
from rarityforge.rarity.frequency import TraitFrequencyTable


def compute_overall(
    scores: Sequence[float],
    items: Sequence[CatalogItem],
    table: TraitFrequencyTable,
    total: int,
) -> OverallStats:
    """
    Compute observed and theoretical statistics.

    Args:
        scores: Item scores, aligned with items
        items: Catalog items in canonical order
        table: Finished frequency table
        total: Collection size

    Returns:
        OverallStats. An empty collection yields all zeros.
    """
    stats = OverallStats()

    if scores:
        min_pos = max_pos = 0
        for pos, score in enumerate(scores):
            # Strict comparisons keep the first item attaining each extreme
            if score < scores[min_pos]:
                min_pos = pos
            if score > scores[max_pos]:
                max_pos = pos

        stats.avg_observed = sum(scores) / len(scores)
        stats.min_observed = scores[min_pos]
        stats.max_observed = scores[max_pos]
        stats.min_item = _extreme_item(items[min_pos])
        stats.max_item = _extreme_item(items[max_pos])

    for counts in table.values():
        positive = [c for c in counts.values() if c > 0]
        if not positive:
            continue
        stats.min_theoretical += total / max(positive)
        stats.max_theoretical += total / min(positive)
        stats.avg_theoretical += len(counts)

    return stats


def compute_trait_averages(table: TraitFrequencyTable, total: int) -> dict[str, float]:
    """
    Mean per-value score for each trait type.

    Unweighted: every distinct value counts once regardless of how many
    items carry it.
    """
    total_safe = max(1, total)
    averages: dict[str, float] = {}
    for trait_type, counts in table.items():
        if not counts:
            continue
        averages[trait_type] = sum(total_safe / max(1, c) for c in counts.values()) / len(counts)
    return averages


def _extreme_item(item: CatalogItem) -> ExtremeItem:
    return ExtremeItem(index=item.index, name=item.name, metadata_uri=item.metadata_uri)
