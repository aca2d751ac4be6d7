"""
Rarity model.

Pure, synchronous passes over already-materialized attribute data:
normalization, frequency aggregation, scoring, ranking and statistics.
"""

from rarityforge.rarity.frequency import TraitFrequencyTable, build_trait_table
from rarityforge.rarity.normalize import (
    MISSING_TRAIT_TYPE,
    NONE_VALUE,
    normalize_attributes,
    normalize_trait_type,
    normalize_trait_value,
)
from rarityforge.rarity.ranker import assign_ranks
from rarityforge.rarity.scoring import TraitStat, score_attributes, score_items, trait_breakdown
from rarityforge.rarity.stats import compute_overall, compute_trait_averages

__all__ = [
    "MISSING_TRAIT_TYPE",
    "NONE_VALUE",
    "TraitFrequencyTable",
    "TraitStat",
    "assign_ranks",
    "build_trait_table",
    "compute_overall",
    "compute_trait_averages",
    "normalize_attributes",
    "normalize_trait_type",
    "normalize_trait_value",
    "score_attributes",
    "score_items",
    "trait_breakdown",
]
