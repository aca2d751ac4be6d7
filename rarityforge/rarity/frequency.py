"""
Trait frequency aggregation.

Builds the trait_type -> value -> count table for a whole collection.
Items that do not carry a trait type at all are counted in an explicit
"None" bucket, so the counts of every trait type sum to the collection size.
"""

from collections.abc import Sequence
from typing import Any

from rarityforge.rarity.normalize import NONE_VALUE, iter_normalized

TraitFrequencyTable = dict[str, dict[str, int]]


def build_trait_table(attributes_by_item: Sequence[Sequence[Any] | None]) -> TraitFrequencyTable:
    """
    Count trait values across the collection.

    Args:
        attributes_by_item: Raw attribute lists, one per item, in canonical
            index order. The collection size is the length of this sequence.

    Returns:
        Frequency table including "None" counts for absent trait types.
    """
    total = len(attributes_by_item)
    table: TraitFrequencyTable = {}
    present: dict[str, int] = {}

    for attributes in attributes_by_item:
        seen: set[str] = set()
        for trait_type, value in iter_normalized(attributes):
            counts = table.setdefault(trait_type, {})
            counts[value] = counts.get(value, 0) + 1
            if trait_type not in seen:
                present[trait_type] = present.get(trait_type, 0) + 1
                seen.add(trait_type)

    for trait_type, counts in table.items():
        missing = total - present.get(trait_type, 0)
        if missing > 0:
            counts[NONE_VALUE] = counts.get(NONE_VALUE, 0) + missing

    return table
