"""
Rarity ranking.

Rank 1 is the rarest (highest score). Ties keep their input order, which
is ascending item index when scores come from a build. Ranks are always
1..n with no gaps and no repeats.
"""

from collections.abc import Sequence


def assign_ranks(scores: Sequence[float]) -> list[int]:
    """
    Assign a rank to every score.

    Args:
        scores: Scores in canonical item order

    Returns:
        ranks[i] is the rank of scores[i]
    """
    # sorted() is stable, so equal scores keep their relative input order
    order = sorted(range(len(scores)), key=lambda i: scores[i], reverse=True)

    ranks = [0] * len(scores)
    for position, item_position in enumerate(order):
        ranks[item_position] = position + 1
    return ranks
