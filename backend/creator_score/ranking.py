"""
Competition ranking for scored creators.

Tied scores share a rank and the next distinct score resumes at its 1-based
position, so [100, 100, 90, 80] ranks as [1, 1, 3, 4].
"""
from collections.abc import Iterable

from creator_score.schemas import RankedEntry, ScoredEntry, check_score


def assign_ranks(entries: Iterable[ScoredEntry]) -> list[RankedEntry]:
    """Sort entries by score descending and attach competition ranks.

    The sort is stable, so equal scores keep their input order.
    """
    entries = list(entries)
    for entry in entries:
        # Entries built with model_construct skip the model validator
        check_score(entry.id, entry.score)

    ordered = sorted(entries, key=lambda e: e.score, reverse=True)

    ranked: list[RankedEntry] = []
    previous_score = None
    previous_rank = 0
    for position, entry in enumerate(ordered, start=1):
        rank = previous_rank if entry.score == previous_score else position
        ranked.append(
            RankedEntry(
                id=entry.id,
                display_name=entry.display_name,
                avatar_url=entry.avatar_url,
                score=entry.score,
                rank=rank,
            )
        )
        previous_score = entry.score
        previous_rank = rank
    return ranked
