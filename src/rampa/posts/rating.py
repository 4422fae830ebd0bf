"""Usefulness votes and the consensus percentages derived from them.

Each post keeps one vote per voter (1 = useful, 0 = not useful). The
percentages are always recomputed from the whole vote map; the
not-useful share is the complement of the rounded useful share so the
pair sums to exactly 100 whenever at least one vote exists.

Nothing here performs I/O. Callers persist the post list after a vote
that changed something.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rampa.posts.models import Post

USEFUL = 1
NOT_USEFUL = 0


@dataclass(frozen=True, slots=True)
class VoteTally:
    """Counts and percentages for one post's votes."""

    total: int
    useful: int
    useful_percent: int
    not_useful_percent: int

    @property
    def not_useful(self) -> int:
        return self.total - self.useful


def round_half_up_percent(part: int, whole: int) -> int:
    """``round(100 * part / whole)`` with halves rounded up, in integers."""
    return (200 * part + whole) // (2 * whole)


def tally(votes: Mapping[str, int]) -> VoteTally:
    """Compute the consensus percentages for a vote map.

    An empty map yields 0/0.
    """
    total = len(votes)
    if total == 0:
        return VoteTally(total=0, useful=0, useful_percent=0, not_useful_percent=0)
    useful = sum(1 for value in votes.values() if value == USEFUL)
    useful_percent = round_half_up_percent(useful, total)
    return VoteTally(
        total=total,
        useful=useful,
        useful_percent=useful_percent,
        not_useful_percent=100 - useful_percent,
    )


def recompute(post: Post) -> VoteTally:
    """Overwrite the post's percentages from its votes."""
    result = tally(post.votes)
    post.useful_percent = result.useful_percent
    post.not_useful_percent = result.not_useful_percent
    return result


def cast_vote(post: Post, voter_id: str, is_useful: bool) -> bool:
    """Record *voter_id*'s vote on *post*.

    Returns False without touching the post when the voter already cast
    the same value, so a repeated tap never triggers a save. A voter's
    second, different vote replaces the first.
    """
    value = USEFUL if is_useful else NOT_USEFUL
    if post.votes.get(voter_id) == value:
        return False
    post.votes[voter_id] = value
    recompute(post)
    return True
