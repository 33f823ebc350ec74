"""
Ranker

Orders scored candidates for the optimizer.
"""

from typing import List, Sequence
from .contracts import ScoredCourse


def rank_candidates(scored: Sequence[ScoredCourse]) -> List[ScoredCourse]:
    """
    Rank candidates by fit score (descending).

    Equal scores keep catalog order, so identical inputs always rank the
    same way.
    """
    return sorted(scored, key=lambda x: (-x.fit_score, x.rank_index))
