"""
Champion selection over backtest scores.

A SelectionPolicy is a sort key over ModelScore; the champion is the family
at the front of that order. Remaining ties break by family name so the
result never depends on dict ordering.
"""
from enum import Enum


def _best_rank_first(score):
    return (score.best_rank.value, -score.total_wins, score.family_name)


def _most_wins_first(score):
    return (-score.total_wins, score.best_rank.value, score.family_name)


class SelectionPolicy(Enum):
    BEST_RANK_FIRST = "best_rank_first"
    MOST_WINS_FIRST = "most_wins_first"

    @property
    def sort_key(self):
        return _POLICY_KEYS[self]

    def order(self, scores):
        """Scores sorted best-first under this policy."""
        return sorted(scores, key=self.sort_key)


_POLICY_KEYS = {
    SelectionPolicy.BEST_RANK_FIRST: _best_rank_first,
    SelectionPolicy.MOST_WINS_FIRST: _most_wins_first,
}


def select_champion(scores, policy=SelectionPolicy.BEST_RANK_FIRST):
    """Name of the best family in `scores` (family name -> ModelScore)."""
    if not scores:
        raise ValueError("no scores to select a champion from")
    return policy.order(scores.values())[0].family_name
