"""
Ticket generation from a trained ensemble.

Set 1 is deterministic: the 6 numbers with the highest predicted probability.
Every further set is drawn by weighted sampling without replacement, using the
predicted probabilities as weights, so sets are diverse but still favour the
numbers the ensemble rates highly.
"""
import logging

import numpy as np

from lotto645.config import NUMBERS_PER_DRAW

logger = logging.getLogger(__name__)


def score_numbers(ensemble, features):
    """
    P(drawn) for every number that has both a classifier and a feature row.

    Returns [(number, probability)] in ascending number order. Numbers
    lacking either are left out of the candidate pool entirely.
    """
    candidates = [
        n for n in sorted(features)
        if ensemble.has_classifier(n)
    ]
    scored = []
    for n in candidates:
        prob = ensemble.classifier_for(n).predict_probability(features[n].values())
        scored.append((n, float(prob)))
    skipped = len(features) - len(scored)
    if skipped:
        logger.debug("[Predictor] %s: %d numbers without a classifier skipped",
                     ensemble.family_name, skipped)
    return scored


def top_numbers(scored, count=NUMBERS_PER_DRAW):
    """Highest-probability `count` numbers, returned in ascending order."""
    ranked = sorted(scored, key=lambda item: (-item[1], item[0]))
    return sorted(n for n, _ in ranked[:count])


def weighted_sample(scored, rng, count=NUMBERS_PER_DRAW, pad_short=False):
    """
    Pick `count` distinct numbers, each with chance proportional to its weight.

    The pool is scanned in ascending number order. When the remaining weight
    drops to zero, or the pool runs out, the picks so far are returned (a
    short set) unless `pad_short` fills the gap uniformly from what is left.
    """
    pool = [(n, max(float(w), 0.0)) for n, w in sorted(scored)]
    picks = []
    while len(picks) < count and pool:
        total = sum(w for _, w in pool)
        if total <= 0:
            break
        remainder = rng.uniform(0.0, total)
        chosen = None
        for idx, (n, w) in enumerate(pool):
            remainder -= w
            if remainder <= 0 and w > 0:
                chosen = idx
                break
        if chosen is None:
            # Float drift left a sliver of remainder; take the last weighted entry
            chosen = max(i for i, (_, w) in enumerate(pool) if w > 0)
        picks.append(pool.pop(chosen)[0])

    if pad_short and len(picks) < count and pool:
        rest = [n for n, _ in pool]
        extra = rng.choice(rest, size=min(count - len(picks), len(rest)), replace=False)
        picks.extend(int(n) for n in extra)

    return sorted(picks)


def predict(ensemble, features, sets_to_generate=1, random_state=None, pad_short_sets=False):
    """
    Generate `sets_to_generate` tickets for the next draw.

    Parameters
    ----------
    ensemble : TrainedEnsemble
    features : dict
        number -> FeatureVector (no label) computed from the history so far.
    sets_to_generate : int
        Total sets; the first is always the deterministic top 6.
    random_state : int, numpy Generator or None
        Source for the weighted sampling; one generator per call.
    pad_short_sets : bool
        Fill degenerate short sets with uniformly random leftover candidates.

    Returns
    -------
    list of sorted number lists.
    """
    if sets_to_generate < 1:
        raise ValueError("sets_to_generate must be at least 1")

    scored = score_numbers(ensemble, features)
    sets = [top_numbers(scored)]

    rng = np.random.default_rng(random_state)
    for _ in range(sets_to_generate - 1):
        sets.append(weighted_sample(scored, rng, pad_short=pad_short_sets))
    return sets
