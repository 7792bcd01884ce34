"""
Lotto Engine - Candidate Scoring
================================

Scores used to accept and rank SmartBlend candidates:

- CoOccurrenceScorer: sum of a ticket's strongest pair counts
- ticket_entropy: normalized Shannon entropy of the gaps between numbers
- spread_score: variance of the numbers plus variance of their gaps
- is_aesthetic: rejects same-last-digit and tightly clustered tickets
- composite_score: weighted blend used for the final ranking
"""

from itertools import combinations
from typing import Dict, Sequence

import numpy as np
from loguru import logger
from scipy.stats import entropy

from lotto_engine.config import TICKET_SIZE

# Composite weights, must sum to 1.0
COMPOSITE_WEIGHTS: Dict[str, float] = {
    'bayes_hotness': 0.40,
    'entropy': 0.30,
    'payout_percentile': 0.20,
    'lucky_boost': 0.10,
}

# 6 numbers -> 5 gaps
MAX_GAP_ENTROPY = np.log2(TICKET_SIZE - 1)


class CoOccurrenceScorer:
    """Scores tickets against a 45x45 co-occurrence matrix"""

    def __init__(self, matrix: np.ndarray, top_n: int = 3):
        self.matrix = matrix
        self.top_n = top_n

    def pair_scores(self, ticket: Sequence[int]) -> list:
        """All 15 pair counts of the ticket, strongest first"""
        scores = [int(self.matrix[a - 1, b - 1]) for a, b in combinations(ticket, 2)]
        scores.sort(reverse=True)
        return scores

    def score(self, ticket: Sequence[int]) -> int:
        """Sum of the top-N pair counts"""
        return sum(self.pair_scores(ticket)[:self.top_n])


def ticket_entropy(ticket: Sequence[int]) -> float:
    """
    Normalized Shannon entropy of the consecutive gaps.

    Evenly spaced tickets score 1.0; one large gap among tiny ones scores low.

    Returns:
        Score 0.0 - 1.0
    """
    ordered = np.sort(np.asarray(ticket))
    gaps = np.diff(ordered)
    if gaps.sum() <= 0:
        return 0.0
    ent = entropy(gaps / gaps.sum(), base=2)
    return float(min(ent / MAX_GAP_ENTROPY, 1.0))


def spread_score(ticket: Sequence[int]) -> float:
    """Population variance of the numbers plus that of their consecutive gaps"""
    ordered = np.sort(np.asarray(ticket, dtype=float))
    return float(np.var(ordered) + np.var(np.diff(ordered)))


def is_aesthetic(ticket: Sequence[int], min_variance: float = 50.0) -> bool:
    """Reject duplicate numbers, a shared last digit, or variance below ``min_variance``"""
    if len(set(ticket)) < TICKET_SIZE:
        return False
    if len({n % 10 for n in ticket}) == 1:
        return False
    if np.var(np.asarray(ticket, dtype=float)) < min_variance:
        return False
    return True


def payout_percentile(payout: float, all_payouts: Sequence[float]) -> float:
    """Share of the pool strictly below the first value >= ``payout``"""
    ordered = sorted(all_payouts)
    for idx, value in enumerate(ordered):
        if value >= payout:
            return idx / len(ordered)
    return 1.0


def composite_score(bayes_hotness: float, entropy_score: float, percentile: float, lucky_boost: int) -> float:
    score = (
        bayes_hotness * COMPOSITE_WEIGHTS['bayes_hotness'] +
        entropy_score * COMPOSITE_WEIGHTS['entropy'] +
        percentile * COMPOSITE_WEIGHTS['payout_percentile'] +
        lucky_boost * COMPOSITE_WEIGHTS['lucky_boost']
    )
    logger.trace(f"composite={score:.4f}")
    return float(score)
