"""
Bayesian inclusion weights.

weight(n) = (hits + 1) / (draws + 2), the posterior mean under a uniform
Beta(1, 1) prior. Always strictly inside (0, 1); exactly 0.5 with no history.
"""

from typing import Dict, Sequence

import numpy as np
from loguru import logger

from lotto_engine.analysis import DrawLike, NUMBER_RANGE, draw_numbers
from lotto_engine.config import MAX_NUMBER


class BayesEstimator:
    """Smoothed per-number inclusion probability from draw history"""

    def weight(self, number: int, draws: Sequence[DrawLike]) -> float:
        rows = draw_numbers(draws)
        hits = sum(1 for row in rows if number in row)
        return (hits + 1) / (len(rows) + 2)

    def weights(self, draws: Sequence[DrawLike]) -> Dict[int, float]:
        """Posterior mean for every number 1-45"""
        rows = draw_numbers(draws)
        hits = np.zeros(MAX_NUMBER + 1)
        for row in rows:
            # draws hold distinct numbers, so this counts draws containing n
            hits[list(row)] += 1

        weights = {num: float((hits[num] + 1) / (len(rows) + 2)) for num in NUMBER_RANGE}
        logger.debug(f"Bayes weights computed over {len(rows)} draws")
        return weights

    @staticmethod
    def hotness(ticket: Sequence[int], weights: Dict[int, float]) -> float:
        """Mean weight of a ticket's numbers"""
        return float(np.mean([weights[n] for n in ticket]))
