"""
Weighted sampling and the injectable random source.

Every random decision in the engine goes through a ``numpy.random.Generator``
passed in by the caller, so a seed reproduces a whole run.
"""

from typing import Dict, List, Optional, Union

import numpy as np
from loguru import logger

RandomSource = Union[None, int, np.random.Generator]


def make_rng(seed: RandomSource = None) -> np.random.Generator:
    """Return ``seed`` if it already is a Generator, else a new one seeded with it"""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


class WeightedSampler:
    """
    Roulette-wheel selection without replacement.

    Candidates are scanned in the weight map's insertion order; a uniform
    cursor in [0, total) is decreased by each weight until it goes
    non-positive, and that candidate is taken out of the pool.
    """

    def __init__(self, rng: RandomSource = None):
        self.rng = make_rng(rng)

    def pick(self, weights: Dict[int, float], k: int) -> List[int]:
        """
        Draw ``k`` numbers without replacement.

        Zero-weight numbers are never drawn while positive weight remains; if
        the positive pool runs dry fewer than ``k`` numbers are returned and
        the caller pads the ticket.

        Args:
            weights: number -> non-negative weight
            k: how many numbers to draw

        Returns:
            Picked numbers in pick order
        """
        pool = {num: float(w) for num, w in weights.items() if w > 0}
        picked = []

        while len(picked) < k and pool:
            total = sum(pool.values())
            cursor = self.rng.random() * total
            chosen = None
            for num, weight in pool.items():
                cursor -= weight
                if cursor <= 0:
                    chosen = num
                    break
            if chosen is None:
                # float residue after the last subtraction
                chosen = next(reversed(pool))
            picked.append(chosen)
            del pool[chosen]

        if len(picked) < k:
            logger.debug(f"WeightedSampler: pool exhausted after {len(picked)}/{k} picks")
        return picked

    def pick_one(self, weights: Dict[int, float]) -> Optional[int]:
        """Single roulette draw; None when no number carries weight"""
        picked = self.pick(weights, 1)
        return picked[0] if picked else None
