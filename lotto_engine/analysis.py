"""
Lotto Engine - History Analysis
===============================

Derived tables over a chronological slice of draws:

- FrequencyAnalyzer: occurrence counts, gaps, pair/triplet co-occurrence,
  positional counts, delta signatures and same-draw transition counts
- HistoryTables: caller-owned holder of those tables for one specific history

Nothing here is memoised at module level; a HistoryTables instance is only
valid for the draws it was built from.
"""

from collections import Counter
from dataclasses import dataclass
from functools import cached_property
from itertools import combinations
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np
from loguru import logger

from lotto_engine.config import MAX_NUMBER, MIN_NUMBER, TICKET_SIZE
from lotto_engine.models import Draw

DrawLike = Union[Draw, Sequence[int]]

NUMBER_RANGE = range(MIN_NUMBER, MAX_NUMBER + 1)
ORDERS = {'pair': 2, 'triplet': 3}


def draw_numbers(draws: Sequence[DrawLike]) -> List[Tuple[int, ...]]:
    """Main numbers of each draw, accepting Draw records or bare number rows"""
    rows = []
    for draw in draws:
        if isinstance(draw, Draw):
            rows.append(tuple(draw.numbers))
        else:
            rows.append(tuple(int(n) for n in draw))
    return rows


@dataclass(frozen=True)
class GapStats:
    """Gap statistics of one number"""
    current_gap: int      # draws since last seen, 0 if in the latest draw
    average_gap: float    # mean recorded gap, 0 if never observed


class FrequencyAnalyzer:
    """
    Statistical transforms over draw history.

    All methods are pure functions of their arguments; the draws are treated
    as already sorted by ascending round.
    """

    def build_frequency_table(self, draws: Sequence[DrawLike], window: int = None) -> Dict[int, int]:
        """
        Occurrence count per number.

        Args:
            draws: chronological draws
            window: only count the last ``window`` draws (default: all)

        Returns:
            dict with every number 1-45 present, zero-filled
        """
        rows = draw_numbers(draws)
        if window:
            rows = rows[-window:]

        counts = np.zeros(MAX_NUMBER + 1, dtype=int)
        for row in rows:
            for num in row:
                counts[num] += 1

        return {num: int(counts[num]) for num in NUMBER_RANGE}

    def calculate_gaps(self, draws: Sequence[DrawLike]) -> Dict[int, GapStats]:
        """
        Current and average gap per number in one forward pass.

        A running "draws since last seen" counter is kept per number. When a
        number appears its positive counter is recorded as a finished gap and
        reset to 0.
        """
        running = {num: 0 for num in NUMBER_RANGE}
        history = {num: [] for num in NUMBER_RANGE}

        for row in draw_numbers(draws):
            present = set(row)
            for num in NUMBER_RANGE:
                if num in present:
                    if running[num] > 0:
                        history[num].append(running[num])
                    running[num] = 0
                else:
                    running[num] += 1

        return {
            num: GapStats(
                current_gap=running[num],
                average_gap=float(np.mean(history[num])) if history[num] else 0.0
            )
            for num in NUMBER_RANGE
        }

    def co_occurrence(self, draws: Sequence[DrawLike], order: str = 'pair') -> Dict[Tuple[int, ...], int]:
        """
        Count every unordered pair or triplet appearing together in a draw.

        Args:
            draws: chronological draws
            order: 'pair' or 'triplet'

        Returns:
            Counter keyed by the sorted combination
        """
        if order not in ORDERS:
            raise ValueError(f"order must be one of {sorted(ORDERS)}, got {order!r}")

        counter = Counter()
        for row in draw_numbers(draws):
            counter.update(combinations(sorted(row), ORDERS[order]))
        return counter

    def cooccurrence_matrix(self, draws: Sequence[DrawLike]) -> np.ndarray:
        """Symmetric 45x45 pair-count matrix with zero diagonal (index = number - 1)"""
        matrix = np.zeros((MAX_NUMBER, MAX_NUMBER), dtype=int)
        for row in draw_numbers(draws):
            for a, b in combinations(row, 2):
                matrix[a - 1, b - 1] += 1
                matrix[b - 1, a - 1] += 1
        return matrix

    def positional_frequency(self, draws: Sequence[DrawLike]) -> Dict[int, Dict[int, int]]:
        """Per-position (1st..6th smallest) occurrence counts"""
        table = {pos: {num: 0 for num in NUMBER_RANGE} for pos in range(1, TICKET_SIZE + 1)}
        for row in draw_numbers(draws):
            for pos, num in enumerate(sorted(row), start=1):
                table[pos][num] += 1
        return table

    def delta_signatures(self, draws: Sequence[DrawLike]) -> Counter:
        """Frequency of each draw's consecutive-gap signature (5 deltas of the sorted draw)"""
        counter = Counter()
        for row in draw_numbers(draws):
            ordered = sorted(row)
            counter[tuple(b - a for a, b in zip(ordered, ordered[1:]))] += 1
        return counter

    def transition_counts(self, draws: Sequence[DrawLike]) -> Dict[int, Dict[int, int]]:
        """Same-draw transition rows: counts[a][b] = draws containing both a and b"""
        counts = {num: {other: 0 for other in NUMBER_RANGE} for num in NUMBER_RANGE}
        for row in draw_numbers(draws):
            for a in row:
                for b in row:
                    if a != b:
                        counts[a][b] += 1
        return counts


class HistoryTables:
    """
    Explicit cache of derived tables for ONE history.

    Owned by the caller and passed to strategies, so repeated generation over
    the same draws does not recompute tables. Tables are computed on first
    access; build a new instance for a different history.
    """

    def __init__(self, draws: Sequence[DrawLike], analyzer: FrequencyAnalyzer = None):
        self.draws = list(draws)
        self.analyzer = analyzer or FrequencyAnalyzer()
        logger.debug(f"HistoryTables created for {len(self.draws)} draws")

    def __len__(self) -> int:
        return len(self.draws)

    @property
    def is_empty(self) -> bool:
        return not self.draws

    @cached_property
    def numbers(self) -> List[Tuple[int, ...]]:
        return draw_numbers(self.draws)

    @cached_property
    def frequency(self) -> Dict[int, int]:
        return self.analyzer.build_frequency_table(self.draws)

    @cached_property
    def gaps(self) -> Dict[int, GapStats]:
        return self.analyzer.calculate_gaps(self.draws)

    @cached_property
    def pairs(self) -> Dict[Tuple[int, ...], int]:
        return self.analyzer.co_occurrence(self.draws, 'pair')

    @cached_property
    def triplets(self) -> Dict[Tuple[int, ...], int]:
        return self.analyzer.co_occurrence(self.draws, 'triplet')

    @cached_property
    def cooccurrence_matrix(self) -> np.ndarray:
        return self.analyzer.cooccurrence_matrix(self.draws)

    @cached_property
    def positional(self) -> Dict[int, Dict[int, int]]:
        return self.analyzer.positional_frequency(self.draws)

    @cached_property
    def deltas(self) -> Counter:
        return self.analyzer.delta_signatures(self.draws)

    @cached_property
    def transitions(self) -> Dict[int, Dict[int, int]]:
        return self.analyzer.transition_counts(self.draws)

    def frequency_window(self, window: int) -> Dict[int, int]:
        return self.analyzer.build_frequency_table(self.draws, window=window)
