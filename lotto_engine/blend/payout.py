"""
Monte-Carlo payout simulation.

Estimates a ticket's expected prize against uniformly random fair draws. It
ignores history entirely; it only ranks candidates by expected-value
potential.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import numpy as np
from loguru import logger

from lotto_engine.config import EngineConfig, MAX_NUMBER, TICKET_SIZE, get_config
from lotto_engine.prize_calculator import BONUS_PRIZE, PRIZE_BY_MATCHES
from lotto_engine.sampling import RandomSource, make_rng


class PayoutSimulator:
    """
    Expected prize of a ticket under a fair 6/45 draw with bonus.

    Each iteration takes a uniform random permutation of 1-45; its first six
    entries are the draw and the seventh the bonus. Iterations run in
    vectorized batches.
    """

    def __init__(self, config: EngineConfig = None, iterations: int = None, workers: int = None):
        self.config = config or get_config()
        self.iterations = iterations or self.config.payout_iterations
        self.batch_size = self.config.payout_batch_size
        self.workers = workers or self.config.payout_workers
        logger.info(f"PayoutSimulator initialized (iterations={self.iterations}, workers={self.workers})")

    def expected_payout(self, ticket: Sequence[int], rng: RandomSource = None,
                        iterations: Optional[int] = None) -> float:
        """
        Mean simulated prize for one ticket.

        Args:
            ticket: 6 distinct numbers
            rng: seed or numpy Generator
            iterations: override the configured iteration count

        Returns:
            Mean prize per simulated draw (KRW)
        """
        generator = make_rng(rng)
        total_iterations = iterations or self.iterations
        on_ticket = np.zeros(MAX_NUMBER + 1, dtype=bool)
        on_ticket[list(ticket)] = True

        total = 0.0
        remaining = total_iterations
        while remaining > 0:
            size = min(self.batch_size, remaining)
            # argsort of uniform keys gives uniform permutations; keep 7 entries
            draws = generator.random((size, MAX_NUMBER)).argsort(axis=1)[:, :TICKET_SIZE + 1] + 1
            matches = on_ticket[draws[:, :TICKET_SIZE]].sum(axis=1)
            bonus_hit = on_ticket[draws[:, TICKET_SIZE]]

            payouts = PRIZE_BY_MATCHES[matches]
            payouts = np.where((matches == 5) & bonus_hit, BONUS_PRIZE, payouts)
            total += float(payouts.sum())
            remaining -= size

        return total / total_iterations

    def expected_payouts(self, tickets: Sequence[Sequence[int]], rng: RandomSource = None,
                         iterations: Optional[int] = None) -> List[float]:
        """
        Simulate many tickets in parallel.

        Every ticket gets its own child generator spawned from ``rng``, so the
        result does not depend on thread scheduling. Results keep input order.
        """
        if not tickets:
            return []

        generator = make_rng(rng)
        children = generator.spawn(len(tickets))

        if self.workers <= 1 or len(tickets) == 1:
            results = [self.expected_payout(t, child, iterations) for t, child in zip(tickets, children)]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                results = list(executor.map(
                    lambda args: self.expected_payout(args[0], args[1], iterations),
                    zip(tickets, children)
                ))

        logger.debug(f"Simulated payouts for {len(tickets)} tickets")
        return results
