"""
Lotto Engine - SmartBlend
=========================

Combines the Bayes weights, co-occurrence matrix, Monte-Carlo payout and
entropy/spread scores into explained ticket recommendations.

Two pipelines:

- generate(): risk-tiered acceptance loop, returns exactly 5 tickets
- rank(): stratified oversample -> payout filter -> aesthetic filter ->
  composite score -> greedy dedup

plus last_week_followers(), one ticket seeded from the most recent draw.
"""

import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence

import numpy as np
from loguru import logger

from lotto_engine.analysis import DrawLike, HistoryTables
from lotto_engine.blend.bayes import BayesEstimator
from lotto_engine.blend.payout import PayoutSimulator
from lotto_engine.blend.scoring import (
    CoOccurrenceScorer,
    composite_score,
    is_aesthetic,
    payout_percentile,
    spread_score,
    ticket_entropy,
)
from lotto_engine.config import EngineConfig, MAX_NUMBER, MIN_NUMBER, TICKET_SIZE, get_config
from lotto_engine.exceptions import ValidationError
from lotto_engine.models import Ticket
from lotto_engine.sampling import RandomSource, WeightedSampler, make_rng
from lotto_engine.tickets import (
    count_matches,
    is_near_duplicate,
    is_sequential,
    normalize_ticket,
    overlap,
    random_ticket,
)

FALLBACK_LABEL = "insufficient data — random fallback"

# 5th place needs 3 main numbers
MIN_WINNING_MATCHES = 3

SECONDS_PER_WEEK = 7 * 24 * 60 * 60

# Last-week followers combination
FOLLOWER_TOP_N = 3
FOLLOWER_POOL_SIZE = 20
FOLLOWER_ATTEMPTS = 100
MAX_LAST_WEEK_REPEATS = 2


class RiskTier(IntEnum):
    """How much historical hit-rate evidence a candidate must show"""
    SAFE = 0
    BALANCED = 1
    AGGRESSIVE = 2


TIER_LABELS = {
    RiskTier.SAFE: "Safe",
    RiskTier.BALANCED: "Balanced",
    RiskTier.AGGRESSIVE: "Aggressive",
}


@dataclass
class BlendResult:
    """One recommended ticket with its explanation"""
    ticket: Ticket
    explanation: str
    fallback: bool = False

    def to_dict(self) -> Dict:
        return {'ticket': list(self.ticket), 'explanation': self.explanation}


@dataclass
class ScoredCandidate:
    """Composite-pipeline candidate with its component scores"""
    ticket: Ticket
    bayes_hotness: float
    entropy: float
    payout_percentile: float
    lucky_boost: int
    composite_score: float
    expected_payout: float
    explanation: str = ""


def count_historical_hits(ticket: Sequence[int], rows: Sequence[Sequence[int]]) -> int:
    """Number of draws in which the ticket would have won 5th place or better"""
    return sum(1 for row in rows if count_matches(ticket, row) >= MIN_WINNING_MATCHES)


def upper_median(values: Sequence[float]) -> float:
    """Middle value of the sorted list; the higher of the two middles for even lengths"""
    ordered = sorted(values)
    return float(ordered[len(ordered) // 2])


def top_followers(number: int, transitions: Dict[int, Dict[int, int]], top_n: int = FOLLOWER_TOP_N) -> List[int]:
    """Numbers most often drawn together with ``number``, highest count first"""
    row = transitions.get(number, {})
    ranked = sorted((item for item in row.items() if item[1] > 0), key=lambda item: (-item[1], item[0]))
    return [other for other, _ in ranked[:top_n]]


def stratum_bounds(strata: int = TICKET_SIZE) -> List[range]:
    """Split 1-45 into contiguous bands of 7-8 numbers"""
    return [
        range(i * MAX_NUMBER // strata + 1, (i + 1) * MAX_NUMBER // strata + 1)
        for i in range(strata)
    ]


class SmartBlendEngine:
    """
    Recommends five diverse tickets from draw history.

    Args:
        config: engine configuration, defaults to get_config()
        rng: seed or numpy Generator shared by every phase
        simulator: payout simulator, built from config when omitted
    """

    def __init__(self, config: EngineConfig = None, rng: RandomSource = None,
                 simulator: PayoutSimulator = None):
        self.config = config or get_config()
        self.rng = make_rng(rng)
        self.sampler = WeightedSampler(self.rng)
        self.estimator = BayesEstimator()
        self.simulator = simulator or PayoutSimulator(self.config)
        logger.info("SmartBlendEngine initialized")

    # ------------------------------------------------------------------
    # Risk-tiered pipeline
    # ------------------------------------------------------------------

    def generate(self, draws: Sequence[DrawLike], risk_tier: int = RiskTier.BALANCED) -> List[BlendResult]:
        """
        Produce exactly ``blend_ticket_count`` tickets, pairwise overlapping in
        fewer than ``near_duplicate_overlap`` numbers.

        Args:
            draws: chronological history, oldest first
            risk_tier: 0 safe, 1 balanced, 2 aggressive

        Returns:
            List of BlendResult
        """
        tier = self._parse_tier(risk_tier)
        count = self.config.blend_ticket_count
        tables = draws if isinstance(draws, HistoryTables) else HistoryTables(draws)

        if tables.is_empty:
            logger.warning("SmartBlend: empty history, returning random tickets")
            return [
                BlendResult(ticket=t, explanation=FALLBACK_LABEL, fallback=True)
                for t in self._random_distinct(count, [])
            ]

        weights = self.estimator.weights(tables.numbers)
        scorer = CoOccurrenceScorer(tables.cooccurrence_matrix, self.config.cooccurrence_top_n)
        window = self._tier_window(tier)
        recent = tables.numbers[-window:] if window else []

        results: List[BlendResult] = []
        accepted: List[Ticket] = []
        attempts = 0

        while len(accepted) < count and attempts < self.config.blend_max_attempts:
            attempts += 1
            ticket = self._sample_ticket(weights)
            if not self._is_distinct(ticket, accepted):
                continue

            hits = count_historical_hits(ticket, recent) if window else 0
            if window and hits < 1:
                continue

            accepted.append(ticket)
            results.append(BlendResult(
                ticket=ticket,
                explanation=self._explain(tier, ticket, scorer.score(ticket), hits, window),
            ))

        logger.debug(f"SmartBlend: accepted {len(accepted)}/{count} after {attempts} attempts")

        if len(accepted) < count:
            logger.warning(
                f"SmartBlend: only {len(accepted)} candidates passed the {TIER_LABELS[tier].lower()} "
                f"filter, filling with diversity fallback"
            )
            for ticket in self._fill_diverse(weights, accepted, count - len(accepted)):
                accepted.append(ticket)
                results.append(BlendResult(
                    ticket=ticket,
                    explanation=(
                        f"Diversity fallback: too few combinations passed the {TIER_LABELS[tier].lower()} "
                        f"filter, so this Bayes-weighted pick was added for variety."
                    ),
                    fallback=True,
                ))

        logger.info(f"SmartBlend generated {len(results)} tickets (tier={tier.name.lower()})")
        return results

    def _parse_tier(self, risk_tier) -> RiskTier:
        # bool is an int subclass; True must not pass as tier 1
        if isinstance(risk_tier, (int, np.integer)) and not isinstance(risk_tier, bool):
            try:
                return RiskTier(int(risk_tier))
            except ValueError:
                pass
        logger.error(f"Invalid risk tier: {risk_tier!r}")
        raise ValidationError("risk tier", f"Invalid risk tier: {risk_tier!r} (expected 0, 1 or 2)")

    def _tier_window(self, tier: RiskTier) -> int:
        if tier == RiskTier.SAFE:
            return self.config.blend_safe_window
        if tier == RiskTier.BALANCED:
            return self.config.blend_balanced_window
        return 0

    def _sample_ticket(self, weights: Dict[int, float]) -> Ticket:
        return normalize_ticket(self.sampler.pick(weights, TICKET_SIZE), self.rng)

    def _is_distinct(self, ticket: Ticket, accepted: List[Ticket]) -> bool:
        if is_sequential(ticket):
            return False
        return not is_near_duplicate(ticket, accepted, self.config.near_duplicate_overlap)

    def _fill_diverse(self, weights: Dict[int, float], accepted: List[Ticket], needed: int) -> List[Ticket]:
        """Bayes-weighted samples, falling back to uniform ones once the attempt budget is spent"""
        filled: List[Ticket] = []
        attempts = 0
        while len(filled) < needed:
            attempts += 1
            if attempts <= self.config.blend_max_attempts:
                ticket = self._sample_ticket(weights)
            else:
                ticket = random_ticket(self.rng)
            if self._is_distinct(ticket, accepted + filled):
                filled.append(ticket)
        return filled

    def _random_distinct(self, count: int, accepted: List[Ticket]) -> List[Ticket]:
        tickets: List[Ticket] = []
        while len(tickets) < count:
            ticket = random_ticket(self.rng)
            if self._is_distinct(ticket, accepted + tickets):
                tickets.append(ticket)
        return tickets

    @staticmethod
    def _explain(tier: RiskTier, ticket: Ticket, co_score: int, hits: int, window: int) -> str:
        if tier == RiskTier.AGGRESSIVE:
            text = (
                f"Aggressive: picked for diversity over historical hit-rate "
                f"(spread {spread_score(ticket):.1f})."
            )
        else:
            text = (
                f"{TIER_LABELS[tier]}: would have won 5th place or better "
                f"{hits} time(s) in the last {window} draws."
            )

        if co_score > 0:
            text += f" Contains number pairs that often appear together (co-occurrence {co_score})."
        else:
            text += " No co-occurrence signal."
        return text

    # ------------------------------------------------------------------
    # Last-week followers
    # ------------------------------------------------------------------

    def last_week_followers(self, draws: Sequence[DrawLike]) -> BlendResult:
        """
        One ticket built around the most recent draw.

        Pools the top followers (numbers most often drawn together) of each
        number in the last draw, pads the pool with random numbers, and keeps
        the best co-occurrence + spread combination that is not sequential
        and repeats at most two of last week's numbers.

        Args:
            draws: chronological history, oldest first

        Returns:
            BlendResult; ``fallback`` is set when no combination qualified
        """
        tables = draws if isinstance(draws, HistoryTables) else HistoryTables(draws)
        if tables.is_empty:
            logger.warning("SmartBlend followers: no previous draw, returning random ticket")
            return BlendResult(
                ticket=random_ticket(self.rng),
                explanation=f"Last-week followers: {FALLBACK_LABEL}",
                fallback=True,
            )

        last_week = tables.numbers[-1]
        pool: List[int] = []
        for num in last_week:
            for follower in top_followers(num, tables.transitions):
                if follower not in pool:
                    pool.append(follower)
        while len(pool) < FOLLOWER_POOL_SIZE:
            num = int(self.rng.integers(MIN_NUMBER, MAX_NUMBER + 1))
            if num not in pool:
                pool.append(num)

        scorer = CoOccurrenceScorer(tables.cooccurrence_matrix, self.config.cooccurrence_top_n)
        best: Optional[Ticket] = None
        best_score = None
        for _ in range(FOLLOWER_ATTEMPTS):
            ticket = sorted(int(n) for n in self.rng.permutation(pool)[:TICKET_SIZE])
            if is_sequential(ticket) or overlap(ticket, last_week) > MAX_LAST_WEEK_REPEATS:
                continue
            score = scorer.score(ticket) + spread_score(ticket)
            if best_score is None or score > best_score:
                best, best_score = ticket, score

        if best is None:
            logger.warning(f"SmartBlend followers: no combination qualified in {FOLLOWER_ATTEMPTS} attempts")
            return BlendResult(
                ticket=random_ticket(self.rng),
                explanation="Last-week followers: no qualifying combination, so a random pick was used.",
                fallback=True,
            )

        used = [n for n in best if n in last_week]
        text = "Last-week followers: "
        if used:
            text += f"keeps {', '.join(str(n) for n in used)} from last week's draw and adds "
        else:
            text += "built from "
        text += "numbers that historically appear together with last week's numbers."
        logger.debug(f"SmartBlend followers: pool of {len(pool)}, picked {best} (score {best_score:.1f})")
        return BlendResult(ticket=best, explanation=text)

    # ------------------------------------------------------------------
    # Composite-score pipeline
    # ------------------------------------------------------------------

    def rank(self, draws: Sequence[DrawLike], count: Optional[int] = None,
             lucky_number: Optional[int] = None, iterations: Optional[int] = None,
             week: Optional[int] = None) -> List[ScoredCandidate]:
        """
        Rank a stratified oversample by composite score.

        Args:
            draws: chronological history, oldest first
            count: how many candidates to return
            lucky_number: optional number injected into a week-rotating slot
            iterations: Monte-Carlo iterations per candidate
            week: week index used for the lucky slot, defaults to weeks since epoch

        Returns:
            Up to ``count`` ScoredCandidate, best first, pairwise overlap below
            ``near_duplicate_overlap``
        """
        count = count or self.config.blend_ticket_count
        if lucky_number is not None and not MIN_NUMBER <= lucky_number <= MAX_NUMBER:
            logger.error(f"Invalid lucky number: {lucky_number}")
            raise ValidationError("lucky number", f"Invalid lucky number: {lucky_number} (expected 1-45)")

        tables = draws if isinstance(draws, HistoryTables) else HistoryTables(draws)
        if tables.is_empty:
            logger.warning("SmartBlend rank: empty history, Bayes weights are uniform")
        weights = self.estimator.weights(tables.numbers)

        if week is None:
            week = int(time.time() // SECONDS_PER_WEEK)
        lucky_slot = week % TICKET_SIZE

        pool = self._stratified_pool(weights, count * self.config.oversample_factor, lucky_number, lucky_slot)
        payouts = self.simulator.expected_payouts(pool, self.rng, iterations)

        median = upper_median(payouts)
        paying = [(t, p) for t, p in zip(pool, payouts) if p >= median]
        logger.debug(f"SmartBlend rank: {len(paying)}/{len(pool)} candidates at or above median payout {median:.1f}")

        pretty = [(t, p) for t, p in paying if is_aesthetic(t, self.config.aesthetic_min_variance)]
        pretty_payouts = [p for _, p in pretty]

        candidates = []
        for ticket, payout in pretty:
            hotness = self.estimator.hotness(ticket, weights)
            ent = ticket_entropy(ticket)
            percentile = payout_percentile(payout, pretty_payouts)
            lucky = int(lucky_number is not None and lucky_number in ticket)
            candidates.append(ScoredCandidate(
                ticket=ticket,
                bayes_hotness=hotness,
                entropy=ent,
                payout_percentile=percentile,
                lucky_boost=lucky,
                composite_score=composite_score(hotness, ent, percentile, lucky),
                expected_payout=payout,
            ))

        candidates.sort(key=lambda c: c.composite_score, reverse=True)

        kept: List[ScoredCandidate] = []
        for candidate in candidates:
            if len(kept) >= count:
                break
            if is_near_duplicate(candidate.ticket, [k.ticket for k in kept], self.config.near_duplicate_overlap):
                continue
            candidate.explanation = self._explain_composite(candidate, tables.is_empty)
            kept.append(candidate)

        if len(kept) < count:
            logger.warning(f"SmartBlend rank: only {len(kept)}/{count} candidates survived filtering")

        logger.info(f"SmartBlend ranked {len(kept)} candidates from a pool of {len(pool)}")
        return kept

    def _stratified_pool(self, weights: Dict[int, float], size: int,
                         lucky_number: Optional[int], lucky_slot: int) -> List[Ticket]:
        strata = [{num: weights[num] for num in band} for band in stratum_bounds()]
        pool = []
        for _ in range(size):
            numbers = [self.sampler.pick_one(stratum) for stratum in strata]
            if lucky_number is not None and lucky_number not in numbers:
                numbers[lucky_slot] = lucky_number
            pool.append(sorted(numbers))
        return pool

    @staticmethod
    def _explain_composite(candidate: ScoredCandidate, no_history: bool) -> str:
        text = (
            f"Composite score {candidate.composite_score:.3f}: Bayesian hotness {candidate.bayes_hotness:.3f}, "
            f"gap entropy {candidate.entropy:.2f}, payout percentile {candidate.payout_percentile:.2f}"
        )
        if candidate.lucky_boost:
            text += ", includes your lucky number"
        text += "."
        if no_history:
            text += f" ({FALLBACK_LABEL})"
        return text
