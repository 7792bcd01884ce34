"""
Lotto Engine Strategy Generators
================================
One strategy class per generation method, plus the StrategyLibrary that
validates options and dispatches to them.

Every strategy returns through normalize_ticket, so its output is always
6 distinct numbers in 1-45, ascending.
"""

import hashlib
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Type

import numpy as np
import pydantic
import pytz
from loguru import logger

from lotto_engine.analysis import DrawLike, HistoryTables
from lotto_engine.config import EngineConfig, MAX_NUMBER, MIN_NUMBER, TICKET_SIZE, get_config
from lotto_engine.exceptions import ValidationError
from lotto_engine.models import Ticket
from lotto_engine.sampling import RandomSource, WeightedSampler, make_rng
from lotto_engine.strategy_options import (
    ZODIAC_NUMBERS,
    BirthdayOptions,
    NoOptions,
    PersonalizedOptions,
    PositionalSelectOptions,
    ReducedWheelOptions,
    SemiAutomaticOptions,
    StrategyKind,
    StrategyOptions,
    SumRangeOptions,
    WindowOptions,
    ZodiacOptions,
)
from lotto_engine.tickets import normalize_ticket, odd_count, random_ticket, ticket_sum, zone_of

KST = pytz.timezone('Asia/Seoul')


class BaseStrategy:
    """Base class for all ticket generation strategies"""

    kind: StrategyKind = None
    options_model: Type[StrategyOptions] = NoOptions
    requires_history: bool = False

    def __init__(self, config: EngineConfig = None):
        self.config = config or get_config()
        self.name = self.kind.value

    def generate(self, tables: HistoryTables, options: StrategyOptions, rng: np.random.Generator) -> Ticket:
        """Generate one ticket. Must be implemented by subclasses"""
        raise NotImplementedError(f"Strategy {self.name} must implement generate()")


class RandomStrategy(BaseStrategy):
    """Pure random generation (baseline)"""

    kind = StrategyKind.random

    def generate(self, tables, options, rng):
        return normalize_ticket(random_ticket(rng), rng)


class BirthdayStrategy(BaseStrategy):
    """Six modular combinations of the birth year, month and day"""

    kind = StrategyKind.birthday
    options_model = BirthdayOptions

    def generate(self, tables, options, rng):
        year, month, day = (int(part) for part in options.birthday.split('-'))
        combos = [
            (year + month + day) % MAX_NUMBER + 1,
            (year * month + day) % MAX_NUMBER + 1,
            (year + month * day) % MAX_NUMBER + 1,
            (year * day + month) % MAX_NUMBER + 1,
            (month * day + year % 100) % MAX_NUMBER + 1,
            (year % 100 + month + day) % MAX_NUMBER + 1,
        ]
        # collisions are padded with random numbers
        return normalize_ticket(combos, rng)


class ZodiacStrategy(BaseStrategy):
    """Fixed number set per western zodiac sign"""

    kind = StrategyKind.zodiac
    options_model = ZodiacOptions

    def generate(self, tables, options, rng):
        return normalize_ticket(ZODIAC_NUMBERS[options.sign], rng)


class PersonalizedStrategy(BaseStrategy):
    """
    Today's numbers for a person.

    The ticket is seeded from the zodiac label or birthdate plus the calendar
    day in Korea Standard Time, so it stays fixed for the whole day and does
    not consume the caller's random source.
    """

    kind = StrategyKind.personalized
    options_model = PersonalizedOptions

    def generate(self, tables, options, rng):
        today = options.today or datetime.now(KST).date()
        if options.sign:
            seed_text = f"zodiac-{options.sign}-{today.isoformat()}"
        else:
            seed_text = f"birthdate-{options.birthday}-{today.isoformat()}"

        seed = int.from_bytes(hashlib.sha256(seed_text.encode('utf-8')).digest()[:8], 'big')
        personal_rng = np.random.default_rng(seed)
        logger.debug(f"{self.name}: seeded from '{seed_text}'")
        return normalize_ticket(random_ticket(personal_rng), personal_rng)


class FrequencyWindowStrategy(BaseStrategy):
    """Weighted pick by occurrence count over the last N draws"""

    kind = StrategyKind.frequency_window
    options_model = WindowOptions
    requires_history = True

    def generate(self, tables, options, rng):
        window = options.window or self.config.window_size
        weights = tables.frequency_window(window)
        picked = WeightedSampler(rng).pick(weights, TICKET_SIZE)
        return normalize_ticket(picked, rng)


class HotColdHybridStrategy(BaseStrategy):
    """3 most frequent + 3 least frequent numbers over the full history"""

    kind = StrategyKind.hot_cold_hybrid
    requires_history = True

    def generate(self, tables, options, rng):
        # stable sort: ties keep table order (ascending number)
        ranked = sorted(tables.frequency.items(), key=lambda item: item[1], reverse=True)
        hottest = [num for num, _ in ranked[:3]]
        coldest = [num for num, _ in ranked[-3:]]
        return normalize_ticket(hottest + coldest, rng)


class ExpectedGapStrategy(BaseStrategy):
    """Numbers whose current gap exceeds 1.2x their historical average gap"""

    kind = StrategyKind.expected_gap
    requires_history = True

    def generate(self, tables, options, rng):
        factor = self.config.gap_overdue_factor
        overdue = [num for num, stats in tables.gaps.items()
                   if stats.current_gap > stats.average_gap * factor]
        logger.debug(f"{self.name}: {len(overdue)} overdue numbers")
        return normalize_ticket(overdue[:TICKET_SIZE], rng)


def _unpack_combinations(ranked: Sequence[Sequence[int]]) -> List[int]:
    result = []
    for combo in ranked:
        for num in combo:
            if len(result) < TICKET_SIZE and num not in result:
                result.append(num)
        if len(result) >= TICKET_SIZE:
            break
    return result


class HotPairsStrategy(BaseStrategy):
    """Numbers from the most frequent pairs (count >= 5, top 10)"""

    kind = StrategyKind.hot_pairs
    requires_history = True

    def generate(self, tables, options, rng):
        hot = [(pair, count) for pair, count in tables.pairs.items()
               if count >= self.config.hot_pair_min_count]
        hot.sort(key=lambda item: item[1], reverse=True)
        ranked = [pair for pair, _ in hot[:self.config.hot_pair_limit]]
        return normalize_ticket(_unpack_combinations(ranked), rng)


class HotTripletsStrategy(BaseStrategy):
    """Numbers from the most frequent triplets (count >= 3, top 5)"""

    kind = StrategyKind.hot_triplets
    requires_history = True

    def generate(self, tables, options, rng):
        hot = [(triplet, count) for triplet, count in tables.triplets.items()
               if count >= self.config.hot_triplet_min_count]
        hot.sort(key=lambda item: item[1], reverse=True)
        ranked = [triplet for triplet, _ in hot[:self.config.hot_triplet_limit]]
        return normalize_ticket(_unpack_combinations(ranked), rng)


class CooccurrenceStrategy(BaseStrategy):
    """Start from the single most frequent pair of the recent window, fill randomly"""

    kind = StrategyKind.cooccurrence
    requires_history = True

    def generate(self, tables, options, rng):
        recent = tables.draws[-self.config.lookback_window:]
        pairs = tables.analyzer.co_occurrence(recent, 'pair')
        if not pairs:
            return normalize_ticket([], rng)
        top_pair, count = max(pairs.items(), key=lambda item: item[1])
        logger.debug(f"{self.name}: top pair {top_pair} seen {count} times")
        return normalize_ticket(top_pair, rng)


class DeltaSystemStrategy(BaseStrategy):
    """Rebuild a ticket from one of the most common consecutive-gap signatures"""

    kind = StrategyKind.delta_system
    requires_history = True

    def generate(self, tables, options, rng):
        top = [signature for signature, _ in tables.deltas.most_common(self.config.delta_top_patterns)]
        signature = top[int(rng.integers(len(top)))]
        start = int(rng.integers(1, self.config.delta_start_max + 1))

        result = [start]
        for delta in signature:
            candidate = result[-1] + delta
            if candidate <= MAX_NUMBER and len(result) < TICKET_SIZE:
                result.append(candidate)
        return normalize_ticket(result, rng)


class PositionalFrequencyStrategy(BaseStrategy):
    """One weighted pick per sorted position; collisions resolved by padding"""

    kind = StrategyKind.positional_frequency
    requires_history = True

    def generate(self, tables, options, rng):
        sampler = WeightedSampler(rng)
        picks = []
        for position in range(1, TICKET_SIZE + 1):
            num = sampler.pick_one(tables.positional[position])
            if num is not None:
                picks.append(num)
        return normalize_ticket(picks, rng)


class _ConstrainedRandomStrategy(BaseStrategy):
    """Resample random tickets until a constraint holds, within a fixed budget"""

    def accepts(self, ticket: Ticket, options: StrategyOptions) -> bool:
        raise NotImplementedError

    def generate(self, tables, options, rng):
        attempts = self.config.max_resample_attempts
        for _ in range(attempts):
            ticket = random_ticket(rng)
            if self.accepts(ticket, options):
                return normalize_ticket(ticket, rng)

        logger.warning(f"{self.name}: no ticket met the constraint in {attempts} attempts, using random ticket")
        return normalize_ticket(random_ticket(rng), rng)


class OddEvenBalancedStrategy(_ConstrainedRandomStrategy):
    """Exactly 3 odd and 3 even numbers"""

    kind = StrategyKind.odd_even_balanced

    def accepts(self, ticket, options):
        return odd_count(ticket) == 3


class SumInRangeStrategy(_ConstrainedRandomStrategy):
    """Ticket sum inside [low, high] (default 100-200)"""

    kind = StrategyKind.sum_in_range
    options_model = SumRangeOptions

    def bounds(self, options: SumRangeOptions) -> tuple:
        """Requested bounds with config defaults filled in"""
        low = options.low if options.low is not None else self.config.sum_range_min
        high = options.high if options.high is not None else self.config.sum_range_max
        return low, high

    def generate(self, tables, options, rng):
        low, high = self.bounds(options)
        if low > high:
            message = f"Invalid sum range for {self.name} strategy: lower bound {low} exceeds upper bound {high}"
            logger.error(message)
            raise ValidationError("sum range", message)
        return super().generate(tables, options, rng)

    def accepts(self, ticket, options):
        low, high = self.bounds(options)
        return low <= ticket_sum(ticket) <= high


class ZoneBalancedStrategy(_ConstrainedRandomStrategy):
    """At least one number from each zone 1-15, 16-30, 31-45"""

    kind = StrategyKind.zone_balanced

    def accepts(self, ticket, options):
        return len({zone_of(n) for n in ticket}) == 3


class ReducedWheelStrategy(BaseStrategy):
    """
    First 6 distinct valid core numbers.

    Not a true covering wheel; the core list is only truncated.
    """

    kind = StrategyKind.reduced_wheel
    options_model = ReducedWheelOptions

    def generate(self, tables, options, rng):
        unique = []
        for num in options.core:
            if MIN_NUMBER <= num <= MAX_NUMBER and num not in unique:
                unique.append(num)
        return normalize_ticket(unique[:TICKET_SIZE], rng)


class MarkovChainStrategy(BaseStrategy):
    """Walk the same-draw transition counts, one weighted step per number"""

    kind = StrategyKind.markov_chain
    requires_history = True

    def generate(self, tables, options, rng):
        sampler = WeightedSampler(rng)
        transitions = tables.transitions
        result = []
        current = int(rng.integers(MIN_NUMBER, MAX_NUMBER + 1))

        while len(result) < TICKET_SIZE:
            result.append(current)
            if len(result) == TICKET_SIZE:
                break

            row = {num: count for num, count in transitions[current].items() if num not in result}
            following = sampler.pick_one(row)
            if following is None:
                # row exhausted
                available = [n for n in range(MIN_NUMBER, MAX_NUMBER + 1) if n not in result]
                following = int(available[int(rng.integers(len(available)))])
            current = following

        return normalize_ticket(result, rng)


class PositionalSelectStrategy(BaseStrategy):
    """Fixed positions from the caller, the rest filled by another strategy"""

    kind = StrategyKind.positional_select
    options_model = PositionalSelectOptions

    def __init__(self, config: EngineConfig = None, library: 'StrategyLibrary' = None):
        super().__init__(config)
        self.library = library

    def generate(self, tables, options, rng):
        result = [0] * TICKET_SIZE
        for position, num in options.selected_positions.items():
            if 1 <= position <= TICKET_SIZE and MIN_NUMBER <= num <= MAX_NUMBER:
                result[position - 1] = num

        used = {n for n in result if n > 0}
        remaining = [idx for idx, num in enumerate(result) if num == 0]
        if not remaining:
            return normalize_ticket(result, rng)

        filler = self.library.generate(options.fill_strategy, rng=rng, tables=tables, **options.fill_options)
        unused = [n for n in filler if n not in used]

        for idx in remaining:
            if unused:
                result[idx] = unused.pop(0)
            else:
                available = [n for n in range(MIN_NUMBER, MAX_NUMBER + 1) if n not in result]
                result[idx] = int(available[int(rng.integers(len(available)))])

        return normalize_ticket(result, rng)


class SemiAutomaticStrategy(BaseStrategy):
    """Locked numbers kept, blank slots filled with random unused numbers"""

    kind = StrategyKind.semi_automatic
    options_model = SemiAutomaticOptions

    def generate(self, tables, options, rng):
        slots = list(options.locked) + [None] * (TICKET_SIZE - len(options.locked))
        used = {n for n in slots if n is not None}
        available = np.array([n for n in range(MIN_NUMBER, MAX_NUMBER + 1) if n not in used])
        blanks = sum(1 for n in slots if n is None)
        generated = iter(int(n) for n in rng.choice(available, size=blanks, replace=False))
        return normalize_ticket([n if n is not None else next(generated) for n in slots], rng)


STRATEGY_CLASSES: List[Type[BaseStrategy]] = [
    RandomStrategy,
    BirthdayStrategy,
    ZodiacStrategy,
    PersonalizedStrategy,
    FrequencyWindowStrategy,
    HotColdHybridStrategy,
    ExpectedGapStrategy,
    HotPairsStrategy,
    HotTripletsStrategy,
    CooccurrenceStrategy,
    DeltaSystemStrategy,
    PositionalFrequencyStrategy,
    OddEvenBalancedStrategy,
    SumInRangeStrategy,
    ZoneBalancedStrategy,
    ReducedWheelStrategy,
    MarkovChainStrategy,
    PositionalSelectStrategy,
    SemiAutomaticStrategy,
]


class StrategyLibrary:
    """
    Registry of all strategies.

    Validates each call's options against the strategy's options model and
    raises ValidationError naming the missing field. Randomness comes from
    the ``rng`` argument; history from ``draws`` or a prebuilt HistoryTables.
    """

    def __init__(self, config: EngineConfig = None):
        self.config = config or get_config()
        self.strategies: Dict[StrategyKind, BaseStrategy] = {}
        for cls in STRATEGY_CLASSES:
            if cls is PositionalSelectStrategy:
                self.strategies[cls.kind] = cls(self.config, library=self)
            else:
                self.strategies[cls.kind] = cls(self.config)
        logger.info(f"StrategyLibrary initialized with {len(self.strategies)} strategies")

    def get_strategy(self, kind: Any) -> BaseStrategy:
        try:
            return self.strategies[StrategyKind(kind)]
        except ValueError:
            logger.error(f"Unknown strategy: {kind!r}")
            raise ValidationError("strategy", f"Unknown strategy: {kind!r}")

    def parse_options(self, strategy: BaseStrategy, options: Dict[str, Any]) -> StrategyOptions:
        """Validate raw options, converting pydantic errors to ValidationError"""
        model = strategy.options_model
        try:
            return model(**options)
        except pydantic.ValidationError as e:
            error = e.errors()[0]
            loc = error.get('loc') or ()
            if loc:
                label = model.FIELD_LABELS.get(str(loc[0]), str(loc[0]))
            else:
                label = model.MODEL_LABEL
            if error.get('type') in ('missing', 'too_short'):
                message = f"{label} required for {strategy.name} strategy"
            else:
                message = f"Invalid {label} for {strategy.name} strategy: {error.get('msg')}"
            logger.error(message)
            raise ValidationError(label, message) from e

    def generate(
        self,
        kind: Any,
        draws: Optional[Sequence[DrawLike]] = None,
        rng: RandomSource = None,
        tables: Optional[HistoryTables] = None,
        **options
    ) -> Ticket:
        """
        Generate one ticket with the named strategy.

        Args:
            kind: StrategyKind or its string value
            draws: chronological history (ignored when ``tables`` is given)
            rng: seed or numpy Generator
            tables: caller-owned tables for the same history, reused across calls
            **options: strategy options (see strategy_options)

        Returns:
            Sorted ticket of 6 distinct numbers

        Raises:
            ValidationError: unknown strategy, missing/invalid option, or
                missing history for a history-dependent strategy
        """
        strategy = self.get_strategy(kind)
        parsed = self.parse_options(strategy, options)
        generator = make_rng(rng)

        if tables is None and draws is not None:
            tables = HistoryTables(draws)
        if strategy.requires_history and (tables is None or tables.is_empty):
            message = f"historical draws required for {strategy.name} strategy"
            logger.error(message)
            raise ValidationError("historical draws", message)
        if tables is None:
            tables = HistoryTables([])

        ticket = strategy.generate(tables, parsed, generator)
        logger.debug(f"{strategy.name}: generated {ticket}")
        return ticket

    def generate_many(
        self,
        kind: Any,
        count: int,
        draws: Optional[Sequence[DrawLike]] = None,
        rng: RandomSource = None,
        **options
    ) -> List[Ticket]:
        """Generate ``count`` tickets from one strategy, sharing one set of tables"""
        strategy = self.get_strategy(kind)
        generator = make_rng(rng)
        tables = HistoryTables(draws) if draws is not None else None
        tickets = [self.generate(strategy.kind, rng=generator, tables=tables, **options) for _ in range(count)]
        logger.debug(f"{strategy.name}: Generated {count} tickets")
        return tickets


def generate(kind: Any, draws: Optional[Sequence[DrawLike]] = None, rng: RandomSource = None, **options) -> Ticket:
    """Generate one ticket using a library built from the default config"""
    return StrategyLibrary().generate(kind, draws=draws, rng=rng, **options)
