"""
Tests for strategy_generators.py module

Focus: every strategy returns a valid ticket, required options raise
ValidationError naming the field, and bounded resampling loops fall back to
a random ticket.
"""

import datetime as dt
from unittest.mock import patch

import numpy as np
import pytest

from lotto_engine.analysis import HistoryTables
from lotto_engine.exceptions import ValidationError
from lotto_engine.models import draws_from_numbers
from lotto_engine.strategy_generators import (
    STRATEGY_CLASSES,
    BaseStrategy,
    StrategyLibrary,
    generate,
)
from lotto_engine.strategy_options import ZODIAC_NUMBERS, StrategyKind
from lotto_engine.tickets import odd_count, ticket_sum, validate_ticket, zone_of

OPTIONS = {
    StrategyKind.birthday: {'birthday': '1990-05-17'},
    StrategyKind.zodiac: {'sign': 'leo'},
    StrategyKind.personalized: {'sign': 'Leo', 'today': dt.date(2024, 3, 1)},
    StrategyKind.reduced_wheel: {'core': [3, 8, 15, 22, 29, 36, 41]},
    StrategyKind.positional_select: {'selected_positions': {1: 5, 6: 44}, 'fill_strategy': 'hot_cold_hybrid'},
    StrategyKind.semi_automatic: {'locked': [7, None, 21]},
}


@pytest.fixture
def library():
    return StrategyLibrary()


class TestStrategyLibrary:
    """Registry and dispatch"""

    def test_all_kinds_registered(self, library):
        assert set(library.strategies) == set(StrategyKind)
        assert len(STRATEGY_CLASSES) == len(StrategyKind)

    @pytest.mark.parametrize("kind", list(StrategyKind))
    def test_every_strategy_returns_valid_ticket(self, library, kind, sample_draws, rng):
        ticket = library.generate(kind, draws=sample_draws, rng=rng, **OPTIONS.get(kind, {}))

        assert validate_ticket(ticket)
        assert all(type(n) is int for n in ticket)

    def test_accepts_string_kind(self, library, sample_draws, rng):
        assert validate_ticket(library.generate('hot_pairs', draws=sample_draws, rng=rng))

    def test_unknown_strategy(self, library):
        with pytest.raises(ValidationError) as exc:
            library.generate('gradient_boost')
        assert exc.value.field == "strategy"

    def test_seed_reproducible(self, library, sample_draws):
        first = library.generate(StrategyKind.markov_chain, draws=sample_draws, rng=11)
        second = library.generate(StrategyKind.markov_chain, draws=sample_draws, rng=11)
        assert first == second

    def test_generate_many_shares_tables(self, library, sample_draws, rng):
        with patch('lotto_engine.strategy_generators.HistoryTables', wraps=HistoryTables) as tables_cls:
            tickets = library.generate_many(StrategyKind.frequency_window, 8, draws=sample_draws, rng=rng)

        assert len(tickets) == 8
        assert all(validate_ticket(t) for t in tickets)
        assert tables_cls.call_count == 1

    def test_prebuilt_tables_reused(self, library, sample_draws, rng):
        tables = HistoryTables(sample_draws)
        library.generate(StrategyKind.hot_cold_hybrid, tables=tables, rng=rng)
        assert 'frequency' in tables.__dict__

    def test_module_level_generate(self, rng):
        assert validate_ticket(generate('random', rng=rng))

    def test_base_strategy_not_implemented(self, rng):
        class Dummy(BaseStrategy):
            kind = StrategyKind.random

        with pytest.raises(NotImplementedError):
            Dummy().generate(HistoryTables([]), None, rng)


class TestValidation:
    """Missing options and history raise ValidationError naming the field"""

    def test_reduced_wheel_empty_core(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.reduced_wheel, rng=rng, core=[])
        assert exc.value.field == "core numbers"
        assert "core numbers" in str(exc.value)

    def test_reduced_wheel_missing_core(self, library, rng):
        with pytest.raises(ValidationError, match="core numbers"):
            library.generate(StrategyKind.reduced_wheel, rng=rng)

    def test_birthday_missing(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.birthday, rng=rng)
        assert exc.value.field == "birthday"

    def test_birthday_malformed(self, library, rng):
        with pytest.raises(ValidationError, match="Invalid birthday"):
            library.generate(StrategyKind.birthday, rng=rng, birthday='17/05/1990')

    def test_zodiac_missing(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.zodiac, rng=rng)
        assert exc.value.field == "zodiac sign"

    def test_zodiac_unknown_sign(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.zodiac, rng=rng, sign='Dragon')
        assert exc.value.field == "zodiac sign"

    def test_personalized_requires_identity(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.personalized, rng=rng)
        assert exc.value.field == "zodiac sign or birthday"

    def test_positional_select_missing_positions(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.positional_select, rng=rng, fill_strategy='random')
        assert exc.value.field == "selected positions"

    def test_positional_select_missing_fill(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.positional_select, rng=rng, selected_positions={1: 3})
        assert exc.value.field == "fill strategy"

    def test_positional_select_recursive_fill(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.positional_select, rng=rng,
                             selected_positions={1: 3}, fill_strategy='positional_select')
        assert exc.value.field == "fill strategy"

    @pytest.mark.parametrize("kind", [
        StrategyKind.frequency_window,
        StrategyKind.hot_cold_hybrid,
        StrategyKind.expected_gap,
        StrategyKind.hot_pairs,
        StrategyKind.hot_triplets,
        StrategyKind.cooccurrence,
        StrategyKind.delta_system,
        StrategyKind.positional_frequency,
        StrategyKind.markov_chain,
    ])
    def test_history_required(self, library, kind, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(kind, draws=[], rng=rng)
        assert exc.value.field == "historical draws"

        with pytest.raises(ValidationError):
            library.generate(kind, rng=rng)

    def test_positional_select_fill_needs_history(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.positional_select, rng=rng,
                             selected_positions={1: 3}, fill_strategy='hot_pairs')
        assert exc.value.field == "historical draws"

    def test_validation_error_is_value_error(self, library):
        with pytest.raises(ValueError):
            library.generate(StrategyKind.reduced_wheel, core=[])


class TestHistoryStrategies:
    """Strategies driven by history tables"""

    def test_frequency_window_picks_only_seen_numbers(self, library, rng):
        draws = draws_from_numbers([[2, 7, 13, 24, 31, 40]] * 100)

        for _ in range(10):
            ticket = library.generate(StrategyKind.frequency_window, draws=draws, rng=rng)
            assert ticket == [2, 7, 13, 24, 31, 40]

    def test_frequency_window_respects_window(self, library, rng):
        rows = [[1, 2, 3, 4, 5, 6]] * 50 + [[40, 41, 42, 43, 44, 45]] * 5
        ticket = library.generate(StrategyKind.frequency_window, draws=draws_from_numbers(rows), rng=rng, window=5)
        assert ticket == [40, 41, 42, 43, 44, 45]

    def test_hot_cold_hybrid(self, library, rng):
        rows = [[1, 2, 3, 10, 20, 30]] * 3 + [[1, 2, 3, 11, 21, 31]] * 2
        ticket = library.generate(StrategyKind.hot_cold_hybrid, draws=draws_from_numbers(rows), rng=rng)
        # hottest 1, 2, 3; coldest 43, 44, 45 (zero count, stable order)
        assert ticket == [1, 2, 3, 43, 44, 45]

    def test_expected_gap_uses_overdue_numbers(self, library, rng):
        rows = [[1, 2, 3, 4, 5, 6], [7, 8, 9, 10, 11, 12]] * 10 + [[13, 14, 15, 16, 17, 18]] * 4
        ticket = library.generate(StrategyKind.expected_gap, draws=draws_from_numbers(rows), rng=rng)
        assert ticket == [1, 2, 3, 4, 5, 6]

    def test_hot_pairs(self, library, rng):
        rows = [[1, 2, 3, 4, 5, 6]] * 6
        ticket = library.generate(StrategyKind.hot_pairs, draws=draws_from_numbers(rows), rng=rng)
        assert ticket == [1, 2, 3, 4, 5, 6]

    def test_cooccurrence_seeds_top_pair(self, library, rng):
        rows = [[5, 9, 20 + i, 30 + i, 40, 1 + i] for i in range(3)] + [[5, 9, 12, 13, 14, 15]]
        ticket = library.generate(StrategyKind.cooccurrence, draws=draws_from_numbers(rows), rng=rng)
        assert {5, 9} <= set(ticket)

    def test_delta_system_follows_signature(self, library, rng):
        rows = [[1, 3, 6, 10, 15, 21]] * 5
        ticket = library.generate(StrategyKind.delta_system, draws=draws_from_numbers(rows), rng=rng)
        deltas = [b - a for a, b in zip(ticket, ticket[1:])]
        assert deltas == [2, 3, 4, 5, 6]

    def test_positional_frequency_single_history(self, library, rng):
        draws = draws_from_numbers([[4, 11, 19, 27, 35, 44]])
        ticket = library.generate(StrategyKind.positional_frequency, draws=draws, rng=rng)
        assert ticket == [4, 11, 19, 27, 35, 44]

    def test_markov_chain_valid_on_sparse_history(self, library, rng):
        draws = draws_from_numbers([[1, 2, 3, 4, 5, 6]])
        for _ in range(10):
            assert validate_ticket(library.generate(StrategyKind.markov_chain, draws=draws, rng=rng))


class TestConstrainedStrategies:
    """Parity / sum / zone resampling loops"""

    def test_odd_even_balanced(self, library, rng):
        for _ in range(10):
            assert odd_count(library.generate(StrategyKind.odd_even_balanced, rng=rng)) == 3

    def test_sum_in_range_default(self, library, rng):
        for _ in range(10):
            assert 100 <= ticket_sum(library.generate(StrategyKind.sum_in_range, rng=rng)) <= 200

    def test_sum_in_range_custom_bounds(self, library, rng):
        for _ in range(10):
            ticket = library.generate(StrategyKind.sum_in_range, rng=rng, low=100, high=170)
            assert 100 <= ticket_sum(ticket) <= 170

    def test_sum_in_range_inverted_bounds(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.sum_in_range, rng=rng, low=180, high=120)
        assert exc.value.field == "sum range"

    @pytest.mark.parametrize("bounds", [{'low': 240}, {'high': 50}])
    def test_sum_in_range_single_bound_conflicts_with_default(self, library, rng, bounds):
        """One bound given; the other comes from config (100-200) and the range is empty"""
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.sum_in_range, rng=rng, **bounds)
        assert exc.value.field == "sum range"
        assert "exceeds upper bound" in str(exc.value)

    def test_sum_in_range_single_bound_within_default(self, library, rng):
        ticket = library.generate(StrategyKind.sum_in_range, rng=rng, low=150)
        assert 150 <= ticket_sum(ticket) <= 200

    def test_zone_balanced(self, library, rng):
        for _ in range(10):
            ticket = library.generate(StrategyKind.zone_balanced, rng=rng)
            assert {zone_of(n) for n in ticket} == {0, 1, 2}

    def test_odd_even_exhaustion_falls_back(self, library, rng):
        """1000 rejected attempts, then one unconstrained random ticket"""
        all_odd = [1, 3, 5, 7, 9, 11]
        with patch('lotto_engine.strategy_generators.random_ticket', return_value=all_odd) as mock_random:
            ticket = library.generate(StrategyKind.odd_even_balanced, rng=rng)

        assert ticket == all_odd
        assert validate_ticket(ticket)
        assert mock_random.call_count == 1001

    def test_sum_in_range_exhaustion_falls_back(self, library, rng):
        lowest = [1, 2, 3, 4, 5, 6]
        with patch('lotto_engine.strategy_generators.random_ticket', return_value=lowest) as mock_random:
            ticket = library.generate(StrategyKind.sum_in_range, rng=rng)

        assert ticket_sum(ticket) == 21
        assert ticket == lowest
        assert validate_ticket(ticket)
        assert mock_random.call_count == 1001

    def test_zone_balanced_exhaustion_falls_back(self, library, rng):
        first_zone = [1, 3, 5, 7, 9, 11]
        with patch('lotto_engine.strategy_generators.random_ticket', return_value=first_zone) as mock_random:
            ticket = library.generate(StrategyKind.zone_balanced, rng=rng)

        assert {zone_of(n) for n in ticket} == {0}
        assert ticket == first_zone
        assert validate_ticket(ticket)
        assert mock_random.call_count == 1001


class TestPersonalStrategies:
    """Birthday, zodiac, personalized, wheel, positional select, semi-automatic"""

    def test_birthday_combinations(self, library):
        first = library.generate(StrategyKind.birthday, rng=1, birthday='1990-05-17')
        second = library.generate(StrategyKind.birthday, rng=2, birthday='1990-05-17')
        # combos 33, 23, 6, 41, 41, 23: duplicates are padded randomly
        assert {6, 23, 33, 41} <= set(first)
        assert {6, 23, 33, 41} <= set(second)

    def test_zodiac_table(self, library, rng):
        assert library.generate(StrategyKind.zodiac, rng=rng, sign='LEO') == sorted(ZODIAC_NUMBERS['Leo'])

    def test_personalized_stable_for_the_day(self, library):
        day = dt.date(2024, 3, 1)
        first = library.generate(StrategyKind.personalized, rng=1, sign='Leo', today=day)
        second = library.generate(StrategyKind.personalized, rng=99, sign='Leo', today=day)
        assert first == second

    def test_personalized_changes_with_date(self, library):
        tickets = {
            tuple(library.generate(StrategyKind.personalized, birthday='1990-05-17', today=dt.date(2024, 3, d)))
            for d in range(1, 8)
        }
        assert len(tickets) > 1

    def test_reduced_wheel_truncates(self, library, rng):
        ticket = library.generate(StrategyKind.reduced_wheel, rng=rng, core=[41, 3, 3, 50, 8, 15, 22, 29, 36])
        assert ticket == [3, 8, 15, 22, 29, 41]

    def test_reduced_wheel_pads_short_core(self, library, rng):
        ticket = library.generate(StrategyKind.reduced_wheel, rng=rng, core=[5, 10])
        assert validate_ticket(ticket)
        assert {5, 10} <= set(ticket)

    def test_positional_select_keeps_fixed_numbers(self, library, sample_draws, rng):
        ticket = library.generate(StrategyKind.positional_select, draws=sample_draws, rng=rng,
                                  selected_positions={1: 5, 3: 17, 6: 44}, fill_strategy='frequency_window',
                                  fill_options={'window': 10})
        assert {5, 17, 44} <= set(ticket)
        assert validate_ticket(ticket)

    def test_semi_automatic(self, library, rng):
        ticket = library.generate(StrategyKind.semi_automatic, rng=rng, locked=[7, None, 21, None, 45, None])
        assert {7, 21, 45} <= set(ticket)
        assert validate_ticket(ticket)

    def test_semi_automatic_duplicate_locked(self, library, rng):
        with pytest.raises(ValidationError) as exc:
            library.generate(StrategyKind.semi_automatic, rng=rng, locked=[7, 7])
        assert exc.value.field == "locked numbers"
