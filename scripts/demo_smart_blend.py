#!/usr/bin/env python3
"""
Lotto Engine Demonstration Script
=================================

Runs the engine end to end on a draw history:
- History tables (frequency, gaps, hot pairs)
- One ticket from every strategy
- SmartBlend risk tiers
- Composite ranking with a lucky number

Usage:
    python scripts/demo_smart_blend.py [draws.csv]

The CSV needs columns round, date, n1..n6, bonus. Without one a seeded
synthetic history of 300 draws is used.
"""

import os
import sys
from dataclasses import replace

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pandas as pd
from loguru import logger

from lotto_engine import (
    HistoryTables,
    RiskTier,
    SmartBlendEngine,
    StrategyKind,
    StrategyLibrary,
    ValidationError,
    draws_from_frame,
    draws_from_numbers,
    make_rng,
)
from lotto_engine.config import get_config

DEMO_OPTIONS = {
    StrategyKind.birthday: {'birthday': '1990-05-17'},
    StrategyKind.zodiac: {'sign': 'Leo'},
    StrategyKind.personalized: {'sign': 'Leo'},
    StrategyKind.reduced_wheel: {'core': [3, 8, 15, 22, 29, 36, 41]},
    StrategyKind.positional_select: {'selected_positions': {1: 5, 6: 44}, 'fill_strategy': 'frequency_window'},
    StrategyKind.semi_automatic: {'locked': [7, None, 21]},
}


def print_section(title):
    """Print a formatted section header"""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def load_history(path=None):
    if path:
        logger.info(f"Loading draws from {path}")
        return draws_from_frame(pd.read_csv(path))

    logger.info("No CSV given, generating synthetic history")
    gen = np.random.default_rng(645)
    rows = [sorted(int(n) for n in gen.choice(np.arange(1, 46), size=6, replace=False)) for _ in range(300)]
    return draws_from_numbers(rows)


def demo_tables(tables):
    """Show the derived history tables"""
    print_section("History Tables")

    hottest = sorted(tables.frequency.items(), key=lambda item: item[1], reverse=True)[:10]
    print(f"Draws analysed: {len(tables)}")
    print(f"Top 10 numbers: {[num for num, _ in hottest]}")

    overdue = sorted(tables.gaps.items(), key=lambda item: item[1].current_gap, reverse=True)[:5]
    for num, stats in overdue:
        print(f"  {num:2d}: {stats.current_gap} draws since last seen (avg gap {stats.average_gap:.1f})")

    top_pairs = sorted(tables.pairs.items(), key=lambda item: item[1], reverse=True)[:5]
    print(f"Top pairs: {top_pairs}")


def demo_strategies(tables, rng):
    """One ticket per strategy"""
    print_section("Strategy Library")

    library = StrategyLibrary()
    for kind in StrategyKind:
        try:
            ticket = library.generate(kind, tables=tables, rng=rng, **DEMO_OPTIONS.get(kind, {}))
        except ValidationError as e:
            print(f"{kind.value:22s} error: {e}")
            continue
        print(f"{kind.value:22s} {ticket}")


def demo_smart_blend(tables, rng):
    """Every risk tier plus the composite ranking"""
    print_section("SmartBlend")

    # keep the demo fast
    config = replace(get_config(), payout_iterations=20_000)
    engine = SmartBlendEngine(config, rng=rng)

    for tier in RiskTier:
        print(f"{tier.name.title()} tier")
        print("-" * 70)
        for result in engine.generate(tables, risk_tier=tier):
            print(f"{result.ticket}  {result.explanation}")
        print()

    print("Last-week followers")
    print("-" * 70)
    followers = engine.last_week_followers(tables)
    print(f"{followers.ticket}  {followers.explanation}\n")

    print("Composite ranking (lucky number 7)")
    print("-" * 70)
    for candidate in engine.rank(tables, count=5, lucky_number=7):
        print(f"{candidate.ticket}  payout~{candidate.expected_payout:,.0f} KRW")
        print(f"  {candidate.explanation}")


def main():
    """Main demonstration function"""
    logger.info("Starting Lotto Engine demonstration")

    draws = load_history(sys.argv[1] if len(sys.argv) > 1 else None)
    tables = HistoryTables(draws)
    rng = make_rng(2024)

    demo_tables(tables)
    demo_strategies(tables, rng)
    demo_smart_blend(tables, rng)

    print("\n" + "=" * 70)
    print("  Demonstration Complete!")
    print("=" * 70 + "\n")

    logger.info("Lotto Engine demonstration complete")


if __name__ == "__main__":
    main()
