"""
Ticket normalisation and comparison helpers.

Every strategy returns through ``normalize_ticket``, which guarantees the
ticket invariant: 6 distinct integers in 1-45, ascending.
"""

from typing import Iterable, Sequence

import numpy as np

from lotto_engine.config import MAX_NUMBER, MIN_NUMBER, TICKET_SIZE
from lotto_engine.models import Ticket
from lotto_engine.sampling import RandomSource, make_rng

ALL_NUMBERS = np.arange(MIN_NUMBER, MAX_NUMBER + 1)


def normalize_ticket(numbers: Iterable[int], rng: RandomSource = None) -> Ticket:
    """
    Force any collection of integers into a valid ticket.

    Out-of-range values are dropped and duplicates removed (first occurrence
    wins). More than 6 survivors are truncated to the first 6 *in the order
    received*, not the best 6. Fewer than 6 are padded with uniformly random
    unused numbers.

    Args:
        numbers: candidate numbers, any length, may be invalid
        rng: random source used for padding

    Returns:
        Sorted list of 6 distinct numbers in 1-45
    """
    unique = []
    for num in numbers:
        num = int(num)
        if MIN_NUMBER <= num <= MAX_NUMBER and num not in unique:
            unique.append(num)

    if len(unique) > TICKET_SIZE:
        unique = unique[:TICKET_SIZE]
    elif len(unique) < TICKET_SIZE:
        generator = make_rng(rng)
        while len(unique) < TICKET_SIZE:
            candidate = int(generator.integers(MIN_NUMBER, MAX_NUMBER + 1))
            if candidate not in unique:
                unique.append(candidate)

    return sorted(unique)


def random_ticket(rng: RandomSource = None) -> Ticket:
    """6 uniform draws without replacement from 1-45"""
    generator = make_rng(rng)
    return sorted(int(n) for n in generator.choice(ALL_NUMBERS, size=TICKET_SIZE, replace=False))


def validate_ticket(numbers: Sequence[int]) -> bool:
    """Check the ticket invariant"""
    if len(numbers) != TICKET_SIZE:
        return False
    if len(set(numbers)) != TICKET_SIZE:  # No duplicates
        return False
    if not all(MIN_NUMBER <= n <= MAX_NUMBER for n in numbers):
        return False
    return list(numbers) == sorted(numbers)


def count_matches(ticket: Sequence[int], numbers: Sequence[int]) -> int:
    return len(set(ticket) & set(numbers))


def overlap(first: Sequence[int], second: Sequence[int]) -> int:
    """Number of shared numbers between two tickets"""
    return len(set(first) & set(second))


def is_near_duplicate(ticket: Sequence[int], accepted: Iterable[Sequence[int]], threshold: int = 4) -> bool:
    """True if ``ticket`` shares ``threshold`` or more numbers with any accepted ticket"""
    return any(overlap(ticket, other) >= threshold for other in accepted)


def is_sequential(ticket: Sequence[int]) -> bool:
    """True for fully consecutive tickets such as 1-2-3-4-5-6"""
    ordered = sorted(ticket)
    return all(b == a + 1 for a, b in zip(ordered, ordered[1:]))


def zone_of(number: int) -> int:
    """Zone index 0, 1, 2 for 1-15, 16-30, 31-45"""
    return (number - 1) // 15


def ticket_sum(ticket: Sequence[int]) -> int:
    return int(sum(ticket))


def odd_count(ticket: Sequence[int]) -> int:
    return sum(1 for n in ticket if n % 2 == 1)
