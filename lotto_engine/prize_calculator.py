from typing import Optional

import numpy as np

# Korean Lotto 6/45 prize table (approximate fixed amounts, KRW)
PRIZE_TABLE = {
    1: (2_000_000_000.0, "1st Prize (6 matches)"),
    2: (50_000_000.0, "2nd Prize (5 + Bonus)"),
    3: (1_500_000.0, "3rd Prize (5 matches)"),
    4: (50_000.0, "4th Prize (4 matches)"),
    5: (5_000.0, "5th Prize (3 matches)"),
}


def prize_rank(main_matches: int, bonus_match: bool) -> Optional[int]:
    """
    Prize place for a result.

    Args:
        main_matches: Number of main number matches (0-6)
        bonus_match: Whether the bonus number is on the ticket

    Returns:
        Place 1-5, or None when nothing is won
    """
    if main_matches == 6:
        return 1
    elif main_matches == 5 and bonus_match:
        return 2
    elif main_matches == 5:
        return 3
    elif main_matches == 4:
        return 4
    elif main_matches == 3:
        return 5
    return None


def calculate_prize_amount(main_matches: int, bonus_match: bool) -> tuple[float, str]:
    """
    Calculate Lotto 6/45 prize amount based on matches.

    The bonus number only matters for the 5-match tier.

    Returns:
        Tuple of (prize_amount, prize_description)
    """
    rank = prize_rank(main_matches, bonus_match)
    if rank is None:
        return (0.0, "No Prize")
    return PRIZE_TABLE[rank]


# Prize by match count without the bonus tier, index = matches (0-6)
PRIZE_BY_MATCHES = np.array([calculate_prize_amount(matches, False)[0] for matches in range(7)])
BONUS_PRIZE = PRIZE_TABLE[prize_rank(5, True)][0]
