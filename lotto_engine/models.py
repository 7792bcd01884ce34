"""
Lotto Engine Data Model
=======================

Draw records supplied by the caller, the Ticket alias, and adapters between
draws and pandas DataFrames / draw-result payloads.
"""

import datetime as dt
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Sequence, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from lotto_engine.config import MAX_NUMBER, MIN_NUMBER, TICKET_SIZE

# 6 distinct integers in 1-45, ascending
Ticket = List[int]

FRAME_COLUMNS = ['round', 'date', 'n1', 'n2', 'n3', 'n4', 'n5', 'n6', 'bonus']


class Draw(BaseModel):
    """One historical lottery result (6 main numbers + bonus). Immutable."""
    model_config = ConfigDict(frozen=True)

    round: int = Field(..., gt=0, description="Draw round number")
    date: dt.date = Field(..., description="Draw date")
    numbers: Tuple[int, ...] = Field(..., description="6 distinct winning numbers (1-45)")
    bonus: int = Field(..., ge=MIN_NUMBER, le=MAX_NUMBER, description="Bonus number (1-45)")

    @field_validator('numbers')
    @classmethod
    def check_numbers(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if len(value) != TICKET_SIZE:
            raise ValueError(f"a draw must have exactly {TICKET_SIZE} numbers")
        if len(set(value)) != TICKET_SIZE:
            raise ValueError("draw numbers must be unique")
        if not all(MIN_NUMBER <= n <= MAX_NUMBER for n in value):
            raise ValueError(f"draw numbers must be between {MIN_NUMBER} and {MAX_NUMBER}")
        return value

    @model_validator(mode='after')
    def check_bonus(self) -> 'Draw':
        if self.bonus in self.numbers:
            raise ValueError("bonus number must differ from the main numbers")
        return self

    @property
    def sorted_numbers(self) -> List[int]:
        return sorted(self.numbers)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'Draw':
        """
        Build a Draw from a public draw-result payload.

        Args:
            payload: dict with keys drwNo, drwNoDate, drwtNo1..drwtNo6, bnusNo

        Returns:
            Draw
        """
        return cls(
            round=int(payload['drwNo']),
            date=payload['drwNoDate'],
            numbers=tuple(int(payload[f'drwtNo{i}']) for i in range(1, TICKET_SIZE + 1)),
            bonus=int(payload['bnusNo'])
        )


def draws_from_records(records: Iterable[Dict[str, Any]]) -> List[Draw]:
    """Build draws from dicts with round/date/numbers/bonus keys"""
    return [record if isinstance(record, Draw) else Draw(**record) for record in records]


def draws_from_numbers(rows: Sequence[Sequence[int]], start_date: dt.date = dt.date(2002, 12, 7)) -> List[Draw]:
    """
    Build a weekly history from bare number rows.

    The bonus for each row is the smallest number not among its six.
    """
    draws = []
    for idx, row in enumerate(rows):
        bonus = next(n for n in range(MIN_NUMBER, MAX_NUMBER + 1) if n not in row)
        draws.append(Draw(
            round=idx + 1,
            date=start_date + timedelta(weeks=idx),
            numbers=tuple(int(n) for n in row),
            bonus=bonus
        ))
    return draws


def draws_to_frame(draws: Sequence[Draw]) -> pd.DataFrame:
    """Convert draws to a DataFrame with columns round, date, n1..n6, bonus"""
    rows = []
    for draw in draws:
        row = {'round': draw.round, 'date': draw.date, 'bonus': draw.bonus}
        for i, num in enumerate(draw.numbers, start=1):
            row[f'n{i}'] = num
        rows.append(row)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def draws_from_frame(draws_df: pd.DataFrame) -> List[Draw]:
    """
    Convert a DataFrame with columns round, date, n1..n6, bonus to draws.

    Row order is preserved; callers must supply ascending round order.
    """
    if draws_df.empty:
        return []

    missing = [col for col in FRAME_COLUMNS if col not in draws_df.columns]
    if missing:
        raise ValueError(f"draw frame is missing columns: {missing}")

    draws = []
    for _, row in draws_df.iterrows():
        draws.append(Draw(
            round=int(row['round']),
            date=pd.Timestamp(row['date']).date(),
            numbers=tuple(int(row[f'n{i}']) for i in range(1, TICKET_SIZE + 1)),
            bonus=int(row['bonus'])
        ))
    return draws
