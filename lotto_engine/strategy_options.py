"""
Per-strategy option models.

Each strategy declares the pydantic model of the options it needs; required
fields have no default, so a missing option fails validation instead of
being silently substituted.
"""

import datetime as dt
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from lotto_engine.config import MAX_NUMBER, MIN_NUMBER, TICKET_SIZE


class StrategyKind(str, Enum):
    """Closed set of strategy identifiers"""
    random = "random"
    birthday = "birthday"
    zodiac = "zodiac"
    personalized = "personalized"
    frequency_window = "frequency_window"
    hot_cold_hybrid = "hot_cold_hybrid"
    expected_gap = "expected_gap"
    hot_pairs = "hot_pairs"
    hot_triplets = "hot_triplets"
    cooccurrence = "cooccurrence"
    delta_system = "delta_system"
    positional_frequency = "positional_frequency"
    odd_even_balanced = "odd_even_balanced"
    sum_in_range = "sum_in_range"
    zone_balanced = "zone_balanced"
    reduced_wheel = "reduced_wheel"
    markov_chain = "markov_chain"
    positional_select = "positional_select"
    semi_automatic = "semi_automatic"


ZODIAC_NUMBERS: Dict[str, List[int]] = {
    "Aries": [1, 9, 17, 25, 33, 41],
    "Taurus": [2, 10, 18, 26, 34, 42],
    "Gemini": [3, 11, 19, 27, 35, 43],
    "Cancer": [4, 12, 20, 28, 36, 44],
    "Leo": [5, 13, 21, 29, 37, 45],
    "Virgo": [6, 14, 22, 30, 38, 1],
    "Libra": [7, 15, 23, 31, 39, 2],
    "Scorpio": [8, 16, 24, 32, 40, 3],
    "Sagittarius": [9, 17, 25, 33, 41, 4],
    "Capricorn": [10, 18, 26, 34, 42, 5],
    "Aquarius": [11, 19, 27, 35, 43, 6],
    "Pisces": [12, 20, 28, 36, 44, 7],
}


def _parse_birthday(value: str) -> str:
    try:
        dt.date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError("birthday must be a YYYY-MM-DD date")
    return value


class StrategyOptions(BaseModel):
    """Base options model; FIELD_LABELS maps fields to names used in errors"""
    FIELD_LABELS: ClassVar[Dict[str, str]] = {}
    MODEL_LABEL: ClassVar[str] = "options"


class NoOptions(StrategyOptions):
    pass


class WindowOptions(StrategyOptions):
    FIELD_LABELS: ClassVar[Dict[str, str]] = {'window': 'window size'}

    window: Optional[int] = Field(None, ge=1, description="Number of recent draws (default from config)")


class BirthdayOptions(StrategyOptions):
    FIELD_LABELS: ClassVar[Dict[str, str]] = {'birthday': 'birthday'}

    birthday: str = Field(..., description="Birth date, YYYY-MM-DD")

    @field_validator('birthday')
    @classmethod
    def check_birthday(cls, value: str) -> str:
        return _parse_birthday(value)


class ZodiacOptions(StrategyOptions):
    FIELD_LABELS: ClassVar[Dict[str, str]] = {'sign': 'zodiac sign'}

    sign: str = Field(..., description="Western zodiac sign, e.g. 'Leo'")

    @field_validator('sign')
    @classmethod
    def check_sign(cls, value: str) -> str:
        canonical = value.strip().capitalize()
        if canonical not in ZODIAC_NUMBERS:
            raise ValueError(f"unknown zodiac sign {value!r}")
        return canonical


class PersonalizedOptions(StrategyOptions):
    MODEL_LABEL: ClassVar[str] = 'zodiac sign or birthday'
    FIELD_LABELS: ClassVar[Dict[str, str]] = {
        'sign': 'zodiac sign',
        'birthday': 'birthday',
        'today': 'date',
    }

    sign: Optional[str] = Field(None, description="Zodiac label (any naming scheme)")
    birthday: Optional[str] = Field(None, description="Birth date, YYYY-MM-DD")
    today: Optional[dt.date] = Field(None, description="Calendar day of the ticket (default: today in KST)")

    @field_validator('birthday')
    @classmethod
    def check_birthday(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _parse_birthday(value)

    @model_validator(mode='after')
    def check_identity(self) -> 'PersonalizedOptions':
        if not self.sign and not self.birthday:
            raise ValueError("a zodiac sign or a birthday is required")
        return self


class SumRangeOptions(StrategyOptions):
    MODEL_LABEL: ClassVar[str] = 'sum range'
    FIELD_LABELS: ClassVar[Dict[str, str]] = {'low': 'sum lower bound', 'high': 'sum upper bound'}

    low: Optional[int] = Field(None, ge=21, description="Minimum ticket sum (default from config)")
    high: Optional[int] = Field(None, le=255, description="Maximum ticket sum (default from config)")

    @model_validator(mode='after')
    def check_bounds(self) -> 'SumRangeOptions':
        if self.low is not None and self.high is not None and self.low > self.high:
            raise ValueError("sum lower bound exceeds upper bound")
        return self


class ReducedWheelOptions(StrategyOptions):
    FIELD_LABELS: ClassVar[Dict[str, str]] = {'core': 'core numbers'}

    core: List[int] = Field(..., min_length=1, description="Core numbers to wheel")


class PositionalSelectOptions(StrategyOptions):
    FIELD_LABELS: ClassVar[Dict[str, str]] = {
        'selected_positions': 'selected positions',
        'fill_strategy': 'fill strategy',
        'fill_options': 'fill strategy options',
    }

    selected_positions: Dict[int, int] = Field(..., min_length=1, description="Position (1-6) -> fixed number")
    fill_strategy: StrategyKind = Field(..., description="Strategy used for the remaining positions")
    fill_options: Dict[str, Any] = Field(default_factory=dict, description="Options for the fill strategy")

    @field_validator('fill_strategy')
    @classmethod
    def check_fill_strategy(cls, value: StrategyKind) -> StrategyKind:
        if value in (StrategyKind.positional_select, StrategyKind.semi_automatic):
            raise ValueError(f"{value.value} cannot be used as a fill strategy")
        return value


class SemiAutomaticOptions(StrategyOptions):
    FIELD_LABELS: ClassVar[Dict[str, str]] = {'locked': 'locked numbers'}

    locked: List[Optional[int]] = Field(..., max_length=TICKET_SIZE,
                                        description="Up to 6 slots; a number locks the slot, None leaves it blank")

    @field_validator('locked')
    @classmethod
    def check_locked(cls, value: List[Optional[int]]) -> List[Optional[int]]:
        fixed = [n for n in value if n is not None]
        if not all(MIN_NUMBER <= n <= MAX_NUMBER for n in fixed):
            raise ValueError(f"locked numbers must be between {MIN_NUMBER} and {MAX_NUMBER}")
        if len(set(fixed)) != len(fixed):
            raise ValueError("locked numbers must be unique")
        return value
