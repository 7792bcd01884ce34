"""
Lotto Engine Exceptions
=======================

Errors raised to callers of the engine. Fallback situations (empty history,
exhausted resampling budgets) are not errors and never raise.
"""


class LottoEngineError(Exception):
    """Base class for all engine errors"""


class ValidationError(LottoEngineError, ValueError):
    """A strategy's required option is missing or invalid."""

    def __init__(self, field: str, message: str = None):
        self.field = field
        if message is None:
            message = f"{field} is required"
        super().__init__(message)
