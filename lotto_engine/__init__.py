"""
Lotto Engine - Lotto 6/45 Ticket Recommendation
===============================================

Statistical transforms over draw history, a library of ticket strategies
built on them, and the SmartBlend pipeline that samples, simulates payout
and ranks candidates.

All randomness comes from an injected numpy Generator; nothing touches the
network or disk except optional config loading.
"""

__version__ = "1.0.0"

from .exceptions import LottoEngineError, ValidationError
from .config import EngineConfig, get_config, load_config
from .models import Draw, Ticket, draws_from_frame, draws_from_numbers, draws_to_frame
from .tickets import normalize_ticket, random_ticket, validate_ticket
from .analysis import FrequencyAnalyzer, HistoryTables
from .sampling import WeightedSampler, make_rng
from .strategy_options import StrategyKind
from .strategy_generators import StrategyLibrary, generate
from .blend import SmartBlendEngine, RiskTier, BlendResult, ScoredCandidate

__all__ = [
    'LottoEngineError',
    'ValidationError',
    'EngineConfig',
    'get_config',
    'load_config',
    'Draw',
    'Ticket',
    'draws_from_frame',
    'draws_from_numbers',
    'draws_to_frame',
    'normalize_ticket',
    'random_ticket',
    'validate_ticket',
    'FrequencyAnalyzer',
    'HistoryTables',
    'WeightedSampler',
    'make_rng',
    'StrategyKind',
    'StrategyLibrary',
    'generate',
    'SmartBlendEngine',
    'RiskTier',
    'BlendResult',
    'ScoredCandidate',
]
