"""
Lotto Engine - SmartBlend
=========================

Bayes-weighted, risk-tiered blend of the history signals:

- BayesEstimator: smoothed per-number inclusion probabilities
- CoOccurrenceScorer and the entropy/spread/aesthetic scores
- PayoutSimulator: Monte-Carlo expected prize, parallel across tickets
- SmartBlendEngine: acceptance loop and composite ranking
"""

from .bayes import BayesEstimator

from .scoring import (
    COMPOSITE_WEIGHTS,
    CoOccurrenceScorer,
    is_aesthetic,
    spread_score,
    ticket_entropy,
)

from .payout import PayoutSimulator

from .engine import (
    FALLBACK_LABEL,
    BlendResult,
    RiskTier,
    ScoredCandidate,
    SmartBlendEngine,
)

__all__ = [
    # Estimation
    'BayesEstimator',

    # Scoring
    'COMPOSITE_WEIGHTS',
    'CoOccurrenceScorer',
    'is_aesthetic',
    'spread_score',
    'ticket_entropy',

    # Simulation
    'PayoutSimulator',

    # Engine
    'FALLBACK_LABEL',
    'BlendResult',
    'RiskTier',
    'ScoredCandidate',
    'SmartBlendEngine',
]
