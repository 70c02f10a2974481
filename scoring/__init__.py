"""
Wellbeing scoring module.

This package computes interpretable composites from integrated analyses:
1. Risk score (0-1): frustration, anxiety, cognitive overload
2. Opportunity score (0-1): engagement, motivation, improvement potential
3. Trend classification: improving / stable / declining per metric
4. Session outcomes: wellbeing, learning effectiveness, growth, stability

All scores are:
- Bounded (0-1 scale)
- Explainable (transparent weighted formulas)
- Non-diagnostic (they gate workflow, nothing more)
"""

from .risk_opportunity import (
    INDICATOR_NAMES,
    OPPORTUNITY_WEIGHTS,
    RISK_WEIGHTS,
    compute_opportunity_score,
    compute_risk_score,
    extract_indicators,
    intervention_reason,
    optimization_reason,
    realtime_recommendations,
)
from .trends import classify_direction, compute_slope, compute_trend_report
from .session_outcomes import (
    compute_session_outcomes,
    generate_session_explanation,
    generate_session_recommendations,
)

__all__ = [
    'INDICATOR_NAMES',
    'OPPORTUNITY_WEIGHTS',
    'RISK_WEIGHTS',
    'compute_opportunity_score',
    'compute_risk_score',
    'extract_indicators',
    'intervention_reason',
    'optimization_reason',
    'realtime_recommendations',
    'classify_direction',
    'compute_slope',
    'compute_trend_report',
    'compute_session_outcomes',
    'generate_session_explanation',
    'generate_session_recommendations',
]
