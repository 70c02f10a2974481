"""
Risk and opportunity composites.

Risk (urgent support need):
    risk = weighted mean over present of
           frustration (0.4), anxiety (0.3), cognitive_overload (0.3)

Opportunity (readiness for more challenge):
    opportunity = weighted mean over present of
                  engagement (0.4), motivation (0.3), improvement_potential (0.3)

Score interpretation:
- risk > 0.7: intervention candidate
- any single risk indicator > 0.8: intervention candidate (real-time path)
- opportunity > 0.7: optimization candidate

Engineering approach:
- Indicators come from unit metrics (first unit in declaration order wins)
- Weights renormalize over the indicators present, so each composite is
  non-decreasing in each of its inputs
- Composites gate queue emission only; they are not diagnostic
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from analysis_core.data_models import AlgorithmResult, Recommendation, clamp_unit

logger = logging.getLogger(__name__)

RISK_WEIGHTS = {
    'frustration': 0.4,
    'anxiety': 0.3,
    'cognitive_overload': 0.3,
}

OPPORTUNITY_WEIGHTS = {
    'engagement': 0.4,
    'motivation': 0.3,
    'improvement_potential': 0.3,
}

INDICATOR_NAMES = tuple(RISK_WEIGHTS) + tuple(OPPORTUNITY_WEIGHTS)


def extract_indicators(results: Iterable[AlgorithmResult]) -> Dict[str, float]:
    """Pull the named indicator values out of unit metrics."""
    indicators: Dict[str, float] = {}
    for result in results:
        for name in INDICATOR_NAMES:
            if name in indicators or name not in result.metrics:
                continue
            value = result.metrics[name]
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                indicators[name] = clamp_unit(value)
    return indicators


def weighted_composite(indicators: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Weighted mean of the indicators present in `weights` (0 if none)."""
    present = [name for name in weights if name in indicators]
    total = sum(weights[name] for name in present)
    if total <= 0:
        return 0.0
    return clamp_unit(sum(indicators[name] * weights[name] for name in present) / total)


def compute_risk_score(
    indicators: Mapping[str, float],
    config: Optional[Dict] = None
) -> float:
    weights = (config or {}).get('scoring', {}).get('risk_weights', RISK_WEIGHTS)
    return weighted_composite(indicators, weights)


def compute_opportunity_score(
    indicators: Mapping[str, float],
    config: Optional[Dict] = None
) -> float:
    weights = (config or {}).get('scoring', {}).get('opportunity_weights', OPPORTUNITY_WEIGHTS)
    return weighted_composite(indicators, weights)


def intervention_reason(
    risk_score: float,
    indicators: Mapping[str, float],
    risk_threshold: float = 0.7,
    indicator_threshold: Optional[float] = 0.8
) -> Optional[str]:
    """
    Why an intervention is needed, or None.

    Args:
        risk_score: Composite risk
        indicators: Indicator values
        risk_threshold: Composite gate (strictly greater)
        indicator_threshold: Single-indicator gate; None disables it
    """
    if risk_score > risk_threshold:
        return f"risk score {risk_score:.2f} above {risk_threshold}"
    if indicator_threshold is not None:
        for name in RISK_WEIGHTS:
            value = indicators.get(name)
            if value is not None and value > indicator_threshold:
                return f"{name.replace('_', ' ')} {value:.2f} above {indicator_threshold}"
    return None


def optimization_reason(opportunity_score: float, threshold: float = 0.7) -> Optional[str]:
    if opportunity_score > threshold:
        return f"opportunity score {opportunity_score:.2f} above {threshold}"
    return None


def realtime_recommendations(
    risk_score: float,
    opportunity_score: float,
    config: Optional[Dict] = None
) -> List[Recommendation]:
    """
    Recommendations attached to every real-time analysis.

    - immediate support when risk is high
    - increase challenge when opportunity is high
    - introduce complexity when risk is low and opportunity moderate
    """
    thresholds = (config or {}).get('thresholds', {})
    support_risk = thresholds.get('support_risk', 0.7)
    challenge_opportunity = thresholds.get('challenge_opportunity', 0.7)
    complexity_risk = thresholds.get('complexity_risk', 0.3)
    complexity_opportunity = thresholds.get('complexity_opportunity', 0.5)

    recommendations = []
    if risk_score > support_risk:
        recommendations.append(Recommendation(
            type='immediate_support',
            action='provide_immediate_support',
            description='Provide immediate emotional support',
            priority='high',
        ))
    if opportunity_score > challenge_opportunity:
        recommendations.append(Recommendation(
            type='increase_challenge',
            action='increase_difficulty',
            description='Increase difficulty to make the most of the moment',
            priority='medium',
        ))
    if risk_score < complexity_risk and opportunity_score > complexity_opportunity:
        recommendations.append(Recommendation(
            type='introduce_complexity',
            action='add_complexity',
            description='Introduce new elements of complexity',
            priority='low',
        ))
    return recommendations
