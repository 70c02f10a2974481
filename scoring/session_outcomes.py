"""
Session-level outcome composites.

Computed once per session from the final full-pass analysis:

    overall_wellbeing      = emotional * 0.6 + neuroplasticity * 0.4
    learning_efficiency    = (memory_consolidation + learning_transfer) / 2
    learning_effectiveness = emotional * 0.3 + learning_efficiency * 0.7
    cognitive_growth       = min(improvement * 0.7 + breakthrough * 0.3, 1)
    adaptability           = (cognitive_recovery + opportunity_window) / 2
    emotional_stability    = 1 - relative variability of periodic overall
                             scores (regulation stability when < 2 ticks)

Score interpretation:
- overall_wellbeing < 0.4: session needs wellbeing follow-up (high priority)
- learning_effectiveness > 0.7: ready to advance (medium priority)
"""

import logging
from typing import Dict, List, Optional, Sequence

from analysis_core.data_models import IntegratedAnalysis, Recommendation, clamp_unit

from .trends import compute_relative_variability

logger = logging.getLogger(__name__)


def compute_session_outcomes(
    final_analysis: IntegratedAnalysis,
    history: Sequence[IntegratedAnalysis] = ()
) -> Dict[str, float]:
    """
    Compute session composites from the final analysis.

    Args:
        final_analysis: Final full-pass analysis (family_scores + unit results)
        history: Periodic analyses of the session

    Returns:
        Dict of composites, each in [0, 1]
    """
    emotional = final_analysis.family_scores.get('emotional', 0.0)
    neuro = final_analysis.family_scores.get('neuroplasticity', 0.0)
    results = {r.algorithm_name: r for r in final_analysis.algorithm_results}

    def score(name: str) -> float:
        return results[name].score if name in results else 0.0

    def metric(name: str, key: str, default: float = 0.0) -> float:
        if name not in results:
            return default
        return float(results[name].metrics.get(key, default))

    learning_efficiency = (score('memory_consolidation') + score('learning_transfer')) / 2.0
    improvement = min(metric('improvement_tracker', 'improvement'), 1.0)

    if len(history) >= 2:
        stability = 1.0 - compute_relative_variability([a.overall_score for a in history])
    else:
        stability = metric('emotional_regulation', 'emotional_stability')

    outcomes = {
        'overall_wellbeing': emotional * 0.6 + neuro * 0.4,
        'learning_effectiveness': emotional * 0.3 + learning_efficiency * 0.7,
        'learning_efficiency': learning_efficiency,
        'cognitive_growth': min(improvement * 0.7 + score('breakthrough_detector') * 0.3, 1.0),
        'adaptability': (score('cognitive_recovery') + score('opportunity_window')) / 2.0,
        'emotional_stability': stability,
    }
    outcomes = {name: clamp_unit(value) for name, value in outcomes.items()}

    logger.info(
        f"Session outcomes: wellbeing={outcomes['overall_wellbeing']:.2f}, "
        f"learning_effectiveness={outcomes['learning_effectiveness']:.2f}"
    )
    return outcomes


def generate_session_recommendations(
    outcomes: Dict[str, float],
    config: Optional[Dict] = None
) -> List[Recommendation]:
    thresholds = (config or {}).get('thresholds', {})
    wellbeing_floor = thresholds.get('session_wellbeing_floor', 0.4)
    effectiveness_ceiling = thresholds.get('session_effectiveness_ceiling', 0.7)

    recommendations = []
    if outcomes.get('overall_wellbeing', 0.0) < wellbeing_floor:
        recommendations.append(Recommendation(
            type='wellbeing',
            action='focus_on_emotional_support',
            description='Prioritize emotional support in the next sessions',
            priority='high',
        ))
    if outcomes.get('learning_effectiveness', 0.0) > effectiveness_ceiling:
        recommendations.append(Recommendation(
            type='learning',
            action='advance_difficulty',
            description='Learning is effective, consider advancing the difficulty level',
            priority='medium',
        ))
    return recommendations


def generate_session_explanation(outcomes: Dict[str, float]) -> str:
    """Human-readable summary of the session outcomes."""
    wellbeing = outcomes.get('overall_wellbeing', 0.0)
    if wellbeing >= 0.7:
        level = "good overall wellbeing"
    elif wellbeing >= 0.4:
        level = "moderate overall wellbeing"
    else:
        level = "low overall wellbeing"

    explanation = f"Session shows {level} (score: {wellbeing:.2f}). "

    factors = []
    if outcomes.get('cognitive_growth', 0.0) > 0.5:
        factors.append("clear cognitive growth")
    if outcomes.get('emotional_stability', 1.0) < 0.5:
        factors.append("unstable emotional state across the session")
    if outcomes.get('adaptability', 0.0) > 0.7:
        factors.append("good adaptability after errors")

    if factors:
        explanation += "Notable: " + ", ".join(factors) + "."
    else:
        explanation += "No notable growth or stability factors."
    return explanation
