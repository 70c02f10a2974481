"""
Cognitive improvement tracking.

Compares current performance in the window against the user's baseline and
measures within-window learning gain.

    improvement = min(max((current - baseline) / baseline, 0), 2)
    learning_gain = mean(second half) - mean(first half) of the performance series
    score = 0.6 * current + 0.4 * min(improvement, 1)
    improvement_potential = 0.5 * min(improvement, 1) + min(2 * max(learning_gain, 0), 0.5)

Baseline comes from the user profile (`baseline_performance`), else the
`algorithms.improvement_tracker.default_baseline` setting (0.5).
"""

import logging
from typing import Any, Dict, List

import numpy as np

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit

logger = logging.getLogger(__name__)


class CognitiveImprovementTracker(AlgorithmUnit):
    """Improvement over baseline and within-window learning gain."""

    name = "improvement_tracker"
    family = AlgorithmFamily.NEUROPLASTICITY
    default_confidence = 0.8

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        baseline = float(profile.get(
            'baseline_performance', self.params.get('default_baseline', 0.5)
        ))
        baseline = max(baseline, 1e-3)
        current = features['current_performance']

        improvement = min(max((current - baseline) / baseline, 0.0), 2.0)
        gain = learning_gain(features['performance_series'])

        score = 0.6 * current + 0.4 * min(improvement, 1.0)
        potential = 0.5 * min(improvement, 1.0) + min(2.0 * max(gain, 0.0), 0.5)

        insights = []
        recommendations = []
        if improvement > 0.2:
            insights.append(Insight(
                InsightType.POSITIVE,
                f"Performance {improvement * 100:.0f}% above baseline",
                0.85,
            ))
        if gain < -0.2:
            insights.append(Insight(InsightType.WARNING, "Performance dropping within the session", 0.7))
            recommendations.append(Recommendation(
                type='pacing',
                action='review_previous_material',
                description='Revisit easier material before moving on',
            ))

        return self._result(
            score=score,
            confidence=0.8 if len(features['performance_series']) >= 3 else 0.6,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'improvement_potential': potential,
                'improvement': improvement,
                'learning_gain': gain,
                'current_performance': current,
                'baseline': baseline,
            },
        )


def learning_gain(series: List[float]) -> float:
    """Mean of the second half minus mean of the first half (0 if < 2 points)."""
    if len(series) < 2:
        return 0.0
    values = np.asarray(series, dtype=float)
    half = len(values) // 2
    return float(np.mean(values[half:]) - np.mean(values[:half]))
