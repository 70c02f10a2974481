"""
Emotional regulation analysis.

Regulation capacity:
    regulation = (1 - recovery_time / 10s) * 0.4 + self_soothing * 0.3 + awareness * 0.3

Emotional stability:
    stability = max(1 - swings * 0.1, 0)
    swings    = jumps larger than 0.3 between consecutive reported levels

Awareness comes from the user profile (`emotional_awareness`, default 0.5).
"""

from typing import Any, Dict, List

import numpy as np

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit

SELF_SOOTHING_TYPES = ('pause', 'break', 'breathing', 'calm_down')


class EmotionalRegulationSystem(AlgorithmUnit):

    name = "emotional_regulation"
    family = AlgorithmFamily.EMOTIONAL
    default_confidence = 0.75

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        recovery_times = features['error_recovery_times']
        recovery_time = float(np.mean(recovery_times)) if recovery_times else 0.0
        soothing = sum(1 for r in data['records'] if r.get('type') in SELF_SOOTHING_TYPES)
        awareness = float(profile.get('emotional_awareness', 0.5))

        regulation = float(np.clip(
            max(1.0 - recovery_time / 10.0, 0.0) * 0.4
            + min(soothing / 3.0, 1.0) * 0.3
            + awareness * 0.3,
            0.0, 1.0
        ))

        swings = _count_swings(data['records'])
        stability = max(1.0 - swings * 0.1, 0.0)

        insights = []
        recommendations = []
        if regulation > 0.7:
            insights.append(Insight(InsightType.POSITIVE, "Good emotional regulation", 0.8))
        if regulation < 0.4:
            recommendations.append(Recommendation(
                type='regulation',
                action='teach_regulation_techniques',
                description='Practice emotional regulation techniques',
            ))

        return self._result(
            score=regulation,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'regulation': regulation,
                'emotional_stability': stability,
                'emotional_swings': swings,
            },
        )


def _count_swings(records: List[Dict[str, Any]], threshold: float = 0.3) -> int:
    swings = 0
    for name in ('frustration_level', 'anxiety_level'):
        series = [float(r[name]) for r in records if isinstance(r.get(name), (int, float))]
        swings += sum(1 for a, b in zip(series, series[1:]) if abs(b - a) > threshold)
    return swings
