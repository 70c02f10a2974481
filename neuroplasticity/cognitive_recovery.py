"""
Cognitive recovery analysis.

    recovery = (recovery_time_score + adaptation_speed + persistence) / 3

- recovery_time_score: max(1 - mean error-to-success time / 10s, 0)
- adaptation_speed: share of errors followed by a success within 3 events
- persistence: retries after errors raise it, abandoned tasks lower it

Windows without errors score full marks on the first two terms.
"""

from typing import Any, Dict

import numpy as np

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit


class CognitiveRecovery(AlgorithmUnit):

    name = "cognitive_recovery"
    family = AlgorithmFamily.NEUROPLASTICITY
    default_confidence = 0.75

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        errors = features['error_count']
        recovery_times = features['error_recovery_times']

        if errors == 0:
            time_score = 1.0
            adaptation = 1.0
        else:
            mean_time = float(np.mean(recovery_times)) if recovery_times else 10.0
            time_score = max(1.0 - mean_time / 10.0, 0.0)
            adaptation = features['errors_recovered'] / errors

        persistence = float(np.clip(
            0.5 + 0.1 * features['retry_count'] - 0.2 * features['abandon_count'],
            0.0, 1.0
        ))

        recovery = (time_score + adaptation + persistence) / 3.0

        insights = []
        recommendations = []
        if errors and adaptation > 0.7:
            insights.append(Insight(InsightType.POSITIVE, "Recovers quickly from errors", 0.8))
        if recovery < 0.4:
            recommendations.append(Recommendation(
                type='support',
                action='provide_scaffolding',
                description='Provide hints after errors to support recovery',
            ))

        return self._result(
            score=recovery,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'recovery': recovery,
                'adaptation_speed': adaptation,
                'persistence': persistence,
            },
        )
