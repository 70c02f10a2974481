"""
Adaptive motivation analysis.

    motivation = min(retries * 0.3 + progress * 0.5 + time_invested * 0.2, 1)

Retries count attempts made right after an error (persistence). Progress is
the completion rate when tasks were finished, otherwise current performance.
Time invested is measured against a 10 minute horizon.
"""

from typing import Any, Dict

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit


class AdaptiveMotivation(AlgorithmUnit):
    """Motivation level from persistence, progress and time invested."""

    name = "adaptive_motivation"
    family = AlgorithmFamily.EMOTIONAL
    default_confidence = 0.8

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        reported = features['reported'].get('motivation_level')

        if features['completion_count'] or features['abandon_count']:
            progress = features['completion_rate']
        else:
            progress = features['current_performance']
        time_invested = min(features['duration'] / 600.0, 1.0)

        level = min(features['retry_count'] * 0.3 + progress * 0.5 + time_invested * 0.2, 1.0)
        if reported is not None:
            level = reported

        insights = []
        recommendations = []
        if level > 0.7:
            insights.append(Insight(
                InsightType.POSITIVE,
                "High motivation, good moment for bigger challenges",
                0.9,
            ))
        if level < 0.3:
            recommendations.append(Recommendation(
                type='motivation',
                action='provide_encouragement',
                description='Give encouragement and acknowledge progress made',
            ))

        return self._result(
            score=level,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'motivation': level,
                'persistence': features['retry_count'],
                'progress': progress,
            },
        )
