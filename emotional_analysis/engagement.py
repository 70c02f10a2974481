"""
Emotional engagement analysis.

    engagement = min((duration_sec + interactions + completion_rate * 100) / 300, 1)

Sub-measures (reported in metrics):
- time engagement: duration against a 5 minute horizon
- interaction engagement: interaction count against 50
- task engagement: completion rate
"""

from typing import Any, Dict

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit


class EmotionalEngagementAnalysis(AlgorithmUnit):

    name = "engagement_analysis"
    family = AlgorithmFamily.EMOTIONAL
    default_confidence = 0.8

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        reported = features['reported'].get('engagement_level')

        overall = min(
            (features['duration'] + data['event_count'] + features['completion_rate'] * 100) / 300.0,
            1.0
        )
        level = reported if reported is not None else overall

        insights = []
        recommendations = []
        if level > 0.7:
            insights.append(Insight(InsightType.POSITIVE, "High emotional engagement", 0.9))
        if level < 0.3:
            recommendations.append(Recommendation(
                type='engagement',
                action='increase_interactivity',
                description='Add interactive elements to raise engagement',
            ))

        return self._result(
            score=level,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'engagement': level,
                'time_engagement': min(features['duration'] / 300.0, 1.0),
                'interaction_engagement': min(data['event_count'] / 50.0, 1.0),
                'task_engagement': features['completion_rate'],
            },
        )
