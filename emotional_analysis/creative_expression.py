"""
Creative expression analysis.

    creativity = (originality + variety + expressive_depth) / 3

- originality: distinct colors used, against 6
- variety: distinct kinds of action, against 6
- expressive_depth: rhythm variability of the interaction stream
"""

from typing import Any, Dict

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit


class CreativeExpressionAnalysis(AlgorithmUnit):

    name = "creative_expression"
    family = AlgorithmFamily.EMOTIONAL
    default_confidence = 0.7

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        originality = min(len(set(features['colors'])) / 6.0, 1.0)
        variety = min(len({r.get('type') for r in data['records']}) / 6.0, 1.0)
        depth = features['interval_variability']

        creativity = (originality + variety + depth) / 3.0

        insights = []
        recommendations = []
        if creativity > 0.7:
            insights.append(Insight(
                InsightType.POSITIVE,
                "High creative potential, encourage artistic exploration",
                0.8,
            ))
        if creativity < 0.4:
            recommendations.append(Recommendation(
                type='creative',
                action='encourage_creative_activities',
                description='Encourage more creative and expressive activities',
            ))

        return self._result(
            score=creativity,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'creativity': creativity,
                'originality': originality,
                'variety': variety,
            },
        )
