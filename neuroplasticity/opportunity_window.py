"""
Learning opportunity window identification.

An optimal window combines high attention, high motivation, low cognitive
load and a low error rate:

    opportunity = (attention + motivation + (1 - cognitive_load) + (1 - error_rate)) / 4

Reported engagement/motivation/cognitive-load levels replace the derived
values. Without a report, cognitive load is estimated from errors, long
pauses and help requests (monotone in each):

    cognitive_load = 0.5 * error_rate + 0.3 * min(long_pauses / 5, 1) + 0.2 * min(help / 3, 1)

The cognitive load is exposed as the `cognitive_overload` indicator.
"""

from typing import Any, Dict

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit


def estimate_cognitive_load(features: Dict[str, Any]) -> float:
    reported = features['reported'].get('cognitive_load')
    if reported is not None:
        return reported
    return min(
        0.5 * features['error_rate']
        + 0.3 * min(features['long_pause_count'] / 5.0, 1.0)
        + 0.2 * min(features['help_requests'] / 3.0, 1.0),
        1.0
    )


class OpportunityWindowIdentifier(AlgorithmUnit):

    name = "opportunity_window"
    family = AlgorithmFamily.NEUROPLASTICITY
    default_confidence = 0.8

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        reported = features['reported']

        attention = reported.get('engagement_level', 1.0 - features['interval_variability'])
        motivation = reported.get('motivation_level', 0.5)
        load = estimate_cognitive_load(features)
        error_rate = features['error_rate']

        opportunity = (attention + motivation + (1.0 - load) + (1.0 - error_rate)) / 4.0

        insights = []
        recommendations = []
        if opportunity > 0.7:
            insights.append(Insight(
                InsightType.OPPORTUNITY,
                "Optimal learning window identified",
                0.9,
            ))
        if opportunity > 0.6:
            recommendations.append(Recommendation(
                type='timing',
                action='introduce_new_concepts',
                description='Good moment to introduce new concepts or challenges',
            ))
        if load > 0.7:
            insights.append(Insight(InsightType.WARNING, "Cognitive overload detected", 0.75))

        return self._result(
            score=opportunity,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'cognitive_overload': load,
                'attention': attention,
                'opportunity': opportunity,
            },
        )
