"""
Anxiety detection.

Full pass:
    anxiety = min(max_pause / 5s + error_rate * 0.1 + help_requests * 0.2, 1)

Real-time pass (one rolling buffer):
    anxiety = (rapid_actions + hesitation) / 2
    rapid_actions = 1 if more than 3 actions per second
    hesitation    = 1 if the last gap between events exceeds 3 s

Score is reported as 1 - anxiety. A reported anxiety_level on an event
takes precedence over both estimates.
"""

import logging
from typing import Any, Dict

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit

logger = logging.getLogger(__name__)


class AnxietyDetector(AlgorithmUnit):
    """Anxiety level from hesitation, errors and help-seeking."""

    name = "anxiety_detector"
    family = AlgorithmFamily.EMOTIONAL
    default_confidence = 0.75

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        hesitation_sec = self.params.get('hesitation_sec', 5.0)

        level = min(
            features['max_pause'] / hesitation_sec
            + features['error_rate'] * 0.1
            + features['help_requests'] * 0.2,
            1.0
        )
        return self._build(features, level, self.default_confidence)

    def execute_realtime(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        if not data or not data.get('event_count'):
            return self.empty_result()

        features = data['features']
        rapid = 1.0 if features['actions_per_second'] > self.params.get('rapid_actions_per_sec', 3.0) else 0.0
        hesitation = 1.0 if features['last_interval'] > self.params.get('realtime_pause_sec', 3.0) else 0.0
        return self._build(features, (rapid + hesitation) / 2.0, 0.7)

    def _build(self, features: Dict[str, Any], level: float, confidence: float) -> AlgorithmResult:
        reported = features['reported'].get('anxiety_level')
        if reported is not None:
            level = reported
            confidence = 0.85

        insights = []
        recommendations = []
        if level > 0.6:
            insights.append(Insight(InsightType.WARNING, "Signs of anxiety detected", 0.8))
            recommendations.append(Recommendation(
                type='calming',
                action='introduce_calming_activity',
                description='Introduce a calming activity or breathing exercise',
            ))

        return self._result(
            score=1.0 - level,
            confidence=confidence,
            insights=insights,
            recommendations=recommendations,
            metrics={'anxiety': level},
        )
