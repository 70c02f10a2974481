"""
Frustration detection.

Combines behavioral frustration indicators over a window:
- Error rate above the configured threshold
- Rapid click sequences (< 300 ms between clicks)
- Long pauses (> 5 s between actions)
- Consecutive error streaks
- Repeated undo actions

Score interpretation:
- score = 1 - frustration_level (higher = calmer)
- frustration_level > 0.7: high frustration, intervention candidate
- 0.4-0.7: building frustration
- < 0.4: no meaningful frustration

Behavioral rationale:
- Rapid repeated clicks and error streaks are the most direct overt signs
- Long pauses after errors indicate disengagement or being stuck
- Undo bursts show dissatisfaction with one's own output

Engineering approach:
- Each indicator is normalized against its threshold (capped at 1)
- Level is the weighted sum of normalized indicators, so adding evidence
  never lowers the level
- A level reported on an event replaces the derived estimate
"""

import logging
from typing import Any, Dict

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit

logger = logging.getLogger(__name__)

# Indicator weights (sum to 1)
INDICATOR_WEIGHTS = {
    'error_rate': 0.30,
    'rapid_clicks': 0.25,
    'error_streak': 0.20,
    'long_pauses': 0.15,
    'undo': 0.10,
}


class FrustrationDetection(AlgorithmUnit):
    """Frustration level from error, click-rhythm, pause and undo patterns."""

    name = "frustration_detection"
    family = AlgorithmFamily.EMOTIONAL
    default_confidence = 0.8

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        reported = features['reported'].get('frustration_level')

        indicators = self._compute_indicators(data)
        if reported is not None:
            level = reported
            confidence = 0.85
        else:
            level = sum(INDICATOR_WEIGHTS[k] * v for k, v in indicators.items())
            confidence = min(0.5 + data['event_count'] / 40.0, self.default_confidence)

        level = min(max(level, 0.0), 1.0)
        logger.debug(f"Frustration level {level:.2f} (reported={reported is not None})")

        return self._result(
            score=1.0 - level,
            confidence=confidence,
            insights=_generate_frustration_insights(level, indicators),
            recommendations=_generate_frustration_recommendations(level),
            metrics={
                'frustration': level,
                'frustration_indicators': indicators,
            },
        )

    def _compute_indicators(self, data: Dict[str, Any]) -> Dict[str, float]:
        """Normalize each indicator against its threshold (0-1)."""
        features = data['features']
        error_threshold = self.params.get('error_threshold', 0.3)
        rapid_threshold = self.params.get('rapid_click_threshold', 3)
        pause_sec = self.params.get('long_pause_sec', 5.0)
        pause_threshold = self.params.get('long_pause_threshold', 2)
        streak_threshold = self.params.get('error_streak_threshold', 3)
        undo_threshold = self.params.get('undo_threshold', 3)

        long_pauses = sum(
            1 for r in data['records']
            if r.get('interval', 0.0) > pause_sec
        ) + sum(1 for d in features.get('pause_durations', []) if d > pause_sec)

        return {
            'error_rate': min(features['error_rate'] / error_threshold, 1.0),
            'rapid_clicks': min(features['rapid_click_count'] / rapid_threshold, 1.0),
            'error_streak': min(features['max_error_streak'] / streak_threshold, 1.0),
            'long_pauses': min(long_pauses / pause_threshold, 1.0),
            'undo': min(features['undo_count'] / undo_threshold, 1.0),
        }


def _generate_frustration_insights(level: float, indicators: Dict[str, float]):
    insights = []
    if level > 0.7:
        insights.append(Insight(
            InsightType.WARNING,
            f"High frustration detected (level {level:.2f})",
            0.85,
        ))
    elif level > 0.4:
        dominant = max(indicators, key=indicators.get) if indicators else 'unknown'
        insights.append(Insight(
            InsightType.PATTERN,
            f"Frustration building, driven mostly by {dominant.replace('_', ' ')}",
            0.7,
        ))
    return insights


def _generate_frustration_recommendations(level: float):
    recommendations = []
    if level > 0.7:
        recommendations.append(Recommendation(
            type='intervention',
            action='reduce_difficulty',
            description='Lower the task difficulty and offer encouragement',
        ))
    elif level > 0.5:
        recommendations.append(Recommendation(
            type='support',
            action='offer_break',
            description='Suggest a short break before continuing',
        ))
    return recommendations
