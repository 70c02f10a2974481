"""
Emotional analysis algorithm family.

Seven stateless units, in declaration order:
1. color_analysis: emotional profile of color choices
2. frustration_detection: error/click/pause frustration indicators
3. engagement_analysis: time, interaction and task engagement
4. anxiety_detector: hesitation and help-seeking
5. adaptive_motivation: persistence and progress
6. emotional_regulation: recovery and stability
7. creative_expression: originality and variety

Frustration and anxiety units report a wellbeing-oriented score
(1 - level); raw levels are exposed in the result metrics.
"""

from typing import Dict, List, Optional

from analysis_core.interfaces import AlgorithmUnit

from .color_psychology import ColorPsychologicalAnalysis
from .frustration import FrustrationDetection
from .engagement import EmotionalEngagementAnalysis
from .anxiety import AnxietyDetector
from .motivation import AdaptiveMotivation
from .regulation import EmotionalRegulationSystem
from .creative_expression import CreativeExpressionAnalysis

EMOTIONAL_UNITS = (
    ColorPsychologicalAnalysis,
    FrustrationDetection,
    EmotionalEngagementAnalysis,
    AnxietyDetector,
    AdaptiveMotivation,
    EmotionalRegulationSystem,
    CreativeExpressionAnalysis,
)


def create_emotional_units(config: Optional[Dict] = None) -> List[AlgorithmUnit]:
    """Instantiate every emotional unit in declaration order."""
    return [unit_cls(config) for unit_cls in EMOTIONAL_UNITS]


__all__ = [
    'ColorPsychologicalAnalysis',
    'FrustrationDetection',
    'EmotionalEngagementAnalysis',
    'AnxietyDetector',
    'AdaptiveMotivation',
    'EmotionalRegulationSystem',
    'CreativeExpressionAnalysis',
    'EMOTIONAL_UNITS',
    'create_emotional_units',
]
