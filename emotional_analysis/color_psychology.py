"""
Color psychology analysis.

Maps color choices made during an activity to emotional associations and
cognitive effects, then scores the emotional profile of the palette.

Score interpretation:
- score = (emotional_intensity + (1 - cognitive_imbalance)) / 2
- cognitive_imbalance = |stimulating - calming| / (stimulating + calming)
- A balanced palette of moderately intense colors scores highest

Rationale:
- Strongly one-sided palettes (all stimulating or all calming) often track
  a matching emotional state
- Intensity reflects how much emotional energy goes into the choices

Engineering approach:
- Fixed color table (name and common hex codes)
- Confidence grows with the number of choices (full at 10)
- Windows with events but no color choices get a neutral, low-confidence
  result
"""

import logging
from collections import Counter
from typing import Any, Dict, List

import numpy as np

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit

logger = logging.getLogger(__name__)

COLOR_PSYCHOLOGY = {
    'red': {'emotion': 'energy', 'intensity': 0.9, 'effect': 'stimulating'},
    'blue': {'emotion': 'calm', 'intensity': 0.3, 'effect': 'calming'},
    'green': {'emotion': 'balance', 'intensity': 0.4, 'effect': 'balancing'},
    'yellow': {'emotion': 'happiness', 'intensity': 0.7, 'effect': 'energizing'},
    'orange': {'emotion': 'enthusiasm', 'intensity': 0.8, 'effect': 'motivating'},
    'purple': {'emotion': 'mystery', 'intensity': 0.6, 'effect': 'inspiring'},
    'pink': {'emotion': 'nurturing', 'intensity': 0.4, 'effect': 'soothing'},
    'brown': {'emotion': 'stability', 'intensity': 0.3, 'effect': 'grounding'},
    'black': {'emotion': 'power', 'intensity': 0.2, 'effect': 'focusing'},
    'white': {'emotion': 'purity', 'intensity': 0.1, 'effect': 'clarifying'},
    'gray': {'emotion': 'neutral', 'intensity': 0.2, 'effect': 'neutral'},
}

HEX_ALIASES = {
    '#ff0000': 'red',
    '#0000ff': 'blue',
    '#00ff00': 'green',
    '#008000': 'green',
    '#ffff00': 'yellow',
    '#ffa500': 'orange',
    '#800080': 'purple',
    '#ffc0cb': 'pink',
    '#a52a2a': 'brown',
    '#000000': 'black',
    '#ffffff': 'white',
    '#808080': 'gray',
    'grey': 'gray',
}


class ColorPsychologicalAnalysis(AlgorithmUnit):
    """Emotional profile of color choices."""

    name = "color_analysis"
    family = AlgorithmFamily.EMOTIONAL
    default_confidence = 0.8

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        choices = [_resolve_color(c) for c in data['features']['colors']]
        choices = [c for c in choices if c in COLOR_PSYCHOLOGY]

        if not choices:
            return self._result(score=0.5, confidence=0.1, metrics={'dominant_emotion': 'neutral'})

        intensities = np.array([COLOR_PSYCHOLOGY[c]['intensity'] for c in choices])
        effects = Counter(COLOR_PSYCHOLOGY[c]['effect'] for c in choices)
        emotions = Counter(COLOR_PSYCHOLOGY[c]['emotion'] for c in choices)

        intensity = float(np.mean(intensities))
        stimulating = effects.get('stimulating', 0)
        calming = effects.get('calming', 0)
        total = stimulating + calming
        imbalance = abs(stimulating - calming) / total if total > 0 else 0.5
        stimulation = float(np.mean([
            1.0 if COLOR_PSYCHOLOGY[c]['effect'] == 'stimulating'
            else 0.0 if COLOR_PSYCHOLOGY[c]['effect'] == 'calming'
            else 0.5
            for c in choices
        ]))
        dominant_emotion = emotions.most_common(1)[0][0]

        score = (intensity + (1.0 - imbalance)) / 2.0
        confidence = min(len(choices) / 10.0, 1.0)

        logger.debug(f"Color analysis: {len(choices)} choices, dominant={dominant_emotion}")

        return self._result(
            score=score,
            confidence=confidence,
            insights=_generate_color_insights(intensity, stimulation, dominant_emotion),
            recommendations=_generate_color_recommendations(stimulation),
            metrics={
                'dominant_emotion': dominant_emotion,
                'emotional_intensity': intensity,
                'stimulation_level': stimulation,
                'favorite_colors': [c for c, _ in Counter(choices).most_common(3)],
            },
        )


def _resolve_color(color: str) -> str:
    color = color.strip().lower()
    return HEX_ALIASES.get(color, color)


def _generate_color_insights(intensity: float, stimulation: float, dominant: str) -> List[Insight]:
    insights = []
    if intensity > 0.7:
        insights.append(Insight(
            InsightType.PATTERN,
            f"Intense color choices dominated by {dominant}",
            0.8,
        ))
    if dominant == 'calm' and stimulation < 0.3:
        insights.append(Insight(
            InsightType.POSITIVE,
            "Calm palette suggests a relaxed state",
            0.85,
        ))
    return insights


def _generate_color_recommendations(stimulation: float) -> List[Recommendation]:
    if stimulation < 0.3:
        return [Recommendation(
            type='sensory',
            action='offer_warmer_palette',
            description='Offer warmer colors to lift energy',
        )]
    if stimulation > 0.8:
        return [Recommendation(
            type='sensory',
            action='offer_calming_palette',
            description='Offer calming colors to reduce stimulation',
        )]
    return []
