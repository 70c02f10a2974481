"""
Emotional data collector.

Sub-collectors:
- interaction: clicks, strokes, color choices
- behavioral: errors, undo, help requests, retries
- temporal: inter-event intervals and pauses
- contextual: activity/context switches and reported emotional levels
"""

from typing import Any, Dict, List, Optional

from analysis_core.enums import AlgorithmFamily

from .base import BaseCollector, SubCollector


class InteractionCollector(SubCollector):
    name = "interaction"
    event_types = ('click', 'stroke', 'color_change', 'tool_change', 'touch')

    def _extract(self, record: Dict[str, Any]) -> Optional[float]:
        pressure = record.get('pressure')
        return float(pressure) if pressure is not None else None


class BehavioralCollector(SubCollector):
    name = "behavioral"
    event_types = ('error', 'undo', 'hint_request', 'help_request', 'retry', 'task_abandon')


class TemporalCollector(SubCollector):
    name = "temporal"

    def _extract(self, record: Dict[str, Any]) -> Optional[float]:
        return float(record['interval'])


class ContextualCollector(SubCollector):
    name = "contextual"

    def accepts(self, record: Dict[str, Any]) -> bool:
        return any(
            key in record
            for key in ('context', 'frustration_level', 'anxiety_level',
                        'engagement_level', 'motivation_level')
        )


class EmotionalDataCollector(BaseCollector):
    """Collector feeding the emotional algorithm family (buffer default 100)."""

    family = AlgorithmFamily.EMOTIONAL
    config_key = "emotional"

    def _create_sub_collectors(self) -> List[SubCollector]:
        return [
            InteractionCollector(),
            BehavioralCollector(),
            TemporalCollector(),
            ContextualCollector(),
        ]
