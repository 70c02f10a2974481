"""
Neuroplasticity data collector.

Sub-collectors:
- cognitive: response times and reported cognitive load
- learning: attempt outcomes and task completion
- memory: recall events and their accuracy
- adaptation: recovery after errors and context changes
"""

from typing import Any, Dict, List, Optional

from analysis_core.enums import AlgorithmFamily

from .base import BaseCollector, SubCollector


class CognitiveCollector(SubCollector):
    name = "cognitive"

    def accepts(self, record: Dict[str, Any]) -> bool:
        return 'response_time' in record or 'cognitive_load' in record

    def _extract(self, record: Dict[str, Any]) -> Optional[float]:
        if 'response_time' in record:
            return float(record['response_time'])
        return None


class LearningCollector(SubCollector):
    name = "learning"

    def accepts(self, record: Dict[str, Any]) -> bool:
        return (
            record.get('type') in ('attempt', 'success', 'error', 'task_complete', 'task_abandon')
            or 'success' in record
            or 'accuracy' in record
        )

    def _extract(self, record: Dict[str, Any]) -> Optional[float]:
        if 'accuracy' in record:
            return float(record['accuracy'])
        if 'success' in record:
            return 1.0 if record['success'] else 0.0
        return None


class MemoryCollector(SubCollector):
    name = "memory"
    event_types = ('recall', 'memory_match', 'sequence_recall')

    def _extract(self, record: Dict[str, Any]) -> Optional[float]:
        if 'accuracy' in record:
            return float(record['accuracy'])
        return None


class AdaptationCollector(SubCollector):
    name = "adaptation"

    def accepts(self, record: Dict[str, Any]) -> bool:
        return record.get('type') in ('error', 'retry') or 'context' in record


class NeuroplasticityDataCollector(BaseCollector):
    """Collector feeding the neuroplasticity algorithm family (buffer default 200)."""

    family = AlgorithmFamily.NEUROPLASTICITY
    config_key = "neuroplasticity"

    def _create_sub_collectors(self) -> List[SubCollector]:
        return [
            CognitiveCollector(),
            LearningCollector(),
            MemoryCollector(),
            AdaptationCollector(),
        ]
