"""
Memory consolidation analysis.

    consolidation = (retention + recall_accuracy + consistency) / 3

- retention: late-window performance relative to early-window performance
- recall_accuracy: accuracy on recall events (all performance if none)
- consistency: 1 - standard deviation of the performance series
"""

from typing import Any, Dict

import numpy as np

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit

RECALL_TYPES = ('recall', 'memory_match', 'sequence_recall')


class MemoryConsolidationSystem(AlgorithmUnit):

    name = "memory_consolidation"
    family = AlgorithmFamily.NEUROPLASTICITY
    default_confidence = 0.7

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        features = data['features']
        series = np.asarray(features['performance_series'], dtype=float)
        current = features['current_performance']

        if len(series) >= 3:
            third = max(len(series) // 3, 1)
            early = float(np.mean(series[:third]))
            late = float(np.mean(series[-third:]))
            retention = min(late / early, 1.0) if early > 0 else (1.0 if late > 0 else 0.0)
            consistency = float(np.clip(1.0 - np.std(series), 0.0, 1.0))
        else:
            retention = current
            consistency = current

        recall = [
            float(r['accuracy']) for r in data['records']
            if r.get('type') in RECALL_TYPES and isinstance(r.get('accuracy'), (int, float))
        ]
        recall_accuracy = float(np.mean(recall)) if recall else current

        consolidation = (retention + recall_accuracy + consistency) / 3.0

        insights = []
        recommendations = []
        if consolidation > 0.75:
            insights.append(Insight(InsightType.POSITIVE, "Strong memory consolidation", 0.8))
        elif consolidation < 0.4:
            recommendations.append(Recommendation(
                type='memory',
                action='spaced_repetition',
                description='Schedule spaced repetition of recent material',
            ))

        return self._result(
            score=consolidation,
            confidence=self.default_confidence if len(series) >= 3 else 0.5,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'memory': consolidation,
                'retention': retention,
                'recall_accuracy': recall_accuracy,
            },
        )
