"""
Learning transfer analysis.

    transfer = (cross_domain + generalization + conceptual) / 3

- cross_domain: contexts in which the user succeeded, against 3
- generalization: share of practiced skills with at least one success
- conceptual: performance outside the first context seen in the window
"""

from typing import Any, Dict, List

import numpy as np

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit


class LearningTransferSystem(AlgorithmUnit):

    name = "learning_transfer"
    family = AlgorithmFamily.NEUROPLASTICITY
    default_confidence = 0.7

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        records = data['records']
        features = data['features']

        successful_contexts = _successful_values(records, 'context')
        cross_domain = min(len(successful_contexts) / 3.0, 1.0)

        skills = features['skills']
        successful_skills = _successful_values(records, 'skill')
        generalization = len(successful_skills) / len(skills) if skills else 0.5

        contexts = features['contexts']
        if len(contexts) > 1:
            later = [
                _record_performance(r) for r in records
                if r.get('context') is not None and r.get('context') != contexts[0]
            ]
            later = [v for v in later if v is not None]
            conceptual = float(np.mean(later)) if later else 0.0
        else:
            conceptual = features['current_performance'] * 0.5

        transfer = (cross_domain + generalization + conceptual) / 3.0

        insights = []
        recommendations = []
        if transfer > 0.7:
            insights.append(Insight(InsightType.POSITIVE, "Skills transfer across contexts", 0.8))
        elif len(contexts) <= 1:
            recommendations.append(Recommendation(
                type='transfer',
                action='vary_practice_context',
                description='Practice the same skill in a different activity',
            ))

        return self._result(
            score=transfer,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'transfer': transfer,
                'contexts_mastered': len(successful_contexts),
            },
        )


def _record_performance(record: Dict[str, Any]):
    if isinstance(record.get('accuracy'), (int, float)):
        return float(record['accuracy'])
    if isinstance(record.get('success'), bool):
        return 1.0 if record['success'] else 0.0
    return None


def _successful_values(records: List[Dict[str, Any]], key: str) -> set:
    return {
        r[key] for r in records
        if r.get(key) is not None
        and (r.get('success') is True or r.get('type') in ('success', 'task_complete'))
    }
