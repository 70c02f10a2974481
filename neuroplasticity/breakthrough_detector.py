"""
Cognitive breakthrough detection.

    breakthrough = (performance_jump + understanding_leap + skill_mastery) / 3

- performance_jump: relative gain of the second half of the window over the
  first half; a gain above 30% counts fully
- understanding_leap: skills answered correctly, weighted by task
  difficulty (easy 0.5, medium 1.0, hard 1.5), against 3
- skill_mastery: skills with mean performance >= 0.8, against 2
"""

import logging
from typing import Any, Dict, List

import numpy as np

from analysis_core.data_models import AlgorithmResult, Insight, Recommendation
from analysis_core.enums import AlgorithmFamily, InsightType
from analysis_core.interfaces import AlgorithmUnit

logger = logging.getLogger(__name__)

DIFFICULTY_COMPLEXITY = {'easy': 0.5, 'medium': 1.0, 'hard': 1.5}


class CognitiveBreakthroughDetector(AlgorithmUnit):
    """Detects sudden performance jumps and newly mastered skills."""

    name = "breakthrough_detector"
    family = AlgorithmFamily.NEUROPLASTICITY
    default_confidence = 0.75

    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        series = data['features']['performance_series']
        jump_threshold = self.params.get('jump_threshold', 0.3)

        jump = _performance_jump(series, jump_threshold)

        skill_scores = _skill_performance(data['records'])
        difficulty = str(data.get('context', {}).get('difficulty', 'medium')).lower()
        complexity = DIFFICULTY_COMPLEXITY.get(difficulty, 1.0)
        understood = sum(1 for values in skill_scores.values() if max(values) >= 1.0 or np.mean(values) > 0.5)
        understanding = min(understood * complexity / 3.0, 1.0)
        mastered = sum(1 for values in skill_scores.values() if np.mean(values) >= 0.8)
        mastery = min(mastered / 2.0, 1.0)

        breakthrough = (jump + understanding + mastery) / 3.0

        insights = []
        recommendations = []
        if breakthrough > 0.7:
            logger.info(f"Cognitive breakthrough detected (score {breakthrough:.2f})")
            insights.append(Insight(InsightType.POSITIVE, "Cognitive breakthrough detected", 0.85))
            recommendations.append(Recommendation(
                type='challenge',
                action='consolidate_breakthrough',
                description='Reinforce the new skill with varied practice',
            ))

        return self._result(
            score=breakthrough,
            confidence=self.default_confidence if len(series) >= 4 else 0.5,
            insights=insights,
            recommendations=recommendations,
            metrics={
                'breakthroughs': breakthrough,
                'performance_jump': jump,
                'skills_mastered': mastered,
            },
        )


def _performance_jump(series: List[float], threshold: float) -> float:
    if len(series) < 2:
        return 0.0
    values = np.asarray(series, dtype=float)
    half = len(values) // 2
    before = float(np.mean(values[:half]))
    after = float(np.mean(values[half:]))
    if before <= 0:
        return 1.0 if after > 0 else 0.0
    gain = (after - before) / before
    return 1.0 if gain > threshold else max(gain / threshold, 0.0)


def _skill_performance(records: List[Dict[str, Any]]) -> Dict[str, List[float]]:
    skills: Dict[str, List[float]] = {}
    for record in records:
        skill = record.get('skill')
        if skill is None:
            continue
        if isinstance(record.get('accuracy'), (int, float)):
            value = float(record['accuracy'])
        elif isinstance(record.get('success'), bool):
            value = 1.0 if record['success'] else 0.0
        else:
            continue
        skills.setdefault(str(skill), []).append(value)
    return skills
