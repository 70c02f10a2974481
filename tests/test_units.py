"""
Unit tests for the emotional and neuroplasticity algorithm units.

Tests cover:
- Output ranges and empty-evidence results
- Reported levels overriding derived heuristics
- Monotonicity of frustration, anxiety and cognitive load in their evidence
"""

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis_core.enums import AlgorithmFamily
from data_collectors import build_session_data
from emotional_analysis import (
    AnxietyDetector,
    ColorPsychologicalAnalysis,
    EmotionalEngagementAnalysis,
    FrustrationDetection,
    create_emotional_units,
)
from neuroplasticity import (
    CognitiveImprovementTracker,
    create_neuroplasticity_units,
)
from neuroplasticity.improvement_tracker import learning_gain
from neuroplasticity.opportunity_window import estimate_cognitive_load


def window(records):
    """Session data with per-record intervals filled in like a collector does."""
    last = None
    for record in records:
        record['interval'] = record['timestamp'] - last if last is not None else 0.0
        last = record['timestamp']
    return build_session_data(records)


def typed(kinds, step=1.0, extra=None):
    return [
        dict({'type': kind, 'timestamp': 100.0 + i * step}, **(extra or {}))
        for i, kind in enumerate(kinds)
    ]


MIXED_SESSION = (
    typed(['click', 'error', 'retry', 'success', 'click', 'undo', 'task_complete'])
    + [{'type': 'stroke', 'timestamp': 110.0, 'color': 'blue', 'skill': 'shading', 'accuracy': 0.7}]
)


class TestUnitContract:
    """Every unit honors the common result contract."""

    def test_family_sizes(self):
        assert len(create_emotional_units()) == 7
        assert len(create_neuroplasticity_units()) == 6

    def test_results_in_range(self):
        data = window([dict(r) for r in MIXED_SESSION])
        for unit in create_emotional_units() + create_neuroplasticity_units():
            result = unit.execute({}, data)
            assert result.algorithm_name == unit.name
            assert 0.0 <= result.score <= 1.0
            assert 0.0 <= result.confidence <= 1.0

    def test_families_match(self):
        assert all(u.family == AlgorithmFamily.EMOTIONAL for u in create_emotional_units())
        assert all(
            u.family == AlgorithmFamily.NEUROPLASTICITY for u in create_neuroplasticity_units()
        )

    def test_empty_window_is_empty_evidence(self):
        data = build_session_data([])
        for unit in create_emotional_units() + create_neuroplasticity_units():
            result = unit.execute({}, data)
            assert result.score == 0.0
            assert result.confidence == 0.0


class TestFrustration:
    """Test frustration level derivation."""

    def test_reported_level_takes_precedence(self):
        data = window(typed(['click', 'success'], extra={'frustration_level': 0.85}))

        result = FrustrationDetection().execute({}, data)

        assert result.metrics['frustration'] == pytest.approx(0.85)
        assert result.score == pytest.approx(0.15)

    def test_calm_session_low_frustration(self):
        data = window(typed(['click', 'success', 'click', 'success']))
        result = FrustrationDetection().execute({}, data)
        assert result.metrics['frustration'] < 0.2

    def test_monotone_in_errors(self):
        unit = FrustrationDetection()
        levels = []
        for errors in range(6):
            kinds = ['click'] * 6
            kinds[:errors] = ['error'] * errors
            levels.append(unit.execute({}, window(typed(kinds))).metrics['frustration'])
        assert levels == sorted(levels)
        assert levels[-1] > levels[0]

    def test_high_frustration_recommends_reducing_difficulty(self):
        kinds = ['error'] * 5 + ['undo'] * 3
        data = window(typed(kinds, step=0.1))
        result = FrustrationDetection().execute({}, data)
        assert result.metrics['frustration'] > 0.5
        assert result.recommendations


class TestAnxiety:
    """Test anxiety level derivation."""

    def test_monotone_in_help_requests(self):
        unit = AnxietyDetector()
        levels = []
        for helps in range(4):
            kinds = ['click'] * (6 - helps) + ['help_request'] * helps
            levels.append(unit.execute({}, window(typed(kinds))).metrics['anxiety'])
        assert levels == sorted(levels)

    def test_realtime_hesitation(self):
        records = typed(['click', 'click'], step=4.0)
        result = AnxietyDetector().execute_realtime({}, window(records))
        assert result.metrics['anxiety'] == pytest.approx(0.5)

    def test_reported_level_takes_precedence(self):
        data = window(typed(['click'], extra={'anxiety_level': 0.3}))
        assert AnxietyDetector().execute_realtime({}, data).metrics['anxiety'] == pytest.approx(0.3)


class TestEngagementAndColor:

    def test_reported_engagement(self):
        data = window(typed(['click'], extra={'engagement_level': 0.9}))
        result = EmotionalEngagementAnalysis().execute({}, data)
        assert result.metrics['engagement'] == pytest.approx(0.9)

    def test_no_colors_low_confidence(self):
        data = window(typed(['click', 'click']))
        result = ColorPsychologicalAnalysis().execute({}, data)
        assert result.score == pytest.approx(0.5)
        assert result.confidence == pytest.approx(0.1)


class TestNeuroplasticity:

    def test_baseline_from_profile(self):
        data = window(typed(['stroke'] * 4, extra={'accuracy': 0.9}))
        unit = CognitiveImprovementTracker()

        above = unit.execute({'baseline_performance': 0.45}, data)
        at = unit.execute({'baseline_performance': 0.9}, data)

        assert above.metrics['improvement'] == pytest.approx(1.0)
        assert at.metrics['improvement'] == pytest.approx(0.0)
        assert above.metrics['improvement_potential'] > at.metrics['improvement_potential']

    def test_learning_gain(self):
        assert learning_gain([]) == 0.0
        assert learning_gain([0.2, 0.4, 0.6, 0.8]) == pytest.approx(0.4)

    def test_cognitive_load_monotone_in_errors(self):
        loads = []
        for errors in range(5):
            kinds = ['click'] * (5 - errors) + ['error'] * errors
            loads.append(estimate_cognitive_load(window(typed(kinds))['features']))
        assert loads == sorted(loads)

    def test_reported_cognitive_load(self):
        features = window(typed(['click'], extra={'cognitive_load': 0.95}))['features']
        assert estimate_cognitive_load(features) == pytest.approx(0.95)
