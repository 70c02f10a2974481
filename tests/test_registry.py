"""
Unit tests for weight tables, the algorithm registry and the integrator.

Tests cover:
- Weight validation and renormalization
- Failure isolation in run_all
- Integration bounds, coverage and total failure
"""

import math

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis_core.data_models import AlgorithmResult, Recommendation
from analysis_core.enums import AlgorithmFamily, AnalysisMode, InsightType
from analysis_core.exceptions import WeightConfigurationError
from analysis_core.interfaces import AlgorithmUnit
from fusion.registry import AlgorithmRegistry, integrate_results, merge_recommendations
from fusion.weights import (
    DEFAULT_EMOTIONAL_WEIGHTS,
    DEFAULT_NEUROPLASTICITY_WEIGHTS,
    SUM_TOLERANCE,
    WeightTable,
)


class FixedUnit(AlgorithmUnit):
    """Returns a fixed score for any non-empty window."""

    family = AlgorithmFamily.EMOTIONAL

    def __init__(self, name, score=0.5, confidence=0.8, metrics=None):
        super().__init__()
        self.name = name
        self.score = score
        self.confidence = confidence
        self.metrics = metrics or {}

    def _analyze(self, profile, data):
        return self._result(self.score, self.confidence, metrics=self.metrics)


class BrokenUnit(FixedUnit):
    def _analyze(self, profile, data):
        raise RuntimeError("sensor glitch")


DATA = {'event_count': 3, 'records': [], 'features': {}, 'context': {}}


def make_result(name, score, confidence=0.8):
    return AlgorithmResult(name, AlgorithmFamily.EMOTIONAL, score, confidence)


class TestWeightTable:
    """Test weight validation and normalization policy."""

    def test_default_tables_sum_to_one(self):
        for weights in (DEFAULT_EMOTIONAL_WEIGHTS, DEFAULT_NEUROPLASTICITY_WEIGHTS):
            table = WeightTable(weights, expected_names=weights.keys())
            assert abs(table.total() - 1.0) <= SUM_TOLERANCE

    def test_renormalizes_off_sum(self):
        table = WeightTable({'a': 2.0, 'b': 6.0})
        assert table['a'] == pytest.approx(0.25)
        assert table['b'] == pytest.approx(0.75)
        assert abs(table.total() - 1.0) <= SUM_TOLERANCE

    def test_within_tolerance_kept_as_is(self):
        table = WeightTable({'a': 0.5, 'b': 0.5 + 1e-9})
        assert table['b'] == 0.5 + 1e-9

    def test_empty_table_rejected(self):
        with pytest.raises(WeightConfigurationError):
            WeightTable({})

    def test_zero_sum_rejected(self):
        with pytest.raises(WeightConfigurationError):
            WeightTable({'a': 0.0, 'b': 0.0})

    def test_negative_weight_rejected(self):
        with pytest.raises(WeightConfigurationError):
            WeightTable({'a': 1.5, 'b': -0.5})

    def test_non_finite_weight_rejected(self):
        with pytest.raises(WeightConfigurationError):
            WeightTable({'a': math.nan, 'b': 0.5})

    def test_name_mismatch_rejected(self):
        with pytest.raises(WeightConfigurationError):
            WeightTable({'a': 0.5, 'c': 0.5}, expected_names=['a', 'b'])

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            WeightTable({'a': -1.0})


class TestRegistry:
    """Test registry construction and failure isolation."""

    def test_duplicate_names_rejected(self):
        units = [FixedUnit('a'), FixedUnit('a')]
        with pytest.raises(WeightConfigurationError):
            AlgorithmRegistry(AlgorithmFamily.EMOTIONAL, units, {'a': 1.0})

    def test_unknown_priority_name_rejected(self):
        with pytest.raises(WeightConfigurationError):
            AlgorithmRegistry(
                AlgorithmFamily.EMOTIONAL, [FixedUnit('a')], {'a': 1.0}, priority_names=['z']
            )

    def test_throwing_unit_is_isolated(self):
        units = [FixedUnit('a', 0.6), BrokenUnit('b'), FixedUnit('c', 0.4)]
        registry = AlgorithmRegistry(
            AlgorithmFamily.EMOTIONAL, units, {'a': 0.4, 'b': 0.2, 'c': 0.4}
        )

        run = registry.run_all({}, DATA)

        assert [r.algorithm_name for r in run.results] == ['a', 'c']
        assert run.failed_names == ['b']
        assert "sensor glitch" in str(run.failures[0])

    def test_degraded_integration(self):
        units = [FixedUnit('a', 0.6), BrokenUnit('b'), FixedUnit('c', 0.4)]
        registry = AlgorithmRegistry(
            AlgorithmFamily.EMOTIONAL, units, {'a': 0.4, 'b': 0.2, 'c': 0.4}
        )

        analysis = registry.integrate_run(registry.run_all({}, DATA))

        assert analysis.overall_score == pytest.approx(0.5)
        assert analysis.coverage == pytest.approx(0.8)
        assert analysis.confidence_score == pytest.approx(0.8 * 0.8)
        assert analysis.failed_algorithms == ('b',)
        assert analysis.degraded
        assert analysis.insights[-1].type == InsightType.DEGRADED.value

    def test_priority_subset_only(self):
        units = [FixedUnit('a'), FixedUnit('b'), FixedUnit('c')]
        registry = AlgorithmRegistry(
            AlgorithmFamily.EMOTIONAL, units, {'a': 0.3, 'b': 0.3, 'c': 0.4},
            priority_names=['c', 'a'],
        )

        run = registry.run_priority({}, DATA)

        # Declaration order is kept regardless of the subset order
        assert [r.algorithm_name for r in run.results] == ['a', 'c']
        assert run.expected == ['a', 'c']

    def test_empty_window_gives_empty_evidence(self):
        registry = AlgorithmRegistry(AlgorithmFamily.EMOTIONAL, [FixedUnit('a', 0.9)], {'a': 1.0})

        analysis = registry.integrate_run(registry.run_all({}, {'event_count': 0}))

        assert analysis.overall_score == 0.0
        assert analysis.confidence_score == 0.0


class TestIntegration:
    """Test the weighted integrator."""

    def test_weighted_mean_without_failures(self):
        table = WeightTable({'a': 0.25, 'b': 0.75})
        analysis = integrate_results([make_result('a', 1.0), make_result('b', 0.0)], table)
        assert analysis.overall_score == pytest.approx(0.25)
        assert analysis.coverage == 1.0

    def test_scores_stay_in_unit_interval(self):
        table = WeightTable({'a': 0.5, 'b': 0.5})
        results = [make_result('a', 7.0, 3.0), make_result('b', -2.0, float('nan'))]

        analysis = integrate_results(results, table)

        assert 0.0 <= analysis.overall_score <= 1.0
        assert 0.0 <= analysis.confidence_score <= 1.0

    def test_total_failure(self):
        table = WeightTable({'a': 0.5, 'b': 0.5})

        analysis = integrate_results([], table, failures=['a', 'b'], mode=AnalysisMode.FINAL)

        assert analysis.overall_score == 0.0
        assert analysis.confidence_score == 0.0
        assert analysis.insights[-1].type == InsightType.TOTAL_FAILURE.value
        assert analysis.mode == AnalysisMode.FINAL

    def test_indicators_from_metrics(self):
        table = WeightTable({'a': 1.0})
        result = AlgorithmResult(
            'a', AlgorithmFamily.EMOTIONAL, 0.2, 0.9, metrics={'frustration': 0.8}
        )

        analysis = integrate_results([result], table)

        assert analysis.indicators == {'frustration': 0.8}

    def test_merge_recommendations_dedupes_actions(self):
        first = Recommendation('support', 'offer_break', 'Take a break')
        second = Recommendation('support', 'offer_break', 'Another break')
        third = Recommendation('challenge', 'increase_difficulty', 'Harder')

        merged = merge_recommendations([[first], [second, third]])

        assert merged == [first, third]
