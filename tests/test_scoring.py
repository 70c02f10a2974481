"""
Unit tests for risk/opportunity composites, trends and session outcomes.
"""

import pytest # pyright: ignore[reportMissingImports]
import numpy as np
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis_core.data_models import IntegratedAnalysis
from analysis_core.enums import Trend
from scoring.risk_opportunity import (
    RISK_WEIGHTS,
    compute_opportunity_score,
    compute_risk_score,
    intervention_reason,
    optimization_reason,
    realtime_recommendations,
)
from scoring.session_outcomes import (
    compute_session_outcomes,
    generate_session_explanation,
    generate_session_recommendations,
)
from scoring.trends import classify_direction, compute_slope, compute_trend_report


def analysis_with(overall=0.5, **indicators):
    return IntegratedAnalysis(overall_score=overall, confidence_score=0.8, indicators=indicators)


class TestRiskOpportunity:
    """Test composites and queue gates."""

    def test_weighted_risk(self):
        risk = compute_risk_score({'frustration': 1.0, 'anxiety': 0.0, 'cognitive_overload': 0.0})
        assert risk == pytest.approx(0.4)

    def test_renormalizes_over_present(self):
        assert compute_risk_score({'frustration': 0.5}) == pytest.approx(0.5)
        assert compute_risk_score({}) == 0.0

    @pytest.mark.parametrize('indicator', list(RISK_WEIGHTS))
    def test_risk_monotone_in_each_input(self, indicator):
        base = {'frustration': 0.3, 'anxiety': 0.5, 'cognitive_overload': 0.2}
        risks = []
        for value in np.linspace(0.0, 1.0, 11):
            indicators = dict(base, **{indicator: float(value)})
            risks.append(compute_risk_score(indicators))
        assert all(b >= a for a, b in zip(risks, risks[1:]))
        assert risks[-1] > risks[0]

    def test_opportunity_weights_from_config(self):
        config = {'scoring': {'opportunity_weights': {'engagement': 1.0}}}
        opportunity = compute_opportunity_score({'engagement': 0.9, 'motivation': 0.1}, config)
        assert opportunity == pytest.approx(0.9)

    def test_intervention_gates(self):
        assert intervention_reason(0.75, {}) is not None
        assert intervention_reason(0.7, {}) is None
        assert intervention_reason(0.3, {'frustration': 0.85}) is not None
        assert intervention_reason(0.3, {'frustration': 0.85}, indicator_threshold=None) is None
        # Opportunity indicators never trigger interventions
        assert intervention_reason(0.3, {'engagement': 0.95}) is None

    def test_optimization_gate(self):
        assert optimization_reason(0.71) is not None
        assert optimization_reason(0.7) is None

    def test_realtime_recommendations(self):
        actions = [r.action for r in realtime_recommendations(0.8, 0.8)]
        assert actions == ['provide_immediate_support', 'increase_difficulty']

        actions = [r.action for r in realtime_recommendations(0.1, 0.6)]
        assert actions == ['add_complexity']


class TestTrends:
    """Test trend classification over analysis history."""

    def test_too_few_points_is_stable(self):
        assert classify_direction([]) == Trend.STABLE
        assert classify_direction([0.9]) == Trend.STABLE

    def test_directions(self):
        assert classify_direction([0.2, 0.3, 0.6, 0.7]) == Trend.IMPROVING
        assert classify_direction([0.7, 0.6, 0.3, 0.2]) == Trend.DECLINING
        assert classify_direction([0.5, 0.5, 0.51, 0.5]) == Trend.STABLE

    def test_rising_engagement_is_improving(self):
        history = [
            analysis_with(engagement=float(v)) for v in np.linspace(0.1, 0.9, 10)
        ]

        report = compute_trend_report(history)

        assert report.get('engagement') == Trend.IMPROVING
        assert report.slopes['engagement'] > 0
        assert report.points == 10

    def test_rising_risk_is_declining(self):
        history = [analysis_with(frustration=float(v)) for v in np.linspace(0.1, 0.9, 6)]
        report = compute_trend_report(history)
        assert report.get('frustration') == Trend.DECLINING

    def test_unknown_metric_defaults_to_stable(self):
        assert compute_trend_report([]).get('motivation') == Trend.STABLE

    def test_slope(self):
        assert compute_slope([1.0, 2.0, 3.0]) == pytest.approx(1.0)
        assert compute_slope([0.5, 0.5, 0.5]) == 0.0
        assert compute_slope([0.5]) == 0.0


class TestSessionOutcomes:

    def test_outcomes_in_range(self):
        final = IntegratedAnalysis(
            overall_score=0.6,
            confidence_score=0.7,
            family_scores={'emotional': 0.8, 'neuroplasticity': 0.3},
        )

        outcomes = compute_session_outcomes(final)

        assert outcomes['overall_wellbeing'] == pytest.approx(0.8 * 0.6 + 0.3 * 0.4)
        assert all(0.0 <= v <= 1.0 for v in outcomes.values())

    def test_low_wellbeing_recommendation(self):
        recs = generate_session_recommendations({'overall_wellbeing': 0.2})
        assert recs[0].action == 'focus_on_emotional_support'
        assert recs[0].priority == 'high'

    def test_effective_learning_recommendation(self):
        recs = generate_session_recommendations(
            {'overall_wellbeing': 0.8, 'learning_effectiveness': 0.9}
        )
        assert [r.action for r in recs] == ['advance_difficulty']

    def test_explanation(self):
        text = generate_session_explanation({'overall_wellbeing': 0.75, 'cognitive_growth': 0.6})
        assert "good overall wellbeing" in text
        assert "cognitive growth" in text
