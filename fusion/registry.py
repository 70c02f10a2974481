"""
Algorithm registry and weighted integrator.

Each algorithm family has one registry holding its units in declaration
order plus a validated WeightTable. A pass runs every unit (or a named
priority subset), isolating failures, and the integrator combines the
surviving results:

    overall_score    = sum(score_i * w_i) / sum(w_i present)
    confidence_score = sum(confidence_i * w_i) / sum(w_i present) * coverage
    coverage         = sum(w_i present) / sum(w_i expected)

With no failures coverage is 1 and both reduce to the plain weighted mean.
A pass where no unit produced a result yields overall 0, confidence 0 and a
`total_failure` insight; integration never raises.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from analysis_core.data_models import (
    AlgorithmResult, Insight, IntegratedAnalysis, Recommendation
)
from analysis_core.enums import AlgorithmFamily, AnalysisMode, InsightType
from analysis_core.exceptions import AlgorithmExecutionError, WeightConfigurationError
from analysis_core.interfaces import AlgorithmUnit
from scoring.risk_opportunity import extract_indicators

from .weights import WeightTable

logger = logging.getLogger(__name__)


@dataclass
class FamilyRun:
    """
    Outcome of one registry pass.

    Attributes:
        family: Family the registry belongs to
        expected: Unit names the pass was asked to run
        results: Results of units that succeeded, in declaration order
        failures: Wrapped errors of units that raised
    """
    family: AlgorithmFamily
    expected: List[str]
    results: List[AlgorithmResult] = field(default_factory=list)
    failures: List[AlgorithmExecutionError] = field(default_factory=list)

    @property
    def failed_names(self) -> List[str]:
        return [f.algorithm_name for f in self.failures]


class AlgorithmRegistry:
    """
    Ordered units of one family plus their weight table.

    Usage:
        registry = AlgorithmRegistry(AlgorithmFamily.EMOTIONAL, units, weights)
        run = registry.run_all(profile, data)
        analysis = registry.integrate(run.results, run.failures)
    """

    def __init__(
        self,
        family: AlgorithmFamily,
        units: Sequence[AlgorithmUnit],
        weights: Dict[str, float],
        priority_names: Optional[Iterable[str]] = None
    ):
        """
        Build and validate a registry.

        Args:
            family: Algorithm family
            units: Units in declaration order (names must be unique)
            weights: Raw weight mapping (validated/normalized here)
            priority_names: Subset run on the real-time path

        Raises:
            WeightConfigurationError: Weights invalid or not matching units
        """
        self.family = family
        self.units: Dict[str, AlgorithmUnit] = {}
        for unit in units:
            if unit.name in self.units:
                raise WeightConfigurationError(
                    f"{family.value}: duplicate algorithm name '{unit.name}'"
                )
            self.units[unit.name] = unit

        self.weights = WeightTable(weights, expected_names=self.units.keys(), label=family.value)

        priority = list(priority_names) if priority_names is not None else list(self.units)
        unknown = [n for n in priority if n not in self.units]
        if unknown:
            raise WeightConfigurationError(
                f"{family.value}: priority subset names unknown algorithms {unknown}"
            )
        self.priority_names = priority

        logger.info(
            f"Registry '{family.value}' initialized with {len(self.units)} algorithms "
            f"({len(self.priority_names)} on the real-time path)"
        )

    @property
    def names(self) -> List[str]:
        return list(self.units)

    def run_all(
        self,
        profile: Dict[str, Any],
        data: Dict[str, Any],
        names: Optional[Iterable[str]] = None,
        realtime: bool = False
    ) -> FamilyRun:
        """
        Invoke every unit (or the named subset) in declaration order.

        A unit that raises is wrapped in AlgorithmExecutionError, logged and
        excluded; the others still run.
        """
        selected = set(names) if names is not None else None
        expected = [n for n in self.units if selected is None or n in selected]
        run = FamilyRun(family=self.family, expected=expected)

        for name in expected:
            unit = self.units[name]
            try:
                if realtime:
                    result = unit.execute_realtime(profile, data)
                else:
                    result = unit.execute(profile, data)
            except Exception as e:
                error = AlgorithmExecutionError(name, e)
                logger.warning(str(error))
                run.failures.append(error)
                continue
            run.results.append(result)

        return run

    def run_priority(self, profile: Dict[str, Any], data: Dict[str, Any]) -> FamilyRun:
        return self.run_all(profile, data, names=self.priority_names, realtime=True)

    def integrate(
        self,
        results: Sequence[AlgorithmResult],
        failures: Sequence[Union[AlgorithmExecutionError, str]] = (),
        expected_names: Optional[Iterable[str]] = None,
        mode: AnalysisMode = AnalysisMode.PERIODIC,
        session_id: Optional[str] = None
    ) -> IntegratedAnalysis:
        return integrate_results(
            results,
            self.weights,
            failures=failures,
            expected_names=expected_names,
            mode=mode,
            session_id=session_id,
            family=self.family,
        )

    def integrate_run(
        self,
        run: FamilyRun,
        mode: AnalysisMode = AnalysisMode.PERIODIC,
        session_id: Optional[str] = None
    ) -> IntegratedAnalysis:
        return self.integrate(run.results, run.failures, run.expected, mode, session_id)


def integrate_results(
    results: Sequence[AlgorithmResult],
    weights: WeightTable,
    failures: Sequence[Union[AlgorithmExecutionError, str]] = (),
    expected_names: Optional[Iterable[str]] = None,
    mode: AnalysisMode = AnalysisMode.PERIODIC,
    session_id: Optional[str] = None,
    family: Optional[AlgorithmFamily] = None
) -> IntegratedAnalysis:
    """
    Combine unit results with weight renormalization over present units.

    Args:
        results: Results to combine (unknown names are ignored)
        weights: Validated weight table of the family
        failures: Failed units (errors or names), reported as degraded
        expected_names: Units the pass was asked to run (default: all)
        mode: Processing path producing this analysis
        session_id: Owning session, if any
        family: Family label for family_scores

    Returns:
        IntegratedAnalysis with overall/confidence in [0, 1]
    """
    failed_names = [getattr(f, 'algorithm_name', f) for f in failures]
    expected = list(expected_names) if expected_names is not None else list(weights)
    present = [r for r in results if r.algorithm_name in weights]
    present_weight = weights.total(r.algorithm_name for r in present)
    expected_weight = weights.total(expected)

    degraded = [
        Insight(InsightType.DEGRADED, f"Algorithm '{name}' failed and was excluded", 1.0)
        for name in failed_names
    ]

    if not present or present_weight <= 0:
        label = family.value if family else 'analysis'
        logger.warning(f"No algorithm results available for {label} ({len(failed_names)} failed)")
        return IntegratedAnalysis(
            overall_score=0.0,
            confidence_score=0.0,
            insights=degraded + [Insight(
                InsightType.TOTAL_FAILURE,
                "No algorithm produced a result for this pass",
                1.0,
            )],
            family_scores={family.value: 0.0} if family else {},
            coverage=0.0,
            mode=mode,
            failed_algorithms=failed_names,
            session_id=session_id,
        )

    overall = sum(r.score * weights[r.algorithm_name] for r in present) / present_weight
    coverage = min(present_weight / expected_weight, 1.0) if expected_weight > 0 else 0.0
    confidence = (
        sum(r.confidence * weights[r.algorithm_name] for r in present) / present_weight
    ) * coverage

    insights: List[Insight] = []
    for result in present:
        insights.extend(result.insights)
    insights.extend(degraded)

    if failed_names:
        logger.warning(
            f"Degraded pass: {len(failed_names)} algorithm(s) failed, coverage {coverage:.2f}"
        )

    return IntegratedAnalysis(
        overall_score=overall,
        confidence_score=confidence,
        insights=insights,
        recommendations=merge_recommendations(r.recommendations for r in present),
        indicators=extract_indicators(present),
        family_scores={family.value: overall} if family else {},
        coverage=coverage,
        mode=mode,
        algorithm_results=present,
        failed_algorithms=failed_names,
        session_id=session_id,
    )


def merge_recommendations(groups: Iterable[Iterable[Recommendation]]) -> List[Recommendation]:
    """Concatenate recommendations in order, dropping repeated actions."""
    merged = []
    seen = set()
    for group in groups:
        for rec in group:
            if rec.action in seen:
                continue
            seen.add(rec.action)
            merged.append(rec)
    return merged
