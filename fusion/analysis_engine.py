"""
Two-family analysis engine.

Runs the emotional and neuroplasticity registries over their session data
(concurrently, one worker per family), integrates each family and combines
the family analyses with the family weight table:

    overall    = sum(w_f * overall_f) / sum(w_f for families with results)
    confidence = sum(w_f * confidence_f) / sum(w_f for families with results)
    coverage   = sum(w_f * coverage_f)

A family whose collector was unavailable still runs on whatever data exists;
its confidence is halved and a `collector_unavailable` insight is added.

Risk and opportunity composites are derived from the merged indicators
(see scoring.risk_opportunity).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from analysis_core.data_models import Insight, IntegratedAnalysis
from analysis_core.enums import AlgorithmFamily, AnalysisMode, InsightType
from scoring.risk_opportunity import (
    compute_opportunity_score, compute_risk_score, extract_indicators
)

from .registry import AlgorithmRegistry, FamilyRun, merge_recommendations
from .weights import (
    DEFAULT_EMOTIONAL_WEIGHTS, DEFAULT_FAMILY_WEIGHTS, DEFAULT_NEUROPLASTICITY_WEIGHTS,
    WeightTable
)

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """
    Runs both algorithm families and merges them into one analysis.

    Usage:
        engine = AnalysisEngine([emotional_registry, neuro_registry], config)
        analysis = engine.analyze(profile, {family: data, ...}, AnalysisMode.PERIODIC)
        engine.shutdown()
    """

    def __init__(
        self,
        registries: Iterable[AlgorithmRegistry],
        config: Optional[Dict] = None,
        family_weights: Optional[Dict[str, float]] = None
    ):
        self.config = config or {}
        self.registries: Dict[AlgorithmFamily, AlgorithmRegistry] = {
            r.family: r for r in registries
        }

        if family_weights is None:
            family_weights = self.config.get('weights', {}).get('families', DEFAULT_FAMILY_WEIGHTS)
        self.family_weights = WeightTable(
            family_weights,
            expected_names=[f.value for f in self.registries],
            label='families',
        )

        self._executor = ThreadPoolExecutor(
            max_workers=max(len(self.registries), 1),
            thread_name_prefix='family-pass',
        )

        logger.info(
            f"Analysis engine initialized: families={list(self.family_weights.as_dict().items())}"
        )

    def analyze(
        self,
        profile: Dict[str, Any],
        data_by_family: Dict[AlgorithmFamily, Dict[str, Any]],
        mode: AnalysisMode,
        session_id: Optional[str] = None,
        unavailable: Iterable[AlgorithmFamily] = ()
    ) -> IntegratedAnalysis:
        """
        Run one pass over both families.

        Args:
            profile: User profile
            data_by_family: Session data per family (missing = empty window)
            mode: REALTIME runs the priority subsets via execute_realtime;
                  PERIODIC and FINAL run every unit
            session_id: Owning session
            unavailable: Families whose collector could not supply data

        Returns:
            Combined IntegratedAnalysis (never raises for unit failures)
        """
        unavailable = set(unavailable)
        realtime = mode == AnalysisMode.REALTIME

        futures = {
            family: self._executor.submit(
                self._run_family, registry, profile, data_by_family.get(family, {}), realtime
            )
            for family, registry in self.registries.items()
        }
        runs: Dict[AlgorithmFamily, FamilyRun] = {
            family: future.result() for family, future in futures.items()
        }

        family_analyses = {}
        for family, run in runs.items():
            analysis = self.registries[family].integrate_run(run, mode=mode, session_id=session_id)
            if family in unavailable:
                analysis = replace(
                    analysis,
                    confidence_score=analysis.confidence_score * 0.5,
                    insights=analysis.insights + (Insight(
                        InsightType.COLLECTOR_UNAVAILABLE,
                        f"{family.value} collector unavailable, confidence reduced",
                        1.0,
                    ),),
                )
            family_analyses[family] = analysis

        return self.combine(family_analyses, mode=mode, session_id=session_id)

    def _run_family(
        self,
        registry: AlgorithmRegistry,
        profile: Dict[str, Any],
        data: Dict[str, Any],
        realtime: bool
    ) -> FamilyRun:
        if realtime:
            return registry.run_priority(profile, data)
        return registry.run_all(profile, data)

    def combine(
        self,
        family_analyses: Dict[AlgorithmFamily, IntegratedAnalysis],
        mode: AnalysisMode,
        session_id: Optional[str] = None
    ) -> IntegratedAnalysis:
        """Merge per-family analyses with the family weight table."""
        present = {
            family: analysis for family, analysis in family_analyses.items()
            if analysis.algorithm_results
        }
        present_weight = self.family_weights.total(f.value for f in present)

        insights: List[Insight] = []
        results = []
        failed = []
        for analysis in family_analyses.values():
            insights.extend(
                i for i in analysis.insights if i.type != InsightType.TOTAL_FAILURE.value
            )
            results.extend(analysis.algorithm_results)
            failed.extend(analysis.failed_algorithms)

        family_scores = {
            family.value: analysis.overall_score for family, analysis in family_analyses.items()
        }

        if not present or present_weight <= 0:
            if failed:
                logger.warning(f"Total failure: every algorithm failed ({len(failed)})")
            insights.append(Insight(
                InsightType.TOTAL_FAILURE,
                "No algorithm produced a result for this pass",
                1.0,
            ))
            return IntegratedAnalysis(
                overall_score=0.0,
                confidence_score=0.0,
                insights=insights,
                family_scores=family_scores,
                coverage=0.0,
                mode=mode,
                failed_algorithms=failed,
                session_id=session_id,
            )

        overall = sum(
            self.family_weights[f.value] * a.overall_score for f, a in present.items()
        ) / present_weight
        confidence = sum(
            self.family_weights[f.value] * a.confidence_score for f, a in present.items()
        ) / present_weight
        coverage = sum(
            self.family_weights[f.value] * a.coverage for f, a in family_analyses.items()
        )

        indicators = extract_indicators(results)
        risk = compute_risk_score(indicators, self.config)
        opportunity = compute_opportunity_score(indicators, self.config)

        return IntegratedAnalysis(
            overall_score=overall,
            confidence_score=confidence,
            risk_score=risk,
            opportunity_score=opportunity,
            insights=insights,
            recommendations=merge_recommendations(
                a.recommendations for a in family_analyses.values()
            ),
            indicators=indicators,
            family_scores=family_scores,
            coverage=coverage,
            mode=mode,
            algorithm_results=results,
            failed_algorithms=failed,
            session_id=session_id,
        )

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


def build_engine(
    config: Dict,
    emotional_units=None,
    neuroplasticity_units=None
) -> AnalysisEngine:
    """
    Build both registries and the engine from configuration.

    Args:
        config: Configuration dict (reads `weights` and `priority_subsets`)
        emotional_units: Override units (default: the full emotional family)
        neuroplasticity_units: Override units (default: the full neuroplasticity family)

    Raises:
        WeightConfigurationError: Any weight table fails validation
    """
    from emotional_analysis import create_emotional_units
    from neuroplasticity import create_neuroplasticity_units

    weights = config.get('weights', {})
    subsets = config.get('priority_subsets', {})

    if emotional_units is None:
        emotional_units = create_emotional_units(config)
    if neuroplasticity_units is None:
        neuroplasticity_units = create_neuroplasticity_units(config)

    emotional = AlgorithmRegistry(
        AlgorithmFamily.EMOTIONAL,
        emotional_units,
        weights.get('emotional', DEFAULT_EMOTIONAL_WEIGHTS),
        priority_names=_priority_subset(subsets, 'emotional', emotional_units),
    )
    neuro = AlgorithmRegistry(
        AlgorithmFamily.NEUROPLASTICITY,
        neuroplasticity_units,
        weights.get('neuroplasticity', DEFAULT_NEUROPLASTICITY_WEIGHTS),
        priority_names=_priority_subset(subsets, 'neuroplasticity', neuroplasticity_units),
    )
    return AnalysisEngine([emotional, neuro], config)


def _priority_subset(subsets: Dict, family: str, units) -> List[str]:
    """Configured subset restricted to registered names (all units if none match)."""
    names = [u.name for u in units]
    configured = [n for n in subsets.get(family, names) if n in names]
    return configured or names
