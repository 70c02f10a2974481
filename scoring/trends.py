"""
Trend classification over periodic analysis history.

Tracks how each metric moves across the periodic ticks of a session:
- overall wellbeing score
- risk and opportunity composites
- every indicator present in the history

Trend interpretation:
- improving: the metric moved in its favorable direction
- stable: change within the noise margin
- declining: the metric moved in its unfavorable direction

Favorable direction is "up" for wellbeing, opportunity, engagement,
motivation and improvement potential, and "down" for risk, frustration,
anxiety and cognitive overload.

Engineering approach:
- Split history into an older half and a recent half (recent half takes
  the middle point for odd lengths)
- Change counts when |recent - older| > max(10% of older, 0.01)
- Fewer than 2 points is always stable
- Least-squares slope (scipy.stats.linregress) reported alongside
- Relative variability (coefficient of variation) for stability summaries
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
from scipy import stats

from analysis_core.data_models import IntegratedAnalysis, TrendReport
from analysis_core.enums import Trend

logger = logging.getLogger(__name__)

LOWER_IS_BETTER = ('risk', 'frustration', 'anxiety', 'cognitive_overload')


def compute_trend_report(
    history: Sequence[IntegratedAnalysis],
    config: Optional[Dict] = None
) -> TrendReport:
    """
    Classify the trend of every tracked metric over `history`.

    Args:
        history: Periodic analyses in tick order
        config: Configuration dict (reads `scoring.trends`)

    Returns:
        TrendReport with classifications and slopes per metric
    """
    trend_config = (config or {}).get('scoring', {}).get('trends', {})
    relative_change = trend_config.get('relative_change', 0.1)
    min_change = trend_config.get('min_change', 0.01)

    series = metric_series(history)
    classifications = {}
    slopes = {}
    for metric, values in series.items():
        direction = classify_direction(values, relative_change, min_change)
        if metric in LOWER_IS_BETTER:
            direction = _invert(direction)
        classifications[metric] = direction
        slopes[metric] = compute_slope(values)

    logger.debug(
        f"Trend report over {len(history)} points: "
        f"{ {k: v.value for k, v in classifications.items()} }"
    )

    return TrendReport(classifications=classifications, slopes=slopes, points=len(history))


def metric_series(history: Sequence[IntegratedAnalysis]) -> Dict[str, List[float]]:
    """Per-metric value series; indicators only count where present."""
    series: Dict[str, List[float]] = {
        'overall': [a.overall_score for a in history],
        'risk': [a.risk_score for a in history],
        'opportunity': [a.opportunity_score for a in history],
    }
    for analysis in history:
        for name, value in analysis.indicators.items():
            series.setdefault(name, []).append(value)
    return series


def classify_direction(
    values: Sequence[float],
    relative_change: float = 0.1,
    min_change: float = 0.01
) -> Trend:
    """
    Compare the recent half against the older half.

    Returns IMPROVING for a rise and DECLINING for a fall beyond the margin
    (direction only; callers invert for lower-is-better metrics).
    """
    if len(values) < 2:
        return Trend.STABLE

    values = np.asarray(values, dtype=float)
    mid = len(values) // 2
    older = float(np.mean(values[:mid]))
    recent = float(np.mean(values[mid:]))
    margin = max(abs(older) * relative_change, min_change)

    if recent > older + margin:
        return Trend.IMPROVING
    if recent < older - margin:
        return Trend.DECLINING
    return Trend.STABLE


def compute_slope(values: Sequence[float]) -> float:
    """Least-squares slope per tick (0 for fewer than 2 points or flat series)."""
    if len(values) < 2:
        return 0.0
    y = np.asarray(values, dtype=float)
    if np.ptp(y) == 0:
        return 0.0
    result = stats.linregress(np.arange(len(y)), y)
    return float(result.slope)


def compute_relative_variability(values: Sequence[float]) -> float:
    """
    Coefficient of variation normalized to 0-1 (higher = more variable).

    Very low means are treated as highly variable (0.8).
    """
    if len(values) == 0:
        return 0.5

    values = np.asarray(values, dtype=float)
    mean_value = np.mean(values)
    if mean_value < 0.01:
        return 0.8

    return float(np.clip(np.std(values) / mean_value, 0.0, 1.0))


def _invert(trend: Trend) -> Trend:
    if trend == Trend.IMPROVING:
        return Trend.DECLINING
    if trend == Trend.DECLINING:
        return Trend.IMPROVING
    return Trend.STABLE
