"""
Weight tables for algorithm integration.

Normalization policy:
- Every weight must be finite and non-negative
- Names must match the registered units exactly (when names are given)
- A table whose sum is within 1e-6 of 1 is kept as-is
- Any other positive sum is renormalized to 1 and a warning is logged
- An empty table or a zero sum raises WeightConfigurationError
"""

import logging
import math
from typing import Dict, Iterable, Iterator, Mapping, Optional

from analysis_core.exceptions import WeightConfigurationError

logger = logging.getLogger(__name__)

SUM_TOLERANCE = 1e-6

DEFAULT_EMOTIONAL_WEIGHTS = {
    'color_analysis': 0.15,
    'frustration_detection': 0.20,
    'engagement_analysis': 0.20,
    'anxiety_detector': 0.15,
    'adaptive_motivation': 0.10,
    'emotional_regulation': 0.10,
    'creative_expression': 0.10,
}

DEFAULT_NEUROPLASTICITY_WEIGHTS = {
    'improvement_tracker': 0.25,
    'opportunity_window': 0.20,
    'memory_consolidation': 0.15,
    'breakthrough_detector': 0.15,
    'cognitive_recovery': 0.15,
    'learning_transfer': 0.10,
}

DEFAULT_FAMILY_WEIGHTS = {
    'emotional': 0.6,
    'neuroplasticity': 0.4,
}


class WeightTable(Mapping):
    """
    Immutable, validated mapping of name -> weight summing to 1.

    Usage:
        table = WeightTable({'a': 2, 'b': 2}, expected_names=['a', 'b'])
        table['a']  # 0.5 (renormalized, warning logged)
    """

    def __init__(
        self,
        weights: Mapping[str, float],
        expected_names: Optional[Iterable[str]] = None,
        label: str = "weights"
    ):
        self.label = label
        self._weights = _validate(dict(weights or {}), expected_names, label)

    def __getitem__(self, name: str) -> float:
        return self._weights[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def total(self, names: Optional[Iterable[str]] = None) -> float:
        """Sum of weights, optionally restricted to `names`."""
        if names is None:
            return math.fsum(self._weights.values())
        return math.fsum(self._weights.get(n, 0.0) for n in names)

    def as_dict(self) -> Dict[str, float]:
        return dict(self._weights)

    def __repr__(self) -> str:
        return f"WeightTable({self.label}: {self._weights})"


def _validate(weights: Dict[str, float], expected_names, label: str) -> Dict[str, float]:
    if not weights:
        raise WeightConfigurationError(f"{label}: weight table is empty")

    cleaned = {}
    for name, value in weights.items():
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise WeightConfigurationError(f"{label}: weight for '{name}' is not numeric: {value!r}")
        if not math.isfinite(value):
            raise WeightConfigurationError(f"{label}: weight for '{name}' is not finite")
        if value < 0:
            raise WeightConfigurationError(f"{label}: weight for '{name}' is negative ({value})")
        cleaned[name] = value

    if expected_names is not None:
        expected = set(expected_names)
        missing = expected - set(cleaned)
        unknown = set(cleaned) - expected
        if missing or unknown:
            raise WeightConfigurationError(
                f"{label}: weight names do not match registered units "
                f"(missing={sorted(missing)}, unknown={sorted(unknown)})"
            )

    total = math.fsum(cleaned.values())
    if total <= 0:
        raise WeightConfigurationError(f"{label}: weights sum to zero")

    if abs(total - 1.0) > SUM_TOLERANCE:
        logger.warning(f"{label}: weights sum to {total:.6f}, renormalizing to 1")
        cleaned = {name: value / total for name, value in cleaned.items()}

    return cleaned
