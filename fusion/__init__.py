"""
Algorithm integration module.

This package combines pluggable algorithm units into unified analyses:
- Per-family registries with validated weight tables
- Failure isolation (one failing unit never sinks the pass)
- Weighted integration with renormalization over the units present
- Two-family engine combining emotional and neuroplasticity analyses

Rationale:
- Single heuristics are noisy; weighted agreement is more stable
- Degraded passes stay usable but report reduced coverage and confidence
"""

from .weights import (
    DEFAULT_EMOTIONAL_WEIGHTS,
    DEFAULT_FAMILY_WEIGHTS,
    DEFAULT_NEUROPLASTICITY_WEIGHTS,
    WeightTable,
)
from .registry import AlgorithmRegistry, FamilyRun, integrate_results
from .analysis_engine import AnalysisEngine, build_engine

__all__ = [
    'DEFAULT_EMOTIONAL_WEIGHTS',
    'DEFAULT_FAMILY_WEIGHTS',
    'DEFAULT_NEUROPLASTICITY_WEIGHTS',
    'WeightTable',
    'AlgorithmRegistry',
    'FamilyRun',
    'integrate_results',
    'AnalysisEngine',
    'build_engine',
]
