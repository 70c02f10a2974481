"""
Neuroplasticity algorithm family.

Six stateless units, in declaration order:
1. improvement_tracker: gain over baseline, improvement potential
2. opportunity_window: readiness to learn, cognitive overload
3. memory_consolidation: retention and recall
4. breakthrough_detector: performance jumps and skill mastery
5. cognitive_recovery: recovery after errors
6. learning_transfer: skills carried across contexts
"""

from typing import Dict, List, Optional

from analysis_core.interfaces import AlgorithmUnit

from .improvement_tracker import CognitiveImprovementTracker
from .opportunity_window import OpportunityWindowIdentifier
from .memory_consolidation import MemoryConsolidationSystem
from .breakthrough_detector import CognitiveBreakthroughDetector
from .cognitive_recovery import CognitiveRecovery
from .learning_transfer import LearningTransferSystem

NEUROPLASTICITY_UNITS = (
    CognitiveImprovementTracker,
    OpportunityWindowIdentifier,
    MemoryConsolidationSystem,
    CognitiveBreakthroughDetector,
    CognitiveRecovery,
    LearningTransferSystem,
)


def create_neuroplasticity_units(config: Optional[Dict] = None) -> List[AlgorithmUnit]:
    """Instantiate every neuroplasticity unit in declaration order."""
    return [unit_cls(config) for unit_cls in NEUROPLASTICITY_UNITS]


__all__ = [
    'CognitiveImprovementTracker',
    'OpportunityWindowIdentifier',
    'MemoryConsolidationSystem',
    'CognitiveBreakthroughDetector',
    'CognitiveRecovery',
    'LearningTransferSystem',
    'NEUROPLASTICITY_UNITS',
    'create_neuroplasticity_units',
]
