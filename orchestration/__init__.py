"""
Session orchestration: lifecycle, real-time and periodic passes, queues.
"""

from .orchestrator import WellbeingOrchestrator, create_sink
from .periodic_aggregator import PeriodicAggregator
from .queue_manager import QueueManager
from .realtime_processor import RealtimeProcessor
from .session_lifecycle import SessionLifecycleManager, generate_session_id
from .state import CancellationToken, SharedState

__all__ = [
    'WellbeingOrchestrator',
    'create_sink',
    'PeriodicAggregator',
    'QueueManager',
    'RealtimeProcessor',
    'SessionLifecycleManager',
    'generate_session_id',
    'CancellationToken',
    'SharedState',
]
