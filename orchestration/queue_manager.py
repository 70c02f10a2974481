"""
Intervention and optimization queue manager.

Two independent append-only queues. Producers (real-time and periodic
passes) enqueue frozen QueueItems; consumers read snapshots and mark items
processed. Item ids are deterministic per trigger, so re-emitting for the
same analysis is a no-op. Nothing leaves the active view except through
`mark_processed`.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from analysis_core.data_models import QueueItem
from analysis_core.enums import QueueKind

logger = logging.getLogger(__name__)


class _Queue:
    """One lock-protected queue with its processed (audit) view."""

    def __init__(self, kind: QueueKind):
        self.kind = kind
        self.lock = threading.Lock()
        self.active: "OrderedDict[str, QueueItem]" = OrderedDict()
        self.processed: "OrderedDict[str, QueueItem]" = OrderedDict()
        self.seen = set()


class QueueManager:
    """
    Usage:
        queues = QueueManager()
        queues.enqueue(item)
        for item in queues.peek_all(QueueKind.INTERVENTION):
            handle(item)
            queues.mark_processed(item.item_id)
    """

    def __init__(self):
        self._queues: Dict[QueueKind, _Queue] = {kind: _Queue(kind) for kind in QueueKind}
        self._listeners: List[Callable[[QueueItem], None]] = []

    def enqueue(self, item: QueueItem) -> bool:
        """
        Append an item.

        Returns:
            False if an item with the same id was ever enqueued
        """
        queue = self._queues[item.kind]
        with queue.lock:
            if item.item_id in queue.seen:
                logger.debug(f"Duplicate {item.kind.value} item ignored: {item.item_id}")
                return False
            queue.seen.add(item.item_id)
            queue.active[item.item_id] = item

        logger.info(
            f"{item.kind.value.capitalize()} queued ({item.priority.value}): {item.reason}"
        )
        for listener in list(self._listeners):
            try:
                listener(item)
            except Exception as e:
                logger.warning(f"Queue listener failed: {e}")
        return True

    def peek_all(self, kind: QueueKind) -> List[QueueItem]:
        """Snapshot of active items in enqueue order (a new list)."""
        queue = self._queues[kind]
        with queue.lock:
            return list(queue.active.values())

    def mark_processed(self, item_id: str, kind: Optional[QueueKind] = None) -> bool:
        """
        Move an item to the processed view.

        Returns:
            True on the first call for an active item; False otherwise
            (unknown id or already processed)
        """
        kinds = [kind] if kind is not None else list(QueueKind)
        for k in kinds:
            queue = self._queues[k]
            with queue.lock:
                item = queue.active.pop(item_id, None)
                if item is not None:
                    queue.processed[item_id] = item.mark_processed()
                    logger.debug(f"{k.value} item processed: {item_id}")
                    return True
        return False

    def processed(self, kind: QueueKind) -> List[QueueItem]:
        queue = self._queues[kind]
        with queue.lock:
            return list(queue.processed.values())

    def clear_processed(self, kind: Optional[QueueKind] = None) -> int:
        """Empty the processed view; ids stay known so items never resurrect."""
        cleared = 0
        for k in ([kind] if kind is not None else list(QueueKind)):
            queue = self._queues[k]
            with queue.lock:
                cleared += len(queue.processed)
                queue.processed.clear()
        return cleared

    def depths(self) -> Dict[str, int]:
        return {
            'interventions': len(self.peek_all(QueueKind.INTERVENTION)),
            'optimizations': len(self.peek_all(QueueKind.OPTIMIZATION)),
        }

    def snapshot(self) -> Dict[str, List[QueueItem]]:
        return {
            'interventions': self.peek_all(QueueKind.INTERVENTION),
            'optimizations': self.peek_all(QueueKind.OPTIMIZATION),
        }

    def add_listener(self, listener: Callable[[QueueItem], None]) -> None:
        self._listeners.append(listener)
