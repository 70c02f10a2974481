"""
Shared collector machinery.

A family collector fans each normalized record out to its sub-collectors and
keeps three bounded record windows:
- rolling buffer (real-time path)
- pending window, drained by each periodic pass
- session log, read once by the terminal summary

When a bounded window overflows the oldest records are dropped and a
warning is logged.
"""

import logging
import time
from collections import deque
from typing import Any, Dict, List, Optional

import numpy as np

from analysis_core.exceptions import CollectorUnavailableError
from analysis_core.interfaces import DataCollector

from .features import build_session_data

logger = logging.getLogger(__name__)


class SubCollector:
    """
    Focused view over a subset of records.

    Subclasses set `name` and `event_types` (empty = every record) and may
    override `_extract` to keep per-record values.
    """

    name = "sub"
    event_types: tuple = ()

    def __init__(self):
        self.active = False
        self.reset()

    def reset(self):
        self.count = 0
        self.error_count = 0
        self.values: List[float] = []

    def start(self):
        self.reset()
        self.active = True

    def accepts(self, record: Dict[str, Any]) -> bool:
        return not self.event_types or record.get('type') in self.event_types

    def collect(self, record: Dict[str, Any]) -> None:
        if not self.active or not self.accepts(record):
            return
        try:
            value = self._extract(record)
        except (TypeError, ValueError, KeyError) as e:
            self.error_count += 1
            logger.warning(f"{self.name} collector skipped malformed record: {e}")
            return
        self.count += 1
        if value is not None:
            self.values.append(float(value))

    def _extract(self, record: Dict[str, Any]) -> Optional[float]:
        return None

    def stop(self) -> Dict[str, Any]:
        self.active = False
        return self.get_summary()

    def get_summary(self) -> Dict[str, Any]:
        values = np.array(self.values) if self.values else None
        return {
            'count': self.count,
            'errors': self.error_count,
            'mean': float(np.mean(values)) if values is not None else None,
            'std': float(np.std(values)) if values is not None else None,
        }


class BaseCollector(DataCollector):
    """
    Family collector with rolling buffer, pending window and session log.

    Not thread-safe on its own; callers hold the orchestrator's shared-state
    lock around every call.
    """

    config_key = ""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}
        collectors_config = self.config.get('collectors', {})
        collector_config = collectors_config.get(self.config_key, {})
        self.buffer_size = int(collector_config.get('buffer_size', 100))
        self.session_record_limit = int(collectors_config.get('session_record_limit', 10000))
        self.pending_limit = int(collectors_config.get('pending_limit', 10000))

        self.sub_collectors: List[SubCollector] = self._create_sub_collectors()
        self._buffer = deque(maxlen=self.buffer_size)
        self._pending = deque(maxlen=self.pending_limit)
        self._session_records = deque(maxlen=self.session_record_limit)
        self._collecting = False
        self._context: Dict[str, Any] = {}
        self._last_timestamp: Optional[float] = None
        self._started_at: Optional[float] = None
        self._rejected = 0
        self._collected = 0
        self._pending_dropped = 0
        self._session_dropped = 0

    def _create_sub_collectors(self) -> List[SubCollector]:
        return []

    @property
    def is_collecting(self) -> bool:
        return self._collecting

    @property
    def name(self) -> str:
        return self.family.value

    def start(self, session_id: str, user_id: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._buffer.clear()
        self._pending.clear()
        self._session_records.clear()
        self._last_timestamp = None
        self._rejected = 0
        self._collected = 0
        self._pending_dropped = 0
        self._session_dropped = 0
        self._started_at = time.time()
        self._context = {'session_id': session_id, 'user_id': user_id}
        self._context.update(context or {})
        for sub in self.sub_collectors:
            sub.start()
        self._collecting = True
        logger.info(f"{self.name} collector started for session {session_id}")

    def collect(self, event: Dict[str, Any]) -> Dict[str, Any]:
        if not self._collecting:
            raise CollectorUnavailableError(self.name)

        record = self._normalize(event)
        self._collected += 1
        if len(self._pending) == self.pending_limit:
            if self._pending_dropped == 0:
                logger.warning(
                    f"{self.name} pending window full ({self.pending_limit}); "
                    f"dropping oldest records until the next periodic pass"
                )
            self._pending_dropped += 1
        if len(self._session_records) == self.session_record_limit:
            if self._session_dropped == 0:
                logger.warning(
                    f"{self.name} session log full ({self.session_record_limit}); "
                    f"final pass will only see the most recent records"
                )
            self._session_dropped += 1
        self._buffer.append(record)
        self._pending.append(record)
        self._session_records.append(record)
        for sub in self.sub_collectors:
            sub.collect(record)
        return record

    def _normalize(self, event: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(event)
        record['type'] = str(event.get('type', 'interaction'))
        try:
            timestamp = float(event.get('timestamp', time.time()))
        except (TypeError, ValueError):
            self._rejected += 1
            timestamp = time.time()
        record['timestamp'] = timestamp
        record['interval'] = (
            max(0.0, timestamp - self._last_timestamp)
            if self._last_timestamp is not None else 0.0
        )
        record['session_id'] = self._context.get('session_id')
        self._last_timestamp = timestamp
        return record

    def snapshot(self) -> List[Dict[str, Any]]:
        return list(self._buffer)

    def window(self) -> Dict[str, Any]:
        return self.build_data(self.snapshot())

    def build_data(self, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Session data for an arbitrary list of this collector's records."""
        return build_session_data(records, context=self._context, config=self.config)

    def drain_pending(self) -> List[Dict[str, Any]]:
        pending = list(self._pending)
        self._pending.clear()
        if self._pending_dropped:
            logger.warning(f"{self.name} dropped {self._pending_dropped} undrained records")
            self._pending_dropped = 0
        return pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self._context)

    def stop(self) -> Dict[str, Any]:
        """
        Stop collecting and build the terminal summary.

        Returns:
            Dict with record counts, error counts, timing stats, the
            per-sub-collector summaries and `session_data` over the session
        """
        self._collecting = False
        records = list(self._session_records)
        subs = {sub.name: sub.stop() for sub in self.sub_collectors}
        timestamps = [r['timestamp'] for r in records]

        summary = {
            'family': self.name,
            'session_id': self._context.get('session_id'),
            'total_records': self._collected,
            'analyzed_records': len(records),
            'dropped_records': self._session_dropped,
            'error_count': self._rejected + sum(s['errors'] for s in subs.values()),
            'first_timestamp': min(timestamps) if timestamps else None,
            'last_timestamp': max(timestamps) if timestamps else None,
            'collection_seconds': time.time() - self._started_at if self._started_at else 0.0,
            'sub_collectors': subs,
            'session_data': self.build_data(records),
        }

        logger.info(
            f"{self.name} collector stopped: {summary['total_records']} records, "
            f"{summary['error_count']} errors"
        )
        return summary
