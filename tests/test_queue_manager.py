"""
Unit tests for the intervention/optimization queue manager.
"""

import threading

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis_core.data_models import IntegratedAnalysis, QueueItem
from analysis_core.enums import Priority, QueueKind
from orchestration.queue_manager import QueueManager


def make_item(kind=QueueKind.INTERVENTION, priority=Priority.IMMEDIATE, session_id='s1'):
    trigger = IntegratedAnalysis(
        overall_score=0.3, confidence_score=0.8, risk_score=0.9, session_id=session_id
    )
    return QueueItem.create(kind, priority, trigger, reason='risk', action='support')


class TestEnqueue:

    def test_enqueue_and_peek(self):
        queues = QueueManager()
        item = make_item()

        assert queues.enqueue(item)

        assert queues.peek_all(QueueKind.INTERVENTION) == [item]
        assert queues.peek_all(QueueKind.OPTIMIZATION) == []

    def test_same_trigger_is_deduplicated(self):
        queues = QueueManager()
        item = make_item()
        duplicate = QueueItem.create(
            QueueKind.INTERVENTION, Priority.HIGH, item.trigger, reason='again'
        )

        assert duplicate.item_id == item.item_id
        assert queues.enqueue(item)
        assert not queues.enqueue(duplicate)
        assert len(queues.peek_all(QueueKind.INTERVENTION)) == 1

    def test_kinds_are_independent(self):
        queues = QueueManager()
        intervention = make_item()
        optimization = QueueItem.create(
            QueueKind.OPTIMIZATION, Priority.MEDIUM, intervention.trigger
        )

        queues.enqueue(intervention)
        queues.enqueue(optimization)

        assert queues.depths() == {'interventions': 1, 'optimizations': 1}

    def test_listener_errors_are_absorbed(self):
        queues = QueueManager()
        received = []

        def broken(item):
            raise RuntimeError("listener down")

        queues.add_listener(broken)
        queues.add_listener(received.append)

        assert queues.enqueue(make_item())
        assert len(received) == 1


class TestMarkProcessed:

    def test_mark_twice_is_noop(self):
        queues = QueueManager()
        first, second = make_item(), make_item()
        queues.enqueue(first)
        queues.enqueue(second)

        assert queues.mark_processed(first.item_id)
        assert len(queues.peek_all(QueueKind.INTERVENTION)) == 1
        assert not queues.mark_processed(first.item_id)
        assert len(queues.peek_all(QueueKind.INTERVENTION)) == 1

    def test_unknown_id(self):
        assert not QueueManager().mark_processed('missing')

    def test_processed_view(self):
        queues = QueueManager()
        item = make_item()
        queues.enqueue(item)
        queues.mark_processed(item.item_id, QueueKind.INTERVENTION)

        processed = queues.processed(QueueKind.INTERVENTION)

        assert len(processed) == 1
        assert processed[0].processed
        assert processed[0].processed_at is not None
        # The original frozen item is untouched
        assert not item.processed

    def test_processed_items_are_never_resurrected(self):
        queues = QueueManager()
        item = make_item()
        queues.enqueue(item)
        queues.mark_processed(item.item_id)

        assert queues.clear_processed() == 1
        assert queues.processed(QueueKind.INTERVENTION) == []
        assert not queues.enqueue(item)
        assert queues.peek_all(QueueKind.INTERVENTION) == []


class TestSnapshots:

    def test_snapshot_independent_of_live_queue(self):
        queues = QueueManager()
        item = make_item()
        queues.enqueue(item)

        snapshot = queues.snapshot()
        snapshot['interventions'].clear()

        assert queues.peek_all(QueueKind.INTERVENTION) == [item]
        assert queues.mark_processed(item.item_id)

    def test_snapshot_unchanged_by_later_processing(self):
        queues = QueueManager()
        item = make_item()
        queues.enqueue(item)

        snapshot = queues.peek_all(QueueKind.INTERVENTION)
        queues.mark_processed(item.item_id)

        assert snapshot == [item]

    def test_concurrent_enqueue_keeps_every_item(self):
        queues = QueueManager()
        items = [make_item() for _ in range(50)]

        threads = [threading.Thread(target=queues.enqueue, args=(item,)) for item in items]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(queues.peek_all(QueueKind.INTERVENTION)) == 50

    def test_frozen_items(self):
        item = make_item()
        with pytest.raises(AttributeError):
            item.priority = Priority.LOW
