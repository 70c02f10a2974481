"""
Integration tests for the orchestrator facade.

Tests cover:
- Lifecycle transitions and their errors
- Real-time interventions from reported frustration
- Periodic passes, trends and the final session report
- Queue snapshots and marking processed items
- Malformed events, concurrent passes and unavailable collectors
"""

import threading
import time

import pytest # pyright: ignore[reportMissingImports]
import numpy as np
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis_core.data_models import SessionConfig
from analysis_core.enums import (
    AlgorithmFamily, AnalysisMode, InsightType, LifecycleState, Priority, SessionStatus, Trend
)
from analysis_core.exceptions import (
    CollectorUnavailableError, InvalidStateError, NoActiveSessionError
)
from analysis_core.interfaces import AlgorithmUnit
from data_collectors import NeuroplasticityDataCollector
from emotional_analysis import create_emotional_units
from emotional_analysis.frustration import FrustrationDetection
from orchestration import WellbeingOrchestrator
from utils.memory_sink import InMemorySink

# Long interval keeps the timer thread from ticking during a test
QUIET = {'orchestrator': {'analysis_interval_ms': 60000}}


@pytest.fixture
def sink():
    return InMemorySink()


@pytest.fixture
def orchestrator(sink):
    orch = WellbeingOrchestrator(QUIET, sink=sink)
    assert orch.initialize({'user_id': 'user-1'})
    yield orch
    orch.close()


def session_config(**overrides):
    params = dict(user_id='user-1', analysis_interval_ms=0)
    params.update(overrides)
    return SessionConfig(**params)


class TestLifecycle:
    """Test session state transitions."""

    def test_start_requires_initialize(self):
        orch = WellbeingOrchestrator(QUIET, sink=InMemorySink())
        with pytest.raises(InvalidStateError):
            orch.start_session(session_config())

    def test_start_while_active_raises(self, orchestrator):
        orchestrator.start_session(session_config())
        with pytest.raises(InvalidStateError):
            orchestrator.start_session(session_config())

    def test_end_while_idle_raises(self, orchestrator):
        with pytest.raises(NoActiveSessionError):
            orchestrator.end_session()

    def test_end_twice_raises(self, orchestrator):
        orchestrator.start_session(session_config())
        orchestrator.end_session()
        with pytest.raises(NoActiveSessionError):
            orchestrator.end_session()

    def test_session_ids_generated(self, orchestrator):
        session = orchestrator.start_session(session_config())
        assert session.session_id.startswith('session_')
        assert session.status == SessionStatus.ACTIVE

    def test_restart_after_completion(self, orchestrator):
        first = orchestrator.start_session(session_config())
        orchestrator.end_session()

        second = orchestrator.start_session(session_config(session_id='second'))

        assert second.session_id == 'second'
        assert first.status == SessionStatus.COMPLETED
        assert orchestrator.get_status()['state'] == LifecycleState.ACTIVE.value

    def test_dict_config_uses_defaults(self, orchestrator):
        session = orchestrator.start_session({'activity_type': 'drawing'})
        assert session.user_id == 'user-1'
        assert session.config.analysis_interval_ms == 60000
        assert session.config.activity_type == 'drawing'

    def test_status(self, orchestrator):
        assert orchestrator.get_status()['is_active'] is False

        session = orchestrator.start_session(session_config())
        status = orchestrator.get_status()

        assert status['is_active'] is True
        assert status['current_session'] == session.session_id
        assert status['queue_depths'] == {'interventions': 0, 'optimizations': 0}

    def test_invalid_weights_fail_initialize(self):
        config = dict(QUIET, weights={'emotional': {'frustration_detection': 1.0}})
        orch = WellbeingOrchestrator(config, sink=InMemorySink())
        assert orch.initialize({'user_id': 'user-1'}) is False
        assert not orch.is_initialized


class TestRealtime:
    """Test the per-event fast path."""

    def test_reported_frustration_queues_one_immediate_intervention(self, orchestrator):
        orchestrator.start_session(session_config(realtime_enabled=True))

        analysis = orchestrator.process_event({
            'type': 'interaction',
            'timestamp': time.time(),
            'frustration_level': 0.85,
        })

        interventions = orchestrator.get_queues()['interventions']
        assert analysis is not None
        assert analysis.mode == AnalysisMode.REALTIME
        assert analysis.indicators['frustration'] == pytest.approx(0.85)
        assert len(interventions) == 1
        assert interventions[0].priority == Priority.IMMEDIATE
        assert interventions[0].trigger.analysis_id == analysis.analysis_id

    def test_realtime_disabled_still_buffers(self, orchestrator):
        orchestrator.start_session(session_config(realtime_enabled=False))

        result = orchestrator.process_event({'type': 'click', 'frustration_level': 0.95})

        assert result is None
        assert orchestrator.get_queues()['interventions'] == []
        assert orchestrator.tick() is not None

    def test_event_without_session_is_ignored(self, orchestrator):
        assert orchestrator.process_event({'type': 'click'}) is None

    def test_mark_intervention(self, orchestrator):
        orchestrator.start_session(session_config())
        orchestrator.process_event({'type': 'interaction', 'frustration_level': 0.9})
        item = orchestrator.get_queues()['interventions'][0]

        assert orchestrator.mark_intervention(item.item_id)
        assert not orchestrator.mark_intervention(item.item_id)
        assert orchestrator.get_queues()['interventions'] == []

    def test_queue_snapshot_is_independent(self, orchestrator):
        orchestrator.start_session(session_config())
        orchestrator.process_event({'type': 'interaction', 'frustration_level': 0.9})

        queues = orchestrator.get_queues()
        item = queues['interventions'][0]
        queues['interventions'].clear()

        assert len(orchestrator.get_queues()['interventions']) == 1
        assert orchestrator.mark_intervention(item.item_id)
        assert orchestrator.get_status()['queue_depths']['interventions'] == 0

    def test_subscriber_receives_snapshots(self, orchestrator):
        snapshots = []

        def broken(snapshot):
            raise RuntimeError("render failed")

        orchestrator.subscribe(broken)
        unsubscribe = orchestrator.subscribe(snapshots.append)
        orchestrator.start_session(session_config())
        orchestrator.process_event({'type': 'interaction', 'frustration_level': 0.9})
        unsubscribe()
        orchestrator.end_session()

        assert len(snapshots) == 2
        latest = snapshots[-1]
        assert latest['is_active'] is True
        assert latest['realtime_data'] is not None
        assert len(latest['intervention_queue']) == 1


class TestPeriodicAndReport:
    """Test ticks, trends and the final report."""

    def test_zero_events_final_overall_is_zero(self, orchestrator, sink):
        session = orchestrator.start_session(session_config())

        report = orchestrator.end_session()

        assert report.final_analysis.overall_score == 0.0
        assert report.final_analysis.mode == AnalysisMode.FINAL
        assert report.history == ()
        assert report.session.status == SessionStatus.COMPLETED
        assert report.session.end_time is not None
        assert sink.report(session.session_id) is report

    def test_tick_without_new_events_is_skipped(self, orchestrator):
        orchestrator.start_session(session_config())
        assert orchestrator.tick() is None

    def test_rising_engagement_trend(self, orchestrator, sink):
        session = orchestrator.start_session(session_config())
        start = time.time()

        for i, level in enumerate(np.linspace(0.1, 0.9, 10)):
            orchestrator.process_event({
                'type': 'interaction',
                'timestamp': start + i,
                'engagement_level': float(level),
            })
            assert orchestrator.tick() is not None

        assert orchestrator.get_trends().get('engagement') == Trend.IMPROVING
        assert len(orchestrator.get_history()) == 10
        assert len(sink.analyses(session.session_id)) == 10

        report = orchestrator.end_session()
        assert len(report.history) == 10
        assert report.trends.get('engagement') == Trend.IMPROVING

    def test_tick_after_end_is_noop(self, orchestrator):
        orchestrator.start_session(session_config())
        orchestrator.process_event({'type': 'click'})
        orchestrator.end_session()

        assert orchestrator.tick() is None
        assert orchestrator.get_history() == []

    def test_report_outcomes(self, orchestrator):
        orchestrator.start_session(session_config(activity_type='drawing'))
        start = time.time()
        for i, kind in enumerate(['stroke', 'stroke', 'error', 'retry', 'success', 'task_complete']):
            orchestrator.process_event({
                'type': kind,
                'timestamp': start + i,
                'color': 'blue',
                'accuracy': 0.8,
            })

        report = orchestrator.end_session()

        assert set(report.summaries) == {'emotional', 'neuroplasticity'}
        assert report.summaries['emotional']['total_records'] == 6
        assert 0.0 < report.final_analysis.overall_score <= 1.0
        assert set(report.outcomes) >= {
            'overall_wellbeing', 'learning_effectiveness', 'cognitive_growth',
            'emotional_stability', 'adaptability',
        }
        assert all(0.0 <= v <= 1.0 for v in report.outcomes.values())

    def test_failing_unit_degrades_but_completes(self, sink):
        class BrokenFrustration(FrustrationDetection):
            def _analyze(self, profile, data):
                raise ValueError("bad window")

        units = [
            BrokenFrustration() if u.name == 'frustration_detection' else u
            for u in create_emotional_units()
        ]
        orch = WellbeingOrchestrator(QUIET, sink=sink, emotional_units=units)
        assert orch.initialize({'user_id': 'user-1'})
        orch.start_session(session_config())

        analysis = orch.process_event({'type': 'click'})
        report = orch.end_session()
        orch.close()

        assert 'frustration_detection' in analysis.failed_algorithms
        assert any(i.type == InsightType.DEGRADED.value for i in analysis.insights)
        assert 'frustration_detection' in report.final_analysis.failed_algorithms

    def test_sink_failure_is_absorbed(self):
        class FailingSink(InMemorySink):
            def write_report(self, report):
                raise OSError("disk full")

        orch = WellbeingOrchestrator(QUIET, sink=FailingSink())
        assert orch.initialize({'user_id': 'user-1'})
        orch.start_session(session_config())

        report = orch.end_session()
        orch.close()

        assert report.session.status == SessionStatus.COMPLETED

    def test_timer_thread_ticks(self, sink):
        orch = WellbeingOrchestrator({'orchestrator': {'analysis_interval_ms': 20}}, sink=sink)
        assert orch.initialize({'user_id': 'user-1'})
        orch.start_session(session_config(analysis_interval_ms=20))
        orch.process_event({'type': 'click'})

        deadline = time.time() + 5.0
        while not orch.get_history() and time.time() < deadline:
            time.sleep(0.01)

        report = orch.end_session()
        orch.close()

        assert len(report.history) == 1


class FixedUnit(AlgorithmUnit):
    """Returns a fixed score and confidence for any non-empty window."""

    def __init__(self, name, family, confidence):
        super().__init__()
        self.name = name
        self.family = family
        self.confidence = confidence

    def _analyze(self, profile, data):
        return self._result(0.5, self.confidence)


class SwitchableCollector(NeuroplasticityDataCollector):
    """Neuroplasticity collector that can be made unavailable mid-session."""

    available = True

    def collect(self, event):
        if not self.available:
            raise CollectorUnavailableError(self.name)
        return super().collect(event)


class TestMalformedEvents:
    """Test that bad field values never break the session."""

    @pytest.mark.parametrize("duration", [None, "forever"])
    def test_pause_without_numeric_duration(self, orchestrator, duration):
        first = orchestrator.start_session(session_config())

        analysis = orchestrator.process_event({'type': 'pause', 'duration': duration})
        periodic = orchestrator.tick()
        orchestrator.process_event({'type': 'pause', 'duration': duration})
        report = orchestrator.end_session()

        assert analysis is not None
        assert 'frustration_detection' not in analysis.failed_algorithms
        assert periodic is not None
        assert report.session.status == SessionStatus.COMPLETED
        assert report.summaries['emotional']['total_records'] == 2

        second = orchestrator.start_session(session_config())
        assert second.session_id != first.session_id

    def test_failed_report_still_completes_lifecycle(self, orchestrator, monkeypatch, sink):
        session = orchestrator.start_session(session_config())
        collector = orchestrator.state.collectors[AlgorithmFamily.EMOTIONAL]

        def broken_stop():
            raise RuntimeError("summary failed")

        monkeypatch.setattr(collector, 'stop', broken_stop)

        with pytest.raises(RuntimeError):
            orchestrator.end_session()

        status = orchestrator.get_status()
        assert status['state'] == LifecycleState.COMPLETED.value
        assert status['is_active'] is False
        assert session.status == SessionStatus.COMPLETED
        assert session.end_time is not None
        assert sink.operation_logs(session.session_id)[-1]['status'] == 'error'

        monkeypatch.undo()
        orchestrator.start_session(session_config())
        assert orchestrator.end_session().session.status == SessionStatus.COMPLETED


class TestConcurrency:
    """Test real-time passes, periodic ticks and session end running together."""

    def test_every_event_lands_in_one_periodic_window(self, orchestrator, monkeypatch):
        orchestrator.start_session(session_config())
        collector = orchestrator.state.collectors[AlgorithmFamily.EMOTIONAL]
        drain = collector.drain_pending
        drained = []

        def recording_drain():
            records = drain()
            drained.extend(r['seq'] for r in records)
            return records

        monkeypatch.setattr(collector, 'drain_pending', recording_drain)

        writers, per_writer = 4, 15
        errors = []
        ticks = []
        writing_done = threading.Event()

        def write(offset):
            try:
                for i in range(per_writer):
                    orchestrator.process_event({
                        'type': 'click',
                        'seq': offset * per_writer + i,
                    })
            except Exception as e:
                errors.append(e)

        def tick_until_done():
            try:
                while not writing_done.is_set():
                    analysis = orchestrator.tick()
                    if analysis is not None:
                        ticks.append(analysis)
                    time.sleep(0.001)
            except Exception as e:
                errors.append(e)

        ticker = threading.Thread(target=tick_until_done)
        threads = [threading.Thread(target=write, args=(n,)) for n in range(writers)]
        ticker.start()
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        writing_done.set()
        ticker.join()

        leftover = [r['seq'] for r in drain()]

        assert errors == []
        assert sorted(drained + leftover) == list(range(writers * per_writer))
        assert len(orchestrator.get_history()) == len(ticks)

    def test_end_waits_for_in_flight_realtime_pass(self, sink):
        entered = threading.Event()
        release = threading.Event()

        class SlowFrustration(FrustrationDetection):
            def _analyze(self, profile, data):
                entered.set()
                release.wait(5.0)
                return super()._analyze(profile, data)

        units = [
            SlowFrustration() if u.name == 'frustration_detection' else u
            for u in create_emotional_units()
        ]
        orch = WellbeingOrchestrator(QUIET, sink=sink, emotional_units=units)
        assert orch.initialize({'user_id': 'user-1'})
        orch.start_session(session_config())

        results = {}
        event_thread = threading.Thread(target=lambda: results.setdefault(
            'analysis', orch.process_event({'type': 'interaction', 'frustration_level': 0.9})
        ))
        end_thread = threading.Thread(target=lambda: results.setdefault('report', orch.end_session()))

        event_thread.start()
        assert entered.wait(5.0)
        end_thread.start()
        time.sleep(0.2)

        assert end_thread.is_alive()
        assert orch.process_event({'type': 'click'}) is None

        release.set()
        event_thread.join(5.0)
        end_thread.join(5.0)
        orch.close()

        interventions = orch.get_queues()['interventions']
        assert results['analysis'] is not None
        assert results['report'].session.status == SessionStatus.COMPLETED
        assert len(interventions) == 1
        assert interventions[0].trigger.analysis_id == results['analysis'].analysis_id

    def test_no_tick_after_end_while_timer_waits(self, sink):
        orch = WellbeingOrchestrator({'orchestrator': {'analysis_interval_ms': 50}}, sink=sink)
        assert orch.initialize({'user_id': 'user-1'})
        session = orch.start_session(session_config(analysis_interval_ms=50))
        orch.process_event({'type': 'click'})

        report = orch.end_session()
        time.sleep(0.2)
        orch.close()

        assert not orch.state.is_active
        assert len(sink.analyses(session.session_id)) == len(report.history)
        assert len(orch.get_history()) == len(report.history)


class TestCollectorUnavailable:
    """Test degraded passes when a collector cannot supply data."""

    def test_unavailable_collector_halves_family_confidence(self, sink):
        config = dict(QUIET, weights={
            'emotional': {'steady': 1.0},
            'neuroplasticity': {'growth': 1.0},
        })
        orch = WellbeingOrchestrator(
            config,
            sink=sink,
            emotional_units=[FixedUnit('steady', AlgorithmFamily.EMOTIONAL, 0.8)],
            neuroplasticity_units=[FixedUnit('growth', AlgorithmFamily.NEUROPLASTICITY, 0.6)],
        )
        collector = SwitchableCollector(orch.config)
        orch.state.collectors[AlgorithmFamily.NEUROPLASTICITY] = collector
        assert orch.initialize({'user_id': 'user-1'})
        orch.start_session(session_config())

        baseline = orch.process_event({'type': 'click'})
        collector.available = False
        degraded = orch.process_event({'type': 'click'})
        orch.end_session()
        orch.close()

        # Family weights 0.6 / 0.4 with family confidences 0.8 / 0.6
        assert baseline.confidence_score == pytest.approx(0.72)
        assert degraded.confidence_score == pytest.approx(0.6 * 0.8 + 0.4 * 0.6 * 0.5)
        assert not any(
            i.type == InsightType.COLLECTOR_UNAVAILABLE.value for i in baseline.insights
        )
        assert any(
            i.type == InsightType.COLLECTOR_UNAVAILABLE.value for i in degraded.insights
        )


class TestProfileConfig:
    """Test per-profile configuration overrides."""

    def test_profile_thresholds_reach_every_component(self, orchestrator):
        assert orchestrator.initialize({
            'user_id': 'user-1',
            'config': {'thresholds': {
                'intervention_indicator': 0.95,
                'intervention_risk': 0.9,
            }},
        })

        assert orchestrator.processor.indicator_threshold == 0.95
        assert orchestrator.aggregator.risk_threshold == 0.9
        assert orchestrator.lifecycle.config['thresholds']['intervention_risk'] == 0.9

        orchestrator.start_session(session_config())
        orchestrator.process_event({'type': 'interaction', 'frustration_level': 0.9})

        assert orchestrator.get_queues()['interventions'] == []
