"""
Tests for the session replay script.
"""

import json

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from main import read_events, replay_session


@pytest.fixture
def event_log(tmp_path):
    events = [{'type': 'click', 'timestamp': 1000.0 + i * 0.5} for i in range(20)]
    events[5]['frustration_level'] = 0.9
    path = tmp_path / 'session.jsonl'
    with open(path, 'w') as f:
        for event in events:
            f.write(json.dumps(event) + "\n")
        f.write("not json\n\n")
    return path


class TestReplay:

    def test_read_events_skips_malformed_lines(self, event_log):
        assert len(list(read_events(event_log))) == 20

    def test_replay_writes_report(self, event_log, tmp_path):
        result = replay_session(
            events_path=str(event_log),
            user_id='child_01',
            config_path=None,
            output_dir=str(tmp_path / 'out'),
        )

        assert result['events'] == 20
        assert result['interventions'] >= 1

        with open(result['report_path']) as f:
            report = json.load(f)
        assert report['session']['user_id'] == 'child_01'
        assert report['session']['status'] == 'completed'
        # 10 s of events at a 5 s interval: one timed pass plus the closing pass
        assert len(report['history']) == 2
