#!/usr/bin/env python3
"""
Session replay script for the wellbeing orchestrator.

Replays a recorded event log (JSON Lines, one event per line) through a
complete session:
1. Load configuration (YAML merged over built-in defaults)
2. Initialize the orchestrator for the user profile
3. Start a session and feed every event through the real-time path
4. Run a periodic pass whenever the event clock crosses the analysis interval
5. End the session and write the report as JSON

Usage:
    python main.py --events session.jsonl --user child_01 --output results/

Engineering approach:
- Event timestamps drive the periodic passes, so replays are deterministic
- Interventions and optimizations are logged and marked processed as they appear
- Comprehensive logging
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from analysis_core.data_models import SessionConfig, SessionReport
from orchestration import WellbeingOrchestrator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('wellbeing_orchestrator.log'),
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


def read_events(events_path: Path) -> Iterator[Dict]:
    """Yield events from a JSON Lines file, skipping blank and malformed lines."""
    with open(events_path, 'r') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping malformed event on line {line_number}: {e}")


def replay_session(
    events_path: str,
    user_id: str,
    config_path: Optional[str],
    output_dir: str,
    activity_type: str = "general",
    difficulty: str = "medium"
) -> Dict:
    """
    Replay an event log through one orchestrator session.

    Args:
        events_path: JSON Lines event log
        user_id: User the session belongs to
        config_path: Orchestrator YAML config (None = defaults)
        output_dir: Directory for the JSON report

    Returns:
        Dict with report path and queue counts
    """
    orchestrator = WellbeingOrchestrator(config_path)
    if not orchestrator.initialize({'user_id': user_id}):
        raise RuntimeError("Orchestrator initialization failed (see log)")

    interval_ms = orchestrator.config.get('orchestrator', {}).get('analysis_interval_ms', 5000)
    # Ticks are driven from event time, not the wall-clock timer
    session = orchestrator.start_session(SessionConfig(
        user_id=user_id,
        activity_type=activity_type,
        difficulty=difficulty,
        analysis_interval_ms=0,
    ))
    logger.info(f"Replaying {events_path} into session {session.session_id}")

    handled: Dict[str, List[str]] = {'interventions': [], 'optimizations': []}
    next_tick = None
    event_count = 0

    try:
        for event in read_events(Path(events_path)):
            orchestrator.process_event(event)
            event_count += 1

            timestamp = event.get('timestamp')
            if interval_ms > 0 and isinstance(timestamp, (int, float)):
                if next_tick is None:
                    next_tick = timestamp + interval_ms / 1000.0
                elif timestamp >= next_tick:
                    orchestrator.tick()
                    next_tick = timestamp + interval_ms / 1000.0

            _drain_queues(orchestrator, handled)

        orchestrator.tick()
        _drain_queues(orchestrator, handled)
        report = orchestrator.end_session()
    finally:
        orchestrator.close()

    report_path = _write_report(report, Path(output_dir))

    logger.info(f"Replayed {event_count} events")
    logger.info(
        f"Final overall score: {report.final_analysis.overall_score:.2f} "
        f"(confidence {report.final_analysis.confidence_score:.2f})"
    )
    logger.info(f"Interventions: {len(handled['interventions'])}, "
                f"optimizations: {len(handled['optimizations'])}")

    return {
        'report_path': str(report_path),
        'events': event_count,
        'interventions': len(handled['interventions']),
        'optimizations': len(handled['optimizations']),
    }


def _drain_queues(orchestrator: WellbeingOrchestrator, handled: Dict[str, List[str]]):
    queues = orchestrator.get_queues()
    for item in queues['interventions']:
        logger.info(f"[INTERVENTION/{item.priority.value}] {item.reason} -> {item.action}")
        if orchestrator.mark_intervention(item.item_id):
            handled['interventions'].append(item.item_id)
    for item in queues['optimizations']:
        logger.info(f"[OPTIMIZATION/{item.priority.value}] {item.reason} -> {item.action}")
        if orchestrator.mark_optimization(item.item_id):
            handled['optimizations'].append(item.item_id)


def _write_report(report: SessionReport, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    report_path = output_dir / f"{report.session.session_id}_report.json"
    with open(report_path, 'w') as f:
        json.dump(report.to_dict(), f, indent=2, default=str)
    logger.info(f"Report saved: {report_path}")
    return report_path


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Wellbeing Orchestrator - Session Replay',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  python main.py --events session.jsonl --user child_01

  # With custom config and activity
  python main.py --events session.jsonl --user child_01 --config custom.yaml --activity drawing
        """
    )

    parser.add_argument(
        '--events',
        type=str,
        required=True,
        help='Path to JSON Lines event log'
    )

    parser.add_argument(
        '--user',
        type=str,
        required=True,
        help='User identifier'
    )

    parser.add_argument(
        '--config',
        type=str,
        default='configs/orchestrator.yaml',
        help='Path to configuration YAML file (default: configs/orchestrator.yaml)'
    )

    parser.add_argument(
        '--output',
        type=str,
        default='data/outputs',
        help='Output directory for the report (default: data/outputs)'
    )

    parser.add_argument(
        '--activity',
        type=str,
        default='general',
        help='Activity type recorded with the session (default: general)'
    )

    parser.add_argument(
        '--difficulty',
        type=str,
        default='medium',
        choices=['easy', 'medium', 'hard'],
        help='Activity difficulty (default: medium)'
    )

    args = parser.parse_args()

    events_path = Path(args.events)
    if not events_path.exists():
        logger.error(f"Event log not found: {events_path}")
        sys.exit(1)

    config_path = Path(args.config)
    if not config_path.exists():
        logger.error(f"Config file not found: {config_path}")
        sys.exit(1)

    try:
        result = replay_session(
            events_path=str(events_path),
            user_id=args.user,
            config_path=str(config_path),
            output_dir=args.output,
            activity_type=args.activity,
            difficulty=args.difficulty,
        )

        logger.info("=" * 80)
        logger.info("SUCCESS: Replay completed")
        logger.info(f"  Report: {result['report_path']}")
        logger.info("=" * 80)

        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Replay interrupted by user")
        sys.exit(1)

    except Exception as e:
        logger.error(f"ERROR: Replay failed: {type(e).__name__}: {e}")
        logger.exception("Full traceback:")
        sys.exit(1)


if __name__ == '__main__':
    main()
