"""
Drive a synthetic gate session from the command line.

Usage:
    python simulate.py --cadence-ms 95 --delta 120 --events 60
    python simulate.py --key ArrowDown --cadence-ms 140 --record
"""

import argparse
import logging
import math
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from cipher_gate.flight_recorder import FlightRecorder  # noqa: E402
from cipher_gate.gate_config import load_gate_config  # noqa: E402
from cipher_gate.input_normalizer import KeyInput, WheelInput  # noqa: E402
from cipher_gate.session import GateSession  # noqa: E402

logger = logging.getLogger("simulate")


def positive_float(value: str) -> float:
    v = float(value)
    if not math.isfinite(v) or v <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value!r}")
    return v


def run(args: argparse.Namespace) -> int:
    config = load_gate_config(args.config)
    recorder = FlightRecorder(base_dir=args.record_dir) if args.record else None
    session = GateSession(config=config, recorder=recorder, seed=args.seed)

    t = 0.0
    try:
        for i in range(args.events):
            # Tick the gap first so liveness lines interleave as they would live
            session.tick(args.cadence_ms)
            t += args.cadence_ms
            raw = KeyInput(args.key, t) if args.key else WheelInput(args.delta, t)
            _, effects = session.handle(raw)
            if effects is None:
                logger.info("input %d ignored by host (gate unlocked or key unhandled)", i)
                continue
            print(
                f"[{i:03d}] t={t:8.1f}ms progress={effects.progress:6.2f} "
                f"rhythm={session.engine.rhythm.rhythm:.3f} "
                f"gain={effects.step.gain if effects.step else 0.0:5.2f} "
                f"burst={'yes' if effects.burst else 'no '} {effects.hint or ''}"
            )

        # Let the reveal delay run out
        for _ in range(int(math.ceil(config.reveal_delay_ms / args.cadence_ms)) + 1):
            effects = session.tick(args.cadence_ms)
            if effects.reveal is not None:
                print(f"REVEAL: {effects.reveal.toast_title} - {effects.reveal.toast_body}")
    finally:
        session.close()

    print("\nFeedback log:")
    for line in session.engine.log:
        print("  " + line.render())

    if recorder is not None:
        print(f"\nRecorded run {recorder.run_id} at {recorder.records_path}")
    return 0 if session.engine.unlocked else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate a cipher gate unlock session")
    parser.add_argument("--cadence-ms", type=positive_float, default=95.0, help="Spacing between inputs")
    parser.add_argument("--delta", type=float, default=120.0, help="Wheel delta per input")
    parser.add_argument("--key", type=str, default=None, help="Use a key instead of the wheel (e.g. ArrowDown)")
    parser.add_argument("--events", type=int, default=60, help="Number of inputs to send")
    parser.add_argument("--seed", type=int, default=None, help="Seed for decorative randomness")
    parser.add_argument("--config", type=str, default=None, help="Path to gate_control.json")
    parser.add_argument("--record", action="store_true", help="Write a flight recorder run")
    parser.add_argument("--record-dir", type=str, default="logs/flight_recorder")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
