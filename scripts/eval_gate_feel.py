#!/usr/bin/env python3
"""Summarize how a recorded gate session felt: pace, rhythm and gain."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

import numpy as np

import sys
import os

# Ensure backend root is in path so `cipher_gate` imports work
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BACKEND_ROOT = os.path.join(REPO_ROOT, "backend")
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from cipher_gate.replay import config_from_meta, read_recording, replay_recording  # noqa: E402


def percentile(arr: np.ndarray, q: float) -> float:
    if arr.size == 0:
        return float("nan")
    return float(np.percentile(arr, q))


def summarize(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    inputs = [r for r in records if r["kind"] == "input" and not r.get("ignored")]
    timestamps = np.asarray([r["timestamp"] for r in inputs], dtype=float)
    rhythm = np.asarray([r["state"]["rhythm"] for r in inputs], dtype=float)
    gains = np.asarray([r["gain"] or 0.0 for r in inputs], dtype=float)
    spacing = np.diff(timestamps) if timestamps.size > 1 else np.zeros(0)

    unlock_at = None
    for idx, r in enumerate(inputs):
        if r["state"]["unlocked"]:
            unlock_at = idx + 1
            break

    return {
        "inputs": int(len(inputs)),
        "inputs_to_unlock": unlock_at,
        "spacing_ms_p50": percentile(spacing, 50),
        "spacing_ms_p90": percentile(spacing, 90),
        "rhythm_p10": percentile(rhythm, 10),
        "rhythm_p50": percentile(rhythm, 50),
        "rhythm_final": float(rhythm[-1]) if rhythm.size else None,
        "gain_mean": float(gains.mean()) if gains.size else None,
        "bursts": int(sum(1 for r in inputs if r.get("burst") is not None)),
        "feedback_lines": int(sum(len(r.get("feedback", [])) for r in records)),
        "revealed": any(r.get("revealed") for r in records),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("recording", type=Path, help="Path to records.ndjson")
    parser.add_argument("--replay", action="store_true", help="Also replay and check determinism")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    args = parser.parse_args()

    meta, records = read_recording(args.recording)
    summary = summarize(records)
    if args.replay:
        report = replay_recording(records, config_from_meta(meta))
        summary["replay_matches"] = report.matches
        summary["replay_max_abs_error"] = report.max_abs_error

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        for key, value in summary.items():
            print(f"{key:>22}: {value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
