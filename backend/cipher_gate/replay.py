"""Replay recorded gate sessions through a fresh engine.

Because the scoring path is deterministic, feeding the recorded inputs and
ticks back in the same order must reproduce the recorded progress trajectory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import json

import numpy as np

from cipher_gate.engine import GateEngine
from cipher_gate.gate_config import GateConfig
from cipher_gate.input_normalizer import InputEvent


def read_recording(path: str | Path) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    meta: Dict[str, Any] = {}
    records = []
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            rec = json.loads(line)
            if rec.get("_meta"):
                meta = rec.get("metadata") or {}
                continue
            records.append(rec)
    return meta, records


def config_from_meta(meta: Dict[str, Any]) -> GateConfig:
    """Rebuild the GateConfig a session was recorded with, or the defaults."""
    raw = meta.get("config")
    if not raw:
        return GateConfig()
    return GateConfig(**{k: tuple(v) if isinstance(v, list) else v for k, v in raw.items()})


@dataclass
class ReplayReport:
    recorded: np.ndarray
    replayed: np.ndarray
    max_abs_error: float
    unlocked: bool
    inputs: int

    @property
    def matches(self) -> bool:
        return self.recorded.shape == self.replayed.shape and self.max_abs_error <= 1e-9


def replay_recording(
    records: List[Dict[str, Any]], config: Optional[GateConfig] = None
) -> ReplayReport:
    engine = GateEngine(config=config)
    recorded = []
    replayed = []
    inputs = 0
    for rec in records:
        if rec["kind"] == "input":
            engine.submit_input(InputEvent(rec["delta_y"], rec["timestamp"]))
            inputs += 1
        elif rec["kind"] == "tick":
            engine.tick(rec["elapsed_ms"])
        else:
            raise ValueError(f"unknown record kind: {rec['kind']!r}")
        recorded.append(rec["state"]["progress"])
        replayed.append(engine.progress)

    rec_arr = np.asarray(recorded, dtype=float)
    rep_arr = np.asarray(replayed, dtype=float)
    err = float(np.max(np.abs(rec_arr - rep_arr))) if rec_arr.size else 0.0
    return ReplayReport(
        recorded=rec_arr,
        replayed=rep_arr,
        max_abs_error=err,
        unlocked=engine.unlocked,
        inputs=inputs,
    )
