"""
Flight recorder for gate sessions.
Records newline-delimited JSON (`records.ndjson`): one metadata line, then one
record per processed input or tick with the resulting engine state.
"""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

from cipher_gate.engine import ControllerEffects, GateState

logger = logging.getLogger(__name__)

DEFAULT_BASE_DIR = "logs/flight_recorder"


class FlightRecorder:
    def __init__(
        self,
        run_id: Optional[str] = None,
        base_dir: str = DEFAULT_BASE_DIR,
    ):
        self.run_id = run_id or f"run_{int(time.time() * 1000)}"
        self.base_dir = Path(base_dir)
        self.run_dir = self.base_dir / self.run_id

        os.makedirs(self.run_dir, exist_ok=True)
        self.records_path = self.run_dir / "records.ndjson"
        self._file = open(self.records_path, "a", encoding="utf-8")
        self._t = 0

    def start_run(self, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Write metadata record as first line."""
        meta = metadata or {}
        self._write({"_meta": True, "metadata": meta})

    def record_input(
        self,
        delta_y: float,
        timestamp: float,
        effects: ControllerEffects,
        state: GateState,
    ) -> None:
        self._record("input", {"delta_y": float(delta_y), "timestamp": float(timestamp)}, effects, state)

    def record_tick(self, elapsed_ms: float, effects: ControllerEffects, state: GateState) -> None:
        self._record("tick", {"elapsed_ms": float(elapsed_ms)}, effects, state)

    def _record(
        self, kind: str, payload: Dict[str, Any], effects: ControllerEffects, state: GateState
    ) -> None:
        rec: Dict[str, Any] = {
            "t": self._t,
            "kind": kind,
            **payload,
            "state": state.to_dict(),
            "gain": effects.step.gain if effects.step else None,
            "hint": effects.hint,
            "burst": effects.burst.intensity if effects.burst else None,
            "revealed": effects.reveal is not None,
            "ignored": effects.ignored,
            "feedback": [e.to_dict() for e in effects.feedback],
        }
        self._t += 1
        self._write(rec)

    def _write(self, rec: Dict[str, Any]) -> None:
        try:
            self._file.write(json.dumps(rec) + "\n")
            self._file.flush()
        except (OSError, ValueError) as e:
            # A closed or unwritable recorder must not take the session down
            logger.warning("flight recorder %s write failed: %s", self.run_id, e)

    def close(self) -> None:
        if not self._file.closed:
            self._file.flush()
            self._file.close()
