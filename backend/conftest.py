"""Pytest fixtures for backend tests.

Provides a fresh GateEngine per test plus a small helper for feeding evenly
spaced wheel inputs, which most engine scenarios are built from.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Optional

import pytest

ROOT = Path(__file__).parent

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cipher_gate.engine import ControllerEffects, GateEngine  # noqa: E402
from cipher_gate.gate_config import GateConfig  # noqa: E402
from cipher_gate.input_normalizer import InputEvent  # noqa: E402


@pytest.fixture
def gate_config() -> GateConfig:
    return GateConfig()


@pytest.fixture
def engine(gate_config) -> GateEngine:
    return GateEngine(config=gate_config, seed=1234)


@pytest.fixture
def feed() -> Callable[..., List[ControllerEffects]]:
    """Return feed(engine, delta_y, count, spacing_ms, start_ms=None).

    The first event lands spacing_ms after start_ms, which defaults to the
    engine's last event time so consecutive feeds continue the same cadence.
    """

    def _feed(
        eng: GateEngine,
        delta_y: float,
        count: int,
        spacing_ms: float,
        start_ms: Optional[float] = None,
    ) -> List[ControllerEffects]:
        out = []
        t = eng.rhythm.last_event_time if start_ms is None else start_ms
        for _ in range(count):
            t += spacing_ms
            out.append(eng.submit_input(InputEvent(delta_y, t)))
        return out

    return _feed
