"""
Feedback scheduling for the gate.

Holds the terminal-style feedback log, the rhythm-tied burst cooldown and the
fixed-interval liveness processes (rotating status lines, HUD ping). All
timers are advanced explicitly with elapsed milliseconds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class FeedbackKind(str, Enum):
    OK = "ok"
    WARN = "warn"
    ERROR = "error"

    @property
    def tag(self) -> str:
        return {"ok": "OK", "warn": "WARN", "error": "ERR"}[self.value]


@dataclass(frozen=True)
class FeedbackEvent:
    kind: FeedbackKind
    message: str
    timestamp: float

    def stamp(self) -> str:
        secs = int(self.timestamp // 1000)
        return f"{secs // 3600:02d}:{(secs // 60) % 60:02d}:{secs % 60:02d}"

    def render(self) -> str:
        return f"{self.stamp()} {self.kind.tag} {self.message}"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "timestamp": float(self.timestamp),
        }


class FeedbackLog:
    """Ordered, append-only sequence of FeedbackEvents."""

    def __init__(self):
        self._events: List[FeedbackEvent] = []

    def append(self, kind: FeedbackKind, message: str, timestamp: float) -> FeedbackEvent:
        event = FeedbackEvent(FeedbackKind(kind), message, float(timestamp))
        self._events.append(event)
        return event

    def last(self, n: int) -> Tuple[FeedbackEvent, ...]:
        if n <= 0:
            return ()
        return tuple(self._events[-n:])

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[FeedbackEvent]:
        return iter(tuple(self._events))

    def __getitem__(self, idx):
        return self._events[idx]


@dataclass(frozen=True)
class BurstRequest:
    intensity: float


class BurstScheduler:
    """Rate limits decorative bursts; better rhythm means shorter cooldowns."""

    def __init__(
        self,
        intensity_base: float = 0.6,
        intensity_scale: float = 1.2,
        cooldown_base: float = 180.0,
        cooldown_scale: float = 70.0,
    ):
        self.intensity_base = intensity_base
        self.intensity_scale = intensity_scale
        self.cooldown_base = cooldown_base
        self.cooldown_scale = cooldown_scale

        self.cooldown = 0.0

    def update(self, dt: float, rhythm: float) -> Optional[BurstRequest]:
        self.cooldown -= dt
        if self.cooldown > 0.0:
            return None
        request = BurstRequest(self.intensity_base + rhythm * self.intensity_scale)
        self.cooldown = self.cooldown_base - rhythm * self.cooldown_scale
        logger.debug(
            "burst intensity=%.3f next_cooldown=%.1f", request.intensity, self.cooldown
        )
        return request


LIVENESS_PHRASES: Tuple[Tuple[FeedbackKind, str], ...] = (
    (FeedbackKind.OK, "Establishing secure lane…"),
    (FeedbackKind.OK, "Initializing neon shader bus…"),
    (FeedbackKind.WARN, "Input locked: scroll key required."),
    (FeedbackKind.OK, "Waiting on cipher resonance…"),
)


class IntervalTimer:
    """Fixed-interval timer driven by elapsed time; yields how many periods fired."""

    def __init__(self, interval_ms: float):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.interval_ms = interval_ms
        self._acc = 0.0

    def advance(self, elapsed_ms: float) -> int:
        self._acc += max(0.0, elapsed_ms)
        fired = int(self._acc // self.interval_ms)
        self._acc -= fired * self.interval_ms
        return fired


class LivenessTicker:
    """Appends rotating status lines at a steady cadence until stopped."""

    def __init__(
        self,
        interval_ms: float = 900.0,
        phrases: Sequence[Tuple[FeedbackKind, str]] = LIVENESS_PHRASES,
    ):
        self.timer = IntervalTimer(interval_ms)
        self.phrases = tuple(phrases)
        self.index = 0
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True

    def advance(self, elapsed_ms: float, now: float, log: FeedbackLog) -> List[FeedbackEvent]:
        if self.stopped:
            return []
        emitted = []
        for _ in range(self.timer.advance(elapsed_ms)):
            kind, message = self.phrases[self.index % len(self.phrases)]
            self.index += 1
            emitted.append(log.append(kind, message, now))
        return emitted


class HudPing:
    """Decorative latency readout refreshed on a fixed interval while gated."""

    def __init__(self, interval_ms: float = 500.0, seed: Optional[int] = None):
        self.timer = IntervalTimer(interval_ms)
        self.rng = np.random.default_rng(seed)
        self.value_ms: Optional[int] = None

    def advance(self, elapsed_ms: float) -> Optional[int]:
        if self.timer.advance(elapsed_ms) > 0:
            self.value_ms = int(8 + self.rng.integers(0, 24))
        return self.value_ms
