"""Cadence scoring for gate input.

RhythmScorer rewards evenly paced input over bursty or erratic input. Each
event is scored by how close its spacing from the previous event is to an
ideal interval, and the score is folded into an exponential moving average.

The class is intentionally small and pure-Python to ease unit testing.
"""

from __future__ import annotations

from dataclasses import dataclass


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


@dataclass
class RhythmScorer:
    rhythm: float = 0.0
    # First event measures from 0, so it starts with a near-zero hit
    last_event_time: float = 0.0

    # Tunables
    ideal_ms: float = 95.0
    miss_window_ms: float = 260.0
    alpha: float = 0.35

    def hit(self, dt: float) -> float:
        """Score a single spacing: 1 when exact, 0 when off by miss_window_ms or more."""
        miss = abs(dt - self.ideal_ms)
        return clamp(1.0 - miss / self.miss_window_ms, 0.0, 1.0)

    def update(self, now: float) -> float:
        """Fold the event at `now` into the smoothed rhythm and return the elapsed dt."""
        dt = now - self.last_event_time
        self.last_event_time = now

        h = self.hit(dt)
        self.rhythm = self.rhythm * (1.0 - self.alpha) + h * self.alpha
        return dt
