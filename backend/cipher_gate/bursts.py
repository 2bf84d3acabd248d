"""
Flying-code burst sprites.

Consumes BurstRequests and spawns a short-lived cluster of glyph words that
drift outward from random origins. Pure decoration: nothing here feeds back
into the gate engine, and a burst removes itself after a fixed lifetime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from cipher_gate.feedback import BurstRequest

BURST_WORDS = (
    "AUTH", "KEY", "NEON/1.7", "NODE", "GLITCH", "VECTOR", "ECS", "MESH", "BEZIER", "OPENGL",
    "PACKET", "TRACE", "RUNTIME", "SYNC", "Δt", "0xA9", "0xFF", "SIG", "ACCESS", "KERNEL",
)
SPRITE_COLORS = ("rgba(102,247,255,.95)", "rgba(184,107,255,.85)")


@dataclass
class Burst:
    """One burst: sprite attributes stored column-wise."""
    words: List[str]
    left_pct: np.ndarray  # origin x, percent of viewport
    top_pct: np.ndarray  # origin y, percent of viewport
    font_px: np.ndarray
    opacity: np.ndarray
    rotation_deg: np.ndarray
    dx: np.ndarray  # total drift in px
    dy: np.ndarray
    end_scale: np.ndarray
    duration_ms: np.ndarray
    colors: List[str]
    age_ms: float = 0.0

    def __len__(self) -> int:
        return len(self.words)

    def frame(self) -> List[dict]:
        """Sprite positions at the current age, eased like cubic-bezier(.2,.9,.2,1)."""
        t = np.clip(self.age_ms / self.duration_ms, 0.0, 1.0)
        eased = 1.0 - (1.0 - t) ** 3
        scale = 1.0 + (self.end_scale - 1.0) * eased
        alpha = self.opacity * (1.0 - t)
        return [
            {
                "word": self.words[i],
                "left_pct": float(self.left_pct[i]),
                "top_pct": float(self.top_pct[i]),
                "offset_x": float(self.dx[i] * eased[i]),
                "offset_y": float(self.dy[i] * eased[i]),
                "rotation_deg": float(self.rotation_deg[i]),
                "scale": float(scale[i]),
                "opacity": float(alpha[i]),
                "font_px": float(self.font_px[i]),
                "color": self.colors[i],
            }
            for i in range(len(self))
        ]


def sprite_count(intensity: float, u: float) -> int:
    return int(np.floor(10 * intensity + u * 8 * intensity))


class SpriteField:
    def __init__(self, lifetime_ms: float = 1200.0, seed: Optional[int] = None):
        self.lifetime_ms = lifetime_ms
        self.rng = np.random.default_rng(seed)
        self.bursts: List[Burst] = []
        self.disabled = False

    def disable(self) -> None:
        """Stop accepting bursts and drop any in flight (gate is gone)."""
        self.disabled = True
        self.bursts.clear()

    def spawn(self, request: BurstRequest) -> Optional[Burst]:
        if self.disabled or request.intensity <= 0:
            return None
        rng = self.rng
        n = sprite_count(request.intensity, float(rng.random()))
        if n <= 0:
            return None
        burst = Burst(
            words=[BURST_WORDS[i] for i in rng.integers(0, len(BURST_WORDS), n)],
            left_pct=rng.random(n) * 100.0,
            top_pct=40.0 + rng.random(n) * 50.0,
            font_px=10.0 + rng.random(n) * 12.0,
            opacity=0.10 + rng.random(n) * 0.45,
            rotation_deg=-18.0 + rng.random(n) * 36.0,
            dx=-260.0 + rng.random(n) * 520.0,
            dy=-260.0 + rng.random(n) * 420.0,
            end_scale=0.7 + rng.random(n) * 0.6,
            duration_ms=420.0 + rng.random(n) * 520.0,
            colors=[SPRITE_COLORS[int(c)] for c in rng.random(n) >= 0.5],
        )
        self.bursts.append(burst)
        return burst

    def advance(self, elapsed_ms: float) -> int:
        """Age all bursts and drop expired ones. Returns how many were removed."""
        for burst in self.bursts:
            burst.age_ms += max(0.0, elapsed_ms)
        alive = [b for b in self.bursts if b.age_ms < self.lifetime_ms]
        removed = len(self.bursts) - len(alive)
        self.bursts = alive
        return removed

    @property
    def sprite_total(self) -> int:
        return sum(len(b) for b in self.bursts)

    def frame(self) -> List[dict]:
        return [sprite for burst in self.bursts for sprite in burst.frame()]
