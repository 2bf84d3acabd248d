"""
Background renderers: matrix rain and ambient particles.

Both keep their simulation state in numpy arrays and are advanced by elapsed
milliseconds. With reduced motion requested they never animate.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

MATRIX_GLYPHS = list("01▌▐░▒▓<>/\\{}[]()*+-=|:;,.#@$%&")


def device_pixel_ratio(dpr: Optional[float]) -> float:
    return float(max(1.0, min(2.0, dpr or 1.0)))


class MatrixRain:
    def __init__(
        self,
        width: int,
        height: int,
        dpr: Optional[float] = 1.0,
        reduced_motion: bool = False,
        seed: Optional[int] = None,
    ):
        self.rng = np.random.default_rng(seed)
        self.reduced_motion = reduced_motion
        self.resize(width, height, dpr)

    def resize(self, width: int, height: int, dpr: Optional[float] = 1.0) -> None:
        self.dpr = device_pixel_ratio(dpr)
        self.w = int(np.floor(width * self.dpr))
        self.h = int(np.floor(height * self.dpr))
        self.font_size = int(np.floor(16 * self.dpr))
        self.cols = self.w // self.font_size
        self.drops = self.rng.random(self.cols) * self.h

    def glyphs(self) -> List[dict]:
        """Glyphs at the current drop positions, one per column."""
        glyph_idx = self.rng.integers(0, len(MATRIX_GLYPHS), self.cols)
        xs = np.arange(self.cols) * self.font_size
        return [
            {"glyph": MATRIX_GLYPHS[g], "x": float(x), "y": float(y)}
            for g, x, y in zip(glyph_idx, xs, self.drops)
        ]

    def advance(self, elapsed_ms: float) -> int:
        """Move every drop; returns how many columns were drawn this frame."""
        if self.reduced_motion or self.cols == 0:
            return 0
        rng = self.rng
        speed = 0.08 + rng.random(self.cols) * 0.10
        self.drops = self.drops + elapsed_ms * speed * self.font_size

        # Off-screen drops restart above the top edge, a few at a time
        reset = (self.drops > self.h) & (rng.random(self.cols) > 0.975)
        n_reset = int(reset.sum())
        if n_reset:
            self.drops[reset] = -rng.random(n_reset) * self.h * 0.25
        return self.cols


class ParticleField:
    max_particles = 90
    margin = 40.0

    def __init__(
        self,
        width: int,
        height: int,
        dpr: Optional[float] = 1.0,
        reduced_motion: bool = False,
        seed: Optional[int] = None,
    ):
        self.rng = np.random.default_rng(seed)
        self.reduced_motion = reduced_motion
        self.resize(width, height, dpr)

    def resize(self, width: int, height: int, dpr: Optional[float] = 1.0) -> None:
        self.dpr = device_pixel_ratio(dpr)
        self.w = int(np.floor(width * self.dpr))
        self.h = int(np.floor(height * self.dpr))
        n = self.max_particles
        self.x = np.zeros(n)
        self.y = np.zeros(n)
        self.r = np.zeros(n)
        self.vx = np.zeros(n)
        self.vy = np.zeros(n)
        self.a = np.zeros(n)
        self._spawn(np.ones(n, dtype=bool))

    def _spawn(self, mask: np.ndarray) -> None:
        n = int(mask.sum())
        if n == 0:
            return
        rng = self.rng
        self.x[mask] = rng.random(n) * self.w
        self.y[mask] = rng.random(n) * self.h
        self.r[mask] = (0.6 + rng.random(n) * 1.8) * self.dpr
        self.vx[mask] = (-0.08 + rng.random(n) * 0.16) * self.dpr
        self.vy[mask] = (-0.10 + rng.random(n) * 0.20) * self.dpr
        self.a[mask] = 0.12 + rng.random(n) * 0.24

    def advance(self, elapsed_ms: float) -> int:
        """Integrate positions; particles that leave the padded viewport respawn.

        Returns how many particles respawned.
        """
        if self.reduced_motion:
            return 0
        self.x += self.vx * elapsed_ms
        self.y += self.vy * elapsed_ms
        m = self.margin
        out = (self.x < -m) | (self.x > self.w + m) | (self.y < -m) | (self.y > self.h + m)
        self._spawn(out)
        return int(out.sum())

    def snapshot(self) -> List[dict]:
        return [
            {"x": float(x), "y": float(y), "r": float(r), "alpha": float(a)}
            for x, y, r, a in zip(self.x, self.y, self.r, self.a)
        ]


class Backdrop:
    """Both background layers, sized to one viewport."""

    def __init__(
        self,
        width: int = 1280,
        height: int = 720,
        dpr: Optional[float] = 1.0,
        reduced_motion: bool = False,
        seed: Optional[int] = None,
    ):
        self.matrix = MatrixRain(width, height, dpr, reduced_motion, seed)
        self.particles = ParticleField(
            width, height, dpr, reduced_motion, None if seed is None else seed + 1
        )

    def resize(self, width: int, height: int, dpr: Optional[float] = 1.0) -> None:
        self.matrix.resize(width, height, dpr)
        self.particles.resize(width, height, dpr)

    def advance(self, elapsed_ms: float) -> dict:
        glyphs = self.matrix.advance(elapsed_ms)
        respawned = self.particles.advance(elapsed_ms)
        return {"glyphs": glyphs, "respawned": respawned}

    def snapshot(self) -> dict:
        return {
            "matrix": {
                "cols": self.matrix.cols,
                "font_size": self.matrix.font_size,
                "drops": [float(d) for d in self.matrix.drops],
                "glyphs": self.matrix.glyphs(),
            },
            "particles": self.particles.snapshot(),
        }
