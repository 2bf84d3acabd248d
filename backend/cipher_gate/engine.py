"""
Gate engine for the cipher gate landing page.

Owns the per-session gate state and turns a stream of InputEvents and elapsed
time ticks into ControllerEffects:
- Rhythm scoring of the input cadence
- Progress scoring with threshold feedback and banded hint text
- Rate-limited burst requests
- One-shot unlock with a delayed reveal

The engine does no I/O and holds no hidden randomness in its scoring path;
the same inputs with the same timestamps always produce the same progress
trajectory. Presentation collaborators consume the returned effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from cipher_gate.feedback import (
    BurstRequest,
    BurstScheduler,
    FeedbackEvent,
    FeedbackLog,
    HudPing,
    LivenessTicker,
)
from cipher_gate.gate_config import GateConfig
from cipher_gate.input_normalizer import InputEvent
from cipher_gate.progress import (
    PROGRESS_MAX,
    ProgressStep,
    ThresholdTracker,
    compute_step,
    hint_for,
)
from cipher_gate.rhythm import RhythmScorer
from cipher_gate.unlock import RevealEffects, UnlockPhase, UnlockTransition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateState:
    progress: float
    unlocked: bool
    last_event_time: float
    rhythm: float
    burst_cooldown: float
    unlocking_visual: bool
    phase: UnlockPhase

    def to_dict(self) -> dict:
        return {
            "progress": self.progress,
            "unlocked": self.unlocked,
            "last_event_time": self.last_event_time,
            "rhythm": self.rhythm,
            "burst_cooldown": self.burst_cooldown,
            "unlocking_visual": self.unlocking_visual,
            "phase": self.phase.value,
        }


@dataclass
class ControllerEffects:
    """Everything a single input or tick changed, for presentation layers."""
    progress: float
    unlocked: bool
    unlocking_visual: bool
    feedback: List[FeedbackEvent] = field(default_factory=list)
    hint: Optional[str] = None
    burst: Optional[BurstRequest] = None
    reveal: Optional[RevealEffects] = None
    hud_ping_ms: Optional[int] = None
    step: Optional[ProgressStep] = None
    ignored: bool = False

    def to_dict(self) -> dict:
        return {
            "progress": self.progress,
            "unlocked": self.unlocked,
            "unlocking_visual": self.unlocking_visual,
            "feedback": [e.to_dict() for e in self.feedback],
            "hint": self.hint,
            "burst": {"intensity": self.burst.intensity} if self.burst else None,
            "reveal": self.reveal.to_dict() if self.reveal else None,
            "hud_ping_ms": self.hud_ping_ms,
            "gain": self.step.gain if self.step else None,
            "ignored": self.ignored,
        }


class GateEngine:
    """Per-session gate controller. Construct one per visitor session."""

    def __init__(self, config: Optional[GateConfig] = None, seed: Optional[int] = None):
        self.config = config or GateConfig()
        cfg = self.config

        self.progress = 0.0
        self.unlocking_visual = False
        self.clock_ms = 0.0

        self.rhythm = RhythmScorer(
            ideal_ms=cfg.ideal_ms,
            miss_window_ms=cfg.miss_window_ms,
            alpha=cfg.rhythm_alpha,
        )
        self.thresholds = ThresholdTracker()
        self.bursts = BurstScheduler(
            intensity_base=cfg.burst_intensity_base,
            intensity_scale=cfg.burst_intensity_scale,
            cooldown_base=cfg.burst_cooldown_base,
            cooldown_scale=cfg.burst_cooldown_scale,
        )
        self.log = FeedbackLog()
        self.liveness = LivenessTicker(interval_ms=cfg.liveness_interval_ms)
        self.hud_ping = HudPing(interval_ms=cfg.hud_ping_interval_ms, seed=seed)
        self.unlock = UnlockTransition(reveal_delay_ms=cfg.reveal_delay_ms)

    @property
    def unlocked(self) -> bool:
        return self.unlock.started

    @property
    def hint(self) -> str:
        return hint_for(self.progress)

    @property
    def state(self) -> GateState:
        return GateState(
            progress=self.progress,
            unlocked=self.unlocked,
            last_event_time=self.rhythm.last_event_time,
            rhythm=self.rhythm.rhythm,
            burst_cooldown=self.bursts.cooldown,
            unlocking_visual=self.unlocking_visual,
            phase=self.unlock.phase,
        )

    def _effects(self, **kwargs) -> ControllerEffects:
        return ControllerEffects(
            progress=self.progress,
            unlocked=self.unlocked,
            unlocking_visual=self.unlocking_visual,
            **kwargs,
        )

    def submit_input(self, event: InputEvent) -> ControllerEffects:
        """Apply one normalized input. Ignored entirely once unlocked."""
        if self.unlocked:
            return self._effects(ignored=True)

        now = float(event.timestamp)
        self.clock_ms = max(self.clock_ms, now)

        dt = self.rhythm.update(now)
        step = compute_step(self.progress, event.delta_y, self.rhythm.rhythm, self.config)
        self.progress = step.progress

        feedback: List[FeedbackEvent] = []
        for band in self.thresholds.crossings(step.previous, self.progress):
            logger.debug("threshold line at progress=%.2f: %s", self.progress, band.message)
            feedback.append(self.log.append(band.kind, band.message, now))

        burst = self.bursts.update(dt, self.rhythm.rhythm)

        if self.progress > self.config.unlocking_visual_at:
            self.unlocking_visual = True

        if self.progress >= PROGRESS_MAX:
            self.progress = PROGRESS_MAX
            feedback.extend(self._begin_unlock(now))

        return self._effects(
            feedback=feedback,
            hint=hint_for(self.progress),
            burst=burst,
            step=step,
        )

    def _begin_unlock(self, now: float) -> List[FeedbackEvent]:
        lines = self.unlock.begin(now, self.log)
        if lines:
            self.unlocking_visual = True
            self.liveness.stop()
        return lines

    def tick(self, elapsed_ms: float) -> ControllerEffects:
        """Advance the session clock: liveness lines, HUD ping and the reveal delay."""
        elapsed_ms = max(0.0, float(elapsed_ms))
        self.clock_ms += elapsed_ms

        feedback: List[FeedbackEvent] = []
        hud_ping_ms = None
        if not self.unlocked:
            feedback = self.liveness.advance(elapsed_ms, self.clock_ms, self.log)
            hud_ping_ms = self.hud_ping.advance(elapsed_ms)

        reveal = self.unlock.advance(elapsed_ms)
        return self._effects(feedback=feedback, reveal=reveal, hud_ping_ms=hud_ping_ms)
