"""
Progress scoring for the gate.

Combines delta magnitude, rhythm quality and an anti-spam penalty into a
progress step, and maps progress onto hint bands and one-shot threshold
messages.

Known limitation: the spam penalty is a hard threshold on a single event's
magnitude, not a running-average detector, so many moderate events get full
gain. It is flavor, not an anti-automation boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from cipher_gate.gate_config import GateConfig
from cipher_gate.rhythm import clamp

PROGRESS_MIN = 0.0
PROGRESS_MAX = 100.0

# (exclusive upper bound, message); anything at or above 85 gets FINAL_HINT
HINT_BANDS: Tuple[Tuple[float, str], ...] = (
    (15.0, "Searching for cipher resonance…"),
    (35.0, "Aligning tumbler rings…"),
    (60.0, "Decrypting handshake packets…"),
    (85.0, "Stabilizing access tunnel…"),
)
FINAL_HINT = "Finalizing key imprint…"


@dataclass(frozen=True)
class ThresholdBand:
    lower: float
    upper: float
    kind: str
    message: str

    def contains(self, progress: float) -> bool:
        return self.lower < progress < self.upper


# Narrow open intervals; a single large step can jump clean over one
THRESHOLD_BANDS: Tuple[ThresholdBand, ...] = (
    ThresholdBand(10.0, 12.5, "warn", "Cipher jitter detected. Maintain rhythm."),
    ThresholdBand(32.0, 35.0, "ok", "Handshake locked. Continue alignment."),
    ThresholdBand(58.0, 61.0, "ok", "Key imprint stable. Pushing final phase."),
    ThresholdBand(82.0, 84.0, "warn", "Final ring resisting. Slow down slightly."),
)


@dataclass(frozen=True)
class ProgressStep:
    """Intermediate terms of one scoring step, kept for inspection and recording."""
    mag: float
    rhythm_boost: float
    spam_penalty: float
    gain: float
    decay: float
    previous: float
    progress: float


def hint_for(progress: float) -> str:
    for upper, message in HINT_BANDS:
        if progress < upper:
            return message
    return FINAL_HINT


def compute_step(
    progress: float, delta_y: float, rhythm: float, config: Optional[GateConfig] = None
) -> ProgressStep:
    cfg = config or GateConfig()
    mag = clamp(abs(delta_y) / cfg.mag_divisor, 0.0, cfg.mag_cap)
    rhythm_boost = cfg.boost_base + rhythm * cfg.boost_scale
    spam_penalty = 1.0 if mag <= cfg.spam_threshold else cfg.spam_penalty
    gain = mag * rhythm_boost * spam_penalty * cfg.gain_scale
    decay = cfg.jitter_decay if mag < cfg.jitter_threshold else 0.0
    new_progress = clamp(progress + gain - decay, PROGRESS_MIN, PROGRESS_MAX)
    return ProgressStep(
        mag=mag,
        rhythm_boost=rhythm_boost,
        spam_penalty=spam_penalty,
        gain=gain,
        decay=decay,
        previous=progress,
        progress=new_progress,
    )


@dataclass
class ThresholdTracker:
    """Fires each threshold band at most once per session, on the way up."""
    bands: Tuple[ThresholdBand, ...] = THRESHOLD_BANDS
    fired: Set[int] = field(default_factory=set)

    def crossings(self, previous: float, progress: float) -> List[ThresholdBand]:
        if progress <= previous:
            return []
        hits = []
        for idx, band in enumerate(self.bands):
            if idx in self.fired or not band.contains(progress):
                continue
            self.fired.add(idx)
            hits.append(band)
        return hits
