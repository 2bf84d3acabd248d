"""One-shot unlock state machine: GATED -> UNLOCKING -> UNLOCKED."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from cipher_gate.feedback import FeedbackEvent, FeedbackKind, FeedbackLog

logger = logging.getLogger(__name__)

UNLOCK_LINES = (
    "Cipher alignment reached threshold.",
    "Decrypting interface layer…",
    "Opening secure viewport…",
)


class UnlockPhase(str, Enum):
    GATED = "gated"
    UNLOCKING = "unlocking"
    UNLOCKED = "unlocked"


@dataclass(frozen=True)
class RevealEffects:
    """Externally visible changes applied when the gate finally opens."""
    gate_visible: bool = False
    main_visible: bool = True
    scroll_enabled: bool = True
    scroll_to_top: bool = True
    toast_title: str = "ACCESS GRANTED"
    toast_body: str = "Welcome to the portfolio node."

    def to_dict(self) -> dict:
        return {
            "gate_visible": self.gate_visible,
            "main_visible": self.main_visible,
            "scroll_enabled": self.scroll_enabled,
            "scroll_to_top": self.scroll_to_top,
            "toast": {"title": self.toast_title, "body": self.toast_body},
        }


class UnlockTransition:
    def __init__(self, reveal_delay_ms: float = 650.0):
        self.reveal_delay_ms = reveal_delay_ms
        self.phase = UnlockPhase.GATED
        self.status_text = "LOCKED"
        self.remaining_ms = 0.0

    @property
    def started(self) -> bool:
        return self.phase is not UnlockPhase.GATED

    def begin(self, now: float, log: FeedbackLog) -> List[FeedbackEvent]:
        """Enter UNLOCKING. Re-entry is a no-op."""
        if self.started:
            return []
        self.phase = UnlockPhase.UNLOCKING
        self.status_text = "UNLOCKED"
        self.remaining_ms = self.reveal_delay_ms
        logger.info("gate unlocking at t=%.1fms", now)
        return [log.append(FeedbackKind.OK, line, now) for line in UNLOCK_LINES]

    def advance(self, elapsed_ms: float) -> Optional[RevealEffects]:
        """Count down the reveal delay; returns the reveal exactly once."""
        if self.phase is not UnlockPhase.UNLOCKING:
            return None
        self.remaining_ms -= max(0.0, elapsed_ms)
        if self.remaining_ms > 0.0:
            return None
        self.remaining_ms = 0.0
        self.phase = UnlockPhase.UNLOCKED
        logger.info("gate revealed")
        return RevealEffects()
