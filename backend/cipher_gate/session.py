"""
Gate session wiring.

A GateSession owns one GateEngine and hands its effects to the decorative
collaborators (burst sprites, backdrop, toasts) and the optional flight
recorder. SessionRegistry keeps the live sessions for the HTTP layer.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from typing import Dict, Optional, Tuple

from cipher_gate.backdrop import Backdrop
from cipher_gate.bursts import SpriteField
from cipher_gate.engine import ControllerEffects, GateEngine
from cipher_gate.flight_recorder import FlightRecorder
from cipher_gate.gate_config import GateConfig
from cipher_gate.input_normalizer import InputNormalizer, NormalizedInput, RawInput
from cipher_gate.notifications import NotificationCenter

logger = logging.getLogger(__name__)


class GateSession:
    def __init__(
        self,
        session_id: Optional[str] = None,
        config: Optional[GateConfig] = None,
        recorder: Optional[FlightRecorder] = None,
        seed: Optional[int] = None,
        viewport: Tuple[int, int] = (1280, 720),
        dpr: float = 1.0,
        reduced_motion: bool = False,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.config = config or GateConfig()
        self.engine = GateEngine(config=self.config, seed=seed)
        self.normalizer = InputNormalizer(self.config)
        self.sprites = SpriteField(lifetime_ms=self.config.sprite_lifetime_ms, seed=seed)
        self.backdrop = Backdrop(
            viewport[0], viewport[1], dpr=dpr, reduced_motion=reduced_motion, seed=seed
        )
        self.notifications = NotificationCenter(default_ttl_ms=self.config.toast_ttl_ms)
        self.recorder = recorder
        self.revealed = False

        if self.recorder is not None:
            self.recorder.start_run({"session_id": self.session_id, "config": asdict(self.config)})
        logger.info("gate session %s created", self.session_id)

    def handle(self, raw: RawInput) -> Tuple[Optional[NormalizedInput], Optional[ControllerEffects]]:
        """Normalize and apply a raw input. (None, None) means the host keeps its default."""
        normalized = self.normalizer.normalize(raw, self.engine.unlocked)
        if normalized is None:
            return None, None
        effects = self.engine.submit_input(normalized.event)
        if effects.burst is not None:
            self.sprites.spawn(effects.burst)
        if self.recorder is not None:
            self.recorder.record_input(
                normalized.event.delta_y, normalized.event.timestamp, effects, self.engine.state
            )
        return normalized, effects

    def tick(self, elapsed_ms: float) -> ControllerEffects:
        effects = self.engine.tick(elapsed_ms)
        self.sprites.advance(elapsed_ms)
        self.backdrop.advance(elapsed_ms)
        self.notifications.advance(elapsed_ms)
        if effects.reveal is not None:
            self.revealed = True
            self.sprites.disable()
            self.notifications.push(effects.reveal.toast_title, effects.reveal.toast_body)
        if self.recorder is not None:
            self.recorder.record_tick(elapsed_ms, effects, self.engine.state)
        return effects

    def close(self) -> None:
        if self.recorder is not None:
            self.recorder.close()


class SessionRegistry:
    """Live sessions, oldest first. Creating past max_sessions closes the oldest."""

    def __init__(self, max_sessions: int = 256):
        if max_sessions <= 0:
            raise ValueError("max_sessions must be positive")
        self.max_sessions = max_sessions
        self._sessions: Dict[str, GateSession] = {}

    def create(self, **kwargs) -> GateSession:
        while len(self._sessions) >= self.max_sessions:
            oldest = next(iter(self._sessions))
            logger.info("evicting gate session %s (limit %d)", oldest, self.max_sessions)
            self.close(oldest)
        session = GateSession(**kwargs)
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> GateSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise KeyError(f"unknown gate session: {session_id}") from None

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise KeyError(f"unknown gate session: {session_id}")
        session.close()
        logger.info("gate session %s closed", session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
