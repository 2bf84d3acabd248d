"""
Input normalization for the gate.

Converts raw wheel deltas and a small set of keyboard substitutes into
InputEvents for the engine. Keyboard input only ever pushes progress forward:
down-like keys map to a large positive delta, up-like keys to a smaller one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from cipher_gate.gate_config import GateConfig


@dataclass(frozen=True)
class InputEvent:
    """Normalized scroll input, in raw delta units and milliseconds."""
    delta_y: float
    timestamp: float


@dataclass(frozen=True)
class WheelInput:
    delta_y: float
    timestamp: float


@dataclass(frozen=True)
class KeyInput:
    key: str
    timestamp: float


RawInput = Union[WheelInput, KeyInput]


@dataclass(frozen=True)
class NormalizedInput:
    event: InputEvent
    # Host should cancel its default scroll so the page underneath stays put
    suppress_default: bool = True


class InputNormalizer:
    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()

    def key_delta(self, key: str) -> Optional[float]:
        """Return the delta a key stands for, or None if the gate ignores it."""
        if key in self.config.down_keys:
            return self.config.down_key_delta
        if key in self.config.up_keys:
            return self.config.up_key_delta
        return None

    def normalize(self, raw: RawInput, unlocked: bool) -> Optional[NormalizedInput]:
        """
        Normalize a raw input.

        Returns None when the input should be left to the host entirely:
        either the gate is already unlocked or the key is not one we handle.
        """
        if unlocked:
            return None

        if isinstance(raw, WheelInput):
            return NormalizedInput(InputEvent(float(raw.delta_y), float(raw.timestamp)))

        if isinstance(raw, KeyInput):
            delta = self.key_delta(raw.key)
            if delta is None:
                return None
            return NormalizedInput(InputEvent(delta, float(raw.timestamp)))

        raise TypeError(f"unsupported raw input: {type(raw).__name__}")
