"""Shared gate control configuration loader."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class GateConfig:
    # rhythm
    ideal_ms: float = 95.0
    miss_window_ms: float = 260.0
    rhythm_alpha: float = 0.35

    # progress
    mag_divisor: float = 60.0
    mag_cap: float = 2.2
    boost_base: float = 0.7
    boost_scale: float = 0.9
    spam_threshold: float = 1.8
    spam_penalty: float = 0.6
    gain_scale: float = 2.2
    jitter_threshold: float = 0.25
    jitter_decay: float = 0.18
    unlocking_visual_at: float = 35.0

    # burst
    burst_intensity_base: float = 0.6
    burst_intensity_scale: float = 1.2
    burst_cooldown_base: float = 180.0
    burst_cooldown_scale: float = 70.0
    sprite_lifetime_ms: float = 1200.0

    # feedback
    liveness_interval_ms: float = 900.0
    hud_ping_interval_ms: float = 500.0
    toast_ttl_ms: float = 1800.0

    # unlock
    reveal_delay_ms: float = 650.0

    # input
    down_key_delta: float = 80.0
    up_key_delta: float = 40.0
    down_keys: Tuple[str, ...] = field(default=("ArrowDown", "PageDown", " "))
    up_keys: Tuple[str, ...] = field(default=("ArrowUp", "PageUp"))


def _default_config() -> GateConfig:
    return GateConfig()


def _coerce(section: Dict[str, Any], key: str, default: float, cast=float):
    if key not in section:
        return default
    try:
        return cast(section[key])
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid gate config value for {key!r}: {section[key]!r}") from e


def load_gate_config(path: str | None = None) -> GateConfig:
    if path is None:
        repo_root = Path(__file__).resolve().parents[2]
        path = str(repo_root / "config" / "gate_control.json")
    cfg = _default_config()
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return cfg

    rhythm = raw.get("rhythm", {})
    progress = raw.get("progress", {})
    burst = raw.get("burst", {})
    feedback = raw.get("feedback", {})
    unlock = raw.get("unlock", {})
    inputs = raw.get("input", {})
    return GateConfig(
        ideal_ms=_coerce(rhythm, "ideal_ms", cfg.ideal_ms),
        miss_window_ms=_coerce(rhythm, "miss_window_ms", cfg.miss_window_ms),
        rhythm_alpha=_coerce(rhythm, "alpha", cfg.rhythm_alpha),
        mag_divisor=_coerce(progress, "mag_divisor", cfg.mag_divisor),
        mag_cap=_coerce(progress, "mag_cap", cfg.mag_cap),
        boost_base=_coerce(progress, "boost_base", cfg.boost_base),
        boost_scale=_coerce(progress, "boost_scale", cfg.boost_scale),
        spam_threshold=_coerce(progress, "spam_threshold", cfg.spam_threshold),
        spam_penalty=_coerce(progress, "spam_penalty", cfg.spam_penalty),
        gain_scale=_coerce(progress, "gain_scale", cfg.gain_scale),
        jitter_threshold=_coerce(progress, "jitter_threshold", cfg.jitter_threshold),
        jitter_decay=_coerce(progress, "jitter_decay", cfg.jitter_decay),
        unlocking_visual_at=_coerce(progress, "unlocking_visual_at", cfg.unlocking_visual_at),
        burst_intensity_base=_coerce(burst, "intensity_base", cfg.burst_intensity_base),
        burst_intensity_scale=_coerce(burst, "intensity_scale", cfg.burst_intensity_scale),
        burst_cooldown_base=_coerce(burst, "cooldown_base", cfg.burst_cooldown_base),
        burst_cooldown_scale=_coerce(burst, "cooldown_scale", cfg.burst_cooldown_scale),
        sprite_lifetime_ms=_coerce(burst, "sprite_lifetime_ms", cfg.sprite_lifetime_ms),
        liveness_interval_ms=_coerce(feedback, "liveness_interval_ms", cfg.liveness_interval_ms),
        hud_ping_interval_ms=_coerce(feedback, "hud_ping_interval_ms", cfg.hud_ping_interval_ms),
        toast_ttl_ms=_coerce(feedback, "toast_ttl_ms", cfg.toast_ttl_ms),
        reveal_delay_ms=_coerce(unlock, "reveal_delay_ms", cfg.reveal_delay_ms),
        down_key_delta=_coerce(inputs, "down_key_delta", cfg.down_key_delta),
        up_key_delta=_coerce(inputs, "up_key_delta", cfg.up_key_delta),
        down_keys=_coerce(inputs, "down_keys", cfg.down_keys, cast=tuple),
        up_keys=_coerce(inputs, "up_keys", cfg.up_keys, cast=tuple),
    )
