import json

import pytest

from cipher_gate.engine import GateEngine
from cipher_gate.gate_config import GateConfig, load_gate_config
from cipher_gate.input_normalizer import InputNormalizer, KeyInput


def test_missing_file_yields_defaults(tmp_path):
    cfg = load_gate_config(str(tmp_path / "nope.json"))
    assert cfg == GateConfig()


def test_shipped_config_matches_defaults():
    assert load_gate_config() == GateConfig()


def test_partial_override(tmp_path):
    path = tmp_path / "gate_control.json"
    path.write_text(
        json.dumps(
            {
                "rhythm": {"ideal_ms": "120"},
                "unlock": {"reveal_delay_ms": 100},
                "input": {"down_keys": ["j"], "down_key_delta": 55},
            }
        ),
        encoding="utf-8",
    )
    cfg = load_gate_config(str(path))
    assert cfg.ideal_ms == 120.0
    assert cfg.reveal_delay_ms == 100.0
    assert cfg.rhythm_alpha == 0.35
    assert cfg.down_keys == ("j",)

    out = InputNormalizer(cfg).normalize(KeyInput("j", 1.0), unlocked=False)
    assert out.event.delta_y == 55.0

    eng = GateEngine(config=cfg)
    assert eng.rhythm.ideal_ms == 120.0
    assert eng.unlock.reveal_delay_ms == 100.0


def test_bad_value_raises(tmp_path):
    path = tmp_path / "gate_control.json"
    path.write_text(json.dumps({"progress": {"mag_cap": "lots"}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_gate_config(str(path))


def test_config_is_frozen():
    cfg = GateConfig()
    with pytest.raises(AttributeError):
        cfg.ideal_ms = 1.0
