import pytest

from cipher_gate.gate_config import GateConfig
from cipher_gate.progress import (
    FINAL_HINT,
    THRESHOLD_BANDS,
    ThresholdTracker,
    compute_step,
    hint_for,
)
from cipher_gate.rhythm import RhythmScorer


# Rhythm scorer


def test_hit_is_one_at_ideal_and_zero_past_window():
    rs = RhythmScorer()
    assert rs.hit(95.0) == pytest.approx(1.0)
    assert rs.hit(95.0 + 130.0) == pytest.approx(0.5)
    assert rs.hit(95.0 + 260.0) == 0.0
    assert rs.hit(5000.0) == 0.0


def test_first_event_has_cold_start_bias():
    rs = RhythmScorer()
    dt = rs.update(10_000.0)
    assert dt == 10_000.0
    assert rs.rhythm == 0.0
    assert rs.last_event_time == 10_000.0


def test_smoothing_converges_toward_hit():
    rs = RhythmScorer()
    t = 0.0
    for _ in range(40):
        t += 95.0
        rs.update(t)
    assert rs.rhythm == pytest.approx(1.0, abs=1e-6)

    # One badly timed event pulls the average down by alpha
    rs.update(t + 1000.0)
    assert rs.rhythm == pytest.approx(0.65, abs=1e-6)


# Progress controller


def test_compute_step_terms_for_moderate_delta():
    step = compute_step(progress=50.0, delta_y=90.0, rhythm=0.5)
    assert step.mag == pytest.approx(1.5)
    assert step.rhythm_boost == pytest.approx(1.15)
    assert step.spam_penalty == 1.0
    assert step.decay == 0.0
    assert step.progress == pytest.approx(50.0 + 1.5 * 1.15 * 2.2)


def test_compute_step_caps_magnitude_and_penalizes_spikes():
    step = compute_step(progress=0.0, delta_y=-10_000.0, rhythm=0.0)
    assert step.mag == pytest.approx(2.2)
    assert step.spam_penalty == pytest.approx(0.6)


def test_compute_step_penalty_boundary_is_inclusive():
    # 108 / 60 == 1.8 exactly
    assert compute_step(0.0, 108.0, 0.0).spam_penalty == 1.0


def test_compute_step_jitter_decay_and_clamps():
    step = compute_step(progress=0.1, delta_y=5.0, rhythm=1.0)
    assert step.decay == pytest.approx(0.18)
    assert step.progress >= 0.0

    top = compute_step(progress=99.5, delta_y=120.0, rhythm=1.0)
    assert top.progress == 100.0


def test_compute_step_honors_config():
    cfg = GateConfig(gain_scale=1.0, spam_penalty=1.0)
    step = compute_step(0.0, 120.0, 0.0, cfg)
    assert step.gain == pytest.approx(2.0 * 0.7)


@pytest.mark.parametrize(
    "progress,expected",
    [
        (0.0, "Searching for cipher resonance…"),
        (14.99, "Searching for cipher resonance…"),
        (15.0, "Aligning tumbler rings…"),
        (35.0, "Decrypting handshake packets…"),
        (60.0, "Stabilizing access tunnel…"),
        (84.99, "Stabilizing access tunnel…"),
        (85.0, FINAL_HINT),
        (100.0, FINAL_HINT),
    ],
)
def test_hint_bands(progress, expected):
    assert hint_for(progress) == expected


def test_threshold_tracker_fires_on_the_way_up_only_once():
    tracker = ThresholdTracker()
    first = tracker.crossings(9.0, 11.0)
    assert [b.message for b in first] == [THRESHOLD_BANDS[0].message]
    assert tracker.crossings(9.5, 11.0) == []

    # Falling into a band does not fire it
    assert tracker.crossings(40.0, 33.0) == []
    assert [b.kind for b in tracker.crossings(30.0, 33.0)] == ["ok"]


def test_threshold_bands_are_open_intervals():
    tracker = ThresholdTracker()
    assert tracker.crossings(0.0, 10.0) == []
    assert tracker.crossings(0.0, 12.5) == []
    assert len(tracker.crossings(0.0, 83.0)) == 1
