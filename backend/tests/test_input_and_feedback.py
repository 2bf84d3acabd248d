import dataclasses

import pytest

from cipher_gate.feedback import (
    BurstScheduler,
    FeedbackEvent,
    FeedbackKind,
    FeedbackLog,
    HudPing,
    IntervalTimer,
    LivenessTicker,
)
from cipher_gate.input_normalizer import InputEvent, InputNormalizer, KeyInput, WheelInput
from cipher_gate.unlock import UNLOCK_LINES, UnlockPhase, UnlockTransition


# Input normalizer


def test_wheel_delta_passes_through_with_sign():
    norm = InputNormalizer()
    out = norm.normalize(WheelInput(-42.5, 10.0), unlocked=False)
    assert out.event == InputEvent(-42.5, 10.0)
    assert out.suppress_default


@pytest.mark.parametrize(
    "key,delta",
    [("ArrowDown", 80.0), ("PageDown", 80.0), (" ", 80.0), ("ArrowUp", 40.0), ("PageUp", 40.0)],
)
def test_keys_map_to_positive_deltas(key, delta):
    out = InputNormalizer().normalize(KeyInput(key, 5.0), unlocked=False)
    assert out.event.delta_y == delta
    assert out.suppress_default


def test_unhandled_key_is_left_to_host():
    assert InputNormalizer().normalize(KeyInput("a", 5.0), unlocked=False) is None


def test_everything_ignored_once_unlocked():
    norm = InputNormalizer()
    assert norm.normalize(WheelInput(120.0, 1.0), unlocked=True) is None
    assert norm.normalize(KeyInput("ArrowDown", 1.0), unlocked=True) is None


def test_unknown_raw_input_type_raises():
    with pytest.raises(TypeError):
        InputNormalizer().normalize(object(), unlocked=False)


# Feedback log


def test_feedback_log_is_ordered_and_rendered():
    log = FeedbackLog()
    log.append(FeedbackKind.OK, "first", 3_723_000.0)
    log.append("warn", "second", 3_724_000.0)
    log.append(FeedbackKind.ERROR, "third", 0.0)

    assert [e.message for e in log] == ["first", "second", "third"]
    assert log[0].render() == "01:02:03 OK first"
    assert log[1].render() == "01:02:04 WARN second"
    assert log[2].render() == "00:00:00 ERR third"
    assert [e.message for e in log.last(2)] == ["second", "third"]
    assert log.last(0) == ()


def test_feedback_events_are_immutable():
    event = FeedbackEvent(FeedbackKind.OK, "x", 0.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.message = "y"


# Burst scheduler


def test_burst_scheduler_better_rhythm_shortens_cooldown():
    sched = BurstScheduler()
    req = sched.update(dt=10.0, rhythm=1.0)
    assert req.intensity == pytest.approx(1.8)
    assert sched.cooldown == pytest.approx(110.0)

    assert sched.update(dt=100.0, rhythm=1.0) is None
    assert sched.update(dt=10.0, rhythm=0.0).intensity == pytest.approx(0.6)
    assert sched.cooldown == pytest.approx(180.0)


# Timers


def test_interval_timer_accumulates_partial_periods():
    timer = IntervalTimer(900.0)
    assert timer.advance(450.0) == 0
    assert timer.advance(450.0) == 1
    assert timer.advance(1800.0) == 2
    assert timer.advance(-50.0) == 0


def test_interval_timer_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        IntervalTimer(0.0)


def test_liveness_ticker_stops_permanently():
    log = FeedbackLog()
    ticker = LivenessTicker()
    assert len(ticker.advance(900.0, 900.0, log)) == 1
    ticker.stop()
    assert ticker.advance(9000.0, 9900.0, log) == []
    assert len(log) == 1


def test_hud_ping_is_seeded():
    a = HudPing(seed=3)
    b = HudPing(seed=3)
    assert a.advance(100.0) is None
    assert [a.advance(500.0) for _ in range(5)] == [b.advance(500.0) for _ in range(5)]


# Unlock transition


def test_unlock_transition_sequence():
    log = FeedbackLog()
    fsm = UnlockTransition(reveal_delay_ms=650.0)
    assert fsm.phase is UnlockPhase.GATED
    assert fsm.advance(1000.0) is None

    lines = fsm.begin(10.0, log)
    assert [e.message for e in lines] == list(UNLOCK_LINES)
    assert fsm.status_text == "UNLOCKED"
    assert fsm.phase is UnlockPhase.UNLOCKING

    # Re-entry is a no-op
    assert fsm.begin(20.0, log) == []
    assert len(log) == 3

    assert fsm.advance(600.0) is None
    reveal = fsm.advance(60.0)
    assert reveal is not None
    assert reveal.toast_title == "ACCESS GRANTED"
    assert reveal.to_dict()["toast"]["body"] == "Welcome to the portfolio node."
    assert fsm.phase is UnlockPhase.UNLOCKED
    assert fsm.advance(60.0) is None
