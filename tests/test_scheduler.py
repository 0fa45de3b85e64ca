import math

import pytest

from capability import CapabilityProfile
from scheduler import Scheduler
from session import AGGRESSIVE, CLASSIC, SessionState, pointer_moved


def make_profile(target_fps):
    return CapabilityProfile(
        tier="test",
        complexity=1.0,
        target_fps=target_fps,
        pixel_ratio=1.0,
        max_particles=10,
        max_shapes=10,
    )


def run_callbacks(scheduler, state, timestamps, render=None):
    accepted = []
    for now in timestamps:
        state, ok = scheduler.step(state, now, render)
        accepted.append(ok)
    return state, accepted


def test_thirty_fps_on_sixty_hz_callbacks():
    scheduler = Scheduler(make_profile(30), CLASSIC, 5)
    _, accepted = run_callbacks(scheduler, SessionState(), [16, 32, 48, 64, 80])
    assert accepted == [False, False, True, False, True]


def test_remainder_carries_forward():
    scheduler = Scheduler(make_profile(30), CLASSIC, 5)
    accepted, state = scheduler.throttle(SessionState(), 48)
    assert accepted
    assert state.last_accepted_ms == pytest.approx(1000.0 / 30)


def test_no_long_run_drift():
    scheduler = Scheduler(make_profile(30), CLASSIC, 5)
    timestamps = [16 * (i + 1) for i in range(999)]
    state, accepted = run_callbacks(scheduler, SessionState(), timestamps)
    expected = timestamps[-1] / scheduler.interval
    assert abs(sum(accepted) - expected) <= 1
    assert state.frame_count == sum(accepted)


def test_full_rate_when_callbacks_match_target():
    scheduler = Scheduler(make_profile(60), CLASSIC, 5)
    # A hair past each interval so float rounding never lands just short.
    timestamps = [(i + 1) * (1000.0 / 60) + 0.01 for i in range(120)]
    _, accepted = run_callbacks(scheduler, SessionState(), timestamps)
    assert all(accepted)


def test_long_stall_renders_one_frame_not_a_burst():
    scheduler = Scheduler(make_profile(30), CLASSIC, 5)
    state, accepted = run_callbacks(scheduler, SessionState(), [510, 520])
    assert accepted == [True, False]
    assert state.frame_count == 1


def test_render_only_on_accepted_frames():
    scheduler = Scheduler(make_profile(45), CLASSIC, 5)
    rendered = []
    timestamps = [16 * (i + 1) for i in range(300)]
    _, accepted = run_callbacks(scheduler, SessionState(), timestamps, rendered.append)
    assert len(rendered) == sum(accepted)
    assert len(rendered) < len(timestamps)


def test_no_frame_before_a_full_interval():
    scheduler = Scheduler(make_profile(30), CLASSIC, 5)
    state = SessionState()
    previous_marker = state.last_accepted_ms
    for now in range(1, 2000, 7):
        state, ok = scheduler.step(state, now)
        if ok:
            assert now - previous_marker >= scheduler.interval
            previous_marker = state.last_accepted_ms


def test_clock_advances_by_fixed_step_regardless_of_delta():
    scheduler = Scheduler(make_profile(60), CLASSIC, 5)
    state, _ = scheduler.step(SessionState(), 20)
    assert state.clock == pytest.approx(CLASSIC.clock_step)
    state, _ = scheduler.step(state, 2000)
    assert state.clock == pytest.approx(2 * CLASSIC.clock_step)


def test_clock_unchanged_on_skipped_callback():
    scheduler = Scheduler(make_profile(30), CLASSIC, 5)
    state, ok = scheduler.step(SessionState(), 10)
    assert not ok
    assert state.clock == 0.0
    assert state.frame_count == 0


def test_clock_is_monotonic():
    scheduler = Scheduler(make_profile(45), AGGRESSIVE, 5)
    state = SessionState()
    last = state.clock
    for i in range(500):
        state, _ = scheduler.step(state, i * 16)
        assert state.clock >= last
        last = state.clock


def test_observed_fps_refreshes_every_sixty_frames():
    scheduler = Scheduler(make_profile(60), CLASSIC, 5)
    interval = 1000.0 / 60
    state, _ = run_callbacks(scheduler, SessionState(), [(i + 1) * interval + 0.01 for i in range(59)])
    assert state.observed_fps == 0.0
    state, _ = scheduler.step(state, 60 * interval + 0.01)
    assert state.frame_count == 60
    assert state.observed_fps == pytest.approx(60.0, rel=1e-2)


def test_untouched_pointer_follows_auto_rotate_path():
    scheduler = Scheduler(make_profile(60), CLASSIC, 5)
    state, _ = run_callbacks(scheduler, SessionState(), [(i + 1) * 20 for i in range(37)])
    t = state.clock
    assert state.pointer.x == pytest.approx(0.5 + 0.3 * math.sin(0.3 * t))
    assert state.pointer.y == pytest.approx(0.5 + 0.3 * math.cos(0.2 * t))


def test_recent_interaction_pauses_auto_rotate():
    scheduler = Scheduler(make_profile(60), CLASSIC, 5, auto_rotate_idle=3.0)
    state = pointer_moved(SessionState(), 0.9, 0.1)
    state, _ = run_callbacks(scheduler, state, [(i + 1) * 20 for i in range(10)])
    assert (state.pointer.x, state.pointer.y) == (0.9, 0.1)


def test_auto_rotate_resumes_after_idle():
    scheduler = Scheduler(make_profile(60), CLASSIC, 5, auto_rotate_idle=0.1)
    state = pointer_moved(SessionState(), 0.9, 0.1)
    # 0.02 per frame: after 10 frames the last move is 0.2 clock units old.
    state, _ = run_callbacks(scheduler, state, [(i + 1) * 20 for i in range(10)])
    assert state.pointer.x == pytest.approx(0.5 + 0.3 * math.sin(0.3 * state.clock))


def test_aggressive_auto_cycle():
    scheduler = Scheduler(make_profile(60), AGGRESSIVE, 5, auto_rotate_idle=3.0)
    # 260 frames at 0.04 per frame crosses clock 10 exactly once.
    state, _ = run_callbacks(scheduler, SessionState(), [(i + 1) * 20 for i in range(260)])
    assert state.frame_count == 260
    assert state.scene_index == 1


def test_aggressive_idle_revert():
    scheduler = Scheduler(make_profile(60), AGGRESSIVE, 5)
    state = pointer_moved(SessionState(), 0.3, 0.3)
    # 0.3 clock units is 7.5 frames; after 10 frames the revert has fired.
    state, _ = run_callbacks(scheduler, state, [(i + 1) * 20 for i in range(10)])
    assert state.scene_index == 1
    assert not state.interacting


def test_scene_index_stays_in_range_under_auto_changes():
    scheduler = Scheduler(make_profile(60), AGGRESSIVE, 5)
    state = SessionState()
    for i in range(3000):
        if i % 50 == 0:
            state = pointer_moved(state, 0.5, 0.5)
        state, _ = scheduler.step(state, (i + 1) * 20)
        assert 0 <= state.scene_index < 5
