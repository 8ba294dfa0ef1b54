"""Tests for Timeline playback: progress, looping, mirroring, pause and setters."""
import logging

import pytest

from tweenline.animation import (
    BindingPolicy, BindingResolutionError, EasingCurve, Timeline, TimelineConfig, TimelineState,
)


@pytest.fixture
def timeline(clock):
    return Timeline(1000, clock=clock)


def _tick(timeline, clock, ms):
    clock.advance(ms)
    timeline.post_tick()
    timeline.pre_tick()


def test_initial_state(timeline):
    assert timeline.state is TimelineState.IDLE
    assert timeline.progress == 0.0
    assert not timeline.is_playing
    assert timeline.frame_count == 30
    assert timeline.loops_to_do == 1


def test_halfway_value(timeline, clock, sketch):
    timeline.animate(sketch, "x", 0, 100, ease=False)
    timeline.play()
    _tick(timeline, clock, 500)
    assert timeline.elapsed_ms == 500
    assert timeline.progress == pytest.approx(0.5)
    assert sketch.x == pytest.approx(50.0)


def test_eased_halfway_value(timeline, clock, sketch):
    timeline.animate(sketch, "x", 0, 100, easing=EasingCurve.QUAD_IN)
    timeline.play()
    _tick(timeline, clock, 500)
    assert sketch.x == pytest.approx(25.0)


def test_progress_stays_in_unit_range(timeline, clock):
    timeline.loop(3)
    for _ in range(200):
        clock.advance(37)
        timeline.post_tick()
        assert 0.0 <= timeline.progress <= 1.0


def test_pre_tick_does_nothing_when_idle(timeline, sketch):
    timeline.animate(sketch, "x", 10, 20)
    timeline.pre_tick()
    assert sketch.x == 0.0


def test_play_once_finishes_and_notifies(timeline, clock, sketch):
    finished = []
    timeline.add_finished_listener(finished.append)
    timeline.animate(sketch, "x", 0, 100, ease=False)
    timeline.play()

    _tick(timeline, clock, 1200)
    assert timeline.progress == 1.0
    assert sketch.x == 100.0
    assert timeline.is_playing

    timeline.post_tick()
    assert timeline.state is TimelineState.FINISHED
    assert finished == [timeline]
    assert timeline.loop_count == 1

    _tick(timeline, clock, 100)
    assert finished == [timeline]


def test_counted_loop_with_mirror(clock):
    timeline = Timeline(TimelineConfig(duration_ms=1000, mirror=True), clock=clock)
    loops = []
    finished = []
    timeline.add_loop_end_listener(lambda tl: loops.append(tl.loop_count))
    timeline.add_finished_listener(finished.append)

    timeline.loop(2)
    _tick(timeline, clock, 1000)
    assert timeline.progress == 1.0

    timeline.post_tick()
    assert loops == [1]
    assert not timeline.is_forward
    assert timeline.progress == 1.0

    _tick(timeline, clock, 250)
    assert timeline.progress == pytest.approx(0.75)

    _tick(timeline, clock, 750)
    assert timeline.progress == 0.0
    timeline.post_tick()

    assert loops == [1, 2]
    assert finished == [timeline]
    assert timeline.is_finished
    assert not timeline.is_looping
    assert timeline.is_forward
    assert timeline.progress == 0.0


def test_loop_without_mirror_restarts_from_zero(timeline, clock):
    timeline.loop(2)
    _tick(timeline, clock, 1000)
    clock.advance(100)
    timeline.post_tick()
    assert timeline.is_forward
    assert timeline.progress == pytest.approx(0.1)


def test_infinite_loop_never_finishes(timeline, clock):
    finished = []
    timeline.add_finished_listener(finished.append)
    timeline.loop()
    assert timeline.loops_to_do == 0
    for _ in range(50):
        clock.advance(600)
        timeline.post_tick()
    assert timeline.is_playing
    assert timeline.loop_count > 20
    assert finished == []


def test_loop_count_never_exceeds_loops_to_do(timeline, clock):
    timeline.loop(3)
    while timeline.is_playing:
        clock.advance(400)
        timeline.post_tick()
        assert timeline.loop_count <= 3
    assert timeline.loop_count == 3


def test_backward_start(clock):
    timeline = Timeline(TimelineConfig(duration_ms=1000, forward=False), clock=clock)
    timeline.play()
    assert timeline.progress == 1.0
    _tick(timeline, clock, 250)
    assert timeline.progress == pytest.approx(0.75)


def test_pause_and_resume(timeline, clock):
    timeline.play()
    _tick(timeline, clock, 300)

    assert timeline.pause()
    assert timeline.is_paused
    clock.advance(5000)
    timeline.post_tick()
    assert timeline.elapsed_ms == 300

    timeline.play()
    _tick(timeline, clock, 100)
    assert timeline.elapsed_ms == 400
    assert timeline.progress == pytest.approx(0.4)


def test_pause_rejected_when_not_playing(timeline, caplog):
    with caplog.at_level(logging.WARNING):
        assert not timeline.pause()
    assert any("[CONFIG]" in r.getMessage() for r in caplog.records)


def test_stop_is_idempotent_and_silent(timeline):
    finished = []
    timeline.add_finished_listener(finished.append)
    timeline.loop(5)
    timeline.stop()
    timeline.stop()
    assert timeline.is_finished
    assert not timeline.is_looping
    assert timeline.loops_to_do == 1
    assert finished == []


def test_play_after_stop_restarts(timeline, clock):
    timeline.play()
    _tick(timeline, clock, 700)
    timeline.stop()
    timeline.play()
    assert timeline.elapsed_ms == 0
    assert timeline.progress == 0.0
    assert timeline.loop_count == 0


def test_setters_rejected_while_playing(timeline, caplog):
    timeline.play()
    with caplog.at_level(logging.WARNING):
        assert not timeline.set_duration_ms(2000)
        assert not timeline.set_loop_mirror(True)
        assert not timeline.set_forward(False)
        assert not timeline.set_frame_rate(60)
    assert timeline.duration_ms == 1000
    assert timeline.config.mirror is False
    assert sum("[CONFIG]" in r.getMessage() for r in caplog.records) == 4

    timeline.pause()
    assert not timeline.set_duration_ms(2000)

    timeline.stop()
    assert timeline.set_duration_ms(2000)
    assert timeline.duration_ms == 2000


def test_setters_validate_values(timeline):
    assert not timeline.set_duration_ms(0)
    assert not timeline.set_frame_rate(-5)
    assert not timeline.set_filename_pattern("frame.png")
    assert timeline.set_duration_seconds(1.5)
    assert timeline.duration_ms == 1500
    assert timeline.set_frame_rate(24)
    assert timeline.frame_count == 36


def test_duration_change_rescales_windows(timeline, sketch):
    timeline.animate(sketch, "x", 0, 1, window_ms=(250, 500))
    prop = timeline.properties[0]
    assert prop.start_progress == pytest.approx(0.25)
    timeline.set_duration_ms(500)
    assert prop.start_progress == pytest.approx(0.5)
    assert prop.end_progress == pytest.approx(1.0)


def test_config_is_a_copy(timeline):
    config = timeline.config
    config.duration_ms = 5
    assert timeline.duration_ms == 1000


def test_animate_is_chainable(timeline, sketch):
    values = [0.0, 0.0]
    result = (
        timeline
        .animate(sketch, "x", 0, 1)
        .animate(values, 1, 0, 1)
        .animate_callable(lambda v: None, 0, 1, name="noop")
    )
    assert result is timeline
    assert [p.name for p in timeline.properties] == ["x", "list[1]", "noop"]


def test_properties_update_in_insertion_order(timeline, clock):
    order = []
    timeline.animate_callable(lambda v: order.append("a"), 0, 1)
    timeline.animate_callable(lambda v: order.append("b"), 0, 1)
    timeline.play()
    timeline.pre_tick()
    assert order == ["a", "b"]


def test_strict_policy_raises(timeline, sketch):
    with pytest.raises(BindingResolutionError):
        timeline.animate(sketch, "missing", 0, 1)
    assert timeline.properties == ()


def test_skip_policy_attaches_invalid_property(clock, sketch):
    timeline = Timeline(TimelineConfig(duration_ms=1000, binding_policy=BindingPolicy.SKIP), clock=clock)
    timeline.animate(sketch, "missing", 0, 1).animate(sketch, "x", 0, 10, ease=False)
    assert timeline.properties[0].invalid

    timeline.play()
    _tick(timeline, clock, 500)
    assert sketch.x == pytest.approx(5.0)


def test_failing_property_does_not_affect_others(timeline, clock, sketch):
    def broken(value):
        raise ValueError("bad value")

    timeline.animate_callable(broken, 0, 1, name="broken")
    timeline.animate(sketch, "x", 0, 10, ease=False)
    timeline.play()
    _tick(timeline, clock, 500)
    _tick(timeline, clock, 100)

    assert timeline.properties[0].invalid
    assert sketch.x == pytest.approx(6.0)


def test_raising_listener_is_disabled(timeline, clock, caplog):
    calls = []

    def bad(tl):
        calls.append("bad")
        raise RuntimeError("listener bug")

    timeline.add_loop_end_listener(bad)
    timeline.add_loop_end_listener(lambda tl: calls.append("good"))
    timeline.loop(3)

    with caplog.at_level(logging.ERROR):
        while timeline.is_playing:
            clock.advance(1000)
            timeline.post_tick()

    assert calls.count("bad") == 1
    assert calls.count("good") == 3
    assert any("[NOTIFY]" in r.getMessage() for r in caplog.records)


def test_remove_listener(timeline, clock):
    finished = []
    listener_id = timeline.add_finished_listener(finished.append)
    assert timeline.remove_listener(listener_id)
    assert not timeline.remove_listener(listener_id)

    timeline.play()
    clock.advance(1000)
    timeline.post_tick()
    timeline.post_tick()
    assert timeline.is_finished
    assert finished == []


def test_listener_must_be_callable(timeline):
    with pytest.raises(ValueError):
        timeline.add_finished_listener("not callable")


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        Timeline(0)
    with pytest.raises(ValueError):
        TimelineConfig(duration_ms=1000, frame_rate=0)


def test_mirror_direction_flips_on_each_boundary(clock):
    timeline = Timeline(TimelineConfig(duration_ms=100, mirror=True), clock=clock)
    directions = []
    timeline.add_loop_end_listener(lambda tl: directions.append((tl.loop_count, tl.is_forward)))
    timeline.loop()
    for _ in range(4):
        clock.advance(100)
        timeline.post_tick()
    assert directions == [(1, False), (2, True)]


def test_repeated_stop_leaves_identical_state(timeline, clock):
    timeline.loop(2)
    _tick(timeline, clock, 300)
    timeline.stop()

    def snapshot():
        return (
            timeline.state, timeline.is_looping, timeline.is_rendering, timeline.loops_to_do,
            timeline.loop_count, timeline.elapsed_ms, timeline.progress, timeline.is_forward,
        )

    first = snapshot()
    timeline.stop()
    timeline.stop()
    assert snapshot() == first


def test_final_mirrored_crossing_restores_direction(clock):
    timeline = Timeline(TimelineConfig(duration_ms=100, mirror=True), clock=clock)
    seen = []
    timeline.add_loop_end_listener(lambda tl: seen.append(tl.is_forward))
    timeline.loop(2)
    for _ in range(4):
        clock.advance(100)
        timeline.post_tick()

    assert timeline.is_finished
    assert timeline.loop_count == 2
    assert timeline.is_forward
    assert timeline.elapsed_ms == 0
    assert seen == [False, True]
