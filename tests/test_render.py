"""Tests for frame-counted rendering through a frame sink."""
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tweenline.animation import PersistError, Timeline, TimelineConfig


class RecordingSink:
    """FrameSink that remembers every path it was asked to save."""

    def __init__(self):
        self.paths = []

    def persist(self, path: Path) -> None:
        self.paths.append(path)


def _run(timeline, max_ticks=10000):
    ticks = 0
    while timeline.is_rendering and ticks < max_ticks:
        timeline.pre_tick()
        timeline.post_tick()
        ticks += 1
    return ticks


@pytest.fixture
def sink():
    return RecordingSink()


def _timeline(clock, sink, **overrides):
    config = TimelineConfig(duration_ms=1000, frame_rate=10, output_dir="out", **overrides)
    return Timeline(config, clock=clock, frame_sink=sink)


@pytest.mark.parametrize("duration_ms,frame_rate,expected", [
    (1000, 30, 30),
    (1050, 30, 32),
    (2000, 24, 48),
    (10, 30, 1),
])
def test_frame_count_rounding(clock, duration_ms, frame_rate, expected):
    timeline = Timeline(TimelineConfig(duration_ms=duration_ms, frame_rate=frame_rate), clock=clock)
    assert timeline.frame_count == expected


def test_render_persists_exact_frame_count(clock, sink):
    timeline = _timeline(clock, sink)
    loops = []
    finished = []
    timeline.add_loop_end_listener(lambda tl: loops.append(tl.loop_count))
    timeline.add_finished_listener(finished.append)

    assert timeline.render(2)
    assert timeline.total_frames_to_render == 20

    ticks = _run(timeline)

    assert ticks == 20
    assert len(sink.paths) == 20
    assert sink.paths[0] == Path("out") / "0.png"
    assert sink.paths[-1] == Path("out") / "19.png"
    assert timeline.rendered_frame_count == 20
    assert loops == [1, 2]
    assert finished == [timeline]
    assert timeline.is_finished


def test_render_progress_steps_per_frame(clock, sink):
    timeline = _timeline(clock, sink)
    seen = []
    timeline.animate_callable(seen.append, 0, 1, ease=False)
    timeline.render(1)
    _run(timeline)

    assert seen == pytest.approx([i / 9 for i in range(10)])


def test_render_ignores_wall_clock(clock, sink):
    timeline = _timeline(clock, sink)
    timeline.render(1)
    timeline.pre_tick()
    clock.advance(60000)
    timeline.post_tick()
    assert timeline.current_frame_index == 1
    assert timeline.progress == pytest.approx(1 / 9)


def test_render_with_mirror_reverses_without_repeating(clock, sink):
    timeline = Timeline(
        TimelineConfig(duration_ms=100, frame_rate=30, mirror=True), clock=clock, frame_sink=sink,
    )
    assert timeline.frame_count == 3
    seen = []
    timeline.animate_callable(seen.append, 0, 1, ease=False)
    timeline.render(2)
    _run(timeline)

    assert seen == pytest.approx([0.0, 0.5, 1.0, 0.5, 0.0, 0.5])
    assert timeline.loop_count == 2


def test_render_backward(clock, sink):
    timeline = Timeline(
        TimelineConfig(duration_ms=100, frame_rate=30, forward=False), clock=clock, frame_sink=sink,
    )
    seen = []
    timeline.animate_callable(seen.append, 0, 1, ease=False)
    timeline.render(1)
    _run(timeline)
    assert seen == pytest.approx([1.0, 0.5, 0.0])


def test_single_frame_loop(clock, sink):
    timeline = Timeline(TimelineConfig(duration_ms=10), clock=clock, frame_sink=sink)
    loops = []
    timeline.add_loop_end_listener(lambda tl: loops.append(tl.loop_count))
    timeline.render(3)
    _run(timeline)
    assert len(sink.paths) == 3
    assert loops == [1, 2, 3]
    assert timeline.progress == 0.0


def test_index_offset_and_pattern(clock, sink):
    timeline = _timeline(clock, sink, filename_pattern="frame_{:04d}.jpg", index_offset=100)
    assert timeline.output_path() == Path("out") / "frame_0100.jpg"
    timeline.render(1)
    _run(timeline)
    assert sink.paths[0].name == "frame_0100.jpg"
    assert sink.paths[-1].name == "frame_0109.jpg"


def test_render_rejects_bad_loop_count(clock, sink):
    timeline = _timeline(clock, sink)
    assert not timeline.render(0)
    assert not timeline.render(-2)
    assert not timeline.is_rendering


def test_render_while_rendering_is_noop(clock, sink):
    timeline = _timeline(clock, sink)
    assert timeline.render(1)
    timeline.pre_tick()
    timeline.post_tick()
    assert not timeline.render(5)
    assert timeline.total_frames_to_render == 10
    assert timeline.rendered_frame_count == 1


def test_pause_and_loop_rejected_while_rendering(clock, sink):
    timeline = _timeline(clock, sink)
    timeline.render(1)
    assert not timeline.pause()
    timeline.loop(4)
    assert timeline.is_rendering
    assert timeline.loops_to_do == 1


def test_output_setters_rejected_while_rendering(clock, sink):
    timeline = _timeline(clock, sink)
    timeline.render(1)
    assert not timeline.set_output_dir("elsewhere")
    assert not timeline.set_filename_pattern("{}.jpg")
    assert not timeline.set_index_offset(3)
    assert not timeline.set_frame_rate(60)
    assert not timeline.set_frame_sink(RecordingSink())
    assert timeline.config.output_dir == Path("out")


def test_output_setters_allowed_during_playback(clock, sink):
    timeline = _timeline(clock, sink)
    timeline.play()
    assert timeline.set_output_dir("elsewhere")
    assert timeline.set_filename_pattern("{}.jpg")
    assert timeline.set_index_offset(3)
    assert timeline.output_path(7) == Path("elsewhere") / "7.jpg"


def test_persist_failure_is_logged_and_rendering_continues(clock, caplog):
    attempts = []

    def save(path):
        attempts.append(path)
        raise OSError("disk full")

    timeline = Timeline(TimelineConfig(duration_ms=100, frame_rate=30), clock=clock, frame_sink=save)
    timeline.render(1)
    with caplog.at_level(logging.ERROR):
        _run(timeline)

    assert len(attempts) == 3
    assert timeline.is_finished
    assert sum("[RENDER]" in r.getMessage() for r in caplog.records) == 3


def test_callable_sink_wraps_errors(tmp_path):
    from tweenline.animation import CallableFrameSink

    def save(path):
        raise OSError("nope")

    with pytest.raises(PersistError):
        CallableFrameSink(save).persist(tmp_path / "0.png")


def test_exit_handler_called_after_render(clock, sink):
    exit_handler = MagicMock()
    finished = []
    timeline = _timeline(clock, sink, exit_on_render_finish=True)
    timeline.set_exit_handler(exit_handler)
    timeline.add_finished_listener(lambda tl: finished.append(exit_handler.call_count))

    timeline.render(1)
    _run(timeline)

    exit_handler.assert_called_once_with()
    assert finished == [0]


def test_exit_handler_not_called_for_playback(clock, sink):
    exit_handler = MagicMock()
    timeline = Timeline(
        TimelineConfig(duration_ms=100, exit_on_render_finish=True), clock=clock, exit_handler=exit_handler,
    )
    timeline.play()
    clock.advance(100)
    timeline.post_tick()
    timeline.post_tick()
    assert timeline.is_finished
    exit_handler.assert_not_called()


def test_render_without_sink_still_counts_frames(clock, caplog):
    timeline = Timeline(TimelineConfig(duration_ms=100, frame_rate=30), clock=clock)
    with caplog.at_level(logging.WARNING):
        timeline.render(2)
    assert _run(timeline) == 6
    assert any("No frame sink" in r.getMessage() for r in caplog.records)


def test_render_restarts_counters(clock, sink):
    timeline = _timeline(clock, sink)
    timeline.render(1)
    _run(timeline)
    timeline.render(1)
    assert timeline.rendered_frame_count == 0
    assert timeline.current_frame_index == 0
    _run(timeline)
    assert len(sink.paths) == 20
    assert sink.paths[10].name == "0.png"


def test_thirty_fps_two_loops(clock, sink):
    timeline = Timeline(TimelineConfig(duration_ms=1000, frame_rate=30), clock=clock, frame_sink=sink)
    finished = []
    timeline.add_finished_listener(finished.append)
    timeline.render(2)
    assert timeline.frame_count == 30
    assert timeline.total_frames_to_render == 60

    for _ in range(60):
        timeline.post_tick()

    assert finished == [timeline]
    assert timeline.rendered_frame_count == 60
    assert timeline.is_finished


def test_sink_errors_other_than_persist_error_propagate(clock):
    class BrokenSink:
        def persist(self, path):
            raise RuntimeError("sink bug")

    timeline = Timeline(TimelineConfig(duration_ms=100, frame_rate=30), clock=clock, frame_sink=BrokenSink())
    timeline.render(1)
    with pytest.raises(RuntimeError):
        timeline.post_tick()


def test_persist_error_from_sink_is_logged(clock, caplog):
    class FullDisk:
        def persist(self, path):
            raise PersistError(f"cannot write {path}")

    timeline = Timeline(TimelineConfig(duration_ms=100, frame_rate=30), clock=clock, frame_sink=FullDisk())
    timeline.render(1)
    with caplog.at_level(logging.ERROR):
        _run(timeline)
    assert timeline.rendered_frame_count == 3
    assert sum("cannot write" in r.getMessage() for r in caplog.records) == 3
