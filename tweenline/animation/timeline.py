"""
Timeline: the playback state machine behind every animated property.

The host owns the frame loop and calls, once per frame and in this order:

    timeline.pre_tick()    # before the host updates/draws: apply progress
    ...host frame...
    timeline.post_tick()   # after: advance the clock, compute next progress

pre_tick() always applies the progress computed by the previous post_tick(),
so every property and the host's own drawing see the same progress value
for the whole frame.

Two progress models share one ``progress`` signal:
- playback: wall-clock milliseconds accumulated between ticks
- render: a frame counter advanced by exactly one per tick, with every
  frame persisted through the host's FrameSink
"""
from __future__ import annotations

import itertools
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from tweenline.animation.bindings import CallableBinding, Slot, TargetBinding, resolve_binding
from tweenline.animation.easing import EasingSelector
from tweenline.animation.errors import (
    BindingResolutionError, ConfigurationRejected, NotificationHandlerError, PersistError,
)
from tweenline.animation.maths import constrain, round_half_up
from tweenline.animation.output import (
    CallableFrameSink, FrameSink, PathLike, build_output_path, validate_filename_pattern,
)
from tweenline.animation.property import AnimatedProperty
from tweenline.animation.types import (
    BindingPolicy, EasingCurve, NumericKind, TimelineConfig, TimelineState,
)
from tweenline.logging.logger import get_logger, is_verbose_logging
from tweenline.logging.tags import TAG_BINDING, TAG_CONFIG, TAG_NOTIFY, TAG_RENDER, TAG_TIMELINE

logger = get_logger(__name__)

TimelineListener = Callable[["Timeline"], Any]


def _monotonic_ms() -> int:
    return int(time.perf_counter() * 1000)


class Timeline:
    """
    A fixed-length timeline driving an ordered list of AnimatedProperty.

    Args:
        config: Loop duration in milliseconds, or a full TimelineConfig
        clock: Callable returning monotonic milliseconds (wall clock by default)
        frame_sink: Where render mode persists frames
        exit_handler: Called when a render finishes with exit_on_render_finish set
    """

    def __init__(self, config: Union[int, TimelineConfig], *,
                 clock: Optional[Callable[[], float]] = None,
                 frame_sink: Optional[Union[FrameSink, Callable[[Path], Any]]] = None,
                 exit_handler: Optional[Callable[[], Any]] = None):
        if isinstance(config, TimelineConfig):
            self._config = replace(config)
        else:
            self._config = TimelineConfig(duration_ms=config)

        self._clock = clock or _monotonic_ms
        self._frame_sink: Optional[FrameSink] = self._as_frame_sink(frame_sink)
        self._exit_handler = exit_handler

        self._properties: List[AnimatedProperty] = []
        self._finished_listeners: Dict[int, TimelineListener] = {}
        self._loop_end_listeners: Dict[int, TimelineListener] = {}
        self._listener_ids = itertools.count(1)

        self.state = TimelineState.IDLE
        self._looping = False
        self._rendering = False
        self._forward = self._config.forward

        self._loops_to_do = 1
        self._loop_count = 0

        self._elapsed_ms: float = 0
        self._last_tick_ms: float = 0

        self._frame_count = self._compute_frame_count()
        self._current_frame = 0
        self._rendered_frames = 0
        self._total_frames = 0

        self._progress = 0.0 if self._forward else 1.0

        logger.debug("%s Timeline created (duration=%dms)", TAG_TIMELINE, self._config.duration_ms)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> TimelineConfig:
        """Copy of the current configuration."""
        return replace(self._config)

    @property
    def duration_ms(self) -> int:
        return self._config.duration_ms

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def is_playing(self) -> bool:
        return self.state is TimelineState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.state is TimelineState.PAUSED

    @property
    def is_finished(self) -> bool:
        return self.state is TimelineState.FINISHED

    @property
    def is_looping(self) -> bool:
        return self._looping

    @property
    def is_rendering(self) -> bool:
        return self._rendering

    @property
    def is_forward(self) -> bool:
        """Current playback direction (flips every loop when mirroring)."""
        return self._forward

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed_ms

    @property
    def loop_count(self) -> int:
        return self._loop_count

    @property
    def loops_to_do(self) -> int:
        return self._loops_to_do

    @property
    def frame_count(self) -> int:
        """Frames per loop at the configured output frame rate."""
        return self._frame_count

    @property
    def current_frame_index(self) -> int:
        return self._current_frame

    @property
    def rendered_frame_count(self) -> int:
        return self._rendered_frames

    @property
    def total_frames_to_render(self) -> int:
        return self._total_frames

    @property
    def properties(self) -> Tuple[AnimatedProperty, ...]:
        return tuple(self._properties)

    # ------------------------------------------------------------------
    # Playback control
    # ------------------------------------------------------------------

    def play(self) -> None:
        """Start playback, or resume it when paused."""
        if self.state is TimelineState.PLAYING:
            return

        if self.state is TimelineState.PAUSED:
            # Resume: re-anchor the wall clock, keep all counters
            self._last_tick_ms = self._clock()
            self.state = TimelineState.PLAYING
            logger.debug("%s Resumed at %.0fms", TAG_TIMELINE, self._elapsed_ms)
            return

        self._prepare()
        self.state = TimelineState.PLAYING
        logger.info(
            "%s Playing (duration=%dms, looping=%s, mirror=%s, forward=%s)",
            TAG_TIMELINE, self._config.duration_ms, self._looping,
            self._config.mirror, self._forward,
        )

    def loop(self, loops: int = 0) -> None:
        """Play ``loops`` times in a row; 0 loops forever."""
        if self._rendering:
            self._reject("loop", "rendering in progress")
            return
        self._looping = True
        self._loops_to_do = max(int(loops), 0)
        self._loop_count = 0
        self.play()

    def render(self, loops: int = 1) -> bool:
        """
        Render ``loops`` loops frame by frame through the frame sink.

        Returns:
            True if rendering started, False if already rendering or rejected
        """
        if self._rendering:
            return False
        if int(loops) <= 0:
            return self._reject("render", f"loop count must be positive, got {loops}")

        self.stop()
        self._loops_to_do = int(loops)
        self._frame_count = self._compute_frame_count()
        self._total_frames = self._loops_to_do * self._frame_count
        self._rendering = True
        if self._frame_sink is None:
            logger.warning("%s No frame sink set; frames will not be saved", TAG_RENDER)
        self.play()
        logger.info(
            "%s Rendering started: %d frames (%d loops x %d frames) to %s",
            TAG_RENDER, self._total_frames, self._loops_to_do, self._frame_count,
            self._config.output_dir,
        )
        return True

    def pause(self) -> bool:
        """Freeze playback; play() resumes without resetting counters."""
        if self.state is not TimelineState.PLAYING:
            return self._reject("pause", "timeline is not playing")
        if self._rendering:
            return self._reject("pause", "rendering cannot be paused; stop it instead")
        self.state = TimelineState.PAUSED
        logger.debug("%s Paused at %.0fms", TAG_TIMELINE, self._elapsed_ms)
        return True

    def stop(self) -> None:
        """Stop playback. Idempotent; never fires the finished notification."""
        self.state = TimelineState.FINISHED
        self._looping = False
        self._rendering = False
        self._loops_to_do = 1
        logger.debug("%s Stopped", TAG_TIMELINE)

    def _prepare(self) -> None:
        """Reset run-scoped counters before a fresh start."""
        self._rendered_frames = 0
        self._loop_count = 0
        self._elapsed_ms = 0
        self._last_tick_ms = self._clock()
        self._forward = self._config.forward
        if self._forward:
            self._current_frame = 0
            self._progress = 0.0
        else:
            self._current_frame = self._frame_count - 1
            self._progress = 1.0

    def _finish(self) -> None:
        """Natural completion: stop, notify, and honour exit_on_render_finish."""
        was_rendering = self._rendering
        self.stop()
        if was_rendering:
            logger.info("%s Rendering done (%d frames)", TAG_RENDER, self._rendered_frames)
        else:
            logger.info("%s Finished after %d loop(s)", TAG_TIMELINE, self._loop_count)
        self._notify(self._finished_listeners, "finished")
        if was_rendering and self._config.exit_on_render_finish:
            self._request_exit()

    def _request_exit(self) -> None:
        if self._exit_handler is None:
            logger.warning("%s exit_on_render_finish is set but no exit handler is installed", TAG_RENDER)
            return
        logger.info("%s Requesting host exit", TAG_RENDER)
        try:
            self._exit_handler()
        except Exception as e:
            logger.error("%s Exit handler failed: %s", TAG_RENDER, e, exc_info=True)

    # ------------------------------------------------------------------
    # Per-tick contract
    # ------------------------------------------------------------------

    def pre_tick(self) -> None:
        """Push the current progress into every property (host frame start)."""
        if self.state is not TimelineState.PLAYING:
            return
        progress = self._progress
        for prop in self._properties:
            prop.update(progress)

    def post_tick(self) -> None:
        """Advance the clock or frame counter and compute the next progress."""
        if self.state is not TimelineState.PLAYING:
            return
        if self._rendering:
            self._advance_render()
        else:
            self._advance_playback()

    def _advance_playback(self) -> None:
        duration = self._config.duration_ms
        now = self._clock()

        if self._elapsed_ms >= duration:
            self._loop_count += 1
            if self._looping:
                self._elapsed_ms = 0
                if self._config.mirror:
                    self._forward = not self._forward
                self._notify(self._loop_end_listeners, "loop_end")
            if not self._looping or (self._loops_to_do != 0 and self._loop_count >= self._loops_to_do):
                # Progress stays at the boundary value of the last loop
                self._finish()
                return

        self._elapsed_ms = constrain(self._elapsed_ms + (now - self._last_tick_ms), 0, duration)
        self._last_tick_ms = now

        if self._forward:
            self._progress = self._elapsed_ms / duration
        else:
            self._progress = 1.0 - self._elapsed_ms / duration

    def _advance_render(self) -> None:
        """Save the current frame, then step the frame index.

        The loop boundary is checked on the frame just saved, so every loop
        covers frames 0..frame_count-1; a mirrored loop reverses right away
        instead of saving the boundary frame twice.
        """
        self._persist_frame(self._config.index_offset + self._rendered_frames)
        self._rendered_frames += 1

        last = self._frame_count - 1
        at_boundary = self._current_frame == (last if self._forward else 0)
        if at_boundary:
            self._loop_count += 1
            if self._config.mirror and last > 0:
                # Reverse and step off the boundary so it is not saved twice
                self._forward = not self._forward
                self._current_frame += 1 if self._forward else -1
            else:
                self._current_frame = 0 if self._forward else last
            self._notify(self._loop_end_listeners, "loop_end")
        else:
            self._current_frame += 1 if self._forward else -1

        self._progress = self._frame_progress()

        if is_verbose_logging():
            logger.debug(
                "%s rendering %d%%", TAG_RENDER,
                (100 * self._rendered_frames) // max(1, self._total_frames),
            )

        if self._rendered_frames >= self._total_frames:
            self._finish()

    def _frame_progress(self) -> float:
        last = self._frame_count - 1
        if last <= 0:
            # Single-frame loop: hold the starting edge
            return 0.0 if self._config.forward else 1.0
        return self._current_frame / last

    def _persist_frame(self, index: int) -> None:
        if self._frame_sink is None:
            return
        path = self.output_path(index)
        try:
            self._frame_sink.persist(path)
        except PersistError as e:
            logger.error("%s Saving frame %s failed: %s", TAG_RENDER, path, e)

    def _compute_frame_count(self) -> int:
        frames = round_half_up(self._config.frame_rate * self._config.duration_ms / 1000.0)
        return max(1, frames)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def add_property(self, prop: AnimatedProperty) -> AnimatedProperty:
        """Attach a property; update order is insertion order."""
        prop.update_progress_bounds(self._config.duration_ms)
        self._properties.append(prop)
        return prop

    def animate_binding(self, binding: TargetBinding, start: float, end: float, *,
                        window_ms: Optional[Tuple[int, int]] = None,
                        easing: EasingSelector = EasingCurve.LINEAR,
                        ease: bool = True) -> 'Timeline':
        """Animate an already resolved binding (e.g. a QtPropertyBinding). Returns self."""
        self.add_property(AnimatedProperty(
            binding, start, end, window_ms=window_ms, easing=easing, easing_enabled=ease,
        ))
        return self

    def animate(self, target: Any, slot: Slot, start: float, end: float, *,
                window_ms: Optional[Tuple[int, int]] = None,
                easing: EasingSelector = EasingCurve.LINEAR,
                ease: bool = True,
                kind: Optional[NumericKind] = None) -> 'Timeline':
        """
        Animate an attribute (``slot`` is a name) or a sequence item (``slot``
        is an index) from ``start`` to ``end``.

        Returns self so calls can be chained. Under BindingPolicy.STRICT an
        unresolvable slot raises BindingResolutionError.
        """
        try:
            binding = resolve_binding(target, slot, kind)
        except BindingResolutionError as e:
            self._binding_failed(f"{type(target).__name__}:{slot}", e, start, end)
            return self
        return self.animate_binding(binding, start, end, window_ms=window_ms, easing=easing, ease=ease)

    def animate_callable(self, setter: Callable[[Union[int, float]], Any],
                         start: float, end: float, *,
                         window_ms: Optional[Tuple[int, int]] = None,
                         easing: EasingSelector = EasingCurve.LINEAR,
                         ease: bool = True,
                         kind: NumericKind = NumericKind.DOUBLE,
                         name: Optional[str] = None) -> 'Timeline':
        """Animate through a setter function. Returns self."""
        try:
            binding = CallableBinding(setter, kind, name)
        except BindingResolutionError as e:
            self._binding_failed(name or repr(setter), e, start, end)
            return self
        return self.animate_binding(binding, start, end, window_ms=window_ms, easing=easing, ease=ease)

    def _binding_failed(self, name: str, error: BindingResolutionError,
                        start: float, end: float) -> None:
        logger.error("%s Cannot bind %s: %s", TAG_BINDING, name, error)
        if self._config.binding_policy is BindingPolicy.STRICT:
            raise error
        self.add_property(AnimatedProperty.invalid_binding(name, error, start, end))

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def _reject(self, setting: str, reason: str) -> bool:
        logger.warning("%s %s", TAG_CONFIG, ConfigurationRejected(f"{setting} rejected: {reason}"))
        return False

    def _playback_active(self) -> bool:
        return self.state in (TimelineState.PLAYING, TimelineState.PAUSED)

    def set_duration_ms(self, duration_ms: int) -> bool:
        if self._playback_active():
            return self._reject("duration", "playback in progress; stop the timeline first")
        if isinstance(duration_ms, bool) or int(duration_ms) <= 0:
            return self._reject("duration", f"must be positive, got {duration_ms}")
        self._config.duration_ms = int(duration_ms)
        self._frame_count = self._compute_frame_count()
        for prop in self._properties:
            prop.update_progress_bounds(self._config.duration_ms)
        logger.debug("%s duration=%dms", TAG_CONFIG, self._config.duration_ms)
        return True

    def set_duration_seconds(self, seconds: float) -> bool:
        return self.set_duration_ms(round_half_up(seconds * 1000))

    def set_loop_mirror(self, mirror: bool) -> bool:
        if self._playback_active():
            return self._reject("loop mirror", "playback in progress; stop the timeline first")
        self._config.mirror = bool(mirror)
        return True

    def set_forward(self, forward: bool) -> bool:
        if self._playback_active():
            return self._reject("direction", "playback in progress; stop the timeline first")
        self._config.forward = bool(forward)
        self._forward = self._config.forward
        return True

    def set_frame_rate(self, frame_rate: int) -> bool:
        if self._playback_active():
            return self._reject("frame rate", "playback in progress; stop the timeline first")
        if isinstance(frame_rate, bool) or int(frame_rate) <= 0:
            return self._reject("frame rate", f"must be positive, got {frame_rate}")
        self._config.frame_rate = int(frame_rate)
        self._frame_count = self._compute_frame_count()
        return True

    def set_output_dir(self, output_dir: PathLike) -> bool:
        if self._rendering:
            return self._reject("output dir", "rendering in progress")
        self._config.output_dir = Path(output_dir)
        return True

    def set_filename_pattern(self, pattern: str) -> bool:
        if self._rendering:
            return self._reject("filename pattern", "rendering in progress")
        try:
            validate_filename_pattern(pattern)
        except ValueError as e:
            return self._reject("filename pattern", str(e))
        self._config.filename_pattern = pattern
        return True

    def set_index_offset(self, offset: int) -> bool:
        if self._rendering:
            return self._reject("index offset", "rendering in progress")
        self._config.index_offset = int(offset)
        return True

    def set_exit_on_render_finish(self, exit_on_finish: bool) -> bool:
        self._config.exit_on_render_finish = bool(exit_on_finish)
        return True

    def set_frame_sink(self, sink: Optional[Union[FrameSink, Callable[[Path], Any]]]) -> bool:
        if self._rendering:
            return self._reject("frame sink", "rendering in progress")
        self._frame_sink = self._as_frame_sink(sink)
        return True

    def set_exit_handler(self, handler: Optional[Callable[[], Any]]) -> bool:
        self._exit_handler = handler
        return True

    @property
    def frame_sink(self) -> Optional[FrameSink]:
        return self._frame_sink

    @property
    def exit_handler(self) -> Optional[Callable[[], Any]]:
        return self._exit_handler

    @staticmethod
    def _as_frame_sink(sink: Any) -> Optional[FrameSink]:
        if sink is None or isinstance(sink, FrameSink):
            return sink
        return CallableFrameSink(sink)

    def output_path(self, index: Optional[int] = None) -> Path:
        """Path of frame ``index``; the next frame to be saved by default."""
        if index is None:
            index = self._config.index_offset + self._rendered_frames
        return build_output_path(self._config.output_dir, self._config.filename_pattern, index)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def add_finished_listener(self, callback: TimelineListener) -> int:
        """Call ``callback(timeline)`` on natural completion. Returns a listener id."""
        return self._add_listener(self._finished_listeners, callback)

    def add_loop_end_listener(self, callback: TimelineListener) -> int:
        """Call ``callback(timeline)`` at every loop boundary. Returns a listener id."""
        return self._add_listener(self._loop_end_listeners, callback)

    def remove_listener(self, listener_id: int) -> bool:
        for listeners in (self._finished_listeners, self._loop_end_listeners):
            if listeners.pop(listener_id, None) is not None:
                return True
        return False

    def _add_listener(self, listeners: Dict[int, TimelineListener], callback: TimelineListener) -> int:
        if not callable(callback):
            raise ValueError("Callback must be callable")
        listener_id = next(self._listener_ids)
        listeners[listener_id] = callback
        return listener_id

    def _notify(self, listeners: Dict[int, TimelineListener], channel: str) -> None:
        for listener_id, callback in list(listeners.items()):
            try:
                callback(self)
            except Exception as e:
                listeners.pop(listener_id, None)
                logger.error(
                    "%s %s", TAG_NOTIFY,
                    NotificationHandlerError(f"{channel} listener {callback!r} raised {e!r}; listener disabled"),
                    exc_info=True,
                )

    def __repr__(self) -> str:
        return (
            f"Timeline({self._config.duration_ms}ms, state={self.state.value}, "
            f"progress={self._progress:.3f}, properties={len(self._properties)})"
        )
