"""
Qt frame loop for timelines.

TimelineDriver owns one QTimer and, every tick, runs the per-frame contract
for each registered timeline:

    pre_tick() on every timeline -> frame callbacks -> post_tick() on every timeline

Frame callbacks are where the host redraws; in render mode the frame sink
grabs the result during post_tick().
"""
from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional, Tuple

from PySide6.QtCore import QCoreApplication, QObject, Qt, QTimer, Signal

from tweenline.animation.timeline import Timeline
from tweenline.logging.logger import get_logger, is_perf_metrics_enabled
from tweenline.logging.tags import TAG_PERF, TAG_TIMELINE

logger = get_logger(__name__)


def quit_application() -> None:
    """Exit handler used for timelines that render and then quit the host."""
    app = QCoreApplication.instance()
    if app is None:
        logger.warning("%s No QCoreApplication to quit", TAG_TIMELINE)
        return
    app.quit()


class TimelineDriver(QObject):
    """
    Drives registered timelines from a precise QTimer.

    The timer runs while at least one timeline or frame callback is
    registered and stops itself when both are gone. A timeline is
    unregistered when it finishes naturally; add it again to replay it.
    """

    # Signals
    timeline_finished = Signal(object)   # Timeline
    loop_ended = Signal(object)          # Timeline

    def __init__(self, fps: int = 60, install_exit_handler: bool = True,
                 parent: Optional[QObject] = None):
        """
        Initialize the driver.

        Args:
            fps: Target ticks per second
            install_exit_handler: Give timelines without an exit handler
                quit_application, so exit_on_render_finish closes the app
            parent: Optional Qt parent
        """
        super().__init__(parent)

        self.fps = max(1, int(fps))
        self.install_exit_handler = install_exit_handler

        # timeline -> (finished listener id, loop-end listener id)
        self._timelines: Dict[Timeline, Tuple[int, int]] = {}
        self._frame_callbacks: Dict[int, Callable[[float], None]] = {}

        self._last_tick_time: Optional[float] = None
        self._profile_start_ts: Optional[float] = None
        self._profile_frame_count = 0
        self._profile_max_dt = 0.0

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(max(1, int(1000 / self.fps)))
        self._timer.timeout.connect(self.tick)

        logger.debug("%s TimelineDriver initialized (fps=%d)", TAG_TIMELINE, self.fps)

    @property
    def timelines(self) -> List[Timeline]:
        return list(self._timelines)

    def is_running(self) -> bool:
        return self._timer.isActive()

    def set_target_fps(self, fps: int) -> None:
        """Update target FPS and reconfigure the timer interval."""
        new_fps = max(1, int(fps))
        if new_fps == self.fps:
            return
        self.fps = new_fps
        was_active = self._timer.isActive()
        if was_active:
            self._timer.stop()
        self._timer.setInterval(max(1, int(1000 / self.fps)))
        if was_active:
            self._timer.start()
        logger.info("%s TimelineDriver target FPS set to %d", TAG_TIMELINE, self.fps)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_timeline(self, timeline: Timeline) -> Timeline:
        """Register a timeline and start ticking it."""
        if timeline in self._timelines:
            return timeline
        finished_id = timeline.add_finished_listener(self._on_timeline_finished)
        loop_id = timeline.add_loop_end_listener(self.loop_ended.emit)
        self._timelines[timeline] = (finished_id, loop_id)
        if self.install_exit_handler and timeline.exit_handler is None:
            timeline.set_exit_handler(quit_application)
        self.start()
        return timeline

    def remove_timeline(self, timeline: Timeline) -> None:
        ids = self._timelines.pop(timeline, None)
        if ids is None:
            return
        for listener_id in ids:
            timeline.remove_listener(listener_id)
        self._stop_if_idle()

    def _on_timeline_finished(self, timeline: Timeline) -> None:
        self.timeline_finished.emit(timeline)
        self.remove_timeline(timeline)

    def add_frame_callback(self, callback: Callable[[float], None]) -> int:
        """Call ``callback(delta_seconds)`` between pre_tick and post_tick."""
        callback_id = id(callback)
        self._frame_callbacks[callback_id] = callback
        self.start()
        return callback_id

    def remove_frame_callback(self, callback_id: int) -> None:
        self._frame_callbacks.pop(callback_id, None)
        self._stop_if_idle()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._timer.isActive():
            return
        now = time.perf_counter()
        self._last_tick_time = now
        self._profile_start_ts = now
        self._profile_frame_count = 0
        self._profile_max_dt = 0.0
        self._timer.start()
        logger.debug("%s TimelineDriver started", TAG_TIMELINE)

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
            self._log_profile_summary()
            logger.debug("%s TimelineDriver stopped", TAG_TIMELINE)

    def cleanup(self) -> None:
        """Stop ticking and detach from every timeline."""
        self.stop()
        for timeline in list(self._timelines):
            self.remove_timeline(timeline)
        self._frame_callbacks.clear()

    def _stop_if_idle(self) -> None:
        if not self._timelines and not self._frame_callbacks:
            self.stop()

    def tick(self) -> None:
        """Run one frame. Connected to the timer; callable directly as well."""
        now = time.perf_counter()
        last = self._last_tick_time if self._last_tick_time is not None else now
        delta_time = now - last
        self._last_tick_time = now

        self._profile_frame_count += 1
        if delta_time > self._profile_max_dt:
            self._profile_max_dt = delta_time

        timelines = list(self._timelines)
        for timeline in timelines:
            timeline.pre_tick()

        for cb in list(self._frame_callbacks.values()):
            _cb_start = time.perf_counter()
            try:
                cb(delta_time)
            except Exception as e:
                logger.error("%s Frame callback failed: %s", TAG_TIMELINE, e, exc_info=True)
            _cb_elapsed = (time.perf_counter() - _cb_start) * 1000.0
            if _cb_elapsed > 50.0 and is_perf_metrics_enabled():
                logger.warning("%s %s Slow frame callback: %.2fms", TAG_PERF, TAG_TIMELINE, _cb_elapsed)

        for timeline in timelines:
            timeline.post_tick()

        _frame_elapsed = (time.perf_counter() - now) * 1000.0
        if _frame_elapsed > 50.0 and is_perf_metrics_enabled():
            logger.warning(
                "%s %s Slow frame: %.2fms (timelines=%d, callbacks=%d)",
                TAG_PERF, TAG_TIMELINE, _frame_elapsed, len(timelines), len(self._frame_callbacks),
            )

    def _log_profile_summary(self) -> None:
        """Emit a `[PERF]` summary for the last active run."""
        if not is_perf_metrics_enabled() or self._profile_start_ts is None:
            return
        elapsed = max(0.0, time.perf_counter() - self._profile_start_ts)
        if elapsed <= 0.0 or self._profile_frame_count == 0:
            return
        logger.info(
            "%s %s TimelineDriver metrics: duration=%.1fms, frames=%d, avg_fps=%.1f, "
            "dt_max=%.2fms, fps_target=%d",
            TAG_PERF, TAG_TIMELINE, elapsed * 1000.0, self._profile_frame_count,
            self._profile_frame_count / elapsed, self._profile_max_dt * 1000.0, self.fps,
        )
