"""
Animated property: one numeric slot driven by a timeline.

Each tick the owning Timeline pushes its global progress into update(). The
property narrows it to its own time window, applies easing, interpolates
between its start and end values and writes the result through its binding.
"""
from __future__ import annotations

from typing import Optional, Tuple

from tweenline.animation.bindings import TargetBinding
from tweenline.animation.easing import EasingSelector, ease
from tweenline.animation.errors import BindingResolutionError
from tweenline.animation.maths import constrain, lerp, map_range
from tweenline.animation.types import EasingCurve, NumericKind
from tweenline.logging.logger import get_logger
from tweenline.logging.tags import TAG_BINDING

logger = get_logger(__name__)


class AnimatedProperty:
    """
    A start -> end transition bound to a host slot.

    Args:
        binding: Resolved target binding
        start: Value at local progress 0
        end: Value at local progress 1
        window_ms: Optional ``(start_ms, end_ms)`` span of the timeline during
            which the transition happens. Outside it the value is pinned to
            ``start`` (before) or ``end`` (after). None spans the full length.
        easing: Easing curve (enum, name or selector number)
        easing_enabled: Apply ``easing`` when True, plain linear otherwise
    """

    def __init__(self, binding: Optional[TargetBinding], start: float, end: float, *,
                 window_ms: Optional[Tuple[int, int]] = None,
                 easing: EasingSelector = EasingCurve.LINEAR,
                 easing_enabled: bool = True):
        self.binding = binding
        self.start = float(start)
        self.end = float(end)
        self.easing = easing
        self.easing_enabled = bool(easing_enabled)

        self.name = binding.name if binding is not None else ""
        self.invalid = binding is None
        self.error: Optional[Exception] = None
        self.full_length = True
        self.window_start_ms = 0
        self.window_end_ms = 0
        self.start_progress = 0.0
        self.end_progress = 1.0
        self._duration_ms: Optional[int] = None

        self.local_progress = 0.0
        self.current_value = self.start

        if window_ms is not None:
            self.set_window(*window_ms)

    @classmethod
    def invalid_binding(cls, name: str, error: BindingResolutionError,
                        start: float = 0.0, end: float = 0.0) -> 'AnimatedProperty':
        """Placeholder for a slot that failed to resolve; skipped every tick."""
        prop = cls(None, start, end)
        prop.name = name
        prop.error = error
        return prop

    @property
    def kind(self) -> Optional[NumericKind]:
        return self.binding.kind if self.binding is not None else None

    # ------------------------------------------------------------------
    # Window
    # ------------------------------------------------------------------

    def set_window(self, start_ms: int, end_ms: int) -> None:
        """Restrict the transition to ``[start_ms, end_ms]`` of the timeline."""
        start_ms = int(start_ms)
        end_ms = int(end_ms)
        if start_ms < 0 or end_ms <= start_ms:
            raise ValueError(
                f"Property window must satisfy 0 <= start < end, got ({start_ms}, {end_ms})"
            )
        self.full_length = False
        self.window_start_ms = start_ms
        self.window_end_ms = end_ms
        if self._duration_ms is not None:
            self.update_progress_bounds(self._duration_ms)

    def set_full_length(self) -> None:
        """Let the transition span the whole timeline again."""
        self.full_length = True

    def update_progress_bounds(self, duration_ms: int) -> None:
        """Convert the ms window to timeline progress for ``duration_ms``.

        Called by the owning timeline on attach and on every duration change.
        """
        self._duration_ms = int(duration_ms)
        if self.full_length:
            self.start_progress = 0.0
            self.end_progress = 1.0
            return
        self.start_progress = map_range(self.window_start_ms, 0, duration_ms, 0.0, 1.0)
        self.end_progress = map_range(self.window_end_ms, 0, duration_ms, 0.0, 1.0)

    # ------------------------------------------------------------------
    # Per-tick update
    # ------------------------------------------------------------------

    def _local_progress(self, progress: float) -> float:
        if self.full_length:
            local = progress
        else:
            local = constrain(progress, self.start_progress, self.end_progress)
            local = map_range(local, self.start_progress, self.end_progress, 0.0, 1.0)
        if self.easing_enabled:
            local = ease(self.easing, local)
        return local

    def update(self, progress: float) -> None:
        """Apply the timeline's global progress to this property's slot."""
        if self.invalid:
            return

        self.local_progress = self._local_progress(progress)
        self.current_value = lerp(self.start, self.end, self.local_progress)

        try:
            self.binding.write(self.current_value)
        except Exception as e:
            # Fail once, then ignore: the slot is disabled for good
            self.invalid = True
            self.error = e
            logger.error(
                "%s Writing %s failed, property disabled: %s",
                TAG_BINDING, self.name, e, exc_info=True,
            )

    def __repr__(self) -> str:
        window = "full" if self.full_length else f"{self.window_start_ms}-{self.window_end_ms}ms"
        return (
            f"AnimatedProperty({self.name}, {self.start}->{self.end}, {window}, "
            f"easing={self.easing if self.easing_enabled else 'off'})"
        )
