"""
Animation types, enums, and dataclasses.

Defines the core types used by the timeline engine: easing selectors,
playback state, the numeric kinds a binding can target and the timeline's
configuration struct.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np

from tweenline.animation.errors import UnknownEasingSelector
from tweenline.animation.maths import round_half_up
from tweenline.animation.output import validate_filename_pattern


class TimelineState(Enum):
    """Playback state of a timeline."""
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class EasingCurve(Enum):
    """
    Easing curve selectors.

    Member order is the stable selector numbering (LINEAR = 0 ...
    ELASTIC_IN_OUT = 31), so configurations written with plain integers keep
    working through ``from_index``.
    """
    # Basic
    LINEAR = "linear"
    SIMPLE_IN_OUT = "simple_in_out"

    # Quadratic
    QUAD_IN = "quad_in"
    QUAD_OUT = "quad_out"
    QUAD_IN_OUT = "quad_in_out"

    # Cubic
    CUBIC_IN = "cubic_in"
    CUBIC_OUT = "cubic_out"
    CUBIC_IN_OUT = "cubic_in_out"

    # Quartic
    QUART_IN = "quart_in"
    QUART_OUT = "quart_out"
    QUART_IN_OUT = "quart_in_out"

    # Quintic
    QUINT_IN = "quint_in"
    QUINT_OUT = "quint_out"
    QUINT_IN_OUT = "quint_in_out"

    # Sine
    SINE_IN = "sine_in"
    SINE_OUT = "sine_out"
    SINE_IN_OUT = "sine_in_out"

    # Circular
    CIRC_IN = "circ_in"
    CIRC_OUT = "circ_out"
    CIRC_IN_OUT = "circ_in_out"

    # Exponential
    EXPO_IN = "expo_in"
    EXPO_OUT = "expo_out"
    EXPO_IN_OUT = "expo_in_out"

    # Back
    BACK_IN = "back_in"
    BACK_OUT = "back_out"
    BACK_IN_OUT = "back_in_out"

    # Bounce
    BOUNCE_IN = "bounce_in"
    BOUNCE_OUT = "bounce_out"
    BOUNCE_IN_OUT = "bounce_in_out"

    # Elastic
    ELASTIC_IN = "elastic_in"
    ELASTIC_OUT = "elastic_out"
    ELASTIC_IN_OUT = "elastic_in_out"

    @property
    def index(self) -> int:
        """Stable selector number of this curve."""
        return _CURVE_ORDER.index(self)

    @classmethod
    def from_index(cls, number: int) -> 'EasingCurve':
        """Resolve an integer selector. Raises UnknownEasingSelector."""
        if isinstance(number, bool) or not isinstance(number, (int, np.integer)):
            raise UnknownEasingSelector(f"Easing selector must be an int, got {number!r}")
        if not 0 <= int(number) < len(_CURVE_ORDER):
            raise UnknownEasingSelector(f"Unknown easing selector number: {number}")
        return _CURVE_ORDER[int(number)]

    @classmethod
    def from_string(cls, value: str) -> 'EasingCurve':
        """Resolve a curve name such as ``"quad_in_out"`` or ``"QUAD_IN_OUT"``."""
        key = str(value).strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise UnknownEasingSelector(f"Unknown easing curve: {value!r}") from None

    @classmethod
    def coerce(cls, selector: Union['EasingCurve', str, int]) -> 'EasingCurve':
        """Accept a member, its name or its number."""
        if isinstance(selector, cls):
            return selector
        if isinstance(selector, str):
            return cls.from_string(selector)
        return cls.from_index(selector)


_CURVE_ORDER = tuple(EasingCurve)


class NumericKind(Enum):
    """Numeric kind of a binding's target slot."""
    INT = "int"
    FLOAT = "float"      # single precision
    DOUBLE = "double"

    @classmethod
    def classify(cls, value: Any) -> Optional['NumericKind']:
        """Kind of a Python or numpy scalar, or None when unsupported."""
        if isinstance(value, (bool, np.bool_)):
            return None
        if isinstance(value, (int, np.integer)):
            return cls.INT
        if isinstance(value, np.floating):
            return cls.FLOAT if value.dtype.itemsize <= 4 else cls.DOUBLE
        if isinstance(value, float):
            return cls.DOUBLE
        return None

    @classmethod
    def from_dtype(cls, dtype: Any) -> Optional['NumericKind']:
        """Kind for a numpy dtype or ``array.array`` typecode, or None."""
        try:
            dt = np.dtype(dtype)
        except TypeError:
            return None
        if dt.kind in ("i", "u"):
            return cls.INT
        if dt.kind == "f":
            return cls.FLOAT if dt.itemsize <= 4 else cls.DOUBLE
        return None

    def coerce(self, value: float) -> Union[int, float]:
        """Convert an interpolated value to what this slot stores."""
        if self is NumericKind.INT:
            return round_half_up(value)
        if self is NumericKind.FLOAT:
            return float(np.float32(value))
        return float(value)


class BindingPolicy(Enum):
    """What to do when a property's target cannot be resolved."""
    STRICT = "strict"    # raise out of the add call, aborting host startup
    SKIP = "skip"        # attach the property as invalid and skip it every tick


@dataclass
class TimelineConfig:
    """Configuration for a timeline."""
    duration_ms: int                                   # Length of one loop
    frame_rate: int = 30                               # Output frames per second (render mode)
    mirror: bool = False                               # Alternate direction each loop
    forward: bool = True                               # Starting direction
    output_dir: Union[str, Path] = "animationOutput"   # Render output directory
    filename_pattern: str = "{}.png"                   # One integer placeholder
    index_offset: int = 0                              # Added to the rendered frame index
    exit_on_render_finish: bool = False                # Request host exit after rendering
    binding_policy: BindingPolicy = BindingPolicy.STRICT

    def __post_init__(self):
        """Validate timeline config."""
        if isinstance(self.duration_ms, bool) or int(self.duration_ms) <= 0:
            raise ValueError("TimelineConfig requires a positive duration_ms")
        if isinstance(self.frame_rate, bool) or int(self.frame_rate) <= 0:
            raise ValueError("TimelineConfig requires a positive frame_rate")
        self.duration_ms = int(self.duration_ms)
        self.frame_rate = int(self.frame_rate)
        self.index_offset = int(self.index_offset)
        self.output_dir = Path(self.output_dir)
        validate_filename_pattern(self.filename_pattern)
        if not isinstance(self.binding_policy, BindingPolicy):
            self.binding_policy = BindingPolicy(self.binding_policy)
