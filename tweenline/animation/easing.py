"""
Easing functions for timeline properties.

Provides mathematical easing functions for smooth transitions.
All functions take t (time) in range [0.0, 1.0] and return 0.0 at t=0 and
1.0 at t=1. Back and elastic curves overshoot in between.

Based on standard easing equations:
- Robert Penner's Easing Functions
- https://easings.net/
"""
import math
from typing import Callable, Set, Union

from tweenline.animation.errors import UnknownEasingSelector
from tweenline.animation.types import EasingCurve
from tweenline.logging.logger import get_logger
from tweenline.logging.tags import TAG_EASING

logger = get_logger(__name__)

EasingSelector = Union[EasingCurve, str, int]


# Linear (no easing)
def linear(t: float) -> float:
    """Linear interpolation - no easing."""
    return t


def simple_in_out(t: float) -> float:
    """Rational ease-in-out: t^2 / (2(t^2 - t) + 1)."""
    sq = t * t
    return sq / (2.0 * (sq - t) + 1.0)


# Quadratic easing
def quad_in(t: float) -> float:
    """Quadratic ease-in - accelerating from zero velocity."""
    return t * t


def quad_out(t: float) -> float:
    """Quadratic ease-out - decelerating to zero velocity."""
    return t * (2 - t)


def quad_in_out(t: float) -> float:
    """Quadratic ease-in-out - accelerating until halfway, then decelerating."""
    if t < 0.5:
        return 2 * t * t
    return -1 + (4 - 2 * t) * t


# Cubic easing
def cubic_in(t: float) -> float:
    """Cubic ease-in - accelerating from zero velocity."""
    return t * t * t


def cubic_out(t: float) -> float:
    """Cubic ease-out - decelerating to zero velocity."""
    t -= 1
    return t * t * t + 1


def cubic_in_out(t: float) -> float:
    """Cubic ease-in-out - accelerating until halfway, then decelerating."""
    if t < 0.5:
        return 4 * t * t * t
    t -= 1
    return 1 + 4 * t * t * t


# Quartic easing
def quart_in(t: float) -> float:
    """Quartic ease-in - accelerating from zero velocity."""
    return t * t * t * t


def quart_out(t: float) -> float:
    """Quartic ease-out - decelerating to zero velocity."""
    t -= 1
    return 1 - t * t * t * t


def quart_in_out(t: float) -> float:
    """Quartic ease-in-out - accelerating until halfway, then decelerating."""
    if t < 0.5:
        return 8 * t * t * t * t
    t -= 1
    return 1 - 8 * t * t * t * t


# Quintic easing
def quint_in(t: float) -> float:
    """Quintic ease-in - accelerating from zero velocity."""
    return t * t * t * t * t


def quint_out(t: float) -> float:
    """Quintic ease-out - decelerating to zero velocity."""
    t -= 1
    return 1 + t * t * t * t * t


def quint_in_out(t: float) -> float:
    """Quintic ease-in-out - accelerating until halfway, then decelerating."""
    if t < 0.5:
        return 16 * t * t * t * t * t
    t -= 1
    return 1 + 16 * t * t * t * t * t


# Sine easing
def sine_in(t: float) -> float:
    """Sine ease-in - accelerating using sine curve."""
    return 1 - math.cos(t * math.pi / 2)


def sine_out(t: float) -> float:
    """Sine ease-out - decelerating using sine curve."""
    return math.sin(t * math.pi / 2)


def sine_in_out(t: float) -> float:
    """Sine ease-in-out - accelerating until halfway, then decelerating."""
    return -(math.cos(math.pi * t) - 1) / 2


# Circular easing
def circ_in(t: float) -> float:
    """Circular ease-in - accelerating using circular curve."""
    return 1 - math.sqrt(1 - t * t)


def circ_out(t: float) -> float:
    """Circular ease-out - decelerating using circular curve."""
    t -= 1
    return math.sqrt(1 - t * t)


def circ_in_out(t: float) -> float:
    """Circular ease-in-out - accelerating until halfway, then decelerating."""
    if t < 0.5:
        return (1 - math.sqrt(1 - 4 * t * t)) / 2
    t = t * 2 - 2
    return (math.sqrt(1 - t * t) + 1) / 2


# Exponential easing
def expo_in(t: float) -> float:
    """Exponential ease-in - accelerating exponentially."""
    if t == 0:
        return 0.0
    return math.pow(2, 10 * (t - 1))


def expo_out(t: float) -> float:
    """Exponential ease-out - decelerating exponentially."""
    if t == 1:
        return 1.0
    return 1 - math.pow(2, -10 * t)


def expo_in_out(t: float) -> float:
    """Exponential ease-in-out - accelerating until halfway, then decelerating."""
    if t == 0 or t == 1:
        return float(t)

    if t < 0.5:
        return math.pow(2, 20 * t - 10) / 2
    return (2 - math.pow(2, -20 * t + 10)) / 2


# Back easing
_BACK_OVERSHOOT = 1.70158


def back_in(t: float) -> float:
    """Back ease-in - backing up slightly before accelerating."""
    c = _BACK_OVERSHOOT
    return t * t * ((c + 1) * t - c)


def back_out(t: float) -> float:
    """Back ease-out - overshooting slightly before settling."""
    c = _BACK_OVERSHOOT
    t -= 1
    return t * t * ((c + 1) * t + c) + 1


def back_in_out(t: float) -> float:
    """Back ease-in-out - backing up, then overshooting."""
    c = _BACK_OVERSHOOT * 1.525

    if t < 0.5:
        return (2 * t) * (2 * t) * ((c + 1) * 2 * t - c) / 2

    t = t * 2 - 2
    return (t * t * ((c + 1) * t + c) + 2) / 2


# Bounce easing
def bounce_out(t: float) -> float:
    """Bounce ease-out - bouncing motion."""
    n1 = 7.5625
    d1 = 2.75

    if t < 1 / d1:
        return n1 * t * t
    elif t < 2 / d1:
        t -= 1.5 / d1
        return n1 * t * t + 0.75
    elif t < 2.5 / d1:
        t -= 2.25 / d1
        return n1 * t * t + 0.9375
    else:
        t -= 2.625 / d1
        return n1 * t * t + 0.984375


def bounce_in(t: float) -> float:
    """Bounce ease-in - bouncing motion."""
    return 1 - bounce_out(1 - t)


def bounce_in_out(t: float) -> float:
    """Bounce ease-in-out - bouncing motion."""
    if t < 0.5:
        return (1 - bounce_out(1 - 2 * t)) / 2
    return (1 + bounce_out(2 * t - 1)) / 2


# Elastic easing (period 0.3, amplitude 1)
_ELASTIC_PERIOD = 0.3
_ELASTIC_IN_OUT_PERIOD = _ELASTIC_PERIOD * 1.5


def elastic_in(t: float) -> float:
    """Elastic ease-in - elastic motion, like a spring."""
    if t == 0 or t == 1:
        return float(t)

    p = _ELASTIC_PERIOD
    s = p / 4
    t -= 1
    return -math.pow(2, 10 * t) * math.sin((t - s) * (2 * math.pi) / p)


def elastic_out(t: float) -> float:
    """Elastic ease-out - elastic motion, like a spring."""
    if t == 0 or t == 1:
        return float(t)

    p = _ELASTIC_PERIOD
    s = p / 4
    return math.pow(2, -10 * t) * math.sin((t - s) * (2 * math.pi) / p) + 1


def elastic_in_out(t: float) -> float:
    """Elastic ease-in-out - elastic motion."""
    if t == 0 or t == 1:
        return float(t)

    p = _ELASTIC_IN_OUT_PERIOD
    s = p / 4
    t = t * 2 - 1

    if t < 0:
        return -0.5 * math.pow(2, 10 * t) * math.sin((t - s) * (2 * math.pi) / p)
    return 0.5 * math.pow(2, -10 * t) * math.sin((t - s) * (2 * math.pi) / p) + 1


# Easing function lookup table
EASING_FUNCTIONS: dict[EasingCurve, Callable[[float], float]] = {
    EasingCurve.LINEAR: linear,
    EasingCurve.SIMPLE_IN_OUT: simple_in_out,

    EasingCurve.QUAD_IN: quad_in,
    EasingCurve.QUAD_OUT: quad_out,
    EasingCurve.QUAD_IN_OUT: quad_in_out,

    EasingCurve.CUBIC_IN: cubic_in,
    EasingCurve.CUBIC_OUT: cubic_out,
    EasingCurve.CUBIC_IN_OUT: cubic_in_out,

    EasingCurve.QUART_IN: quart_in,
    EasingCurve.QUART_OUT: quart_out,
    EasingCurve.QUART_IN_OUT: quart_in_out,

    EasingCurve.QUINT_IN: quint_in,
    EasingCurve.QUINT_OUT: quint_out,
    EasingCurve.QUINT_IN_OUT: quint_in_out,

    EasingCurve.SINE_IN: sine_in,
    EasingCurve.SINE_OUT: sine_out,
    EasingCurve.SINE_IN_OUT: sine_in_out,

    EasingCurve.CIRC_IN: circ_in,
    EasingCurve.CIRC_OUT: circ_out,
    EasingCurve.CIRC_IN_OUT: circ_in_out,

    EasingCurve.EXPO_IN: expo_in,
    EasingCurve.EXPO_OUT: expo_out,
    EasingCurve.EXPO_IN_OUT: expo_in_out,

    EasingCurve.BACK_IN: back_in,
    EasingCurve.BACK_OUT: back_out,
    EasingCurve.BACK_IN_OUT: back_in_out,

    EasingCurve.BOUNCE_IN: bounce_in,
    EasingCurve.BOUNCE_OUT: bounce_out,
    EasingCurve.BOUNCE_IN_OUT: bounce_in_out,

    EasingCurve.ELASTIC_IN: elastic_in,
    EasingCurve.ELASTIC_OUT: elastic_out,
    EasingCurve.ELASTIC_IN_OUT: elastic_in_out,
}

# Selectors already reported as unknown, so a bad config logs once, not per tick
_reported_selectors: Set[str] = set()


def get_easing_function(curve: EasingSelector) -> Callable[[float], float]:
    """
    Get the easing function for a given curve.

    Args:
        curve: Easing curve enum, its name, or its selector number

    Returns:
        Easing function that takes t in [0, 1]

    Raises:
        UnknownEasingSelector: If curve is not found
    """
    return EASING_FUNCTIONS[EasingCurve.coerce(curve)]


def ease(curve: EasingSelector, t: float) -> float:
    """
    Apply an easing curve to a normalized time value.

    An unknown selector is reported once and falls back to linear, so a
    mistyped curve never interrupts playback.

    Args:
        curve: Easing curve to apply (enum, name or selector number)
        t: Time value in range [0.0, 1.0]

    Returns:
        Eased value
    """
    # Clamp t to [0, 1]
    t = max(0.0, min(1.0, t))

    try:
        easing_fn = get_easing_function(curve)
    except UnknownEasingSelector as e:
        key = repr(curve)
        if key not in _reported_selectors:
            _reported_selectors.add(key)
            logger.error("%s %s; falling back to linear", TAG_EASING, e)
        return t

    # Endpoints are exact; the polynomial forms drift by an ulp at 0 and 1
    if t == 0.0:
        return 0.0
    if t == 1.0:
        return 1.0
    return easing_fn(t)
