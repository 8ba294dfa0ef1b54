"""Scalar helpers shared by the timeline and its properties."""
import math


def constrain(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def map_range(value: float, in_low: float, in_high: float,
              out_low: float, out_high: float) -> float:
    """Linearly re-map value from [in_low, in_high] onto [out_low, out_high].

    The input range must not be empty; callers guard the degenerate case.
    """
    return out_low + (out_high - out_low) * ((value - in_low) / (in_high - in_low))


def lerp(start: float, end: float, amount: float) -> float:
    return start + (end - start) * amount


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from -inf (0.5 -> 1, -0.5 -> 0)."""
    return int(math.floor(value + 0.5))
