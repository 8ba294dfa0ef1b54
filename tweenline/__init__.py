"""tweenline: declarative timeline and tweening for frame-driven hosts."""

from .animation import (
    Timeline,
    TimelineConfig,
    TimelineState,
    EasingCurve,
    NumericKind,
    BindingPolicy,
    AnimatedProperty,
    ease,
)

__version__ = "0.1.0"

__all__ = [
    'Timeline',
    'TimelineConfig',
    'TimelineState',
    'EasingCurve',
    'NumericKind',
    'BindingPolicy',
    'AnimatedProperty',
    'ease',
]
