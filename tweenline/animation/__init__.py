"""Declarative timeline and tweening engine."""

from .types import (
    TimelineState,
    EasingCurve,
    NumericKind,
    BindingPolicy,
    TimelineConfig,
)
from .errors import (
    TweenlineError,
    BindingResolutionError,
    BindingWriteError,
    PersistError,
    ConfigurationRejected,
    UnknownEasingSelector,
    NotificationHandlerError,
)
from .easing import ease, get_easing_function, EASING_FUNCTIONS
from .bindings import TargetBinding, AttributeBinding, ItemBinding, CallableBinding, resolve_binding
from .output import FrameSink, CallableFrameSink, build_output_path, validate_filename_pattern
from .property import AnimatedProperty
from .timeline import Timeline

__all__ = [
    # Types
    'TimelineState',
    'EasingCurve',
    'NumericKind',
    'BindingPolicy',
    'TimelineConfig',

    # Errors
    'TweenlineError',
    'BindingResolutionError',
    'BindingWriteError',
    'PersistError',
    'ConfigurationRejected',
    'UnknownEasingSelector',
    'NotificationHandlerError',

    # Easing
    'ease',
    'get_easing_function',
    'EASING_FUNCTIONS',

    # Bindings
    'TargetBinding',
    'AttributeBinding',
    'ItemBinding',
    'CallableBinding',
    'resolve_binding',

    # Output
    'FrameSink',
    'CallableFrameSink',
    'build_output_path',
    'validate_filename_pattern',

    # Timeline
    'AnimatedProperty',
    'Timeline',
]
