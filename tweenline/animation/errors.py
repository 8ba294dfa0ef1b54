"""
Error types raised or reported by the timeline engine.

Only BindingResolutionError (under the strict binding policy) escapes to the
host. Everything else is logged where it happens and degrades a single
property, listener, frame or setter call. ConfigurationRejected and
NotificationHandlerError are report-only: the timeline logs them and never
raises them.
"""


class TweenlineError(Exception):
    """Base class for all timeline engine errors."""


class BindingResolutionError(TweenlineError):
    """Target slot not found, not writable, or of an unsupported numeric kind."""


class BindingWriteError(TweenlineError):
    """Writing a value through a resolved binding failed."""


class PersistError(TweenlineError):
    """A frame sink could not save the current frame."""


class ConfigurationRejected(TweenlineError):
    """A setter was called in a lifecycle phase that does not permit it (logged, not raised)."""


class UnknownEasingSelector(TweenlineError, ValueError):
    """Easing selector is not one of the 32 known curves."""


class NotificationHandlerError(TweenlineError):
    """A finished / loop-end listener raised (logged, not raised)."""
