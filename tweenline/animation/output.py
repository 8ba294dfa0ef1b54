"""
Frame output for render mode.

The timeline never draws. While rendering it asks a FrameSink supplied by the
host to persist whatever is currently on screen under a path built from the
output directory, a filename pattern and a running frame index.
"""
from __future__ import annotations

import string
from pathlib import Path
from typing import Callable, Protocol, Union, runtime_checkable

from tweenline.animation.errors import PersistError

PathLike = Union[str, Path]


@runtime_checkable
class FrameSink(Protocol):
    """Host capability: save the current visual state to a file."""

    def persist(self, path: Path) -> None:
        """Save the current frame to ``path``. Raises PersistError on failure."""
        ...


class CallableFrameSink:
    """Adapt a plain ``save(path)`` callable to the FrameSink protocol.

    Failures other than PersistError are wrapped so the timeline only has to
    handle one error type.
    """

    def __init__(self, save: Callable[[Path], object]):
        if not callable(save):
            raise ValueError("save must be callable")
        self._save = save

    def persist(self, path: Path) -> None:
        try:
            self._save(path)
        except PersistError:
            raise
        except Exception as e:
            raise PersistError(f"Saving frame to {path} failed: {e}") from e


def validate_filename_pattern(pattern: str) -> None:
    """Check that pattern is a str.format template with one integer field.

    Raises:
        ValueError: If the pattern has zero or several replacement fields, a
            named/indexed field, or a format spec an int cannot satisfy.
    """
    if not isinstance(pattern, str) or not pattern:
        raise ValueError("Filename pattern must be a non-empty string")
    try:
        fields = [
            (name, spec) for _, name, spec, _ in string.Formatter().parse(pattern)
            if name is not None
        ]
    except ValueError as e:
        raise ValueError(f"Invalid filename pattern {pattern!r}: {e}") from e
    if len(fields) != 1:
        raise ValueError(
            f"Filename pattern {pattern!r} must contain exactly one placeholder, "
            f"found {len(fields)}"
        )
    name, _ = fields[0]
    if name not in ("", "0"):
        raise ValueError(f"Filename pattern {pattern!r} must use a positional placeholder")
    try:
        rendered = pattern.format(0)
    except (ValueError, IndexError, KeyError) as e:
        raise ValueError(f"Filename pattern {pattern!r} cannot format an integer: {e}") from e
    if rendered == pattern.format(1):
        raise ValueError(f"Filename pattern {pattern!r} does not vary with the frame index")


def build_output_path(output_dir: PathLike, pattern: str, index: int) -> Path:
    """Return ``output_dir / pattern.format(index)``."""
    return Path(output_dir) / pattern.format(int(index))
