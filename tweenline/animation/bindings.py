"""
Target bindings: where animated values are written.

A binding resolves its slot once, at construction, and classifies the slot's
numeric kind. The timeline never reads a slot back; start and end values are
always supplied by the caller.
"""
from __future__ import annotations

import array
from collections.abc import MutableSequence
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

import numpy as np

from tweenline.animation.errors import BindingResolutionError, BindingWriteError
from tweenline.animation.types import NumericKind

Slot = Union[str, int, tuple]


@runtime_checkable
class TargetBinding(Protocol):
    """Host capability: write a numeric value into one named slot."""

    name: str
    kind: NumericKind

    def write(self, value: float) -> None:
        """Store ``value`` (already interpolated). Raises BindingWriteError."""
        ...


def _explicit_kind(kind: Any) -> NumericKind:
    try:
        return NumericKind(kind)
    except ValueError:
        raise BindingResolutionError(f"Unsupported numeric kind: {kind!r}") from None


class AttributeBinding:
    """Binds a named attribute on a host object, e.g. ``sketch.radius``."""

    def __init__(self, target: Any, attribute: str, kind: Optional[NumericKind] = None):
        if not isinstance(attribute, str) or not attribute.isidentifier():
            raise BindingResolutionError(f"Invalid attribute name: {attribute!r}")
        self.target = target
        self.attribute = attribute
        self.name = attribute
        self.kind = self._resolve(kind)

    def _resolve(self, kind: Optional[NumericKind]) -> NumericKind:
        try:
            current = getattr(self.target, self.attribute)
        except AttributeError as e:
            raise BindingResolutionError(
                f"{type(self.target).__name__} has no attribute {self.attribute!r}"
            ) from e
        if callable(current):
            raise BindingResolutionError(
                f"{type(self.target).__name__}.{self.attribute} is callable, not a value slot"
            )
        if kind is not None:
            return _explicit_kind(kind)
        detected = NumericKind.classify(current)
        if detected is None:
            raise BindingResolutionError(
                f"{type(self.target).__name__}.{self.attribute} holds "
                f"{type(current).__name__}; expected int, float or double"
            )
        return detected

    def write(self, value: float) -> None:
        try:
            setattr(self.target, self.attribute, self.kind.coerce(value))
        except Exception as e:
            raise BindingWriteError(f"Writing {self.name} failed: {e}") from e

    def __repr__(self) -> str:
        return f"AttributeBinding({type(self.target).__name__}.{self.attribute}, {self.kind.value})"


class ItemBinding:
    """Binds one item of a mutable sequence: list, array.array or numpy array."""

    def __init__(self, sequence: Any, index: Union[int, tuple], kind: Optional[NumericKind] = None):
        self.sequence = sequence
        self.index = index
        self.name = f"{type(sequence).__name__}[{index}]"
        self.kind = self._resolve(kind)

    def _resolve(self, kind: Optional[NumericKind]) -> NumericKind:
        seq = self.sequence
        if isinstance(seq, np.ndarray):
            if not seq.flags.writeable:
                raise BindingResolutionError(f"{self.name}: array is read-only")
            detected = NumericKind.from_dtype(seq.dtype)
        elif isinstance(seq, array.array):
            detected = None if seq.typecode in ("u", "w") else NumericKind.from_dtype(seq.typecode)
        elif isinstance(seq, MutableSequence) or hasattr(seq, "__setitem__"):
            detected = None
        else:
            raise BindingResolutionError(
                f"{type(seq).__name__} is not a mutable sequence"
            )

        try:
            current = seq[self.index]
        except (IndexError, TypeError, KeyError) as e:
            raise BindingResolutionError(f"{self.name}: index not addressable ({e})") from e
        if isinstance(seq, np.ndarray) and np.ndim(current) != 0:
            raise BindingResolutionError(f"{self.name}: index selects a sub-array, not an item")

        if kind is not None:
            return _explicit_kind(kind)
        if detected is None:
            detected = NumericKind.classify(current)
        if detected is None:
            raise BindingResolutionError(
                f"{self.name} holds {type(current).__name__}; expected int, float or double"
            )
        return detected

    def write(self, value: float) -> None:
        try:
            self.sequence[self.index] = self.kind.coerce(value)
        except Exception as e:
            raise BindingWriteError(f"Writing {self.name} failed: {e}") from e

    def __repr__(self) -> str:
        return f"ItemBinding({self.name}, {self.kind.value})"


class CallableBinding:
    """Binds a setter function, e.g. ``lambda v: widget.setOpacity(v)``."""

    def __init__(self, setter: Callable[[Union[int, float]], Any],
                 kind: NumericKind = NumericKind.DOUBLE, name: Optional[str] = None):
        if not callable(setter):
            raise BindingResolutionError(f"Setter {setter!r} is not callable")
        self.setter = setter
        self.kind = _explicit_kind(kind)
        self.name = name or getattr(setter, "__name__", "setter")

    def write(self, value: float) -> None:
        try:
            self.setter(self.kind.coerce(value))
        except Exception as e:
            raise BindingWriteError(f"Calling {self.name} failed: {e}") from e

    def __repr__(self) -> str:
        return f"CallableBinding({self.name}, {self.kind.value})"


def resolve_binding(target: Any, slot: Slot, kind: Optional[NumericKind] = None) -> TargetBinding:
    """
    Resolve a slot on a host object.

    Args:
        target: Host object (for attribute slots) or sequence (for item slots)
        slot: Attribute name, or integer / tuple index into ``target``
        kind: Optional explicit numeric kind; detected from the slot otherwise

    Returns:
        A resolved binding

    Raises:
        BindingResolutionError: If the slot cannot be bound
    """
    if isinstance(slot, str):
        return AttributeBinding(target, slot, kind)
    if isinstance(slot, bool) or not isinstance(slot, (int, np.integer, tuple)):
        raise BindingResolutionError(f"Unsupported slot {slot!r}; use a name or an index")
    return ItemBinding(target, slot, kind)
