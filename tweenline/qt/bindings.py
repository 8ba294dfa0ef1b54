"""
Qt property binding.

Writes through the Qt setter (``setWindowOpacity`` for ``windowOpacity``)
when the object has one, otherwise through ``QObject.setProperty`` so
dynamic properties can be animated too.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from PySide6.QtCore import QObject

from tweenline.animation.errors import BindingResolutionError, BindingWriteError
from tweenline.animation.types import NumericKind


def _setter_name(property_name: str) -> str:
    return "set" + property_name[:1].upper() + property_name[1:]


class QtPropertyBinding:
    """Binds a numeric Qt property on a QObject."""

    def __init__(self, target: QObject, property_name: str, kind: Optional[NumericKind] = None):
        if not isinstance(target, QObject):
            raise BindingResolutionError(f"{type(target).__name__} is not a QObject")
        if not property_name:
            raise BindingResolutionError("Property name must not be empty")
        self.target = target
        self.property_name = property_name
        self.name = f"{type(target).__name__}.{property_name}"
        self._setter: Callable[[Any], Any]
        self.kind = self._resolve(kind)

    def _resolve(self, kind: Optional[NumericKind]) -> NumericKind:
        target = self.target
        setter = getattr(target, _setter_name(self.property_name), None)
        getter = getattr(target, self.property_name, None)

        meta = target.metaObject()
        index = meta.indexOfProperty(self.property_name)
        self._declared = index >= 0
        if self._declared and not meta.property(index).isWritable():
            raise BindingResolutionError(f"{self.name}: Qt property is read-only")

        if callable(setter):
            # Use setter method (e.g., setOpacity)
            self._setter = setter
            current = getter() if callable(getter) else target.property(self.property_name)
        else:
            current = target.property(self.property_name)
            if current is None:
                raise BindingResolutionError(f"{self.name}: no such property or setter")
            self._setter = self._set_qt_property

        if kind is not None:
            try:
                return NumericKind(kind)
            except ValueError:
                raise BindingResolutionError(f"Unsupported numeric kind: {kind!r}") from None
        detected = NumericKind.classify(current)
        if detected is None:
            raise BindingResolutionError(
                f"{self.name} holds {type(current).__name__}; pass kind= explicitly"
            )
        return detected

    def _set_qt_property(self, value: Any) -> None:
        # setProperty returns False on failure for declared properties; dynamic
        # properties always report False
        if not self.target.setProperty(self.property_name, value) and self._declared:
            raise BindingWriteError(f"QObject.setProperty rejected {value!r}")

    def write(self, value: float) -> None:
        try:
            self._setter(self.kind.coerce(value))
        except Exception as e:
            # RuntimeError here usually means the C++ object was deleted
            raise BindingWriteError(f"Writing {self.name} failed: {e}") from e

    def __repr__(self) -> str:
        return f"QtPropertyBinding({self.name}, {self.kind.value})"
