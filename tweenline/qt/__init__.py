"""PySide6 adapters: Qt property bindings, widget frame sink and a QTimer driver."""

from .bindings import QtPropertyBinding
from .frame_sink import WidgetFrameSink
from .driver import TimelineDriver, quit_application

__all__ = [
    'QtPropertyBinding',
    'WidgetFrameSink',
    'TimelineDriver',
    'quit_application',
]
