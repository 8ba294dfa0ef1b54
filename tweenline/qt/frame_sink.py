"""Frame sink that saves a widget's current contents."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import QWidget

from tweenline.animation.errors import PersistError


class WidgetFrameSink:
    """
    Persist frames by grabbing a widget into a pixmap.

    Args:
        widget: Widget whose contents are saved every rendered frame
        image_format: Explicit format ("PNG", "JPG" ...); guessed from the
            file suffix when None
        quality: Qt save quality, -1 for the format default
    """

    def __init__(self, widget: QWidget, image_format: Optional[str] = None, quality: int = -1):
        self.widget = widget
        self.image_format = image_format
        self.quality = quality

    def persist(self, path: Path) -> None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistError(f"Cannot create {path.parent}: {e}") from e

        try:
            pixmap = self.widget.grab()
        except RuntimeError as e:
            raise PersistError(f"Cannot grab widget: {e}") from e
        if pixmap.isNull():
            raise PersistError(f"Widget grab returned an empty pixmap for {path}")
        if not pixmap.save(str(path), self.image_format, self.quality):
            raise PersistError(f"QPixmap.save failed for {path}")
