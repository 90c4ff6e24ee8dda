"""Resize triggers that ask the engine to re-run marker placement."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from PyQt6 import sip
from PyQt6.QtCore import QEvent, QObject
from PyQt6.QtWidgets import QWidget

_LOGGER = logging.getLogger("BeaconOverlay.Engine")


def _alive(obj: Optional[QObject]) -> bool:
    return obj is not None and not sip.isdeleted(obj)


class ViewportResizeListener(QObject):
    """Calls ``callback`` whenever the watched top-level window is resized."""

    def __init__(self, window: QWidget, callback: Callable[[], None]) -> None:
        super().__init__()
        self._window = window
        self._callback = callback
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    @property
    def window(self) -> QWidget:
        return self._window

    def install(self) -> None:
        if self._installed or not _alive(self._window):
            return
        self._window.installEventFilter(self)
        self._installed = True
        _LOGGER.debug("Viewport resize listener installed on %s", type(self._window).__name__)

    def uninstall(self) -> None:
        if not self._installed:
            return
        if _alive(self._window):
            self._window.removeEventFilter(self)
        self._installed = False
        _LOGGER.debug("Viewport resize listener removed")

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if watched is self._window and event.type() == QEvent.Type.Resize:
            self._callback()
        return False


class ElementResizeObserver(QObject):
    """Reference-counted resize observation of individual target widgets."""

    def __init__(self, callback: Callable[[], None]) -> None:
        super().__init__()
        self._callback = callback
        self._observed: Dict[QWidget, int] = {}

    def observe(self, widget: QWidget) -> None:
        if not _alive(widget):
            return
        count = self._observed.get(widget, 0)
        if count == 0:
            widget.installEventFilter(self)
        self._observed[widget] = count + 1

    def unobserve(self, widget: QWidget) -> None:
        count = self._observed.get(widget)
        if count is None:
            return
        if count > 1:
            self._observed[widget] = count - 1
            return
        del self._observed[widget]
        if _alive(widget):
            widget.removeEventFilter(self)

    def disconnect_all(self) -> None:
        for widget in list(self._observed):
            if _alive(widget):
                widget.removeEventFilter(self)
        self._observed.clear()

    def is_observing(self, widget: QWidget) -> bool:
        return widget in self._observed

    def observed_count(self) -> int:
        return len(self._observed)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if event.type() == QEvent.Type.Resize and watched in self._observed:
            self._callback()
        return False
