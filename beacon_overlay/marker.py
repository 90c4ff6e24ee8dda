"""Overlay widget drawn on top of a beacon target."""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QMouseEvent
from PyQt6.QtWidgets import QWidget

CLASS_PROPERTY = "class"
POSITION_PROPERTY = "data-beacon-position"
BOUNDARY_PROPERTY = "data-beacon-boundary"


class BeaconMarker(QWidget):
    """A styleable marker; classes live in the ``class`` property for QSS selectors."""

    def __init__(
        self,
        descriptor: Any,
        *,
        classes: Iterable[str] = (),
        on_click: Optional[Callable[[QMouseEvent, Any], None]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self._descriptor = descriptor
        self._on_click = on_click
        self._classes: List[str] = []
        for name in classes:
            self._append_class(name)
        self._sync_classes()

    @property
    def descriptor(self) -> Any:
        return self._descriptor

    def classes(self) -> List[str]:
        return list(self._classes)

    def has_class(self, name: str) -> bool:
        return name in self._classes

    def add_class(self, name: str) -> None:
        if self._append_class(name):
            self._sync_classes()

    def remove_class(self, name: str) -> None:
        if name in self._classes:
            self._classes.remove(name)
            self._sync_classes()

    def set_hidden_state(self, hidden: bool, hidden_class: str) -> None:
        if hidden:
            self.add_class(hidden_class)
        else:
            self.remove_class(hidden_class)
        self.setVisible(not hidden)
        if not hidden:
            self.raise_()

    def set_placement(self, position: str, boundary: str) -> None:
        self.setProperty(POSITION_PROPERTY, position)
        self.setProperty(BOUNDARY_PROPERTY, boundary)
        self._repolish()

    def placement(self) -> tuple[str, str]:
        return str(self.property(POSITION_PROPERTY)), str(self.property(BOUNDARY_PROPERTY))

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if self._on_click is None:
            super().mousePressEvent(event)
            return
        # Consume the press so the target underneath does not react to it as well.
        event.accept()
        self._on_click(event, self._descriptor)

    def _append_class(self, name: str) -> bool:
        added = False
        for token in str(name or "").split():
            if token not in self._classes:
                self._classes.append(token)
                added = True
        return added

    def _sync_classes(self) -> None:
        self.setProperty(CLASS_PROPERTY, list(self._classes))
        self._repolish()

    def _repolish(self) -> None:
        style = self.style()
        if style is None:
            return
        style.unpolish(self)
        style.polish(self)
