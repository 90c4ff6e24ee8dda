"""Widget-tree accessors the engine uses in place of a DOM."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

from PyQt6 import sip
from PyQt6.QtCore import QPoint
from PyQt6.QtWidgets import QWidget

from beacon_overlay.geometry import TargetBox, has_fixed_context
from beacon_overlay.marker import BeaconMarker

FIXED_PROPERTY = "position"
FIXED_VALUE = "fixed"


def is_alive(widget: Any) -> bool:
    return isinstance(widget, QWidget) and not sip.isdeleted(widget)


def iter_elements(root: QWidget) -> Iterator[QWidget]:
    """Yield ``root`` and its descendants in document (depth-first) order, skipping markers."""
    if not is_alive(root):
        return
    yield root
    for child in root.findChildren(QWidget):
        if isinstance(child, BeaconMarker):
            continue
        yield child


def element_attributes(widget: QWidget) -> Dict[str, Any]:
    """Return the widget's dynamic properties as ``{name: value}``."""
    attributes: Dict[str, Any] = {}
    for raw_name in widget.dynamicPropertyNames():
        name = raw_name.data().decode("utf-8", errors="replace")
        value = widget.property(name)
        attributes[name] = "" if value is None else value
    return attributes


def find_element(root: QWidget, locator: Any) -> Optional[QWidget]:
    """Resolve a widget handle or an ``objectName`` locator (``#name`` accepted)."""
    if isinstance(locator, QWidget):
        return locator if is_alive(locator) else None
    if not isinstance(locator, str) or not is_alive(root):
        return None
    name = locator.strip()
    if name.startswith("#"):
        name = name[1:]
    if not name:
        return None
    if root.objectName() == name:
        return root
    found = root.findChild(QWidget, name)
    if found is None or isinstance(found, BeaconMarker):
        return None
    return found


def _parent_widget(widget: QWidget) -> Optional[QWidget]:
    return widget.parentWidget()


def _declares_fixed(widget: QWidget) -> bool:
    value = widget.property(FIXED_PROPERTY)
    return isinstance(value, str) and value.strip().lower() == FIXED_VALUE


def is_fixed(widget: QWidget, root: Optional[QWidget]) -> bool:
    return has_fixed_context(widget, root, parent_fn=_parent_widget, is_fixed_fn=_declares_fixed)


def marker_host(target: QWidget, root: QWidget) -> QWidget:
    """Markers live beside their target, or directly under the root when the target has no usable parent."""
    parent = target.parentWidget()
    if parent is None or parent is root:
        return root
    return parent


def target_box(target: QWidget, host: QWidget) -> TargetBox:
    """Return the target rectangle expressed in ``host`` coordinates."""
    if target is host:
        origin = QPoint(0, 0)
    elif host.isAncestorOf(target):
        parent = target.parentWidget()
        origin = target.pos() if parent is host else parent.mapTo(host, target.pos())
    else:
        origin = host.mapFromGlobal(target.mapToGlobal(QPoint(0, 0)))
    return TargetBox(left=origin.x(), top=origin.y(), width=target.width(), height=target.height())
