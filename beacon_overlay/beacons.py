"""Beacon lifecycle: marker creation, placement, visibility, and teardown."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from PyQt6 import sip
from PyQt6.QtWidgets import QWidget

from beacon_overlay.descriptors import BeaconDescriptor, BeaconSource, parse
from beacon_overlay.geometry import MarkerSize, compute_position, normalise_boundary, normalise_position
from beacon_overlay.handlers import ClickHandlerRegistry
from beacon_overlay.marker import BeaconMarker
from beacon_overlay.marker_cache import MarkerCache
from beacon_overlay.options import BeaconOptions, merge_options
from beacon_overlay.qt_document import (
    element_attributes,
    find_element,
    is_fixed,
    iter_elements,
    marker_host,
    target_box,
)
from beacon_overlay.resize_sync import ElementResizeObserver, ViewportResizeListener

_LOGGER = logging.getLogger("BeaconOverlay.Engine")

BeaconKey = Union[BeaconDescriptor, Any]


class Beacons:
    """Owns a set of beacon descriptors and the marker widgets drawn for them.

    ``root`` plays the role of the document body: declarative beacons are
    scanned from its widget tree, locator strings are resolved under it, and
    markers whose target has no usable parent are placed directly inside it.
    The marker cache belongs to this instance only.
    """

    def __init__(
        self,
        root: QWidget,
        beacons: BeaconSource = None,
        options: Optional[Union[BeaconOptions, Mapping[str, Any]]] = None,
        *,
        handlers: Optional[ClickHandlerRegistry] = None,
    ) -> None:
        self._root = root
        self._options = BeaconOptions()
        self._handlers = handlers if handlers is not None else ClickHandlerRegistry()
        self._beacons: List[BeaconDescriptor] = []
        self._cache: MarkerCache[BeaconMarker] = MarkerCache()
        self._observed_elements: Dict[BeaconDescriptor, QWidget] = {}
        self._element_observer: Optional[ElementResizeObserver] = None

        self.configure(options)
        self.set_beacons(beacons)

        self.init()

    def init(self) -> None:
        """Hook for subclasses that need extra setup once the initial beacons exist."""

    # Configuration -------------------------------------------------------

    @property
    def root(self) -> QWidget:
        return self._root

    @property
    def options(self) -> BeaconOptions:
        return self._options

    @property
    def handlers(self) -> ClickHandlerRegistry:
        return self._handlers

    @property
    def cache(self) -> MarkerCache[BeaconMarker]:
        return self._cache

    def configure(self, options: Optional[Union[BeaconOptions, Mapping[str, Any]]] = None) -> "Beacons":
        self._options = merge_options(BeaconOptions(), options)
        return self

    # Registration --------------------------------------------------------

    def set_beacons(self, source: BeaconSource = None) -> "Beacons":
        self.remove_all()

        options = self._options
        self._beacons = parse(
            source,
            elements=lambda: iter_elements(self._root),
            attributes_fn=element_attributes,
            prefix=options.data_prefix,
            default_position=options.position,
            default_boundary=options.boundary,
            handlers=self._handlers,
        )

        created = 0
        for descriptor in list(self._beacons):
            if descriptor.element is None:
                _LOGGER.debug("Beacon %r has no target element; skipping", descriptor.id)
                continue
            element = find_element(self._root, descriptor.element)
            if element is None:
                _LOGGER.info("Beacon %r target %r could not be resolved; skipping", descriptor.id, descriptor.element)
                continue

            marker = self._create_marker(descriptor, marker_host(element, self._root))
            marker.set_hidden_state(True, options.hidden_class)
            if is_fixed(element, self._root):
                marker.add_class(options.fixed_class)

            self._cache.set(descriptor, marker)
            self._apply_position(element, marker, descriptor)
            self._observe(descriptor, element)
            created += 1

        if self._beacons:
            self._add_viewport_listener()

        _LOGGER.debug("Registered %d beacon(s); %d marker(s) created", len(self._beacons), created)
        return self

    @property
    def beacons(self) -> List[BeaconDescriptor]:
        return list(self._beacons)

    def by_identity(self, descriptor: Any, default: Optional[BeaconDescriptor] = None) -> Optional[BeaconDescriptor]:
        """Return ``descriptor`` itself when it is one of the registered objects."""
        for item in self._beacons:
            if item is descriptor:
                return item
        return default

    def by_id(self, beacon_id: Any, default: Optional[BeaconDescriptor] = None) -> Optional[BeaconDescriptor]:
        """Return the first registered descriptor whose ``id`` equals ``beacon_id``."""
        if beacon_id is None:
            return default
        for item in self._beacons:
            if item.id == beacon_id:
                return item
        return default

    def _lookup(self, key: BeaconKey) -> Optional[BeaconDescriptor]:
        if isinstance(key, BeaconDescriptor):
            return self.by_identity(key)
        return self.by_id(key)

    def marker_for(self, key: BeaconKey) -> Optional[BeaconMarker]:
        marker = self._cache.get(self._lookup(key))
        if marker is None or sip.isdeleted(marker):
            return None
        return marker

    def resolve_element(self, key: BeaconKey) -> Optional[QWidget]:
        """Resolve the target widget now; unregistered descriptors are resolved too."""
        descriptor = key if isinstance(key, BeaconDescriptor) else self.by_id(key)
        if descriptor is None or descriptor.element is None:
            return None
        return find_element(self._root, descriptor.element)

    def element_exists(self, key: BeaconKey, default: Optional[QWidget] = None) -> bool:
        """True when the target resolves and is not the caller's fallback widget."""
        element = self.resolve_element(key)
        return element is not None and element is not default

    # Visibility ----------------------------------------------------------

    def show(self, key: BeaconKey, force: bool = False) -> "Beacons":
        descriptor = self._lookup(key)
        if descriptor is None:
            _LOGGER.debug("show(%r): no such beacon", key)
            return self
        if self.marker_for(descriptor) is None:
            return self
        if not force and not descriptor.allows_show():
            return self
        # The gate may have removed this beacon or replaced the whole set.
        if self.by_identity(descriptor) is None:
            return self
        marker = self.marker_for(descriptor)
        if marker is not None:
            marker.set_hidden_state(False, self._options.hidden_class)
        return self

    def show_all(self, force: bool = False) -> "Beacons":
        for descriptor in list(self._beacons):
            self.show(descriptor, force)
        return self

    def hide(self, key: BeaconKey) -> "Beacons":
        descriptor = self._lookup(key)
        if descriptor is None:
            _LOGGER.debug("hide(%r): no such beacon", key)
            return self
        marker = self.marker_for(descriptor)
        if marker is not None:
            marker.set_hidden_state(True, self._options.hidden_class)
        return self

    def hide_all(self) -> "Beacons":
        for descriptor in list(self._beacons):
            self.hide(descriptor)
        return self

    # Removal -------------------------------------------------------------

    def remove(self, key: BeaconKey) -> "Beacons":
        descriptor = self._lookup(key)
        if descriptor is None:
            _LOGGER.debug("remove(%r): no such beacon", key)
        else:
            marker = self._cache.pop(descriptor)
            self._discard(descriptor)
            if marker is not None:
                self._dispose_marker(marker)
            self._unobserve(descriptor)

        if not self._beacons:
            self._remove_viewport_listener()
        return self

    def remove_all(self) -> "Beacons":
        for descriptor in list(self._beacons):
            self.remove(descriptor)

        self._beacons = []
        self._unobserve_all()
        self._remove_viewport_listener()
        return self

    def _discard(self, descriptor: BeaconDescriptor) -> None:
        for index, item in enumerate(self._beacons):
            if item is descriptor:
                del self._beacons[index]
                return

    @staticmethod
    def _dispose_marker(marker: BeaconMarker) -> None:
        if sip.isdeleted(marker):
            return
        marker.hide()
        marker.setParent(None)
        marker.deleteLater()

    # Placement -----------------------------------------------------------

    def refresh(self) -> "Beacons":
        for descriptor in list(self._beacons):
            if descriptor.element is None:
                continue
            element = find_element(self._root, descriptor.element)
            marker = self.marker_for(descriptor)
            if element is not None and marker is not None:
                self._apply_position(element, marker, descriptor)
        return self

    def _create_marker(self, descriptor: BeaconDescriptor, host: QWidget) -> BeaconMarker:
        marker = BeaconMarker(
            descriptor,
            classes=(descriptor.class_name or "", self._options.beacon_class),
            on_click=descriptor.on_click,
            parent=host,
        )
        marker.resize(self._options.marker_width, self._options.marker_height)
        return marker

    def _apply_position(self, element: QWidget, marker: BeaconMarker, descriptor: BeaconDescriptor) -> None:
        position = normalise_position(descriptor.position or self._options.position)
        boundary = normalise_boundary(descriptor.boundary or self._options.boundary)
        host = marker.parentWidget() or self._root

        left, top = compute_position(
            target_box(element, host),
            MarkerSize(width=marker.width(), height=marker.height()),
            position,
            boundary,
        )
        marker.set_placement(position, boundary)
        marker.move(int(round(left)), int(round(top)))

    # Resize synchronisation ----------------------------------------------

    def _observe(self, descriptor: BeaconDescriptor, element: QWidget) -> None:
        if not self._options.observe_element_resize:
            return
        if self._element_observer is None:
            self._element_observer = ElementResizeObserver(self.refresh)
        self._element_observer.observe(element)
        self._observed_elements[descriptor] = element

    def _unobserve(self, descriptor: BeaconDescriptor) -> None:
        element = self._observed_elements.pop(descriptor, None)
        if element is not None and self._element_observer is not None:
            self._element_observer.unobserve(element)

    def _unobserve_all(self) -> None:
        self._observed_elements.clear()
        if self._element_observer is not None:
            self._element_observer.disconnect_all()

    @property
    def viewport_listener(self) -> Optional[ViewportResizeListener]:
        return self._cache.resize_listener

    @property
    def element_observer(self) -> Optional[ElementResizeObserver]:
        return self._element_observer

    def _add_viewport_listener(self) -> None:
        if self._cache.resize_listener is not None:
            return
        listener = ViewportResizeListener(self._root.window(), self.refresh)
        listener.install()
        self._cache.resize_listener = listener

    def _remove_viewport_listener(self) -> None:
        listener = self._cache.resize_listener
        if listener is None:
            return
        listener.uninstall()
        self._cache.resize_listener = None
