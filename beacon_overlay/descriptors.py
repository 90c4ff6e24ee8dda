"""Beacon descriptors and the parsers that build them."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from beacon_overlay.geometry import DEFAULT_BOUNDARY, DEFAULT_POSITION
from beacon_overlay.handlers import ClickHandler, ClickHandlerRegistry

_LOGGER = logging.getLogger("BeaconOverlay.Parser")

DEFAULT_DATA_PREFIX = "data-beacon"

CanShow = Union[bool, Callable[[], Any], None]


@dataclass(eq=False)
class BeaconDescriptor:
    """One annotation target and its rendering preferences.

    Descriptors hash by identity: two descriptors sharing an ``id`` are still
    distinct keys for marker lookups.
    """

    id: Any = None
    element: Any = None
    position: Optional[str] = None
    boundary: Optional[str] = None
    class_name: Optional[str] = None
    on_click: Optional[ClickHandler] = None
    can_show: CanShow = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def allows_show(self) -> bool:
        """Evaluate the ``can_show`` gate; an unset gate allows showing."""
        gate = self.can_show
        if gate is None:
            return True
        if callable(gate):
            return bool(gate())
        return bool(gate)


BeaconSource = Union[None, str, Sequence[str], Mapping[str, Any], BeaconDescriptor, Sequence[Any]]


def is_declarative_source(source: Any) -> bool:
    """True when ``source`` names beacon ids to scan for rather than describing beacons."""
    if source is None or isinstance(source, str):
        return True
    if isinstance(source, (list, tuple)):
        return all(isinstance(item, str) for item in source)
    return False


def split_ids(value: Union[None, str, Sequence[str]]) -> Optional[List[str]]:
    """Normalise a comma-joined string or a list of ids; None means "every id"."""
    if value is None:
        return None
    items = value.split(",") if isinstance(value, str) else list(value)
    tokens = [str(item).strip() for item in items]
    tokens = [token for token in tokens if token]
    return tokens or None


class DeclarativeParser:
    """Builds descriptors from ``data-beacon`` style attributes on document elements."""

    def __init__(
        self,
        *,
        prefix: str = DEFAULT_DATA_PREFIX,
        default_position: str = DEFAULT_POSITION,
        default_boundary: str = DEFAULT_BOUNDARY,
        handlers: Optional[ClickHandlerRegistry] = None,
    ) -> None:
        self._prefix = prefix.lower()
        self._default_position = default_position
        self._default_boundary = default_boundary
        self._handlers = handlers
        self._global_re = re.compile(rf"^{re.escape(self._prefix)}-([^-]+)$")

    def parse(
        self,
        ids: Union[None, str, Sequence[str]],
        elements: Iterable[Any],
        attributes_fn: Callable[[Any], Mapping[str, Any]],
    ) -> List[BeaconDescriptor]:
        wanted = split_ids(ids)
        descriptors: List[BeaconDescriptor] = []
        for element in elements:
            attributes = {str(name).lower(): value for name, value in attributes_fn(element).items()}
            raw_ids = attributes.get(self._prefix)
            if not raw_ids:
                continue
            for beacon_id in split_ids(str(raw_ids)) or []:
                if wanted is not None and beacon_id not in wanted:
                    continue
                descriptors.append(self._build(beacon_id, element, attributes))
        _LOGGER.debug(
            "Parsed %d declarative beacon(s) for ids=%s",
            len(descriptors),
            ",".join(wanted) if wanted else "*",
        )
        return descriptors

    def _build(self, beacon_id: str, element: Any, attributes: Mapping[str, Any]) -> BeaconDescriptor:
        scoped_re = re.compile(rf"^{re.escape(self._prefix)}-{re.escape(beacon_id.lower())}-([^-]+)$")
        global_attrs: Dict[str, Any] = {}
        scoped_attrs: Dict[str, Any] = {}
        for name, value in attributes.items():
            match = self._global_re.match(name)
            if match:
                global_attrs[match.group(1)] = value
                continue
            match = scoped_re.match(name)
            if match:
                scoped_attrs[match.group(1)] = value

        fields: Dict[str, Any] = {"position": self._default_position, "boundary": self._default_boundary}
        fields.update(global_attrs)
        fields.update(scoped_attrs)

        on_click = None
        handler_name = fields.pop("onclick", None)
        if handler_name:
            if self._handlers is None:
                _LOGGER.warning("Beacon %r names click handler %r but no registry was supplied", beacon_id, handler_name)
            else:
                on_click = self._handlers.resolve(str(handler_name))

        return BeaconDescriptor(
            id=beacon_id,
            element=element,
            position=str(fields.pop("position")),
            boundary=str(fields.pop("boundary")),
            class_name=fields.pop("class", None) or None,
            on_click=on_click,
            extra=fields,
        )


_PROGRAMMATIC_ALIASES = {
    "class": "class_name",
    "className": "class_name",
    "onClick": "on_click",
    "onclick": "on_click",
    "canShow": "can_show",
}
_DESCRIPTOR_FIELDS = ("id", "element", "position", "boundary", "class_name", "on_click", "can_show")


def _coerce_on_click(value: Any, handlers: Optional[ClickHandlerRegistry]) -> Optional[ClickHandler]:
    if value is None or callable(value):
        return value
    if isinstance(value, str):
        if handlers is None:
            _LOGGER.warning("Click handler %r given by name but no registry was supplied", value)
            return None
        return handlers.resolve(value)
    raise TypeError(f"on_click must be callable or a handler name, got {type(value).__name__}")


def _descriptor_from_mapping(
    item: Mapping[str, Any],
    index: int,
    handlers: Optional[ClickHandlerRegistry],
) -> BeaconDescriptor:
    values: Dict[str, Any] = {}
    extra: Dict[str, Any] = dict(item.get("extra") or {})
    for key, value in item.items():
        if key == "extra":
            continue
        name = _PROGRAMMATIC_ALIASES.get(key, key)
        if name in _DESCRIPTOR_FIELDS:
            values[name] = value
        else:
            extra[key] = value
    if values.get("id") in (None, ""):
        values["id"] = index
    values["on_click"] = _coerce_on_click(values.get("on_click"), handlers)
    return BeaconDescriptor(extra=extra, **values)


def parse_programmatic(
    source: Any,
    handlers: Optional[ClickHandlerRegistry] = None,
) -> List[BeaconDescriptor]:
    """Build descriptors from caller objects; ids default to the input index."""
    items = list(source) if isinstance(source, (list, tuple)) else [source]
    descriptors: List[BeaconDescriptor] = []
    for index, item in enumerate(items):
        if isinstance(item, BeaconDescriptor):
            if item.id in (None, ""):
                item.id = index
            item.on_click = _coerce_on_click(item.on_click, handlers)
            descriptors.append(item)
        elif isinstance(item, Mapping):
            descriptors.append(_descriptor_from_mapping(item, index, handlers))
        else:
            raise TypeError(f"Unsupported beacon definition at index {index}: {type(item).__name__}")
    return descriptors


def parse(
    source: BeaconSource,
    *,
    elements: Callable[[], Iterable[Any]],
    attributes_fn: Callable[[Any], Mapping[str, Any]],
    prefix: str = DEFAULT_DATA_PREFIX,
    default_position: str = DEFAULT_POSITION,
    default_boundary: str = DEFAULT_BOUNDARY,
    handlers: Optional[ClickHandlerRegistry] = None,
) -> List[BeaconDescriptor]:
    """Dispatch ``source`` to the declarative scan or the programmatic builder.

    ``elements`` is only called for declarative sources, so the document scan
    is skipped when the caller passes descriptor objects.
    """

    if is_declarative_source(source):
        parser = DeclarativeParser(
            prefix=prefix,
            default_position=default_position,
            default_boundary=default_boundary,
            handlers=handlers,
        )
        return parser.parse(source, elements(), attributes_fn)
    return parse_programmatic(source, handlers)
