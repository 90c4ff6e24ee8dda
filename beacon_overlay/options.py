"""Engine options and the JSON loader used to bootstrap them."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from beacon_overlay.descriptors import DEFAULT_DATA_PREFIX
from beacon_overlay.geometry import DEFAULT_BOUNDARY, DEFAULT_POSITION, POSITIONS

_LOGGER = logging.getLogger("BeaconOverlay.Engine")


@dataclass(frozen=True)
class BeaconOptions:
    """Defaults applied to every beacon an engine registers."""

    position: str = DEFAULT_POSITION
    boundary: str = DEFAULT_BOUNDARY
    data_prefix: str = DEFAULT_DATA_PREFIX
    beacon_class: str = "gc-beacon"
    fixed_class: str = "gc-beacon-fixed"
    hidden_class: str = "gc-beacon-hidden"
    marker_width: int = 16
    marker_height: int = 16
    observe_element_resize: bool = True


_OPTION_NAMES = frozenset(item.name for item in fields(BeaconOptions))
_ALIASES = {
    "dataPrefix": "data_prefix",
    "beaconClass": "beacon_class",
    "fixedClass": "fixed_class",
    "hiddenClass": "hidden_class",
    "markerWidth": "marker_width",
    "markerHeight": "marker_height",
    "observeElementResize": "observe_element_resize",
}


def _str(value: Any, fallback: str) -> str:
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback


def _int(value: Any, fallback: int) -> int:
    if value is None:
        return fallback
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return fallback


def _bool(value: Any, fallback: bool) -> bool:
    if value is None:
        return fallback
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
        return fallback
    return bool(value)


def _coerce(name: str, value: Any, current: Any) -> Any:
    if name in {"marker_width", "marker_height"}:
        return _int(value, current)
    if name == "observe_element_resize":
        return _bool(value, current)
    if name == "position":
        token = _str(value, current).lower()
        if token not in POSITIONS:
            _LOGGER.debug("Unknown default position %r; beacons will fall back to center", token)
        return token
    return _str(value, current)


def merge_options(base: Optional[BeaconOptions], overrides: Optional[Mapping[str, Any]]) -> BeaconOptions:
    """Return ``base`` with ``overrides`` applied; unknown keys are ignored."""
    options = base if base is not None else BeaconOptions()
    if not overrides:
        return options
    if isinstance(overrides, BeaconOptions):
        return overrides
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        name = _ALIASES.get(key, key)
        if name not in _OPTION_NAMES:
            _LOGGER.debug("Ignoring unknown beacon option %r", key)
            continue
        changes[name] = _coerce(name, value, getattr(options, name))
    return replace(options, **changes)


def load_options(path: Path, base: Optional[BeaconOptions] = None) -> BeaconOptions:
    """Read option overrides from a JSON object file, falling back to ``base``/defaults."""
    defaults = base if base is not None else BeaconOptions()
    try:
        raw = path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return defaults

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        _LOGGER.warning("Beacon options file %s is not valid JSON; using defaults", path)
        return defaults
    if not isinstance(data, dict):
        return defaults
    return merge_options(defaults, data)
