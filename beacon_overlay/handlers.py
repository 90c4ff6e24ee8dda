"""Named click handlers that declarative beacons can refer to."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, Optional

_LOGGER = logging.getLogger("BeaconOverlay.Parser")

ClickHandler = Callable[[Any, Any], None]


class ClickHandlerRegistry:
    """Maps handler names to callables taking ``(event, descriptor)``."""

    def __init__(self, handlers: Optional[Dict[str, ClickHandler]] = None) -> None:
        self._handlers: Dict[str, ClickHandler] = {}
        for name, handler in (handlers or {}).items():
            self.register(name, handler)

    def register(self, name: str, handler: Optional[ClickHandler] = None):
        """Register ``handler`` under ``name``; usable as a decorator when ``handler`` is omitted."""

        key = (name or "").strip()
        if not key:
            raise ValueError("click handler name must be a non-empty string")

        def _store(func: ClickHandler) -> ClickHandler:
            if not callable(func):
                raise TypeError(f"click handler {key!r} is not callable")
            self._handlers[key] = func
            return func

        if handler is None:
            return _store
        return _store(handler)

    def unregister(self, name: str) -> None:
        self._handlers.pop((name or "").strip(), None)

    def get(self, name: str) -> ClickHandler:
        return self._handlers[(name or "").strip()]

    def resolve(self, name: Optional[str]) -> Optional[ClickHandler]:
        """Return the handler for ``name`` or None, logging names that are not registered."""

        key = (name or "").strip()
        if not key:
            return None
        handler = self._handlers.get(key)
        if handler is None:
            _LOGGER.warning("No click handler registered under %r; beacon click ignored", key)
        return handler

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip() in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)
