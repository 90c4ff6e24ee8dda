"""Per-engine store of live marker widgets keyed by descriptor identity."""

from __future__ import annotations

from typing import Any, Dict, Generic, Iterator, Optional, Tuple, TypeVar

MarkerT = TypeVar("MarkerT")


class MarkerCache(Generic[MarkerT]):
    """Descriptor -> marker mapping plus the slot for the installed viewport listener."""

    def __init__(self) -> None:
        self._markers: Dict[Any, MarkerT] = {}
        self.resize_listener: Optional[Any] = None

    def set(self, descriptor: Any, marker: MarkerT) -> None:
        self._markers[descriptor] = marker

    def get(self, descriptor: Any) -> Optional[MarkerT]:
        if descriptor is None:
            return None
        return self._markers.get(descriptor)

    def pop(self, descriptor: Any) -> Optional[MarkerT]:
        if descriptor is None:
            return None
        return self._markers.pop(descriptor, None)

    def items(self) -> Iterator[Tuple[Any, MarkerT]]:
        return iter(list(self._markers.items()))

    def clear(self) -> None:
        self._markers.clear()
        self.resize_listener = None

    def __contains__(self, descriptor: object) -> bool:
        return descriptor in self._markers

    def __len__(self) -> int:
        return len(self._markers)
