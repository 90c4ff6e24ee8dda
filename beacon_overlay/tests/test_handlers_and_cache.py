from __future__ import annotations

import pytest

from beacon_overlay.descriptors import BeaconDescriptor
from beacon_overlay.handlers import ClickHandlerRegistry
from beacon_overlay.marker_cache import MarkerCache


def test_registry_register_and_decorator():
    registry = ClickHandlerRegistry()

    def direct(event, descriptor):
        return None

    registry.register("direct", direct)

    @registry.register("decorated")
    def decorated(event, descriptor):
        return None

    assert registry.get("direct") is direct
    assert registry.resolve(" decorated ") is decorated
    assert "direct" in registry
    assert sorted(registry) == ["decorated", "direct"]
    assert len(registry) == 2


def test_registry_rejects_bad_entries():
    registry = ClickHandlerRegistry()

    with pytest.raises(ValueError):
        registry.register("  ", lambda e, d: None)
    with pytest.raises(TypeError):
        registry.register("nope", "not callable")  # type: ignore[arg-type]


def test_registry_lookup_misses():
    registry = ClickHandlerRegistry()

    assert registry.resolve(None) is None
    assert registry.resolve("missing") is None
    with pytest.raises(KeyError):
        registry.get("missing")

    registry.register("gone", lambda e, d: None)
    registry.unregister("gone")
    assert "gone" not in registry


def test_cache_keys_on_descriptor_identity():
    cache = MarkerCache()
    first = BeaconDescriptor(id="dup")
    second = BeaconDescriptor(id="dup")

    cache.set(first, "marker-1")
    cache.set(second, "marker-2")

    assert cache.get(first) == "marker-1"
    assert cache.get(second) == "marker-2"
    assert len(cache) == 2
    assert cache.pop(first) == "marker-1"
    assert first not in cache
    assert cache.get(None) is None
    assert cache.pop(None) is None


def test_cache_listener_slot_is_separate_from_markers():
    cache = MarkerCache()
    cache.resize_listener = object()
    cache.set(BeaconDescriptor(), "marker")

    assert len(cache) == 1
    assert [marker for _, marker in cache.items()] == ["marker"]

    cache.clear()
    assert len(cache) == 0
    assert cache.resize_listener is None
