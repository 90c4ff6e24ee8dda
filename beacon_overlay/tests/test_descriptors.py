from __future__ import annotations

import logging

import pytest

from beacon_overlay.descriptors import (
    BeaconDescriptor,
    DeclarativeParser,
    is_declarative_source,
    parse,
    parse_programmatic,
    split_ids,
)
from beacon_overlay.handlers import ClickHandlerRegistry


def _parse(source, elements, **kwargs):
    return parse(source, elements=lambda: list(elements), attributes_fn=lambda el: el, **kwargs)


def test_scoped_attribute_overrides_global_attribute():
    element = {
        "data-beacon": "a,b",
        "data-beacon-position": "left",
        "data-beacon-a-position": "top",
    }

    descriptors = _parse(None, [element])

    assert [d.id for d in descriptors] == ["a", "b"]
    assert descriptors[0].position == "top"
    assert descriptors[1].position == "left"
    assert all(d.element is element for d in descriptors)


def test_defaults_fill_in_missing_fields():
    element = {"data-beacon": "only"}

    [descriptor] = _parse(None, [element], default_position="bottom", default_boundary="outer")

    assert descriptor.position == "bottom"
    assert descriptor.boundary == "outer"
    assert descriptor.class_name is None
    assert descriptor.extra == {}


def test_requested_ids_filter_tokens_and_keep_document_order():
    first = {"data-beacon": "intro, save"}
    second = {"data-beacon": "save"}
    third = {"data-beacon": "cancel"}

    descriptors = _parse("save , cancel", [first, second, third])

    assert [(d.id, d.element) for d in descriptors] == [("save", first), ("save", second), ("cancel", third)]


def test_id_list_source_matches_exact_tokens_only():
    element = {"data-beacon": "saved,save-as"}

    assert _parse(["save"], [element]) == []
    assert [d.id for d in _parse(["save-as"], [element])] == ["save-as"]


def test_elements_without_beacon_attribute_are_ignored():
    descriptors = _parse(None, [{"data-beacon": ""}, {"title": "plain"}, {"data-beacon": "x"}])

    assert [d.id for d in descriptors] == ["x"]


def test_extra_fields_and_class_are_captured():
    element = {
        "data-beacon": "tip",
        "data-beacon-class": "pulse big",
        "data-beacon-colour": "red",
        "data-beacon-tip-colour": "green",
        "data-beacon-tip-label": "Try me",
    }

    [descriptor] = _parse(None, [element])

    assert descriptor.class_name == "pulse big"
    assert descriptor.extra == {"colour": "green", "label": "Try me"}


def test_attribute_names_are_case_insensitive():
    element = {"Data-Beacon": "a", "DATA-BEACON-A-BOUNDARY": "outer"}

    [descriptor] = _parse(None, [element])

    assert descriptor.boundary == "outer"


def test_custom_prefix():
    element = {"x-tour": "a", "x-tour-position": "right", "data-beacon": "ignored"}

    [descriptor] = _parse(None, [element], prefix="x-tour")

    assert descriptor.id == "a"
    assert descriptor.position == "right"


def test_onclick_resolves_registered_handler():
    calls = []
    handlers = ClickHandlerRegistry({"log": lambda event, descriptor: calls.append((event, descriptor.id))})
    element = {"data-beacon": "a", "data-beacon-onclick": "log"}

    [descriptor] = _parse(None, [element], handlers=handlers)
    descriptor.on_click("evt", descriptor)

    assert calls == [("evt", "a")]
    assert "onclick" not in descriptor.extra


def test_onclick_source_text_is_never_evaluated(caplog):
    handlers = ClickHandlerRegistry()
    element = {"data-beacon": "a", "data-beacon-onclick": "lambda e: __import__('os')"}

    with caplog.at_level(logging.WARNING, logger="BeaconOverlay.Parser"):
        [descriptor] = _parse(None, [element], handlers=handlers)

    assert descriptor.on_click is None
    assert "No click handler registered" in caplog.text


def test_elements_are_not_scanned_for_programmatic_input():
    def _explode():
        raise AssertionError("document scanned")

    descriptors = parse([{"element": "x"}], elements=_explode, attributes_fn=lambda el: el)

    assert [d.id for d in descriptors] == [0]


def test_programmatic_ids_default_to_input_index():
    descriptors = parse_programmatic([{"element": "a"}, {"id": "named", "element": "b"}, {"id": "", "element": "c"}])

    assert [d.id for d in descriptors] == [0, "named", 2]


def test_programmatic_single_mapping_and_aliases():
    gate = lambda: False  # noqa: E731

    [descriptor] = parse_programmatic(
        {"element": "#save", "class": "pulse", "canShow": gate, "position": "top", "tooltip": "Save"}
    )

    assert descriptor.id == 0
    assert descriptor.class_name == "pulse"
    assert descriptor.can_show is gate
    assert descriptor.extra == {"tooltip": "Save"}


def test_programmatic_descriptor_objects_keep_identity():
    mine = BeaconDescriptor(element="#save")

    [descriptor] = parse_programmatic(mine)

    assert descriptor is mine
    assert descriptor.id == 0


def test_programmatic_handler_name_is_resolved():
    handler = lambda event, descriptor: None  # noqa: E731
    handlers = ClickHandlerRegistry({"go": handler})

    [descriptor] = parse_programmatic([{"element": "x", "on_click": "go"}], handlers)

    assert descriptor.on_click is handler


def test_programmatic_rejects_unknown_shapes():
    with pytest.raises(TypeError):
        parse_programmatic([{"element": "x"}, 42])
    with pytest.raises(TypeError):
        parse_programmatic([{"element": "x", "on_click": 3}])


def test_descriptors_hash_by_identity():
    one = BeaconDescriptor(id="same")
    two = BeaconDescriptor(id="same")

    assert one != two
    assert len({one, two}) == 2


def test_allows_show_gate():
    assert BeaconDescriptor().allows_show() is True
    assert BeaconDescriptor(can_show=False).allows_show() is False
    assert BeaconDescriptor(can_show=True).allows_show() is True
    assert BeaconDescriptor(can_show=lambda: False).allows_show() is False
    assert BeaconDescriptor(can_show=lambda: True).allows_show() is True


def test_source_classification():
    assert is_declarative_source(None)
    assert is_declarative_source("")
    assert is_declarative_source("a,b")
    assert is_declarative_source([])
    assert is_declarative_source(["a", "b"])
    assert not is_declarative_source([{"id": "a"}])
    assert not is_declarative_source({"id": "a"})
    assert not is_declarative_source(BeaconDescriptor())


def test_split_ids():
    assert split_ids(None) is None
    assert split_ids("") is None
    assert split_ids([]) is None
    assert split_ids(" a , ,b ") == ["a", "b"]


def test_declarative_parser_reusable_across_scans():
    parser = DeclarativeParser(default_position="top")

    first = parser.parse(None, [{"data-beacon": "a"}], lambda el: el)
    second = parser.parse("a", [{"data-beacon": "a"}], lambda el: el)

    assert first[0] is not second[0]
    assert first[0].position == second[0].position == "top"
