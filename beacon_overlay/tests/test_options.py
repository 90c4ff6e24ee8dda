from __future__ import annotations

import json
import logging
from pathlib import Path

from beacon_overlay.options import BeaconOptions, load_options, merge_options


def test_defaults():
    options = BeaconOptions()

    assert options.position == "center"
    assert options.boundary == "inner"
    assert options.data_prefix == "data-beacon"
    assert (options.beacon_class, options.fixed_class, options.hidden_class) == (
        "gc-beacon",
        "gc-beacon-fixed",
        "gc-beacon-hidden",
    )
    assert options.observe_element_resize is True


def test_merge_overrides_and_aliases():
    options = merge_options(None, {"position": "Top", "hiddenClass": "off", "marker_width": "24"})

    assert options.position == "top"
    assert options.hidden_class == "off"
    assert options.marker_width == 24
    assert options.boundary == "inner"


def test_merge_ignores_unknown_and_bad_values():
    base = BeaconOptions(marker_height=12)

    options = merge_options(base, {"colour": "red", "marker_height": "tall", "observe_element_resize": "maybe"})

    assert options == base


def test_merge_bool_tokens():
    assert merge_options(None, {"observeElementResize": "off"}).observe_element_resize is False
    assert merge_options(None, {"observe_element_resize": 0}).observe_element_resize is False


def test_merge_does_not_mutate_base():
    base = BeaconOptions()

    merge_options(base, {"position": "left"})

    assert base.position == "center"


def test_load_options_reads_json(tmp_path: Path):
    path = tmp_path / "beacons.json"
    path.write_text(json.dumps({"boundary": "outer", "data_prefix": "x-tip"}), encoding="utf-8")

    options = load_options(path)

    assert options.boundary == "outer"
    assert options.data_prefix == "x-tip"


def test_load_options_missing_file_returns_base(tmp_path: Path):
    base = BeaconOptions(position="left")

    assert load_options(tmp_path / "missing.json", base) is base


def test_load_options_invalid_json_logs_and_returns_defaults(tmp_path: Path, caplog):
    path = tmp_path / "beacons.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="BeaconOverlay.Engine"):
        options = load_options(path)

    assert options == BeaconOptions()
    assert "not valid JSON" in caplog.text


def test_load_options_non_object_returns_defaults(tmp_path: Path):
    path = tmp_path / "beacons.json"
    path.write_text("[1, 2]", encoding="utf-8")

    assert load_options(path) == BeaconOptions()
