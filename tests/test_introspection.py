#tests/test_introspection.py
"""
Tests for bot_core.introspection.BotStateInspector

Covers:
- status() fixed field set, JSON-safe
- Dotted-path lookup through mappings, lists and dataclass values
- Allow-list and depth bound
- PropertyLookupError details for each failure mode
"""

from __future__ import annotations

import json

import pytest

from bot_core.introspection import DEFAULT_ALLOWED_FIELDS, BotStateInspector
from bot_core.testing.fakes import FakeBot
from contracts.errors import PropertyLookupError
from contracts.types import Position


def make_inspector(**kwargs) -> BotStateInspector:
    bot = FakeBot(position=Position(1.5, 64.0, -3.0), health=17.0)
    bot.state["inventory"] = [{"name": "dirt", "count": 3}, {"name": "torch", "count": 12}]
    return BotStateInspector(bot, **kwargs)


def test_status_has_fixed_fields_and_is_json_safe():
    status = make_inspector().status()

    assert set(status) == {
        "username",
        "position",
        "health",
        "food",
        "inventory",
        "quick_bar_slot",
        "held_item",
    }
    assert status["position"] == {"x": 1.5, "y": 64.0, "z": -3.0}
    assert status["health"] == 17.0
    assert status["held_item"] is None
    json.dumps(status)


def test_inspect_top_level_and_nested_paths():
    inspector = make_inspector()

    assert inspector.inspect("health") == 17.0
    assert inspector.inspect("position") == {"x": 1.5, "y": 64.0, "z": -3.0}
    assert inspector.inspect("position.z") == -3.0
    assert inspector.inspect("inventory.1.name") == "torch"
    assert inspector.inspect("username") == "MCPBot"


def test_root_outside_allow_list_rejected():
    inspector = make_inspector()

    with pytest.raises(PropertyLookupError) as excinfo:
        inspector.inspect("_client.socket")

    err = excinfo.value
    assert err.segment == "_client"
    assert err.resolved_path == ""
    assert "not inspectable" in str(err)
    assert err.available == sorted(DEFAULT_ALLOWED_FIELDS)[:10]
    assert err.truncated
    assert str(err).endswith("...")


def test_custom_allow_list():
    inspector = make_inspector(allowed_fields=["health"])

    assert inspector.inspect("health") == 17.0
    with pytest.raises(PropertyLookupError):
        inspector.inspect("food")


def test_path_too_deep_rejected():
    inspector = make_inspector(max_depth=2)

    with pytest.raises(PropertyLookupError) as excinfo:
        inspector.inspect("inventory.0.name")

    assert excinfo.value.segment == "name"
    assert excinfo.value.resolved_path == "inventory.0"
    assert "too deep" in str(excinfo.value)


@pytest.mark.parametrize("path", ["", "position..x", ".health", "health."])
def test_malformed_path_rejected(path):
    with pytest.raises(PropertyLookupError) as excinfo:
        make_inspector().inspect(path)

    assert "Invalid property path" in str(excinfo.value)


def test_missing_nested_key_lists_available_keys():
    with pytest.raises(PropertyLookupError) as excinfo:
        make_inspector().inspect("position.w")

    err = excinfo.value
    assert err.segment == "w"
    assert err.resolved_path == "position"
    assert err.available == ["x", "y", "z"]
    assert not err.truncated
    assert str(err) == "Property 'w' not found in 'position'. Available properties: x, y, z"


def test_missing_allowed_root_lists_present_allowed_keys():
    with pytest.raises(PropertyLookupError) as excinfo:
        make_inspector().inspect("experience")

    err = excinfo.value
    assert err.resolved_path == ""
    assert "Property 'experience' not found in 'bot'" in str(err)
    assert "position" in err.available
    assert len(err.available) <= 10
    assert all(key in DEFAULT_ALLOWED_FIELDS for key in err.available)


def test_null_parent():
    with pytest.raises(PropertyLookupError) as excinfo:
        make_inspector().inspect("held_item.name")

    assert str(excinfo.value) == (
        "Property path 'held_item' is null. Cannot access 'name' in 'held_item.name'"
    )


def test_scalar_parent():
    with pytest.raises(PropertyLookupError) as excinfo:
        make_inspector().inspect("health.max")

    assert "is not an object (type: float)" in str(excinfo.value)
    assert excinfo.value.resolved_path == "health"


def test_list_index_out_of_range():
    with pytest.raises(PropertyLookupError) as excinfo:
        make_inspector().inspect("inventory.5")

    assert excinfo.value.available == ["0", "1"]


def test_max_depth_must_be_positive():
    with pytest.raises(ValueError):
        BotStateInspector(FakeBot(), max_depth=0)
