from purifier_card.logic.card_config import build_config
from purifier_card.logic.card_view import build_card_view, preset_universe, sensor_universe
from purifier_card.logic.entity_classifier import classify

from conftest import DEVICE_ID


def _view(snapshot, **overrides):
    config = build_config({"device_id": DEVICE_ID, **overrides})
    roles = classify(DEVICE_ID, snapshot.entities)
    return build_card_view(config, roles, snapshot.states())


def test_universes_follow_detected_roles(snapshot):
    roles = classify(DEVICE_ID, snapshot.entities)

    assert sensor_universe(roles) == ["pm25", "iai", "humidity"]
    assert preset_universe(snapshot.entity("fan.living_room_purifier")) == ["auto", "sleep", "turbo"]
    assert preset_universe(None) == []


def test_full_view_for_running_purifier(snapshot):
    view = _view(snapshot)

    assert view["available"] is True
    assert view["entity_id"] == "fan.living_room_purifier"
    assert view["card_size"] == 3
    assert view["header"]["name"] == "Living Room Purifier"
    assert view["header"]["is_on"] is True
    assert view["header"]["animate"] is True
    assert [mode["key"] for mode in view["preset_modes"]["modes"]] == ["auto", "sleep", "turbo"]
    assert [mode["active"] for mode in view["preset_modes"]["modes"]] == [True, False, False]
    assert [item["key"] for item in view["sensors"]["items"]] == ["pm25", "iai", "humidity"]
    assert view["sensors"]["items"][1]["unit"] == ""
    assert view["filters"][0]["key"] == "filter_hepa"
    assert view["toolbar"]["child_lock"] is True
    assert view["toolbar"]["power_button"] == {"visible": True, "active": True}


def test_visible_lists_filter_sensors_and_modes(snapshot):
    view = _view(snapshot, visible_sensors=["humidity"], visible_preset_modes=["sleep", "auto"])

    assert [item["key"] for item in view["sensors"]["items"]] == ["humidity"]
    assert [mode["name"] for mode in view["preset_modes"]["modes"]] == ["Auto", "Sleep"]


def test_sensors_hidden_when_off(snapshot):
    config = build_config(
        {"entity": "fan.bedroom_purifier", "hide_sensors_when_off": True}
    )
    roles = {"fan": "fan.bedroom_purifier", "pm25": "sensor.living_room_purifier_pm2_5"}

    view = build_card_view(config, roles, snapshot.states())

    assert view["header"]["is_on"] is False
    assert view["sensors"] is None
    assert view["toolbar"] is not None


def test_collapsed_controls_when_off(snapshot):
    config = build_config(
        {"entity": "fan.bedroom_purifier", "collapse_controls_when_off": True}
    )

    view = build_card_view(config, {}, snapshot.states())

    assert view["preset_modes"] is None
    assert view["toolbar"] is None


def test_missing_entity_gives_unavailable_card(snapshot):
    config = build_config({"entity": "fan.gone", "compact_view": True})

    view = build_card_view(config, {}, snapshot.states())

    assert view == {"available": False, "entity_id": "fan.gone", "card_size": 1}


def test_display_flags(snapshot):
    view = _view(snapshot, show_name=False, show_child_lock=False, show_preset_modes=False)

    assert view["header"]["name"] is None
    assert view["toolbar"]["child_lock"] is False
    assert view["preset_modes"] is None
