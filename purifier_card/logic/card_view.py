"""Render-ready view model for the purifier tile."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from purifier_card.logic.card_config import PurifierCardConfig
from purifier_card.logic.entity_classifier import EntityRecord, Role, RoleMap
from purifier_card.logic.visibility import VisibilitySpec, visible_keys


@dataclass(slots=True, frozen=True)
class SensorDefinition:
    key: str
    role: Role
    label: str
    unit: str
    icon: str


# Order in which sensors are offered and rendered.
SENSOR_DEFINITIONS: tuple[SensorDefinition, ...] = (
    SensorDefinition("pm25", Role.PM25, "PM2.5", "µg/m³", "pap:pm25"),
    SensorDefinition("iai", Role.ALLERGEN_INDEX, "IAI", "", "pap:iai"),
    SensorDefinition("humidity", Role.HUMIDITY, "Humidity", "%", "mdi:water-percent"),
    SensorDefinition(
        "temperature", Role.TEMPERATURE, "Temperature", "°C", "mdi:thermometer"
    ),
)

SENSOR_KEYS: dict[str, Role] = {
    definition.key: definition.role for definition in SENSOR_DEFINITIONS
}

FILTER_ROLES: tuple[tuple[Role, str], ...] = (
    (Role.FILTER_PRE, "Pre-filter"),
    (Role.FILTER_HEPA, "HEPA filter"),
    (Role.FILTER_CARBON, "Active carbon filter"),
)


def sensor_universe(roles: RoleMap) -> list[str]:
    """Sensor keys the device can show."""

    return [
        definition.key
        for definition in SENSOR_DEFINITIONS
        if roles.get(definition.role.value)
    ]


def preset_universe(fan: EntityRecord | None) -> list[str]:
    """Lower-cased preset modes the fan reports."""

    if fan is None:
        return []
    modes = fan.attributes.get("preset_modes") or []
    return list(dict.fromkeys(str(mode).lower() for mode in modes))


def _preset_modes_view(
    config: PurifierCardConfig, fan: EntityRecord, collapsed: bool
) -> dict[str, Any] | None:
    if not config.show_preset_modes or collapsed:
        return None
    current = fan.attributes.get("preset_mode")
    modes = fan.attributes.get("preset_modes") or []
    if not current or not modes:
        return None

    shown = set(
        visible_keys(VisibilitySpec.create(preset_universe(fan), config.visible_preset_modes))
    )
    items = [
        {"key": str(mode).lower(), "name": str(mode), "active": mode == current}
        for mode in modes
        if str(mode).lower() in shown
    ]
    return {"collapsible": config.collapsible_preset_modes, "modes": items}


def _sensors_view(
    config: PurifierCardConfig,
    roles: RoleMap,
    states: Mapping[str, EntityRecord],
    is_on: bool,
) -> dict[str, Any] | None:
    if not config.show_sensors:
        return None
    if not is_on and (config.hide_sensors_when_off or config.controls_collapsed(is_on)):
        return None

    shown = set(visible_keys(VisibilitySpec.create(sensor_universe(roles), config.visible_sensors)))
    items: list[dict[str, Any]] = []
    for definition in SENSOR_DEFINITIONS:
        entity_id = roles.get(definition.role.value)
        record = states.get(entity_id) if entity_id else None
        if record is None or definition.key not in shown:
            continue
        items.append(
            {
                "key": definition.key,
                "label": definition.label,
                "value": record.state,
                "unit": record.attributes.get("unit_of_measurement") or definition.unit,
                "icon": definition.icon,
                "entity_id": record.entity_id,
            }
        )
    if not items:
        return None
    return {"separate_card": config.sensors_in_separate_card, "items": items}


def _filters_view(roles: RoleMap, states: Mapping[str, EntityRecord]) -> list[dict[str, Any]]:
    filters: list[dict[str, Any]] = []
    for role, label in FILTER_ROLES:
        entity_id = roles.get(role.value)
        record = states.get(entity_id) if entity_id else None
        if record is None:
            continue
        filters.append(
            {
                "key": role.value,
                "label": label,
                "value": record.state,
                "unit": record.attributes.get("unit_of_measurement") or "",
                "entity_id": record.entity_id,
            }
        )
    return filters


def _toolbar_view(
    config: PurifierCardConfig, roles: RoleMap, is_on: bool
) -> dict[str, Any] | None:
    if not config.show_toolbar or config.controls_collapsed(is_on):
        return None
    show_power = config.show_icon if config.show_power_button is None else config.show_power_button
    return {
        "power_button": {"visible": show_power, "active": is_on},
        "child_lock": bool(config.show_child_lock and roles.get(Role.CHILD_LOCK.value)),
        "display_light": bool(roles.get(Role.DISPLAY_LIGHT.value)),
    }


def build_card_view(
    config: PurifierCardConfig,
    roles: RoleMap,
    states: Mapping[str, EntityRecord],
) -> dict[str, Any]:
    """Assemble the data the tile renders.

    ``states`` maps entity ids to their current records. A missing primary
    entity gives an unavailable card.
    """

    entity_id = config.entity or roles.get(Role.FAN.value)
    fan = states.get(entity_id) if entity_id else None
    card_size = 1 if config.compact_view else 3
    if fan is None:
        return {"available": False, "entity_id": entity_id, "card_size": card_size}

    is_on = fan.state == "on"
    collapsed = config.controls_collapsed(is_on)
    return {
        "available": True,
        "entity_id": fan.entity_id,
        "card_size": card_size,
        "layout": config.layout,
        "fill_container": config.fill_container,
        "header": {
            "name": fan.name if config.show_name else None,
            "state": fan.state if config.show_state else None,
            "is_on": is_on,
            "show_icon": config.show_icon,
            "animate": bool(config.icon_animation and is_on),
            "percentage": fan.attributes.get("percentage"),
        },
        "preset_modes": _preset_modes_view(config, fan, collapsed),
        "sensors": _sensors_view(config, roles, states, is_on),
        "filters": _filters_view(roles, states),
        "toolbar": _toolbar_view(config, roles, is_on),
    }
