"""Card configuration model and defaults."""

from __future__ import annotations

from typing import Any, Iterable, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from purifier_card.core.errors import ConfigurationMissingError, InvalidConfigError
from purifier_card.logic.visibility import VisibilitySpec, toggle

CARD_TYPE = "custom:philips-purifier-card"

VisibilityCategory = Literal["sensors", "preset_modes"]

_CATEGORY_FIELDS: dict[str, str] = {
    "sensors": "visible_sensors",
    "preset_modes": "visible_preset_modes",
}


class PurifierCardConfig(BaseModel):
    """Persisted card configuration; unknown keys are carried through."""

    type: str = CARD_TYPE
    device_id: str | None = None
    entity: str | None = None

    show_name: bool = True
    show_state: bool = True
    show_icon: bool = True
    icon_animation: bool = True
    fill_container: bool = False

    show_preset_modes: bool = True
    collapsible_preset_modes: bool = False
    visible_preset_modes: list[str] = Field(default_factory=list)

    show_sensors: bool = True
    sensors_in_separate_card: bool = True
    visible_sensors: list[str] = Field(default_factory=list)

    show_child_lock: bool = True
    collapse_controls_when_off: bool = False
    hide_sensors_when_off: bool = False

    # Deprecated options kept so older dashboards keep working.
    show_toolbar: bool = True
    show_power_button: bool | None = None
    compact_view: bool = False
    layout: Literal["vertical", "horizontal"] = "vertical"
    collapsible_controls: bool | None = None

    detected_entities: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    @property
    def primary_entity(self) -> str | None:
        return self.entity or self.detected_entities.get("fan")

    def controls_collapsed(self, is_on: bool) -> bool:
        if is_on:
            return False
        return bool(self.collapse_controls_when_off or self.collapsible_controls)


def build_config(raw: Mapping[str, Any] | PurifierCardConfig | None) -> PurifierCardConfig:
    """Apply defaults to a raw card configuration."""

    if raw is None:
        raise InvalidConfigError("Invalid configuration")
    if isinstance(raw, PurifierCardConfig):
        return raw

    data = {key: value for key, value in raw.items() if value is not None}
    data["type"] = data.get("type") or CARD_TYPE
    detected = data.get("detected_entities")
    if isinstance(detected, Mapping):
        data["detected_entities"] = {
            role: entity_id for role, entity_id in detected.items() if entity_id
        }
    try:
        return PurifierCardConfig(**data)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc.error_count()} invalid field(s)") from exc


def require_target(config: PurifierCardConfig) -> None:
    """Block rendering of a card that names neither device nor entity."""

    if not config.device_id and not config.entity:
        raise ConfigurationMissingError("Specify a device or an entity")


def toggle_visibility(
    config: PurifierCardConfig,
    category: VisibilityCategory,
    key: str,
    visible: bool,
    universe: Iterable[str],
) -> PurifierCardConfig:
    """Return a copy of ``config`` with ``key`` shown or hidden."""

    field_name = _CATEGORY_FIELDS.get(category)
    if field_name is None:
        raise InvalidConfigError(f"Unknown visibility category: {category}")

    spec = VisibilitySpec.create(universe, getattr(config, field_name))
    return config.model_copy(update={field_name: toggle(spec, key, visible)})


def dump_config(config: PurifierCardConfig) -> dict[str, Any]:
    return config.model_dump(exclude_none=True)
