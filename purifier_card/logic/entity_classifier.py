"""Role classification for the entities of an air purifier device."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Iterable, Mapping


class Role(StrEnum):
    """Logical functions a purifier entity can take on the card."""

    FAN = "fan"
    PM25 = "pm25"
    HUMIDITY = "humidity"
    TEMPERATURE = "temperature"
    ALLERGEN_INDEX = "allergen_index"
    FILTER_PRE = "filter_pre"
    FILTER_HEPA = "filter_hepa"
    FILTER_CARBON = "filter_carbon"
    CHILD_LOCK = "child_lock"
    DISPLAY_LIGHT = "display_light"


RoleMap = dict[str, str]


@dataclass(slots=True, frozen=True)
class EntityRecord:
    """Read-only snapshot row of a Home Assistant entity."""

    entity_id: str
    name: str = ""
    device_id: str | None = None
    state: str = "unknown"
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def domain(self) -> str:
        return self.entity_id.split(".", maxsplit=1)[0] if self.entity_id else ""

    @property
    def object_id(self) -> str:
        parts = self.entity_id.split(".", maxsplit=1)
        return parts[1] if len(parts) == 2 else ""

    @classmethod
    def from_state(
        cls,
        state: Mapping[str, Any],
        *,
        device_id: str | None = None,
    ) -> EntityRecord:
        """Build a record from a ``/api/states`` row.

        ``device_id`` from the entity registry is used when the state
        attributes do not carry one.
        """

        attributes = state.get("attributes") or {}
        entity_id = str(state.get("entity_id", ""))
        owner = attributes.get("device_id") or device_id
        return cls(
            entity_id=entity_id,
            name=str(attributes.get("friendly_name") or entity_id),
            device_id=str(owner) if owner else None,
            state=str(state.get("state", "unknown")),
            attributes=attributes,
        )


@dataclass(slots=True, frozen=True)
class RoleRule:
    domain: str
    role: Role
    keywords: tuple[str, ...] = ()

    def matches(self, domain: str, name: str) -> bool:
        if domain != self.domain:
            return False
        if not self.keywords:
            return True
        return any(keyword in name for keyword in self.keywords)


# Evaluated top to bottom; the first rule matching a record assigns its role.
ROLE_RULES: tuple[RoleRule, ...] = (
    RoleRule("fan", Role.FAN),
    RoleRule("sensor", Role.PM25, ("pm2", "pm25")),
    RoleRule("sensor", Role.HUMIDITY, ("humidity",)),
    RoleRule("sensor", Role.TEMPERATURE, ("temperature",)),
    RoleRule("sensor", Role.ALLERGEN_INDEX, ("allergen", "iai")),
    RoleRule("sensor", Role.FILTER_PRE, ("pre_filter", "prefilter")),
    RoleRule("sensor", Role.FILTER_HEPA, ("hepa",)),
    RoleRule("sensor", Role.FILTER_CARBON, ("carbon", "active_carbon")),
    RoleRule("switch", Role.CHILD_LOCK, ("child_lock", "childlock")),
    RoleRule("light", Role.DISPLAY_LIGHT, ("display", "light")),
)

# Roles where a later entity replaces an earlier one.
_LAST_MATCH_ROLES = frozenset({Role.FAN})


def device_entities(
    device_id: str | None, entities: Iterable[EntityRecord]
) -> list[EntityRecord]:
    """Return the records that belong to ``device_id``."""

    if not device_id:
        return []
    return [record for record in entities if record.device_id == device_id]


def match_role(
    entity_id: str, rules: Iterable[RoleRule] = ROLE_RULES
) -> Role | None:
    domain, _, remainder = (entity_id or "").partition(".")
    name = remainder.lower()
    for rule in rules:
        if rule.matches(domain, name):
            return rule.role
    return None


def classify(
    device_id: str | None,
    entities: Iterable[EntityRecord],
    *,
    rules: Iterable[RoleRule] = ROLE_RULES,
) -> RoleMap:
    """Map each role to the entity of ``device_id`` that fills it.

    Entities matching no rule are skipped. A device without entities gives an
    empty map.
    """

    rule_table = tuple(rules)
    roles: RoleMap = {}
    for record in device_entities(device_id, entities):
        role = match_role(record.entity_id, rule_table)
        if role is None:
            continue
        if role in _LAST_MATCH_ROLES:
            roles[role.value] = record.entity_id
        else:
            roles.setdefault(role.value, record.entity_id)
    return roles
