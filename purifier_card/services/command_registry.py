"""Canonical definitions for purifier card commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from purifier_card.core.security import (
    SanitizationError,
    bounded_percentage,
    sanitize_command_arguments,
)
from purifier_card.logic.entity_classifier import Role, RoleMap


class CommandError(SanitizationError):
    """Raised when a command cannot be mapped to a service call."""


@dataclass(slots=True, frozen=True)
class CommandDefinition:
    name: str
    description: str
    role: Role
    domain: str
    service: str
    allowed_args: tuple[str, ...] = ()
    required_args: tuple[str, ...] = ()


COMMAND_DEFINITIONS: dict[str, CommandDefinition] = {
    definition.name: definition
    for definition in (
        CommandDefinition(
            name="toggle",
            description="Toggle the purifier power.",
            role=Role.FAN,
            domain="fan",
            service="toggle",
        ),
        CommandDefinition(
            name="turn_on",
            description="Turn the purifier on, optionally with a speed or mode.",
            role=Role.FAN,
            domain="fan",
            service="turn_on",
            allowed_args=("percentage", "preset_mode"),
        ),
        CommandDefinition(
            name="turn_off",
            description="Turn the purifier off.",
            role=Role.FAN,
            domain="fan",
            service="turn_off",
        ),
        CommandDefinition(
            name="set_preset_mode",
            description="Select a preset mode such as auto or sleep.",
            role=Role.FAN,
            domain="fan",
            service="set_preset_mode",
            allowed_args=("preset_mode",),
            required_args=("preset_mode",),
        ),
        CommandDefinition(
            name="set_percentage",
            description="Set the fan speed in percent.",
            role=Role.FAN,
            domain="fan",
            service="set_percentage",
            allowed_args=("percentage",),
            required_args=("percentage",),
        ),
        CommandDefinition(
            name="toggle_child_lock",
            description="Toggle the child lock switch.",
            role=Role.CHILD_LOCK,
            domain="switch",
            service="toggle",
        ),
        CommandDefinition(
            name="toggle_display_light",
            description="Toggle the display backlight.",
            role=Role.DISPLAY_LIGHT,
            domain="light",
            service="toggle",
        ),
    )
}


def get_command_definition(name: str) -> CommandDefinition | None:
    return COMMAND_DEFINITIONS.get(name)


def prepare_service_payload(
    command: str,
    roles: RoleMap,
    args: Mapping[str, Any] | None = None,
    *,
    entity_id: str | None = None,
) -> tuple[str, str, dict[str, Any]]:
    """Validate a command and map it to Home Assistant service metadata.

    ``entity_id`` overrides the fan entity, mirroring a card configured with
    an explicit ``entity``.
    """

    definition = get_command_definition(command)
    if not definition:
        raise CommandError(f"Unknown command: {command}")

    target = roles.get(definition.role.value)
    if definition.role is Role.FAN and entity_id:
        target = entity_id
    if not target:
        raise CommandError(
            f"Command {command} needs a {definition.role.value} entity"
        )

    payload: dict[str, Any] = dict(
        sanitize_command_arguments(args, definition.allowed_args)
    )
    for key in definition.required_args:
        if key not in payload:
            raise CommandError(f"Missing required argument '{key}' for {command}")
    if "percentage" in payload:
        payload["percentage"] = bounded_percentage(payload["percentage"])

    payload["entity_id"] = target
    return definition.domain, definition.service, payload
