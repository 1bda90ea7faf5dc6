"""Main orchestration logic for the purifier card backend."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from purifier_card.logic.card_config import (
    PurifierCardConfig,
    VisibilityCategory,
    build_config,
    require_target,
    toggle_visibility,
)
from purifier_card.logic.card_view import build_card_view, preset_universe, sensor_universe
from purifier_card.logic.entity_classifier import Role, RoleMap
from purifier_card.services import command_registry
from purifier_card.services.ha_api import HomeAssistantAPI
from purifier_card.services.registry import RegistryService

logger = logging.getLogger(__name__)


class CardProcessor:
    def __init__(
        self,
        *,
        ha_api: HomeAssistantAPI,
        registry: RegistryService,
    ) -> None:
        self._ha_api = ha_api
        self._registry = registry

    def resolve_device_id(self, config: PurifierCardConfig) -> str | None:
        """Device of the card, falling back to the owner of a legacy entity."""

        require_target(config)
        if config.device_id:
            return config.device_id
        return self._registry.device_id_for_entity(config.entity)

    def roles_for(self, config: PurifierCardConfig) -> RoleMap:
        device_id = self.resolve_device_id(config)
        roles = self._registry.roles_for_device(device_id)
        if not roles and config.detected_entities:
            return dict(config.detected_entities)
        return roles

    def resolve_config(self, raw: Mapping[str, Any] | None) -> PurifierCardConfig:
        """Fill in the device and detected entities of a card config."""

        config = build_config(raw)
        if config.device_id:
            roles = self._registry.roles_for_device(config.device_id)
            if not roles:
                return config
            update: dict[str, Any] = {"detected_entities": roles}
            if not config.entity and roles.get(Role.FAN.value):
                update["entity"] = roles[Role.FAN.value]
            return config.model_copy(update=update)

        if config.entity:
            device_id = self._registry.device_id_for_entity(config.entity)
            if device_id:
                return config.model_copy(
                    update={
                        "device_id": device_id,
                        "detected_entities": self._registry.roles_for_device(device_id),
                    }
                )
            logger.debug("No device found for entity %s", config.entity)
        return config

    def visibility_universe(
        self, config: PurifierCardConfig, category: VisibilityCategory
    ) -> list[str]:
        roles = self.roles_for(config)
        if category == "sensors":
            return sensor_universe(roles)
        fan_id = config.entity or roles.get(Role.FAN.value)
        return preset_universe(self._registry.snapshot.entity(fan_id))

    def toggle_visibility(
        self,
        raw: Mapping[str, Any] | None,
        category: VisibilityCategory,
        key: str,
        visible: bool,
    ) -> PurifierCardConfig:
        config = build_config(raw)
        universe = self.visibility_universe(config, category)
        return toggle_visibility(config, category, key, visible, universe)

    def build_view(self, raw: Mapping[str, Any] | None) -> dict[str, Any]:
        config = build_config(raw)
        roles = self.roles_for(config)
        return build_card_view(config, roles, self._registry.snapshot.states())

    async def send_command(
        self,
        raw: Mapping[str, Any] | None,
        command: str,
        arguments: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        config = build_config(raw)
        roles = self.roles_for(config)
        domain, service, payload = command_registry.prepare_service_payload(
            command, roles, arguments, entity_id=config.entity
        )
        result = await self._ha_api.call_service(domain, service, payload)
        logger.info("%s.%s -> %s", domain, service, payload["entity_id"])
        return {
            "service": f"{domain}.{service}",
            "entity_id": payload["entity_id"],
            "payload": payload,
            "result": result,
        }
