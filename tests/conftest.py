from __future__ import annotations

from typing import Any

import pytest

from purifier_card.core.config import DEFAULT_MANUFACTURERS, DEFAULT_MODELS
from purifier_card.core.errors import HomeAssistantError
from purifier_card.logic.processor import CardProcessor
from purifier_card.services.registry import RegistryService, build_snapshot

DEVICE_ID = "dev-living-purifier"

DEVICES = [
    {
        "id": DEVICE_ID,
        "manufacturer": "Philips",
        "model": "AC3033/11",
        "name": "Living Room Purifier",
        "name_by_user": None,
        "area_id": "living_room",
    },
    {
        "id": "dev-bedroom-purifier",
        "manufacturer": "Philips",
        "model": "AC0850",
        "name": "Purifier",
        "name_by_user": "Bedroom Purifier",
        "area_id": "bedroom",
    },
    {
        "id": "dev-generic",
        "manufacturer": "Generic",
        "model": "AC3033",
        "name": "Knock-off Purifier",
        "area_id": None,
    },
    {
        "id": "dev-hue",
        "manufacturer": "Signify Netherlands B.V. (Philips Hue)",
        "model": "LCT015",
        "name": "Hue Bulb",
        "area_id": "living_room",
    },
]

STATES = [
    {
        "entity_id": "fan.living_room_purifier",
        "state": "on",
        "attributes": {
            "friendly_name": "Living Room Purifier",
            "device_id": DEVICE_ID,
            "preset_mode": "Auto",
            "preset_modes": ["Auto", "Sleep", "Turbo"],
            "percentage": 50,
        },
    },
    {
        "entity_id": "sensor.living_room_purifier_pm2_5",
        "state": "7",
        "attributes": {"device_id": DEVICE_ID, "unit_of_measurement": "µg/m³"},
    },
    {
        "entity_id": "sensor.living_room_purifier_indoor_allergen_index",
        "state": "2",
        "attributes": {"device_id": DEVICE_ID},
    },
    {
        "entity_id": "sensor.living_room_purifier_humidity",
        "state": "41",
        "attributes": {"device_id": DEVICE_ID, "unit_of_measurement": "%"},
    },
    {
        "entity_id": "sensor.living_room_purifier_hepa_filter",
        "state": "87",
        "attributes": {"device_id": DEVICE_ID, "unit_of_measurement": "%"},
    },
    # Device link only known through the entity registry.
    {
        "entity_id": "switch.living_room_purifier_child_lock",
        "state": "off",
        "attributes": {"friendly_name": "Child lock"},
    },
    {
        "entity_id": "light.living_room_purifier_display_backlight",
        "state": "on",
        "attributes": {"friendly_name": "Display backlight"},
    },
    {
        "entity_id": "sensor.living_room_purifier_filter_type",
        "state": "A3",
        "attributes": {"device_id": DEVICE_ID},
    },
    {
        "entity_id": "fan.bedroom_purifier",
        "state": "off",
        "attributes": {
            "friendly_name": "Bedroom Purifier",
            "device_id": "dev-bedroom-purifier",
            "preset_mode": "Sleep",
            "preset_modes": ["Auto", "Sleep"],
        },
    },
    {
        "entity_id": "light.hue_bulb",
        "state": "on",
        "attributes": {"device_id": "dev-hue"},
    },
]

ENTITY_REGISTRY = [
    {"entity_id": "switch.living_room_purifier_child_lock", "device_id": DEVICE_ID},
    {"entity_id": "light.living_room_purifier_display_backlight", "device_id": DEVICE_ID},
]

AREAS = [
    {"area_id": "living_room", "name": "Living Room"},
    {"area_id": "bedroom", "name": "Bedroom"},
]


class FakeHomeAssistantAPI:
    """In-memory stand-in for the Home Assistant client."""

    def __init__(self, *, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    async def _listing(self, name: str, data: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if name in self.failing:
            raise HomeAssistantError(f"{name} unavailable")
        return data

    async def fetch_devices(self) -> list[dict[str, Any]]:
        return await self._listing("devices", DEVICES)

    async def fetch_states(self) -> list[dict[str, Any]]:
        return await self._listing("states", STATES)

    async def fetch_entity_registry(self) -> list[dict[str, Any]]:
        return await self._listing("entity_registry", ENTITY_REGISTRY)

    async def fetch_areas(self) -> list[dict[str, Any]]:
        return await self._listing("areas", AREAS)

    async def call_service(self, domain: str, service: str, data: dict[str, Any]) -> Any:
        if "services" in self.failing:
            raise HomeAssistantError("Home Assistant service call failed")
        self.calls.append((domain, service, data))
        return []


@pytest.fixture
def snapshot():
    return build_snapshot(
        devices=DEVICES,
        states=STATES,
        entity_registry=ENTITY_REGISTRY,
        areas=AREAS,
    )


@pytest.fixture
def fake_api() -> FakeHomeAssistantAPI:
    return FakeHomeAssistantAPI()


@pytest.fixture
def registry(fake_api, snapshot) -> RegistryService:
    service = RegistryService(
        fake_api, manufacturers=DEFAULT_MANUFACTURERS, models=DEFAULT_MODELS
    )
    service.load(snapshot)
    return service


@pytest.fixture
def processor(fake_api, registry) -> CardProcessor:
    return CardProcessor(ha_api=fake_api, registry=registry)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
