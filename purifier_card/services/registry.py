"""In-memory snapshot of the Home Assistant device, entity and area registries."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Mapping

from rapidfuzz import fuzz, process, utils

from purifier_card.core.errors import HomeAssistantError
from purifier_card.logic.device_filters import DeviceRecord, filter_candidate_devices
from purifier_card.logic.entity_classifier import EntityRecord, RoleMap, classify
from .ha_api import HomeAssistantAPI

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RegistrySnapshot:
    devices: tuple[DeviceRecord, ...] = ()
    entities: tuple[EntityRecord, ...] = ()
    areas: Mapping[str, str] = field(default_factory=dict)

    def entity(self, entity_id: str | None) -> EntityRecord | None:
        if not entity_id:
            return None
        return next((rec for rec in self.entities if rec.entity_id == entity_id), None)

    def states(self) -> dict[str, EntityRecord]:
        return {record.entity_id: record for record in self.entities}


def build_snapshot(
    *,
    devices: Sequence[Mapping[str, Any]] = (),
    states: Sequence[Mapping[str, Any]] = (),
    entity_registry: Sequence[Mapping[str, Any]] = (),
    areas: Sequence[Mapping[str, Any]] = (),
) -> RegistrySnapshot:
    """Combine raw registry listings into a snapshot."""

    owners: dict[str, str] = {}
    for entry in entity_registry:
        if not isinstance(entry, Mapping):
            continue
        entity_id = entry.get("entity_id")
        device_id = entry.get("device_id")
        if entity_id and device_id:
            owners[str(entity_id)] = str(device_id)

    entities: list[EntityRecord] = []
    for state in states:
        if not isinstance(state, Mapping):
            continue
        entity_id = state.get("entity_id")
        if not entity_id:
            continue
        entities.append(EntityRecord.from_state(state, device_id=owners.get(entity_id)))

    area_names = {
        str(area["area_id"]): str(area.get("name") or area["area_id"])
        for area in areas
        if isinstance(area, Mapping) and area.get("area_id")
    }
    return RegistrySnapshot(
        devices=tuple(
            DeviceRecord.from_registry(entry)
            for entry in devices
            if isinstance(entry, Mapping)
        ),
        entities=tuple(entities),
        areas=area_names,
    )


class RegistryService:
    def __init__(
        self,
        ha_api: HomeAssistantAPI,
        *,
        manufacturers: Sequence[str],
        models: Sequence[str],
        min_score: int = 60,
    ) -> None:
        self._ha_api = ha_api
        self._manufacturers = tuple(manufacturers)
        self._models = tuple(models)
        self._min_score = min_score
        self._snapshot = RegistrySnapshot()

    @property
    def snapshot(self) -> RegistrySnapshot:
        return self._snapshot

    async def refresh(self) -> RegistrySnapshot:
        """Fetch the registries and replace the cached snapshot.

        A listing that cannot be fetched is treated as empty so the card can
        degrade to its loading state.
        """

        devices, states, entity_registry, areas = await asyncio.gather(
            self._fetch_or_empty("devices", self._ha_api.fetch_devices),
            self._fetch_or_empty("states", self._ha_api.fetch_states),
            self._fetch_or_empty("entity registry", self._ha_api.fetch_entity_registry),
            self._fetch_or_empty("areas", self._ha_api.fetch_areas),
        )
        self.load(
            build_snapshot(
                devices=devices,
                states=states,
                entity_registry=entity_registry,
                areas=areas,
            )
        )
        logger.debug(
            "Registry refreshed: %d devices, %d entities",
            len(self._snapshot.devices),
            len(self._snapshot.entities),
        )
        return self._snapshot

    def load(self, snapshot: RegistrySnapshot) -> None:
        self._snapshot = snapshot

    async def _fetch_or_empty(
        self,
        label: str,
        fetch: Callable[[], Awaitable[list[dict[str, Any]]]],
    ) -> list[dict[str, Any]]:
        try:
            result = await fetch()
        except HomeAssistantError as exc:
            logger.warning("Fetching %s failed: %s", label, exc)
            return []
        return result if isinstance(result, list) else []

    def candidate_devices(self) -> list[DeviceRecord]:
        return filter_candidate_devices(
            self._snapshot.devices,
            manufacturers=self._manufacturers,
            models=self._models,
        )

    def search_devices(self, query: str, *, limit: int = 10) -> list[DeviceRecord]:
        """Return candidate devices ordered by fuzzy similarity to the query."""

        candidates = self.candidate_devices()
        if not query:
            return candidates[:limit]

        choices = {
            index: f"{device.display_name} {device.model} "
            f"{self.area_name(device.area_id) or ''}"
            for index, device in enumerate(candidates)
        }
        if not choices:
            return []
        matches = process.extract(
            query,
            choices,
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            limit=limit,
        )
        return [
            candidates[index]
            for _, score, index in matches
            if score >= self._min_score
        ]

    def area_name(self, area_id: str | None) -> str | None:
        if not area_id:
            return None
        return self._snapshot.areas.get(area_id, "Unknown")

    def device_id_for_entity(self, entity_id: str | None) -> str | None:
        record = self._snapshot.entity(entity_id)
        return record.device_id if record else None

    def roles_for_device(self, device_id: str | None) -> RoleMap:
        return classify(device_id, self._snapshot.entities)
