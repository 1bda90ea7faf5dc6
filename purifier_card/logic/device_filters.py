"""Helpers for narrowing the device registry to supported purifiers."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Mapping

_VARIANT_SUFFIX = re.compile(r"/\d+$")


@dataclass(slots=True, frozen=True)
class DeviceRecord:
    """Simple representation of a Home Assistant device registry entry."""

    id: str
    manufacturer: str = ""
    model: str = ""
    name: str = ""
    name_by_user: str = ""
    area_id: str | None = None

    @property
    def display_name(self) -> str:
        return self.name_by_user or self.name or self.id

    @classmethod
    def from_registry(cls, entry: Mapping[str, Any]) -> DeviceRecord:
        return cls(
            id=str(entry.get("id", "")),
            manufacturer=str(entry.get("manufacturer") or ""),
            model=str(entry.get("model") or ""),
            name=str(entry.get("name") or ""),
            name_by_user=str(entry.get("name_by_user") or ""),
            area_id=entry.get("area_id") or None,
        )


def _coerce_device(device: Mapping[str, Any] | DeviceRecord) -> DeviceRecord:
    if isinstance(device, DeviceRecord):
        return device
    return DeviceRecord.from_registry(device)


def strip_variant(model: str) -> str:
    """Drop a trailing revision code, e.g. ``AC3033/11`` -> ``AC3033``."""

    return _VARIANT_SUFFIX.sub("", model.strip())


def is_candidate_device(
    device: Mapping[str, Any] | DeviceRecord,
    manufacturer_allowlist: Iterable[str],
    model_allowlist: Iterable[str],
) -> bool:
    record = _coerce_device(device)
    manufacturer = record.manufacturer.lower()
    model = strip_variant(record.model).lower()
    if not manufacturer or not model:
        return False

    if not any(
        token and token.lower() in manufacturer for token in manufacturer_allowlist
    ):
        return False

    for supported in model_allowlist:
        supported = supported.strip().lower()
        if supported and (model == supported or model.startswith(supported)):
            return True
    return False


def filter_candidate_devices(
    devices: Iterable[Mapping[str, Any] | DeviceRecord],
    *,
    manufacturers: Sequence[str],
    models: Sequence[str],
) -> list[DeviceRecord]:
    return [
        record
        for record in (_coerce_device(device) for device in devices)
        if is_candidate_device(record, manufacturers, models)
    ]
