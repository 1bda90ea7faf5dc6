"""API routes for the purifier card backend."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from purifier_card.core.errors import (
    ConfigurationMissingError,
    HomeAssistantError,
    InvalidConfigError,
)
from purifier_card.core.security import SanitizationError
from purifier_card.logic.card_config import dump_config
from purifier_card.logic.processor import CardProcessor
from purifier_card.services.registry import RegistryService

router = APIRouter()


class DeviceResponse(BaseModel):
    id: str
    name: str
    manufacturer: str
    model: str
    area_id: str | None = None
    area_name: str | None = None


class ConfigRequest(BaseModel):
    config: dict[str, Any] | None = None


class VisibilityRequest(ConfigRequest):
    category: Literal["sensors", "preset_modes"]
    key: str = Field(..., min_length=1)
    visible: bool


class CommandRequest(ConfigRequest):
    command: str = Field(..., min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)


class CommandResponse(BaseModel):
    service: str
    entity_id: str
    result: dict | list | str | int | float | bool | None = None


def get_processor(request: Request) -> CardProcessor:
    processor: CardProcessor | None = getattr(request.app.state, "processor", None)
    if not processor:
        raise RuntimeError("Processor has not been initialised")
    return processor


def get_registry(request: Request) -> RegistryService:
    registry: RegistryService | None = getattr(request.app.state, "registry", None)
    if not registry:
        raise RuntimeError("Registry has not been initialised")
    return registry


_CLIENT_ERRORS = (ConfigurationMissingError, InvalidConfigError, SanitizationError)


@router.get("/devices", response_model=list[DeviceResponse])
async def list_devices(
    query: str = "",
    limit: int = 25,
    registry: RegistryService = Depends(get_registry),
) -> list[dict]:
    return [
        {
            "id": device.id,
            "name": device.display_name,
            "manufacturer": device.manufacturer,
            "model": device.model,
            "area_id": device.area_id,
            "area_name": registry.area_name(device.area_id),
        }
        for device in registry.search_devices(query, limit=limit)
    ]


@router.get("/devices/{device_id}/roles")
async def device_roles(
    device_id: str,
    registry: RegistryService = Depends(get_registry),
) -> dict[str, str]:
    return registry.roles_for_device(device_id)


@router.post("/config/resolve")
async def resolve_config(
    payload: ConfigRequest,
    processor: CardProcessor = Depends(get_processor),
) -> dict:
    try:
        config = processor.resolve_config(payload.config)
    except _CLIENT_ERRORS as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return dump_config(config)


@router.post("/config/visibility")
async def change_visibility(
    payload: VisibilityRequest,
    processor: CardProcessor = Depends(get_processor),
) -> dict:
    try:
        config = processor.toggle_visibility(
            payload.config, payload.category, payload.key, payload.visible
        )
    except _CLIENT_ERRORS as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return dump_config(config)


@router.post("/card")
async def card_view(
    payload: ConfigRequest,
    processor: CardProcessor = Depends(get_processor),
) -> dict:
    try:
        return processor.build_view(payload.config)
    except _CLIENT_ERRORS as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/command", response_model=CommandResponse)
async def send_command(
    payload: CommandRequest,
    processor: CardProcessor = Depends(get_processor),
) -> dict:
    try:
        return await processor.send_command(
            payload.config, payload.command, payload.arguments
        )
    except _CLIENT_ERRORS as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except HomeAssistantError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
