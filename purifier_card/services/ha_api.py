"""Asynchronous Home Assistant REST and WebSocket API wrapper."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import websockets
from websockets.exceptions import WebSocketException

from purifier_card.core.errors import HomeAssistantError


class HomeAssistantAPI:
    """Minimal async client for the parts of Home Assistant the card reads."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout_seconds: int = 10,
    ) -> None:
        base_url_str = str(base_url).rstrip("/") if base_url else ""

        self._base_url = base_url_str
        self._token = token
        self._timeout = timeout_seconds

    @property
    def websocket_url(self) -> str:
        if self._base_url.startswith("https://"):
            return "wss://" + self._base_url[len("https://"):] + "/api/websocket"
        if self._base_url.startswith("http://"):
            return "ws://" + self._base_url[len("http://"):] + "/api/websocket"
        return self._base_url + "/api/websocket"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    async def call_service(self, domain: str, service: str, data: dict[str, Any]) -> Any:
        """Invoke a Home Assistant service with sanitized payload."""

        url = f"{self._base_url}/api/services/{domain}/{service}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(url, headers=self._headers(), json=data)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise HomeAssistantError("Home Assistant service call timed out") from exc
        except httpx.HTTPError as exc:
            raise HomeAssistantError(f"Home Assistant service call failed: {exc}") from exc
        return _decode(response, "service call")

    async def fetch_states(self) -> list[dict[str, Any]]:
        """Retrieve the full list of entity states."""

        url = f"{self._base_url}/api/states"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, headers=self._headers())
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise HomeAssistantError("Home Assistant states fetch timed out") from exc
        except httpx.HTTPError as exc:
            raise HomeAssistantError(f"Home Assistant states fetch failed: {exc}") from exc
        return _decode(response, "states fetch")

    async def fetch_devices(self) -> list[dict[str, Any]]:
        return await self._fetch_list("config/device_registry/list")

    async def fetch_entity_registry(self) -> list[dict[str, Any]]:
        return await self._fetch_list("config/entity_registry/list")

    async def fetch_areas(self) -> list[dict[str, Any]]:
        return await self._fetch_list("config/area_registry/list")

    async def _fetch_list(self, message_type: str) -> list[dict[str, Any]]:
        result = await self._ws_command(message_type)
        return result if isinstance(result, list) else []

    async def _ws_command(self, message_type: str, **fields: Any) -> Any:
        """Run a single command over an authenticated WebSocket session."""

        try:
            async with websockets.connect(
                self.websocket_url, max_size=None, open_timeout=self._timeout
            ) as ws:
                message = json.loads(await ws.recv())
                if message.get("type") != "auth_required":
                    raise HomeAssistantError(f"Unexpected WebSocket greeting: {message}")

                await ws.send(json.dumps({"type": "auth", "access_token": self._token}))
                message = json.loads(await ws.recv())
                if message.get("type") != "auth_ok":
                    raise HomeAssistantError("Home Assistant WebSocket authentication failed")

                await ws.send(json.dumps({"id": 1, "type": message_type, **fields}))
                while True:
                    response = json.loads(
                        await asyncio.wait_for(ws.recv(), timeout=self._timeout)
                    )
                    if response.get("id") != 1:
                        continue
                    if not response.get("success", False):
                        raise HomeAssistantError(
                            f"Home Assistant command {message_type} failed: "
                            f"{response.get('error')}"
                        )
                    return response.get("result")
        except asyncio.TimeoutError as exc:
            raise HomeAssistantError(f"Home Assistant command {message_type} timed out") from exc
        except (WebSocketException, OSError, json.JSONDecodeError) as exc:
            raise HomeAssistantError(f"Home Assistant WebSocket failed: {exc}") from exc


def _decode(response: httpx.Response, what: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise HomeAssistantError(f"Home Assistant {what} returned invalid JSON") from exc
