"""Application configuration utilities."""

from __future__ import annotations

from functools import lru_cache
import os
from typing import Any

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, ValidationError

DEFAULT_MANUFACTURERS: tuple[str, ...] = ("philips",)

# Philips air purifier and combi models handled by the card.
DEFAULT_MODELS: tuple[str, ...] = (
    "AC0850",
    "AC0950",
    "AC0951",
    "AC1214",
    "AC1715",
    "AC2729",
    "AC2889",
    "AC2936",
    "AC2939",
    "AC2958",
    "AC2959",
    "AC3033",
    "AC3036",
    "AC3039",
    "AC3055",
    "AC3059",
    "AC3210",
    "AC3220",
    "AC3221",
    "AC3259",
    "AC3420",
    "AC3421",
    "AC3737",
    "AC3829",
    "AC3836",
    "AC3854",
    "AC3858",
    "AC4220",
    "AC4221",
    "AC4236",
    "AC4550",
    "AC4558",
    "AC5659",
    "AC5660",
    "AMF765",
    "AMF870",
    "CX3120",
    "CX5120",
    "HU1509",
    "HU1510",
    "HU5710",
)


class Settings(BaseModel):
    """Centralized runtime configuration loaded from environment variables."""

    app_name: str = "Purifier Card Backend"
    environment: str = "development"
    ha_url: AnyHttpUrl
    ha_token: str
    ha_timeout_seconds: int = 10
    registry_refresh_seconds: int = 300
    log_level: str = "INFO"
    supported_manufacturers: tuple[str, ...] = DEFAULT_MANUFACTURERS
    supported_models: tuple[str, ...] = DEFAULT_MODELS

    model_config = ConfigDict(extra="ignore")


def _split_list(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if not raw:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load environment variables, ensuring required values are present."""

    load_dotenv()
    data: dict[str, Any] = {
        "app_name": os.getenv("APP_NAME", "Purifier Card Backend"),
        "environment": os.getenv("ENVIRONMENT", "development"),
        "ha_url": os.getenv("HA_URL", "http://127.0.0.1:8123"),
        "ha_token": os.getenv("HA_TOKEN", ""),
        "ha_timeout_seconds": os.getenv("HA_TIMEOUT_SECONDS", "10"),
        "registry_refresh_seconds": os.getenv("REGISTRY_REFRESH_SECONDS", "300"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "supported_manufacturers": _split_list(
            os.getenv("SUPPORTED_MANUFACTURERS"), DEFAULT_MANUFACTURERS
        ),
        "supported_models": _split_list(
            os.getenv("SUPPORTED_MODELS"), DEFAULT_MODELS
        ),
    }

    if not data["ha_token"]:
        raise RuntimeError("HA_TOKEN is required for Home Assistant authentication")

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise RuntimeError("Invalid environment configuration") from exc
