"""Shared errors for the purifier card backend."""

from __future__ import annotations


class InvalidConfigError(ValueError):
    """Raised when no card configuration object was supplied."""


class ConfigurationMissingError(ValueError):
    """Raised when a card config names neither a device nor an entity."""


class HomeAssistantError(RuntimeError):
    """Raised when Home Assistant cannot be reached or rejects a request."""
