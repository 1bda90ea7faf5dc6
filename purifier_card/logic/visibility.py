"""Visible-subset encoding for sensors and preset modes.

A persisted list names the keys that are shown. The empty list is the
canonical "show everything" form, so a toggle that would bring the list up to
full coverage collapses it back to empty. Removing the last key also yields
the empty list; the two meanings are not told apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


def _unique(keys: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(keys))


@dataclass(slots=True, frozen=True)
class VisibilitySpec:
    universe: tuple[str, ...]
    persisted: tuple[str, ...] = ()

    @classmethod
    def create(
        cls, universe: Iterable[str], persisted: Iterable[str] | None = None
    ) -> VisibilitySpec:
        return cls(universe=_unique(universe), persisted=_unique(persisted or ()))


def is_visible(spec: VisibilitySpec, key: str) -> bool:
    return not spec.persisted or key in spec.persisted


def toggle(spec: VisibilitySpec, key: str, turning_on: bool = True) -> list[str]:
    """Return the persisted list after showing or hiding ``key``."""

    persisted = list(spec.persisted)

    if turning_on:
        if not persisted:
            return []
        if key not in persisted:
            persisted.append(key)
        if len(persisted) == len(spec.universe):
            return []
        return persisted

    if not persisted:
        if key not in spec.universe:
            return []
        return [item for item in spec.universe if item != key]
    return [item for item in persisted if item != key]


def visible_keys(spec: VisibilitySpec) -> list[str]:
    """Universe keys that are currently shown, in universe order."""

    return [key for key in spec.universe if is_visible(spec, key)]
