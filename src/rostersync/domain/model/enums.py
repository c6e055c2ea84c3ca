"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Faction(StrEnum):
    ALLIANCE = "ALLIANCE"
    HORDE = "HORDE"
    NEUTRAL = "NEUTRAL"

    @classmethod
    def parse(cls, value: str | None) -> Faction | None:
        if value is None:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None
