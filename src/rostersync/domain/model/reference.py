"""Static game reference data keyed by the remote service's numeric ids."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False, kw_only=True)
class PlayableClass:
    id: int
    name: str


@dataclass(eq=False, kw_only=True)
class PlayableRace:
    id: int
    name: str
    faction: str | None = None


@dataclass(eq=False, kw_only=True)
class Realm:
    id: int
    name: str
    slug: str
    region: str
