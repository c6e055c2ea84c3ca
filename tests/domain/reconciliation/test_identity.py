from __future__ import annotations

from uuid import uuid4

import pytest

from rostersync.domain.reconciliation.identity import (
    ConflictingGuildIdError,
    build_guild_id_map,
    character_key,
    dedupe_characters,
    dedupe_guilds,
    guild_key,
    orphaned_keys,
    resolve_guild_id,
)
from tests.helpers.profiles import make_character, make_guild


def test_character_key_lowercases_name_for_comparison() -> None:
    assert character_key(make_character("Thrall", "Durotan")) == ("thrall", "durotan", "us")
    assert character_key(make_character("thrall", "durotan")) == character_key(
        make_character("THRALL", "Durotan")
    )


def test_guild_key_distinguishes_realm_and_region() -> None:
    base = make_guild("Alpha", "area-52")

    assert guild_key(base) != guild_key(make_guild("Alpha", "illidan"))
    assert guild_key(base) != guild_key(make_guild("Alpha", "area-52", region="eu"))


def test_dedupe_guilds_keeps_first_seen_and_skips_missing() -> None:
    first = make_guild("Horde Vanguard")
    duplicate = make_guild("horde vanguard", faction=None)
    other = make_guild("Alpha")

    result = dedupe_guilds([None, first, duplicate, None, other])

    assert result == [first, other]
    assert result[0] is first


def test_dedupe_characters_keeps_first_seen() -> None:
    first = make_character("Thrall", level=70)
    later = make_character("thrall", level=10)

    assert dedupe_characters([first, later]) == [first]


def test_build_guild_id_map_is_order_independent() -> None:
    alpha_id, beta_id = uuid4(), uuid4()
    upserted = [(("alpha", "area-52", "us"), alpha_id), (("beta", "area-52", "us"), beta_id)]

    assert build_guild_id_map(upserted) == build_guild_id_map(reversed(upserted))


def test_build_guild_id_map_accepts_repeated_consistent_entries() -> None:
    guild_id = uuid4()

    result = build_guild_id_map(
        [(("Alpha", "area-52", "us"), guild_id), (("alpha", "area-52", "us"), guild_id)]
    )

    assert result == {("alpha", "area-52", "us"): guild_id}


def test_build_guild_id_map_rejects_conflicting_ids() -> None:
    with pytest.raises(ConflictingGuildIdError):
        build_guild_id_map(
            [(("alpha", "area-52", "us"), uuid4()), (("alpha", "area-52", "us"), uuid4())]
        )


def test_resolve_guild_id_uses_only_the_given_detail() -> None:
    guild_id = uuid4()
    guild_ids = {guild_key(make_guild("Alpha")): guild_id}

    assert resolve_guild_id(make_guild("ALPHA"), guild_ids) == guild_id
    assert resolve_guild_id(None, guild_ids) is None
    assert resolve_guild_id(make_guild("Beta"), guild_ids) is None


def test_orphaned_keys_returns_stored_keys_missing_from_roster() -> None:
    owned = [("Thrall", "area-52", "us"), ("Jaina", "area-52", "us")]

    result = orphaned_keys(owned, [make_character("thrall")])

    assert result == [("Jaina", "area-52", "us")]


def test_orphaned_keys_with_empty_roster_returns_everything() -> None:
    owned = [("Thrall", "area-52", "us"), ("Jaina", "area-52", "us")]

    assert orphaned_keys(owned, []) == owned
