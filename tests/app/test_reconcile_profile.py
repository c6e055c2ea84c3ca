from __future__ import annotations

import threading
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from rostersync import app
from rostersync.app import create_user, reconcile_profile, sync_game_reference_data
from rostersync.domain.model import PlayableClass, PlayableRace, Realm
from rostersync.domain.reconciliation import ProfileReconciler, UserNotFoundError
from tests.helpers.profiles import (
    FakeProfileFetcher,
    SlowRosterFetcher,
    make_character,
    make_guild,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from rostersync.adapters.sqlalchemy.unit_of_work import (
        SqlAlchemyProfileUnitOfWork,
        SqlAlchemyReferenceDataUnitOfWork,
    )


def test_reconcile_profile_by_battlenet_id(
    sqlite_unit_of_work: Callable[[], SqlAlchemyProfileUnitOfWork],
) -> None:
    user = create_user(
        battlenet_id=555,
        battletag="Lookup#555",
        access_token="token",  # noqa: S106
        unit_of_work_factory=sqlite_unit_of_work,
    )
    fetcher = FakeProfileFetcher(
        [make_character("Thrall")], guilds={("area-52", "thrall"): make_guild("Horde Vanguard")}
    )
    reconciler = ProfileReconciler(fetcher=fetcher, unit_of_work_factory=sqlite_unit_of_work)

    result = reconcile_profile(battlenet_id=555, reconciler=reconciler)

    assert result.user_id == user.id
    assert result.display_tag == "Lookup#555"
    assert result.characters_written == 1


def test_reconcile_profile_unknown_battlenet_id(
    sqlite_unit_of_work: Callable[[], SqlAlchemyProfileUnitOfWork],
) -> None:
    reconciler = ProfileReconciler(
        fetcher=FakeProfileFetcher(), unit_of_work_factory=sqlite_unit_of_work
    )

    with pytest.raises(UserNotFoundError):
        reconcile_profile(battlenet_id=404, reconciler=reconciler)


def test_concurrent_reconcile_profile_calls_for_one_user_do_not_overlap(
    threaded_unit_of_work: Callable[[], SqlAlchemyProfileUnitOfWork],
) -> None:
    user = create_user(
        battlenet_id=777,
        battletag="Busy#777",
        access_token="token",  # noqa: S106
        unit_of_work_factory=threaded_unit_of_work,
    )
    fetcher = SlowRosterFetcher([make_character("Ash"), make_character("Birch")])
    errors: list[BaseException] = []

    def run() -> None:
        try:
            reconcile_profile(
                user_id=user.id, fetcher=fetcher, unit_of_work_factory=threaded_unit_of_work
            )
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=run) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert fetcher.max_active == 1
    assert len(fetcher.roster_calls) == 4


@pytest.mark.parametrize(
    "kwargs",
    [{}, {"user_id": uuid4(), "battlenet_id": 1}],
)
def test_reconcile_profile_requires_exactly_one_identifier(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValueError, match="exactly one"):
        reconcile_profile(**kwargs)  # type: ignore[arg-type]


def test_build_reconciler_reads_concurrency_from_environment(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_unit_of_work: Callable[[], SqlAlchemyProfileUnitOfWork],
) -> None:
    monkeypatch.setenv("RECONCILE_DETAIL_CONCURRENCY", "4")

    reconciler = app.build_reconciler(
        fetcher=FakeProfileFetcher(), unit_of_work_factory=sqlite_unit_of_work
    )

    assert reconciler.detail_concurrency == 4


class _StaticReferenceData:
    def fetch_playable_classes(self) -> list[PlayableClass]:
        return [PlayableClass(id=1, name="Warrior")]

    def fetch_playable_races(self) -> list[PlayableRace]:
        return []

    def fetch_realms(self) -> list[Realm]:
        return [Realm(id=3676, name="Area 52", slug="area-52", region="us")]


def test_sync_game_reference_data_uses_given_collaborators(
    sqlite_reference_unit_of_work: Callable[[], SqlAlchemyReferenceDataUnitOfWork],
) -> None:
    result = sync_game_reference_data(
        fetcher=_StaticReferenceData(),
        unit_of_work_factory=sqlite_reference_unit_of_work,
    )

    assert (result.classes, result.races, result.realms) == (1, 0, 1)
