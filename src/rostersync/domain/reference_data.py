"""Application service for importing static game reference data."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from rostersync.domain.ports.fetching import ReferenceDataFetcher
    from rostersync.domain.ports.unit_of_work import ReferenceDataUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SyncReferenceDataResult:
    classes: int
    races: int
    realms: int


def sync_reference_data(
    *,
    fetcher: ReferenceDataFetcher,
    unit_of_work_factory: Callable[[], ReferenceDataUnitOfWork],
) -> SyncReferenceDataResult:
    """Fetch classes, races and realms, then upsert all three in one transaction."""

    classes = fetcher.fetch_playable_classes()
    races = fetcher.fetch_playable_races()
    realms = fetcher.fetch_realms()

    with unit_of_work_factory() as uow:
        repository = uow.repositories.reference_data
        result = SyncReferenceDataResult(
            classes=repository.upsert_classes(classes),
            races=repository.upsert_races(races),
            realms=repository.upsert_realms(realms),
        )
        uow.commit()

    log.info(
        "Reference data sync complete: classes=%s, races=%s, realms=%s",
        result.classes,
        result.races,
        result.realms,
    )
    return result
