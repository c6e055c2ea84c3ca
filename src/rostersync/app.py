"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from rostersync.adapters.blizzard import BlizzardGameDataClient, BlizzardProfileClient
from rostersync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProfileUnitOfWork,
    SqlAlchemyReferenceDataUnitOfWork,
    is_started,
    startup,
)
from rostersync.config import (
    get_blizzard_config,
    get_client_credentials,
    get_reconcile_config,
)
from rostersync.domain.model import User
from rostersync.domain.ports.unit_of_work import ProfileUnitOfWork, ReferenceDataUnitOfWork
from rostersync.domain.reconciliation import ProfileReconciler, UserNotFoundError
from rostersync.domain.reference_data import SyncReferenceDataResult, sync_reference_data

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from rostersync.config import BlizzardConfig, ReconcileConfig
    from rostersync.domain.ports.fetching import ProfileFetcher, ReferenceDataFetcher
    from rostersync.domain.reconciliation import ReconciliationResult

ProfileUnitOfWorkFactory = Callable[[], ProfileUnitOfWork]
ReferenceDataUnitOfWorkFactory = Callable[[], ReferenceDataUnitOfWork]


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def build_reconciler(
    *,
    fetcher: ProfileFetcher | None = None,
    unit_of_work_factory: ProfileUnitOfWorkFactory | None = None,
    blizzard: BlizzardConfig | None = None,
    settings: ReconcileConfig | None = None,
) -> ProfileReconciler:
    """Wire a reconciler from explicit collaborators, falling back to configured adapters."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_settings = settings or get_reconcile_config()
    return ProfileReconciler(
        fetcher=fetcher or BlizzardProfileClient(config=blizzard or get_blizzard_config()),
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyProfileUnitOfWork,
        detail_concurrency=effective_settings.detail_concurrency,
    )


def resolve_user_id(
    *,
    battlenet_id: int,
    unit_of_work_factory: ProfileUnitOfWorkFactory | None = None,
) -> UUID:
    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyProfileUnitOfWork
    with effective_uow() as uow:
        user = uow.repositories.users.get_by_battlenet_id(battlenet_id)
    if user is None:
        raise UserNotFoundError(battlenet_id)
    return user.id


def reconcile_profile(
    *,
    user_id: UUID | None = None,
    battlenet_id: int | None = None,
    reconciler: ProfileReconciler | None = None,
    fetcher: ProfileFetcher | None = None,
    unit_of_work_factory: ProfileUnitOfWorkFactory | None = None,
) -> ReconciliationResult:
    """Reconcile one user's stored characters with their Battle.net roster.

    Runs for the same user are serialized across every reconciler in the process.
    """

    if (user_id is None) == (battlenet_id is None):
        raise ValueError("Pass exactly one of user_id or battlenet_id")

    effective_reconciler = reconciler or build_reconciler(
        fetcher=fetcher, unit_of_work_factory=unit_of_work_factory
    )
    if battlenet_id is not None:
        user_id = resolve_user_id(
            battlenet_id=battlenet_id,
            unit_of_work_factory=effective_reconciler.unit_of_work_factory,
        )

    return effective_reconciler.reconcile(user_id)


def create_user(
    *,
    battlenet_id: int,
    battletag: str,
    access_token: str | None = None,
    refresh_token: str | None = None,
    token_expires_at: datetime | None = None,
    unit_of_work_factory: ProfileUnitOfWorkFactory | None = None,
) -> User:
    """Persist a user whose token was obtained by the external login flow."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyProfileUnitOfWork
    user = User(
        battlenet_id=battlenet_id,
        battletag=battletag,
        access_token=access_token,
        refresh_token=refresh_token,
        token_expires_at=token_expires_at,
    )
    with effective_uow() as uow:
        uow.repositories.users.add(user)
        uow.commit()
    log.info("Created user %s (%s)", user.id, user.battletag)
    return user


def sync_game_reference_data(
    *,
    fetcher: ReferenceDataFetcher | None = None,
    unit_of_work_factory: ReferenceDataUnitOfWorkFactory | None = None,
) -> SyncReferenceDataResult:
    """Import playable classes, races and realms."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_fetcher = fetcher or BlizzardGameDataClient(
        config=get_blizzard_config(),
        credentials=get_client_credentials(),
    )
    return sync_reference_data(
        fetcher=effective_fetcher,
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyReferenceDataUnitOfWork,
    )
