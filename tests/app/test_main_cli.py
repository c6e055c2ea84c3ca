from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from rostersync.config import MissingConfigurationError
from rostersync.domain.model import User
from rostersync.domain.reconciliation import (
    PersistenceFailedError,
    ReconciliationResult,
    UnauthorizedError,
    UpstreamUnavailableError,
    UserNotFoundError,
)
from rostersync.domain.reference_data import SyncReferenceDataResult
from rostersync.ui import cli as cli_module


def test_reconcile_prints_summary(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}
    user_id = uuid4()

    def fake_reconcile(**kwargs: object) -> ReconciliationResult:
        captured.update(kwargs)
        return ReconciliationResult(user_id=user_id, display_tag="Thrall#1234", characters_written=3)

    monkeypatch.setattr(cli_module, "reconcile_profile", fake_reconcile)

    cli_module.main(["reconcile", "--user-id", str(user_id)])

    assert captured == {"user_id": user_id, "battlenet_id": None}
    assert (
        capsys.readouterr().out.strip()
        == "Profile sync completed for user Thrall#1234. Characters updated: 3"
    )


def test_reconcile_by_battlenet_id(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_reconcile(**kwargs: object) -> ReconciliationResult:
        captured.update(kwargs)
        return ReconciliationResult(user_id=uuid4(), display_tag="x", characters_written=0)

    monkeypatch.setattr(cli_module, "reconcile_profile", fake_reconcile)

    cli_module.main(["reconcile", "--battlenet-id", "1234"])

    assert captured == {"user_id": None, "battlenet_id": 1234}


@pytest.mark.parametrize(
    ("error", "exit_code"),
    [
        (UserNotFoundError(uuid4()), 3),
        (UnauthorizedError("expired"), 4),
        (UpstreamUnavailableError("down", status_code=503), 5),
        (PersistenceFailedError("guild upsert failed"), 1),
        (MissingConfigurationError(["DATABASE_URI"]), 2),
    ],
)
def test_reconcile_maps_errors_to_exit_codes(
    monkeypatch: pytest.MonkeyPatch, error: Exception, exit_code: int
) -> None:
    def fake_reconcile(**_: object) -> ReconciliationResult:
        raise error

    monkeypatch.setattr(cli_module, "reconcile_profile", fake_reconcile)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["reconcile", "--user-id", str(uuid4())])

    assert excinfo.value.code == exit_code


def test_reconcile_invalid_user_id(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_reconcile(**_: object) -> ReconciliationResult:
        raise AssertionError("should not be called")

    monkeypatch.setattr(cli_module, "reconcile_profile", fake_reconcile)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["reconcile", "--user-id", "not-a-uuid"])

    assert excinfo.value.code == 2


def test_reconcile_requires_an_identifier() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["reconcile"])

    assert excinfo.value.code == 2


def test_user_create_parses_expiry(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_create_user(**kwargs: object) -> User:
        captured.update(kwargs)
        return User(battlenet_id=1, battletag="New#1", id=UUID(int=1))

    monkeypatch.setattr(cli_module, "create_user", fake_create_user)

    cli_module.main(
        [
            "user",
            "create",
            "--battlenet-id",
            "1",
            "--battletag",
            "New#1",
            "--access-token",
            "abc",
            "--token-expires-at",
            "2025-01-02T03:00:00+03:00",
        ]
    )

    assert captured == {
        "battlenet_id": 1,
        "battletag": "New#1",
        "access_token": "abc",
        "refresh_token": None,
        "token_expires_at": datetime(2025, 1, 2, 0, 0, tzinfo=UTC),
    }


def test_user_create_invalid_timestamp(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "create_user", lambda **_: None)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(
            [
                "user",
                "create",
                "--battlenet-id",
                "1",
                "--battletag",
                "New#1",
                "--token-expires-at",
                "yesterday",
            ]
        )

    assert excinfo.value.code == 2


def test_reference_data_command(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[bool] = []

    def fake_sync() -> SyncReferenceDataResult:
        calls.append(True)
        return SyncReferenceDataResult(classes=13, races=25, realms=240)

    monkeypatch.setattr(cli_module, "sync_game_reference_data", fake_sync)

    cli_module.main(["reference-data"])

    assert calls == [True]


def test_reference_data_missing_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync() -> SyncReferenceDataResult:
        raise MissingConfigurationError(["BLIZZARD_CLIENT_ID"])

    monkeypatch.setattr(cli_module, "sync_game_reference_data", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["reference-data"])

    assert excinfo.value.code == 2
