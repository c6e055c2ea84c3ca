from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from rostersync.app import create_user, reconcile_profile, sync_game_reference_data
from rostersync.config import ConfigurationError, configure_logging
from rostersync.domain.reconciliation import (
    PersistenceFailedError,
    UnauthorizedError,
    UpstreamUnavailableError,
    UserNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_UNAUTHORIZED = 4
EXIT_UPSTREAM_UNAVAILABLE = 5


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise Battle.net rosters")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Reconcile a user's characters and guilds")
    target = reconcile.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--user-id",
        type=str,
        help="Internal user id to reconcile",
    )
    target.add_argument(
        "--battlenet-id",
        type=int,
        help="Battle.net account id of the user to reconcile",
    )

    subparsers.add_parser("reference-data", help="Import playable classes, races and realms")

    user = subparsers.add_parser("user", help="User management commands")
    user_sub = user.add_subparsers(dest="user_command", required=True)
    user_create = user_sub.add_parser("create", help="Create a user")
    user_create.add_argument(
        "--battlenet-id",
        type=int,
        required=True,
        help="Battle.net account id",
    )
    user_create.add_argument(
        "--battletag",
        type=str,
        required=True,
        help="Display tag, e.g. Player#1234",
    )
    user_create.add_argument(
        "--access-token",
        type=str,
        help="Bearer token obtained from the Battle.net login flow",
    )
    user_create.add_argument(
        "--refresh-token",
        type=str,
        help="Refresh token stored alongside the access token",
    )
    user_create.add_argument(
        "--token-expires-at",
        type=str,
        help="ISO-8601 timestamp at which the access token expires",
    )

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _run_reconcile(user_id: UUID | None, battlenet_id: int | None) -> None:
    try:
        result = reconcile_profile(user_id=user_id, battlenet_id=battlenet_id)
    except UserNotFoundError:
        log.exception("User not found in database")
        sys.exit(EXIT_NOT_FOUND)
    except UnauthorizedError:
        log.exception("Access token expired or invalid")
        sys.exit(EXIT_UNAUTHORIZED)
    except UpstreamUnavailableError:
        log.exception("Failed to fetch account profile")
        sys.exit(EXIT_UPSTREAM_UNAVAILABLE)
    except PersistenceFailedError:
        log.exception("Failed to sync profile data")
        sys.exit(EXIT_FAILURE)
    print(  # noqa: T201
        f"Profile sync completed for user {result.display_tag}. "
        f"Characters updated: {result.characters_written}"
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    user_id: UUID | None = None
    expires_at: datetime | None = None
    try:
        if parsed_args.command == "reconcile" and parsed_args.user_id is not None:
            user_id = _parse_uuid(parsed_args.user_id)
        if parsed_args.command == "user" and parsed_args.token_expires_at:
            expires_at = _parse_iso_datetime(parsed_args.token_expires_at)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)

    try:
        if parsed_args.command == "reconcile":
            _run_reconcile(user_id, parsed_args.battlenet_id)
        elif parsed_args.command == "reference-data":
            result = sync_game_reference_data()
            log.info(
                "Reference data updated: classes=%s, races=%s, realms=%s",
                result.classes,
                result.races,
                result.realms,
            )
        elif parsed_args.command == "user" and parsed_args.user_command == "create":
            user = create_user(
                battlenet_id=parsed_args.battlenet_id,
                battletag=parsed_args.battletag,
                access_token=parsed_args.access_token,
                refresh_token=parsed_args.refresh_token,
                token_expires_at=expires_at,
            )
            log.info("Created user %s", user.id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(EXIT_FAILURE)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
