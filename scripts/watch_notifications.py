"""Follow a user's notifications from the command line."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os

from secult_notify.client import (
    ReconciliationStore,
    TokenCredentialSource,
    connect_notifications,
)
from secult_notify.config import get_client_settings


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""

    parser = argparse.ArgumentParser(
        description="Print the unread counter and new notifications as they arrive.",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("NOTIFY_TOKEN"),
        help="Bearer token of the user to follow (default: $NOTIFY_TOKEN)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log channel state transitions and connection errors.",
    )
    return parser.parse_args()


def _print_store(store: ReconciliationStore) -> None:
    latest = store.notifications[:1]
    headline = f" latest: [{latest[0].kind}] {latest[0].message}" if latest else ""
    print(f"{store.unread_count} unread / {len(store)} total.{headline}")


async def _watch(token: str) -> None:
    credentials = TokenCredentialSource(token)
    async with connect_notifications(credentials, get_client_settings()) as gate:
        session = gate.session
        if session is None:
            raise SystemExit("The token is expired or invalid.")
        if session.snapshot_error is not None:
            print(f"Could not load notifications: {session.snapshot_error}")
        _print_store(session.store)
        session.store.subscribe(_print_store)
        await asyncio.Event().wait()


def main() -> None:
    args = parse_args()
    if not args.token:
        raise SystemExit("A token is required (--token or NOTIFY_TOKEN).")
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        asyncio.run(_watch(args.token))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
