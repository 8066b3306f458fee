"""
Command-line access to the Redis session store.

Settings come from SESSION_REDIS_* environment variables.

Usage:
    python -m Session_Store.cli ping
    python -m Session_Store.cli set <id> <value>
    python -m Session_Store.cli get <id>
    python -m Session_Store.cli exists <id>
    python -m Session_Store.cli delete <id>
    python -m Session_Store.cli list [namespace]
    python -m Session_Store.cli stats
"""

import argparse
import sys
from typing import Optional

from Session_Store.logging_config import configure_logging
from Session_Store.store_shared import config, errors
from Session_Store.store_shared.settings import settings_from_env
from Session_Store.store_db.store import RedisSessionStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="session-store", description="Redis session store")
    parser.add_argument("--log-level", default="WARNING", help="logging level (default: WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("ping", help="check that Redis answers")
    sub.add_parser("stats", help="show pool and health status")

    for name in ("get", "exists", "delete"):
        p = sub.add_parser(name, help=f"{name} a session")
        p.add_argument("id")

    p = sub.add_parser("set", help="save a session with the configured max age")
    p.add_argument("id")
    p.add_argument("value")

    p = sub.add_parser("list", help="list records in a session namespace hash")
    p.add_argument("namespace", nargs="?", default=config.SESSION_NAMESPACE)

    return parser


def _run(store: RedisSessionStore, args: argparse.Namespace) -> int:
    if args.command == "ping":
        print("PONG")
    elif args.command == "get":
        value = store.read(args.id)
        if not value:
            return 1
        print(value)
    elif args.command == "exists":
        found = store.exists(args.id)
        print("yes" if found else "no")
        return 0 if found else 1
    elif args.command == "set":
        store.save(args.id, args.value)
    elif args.command == "delete":
        store.delete(args.id)
    elif args.command == "list":
        for session_id, value in sorted(store.enumerate_by_prefix(args.namespace).items()):
            print(f"{session_id}\t{value}")
    elif args.command == "stats":
        health = store.health_check()
        print(f"connected: {health.connected}")
        print(f"reachable: {health.reachable}")
        if health.pool is not None:
            p = health.pool
            print(f"active:    {p.active}/{p.max_active or 'unbounded'}")
            print(f"idle:      {p.idle}/{p.max_idle or 'unbounded'}")
            print(f"dialed:    {p.dialed}")
            print(f"closed:    {p.closed}")
    return 0


def main(argv: Optional[list[str]] = None, store: Optional[RedisSessionStore] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        if store is None:
            store = RedisSessionStore(settings_from_env())
        if not store.connected:
            store.init()
    except errors.SessionStoreError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        return _run(store, args)
    except errors.SessionStoreError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
