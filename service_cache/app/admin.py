"""
Operator CLI for the Stellar cache.

Invalidates namespaces and inspects or removes single entries against a live
Redis instance. Output is JSON on stdout; logs go to stderr.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from shared.errors import CacheConfigurationError, UnknownNamespaceError
from shared.logging import configure_logging, get_logger, set_request_id
from .cache.cache_service import CacheService
from .cache.namespaces import CacheNamespace
from .cache.store import KeyValueStore, RedisStore
from .config import get_settings

logger = get_logger("cache.admin")


async def run_command(args: argparse.Namespace, store: KeyValueStore) -> Dict[str, Any]:
    """Execute one admin command against ``store`` and return its JSON summary."""
    cache = CacheService(store, key_prefix=args.key_prefix)

    if args.command == "invalidate":
        deleted = await cache.invalidate_namespace(args.namespace)
        return {"namespace": CacheNamespace.coerce(args.namespace).value, "keys_deleted": deleted}

    if args.command == "get":
        return {
            "key": cache.build_key(args.namespace, args.identifier),
            "value": await cache.get(args.namespace, args.identifier),
        }

    if args.command == "delete":
        return {
            "key": cache.build_key(args.namespace, args.identifier),
            "deleted": await cache.delete(args.namespace, args.identifier),
        }

    if args.command == "ping":
        return {"healthy": await cache.health_check()}

    raise ValueError(f"Unknown command: {args.command}")


async def _run_against_redis(args: argparse.Namespace) -> Dict[str, Any]:
    store = RedisStore(
        args.redis_url,
        socket_timeout=args.socket_timeout,
        socket_connect_timeout=args.socket_timeout,
    )
    try:
        return await run_command(args, store)
    finally:
        await store.stop()


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    namespaces = ", ".join(ns.value for ns in CacheNamespace)

    parser = argparse.ArgumentParser(prog="stellar-cache", description="Inspect and invalidate the Stellar cache.")
    parser.add_argument("--redis-url", default=settings.redis_url, help="Redis connection URL")
    parser.add_argument("--key-prefix", default=settings.key_prefix, help="Key prefix used by the application")
    parser.add_argument("--socket-timeout", type=float, default=settings.redis_socket_timeout, help="Redis socket timeout in seconds")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    invalidate = subparsers.add_parser("invalidate", help="Delete every key in a namespace")
    invalidate.add_argument("namespace", help=f"One of: {namespaces}")

    get = subparsers.add_parser("get", help="Print a cached value")
    get.add_argument("namespace", help=f"One of: {namespaces}")
    get.add_argument("identifier")

    delete = subparsers.add_parser("delete", help="Delete a single cached value")
    delete.add_argument("namespace", help=f"One of: {namespaces}")
    delete.add_argument("identifier")

    subparsers.add_parser("ping", help="Check that the backing store answers")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("cache-admin", args.log_level)
    set_request_id()

    try:
        summary = asyncio.run(_run_against_redis(args))
    except KeyboardInterrupt:
        return 130
    except (UnknownNamespaceError, CacheConfigurationError) as exc:
        print(f"[stellar-cache] {exc.message}", file=sys.stderr)
        return 2

    logger.info("Admin command completed", command=args.command)
    print(json.dumps(summary, indent=2))

    if args.command == "ping" and not summary["healthy"]:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
