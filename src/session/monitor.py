#!/usr/bin/env python3
"""
Inspect the sessions stored in Redis.

Useful for watching what login/logout actually do to the store:
- list    show every session with its TTL and data
- stats   count active and expired sessions, average TTL
- clean   remove sessions without a positive TTL
- watch   re-run ``list`` every few seconds
- monitor stream the Redis commands that touch session keys

Usage:
    session-monitor list
    session-monitor watch --interval 2
"""

import argparse
import asyncio
import json
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import redis.asyncio as aioredis
from dotenv import load_dotenv
from redis import RedisError

COMMANDS = ["list", "stats", "clean", "watch", "monitor"]


@dataclass
class SessionStats:
    total: int
    active: int
    expired: int
    average_ttl: float


def format_json(raw: Optional[str]) -> str:
    if raw is None:
        return "(no data)"
    try:
        return json.dumps(json.loads(raw), indent=2)
    except (TypeError, ValueError):
        return raw


async def session_keys(client: aioredis.Redis, prefix: str) -> List[str]:
    return [key async for key in client.scan_iter(match=f"{prefix}:*")]


async def show_sessions(client: aioredis.Redis, prefix: str) -> int:
    keys = await session_keys(client, prefix)
    if not keys:
        print("📭 No active sessions")
        return 0

    print(f"📊 {len(keys)} active sessions:\n")
    for key in sorted(keys):
        raw = await client.get(key)
        ttl = await client.ttl(key)
        print(f"🔑 {key}")
        print(f"⏰ TTL: {ttl}s")
        print("📄 Data:")
        print(format_json(raw))
        print("─" * 50)
    return len(keys)


async def collect_stats(client: aioredis.Redis, prefix: str) -> SessionStats:
    ttls = [await client.ttl(key) for key in await session_keys(client, prefix)]
    live = [ttl for ttl in ttls if ttl > 0]
    return SessionStats(
        total=len(ttls),
        active=len(live),
        expired=len(ttls) - len(live),
        average_ttl=sum(live) / len(live) if live else 0.0,
    )


async def show_stats(client: aioredis.Redis, prefix: str) -> SessionStats:
    stats = await collect_stats(client, prefix)
    print("📈 Session statistics:")
    print(f"   Total:   {stats.total}")
    print(f"   Active:  {stats.active}")
    print(f"   Expired: {stats.expired}")
    if stats.total:
        print(f"   Average TTL: {round(stats.average_ttl)}s")
    return stats


async def clean_expired(client: aioredis.Redis, prefix: str) -> int:
    """Delete session keys whose TTL is not positive (expired or persisted without one)."""
    cleaned = 0
    for key in await session_keys(client, prefix):
        if await client.ttl(key) <= 0:
            cleaned += await client.delete(key)

    if cleaned:
        print(f"🧹 Cleaned {cleaned} expired sessions")
    else:
        print("✅ No expired sessions to clean")
    return cleaned


async def watch_sessions(client: aioredis.Redis, prefix: str, interval: float) -> None:
    print(f"👀 Listing sessions every {interval:g} seconds (Ctrl+C to stop)...\n")
    while True:
        print(f"--- {datetime.now().strftime('%H:%M:%S')} ---")
        await show_sessions(client, prefix)
        await asyncio.sleep(interval)


async def monitor_sessions(client: aioredis.Redis, prefix: str) -> None:
    print("👁️  Watching Redis operations on session keys (Ctrl+C to stop)...\n")
    async with client.monitor() as monitor:
        async for event in monitor.listen():
            command = event.get("command", "")
            if f"{prefix}:" in command:
                print(f"🔄 {datetime.now().strftime('%H:%M:%S')}: {command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="session-monitor",
        description="Inspect login sessions stored in Redis",
    )
    parser.add_argument("command", nargs="?", choices=COMMANDS, help="What to do")
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL", "redis://localhost:6379"),
        help="Redis connection URL (default: $REDIS_URL or redis://localhost:6379)",
    )
    parser.add_argument(
        "--prefix",
        default=os.getenv("SESSION_KEY_PREFIX", "sess"),
        help="Session key prefix (default: $SESSION_KEY_PREFIX or sess)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=5.0,
        help="Seconds between refreshes for 'watch' (default: 5)",
    )
    return parser


async def run(args: argparse.Namespace) -> None:
    client = aioredis.from_url(args.redis_url, decode_responses=True)
    try:
        if args.command == "list":
            await show_sessions(client, args.prefix)
        elif args.command == "stats":
            await show_stats(client, args.prefix)
        elif args.command == "clean":
            await clean_expired(client, args.prefix)
        elif args.command == "watch":
            await watch_sessions(client, args.prefix, args.interval)
        elif args.command == "monitor":
            await monitor_sessions(client, args.prefix)
    finally:
        await client.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        print("\nExample: session-monitor list")
        return 0

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\n👋 Stopped")
    except RedisError as e:
        print(f"❌ Redis error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
