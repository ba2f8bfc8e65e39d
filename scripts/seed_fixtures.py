#!/usr/bin/env python3
"""
Control-Plane Fixture Seeder

Writes a known client, one open critical event and one stash into Redis so
the API can be exercised by hand or from a smoke test.

Usage:
    python scripts/seed_fixtures.py
    python scripts/seed_fixtures.py --client i-424242 --check test
    python scripts/seed_fixtures.py --redis-url redis://localhost:6379/1
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

import structlog
from redis.asyncio import Redis

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from controlplane.config import get_settings
from controlplane.storage import keys

logger = structlog.get_logger()

STASH_PATH = "test/test"


async def seed(redis_url: str, client_name: str, check_name: str) -> None:
    """
    Register the client, open an event for it, and create a stash.

    Args:
        redis_url: Redis connection URL
        client_name: Name of the client to register
        check_name: Check the open event belongs to
    """
    redis = Redis.from_url(redis_url, decode_responses=True)
    now = int(time.time())
    client = {
        "name": client_name,
        "address": "127.0.0.1",
        "subscriptions": ["test"],
        "timestamp": now,
    }
    event = {
        "output": "CRITICAL",
        "status": 2,
        "issued": now,
        "flapping": False,
        "occurrences": 1,
    }
    try:
        await redis.set(keys.client_key(client_name), json.dumps(client))
        await redis.sadd(keys.CLIENTS, client_name)
        await redis.hset(keys.events_key(client_name), check_name, json.dumps(event))
        await redis.sadd(keys.history_key(client_name), check_name)
        await redis.rpush(keys.check_history_key(client_name, check_name), 2)
        await redis.set(keys.stash_key(STASH_PATH), json.dumps({"key": "value"}))
        await redis.sadd(keys.STASHES, STASH_PATH)
    finally:
        await redis.aclose()

    logger.info(
        "fixtures_seeded",
        client=client_name,
        check=check_name,
        stash=STASH_PATH,
    )


def main():
    """Main entry point for the fixture seeding script."""
    parser = argparse.ArgumentParser(description="Seed Redis with control-plane test fixtures")
    parser.add_argument(
        "--redis-url",
        type=str,
        default=None,
        help="Redis URL (default: REDIS_URL setting)",
    )
    parser.add_argument(
        "--client",
        type=str,
        default="i-424242",
        help="Client name to register (default: i-424242)",
    )
    parser.add_argument(
        "--check",
        type=str,
        default="test",
        help="Check name for the open event (default: test)",
    )

    args = parser.parse_args()

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    redis_url = args.redis_url or get_settings().redis_url
    logger.info("fixture_seeder_started", redis_url=redis_url)
    asyncio.run(seed(redis_url, args.client, args.check))


if __name__ == "__main__":
    main()
