"""
outbox.py: Messaging transport adapter.

Pushes the messages of a committed operation onto a Redis list for the
external dispatcher that signs and broadcasts them. Called by the router
AFTER the engine committed; a publish failure does not undo the commit
(reconciliation belongs to the dispatcher side), so it is reported loudly
instead of silently dropped.

List    : treasury:outbox   (OUTBOX_KEY)
Payload : {"id": uuid, "t": unix_ts, "op": str, "caller": str, "msg": wire}
"""

import json
import logging
import os
import time
import uuid

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from services.messages import Response

logger = logging.getLogger("outbox")

OUTBOX_KEY = os.environ.get("OUTBOX_KEY", "treasury:outbox")


class OutboxError(Exception):
    """Committed messages could not be handed to the transport."""


def build_envelopes(operation: str, caller: str, response: Response) -> list[str]:
    now = int(time.time())
    return [
        json.dumps(
            {
                "id": str(uuid.uuid4()),
                "t": now,
                "op": operation,
                "caller": caller,
                "kind": message.kind,
                "msg": message.to_wire(),
            },
            separators=(",", ":"),
        )
        for message in response.messages
    ]


async def publish_messages(
    redis: aioredis.Redis,
    operation: str,
    caller: str,
    response: Response,
) -> int:
    """RPUSH every message of ``response``. Returns the number published."""
    envelopes = build_envelopes(operation, caller, response)
    if not envelopes:
        return 0
    try:
        await redis.rpush(OUTBOX_KEY, *envelopes)
    except RedisError as exc:
        logger.error("Outbox publish failed op=%s caller=%s: %s", operation, caller, exc)
        raise OutboxError(f"Could not publish {len(envelopes)} message(s): {exc}") from exc
    logger.info("Outbox: published %d message(s) op=%s", len(envelopes), operation)
    return len(envelopes)


# --- Connection lifecycle ---

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")

_outbox_redis: aioredis.Redis | None = None


async def connect_outbox(url: str = REDIS_URL) -> aioredis.Redis:
    """Open the shared outbox connection pool. Called once from the app lifespan.

    Pings before returning: a gateway that cannot reach its outbox would commit
    swaps whose messages never leave.
    """
    global _outbox_redis
    client = aioredis.from_url(url, decode_responses=True, max_connections=20, socket_timeout=5.0)
    try:
        await client.ping()
    except RedisError as exc:
        logger.critical("Outbox unreachable at %s: %s", url, exc)
        await client.aclose()
        raise
    _outbox_redis = client
    logger.info("Outbox connected: %s key=%s", url, OUTBOX_KEY)
    return client


async def disconnect_outbox() -> None:
    global _outbox_redis
    if _outbox_redis is not None:
        await _outbox_redis.aclose()
        _outbox_redis = None
        logger.info("Outbox connection closed")


async def get_outbox_redis() -> aioredis.Redis:
    """FastAPI dependency: the lifespan-managed outbox connection."""
    if _outbox_redis is None:
        raise RuntimeError("Outbox is not connected; check app startup")
    return _outbox_redis
