import json
import logging

from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

# long enough for a client to retry after a storage outage
DEFAULT_TTL_SECONDS = 60 * 60

# The ticket table is the source of truth for replays; this cache only saves
# the lookup, so a redis outage degrades to a miss instead of failing the request.

async def get_issued_ticket(redis, idem_key: str) -> str | None:
    if redis is None:
        return None
    try:
        raw = await redis.get(f"idem:{idem_key}")
    except RedisError as e:
        logger.warning("idempotency cache read failed key=%s: %s", idem_key, e)
        return None
    return json.loads(raw)["ticket_id"] if raw else None

async def remember_issued_ticket(redis, idem_key: str, ticket_id: str, ttl_seconds: int = DEFAULT_TTL_SECONDS):
    if redis is None:
        return
    try:
        await redis.setex(f"idem:{idem_key}", ttl_seconds, json.dumps({"ticket_id": ticket_id}))
    except RedisError as e:
        logger.warning("idempotency cache write failed key=%s ticket=%s: %s", idem_key, ticket_id, e)
