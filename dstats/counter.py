"""Record one request against the bucket for the current minute."""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo

from dstats.buckets import current_instant, minute_key_at
from dstats.stats import parse_count
from dstats.store import KeyValueStore

BUCKET_TTL_SECONDS = 86_400

logger = logging.getLogger("dstats.counter")


async def record(
    store: KeyValueStore,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
    ttl_seconds: int = BUCKET_TTL_SECONDS,
) -> int:
    """Increment the current minute's bucket and return its new count.

    This is a plain read-then-write: two concurrent requests in the same
    minute can both read ``n`` and both write ``n + 1``.
    """

    key = minute_key_at(current_instant(now), tz).store_key()
    current = await store.get(key)
    count = parse_count(current) + 1
    await store.put(key, str(count), ttl_seconds)
    logger.debug("bucket_incremented key=%s count=%s", key, count)
    return count
