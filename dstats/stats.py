"""Rebuild the recent per-minute request series from the store."""

from __future__ import annotations

from datetime import datetime, tzinfo

from pydantic import BaseModel, Field

from dstats.buckets import minute_window
from dstats.store import KeyValueStore

SERIES_LENGTH = 60


class StatsPoint(BaseModel):
    """One minute of the dashboard series."""

    time: str
    requests: int = Field(ge=0)


def parse_count(raw: str | None) -> int:
    if not raw:
        return 0
    count = int(raw)
    if count < 0:
        raise ValueError(f"Bucket holds a negative count: {raw!r}")
    return count


async def query(
    store: KeyValueStore,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
    length: int = SERIES_LENGTH,
) -> list[StatsPoint]:
    """Return one point per minute, oldest first, ending at the current minute."""

    series: list[StatsPoint] = []
    for minute in minute_window(now, length=length, tz=tz):
        raw = await store.get(minute.store_key())
        series.append(StatsPoint(time=minute.label(), requests=parse_count(raw)))
    return series
