from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from dstats.stats import StatsPoint, parse_count, query
from dstats.store import InMemoryKeyValueStore, StoreBackendError

NOW = datetime(2024, 1, 1, 10, 15, 30, tzinfo=timezone.utc)


class FailingStore(InMemoryKeyValueStore):
    async def get(self, key: str) -> str | None:
        raise StoreBackendError("Key-value backend unavailable")


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


async def test_empty_store_yields_sixty_zero_points_one_minute_apart() -> None:
    series = await query(InMemoryKeyValueStore(), now=NOW, tz=timezone.utc)

    assert len(series) == 60
    assert all(point.requests == 0 for point in series)
    assert series[-1].time == "2024-01-01 10:15"
    times = [datetime.strptime(point.time, "%Y-%m-%d %H:%M") for point in series]
    assert all(b - a == timedelta(minutes=1) for a, b in zip(times, times[1:]))


async def test_gaps_read_as_zero_between_recorded_minutes() -> None:
    store = InMemoryKeyValueStore()
    await store.put("req-2024-01-01 09:16", "7", 60)
    await store.put("req-2024-01-01 10:00", "2", 60)
    await store.put("req-2024-01-01 09:15", "99", 60)

    series = await query(store, now=NOW, tz=timezone.utc)

    assert series[0] == StatsPoint(time="2024-01-01 09:16", requests=7)
    by_time = {point.time: point.requests for point in series}
    assert by_time["2024-01-01 10:00"] == 2
    assert by_time["2024-01-01 10:01"] == 0
    assert "2024-01-01 09:15" not in by_time


async def test_expired_buckets_report_zero() -> None:
    clock = FakeClock()
    store = InMemoryKeyValueStore(clock=clock)
    await store.put("req-2024-01-01 10:15", "5", 86_400)

    clock.now += 86_400

    series = await query(store, now=NOW, tz=timezone.utc)
    assert series[-1].requests == 0


async def test_custom_series_length() -> None:
    series = await query(InMemoryKeyValueStore(), now=NOW, tz=timezone.utc, length=5)

    assert [point.time for point in series] == [
        "2024-01-01 10:11",
        "2024-01-01 10:12",
        "2024-01-01 10:13",
        "2024-01-01 10:14",
        "2024-01-01 10:15",
    ]


async def test_store_fault_aborts_the_whole_query() -> None:
    with pytest.raises(StoreBackendError):
        await query(FailingStore(), now=NOW, tz=timezone.utc)


async def test_corrupt_bucket_aborts_the_query() -> None:
    store = InMemoryKeyValueStore()
    await store.put("req-2024-01-01 10:15", "lots", 60)

    with pytest.raises(ValueError):
        await query(store, now=NOW, tz=timezone.utc)


def test_parse_count() -> None:
    assert parse_count(None) == 0
    assert parse_count("") == 0
    assert parse_count("12") == 12
    with pytest.raises(ValueError):
        parse_count("-1")
    with pytest.raises(ValueError):
        parse_count("twelve")
