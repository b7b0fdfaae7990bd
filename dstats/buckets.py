"""Per-minute bucket keys and the clock they are derived from."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo

BUCKET_KEY_PREFIX = "req-"


@dataclass(frozen=True, slots=True, order=True)
class MinuteKey:
    """A calendar minute, independent of how it is rendered for the store."""

    year: int
    month: int
    day: int
    hour: int
    minute: int

    @classmethod
    def from_datetime(cls, moment: datetime) -> MinuteKey:
        return cls(
            year=moment.year,
            month=moment.month,
            day=moment.day,
            hour=moment.hour,
            minute=moment.minute,
        )

    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d} {self.hour:02d}:{self.minute:02d}"

    def store_key(self) -> str:
        return f"{BUCKET_KEY_PREFIX}{self.label()}"


def bucket_zone(*, use_utc: bool) -> tzinfo | None:
    """Return the zone buckets are labelled in; ``None`` means host local time."""

    return timezone.utc if use_utc else None


def current_instant(now: datetime | None = None) -> datetime:
    """Return an aware "now", treating naive datetimes as host local time."""

    moment = now or datetime.now(tz=timezone.utc)
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment


def minute_key_at(moment: datetime, tz: tzinfo | None = None) -> MinuteKey:
    return MinuteKey.from_datetime(current_instant(moment).astimezone(tz))


def minute_window(
    now: datetime | None = None,
    *,
    length: int = 60,
    tz: tzinfo | None = None,
) -> list[MinuteKey]:
    """Return ``length`` consecutive minute keys, oldest first, ending at ``now``.

    Offsets are subtracted from the absolute instant and only then converted
    to ``tz``. In host local time a DST fall-back hour repeats its labels;
    UTC labels never repeat.
    """

    if length < 1:
        raise ValueError("length must be >= 1")

    instant = current_instant(now)
    return [
        minute_key_at(instant - timedelta(minutes=offset), tz)
        for offset in range(length - 1, -1, -1)
    ]
