"""Core data aggregation for cupslog."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .. import parser

HOURS_PER_DAY = 24


class OrderedSet:
    """Insertion-ordered collection of unique strings."""

    def __init__(self, items: Iterable[str] = ()):
        self._items: dict[str, None] = dict.fromkeys(items)

    def add(self, item: str) -> None:
        self._items.setdefault(item, None)

    def to_list(self) -> list[str]:
        return list(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedSet):
            return self.to_list() == other.to_list()
        return NotImplemented

    def __repr__(self) -> str:
        return f"OrderedSet({self.to_list()!r})"


@dataclass
class UserAggregate:
    name: str
    total_prints: int = 0
    jobs: int = 0
    printers: OrderedSet = field(default_factory=OrderedSet)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "totalPrints": self.total_prints,
            "jobs": self.jobs,
            "printers": self.printers.to_list(),
        }


@dataclass
class PrinterAggregate:
    name: str
    total_prints: int = 0
    jobs: int = 0
    users: OrderedSet = field(default_factory=OrderedSet)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "totalPrints": self.total_prints,
            "jobs": self.jobs,
            "users": self.users.to_list(),
        }


@dataclass
class DailyAggregate:
    date: str  # YYYY-MM-DD, local calendar day
    prints: int = 0
    jobs: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "prints": self.prints, "jobs": self.jobs}


@dataclass
class HourlyAggregate:
    hour: int
    prints: int = 0
    jobs: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"hour": self.hour, "prints": self.prints, "jobs": self.jobs}


@dataclass(frozen=True)
class AggregateStore:
    """One fully-built, point-in-time view of the page_log."""

    total_prints: int
    jobs: tuple[parser.JobRecord, ...]
    users: dict[str, UserAggregate]
    printers: dict[str, PrinterAggregate]
    daily_stats: dict[str, DailyAggregate]
    hourly_stats: dict[int, HourlyAggregate]
    last_update: datetime
    source: str | None = None

    @property
    def total_jobs(self) -> int:
        return len(self.jobs)

    def counts(self) -> dict[str, Any]:
        """Aggregate counters without timestamps, for comparing rebuilds."""

        return {
            "totalPrints": self.total_prints,
            "users": [u.to_dict() for u in self.users.values()],
            "printers": [p.to_dict() for p in self.printers.values()],
            "daily": [d.to_dict() for d in self.daily_stats.values()],
            "hourly": [h.to_dict() for h in self.hourly_stats.values()],
        }


class UsageAggregator:
    """Fold job records into per-user, per-printer and temporal buckets."""

    def __init__(self) -> None:
        self.total_prints = 0
        self.jobs: list[parser.JobRecord] = []
        self.users: dict[str, UserAggregate] = {}
        self.printers: dict[str, PrinterAggregate] = {}
        self.daily: dict[str, DailyAggregate] = {}
        self.hourly: dict[int, HourlyAggregate] = {}

    def ingest(self, record: parser.JobRecord) -> None:
        copies = record.num_copies
        self.total_prints += copies
        self.jobs.append(record)

        user = self.users.get(record.user)
        if user is None:
            user = self.users[record.user] = UserAggregate(name=record.user)
        user.total_prints += copies
        user.jobs += 1
        user.printers.add(record.printer)

        printer = self.printers.get(record.printer)
        if printer is None:
            printer = self.printers[record.printer] = PrinterAggregate(
                name=record.printer
            )
        printer.total_prints += copies
        printer.jobs += 1
        printer.users.add(record.user)

        # Temporal
        day_key = record.date_time.strftime("%Y-%m-%d")
        day = self.daily.get(day_key)
        if day is None:
            day = self.daily[day_key] = DailyAggregate(date=day_key)
        day.prints += copies
        day.jobs += 1

        hour_key = record.date_time.hour
        hour = self.hourly.get(hour_key)
        if hour is None:
            hour = self.hourly[hour_key] = HourlyAggregate(hour=hour_key)
        hour.prints += copies
        hour.jobs += 1

    def build(self, source: str | None = None) -> AggregateStore:
        return AggregateStore(
            total_prints=self.total_prints,
            jobs=tuple(self.jobs),
            users=self.users,
            printers=self.printers,
            daily_stats=self.daily,
            hourly_stats=self.hourly,
            last_update=datetime.now(),
            source=source,
        )


def aggregate(
    jobs: Iterable[parser.JobRecord], source: str | None = None
) -> AggregateStore:
    """Run a full pass over ``jobs`` and return a fresh store."""

    aggregator = UsageAggregator()
    for record in jobs:
        aggregator.ingest(record)
    return aggregator.build(source=source)


def users_by_prints(store: AggregateStore) -> list[UserAggregate]:
    return sorted(
        store.users.values(), key=lambda item: item.total_prints, reverse=True
    )


def printers_by_prints(store: AggregateStore) -> list[PrinterAggregate]:
    return sorted(
        store.printers.values(),
        key=lambda item: item.total_prints,
        reverse=True,
    )


def daily_series(store: AggregateStore) -> list[DailyAggregate]:
    return [store.daily_stats[key] for key in sorted(store.daily_stats)]


def hourly_series(store: AggregateStore) -> list[HourlyAggregate]:
    """Return all 24 hours, zero-filled where nothing was printed."""

    return [
        store.hourly_stats.get(hour) or HourlyAggregate(hour=hour)
        for hour in range(HOURS_PER_DAY)
    ]


def summary(
    store: AggregateStore, last_update: datetime | None = None
) -> dict[str, Any]:
    stamp = last_update or store.last_update
    return {
        "totalPrints": store.total_prints,
        "totalUsers": len(store.users),
        "totalPrinters": len(store.printers),
        "totalJobs": store.total_jobs,
        "lastUpdate": stamp.isoformat(),
    }
