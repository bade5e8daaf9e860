"""Date-window, attribute filters and pagination over job records."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Generic, TypeVar

from ..parser import JobRecord

T = TypeVar("T")


def filter_by_date_range(
    jobs: Sequence[JobRecord],
    start_date: date | None = None,
    end_date: date | None = None,
) -> Sequence[JobRecord]:
    """Keep jobs between ``start_date`` 00:00 and ``end_date`` 23:59:59.999.

    Both bounds are local calendar days and inclusive. Without any bound the
    input is returned as-is; a missing end defaults to today.
    """

    if start_date is None and end_date is None:
        return jobs

    lower = (
        datetime.combine(start_date, time.min)
        if start_date is not None
        else datetime.min
    )
    last_day = end_date if end_date is not None else date.today()
    upper = datetime.combine(last_day + timedelta(days=1), time.min)
    return [job for job in jobs if lower <= job.date_time < upper]


def filter_jobs(
    jobs: Sequence[JobRecord],
    user: str | None = None,
    printer: str | None = None,
) -> Sequence[JobRecord]:
    if user:
        jobs = [job for job in jobs if job.user == user]
    if printer:
        jobs = [job for job in jobs if job.printer == printer]
    return jobs


def sort_jobs_newest_first(jobs: Sequence[JobRecord]) -> list[JobRecord]:
    return sorted(jobs, key=lambda job: job.date_time, reverse=True)


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    total_pages: int


def paginate(items: Sequence[T], page: int = 1, limit: int = 50) -> Page[T]:
    """Slice ``items`` into 1-based pages of ``limit`` entries."""

    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive")
    start = (page - 1) * limit
    total = len(items)
    return Page(
        items=list(items[start : start + limit]),
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )
