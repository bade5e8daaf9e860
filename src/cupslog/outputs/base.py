"""Base classes for cupslog reports."""

from __future__ import annotations

import csv
import io
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import cached_property

from ..analysis import AggregateStore, CostConfig, aggregate
from ..parser import JobRecord

BOM = "\ufeff"


@dataclass
class ReportContext:
    jobs: Sequence[JobRecord]
    cost_config: CostConfig = field(default_factory=CostConfig)
    generated_at: datetime = field(default_factory=datetime.now)
    start_date: date | None = None
    end_date: date | None = None

    @cached_property
    def store(self) -> AggregateStore:
        return aggregate(self.jobs)


class ReportModule(ABC):
    name: str
    title: str = ""
    headers: Sequence[str] = ()

    def __init__(self, context: ReportContext):
        self.context = context

    @abstractmethod
    def rows(self) -> Iterable[Sequence]:
        """Yield the table body for the provided context."""

    def render(self) -> str:
        return ",".join(self.headers) + "\n" + format_rows(self.rows())


def format_rows(rows: Iterable[Sequence]) -> str:
    """Write rows as CSV, quoting every non-numeric cell."""

    buffer = io.StringIO()
    writer = csv.writer(
        buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n"
    )
    writer.writerows(rows)
    return buffer.getvalue()


REGISTRY: dict[str, type[ReportModule]] = {}


def register_report(name: str):
    def decorator(cls: type[ReportModule]) -> type[ReportModule]:
        REGISTRY[name] = cls
        cls.name = name
        return cls

    return decorator


def get_report_module(name: str) -> type[ReportModule]:
    if name not in REGISTRY:
        raise KeyError(
            f"Unknown report '{name}'. Available: {', '.join(REGISTRY)}"
        )
    return REGISTRY[name]


def list_reports() -> list[str]:
    return sorted(REGISTRY.keys())


def render_report(name: str, context: ReportContext) -> str:
    return get_report_module(name)(context).render()


def export_filename(name: str, today: date | None = None) -> str:
    day = today or date.today()
    return f"{name}_{day.isoformat()}.csv"
