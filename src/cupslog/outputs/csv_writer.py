"""CSV export reports."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from ..analysis import aggregator
from .base import (
    ReportModule,
    format_rows,
    get_report_module,
    register_report,
)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def money(value: float) -> Decimal:
    return Decimal(f"{value:.2f}")


def rate(value: float) -> Decimal:
    return Decimal(f"{value:.4f}")


@register_report("jobs")
class JobsReport(ReportModule):
    title = "JOBS"
    headers = (
        "Job ID",
        "User",
        "Printer",
        "DateTime",
        "Pages",
        "Copies",
        "Job Name",
        "Media",
        "Sides",
    )

    def rows(self) -> Iterable[Sequence]:
        for job in self.context.jobs:
            yield [
                job.job_id,
                job.user,
                job.printer,
                job.date_time.strftime(DATETIME_FORMAT),
                job.page_number,
                job.num_copies,
                job.job_name,
                job.media,
                job.sides,
            ]


@register_report("users")
class UsersReport(ReportModule):
    title = "USERS"
    headers = ("User", "Total Prints", "Total Jobs", "Printers Used")

    def rows(self) -> Iterable[Sequence]:
        for user in aggregator.users_by_prints(self.context.store):
            yield [
                user.name,
                user.total_prints,
                user.jobs,
                ", ".join(user.printers),
            ]


@register_report("printers")
class PrintersReport(ReportModule):
    title = "PRINTERS"
    headers = ("Printer", "Total Prints", "Total Jobs", "Users")

    def rows(self) -> Iterable[Sequence]:
        for printer in aggregator.printers_by_prints(self.context.store):
            yield [
                printer.name,
                printer.total_prints,
                printer.jobs,
                ", ".join(printer.users),
            ]


@register_report("daily")
class DailyReport(ReportModule):
    title = "DAILY STATISTICS"
    headers = ("Date", "Prints", "Jobs")

    def rows(self) -> Iterable[Sequence]:
        for day in aggregator.daily_series(self.context.store):
            yield [day.date, day.prints, day.jobs]


@register_report("hourly")
class HourlyReport(ReportModule):
    title = "HOURLY STATISTICS"
    headers = ("Hour", "Prints", "Jobs")

    def rows(self) -> Iterable[Sequence]:
        for point in aggregator.hourly_series(self.context.store):
            yield [point.hour, point.prints, point.jobs]


@register_report("costs")
class CostsReport(ReportModule):
    title = "COSTS"
    headers = ("Printer", "Total Prints", "Cost/Page", "Total Cost")

    def rows(self) -> Iterable[Sequence]:
        config = self.context.cost_config
        for printer in aggregator.printers_by_prints(self.context.store):
            per_page = config.rate_for(printer.name)
            yield [
                printer.name,
                printer.total_prints,
                rate(per_page),
                money(printer.total_prints * per_page),
            ]


@register_report("complete")
class CompleteReport(ReportModule):
    """Summary block followed by every other report, each under a banner."""

    title = "COMPLETE REPORT"
    sections = ("users", "printers", "daily", "hourly", "costs", "jobs")

    def rows(self) -> Iterable[Sequence]:
        store = self.context.store
        yield ["Total Prints", store.total_prints]
        yield ["Total Users", len(store.users)]
        yield ["Total Printers", len(store.printers)]
        yield ["Total Jobs", store.total_jobs]

    def render(self) -> str:
        context = self.context
        lines = [
            _banner("COMPLETE CUPS LOG REPORT"),
            "Generated at: "
            + context.generated_at.strftime(DATETIME_FORMAT),
        ]
        if context.start_date or context.end_date:
            start = (
                context.start_date.isoformat()
                if context.start_date
                else "beginning"
            )
            end = context.end_date.isoformat() if context.end_date else "today"
            lines.append(f"Period: {start} to {end}")
        lines.append("")

        parts = [
            "\n".join(lines) + "\n",
            _banner("SUMMARY") + "\n",
            format_rows(self.rows()) + "\n",
        ]

        for name in self.sections:
            module = get_report_module(name)(context)
            parts.append(_banner(module.title) + "\n")
            parts.append(module.render() + "\n")
        return "".join(parts)


def _banner(title: str) -> str:
    return f"=== {title} ==="
