"""Utilities to read and normalize CUPS page_log entries."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

LOGGER = logging.getLogger(__name__)

DATE_FORMATS = (
    "%d/%b/%Y:%H:%M:%S %z",
    "%d/%b/%Y:%H:%M:%S",
)
MIN_FIELDS = 10
SUMMARY_MARKER = "total"
EMPTY = "-"

BRACKETED = re.compile(r"\[(.*?)\]")


@dataclass(frozen=True)
class JobRecord:
    printer: str
    user: str
    job_id: str
    date_time: datetime
    page_number: int = 1
    num_copies: int = 1
    job_billing: str = EMPTY
    host_name: str = EMPTY
    job_name: str = EMPTY
    media: str = EMPTY
    sides: str = EMPTY
    ingested_at: datetime = field(default_factory=datetime.now, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "printer": self.printer,
            "user": self.user,
            "jobId": self.job_id,
            "dateTime": self.date_time.isoformat(),
            "pageNumber": self.page_number,
            "numCopies": self.num_copies,
            "jobBilling": self.job_billing,
            "hostName": self.host_name,
            "jobName": self.job_name,
            "media": self.media,
            "sides": self.sides,
            "timestamp": self.ingested_at.isoformat(),
        }


def parse_page_log(path: Path) -> Iterator[JobRecord]:
    """Yield :class:`JobRecord` rows from a page_log file."""

    with path.open("r", encoding="utf-8", errors="ignore") as handle:
        yield from iter_page_log(handle)


def iter_page_log(lines: Iterable[str]) -> Iterator[JobRecord]:
    """Yield records for every accepted line, in input order."""

    rejected = 0
    for line in lines:
        record = parse_line(line)
        if record is None:
            if line.strip():
                rejected += 1
            continue
        yield record
    if rejected:
        LOGGER.debug("Skipped %d unparsable page_log line(s)", rejected)


def parse_line(line: str) -> JobRecord | None:
    """Parse a single page_log line, returning ``None`` when it is rejected.

    Summary rows (anything containing ``total``), blank lines and lines with
    fewer than ten whitespace-separated fields are dropped silently.
    """

    if not line.strip() or SUMMARY_MARKER in line:
        return None
    if len(line.split()) < MIN_FIELDS:
        return None

    try:
        return _build_record(line)
    except Exception:  # pragma: no cover - one bad line never aborts a rescan
        LOGGER.warning("Skipping malformed line: %r", line, exc_info=True)
        return None


def _build_record(line: str) -> JobRecord:
    match = BRACKETED.search(line)
    raw_timestamp = match.group(1) if match else None
    tokens = _positional_tokens(line, match)

    return JobRecord(
        printer=tokens[0],
        user=tokens[1],
        job_id=tokens[2],
        date_time=parse_timestamp(raw_timestamp),
        page_number=parse_int(_token(tokens, 4)),
        num_copies=parse_int(_token(tokens, 5)),
        job_billing=_token(tokens, 6) or EMPTY,
        host_name=_token(tokens, 7) or EMPTY,
        job_name=_token(tokens, 8) or EMPTY,
        media=_token(tokens, 9) or EMPTY,
        sides=_token(tokens, 10) or EMPTY,
    )


def _positional_tokens(line: str, match: re.Match[str] | None) -> list[str]:
    # The bracketed timestamp holds a space before the zone offset; fold it
    # into one token so the fields after it keep their positions.
    if match:
        folded = re.sub(r"\s+", "", match.group(0))
        line = line[: match.start()] + folded + line[match.end() :]
    return line.split()


def _token(tokens: list[str], index: int) -> str | None:
    return tokens[index] if index < len(tokens) else None


def parse_int(raw: str | None, default: int = 1) -> int:
    """Parse a non-negative integer token, falling back to ``default``."""

    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def parse_timestamp(
    raw: str | None,
    default_factory: Callable[[], datetime] = datetime.now,
) -> datetime:
    """Parse a page_log timestamp into naive local time.

    Offsets are converted to the host's local zone so daily and hourly
    buckets follow the local calendar.
    """

    if not raw:
        return default_factory()
    text = raw.strip()
    for fmt in DATE_FORMATS:
        try:
            return _to_local(datetime.strptime(text, fmt))
        except ValueError:
            continue
    try:
        return _to_local(datetime.fromisoformat(text))
    except ValueError:
        return default_factory()


def _to_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
