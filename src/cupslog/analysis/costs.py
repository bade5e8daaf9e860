"""Per-printer page rates and cost attribution."""

from __future__ import annotations

import json
import logging
import math
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..parser import JobRecord
from .aggregator import OrderedSet

LOGGER = logging.getLogger(__name__)

RATE_KEY = "costPerPage"


@dataclass
class CostConfig:
    printers: dict[str, dict[str, float]] = field(default_factory=dict)
    last_update: datetime = field(default_factory=datetime.now)

    def rate_for(self, printer: str) -> float:
        entry = self.printers.get(printer)
        if not entry:
            return 0.0
        return entry.get(RATE_KEY, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "printers": {
                name: dict(entry) for name, entry in self.printers.items()
            },
            "lastUpdate": self.last_update.isoformat(),
        }


def coerce_rate(raw: Any) -> float:
    """Return a non-negative finite rate, or 0 for anything else."""

    if isinstance(raw, Mapping):
        raw = raw.get(RATE_KEY)
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def normalize_printers(
    printers: Mapping[str, Any],
) -> dict[str, dict[str, float]]:
    return {
        str(name): {RATE_KEY: coerce_rate(raw)}
        for name, raw in printers.items()
    }


class CostConfigStore:
    """Owns the cost table and its JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._config = CostConfig()
        self._lock = threading.Lock()

    def load(self) -> CostConfig:
        """Read the persisted table, keeping an empty one on any failure."""

        if not self.path.is_file():
            LOGGER.info(
                "No cost configuration at %s, starting empty", self.path
            )
            return self._config
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
            config = CostConfig(
                printers=normalize_printers(raw.get("printers") or {}),
                last_update=_parse_stamp(raw.get("lastUpdate")),
            )
        except (OSError, ValueError, AttributeError):
            LOGGER.exception(
                "Failed to load cost configuration from %s", self.path
            )
            return self._config
        self._config = config
        return config

    def get(self) -> CostConfig:
        return self._config

    def replace(self, printers: Mapping[str, Any]) -> CostConfig:
        """Swap in a whole new rate table and persist it."""

        config = CostConfig(
            printers=normalize_printers(printers),
            last_update=datetime.now(),
        )
        with self._lock:
            self._config = config
            self.save()
        return config

    def save(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                json.dump(self._config.to_dict(), handle, indent=2)
        except OSError:
            LOGGER.exception(
                "Failed to save cost configuration to %s", self.path
            )
            return False
        return True


def _parse_stamp(raw: Any) -> datetime:
    if isinstance(raw, str):
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now()
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed
    return datetime.now()


@dataclass
class PrinterCost:
    name: str
    cost_per_page: float
    total_prints: int = 0
    total_cost: float = 0.0
    jobs: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "totalPrints": self.total_prints,
            "totalCost": self.total_cost,
            "costPerPage": self.cost_per_page,
            "jobs": self.jobs,
        }


@dataclass
class UserCost:
    name: str
    total_prints: int = 0
    total_cost: float = 0.0
    jobs: int = 0
    printers: OrderedSet = field(default_factory=OrderedSet)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "totalPrints": self.total_prints,
            "totalCost": self.total_cost,
            "jobs": self.jobs,
            "printers": self.printers.to_list(),
        }


@dataclass
class CostAnalysis:
    total_cost: float
    total_prints: int
    printer_costs: list[PrinterCost]
    user_costs: list[UserCost]
    start_date: date | None = None
    end_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCost": self.total_cost,
            "totalPrints": self.total_prints,
            "printerCosts": [item.to_dict() for item in self.printer_costs],
            "userCosts": [item.to_dict() for item in self.user_costs],
            "period": {
                "startDate": _iso(self.start_date),
                "endDate": _iso(self.end_date),
            },
        }


def analyze_costs(
    jobs: Sequence[JobRecord],
    config: CostConfig,
    start_date: date | None = None,
    end_date: date | None = None,
) -> CostAnalysis:
    """Price every job at its printer's rate; unknown printers cost 0."""

    printer_costs: dict[str, PrinterCost] = {}
    user_costs: dict[str, UserCost] = {}
    total_cost = 0.0
    total_prints = 0

    for job in jobs:
        rate = config.rate_for(job.printer)
        job_cost = job.num_copies * rate

        printer = printer_costs.get(job.printer)
        if printer is None:
            printer = printer_costs[job.printer] = PrinterCost(
                name=job.printer, cost_per_page=rate
            )
        printer.total_prints += job.num_copies
        printer.total_cost += job_cost
        printer.jobs += 1

        user = user_costs.get(job.user)
        if user is None:
            user = user_costs[job.user] = UserCost(name=job.user)
        user.total_prints += job.num_copies
        user.total_cost += job_cost
        user.jobs += 1
        user.printers.add(job.printer)

        total_cost += job_cost
        total_prints += job.num_copies

    return CostAnalysis(
        total_cost=total_cost,
        total_prints=total_prints,
        printer_costs=sorted(
            printer_costs.values(),
            key=lambda item: item.total_cost,
            reverse=True,
        ),
        user_costs=sorted(
            user_costs.values(),
            key=lambda item: item.total_cost,
            reverse=True,
        ),
        start_date=start_date,
        end_date=end_date,
    )


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None
