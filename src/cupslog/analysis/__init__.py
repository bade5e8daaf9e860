"""Aggregation, filtering and cost attribution."""

from .aggregator import (
    AggregateStore,
    DailyAggregate,
    HourlyAggregate,
    OrderedSet,
    PrinterAggregate,
    UsageAggregator,
    UserAggregate,
    aggregate,
)
from .costs import CostAnalysis, CostConfig, CostConfigStore, analyze_costs
from .filters import Page, filter_by_date_range, filter_jobs, paginate

__all__ = [
    "AggregateStore",
    "CostAnalysis",
    "CostConfig",
    "CostConfigStore",
    "DailyAggregate",
    "HourlyAggregate",
    "OrderedSet",
    "Page",
    "PrinterAggregate",
    "UsageAggregator",
    "UserAggregate",
    "aggregate",
    "analyze_costs",
    "filter_by_date_range",
    "filter_jobs",
    "paginate",
]
