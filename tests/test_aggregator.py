"""Tests for usage aggregation."""

from datetime import datetime

from cupslog.analysis import aggregator
from cupslog.analysis.aggregator import OrderedSet, UsageAggregator, aggregate
from cupslog.parser import parse_page_log


def test_aggregator_initialization():
    """Test aggregator initialization."""
    agg = UsageAggregator()
    assert agg.total_prints == 0
    assert agg.jobs == []
    store = agg.build()
    assert store.total_jobs == 0
    assert store.users == {}


def test_aggregator_ingest_entry(make_job):
    """Test ingesting a log entry."""
    agg = UsageAggregator()
    agg.ingest(make_job(copies=5, when=datetime(2025, 4, 1, 10, 30)))
    store = agg.build()
    assert store.total_prints == 5
    assert store.users["alice"].total_prints == 5
    assert store.users["alice"].jobs == 1
    assert store.printers["HP-LaserJet"].users.to_list() == ["alice"]
    assert store.daily_stats["2025-04-01"].prints == 5
    assert store.hourly_stats[10].jobs == 1


def test_aggregator_multiple_entries(make_job):
    """Test aggregating multiple entries."""
    jobs = [
        make_job(
            printer=f"Printer{i % 2 + 1}",
            user=f"user{i % 3}",
            copies=i + 1,
            when=datetime(2025, 4, 1 + i % 2, 8 + i, 0),
            job_id=str(i),
        )
        for i in range(5)
    ]
    store = aggregate(jobs)
    assert store.total_jobs == 5
    assert store.total_prints == 15  # 1+2+3+4+5
    assert len(store.printers) == 2
    assert len(store.users) == 3
    assert store.jobs == tuple(jobs)


def test_sets_are_unique_and_insertion_ordered(make_job):
    store = aggregate(
        [
            make_job(printer="B", user="alice"),
            make_job(printer="A", user="alice"),
            make_job(printer="B", user="alice"),
        ]
    )
    assert store.users["alice"].printers.to_list() == ["B", "A"]
    assert store.users["alice"].jobs == 3


def test_user_and_printer_totals_match_overall(make_job):
    jobs = [
        make_job(printer=p, user=u, copies=c)
        for p, u, c in [
            ("A", "x", 3),
            ("B", "y", 0),
            ("A", "y", 7),
            ("C", "z", 2),
        ]
    ]
    store = aggregate(jobs)
    by_user = sum(u.total_prints for u in store.users.values())
    by_printer = sum(p.total_prints for p in store.printers.values())
    assert by_user == by_printer == store.total_prints == 12


def test_sorted_views(make_job):
    store = aggregate(
        [
            make_job(user="low", printer="P1", copies=1),
            make_job(user="high", printer="P2", copies=9),
            make_job(user="tie", printer="P3", copies=1),
            make_job(
                user="late",
                printer="P1",
                copies=2,
                when=datetime(2025, 3, 30, 23, 0),
            ),
        ]
    )
    names = [u.name for u in aggregator.users_by_prints(store)]
    assert names == ["high", "late", "low", "tie"]
    printers = [p.name for p in aggregator.printers_by_prints(store)]
    assert printers == ["P2", "P1", "P3"]
    days = [d.date for d in aggregator.daily_series(store)]
    assert days == ["2025-03-30", "2025-04-01"]


def test_hourly_series_always_24_rows(make_job):
    store = aggregate([make_job(when=datetime(2025, 4, 1, 23, 59), copies=4)])
    series = aggregator.hourly_series(store)
    assert len(series) == 24
    assert [point.hour for point in series] == list(range(24))
    assert series[23].prints == 4
    assert all(point.prints == 0 for point in series[:23])
    assert len(aggregator.hourly_series(aggregate([]))) == 24


def test_summary_counts_distinct(make_job):
    store = aggregate(
        [make_job(user="a"), make_job(user="a"), make_job(user="b")]
    )
    result = aggregator.summary(store)
    assert result["totalUsers"] == 2
    assert result["totalPrinters"] == 1
    assert result["totalJobs"] == 3
    assert result["totalPrints"] == 3
    stamp = datetime(2020, 1, 1)
    assert aggregator.summary(store, last_update=stamp)["lastUpdate"] == (
        "2020-01-01T00:00:00"
    )


def test_rebuild_is_idempotent(sample_page_log):
    first = aggregate(parse_page_log(sample_page_log))
    second = aggregate(parse_page_log(sample_page_log))
    assert first.counts() == second.counts()
    assert first.total_prints == 11


def test_ordered_set():
    items = OrderedSet(["b", "a", "b"])
    items.add("c")
    items.add("a")
    assert items.to_list() == ["b", "a", "c"]
    assert "a" in items
    assert len(items) == 3
    assert items == OrderedSet(["b", "a", "c"])


def test_to_dict_serializes_sets_as_lists(make_job):
    store = aggregate([make_job(user="u1", printer="p1")])
    assert store.users["u1"].to_dict() == {
        "name": "u1",
        "totalPrints": 1,
        "jobs": 1,
        "printers": ["p1"],
    }
    assert store.printers["p1"].to_dict()["users"] == ["u1"]
