"""Process-wide snapshot of the parsed page_log."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from .analysis import AggregateStore, aggregate
from .parser import iter_page_log, parse_page_log

LOGGER = logging.getLogger(__name__)

DEMO_SOURCE = "demo"

DEMO_PAGE_LOG = (
    "HP-LaserJet admin 1001 [15/Jan/2024:08:05:12] 2 3 - 192.168.1.10 "
    "budget.xlsx A4 one-sided\n"
    "HP-LaserJet user1 1002 [15/Jan/2024:09:14:55] 1 2 - 192.168.1.21 "
    "memo.docx A4 one-sided\n"
    "Canon-Pixma admin 1003 [15/Jan/2024:10:31:07] 4 1 - 192.168.1.10 "
    "photo.jpg Letter one-sided\n"
    "Canon-Pixma user2 1004 [15/Jan/2024:11:48:30] 1 5 - 192.168.1.22 "
    "flyer.pdf A4 two-sided-long-edge\n"
    "HP-LaserJet guest 1005 [15/Jan/2024:14:02:19] 3 4 - 192.168.1.40 "
    "slides.pptx A4 two-sided-long-edge\n"
    "HP-LaserJet user1 1006 [16/Jan/2024:08:45:00] 2 1 - 192.168.1.21 "
    "invoice.pdf A4 one-sided\n"
    "Canon-Pixma guest 1007 [16/Jan/2024:13:20:41] 1 2 - 192.168.1.40 "
    "ticket.pdf Letter one-sided\n"
    "HP-LaserJet admin 1008 [16/Jan/2024:16:55:03] 6 2 - 192.168.1.10 "
    "contract.pdf A4 two-sided-long-edge\n"
    "Canon-Pixma user2 1009 [17/Jan/2024:09:09:09] 2 3 - 192.168.1.22 "
    "poster.png A3 one-sided\n"
    "HP-LaserJet guest 1010 [17/Jan/2024:17:30:27] 1 6 - 192.168.1.40 "
    "agenda.odt A4 one-sided\n"
)


def demo_store() -> AggregateStore:
    """Build the snapshot served when no page_log is available."""

    return aggregate(
        iter_page_log(DEMO_PAGE_LOG.splitlines()), source=DEMO_SOURCE
    )


class SnapshotStore:
    """Holds the current :class:`AggregateStore` and swaps it on reload.

    Readers call :meth:`snapshot` once and keep that object for the whole
    request; a reload publishes a new store with a single assignment.
    """

    def __init__(
        self,
        page_log_path: Path,
        fallback_log_path: Path | None = None,
        use_demo: bool = True,
    ):
        self.page_log_path = Path(page_log_path)
        self.fallback_log_path = (
            Path(fallback_log_path) if fallback_log_path else None
        )
        self.use_demo = use_demo
        self._lock = threading.Lock()
        self._snapshot = aggregate(())

    def snapshot(self) -> AggregateStore:
        return self._snapshot

    def publish(self, store: AggregateStore) -> None:
        self._snapshot = store

    def resolve_source(self) -> Path | None:
        if self.page_log_path.is_file():
            return self.page_log_path
        if self.fallback_log_path and self.fallback_log_path.is_file():
            LOGGER.warning(
                "CUPS page_log not found at %s, using sample log %s",
                self.page_log_path,
                self.fallback_log_path,
            )
            return self.fallback_log_path
        return None

    def reload(self) -> AggregateStore:
        """Rebuild from the current source and publish the result.

        A read failure keeps the previously published snapshot.
        """

        with self._lock:
            source = self.resolve_source()
            if source is None:
                if not self.use_demo:
                    LOGGER.warning(
                        "No page_log found at %s", self.page_log_path
                    )
                    return self._snapshot
                LOGGER.info("No page_log available, serving demo data")
                store = demo_store()
            else:
                try:
                    records = list(parse_page_log(source))
                except OSError:
                    LOGGER.exception("Failed to read page_log %s", source)
                    return self._snapshot
                store = aggregate(records, source=str(source))

            self.publish(store)
            LOGGER.info(
                "Processed %d jobs, %d prints from %s",
                store.total_jobs,
                store.total_prints,
                store.source,
            )
            return store
