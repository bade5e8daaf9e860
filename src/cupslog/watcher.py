"""Rebuild the snapshot whenever the page_log changes on disk."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

LOGGER = logging.getLogger(__name__)

WATCHED_EVENTS = {"modified", "created", "moved"}


class LogChangeHandler(FileSystemEventHandler):
    """Invoke ``on_change`` for events touching a single file."""

    def __init__(self, path: Path, on_change: Callable[[], object]):
        super().__init__()
        self.path = os.path.abspath(path)
        self.on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in WATCHED_EVENTS:
            return
        touched = {os.path.abspath(os.fsdecode(event.src_path))}
        dest = getattr(event, "dest_path", None)
        if dest:
            touched.add(os.path.abspath(os.fsdecode(dest)))
        if self.path not in touched:
            return

        LOGGER.info("Log file %s changed, reprocessing", self.path)
        try:
            self.on_change()
        except Exception:
            LOGGER.exception("Rebuild after change to %s failed", self.path)


class LogWatcher:
    """Thin wrapper over a watchdog observer on the log's directory."""

    def __init__(self, path: Path, on_change: Callable[[], object]):
        self.path = Path(path)
        self.handler = LogChangeHandler(self.path, on_change)
        self._observer: Observer | None = None

    def start(self) -> bool:
        directory = self.path.parent
        if not directory.is_dir():
            LOGGER.error(
                "Cannot watch %s: directory %s does not exist",
                self.path,
                directory,
            )
            return False
        observer = Observer()
        observer.schedule(self.handler, str(directory), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        LOGGER.info("Watching %s for changes", self.path)
        return True

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None

    def __enter__(self) -> LogWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
