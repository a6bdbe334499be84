"""
File watcher reloading the credential and message files at runtime
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..logs.logger import logger


class ReloadEventHandler(FileSystemEventHandler):
    """Forwards watchdog events for watched files to the owning watcher."""

    def __init__(self, watcher: FileWatcher) -> None:
        super().__init__()
        self.watcher = watcher

    def on_modified(self, event: FileSystemEvent) -> None:
        self.watcher.handle_path(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        self.watcher.handle_path(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save via rename report the real file as the destination.
        self.watcher.handle_path(getattr(event, "dest_path", "") or event.src_path)


class FileWatcher:
    """Calls ``on_change(path)`` on the event loop when a watched file changes.

    Watchdog delivers events on its own thread; the callback is marshalled
    back with ``call_soon_threadsafe`` so the controller stays single-writer.
    Events are debounced by modification time.
    """

    def __init__(
        self, loop: asyncio.AbstractEventLoop, on_change: Callable[[str], object]
    ) -> None:
        self.loop = loop
        self.on_change = on_change
        self._mtimes: dict[str, float] = {}
        self._observer: Observer | None = None
        self._handler = ReloadEventHandler(self)

    def watch(self, path: str | os.PathLike[str]) -> None:
        abs_path = os.path.abspath(path)
        try:
            self._mtimes[abs_path] = os.path.getmtime(abs_path)
        except OSError:
            self._mtimes[abs_path] = 0.0

    def start(self) -> None:
        if self._observer is not None or not self._mtimes:
            return
        observer = Observer()
        for directory in sorted({os.path.dirname(p) for p in self._mtimes}):
            observer.schedule(self._handler, directory, recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.log_event("watcher", "started", files=len(self._mtimes))

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=2)
        self._observer = None
        logger.log_event("watcher", "stopped", level=logging.DEBUG)

    def handle_path(self, src_path: str | bytes) -> None:
        path = os.path.abspath(os.fsdecode(src_path))
        if path not in self._mtimes:
            return
        try:
            mtime = os.path.getmtime(path)
        except FileNotFoundError:
            return
        if mtime <= self._mtimes[path]:
            return
        self._mtimes[path] = mtime
        logger.log_event("watcher", "file_changed", level=logging.DEBUG, path=path)
        self.loop.call_soon_threadsafe(self.on_change, path)
