"""
Tests for the credential/message file watcher
"""

import os
from unittest.mock import Mock

from watchdog.events import FileModifiedEvent, FileMovedEvent

from botpool.config.watcher import FileWatcher


def _touch(path, content: str, mtime: float) -> None:
    path.write_text(content)
    os.utime(path, (mtime, mtime))


class TestFileWatcher:
    def test_change_is_forwarded_to_loop(self, tmp_path):
        path = tmp_path / "bots.txt"
        _touch(path, "a", 1_000)
        loop = Mock()
        on_change = Mock()
        watcher = FileWatcher(loop, on_change)
        watcher.watch(path)

        _touch(path, "b", 2_000)
        watcher.handle_path(str(path))
        loop.call_soon_threadsafe.assert_called_once_with(on_change, os.path.abspath(path))

    def test_unchanged_mtime_is_debounced(self, tmp_path):
        path = tmp_path / "bots.txt"
        _touch(path, "a", 1_000)
        loop = Mock()
        watcher = FileWatcher(loop, Mock())
        watcher.watch(path)
        watcher.handle_path(str(path))
        loop.call_soon_threadsafe.assert_not_called()

    def test_unwatched_file_is_ignored(self, tmp_path):
        watched = tmp_path / "bots.txt"
        other = tmp_path / "other.txt"
        _touch(watched, "a", 1_000)
        _touch(other, "b", 2_000)
        loop = Mock()
        watcher = FileWatcher(loop, Mock())
        watcher.watch(watched)
        watcher.handle_path(os.fsencode(str(other)))
        loop.call_soon_threadsafe.assert_not_called()

    def test_handler_uses_move_destination(self, tmp_path):
        path = tmp_path / "messages.txt"
        _touch(path, "a", 1_000)
        loop = Mock()
        watcher = FileWatcher(loop, Mock())
        watcher.watch(path)
        _touch(path, "b", 2_000)
        watcher._handler.on_moved(FileMovedEvent(str(tmp_path / ".tmp123"), str(path)))
        assert loop.call_soon_threadsafe.call_count == 1

    def test_handler_modified_event(self, tmp_path):
        path = tmp_path / "messages.txt"
        _touch(path, "a", 1_000)
        loop = Mock()
        watcher = FileWatcher(loop, Mock())
        watcher.watch(path)
        _touch(path, "b", 3_000)
        watcher._handler.on_modified(FileModifiedEvent(str(path)))
        assert loop.call_soon_threadsafe.call_count == 1

    def test_start_and_stop(self, tmp_path):
        path = tmp_path / "bots.txt"
        _touch(path, "a", 1_000)
        watcher = FileWatcher(Mock(), Mock())
        watcher.watch(path)
        watcher.start()
        try:
            assert watcher._observer is not None
        finally:
            watcher.stop()
        assert watcher._observer is None
