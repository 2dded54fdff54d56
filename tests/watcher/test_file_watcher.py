import queue
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from watchdog.events import (
    DirCreatedEvent,
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from flowcrawl.watcher.file_watcher import CrawlDebouncer, CrawlEventHandler, FileWatcherService

EXTENSIONS = {".py", ".rs", ".ts"}


class TestCrawlEventHandler(unittest.TestCase):
    def setUp(self):
        self.event_queue = queue.Queue()
        self.handler = CrawlEventHandler(self.event_queue, EXTENSIONS)

    def drained(self):
        items = []
        while not self.event_queue.empty():
            items.append(self.event_queue.get_nowait())
        return items

    def test_patterns_follow_extensions(self):
        self.assertEqual(sorted(self.handler.patterns), ["*.py", "*.rs", "*.ts"])

    def test_on_created_file(self):
        self.handler.on_created(FileCreatedEvent("lib.rs"))
        self.assertEqual(self.drained(), [("created", Path("lib.rs"), None)])

    def test_on_created_directory_is_ignored(self):
        self.handler.on_created(DirCreatedEvent("pkg.py"))
        self.assertEqual(self.drained(), [])

    def test_on_modified_file(self):
        self.handler.on_modified(FileModifiedEvent("app.py"))
        self.assertEqual(self.drained(), [("modified", Path("app.py"), None)])

    def test_on_modified_directory_is_ignored(self):
        self.handler.on_modified(DirModifiedEvent("pkg.py"))
        self.assertEqual(self.drained(), [])

    def test_on_deleted_file(self):
        self.handler.on_deleted(FileDeletedEvent("app.ts"))
        self.assertEqual(self.drained(), [("deleted", Path("app.ts"), None)])

    def test_on_moved_file(self):
        self.handler.on_moved(FileMovedEvent("old.py", "new.py"))
        self.assertEqual(self.drained(), [("moved", Path("old.py"), Path("new.py"))])

    def test_dispatch_filters_other_suffixes(self):
        self.handler.dispatch(FileModifiedEvent("notes.txt"))
        self.handler.dispatch(FileModifiedEvent("main.py"))
        self.assertEqual(self.drained(), [("modified", Path("main.py"), None)])

    def test_is_relevant_filter(self):
        handler = CrawlEventHandler(self.event_queue, EXTENSIONS, is_relevant=lambda p: p.name != "test_app.py")
        handler.on_modified(FileModifiedEvent("test_app.py"))
        handler.on_modified(FileModifiedEvent("app.py"))
        self.assertEqual(self.drained(), [("modified", Path("app.py"), None)])

    def test_move_into_relevant_path_is_forwarded(self):
        handler = CrawlEventHandler(self.event_queue, EXTENSIONS, is_relevant=lambda p: p.name == "kept.py")
        handler.on_moved(FileMovedEvent("scratch.py", "kept.py"))
        self.assertEqual(self.drained(), [("moved", Path("scratch.py"), Path("kept.py"))])


class TestFileWatcherService(unittest.TestCase):
    def setUp(self):
        self.watch_path = Path(tempfile.mkdtemp(prefix="watch_svc_"))
        self.event_queue = queue.Queue()

        self.patcher_observer_class = patch('flowcrawl.watcher.file_watcher.Observer')
        self.MockObserverClass = self.patcher_observer_class.start()
        self.mock_observer_instance = MagicMock()
        self.MockObserverClass.return_value = self.mock_observer_instance

    def tearDown(self):
        self.patcher_observer_class.stop()
        shutil.rmtree(self.watch_path)

    def test_init_success(self):
        service = FileWatcherService(self.watch_path, self.event_queue, EXTENSIONS)
        self.MockObserverClass.assert_called_once()
        self.assertIsInstance(service.event_handler, CrawlEventHandler)
        self.assertEqual(service.watch_path, self.watch_path.resolve())

    def test_init_path_not_dir_raises_value_error(self):
        file_path = self.watch_path / "file.txt"
        file_path.write_text("test", encoding="utf-8")
        with self.assertRaises(ValueError):
            FileWatcherService(file_path, self.event_queue, EXTENSIONS)

    def test_start_observer(self):
        service = FileWatcherService(self.watch_path, self.event_queue, EXTENSIONS)
        self.mock_observer_instance.is_alive.return_value = False

        service.start()

        self.mock_observer_instance.schedule.assert_called_once_with(
            service.event_handler, str(self.watch_path.resolve()), recursive=True
        )
        self.mock_observer_instance.start.assert_called_once()

    def test_start_observer_already_running(self):
        service = FileWatcherService(self.watch_path, self.event_queue, EXTENSIONS)
        self.mock_observer_instance.is_alive.return_value = True
        service.start()
        self.mock_observer_instance.schedule.assert_not_called()
        self.mock_observer_instance.start.assert_not_called()

    def test_start_failure_is_reported(self):
        service = FileWatcherService(self.watch_path, self.event_queue, EXTENSIONS)
        self.mock_observer_instance.is_alive.return_value = False
        self.mock_observer_instance.start.side_effect = OSError("inotify limit reached")

        with patch('builtins.print') as mock_print:
            service.start()

        self.assertTrue(any("Could not start observer" in str(c.args) for c in mock_print.call_args_list))

    def test_stop_observer(self):
        service = FileWatcherService(self.watch_path, self.event_queue, EXTENSIONS)
        self.mock_observer_instance.is_alive.return_value = True

        service.stop()

        self.mock_observer_instance.stop.assert_called_once()
        self.mock_observer_instance.join.assert_called_once()
        # A fresh Observer is created so the service can be started again.
        self.assertEqual(self.MockObserverClass.call_count, 2)

    def test_stop_observer_not_running(self):
        service = FileWatcherService(self.watch_path, self.event_queue, EXTENSIONS)
        self.mock_observer_instance.is_alive.return_value = False
        service.stop()
        self.mock_observer_instance.stop.assert_not_called()
        self.mock_observer_instance.join.assert_not_called()


class TestCrawlDebouncer(unittest.TestCase):
    def setUp(self):
        self.event_queue = queue.Queue()
        self.debouncer = CrawlDebouncer(self.event_queue, debounce_seconds=0.5)

    def test_idle_poll_is_false(self):
        self.assertFalse(self.debouncer.poll(now=10.0))

    def test_fires_once_after_quiet_period(self):
        self.event_queue.put(("modified", Path("a.py"), None))
        self.assertFalse(self.debouncer.poll(now=10.0))
        self.assertFalse(self.debouncer.poll(now=10.25))
        self.assertTrue(self.debouncer.poll(now=10.5))
        self.assertFalse(self.debouncer.poll(now=11.5))

    def test_burst_extends_window(self):
        self.event_queue.put(("modified", Path("a.py"), None))
        self.debouncer.poll(now=10.0)
        self.event_queue.put(("modified", Path("b.py"), None))
        self.event_queue.put(("created", Path("c.py"), None))
        self.assertFalse(self.debouncer.poll(now=10.25))
        self.assertFalse(self.debouncer.poll(now=10.5))
        self.assertTrue(self.debouncer.poll(now=10.75))

    def test_drain_counts_events(self):
        self.event_queue.put(("modified", Path("a.py"), None))
        self.event_queue.put(("deleted", Path("b.py"), None))
        self.assertEqual(self.debouncer.drain(now=1.0), 2)
        self.assertEqual(self.debouncer.last_change, 1.0)
        self.assertTrue(self.event_queue.empty())

    def test_uses_clock_when_now_omitted(self):
        clock = MagicMock(side_effect=[5.0, 6.0])
        debouncer = CrawlDebouncer(self.event_queue, debounce_seconds=0.5, clock=clock)
        self.event_queue.put(("modified", Path("a.py"), None))
        self.assertFalse(debouncer.poll())
        self.assertTrue(debouncer.poll())


if __name__ == '__main__':
    unittest.main()
