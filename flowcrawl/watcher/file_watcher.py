import queue
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple, Union

from watchdog.observers import Observer
from watchdog.events import (
    PatternMatchingEventHandler,
    FileSystemEvent,
    FileSystemMovedEvent,
)

# (event_type, src_path, dest_path) as delivered through the channel.
WatchEvent = Tuple[str, Path, Optional[Path]]

DEFAULT_DEBOUNCE_SECONDS = 0.5


class CrawlEventHandler(PatternMatchingEventHandler):
    """
    Forwards events for crawlable source files into a queue.

    The observer thread is the only producer; the crawl session drains the
    queue from its own tick.
    """

    def __init__(
        self,
        event_queue: "queue.Queue[WatchEvent]",
        extensions: Iterable[str],
        is_relevant: Optional[Callable[[Path], bool]] = None,
    ):
        super().__init__(
            patterns=[f"*{ext}" for ext in sorted(extensions)],
            ignore_patterns=["*~", "*.swp", "*.tmp"],
            ignore_directories=True,
        )
        self.event_queue = event_queue
        self.is_relevant = is_relevant

    def _forward(self, event_type: str, src_path: Path, dest_path: Optional[Path] = None) -> None:
        if self.is_relevant is not None:
            if not self.is_relevant(src_path) and (dest_path is None or not self.is_relevant(dest_path)):
                return
        self.event_queue.put((event_type, src_path, dest_path))

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory:
            self._forward("created", Path(event.src_path))

    def on_modified(self, event: FileSystemEvent):
        if not event.is_directory:
            self._forward("modified", Path(event.src_path))

    def on_deleted(self, event: FileSystemEvent):
        if not event.is_directory:
            self._forward("deleted", Path(event.src_path))

    def on_moved(self, event: FileSystemMovedEvent):
        if not event.is_directory:
            self._forward("moved", Path(event.src_path), Path(event.dest_path))


class FileWatcherService:
    def __init__(
        self,
        path_to_watch: Union[str, Path],
        event_queue: "queue.Queue[WatchEvent]",
        extensions: Iterable[str],
        is_relevant: Optional[Callable[[Path], bool]] = None,
        verbose: bool = False,
    ):
        """
        Watches a directory tree for changes to crawlable files.

        Args:
            path_to_watch: Directory to monitor recursively.
            event_queue: Channel the observer thread writes WatchEvent tuples to.
            extensions: File suffixes (".py", ".rs", ...) worth reporting.
            is_relevant: Optional extra filter, e.g. dropping test files.
        """
        self.watch_path = Path(path_to_watch).resolve()
        if not self.watch_path.is_dir():
            raise ValueError(
                f"Path to watch must be a valid directory: {self.watch_path}"
            )
        self.verbose = verbose
        self.event_handler = CrawlEventHandler(event_queue, extensions, is_relevant)
        self.observer: Optional[Observer] = Observer()

    def start(self) -> None:
        """Starts the file system observer in a separate thread."""
        if self.observer is None:
            self.observer = Observer()
        if self.observer.is_alive():
            if self.verbose:
                print("FileWatcherService: Observer is already running.")
            return

        try:
            self.observer.schedule(self.event_handler, str(self.watch_path), recursive=True)
            self.observer.start()
            if self.verbose:
                print(f"FileWatcherService: Started watching directory '{self.watch_path}'.")
        except Exception as e:
            print(f"FileWatcherService Error: Could not start observer: {e}")
            # A failed observer cannot be restarted; keep a fresh one for the next start().
            self.observer = Observer()

    def stop(self) -> None:
        """Stops the observer thread and waits for it."""
        if self.observer and self.observer.is_alive():
            try:
                self.observer.stop()
                self.observer.join(timeout=5)
                if self.verbose:
                    print("FileWatcherService: Stopped watching.")
            except Exception as e:
                print(f"FileWatcherService Error: Exception while stopping observer: {e}")
        # watchdog needs a new Observer instance to restart after join().
        self.observer = Observer()

    @property
    def is_running(self) -> bool:
        return bool(self.observer and self.observer.is_alive())


class CrawlDebouncer:
    """
    Coalesces bursts of file events into a single re-crawl.

    poll() never blocks. It returns True exactly once per burst, after
    ``debounce_seconds`` have passed since the last relevant event.
    """

    def __init__(
        self,
        event_queue: "queue.Queue[WatchEvent]",
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.event_queue = event_queue
        self.debounce_seconds = debounce_seconds
        self.clock = clock
        self.last_change: Optional[float] = None

    def drain(self, now: float) -> int:
        drained = 0
        while True:
            try:
                self.event_queue.get_nowait()
            except queue.Empty:
                break
            drained += 1
        if drained:
            self.last_change = now
        return drained

    def poll(self, now: Optional[float] = None) -> bool:
        now = self.clock() if now is None else now
        self.drain(now)
        if self.last_change is None:
            return False
        if now - self.last_change >= self.debounce_seconds:
            self.last_change = None
            return True
        return False
