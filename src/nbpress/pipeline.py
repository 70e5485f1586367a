"""Batch and watch-mode orchestration of notebook conversions."""

import logging
import queue
import threading
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from nbpress.converter import NOTEBOOK_SUFFIX, NotebookConverter, slug_for
from nbpress.models import ConversionResult, ConversionStatus

logger = logging.getLogger(__name__)


class NotebookEventHandler(FileSystemEventHandler):
    """Forward notebook file names from watchdog events to a queue.

    Runs on the observer thread and does no conversion work itself.
    """

    def __init__(self, watch_dir: Path, changes: "queue.Queue[str]"):
        self.watch_dir = Path(watch_dir)
        self.changes = changes
        super().__init__()

    def on_created(self, event: FileSystemEvent):
        """Handle file creation"""
        if not event.is_directory:
            self._handle_change(event.src_path)

    def on_modified(self, event: FileSystemEvent):
        """Handle file modification"""
        if not event.is_directory:
            self._handle_change(event.src_path)

    def on_moved(self, event: FileSystemEvent):
        """Handle renames into the watched directory (editors save this way)"""
        if not event.is_directory:
            self._handle_change(event.dest_path)

    def _handle_change(self, file_path: str | bytes):
        if isinstance(file_path, bytes):
            file_path = file_path.decode()
        path = Path(file_path)
        if path.parent.resolve() != self.watch_dir.resolve():
            return
        if is_notebook_name(path.name):
            self.changes.put(path.name)


class PipelineDriver:
    """Run conversions over a notebooks directory.

    Conversions always happen on the caller's thread, one at a time.
    """

    def __init__(
        self,
        converter: NotebookConverter,
        poll_interval: float = 0.5,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ):
        """Initialize the driver.

        Args:
            converter: Per-notebook converter (its cache must be loaded)
            poll_interval: Seconds between stop checks while watching
            observer_factory: Creates the watchdog observer
        """
        self.converter = converter
        self.poll_interval = poll_interval
        self.observer_factory = observer_factory
        self.changes: "queue.Queue[str]" = queue.Queue()
        self._stop = threading.Event()

    @property
    def notebooks_dir(self) -> Path:
        return self.converter.notebooks_dir

    def discover(self) -> list[str]:
        """List notebook file names in the notebooks directory (non-recursive)."""
        if not self.notebooks_dir.is_dir():
            return []
        return sorted(
            path.name
            for path in self.notebooks_dir.iterdir()
            if path.is_file() and is_notebook_name(path.name)
        )

    def run_once(self, force: bool = False) -> list[ConversionResult]:
        """Convert every notebook in the directory.

        A failing notebook is logged and reported; the others still run.

        Args:
            force: Ignore the cache

        Returns:
            list[ConversionResult]: One result per notebook
        """
        if not self.notebooks_dir.is_dir():
            logger.info("No notebooks directory found at %s", self.notebooks_dir)
            return []

        return [self.process(filename, force=force) for filename in self.discover()]

    def process(self, filename: str, force: bool = False) -> ConversionResult:
        """Convert one notebook, turning any failure into a failed result."""
        try:
            return self.converter.convert(filename, force=force)
        except Exception as e:
            logger.error(
                "Error processing %s: %s",
                filename,
                e,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            return ConversionResult(
                filename=filename,
                slug=slug_for(filename),
                status=ConversionStatus.FAILED,
                error=str(e),
            )

    def handle_change(self, filename: str) -> Optional[ConversionResult]:
        """React to a change notification for one file.

        The file may have been deleted since the event was emitted, so it is
        only converted if it still exists now.

        Returns:
            Optional[ConversionResult]: Result, or None if the file was ignored
        """
        if not is_notebook_name(filename):
            return None
        if not (self.notebooks_dir / filename).is_file():
            logger.debug("Ignoring change to missing file %s", filename)
            return None
        return self.process(filename)

    def watch(self) -> None:
        """Convert notebooks as they change, until ``stop()`` or Ctrl-C."""
        if not self.notebooks_dir.is_dir():
            logger.warning("Watch path does not exist: %s", self.notebooks_dir)
            return

        handler = NotebookEventHandler(self.notebooks_dir, self.changes)
        observer = self.observer_factory()
        observer.schedule(handler, str(self.notebooks_dir), recursive=False)
        observer.start()
        logger.info("Watching %s for changes...", self.notebooks_dir)

        try:
            while not self._stop.is_set():
                self.drain(timeout=self.poll_interval)
        except KeyboardInterrupt:
            logger.info("Stopping watcher")
        finally:
            observer.stop()
            observer.join(timeout=5)

    def drain(self, timeout: Optional[float] = None) -> list[ConversionResult]:
        """Process queued change notifications.

        Waits up to ``timeout`` seconds for the first one, then handles
        everything already queued. Repeated events for the same file are
        collapsed into one conversion.
        """
        try:
            pending = [self.changes.get(timeout=timeout)]
        except queue.Empty:
            return []

        while True:
            try:
                pending.append(self.changes.get_nowait())
            except queue.Empty:
                break

        results = []
        for filename in dict.fromkeys(pending):
            result = self.handle_change(filename)
            if result is not None:
                results.append(result)
        return results

    def stop(self) -> None:
        """Ask ``watch()`` to return."""
        self._stop.set()


def is_notebook_name(name: str) -> bool:
    """Return True for visible .ipynb file names."""
    return name.endswith(NOTEBOOK_SUFFIX) and not name.startswith(".")
