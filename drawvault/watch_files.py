"""
watch_files.py - Directory Watch Bridge

Turns raw recursive filesystem events into extension-filtered change
notifications.

The watchdog observer thread only enqueues raw events into a bounded queue.
A dedicated consumer thread filters them and calls ``on_change``, so a slow
callback applies backpressure to the observer instead of dropping events.
Every qualifying event yields one notification; nothing is coalesced.
"""

from pathlib import Path
from queue import Full, Queue
from typing import Callable, List, Optional
import logging
import os
import threading

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
)
from watchdog.observers import Observer

from .errors import IOFailure
from .models_fs import ChangeKind, FileChange, DEFAULT_EXTENSION
from .safety_checks import matches_extension

logger = logging.getLogger(__name__)

_STOP = object()


class _QueueingHandler(FileSystemEventHandler):
    """Runs on the observer thread; only hands events over"""

    def __init__(self, events: Queue):
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._events.put(event)


def translate_event(event: FileSystemEvent, extension: str) -> List[FileChange]:
    """
    Map one raw event to zero or more filtered notifications

    A move becomes REMOVED(source) plus CREATED(destination), each filtered
    on its own. Directory events and open/close events are dropped.
    """
    if event.is_directory:
        return []

    src = Path(os.fsdecode(event.src_path))
    if event.event_type == EVENT_TYPE_CREATED:
        changes = [FileChange(src, ChangeKind.CREATED)]
    elif event.event_type == EVENT_TYPE_MODIFIED:
        changes = [FileChange(src, ChangeKind.MODIFIED)]
    elif event.event_type == EVENT_TYPE_DELETED:
        changes = [FileChange(src, ChangeKind.REMOVED)]
    elif event.event_type == EVENT_TYPE_MOVED:
        dest = Path(os.fsdecode(event.dest_path))
        changes = [FileChange(src, ChangeKind.REMOVED), FileChange(dest, ChangeKind.CREATED)]
    else:
        return []

    return [c for c in changes if matches_extension(c.path, extension)]


class WatchSession:
    """One recursive watch bound to a directory and a delivery callback"""

    def __init__(
        self,
        directory: Path,
        on_change: Callable[[FileChange], None],
        extension: str = DEFAULT_EXTENSION,
        queue_size: int = 1024,
        observer_factory: Callable[[], Observer] = Observer,
    ):
        self.directory = Path(directory)
        self.extension = extension
        self._on_change = on_change
        self._observer_factory = observer_factory
        self._queue_size = queue_size
        self._events: Queue = Queue(maxsize=queue_size)
        self._observer: Optional[Observer] = None
        self._consumer: Optional[threading.Thread] = None
        self._stopped = threading.Event()

    @property
    def is_alive(self) -> bool:
        return self._consumer is not None and self._consumer.is_alive()

    def start(self) -> "WatchSession":
        if self._observer is not None:
            return self
        if not self.directory.is_dir():
            raise IOFailure(f"Cannot watch {self.directory}: not a directory")

        # Each run gets its own queue
        self._events = Queue(maxsize=self._queue_size)
        observer = self._observer_factory()
        try:
            observer.schedule(_QueueingHandler(self._events), os.fspath(self.directory), recursive=True)
            observer.start()
        except OSError as e:
            raise IOFailure(f"Cannot watch {self.directory}: {e}") from e

        self._observer = observer
        self._stopped = threading.Event()
        self._consumer = threading.Thread(
            target=self._consume,
            args=(self._stopped,),
            name=f"watch:{self.directory.name}",
            daemon=True,
        )
        self._consumer.start()
        logger.info("Watching %s for %s changes", self.directory, self.extension)
        return self

    def _consume(self, stopped: threading.Event) -> None:
        while not stopped.is_set():
            event = self._events.get()
            if event is _STOP:
                return
            for change in translate_event(event, self.extension):
                if stopped.is_set():
                    return
                try:
                    self._on_change(change)
                except Exception:
                    logger.exception("Watch callback failed for %s", change.path)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        observer, self._observer = self._observer, None
        consumer, self._consumer = self._consumer, None

        if observer is not None:
            observer.stop()
            observer.join(timeout)

        if consumer is not None:
            self._stopped.set()
            # A full queue means the consumer is not blocked in get() and will
            # see the flag after its current event
            try:
                self._events.put_nowait(_STOP)
            except Full:
                pass
            if consumer is not threading.current_thread():
                consumer.join(timeout)
            logger.info("Stopped watching %s", self.directory)

    def __enter__(self) -> "WatchSession":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
