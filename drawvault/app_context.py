"""
app_context.py - Application Context

Holds the mutable state shared between command handlers: the current
directory with its watch session, and the set of documents with unsaved
edits. Each field has its own lock; no lock is held across I/O.
"""

from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set
import logging
import threading

from .models_fs import DocumentFile, FileChange, TreeNode, DEFAULT_EXTENSION
from .watch_files import WatchSession

logger = logging.getLogger(__name__)


class AppContext:
    """Explicitly passed application state"""

    def __init__(self, extension: str = DEFAULT_EXTENSION, watch_queue_size: int = 1024):
        self.extension = extension
        self.watch_queue_size = watch_queue_size

        self._dir_lock = threading.Lock()
        self._current_directory: Optional[Path] = None
        self._watch: Optional[WatchSession] = None

        self._modified_lock = threading.Lock()
        self._modified: Set[str] = set()

    # Current directory / watch slot

    @property
    def current_directory(self) -> Optional[Path]:
        with self._dir_lock:
            return self._current_directory

    @property
    def watch_session(self) -> Optional[WatchSession]:
        with self._dir_lock:
            return self._watch

    def watch_directory(self, directory: Path, on_change: Callable[[FileChange], None]) -> WatchSession:
        """
        Watch a directory, replacing the previous watch

        The new session is started before the old one is stopped, so there
        is no gap without a watch. Once this returns only the new session is
        live. If the new session fails to start, the old one keeps running.
        """
        session = WatchSession(
            directory,
            on_change,
            extension=self.extension,
            queue_size=self.watch_queue_size,
        ).start()

        with self._dir_lock:
            previous = self._watch
            self._watch = session
            self._current_directory = Path(directory)

        if previous is not None:
            previous.stop()
        return session

    def stop_watching(self) -> None:
        with self._dir_lock:
            previous = self._watch
            self._watch = None
        if previous is not None:
            previous.stop()

    # Modified-file tracking

    def mark_modified(self, path: Path) -> None:
        with self._modified_lock:
            self._modified.add(str(path))

    def clear_modified(self, path: Path) -> None:
        with self._modified_lock:
            self._modified.discard(str(path))

    def is_modified(self, path: Path) -> bool:
        with self._modified_lock:
            return str(path) in self._modified

    def modified_files(self) -> List[str]:
        with self._modified_lock:
            return sorted(self._modified)

    def forget_path(self, old: Path, new: Optional[Path] = None) -> None:
        """Carry the dirty flag across a rename/move, or drop it on delete"""
        with self._modified_lock:
            was_modified = str(old) in self._modified
            self._modified.discard(str(old))
            if was_modified and new is not None:
                self._modified.add(str(new))

    def apply_modified(self, items: Iterable) -> None:
        """Merge dirty flags into scan results (DocumentFile lists or TreeNode trees)"""
        dirty = set(self.modified_files())
        for item in items:
            if isinstance(item, TreeNode):
                for node in item.walk():
                    node.modified = not node.is_directory and str(node.path) in dirty
            elif isinstance(item, DocumentFile):
                item.modified = str(item.path) in dirty

    def close(self) -> None:
        self.stop_watching()
