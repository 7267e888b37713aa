"""
gui_workers.py - GUI Worker Threads

Runs file commands in the background to avoid blocking the UI, and relays
watch notifications from the watcher thread to the UI thread.
"""

from typing import Callable, Optional

from PySide6.QtCore import QThread, Signal, QObject

from drawvault import CommandResult, FileChange


class CommandWorker(QThread):
    """Runs one boundary command off the UI thread"""

    # Signals
    finished = Signal(object)       # CommandResult
    error = Signal(str)             # Unexpected failure

    def __init__(
        self,
        command: Callable[[], CommandResult],
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.command = command

    def run(self):
        try:
            result = self.command()
            self.finished.emit(result)
        except Exception as e:
            self.error.emit(str(e))


class WatchRelay(QObject):
    """Re-emits watch notifications as a Qt signal

    ``on_change`` is called on the watcher's consumer thread; connected slots
    run on the receiver's thread through a queued connection.
    """

    changed = Signal(str, str)      # path, kind

    def on_change(self, change: FileChange) -> None:
        self.changed.emit(str(change.path), change.kind.value)
