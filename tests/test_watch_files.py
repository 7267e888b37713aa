"""Tests for the directory watch bridge."""

import threading
from pathlib import Path

import pytest
from watchdog.events import (
    FileCreatedEvent, FileModifiedEvent, FileDeletedEvent, FileMovedEvent,
    FileClosedEvent, DirCreatedEvent, DirModifiedEvent,
)

from drawvault import WatchSession, FileChange, ChangeKind, IOFailure
from drawvault.watch_files import translate_event

EXT = ".excalidraw"


class FakeObserver:
    """Stands in for a watchdog observer; events are pushed by the test"""

    def __init__(self):
        self.handler = None
        self.path = None
        self.recursive = None
        self.stopped = False

    def schedule(self, handler, path, recursive=False):
        self.handler = handler
        self.path = path
        self.recursive = recursive

    def start(self):
        pass

    def stop(self):
        self.stopped = True

    def join(self, timeout=None):
        pass


class Collector:
    def __init__(self, expected: int):
        self.changes = []
        self.expected = expected
        self.done = threading.Event()

    def __call__(self, change: FileChange):
        self.changes.append(change)
        if len(self.changes) >= self.expected:
            self.done.set()


@pytest.mark.parametrize("event, expected", [
    (FileCreatedEvent("/d/a.excalidraw"), [("/d/a.excalidraw", ChangeKind.CREATED)]),
    (FileModifiedEvent("/d/a.excalidraw"), [("/d/a.excalidraw", ChangeKind.MODIFIED)]),
    (FileDeletedEvent("/d/a.excalidraw"), [("/d/a.excalidraw", ChangeKind.REMOVED)]),
    (FileCreatedEvent("/d/a.txt"), []),
    (FileCreatedEvent("/d/a.excalidraw.partial"), []),
    (FileClosedEvent("/d/a.excalidraw"), []),
    (DirCreatedEvent("/d/sub.excalidraw"), []),
    (DirModifiedEvent("/d"), []),
    (FileMovedEvent("/d/a.excalidraw", "/d/b.excalidraw"),
     [("/d/a.excalidraw", ChangeKind.REMOVED), ("/d/b.excalidraw", ChangeKind.CREATED)]),
    (FileMovedEvent("/d/a.tmp", "/d/b.excalidraw"), [("/d/b.excalidraw", ChangeKind.CREATED)]),
    (FileMovedEvent("/d/a.excalidraw", "/d/a.bak"), [("/d/a.excalidraw", ChangeKind.REMOVED)]),
])
def test_translate_event(event, expected):
    changes = translate_event(event, EXT)
    assert [(str(c.path), c.kind) for c in changes] == [(p, k) for p, k in expected]


def test_session_delivers_filtered_events_in_order(vault):
    observer = FakeObserver()
    collector = Collector(expected=3)
    session = WatchSession(vault, collector, EXT, observer_factory=lambda: observer).start()
    try:
        assert observer.recursive is True
        assert observer.path == str(vault)
        observer.handler.on_any_event(FileCreatedEvent(str(vault / "a.excalidraw")))
        observer.handler.on_any_event(FileCreatedEvent(str(vault / "ignored.txt")))
        observer.handler.on_any_event(FileModifiedEvent(str(vault / "a.excalidraw")))
        observer.handler.on_any_event(FileDeletedEvent(str(vault / "a.excalidraw")))
        assert collector.done.wait(5)
    finally:
        session.stop()

    assert [c.kind for c in collector.changes] == [
        ChangeKind.CREATED, ChangeKind.MODIFIED, ChangeKind.REMOVED,
    ]
    assert observer.stopped
    assert not session.is_alive


def test_failing_callback_does_not_stop_delivery(vault):
    observer = FakeObserver()
    delivered = []
    done = threading.Event()

    def on_change(change):
        delivered.append(change.path.name)
        if change.path.name == "boom.excalidraw":
            raise RuntimeError("callback failed")
        done.set()

    with WatchSession(vault, on_change, EXT, observer_factory=lambda: observer):
        observer.handler.on_any_event(FileCreatedEvent(str(vault / "boom.excalidraw")))
        observer.handler.on_any_event(FileCreatedEvent(str(vault / "ok.excalidraw")))
        assert done.wait(5)

    assert delivered == ["boom.excalidraw", "ok.excalidraw"]


def test_session_requires_directory(vault, make_doc):
    doc = make_doc(vault / "a.excalidraw")
    with pytest.raises(IOFailure):
        WatchSession(doc, lambda change: None).start()
    with pytest.raises(IOFailure):
        WatchSession(vault / "missing", lambda change: None).start()


def test_stop_is_idempotent(vault):
    session = WatchSession(vault, lambda change: None, observer_factory=FakeObserver).start()
    assert session.is_alive
    session.stop()
    session.stop()
    assert not session.is_alive


def test_real_observer_reports_new_document(vault):
    seen = []
    found = threading.Event()

    def on_change(change):
        seen.append(change)
        if change.kind == ChangeKind.CREATED and change.path.name == "live.excalidraw":
            found.set()

    with WatchSession(vault, on_change, EXT):
        (vault / "sub").mkdir()
        (vault / "sub" / "ignored.txt").write_text("x")
        (vault / "sub" / "live.excalidraw").write_text("{}")
        assert found.wait(10)

    assert all(Path(c.path).suffix == EXT for c in seen)


def test_stop_from_callback_with_full_queue(vault):
    observer = FakeObserver()
    stopped = threading.Event()
    sessions = []

    def on_change(change):
        session = sessions[0]
        # Refill the queue so the stop sentinel cannot be enqueued
        session._events.put_nowait(FileCreatedEvent(str(vault / "late.excalidraw")))
        session.stop()
        stopped.set()

    session = WatchSession(vault, on_change, EXT, queue_size=1, observer_factory=lambda: observer)
    sessions.append(session)
    session.start()
    consumer = session._consumer
    observer.handler.on_any_event(FileCreatedEvent(str(vault / "a.excalidraw")))

    assert stopped.wait(5)
    consumer.join(5)
    assert not consumer.is_alive()
    assert not session.is_alive


def test_session_can_restart_after_stop(vault):
    observer = FakeObserver()
    collector = Collector(expected=1)
    session = WatchSession(vault, collector, EXT, observer_factory=lambda: observer)
    session.start()
    session.stop()
    session.start()
    try:
        observer.handler.on_any_event(FileCreatedEvent(str(vault / "again.excalidraw")))
        assert collector.done.wait(5)
    finally:
        session.stop()
    assert collector.changes[0].path.name == "again.excalidraw"
