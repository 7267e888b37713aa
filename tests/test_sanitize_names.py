"""Tests for name sanitization and collision-free naming."""

from pathlib import Path

import pytest

from drawvault import (
    safe_join, ensure_extension, uniquify, check_directory_name,
    EmptyName, InvalidName, ExhaustedAttempts,
)


@pytest.mark.parametrize("raw, expected", [
    ("note", "note"),
    ("a/../b", "a___b"),
    ("a\\b", "a_b"),
    ("../../etc/passwd", "____etc_passwd"),
    ("..", "_"),
    ("/", "_"),
    ("my drawing", "my drawing"),
])
def test_safe_join_stays_in_directory(raw, expected, vault):
    joined = safe_join(vault, raw)
    assert joined.name == expected
    assert joined.parent == vault


def test_safe_join_custom_placeholder(vault):
    assert safe_join(vault, "a/b", placeholder="-").name == "a-b"


def test_safe_join_empty_name(vault):
    with pytest.raises(EmptyName):
        safe_join(vault, "")


def test_safe_join_dot_name(vault):
    with pytest.raises(InvalidName):
        safe_join(vault, ".")


@pytest.mark.parametrize("raw, expected", [
    ("draft", "draft.excalidraw"),
    ("draft.excalidraw", "draft.excalidraw"),
    ("draft.txt", "draft.excalidraw"),
    ("v1.2", "v1.excalidraw"),
])
def test_ensure_extension(raw, expected):
    once = ensure_extension(Path("dir") / raw, ".excalidraw")
    assert once.name == expected
    assert ensure_extension(once, ".excalidraw") == once
    assert ensure_extension(once, "excalidraw") == once


def test_uniquify_starts_at_one(vault):
    assert uniquify(vault, "note", ".excalidraw") == vault / "note-1.excalidraw"


def test_uniquify_strips_extension_from_base(vault):
    assert uniquify(vault, "note.excalidraw", ".excalidraw") == vault / "note-1.excalidraw"


def test_uniquify_skips_taken_names(vault):
    for n in (1, 2):
        (vault / f"note-{n}.excalidraw").touch()
    assert uniquify(vault, "note", ".excalidraw") == vault / "note-3.excalidraw"


def test_uniquify_uses_exists_hook(vault):
    taken = {vault / "x-1.excalidraw"}
    assert uniquify(vault, "x", ".excalidraw", exists_fn=taken.__contains__) == vault / "x-2.excalidraw"


def test_uniquify_exhausted(vault):
    for n in range(1, 101):
        (vault / f"base-{n}.excalidraw").touch()
    with pytest.raises(ExhaustedAttempts):
        uniquify(vault, "base", ".excalidraw")


def test_uniquify_respects_attempt_bound(vault):
    with pytest.raises(ExhaustedAttempts):
        uniquify(vault, "x", ".excalidraw", exists_fn=lambda p: True, max_attempts=3)


@pytest.mark.parametrize("name", ["a/b", "a\\b", "", "   ", ".", ".."])
def test_check_directory_name_rejects(name):
    with pytest.raises(InvalidName):
        check_directory_name(name)


def test_check_directory_name_accepts():
    check_directory_name("Sketches 2024")
    check_directory_name("..hidden")


def test_null_byte_is_replaced(vault):
    assert safe_join(vault, "a\x00b").name == "a_b"
    with pytest.raises(InvalidName):
        check_directory_name("a\x00b")
