"""End-to-end tests for the boundary commands."""

import json

import pytest

from drawvault import (
    FileCommands, CommandDispatcher, VaultOptions, DocumentSchema, DocumentFile, TreeNode,
)


@pytest.fixture
def commands():
    cmds = FileCommands()
    yield cmds
    cmds.context.close()


@pytest.fixture
def sandboxed(vault):
    cmds = FileCommands(VaultOptions(sandbox_root=vault))
    yield cmds
    cmds.context.close()


def test_custom_document_type_lifecycle(vault):
    options = VaultOptions(extension=".document", schema=DocumentSchema(type_tag="document"))
    commands = FileCommands(options)
    root = str(vault)

    first = commands.create_document(root, "note")
    assert first.ok
    assert first.value == vault / "note.document"

    second = commands.create_document(root, "note")
    assert second.ok
    assert second.value == vault / "note-1.document"

    renamed = commands.rename_document(str(first.value), "draft")
    assert renamed.ok
    assert renamed.value == vault / "draft.document"
    assert not (vault / "note.document").exists()

    listed = commands.scan_files(root)
    assert [f.name for f in listed.value] == ["draft.document", "note-1.document"]

    read = commands.read_document(str(renamed.value))
    assert read.ok
    assert json.loads(read.value)["type"] == "document"


def test_write_then_read_returns_same_bytes(commands, vault, make_doc, doc_bytes):
    doc = make_doc(vault / "a.excalidraw", b"{}")
    written = commands.write_document(str(doc), doc_bytes)
    assert written.ok
    read = commands.read_document(str(doc))
    assert read.ok
    assert read.value == doc_bytes


def test_write_accepts_text(commands, vault):
    target = vault / "new.excalidraw"
    content = json.dumps({"type": "excalidraw", "version": 2, "elements": []})
    result = commands.write_document(str(target), content)
    assert result.ok
    assert target.read_text(encoding="utf-8") == content


def test_write_rejects_invalid_content(commands, vault, make_doc, doc_bytes):
    doc = make_doc(vault / "a.excalidraw")
    result = commands.write_document(str(doc), b'{"type": "other", "version": 1, "elements": []}')
    assert not result.ok
    assert result.error_kind == "SchemaViolation"
    assert doc.read_bytes() == doc_bytes


def test_write_rejects_wrong_extension(commands, vault):
    result = commands.write_document(str(vault / "a.json"), b"{}")
    assert not result.ok
    assert result.error_kind == "WrongExtension"
    assert not (vault / "a.json").exists()


def test_write_clears_modified_flag(commands, vault, make_doc, doc_bytes):
    doc = make_doc(vault / "a.excalidraw")
    commands.context.mark_modified(doc)
    assert commands.scan_files(str(vault)).value[0].modified
    commands.write_document(str(doc), doc_bytes)
    assert not commands.scan_files(str(vault)).value[0].modified


def test_read_errors(commands, vault, make_doc):
    malformed = make_doc(vault / "broken.excalidraw", b"{nope")
    assert commands.read_document(str(malformed)).error_kind == "MalformedContent"
    assert commands.read_document(str(vault / "missing.excalidraw")).error_kind == "PathInvalid"
    other = make_doc(vault / "a.txt", b"{}")
    assert commands.read_document(str(other)).error_kind == "WrongExtension"


def test_traversal_is_rejected(commands, vault):
    result = commands.scan_files(str(vault / ".." / "vault"))
    assert not result.ok
    assert result.error_kind == "PathInvalid"


def test_sandbox_blocks_outside_paths(sandboxed, vault, tmp_path, make_doc):
    outside = make_doc(tmp_path / "outside" / "a.excalidraw")
    assert sandboxed.read_document(str(outside)).error_kind == "PathInvalid"
    assert sandboxed.delete_document(str(outside)).error_kind == "PathInvalid"
    assert outside.exists()
    assert sandboxed.create_document(str(vault), "inside").ok


def test_save_as_cancelled(commands, doc_bytes):
    result = commands.save_document_as(doc_bytes, lambda: None)
    assert result.ok
    assert result.value is None


def test_save_as_adds_extension(commands, vault, doc_bytes):
    result = commands.save_document_as(doc_bytes, lambda: str(vault / "chosen"))
    assert result.ok
    assert result.value == vault / "chosen.excalidraw"
    assert (vault / "chosen.excalidraw").read_bytes() == doc_bytes


def test_rename_and_move_carry_modified_flag(commands, vault, make_doc):
    doc = make_doc(vault / "a.excalidraw")
    (vault / "sub").mkdir()
    commands.context.mark_modified(doc)

    renamed = commands.rename_document(str(doc), "b").value
    assert commands.context.is_modified(renamed)
    moved = commands.move_document(str(renamed), str(vault / "sub")).value
    assert commands.context.modified_files() == [str(moved)]

    assert commands.delete_document(str(moved)).ok
    assert commands.context.modified_files() == []


def test_failures_are_results(commands, vault, make_doc):
    doc = make_doc(vault / "a.excalidraw")
    make_doc(vault / "b.excalidraw")
    result = commands.rename_document(str(doc), "b")
    assert not result.ok
    assert result.error_kind == "AlreadyExists"
    assert result.message


def test_tree_and_directories(commands, vault, make_doc):
    make_doc(vault / "sub" / "a.excalidraw")
    assert commands.create_directory(str(vault), "empty").ok

    tree = commands.scan_tree(str(vault))
    assert tree.ok
    assert [n.name for n in tree.value] == ["sub"]
    assert isinstance(tree.value[0], TreeNode)

    renamed = commands.rename_directory(str(vault / "sub"), "drawings")
    assert renamed.value == vault / "drawings"
    assert commands.delete_directory(str(vault / "drawings")).ok
    assert commands.scan_tree(str(vault)).value == []


def test_keep_all_directories_option(vault):
    commands = FileCommands(VaultOptions(prune_empty_dirs=False))
    (vault / "empty").mkdir()
    assert [n.name for n in commands.scan_tree(str(vault)).value] == ["empty"]


def test_cleanup(commands, vault):
    (vault / ".__tmp_write__12345678__a.excalidraw.partial").write_bytes(b"x")
    result = commands.cleanup(str(vault))
    assert result.ok
    assert result.value == 1


def test_watch_directory_replaces_session(commands, tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    assert commands.watch_directory(str(tmp_path / "a"), lambda change: None).ok
    first = commands.context.watch_session
    assert commands.watch_directory(str(tmp_path / "b"), lambda change: None).ok
    assert not first.is_alive
    assert commands.context.current_directory == (tmp_path / "b").resolve()


def test_dispatcher_runs_commands(commands, vault, make_doc):
    make_doc(vault / "a.excalidraw")
    with CommandDispatcher(commands, max_workers=2) as dispatcher:
        futures = [dispatcher.submit("scan_files", str(vault)) for _ in range(4)]
        results = [f.result(timeout=10) for f in futures]
    assert all(r.ok for r in results)
    assert all(isinstance(r.value[0], DocumentFile) for r in results)


def test_dispatcher_rejects_unknown_command(commands):
    with CommandDispatcher(commands) as dispatcher:
        with pytest.raises(ValueError):
            dispatcher.submit("format_disk")


def test_null_byte_in_name_or_path_is_a_failure(commands, vault, make_doc):
    created = commands.create_document(str(vault), "a\x00b")
    assert created.ok
    assert created.value == vault / "a_b.excalidraw"

    for result in (
        commands.read_document(str(vault) + "/a\x00.excalidraw"),
        commands.write_document(str(vault) + "/a\x00.excalidraw", b"{}"),
        commands.scan_files(str(vault) + "\x00"),
        commands.create_directory(str(vault), "x\x00y"),
    ):
        assert not result.ok
        assert result.error_kind in ("PathInvalid", "InvalidName")

    doc = make_doc(vault / "c.excalidraw")
    renamed = commands.rename_document(str(doc), "d\x00e")
    assert renamed.ok
    assert renamed.value == vault / "d_e.excalidraw"
