"""Shared fixtures for the drawvault test suite."""

import json
from pathlib import Path

import pytest

from drawvault import DocumentSchema


@pytest.fixture
def schema():
    return DocumentSchema()


@pytest.fixture
def doc_bytes(schema):
    """A valid document with an extra field that must survive untouched."""
    doc = schema.default_document()
    doc["elements"] = [{"id": "rect-1", "type": "rectangle", "x": 10, "y": 20}]
    doc["customField"] = {"kept": True}
    return json.dumps(doc, indent=2).encode("utf-8")


@pytest.fixture
def vault(tmp_path):
    """An empty, canonical document folder."""
    root = tmp_path / "vault"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def make_doc(doc_bytes):
    """Write a document file (creating parents) and return its path."""

    def _make(path: Path, content: bytes = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(doc_bytes if content is None else content)
        return path

    return _make
