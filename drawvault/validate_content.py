"""
validate_content.py - Document Content Validation

Checks that a byte buffer is a structurally valid document before it is
trusted as content.
"""

from dataclasses import dataclass
from typing import Union
import json

from .errors import MalformedContent, SchemaViolation


@dataclass(frozen=True)
class DocumentSchema:
    """Required document shape"""
    type_tag: str = "excalidraw"    # Value required in the "type" field
    version: int = 2                # Version written into new documents
    source: str = "drawvault"       # "source" field of new documents

    def default_document(self) -> dict:
        """Content of a freshly created document"""
        return {
            "type": self.type_tag,
            "version": self.version,
            "source": self.source,
            "elements": [],
            "appState": {
                "gridSize": None,
                "viewBackgroundColor": "#ffffff",
            },
            "files": {},
        }

    def default_bytes(self) -> bytes:
        return json.dumps(self.default_document(), indent=2).encode("utf-8")


def _is_number(value) -> bool:
    # bool is an int subclass but JSON true/false are not numbers
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_document_content(data: Union[bytes, str], schema: DocumentSchema = DocumentSchema()) -> dict:
    """
    Validate document content

    Fields are checked in a fixed order (type, version, elements) so the
    reported field is deterministic. Unknown fields are left alone.

    Args:
        data: Raw content
        schema: Required shape

    Returns:
        Parsed document object
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedContent(f"Content is not valid UTF-8: {e}") from e

    try:
        doc = json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedContent(f"Invalid JSON: {e}") from e

    if not isinstance(doc, dict):
        raise MalformedContent("Content is not a JSON object")

    if "type" not in doc:
        raise SchemaViolation("type", "Missing required 'type' field")
    if doc["type"] != schema.type_tag:
        raise SchemaViolation(
            "type", f"Invalid type field: expected '{schema.type_tag}', got {doc['type']!r}"
        )

    if "version" not in doc:
        raise SchemaViolation("version", "Missing required 'version' field")
    if not _is_number(doc["version"]):
        raise SchemaViolation("version", "Version field must be a number")

    if "elements" not in doc:
        raise SchemaViolation("elements", "Missing required 'elements' field")
    if not isinstance(doc["elements"], list):
        raise SchemaViolation("elements", "Elements field must be an array")

    return doc
