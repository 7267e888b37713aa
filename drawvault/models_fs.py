"""
models_fs.py - Core Data Structure Definitions

Contains:
- ValidatedPath: Path that passed PathGuard
- DocumentFile: One document discovered by a scan
- TreeNode: One entry of the filtered directory tree
- FileChange: One forwarded watch notification
- FileOpResult / ScanResult: Operation results carrying warnings
- VaultOptions: Options configuration
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, NewType
from enum import Enum

from .validate_content import DocumentSchema


# Produced only by safety_checks.validate_path (and safe_join); every
# filesystem mutation takes one of these, never a raw string.
ValidatedPath = NewType("ValidatedPath", Path)

DEFAULT_EXTENSION = ".excalidraw"


class ChangeKind(Enum):
    """Watch notification kind"""
    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass
class DocumentFile:
    """Document file information"""
    name: str                       # Filename (with suffix)
    path: Path                      # Full path
    modified: bool = False          # Dirty flag, merged in by AppContext

    @classmethod
    def from_path(cls, p: Path) -> "DocumentFile":
        return cls(name=p.name, path=p)

    def relative_to(self, base: Path) -> str:
        """Get relative path string"""
        try:
            return str(self.path.relative_to(base))
        except ValueError:
            return str(self.path)

    def to_dict(self) -> dict:
        return {"name": self.name, "path": str(self.path), "modified": self.modified}


@dataclass
class TreeNode:
    """Directory tree entry; children is None for files"""
    name: str
    path: Path
    is_directory: bool
    children: Optional[List["TreeNode"]] = None
    modified: bool = False

    def walk(self):
        """Yield this node and all descendants, depth first"""
        yield self
        for child in self.children or []:
            yield from child.walk()

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "path": str(self.path),
            "is_directory": self.is_directory,
            "modified": self.modified,
            "children": None,
        }
        if self.children is not None:
            data["children"] = [c.to_dict() for c in self.children]
        return data


@dataclass(frozen=True)
class FileChange:
    """Extension-filtered change notification"""
    path: Path
    kind: ChangeKind


@dataclass
class FileOpResult:
    """Result of a mutating operation"""
    path: Path
    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


@dataclass
class ScanResult:
    """Result of a scan; warnings list skipped subdirectories"""
    items: list = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


@dataclass
class VaultOptions:
    """Options configuration"""
    # Tracked document type
    extension: str = DEFAULT_EXTENSION
    schema: DocumentSchema = field(default_factory=DocumentSchema)

    # Path validation
    sandbox_root: Optional[Path] = None

    # Scanning
    prune_empty_dirs: bool = True   # Drop directories without any document below them
    ignore_dirs: List[str] = field(default_factory=list)

    # Naming
    max_unique_attempts: int = 100
    name_placeholder: str = "_"

    # Watching
    watch_queue_size: int = 1024
