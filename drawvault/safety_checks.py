"""
safety_checks.py - Path Guard

Canonicalizes and validates user-supplied paths before any file operation.

Validation and the later operation are not atomic: a symlink swapped in
between the check and the use is not caught here.
"""

from pathlib import Path
from typing import Tuple, Optional, Union
import os
import re

from .errors import (
    TraversalDetected, PathResolutionFailed, WrongExtension, NoExtension,
)
from .models_fs import ValidatedPath
from .validate_content import validate_document_content  # noqa: F401  (guard surface)

PathLike = Union[str, os.PathLike]

# Both separators, so a Windows-style "a\..\b" is caught on POSIX too
_COMPONENT_SPLIT = re.compile(r"[\\/]+")
SUSPICIOUS_COMPONENTS = frozenset({"..", "~"})


def has_traversal_component(path: PathLike) -> bool:
    """
    Check every path component for a literal ``..`` or ``~``

    Names that merely contain ``..`` (e.g. ``notes..final.excalidraw``) pass.
    """
    parts = _COMPONENT_SPLIT.split(os.fspath(path))
    return any(part in SUSPICIOUS_COMPONENTS for part in parts)


def _canonical_root(sandbox_root: PathLike) -> Path:
    try:
        return Path(sandbox_root).resolve(strict=True)
    except (OSError, RuntimeError, ValueError) as e:
        raise PathResolutionFailed(f"Failed to canonicalize base path: {e}") from e


def validate_path(path: PathLike, sandbox_root: Optional[PathLike] = None) -> ValidatedPath:
    """
    Validate that a path is safe to access

    Args:
        path: Candidate path
        sandbox_root: Directory the path must not escape (optional)

    Returns:
        Canonical path

    Raises:
        TraversalDetected: Traversal component, or path outside sandbox_root
        PathResolutionFailed: Path (or sandbox root) cannot be canonicalized
    """
    raw = os.fspath(path)
    if not raw:
        raise PathResolutionFailed("Path is empty")
    if "\x00" in raw:
        raise PathResolutionFailed("Path contains a null byte")

    if has_traversal_component(raw):
        raise TraversalDetected(f"Path contains suspicious patterns: {raw}")

    base = _canonical_root(sandbox_root) if sandbox_root is not None else None

    candidate = Path(raw)
    is_relative = not candidate.is_absolute()
    if base is not None and is_relative:
        candidate = base / candidate

    try:
        canonical = candidate.resolve(strict=True)
    except FileNotFoundError as e:
        if not is_relative:
            raise PathResolutionFailed(f"Failed to canonicalize path: {e}") from e
        # Not-yet-existing relative path (new file flows)
        if base is None:
            return ValidatedPath(Path(raw))
        canonical = candidate.resolve()
    except (OSError, RuntimeError, ValueError) as e:
        raise PathResolutionFailed(f"Failed to canonicalize path: {e}") from e

    if base is not None and not canonical.is_relative_to(base):
        raise TraversalDetected("Path traversal detected: path is outside allowed directory")

    if has_traversal_component(canonical):
        raise TraversalDetected(f"Path contains suspicious patterns: {canonical}")

    return ValidatedPath(canonical)


def _normalize_ext(ext: str) -> str:
    return ext if ext.startswith(".") else "." + ext


def matches_extension(path: PathLike, expected: str) -> bool:
    """Extension filter shared by the scanners, the watcher and the guard"""
    return Path(path).suffix == _normalize_ext(expected)


def validate_extension(path: PathLike, expected: str) -> None:
    """
    Validate that a file has the expected extension (case-sensitive)

    Raises:
        NoExtension: Name has no suffix
        WrongExtension: Suffix differs from expected
    """
    expected = _normalize_ext(expected)
    suffix = Path(path).suffix
    if not suffix:
        raise NoExtension(f"File has no extension: {Path(path).name}")
    if not matches_extension(path, expected):
        raise WrongExtension(f"Invalid file extension: expected {expected}, got {suffix}")


def check_writable(path: Path) -> Tuple[bool, Optional[str]]:
    """
    Check if path is writable

    Args:
        path: Path to check

    Returns:
        (is_writable, error_reason)
    """
    if path.exists():
        # File exists, check if writable
        if not os.access(path, os.W_OK):
            return False, f"File is not writable: {path}"
    else:
        # File doesn't exist, check if parent directory is writable
        parent = path.parent
        if not parent.exists():
            return False, f"Parent directory does not exist: {parent}"
        if not os.access(parent, os.W_OK):
            return False, f"Directory is not writable: {parent}"

    return True, None
