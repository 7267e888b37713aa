"""
sanitize_names.py - Filename Sanitization

Pure string helpers for turning user-supplied names into safe, collision-free
document paths. Nothing here touches the filesystem except through the
``exists_fn`` hook of uniquify.
"""

from pathlib import Path
from typing import Callable, Optional, Union
import os

from .errors import EmptyName, InvalidName, ExhaustedAttempts
from .models_fs import ValidatedPath

MAX_UNIQUE_ATTEMPTS = 100


def sanitize_name(raw_name: str, placeholder: str = "_") -> str:
    """
    Replace path separators, ``..`` and NUL with a placeholder

    Args:
        raw_name: User-supplied name
        placeholder: Replacement character

    Returns:
        Cleaned name (may be empty)
    """
    return (
        raw_name
        .replace("/", placeholder)
        .replace("\\", placeholder)
        .replace("..", placeholder)
        .replace("\x00", placeholder)
    )


def safe_join(directory: ValidatedPath, raw_name: str, placeholder: str = "_") -> ValidatedPath:
    """
    Safely join a filename to a directory path

    Args:
        directory: Validated parent directory
        raw_name: User-supplied name
        placeholder: Replacement for separators and ``..``

    Returns:
        Path whose parent is ``directory``
    """
    clean_name = sanitize_name(raw_name, placeholder)
    if not clean_name:
        raise EmptyName("Invalid filename: name is empty")
    if clean_name == ".":
        raise InvalidName(f"Invalid filename: {raw_name!r}")
    return ValidatedPath(Path(directory) / clean_name)


def _normalize_ext(ext: str) -> str:
    return ext if ext.startswith(".") else "." + ext


def ensure_extension(path: Union[str, os.PathLike], ext: str) -> Path:
    """Append the extension if absent, replace it if different"""
    ext = _normalize_ext(ext)
    path = Path(path)
    if path.suffix == ext:
        return path
    if path.suffix:
        return path.with_suffix(ext)
    return path.with_name(path.name + ext)


def uniquify(
    directory: Path,
    base_name: str,
    ext: str,
    exists_fn: Optional[Callable[[Path], bool]] = None,
    max_attempts: int = MAX_UNIQUE_ATTEMPTS,
) -> Path:
    """
    Find a free ``base-N.ext`` name in a directory

    Args:
        directory: Target directory
        base_name: Name without the numeric suffix
        ext: Extension
        exists_fn: Collision check (defaults to Path.exists)
        max_attempts: Largest N tried

    Returns:
        First free candidate, starting at ``base-1.ext``
    """
    ext = _normalize_ext(ext)
    if exists_fn is None:
        exists_fn = Path.exists

    stem = base_name[: -len(ext)] if base_name.endswith(ext) else base_name

    for n in range(1, max_attempts + 1):
        candidate = Path(directory) / f"{stem}-{n}{ext}"
        if not exists_fn(candidate):
            return candidate

    raise ExhaustedAttempts(
        f"Could not find unique file name for {stem}{ext} (tried {max_attempts} times)"
    )


def check_directory_name(name: str) -> None:
    """Reject directory names with separators or NUL, blank names and dot names"""
    if "/" in name or "\\" in name or "\x00" in name:
        raise InvalidName(f"Invalid directory name: {name!r}")
    if not name.strip():
        raise InvalidName("Invalid directory name: name is empty")
    if name in (".", ".."):
        raise InvalidName(f"Invalid directory name: {name!r}")
