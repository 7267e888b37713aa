"""
exec_fileops.py - Transactional File Operations

Responsibilities:
- create / rename / move / delete documents with write-verify-then-remove
- directory create / rename / recursive delete
- staging-file cleanup after an interrupted run

A destination document only appears under its final name after its bytes
were written to a hidden staging file and read back identically. The source
is removed last, so a failure at any step leaves either the old or the new
copy intact.
"""

from pathlib import Path
from typing import Optional
import logging
import os
import shutil
import uuid

from .errors import (
    NotFound, AlreadyExists, NotADirectory, VerificationFailed, IOFailure,
)
from .models_fs import ValidatedPath, FileOpResult, DEFAULT_EXTENSION
from .safety_checks import validate_extension, check_writable
from .sanitize_names import (
    safe_join, ensure_extension, uniquify, check_directory_name, MAX_UNIQUE_ATTEMPTS,
)

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".__tmp_write__"
TEMP_SUFFIX = ".partial"


def _generate_temp_name(target: Path) -> Path:
    """Generate staging filename next to the target"""
    unique_id = uuid.uuid4().hex[:8]
    return target.parent / f"{TEMP_PREFIX}{unique_id}__{target.name}{TEMP_SUFFIX}"


def _is_temp_name(name: str) -> bool:
    """Check if it's a staging filename"""
    return name.startswith(TEMP_PREFIX) and name.endswith(TEMP_SUFFIX)


def _read_bytes(path: Path, what: str) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise IOFailure(f"Failed to read {what}: {e}") from e


def _read_back(path: Path) -> bytes:
    """Re-read a freshly written file for verification"""
    return path.read_bytes()


def _remove_leftover(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)


def _stage(target: Path, content: bytes) -> Path:
    """Write content to a staging file and verify it"""
    temp_path = _generate_temp_name(target)
    try:
        with open(temp_path, "xb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        _remove_leftover(temp_path)
        raise IOFailure(f"Failed to write {target.name}: {e}") from e

    try:
        staged = _read_back(temp_path)
    except OSError as e:
        _remove_leftover(temp_path)
        raise VerificationFailed(f"Failed to verify new file: {e}") from e

    if staged != content:
        _remove_leftover(temp_path)
        raise VerificationFailed("File content verification failed")

    return temp_path


def _publish(temp_path: Path, target: Path) -> None:
    """Give a verified staging file its final name without overwriting"""
    try:
        os.link(temp_path, target)
    except FileExistsError:
        _remove_leftover(temp_path)
        raise AlreadyExists(f"A file with that name already exists: {target.name}")
    except OSError:
        # Filesystem without hard links
        if target.exists():
            _remove_leftover(temp_path)
            raise AlreadyExists(f"A file with that name already exists: {target.name}")
        try:
            os.replace(temp_path, target)
        except OSError as e:
            _remove_leftover(temp_path)
            raise IOFailure(f"Failed to create {target.name}: {e}") from e
        return
    _remove_leftover(temp_path)


def write_verified(target: Path, content: bytes) -> None:
    """
    Write content to a not-yet-existing file and verify it byte for byte

    On any verification failure the destination is removed again.
    """
    temp_path = _stage(target, content)
    _publish(temp_path, target)

    try:
        written = _read_back(target)
    except OSError as e:
        _remove_leftover(target)
        raise VerificationFailed(f"Failed to verify new file: {e}") from e

    if written != content:
        logger.error("Content mismatch after writing %s, removing it", target)
        _remove_leftover(target)
        raise VerificationFailed("File content verification failed")


def write_document_bytes(path: ValidatedPath, content: bytes) -> None:
    """Atomically replace (or create) a document's content, keeping its file mode"""
    ok, reason = check_writable(path)
    if not ok:
        raise IOFailure(reason)

    temp_path = _stage(path, content)
    try:
        if path.exists():
            shutil.copymode(path, temp_path)
        os.replace(temp_path, path)
    except OSError as e:
        _remove_leftover(temp_path)
        raise IOFailure(f"Failed to save {path.name}: {e}") from e

    try:
        written = _read_back(path)
    except OSError as e:
        raise VerificationFailed(f"Failed to verify saved file: {e}") from e
    if written != content:
        raise VerificationFailed(f"Saved content of {path.name} does not match")
    logger.debug("Saved %s (%d bytes)", path, len(content))


def _require_document(path: Path, extension: str) -> None:
    if not path.exists():
        raise NotFound(f"File does not exist: {path}")
    if not path.is_file():
        raise NotFound(f"Not a file: {path}")
    validate_extension(path, extension)


def _same_file(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def _copy_verify_delete(src: Path, dst: Path, op_name: str) -> FileOpResult:
    """Copy, verify, then remove the source; source removal failure is only a warning"""
    logger.debug("%s: %s -> %s", op_name, src, dst)
    content = _read_bytes(src, "original file")
    write_verified(dst, content)

    result = FileOpResult(path=ValidatedPath(dst))
    try:
        src.unlink()
    except OSError as e:
        msg = f"{op_name} succeeded but the original file could not be removed: {src}: {e}"
        logger.warning(msg)
        result.add_warning(msg)

    logger.info("%s %s -> %s", op_name, src, dst)
    return result


def _rename_case_only(src: Path, dst: Path) -> FileOpResult:
    """Two-phase rename for names differing only in case (same file on disk)"""
    temp_path = _generate_temp_name(src)
    try:
        os.rename(src, temp_path)
    except OSError as e:
        raise IOFailure(f"Rename failed: {e}") from e
    try:
        os.rename(temp_path, dst)
    except OSError as e:
        # Try to restore
        try:
            os.rename(temp_path, src)
        except OSError as e2:
            raise IOFailure(
                f"Rename failed and restore also failed, file left at {temp_path}: {e2}"
            ) from e
        raise IOFailure(f"Rename failed (restored): {e}") from e
    logger.info("rename %s -> %s (case only)", src, dst)
    return FileOpResult(path=ValidatedPath(dst))


def create(
    directory: ValidatedPath,
    name: str,
    default_content: bytes,
    extension: str = DEFAULT_EXTENSION,
    placeholder: str = "_",
    max_attempts: int = MAX_UNIQUE_ATTEMPTS,
) -> FileOpResult:
    """
    Create a new document, renumbering the name on collision

    Args:
        directory: Validated parent directory
        name: Proposed name (extension optional)
        default_content: Initial bytes
        extension: Tracked extension
        placeholder: Replacement for unsafe characters in name
        max_attempts: Bound for the ``-N`` renumbering

    Returns:
        Result whose path is the final (possibly renumbered) document
    """
    if not directory.is_dir():
        raise NotADirectory(f"Path is not a directory: {directory}")

    target = ensure_extension(safe_join(directory, name, placeholder), extension)
    if target.exists():
        logger.debug("%s already exists, finding unique name", target)
        target = uniquify(directory, target.name, extension, max_attempts=max_attempts)

    ok, reason = check_writable(target)
    if not ok:
        raise IOFailure(reason)

    write_verified(target, default_content)
    logger.info("Created %s", target)
    return FileOpResult(path=ValidatedPath(target))


def rename(
    old_path: ValidatedPath,
    new_name: str,
    extension: str = DEFAULT_EXTENSION,
    placeholder: str = "_",
) -> FileOpResult:
    """
    Rename a document within its directory (copy, verify, delete source)

    Args:
        old_path: Validated document path
        new_name: New name (extension is added or replaced)

    Returns:
        Result with the new path; warnings list a stale source that could not be removed
    """
    _require_document(old_path, extension)

    target = ensure_extension(safe_join(old_path.parent, new_name, placeholder), extension)
    if target == old_path:
        return FileOpResult(path=old_path)

    if target.exists():
        if _same_file(old_path, target):
            return _rename_case_only(old_path, target)
        raise AlreadyExists(f"A file with that name already exists: {target.name}")

    return _copy_verify_delete(old_path, target, "rename")


def move(
    source: ValidatedPath,
    target_directory: ValidatedPath,
    extension: str = DEFAULT_EXTENSION,
    placeholder: str = "_",
) -> FileOpResult:
    """
    Move a document into another directory (copy, verify, delete source)

    Works across devices. Moving into the directory the document already
    lives in returns the source unchanged.
    """
    _require_document(source, extension)

    if not target_directory.exists():
        raise NotFound(f"Target directory does not exist: {target_directory}")
    if not target_directory.is_dir():
        raise NotADirectory(f"Target is not a directory: {target_directory}")

    target = safe_join(target_directory, source.name, placeholder)
    if _same_file(source.parent, target_directory) and target.name == source.name:
        return FileOpResult(path=source)

    if target.exists():
        raise AlreadyExists(
            f"A file with that name already exists in the target directory: {target.name}"
        )

    return _copy_verify_delete(source, target, "move")


def delete(path: ValidatedPath, extension: str = DEFAULT_EXTENSION) -> None:
    """Delete a document; anything without the tracked extension is refused"""
    _require_document(path, extension)
    try:
        path.unlink()
    except OSError as e:
        raise IOFailure(f"Failed to delete {path}: {e}") from e
    logger.info("Deleted %s", path)


def delete_directory_recursive(path: ValidatedPath) -> None:
    """Recursively remove a directory and all its contents"""
    if not path.exists():
        raise NotFound(f"Directory does not exist: {path}")
    if not path.is_dir():
        raise NotADirectory(f"Path is not a directory: {path}")
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise IOFailure(f"Failed to delete directory: {e}") from e
    logger.info("Deleted directory %s", path)


def create_directory(parent: ValidatedPath, name: str, placeholder: str = "_") -> ValidatedPath:
    """
    Create a subdirectory

    Returns:
        Path of the new directory
    """
    if not parent.is_dir():
        raise NotADirectory(f"Parent path is not a directory: {parent}")
    check_directory_name(name)

    target = safe_join(parent, name, placeholder)
    if target.exists() or target.is_symlink():
        raise AlreadyExists(f"A file or directory with that name already exists: {target.name}")

    try:
        target.mkdir()
    except FileExistsError as e:
        raise AlreadyExists(f"A file or directory with that name already exists: {target.name}") from e
    except OSError as e:
        raise IOFailure(f"Failed to create directory: {e}") from e

    if not target.is_dir():
        raise VerificationFailed("Directory creation verification failed")

    logger.info("Created directory %s", target)
    return target


def rename_directory(old_path: ValidatedPath, new_name: str, placeholder: str = "_") -> ValidatedPath:
    """Rename a directory inside its parent (single rename, same device)"""
    if not old_path.exists():
        raise NotFound(f"Directory does not exist: {old_path}")
    if not old_path.is_dir():
        raise NotADirectory(f"Path is not a directory: {old_path}")
    check_directory_name(new_name)

    target = safe_join(old_path.parent, new_name, placeholder)
    if target == old_path:
        return old_path
    if target.exists() and not _same_file(old_path, target):
        raise AlreadyExists(f"A directory with that name already exists: {target.name}")

    try:
        os.rename(old_path, target)
    except OSError as e:
        raise IOFailure(f"Failed to rename directory: {e}") from e

    logger.info("Renamed directory %s -> %s", old_path, target)
    return ValidatedPath(target)


def cleanup_temp_files(directory: Path) -> int:
    """
    Remove staging files left by an interrupted run

    A staging file is never the only copy of anything, so removal is safe.

    Args:
        directory: Root directory (searched recursively)

    Returns:
        Number of removed files
    """
    count = 0
    for dirpath, _dirnames, filenames in os.walk(directory):
        for filename in filenames:
            if not _is_temp_name(filename):
                continue
            try:
                os.unlink(os.path.join(dirpath, filename))
                count += 1
            except OSError as e:
                logger.warning("Could not remove staging file %s: %s", filename, e)
    return count
