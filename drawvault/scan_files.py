"""
scan_files.py - File Scanning Module

Provides the flat document list and the filtered directory tree.

An unreadable subdirectory never aborts a scan: it is skipped and reported in
``ScanResult.warnings``. Only a missing or unreadable root is fatal.
"""

from pathlib import Path
from typing import List, Optional, Callable, Tuple, Union
import logging
import os

from .errors import NotFound, NotADirectory, IOFailure
from .models_fs import DocumentFile, TreeNode, ScanResult, DEFAULT_EXTENSION
from .safety_checks import matches_extension
from .sort_rules import sort_documents, sort_tree_nodes

logger = logging.getLogger(__name__)


def _check_root(directory: Path) -> None:
    if not directory.exists():
        raise NotFound(f"Directory does not exist: {directory}")
    if not directory.is_dir():
        raise NotADirectory(f"Path is not a directory: {directory}")


def _skip_warning(result: ScanResult, path: Union[str, Path], error: OSError) -> None:
    msg = f"Warning: Cannot access {path}: {error.strerror or error}"
    logger.warning(msg)
    result.add_warning(msg)


def list_flat(
    directory: Path,
    extension: str = DEFAULT_EXTENSION,
    ignore_dirs: Optional[List[str]] = None,
    progress_callback: Optional[Callable[[str], None]] = None,
) -> ScanResult:
    """
    Recursively collect every document below a directory

    Args:
        directory: Root directory
        extension: Tracked extension
        ignore_dirs: Directory names not to descend into
        progress_callback: Called with each visited directory

    Returns:
        ScanResult with DocumentFile items sorted by name
    """
    directory = Path(directory)
    _check_root(directory)

    top = os.fspath(directory)
    result = ScanResult()
    root_errors: List[OSError] = []

    def on_error(error: OSError) -> None:
        if error.filename == top:
            root_errors.append(error)
        else:
            _skip_warning(result, error.filename, error)

    files: List[DocumentFile] = []
    for dirpath, dirnames, filenames in os.walk(top, onerror=on_error):
        if ignore_dirs:
            # Modifying dirnames in place prevents os.walk from entering these directories
            dirnames[:] = [d for d in dirnames if d not in ignore_dirs]

        if progress_callback:
            progress_callback(dirpath)

        for filename in filenames:
            if not matches_extension(filename, extension):
                continue
            filepath = Path(dirpath) / filename
            # Broken symlinks and special files
            if not filepath.is_file():
                continue
            files.append(DocumentFile.from_path(filepath))

    if root_errors:
        raise IOFailure(f"Cannot read directory {directory}: {root_errors[0]}") from root_errors[0]

    result.items = sort_documents(files)
    return result


def _list_entries(dir_path: Path) -> List[os.DirEntry]:
    with os.scandir(dir_path) as it:
        return list(it)


def _build_level(
    entries: List[os.DirEntry],
    extension: str,
    prune_empty: bool,
    ignore_dirs: List[str],
    result: ScanResult,
) -> Tuple[List[TreeNode], bool]:
    """
    Build one tree level

    Returns:
        (sorted nodes, whether any document exists at or below this level)
    """
    nodes: List[TreeNode] = []
    has_match = False

    for entry in entries:
        path = Path(entry.path)
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            _skip_warning(result, path, e)
            continue

        if is_dir:
            if entry.name in ignore_dirs:
                continue
            try:
                sub_entries = _list_entries(path)
            except OSError as e:
                _skip_warning(result, path, e)
                sub_entries = []
            children, child_match = _build_level(sub_entries, extension, prune_empty, ignore_dirs, result)
            has_match = has_match or child_match
            if child_match or not prune_empty:
                nodes.append(TreeNode(name=entry.name, path=path, is_directory=True, children=children))
        elif matches_extension(entry.name, extension) and entry.is_file():
            nodes.append(TreeNode(name=entry.name, path=path, is_directory=False))
            has_match = True

    return sort_tree_nodes(nodes), has_match


def build_tree(
    directory: Path,
    extension: str = DEFAULT_EXTENSION,
    prune_empty: bool = True,
    ignore_dirs: Optional[List[str]] = None,
) -> ScanResult:
    """
    Build the filtered directory tree

    Args:
        directory: Root directory
        extension: Tracked extension
        prune_empty: Drop directories with no document anywhere below them;
            when False every directory is kept
        ignore_dirs: Directory names not to descend into

    Returns:
        ScanResult with top-level TreeNode items (directories first, then name)
    """
    directory = Path(directory)
    _check_root(directory)

    try:
        entries = _list_entries(directory)
    except OSError as e:
        raise IOFailure(f"Cannot read directory {directory}: {e}") from e

    result = ScanResult()
    result.items, _ = _build_level(entries, extension, prune_empty, ignore_dirs or [], result)
    return result
