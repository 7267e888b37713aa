"""
commands.py - Boundary Commands

The operations the UI/CLI layer calls with raw path strings. Every command
validates its input through the path guard, runs the core operation and
returns a CommandResult; failures never escape as exceptions.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import wraps
from pathlib import Path
from typing import Callable, List, Optional, Union
import logging

from . import exec_fileops
from .app_context import AppContext
from .errors import VaultError, IOFailure, PathResolutionFailed, NotFound
from .models_fs import ValidatedPath, VaultOptions, FileChange
from .safety_checks import validate_path, validate_extension
from .sanitize_names import ensure_extension
from .scan_files import list_flat, build_tree
from .validate_content import validate_document_content

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one boundary command"""
    ok: bool
    value: object = None
    error_kind: Optional[str] = None
    message: str = ""
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, value: object = None, warnings: Optional[List[str]] = None) -> "CommandResult":
        return cls(ok=True, value=value, warnings=list(warnings or []))

    @classmethod
    def failure(cls, error: VaultError) -> "CommandResult":
        return cls(ok=False, error_kind=error.kind, message=error.message)


def _command(func):
    """Convert core failures into a failed CommandResult"""

    @wraps(func)
    def wrapper(*args, **kwargs) -> CommandResult:
        try:
            return func(*args, **kwargs)
        except VaultError as e:
            logger.info("%s failed: [%s] %s", func.__name__, e.kind, e.message)
            return CommandResult.failure(e)
        except OSError as e:
            logger.info("%s failed with OS error: %s", func.__name__, e)
            return CommandResult.failure(IOFailure(str(e)))

    return wrapper


RawPath = Union[str, Path]


class FileCommands:
    """Boundary operations bound to options and an application context"""

    def __init__(self, options: Optional[VaultOptions] = None, context: Optional[AppContext] = None):
        self.options = options or VaultOptions()
        self.context = context or AppContext(
            extension=self.options.extension,
            watch_queue_size=self.options.watch_queue_size,
        )

    @property
    def extension(self) -> str:
        return self.options.extension

    def _validate(self, raw: RawPath) -> ValidatedPath:
        return validate_path(raw, self.options.sandbox_root)

    # Scanning

    @_command
    def scan_files(self, directory: RawPath) -> CommandResult:
        path = self._validate(directory)
        result = list_flat(path, self.extension, ignore_dirs=self.options.ignore_dirs)
        self.context.apply_modified(result.items)
        return CommandResult.success(result.items, result.warnings)

    @_command
    def scan_tree(self, directory: RawPath) -> CommandResult:
        path = self._validate(directory)
        result = build_tree(
            path,
            self.extension,
            prune_empty=self.options.prune_empty_dirs,
            ignore_dirs=self.options.ignore_dirs,
        )
        self.context.apply_modified(result.items)
        return CommandResult.success(result.items, result.warnings)

    # Document content

    @_command
    def read_document(self, file_path: RawPath) -> CommandResult:
        path = self._validate(file_path)
        validate_extension(path, self.extension)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise NotFound(f"File does not exist: {path}") from e
        except OSError as e:
            raise IOFailure(f"Failed to read {path}: {e}") from e
        validate_document_content(data, self.options.schema)
        return CommandResult.success(data)

    def _validate_write_target(self, file_path: RawPath) -> ValidatedPath:
        try:
            return self._validate(file_path)
        except PathResolutionFailed:
            # New file: validate the parent and join the final component
            raw = Path(file_path)
            if "\x00" in raw.name:
                raise
            parent = self._validate(raw.parent)
            return ValidatedPath(parent / raw.name)

    @_command
    def write_document(self, file_path: RawPath, content: Union[bytes, str]) -> CommandResult:
        path = self._validate_write_target(file_path)
        validate_extension(path, self.extension)
        data = content.encode("utf-8") if isinstance(content, str) else content
        validate_document_content(data, self.options.schema)
        exec_fileops.write_document_bytes(path, data)
        self.context.clear_modified(path)
        return CommandResult.success(path)

    def save_document_as(
        self,
        content: Union[bytes, str],
        choose_path: Callable[[], Optional[str]],
    ) -> CommandResult:
        """Save through a path chooser; a cancelled chooser returns ok with value None"""
        chosen = choose_path()
        if chosen is None:
            return CommandResult.success(None)
        return self.write_document(ensure_extension(chosen, self.extension), content)

    # Document mutation

    @_command
    def create_document(self, directory: RawPath, name: str) -> CommandResult:
        parent = self._validate(directory)
        result = exec_fileops.create(
            parent,
            name,
            self.options.schema.default_bytes(),
            extension=self.extension,
            placeholder=self.options.name_placeholder,
            max_attempts=self.options.max_unique_attempts,
        )
        return CommandResult.success(result.path, result.warnings)

    @_command
    def rename_document(self, old_path: RawPath, new_name: str) -> CommandResult:
        old = self._validate(old_path)
        result = exec_fileops.rename(
            old, new_name, extension=self.extension, placeholder=self.options.name_placeholder
        )
        self.context.forget_path(old, result.path)
        return CommandResult.success(result.path, result.warnings)

    @_command
    def move_document(self, source_path: RawPath, target_directory: RawPath) -> CommandResult:
        source = self._validate(source_path)
        target_dir = self._validate(target_directory)
        result = exec_fileops.move(
            source, target_dir, extension=self.extension, placeholder=self.options.name_placeholder
        )
        self.context.forget_path(source, result.path)
        return CommandResult.success(result.path, result.warnings)

    @_command
    def delete_document(self, file_path: RawPath) -> CommandResult:
        path = self._validate(file_path)
        exec_fileops.delete(path, extension=self.extension)
        self.context.forget_path(path)
        return CommandResult.success()

    # Directories

    @_command
    def create_directory(self, parent_path: RawPath, name: str) -> CommandResult:
        parent = self._validate(parent_path)
        return CommandResult.success(
            exec_fileops.create_directory(parent, name, placeholder=self.options.name_placeholder)
        )

    @_command
    def rename_directory(self, old_path: RawPath, new_name: str) -> CommandResult:
        old = self._validate(old_path)
        return CommandResult.success(
            exec_fileops.rename_directory(old, new_name, placeholder=self.options.name_placeholder)
        )

    @_command
    def delete_directory(self, dir_path: RawPath) -> CommandResult:
        path = self._validate(dir_path)
        exec_fileops.delete_directory_recursive(path)
        return CommandResult.success()

    @_command
    def cleanup(self, directory: RawPath) -> CommandResult:
        path = self._validate(directory)
        return CommandResult.success(exec_fileops.cleanup_temp_files(path))

    # Watching

    @_command
    def watch_directory(self, directory: RawPath, on_change: Callable[[FileChange], None]) -> CommandResult:
        path = self._validate(directory)
        self.context.watch_directory(path, on_change)
        return CommandResult.success(path)


COMMAND_NAMES = frozenset({
    "scan_files", "scan_tree", "read_document", "write_document", "save_document_as",
    "create_document", "rename_document", "move_document", "delete_document",
    "create_directory", "rename_directory", "delete_directory", "cleanup",
    "watch_directory",
})


class CommandDispatcher:
    """Runs commands on a worker pool so blocking I/O stays off the caller's loop"""

    def __init__(self, commands: FileCommands, max_workers: int = 4):
        self.commands = commands
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="drawvault-cmd")

    def submit(self, name: str, *args, **kwargs) -> "Future[CommandResult]":
        if name not in COMMAND_NAMES:
            raise ValueError(f"Unknown command: {name}")
        return self._executor.submit(getattr(self.commands, name), *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "CommandDispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
