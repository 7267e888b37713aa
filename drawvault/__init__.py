"""
drawvault - Secure Local Document Storage Core

Provides path validation, safe naming, content validation, transactional file
operations, tree scanning and directory watching for a document editor.
"""

from .errors import (
    VaultError,
    PathInvalid,
    TraversalDetected,
    PathResolutionFailed,
    WrongExtension,
    NoExtension,
    MalformedContent,
    SchemaViolation,
    NotFound,
    AlreadyExists,
    NotADirectory,
    VerificationFailed,
    IOFailure,
    ExhaustedAttempts,
    InvalidName,
    EmptyName,
)

from .models_fs import (
    ValidatedPath,
    ChangeKind,
    DocumentFile,
    TreeNode,
    FileChange,
    FileOpResult,
    ScanResult,
    VaultOptions,
    DEFAULT_EXTENSION,
)

from .validate_content import (
    DocumentSchema,
    validate_document_content,
)

from .safety_checks import (
    validate_path,
    validate_extension,
    matches_extension,
    has_traversal_component,
    check_writable,
)

from .sanitize_names import (
    safe_join,
    ensure_extension,
    uniquify,
    check_directory_name,
)

from .exec_fileops import (
    create,
    rename,
    move,
    delete,
    delete_directory_recursive,
    create_directory,
    rename_directory,
    write_document_bytes,
    cleanup_temp_files,
)

from .scan_files import (
    list_flat,
    build_tree,
)

from .sort_rules import (
    sort_documents,
    sort_tree_nodes,
)

from .watch_files import WatchSession
from .app_context import AppContext
from .preferences import Preferences, PreferenceStore
from .commands import FileCommands, CommandResult, CommandDispatcher

__version__ = "1.0.0"

__all__ = [
    # Errors
    "VaultError",
    "PathInvalid",
    "TraversalDetected",
    "PathResolutionFailed",
    "WrongExtension",
    "NoExtension",
    "MalformedContent",
    "SchemaViolation",
    "NotFound",
    "AlreadyExists",
    "NotADirectory",
    "VerificationFailed",
    "IOFailure",
    "ExhaustedAttempts",
    "InvalidName",
    "EmptyName",

    # Data models
    "ValidatedPath",
    "ChangeKind",
    "DocumentFile",
    "TreeNode",
    "FileChange",
    "FileOpResult",
    "ScanResult",
    "VaultOptions",
    "DEFAULT_EXTENSION",

    # Content
    "DocumentSchema",
    "validate_document_content",

    # Path guard
    "validate_path",
    "validate_extension",
    "matches_extension",
    "has_traversal_component",
    "check_writable",

    # Naming
    "safe_join",
    "ensure_extension",
    "uniquify",
    "check_directory_name",

    # File operations
    "create",
    "rename",
    "move",
    "delete",
    "delete_directory_recursive",
    "create_directory",
    "rename_directory",
    "write_document_bytes",
    "cleanup_temp_files",

    # Scanning
    "list_flat",
    "build_tree",
    "sort_documents",
    "sort_tree_nodes",

    # Watching and state
    "WatchSession",
    "AppContext",
    "Preferences",
    "PreferenceStore",

    # Boundary
    "FileCommands",
    "CommandResult",
    "CommandDispatcher",
]
