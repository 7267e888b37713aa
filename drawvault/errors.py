"""
errors.py - Error Taxonomy

Every failure raised by the core carries a ``kind`` string so the command
layer can report it without inspecting exception types.
"""

from typing import Optional


class VaultError(Exception):
    """Base class for all core failures"""
    kind = "Error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# Path validation
class PathInvalid(VaultError):
    """Traversal, sandbox or resolution failure"""
    kind = "PathInvalid"


class TraversalDetected(PathInvalid):
    """Path escapes the sandbox or contains a traversal component"""


class PathResolutionFailed(PathInvalid):
    """Path could not be canonicalized"""


# File type
class WrongExtension(VaultError):
    """File suffix does not match the tracked extension"""
    kind = "WrongExtension"


class NoExtension(WrongExtension):
    """File has no suffix at all"""
    kind = "NoExtension"


# Content trust
class MalformedContent(VaultError):
    """Content is not parseable as a document"""
    kind = "MalformedContent"


class SchemaViolation(VaultError):
    """A required document field is missing or has the wrong type"""
    kind = "SchemaViolation"

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Invalid or missing field: {field}")


# Filesystem state
class NotFound(VaultError):
    kind = "NotFound"


class AlreadyExists(VaultError):
    kind = "AlreadyExists"


class NotADirectory(VaultError):
    kind = "NotADirectory"


class VerificationFailed(VaultError):
    """Written bytes did not read back identically"""
    kind = "VerificationFailed"


class IOFailure(VaultError):
    """Underlying OS failure, raised ``from`` the original OSError"""
    kind = "IOError"


class ExhaustedAttempts(VaultError):
    """No free numbered name within the attempt bound"""
    kind = "ExhaustedAttempts"


class InvalidName(VaultError):
    kind = "InvalidName"


class EmptyName(InvalidName):
    """Name is empty after sanitization"""
