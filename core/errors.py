"""
Error taxonomy for FileKeeper.

Every failure the engine reports is described by an ErrorDescriptor. OS
exceptions are classified by errno so callers can branch on the kind
instead of parsing messages.
"""

import errno
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of failure an operation can report."""
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    ALREADY_EXISTS = "already_exists"
    NOT_A_FILE = "not_a_file"
    NOT_A_DIRECTORY = "not_a_directory"
    NOT_EMPTY = "not_empty"
    CROSS_DEVICE = "cross_device"
    DISK_FULL = "disk_full"
    ESCAPES_ROOT = "escapes_root"   # name resolves outside the root
    INVALID_NAME = "invalid_name"
    OTHER = "other"


_ERRNO_KINDS = {
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    errno.EROFS: ErrorKind.PERMISSION_DENIED,
    errno.EEXIST: ErrorKind.ALREADY_EXISTS,
    errno.EISDIR: ErrorKind.NOT_A_FILE,
    errno.ENOTDIR: ErrorKind.NOT_A_DIRECTORY,
    errno.ENOTEMPTY: ErrorKind.NOT_EMPTY,
    errno.EXDEV: ErrorKind.CROSS_DEVICE,
    errno.ENOSPC: ErrorKind.DISK_FULL,
}


@dataclass(frozen=True)
class ErrorDescriptor:
    """Whether and why an operation failed."""
    kind: ErrorKind
    message: str
    path: Optional[str] = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.message}: {self.path}"
        return self.message

    @classmethod
    def from_os_error(cls, exc: OSError, path: Optional[str] = None) -> "ErrorDescriptor":
        """
        Build a descriptor from an OS exception.

        Args:
            exc: The exception raised by the OS call
            path: Path to report when the exception carries none

        Returns:
            ErrorDescriptor with the errno mapped to an ErrorKind
        """
        kind = _ERRNO_KINDS.get(exc.errno, ErrorKind.OTHER)
        message = exc.strerror or str(exc) or exc.__class__.__name__
        return cls(kind=kind, message=message, path=exc.filename or path)


class FilesystemError(Exception):
    """Raised when a failed outcome is unwrapped or a name cannot be resolved."""

    def __init__(self, error: ErrorDescriptor):
        super().__init__(str(error))
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind
