# FileKeeper - Core Module
"""
Core infrastructure for the FileKeeper file manager.
This module provides the foundational components the filesystem engine and
the CLI depend on.
"""

from .errors import ErrorKind, ErrorDescriptor, FilesystemError
from .outcome import OperationOutcome
from .root_context import RootContext
from .config import ConfigManager
from .logger import AuditLogger, AuditEntry, ActionType, ActionStatus

__all__ = [
    "ErrorKind",
    "ErrorDescriptor",
    "FilesystemError",
    "OperationOutcome",
    "RootContext",
    "ConfigManager",
    "AuditLogger",
    "AuditEntry",
    "ActionType",
    "ActionStatus",
]

__version__ = "0.1.0"
