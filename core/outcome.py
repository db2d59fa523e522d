"""
Operation outcome for FileKeeper.

Every engine operation returns an OperationOutcome instead of raising, so
callers handle success and failure the same way for every operation.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .errors import ErrorDescriptor, ErrorKind, FilesystemError


@dataclass(frozen=True)
class OperationOutcome:
    """Result of an engine operation."""
    success: bool
    value: Any = None
    error: Optional[ErrorDescriptor] = None

    @classmethod
    def ok(cls, value: Any = None) -> "OperationOutcome":
        """Successful outcome, optionally carrying a value."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: ErrorDescriptor) -> "OperationOutcome":
        """Failed outcome carrying the error descriptor."""
        return cls(success=False, error=error)

    @classmethod
    def from_os_error(cls, exc: OSError, path: Optional[str] = None) -> "OperationOutcome":
        return cls.fail(ErrorDescriptor.from_os_error(exc, path))

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    def unwrap(self) -> Any:
        """
        Return the value of a successful outcome.

        Raises:
            FilesystemError: If the outcome is a failure
        """
        if not self.success:
            raise FilesystemError(self.error)
        return self.value
