"""
Root context for FileKeeper.

Holds the single directory every operation is scoped under and turns
caller-supplied names into paths that are guaranteed to stay inside it.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import ErrorDescriptor, ErrorKind, FilesystemError


@dataclass(frozen=True)
class RootContext:
    """Immutable absolute root directory."""
    path: Path

    @classmethod
    def of(cls, root: Union[str, Path]) -> "RootContext":
        """
        Create a root context from a configured path.

        The path is expanded and canonicalized once; it does not have to
        exist yet.
        """
        return cls(path=Path(root).expanduser().resolve())

    def contains(self, path: Path) -> bool:
        """Check whether a path lies inside the root (or is the root)."""
        return path == self.path or self.path in path.parents

    def resolve(self, name: str, allow_root: bool = False) -> Path:
        """
        Resolve a relative name against the root.

        The name is normalized lexically, then its parent directory is
        canonicalized (symlinks followed) and must stay inside the root. The
        final component is left as is so that links can be acted on
        themselves.

        Args:
            name: Name relative to the root
            allow_root: Accept names that resolve to the root itself

        Returns:
            Absolute path inside the root

        Raises:
            FilesystemError: ESCAPES_ROOT or INVALID_NAME
        """
        if not name or not name.strip():
            raise FilesystemError(ErrorDescriptor(
                kind=ErrorKind.INVALID_NAME,
                message="Empty name",
            ))

        candidate = Path(os.path.normpath(self.path / name))
        if not self.contains(candidate):
            raise FilesystemError(ErrorDescriptor(
                kind=ErrorKind.ESCAPES_ROOT,
                message="Path escapes the root directory",
                path=name,
            ))

        if candidate == self.path:
            if allow_root:
                return self.path
            raise FilesystemError(ErrorDescriptor(
                kind=ErrorKind.INVALID_NAME,
                message="Operation not allowed on the root directory",
                path=name,
            ))

        try:
            parent = candidate.parent.resolve()
        except (RuntimeError, OSError) as e:
            # RuntimeError is how older pathlib reports a symlink loop
            raise FilesystemError(ErrorDescriptor(
                kind=ErrorKind.OTHER,
                message=f"Cannot resolve path: {e}",
                path=name,
            ))
        if not self.contains(parent):
            raise FilesystemError(ErrorDescriptor(
                kind=ErrorKind.ESCAPES_ROOT,
                message="Path escapes the root directory through a link",
                path=name,
            ))
        return parent / candidate.name

    def __str__(self) -> str:
        return str(self.path)
