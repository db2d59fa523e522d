"""
Filesystem operations engine for FileKeeper.

Translates operations on names relative to the root into OS filesystem
actions and reports every result as an OperationOutcome.
"""

import os
import shutil
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Union

from core.errors import ErrorDescriptor, ErrorKind, FilesystemError
from core.logger import AuditLogger, ActionType, ActionStatus
from core.outcome import OperationOutcome
from core.root_context import RootContext


class EntryKind(Enum):
    """Kind of a directory entry."""
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class DirectoryEntry:
    """An immediate child of the root, as seen during one enumeration."""
    path: Path
    name: str
    kind: EntryKind
    is_file: bool

    @classmethod
    def from_dir_entry(cls, entry: os.DirEntry) -> "DirectoryEntry":
        try:
            is_file = entry.is_file()
            is_dir = entry.is_dir()
        except OSError:
            is_file = is_dir = False

        if is_file:
            kind = EntryKind.FILE
        elif is_dir:
            kind = EntryKind.DIRECTORY
        else:
            kind = EntryKind.OTHER

        return cls(path=Path(entry.path), name=entry.name, kind=kind, is_file=is_file)


def matches_mask(filename: str, mask: str, ignore_case: bool = False) -> bool:
    """Check whether a filename ends with the mask (plain suffix, not a glob)."""
    if ignore_case:
        return filename.casefold().endswith(mask.casefold())
    return filename.endswith(mask)


class FileOperationsEngine:
    """Filesystem operations scoped under a single root directory."""

    def __init__(
        self,
        root: Union[str, Path, RootContext],
        recursive_size: bool = False,
        logger: Optional[AuditLogger] = None
    ):
        """
        Initialize the engine.

        Args:
            root: Root directory, as a path or an existing RootContext
            recursive_size: Sum directory contents in get_size instead of
                failing with NOT_A_FILE
            logger: Audit logger; operations are not logged when omitted
        """
        self.root = root if isinstance(root, RootContext) else RootContext.of(root)
        self.recursive_size = recursive_size
        self.logger = logger

    def _record(
        self,
        action_type: ActionType,
        description: str,
        outcome: OperationOutcome,
        result: Optional[str] = None,
        metadata: Optional[dict] = None
    ) -> OperationOutcome:
        """Log an outcome to the audit log and hand it back."""
        if self.logger is None:
            return outcome

        if outcome.success:
            status = ActionStatus.EXECUTED
            if outcome.value is False or (action_type == ActionType.DELETE and outcome.value == 0):
                status = ActionStatus.NO_CHANGE
        elif outcome.error_kind in (ErrorKind.ESCAPES_ROOT, ErrorKind.INVALID_NAME):
            status = ActionStatus.REJECTED
        else:
            status = ActionStatus.FAILED

        if outcome.error is not None:
            result = f"Error: {outcome.error}"
            metadata = dict(metadata or {}, error_kind=outcome.error.kind.value)

        self.logger.log_action(
            action_type=action_type,
            description=description,
            status=status,
            result=result,
            metadata=metadata
        )
        return outcome

    def _open_root(self):
        """Open the root for reading; raises OSError if it is inaccessible."""
        return os.scandir(self.root.path)

    def list_entries(self) -> OperationOutcome:
        """
        List the immediate children of the root.

        The root is opened right away, so an inaccessible root is reported
        by this call. The entries themselves are produced lazily.

        Returns:
            OperationOutcome whose value is an iterator of DirectoryEntry
        """
        description = f"List root: {self.root}"
        try:
            iterator = self._open_root()
        except OSError as e:
            return self._record(ActionType.LIST, description, OperationOutcome.from_os_error(e, str(self.root)))

        self._record(ActionType.LIST, description, OperationOutcome.ok())
        return OperationOutcome.ok(self._iter_entries(iterator))

    def _iter_entries(self, iterator) -> Iterator[DirectoryEntry]:
        with iterator:
            for entry in iterator:
                yield DirectoryEntry.from_dir_entry(entry)

    def create_directory(self, name: str) -> OperationOutcome:
        """
        Create a single directory under the root.

        Parent directories are not created.

        Args:
            name: Name of the directory relative to the root

        Returns:
            OperationOutcome with value True if created, False if the path
            already exists or its parent is missing
        """
        description = f"Create directory: {name}"
        try:
            path = self.root.resolve(name)
        except FilesystemError as e:
            return self._record(ActionType.CREATE, description, OperationOutcome.fail(e.error))

        try:
            os.mkdir(path)
        except (FileExistsError, FileNotFoundError) as e:
            return self._record(
                ActionType.CREATE, description, OperationOutcome.ok(False),
                result=e.strerror, metadata={"path": str(path)}
            )
        except OSError as e:
            return self._record(ActionType.CREATE, description, OperationOutcome.from_os_error(e, str(path)))

        return self._record(
            ActionType.CREATE, description, OperationOutcome.ok(True),
            result="Directory created", metadata={"path": str(path)}
        )

    def delete_entry(self, name: str) -> OperationOutcome:
        """
        Delete a file, link or directory tree.

        Directories are removed with all their contents; links are removed
        themselves and never followed.

        Args:
            name: Name of the entry relative to the root

        Returns:
            OperationOutcome with the number of items removed (0 if nothing
            existed)
        """
        description = f"Delete: {name}"
        try:
            path = self.root.resolve(name)
        except FilesystemError as e:
            return self._record(ActionType.DELETE, description, OperationOutcome.fail(e.error))

        try:
            try:
                mode = os.lstat(path).st_mode
            except FileNotFoundError:
                mode = None

            if mode is None:
                removed = 0
            elif stat.S_ISDIR(mode):
                removed = _remove_tree(path)
            else:
                os.unlink(path)
                removed = 1
        except OSError as e:
            return self._record(ActionType.DELETE, description, OperationOutcome.from_os_error(e, str(path)))

        return self._record(
            ActionType.DELETE, description, OperationOutcome.ok(removed),
            result=f"{removed} item(s) removed", metadata={"path": str(path)}
        )

    def rename_entry(self, old_name: str, new_name: str) -> OperationOutcome:
        """
        Rename or move an entry within the root.

        A single OS rename; a cross-device move fails with CROSS_DEVICE and
        is not retried as copy and delete.

        Args:
            old_name: Current name relative to the root
            new_name: New name relative to the root

        Returns:
            OperationOutcome; on failure `error` describes the cause
        """
        description = f"Rename {old_name} to {new_name}"
        try:
            old_path = self.root.resolve(old_name)
            new_path = self.root.resolve(new_name)
        except FilesystemError as e:
            return self._record(ActionType.RENAME, description, OperationOutcome.fail(e.error))

        try:
            os.rename(old_path, new_path)
        except OSError as e:
            return self._record(ActionType.RENAME, description, OperationOutcome.from_os_error(e, str(old_path)))

        return self._record(
            ActionType.RENAME, description, OperationOutcome.ok(),
            metadata={"source": str(old_path), "destination": str(new_path)}
        )

    def copy_entry(self, source_name: str, dest_name: str) -> OperationOutcome:
        """
        Copy a file or a whole directory tree.

        Files keep their metadata. Directories are copied recursively;
        links inside the tree are copied as links.

        Args:
            source_name: Source name relative to the root
            dest_name: Destination name relative to the root; must not exist

        Returns:
            OperationOutcome; on failure `error` describes the cause
        """
        description = f"Copy {source_name} to {dest_name}"
        try:
            src = self.root.resolve(source_name)
            dst = self.root.resolve(dest_name)
        except FilesystemError as e:
            return self._record(ActionType.COPY, description, OperationOutcome.fail(e.error))

        if not os.path.lexists(src):
            return self._record(ActionType.COPY, description, OperationOutcome.fail(ErrorDescriptor(
                kind=ErrorKind.NOT_FOUND, message="Source not found", path=str(src)
            )))

        if os.path.lexists(dst):
            return self._record(ActionType.COPY, description, OperationOutcome.fail(ErrorDescriptor(
                kind=ErrorKind.ALREADY_EXISTS, message="Destination already exists", path=str(dst)
            )))

        is_tree = src.is_dir() and not src.is_symlink()
        if is_tree and (dst == src or src in dst.parents):
            return self._record(ActionType.COPY, description, OperationOutcome.fail(ErrorDescriptor(
                kind=ErrorKind.INVALID_NAME, message="Cannot copy a directory into itself", path=str(dst)
            )))

        try:
            if is_tree:
                shutil.copytree(src, dst, symlinks=True)
            else:
                shutil.copy2(src, dst)
        except OSError as e:
            return self._record(ActionType.COPY, description, OperationOutcome.from_os_error(e, str(src)))

        return self._record(
            ActionType.COPY, description, OperationOutcome.ok(),
            metadata={"source": str(src), "destination": str(dst), "tree": is_tree}
        )

    def get_size(self, name: str) -> OperationOutcome:
        """
        Get the size of an entry in bytes.

        Regular files report their length. Directories fail with
        NOT_A_FILE unless the engine sums directory contents.

        Args:
            name: Name relative to the root

        Returns:
            OperationOutcome with the size in bytes
        """
        description = f"Size of {name}"
        try:
            path = self.root.resolve(name, allow_root=self.recursive_size)
        except FilesystemError as e:
            return self._record(ActionType.SIZE, description, OperationOutcome.fail(e.error))

        try:
            st = os.stat(path)
            if stat.S_ISREG(st.st_mode):
                size = st.st_size
            elif stat.S_ISDIR(st.st_mode) and self.recursive_size:
                size = _tree_size(path)
            else:
                return self._record(ActionType.SIZE, description, OperationOutcome.fail(ErrorDescriptor(
                    kind=ErrorKind.NOT_A_FILE, message="Not a regular file", path=str(path)
                )))
        except OSError as e:
            return self._record(ActionType.SIZE, description, OperationOutcome.from_os_error(e, str(path)))

        return self._record(ActionType.SIZE, description, OperationOutcome.ok(size), result=f"{size} bytes")

    def search_by_mask(self, mask: str, ignore_case: bool = False) -> OperationOutcome:
        """
        Find regular files anywhere under the root whose name ends with mask.

        Directory links are not descended. Results come in enumeration
        order, produced lazily; unreadable subdirectories are skipped.

        Args:
            mask: Filename suffix, e.g. ".txt"
            ignore_case: Compare the suffix case-insensitively

        Returns:
            OperationOutcome whose value is an iterator of absolute paths
        """
        description = f"Search for *{mask} under {self.root}"
        try:
            with self._open_root():
                pass
        except OSError as e:
            return self._record(ActionType.SEARCH, description, OperationOutcome.from_os_error(e, str(self.root)))

        self._record(ActionType.SEARCH, description, OperationOutcome.ok(), metadata={"mask": mask})
        return OperationOutcome.ok(self._iter_matches(mask, ignore_case))

    def _iter_matches(self, mask: str, ignore_case: bool) -> Iterator[Path]:
        for dirpath, _dirnames, filenames in os.walk(self.root.path, onerror=self._skip_unreadable):
            for filename in filenames:
                if not matches_mask(filename, mask, ignore_case):
                    continue
                path = os.path.join(dirpath, filename)
                if os.path.isfile(path):
                    yield Path(path)

    def _skip_unreadable(self, error: OSError) -> None:
        self._record(
            ActionType.SEARCH, f"Skipped unreadable directory: {error.filename}",
            OperationOutcome.from_os_error(error)
        )


def _reraise(error: OSError) -> None:
    raise error


def _remove_tree(path: Path) -> int:
    """Remove a directory tree bottom-up, returning the number of items removed."""
    removed = 0
    for dirpath, dirnames, filenames in os.walk(path, topdown=False, onerror=_reraise):
        for filename in filenames:
            os.unlink(os.path.join(dirpath, filename))
            removed += 1
        for dirname in dirnames:
            child = os.path.join(dirpath, dirname)
            if os.path.islink(child):
                os.unlink(child)
            else:
                os.rmdir(child)
            removed += 1

    os.rmdir(path)
    return removed + 1


def _tree_size(path: Path) -> int:
    """Total size of the regular files under a directory, links not followed."""
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path, onerror=_reraise):
        for filename in filenames:
            st = os.lstat(os.path.join(dirpath, filename))
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
    return total
