"""
Audit Logger for FileKeeper.

Provides append-only logging of every filesystem operation with timestamps,
outcome status and error details for auditing and debugging.
"""

import csv
import io
import json
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from enum import Enum


class ActionType(Enum):
    """Types of operations that can be logged."""
    LIST = "list"
    CREATE = "create"
    DELETE = "delete"
    RENAME = "rename"
    COPY = "copy"
    SIZE = "size"
    SEARCH = "search"


class ActionStatus(Enum):
    """Status of an operation."""
    EXECUTED = "executed"
    NO_CHANGE = "no_change"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass
class AuditEntry:
    """Represents a single audit log entry."""
    timestamp: str
    action_type: str
    action_description: str
    status: str
    result: Optional[str]
    metadata: Dict[str, Any]

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        action_description: str,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "AuditEntry":
        """Factory method to create an audit entry with current timestamp."""
        return cls(
            timestamp=datetime.now().isoformat(),
            action_type=action_type.value,
            action_description=action_description,
            status=status.value,
            result=result,
            metadata=metadata or {}
        )

    def to_json(self) -> str:
        """Convert entry to JSON string."""
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "AuditEntry":
        """Create entry from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


class AuditLogger:
    """
    Append-only audit logger for FileKeeper.

    All operations are logged to a JSONL file. The log is append-only to
    ensure integrity.
    """

    def __init__(self, log_path: str = "data/audit_log.jsonl"):
        """
        Initialize the audit logger.

        Args:
            log_path: Path to the JSONL log file
        """
        self.log_path = Path(log_path).expanduser()
        self._ensure_log_directory()

    def _ensure_log_directory(self) -> None:
        """Create the log directory and file if they don't exist."""
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.log_path.exists():
            self.log_path.touch()

    def log(self, entry: AuditEntry) -> None:
        """
        Append an audit entry to the log.

        Args:
            entry: The AuditEntry to log
        """
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(entry.to_json() + "\n")

    def log_action(
        self,
        action_type: ActionType,
        description: str,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """
        Convenience method to create and log an entry in one call.

        Returns the created AuditEntry.
        """
        entry = AuditEntry.create(
            action_type=action_type,
            action_description=description,
            status=status,
            result=result,
            metadata=metadata
        )
        self.log(entry)
        return entry

    def _read_entries(self):
        """Yield every parseable entry in file order."""
        if not self.log_path.exists():
            return

        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    yield AuditEntry.from_json(line)
                except (json.JSONDecodeError, TypeError):
                    # Skip corrupted lines
                    continue

    def get_recent(self, limit: int = 100) -> List[AuditEntry]:
        """
        Get the most recent audit entries.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of AuditEntry objects, most recent first
        """
        entries = list(self._read_entries())
        return list(reversed(entries[-limit:])) if limit > 0 else []

    def get_by_action_type(self, action_type: ActionType, limit: int = 100) -> List[AuditEntry]:
        """
        Get audit entries filtered by action type.

        Args:
            action_type: The ActionType to filter by
            limit: Maximum number of entries to return

        Returns:
            List of matching AuditEntry objects, oldest first
        """
        entries = []
        for entry in self._read_entries():
            if len(entries) >= limit:
                break
            if entry.action_type == action_type.value:
                entries.append(entry)
        return entries

    def get_failed_actions(self, limit: int = 50) -> List[AuditEntry]:
        """
        Get operations that failed or were rejected.

        Useful for reviewing what went wrong in a session.
        """
        failed = (ActionStatus.FAILED.value, ActionStatus.REJECTED.value)
        entries = []
        for entry in self._read_entries():
            if len(entries) >= limit:
                break
            if entry.status in failed:
                entries.append(entry)
        return entries

    def export(self, format: str = "json") -> str:
        """
        Export the entire audit log.

        Args:
            format: Export format ("json" or "csv")

        Returns:
            String containing the exported data
        """
        entries = self.get_recent(limit=10000)
        header = ["timestamp", "action_type", "action_description", "status", "result"]

        if format == "json":
            return json.dumps([asdict(e) for e in entries], indent=2)
        elif format == "csv":
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            writer.writerow(header)
            for e in entries:
                writer.writerow([e.timestamp, e.action_type, e.action_description, e.status, e.result or ""])
            return buffer.getvalue()
        else:
            raise ValueError(f"Unsupported export format: {format}")

    def clear(self, confirm: bool = False) -> bool:
        """
        Clear the audit log.

        The current log is kept as a timestamped backup next to it.

        Args:
            confirm: Must be True to actually clear the log

        Returns:
            True if cleared, False otherwise
        """
        if not confirm:
            return False

        if self.log_path.exists():
            backup_path = self.log_path.with_suffix(f".backup.{datetime.now().strftime('%Y%m%d_%H%M%S')}.jsonl")
            self.log_path.rename(backup_path)
            self.log_path.touch()
            return True

        return False
