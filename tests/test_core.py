"""
Tests for the core modules: errors, outcomes, root context, config and audit log.
"""

import csv as csv_module
import errno
import io
import pytest
import yaml
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import ConfigManager, DEFAULT_AUDIT_LOG
from core.errors import ErrorDescriptor, ErrorKind, FilesystemError
from core.logger import AuditLogger, ActionType, ActionStatus
from core.outcome import OperationOutcome
from core.root_context import RootContext


class TestErrorDescriptor:
    """Test OS error classification."""

    @pytest.mark.parametrize("code, kind", [
        (errno.ENOENT, ErrorKind.NOT_FOUND),
        (errno.EACCES, ErrorKind.PERMISSION_DENIED),
        (errno.EEXIST, ErrorKind.ALREADY_EXISTS),
        (errno.EXDEV, ErrorKind.CROSS_DEVICE),
        (errno.ENOSPC, ErrorKind.DISK_FULL),
        (errno.ENOTEMPTY, ErrorKind.NOT_EMPTY),
    ])
    def test_errno_mapping(self, code, kind):
        exc = OSError(code, "boom", "/some/path")

        descriptor = ErrorDescriptor.from_os_error(exc)

        assert descriptor.kind == kind
        assert descriptor.message == "boom"
        assert descriptor.path == "/some/path"

    def test_unknown_errno_is_other(self):
        descriptor = ErrorDescriptor.from_os_error(OSError("plain failure"))

        assert descriptor.kind == ErrorKind.OTHER
        assert descriptor.message == "plain failure"

    def test_fallback_path(self):
        descriptor = ErrorDescriptor.from_os_error(OSError(errno.ENOENT, "gone"), path="/fallback")

        assert descriptor.path == "/fallback"
        assert str(descriptor) == "gone: /fallback"


class TestOperationOutcome:
    """Test the outcome type."""

    def test_ok_unwraps_value(self):
        outcome = OperationOutcome.ok(42)

        assert outcome.success
        assert outcome.error is None
        assert outcome.error_kind is None
        assert outcome.unwrap() == 42

    def test_fail_raises_on_unwrap(self):
        error = ErrorDescriptor(kind=ErrorKind.NOT_FOUND, message="missing")
        outcome = OperationOutcome.fail(error)

        with pytest.raises(FilesystemError) as info:
            outcome.unwrap()

        assert info.value.kind == ErrorKind.NOT_FOUND
        assert info.value.error is error

    def test_zero_is_a_legitimate_value(self):
        outcome = OperationOutcome.ok(0)

        assert outcome.success
        assert outcome.unwrap() == 0


class TestRootContext:
    """Test name resolution against the root."""

    @pytest.fixture
    def context(self, tmp_path):
        return RootContext.of(tmp_path)

    def test_root_is_absolute(self, tmp_path):
        context = RootContext.of(".")

        assert context.path.is_absolute()

    def test_resolves_relative_names(self, context):
        assert context.resolve("a/b.txt") == context.path / "a" / "b.txt"

    def test_normalizes_inner_parent_segments(self, context):
        assert context.resolve("a/../b") == context.path / "b"

    @pytest.mark.parametrize("name", ["..", "../x", "a/../../x", "/abs"])
    def test_rejects_escapes(self, context, name):
        with pytest.raises(FilesystemError) as info:
            context.resolve(name)

        assert info.value.kind == ErrorKind.ESCAPES_ROOT

    def test_root_itself(self, context):
        with pytest.raises(FilesystemError) as info:
            context.resolve(".")

        assert info.value.kind == ErrorKind.INVALID_NAME
        assert context.resolve(".", allow_root=True) == context.path

    def test_is_immutable(self, context):
        with pytest.raises(Exception):
            context.path = Path("/")


class TestConfigManager:
    """Test YAML configuration."""

    def test_defaults_when_file_missing(self, tmp_path):
        config = ConfigManager(config_path=tmp_path / "missing.yaml")

        assert config.root == "."
        assert config.audit_log == DEFAULT_AUDIT_LOG
        assert config.recursive_size is False

    def test_loads_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("""filekeeper:
  root: /srv/files
  audit_log: logs/audit.jsonl
  size:
    recursive: true
""")

        config = ConfigManager(config_path=path)

        assert config.root == "/srv/files"
        assert config.audit_log == "logs/audit.jsonl"
        assert config.recursive_size is True

    def test_malformed_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("filekeeper: [unclosed")

        config = ConfigManager(config_path=path)

        assert config.root == "."

    def test_save_keeps_other_sections(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("other:\n  keep: 1\n")

        config = ConfigManager(config_path=path)
        config.set_root("/data")
        config.save_config()

        saved = yaml.safe_load(path.read_text())
        assert saved["other"] == {"keep": 1}
        assert saved["filekeeper"]["root"] == "/data"
        assert ConfigManager(config_path=path).root == "/data"


class TestAuditLogger:
    """Test AuditLogger class."""

    @pytest.fixture
    def logger(self, tmp_path):
        """Create a logger with temp file."""
        return AuditLogger(log_path=str(tmp_path / "logs" / "audit.jsonl"))

    def test_creates_log_file(self, logger):
        assert logger.log_path.exists()

    def test_log_action(self, logger):
        entry = logger.log_action(
            action_type=ActionType.CREATE,
            description="Test action",
            status=ActionStatus.EXECUTED
        )

        assert entry.action_description == "Test action"
        assert entry.status == "executed"

    def test_get_recent(self, logger):
        for i in range(5):
            logger.log_action(action_type=ActionType.LIST, description=f"Action {i}")

        entries = logger.get_recent(limit=3)

        assert [e.action_description for e in entries] == ["Action 4", "Action 3", "Action 2"]

    def test_get_by_action_type(self, logger):
        logger.log_action(action_type=ActionType.COPY, description="copy")
        logger.log_action(action_type=ActionType.SIZE, description="size")

        entries = logger.get_by_action_type(ActionType.SIZE)

        assert [e.action_description for e in entries] == ["size"]

    def test_get_failed_actions(self, logger):
        logger.log_action(action_type=ActionType.RENAME, description="ok")
        logger.log_action(action_type=ActionType.RENAME, description="bad", status=ActionStatus.FAILED)
        logger.log_action(action_type=ActionType.DELETE, description="escape", status=ActionStatus.REJECTED)

        failed = logger.get_failed_actions()

        assert [e.action_description for e in failed] == ["bad", "escape"]

    def test_skips_corrupted_lines(self, logger):
        logger.log_action(action_type=ActionType.LIST, description="good")
        with open(logger.log_path, "a", encoding="utf-8") as f:
            f.write("not json\n")

        assert [e.action_description for e in logger.get_recent()] == ["good"]

    def test_export_csv(self, logger):
        logger.log_action(action_type=ActionType.SIZE, description="size of a", result="3 bytes")

        csv = logger.export(format="csv")

        assert csv.splitlines()[0] == "timestamp,action_type,action_description,status,result"
        assert "size of a,executed,3 bytes" in csv

    def test_export_csv_escapes_quotes(self, logger):
        logger.log_action(action_type=ActionType.COPY, description='Copy a"b to c', result='done, "twice"')

        rows = list(csv_module.reader(io.StringIO(logger.export(format="csv"))))

        assert len(rows) == 2
        assert rows[1][2:] == ['Copy a"b to c', "executed", 'done, "twice"']

    def test_export_unknown_format(self, logger):
        with pytest.raises(ValueError):
            logger.export(format="xml")

    def test_clear_requires_confirmation(self, logger):
        logger.log_action(action_type=ActionType.LIST, description="x")

        assert not logger.clear()
        assert logger.clear(confirm=True)
        assert logger.get_recent() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
