"""
Tests for the FileKeeper command line interface.
"""

import os
import pytest
from pathlib import Path
from click.testing import CliRunner

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from filekeeper import filekeeper
from core.config import ConfigManager
from core.logger import AuditLogger


@pytest.fixture
def root(tmp_path):
    path = tmp_path / "root"
    path.mkdir()
    (path / "notes.txt").write_text("hello")
    (path / "docs").mkdir()
    (path / "docs" / "deep.txt").write_text("deep")
    return path


@pytest.fixture
def config_file(tmp_path, root):
    """Create a config pointing at the temp root and a temp audit log."""
    path = tmp_path / "config.yaml"
    path.write_text(f"""filekeeper:
  root: {root}
  audit_log: {tmp_path / "audit.jsonl"}
""")
    return path


@pytest.fixture
def run(config_file):
    runner = CliRunner()

    def _run(*args, input=None):
        return runner.invoke(filekeeper, ["--config", str(config_file), *args], input=input)

    return _run


class TestCommands:
    """Test one-shot commands."""

    def test_ls(self, run):
        result = run("ls")

        assert result.exit_code == 0
        assert "notes.txt" in result.output
        assert "docs/" in result.output

    def test_mkdir_and_rm(self, run, root):
        assert run("mkdir", "fresh").exit_code == 0
        assert (root / "fresh").is_dir()

        result = run("rm", "fresh")
        assert result.exit_code == 0
        assert "deleted successfully" in result.output
        assert not (root / "fresh").exists()

    def test_mkdir_existing_exits_nonzero(self, run):
        result = run("mkdir", "docs")

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_mv_and_cp(self, run, root):
        assert run("cp", "docs", "docs2").exit_code == 0
        assert (root / "docs2" / "deep.txt").read_text() == "deep"

        assert run("mv", "notes.txt", "renamed.txt").exit_code == 0
        assert (root / "renamed.txt").exists()

    def test_cp_failure_reports_error(self, run):
        result = run("cp", "ghost", "copy")

        assert result.exit_code == 1
        assert "Failed to copy item." in result.output
        assert "Source not found" in result.output

    def test_size(self, run):
        result = run("size", "notes.txt")

        assert result.exit_code == 0
        assert "Size of notes.txt: 5 bytes" in result.output

    def test_size_of_folder_fails_by_default(self, run):
        result = run("size", "docs")

        assert result.exit_code == 1
        assert "Not a regular file" in result.output

    def test_find(self, run):
        result = run("find", ".txt")

        assert result.exit_code == 0
        assert "notes.txt" in result.output
        assert "deep.txt" in result.output
        assert "2 file(s) found." in result.output

    def test_escape_is_rejected(self, run, tmp_path):
        result = run("mkdir", "../outside")

        assert result.exit_code == 1
        assert "escapes the root" in result.output
        assert not (tmp_path / "outside").exists()

    def test_root_override(self, run, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "only-here.md").write_text("x")

        result = run("--root", str(other), "ls")

        assert "only-here.md" in result.output
        assert "notes.txt" not in result.output

    def test_commands_are_audited(self, run, tmp_path):
        run("size", "notes.txt")

        entries = AuditLogger(log_path=str(tmp_path / "audit.jsonl")).get_recent()
        assert entries[0].action_type == "size"

    def test_config_set_root(self, run, config_file, tmp_path):
        result = run("config", "set-root", str(tmp_path))

        assert result.exit_code == 0
        assert ConfigManager(config_path=config_file).root == str(tmp_path)


class TestMenu:
    """Test the interactive menu loop."""

    def test_exit(self, run):
        result = run("menu", input="8\n")

        assert result.exit_code == 0
        assert "File Manager Menu:" in result.output
        assert "Exiting File Manager." in result.output

    def test_create_then_show(self, run, root):
        result = run("menu", input="2\nfromMenu\n1\n8\n")

        assert result.exit_code == 0
        assert "Folder created successfully." in result.output
        assert "fromMenu/" in result.output
        assert (root / "fromMenu").is_dir()

    def test_invalid_choice_keeps_looping(self, run):
        result = run("menu", input="42\n8\n")

        assert "Invalid choice" in result.output
        assert "Exiting File Manager." in result.output

    def test_failure_does_not_end_session(self, run, root):
        result = run("menu", input="4\nghost\nother\n5\nnotes.txt\ncopy.txt\n8\n")

        assert result.exit_code == 0
        assert "Failed to rename item." in result.output
        assert "Item copied successfully." in result.output
        assert (root / "copy.txt").read_text() == "hello"

    def test_search(self, run):
        result = run("menu", input="7\n.txt\n8\n")

        assert "deep.txt" in result.output

    def test_end_of_input_exits(self, run):
        result = run("menu", input="")

        assert result.exit_code == 0
        assert "Exiting File Manager." in result.output

    def test_link_loop_does_not_end_session(self, run, root):
        os.symlink("loop", root / "loop")

        result = run("menu", input="2\nloop/x\n2\nafter\n8\n")

        assert result.exit_code == 0
        assert "Failed to create folder." in result.output
        assert "Folder created successfully." in result.output
        assert (root / "after").is_dir()
