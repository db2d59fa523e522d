"""
Configuration for FileKeeper.

Settings live in the `filekeeper:` section of a YAML file. A missing or
unreadable file falls back to defaults so the tool always starts.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


DEFAULT_AUDIT_LOG = "data/audit_log.jsonl"


class ConfigManager:
    """
    Loads and saves FileKeeper settings.

    Exposes the root directory, the audit log location and the directory
    size policy used to build the engine.
    """

    def __init__(self, config_path: Union[str, Path] = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path).expanduser()

        self.config = self._load_config()

        self.root: str = "."
        self.audit_log: str = DEFAULT_AUDIT_LOG
        self.recursive_size: bool = False

        self._apply_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            return self._default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            return self._default_config()

        if not isinstance(config, dict):
            return self._default_config()
        return config.get("filekeeper", config) or {}

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "root": ".",
            "audit_log": DEFAULT_AUDIT_LOG,
            "size": {
                "recursive": False,
            },
        }

    def _apply_config(self) -> None:
        """Apply configuration to internal state."""
        self.root = str(self.config.get("root") or ".")
        self.audit_log = str(self.config.get("audit_log") or DEFAULT_AUDIT_LOG)

        size = self.config.get("size") or {}
        self.recursive_size = bool(size.get("recursive", False))

    def set_root(self, root: Union[str, Path]) -> None:
        """Change the configured root directory."""
        self.root = str(root)

    def as_dict(self) -> Dict[str, Any]:
        """Current settings as the `filekeeper:` section."""
        return {
            "root": self.root,
            "audit_log": self.audit_log,
            "size": {
                "recursive": self.recursive_size,
            },
        }

    def save_config(self, path: Optional[Union[str, Path]] = None) -> None:
        """
        Save current settings to the YAML file.

        Other top-level sections already present in the file are kept.
        """
        target = Path(path).expanduser() if path else self.config_path
        existing: Dict[str, Any] = {}

        if target.exists():
            try:
                with open(target, "r", encoding="utf-8") as f:
                    existing = yaml.safe_load(f) or {}
            except yaml.YAMLError:
                existing = {}
            if not isinstance(existing, dict):
                existing = {}

        existing["filekeeper"] = self.as_dict()

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            yaml.dump(existing, f, default_flow_style=False)
