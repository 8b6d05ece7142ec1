"""Configuration management for the LogKV shell."""

import json
import logging
import os
import platform
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "prompt": "> ",
    "history_file": None,
    "debug_mode": False,
    "max_file_size": 4 * 1024 * 1024,
    "max_entries": None,
}


class ShellConfig:
    """Configuration manager for the LogKV shell.

    Settings live in a JSON file in the platform's configuration directory,
    or in ``$LOGKV_CONFIG_DIR`` when that is set.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
        ----
            config_dir: Optional directory overriding the platform default

        """
        self.system = platform.system().lower()
        self._config_dir_override = config_dir or os.environ.get("LOGKV_CONFIG_DIR")
        self.config_data: Dict[str, Any] = dict(DEFAULTS)
        self._load_config()

    @property
    def config_dir(self) -> Path:
        """Get the platform-specific configuration directory."""
        if self._config_dir_override:
            return Path(self._config_dir_override)
        if self.system == "darwin":  # macOS
            return Path.home() / "Library" / "Preferences" / "logkv"
        elif self.system == "linux":
            return Path.home() / ".config" / "logkv"
        elif self.system == "windows":
            return Path(os.environ.get("APPDATA", "")) / "logkv"
        else:
            return Path.home() / ".logkv"

    @property
    def config_file(self) -> Path:
        """Get the path to the configuration file."""
        return self.config_dir / "config.json"

    def _load_config(self) -> None:
        """Load configuration from file, keeping defaults for missing keys."""
        if not self.config_file.exists():
            return
        try:
            with open(self.config_file) as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not load config file %s: %s", self.config_file, e)
            return

        if not isinstance(loaded, dict):
            logger.warning("Ignoring config file %s: not an object", self.config_file)
            return
        self.config_data.update(loaded)

    def get_prompt(self, override: Optional[str] = None) -> str:
        """Get the prompt string shown before each command."""
        if override is not None:
            return override
        return str(self.config_data.get("prompt", DEFAULTS["prompt"]))

    def get_history_file(self, override: Optional[str] = None) -> Path:
        """Get the path of the persistent command history."""
        if override:
            return Path(override)
        history_file = self.config_data.get("history_file")
        if history_file:
            return Path(history_file).expanduser()
        return self.config_dir / "history"

    def get_debug_mode(self) -> bool:
        """Get the debug mode setting."""
        return bool(self.config_data.get("debug_mode", False))

    def get_max_file_size(self) -> int:
        """Get the segment size, in bytes, at which the store rotates files."""
        try:
            size = int(self.config_data.get("max_file_size"))
        except (TypeError, ValueError):
            logger.warning("Invalid max_file_size in config, using default")
            return DEFAULTS["max_file_size"]
        if size <= 0:
            logger.warning("Invalid max_file_size in config, using default")
            return DEFAULTS["max_file_size"]
        return size

    def get_max_entries(self) -> Optional[int]:
        """Get the record count at which the store rotates files, if any."""
        max_entries = self.config_data.get("max_entries")
        if max_entries is None:
            return None
        try:
            max_entries = int(max_entries)
        except (TypeError, ValueError):
            max_entries = 0
        if max_entries <= 0:
            logger.warning("Ignoring invalid max_entries in config")
            return None
        return max_entries
