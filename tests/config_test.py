"""Tests for shell configuration loading."""

import json
from pathlib import Path

from logkv_shell.config import DEFAULTS, ShellConfig


class TestShellConfig:
    """Test the configuration manager."""

    def test_defaults_without_file(self, tmp_path):
        """Test that a missing file yields defaults and creates nothing."""
        config = ShellConfig(str(tmp_path / "cfg"))
        assert config.get_prompt() == "> "
        assert config.get_debug_mode() is False
        assert config.get_max_file_size() == DEFAULTS["max_file_size"]
        assert config.get_history_file() == tmp_path / "cfg" / "history"
        assert not (tmp_path / "cfg").exists()

    def test_loads_file(self, tmp_path):
        """Test that file values replace defaults."""
        (tmp_path / "config.json").write_text(
            json.dumps(
                {
                    "prompt": "kv> ",
                    "debug_mode": True,
                    "max_file_size": 1024,
                    "history_file": str(tmp_path / "hist"),
                }
            )
        )
        config = ShellConfig(str(tmp_path))
        assert config.get_prompt() == "kv> "
        assert config.get_debug_mode() is True
        assert config.get_max_file_size() == 1024
        assert config.get_history_file() == tmp_path / "hist"

    def test_overrides_win(self, tmp_path):
        """Test that command-line values take precedence."""
        (tmp_path / "config.json").write_text(json.dumps({"prompt": "kv> "}))
        config = ShellConfig(str(tmp_path))
        assert config.get_prompt("$ ") == "$ "
        assert config.get_prompt("") == ""
        assert config.get_history_file("/tmp/h") == Path("/tmp/h")

    def test_environment_directory(self, tmp_path, monkeypatch):
        """Test that LOGKV_CONFIG_DIR selects the directory."""
        monkeypatch.setenv("LOGKV_CONFIG_DIR", str(tmp_path))
        assert ShellConfig().config_file == tmp_path / "config.json"

    def test_unreadable_file_falls_back(self, tmp_path):
        """Test that invalid JSON leaves the defaults in place."""
        (tmp_path / "config.json").write_text("{not json")
        config = ShellConfig(str(tmp_path))
        assert config.get_prompt() == "> "

    def test_non_object_file_is_ignored(self, tmp_path):
        """Test that a JSON value other than an object is ignored."""
        (tmp_path / "config.json").write_text("[1, 2]")
        assert ShellConfig(str(tmp_path)).get_prompt() == "> "

    def test_invalid_max_file_size(self, tmp_path):
        """Test that a bad segment size falls back to the default."""
        for value in ("big", -5, None):
            (tmp_path / "config.json").write_text(json.dumps({"max_file_size": value}))
            config = ShellConfig(str(tmp_path))
            assert config.get_max_file_size() == DEFAULTS["max_file_size"]

    def test_max_entries(self, tmp_path):
        """Test the optional record limit for segment rotation."""
        assert ShellConfig(str(tmp_path)).get_max_entries() is None
        (tmp_path / "config.json").write_text(json.dumps({"max_entries": 500}))
        assert ShellConfig(str(tmp_path)).get_max_entries() == 500

    def test_invalid_max_entries(self, tmp_path):
        """Test that a bad record limit disables it."""
        for value in ("many", 0, -1):
            (tmp_path / "config.json").write_text(json.dumps({"max_entries": value}))
            assert ShellConfig(str(tmp_path)).get_max_entries() is None
