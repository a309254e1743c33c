"""Test suite for config management functionality.

This test suite validates:
- Preferences module functionality
- Config loader validation and environment overrides
- Dynamic config path resolution (no module-level caching)
- CLI commands for config management
"""
import json
from argparse import Namespace
from pathlib import Path

import pytest
import yaml

from secretserver_toolkit.secrets.domains import preferences
from secretserver_toolkit.secrets.domains import config_loader
from secretserver_toolkit.secrets.domains.config_loader import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's own Secret Server environment out of the tests."""
    monkeypatch.delenv("TSS_TOKEN", raising=False)
    monkeypatch.delenv("TSS_SERVER_URL", raising=False)


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory for testing."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    fake_config_dir = fake_home / ".config" / "secretserver-toolkit"
    monkeypatch.setattr(preferences, "PREFERENCES_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")

    return fake_home


@pytest.fixture
def temp_config_dir(temp_home):
    config_dir = temp_home / ".config" / "secretserver-toolkit"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def sample_config_content():
    """Sample valid config content."""
    return {
        "server": {
            "url": "https://tss.example.com/SecretServer"
        },
        "authentication": {
            "type": "token",
            "token": "config-token"
        }
    }


def _write_config(path, content):
    with open(path, 'w') as f:
        yaml.dump(content, f)
    return path


@pytest.fixture
def temp_config_file(temp_config_dir, sample_config_content):
    """Fixture to create a config file at the default location."""
    return _write_config(temp_config_dir / "config.yml", sample_config_content)


class TestPreferencesModule:
    """Test suite for preferences module."""

    def test_get_preference_returns_none_when_not_set(self, temp_home):
        assert preferences.get_preference("config_path") is None

    def test_set_preference_stores_value(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")

        assert preferences.get_preference("config_path") == "/path/to/config.yml"

    def test_clear_preference_removes_value(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")
        preferences.clear_preference("config_path")

        assert preferences.get_preference("config_path") is None

    def test_clear_nonexistent_preference(self, temp_home):
        """Test clearing a preference that doesn't exist does not create the file."""
        preferences.clear_preference("nonexistent_key")

        assert not preferences.PREFERENCES_FILE.exists()

    def test_preferences_persisted_to_json_file(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")

        data = json.loads(preferences.PREFERENCES_FILE.read_text())
        assert data["config_path"] == "/path/to/config.yml"

    def test_get_all_preferences(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")
        preferences.set_preference("another_key", "another_value")

        assert preferences.get_all_preferences() == {
            "config_path": "/path/to/config.yml",
            "another_key": "another_value",
        }

    def test_corrupt_preferences_file_ignored(self, temp_config_dir):
        """Test that an unparseable preferences file reads as empty."""
        preferences.PREFERENCES_FILE.write_text("{not json")

        assert preferences.get_all_preferences() == {}

    def test_default_config_path_follows_home(self, temp_home):
        assert preferences.default_config_path() == temp_home / ".config" / "secretserver-toolkit" / "config.yml"


class TestConfigPathResolution:
    """Test suite for config path resolution."""

    def test_preference_path_used_when_set(self, temp_home, tmp_path, sample_config_content):
        custom = _write_config(tmp_path / "custom.yml", sample_config_content)
        preferences.set_preference("config_path", str(custom))

        assert config_loader._get_config_path() == str(custom)

    def test_default_path_used_without_preference(self, temp_home, temp_config_file):
        assert config_loader._get_config_path() == str(temp_config_file)

    def test_missing_preference_target_falls_back_to_default(self, temp_home, temp_config_file, tmp_path):
        preferences.set_preference("config_path", str(tmp_path / "nonexistent.yml"))

        assert config_loader._get_config_path() == str(temp_config_file)

    def test_raises_when_no_config_anywhere(self, temp_home):
        with pytest.raises(FileNotFoundError) as exc_info:
            config_loader._get_config_path()

        assert "Configuration file not found" in str(exc_info.value)
        assert "tss config set-path" in str(exc_info.value)

    def test_config_path_not_cached_at_module_level(self, temp_home, tmp_path, sample_config_content):
        """Test that changing the preference takes effect on the next load."""
        first = dict(sample_config_content, server={"url": "https://one.example.com"})
        second = dict(sample_config_content, server={"tenant": "two"})
        config1 = _write_config(tmp_path / "config1.yml", first)
        config2 = _write_config(tmp_path / "config2.yml", second)

        preferences.set_preference("config_path", str(config1))
        assert config_loader.load_config()["server"]["url"] == "https://one.example.com"

        preferences.set_preference("config_path", str(config2))
        assert config_loader.load_config()["server"]["tenant"] == "two"


class TestLoadConfig:
    """Test suite for load_config validation."""

    def test_load_config_success_applies_defaults(self, temp_home, temp_config_file):
        config = config_loader.load_config()

        assert config["server"]["url"] == "https://tss.example.com/SecretServer"
        assert config["server"]["tld"] == "com"
        assert config["server"]["api_path"] == "/api/v1"
        assert config["server"]["timeout"] == 30.0
        assert config["authentication"]["token"] == "config-token"
        assert config["authentication"]["token_env"] == "TSS_TOKEN"

    def test_tenant_instead_of_url(self, temp_config_dir, sample_config_content):
        sample_config_content["server"] = {"tenant": "acme", "tld": "eu"}
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        config = config_loader.load_config()

        assert config["server"]["tenant"] == "acme"
        assert config["server"]["tld"] == "eu"

    def test_missing_server_section(self, temp_config_dir, sample_config_content):
        del sample_config_content["server"]
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "server" in str(exc_info.value)

    def test_server_without_url_or_tenant(self, temp_config_dir, sample_config_content):
        sample_config_content["server"] = {"tld": "com"}
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "server.url" in str(exc_info.value)

    def test_invalid_timeout(self, temp_config_dir, sample_config_content):
        sample_config_content["server"]["timeout"] = "soon"
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "timeout" in str(exc_info.value)

    def test_missing_authentication_section(self, temp_config_dir, sample_config_content):
        del sample_config_content["authentication"]
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "authentication" in str(exc_info.value)

    def test_unsupported_auth_type(self, temp_config_dir, sample_config_content):
        sample_config_content["authentication"]["type"] = "password"
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "Unsupported authentication type" in str(exc_info.value)

    def test_missing_token(self, temp_config_dir, sample_config_content):
        del sample_config_content["authentication"]["token"]
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "TSS_TOKEN" in str(exc_info.value)

    def test_token_from_environment_overrides_config(self, temp_home, temp_config_file, monkeypatch):
        monkeypatch.setenv("TSS_TOKEN", "env-token")

        config = config_loader.load_config()

        assert config["authentication"]["token"] == "env-token"

    def test_custom_token_env(self, temp_config_dir, sample_config_content, monkeypatch):
        del sample_config_content["authentication"]["token"]
        sample_config_content["authentication"]["token_env"] = "MY_TSS_TOKEN"
        _write_config(temp_config_dir / "config.yml", sample_config_content)
        monkeypatch.setenv("MY_TSS_TOKEN", "custom-token")

        config = config_loader.load_config()

        assert config["authentication"]["token"] == "custom-token"

    def test_server_url_from_environment(self, temp_config_dir, sample_config_content, monkeypatch):
        sample_config_content["server"] = {"tenant": "acme"}
        _write_config(temp_config_dir / "config.yml", sample_config_content)
        monkeypatch.setenv("TSS_SERVER_URL", "https://override.example.com")

        config = config_loader.load_config()

        assert config["server"]["url"] == "https://override.example.com"

    def test_empty_config_file(self, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("")

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "empty" in str(exc_info.value).lower()

    def test_invalid_yaml_config(self, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "YAML" in str(exc_info.value)


class TestCLICommands:
    """Test suite for CLI config commands."""

    def test_config_set_path_validates_file_exists(self, temp_home, tmp_path):
        from secretserver_toolkit.cli.main import cmd_config_set_path

        args = Namespace(path=str(tmp_path / "nonexistent.yml"))

        with pytest.raises(SystemExit) as exc_info:
            cmd_config_set_path(args)

        assert exc_info.value.code == 1

    def test_config_set_path_stores_absolute_path(self, temp_home, temp_config_file):
        from secretserver_toolkit.cli.main import cmd_config_set_path

        cmd_config_set_path(Namespace(path=str(temp_config_file)))

        assert preferences.get_preference("config_path") == str(temp_config_file.resolve())

    def test_config_show_with_preference(self, temp_home, temp_config_file, capsys):
        from secretserver_toolkit.cli.main import cmd_config_show

        preferences.set_preference("config_path", str(temp_config_file))
        cmd_config_show(Namespace())

        captured = capsys.readouterr()
        assert str(temp_config_file) in captured.out
        assert "preference" in captured.out.lower()

    def test_config_show_without_preference(self, temp_home, temp_config_file, capsys):
        from secretserver_toolkit.cli.main import cmd_config_show

        cmd_config_show(Namespace())

        captured = capsys.readouterr()
        assert str(temp_config_file) in captured.out
        assert "Source: default" in captured.out

    def test_config_clear_removes_preference(self, temp_home, temp_config_file, capsys):
        from secretserver_toolkit.cli.main import cmd_config_clear

        preferences.set_preference("config_path", str(temp_config_file))
        cmd_config_clear(Namespace())

        assert preferences.get_preference("config_path") is None
        assert "cleared" in capsys.readouterr().out.lower()
