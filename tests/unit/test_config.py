"""
Unit tests for relax.core.config module.
"""

from pathlib import Path

import pytest

from relax.core import config as config_module
from relax.core.config import (
    DEFAULT_CONFIG,
    Config,
    client_from_config,
    create_default_config_file,
    find_config_file,
    get_config,
    get_default_config,
    load_config,
    load_toml,
    save_toml,
    set_config,
)
from relax.core.http.auth import ClientCredentialsAuth
from relax.core.http.transport import get_default_session


@pytest.fixture
def no_config_files(monkeypatch, temp_dir):
    """Point the standard config locations at an empty directory."""
    monkeypatch.setattr(config_module, "CONFIG_LOCATIONS", [temp_dir / "relax.toml"])
    for var in ("RELAX_CLIENT_ID", "RELAX_CLIENT_SECRET", "RELAX_TOKEN_URL"):
        monkeypatch.delenv(var, raising=False)


class TestConfig:
    """Tests for Config class."""

    def test_default_config(self):
        """Test getting default configuration."""
        config = get_default_config()

        assert isinstance(config, Config)
        assert config.cache.get("default_expiration") == 300
        assert config.limiter.get("burst") == 10

    def test_config_get(self):
        """Test Config.get method."""
        config = get_default_config()

        assert config.get("limiter", "requests_per_second") == 10.0
        assert config.get("limiter", "nonexistent", "default") == "default"
        assert config.get("nonexistent", "key", "default") == "default"

    def test_config_set(self):
        """Test Config.set method."""
        config = get_default_config()

        config.set("client", "timeout", 2.0)
        assert config.get("client", "timeout") == 2.0

    def test_defaults_not_shared(self):
        """Test changing one config does not change the defaults."""
        config = get_default_config()
        config.set("cache", "enabled", True)

        assert DEFAULT_CONFIG["cache"]["enabled"] is False

    def test_config_round_trip_dict(self):
        """Test Config.from_dict and to_dict."""
        config = Config.from_dict({"client": {"timeout": 3}})

        assert config.to_dict()["client"] == {"timeout": 3}
        assert config.to_dict()["cache"] == {}


class TestTOMLOperations:
    """Tests for TOML load/save operations."""

    def test_save_and_load_toml(self, temp_dir):
        """Test a saved file loads back."""
        filepath = temp_dir / "test.toml"
        save_toml(
            {"cache": {"enabled": True, "default_expiration": 60}, "credentials": {"scopes": ["read"]}},
            filepath,
        )

        data = load_toml(filepath)

        assert data["cache"] == {"enabled": True, "default_expiration": 60}
        assert data["credentials"]["scopes"] == ["read"]

    @pytest.mark.parametrize(
        "secret",
        ['a"b\\c', "line1\nline2", "tab\there", 'C:\\path\\"x"', "caf\u00e9 \x7f\x01"],
    )
    def test_strings_are_escaped(self, temp_dir, secret):
        """Test quotes, backslashes and control characters survive a save and load."""
        filepath = temp_dir / "test.toml"
        save_toml({"credentials": {"client_secret": secret, "scopes": [secret, "read"]}}, filepath)

        data = load_toml(filepath)

        assert data["credentials"]["client_secret"] == secret
        assert data["credentials"]["scopes"] == [secret, "read"]

    def test_unsupported_value_rejected(self, temp_dir):
        """Test values with no TOML form raise instead of being dropped."""
        with pytest.raises(TypeError):
            save_toml({"client": {"timeout": None}}, temp_dir / "test.toml")

    def test_load_missing_file(self, temp_dir):
        """Test loading a missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_toml(temp_dir / "missing.toml")

    def test_create_default_config_file(self, temp_dir):
        """Test the default file contains the default sections."""
        path = create_default_config_file(str(temp_dir / "relax.toml"))

        data = load_toml(path)
        assert data["limiter"]["burst"] == 10
        assert data["cache"]["enabled"] is False


class TestLoadConfig:
    """Tests for finding and loading configuration."""

    def test_find_explicit_missing(self, temp_dir):
        """Test a missing explicit path finds nothing."""
        assert find_config_file(str(temp_dir / "missing.toml")) is None

    def test_load_defaults(self, no_config_files):
        """Test defaults are used when no file exists."""
        config = load_config()

        assert config._source is None
        assert config.get("cache", "enabled") is False

    def test_load_merges_file(self, no_config_files, temp_dir):
        """Test file values override defaults section by section."""
        path = temp_dir / "custom.toml"
        path.write_text("[limiter]\nenabled = true\nburst = 3\n")

        config = load_config(str(path))

        assert config._source == str(path)
        assert config.get("limiter", "enabled") is True
        assert config.get("limiter", "burst") == 3
        assert config.get("limiter", "requests_per_second") == 10.0

    def test_standard_location(self, no_config_files, temp_dir):
        """Test the standard locations are searched."""
        (temp_dir / "relax.toml").write_text("[client]\ntimeout = 4\n")

        assert Path(find_config_file()) == temp_dir / "relax.toml"
        assert load_config().get("client", "timeout") == 4

    def test_env_overrides(self, no_config_files, monkeypatch):
        """Test credential environment variables override file values."""
        monkeypatch.setenv("RELAX_CLIENT_ID", "env-id")
        monkeypatch.setenv("RELAX_TOKEN_URL", "https://auth.example.com/token")

        config = load_config()

        assert config.get("credentials", "client_id") == "env-id"
        assert config.get("credentials", "token_url") == "https://auth.example.com/token"

    def test_loaded_config_not_aliased(self, no_config_files):
        """Test loaded configs do not alias the built-in defaults."""
        config = load_config()
        config.get("credentials", "scopes").append("write")
        config.set("cache", "enabled", True)

        assert config_module.DEFAULT_CONFIG["credentials"]["scopes"] == []
        assert get_default_config().get("cache", "enabled") is False

    def test_global_config(self, no_config_files):
        """Test get_config caches and set_config replaces the global config."""
        assert get_config() is get_config()

        custom = Config.from_dict({"client": {"timeout": 1}})
        set_config(custom)

        assert get_config() is custom


class TestClientFromConfig:
    """Tests for building clients from configuration."""

    def test_defaults(self):
        """Test the default config gives a bare default-session client."""
        client = client_from_config(get_default_config())

        assert client.transport is get_default_session()
        assert client.cache is None
        assert client.limiter is None
        assert client.timeout is None

    def test_all_features(self):
        """Test enabled sections add their features."""
        config = Config.from_dict(
            {
                "client": {"timeout": 2},
                "cache": {"enabled": True, "default_expiration": 30, "cleanup_interval": 60},
                "limiter": {"enabled": True, "requests_per_second": 4, "burst": 2},
            }
        )

        client = client_from_config(config)

        assert client.timeout == 2.0
        assert client.cache.default_expiration == 30.0
        assert client.cache.cleanup_interval == 60.0
        assert client.limiter.requests_per_second == 4.0
        assert client.limiter.burst_size == 2

    def test_credentials(self):
        """Test complete credentials give an authenticated transport."""
        config = Config.from_dict(
            {
                "credentials": {
                    "client_id": "id",
                    "client_secret": "secret",
                    "token_url": "https://auth.example.com/token",
                    "scopes": ["read", "write"],
                }
            }
        )

        client = client_from_config(config)

        assert client.credentials.client_id == "id"
        assert client.credentials.scopes == ("read", "write")
        assert isinstance(client.transport.auth, ClientCredentialsAuth)

    def test_incomplete_credentials(self):
        """Test partial credentials fall back to the default session."""
        config = Config.from_dict({"credentials": {"client_id": "id"}})

        client = client_from_config(config)

        assert client.credentials is None
        assert client.transport is get_default_session()

    def test_uses_global_config(self, no_config_files):
        """Test the global config is used when none is given."""
        set_config(Config.from_dict({"limiter": {"enabled": True}}))

        client = client_from_config()

        assert client.limiter.burst_size == 10
