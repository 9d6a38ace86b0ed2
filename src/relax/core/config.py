"""
Configuration Management
========================

TOML-based configuration for relax clients.

Configuration files are searched in the following order (highest to lowest priority):
1. Explicit path passed to ``load_config()``
2. ./relax.toml (current directory)
3. ~/.config/relax/config.toml (user config)
4. /etc/relax/config.toml (system config)
5. Built-in defaults

Credentials may also come from the RELAX_CLIENT_ID, RELAX_CLIENT_SECRET
and RELAX_TOKEN_URL environment variables, which override file values.

Example configuration file (relax.toml):

    [client]
    timeout = 5.0

    [cache]
    enabled = true
    default_expiration = 300
    cleanup_interval = 600

    [limiter]
    enabled = true
    requests_per_second = 10.0
    burst = 10

    [credentials]
    client_id = "my-api-key"
    client_secret = "my-api-secret"
    token_url = "https://auth.example.com/oauth/token"
    scopes = []

    [logging]
    level = "WARNING"
"""

import copy
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from relax.core.client import (
    Client,
    from_config,
    from_default_session,
    new,
    with_cache,
    with_limiter,
    with_timeout,
)
from relax.core.http.auth import ClientCredentials
from relax.core.logger import get_logger, set_level

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = get_logger(__name__)


# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "client": {
        "timeout": 0,  # 0 = no timeout
    },
    "cache": {
        "enabled": False,
        "default_expiration": 300,
        "cleanup_interval": 600,
    },
    "limiter": {
        "enabled": False,
        "requests_per_second": 10.0,
        "burst": 10,
    },
    "credentials": {
        "client_id": "",
        "client_secret": "",
        "token_url": "",
        "scopes": [],
    },
    "logging": {
        "level": "WARNING",
    },
}

# Standard config file locations
CONFIG_LOCATIONS = [
    Path("relax.toml"),
    Path("~/.config/relax/config.toml").expanduser(),
    Path("/etc/relax/config.toml"),
]

# (section, key) -> environment variable
ENV_OVERRIDES = {
    ("credentials", "client_id"): "RELAX_CLIENT_ID",
    ("credentials", "client_secret"): "RELAX_CLIENT_SECRET",
    ("credentials", "token_url"): "RELAX_TOKEN_URL",
}

_TOML_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


@dataclass
class Config:
    """
    Configuration container for relax settings.

    Attributes:
        client: Transport settings (timeout)
        cache: Response cache settings
        limiter: Rate limiter settings
        credentials: OAuth2 client-credentials settings
        logging: Logging settings
        _source: Path to the config file that was loaded
    """

    client: Dict[str, Any] = field(default_factory=dict)
    cache: Dict[str, Any] = field(default_factory=dict)
    limiter: Dict[str, Any] = field(default_factory=dict)
    credentials: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)
    _source: Optional[str] = None

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        section_dict = getattr(self, section, {})
        if section_dict is None:
            return default
        return section_dict.get(key, default)

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value."""
        section_dict = getattr(self, section, None)
        if section_dict is not None:
            section_dict[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "client": self.client,
            "cache": self.cache,
            "limiter": self.limiter,
            "credentials": self.credentials,
            "logging": self.logging,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Config":
        """Create Config from dictionary."""
        return cls(
            client=data.get("client", {}),
            cache=data.get("cache", {}),
            limiter=data.get("limiter", {}),
            credentials=data.get("credentials", {}),
            logging=data.get("logging", {}),
            _source=source,
        )


def load_toml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a TOML configuration file.

    Args:
        filepath: Path to the TOML file

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If file doesn't exist
        tomllib.TOMLDecodeError: If TOML parsing fails
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    with open(path, "rb") as f:
        return tomllib.load(f)


def _toml_string(value: str) -> str:
    escaped = []
    for ch in value:
        if ch in _TOML_ESCAPES:
            escaped.append(_TOML_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            escaped.append(f"\\u{ord(ch):04X}")
        else:
            escaped.append(ch)
    return '"' + "".join(escaped) + '"'


def _toml_value(value: Any) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return _toml_string(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_toml_value(v) for v in value) + "]"
    raise TypeError(f"Cannot write {type(value).__name__} to TOML")


def save_toml(config: Dict[str, Any], filepath: Union[str, Path]) -> str:
    """
    Write a configuration dictionary as TOML.

    Only one level of tables is written; empty sections are skipped.

    Returns:
        Path to the saved file

    Raises:
        TypeError: If a value has no TOML representation
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = []
    for section, values in config.items():
        if not isinstance(values, dict) or not values:
            continue
        lines.append(f"[{section}]")
        lines.extend(f"{key} = {_toml_value(value)}" for key, value in values.items())
        lines.append("")

    path.write_text("\n".join(lines), encoding="utf-8")
    return str(path)


def find_config_file(config_path: Optional[str] = None) -> Optional[Path]:
    """
    Find the configuration file to use.

    Args:
        config_path: Explicit path to config file (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if config_path:
        path = Path(config_path)
        if path.exists():
            return path
        logger.warning(f"Specified config file not found: {config_path}")
        return None

    for location in CONFIG_LOCATIONS:
        if location.exists():
            return location

    return None


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from file or use defaults.

    Environment overrides are applied last.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Config object with merged settings

    Raises:
        tomllib.TOMLDecodeError: If the config file is not valid TOML
    """
    config_data = copy.deepcopy(DEFAULT_CONFIG)
    source = None

    config_file = find_config_file(config_path)
    if config_file:
        config_data = _merge_dicts(config_data, load_toml(config_file))
        source = str(config_file)
        logger.info(f"Loaded configuration from {config_file}")

    _apply_env_overrides(config_data)
    return Config.from_dict(config_data, source=source)


def get_default_config() -> Config:
    """Get the default configuration."""
    return Config.from_dict(copy.deepcopy(DEFAULT_CONFIG))


def create_default_config_file(filepath: Optional[str] = None) -> str:
    """
    Create a default configuration file.

    Args:
        filepath: Path to create the file (default: ./relax.toml)

    Returns:
        Path to the created file
    """
    if filepath is None:
        filepath = "relax.toml"

    return save_toml(DEFAULT_CONFIG, filepath)


def _apply_env_overrides(config_data: Dict[str, Any]) -> None:
    for (section, key), env_var in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            config_data.setdefault(section, {})[key] = value


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two dictionaries, with override taking precedence."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


# Global configuration instance
_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to None (will reload on next access)."""
    global _global_config
    _global_config = None


def client_from_config(config: Optional[Config] = None) -> Client:
    """
    Build a client from configuration.

    The transport authenticates with client credentials when client_id,
    client_secret and token_url are all set, and is the process-default
    session otherwise. The cache and limiter are added when enabled.

    Args:
        config: Configuration to use (default: the global configuration)

    Returns:
        The configured client
    """
    if config is None:
        config = get_config()

    level = config.get("logging", "level")
    if level:
        set_level(level)

    creds = config.credentials or {}
    if creds.get("client_id") and creds.get("client_secret") and creds.get("token_url"):
        selector = from_config(
            ClientCredentials(
                client_id=creds["client_id"],
                client_secret=creds["client_secret"],
                token_url=creds["token_url"],
                scopes=tuple(creds.get("scopes") or ()),
            )
        )
    else:
        selector = from_default_session()

    features = []
    timeout = config.get("client", "timeout")
    if timeout:
        features.append(with_timeout(float(timeout)))
    if config.get("cache", "enabled", False):
        features.append(
            with_cache(
                float(config.get("cache", "default_expiration", 300)),
                float(config.get("cache", "cleanup_interval", 600)),
            )
        )
    if config.get("limiter", "enabled", False):
        features.append(
            with_limiter(
                float(config.get("limiter", "requests_per_second", 10.0)),
                int(config.get("limiter", "burst", 10)),
            )
        )

    return new(selector, *features)
