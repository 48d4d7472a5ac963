"""Configuration management for the cloud-files CLI.

Handles loading, saving, and validating TOML configuration stored in:
- macOS: ~/.config/cloud-files/config.toml
- Linux: ~/.config/cloud-files/config.toml (XDG_CONFIG_HOME)
- Windows: %APPDATA%\\cloud-files\\config.toml

The API key is a secret and is only ever read from CLOUDFILES_API_KEY.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import tomllib
import tomli_w

from cloud_files.services.identity import IDENTITY_ENDPOINTS
from cloud_files.services.storage import RETRY_DELAY_SECONDS
from cloud_files.services.transport import DEFAULT_TIMEOUT

ENV_PREFIX = "CLOUDFILES"

# Dotted TOML keys -> ClientConfig attributes
_KEY_ALIASES = {
    "account.username": "username",
    "account.region": "region",
    "account.identity": "identity",
    "container.name": "container",
    "http.timeout": "timeout",
    "http.retry_delay": "retry_delay",
}


@dataclass
class ClientConfig:
    """Configuration for the cloud-files CLI.

    Attributes:
        username: Rackspace username
        region: Region code of the endpoints (e.g. "DFW", "LON")
        identity: Identity endpoint, "US" or "UK"
        container: Container every command operates on
        timeout: HTTP timeout in seconds
        retry_delay: Pause before retrying a failed delete or fetch
    """

    # Account
    username: str = ""
    region: str = "DFW"
    identity: str = "US"

    # Container
    container: str = ""

    # HTTP
    timeout: float = float(DEFAULT_TIMEOUT)
    retry_delay: float = RETRY_DELAY_SECONDS

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ClientConfig":
        """Load configuration from TOML file.

        Environment variables (CLOUDFILES_USERNAME, CLOUDFILES_REGION,
        CLOUDFILES_IDENTITY, CLOUDFILES_CONTAINER) take precedence over the
        file.

        Args:
            path: Path to config file (defaults to standard location)

        Returns:
            ClientConfig instance with loaded values

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        if path is None:
            path = get_config_path()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()

        if "account" in data:
            account = data["account"]
            config.username = account.get("username", config.username)
            config.region = account.get("region", config.region)
            config.identity = account.get("identity", config.identity)

        if "container" in data:
            config.container = data["container"].get("name", config.container)

        if "http" in data:
            http = data["http"]
            config.timeout = float(http.get("timeout", config.timeout))
            config.retry_delay = float(http.get("retry_delay", config.retry_delay))

        # Environment overrides
        for attr in ("username", "region", "identity", "container"):
            env_value = os.environ.get(get_env_var_name(attr))
            if env_value:
                setattr(config, attr, env_value)

        return config

    def save(self, path: Optional[Path] = None) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save config (defaults to standard location)
        """
        if path is None:
            path = get_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "account": {
                "username": self.username,
                "region": self.region,
                "identity": self.identity,
            },
            "container": {"name": self.container},
            "http": {"timeout": self.timeout, "retry_delay": self.retry_delay},
        }

        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def get(self, key: str, default: Optional[str] = None) -> Any:
        """Get a configuration value by key.

        Accepts the dotted TOML key (e.g. "container.name") or the
        attribute name (e.g. "container").

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        attr = _KEY_ALIASES.get(key, key)
        if attr not in self.__dataclass_fields__:
            return default
        return getattr(self, attr)

    def set(self, key: str, value: str) -> None:
        """Set a configuration value by key, preserving its type.

        Args:
            key: Configuration key
            value: Configuration value

        Raises:
            ValueError: If the key is unknown or the value does not convert
        """
        attr = _KEY_ALIASES.get(key, key)
        if attr not in self.__dataclass_fields__:
            raise ValueError(f"Invalid config key: {key}")

        current = getattr(self, attr)
        if isinstance(current, float):
            new_value: Any = float(value)
        else:
            new_value = value

        setattr(self, attr, new_value)

    def validate(self, api_key: Optional[str] = None) -> List[str]:
        """List configuration problems that would stop a connection.

        Args:
            api_key: API key to check (defaults to the environment secret)

        Returns:
            Human-readable problems; empty when the config is usable
        """
        if api_key is None:
            api_key = get_secret("api_key")

        problems = []
        if not self.username:
            problems.append("account.username is not set")
        if not self.region:
            problems.append("account.region is not set")
        if self.identity not in IDENTITY_ENDPOINTS:
            problems.append(
                f"account.identity must be one of {', '.join(IDENTITY_ENDPOINTS)}"
            )
        if not self.container:
            problems.append("container.name is not set")
        if not api_key:
            problems.append(f"{get_env_var_name('api_key')} is not set")
        return problems


def get_config_dir() -> Path:
    """Get the platform-specific config directory.

    Returns:
        Path to the config directory for cloud-files.
    """
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "cloud-files"
        return Path.home() / "AppData" / "Roaming" / "cloud-files"

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "cloud-files"
    return Path.home() / ".config" / "cloud-files"


def get_config_path() -> Path:
    """Get the path to the config.toml file."""
    return get_config_dir() / "config.toml"


def ensure_config_exists() -> ClientConfig:
    """Ensure config file exists, creating default if needed.

    Returns:
        ClientConfig instance
    """
    config_path = get_config_path()

    if config_path.exists():
        try:
            return ClientConfig.load(config_path)
        except (tomllib.TOMLDecodeError, ValueError):
            # Corrupted config is replaced with defaults
            pass

    config = ClientConfig()
    config.save(config_path)
    return config


def get_env_var_name(key: str) -> str:
    """Get the environment variable name for a config key.

    Args:
        key: Configuration key (e.g. "api_key")

    Returns:
        Environment variable name (e.g. "CLOUDFILES_API_KEY")
    """
    return f"{ENV_PREFIX}_{key.upper().replace('.', '_')}"


def get_secret(key: str) -> Optional[str]:
    """Get a secret value from environment variable.

    Args:
        key: Secret key (e.g., "api_key")

    Returns:
        Secret value or None
    """
    return os.environ.get(get_env_var_name(key))
