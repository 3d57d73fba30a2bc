"""
Textbelt client configuration

A ``TextbeltConfig`` holds the API key, the API base URL and the per-request
timeout. It can be built three ways: directly, through ordered construction
options (``with_key``, ``with_url``, ``with_timeout``), or loaded from a JSON
config file and ``TEXTBELT_*`` environment variables.
"""

import os
import json
import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional

from .errors import TextbeltConfigError

logger = logging.getLogger(__name__)

DEFAULT_KEY = "textbelt"  # shared free-tier key, one message per day
DEFAULT_URL = "https://textbelt.com"
DEFAULT_TIMEOUT = 5.0

ENV_CONFIG_PATH = "TEXTBELT_CONFIG"
ENV_KEY = "TEXTBELT_API_KEY"
ENV_URL = "TEXTBELT_URL"
ENV_TIMEOUT = "TEXTBELT_TIMEOUT"


@dataclass(frozen=True)
class TextbeltConfig:
    """Configuration for the Textbelt API client"""

    key: str = DEFAULT_KEY
    url: str = DEFAULT_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.url:
            raise TextbeltConfigError("API URL must not be empty")
        # Trailing slashes would produce '//text' style paths
        object.__setattr__(self, "url", self.url.rstrip("/"))
        try:
            timeout = float(self.timeout)
        except (TypeError, ValueError):
            raise TextbeltConfigError(f"Invalid timeout: {self.timeout!r}")
        if timeout <= 0:
            raise TextbeltConfigError(f"Timeout must be positive, got {timeout}")
        object.__setattr__(self, "timeout", timeout)

    def apply(self, *options: "Option") -> "TextbeltConfig":
        """Return a copy with ``options`` applied in order"""
        config = self
        for opt in options:
            config = opt(config)
        return config

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "TextbeltConfig":
        """
        Load configuration from a JSON file and the environment.

        Args:
            config_path: Path to the config file. When omitted, the path is
                taken from TEXTBELT_CONFIG or the XDG default location, and
                a missing file just means "use the defaults".

        Returns:
            TextbeltConfig: File values overridden by TEXTBELT_API_KEY,
            TEXTBELT_URL and TEXTBELT_TIMEOUT where those are set.
        """
        explicit = config_path is not None
        if config_path is None:
            config_path = os.environ.get(ENV_CONFIG_PATH)
            explicit = config_path is not None
        if config_path is None:
            config_path = default_config_path()

        values = {}
        if os.path.exists(config_path):
            values = _read_config_file(config_path)
            logger.debug(f"Loaded config from {config_path}")
        elif explicit:
            raise TextbeltConfigError(f"Config file not found: {config_path}")

        if os.environ.get(ENV_KEY):
            values["key"] = os.environ[ENV_KEY]
        if os.environ.get(ENV_URL):
            values["url"] = os.environ[ENV_URL]
        if os.environ.get(ENV_TIMEOUT):
            values["timeout"] = os.environ[ENV_TIMEOUT]

        return cls(**values)

    def save(self, config_path: str) -> None:
        """Write the configuration as JSON, creating parent directories"""
        parent = os.path.dirname(config_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump({"key": self.key, "url": self.url, "timeout": self.timeout}, f, indent=2)
        try:
            # The file holds an API key
            os.chmod(config_path, 0o600)
        except OSError:
            logger.debug(f"Could not restrict permissions on {config_path}")


Option = Callable[[TextbeltConfig], TextbeltConfig]


def with_key(key: str) -> Option:
    """Use your own API key instead of the free "textbelt" key"""
    def option(config: TextbeltConfig) -> TextbeltConfig:
        return replace(config, key=key)
    return option


def with_url(url: str) -> Option:
    """Point the client at a custom Textbelt endpoint"""
    def option(config: TextbeltConfig) -> TextbeltConfig:
        return replace(config, url=url)
    return option


def with_timeout(timeout: float) -> Option:
    """Set the per-request timeout in seconds (default 5)"""
    def option(config: TextbeltConfig) -> TextbeltConfig:
        return replace(config, timeout=timeout)
    return option


def default_config_dir() -> str:
    """Get the default configuration directory following XDG standards"""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return os.path.join(xdg_config_home, "textbelt")

    home = os.environ.get("HOME")
    if home:
        return os.path.join(home, ".config", "textbelt")

    return os.path.join(os.getcwd(), ".config", "textbelt")


def default_config_path() -> str:
    return os.path.join(default_config_dir(), "config.json")


def _read_config_file(config_path: str) -> dict:
    try:
        with open(config_path, 'r') as f:
            config_data = json.load(f)
    except (OSError, ValueError) as e:
        raise TextbeltConfigError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise TextbeltConfigError(f"Config file {config_path} must contain a JSON object")

    unknown = set(config_data) - {"key", "url", "timeout"}
    if unknown:
        logger.warning(f"Ignoring unknown config fields in {config_path}: {', '.join(sorted(unknown))}")

    return {k: v for k, v in config_data.items() if k in ("key", "url", "timeout") and v is not None}
