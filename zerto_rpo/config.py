"""Credential and settings loading for the Zerto RPO check.

This module handles:
- Reading ZVM login credentials from a JSON file
- Resolving connection settings from CLI values, environment variables
  (optionally populated from a .env file) and defaults
"""

import json
import logging
import math
import os
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from dotenv import find_dotenv, load_dotenv

from zerto_rpo.errors import ConfigError

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_SERVER = "localhost"
DEFAULT_PORT = 9669
DEFAULT_TIMEOUT = 10.0

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")

N = TypeVar("N", int, float)


@dataclass(frozen=True)
class Credentials:
    """ZVM login credentials.

    Attributes:
        username: ZVM user name
        password: ZVM password (hidden from repr)
    """
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Settings:
    """Connection settings for a single check run.

    Attributes:
        server: ZVM host name or IP address
        port: ZVM API port (default 9669)
        timeout: Per-request timeout in seconds
        verify_tls: Whether to validate the server certificate
    """
    server: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    verify_tls: bool = True

    @property
    def base_url(self) -> str:
        return f"https://{self.server}:{self.port}"


def load_credentials(path: str) -> Credentials:
    """Load ZVM credentials from a JSON file.

    The file must hold a JSON object with non-empty string values for
    ``username`` and ``password``. Other keys are ignored.

    Args:
        path: Path to the credentials file

    Returns:
        Credentials loaded from the file

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    if not path:
        raise ConfigError("Config file path is required")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    values = {}
    for key in ("username", "password"):
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise ConfigError(f"Config file {path} is missing a non-empty string '{key}'")
        values[key] = value

    logger.debug(f"Loaded credentials for user {values['username']} from {path}")
    return Credentials(username=values["username"], password=values["password"])


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid {name}: {raw!r} (expected true/false)")


def _env_number(name: str, cast: Callable[[str], N]) -> Optional[N]:
    """Read a numeric environment variable.

    Args:
        name: Environment variable name
        cast: Conversion applied to the raw value (int or float)

    Returns:
        The converted value, or None if the variable is unset or blank

    Raises:
        ConfigError: If the value cannot be converted
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid {name}: {raw!r}") from e


def load_settings(
    server: Optional[str] = None,
    port: Optional[int] = None,
    timeout: Optional[float] = None,
    insecure: Optional[bool] = None,
    env_file: Optional[str] = None,
) -> Settings:
    """Resolve connection settings.

    Explicit arguments win over environment variables, which win over
    defaults.

    Environment:
        ZERTO_SERVER: ZVM host (default: localhost)
        ZERTO_PORT: ZVM API port (default: 9669)
        ZERTO_TIMEOUT: Request timeout in seconds (default: 10)
        ZERTO_INSECURE: Disable TLS certificate validation (default: false)

    Args:
        server: ZVM host from the command line
        port: API port from the command line
        timeout: Request timeout from the command line
        insecure: True to skip TLS validation, False to force it
        env_file: Optional .env path; the working directory is searched if None

    Returns:
        Resolved Settings

    Raises:
        ConfigError: If an environment value is invalid or a number is not positive
    """
    # Existing environment variables are not overridden
    load_dotenv(env_file or find_dotenv(usecwd=True))

    if server is None:
        server = os.getenv("ZERTO_SERVER") or DEFAULT_SERVER
    if port is None:
        port = _env_number("ZERTO_PORT", int)
        if port is None:
            port = DEFAULT_PORT
    if timeout is None:
        timeout = _env_number("ZERTO_TIMEOUT", float)
        if timeout is None:
            timeout = DEFAULT_TIMEOUT
    if insecure is None:
        insecure = _parse_bool("ZERTO_INSECURE", os.getenv("ZERTO_INSECURE", ""))

    if not server:
        raise ConfigError("Server address must not be empty")
    if port <= 0 or port > 65535:
        raise ConfigError(f"Invalid port: {port}")
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigError(f"Timeout must be a positive finite number, got {timeout}")

    settings = Settings(server=server, port=port, timeout=timeout, verify_tls=not insecure)
    logger.info(f"Settings loaded: server={settings.server}, port={settings.port}, "
                f"timeout={settings.timeout}, verify_tls={settings.verify_tls}")
    return settings
