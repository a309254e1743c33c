"""Configuration loader for secretserver-toolkit."""
import os
import logging
from pathlib import Path
from typing import Dict, Any

import yaml

from .preferences import CONFIG_PATH_KEY, default_config_path, get_preference

logger = logging.getLogger(__name__)

DEFAULT_TLD = "com"
DEFAULT_API_PATH = "/api/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_TOKEN_ENV = "TSS_TOKEN"
SERVER_URL_ENV = "TSS_SERVER_URL"

EXAMPLE_CONFIG = (
    "server:\n"
    "  url: https://secretserver.example.com/SecretServer\n"
    "  # or, for Secret Server Cloud:\n"
    "  # tenant: mytenant\n"
    "  # tld: com\n"
    "authentication:\n"
    "  type: token\n"
    f"  token_env: {DEFAULT_TOKEN_ENV}\n"
)


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def _get_config_path() -> str:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference (stored in ~/.config/secretserver-toolkit/preferences.json)
    2. Default location: ~/.config/secretserver-toolkit/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    config_path_pref = get_preference(CONFIG_PATH_KEY)
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   tss config set-path /path/to/your/config.yml\n\n"
        f"Minimal config:\n{EXAMPLE_CONFIG}"
    )


def _validate_server(server: Any, config_path: str) -> Dict[str, Any]:
    if not isinstance(server, dict):
        raise ConfigError(f"'server' section in {config_path} must be a mapping")

    url_override = os.getenv(SERVER_URL_ENV)
    if url_override:
        logger.debug(f"Using {SERVER_URL_ENV} from environment: {url_override}")
        server["url"] = url_override

    if not server.get("url") and not server.get("tenant"):
        raise ConfigError(
            f"Missing 'server.url' or 'server.tenant' in config at {config_path}\n"
            f"Set one of them, or export {SERVER_URL_ENV}."
        )

    server.setdefault("tld", DEFAULT_TLD)
    server.setdefault("api_path", DEFAULT_API_PATH)
    server.setdefault("timeout", DEFAULT_TIMEOUT)

    timeout = server["timeout"]
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(f"'server.timeout' must be a positive number, got: {timeout!r}")

    return server


def _validate_authentication(auth: Any, config_path: str) -> Dict[str, Any]:
    if not isinstance(auth, dict):
        raise ConfigError(f"'authentication' section in {config_path} must be a mapping")

    if 'type' not in auth:
        raise ConfigError("Missing 'authentication.type' in config")

    if auth['type'] != 'token':
        raise ConfigError(
            f"Unsupported authentication type: {auth['type']}\n"
            f"Only 'token' is supported."
        )

    token_env = auth.setdefault("token_env", DEFAULT_TOKEN_ENV)
    env_token = os.getenv(token_env)
    if env_token:
        logger.debug(f"Using access token from environment variable {token_env}")
        auth["token"] = env_token

    if not auth.get("token"):
        raise ConfigError(
            f"No access token configured in {config_path}\n"
            f"Export {token_env} or set 'authentication.token'."
        )

    return auth


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with keys:
        - server: dict with url or tenant, plus tld, api_path and timeout
        - authentication: dict with type, token_env and the resolved token

    Raises:
        FileNotFoundError: If no config file can be located
        ConfigError: If config file is invalid or no token is available
    """
    # Resolved on every call so preference changes apply immediately
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    if 'server' not in config:
        raise ConfigError(
            f"Missing 'server' section in config at {config_path}\n"
            f"Required format:\n{EXAMPLE_CONFIG}"
        )

    if 'authentication' not in config:
        raise ConfigError(
            f"Missing 'authentication' section in config at {config_path}\n"
            f"Required format:\n{EXAMPLE_CONFIG}"
        )

    config['server'] = _validate_server(config['server'], config_path)
    config['authentication'] = _validate_authentication(config['authentication'], config_path)

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using server: {config['server'].get('url') or config['server']['tenant']}")

    return config
