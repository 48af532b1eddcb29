"""Connection configuration for the BookStack sync client.

Reads BookStack connection settings from CLI args, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    BOOKSTACK_URL: BookStack instance URL (required)
    BOOKSTACK_TOKEN_ID: API token id (required)
    BOOKSTACK_TOKEN_SECRET: API token secret (required)
    BOOKSTACK_INSECURE: Skip SSL verification (optional, default: false)
    BOOKSTACK_DEBUG: Enable debug logging (optional, default: false)
    BOOKSTACK_TIMEOUT: Request timeout in seconds (optional, default: none)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class Config:
    server_url: str
    token_id: str
    token_secret: str
    insecure: bool = False
    debug: bool = False
    timeout: float | None = None


def normalize_url(url: str) -> str:
    """Strip whitespace and default to ``https://`` when no scheme is given."""
    url = url.strip()
    if url and "://" not in url:
        url = "https://" + url
    return url


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ConfigurationError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ConfigurationError: If URL format is invalid or token fields are empty.
    """
    config.server_url = config.server_url.strip()

    if not config.server_url.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"Invalid BookStack URL '{config.server_url}': "
            "must start with http:// or https://"
        )

    parsed = urlparse(config.server_url)
    if not parsed.hostname:
        raise ConfigurationError(
            f"Invalid BookStack URL '{config.server_url}': URL must include a hostname"
        )

    config.server_url = config.server_url.rstrip("/")

    if not config.token_id.strip():
        raise ConfigurationError(
            "BookStack token id cannot be empty. Set BOOKSTACK_TOKEN_ID environment variable."
        )

    if not config.token_secret.strip():
        raise ConfigurationError(
            "BookStack token secret cannot be empty. Set BOOKSTACK_TOKEN_SECRET environment variable."
        )

    if config.timeout is not None and config.timeout <= 0:
        raise ConfigurationError(
            f"Invalid timeout {config.timeout}: must be a positive number of seconds"
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def load_config(
    url: str | None = None,
    token_id: str | None = None,
    token_secret: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override BookStack URL.
        token_id: Override API token id.
        token_secret: Override API token secret.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``bookstack`` section.

    Returns:
        Validated Config instance.

    Raises:
        ConfigurationError: If a required field is missing after checking
            all sources, or a value is malformed.
    """
    fb = yaml_fallbacks or {}

    server_url = url or os.getenv("BOOKSTACK_URL") or fb.get("url")
    if not server_url:
        raise ConfigurationError(
            "BookStack URL not found. Set BOOKSTACK_URL environment variable, "
            "pass --url CLI argument, or add 'url' to config.yml."
        )

    final_token_id = (
        token_id or os.getenv("BOOKSTACK_TOKEN_ID") or fb.get("token_id")
    )
    if not final_token_id:
        raise ConfigurationError(
            "BookStack token id not found. Set BOOKSTACK_TOKEN_ID environment variable, "
            "pass --token-id CLI argument, or add 'token_id' to config.yml."
        )

    final_token_secret = (
        token_secret
        or os.getenv("BOOKSTACK_TOKEN_SECRET")
        or fb.get("token_secret")
    )
    if not final_token_secret:
        raise ConfigurationError(
            "BookStack token secret not found. Set BOOKSTACK_TOKEN_SECRET environment variable, "
            "pass --token-secret CLI argument, or add 'token_secret' to config.yml."
        )

    # --- Boolean fields: CLI > env > YAML > default ---

    if insecure:
        final_insecure = True
    else:
        env_insecure = _get_bool_env("BOOKSTACK_INSECURE")
        if env_insecure is not None:
            final_insecure = env_insecure
        else:
            final_insecure = bool(fb.get("insecure", False))

    if debug:
        final_debug = True
    else:
        env_debug = _get_bool_env("BOOKSTACK_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    # --- Timeout: env > YAML > none ---

    timeout_raw = os.getenv("BOOKSTACK_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout: float | None = float(timeout_raw)
        except ValueError:
            raise ConfigurationError(
                f"Invalid BOOKSTACK_TIMEOUT '{timeout_raw}': must be a number of seconds"
            ) from None
    elif fb.get("timeout") is not None:
        final_timeout = float(fb["timeout"])
    else:
        final_timeout = None

    config = Config(
        server_url=normalize_url(str(server_url)),
        token_id=str(final_token_id).strip(),
        token_secret=str(final_token_secret).strip(),
        insecure=final_insecure,
        debug=final_debug,
        timeout=final_timeout,
    )

    validate_config(config)

    return config
