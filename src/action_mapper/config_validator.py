"""
Configuration validation utilities.

Validates environment-sourced settings before they reach ActionMapperConfig.
"""
import os
import warnings
from typing import Optional
from .exceptions import ConfigurationError

# Fragments that mark a value copied from a sample .env
_PLACEHOLDER_MARKERS = ("your_", "placeholder", "xxx", "sk-0000", "gsk_0000", "replace")


def get_required_env(key: str, description: str = None) -> str:
    """
    Read a secret or setting that the mapper cannot run without.

    :param key: Environment variable name
    :param description: What the value is for, shown when it is missing
    :return: Environment variable value
    :raises: ConfigurationError if unset or still a placeholder
    """
    value = os.getenv(key)

    if not value:
        raise ConfigurationError(
            f"{key} is required but not set.\n"
            f"Export it in the shell (export {key}=...) or add {key}=... to the .env file "
            f"next to pyproject.toml.\n\n"
            f"Used for: {description or key}"
        )

    if _is_placeholder(value):
        raise ConfigurationError(
            f"{key} looks like a placeholder ({_mask_secret(value)}); set the real value."
        )

    return value


def get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    :param key: Environment variable name
    :param default: Value used when unset or a placeholder
    """
    value = os.getenv(key, default)

    if value and _is_placeholder(value):
        warnings.warn(f"{key} looks like a placeholder, falling back to {default!r}", UserWarning)
        return default

    return value


def get_bool_env(key: str, default: bool) -> bool:
    """Read a boolean flag ("true"/"false") from the environment."""
    value = get_optional_env(key, "true" if default else "false")
    return (value or "").strip().lower() in ("true", "1", "yes")


def get_float_env(key: str, default: float) -> float:
    """Read a float from the environment, raising ConfigurationError on junk."""
    raw = get_optional_env(key, str(default))
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")


def get_int_env(key: str, default: int) -> int:
    """Read an integer from the environment, raising ConfigurationError on junk."""
    raw = get_optional_env(key, str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")


def validate_threshold(value: float, name: str) -> float:
    """
    Validate a confidence threshold.

    :param value: Threshold value
    :param name: Setting name (for error messages)
    :return: Validated threshold
    :raises: ConfigurationError if outside [0.0, 1.0]
    """
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(
            f"{name} must be between 0.0 and 1.0, got {value}"
        )
    return value


def validate_existing_path(path: str, name: str) -> str:
    """
    :param path: File or directory that must already exist
    :param name: Setting name (for error messages)
    :raises: ConfigurationError if the path is empty or missing
    """
    if not path:
        raise ConfigurationError(f"{name} is required.")
    if not os.path.exists(path):
        raise ConfigurationError(f"{name} does not exist: {path}")
    return path


def _is_placeholder(value: str) -> bool:
    lowered = (value or "").lower()
    return any(marker in lowered for marker in _PLACEHOLDER_MARKERS)


def _mask_secret(secret: str, show_chars: int = 4) -> str:
    """Keep only the first and last few characters of a secret."""
    if not secret or len(secret) <= show_chars * 2:
        return "***"
    return f"{secret[:show_chars]}...{secret[-show_chars:]}"
