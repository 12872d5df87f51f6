"""Runtime settings for the API, the CLI and the HTTP client.

Settings are resolved in three layers: built-in defaults, an optional YAML
file (``--config`` or ``BT_CONFIG``) and environment variable overrides.
Every invalid entry is collected first and reported in a single
:class:`ConfigError` so a broken file can be fixed in one pass.
"""

from __future__ import annotations

# ruff: noqa: ANN401
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from business_tracker.utils.io import read_yaml

__all__ = ["ConfigError", "Settings", "default_database_url", "load_settings"]

CONFIG_ENV = "BT_CONFIG"
ENV_OVERRIDES: dict[str, str] = {
    "BT_DATABASE_URL": "database_url",
    "BT_SAMPLE_DATA": "sample_data_enabled",
    "BT_CORS_ORIGINS": "cors_origins",
    "BT_DELETE_WINDOW_DAYS": "delete_window_days",
    "BT_EXPENSIVE_THRESHOLD": "expensive_threshold",
    "BT_API_URL": "api_url",
    "BT_API_TIMEOUT": "api_timeout",
}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Raised when the configuration contains invalid entries."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def default_database_url() -> str:
    db_path = Path(__file__).resolve().parents[1] / "backend" / "expenses.db"
    return f"sqlite:///{db_path}"


@dataclass(slots=True)
class Settings:
    """Validated settings shared by every entry point."""

    database_url: str = field(default_factory=default_database_url)
    sample_data_enabled: bool = True
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    delete_window_days: int = 30
    expensive_threshold: float = 100.0
    api_url: str = "http://127.0.0.1:8000"
    api_timeout: float = 5.0


def _as_bool(value: Any, *, path: str, errors: list[str]) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    errors.append(f"{path} must be a boolean")
    return None


def _as_int(value: Any, *, path: str, errors: list[str], minimum: int | None = None) -> int | None:
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            errors.append(f"{path} must be an integer")
            return None
    if not isinstance(value, int) or isinstance(value, bool):
        errors.append(f"{path} must be an integer")
        return None
    if minimum is not None and value < minimum:
        errors.append(f"{path} must be >= {minimum}")
        return None
    return value


def _as_float(value: Any, *, path: str, errors: list[str], minimum: float | None = None) -> float | None:
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            errors.append(f"{path} must be a number")
            return None
    if not isinstance(value, int | float) or isinstance(value, bool):
        errors.append(f"{path} must be a number")
        return None
    number = float(value)
    if minimum is not None and number <= minimum:
        errors.append(f"{path} must be > {minimum}")
        return None
    return number


def _as_string(value: Any, *, path: str, errors: list[str]) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    errors.append(f"{path} must be a non-empty string")
    return None


def _as_origins(value: Any, *, path: str, errors: list[str]) -> list[str] | None:
    if isinstance(value, str):
        value = [item for item in (part.strip() for part in value.split(",")) if item]
    if isinstance(value, list) and value and all(isinstance(item, str) and item for item in value):
        return list(value)
    errors.append(f"{path} must be a non-empty list of origins")
    return None


_PARSERS = {
    "database_url": lambda v, p, e: _as_string(v, path=p, errors=e),
    "sample_data_enabled": lambda v, p, e: _as_bool(v, path=p, errors=e),
    "cors_origins": lambda v, p, e: _as_origins(v, path=p, errors=e),
    "delete_window_days": lambda v, p, e: _as_int(v, path=p, errors=e, minimum=0),
    "expensive_threshold": lambda v, p, e: _as_float(v, path=p, errors=e, minimum=0.0),
    "api_url": lambda v, p, e: _as_string(v, path=p, errors=e),
    "api_timeout": lambda v, p, e: _as_float(v, path=p, errors=e, minimum=0.0),
}


def _apply(values: dict[str, Any], settings: Settings, *, origin: str, errors: list[str]) -> None:
    known = {item.name for item in fields(Settings)}
    for key, raw in values.items():
        if key not in known:
            errors.append(f"{origin}: unknown setting '{key}'")
            continue
        parsed = _PARSERS[key](raw, f"{origin}:{key}", errors)
        if parsed is not None:
            setattr(settings, key, parsed)


def load_settings(
    path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Resolve the settings from defaults, YAML file and environment.

    Args:
      path: Optional YAML file. When ``None`` the ``BT_CONFIG`` variable is
        consulted.
      environ: Environment mapping, defaults to :data:`os.environ`.

    Returns:
      The validated :class:`Settings`.

    Raises:
      ConfigError: If the file or any override holds an invalid value.
      FileNotFoundError: If an explicit configuration file does not exist.
    """

    env = os.environ if environ is None else environ
    settings = Settings()
    errors: list[str] = []

    config_path = path if path is not None else env.get(CONFIG_ENV)
    if config_path:
        payload = read_yaml(config_path)
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ConfigError([f"{config_path} must contain a mapping at the top level"])
        _apply(payload, settings, origin=str(config_path), errors=errors)

    overrides = {key: env[name] for name, key in ENV_OVERRIDES.items() if name in env}
    _apply(overrides, settings, origin="env", errors=errors)

    if errors:
        raise ConfigError(errors)
    return settings
