"""Structured logging helpers shared by the Business Tracker packages."""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

CONSOLE_FORMAT: Final[str] = "[%(levelname)s] %(name)s: %(message)s"
DEFAULT_LEVEL: Final[str] = "INFO"
LOG_DIR: Final[Path] = Path("artifacts") / "logs"
LOG_PATH: Final[Path] = LOG_DIR / "business_tracker.log"
JSON_ENV_FLAG: Final[str] = "BT_JSON_LOGS"
LEVEL_ENV_FLAG: Final[str] = "BT_LOG_LEVEL"
LOGGER_PREFIXES: Final[tuple[str, ...]] = ("business_tracker", "backend")


class JsonLineFormatter(logging.Formatter):
    """Format log records as single-line JSON payloads."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat()
        payload = {
            "timestamp": timestamp,
            "level": record.levelname,
            "source": record.name,
            "message": record.getMessage(),
            "expense_id": getattr(record, "expense_id", None),
            "records_processed": _coerce_int(getattr(record, "records_processed", None)),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _coerce_int(value: object) -> int | None:
    if value is None:
        return None
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None


def _resolve_level(level: str | int | None) -> int:
    """Pick the log level from the environment first, then the caller."""

    env_level = os.environ.get(LEVEL_ENV_FLAG)
    if env_level:
        candidate = env_level.strip().upper()
    elif isinstance(level, str):
        candidate = level.strip().upper()
    elif isinstance(level, int):
        return int(level)
    else:
        candidate = DEFAULT_LEVEL
    resolved = logging.getLevelName(candidate)
    return int(resolved) if isinstance(resolved, int) else logging.INFO


def _json_logging_enabled(explicit: bool) -> bool:
    if explicit:
        return True
    value = os.environ.get(JSON_ENV_FLAG)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _ensure_console_handler(logger: logging.Logger, level: int) -> None:
    for handler in logger.handlers:
        if getattr(handler, "_bt_console", False):
            handler.setLevel(level)
            return
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    stream_handler._bt_console = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)


def _ensure_json_handler(logger: logging.Logger, level: int, log_path: Path) -> None:
    for handler in logger.handlers:
        if getattr(handler, "_bt_json", False):
            handler.setLevel(level)
            return
    log_path.parent.mkdir(parents=True, exist_ok=True)
    json_handler = logging.FileHandler(log_path, encoding="utf-8")
    json_handler.setLevel(level)
    json_handler.setFormatter(JsonLineFormatter())
    json_handler._bt_json = True  # type: ignore[attr-defined]
    logger.addHandler(json_handler)


def setup_logger(
    name: str,
    json_format: bool = False,
    level: str | int | None = None,
    log_path: Path | None = None,
) -> logging.Logger:
    """Configure and return a module logger.

    A single console handler is attached per logger; a JSON-lines file handler
    is added when ``json_format`` is set or ``BT_JSON_LOGS`` is truthy.
    """

    resolved_level = _resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(resolved_level)
    # Keep propagation so capture handlers such as ``caplog`` still see records.
    logger.propagate = True
    _ensure_console_handler(logger, resolved_level)
    if _json_logging_enabled(json_format):
        _ensure_json_handler(logger, resolved_level, log_path or LOG_PATH)
    return logger


def configure_cli_logging(json_logs: bool, level: str | int | None = None) -> None:
    """Reconfigure every tracker logger created so far for a CLI run."""

    if json_logs:
        os.environ[JSON_ENV_FLAG] = "1"
    else:
        os.environ.pop(JSON_ENV_FLAG, None)
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger):
            continue
        if not name.startswith(LOGGER_PREFIXES):
            continue
        setup_logger(name, json_format=json_logs, level=level)
    setup_logger("business_tracker", json_format=json_logs, level=level)


__all__ = ["JsonLineFormatter", "setup_logger", "configure_cli_logging"]
