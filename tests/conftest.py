"""Shared pytest configuration for the Business Tracker test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable
from pathlib import Path

import pytest


def _insert_repo_root() -> None:
    """Make sure the repository root is on ``sys.path`` for imports."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_insert_repo_root()

# Modules under ``backend`` bind their engine at import time.
os.environ.setdefault("BT_DATABASE_URL", "sqlite://")
os.environ.setdefault("BT_SAMPLE_DATA", "false")


def pytest_report_header(config: pytest.Config) -> Iterable[str]:  # pragma: no cover - pytest hook
    """Show diagnostic context for the test run."""

    root = Path.cwd()
    log_level = os.environ.get("BT_LOG_LEVEL", "INFO")
    return [f"business-tracker repo: {root}", f"BT_LOG_LEVEL={log_level}"]


@pytest.fixture(autouse=True)
def _set_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin the log level to INFO and keep JSON file logs off during tests."""

    monkeypatch.setenv("BT_LOG_LEVEL", "INFO")
    monkeypatch.delenv("BT_JSON_LOGS", raising=False)
