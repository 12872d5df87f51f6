"""File helpers for configuration loading and report export."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import yaml

__all__ = ["ensure_dir", "read_yaml", "write_csv"]


def ensure_dir(path: Path | str) -> Path:
    """Create ``path`` (and parents) if needed and return it as :class:`Path`."""

    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def read_yaml(path: Path | str) -> object:
    """Read a YAML file and return the decoded Python object."""

    with Path(path).open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def write_csv(frame: pd.DataFrame, path: Path | str) -> Path:
    """Write ``frame`` as CSV without the index, creating parent folders."""

    target = Path(path)
    ensure_dir(target.parent)
    frame.to_csv(target, index=False)
    return target
