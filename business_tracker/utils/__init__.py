"""Utility helpers for Business Tracker."""

from .io import ensure_dir, read_yaml, write_csv

__all__ = ["ensure_dir", "read_yaml", "write_csv"]
