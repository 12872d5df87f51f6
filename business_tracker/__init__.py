"""Top-level package for the Business Tracker expense service.

Exposes the package version for runtime checks, the health endpoint and CLI banners.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.0.0"
