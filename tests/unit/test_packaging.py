from __future__ import annotations

import tomllib
from pathlib import Path

from business_tracker import __version__

REPO_ROOT = Path(__file__).resolve().parents[2]


def _project() -> dict:
    with (REPO_ROOT / "pyproject.toml").open("rb") as handle:
        return tomllib.load(handle)["project"]


def test_readme_is_the_project_readme() -> None:
    project = _project()
    assert project["readme"] == "README.md"
    assert (REPO_ROOT / project["readme"]).is_file()


def test_metadata_matches_package() -> None:
    project = _project()
    assert project["version"] == __version__
    assert project["scripts"]["business-tracker"] == "business_tracker.cli.main:main"
