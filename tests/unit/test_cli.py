from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pandas as pd
import pytest

from business_tracker.cli.main import build_parser, main


@pytest.fixture()
def sqlite_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    from backend import database

    original = database.DATABASE_URL
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("BT_DATABASE_URL", url)
    yield url
    database.configure(original)


def test_parser_subcommands() -> None:
    parser = build_parser()
    args = parser.parse_args(["stats", "quarterly", "--year", "2024", "--breakdown"])
    assert args.command == "stats"
    assert args.granularity == "quarterly"
    assert args.year == 2024
    assert args.breakdown is True

    serve = parser.parse_args(["serve", "--port", "9001"])
    assert (serve.host, serve.port, serve.reload) == ("127.0.0.1", 9001, False)


def test_stats_requires_granularity() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["stats"])


def test_seed_then_yearly_stats(sqlite_url: str, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["seed"]) == 0
    assert "Inserted 6 sample expenses" in capsys.readouterr().out

    assert main(["seed"]) == 0
    assert "Inserted 0 sample expenses" in capsys.readouterr().out

    output = tmp_path / "out" / "yearly.csv"
    assert main(["stats", "yearly", "--output", str(output), "--breakdown"]) == 0
    printed = capsys.readouterr().out
    assert "Grand total: 867.74" in printed
    assert "Software" in printed
    assert pd.read_csv(output)["total_amount"].sum() == pytest.approx(867.74)


def test_quarterly_stats_on_empty_database(sqlite_url: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["stats", "quarterly", "--year", "2001"]) == 0
    printed = capsys.readouterr().out
    assert "Q1" in printed and "Q4" in printed
    assert "Year total: 0.00" in printed


def test_yearly_stats_on_empty_database(sqlite_url: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["stats", "yearly"]) == 0
    printed = capsys.readouterr().out
    assert "(no data)" in printed
    assert "No expenses recorded" in printed


def test_invalid_configuration_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BT_DELETE_WINDOW_DAYS", "-5")
    with pytest.raises(SystemExit) as excinfo:
        main(["stats", "yearly"])
    assert excinfo.value.code == 2
