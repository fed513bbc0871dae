"""Tests for the dealboard command line."""

import json
from pathlib import Path

import pytest

from dealboard.cli.main import main

from conftest import make_raw


@pytest.fixture
def deals_file(tmp_path: Path) -> Path:
    path = tmp_path / "deals.json"
    path.write_text(
        json.dumps(
            [
                make_raw(id="a", salespersonId="S1"),
                make_raw(id="b", salespersonId="S2", dealDate="2026-09-15"),
                make_raw(id="c", dealStatus="Unwound"),
            ]
        )
    )
    return path


class TestDashboardCommand:
    def test_prints_dashboard_json(self, deals_file: Path, capsys: pytest.CaptureFixture) -> None:
        main(["dashboard", "--input", str(deals_file), "--type", "sales", "--now", "2026-10-19"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["metrics"]["totalDeals"] == 1
        assert payload["periodLabel"] == "October 2026"

    def test_period_participant_and_salespeople(self, deals_file: Path, capsys: pytest.CaptureFixture) -> None:
        main(
            [
                "dashboard", "--input", str(deals_file), "--now", "2026-10-19",
                "--period", "all-time", "--salespeople", "--include-inactive",
            ]
        )
        payload = json.loads(capsys.readouterr().out)
        assert payload["metrics"]["totalDeals"] == 3
        assert len(payload["salespersonMetrics"]) == 2

    def test_custom_range(self, deals_file: Path, capsys: pytest.CaptureFixture) -> None:
        main(["dashboard", "--input", str(deals_file), "--start", "2026-09-01", "--end", "2026-09-30"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["metrics"]["totalDeals"] == 1

    def test_writes_output_file(self, deals_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        out = tmp_path / "dashboard.json"
        main(["dashboard", "--input", str(deals_file), "--now", "2026-10-19", "--output", str(out)])
        assert "Dashboard: 1 deals" in capsys.readouterr().out
        assert json.loads(out.read_text())["metrics"]["totalDeals"] == 1

    def test_unknown_period_exits_nonzero(self, deals_file: Path, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["dashboard", "--input", str(deals_file), "--period", "someday"])
        assert exc.value.code == 1
        assert "Unknown time period" in capsys.readouterr().err

    def test_no_source(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DEALBOARD_STORE_DB", raising=False)
        monkeypatch.delenv("DEALBOARD_STORE_URL", raising=False)
        with pytest.raises(SystemExit, match="No record source"):
            main(["dashboard"])


class TestOtherCommands:
    def test_manager(self, deals_file: Path, capsys: pytest.CaptureFixture) -> None:
        main(["manager", "--input", str(deals_file), "--dealership", "DL1", "--now", "2026-10-19"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["metrics"]["totalDeals"] == 1
        assert payload["metrics"]["salesGoal"] == 100

    def test_normalize(self, deals_file: Path, capsys: pytest.CaptureFixture) -> None:
        main(["normalize", "--input", str(deals_file)])
        deals = json.loads(capsys.readouterr().out)
        assert [d["id"] for d in deals] == ["a", "b", "c"]
        assert deals[2]["metricFlags"]["excludeFromMetrics"] is True

    def test_store_import_count_list(self, deals_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        db = tmp_path / "deals.db"
        main(["store", "import", "--db", str(db), "--input", str(deals_file)])
        assert "Imported 3 records into financeDeals" in capsys.readouterr().out
        main(["store", "count", "--db", str(db)])
        assert capsys.readouterr().out.strip() == "3"
        main(["store", "list", "--db", str(db), "--partition", "financeDeals"])
        assert len(json.loads(capsys.readouterr().out)) == 3

    def test_store_import_requires_input(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit, match="requires --input"):
            main(["store", "import", "--db", str(tmp_path / "deals.db")])

    def test_dashboard_from_db(self, deals_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        db = tmp_path / "deals.db"
        main(["store", "import", "--db", str(db), "--input", str(deals_file), "--replace"])
        capsys.readouterr()
        main(["dashboard", "--db", str(db), "--type", "finance", "--now", "2026-10-19"])
        assert json.loads(capsys.readouterr().out)["metrics"]["totalDeals"] == 1

    def test_watch_prints_summary(self, deals_file: Path, capsys: pytest.CaptureFixture) -> None:
        main(["watch", "--input", str(deals_file), "--now", "2026-10-19", "--interval", "3600"])
        out = capsys.readouterr().out
        assert "October 2026: 1 deals, 1 funded, 0 pending" in out
