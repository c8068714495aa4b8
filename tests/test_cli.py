"""Tests for the CLI."""

import csv
import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from cookin_deal.cli import app
from cookin_deal.models import DealInput
from cookin_deal.storage import Storage

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("CRM_WEBHOOK_URL", "RENTCAST_API_KEY", "LLM_API_KEY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "storage": {"db_path": str(tmp_path / "deals.duckdb")},
        "crm_webhook": {"url": ""},
    }))
    return path


@pytest.fixture
def deal_file(tmp_path: Path, sample_deal: DealInput) -> Path:
    path = tmp_path / "deal.yaml"
    path.write_text(yaml.safe_dump(sample_deal.to_dict(), sort_keys=False))
    return path


class TestAnalyze:
    """Tests for analyze/worksheet/compare."""

    def test_analyze(self, deal_file: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["analyze", str(deal_file), "-c", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Estimated Profit" in result.output
        assert "CONSIDER" in result.output
        assert "Grade B-" in result.output

    def test_analyze_json_deal_with_exports(
        self, tmp_path: Path, sample_deal: DealInput, config_file: Path
    ) -> None:
        deal_path = tmp_path / "deal.json"
        deal_path.write_text(json.dumps(sample_deal.to_dict()))
        sheet = tmp_path / "out" / "sheet.txt"
        report = tmp_path / "out" / "report.json"
        result = runner.invoke(app, [
            "analyze", str(deal_path), "-c", str(config_file),
            "--worksheet", str(sheet), "--json", str(report), "--amortizing",
        ])
        assert result.exit_code == 0, result.output
        assert "COOKINCAP DEAL ANALYZER WORKSHEET" in sheet.read_text()
        assert json.loads(report.read_text())["results"][0]["grade"] == "B-"

    def test_missing_deal_file(self, tmp_path: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["analyze", str(tmp_path / "nope.yaml"), "-c", str(config_file)])
        assert result.exit_code == 1
        assert "Deal file not found" in result.output

    @pytest.mark.parametrize(
        ("name", "content"),
        [
            ("bad.yaml", "purchasePrice: [185000\narv: {\n"),
            ("bad.json", '{"purchasePrice": 185000,'),
        ],
    )
    def test_unparsable_deal_file(self, tmp_path: Path, config_file: Path, name: str, content: str) -> None:
        path = tmp_path / name
        path.write_text(content)
        result = runner.invoke(app, ["analyze", str(path), "-c", str(config_file)])
        assert result.exit_code == 1
        assert "Could not parse deal file" in result.output
        assert not isinstance(result.exception, (ValueError, yaml.YAMLError))

    def test_deal_file_not_mapping(self, tmp_path: Path, config_file: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("- 1\n- 2\n")
        result = runner.invoke(app, ["analyze", str(path), "-c", str(config_file)])
        assert result.exit_code == 1

    def test_partial_deal_file_uses_defaults(self, tmp_path: Path, config_file: Path) -> None:
        path = tmp_path / "partial.yaml"
        path.write_text("purchasePrice: $185,000\narv: $275,000\n")
        result = runner.invoke(app, ["analyze", str(path), "-c", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Max Allowable Offer" in result.output

    def test_worksheet_stdout(self, deal_file: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["worksheet", str(deal_file), "-c", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "70% RULE CHECK" in result.output

    def test_compare_exports_ranked(
        self, tmp_path: Path, deal_file: Path, scenario_a_deal: DealInput, config_file: Path
    ) -> None:
        other = tmp_path / "a.yaml"
        other.write_text(yaml.safe_dump(scenario_a_deal.to_dict()))
        out = tmp_path / "ranked.csv"
        result = runner.invoke(app, [
            "compare", str(deal_file), str(other), "-c", str(config_file), "--csv", str(out),
        ])
        assert result.exit_code == 0, result.output
        with open(out, newline="") as f:
            rows = list(csv.DictReader(f))
        assert [r["signal"] for r in rows] == ["STRONG BUY", "CONSIDER"]


class TestNew:
    """Tests for seeding a deal file."""

    def test_new_with_template_and_ltv(self, tmp_path: Path, config_file: Path) -> None:
        out = tmp_path / "new.yaml"
        result = runner.invoke(app, [
            "new", str(out), "-c", str(config_file),
            "--price", "200000", "--arv", "320000", "--template", "heavy", "--ltv", "80",
        ])
        assert result.exit_code == 0, result.output
        data = yaml.safe_load(out.read_text())
        assert data["loanAmount"] == 160000
        assert data["rehabCategories"]["roofing"] == 7500

    def test_new_unknown_template(self, tmp_path: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["new", str(tmp_path / "x.yaml"), "-c", str(config_file), "-t", "luxury"])
        assert result.exit_code == 1
        assert "Unknown template" in result.output


class TestSavedDeals:
    """Tests for save/list/show/delete."""

    def test_round_trip(self, tmp_path: Path, deal_file: Path, config_file: Path) -> None:
        result = runner.invoke(app, [
            "save", str(deal_file), "-u", "ana", "--id", "d1", "-n", "Main St flip", "-c", str(config_file),
        ])
        assert result.exit_code == 0, result.output
        assert "Saved deal d1" in result.output

        result = runner.invoke(app, ["list", "-u", "ana", "-c", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Main St flip" in result.output

        exported = tmp_path / "exported.yaml"
        result = runner.invoke(app, ["show", "d1", "-u", "ana", "-c", str(config_file), "-e", str(exported)])
        assert result.exit_code == 0, result.output
        assert "CONSIDER" in result.output
        assert yaml.safe_load(exported.read_text()) == yaml.safe_load(deal_file.read_text())

        result = runner.invoke(app, ["delete", "d1", "-u", "ana", "-c", str(config_file)])
        assert result.exit_code == 0, result.output

        result = runner.invoke(app, ["list", "-u", "ana", "-c", str(config_file)])
        assert "No saved deals" in result.output

    def test_show_missing(self, config_file: Path) -> None:
        result = runner.invoke(app, ["show", "nope", "-u", "ana", "-c", str(config_file)])
        assert result.exit_code == 1

    def test_delete_missing(self, config_file: Path) -> None:
        result = runner.invoke(app, ["delete", "nope", "-u", "ana", "-c", str(config_file)])
        assert result.exit_code == 1

    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("load_deal", ["show", "d1", "-u", "ana"]),
            ("list_deals", ["list", "-u", "ana"]),
            ("delete_deal", ["delete", "d1", "-u", "ana"]),
        ],
    )
    def test_connection_closed_when_storage_fails(
        self, monkeypatch: pytest.MonkeyPatch, config_file: Path, method: str, args: list
    ) -> None:
        closed = []
        original_close = Storage.close

        def fail(self, *a, **kw):
            raise json.JSONDecodeError("corrupt row", "{", 0)

        def close(self) -> None:
            closed.append(True)
            original_close(self)

        monkeypatch.setattr(Storage, method, fail)
        monkeypatch.setattr(Storage, "close", close)
        result = runner.invoke(app, [*args, "-c", str(config_file)])
        assert isinstance(result.exception, json.JSONDecodeError)
        assert closed == [True]

    def test_connection_closed_when_save_fails(
        self, monkeypatch: pytest.MonkeyPatch, deal_file: Path, config_file: Path
    ) -> None:
        closed = []

        def fail(self, *a, **kw):
            raise RuntimeError("disk full")

        monkeypatch.setattr(Storage, "save_deal", fail)
        monkeypatch.setattr(Storage, "close", lambda self: closed.append(True))
        result = runner.invoke(app, ["save", str(deal_file), "-u", "ana", "-c", str(config_file)])
        assert isinstance(result.exception, RuntimeError)
        assert closed == [True]


class TestCollaborators:
    """Collaborator failures warn but never fail the command."""

    def test_submit_without_webhook(self, deal_file: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["submit", str(deal_file), "-c", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Estimated Profit" in result.output
        assert "CRM webhook URL not set" in result.output

    def test_narrate_without_key(self, deal_file: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["narrate", str(deal_file), "-c", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "CONSIDER" in result.output
        assert "LLM_API_KEY not set" in result.output

    def test_lookup_without_key(self, config_file: Path) -> None:
        result = runner.invoke(app, [
            "lookup", "-a", "123 Main St", "--city", "Austin", "--state", "TX", "-c", str(config_file),
        ])
        assert result.exit_code == 0, result.output
        assert "RENTCAST_API_KEY not set" in result.output
