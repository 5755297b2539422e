"""Integration tests: full report over the example ranch, and the CLI."""

import importlib.util
import json
from datetime import date
from pathlib import Path

import pytest

from ranch_ecology.capacity import STATUS_OVERSTOCKED, STATUS_WITHIN
from ranch_ecology.config import load_config
from ranch_ecology.report import build_report, format_report, report_to_dict, species_quotas
from ranch_ecology.snapshot import load_snapshot
from ranch_ecology.types import QuotaResult, VeldCondition

ROOT = Path(__file__).parent.parent
EXAMPLE = ROOT / "data" / "example_ranch.yaml"
DEFAULT_CONFIG = ROOT / "configs" / "default.yaml"
AS_OF = date(2024, 6, 30)


@pytest.fixture(scope="module")
def snapshot():
    return load_snapshot(EXAMPLE)


@pytest.fixture(scope="module")
def config():
    return load_config(DEFAULT_CONFIG)


@pytest.fixture(scope="module")
def report(snapshot, config):
    return build_report(snapshot, config, as_of=AS_OF)


def _load_cli():
    module_spec = importlib.util.spec_from_file_location("ranch_report", ROOT / "scripts" / "ranch_report.py")
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


# ── build_report ──────────────────────────────────────────────────────

class TestBuildReport:
    def test_trailing_rainfall(self, report):
        assert report.trailing_rainfall_mm == pytest.approx(45.0)

    def test_zones(self, report):
        assert [z.zone_id for z in report.zones] == ["H01", "H02", "H03", "H04"]

    def test_north_pasture_capacity(self, report):
        north = report.zones[0]
        usable = 45.0 * 3.0 * 850 * 0.25
        assert north.capacity.veld_multiplier == 1.2     # assessment total 18
        assert north.capacity.grazer_lsu == pytest.approx(usable * 0.9 / 3650 * 1.2)
        assert north.stocking.head_count == 4
        assert north.stocking.grazer_lsu == pytest.approx(0.4 + 0.3)
        assert north.stocking.browser_lsu == pytest.approx(0.3)

    def test_unassessed_zone_uses_default_multiplier(self, report):
        west = report.zones[1]
        assert west.capacity.veld_multiplier == 1.0

    def test_oak_forest_multiplier(self, report):
        assert report.zones[3].capacity.veld_multiplier == 0.75   # total 9

    def test_zone_condition_from_latest_assessment(self, report):
        assert report.zones[0].condition is VeldCondition.EXCELLENT   # 9 + 9
        assert report.zones[1].condition is VeldCondition.GOOD        # zone label
        assert report.zones[3].condition is VeldCondition.FAIR        # 4 + 5

    def test_kudu_quota(self, report):
        assert report.quotas["Kudu"] == QuotaResult(14, 3, 11)

    def test_impala_quota_without_breakdown(self, report):
        impala = report.quotas["Impala"]
        assert impala.total > 0
        assert not impala.has_breakdown

    def test_population(self, report):
        assert report.population.estimated_total == 325
        assert report.population.male_total == 20
        assert report.population.female_total == 45

    def test_harvest_candidates(self, report):
        assert [(c.animal.id, c.score) for c in report.harvest_candidates] == [
            ("A001", 30), ("A006", 10),
        ]

    def test_candidates_truncated(self, snapshot, config):
        config.harvest.max_candidates = 1
        try:
            report = build_report(snapshot, config, as_of=AS_OF)
        finally:
            config.harvest.max_candidates = 10
        assert len(report.harvest_candidates) == 1

    def test_no_rainfall_in_window(self, snapshot, config):
        report = build_report(snapshot, config, as_of=date(2020, 1, 1))
        assert report.trailing_rainfall_mm == 0.0
        assert all(z.capacity.total_lsu == 0.0 for z in report.zones)
        assert all(z.status == STATUS_OVERSTOCKED for z in report.zones if z.stocking.head_count)

    def test_species_quotas_follow_targets(self, snapshot, config):
        assert set(species_quotas(snapshot, config)) == {"Kudu", "Impala"}


# ── output ────────────────────────────────────────────────────────────

class TestReportOutput:
    def test_dict_is_json_serialisable(self, report):
        d = report_to_dict(report)
        text = json.dumps(d)
        assert d["as_of"] == "2024-06-30"
        assert d["quotas"]["Kudu"] == {"total": 14, "males": 3, "females": 11}
        assert d["harvest_candidates"][0]["animal"]["sex"] == "Female"
        assert "IMP-01" in text

    def test_format_report(self, report):
        text = format_report(report)
        assert "Ranch report as of 2024-06-30" in text
        assert "North Pasture" in text
        assert "Past Prime Age (9 yrs)" in text
        assert "sex split N/A" in text


# ── CLI ───────────────────────────────────────────────────────────────

class TestCli:
    def test_prints_report(self, capsys):
        cli = _load_cli()
        assert cli.main([str(EXAMPLE), "--as-of", "2024-06-30"]) == 0
        out = capsys.readouterr().out
        assert "Strategic quotas" in out
        assert STATUS_WITHIN in out

    def test_writes_json(self, tmp_path):
        cli = _load_cli()
        out = tmp_path / "report.json"
        assert cli.main([str(EXAMPLE), "--as-of", "2024-06-30", "--json", str(out)]) == 0
        data = json.loads(out.read_text())
        assert data["trailing_rainfall_mm"] == 45.0

    def test_missing_snapshot(self, tmp_path, capsys):
        cli = _load_cli()
        assert cli.main([str(tmp_path / "absent.yaml")]) == 1
        assert "error:" in capsys.readouterr().err

    def test_missing_config(self, tmp_path, capsys):
        cli = _load_cli()
        assert cli.main([str(EXAMPLE), "--config", str(tmp_path / "absent.yaml")]) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_missing_override(self, tmp_path, capsys):
        cli = _load_cli()
        assert cli.main([str(EXAMPLE), "--override", str(tmp_path / "absent.yaml")]) == 1
        assert "Override config not found" in capsys.readouterr().err

    def test_override_applies_without_base_file(self, tmp_path, monkeypatch):
        cli = _load_cli()
        monkeypatch.setattr(cli, "DEFAULT_CONFIG", tmp_path / "no-default.yaml")
        ranch = tmp_path / "ranch.yaml"
        ranch.write_text("harvest:\n  targets:\n    Kudu: {target_population: 80, ratio_male: 1, ratio_female: 2}\n")
        out = tmp_path / "report.json"
        assert cli.main([str(EXAMPLE), "--as-of", "2024-06-30",
                         "--override", str(ranch), "--json", str(out)]) == 0
        data = json.loads(out.read_text())
        assert data["quotas"] == {"Kudu": {"total": 14, "males": 3, "females": 11}}
