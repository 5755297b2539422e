"""Tests for ranch_ecology.harvest: strategic quota and population totals."""

from datetime import date

import pytest

from ranch_ecology.harvest import (
    latest_survey,
    latest_surveys_by_species,
    population_summary,
    round_half_up,
    strategic_quota,
)
from ranch_ecology.types import PopulationSurvey, QuotaResult


def survey(estimated, males=None, females=None, species="Kudu",
           when=date(2024, 4, 1), id="PS"):
    return PopulationSurvey(id=id, date=when, species=species,
                            estimated_count=estimated,
                            male_count=males, female_count=females)


# ── round_half_up ─────────────────────────────────────────────────────

class TestRoundHalfUp:
    @pytest.mark.parametrize("value,expected", [
        (22.5, 23), (2.5, 3), (0.5, 1), (22.4, 22), (-0.5, 0), (-1.6, -2), (7.0, 7),
    ])
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected


# ── strategic_quota ───────────────────────────────────────────────────

class TestStrategicQuota:
    def test_worked_example(self):
        """N=100, λ=1.2, K=90, 40 M / 60 F, ratio 1:3 → 30 = 23 M + 7 F."""
        result = strategic_quota(survey(100, 40, 60), 90, 1.2, 1, 3)
        assert result == QuotaResult(30, 23, 7)

    def test_example_ranch_kudu(self):
        result = strategic_quota(survey(75, 20, 45), 80, 1.25, 1, 2)
        assert result == QuotaResult(14, 3, 11)

    def test_no_surplus(self):
        assert strategic_quota(survey(50, 20, 30), 60, 1.2, 1, 1) == QuotaResult(0, 0, 0)

    def test_growth_exactly_at_target(self):
        assert strategic_quota(survey(100, 50, 50), 120, 1.2, 1, 1).total == 0

    def test_no_survey(self):
        assert strategic_quota(None, 50, 1.2, 1, 1) == QuotaResult(0, 0, 0)

    def test_non_positive_growth(self):
        assert strategic_quota(survey(100, 50, 50), 10, 0.0, 1, 1) == QuotaResult(0, 0, 0)
        assert strategic_quota(survey(100, 50, 50), 10, -1.0, 1, 1) == QuotaResult(0, 0, 0)

    def test_negative_target(self):
        assert strategic_quota(survey(100, 50, 50), -5, 1.2, 1, 1) == QuotaResult(0, 0, 0)

    def test_missing_sex_counts(self):
        result = strategic_quota(survey(250), 280, 1.35, 1, 3)
        assert result.total > 0
        assert result.males is None and result.females is None
        assert not result.has_breakdown

    def test_zero_sex_count_treated_as_missing(self):
        result = strategic_quota(survey(100, 0, 60), 90, 1.2, 1, 3)
        assert result == QuotaResult(30, None, None)

    def test_zero_ratio_component(self):
        assert strategic_quota(survey(100, 40, 60), 90, 1.2, 0, 3) == QuotaResult(30, None, None)
        assert strategic_quota(survey(100, 40, 60), 90, 1.2, 1, 0) == QuotaResult(30, None, None)

    def test_female_quota_capped_at_female_count(self):
        result = strategic_quota(survey(100, 10, 20), 50, 1.5, 1, 1)
        assert result.total == 100
        assert result.females == 20
        assert result.males == 10

    def test_male_quota_capped_at_surplus(self):
        """A male-heavy herd with a female-heavy target takes the whole surplus as males."""
        result = strategic_quota(survey(100, 50, 50), 100, 1.1, 1, 10)
        assert result == QuotaResult(10, 10, 0)

    def test_breakdown_never_exceeds_counts(self):
        for n_m, n_f in [(5, 95), (95, 5), (30, 30)]:
            result = strategic_quota(survey(100, n_m, n_f), 40, 1.3, 1, 2)
            assert 0 <= result.males <= n_m
            assert 0 <= result.females <= n_f


# ── survey selection ──────────────────────────────────────────────────

class TestSurveys:
    @pytest.fixture
    def surveys(self):
        return [
            survey(60, 15, 35, when=date(2023, 4, 1), id="old"),
            survey(75, 20, 45, when=date(2024, 4, 1), id="new"),
            survey(250, species="Impala", id="imp"),
        ]

    def test_latest_survey(self, surveys):
        assert latest_survey(surveys, "Kudu").id == "new"
        assert latest_survey(surveys, "Eland") is None

    def test_latest_by_species(self, surveys):
        latest = latest_surveys_by_species(surveys)
        assert {k: v.id for k, v in latest.items()} == {"Kudu": "new", "Impala": "imp"}

    def test_population_summary(self, surveys):
        summary = population_summary(surveys)
        assert summary.estimated_total == 325
        assert summary.male_total == 20
        assert summary.female_total == 45
        assert summary.species_counted == 2

    def test_empty_summary(self):
        summary = population_summary([])
        assert summary.estimated_total == 0
        assert summary.species_counted == 0
