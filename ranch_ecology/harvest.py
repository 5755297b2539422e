"""Strategic sustainable-harvest quota with sex-ratio balancing.

Given the latest survey estimate N_t, the annual growth multiplier λ and a
target population K, the harvestable surplus is

    H = round(N_t × λ − K)

When sex counts are known, the surplus is split so the post-harvest herd
moves toward the target male:female ratio. With R = female/male,

    H_m = round(clip((R·N_m − N_f + H) / (1 + R), 0, N_m)),   H_f = H − H_m

then re-clamped so neither sex is over-harvested. Every branch returns a
QuotaResult; missing or unusable inputs degrade to a zero quota or a total
without breakdown.

Rounding is half-up (22.5 → 23), not Python's round-half-even.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, Optional

import numpy as np

from ranch_ecology.types import PopulationSummary, PopulationSurvey, QuotaResult

logger = logging.getLogger(__name__)


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves toward +∞."""
    return int(math.floor(x + 0.5))


# ═══════════════════════════════════════════════════════════════════════
# SURVEY SELECTION
# ═══════════════════════════════════════════════════════════════════════


def latest_survey(
    surveys: Iterable[PopulationSurvey],
    species: str,
) -> Optional[PopulationSurvey]:
    """Most recent survey for a species, or None."""
    for_species = [s for s in surveys if s.species == species]
    if not for_species:
        return None
    return max(for_species, key=lambda s: s.date)


def latest_surveys_by_species(
    surveys: Iterable[PopulationSurvey],
) -> Dict[str, PopulationSurvey]:
    """Latest survey of every surveyed species."""
    latest: Dict[str, PopulationSurvey] = {}
    for survey in surveys:
        current = latest.get(survey.species)
        if current is None or survey.date > current.date:
            latest[survey.species] = survey
    return latest


def population_summary(surveys: Iterable[PopulationSurvey]) -> PopulationSummary:
    """Herd totals over the latest survey of each species.

    Species surveyed without a sex breakdown contribute to the estimated
    total only.
    """
    latest = latest_surveys_by_species(surveys)
    return PopulationSummary(
        estimated_total=sum(s.estimated_count for s in latest.values()),
        male_total=sum(s.male_count or 0 for s in latest.values()),
        female_total=sum(s.female_count or 0 for s in latest.values()),
        species_counted=len(latest),
    )


# ═══════════════════════════════════════════════════════════════════════
# QUOTA
# ═══════════════════════════════════════════════════════════════════════


def strategic_quota(
    survey: Optional[PopulationSurvey],
    target_population: float,
    growth_rate: float,
    target_ratio_male: float,
    target_ratio_female: float,
) -> QuotaResult:
    """Sustainable removals for one species this cycle.

    Args:
        survey: Latest survey for the species (None if never surveyed).
        target_population: Post-harvest ceiling K.
        growth_rate: Annual growth multiplier λ (1.2 = 20% growth).
        target_ratio_male: Male part of the desired male:female ratio.
        target_ratio_female: Female part of the desired ratio.

    Returns:
        QuotaResult. total is 0 when there is no surplus or the inputs
        are unusable; males/females are None when no breakdown applies.
    """
    if survey is None or growth_rate <= 0 or target_population < 0:
        return QuotaResult(0, 0, 0)

    surplus = round_half_up(survey.estimated_count * growth_rate - target_population)
    if surplus <= 0:
        return QuotaResult(0, 0, 0)

    n_m = survey.male_count or 0
    n_f = survey.female_count or 0
    if n_m == 0 or n_f == 0 or target_ratio_male <= 0 or target_ratio_female <= 0:
        logger.debug(
            "%s: quota %d without sex breakdown (males=%s, females=%s, ratio=%s:%s)",
            survey.species, surplus, survey.male_count, survey.female_count,
            target_ratio_male, target_ratio_female,
        )
        return QuotaResult(surplus, None, None)

    r = target_ratio_female / target_ratio_male
    h_m = (r * n_m - n_f + surplus) / (1.0 + r)
    h_m = round_half_up(float(np.clip(h_m, 0, n_m)))
    h_f = surplus - h_m

    if h_f < 0:
        h_f = 0
        h_m = surplus
    if h_f > n_f:
        h_f = n_f
        h_m = surplus - n_f

    h_m = int(np.clip(h_m, 0, n_m))
    return QuotaResult(surplus, h_m, h_f)
