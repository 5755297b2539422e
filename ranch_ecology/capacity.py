"""Veld-based carrying capacity and current stocking.

Capacity model (per habitat zone):
  production   = rainfall_mm × forage_production_factor × area_ha   (kg DM / yr)
  usable       = production × utilization_fraction                   (25%)
  grazer_lsu   = usable × grass_to_browse_ratio       / annual_intake × m
  browser_lsu  = usable × (1 − grass_to_browse_ratio) / annual_intake × m

where annual_intake = 10 kg DM/day × 365 per LSU, and m is a step function
of the zone's latest veld assessment score (species composition + basal
cover, out of 20).

Current stocking sums the LSU equivalents of the active animals in a zone;
mixed feeders load both guilds 50/50.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

import numpy as np

from ranch_ecology.config import CapacitySection, default_config
from ranch_ecology.types import (
    Animal,
    CarryingCapacity,
    ForageType,
    HabitatZone,
    RainfallLog,
    StockingLoad,
    VeldAssessment,
    VeldCondition,
    ZoneStocking,
)

logger = logging.getLogger(__name__)

STATUS_OVERSTOCKED = "Overstocked"
STATUS_NEAR_CAPACITY = "Near capacity"
STATUS_WITHIN = "Within capacity"

# Share of each animal's LSU carried by the (grazer, browser) guilds
GUILD_SHARES = {
    ForageType.GRAZER: (1.0, 0.0),
    ForageType.BROWSER: (0.0, 1.0),
    ForageType.MIXED: (0.5, 0.5),
}


def _capacity_section(section: Optional[CapacitySection]) -> CapacitySection:
    return section if section is not None else default_config().capacity


# ═══════════════════════════════════════════════════════════════════════
# INPUT SELECTION
# ═══════════════════════════════════════════════════════════════════════


def trailing_rainfall(
    logs: Iterable[RainfallLog],
    as_of: date,
    window_days: int = 365,
) -> float:
    """Total rainfall (mm) logged in the window ending on `as_of` (inclusive)."""
    start = as_of - timedelta(days=window_days)
    return float(sum(log.amount_mm for log in logs if start < log.date <= as_of))


def latest_assessment(
    assessments: Iterable[VeldAssessment],
    zone_id: str,
) -> Optional[VeldAssessment]:
    """Most recent veld assessment for a zone, or None if it was never assessed."""
    for_zone = [a for a in assessments if a.habitat_zone_id == zone_id]
    if not for_zone:
        return None
    return max(for_zone, key=lambda a: a.date)


def veld_condition_multiplier(
    assessment: Optional[VeldAssessment],
    section: Optional[CapacitySection] = None,
) -> float:
    """Capacity multiplier for a veld assessment.

    Default steps: total ≥ 18 → 1.2, ≥ 14 → 1.0, ≥ 8 → 0.75, else 0.5.
    No assessment → 1.0.
    """
    section = _capacity_section(section)
    if assessment is None:
        return float(section.default_multiplier)

    score = assessment.total_score
    for threshold, multiplier in sorted(section.multiplier_steps, key=lambda s: -s[0]):
        if score >= threshold:
            return float(multiplier)
    return float(section.floor_multiplier)


def veld_condition(
    assessment: Optional[VeldAssessment],
    section: Optional[CapacitySection] = None,
) -> Optional[VeldCondition]:
    """Condition band of an assessment's score, on the multiplier thresholds.

    Default bands: ≥ 18 Excellent, ≥ 14 Good, ≥ 8 Fair, else Poor. The
    recorded `assessment.condition` label is not consulted. None without an
    assessment.
    """
    section = _capacity_section(section)
    if assessment is None:
        return None

    score = assessment.total_score
    thresholds = sorted((step[0] for step in section.multiplier_steps), reverse=True)
    for threshold, label in zip(thresholds, section.condition_labels):
        if score >= threshold:
            return VeldCondition(label)
    return VeldCondition(section.floor_condition)


# ═══════════════════════════════════════════════════════════════════════
# CAPACITY & STOCKING
# ═══════════════════════════════════════════════════════════════════════


def carrying_capacity(
    zone: HabitatZone,
    trailing_rainfall_mm: float,
    assessment: Optional[VeldAssessment] = None,
    section: Optional[CapacitySection] = None,
) -> CarryingCapacity:
    """Sustainable grazer and browser LSU for one zone.

    Zero area, production factor or rainfall gives zero capacity. Negative
    inputs are treated as zero and the grass/browse ratio is clipped to
    [0, 1]; neither raises.
    """
    section = _capacity_section(section)

    rainfall = max(float(trailing_rainfall_mm), 0.0)
    area = max(float(zone.area_hectares), 0.0)
    factor = max(float(zone.forage_production_factor), 0.0)

    ratio = float(np.clip(zone.grass_to_browse_ratio, 0.0, 1.0))
    if ratio != zone.grass_to_browse_ratio:
        logger.warning(
            "Zone %s grass_to_browse_ratio %.3f outside [0, 1]; clipped to %.3f",
            zone.id, zone.grass_to_browse_ratio, ratio,
        )

    production = rainfall * factor * area
    usable = production * section.utilization_fraction
    multiplier = veld_condition_multiplier(assessment, section)

    intake = section.annual_intake_kg
    grazer = usable * ratio / intake * multiplier
    browser = usable * (1.0 - ratio) / intake * multiplier

    return CarryingCapacity(
        grazer_lsu=grazer,
        browser_lsu=browser,
        usable_forage_kg=usable,
        veld_multiplier=multiplier,
    )


def current_stocking(animals_in_zone: Sequence[Animal]) -> StockingLoad:
    """Grazer and browser LSU currently standing in a zone.

    Deceased and harvested animals are ignored.
    """
    active = [a for a in animals_in_zone if a.is_active]
    if not active:
        return StockingLoad(0.0, 0.0, 0)

    lsu = np.array([a.lsu_equivalent for a in active], dtype=np.float64)
    shares = np.array([GUILD_SHARES[ForageType(a.forage_type)] for a in active])
    grazer, browser = lsu @ shares

    return StockingLoad(
        grazer_lsu=float(grazer),
        browser_lsu=float(browser),
        head_count=len(active),
    )


def _utilization(current: float, capacity: float) -> float:
    return current / capacity if capacity > 0 else 0.0


def stocking_status(utilization: float, section: Optional[CapacitySection] = None) -> str:
    """Band a utilisation fraction (current / capacity)."""
    section = _capacity_section(section)
    if utilization > section.overstocked_threshold:
        return STATUS_OVERSTOCKED
    if utilization > section.near_capacity_threshold:
        return STATUS_NEAR_CAPACITY
    return STATUS_WITHIN


def zone_stocking(
    zone: HabitatZone,
    animals_in_zone: Sequence[Animal],
    trailing_rainfall_mm: float,
    assessment: Optional[VeldAssessment] = None,
    section: Optional[CapacitySection] = None,
) -> ZoneStocking:
    """Capacity, current stocking and utilisation for one zone.

    The status reflects the more heavily used guild. A guild with zero
    capacity reports 0 utilisation, but any load standing on it makes the
    zone overstocked.
    """
    section = _capacity_section(section)
    capacity = carrying_capacity(zone, trailing_rainfall_mm, assessment, section)
    stocking = current_stocking(animals_in_zone)

    grazer_util = _utilization(stocking.grazer_lsu, capacity.grazer_lsu)
    browser_util = _utilization(stocking.browser_lsu, capacity.browser_lsu)
    unsupported = (
        (stocking.grazer_lsu > 0 and capacity.grazer_lsu <= 0)
        or (stocking.browser_lsu > 0 and capacity.browser_lsu <= 0)
    )
    if unsupported:
        status = STATUS_OVERSTOCKED
    else:
        status = stocking_status(max(grazer_util, browser_util), section)
    if status == STATUS_OVERSTOCKED:
        logger.info(
            "Zone %s overstocked: grazer %.0f%%, browser %.0f%%",
            zone.name, grazer_util * 100, browser_util * 100,
        )

    return ZoneStocking(
        zone_id=zone.id,
        zone_name=zone.name,
        capacity=capacity,
        stocking=stocking,
        grazer_utilization=grazer_util,
        browser_utilization=browser_util,
        status=status,
        condition=veld_condition(assessment, section) or zone.veld_condition,
    )
