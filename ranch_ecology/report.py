"""Ranch-wide report assembled from one snapshot.

Runs every calculation module over a RanchSnapshot as of a given date:
zone stocking against capacity, per-species strategic quotas, the herd
population summary and the top harvest candidates.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from ranch_ecology.capacity import latest_assessment, trailing_rainfall, zone_stocking
from ranch_ecology.config import RanchConfig, default_config
from ranch_ecology.harvest import latest_survey, population_summary, strategic_quota
from ranch_ecology.selection import score_harvest_candidates
from ranch_ecology.snapshot import RanchSnapshot
from ranch_ecology.types import HarvestCandidate, PopulationSummary, QuotaResult, ZoneStocking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RanchReport:
    as_of: date
    trailing_rainfall_mm: float
    zones: List[ZoneStocking]
    quotas: Dict[str, QuotaResult]
    population: PopulationSummary
    harvest_candidates: List[HarvestCandidate]


def species_quotas(
    snapshot: RanchSnapshot,
    config: RanchConfig,
) -> Dict[str, QuotaResult]:
    """Strategic quota for every species with a configured target.

    The growth rate comes from the species parameters; a species without
    parameters gets growth rate 0 and therefore a zero quota.
    """
    quotas = {}
    for species, target in sorted(config.harvest.targets.items()):
        params = config.species.get(species)
        growth = params.growth_rate_lambda if params is not None else 0.0
        quotas[species] = strategic_quota(
            latest_survey(snapshot.population_surveys, species),
            target.target_population,
            growth,
            target.ratio_male,
            target.ratio_female,
        )
    return quotas


def build_report(
    snapshot: RanchSnapshot,
    config: Optional[RanchConfig] = None,
    as_of: Optional[date] = None,
) -> RanchReport:
    """Run all calculations over a snapshot.

    Args:
        snapshot: Ranch records.
        config: Calculation configuration (defaults if None).
        as_of: End of the trailing rainfall window (today if None).
    """
    config = config if config is not None else default_config()
    as_of = as_of if as_of is not None else date.today()

    rainfall = trailing_rainfall(
        snapshot.rainfall_logs, as_of, config.capacity.rainfall_window_days
    )
    zones = [
        zone_stocking(
            zone,
            snapshot.animals_in_zone(zone),
            rainfall,
            latest_assessment(snapshot.veld_assessments, zone.id),
            config.capacity,
        )
        for zone in snapshot.habitat_zones
    ]

    candidates = score_harvest_candidates(
        snapshot.animals,
        snapshot.reproductive_events,
        snapshot.animal_measurements,
        config,
    )

    report = RanchReport(
        as_of=as_of,
        trailing_rainfall_mm=rainfall,
        zones=zones,
        quotas=species_quotas(snapshot, config),
        population=population_summary(snapshot.population_surveys),
        harvest_candidates=candidates[: config.harvest.max_candidates],
    )
    logger.info(
        "Report as of %s: %d zones, %d quotas, %d harvest candidates",
        as_of, len(zones), len(report.quotas), len(report.harvest_candidates),
    )
    return report


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def report_to_dict(report: RanchReport) -> Dict[str, Any]:
    """JSON-serialisable view of a report (dates as ISO strings, enums as labels)."""
    return _plain(dataclasses.asdict(report))


def format_report(report: RanchReport) -> str:
    """Plain-text summary for the terminal."""
    lines = [
        f"Ranch report as of {report.as_of.isoformat()}",
        f"Trailing rainfall: {report.trailing_rainfall_mm:.0f} mm",
        "",
        "Stocking (LSU current / capacity)",
    ]
    for z in report.zones:
        lines.append(
            f"  {z.zone_name:<20} grazer {z.stocking.grazer_lsu:6.1f} / {z.capacity.grazer_lsu:7.1f}"
            f"   browser {z.stocking.browser_lsu:6.1f} / {z.capacity.browser_lsu:7.1f}"
            f"   {z.status}"
            + (f" (veld {z.condition.value})" if z.condition is not None else "")
        )

    lines += ["", "Strategic quotas"]
    if not report.quotas:
        lines.append("  (no quota targets configured)")
    for species, q in report.quotas.items():
        split = (
            f"{q.males} M / {q.females} F" if q.has_breakdown else "sex split N/A"
        )
        lines.append(f"  {species:<20} {q.total:4d}  ({split})")

    p = report.population
    lines += [
        "",
        f"Population (latest surveys, {p.species_counted} species): "
        f"{p.estimated_total} estimated, {p.male_total} M, {p.female_total} F",
        "",
        "Harvest candidates",
    ]
    if not report.harvest_candidates:
        lines.append("  (none)")
    for rank, c in enumerate(report.harvest_candidates, start=1):
        reasons = "; ".join(r.text for r in c.reasons)
        lines.append(
            f"  {rank:2d}. {c.animal.tag_id:<8} {c.animal.species:<16} score {c.score:3d}  {reasons}"
        )
    return "\n".join(lines)
