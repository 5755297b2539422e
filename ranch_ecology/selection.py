"""Breeding-pair recommendations and harvest-candidate ranking.

Both rankings read the same snapshot of animals, births and measurements:

- recommend_sires: for a chosen dam, every male of her species ranked by
  the inbreeding coefficient of their offspring (lowest first), ties broken
  by the sire's latest horn-length average (highest first).

- score_harvest_candidates: a cull-priority score per animal, summing
    1. age past prime            min(30 × (age − prime_end)/(max_age − prime_end), 30)
    2. horn growth below average 40 × (benchmark − horn) / benchmark        (males)
    3. slow calving              25 × (mean_interval / ideal_interval − 1) (females)
    4. inbred parentage          100 × F(sire, dam), when F > 0.05
  Weights and thresholds come from HarvestSection.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from ranch_ecology.config import RanchConfig, default_config
from ranch_ecology.harvest import round_half_up
from ranch_ecology.pedigree import assess_pairing, inbreeding_coefficient, inbreeding_risk
from ranch_ecology.trophy import benchmark_horn_length, latest_horn_average
from ranch_ecology.types import (
    Animal,
    AnimalMeasurement,
    CandidateReason,
    HarvestCandidate,
    ReproductiveEvent,
    Sex,
    SireRecommendation,
)

logger = logging.getLogger(__name__)

SEVERITY_HIGH = "High"
SEVERITY_MEDIUM = "Medium"


# ═══════════════════════════════════════════════════════════════════════
# BREEDING RECOMMENDATIONS
# ═══════════════════════════════════════════════════════════════════════


def recommend_sires(
    dam_id: str,
    animals: Sequence[Animal],
    reproductive_events: Iterable[ReproductiveEvent] = (),
    measurements: Iterable[AnimalMeasurement] = (),
    config: Optional[RanchConfig] = None,
) -> List[SireRecommendation]:
    """Rank candidate sires for a dam.

    Candidates are active males of the dam's species. Invalid pairings
    (a sire that is the dam's ancestor or descendant) rank last via the
    1.0 sentinel. Sires without measurements rank after measured sires
    with the same coefficient.

    Returns:
        Recommendations, best first. Empty if the dam is unknown or male.
    """
    config = config if config is not None else default_config()
    animals_by_id = {a.id: a for a in animals}
    dam = animals_by_id.get(dam_id)
    if dam is None or dam.sex != Sex.FEMALE:
        return []

    measurements = list(measurements)
    offspring_counts: Dict[str, int] = {}
    for event in reproductive_events:
        if event.sire_tag_id:
            offspring_counts[event.sire_tag_id] = offspring_counts.get(event.sire_tag_id, 0) + 1

    recommendations = []
    for sire in animals:
        if sire.sex != Sex.MALE or sire.species != dam.species or sire.id == dam.id:
            continue
        if not sire.is_active:
            continue
        pairing = assess_pairing(sire.id, dam.id, animals_by_id, config.pedigree)
        coefficient = (
            pairing.coefficient if pairing.is_valid
            else config.pedigree.invalid_pairing_coefficient
        )
        recommendations.append(SireRecommendation(
            sire=sire,
            coefficient=coefficient,
            is_valid_pairing=pairing.is_valid,
            risk=inbreeding_risk(coefficient, config.pedigree),
            latest_measurement=latest_horn_average(sire.id, measurements, config.trophy),
            offspring_count=offspring_counts.get(sire.tag_id, 0),
        ))

    def rank_key(rec: SireRecommendation):
        measured = rec.latest_measurement is not None
        return (rec.coefficient, not measured, -(rec.latest_measurement or 0.0))

    return sorted(recommendations, key=rank_key)


# ═══════════════════════════════════════════════════════════════════════
# HARVEST CANDIDATES
# ═══════════════════════════════════════════════════════════════════════


def mean_calving_interval(
    dam_tag_id: str,
    reproductive_events: Iterable[ReproductiveEvent],
) -> Optional[float]:
    """Mean days between a dam's consecutive births; None with fewer than two."""
    births = sorted(e.birth_date for e in reproductive_events if e.dam_tag_id == dam_tag_id)
    if len(births) < 2:
        return None
    ordinals = np.array([d.toordinal() for d in births], dtype=np.float64)
    return float(np.mean(np.diff(ordinals)))


def _score_animal(
    animal: Animal,
    animals_by_id: Dict[str, Animal],
    reproductive_events: List[ReproductiveEvent],
    measurements: List[AnimalMeasurement],
    config: RanchConfig,
) -> HarvestCandidate:
    weights = config.harvest
    params = config.species.get(animal.species)
    score = 0.0
    reasons: List[CandidateReason] = []

    # 1. Age
    if params is not None:
        prime_end = params.prime_reproductive_age[1]
        if animal.age > prime_end:
            age_factor = (animal.age - prime_end) / (params.max_age - prime_end)
            score += min(age_factor * weights.age_weight, weights.age_weight)
            reasons.append(CandidateReason(
                f"Past Prime Age ({animal.age:g} yrs)", SEVERITY_HIGH
            ))

    # 2. Horn growth
    if animal.sex == Sex.MALE and animal.species in config.trophy.horn_benchmarks:
        horn = latest_horn_average(animal.id, measurements, config.trophy)
        benchmark = benchmark_horn_length(animal.species, animal.age, config.trophy)
        if horn is not None and benchmark > 0 and horn < benchmark:
            deficit = (benchmark - horn) / benchmark
            score += deficit * weights.growth_weight
            reasons.append(CandidateReason(
                f"Below Avg. Growth (-{deficit * 100:.0f}%)", SEVERITY_MEDIUM
            ))

    # 3. Reproduction
    if animal.sex == Sex.FEMALE and params is not None:
        interval = mean_calving_interval(animal.tag_id, reproductive_events)
        if interval is not None and interval > params.ideal_calving_interval:
            delay = interval / params.ideal_calving_interval - 1.0
            score += delay * weights.reproduction_weight
            reasons.append(CandidateReason(
                f"Low Repro. Rate ({round_half_up(interval)} day interval)", SEVERITY_MEDIUM
            ))

    # 4. Parentage
    if animal.sire_id and animal.sire_id == animal.dam_id:
        logger.warning(
            "Animal %s has %s recorded as both sire and dam; parentage not scored",
            animal.id, animal.sire_id,
        )
    elif animal.sire_id in animals_by_id and animal.dam_id in animals_by_id:
        coefficient = inbreeding_coefficient(
            animal.sire_id, animal.dam_id, animals_by_id, config.pedigree
        )
        if coefficient > weights.inbreeding_flag_threshold:
            score += coefficient * weights.inbreeding_weight
            reasons.append(CandidateReason(
                f"High Inbreeding ({coefficient * 100:.1f}%)", SEVERITY_HIGH
            ))

    return HarvestCandidate(animal, round_half_up(score), tuple(reasons))


def score_harvest_candidates(
    animals: Sequence[Animal],
    reproductive_events: Iterable[ReproductiveEvent] = (),
    measurements: Iterable[AnimalMeasurement] = (),
    config: Optional[RanchConfig] = None,
    species: Optional[str] = None,
) -> List[HarvestCandidate]:
    """Rank active animals by cull priority, highest score first.

    Animals scoring 0 are omitted. `species` restricts the ranking to one
    species (pedigree lookups still see every animal).
    """
    config = config if config is not None else default_config()
    animals_by_id = {a.id: a for a in animals}
    events = list(reproductive_events)
    measurements = list(measurements)

    candidates = []
    for animal in animals:
        if not animal.is_active:
            continue
        if species is not None and animal.species != species:
            continue
        candidate = _score_animal(animal, animals_by_id, events, measurements, config)
        if candidate.score > 0:
            candidates.append(candidate)

    logger.debug("%d harvest candidates from %d animals", len(candidates), len(animals))
    return sorted(candidates, key=lambda c: c.score, reverse=True)
