"""Pedigree relationship metrics for breeding and culling decisions.

Implements Wright's path method on the recorded sire/dam graph:
- Ancestor generation distances (breadth-first, depth-capped)
- Coefficient for a sire/dam pairing: F = Σ 0.5^(n1 + n2 + 1)
  over every ancestor common to both parents
- Risk banding of a coefficient

Pedigree records are user-entered and may contain cycles or an animal
listed as its own parent. The walk tracks visited ids and caps depth, so a
bad edge only truncates the walk; the starting animal is never reported as
its own ancestor.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Mapping, Optional

from ranch_ecology.config import PedigreeSection, default_config
from ranch_ecology.types import Animal, PairingAssessment

logger = logging.getLogger(__name__)

INVALID_PAIRING_COEFFICIENT = 1.0

RISK_HIGH = "High"
RISK_MODERATE = "Moderate"
RISK_LOW = "Low"


def _pedigree_section(section: Optional[PedigreeSection]) -> PedigreeSection:
    return section if section is not None else default_config().pedigree


# ═══════════════════════════════════════════════════════════════════════
# ANCESTOR WALK
# ═══════════════════════════════════════════════════════════════════════


def ancestor_generations(
    animal_id: str,
    animals_by_id: Mapping[str, Animal],
    max_generations: int = 10,
) -> Dict[str, int]:
    """Map every recorded ancestor of an animal to its generation distance.

    Parents are generation 1, grandparents 2, and so on. Breadth-first
    order means the first time an id is reached is along a shortest path,
    so each ancestor carries its minimum distance.

    Args:
        animal_id: Starting animal.
        animals_by_id: Lookup of every known animal.
        max_generations: Ancestors further back than this are ignored.

    Returns:
        {ancestor_id: generations}. Empty for founders and unknown ids.
    """
    ancestors: Dict[str, int] = {}
    visited = {animal_id}
    queue = deque([(animal_id, 0)])

    while queue:
        current_id, generation = queue.popleft()
        if generation >= max_generations:
            continue

        animal = animals_by_id.get(current_id)
        if animal is None:
            continue

        for parent_id in (animal.sire_id, animal.dam_id):
            if not parent_id:
                continue
            if parent_id in visited:
                if parent_id == animal_id:
                    logger.debug(
                        "Pedigree cycle: %s reached from itself via %s; edge ignored",
                        animal_id, current_id,
                    )
                continue
            visited.add(parent_id)
            ancestors[parent_id] = generation + 1
            queue.append((parent_id, generation + 1))

    return ancestors


# ═══════════════════════════════════════════════════════════════════════
# PAIRING COEFFICIENT
# ═══════════════════════════════════════════════════════════════════════


def assess_pairing(
    sire_id: str,
    dam_id: str,
    animals_by_id: Mapping[str, Animal],
    section: Optional[PedigreeSection] = None,
) -> PairingAssessment:
    """Coefficient of inbreeding for the (hypothetical) offspring of a pairing.

    F = Σ_A 0.5^(n1 + n2 + 1), where n1 and n2 are the generation distances
    from sire and dam to common ancestor A. Full siblings give 0.25,
    half siblings 0.125, parents unrelated within the walk depth give 0.

    A pairing where one parent is a lineal ancestor of the other, the same
    animal is named twice, or either animal is unknown is returned with
    is_valid=False instead of a coefficient.
    """
    section = _pedigree_section(section)

    def invalid(reason: str) -> PairingAssessment:
        logger.debug("Invalid pairing %s x %s: %s", sire_id, dam_id, reason)
        return PairingAssessment(sire_id, dam_id, 0.0, is_valid=False, reason=reason)

    if sire_id == dam_id:
        return invalid("same animal")
    if sire_id not in animals_by_id or dam_id not in animals_by_id:
        return invalid("unknown animal")

    sire_anc = ancestor_generations(sire_id, animals_by_id, section.max_generations)
    dam_anc = ancestor_generations(dam_id, animals_by_id, section.max_generations)

    if dam_id in sire_anc or sire_id in dam_anc:
        return invalid("one parent is an ancestor of the other")

    common = sire_anc.keys() & dam_anc.keys()
    coefficient = sum(0.5 ** (sire_anc[a] + dam_anc[a] + 1) for a in common)
    return PairingAssessment(
        sire_id, dam_id, float(coefficient), common_ancestors=len(common)
    )


def inbreeding_coefficient(
    sire_id: str,
    dam_id: str,
    animals_by_id: Mapping[str, Animal],
    section: Optional[PedigreeSection] = None,
) -> float:
    """Numeric form of `assess_pairing`.

    Invalid pairings return the configured sentinel (1.0 by default), which
    sits outside the 0–0.5 range realistic pedigrees produce.
    """
    section = _pedigree_section(section)
    result = assess_pairing(sire_id, dam_id, animals_by_id, section)
    if not result.is_valid:
        return float(section.invalid_pairing_coefficient)
    return result.coefficient


def inbreeding_risk(
    coefficient: float,
    section: Optional[PedigreeSection] = None,
) -> str:
    """Band a coefficient: above half-sib level is High, above 1/16 Moderate."""
    section = _pedigree_section(section)
    if coefficient > section.high_risk_threshold:
        return RISK_HIGH
    if coefficient > section.moderate_risk_threshold:
        return RISK_MODERATE
    return RISK_LOW
