"""Core data types for ranch-ecology.

This module is the single source of truth for:
  - Sex, ForageType, AnimalStatus, VeldCondition, SurveyConfidence enumerations
  - Record types supplied by the calling application (Animal, HabitatZone, ...)
  - Result types returned by the calculation modules

All records are frozen dataclasses: the calculation modules only ever read
them. Enumeration values match the labels used by the ranch dashboard, so
records round-trip through YAML/JSON without translation tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple


# ═══════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════

class Sex(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class ForageType(str, Enum):
    """Feeding guild. Mixed feeders load grazer and browser forage 50/50."""
    GRAZER = "Grazer"
    BROWSER = "Browser"
    MIXED = "Mixed-Feeder"


class AnimalStatus(str, Enum):
    """Logical lifecycle state. Only ACTIVE animals stand on the veld."""
    ACTIVE = "Active"
    DECEASED = "Deceased"
    HARVESTED = "Harvested"


class VeldCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class SurveyConfidence(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# ═══════════════════════════════════════════════════════════════════════
# RECORDS (read-only inputs)
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Animal:
    """A tagged animal. sire_id/dam_id reference other Animal ids."""
    id: str
    tag_id: str
    species: str
    sex: Sex
    age: float                      # years
    location: str = ""              # HabitatZone.name
    forage_type: ForageType = ForageType.GRAZER
    lsu_equivalent: float = 0.0     # large stock units per head
    sire_id: Optional[str] = None
    dam_id: Optional[str] = None
    health: str = "Good"
    condition_score: int = 3        # 1-5
    status: AnimalStatus = AnimalStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == AnimalStatus.ACTIVE


@dataclass(frozen=True)
class ReproductiveEvent:
    """A logged birth. Append-only; references animals by tag, not id."""
    id: str
    offspring_tag_id: str
    dam_tag_id: str
    birth_date: date
    sex: Sex
    sire_tag_id: Optional[str] = None


@dataclass(frozen=True)
class PopulationSurvey:
    """Point-in-time count estimate for one species."""
    id: str
    date: date
    species: str
    estimated_count: int
    male_count: Optional[int] = None
    female_count: Optional[int] = None
    juvenile_count: Optional[int] = None
    habitat_zone_id: Optional[str] = None
    method: str = "Ground Count"
    confidence: SurveyConfidence = SurveyConfidence.MEDIUM


@dataclass(frozen=True)
class HabitatZone:
    id: str
    name: str
    area_hectares: float
    forage_production_factor: float   # kg dry matter / ha / mm rain
    grass_to_browse_ratio: float      # 0..1, share of forage available to grazers
    veld_condition: VeldCondition = VeldCondition.GOOD


@dataclass(frozen=True)
class VeldAssessment:
    """Veld condition score for a zone at a point in time."""
    id: str
    habitat_zone_id: str
    date: date
    species_composition: float   # 0-10
    basal_cover: float           # 0-10
    soil_erosion: float = 0.0    # 0-5, not used by the capacity model
    condition: VeldCondition = VeldCondition.GOOD

    @property
    def total_score(self) -> float:
        """Species composition + basal cover, out of 20."""
        return float(self.species_composition) + float(self.basal_cover)


@dataclass(frozen=True)
class RainfallLog:
    id: str
    date: date
    amount_mm: float


@dataclass(frozen=True)
class AnimalMeasurement:
    """A single body/trophy measurement, e.g. 'Horn Length (L)' in inches."""
    id: str
    animal_id: str
    date: date
    measurement_type: str
    value: float
    unit: str = "in"


# ═══════════════════════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PairingAssessment:
    """Outcome of a sire/dam pedigree check.

    is_valid=False marks a pairing the coefficient scale cannot describe
    (same animal, unknown animal, or one parent a lineal ancestor of the
    other); coefficient is then 0.0 and reason says why.
    """
    sire_id: str
    dam_id: str
    coefficient: float
    is_valid: bool = True
    reason: str = ""
    common_ancestors: int = 0


@dataclass(frozen=True)
class CarryingCapacity:
    """Sustainable standing stock of one zone, in LSU per guild."""
    grazer_lsu: float
    browser_lsu: float
    usable_forage_kg: float = 0.0
    veld_multiplier: float = 1.0

    @property
    def total_lsu(self) -> float:
        return self.grazer_lsu + self.browser_lsu


@dataclass(frozen=True)
class StockingLoad:
    """Current standing stock of one zone, in LSU per guild."""
    grazer_lsu: float
    browser_lsu: float
    head_count: int = 0

    @property
    def total_lsu(self) -> float:
        return self.grazer_lsu + self.browser_lsu


@dataclass(frozen=True)
class ZoneStocking:
    """Capacity vs current stocking for one zone."""
    zone_id: str
    zone_name: str
    capacity: CarryingCapacity
    stocking: StockingLoad
    grazer_utilization: float
    browser_utilization: float
    status: str
    condition: Optional[VeldCondition] = None   # latest assessment, else the zone label


@dataclass(frozen=True)
class QuotaResult:
    """Recommended removals for one species this cycle.

    males/females are None when no sex breakdown can be computed
    (missing sex counts or an unusable target ratio).
    """
    total: int
    males: Optional[int] = 0
    females: Optional[int] = 0

    @property
    def has_breakdown(self) -> bool:
        return self.males is not None and self.females is not None


@dataclass(frozen=True)
class PopulationSummary:
    """Totals over the latest survey of each species."""
    estimated_total: int
    male_total: int
    female_total: int
    species_counted: int


@dataclass(frozen=True)
class SireRecommendation:
    sire: Animal
    coefficient: float
    is_valid_pairing: bool
    risk: str
    latest_measurement: Optional[float]
    offspring_count: int


@dataclass(frozen=True)
class CandidateReason:
    text: str
    severity: str    # 'High' | 'Medium' | 'Low'


@dataclass(frozen=True)
class HarvestCandidate:
    animal: Animal
    score: int
    reasons: Tuple[CandidateReason, ...] = ()
