"""Configuration system for ranch-ecology.

Hierarchical YAML configuration with deep-merge support:
  code defaults → default.yaml → ranch override → dict overrides

Every constant the calculation modules use lives here, so a ranch can tune
utilisation fractions, veld multiplier steps or species parameters without
touching code. Calculation functions accept ``config=None`` and fall back to
``default_config()``.
"""

from __future__ import annotations

import copy
import dataclasses
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ranch_ecology.types import VeldCondition


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class PedigreeSection:
    """Pedigree traversal and inbreeding-risk parameters."""
    max_generations: int = 10              # BFS depth cap on sire/dam edges
    invalid_pairing_coefficient: float = 1.0   # Sentinel for parent/ancestor pairings
    high_risk_threshold: float = 0.125     # > half-sib level
    moderate_risk_threshold: float = 0.0625


@dataclass
class CapacitySection:
    """Veld carrying-capacity model.

    multiplier_steps: [min_total_score, multiplier] pairs, checked from the
    highest threshold down; scores below every threshold get floor_multiplier.
    condition_labels name the same bands (highest threshold first), and
    floor_condition the band below them.
    """
    utilization_fraction: float = 0.25     # Share of annual production safely eaten
    daily_intake_kg: float = 10.0          # kg DM per LSU per day
    days_per_year: int = 365
    rainfall_window_days: int = 365        # Trailing rainfall window
    max_veld_score: float = 20.0           # species composition + basal cover
    multiplier_steps: List[List[float]] = field(
        default_factory=lambda: [[18.0, 1.2], [14.0, 1.0], [8.0, 0.75]]
    )
    floor_multiplier: float = 0.5
    condition_labels: List[str] = field(
        default_factory=lambda: ["Excellent", "Good", "Fair"]
    )
    floor_condition: str = "Poor"
    default_multiplier: float = 1.0        # No assessment on record
    overstocked_threshold: float = 0.90    # utilisation bands
    near_capacity_threshold: float = 0.75

    @property
    def annual_intake_kg(self) -> float:
        return self.daily_intake_kg * self.days_per_year


@dataclass
class QuotaTarget:
    """Management target for one species' strategic quota."""
    target_population: float
    ratio_male: float = 1.0
    ratio_female: float = 1.0


@dataclass
class HarvestSection:
    """Harvest quota targets and candidate-scoring weights."""
    targets: Dict[str, QuotaTarget] = field(default_factory=dict)
    age_weight: float = 30.0               # Max points for past-prime age
    growth_weight: float = 40.0            # Points per unit horn-growth deficit
    reproduction_weight: float = 25.0      # Points per unit calving-interval delay
    inbreeding_weight: float = 100.0       # Points per unit parental coefficient
    inbreeding_flag_threshold: float = 0.05
    max_candidates: int = 10               # Report truncation only


@dataclass
class SpeciesParameters:
    """Life-history parameters for one species."""
    prime_reproductive_age: List[float] = field(default_factory=lambda: [3.0, 8.0])
    max_age: float = 12.0
    ideal_calving_interval: float = 365.0  # days
    growth_rate_lambda: float = 1.2        # annual growth multiplier


@dataclass
class TrophySection:
    """SCI formulas, horn-growth benchmarks and measurement types.

    sci_formulas: species → measurement fields summed into the SCI score.
    horn_benchmarks: species → [[age, horn_length_in], ...] average-growth line.
    """
    sci_formulas: Dict[str, List[str]] = field(default_factory=dict)
    horn_benchmarks: Dict[str, List[List[float]]] = field(default_factory=dict)
    horn_measurement_types: List[str] = field(
        default_factory=lambda: ["Horn Length (L)", "Horn Length (R)"]
    )
    score_decimals: int = 4


def _default_species() -> Dict[str, SpeciesParameters]:
    return {
        "Kudu": SpeciesParameters([4.0, 9.0], 12.0, 365.0, 1.25),
        "Impala": SpeciesParameters([2.0, 6.0], 8.0, 200.0, 1.35),
        "Blue Wildebeest": SpeciesParameters([3.0, 10.0], 15.0, 365.0, 1.20),
    }


def _default_trophy() -> TrophySection:
    horn_fields = ["hornLengthL", "hornLengthR", "baseCircumferenceL", "baseCircumferenceR"]
    return TrophySection(
        sci_formulas={"Kudu": list(horn_fields), "Impala": list(horn_fields)},
        horn_benchmarks={
            "Kudu": [[3, 30], [4, 40], [5, 48], [6, 52], [7, 55], [8, 56]],
        },
    )


@dataclass
class RanchConfig:
    """Complete calculation configuration.

    Load from YAML via `load_config()`. Sections map 1:1 to YAML top-level keys.
    """
    pedigree: PedigreeSection = field(default_factory=PedigreeSection)
    capacity: CapacitySection = field(default_factory=CapacitySection)
    harvest: HarvestSection = field(default_factory=HarvestSection)
    species: Dict[str, SpeciesParameters] = field(default_factory=_default_species)
    trophy: TrophySection = field(default_factory=_default_trophy)


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING & MERGING
# ═══════════════════════════════════════════════════════════════════════

def deep_merge(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into base. Modifies base in place.

    - Dict values are merged recursively
    - Non-dict values are replaced
    - Keys in override but not base are added

    Args:
        base: Base dictionary (modified in place).
        override: Override dictionary.

    Returns:
        The merged base dictionary.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _dict_to_section(section_cls, data: Dict, where: str = "") -> Any:
    """Convert a dict to a dataclass, ignoring unknown keys.

    Raises:
        ValueError: If `data` is not a mapping or a required field is missing.
    """
    where = where or section_cls.__name__
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be a mapping, got {type(data).__name__}")
    valid_fields = {f.name for f in dataclasses.fields(section_cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}
    try:
        return section_cls(**filtered)
    except TypeError as exc:
        raise ValueError(f"{where}: {exc}") from exc


def _yaml_to_config(data: Dict) -> RanchConfig:
    """Convert a merged YAML dict to a RanchConfig."""
    sections: Dict[str, Any] = {}

    for key, cls in (("pedigree", PedigreeSection), ("capacity", CapacitySection)):
        if isinstance(data.get(key), dict):
            sections[key] = _dict_to_section(cls, data[key], key)

    if isinstance(data.get("harvest"), dict):
        harvest = dict(data["harvest"])
        targets = harvest.pop("targets", None) or {}
        if not isinstance(targets, dict):
            raise ValueError(
                f"harvest.targets must map species to targets, got {type(targets).__name__}"
            )
        section = _dict_to_section(HarvestSection, harvest, "harvest")
        section.targets = {
            species: _dict_to_section(QuotaTarget, t, f"harvest.targets[{species}]")
            for species, t in targets.items()
        }
        sections["harvest"] = section

    if isinstance(data.get("species"), dict):
        sections["species"] = {
            name: _dict_to_section(SpeciesParameters, params, f"species[{name}]")
            for name, params in data["species"].items()
        }

    if isinstance(data.get("trophy"), dict):
        sections["trophy"] = _dict_to_section(TrophySection, data["trophy"], "trophy")

    return RanchConfig(**sections)


def config_to_dict(config: RanchConfig) -> Dict:
    """Plain-dict view of a config (the inverse of `_yaml_to_config`)."""
    return dataclasses.asdict(config)


def validate_config(config: RanchConfig) -> None:
    """Validate configuration constraints. Raises ValueError on failure.

    Checks:
      - Pedigree depth and risk thresholds are usable
      - Capacity fractions, intake and multiplier steps are consistent
      - Quota targets and species parameters are non-negative and ordered
    """
    p = config.pedigree
    if p.max_generations < 1:
        raise ValueError(
            f"pedigree.max_generations must be >= 1, got {p.max_generations}"
        )
    if not (0 <= p.moderate_risk_threshold <= p.high_risk_threshold):
        raise ValueError(
            f"pedigree risk thresholds must satisfy 0 <= moderate "
            f"({p.moderate_risk_threshold}) <= high ({p.high_risk_threshold})"
        )

    c = config.capacity
    if not (0 < c.utilization_fraction <= 1):
        raise ValueError(
            f"capacity.utilization_fraction must be in (0, 1], "
            f"got {c.utilization_fraction}"
        )
    if c.daily_intake_kg <= 0 or c.days_per_year <= 0:
        raise ValueError("capacity.daily_intake_kg and days_per_year must be positive")
    if c.rainfall_window_days < 1:
        raise ValueError(
            f"capacity.rainfall_window_days must be >= 1, got {c.rainfall_window_days}"
        )
    for i, step in enumerate(c.multiplier_steps):
        if len(step) != 2:
            raise ValueError(
                f"capacity.multiplier_steps[{i}] must be [min_score, multiplier], got {step}"
            )
        if step[1] < 0:
            raise ValueError(
                f"capacity.multiplier_steps[{i}] multiplier must be >= 0, got {step[1]}"
            )
        if step[0] > c.max_veld_score:
            warnings.warn(
                f"capacity.multiplier_steps[{i}] threshold {step[0]} exceeds "
                f"max_veld_score {c.max_veld_score} and can never apply.",
                UserWarning,
                stacklevel=2,
            )
    if len(c.condition_labels) != len(c.multiplier_steps):
        raise ValueError(
            f"capacity.condition_labels needs one label per multiplier step "
            f"({len(c.multiplier_steps)}), got {len(c.condition_labels)}"
        )
    for label in list(c.condition_labels) + [c.floor_condition]:
        if label not in {v.value for v in VeldCondition}:
            raise ValueError(f"capacity condition label {label!r} is not a veld condition")
    if not (0 <= c.near_capacity_threshold <= c.overstocked_threshold):
        raise ValueError(
            "capacity.near_capacity_threshold must be <= overstocked_threshold"
        )

    h = config.harvest
    for species, target in h.targets.items():
        if target.target_population < 0:
            raise ValueError(
                f"harvest.targets[{species}].target_population must be >= 0, "
                f"got {target.target_population}"
            )
        if target.ratio_male < 0 or target.ratio_female < 0:
            raise ValueError(
                f"harvest.targets[{species}] ratios must be >= 0"
            )
        if species not in config.species:
            warnings.warn(
                f"harvest.targets[{species}] has no species parameters; "
                f"no growth rate is available so its quota will be zero.",
                UserWarning,
                stacklevel=2,
            )

    for name, sp in config.species.items():
        if len(sp.prime_reproductive_age) != 2:
            raise ValueError(
                f"species[{name}].prime_reproductive_age must be [start, end], "
                f"got {sp.prime_reproductive_age}"
            )
        lo, hi = sp.prime_reproductive_age
        if not (0 <= lo <= hi < sp.max_age):
            raise ValueError(
                f"species[{name}] requires 0 <= prime start <= prime end < max_age, "
                f"got {sp.prime_reproductive_age} with max_age={sp.max_age}"
            )
        if sp.ideal_calving_interval <= 0:
            raise ValueError(
                f"species[{name}].ideal_calving_interval must be positive"
            )

    for name, points in config.trophy.horn_benchmarks.items():
        ages = [pt[0] for pt in points]
        if ages != sorted(ages):
            raise ValueError(
                f"trophy.horn_benchmarks[{name}] must be sorted by age"
            )


def _read_yaml(path: Path) -> Dict:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must be a mapping of sections")
    return data


def load_config(
    base_path: Optional[Union[str, Path]],
    override_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict] = None,
) -> RanchConfig:
    """Load and merge hierarchical YAML configuration.

    Merge order: code defaults → base → override file → dict overrides.
    Each layer overrides only the fields it specifies, so a partial
    `species:` or `trophy:` section keeps the built-in entries it does
    not mention.

    Args:
        base_path: Path to base configuration YAML (None for code defaults).
        override_path: Optional ranch-specific override YAML.
        overrides: Optional dict of parameter overrides.

    Returns:
        Validated RanchConfig.

    Raises:
        FileNotFoundError: If base_path doesn't exist.
        ValueError: If a file is malformed or validation fails.
    """
    config_dict = config_to_dict(RanchConfig())

    if base_path is not None:
        base_path = Path(base_path)
        if not base_path.exists():
            raise FileNotFoundError(f"Config file not found: {base_path}")
        deep_merge(config_dict, _read_yaml(base_path))

    if override_path is not None:
        override_path = Path(override_path)
        if override_path.exists():
            deep_merge(config_dict, _read_yaml(override_path))

    if overrides is not None:
        deep_merge(config_dict, copy.deepcopy(overrides))

    config = _yaml_to_config(config_dict)
    validate_config(config)
    return config


def default_config() -> RanchConfig:
    """Return a RanchConfig with all default values."""
    config = RanchConfig()
    validate_config(config)
    return config
