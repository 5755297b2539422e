"""Read-only ranch record snapshots.

A RanchSnapshot bundles the record collections the calculation modules
consume. It is built once (usually from YAML via `load_snapshot`) and then
only read; lookups such as `animals_by_id` are derived on construction.

YAML layout: top-level keys, each a list of records:

    animals, habitat_zones, population_surveys, veld_assessments,
    rainfall_logs, reproductive_events, animal_measurements

Record fields may be written snake_case or in the dashboard's camelCase
(`tagId`, `areaHectares`, ...). Unknown fields are ignored.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union

import yaml

from ranch_ecology.types import (
    Animal,
    AnimalMeasurement,
    AnimalStatus,
    ForageType,
    HabitatZone,
    PopulationSurvey,
    RainfallLog,
    ReproductiveEvent,
    Sex,
    SurveyConfidence,
    VeldAssessment,
    VeldCondition,
)

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Dashboard field names that don't map by case conversion alone
_ALIASES = {
    "amount": "amount_mm",
}

_ENUM_FIELDS: Dict[str, Type[Enum]] = {
    "sex": Sex,
    "forage_type": ForageType,
    "status": AnimalStatus,
    "veld_condition": VeldCondition,
    "condition": VeldCondition,
    "confidence": SurveyConfidence,
}

_DATE_FIELDS = {"date", "birth_date"}


@dataclass(frozen=True)
class RanchSnapshot:
    """Immutable bundle of ranch records."""
    animals: Tuple[Animal, ...] = ()
    habitat_zones: Tuple[HabitatZone, ...] = ()
    population_surveys: Tuple[PopulationSurvey, ...] = ()
    veld_assessments: Tuple[VeldAssessment, ...] = ()
    rainfall_logs: Tuple[RainfallLog, ...] = ()
    reproductive_events: Tuple[ReproductiveEvent, ...] = ()
    animal_measurements: Tuple[AnimalMeasurement, ...] = ()
    animals_by_id: Mapping[str, Animal] = field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self):
        object.__setattr__(self, "animals_by_id", {a.id: a for a in self.animals})

    def zone_by_id(self, zone_id: str) -> Optional[HabitatZone]:
        for zone in self.habitat_zones:
            if zone.id == zone_id:
                return zone
        return None

    def animals_in_zone(self, zone: HabitatZone) -> List[Animal]:
        """Active animals whose location is the zone's name."""
        return [a for a in self.animals if a.location == zone.name and a.is_active]

    @property
    def species(self) -> List[str]:
        """Every species with an animal record or a survey, sorted."""
        names = {a.species for a in self.animals}
        names.update(s.species for s in self.population_surveys)
        return sorted(names)


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING
# ═══════════════════════════════════════════════════════════════════════

_COLLECTIONS: Dict[str, type] = {
    "animals": Animal,
    "habitat_zones": HabitatZone,
    "population_surveys": PopulationSurvey,
    "veld_assessments": VeldAssessment,
    "rainfall_logs": RainfallLog,
    "reproductive_events": ReproductiveEvent,
    "animal_measurements": AnimalMeasurement,
}


def _snake(name: str) -> str:
    snake = _CAMEL_BOUNDARY.sub("_", name).lower()
    return _ALIASES.get(snake, snake)


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in _ENUM_FIELDS:
        return _ENUM_FIELDS[name](value)
    if name in _DATE_FIELDS:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value))
    return value


def record_from_dict(record_cls, data: Mapping[str, Any]):
    """Build a record dataclass from a dict, ignoring unknown keys.

    Raises:
        ValueError: Missing required fields or an invalid enum/date value.
    """
    valid_fields = {f.name for f in dataclasses.fields(record_cls) if f.init}
    kwargs = {}
    for key, value in data.items():
        name = _snake(str(key))
        if name in valid_fields:
            try:
                kwargs[name] = _coerce(name, value)
            except ValueError as exc:
                raise ValueError(
                    f"{record_cls.__name__}.{name}: invalid value {value!r}"
                ) from exc
    try:
        return record_cls(**kwargs)
    except TypeError as exc:
        raise ValueError(f"{record_cls.__name__} record {dict(data)!r}: {exc}") from exc


def snapshot_from_dict(data: Mapping[str, Any]) -> RanchSnapshot:
    """Build a snapshot from a parsed YAML/JSON document."""
    collections = {}
    for key, record_cls in _COLLECTIONS.items():
        raw = data.get(key) or data.get(_camel(key)) or []
        if not isinstance(raw, list):
            raise ValueError(f"'{key}' must be a list of records, got {type(raw).__name__}")
        collections[key] = tuple(record_from_dict(record_cls, r) for r in raw)

    snapshot = RanchSnapshot(**collections)
    _check_references(snapshot)
    return snapshot


def _camel(snake: str) -> str:
    head, *rest = snake.split("_")
    return head + "".join(part.title() for part in rest)


def _check_references(snapshot: RanchSnapshot) -> None:
    """Log dangling pedigree and zone references. They are not errors."""
    for animal in snapshot.animals:
        for parent_id in (animal.sire_id, animal.dam_id):
            if parent_id and parent_id not in snapshot.animals_by_id:
                logger.warning("Animal %s references unknown parent %s", animal.id, parent_id)
        if animal.sire_id == animal.id or animal.dam_id == animal.id:
            logger.warning("Animal %s is recorded as its own parent", animal.id)

    zone_ids = {z.id for z in snapshot.habitat_zones}
    for assessment in snapshot.veld_assessments:
        if assessment.habitat_zone_id not in zone_ids:
            logger.warning(
                "Veld assessment %s references unknown zone %s",
                assessment.id, assessment.habitat_zone_id,
            )


def load_snapshot(path: Union[str, Path]) -> RanchSnapshot:
    """Load a ranch snapshot from YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the document or a record is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot {path} must be a mapping of record lists")

    snapshot = snapshot_from_dict(data)
    logger.info(
        "Loaded snapshot %s: %d animals, %d zones, %d surveys",
        path.name, len(snapshot.animals), len(snapshot.habitat_zones),
        len(snapshot.population_surveys),
    )
    return snapshot
