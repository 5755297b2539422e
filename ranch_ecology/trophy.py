"""Trophy measurements: SCI scores and horn-growth benchmarks."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

import numpy as np

from ranch_ecology.config import TrophySection, default_config
from ranch_ecology.types import AnimalMeasurement


def _trophy_section(section: Optional[TrophySection]) -> TrophySection:
    return section if section is not None else default_config().trophy


def sci_score(
    species: str,
    measurements: Mapping[str, float],
    section: Optional[TrophySection] = None,
) -> Optional[float]:
    """Safari Club International score for a trophy.

    Sums the species' formula fields (inches); a missing field counts as 0.
    Returns None for species without a configured formula.
    """
    section = _trophy_section(section)
    fields = section.sci_formulas.get(species)
    if fields is None:
        return None
    total = sum(float(measurements.get(name) or 0.0) for name in fields)
    return round(total, section.score_decimals)


def latest_measurement_average(
    animal_id: str,
    measurements: Iterable[AnimalMeasurement],
    measurement_types: Sequence[str],
) -> Optional[float]:
    """Mean of an animal's measurements of the given types on its latest date.

    Left and right horns measured on the same day are averaged together.
    None if the animal has no such measurement.
    """
    relevant = [
        m for m in measurements
        if m.animal_id == animal_id and m.measurement_type in measurement_types
    ]
    if not relevant:
        return None
    latest = max(m.date for m in relevant)
    return float(np.mean([m.value for m in relevant if m.date == latest]))


def latest_horn_average(
    animal_id: str,
    measurements: Iterable[AnimalMeasurement],
    section: Optional[TrophySection] = None,
) -> Optional[float]:
    section = _trophy_section(section)
    return latest_measurement_average(
        animal_id, measurements, section.horn_measurement_types
    )


def benchmark_horn_length(
    species: str,
    age: float,
    section: Optional[TrophySection] = None,
) -> float:
    """Expected horn length at `age` on the species' average-growth line.

    Linear interpolation between benchmark points; past the last point the
    last value holds. Younger than the first point, or no benchmark for the
    species, gives 0 (no expectation).
    """
    section = _trophy_section(section)
    points = section.horn_benchmarks.get(species)
    if not points:
        return 0.0

    ages = np.array([p[0] for p in points], dtype=np.float64)
    lengths = np.array([p[1] for p in points], dtype=np.float64)
    if age < ages[0]:
        return 0.0
    return float(np.interp(age, ages, lengths))
