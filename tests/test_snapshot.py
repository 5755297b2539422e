"""Tests for ranch_ecology.snapshot: record loading from YAML."""

import logging
from datetime import date
from pathlib import Path

import pytest

from ranch_ecology.snapshot import (
    RanchSnapshot,
    load_snapshot,
    record_from_dict,
    snapshot_from_dict,
)
from ranch_ecology.types import (
    Animal,
    AnimalStatus,
    ForageType,
    HabitatZone,
    RainfallLog,
    Sex,
    VeldCondition,
)

EXAMPLE = Path(__file__).parent.parent / "data" / "example_ranch.yaml"


class TestRecordFromDict:
    def test_camel_case_fields(self):
        animal = record_from_dict(Animal, {
            "id": "A1", "tagId": "IMP-01", "species": "Impala", "sex": "Female",
            "age": 3, "forageType": "Mixed-Feeder", "lsuEquivalent": 0.2, "sireId": "A9",
        })
        assert animal.tag_id == "IMP-01"
        assert animal.sex is Sex.FEMALE
        assert animal.forage_type is ForageType.MIXED
        assert animal.sire_id == "A9"
        assert animal.status is AnimalStatus.ACTIVE

    def test_snake_case_and_unknown_fields(self):
        zone = record_from_dict(HabitatZone, {
            "id": "H1", "name": "North", "area_hectares": 100,
            "forage_production_factor": 2.0, "grass_to_browse_ratio": 0.5,
            "veld_condition": "Fair", "notes": "ignored",
        })
        assert zone.veld_condition is VeldCondition.FAIR

    def test_amount_alias_and_date(self):
        log = record_from_dict(RainfallLog, {"id": "R1", "date": "2024-06-05", "amount": 22})
        assert log.amount_mm == 22
        assert log.date == date(2024, 6, 5)

    def test_missing_required_field(self):
        with pytest.raises(ValueError, match="Animal"):
            record_from_dict(Animal, {"id": "A1", "species": "Kudu"})

    def test_invalid_enum(self):
        with pytest.raises(ValueError, match="sex"):
            record_from_dict(Animal, {"id": "A1", "tagId": "T", "species": "Kudu",
                                      "sex": "Unknown", "age": 3})


class TestSnapshot:
    def test_animals_by_id(self):
        snapshot = RanchSnapshot(animals=(
            Animal("A1", "T1", "Kudu", Sex.MALE, 4),
            Animal("A2", "T2", "Kudu", Sex.FEMALE, 4),
        ))
        assert set(snapshot.animals_by_id) == {"A1", "A2"}

    def test_collection_must_be_list(self):
        with pytest.raises(ValueError, match="animals"):
            snapshot_from_dict({"animals": {"id": "A1"}})

    def test_dangling_parent_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ranch_ecology.snapshot"):
            snapshot_from_dict({"animals": [
                {"id": "A1", "tagId": "T1", "species": "Kudu", "sex": "Male", "age": 4,
                 "sireId": "GHOST"},
            ]})
        assert "unknown parent GHOST" in caplog.text


class TestLoadSnapshot:
    def test_example_ranch(self):
        snapshot = load_snapshot(EXAMPLE)
        assert len(snapshot.animals) == 9
        assert len(snapshot.habitat_zones) == 4
        assert snapshot.animals_by_id["A009"].sire_id == "A009"
        assert "Kudu" in snapshot.species

    def test_animals_in_zone(self):
        snapshot = load_snapshot(EXAMPLE)
        north = snapshot.zone_by_id("H01")
        ids = sorted(a.id for a in snapshot.animals_in_zone(north))
        assert ids == ["A001", "A005", "A007", "A009"]
        assert snapshot.zone_by_id("H99") is None

    def test_self_parent_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ranch_ecology.snapshot"):
            load_snapshot(EXAMPLE)
        assert "A009 is recorded as its own parent" in caplog.text

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "absent.yaml")

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_snapshot(path)

    def test_empty_document(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_snapshot(path).animals == ()
