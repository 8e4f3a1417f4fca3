import json

import pytest

from hatchplan.services.errors import ScheduleError, UnknownSpecies
from hatchplan.services.species import Species, SpeciesTable, load_species_table


def test_default_durations(species_table):
    assert species_table.lookup("chicken").incubation_days == 21
    assert species_table.lookup("duck").incubation_days == 28
    assert species_table.lookup("quail").incubation_days == 18
    assert species_table.lookup("goose").incubation_days == 30


def test_defaults_only_define_stop_turning(species_table):
    for species in species_table.values():
        assert species.stop_turning_day == species.incubation_days - 3
        assert species.lockdown_day is None


def test_lookup_ignores_case_and_whitespace(species_table):
    assert species_table.lookup("  Chicken ").id == "chicken"


def test_unknown_species_is_reported(species_table):
    with pytest.raises(UnknownSpecies) as excinfo:
        species_table.lookup("dodo")
    assert excinfo.value.species_id == "dodo"
    assert isinstance(excinfo.value, ScheduleError)
    assert isinstance(excinfo.value, LookupError)


def test_table_behaves_like_a_mapping(species_table):
    assert "duck" in species_table
    assert "dodo" not in species_table
    assert species_table.get("dodo") is None
    assert list(species_table) == ["chicken", "duck", "quail", "goose"]
    assert len(species_table) == 4


def test_choices_for_select_boxes(species_table):
    assert species_table.choices()[0] == ("chicken", "Chicken (21 days)")


@pytest.mark.parametrize("kwargs", [
    {"incubation_days": 0},
    {"incubation_days": 21, "stop_turning_day": 21},
    {"incubation_days": 21, "lockdown_day": 0},
    {"incubation_days": 21, "stop_turning_day": "18"},
])
def test_invalid_species_rejected(kwargs):
    with pytest.raises(ValueError):
        Species("bad", "Bad", **kwargs)


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError):
        SpeciesTable([Species("duck", "Duck", 28), Species("Duck", "Duck again", 28)])


def test_load_without_path_returns_defaults():
    assert set(load_species_table(None)) == {"chicken", "duck", "quail", "goose"}


def test_load_from_json(tmp_path):
    path = tmp_path / "species.json"
    path.write_text(json.dumps([
        {"id": "Turkey", "incubation_days": 28, "stop_turning_day": 25, "lockdown_day": 25},
        {"id": "chicken", "name": "Hen", "incubation_days": 21},
    ]))

    table = load_species_table(str(path))

    assert list(table) == ["turkey", "chicken"]
    turkey = table.lookup("turkey")
    assert turkey.name == "Turkey"
    assert turkey.lockdown_day == 25
    assert table.lookup("chicken").stop_turning_day is None
    with pytest.raises(UnknownSpecies):
        table.lookup("duck")


def test_load_rejects_bad_file(tmp_path):
    path = tmp_path / "species.json"
    path.write_text(json.dumps({"id": "chicken"}))
    with pytest.raises(ValueError):
        load_species_table(str(path))


def test_app_loads_table_once(app):
    table = app.extensions["species_table"]
    assert isinstance(table, SpeciesTable)
    with app.app_context():
        from hatchplan.services.species import current_species_table
        assert current_species_table() is table
