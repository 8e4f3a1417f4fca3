from datetime import date

import pytest

from hatchplan import db
from hatchplan.models import Batch, Run, RunMode
from hatchplan.services import RunService
from hatchplan.services.errors import InvalidQuantity, UnknownSpecies

TARGET = date(2025, 6, 15)


def _create(species_table, requests=None, mode=RunMode.HATCH, target=TARGET):
    if requests is None:
        requests = [("chicken", 12, "Marans"), ("duck", 6, "")]
    return RunService.create_run("June hatch", mode, target, requests, species_table)


def test_create_hatch_aligned_run(app_context, species_table):
    run = _create(species_table)

    stored = db.session.get(Run, run.id)
    assert stored.mode == RunMode.HATCH
    assert stored.egg_count == 18
    chicken, duck = stored.batches
    assert chicken.insertion_date == date(2025, 5, 25)
    assert chicken.description == "Marans"
    assert duck.insertion_date == date(2025, 5, 18)
    assert duck.description is None
    assert {b.hatch_date for b in stored.batches} == {TARGET}
    assert not any(b.completed or b.insertion_fixed for b in stored.batches)


def test_create_start_aligned_run(app_context, species_table):
    run = _create(species_table, [("chicken", 10), ("goose", 2)], mode=RunMode.START, target=date(2025, 3, 1))

    assert [b.insertion_date for b in run.batches] == [date(2025, 3, 1)] * 2
    assert [b.hatch_date for b in run.batches] == [date(2025, 3, 22), date(2025, 3, 31)]


def test_empty_run_is_allowed(app_context, species_table):
    run = _create(species_table, [])
    assert run.id is not None
    assert run.batches == []


def test_create_rejects_bad_input_without_saving(app_context, species_table):
    with pytest.raises(UnknownSpecies):
        _create(species_table, [("chicken", 3), ("dodo", 1)])
    with pytest.raises(InvalidQuantity):
        _create(species_table, [("chicken", 0)])
    with pytest.raises(ValueError):
        RunService.create_run("  ", RunMode.HATCH, TARGET, [], species_table)
    with pytest.raises(ValueError):
        RunService.create_run("Run", "sideways", TARGET, [], species_table)

    assert Run.query.count() == 0
    assert Batch.query.count() == 0


def test_reschedule_moves_unfixed_batches(app_context, species_table):
    run = _create(species_table)
    chicken, duck = run.batches
    RunService.record_insertion(duck, date(2025, 5, 19), species_table)

    RunService.reschedule(run, date(2025, 7, 1), species_table)

    assert run.target_date == date(2025, 7, 1)
    assert chicken.insertion_date == date(2025, 6, 10)
    assert chicken.hatch_date == date(2025, 7, 1)
    # Already in the incubator, so it stays put
    assert duck.insertion_date == date(2025, 5, 19)
    assert duck.hatch_date == date(2025, 6, 16)


def test_record_insertion_recomputes_hatch(app_context, species_table):
    run = _create(species_table)
    chicken = run.batches[0]

    RunService.record_insertion(chicken, date(2025, 5, 26), species_table)

    assert chicken.insertion_fixed
    assert chicken.insertion_date == date(2025, 5, 26)
    assert chicken.hatch_date == date(2025, 6, 16)


def test_add_and_remove_batch(app_context, species_table):
    run = _create(species_table)

    quail = RunService.add_batch(run, "quail", 24, species_table, description=" Coturnix ")
    assert quail.insertion_date == date(2025, 5, 28)
    assert quail.hatch_date == TARGET
    assert quail.description == "Coturnix"
    assert len(run.batches) == 3

    RunService.remove_batch(quail)
    assert len(run.batches) == 2
    assert Batch.query.count() == 2


def test_add_batch_with_unknown_species(app_context, species_table):
    run = _create(species_table)
    with pytest.raises(UnknownSpecies):
        RunService.add_batch(run, "dodo", 1, species_table)
    assert len(run.batches) == 2


def test_mark_hatched_and_reopen(app_context, species_table):
    batch = _create(species_table).batches[0]

    RunService.mark_hatched(batch, date(2025, 6, 14))
    assert batch.completed
    assert batch.completed_on == date(2025, 6, 14)

    RunService.reopen(batch)
    assert not batch.completed
    assert batch.completed_on is None


def test_delete_run_deletes_batches(app_context, species_table):
    run = _create(species_table)
    other = RunService.create_run("Other", RunMode.HATCH, TARGET, [("goose", 2)], species_table)

    RunService.delete_run(run)

    assert Run.query.all() == [other]
    assert [b.species_id for b in Batch.query.all()] == ["goose"]
