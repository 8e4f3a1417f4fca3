from datetime import date
from types import SimpleNamespace

from hatchplan.services.overview import eggs_by_species, phase_totals, summarize_run, summarize_runs
from hatchplan.services.schedule import Phase


def _batch(id, species_id, insertion_date, quantity, completed=False):
    return SimpleNamespace(
        id=id,
        species_id=species_id,
        insertion_date=insertion_date,
        quantity=quantity,
        completed=completed,
        description=None,
    )


def _mixed_run():
    # Hatch together on 2025-06-15
    return SimpleNamespace(
        id=3,
        name="June hatch",
        mode="hatch",
        batches=[
            _batch(1, "duck", date(2025, 5, 18), 6),
            _batch(2, "chicken", date(2025, 5, 25), 12),
        ],
    )


def test_run_spans_first_insertion_to_last_hatch(species_table):
    summary = summarize_run(_mixed_run(), date(2025, 5, 25), species_table)

    assert summary.start_date == date(2025, 5, 18)
    assert summary.final_hatch_date == date(2025, 6, 15)
    assert summary.total_days == 28
    assert summary.current_day == 8
    assert summary.progress == 7 / 28
    assert summary.is_aligned


def test_batch_status_on_chicken_insertion_day(species_table):
    summary = summarize_run(_mixed_run(), date(2025, 5, 25), species_table)
    duck, chicken = summary.batches

    assert duck.phase == Phase.INCUBATING
    assert duck.day == 8
    assert chicken.phase == Phase.INCUBATING
    assert chicken.day == 1
    assert chicken.days_remaining == 21
    assert [r.kind for r in chicken.reminders] == ["insert"]
    assert duck.reminders == []
    assert summary.is_action_day


def test_everything_hatching_on_target_day(species_table):
    summary = summarize_run(_mixed_run(), date(2025, 6, 15), species_table)

    assert [b.phase for b in summary.batches] == [Phase.HATCHING, Phase.HATCHING]
    assert [b.progress for b in summary.batches] == [1.0, 1.0]
    assert summary.progress == 1.0
    assert len(summary.reminders) == 2


def test_finished_once_every_batch_marked(species_table):
    run = _mixed_run()
    for batch in run.batches:
        batch.completed = True
    summary = summarize_run(run, date(2025, 6, 16), species_table)

    assert summary.is_finished
    assert summary.reminders == []


def test_empty_run_summary(species_table):
    run = SimpleNamespace(id=9, name="Nothing yet", mode="hatch", batches=[])
    summary = summarize_run(run, date(2025, 1, 1), species_table)

    assert summary.batches == []
    assert summary.start_date is None
    assert summary.final_hatch_date is None
    assert summary.progress == 0.0
    assert summary.current_day == 0
    assert not summary.is_action_day
    assert not summary.is_finished
    assert summary.to_status_dict()["batches"] == []


def test_misaligned_run_detected(species_table):
    run = _mixed_run()
    run.batches[1].insertion_date = date(2025, 5, 26)
    assert not summarize_run(run, date(2025, 6, 1), species_table).is_aligned


def test_status_dict(species_table):
    status = summarize_run(_mixed_run(), date(2025, 6, 12), species_table).to_status_dict()

    assert status["name"] == "June hatch"
    assert status["final_hatch_date"] == "2025-06-15"
    assert status["batches"][1] == {
        "id": 2,
        "species": "chicken",
        "quantity": 12,
        "description": "",
        "insertion_date": "2025-05-25",
        "hatch_date": "2025-06-15",
        "phase": "locked",
        "progress": round(18 / 21, 4),
        "day": 19,
        "days_remaining": 3,
        "reminders": ["stop_turning"],
    }


def test_dashboard_totals(species_table):
    run = _mixed_run()
    run.batches[0].completed = True
    summaries = summarize_runs([run], date(2025, 6, 1), species_table)

    totals = phase_totals(summaries)
    assert list(totals) == [p for p, _ in Phase.CHOICES]
    assert totals[Phase.HATCHED] == 6
    assert totals[Phase.INCUBATING] == 12

    assert eggs_by_species(summaries) == {"chicken": 12}
    assert eggs_by_species(summaries, include_hatched=True) == {"chicken": 12, "duck": 6}
