import logging
from datetime import date

from hatchplan import db
from hatchplan.models import Batch, Run, RunMode
from hatchplan.services.schedule import (
    build_timeline,
    compute_hatch_dates,
    compute_insertion_dates,
)

logger = logging.getLogger(__name__)


class RunService:
    """Persists the dates the scheduling engine computes for runs and batches.

    Engine errors (``ScheduleError`` and subclasses) are not caught here;
    callers decide how to report them.
    """

    @staticmethod
    def schedule(mode: str, requests, target_date: date, species_table):
        """Run the engine in the direction *mode* asks for."""
        if mode == RunMode.HATCH:
            return compute_insertion_dates(requests, target_date, species_table)
        if mode == RunMode.START:
            return compute_hatch_dates(requests, target_date, species_table)
        raise ValueError(f"Unknown run mode: {mode!r}")

    @classmethod
    def create_run(cls, name, mode, target_date, requests, species_table, notes=None) -> Run:
        """Create a run and its batches in one commit.

        *requests* is a list of ``(species_id, quantity, description)`` or
        ``(species_id, quantity)`` tuples. An empty list creates an empty run.
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Run name is required")

        requests = list(requests)
        scheduled = cls.schedule(
            mode, [(r[0], r[1]) for r in requests], target_date, species_table
        )

        run = Run(name=name, mode=mode, target_date=target_date, notes=notes or None)
        for request, entry in zip(requests, scheduled):
            run.batches.append(Batch(
                species_id=entry.species_id,
                quantity=entry.quantity,
                description=(request[2] if len(request) > 2 else "") or None,
                insertion_date=entry.insertion_date,
                hatch_date=entry.hatch_date,
                insertion_fixed=False,
                completed=False,
            ))

        db.session.add(run)
        db.session.commit()
        logger.info(
            "Created run %s (%s) with %d batches, target %s",
            run.id, run.name, len(run.batches), run.target_date,
        )
        return run

    @classmethod
    def reschedule(cls, run: Run, target_date: date, species_table) -> Run:
        """Move the run's target date and recompute every batch not fixed by the user."""
        movable = [b for b in run.batches if not b.insertion_fixed]
        scheduled = cls.schedule(
            run.mode, [(b.species_id, b.quantity) for b in movable], target_date, species_table
        )

        run.target_date = target_date
        for batch, entry in zip(movable, scheduled):
            batch.insertion_date = entry.insertion_date
            batch.hatch_date = entry.hatch_date
        db.session.commit()

        logger.info("Rescheduled run %s to %s (%d batches moved)", run.id, target_date, len(movable))
        return run

    @classmethod
    def add_batch(cls, run: Run, species_id, quantity, species_table, description=None) -> Batch:
        (entry,) = cls.schedule(run.mode, [(species_id, quantity)], run.target_date, species_table)
        batch = Batch(
            species_id=entry.species_id,
            quantity=entry.quantity,
            description=(description or "").strip() or None,
            insertion_date=entry.insertion_date,
            hatch_date=entry.hatch_date,
            insertion_fixed=False,
            completed=False,
        )
        run.batches.append(batch)
        db.session.commit()
        logger.info("Added %d %s eggs to run %s", batch.quantity, batch.species_id, run.id)
        return batch

    @staticmethod
    def remove_batch(batch: Batch) -> None:
        run = batch.run
        run.batches.remove(batch)
        db.session.commit()
        logger.info("Removed batch %s from run %s", batch.id, run.id)

    @staticmethod
    def record_insertion(batch: Batch, inserted_on: date, species_table) -> Batch:
        """Store the day the eggs really went in; the hatch date follows from it."""
        timeline = build_timeline(species_table.lookup(batch.species_id), inserted_on)
        batch.insertion_date = timeline.insertion_date
        batch.hatch_date = timeline.hatch_date
        batch.insertion_fixed = True
        db.session.commit()
        logger.info("Batch %s inserted on %s, hatch expected %s", batch.id, inserted_on, batch.hatch_date)
        return batch

    @staticmethod
    def mark_hatched(batch: Batch, on: date) -> Batch:
        batch.completed = True
        batch.completed_on = on
        db.session.commit()
        return batch

    @staticmethod
    def reopen(batch: Batch) -> Batch:
        batch.completed = False
        batch.completed_on = None
        db.session.commit()
        return batch

    @staticmethod
    def delete_run(run: Run) -> None:
        run_id = run.id
        db.session.delete(run)
        db.session.commit()
        logger.info("Deleted run %s", run_id)
