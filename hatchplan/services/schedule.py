"""Mixed-batch scheduling and progress engine.

Everything here is a pure function of its arguments: dates come in from the
caller (``today`` is never read from the clock) and the species table is
passed explicitly. Phases and reminders are recomputed on every call, so
nothing here can drift from the stored insertion dates.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import NamedTuple

from hatchplan.services.errors import InvalidQuantity


class Phase:
    """Derived lifecycle phase of a batch."""
    SCHEDULED = "scheduled"
    INCUBATING = "incubating"
    LOCKED = "locked"
    HATCHING = "hatching"
    OVERDUE = "overdue"
    HATCHED = "hatched"

    CHOICES = [
        (SCHEDULED, "Scheduled"),
        (INCUBATING, "Incubating"),
        (LOCKED, "Locked down"),
        (HATCHING, "Hatching"),
        (OVERDUE, "Overdue"),
        (HATCHED, "Hatched"),
    ]

    @classmethod
    def label(cls, phase: str) -> str:
        for value, label in cls.CHOICES:
            if value == phase:
                return label
        return phase


class ReminderKind:
    """Milestones a reminder can be raised for, in the order they occur."""
    INSERT = "insert"
    STOP_TURNING = "stop_turning"
    LOCKDOWN = "lockdown"
    HATCH = "hatch"


class BatchRequest(NamedTuple):
    species_id: str
    quantity: int


class ScheduledBatch(NamedTuple):
    species_id: str
    quantity: int
    insertion_date: date
    hatch_date: date


@dataclass(frozen=True)
class Timeline:
    """Key dates of one batch."""

    species_id: str
    insertion_date: date
    hatch_date: date
    stop_turning_date: date | None = None
    lockdown_date: date | None = None

    @property
    def duration_days(self) -> int:
        return (self.hatch_date - self.insertion_date).days

    @property
    def lock_date(self) -> date | None:
        """First day of the hands-off period, if the species defines one."""
        dates = [d for d in (self.stop_turning_date, self.lockdown_date) if d is not None]
        return min(dates) if dates else None

    def milestones(self) -> list[tuple[str, date]]:
        """(kind, date) pairs in chronological milestone order."""
        found = [(ReminderKind.INSERT, self.insertion_date)]
        if self.stop_turning_date is not None:
            found.append((ReminderKind.STOP_TURNING, self.stop_turning_date))
        if self.lockdown_date is not None:
            found.append((ReminderKind.LOCKDOWN, self.lockdown_date))
        found.append((ReminderKind.HATCH, self.hatch_date))
        return found


@dataclass(frozen=True)
class Reminder:
    """An action the user has to take on ``due_date``."""

    run_id: int | None
    run_name: str
    batch_id: int | None
    species_id: str
    quantity: int
    description: str
    kind: str
    due_date: date

    @property
    def message(self) -> str:
        eggs = f"{self.quantity} {self.species_id} egg{'s' if self.quantity != 1 else ''}"
        if self.description:
            eggs = f"{eggs} ({self.description})"
        if self.kind == ReminderKind.INSERT:
            return f"Insert {eggs} into {self.run_name}"
        if self.kind == ReminderKind.STOP_TURNING:
            return f"Stop turning {eggs} in {self.run_name}"
        if self.kind == ReminderKind.LOCKDOWN:
            return f"Lock down {eggs} in {self.run_name}"
        return f"{eggs} in {self.run_name} should hatch today"


def _validate(requests, species_table):
    """Check quantities, then species, before any date arithmetic."""
    checked = [BatchRequest(*r) for r in requests]
    for r in checked:
        if isinstance(r.quantity, bool) or not isinstance(r.quantity, int) or r.quantity < 1:
            raise InvalidQuantity(r.species_id, r.quantity)
    return [(r, species_table.lookup(r.species_id)) for r in checked]


def compute_insertion_dates(requests, target_hatch_date: date, species_table) -> list[ScheduledBatch]:
    """Work backwards from a common hatch date.

    Every batch gets ``insertion_date = target_hatch_date - duration``, so
    the whole run hatches on the same calendar day whatever the species mix.
    Raises :class:`InvalidQuantity` or :class:`UnknownSpecies` without
    returning a partial schedule.
    """
    scheduled = []
    for request, species in _validate(requests, species_table):
        insertion = target_hatch_date - timedelta(days=species.incubation_days)
        scheduled.append(ScheduledBatch(species.id, request.quantity, insertion, target_hatch_date))
    return scheduled


def compute_hatch_dates(requests, start_date: date, species_table) -> list[ScheduledBatch]:
    """Work forwards from a common insertion date."""
    scheduled = []
    for request, species in _validate(requests, species_table):
        hatch = start_date + timedelta(days=species.incubation_days)
        scheduled.append(ScheduledBatch(species.id, request.quantity, start_date, hatch))
    return scheduled


def insertion_plan(scheduled) -> list[ScheduledBatch]:
    """Scheduled batches in the order they go into the incubator."""
    return sorted(scheduled, key=lambda s: (s.insertion_date, s.species_id))


def build_timeline(species, insertion_date: date, hatch_date: date | None = None) -> Timeline:
    """Key dates for *species* inserted on *insertion_date*.

    A known *hatch_date* wins over the species' incubation length; the
    milestones are always offsets from the insertion date.
    """
    def offset(days):
        return insertion_date + timedelta(days=days) if days is not None else None

    if hatch_date is None:
        hatch_date = insertion_date + timedelta(days=species.incubation_days)

    return Timeline(
        species_id=species.id,
        insertion_date=insertion_date,
        hatch_date=hatch_date,
        stop_turning_date=offset(species.stop_turning_day),
        lockdown_date=offset(species.lockdown_day),
    )


def batch_timeline(batch, species_table) -> Timeline:
    """Timeline of a stored batch (anything with ``species_id`` and ``insertion_date``).

    The batch's own ``hatch_date`` is used when it has one, so editing the
    species table never moves a hatch that is already scheduled.
    """
    return build_timeline(
        species_table.lookup(batch.species_id),
        batch.insertion_date,
        getattr(batch, "hatch_date", None),
    )


def derive_phase(timeline: Timeline, today: date, completed: bool = False) -> str:
    if completed:
        return Phase.HATCHED
    if today < timeline.insertion_date:
        return Phase.SCHEDULED
    if today == timeline.hatch_date:
        return Phase.HATCHING
    if today > timeline.hatch_date:
        return Phase.OVERDUE
    lock = timeline.lock_date
    if lock is not None and today >= lock:
        return Phase.LOCKED
    return Phase.INCUBATING


def progress_fraction(timeline: Timeline, today: date) -> float:
    elapsed = (today - timeline.insertion_date).days
    fraction = elapsed / timeline.duration_days
    return min(1.0, max(0.0, fraction))


def incubation_day(timeline: Timeline, today: date) -> int:
    """Day number of the incubation, 1 on the insertion date and 0 before it."""
    return max(0, (today - timeline.insertion_date).days + 1)


def days_remaining(timeline: Timeline, today: date) -> int:
    return max(0, (timeline.hatch_date - today).days)


def batch_reminders(run, batch, timeline: Timeline, today: date) -> list[Reminder]:
    """Reminders for one batch falling on *today*."""
    if batch.completed:
        return []
    return [
        Reminder(
            run_id=getattr(run, "id", None),
            run_name=run.name,
            batch_id=getattr(batch, "id", None),
            species_id=timeline.species_id,
            quantity=batch.quantity,
            description=getattr(batch, "description", None) or "",
            kind=kind,
            due_date=today,
        )
        for kind, when in timeline.milestones()
        if when == today
    ]


def due_reminders(runs, today: date, species_table) -> list[Reminder]:
    """Every reminder due on *today* across *runs*."""
    reminders = []
    for run in runs:
        for batch in run.batches:
            timeline = batch_timeline(batch, species_table)
            reminders.extend(batch_reminders(run, batch, timeline, today))
    return reminders
