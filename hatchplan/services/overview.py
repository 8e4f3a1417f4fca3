"""Run-level summaries built on the scheduling engine."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date

from hatchplan.services.schedule import (
    Phase,
    Reminder,
    Timeline,
    batch_reminders,
    batch_timeline,
    days_remaining,
    derive_phase,
    incubation_day,
    progress_fraction,
)


@dataclass
class BatchStatus:
    batch: object
    timeline: Timeline
    phase: str
    progress: float
    day: int
    days_remaining: int
    reminders: list[Reminder] = field(default_factory=list)

    @property
    def phase_display(self) -> str:
        return Phase.label(self.phase)

    def to_dict(self) -> dict:
        return {
            "id": getattr(self.batch, "id", None),
            "species": self.timeline.species_id,
            "quantity": self.batch.quantity,
            "description": getattr(self.batch, "description", None) or "",
            "insertion_date": self.timeline.insertion_date.isoformat(),
            "hatch_date": self.timeline.hatch_date.isoformat(),
            "phase": self.phase,
            "progress": round(self.progress, 4),
            "day": self.day,
            "days_remaining": self.days_remaining,
            "reminders": [r.kind for r in self.reminders],
        }


@dataclass
class RunSummary:
    run: object
    today: date
    batches: list[BatchStatus]

    @property
    def start_date(self) -> date | None:
        """Date the first batch goes in."""
        if not self.batches:
            return None
        return min(b.timeline.insertion_date for b in self.batches)

    @property
    def final_hatch_date(self) -> date | None:
        if not self.batches:
            return None
        return max(b.timeline.hatch_date for b in self.batches)

    @property
    def total_days(self) -> int:
        if not self.batches:
            return 0
        return (self.final_hatch_date - self.start_date).days

    @property
    def current_day(self) -> int:
        """Day of the run, counted from the first insertion (1-based)."""
        if not self.batches:
            return 0
        return max(0, (self.today - self.start_date).days + 1)

    @property
    def progress(self) -> float:
        if not self.total_days:
            return 0.0
        elapsed = (self.today - self.start_date).days
        return min(1.0, max(0.0, elapsed / self.total_days))

    @property
    def reminders(self) -> list[Reminder]:
        return [r for b in self.batches for r in b.reminders]

    @property
    def is_action_day(self) -> bool:
        return any(b.reminders for b in self.batches)

    @property
    def is_aligned(self) -> bool:
        """True when every batch hatches on the same day."""
        return len({b.timeline.hatch_date for b in self.batches}) <= 1

    @property
    def is_finished(self) -> bool:
        """All batches marked hatched (an empty run is never finished)."""
        return bool(self.batches) and all(b.phase == Phase.HATCHED for b in self.batches)

    def to_status_dict(self) -> dict:
        """Return status info for JSON polling response."""
        return {
            "id": getattr(self.run, "id", None),
            "name": self.run.name,
            "mode": getattr(self.run, "mode", None),
            "today": self.today.isoformat(),
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "final_hatch_date": self.final_hatch_date.isoformat() if self.final_hatch_date else None,
            "current_day": self.current_day,
            "total_days": self.total_days,
            "progress": round(self.progress, 4),
            "is_action_day": self.is_action_day,
            "is_aligned": self.is_aligned,
            "batches": [b.to_dict() for b in self.batches],
        }


def summarize_batch(run, batch, today: date, species_table) -> BatchStatus:
    timeline = batch_timeline(batch, species_table)
    return BatchStatus(
        batch=batch,
        timeline=timeline,
        phase=derive_phase(timeline, today, bool(batch.completed)),
        progress=progress_fraction(timeline, today),
        day=incubation_day(timeline, today),
        days_remaining=days_remaining(timeline, today),
        reminders=batch_reminders(run, batch, timeline, today),
    )


def summarize_run(run, today: date, species_table) -> RunSummary:
    return RunSummary(
        run=run,
        today=today,
        batches=[summarize_batch(run, b, today, species_table) for b in run.batches],
    )


def summarize_runs(runs, today: date, species_table) -> list[RunSummary]:
    return [summarize_run(run, today, species_table) for run in runs]


def phase_totals(summaries) -> dict:
    """Egg counts per phase across all summaries, in lifecycle order."""
    counts = Counter()
    for summary in summaries:
        for status in summary.batches:
            counts[status.phase] += status.batch.quantity
    return {value: counts[value] for value, _ in Phase.CHOICES}


def eggs_by_species(summaries, include_hatched: bool = False) -> dict:
    counts = Counter()
    for summary in summaries:
        for status in summary.batches:
            if status.phase == Phase.HATCHED and not include_hatched:
                continue
            counts[status.timeline.species_id] += status.batch.quantity
    return dict(counts.most_common())
