from hatchplan import db


class RunMode:
    """How the batches of a run are lined up."""
    HATCH = "hatch"
    START = "start"

    CHOICES = [
        (HATCH, "Hatch together on the target date"),
        (START, "Start together on the target date"),
    ]


class Run(db.Model):
    """An incubation run: batches scheduled around one common target date."""

    __tablename__ = "runs"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    mode = db.Column(db.String(10), default=RunMode.HATCH, nullable=False)
    # Common hatch date in hatch mode, common insertion date in start mode
    target_date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    # Relationships
    batches = db.relationship(
        "Batch",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="Batch.id",
    )

    @property
    def aligns_hatch(self):
        return self.mode == RunMode.HATCH

    @property
    def mode_display(self):
        for value, label in RunMode.CHOICES:
            if value == self.mode:
                return label
        return self.mode

    @property
    def egg_count(self):
        return sum(b.quantity for b in self.batches)

    def __repr__(self):
        return f"<Run {self.id}: {self.name} ({self.mode} {self.target_date})>"
