from hatchplan import db


class Batch(db.Model):
    """Eggs of one species within a run.

    The lifecycle phase is never stored here; it is derived from the dates
    and the ``completed`` flag whenever it is needed.
    """

    __tablename__ = "batches"

    id = db.Column(db.Integer, primary_key=True)
    run_id = db.Column(db.Integer, db.ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True)
    species_id = db.Column(db.String(50), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(200))
    insertion_date = db.Column(db.Date, nullable=False)
    hatch_date = db.Column(db.Date, nullable=False)
    # Set when the user recorded the day the eggs actually went in
    insertion_fixed = db.Column(db.Boolean, default=False, nullable=False)
    completed = db.Column(db.Boolean, default=False, nullable=False)
    completed_on = db.Column(db.Date)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    # Relationships
    run = db.relationship("Run", back_populates="batches")

    def __repr__(self):
        return f"<Batch {self.id} - {self.quantity} {self.species_id} in run {self.run_id}>"
