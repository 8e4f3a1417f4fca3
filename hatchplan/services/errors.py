"""Errors raised by the scheduling engine."""


class ScheduleError(ValueError):
    """Base class for scheduling failures reported back to the caller."""


class UnknownSpecies(ScheduleError, LookupError):
    """A batch references a species id missing from the duration table."""

    def __init__(self, species_id):
        self.species_id = species_id
        super().__init__(f"Unknown species: {species_id!r}")


class InvalidQuantity(ScheduleError):
    """A batch was requested with a non-positive egg count."""

    def __init__(self, species_id, quantity):
        self.species_id = species_id
        self.quantity = quantity
        super().__init__(
            f"Quantity for {species_id!r} must be a positive whole number, got {quantity!r}"
        )
