"""Species incubation durations and milestone offsets."""

import json
from collections.abc import Mapping
from dataclasses import dataclass

from hatchplan.services.errors import UnknownSpecies


@dataclass(frozen=True)
class Species:
    """Incubation reference data for one species.

    Milestone offsets count days from insertion, so a chicken with
    ``stop_turning_day=18`` stops being turned on the 18th day after the
    eggs went in.
    """

    id: str
    name: str
    incubation_days: int
    stop_turning_day: int | None = None
    lockdown_day: int | None = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Species id is required")
        if isinstance(self.incubation_days, bool) or not isinstance(self.incubation_days, int) \
                or self.incubation_days < 1:
            raise ValueError(
                f"{self.id}: incubation_days must be a whole number >= 1, "
                f"got {self.incubation_days!r}"
            )
        for label in ("stop_turning_day", "lockdown_day"):
            offset = getattr(self, label)
            if offset is None:
                continue
            if not isinstance(offset, int) or not 1 <= offset < self.incubation_days:
                raise ValueError(
                    f"{self.id}: {label} must be between 1 and "
                    f"{self.incubation_days - 1}, got {offset!r}"
                )


DEFAULT_SPECIES = (
    Species("chicken", "Chicken", 21, stop_turning_day=18),
    Species("duck", "Duck", 28, stop_turning_day=25),
    Species("quail", "Quail", 18, stop_turning_day=15),
    Species("goose", "Goose", 30, stop_turning_day=27),
)


def _normalize(species_id) -> str:
    return str(species_id).strip().lower()


class SpeciesTable(Mapping):
    """Read-only lookup from species id to :class:`Species`."""

    def __init__(self, species=DEFAULT_SPECIES):
        self._species = {}
        for entry in species:
            key = _normalize(entry.id)
            if key in self._species:
                raise ValueError(f"Duplicate species id: {entry.id!r}")
            self._species[key] = entry

    def lookup(self, species_id) -> Species:
        """Return the species for *species_id* or raise :class:`UnknownSpecies`."""
        try:
            return self._species[_normalize(species_id)]
        except KeyError:
            raise UnknownSpecies(species_id) from None

    def choices(self) -> list[tuple[str, str]]:
        """(id, label) pairs for select boxes."""
        return [
            (s.id, f"{s.name} ({s.incubation_days} days)")
            for s in self._species.values()
        ]

    def __getitem__(self, species_id):
        return self._species[_normalize(species_id)]

    def __iter__(self):
        return iter(self._species)

    def __len__(self):
        return len(self._species)

    def __repr__(self):
        return f"<SpeciesTable {', '.join(self._species)}>"


def load_species_table(path=None) -> SpeciesTable:
    """Build the species table from a JSON file, or the defaults when *path* is empty.

    The file holds a list of objects with ``id``, ``name``,
    ``incubation_days`` and the optional ``stop_turning_day`` and
    ``lockdown_day`` keys. Only the species listed in the file are available.
    """
    if not path:
        return SpeciesTable()

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a list of species")

    species = []
    for item in raw:
        species.append(Species(
            id=_normalize(item["id"]),
            name=item.get("name") or str(item["id"]).title(),
            incubation_days=item["incubation_days"],
            stop_turning_day=item.get("stop_turning_day"),
            lockdown_day=item.get("lockdown_day"),
        ))
    return SpeciesTable(species)


def init_app(app) -> None:
    """Load the species table once and attach it to the app."""
    app.extensions["species_table"] = load_species_table(app.config.get("SPECIES_FILE"))


def current_species_table() -> SpeciesTable:
    from flask import current_app

    return current_app.extensions["species_table"]
