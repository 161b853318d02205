"""In-memory repositories for treatments and dose history.

Both stores are single-writer: every mutation happens on the UI thread. The
history store publishes a typed :class:`HistoryChange` to its listeners after
each mutation; listeners must not mutate the history store themselves.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Iterator

from dose_errors import ValidationError
from dose_models import Cycle, HistoryEntry, Treatment, WhenNeeded

logger = logging.getLogger(__name__)

ADDED = "added"
REMOVED = "removed"


# ---------------- validation ----------------
def validate_treatment(treatment: Treatment, others: Iterable[Treatment]) -> None:
    """Reject an invalid treatment before it reaches the store.

    Args:
        treatment: Candidate definition (new or edited).
        others: Every other stored treatment (the one being edited excluded).

    Raises:
        ValidationError: on an empty name or unit, a case-insensitive duplicate
            name, a duplicated dose time, a missing dosage, an invalid cycle or
            a duration ending before it starts.
    """
    name = treatment.name.strip()
    if not name:
        raise ValidationError("Empty name", field="name")
    if not treatment.unit.strip():
        raise ValidationError("Empty unit", field="unit")

    lowered = name.lower()
    for other in others:
        if other.name.strip().lower() == lowered:
            raise ValidationError("Name already exists", field="name")

    times = [slot.time for slot in treatment.slots]
    if len(set(times)) != len(times):
        raise ValidationError("Duplicated time", field="dosage")
    if not times and not isinstance(treatment.frequency, WhenNeeded):
        raise ValidationError("At least one dose time is required", field="dosage")

    freq = treatment.frequency
    if isinstance(freq, Cycle):
        if freq.active < 1 or freq.inactive < 0:
            raise ValidationError("Cycle needs at least one active day", field="cycle")
        if not 0 <= freq.current < freq.period:
            raise ValidationError("Cycle position out of range", field="cycle")

    dur = treatment.duration
    if dur.enabled and dur.end is not None and dur.end < dur.start:
        raise ValidationError("Duration ends before it starts", field="duration")


class TreatmentStore:
    """Source of truth for treatment definitions."""

    def __init__(self, treatments: Iterable[Treatment] = ()) -> None:
        self._items: list[Treatment] = list(treatments)

    def __iter__(self) -> Iterator[Treatment]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def load(self, treatments: Iterable[Treatment]) -> None:
        """Replace the contents with stored definitions, as-is."""
        self._items = list(treatments)

    def get(self, name: str) -> Treatment | None:
        """Exact, case-sensitive lookup by name."""
        for item in self._items:
            if item.name == name:
                return item
        return None

    def sorted(self) -> list[Treatment]:
        """Treatments in alphabetical order, as the list view shows them."""
        return sorted(self._items, key=lambda t: t.name.lower())

    def add(self, treatment: Treatment) -> None:
        validate_treatment(treatment, self._items)
        treatment.name = treatment.name.strip()
        treatment.unit = treatment.unit.strip()
        treatment.slots.sort(key=lambda s: s.time)
        self._items.append(treatment)

    def replace(self, name: str, treatment: Treatment) -> None:
        """Swap the treatment called ``name`` for an edited definition.

        Raises:
            KeyError: if no treatment is called ``name``.
            ValidationError: if the edited definition is invalid.
        """
        current = self.get(name)
        if current is None:
            raise KeyError(name)
        validate_treatment(treatment, [t for t in self._items if t is not current])
        treatment.name = treatment.name.strip()
        treatment.unit = treatment.unit.strip()
        treatment.slots.sort(key=lambda s: s.time)
        self._items[self._items.index(current)] = treatment

    def remove(self, name: str) -> Treatment:
        current = self.get(name)
        if current is None:
            raise KeyError(name)
        self._items.remove(current)
        return current


# ---------------- history ----------------
@dataclass(frozen=True)
class HistoryChange:
    kind: str  # ADDED or REMOVED
    entry: HistoryEntry


HistoryListener = Callable[[HistoryChange], None]


class HistoryStore:
    """Ordered log of outcome records with slot-day duplicate suppression."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []
        self._keys: Counter = Counter()
        self._listeners: list[HistoryListener] = []
        self._notifying = False

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def subscribe(self, listener: HistoryListener) -> None:
        self._listeners.append(listener)

    def load(self, entries: Iterable[HistoryEntry]) -> None:
        """Replace the contents without notifying listeners.

        Used at startup: stored entries were already accounted for in the
        stored inventory counts.
        """
        self._check_not_notifying()
        self._entries = list(entries)
        self._keys = Counter(e.key for e in self._entries)

    def has_record(self, name: str, slot_time: tuple[int, int], day: date) -> bool:
        """True if any outcome is recorded for this treatment slot on ``day``."""
        return self._keys[(name, tuple(slot_time), day)] > 0

    def append(self, entry: HistoryEntry) -> bool:
        """Append an entry and notify listeners.

        Returns:
            False (and leaves the store untouched) if an entry for the same
            (name, time, day) already exists.
        """
        self._check_not_notifying()
        if self._keys[entry.key] > 0:
            logger.warning("Ignoring duplicate history entry for %s at %s", entry.name, entry.date)
            return False
        self._entries.append(entry)
        self._keys[entry.key] += 1
        self._publish(HistoryChange(ADDED, entry))
        return True

    def remove(self, entry: HistoryEntry) -> None:
        """Remove one entry and notify listeners.

        Raises:
            ValueError: if the entry is not in the store.
        """
        self._check_not_notifying()
        self._entries.remove(entry)
        self._keys[entry.key] -= 1
        if self._keys[entry.key] <= 0:
            del self._keys[entry.key]
        self._publish(HistoryChange(REMOVED, entry))

    def newest_first(self) -> list[HistoryEntry]:
        return sorted(self._entries, key=lambda e: e.date, reverse=True)

    def _publish(self, change: HistoryChange) -> None:
        self._notifying = True
        try:
            for listener in self._listeners:
                listener(change)
        finally:
            self._notifying = False

    def _check_not_notifying(self) -> None:
        if self._notifying:
            raise RuntimeError("history store mutated from inside a change listener")
