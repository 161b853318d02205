"""Keep treatment stock counts in step with the history log."""

import warnings
from datetime import datetime
from typing import Callable, Iterable

from dose_dates import local_now, same_day
from dose_errors import ReconciliationWarning
from dose_models import TAKEN, HistoryEntry, Treatment
from dose_stores import ADDED, REMOVED, HistoryChange, TreatmentStore


class InventoryLedger:
    """Apply and reverse dose quantities when history entries come and go.

    Subscribe an instance to a :class:`~dose_stores.HistoryStore`:

        history.subscribe(InventoryLedger(treatments))

    Only ``taken`` entries move stock. A removal is reversed only when the
    entry was recorded today; older history edits leave stock alone.
    """

    def __init__(self, treatments: TreatmentStore, clock: Callable[[], datetime] = local_now) -> None:
        self.treatments = treatments
        self.clock = clock

    def __call__(self, change: HistoryChange) -> None:
        if change.kind == ADDED:
            self.apply(change.entry)
        elif change.kind == REMOVED:
            self.reverse(change.entry)

    def apply(self, entry: HistoryEntry) -> bool:
        """Decrement stock for a taken entry. Returns True if stock changed."""
        if entry.outcome != TAKEN:
            return False
        treatment = self._tracked(entry)
        if treatment is None:
            return False
        treatment.inventory.current -= entry.dose
        return True

    def reverse(self, entry: HistoryEntry) -> bool:
        """Give back stock for a same-day taken entry. Returns True if stock changed."""
        if entry.outcome != TAKEN or not same_day(entry.date, self.clock()):
            return False
        treatment = self._tracked(entry)
        if treatment is None:
            return False
        treatment.inventory.current += entry.dose
        return True

    def _tracked(self, entry: HistoryEntry) -> Treatment | None:
        treatment = self.treatments.get(entry.name)
        if treatment is None:
            # Treatment deleted after the dose was recorded.
            warnings.warn(
                f"no treatment named {entry.name!r}; inventory left unchanged",
                ReconciliationWarning,
                stacklevel=3,
            )
            return None
        if not treatment.inventory.enabled:
            return None
        return treatment


def low_stock(treatments: Iterable[Treatment]) -> list[Treatment]:
    """Treatments whose tracked stock is at or below the reminder threshold."""
    return [t for t in treatments if t.inventory.is_low]
