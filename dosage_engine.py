"""Orchestration of stores, reconciliation and persistence.

The engine owns one TreatmentStore and one HistoryStore, wires the
InventoryLedger to history changes, and persists both after every mutation.
Views read its projections (``today()``, ``low_stock()``, the stores) and
call its operations; nothing here touches widgets or timers.

Failure policy: loading degrades to empty stores, saving failures are logged
and leave the in-memory state as is (the next save catches up).
"""

import logging
from datetime import datetime
from typing import Callable, Iterable

from dose_dates import local_now
from dose_errors import ParseError, StorageError, ValidationError
from dose_models import (
    SKIPPED,
    TAKEN,
    DoseInstance,
    HistoryEntry,
    Treatment,
    entry_from_record,
    entry_to_record,
    treatment_from_record,
    treatment_to_record,
)
from dose_stores import HistoryStore, TreatmentStore
from inventory_ledger import InventoryLedger, low_stock
from json_storage import HISTORY, TREATMENTS, JsonStorage
from missed_backfill import backfill
from today_projector import project

logger = logging.getLogger(__name__)


class DosageEngine:
    """Single-threaded owner of the treatment and history stores.

    Args:
        storage: Gateway used to load and save both stores.
        clock: Returns the current local time; injectable for tests.
    """

    def __init__(self, storage: JsonStorage, clock: Callable[[], datetime] = local_now) -> None:
        self.storage = storage
        self.clock = clock
        self.treatments = TreatmentStore()
        self.history = HistoryStore()
        self.ledger = InventoryLedger(self.treatments, clock)
        self.history.subscribe(self.ledger)

    # ---------- load / save ----------
    def start(self) -> list[HistoryEntry]:
        """Load both stores and run the first reconciliation pass.

        Returns:
            Missed entries synthesized for the days the app was not running.
        """
        self.load()
        return self.reconcile()

    def load(self) -> None:
        today = self.clock().date()

        treatments = []
        for raw in self._load_records(TREATMENTS):
            try:
                treatments.append(treatment_from_record(raw, today))
            except ParseError as exc:
                logger.warning("Skipping treatment record: %s", exc)
        self.treatments.load(treatments)

        entries = []
        for raw in self._load_records(HISTORY):
            try:
                entries.append(entry_from_record(raw))
            except ParseError as exc:
                logger.warning("Skipping history record: %s", exc)
        self.history.load(entries)

        logger.info("Loaded %d treatment(s) and %d history entries", len(treatments), len(entries))

    def _load_records(self, kind: str) -> list[dict]:
        try:
            return self.storage.load(kind)
        except ParseError as exc:
            logger.warning("Failed to load %s contents, starting empty: %s", kind, exc)
            self.storage.quarantine(kind, self.clock())
        except StorageError as exc:
            logger.warning("Failed to read %s file, starting empty: %s", kind, exc)
        return []

    def save(self) -> bool:
        """Persist both stores. Returns False if any file could not be written."""
        ok = True
        documents = (
            (TREATMENTS, [treatment_to_record(t) for t in self.treatments]),
            (HISTORY, [entry_to_record(e) for e in self.history]),
        )
        for kind, records in documents:
            try:
                self.storage.save(kind, records)
            except StorageError as exc:
                logger.warning("Could not save %s: %s", kind, exc)
                ok = False
        return ok

    # ---------- reconciliation ----------
    def reconcile(self) -> list[HistoryEntry]:
        """Backfill missed doses up to yesterday and persist.

        Runs at startup and at every local midnight; safe to repeat.
        """
        missed = backfill(self.treatments, self.history, self.clock())
        self.save()
        return missed

    def today(self) -> list[DoseInstance]:
        """Due dose instances for the current day, sorted for display."""
        return project(self.treatments, self.history, self.clock().date())

    def low_stock(self) -> list[Treatment]:
        return low_stock(self.treatments)

    # ---------- outcomes ----------
    def record(self, instances: Iterable[DoseInstance], outcome: str) -> list[HistoryEntry]:
        """Record the user's taken/skipped choice for a set of due instances.

        Each instance gets one history entry dated now, and the matching slot
        watermarks move to now.

        Raises:
            ValueError: if ``outcome`` is not taken or skipped.
        """
        if outcome not in (TAKEN, SKIPPED):
            raise ValueError(f"cannot record outcome {outcome!r}")
        now = self.clock()
        added: list[HistoryEntry] = []
        for inst in instances:
            entry = HistoryEntry(
                name=inst.name,
                unit=inst.unit,
                color=inst.color,
                outcome=outcome,
                time=inst.time,
                dose=inst.dose,
                date=now,
            )
            if not self.history.append(entry):
                continue
            added.append(entry)
            treatment = self.treatments.get(inst.name)
            slot = treatment.slot_at(inst.time) if treatment else None
            if slot is not None:
                slot.updated = max(slot.updated, now)
        self.save()
        return added

    def add_one_time_entry(self, name: str, unit: str, dose: float, color: str = "default") -> HistoryEntry:
        """Record an ad hoc taken dose at the current time.

        Bypasses recurrence and never touches slot watermarks.

        Raises:
            ValidationError: on an empty name/unit, or if the same name was
                already recorded at this minute today.
        """
        if not name.strip():
            raise ValidationError("Empty name", field="name")
        if not unit.strip():
            raise ValidationError("Empty unit", field="unit")
        now = self.clock().replace(second=0, microsecond=0)
        entry = HistoryEntry(
            name=name.strip(),
            unit=unit.strip(),
            color=color,
            outcome=TAKEN,
            time=(now.hour, now.minute),
            dose=dose,
            date=now,
        )
        if not self.history.append(entry):
            raise ValidationError("Already recorded at this time", field="name")
        self.save()
        return entry

    def remove_entry(self, entry: HistoryEntry) -> None:
        """Delete a history entry; a same-day taken dose returns to stock."""
        self.history.remove(entry)
        self.save()

    # ---------- treatments ----------
    def add_treatment(self, treatment: Treatment) -> None:
        """Validate and store a new treatment.

        Raises:
            ValidationError: the store is left unchanged.
        """
        self.treatments.add(treatment)
        self.save()

    def update_treatment(self, name: str, treatment: Treatment) -> None:
        """Replace the treatment called ``name`` with an edited definition.

        Slots whose time did not change keep their sync watermark, so an edit
        does not hide days that still need backfilling.

        Raises:
            KeyError: if no treatment is called ``name``.
            ValidationError: the store is left unchanged.
        """
        current = self.treatments.get(name)
        if current is None:
            raise KeyError(name)
        for slot in treatment.slots:
            previous = current.slot_at(slot.time)
            if previous is not None:
                slot.updated = previous.updated
        self.treatments.replace(name, treatment)
        self.save()

    def delete_treatment(self, name: str) -> Treatment:
        """Remove a treatment. Its history entries are kept as recorded."""
        removed = self.treatments.remove(name)
        self.save()
        return removed
