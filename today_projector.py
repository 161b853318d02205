"""Expand treatments into today's due dose instances.

The today list is never tracked on its own: it is recomputed from the
treatment and history stores after every change. A slot drops off the list
as soon as any outcome is recorded for it today.
"""

from datetime import date

from dose_models import DoseInstance, WhenNeeded
from dose_stores import HistoryStore, TreatmentStore
from recurrence import is_due

# Section buckets by hour, in display order.
BUCKETS_24H = {
    "Morning": range(0, 12),
    "Afternoon": range(12, 18),
    "Evening": range(18, 24),
}
BUCKETS_12H = {
    "AM": range(0, 12),
    "PM": range(12, 24),
}


def section_for(slot_time: tuple[int, int], clock_is_12: bool = False) -> str:
    """Return the section label for a slot time.

    Args:
        slot_time: (hour, minute) of the slot.
        clock_is_12: Use AM/PM sections instead of morning/afternoon/evening.
    """
    buckets = BUCKETS_12H if clock_is_12 else BUCKETS_24H
    for label, hours in buckets.items():
        if slot_time[0] in hours:
            return label
    raise ValueError(f"hour out of range: {slot_time!r}")


def project(treatments: TreatmentStore, history: HistoryStore, today: date) -> list[DoseInstance]:
    """Build today's due instances, sorted by (time, name).

    Names compare case-insensitively, as in ``TreatmentStore.sorted``.
    Sections are contiguous hour ranges, so this order is also section order.
    """
    due: list[DoseInstance] = []
    for treatment in treatments:
        if isinstance(treatment.frequency, WhenNeeded) or not is_due(treatment, today):
            continue
        for slot in treatment.slots:
            if history.has_record(treatment.name, slot.time, today):
                continue
            due.append(
                DoseInstance(
                    name=treatment.name,
                    unit=treatment.unit,
                    time=slot.time,
                    dose=slot.dose,
                    color=treatment.color,
                )
            )
    due.sort(key=lambda i: (i.time, i.name.lower()))
    return due


def sections(instances: list[DoseInstance], clock_is_12: bool = False) -> list[tuple[str, list[DoseInstance]]]:
    """Group already-sorted instances into (label, instances) sections."""
    grouped: list[tuple[str, list[DoseInstance]]] = []
    for inst in instances:
        label = section_for(inst.time, clock_is_12)
        if not grouped or grouped[-1][0] != label:
            grouped.append((label, []))
        grouped[-1][1].append(inst)
    return grouped
