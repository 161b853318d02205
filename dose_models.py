"""Data model for treatments, history entries and today's dose instances.

Records on disk look like this (both files wrap the list as ``{"meds": [...]}``):

    treatment:
        {"name": "Aspirin", "unit": "pill",
         "info": {"frequency": "cycle", "days": [], "cycle": [3, 4, 0],
                  "cycleAnchor": "2024-05-01", "color": "red", "icon": "pill",
                  "notes": "", "dosage": [{"time": [8, 0], "dose": 1,
                                           "updated": "2024-05-01T08:00:00"}],
                  "inventory": {"enabled": true, "current": 30, "reminder": 5},
                  "duration": {"enabled": false, "start": "2024-05-01",
                               "end": null}}}

    history entry:
        {"name": "Aspirin", "unit": "pill", "color": "red", "taken": "taken",
         "info": {"time": [8, 0], "dose": 1}, "date": "2024-05-01T08:03:12"}

Files written by the earlier desktop app use ``_name``/``_unit``/``_info``/
``_taken``/``_date``/``_color`` keys and ``yes``/``no``/``miss`` outcomes;
both spellings are read, only the plain one is written.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Union

from dose_dates import format_date, parse_day, parse_timestamp, to_timestamp
from dose_errors import ParseError

TAKEN = "taken"
SKIPPED = "skipped"
MISSED = "missed"
OUTCOMES = (TAKEN, SKIPPED, MISSED)

# Outcome tags used by older files.
LEGACY_OUTCOMES = {"yes": TAKEN, "no": SKIPPED, "miss": MISSED}


# ---------------- frequency variants ----------------
@dataclass(frozen=True)
class Daily:
    pass


@dataclass(frozen=True)
class SpecificDays:
    days: frozenset[int]


@dataclass(frozen=True)
class Cycle:
    """Repeating run of ``active`` due days followed by ``inactive`` off days.

    ``current`` is the phase position on ``anchor``; the phase of any other
    day is derived from the whole-day offset to the anchor.
    """

    active: int
    inactive: int
    current: int
    anchor: date

    @property
    def period(self) -> int:
        return self.active + self.inactive


@dataclass(frozen=True)
class WhenNeeded:
    pass


Frequency = Union[Daily, SpecificDays, Cycle, WhenNeeded]

FREQUENCY_TAGS = {
    Daily: "daily",
    SpecificDays: "specific-days",
    Cycle: "cycle",
    WhenNeeded: "when-needed",
}


def frequency_tag(frequency: Frequency) -> str:
    return FREQUENCY_TAGS[type(frequency)]


# ---------------- treatments ----------------
@dataclass
class DoseSlot:
    """One due time within a day.

    ``updated`` is the slot's last-synchronized watermark: every day up to and
    including its calendar day has already been reconciled.
    """

    time: tuple[int, int]
    dose: float
    updated: datetime


@dataclass
class Inventory:
    enabled: bool = False
    current: float = 0
    reminder: float = 0

    @property
    def is_low(self) -> bool:
        return self.enabled and self.current <= self.reminder


@dataclass
class Duration:
    """Date bounds of a treatment.

    ``start`` is always set: with ``enabled`` false it records the day the
    treatment was created.
    """

    start: date
    end: date | None = None
    enabled: bool = False

    def contains(self, day: date) -> bool:
        if not self.enabled:
            return True
        if day < self.start:
            return False
        return self.end is None or day <= self.end


@dataclass
class Treatment:
    name: str
    unit: str
    frequency: Frequency
    slots: list[DoseSlot]
    duration: Duration
    inventory: Inventory = field(default_factory=Inventory)
    color: str = "default"
    icon: str = "pill"
    notes: str = ""

    @property
    def created(self) -> date:
        return self.duration.start

    def slot_at(self, slot_time: tuple[int, int]) -> DoseSlot | None:
        for slot in self.slots:
            if slot.time == tuple(slot_time):
                return slot
        return None


def new_treatment(
    name: str,
    unit: str,
    frequency: Frequency,
    doses: list[tuple[tuple[int, int], float]],
    now: datetime,
    inventory: Inventory | None = None,
    duration: Duration | None = None,
    color: str = "default",
    icon: str = "pill",
    notes: str = "",
) -> Treatment:
    """Build a treatment as the editor creates it.

    Every slot starts synchronized at ``now``; without an explicit duration
    the creation day is recorded as its start.
    """
    return Treatment(
        name=name,
        unit=unit,
        frequency=frequency,
        slots=[DoseSlot(time=(int(t[0]), int(t[1])), dose=dose, updated=now) for t, dose in doses],
        duration=duration or Duration(start=now.date()),
        inventory=inventory or Inventory(),
        color=color,
        icon=icon,
        notes=notes,
    )


# ---------------- history / today ----------------
@dataclass(frozen=True)
class HistoryEntry:
    """An outcome record; name/unit/color are a snapshot of the treatment."""

    name: str
    unit: str
    color: str
    outcome: str
    time: tuple[int, int]
    dose: float
    date: datetime

    @property
    def key(self) -> tuple[str, tuple[int, int], date]:
        """Slot-day identity: at most one entry may exist per key."""
        return (self.name, self.time, self.date.date())


@dataclass(frozen=True)
class DoseInstance:
    """One due slot on the current day. Never persisted."""

    name: str
    unit: str
    time: tuple[int, int]
    dose: float
    color: str = "default"

    @property
    def label(self) -> str:
        return f"{self.name}  {format_dose(self.dose)} {self.unit}"


def format_dose(dose: float) -> str:
    return f"{dose:g}"


def format_slot_time(slot_time: tuple[int, int], clock_is_12: bool = False) -> str:
    hh, mm = slot_time
    if not clock_is_12:
        return f"{hh:02d}:{mm:02d}"
    suffix = "AM" if hh < 12 else "PM"
    return f"{hh % 12 or 12}:{mm:02d} {suffix}"


# ---------------- record mapping ----------------
def _pick(raw: dict, key: str, default=None):
    """Read ``key`` or its legacy underscore spelling."""
    if key in raw:
        return raw[key]
    return raw.get(f"_{key}", default)


def _parse_time(raw) -> tuple[int, int]:
    hh, mm = int(raw[0]), int(raw[1])
    if not (0 <= hh < 24 and 0 <= mm < 60):
        raise ValueError(f"time out of range: {raw!r}")
    return (hh, mm)


def _parse_amount(raw) -> float:
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"not a finite amount: {raw!r}")
    return value


def _parse_frequency(info: dict, fallback_anchor: date) -> Frequency:
    tag = info.get("frequency", "daily")
    if tag == "daily":
        return Daily()
    if tag == "specific-days":
        return SpecificDays(frozenset(int(d) for d in info.get("days") or []))
    if tag == "cycle":
        active, inactive, current = (int(v) for v in info["cycle"][:3])
        if active < 1 or inactive < 0:
            raise ValueError(f"invalid cycle {info['cycle']!r}")
        anchor = info.get("cycleAnchor")
        return Cycle(
            active=active,
            inactive=inactive,
            current=current % (active + inactive),
            anchor=parse_day(anchor) if anchor else fallback_anchor,
        )
    if tag == "when-needed":
        return WhenNeeded()
    raise ValueError(f"unknown frequency {tag!r}")


def treatment_from_record(raw: dict, today: date) -> Treatment:
    """Build a Treatment from a stored record.

    Args:
        raw: One element of the treatments file's ``meds`` list.
        today: Used when the record lacks a creation date.

    Raises:
        ParseError: if the record is malformed.
    """
    try:
        name = _pick(raw, "name")
        if not name:
            raise ValueError("missing name")
        info = _pick(raw, "info")
        never_synced = datetime.combine(today, datetime.min.time())
        slots = [
            DoseSlot(
                time=_parse_time(d["time"]),
                dose=_parse_amount(d["dose"]),
                updated=parse_timestamp(d["updated"]) if d.get("updated") else never_synced,
            )
            for d in info.get("dosage") or []
        ]
        slots.sort(key=lambda s: s.time)

        dur = info.get("duration") or {}
        duration = Duration(
            start=parse_day(dur["start"]) if dur.get("start") else today,
            end=parse_day(dur["end"]) if dur.get("end") else None,
            enabled=bool(dur.get("enabled", False)),
        )

        # Older files have no cycle anchor: treat the last sync as day of ``current``.
        last_sync = max((s.updated.date() for s in slots), default=today)

        inv = info.get("inventory") or {}
        return Treatment(
            name=str(name),
            unit=str(_pick(raw, "unit", "")),
            frequency=_parse_frequency(info, last_sync),
            slots=slots,
            duration=duration,
            inventory=Inventory(
                enabled=bool(inv.get("enabled", False)),
                current=_parse_amount(inv.get("current", 0)),
                reminder=_parse_amount(inv.get("reminder", 0)),
            ),
            color=info.get("color") or "default",
            icon=info.get("icon") or "pill",
            notes=info.get("notes") or "",
        )
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
        raise ParseError(f"malformed treatment record: {exc}") from exc


def treatment_to_record(treatment: Treatment) -> dict:
    freq = treatment.frequency
    info = {
        "notes": treatment.notes,
        "frequency": frequency_tag(freq),
        "color": treatment.color,
        "icon": treatment.icon,
        "days": sorted(freq.days) if isinstance(freq, SpecificDays) else [],
        "cycle": [freq.active, freq.inactive, freq.current] if isinstance(freq, Cycle) else [],
        "dosage": [
            {"time": list(s.time), "dose": s.dose, "updated": to_timestamp(s.updated)}
            for s in treatment.slots
        ],
        "inventory": {
            "enabled": treatment.inventory.enabled,
            "current": treatment.inventory.current,
            "reminder": treatment.inventory.reminder,
        },
        "duration": {
            "enabled": treatment.duration.enabled,
            "start": format_date(treatment.duration.start),
            "end": format_date(treatment.duration.end) if treatment.duration.end else None,
        },
    }
    if isinstance(freq, Cycle):
        info["cycleAnchor"] = format_date(freq.anchor)
    return {"name": treatment.name, "unit": treatment.unit, "info": info}


def entry_from_record(raw: dict) -> HistoryEntry:
    """Build a HistoryEntry from a stored record.

    Raises:
        ParseError: if the record is malformed or its outcome is unknown.
    """
    try:
        name = _pick(raw, "name")
        if not name:
            raise ValueError("missing name")
        outcome = str(_pick(raw, "taken"))
        outcome = LEGACY_OUTCOMES.get(outcome, outcome)
        if outcome not in OUTCOMES:
            raise ValueError(f"unknown outcome {outcome!r}")
        info = _pick(raw, "info")
        return HistoryEntry(
            name=str(name),
            unit=str(_pick(raw, "unit", "")),
            color=str(_pick(raw, "color") or "default"),
            outcome=outcome,
            time=_parse_time(info["time"]),
            dose=_parse_amount(info["dose"]),
            date=parse_timestamp(_pick(raw, "date")),
        )
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ParseError(f"malformed history record: {exc}") from exc


def entry_to_record(entry: HistoryEntry) -> dict:
    return {
        "name": entry.name,
        "unit": entry.unit,
        "color": entry.color,
        "taken": entry.outcome,
        "info": {"time": list(entry.time), "dose": entry.dose},
        "date": to_timestamp(entry.date),
    }
