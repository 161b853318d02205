"""Record ``missed`` outcomes for due doses on days the app did not see.

Each dosage slot carries an ``updated`` watermark. A pass looks at every day
strictly after the watermark's day and strictly before today, records a
missed entry for each day the treatment was due and nothing was recorded, and
then moves the watermark to "now". Today itself is never backfilled: its
doses stay on the today list until the user acts or the day ends.

The pass is idempotent: re-running it for the same day adds nothing, both
because the watermark has moved and because existing (name, time, day)
records are skipped.
"""

import logging
from datetime import date, datetime, timedelta

from dose_dates import at_time, date_difference
from dose_models import MISSED, HistoryEntry
from dose_stores import HistoryStore, TreatmentStore
from recurrence import is_due

logger = logging.getLogger(__name__)


def missed_days(last_synced: date, today: date) -> list[date]:
    """Days strictly between ``last_synced`` and ``today``, ascending."""
    return date_difference(last_synced + timedelta(days=1), today - timedelta(days=1))


def backfill(treatments: TreatmentStore, history: HistoryStore, now: datetime) -> list[HistoryEntry]:
    """Synthesize missed entries for every slot and advance the watermarks.

    Args:
        treatments: Treatment store; only slot watermarks are modified.
        history: History store the missed entries are appended to.
        now: Current local time; its day is "today".

    Returns:
        The entries appended by this pass, oldest first per slot.
    """
    today = now.date()
    added: list[HistoryEntry] = []

    for treatment in treatments:
        for slot in treatment.slots:
            last_day = slot.updated.date()
            for day in missed_days(last_day, today):
                if not (last_day < day < today) or not is_due(treatment, day):
                    continue
                if history.has_record(treatment.name, slot.time, day):
                    continue
                entry = HistoryEntry(
                    name=treatment.name,
                    unit=treatment.unit,
                    color=treatment.color,
                    outcome=MISSED,
                    time=slot.time,
                    dose=slot.dose,
                    date=at_time(day, *slot.time),
                )
                if history.append(entry):
                    added.append(entry)
            # Watermark only moves forward, even when nothing was missed.
            slot.updated = max(slot.updated, now)

    if added:
        logger.info("Recorded %d missed dose(s) up to %s", len(added), today)
    return added
