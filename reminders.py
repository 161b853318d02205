"""Scheduled reminders: per-dose notifications and the midnight rollover.

Timers are keyed by a stable event id that can be re-derived from the
treatment slot and the day, so re-arming everything after a change or at
midnight replaces pending timers instead of stacking duplicates.

The timer backend is anything with Tk's ``after(ms, func)`` /
``after_cancel(handle)`` pair; the Tk root window is used in the app.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, Protocol

from dose_dates import at_time, format_date, seconds_until_next_midnight
from dose_models import DoseInstance, format_dose

logger = logging.getLogger(__name__)

MIDNIGHT_ID = "midnight"
LOW_STOCK_ID = "low-stock"
REMINDER_TITLE = "Dosage reminder"

PRIORITY_NORMAL = "normal"
PRIORITY_URGENT = "urgent"


class Timer(Protocol):
    def after(self, ms: int, func: Callable[[], None]) -> Any: ...

    def after_cancel(self, handle: Any) -> None: ...


class NotificationSink(Protocol):
    def notify(self, event_id: str, title: str, body: str, priority: str) -> None: ...


class ReminderScheduler:
    """Cancellable one-shot timers keyed by event id.

    Scheduling an id that is already pending cancels the old timer first.
    """

    def __init__(self, timer: Timer) -> None:
        self.timer = timer
        self.pending: dict[str, Any] = {}

    def schedule(self, event_id: str, delay_ms: int, callback: Callable[[], None]) -> None:
        self.cancel(event_id)
        self.pending[event_id] = self.timer.after(max(0, int(delay_ms)), lambda: self._fire(event_id, callback))

    def cancel(self, event_id: str) -> None:
        handle = self.pending.pop(event_id, None)
        if handle is not None:
            self.timer.after_cancel(handle)

    def cancel_all(self, keep: Iterable[str] = ()) -> None:
        keep = set(keep)
        for event_id in [e for e in self.pending if e not in keep]:
            self.cancel(event_id)

    def _fire(self, event_id: str, callback: Callable[[], None]) -> None:
        self.pending.pop(event_id, None)
        callback()


class Notifier:
    """Deliver notifications to a sink at most once per event id."""

    def __init__(self, sink: NotificationSink, priority: str = PRIORITY_NORMAL) -> None:
        self.sink = sink
        self.priority = priority
        self.delivered: set[str] = set()

    def notify(self, event_id: str, title: str, body: str) -> bool:
        """Send unless ``event_id`` was already delivered. Returns True if sent."""
        if event_id in self.delivered:
            return False
        self.sink.notify(event_id, title, body, self.priority)
        self.delivered.add(event_id)
        return True

    def forget(self, event_id: str) -> None:
        """Allow an event id to be delivered again (e.g. stock ran low again)."""
        self.delivered.discard(event_id)


def dose_event_id(instance: DoseInstance, day: date) -> str:
    """Stable id of one dose instance on one day."""
    return json.dumps(
        {
            "name": instance.name,
            "time": list(instance.time),
            "dose": instance.dose,
            "day": format_date(day),
        },
        sort_keys=True,
    )


def ms_until(now: datetime, slot_time: tuple[int, int]) -> int:
    """Milliseconds from ``now`` to today's slot time (negative if past)."""
    return int((at_time(now.date(), *slot_time) - now).total_seconds() * 1000)


def arm_dose_reminders(
    scheduler: ReminderScheduler,
    notifier: Notifier,
    instances: Iterable[DoseInstance],
    now: datetime,
    is_backgrounded: Callable[[], bool],
) -> list[str]:
    """Arm one reminder per due instance whose time has not passed yet.

    Timers for dose ids no longer in ``instances`` are cancelled. A reminder
    only reaches the sink if the window is backgrounded when it fires.

    Returns:
        Event ids armed by this call.
    """
    armed: list[str] = []
    for inst in instances:
        delay = ms_until(now, inst.time)
        if delay < 0:
            continue
        event_id = dose_event_id(inst, now.date())
        if event_id in notifier.delivered:
            continue

        def fire(inst=inst, event_id=event_id) -> None:
            if is_backgrounded():
                notifier.notify(event_id, REMINDER_TITLE, f"{inst.name}  ⦁  {format_dose(inst.dose)} {inst.unit}")

        scheduler.schedule(event_id, delay, fire)
        armed.append(event_id)

    scheduler.cancel_all(keep=armed + [MIDNIGHT_ID])
    return armed


def arm_midnight(scheduler: ReminderScheduler, clock: Callable[[], datetime], on_midnight: Callable[[], None]) -> None:
    """Fire ``on_midnight`` at the next local midnight, then re-arm.

    The delay is recomputed from the wall clock at every firing so a
    suspended machine catches up instead of drifting.
    """

    def fire() -> None:
        logger.info("Midnight rollover")
        try:
            on_midnight()
        finally:
            arm_midnight(scheduler, clock, on_midnight)

    delay_ms = int(seconds_until_next_midnight(clock()) * 1000)
    scheduler.schedule(MIDNIGHT_ID, delay_ms, fire)
