from datetime import datetime

import pytest

from conftest import NOW
from dose_models import DoseInstance
from reminders import (
    MIDNIGHT_ID,
    PRIORITY_URGENT,
    Notifier,
    ReminderScheduler,
    arm_dose_reminders,
    arm_midnight,
    dose_event_id,
)


class FakeTimer:
    """Stands in for the Tk root's after/after_cancel pair."""

    def __init__(self):
        self.calls = {}
        self.delays = {}
        self.next_handle = 0

    def after(self, ms, func):
        self.next_handle += 1
        self.calls[self.next_handle] = func
        self.delays[self.next_handle] = ms
        return self.next_handle

    def after_cancel(self, handle):
        del self.calls[handle]
        del self.delays[handle]

    def fire(self, handle):
        self.delays.pop(handle)
        self.calls.pop(handle)()


class RecordingSink:
    def __init__(self):
        self.sent = []

    def notify(self, event_id, title, body, priority):
        self.sent.append((event_id, body, priority))


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def scheduler(timer):
    return ReminderScheduler(timer)


def instance(name="Aspirin", time=(12, 0), dose=1):
    return DoseInstance(name=name, unit="pill", time=time, dose=dose, color="default")


def test_rescheduling_an_id_replaces_the_timer(scheduler, timer):
    scheduler.schedule("a", 1000, lambda: None)
    scheduler.schedule("a", 2000, lambda: None)
    assert list(timer.delays.values()) == [2000]


def test_fired_timer_is_no_longer_pending(scheduler, timer):
    fired = []
    scheduler.schedule("a", 10, lambda: fired.append("a"))
    timer.fire(scheduler.pending["a"])
    assert fired == ["a"]
    assert "a" not in scheduler.pending
    scheduler.cancel("a")


def test_cancel_all_keeps_listed_ids(scheduler, timer):
    for event_id in ("a", "b", MIDNIGHT_ID):
        scheduler.schedule(event_id, 10, lambda: None)
    scheduler.cancel_all(keep=[MIDNIGHT_ID])
    assert list(scheduler.pending) == [MIDNIGHT_ID]
    assert len(timer.calls) == 1


def test_notifier_delivers_each_id_once():
    sink = RecordingSink()
    notifier = Notifier(sink, PRIORITY_URGENT)
    assert notifier.notify("x", "t", "b") is True
    assert notifier.notify("x", "t", "b") is False
    notifier.forget("x")
    assert notifier.notify("x", "t", "b") is True
    assert [priority for _, _, priority in sink.sent] == [PRIORITY_URGENT, PRIORITY_URGENT]


def test_event_id_depends_on_the_day():
    inst = instance()
    assert dose_event_id(inst, NOW.date()) == dose_event_id(instance(), NOW.date())
    assert dose_event_id(inst, NOW.date()) != dose_event_id(inst, datetime(2024, 5, 16).date())


def test_only_future_doses_are_armed(scheduler, timer):
    notifier = Notifier(RecordingSink())
    armed = arm_dose_reminders(
        scheduler, notifier, [instance(time=(8, 0)), instance("Zinc", time=(12, 0))], NOW, lambda: True
    )
    assert armed == [dose_event_id(instance("Zinc", time=(12, 0)), NOW.date())]
    # 10:30 -> 12:00
    assert list(timer.delays.values()) == [90 * 60 * 1000]


def test_reminder_reaches_sink_only_when_backgrounded(scheduler, timer):
    sink = RecordingSink()
    notifier = Notifier(sink)
    backgrounded = [False]

    [event_id] = arm_dose_reminders(scheduler, notifier, [instance(dose=0.5)], NOW, lambda: backgrounded[0])
    timer.fire(scheduler.pending[event_id])
    assert sink.sent == []

    backgrounded[0] = True
    arm_dose_reminders(scheduler, notifier, [instance(dose=0.5)], NOW, lambda: backgrounded[0])
    timer.fire(scheduler.pending[event_id])
    assert len(sink.sent) == 1
    assert "Aspirin" in sink.sent[0][1] and "0.5 pill" in sink.sent[0][1]

    # delivered ids are not armed again
    assert arm_dose_reminders(scheduler, notifier, [instance(dose=0.5)], NOW, lambda: True) == []


def test_rearming_cancels_stale_doses_but_not_midnight(scheduler, timer, clock):
    notifier = Notifier(RecordingSink())
    arm_midnight(scheduler, clock, lambda: None)
    arm_dose_reminders(scheduler, notifier, [instance("Aspirin"), instance("Zinc")], NOW, lambda: True)

    armed = arm_dose_reminders(scheduler, notifier, [instance("Zinc")], NOW, lambda: True)

    assert set(scheduler.pending) == {MIDNIGHT_ID, *armed}
    assert len(timer.calls) == 2


def test_midnight_fires_and_rearms_from_the_wall_clock(scheduler, timer, clock):
    rolled = []
    arm_midnight(scheduler, clock, lambda: rolled.append(clock()))
    handle = scheduler.pending[MIDNIGHT_ID]
    # 10:30 -> 24:00
    assert timer.delays[handle] == 13.5 * 3600 * 1000

    clock.now = datetime(2024, 5, 16, 0, 0, 1)
    timer.fire(handle)

    assert rolled == [clock.now]
    assert timer.delays[scheduler.pending[MIDNIGHT_ID]] == (24 * 3600 - 1) * 1000


def test_midnight_rearms_even_if_the_callback_fails(scheduler, timer, clock):
    def boom():
        raise RuntimeError("reconcile failed")

    arm_midnight(scheduler, clock, boom)
    with pytest.raises(RuntimeError):
        timer.fire(scheduler.pending[MIDNIGHT_ID])
    assert MIDNIGHT_ID in scheduler.pending
