from datetime import timedelta

import pytest

from conftest import NOW
from dose_errors import ValidationError
from dose_models import Cycle, Duration, WhenNeeded
from dose_stores import ADDED, REMOVED, HistoryStore, TreatmentStore


# ---------- treatments ----------
def test_duplicate_name_rejected_case_insensitively(make_treatment):
    store = TreatmentStore()
    store.add(make_treatment("Aspirin"))
    with pytest.raises(ValidationError) as err:
        store.add(make_treatment("aspirin "))
    assert err.value.field == "name"
    assert len(store) == 1


def test_edit_may_keep_its_own_name(make_treatment):
    store = TreatmentStore([make_treatment("Aspirin"), make_treatment("Ibuprofen")])
    store.replace("Aspirin", make_treatment("ASPIRIN", doses=[((9, 0), 2)]))
    assert store.get("ASPIRIN").slots[0].dose == 2
    assert store.get("Aspirin") is None
    with pytest.raises(ValidationError):
        store.replace("ASPIRIN", make_treatment("ibuprofen"))


def test_replace_unknown_name(make_treatment):
    with pytest.raises(KeyError):
        TreatmentStore().replace("Nope", make_treatment())


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"name": "  "}, "name"),
        ({"unit": ""}, "unit"),
        ({"doses": [((8, 0), 1), ((8, 0), 2)]}, "dosage"),
        ({"doses": []}, "dosage"),
        ({"frequency": Cycle(active=0, inactive=3, current=0, anchor=NOW.date())}, "cycle"),
        ({"frequency": Cycle(active=2, inactive=1, current=3, anchor=NOW.date())}, "cycle"),
        (
            {"duration": Duration(start=NOW.date(), end=NOW.date() - timedelta(days=1), enabled=True)},
            "duration",
        ),
    ],
)
def test_invalid_treatments_leave_store_untouched(make_treatment, kwargs, field):
    store = TreatmentStore()
    with pytest.raises(ValidationError) as err:
        store.add(make_treatment(**kwargs))
    assert err.value.field == field
    assert len(store) == 0


def test_when_needed_needs_no_doses(make_treatment):
    store = TreatmentStore()
    store.add(make_treatment(frequency=WhenNeeded(), doses=[]))
    assert len(store) == 1


def test_slots_sorted_and_lookup_is_exact(make_treatment):
    store = TreatmentStore()
    store.add(make_treatment(" Aspirin ", doses=[((20, 0), 1), ((8, 0), 1)]))
    t = store.get("Aspirin")
    assert [s.time for s in t.slots] == [(8, 0), (20, 0)]
    assert store.get("aspirin") is None


def test_sorted_is_alphabetical(make_treatment):
    store = TreatmentStore([make_treatment("zinc"), make_treatment("Aspirin"), make_treatment("biotin")])
    assert [t.name for t in store.sorted()] == ["Aspirin", "biotin", "zinc"]


# ---------- history ----------
def test_append_publishes_and_suppresses_duplicates(make_entry):
    history = HistoryStore()
    seen = []
    history.subscribe(seen.append)

    assert history.append(make_entry())
    assert not history.append(make_entry(outcome="skipped", when=NOW + timedelta(hours=1)))

    assert len(history) == 1
    assert [c.kind for c in seen] == [ADDED]
    assert history.has_record("Aspirin", (8, 0), NOW.date())
    assert not history.has_record("Aspirin", (8, 0), NOW.date() + timedelta(days=1))


def test_remove_publishes_and_frees_the_slot(make_entry):
    history = HistoryStore()
    seen = []
    history.subscribe(seen.append)
    entry = make_entry()
    history.append(entry)
    history.remove(entry)

    assert seen[-1].kind == REMOVED and seen[-1].entry == entry
    assert not history.has_record("Aspirin", (8, 0), NOW.date())
    assert history.append(entry)


def test_load_does_not_notify(make_entry):
    history = HistoryStore()
    seen = []
    history.subscribe(seen.append)
    history.load([make_entry(), make_entry(when=NOW - timedelta(days=1))])
    assert len(history) == 2
    assert seen == []


def test_listener_may_not_mutate_history(make_entry):
    history = HistoryStore()

    def nested(change):
        history.append(make_entry(time=(9, 0)))

    history.subscribe(nested)
    with pytest.raises(RuntimeError):
        history.append(make_entry())


def test_newest_first(make_entry):
    history = HistoryStore()
    old = make_entry(when=NOW - timedelta(days=2))
    new = make_entry(when=NOW)
    history.load([old, new])
    assert history.newest_first() == [new, old]
