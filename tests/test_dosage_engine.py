import json
from datetime import datetime, timedelta

import pytest

from conftest import NOW
from dosage_engine import DosageEngine
from dose_errors import ReconciliationWarning, ValidationError
from dose_models import MISSED, SKIPPED, TAKEN, WhenNeeded, treatment_to_record
from json_storage import HISTORY, TREATMENTS, JsonStorage


def read(tmp_path, kind):
    return json.loads((tmp_path / f"dosage-{kind}.json").read_text(encoding="utf-8"))["meds"]


def seed(tmp_path, *treatments):
    JsonStorage(tmp_path).save(TREATMENTS, [treatment_to_record(t) for t in treatments])


@pytest.fixture
def engine(tmp_path, clock):
    return DosageEngine(JsonStorage(tmp_path), clock)


def test_first_start_is_empty_and_creates_files(engine, tmp_path):
    assert engine.start() == []
    assert engine.today() == []
    assert read(tmp_path, TREATMENTS) == []
    assert read(tmp_path, HISTORY) == []


def test_corrupt_file_degrades_to_empty_store(engine, tmp_path):
    (tmp_path / "dosage-treatments.json").write_text("{oops", encoding="utf-8")
    engine.start()
    assert len(engine.treatments) == 0
    assert list(tmp_path.glob("dosage-treatments.json.corrupt-*"))
    assert read(tmp_path, TREATMENTS) == []


def test_malformed_record_is_skipped(engine, tmp_path, make_treatment):
    records = [treatment_to_record(make_treatment("Aspirin")), {"name": "Broken"}]
    JsonStorage(tmp_path).save(TREATMENTS, records)
    engine.start()
    assert [t.name for t in engine.treatments] == ["Aspirin"]


def bad_values(info_update):
    def _corrupt(record):
        record["info"].update(info_update)
        return record

    return _corrupt


@pytest.mark.parametrize(
    "corrupt",
    [
        bad_values({"frequency": "cycle", "cycle": [0, 0, 0]}),
        bad_values({"dosage": [{"time": [8, 0], "dose": "one", "updated": "2024-05-12T08:00:00"}]}),
        bad_values({"inventory": {"enabled": True, "current": "ten", "reminder": 2}}),
    ],
)
def test_record_with_bad_values_is_skipped(engine, tmp_path, make_treatment, corrupt):
    records = [
        treatment_to_record(make_treatment("Aspirin", stock=10)),
        corrupt(treatment_to_record(make_treatment("Broken", stock=10, synced=NOW - timedelta(days=3)))),
    ]
    JsonStorage(tmp_path).save(TREATMENTS, records)

    engine.start()
    engine.record(engine.today(), TAKEN)

    assert [t.name for t in engine.treatments] == ["Aspirin"]
    assert engine.treatments.get("Aspirin").inventory.current == 9
    assert [r["name"] for r in read(tmp_path, HISTORY)] == ["Aspirin"]


def test_history_file_with_bad_encoding_is_moved_aside(engine, tmp_path, make_treatment):
    seed(tmp_path, make_treatment("Aspirin"))
    (tmp_path / "dosage-history.json").write_bytes(b'{"meds": [\xff\xfe]}')

    engine.start()

    assert len(engine.history) == 0
    assert [t.name for t in engine.treatments] == ["Aspirin"]
    assert list(tmp_path.glob("dosage-history.json.corrupt-*"))
    assert read(tmp_path, HISTORY) == []


def test_start_backfills_days_the_app_was_closed(engine, tmp_path, make_treatment):
    seed(tmp_path, make_treatment("Aspirin", synced=NOW - timedelta(days=3)))

    missed = engine.start()

    assert len(missed) == 2
    saved = read(tmp_path, HISTORY)
    assert [r["taken"] for r in saved] == [MISSED, MISSED]
    assert read(tmp_path, TREATMENTS)[0]["info"]["dosage"][0]["updated"] == "2024-05-15T10:30:00"
    # today's dose is still waiting
    assert [i.name for i in engine.today()] == ["Aspirin"]


def test_restart_same_day_adds_nothing(tmp_path, clock, make_treatment):
    seed(tmp_path, make_treatment("Aspirin", synced=NOW - timedelta(days=3)))
    DosageEngine(JsonStorage(tmp_path), clock).start()

    again = DosageEngine(JsonStorage(tmp_path), clock)
    assert again.start() == []
    assert len(again.history) == 2


def test_record_taken(engine, tmp_path, make_treatment):
    seed(tmp_path, make_treatment("Aspirin", doses=[((8, 0), 2), ((20, 0), 1)], stock=10, synced=NOW - timedelta(hours=3)))
    engine.start()

    due = engine.today()
    added = engine.record(due[:1], TAKEN)

    assert [(e.outcome, e.date) for e in added] == [(TAKEN, NOW)]
    t = engine.treatments.get("Aspirin")
    assert t.inventory.current == 8
    assert t.slots[0].updated == NOW
    assert [i.time for i in engine.today()] == [(20, 0)]
    assert read(tmp_path, TREATMENTS)[0]["info"]["inventory"]["current"] == 8
    assert read(tmp_path, HISTORY)[0]["taken"] == TAKEN


def test_record_rejects_missed(engine):
    with pytest.raises(ValueError):
        engine.record([], MISSED)


def test_undo_today_restores_stock(engine, tmp_path, make_treatment):
    seed(tmp_path, make_treatment("Aspirin", stock=10))
    engine.start()
    [entry] = engine.record(engine.today(), TAKEN)
    assert engine.treatments.get("Aspirin").inventory.current == 9

    engine.remove_entry(entry)

    assert engine.treatments.get("Aspirin").inventory.current == 10
    assert len(engine.today()) == 1
    assert read(tmp_path, HISTORY) == []


def test_skip_does_not_touch_stock(engine, tmp_path, make_treatment):
    seed(tmp_path, make_treatment("Aspirin", stock=10))
    engine.start()
    engine.record(engine.today(), SKIPPED)
    assert engine.treatments.get("Aspirin").inventory.current == 10
    assert engine.today() == []


def test_one_time_entry(engine, tmp_path, clock, make_treatment):
    seed(tmp_path, make_treatment("Ibuprofen", frequency=WhenNeeded(), doses=[], stock=20))
    engine.start()

    entry = engine.add_one_time_entry(" Ibuprofen ", "pill", 2, color="red")

    assert (entry.name, entry.outcome, entry.time) == ("Ibuprofen", TAKEN, (10, 30))
    assert engine.treatments.get("Ibuprofen").inventory.current == 18
    with pytest.raises(ValidationError):
        engine.add_one_time_entry("Ibuprofen", "pill", 2)
    clock.advance(minutes=5)
    engine.add_one_time_entry("Ibuprofen", "pill", 2)
    assert len(engine.history) == 2


def test_duplicate_treatment_blocks_save(engine, tmp_path, make_treatment):
    engine.start()
    engine.add_treatment(make_treatment("Aspirin"))
    with pytest.raises(ValidationError):
        engine.add_treatment(make_treatment("ASPIRIN"))
    assert [r["name"] for r in read(tmp_path, TREATMENTS)] == ["Aspirin"]


def test_edit_keeps_watermark_of_unchanged_slots(engine, clock, make_treatment):
    engine.start()
    old_sync = NOW - timedelta(days=2)
    engine.add_treatment(make_treatment("Aspirin", doses=[((8, 0), 1)], synced=old_sync))

    engine.update_treatment("Aspirin", make_treatment("Aspirin", doses=[((8, 0), 2), ((21, 0), 1)]))

    t = engine.treatments.get("Aspirin")
    assert [(s.time, s.dose, s.updated) for s in t.slots] == [((8, 0), 2, old_sync), ((21, 0), 1, NOW)]


def test_deleted_treatment_keeps_history(engine, tmp_path, make_treatment):
    seed(tmp_path, make_treatment("Aspirin", stock=10))
    engine.start()
    [entry] = engine.record(engine.today(), TAKEN)
    engine.delete_treatment("Aspirin")
    with pytest.warns(ReconciliationWarning):
        engine.remove_entry(entry)
    assert len(engine.treatments) == 0
    assert len(engine.history) == 0


def test_midnight_after_suspend_backfills_the_gap(engine, tmp_path, clock, make_treatment):
    seed(tmp_path, make_treatment("Aspirin", doses=[((8, 0), 1), ((20, 0), 1)]))
    engine.start()
    engine.record(engine.today()[:1], TAKEN)

    # machine slept from the 15th until just after midnight on the 18th
    clock.now = datetime(2024, 5, 18, 0, 0, 1)
    missed = engine.reconcile()

    assert sorted((e.date.day, e.time) for e in missed) == [
        (16, (8, 0)),
        (16, (20, 0)),
        (17, (8, 0)),
        (17, (20, 0)),
    ]
    assert len(engine.today()) == 2
    assert engine.reconcile() == []


def test_low_stock(engine, tmp_path, make_treatment):
    seed(tmp_path, make_treatment("Aspirin", stock=3, reminder=2))
    engine.start()
    assert engine.low_stock() == []
    engine.record(engine.today(), TAKEN)
    assert [t.name for t in engine.low_stock()] == ["Aspirin"]


def test_save_failure_keeps_memory(tmp_path, clock, make_treatment):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    engine = DosageEngine(JsonStorage(blocker), clock)
    engine.start()
    engine.add_treatment(make_treatment("Aspirin"))
    assert engine.save() is False
    assert engine.treatments.get("Aspirin") is not None
