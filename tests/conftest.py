from datetime import datetime, timedelta

import pytest

from dose_models import Daily, HistoryEntry, Inventory, new_treatment

# A Wednesday morning.
NOW = datetime(2024, 5, 15, 10, 30)


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_treatment():
    def _make(
        name="Aspirin",
        frequency=None,
        doses=(((8, 0), 1),),
        synced=NOW,
        stock=None,
        reminder=0,
        **kwargs,
    ):
        inventory = Inventory(enabled=True, current=stock, reminder=reminder) if stock is not None else None
        return new_treatment(
            name=name,
            unit=kwargs.pop("unit", "pill"),
            frequency=frequency or Daily(),
            doses=list(doses),
            now=synced,
            inventory=inventory,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_entry():
    def _make(name="Aspirin", outcome="taken", when=NOW, time=(8, 0), dose=1):
        return HistoryEntry(
            name=name,
            unit="pill",
            color="default",
            outcome=outcome,
            time=time,
            dose=dose,
            date=when,
        )

    return _make
