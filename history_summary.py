"""Read-only projections of the history log for the view layer.

- History list: newest first, sectioned by calendar day.
- Summary: outcome counts over the last N days (drawn as a bar chart).
- CSV export of the whole log.
"""

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable

import pandas as pd

from dose_models import OUTCOMES, HistoryEntry

COLUMNS = ["date", "name", "unit", "outcome", "time", "dose", "color"]


def day_sections(entries: Iterable[HistoryEntry]) -> list[tuple[date, list[HistoryEntry]]]:
    """Group entries by calendar day, newest day and newest entry first."""
    grouped: list[tuple[date, list[HistoryEntry]]] = []
    for entry in sorted(entries, key=lambda e: e.date, reverse=True):
        day = entry.date.date()
        if not grouped or grouped[-1][0] != day:
            grouped.append((day, []))
        grouped[-1][1].append(entry)
    return grouped


def history_frame(entries: Iterable[HistoryEntry]) -> pd.DataFrame:
    """One row per entry; ``time`` is rendered as ``HH:MM``."""
    rows = [
        {
            "date": e.date,
            "name": e.name,
            "unit": e.unit,
            "outcome": e.outcome,
            "time": f"{e.time[0]:02d}:{e.time[1]:02d}",
            "dose": e.dose,
            "color": e.color,
        }
        for e in entries
    ]
    df = pd.DataFrame(rows, columns=COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    return df


def outcome_counts(entries: Iterable[HistoryEntry], now: datetime, days: int = 7) -> dict[str, int]:
    """Count taken / skipped / missed entries dated within the last ``days`` days.

    Returns:
        Mapping with every outcome present, zero when absent.
    """
    df = history_frame(entries)
    cutoff = now - timedelta(days=days)
    recent = df[(df["date"] >= cutoff) & (df["date"] <= now)]
    counts = recent["outcome"].value_counts()
    return {outcome: int(counts.get(outcome, 0)) for outcome in OUTCOMES}


def export_csv(entries: Iterable[HistoryEntry], path: str | Path) -> Path:
    """Write the history log, newest first, to a CSV file."""
    df = history_frame(entries).sort_values("date", ascending=False)
    df.to_csv(path, index=False, date_format="%Y-%m-%d %H:%M")
    return Path(path)
