from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from rrs.domain.common.window import TimeWindow

SEVEN_PM = datetime(2026, 11, 20, 19, 0, tzinfo=timezone.utc)


def test_end_is_start_plus_duration() -> None:
    window = TimeWindow(start=SEVEN_PM, duration_minutes=90)
    assert window.end == SEVEN_PM + timedelta(minutes=90)


def test_default_duration_is_two_hours() -> None:
    assert TimeWindow(start=SEVEN_PM).end == SEVEN_PM + timedelta(hours=2)


def test_touching_windows_do_not_overlap() -> None:
    first = TimeWindow(start=SEVEN_PM, duration_minutes=120)
    second = TimeWindow(start=SEVEN_PM + timedelta(hours=2), duration_minutes=120)
    assert not first.overlaps(second)
    assert not second.overlaps(first)


def test_partial_overlap_is_symmetric() -> None:
    first = TimeWindow(start=SEVEN_PM, duration_minutes=120)
    second = TimeWindow(start=SEVEN_PM + timedelta(minutes=30), duration_minutes=120)
    assert first.overlaps(second)
    assert second.overlaps(first)


def test_contained_window_overlaps() -> None:
    outer = TimeWindow(start=SEVEN_PM, duration_minutes=180)
    inner = TimeWindow(start=SEVEN_PM + timedelta(minutes=60), duration_minutes=30)
    assert outer.overlaps(inner)
    assert inner.overlaps(outer)


def test_contains_is_half_open() -> None:
    window = TimeWindow(start=SEVEN_PM, duration_minutes=60)
    assert window.contains(SEVEN_PM)
    assert not window.contains(window.end)


def test_naive_start_is_treated_as_utc() -> None:
    window = TimeWindow(start=datetime(2026, 11, 20, 19, 0), duration_minutes=60)
    assert window.start == SEVEN_PM


def test_non_positive_duration_is_rejected() -> None:
    with pytest.raises(ValueError):
        TimeWindow(start=SEVEN_PM, duration_minutes=0)
