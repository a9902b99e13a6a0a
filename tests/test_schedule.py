"""Tests for scheduled meal recurrence."""

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

from diet_tracker.domain.plans import DietPlan
from diet_tracker.services.schedule import (
    next_occurrence,
    reminder_slots,
    resolve_occurrences,
    weekday_number,
)
from tests.conftest import make_scheduled

MONDAY = date(2024, 3, 11)
SUNDAY = date(2024, 3, 10)
SATURDAY = date(2024, 3, 16)


def test_weekday_number_starts_on_sunday() -> None:
    assert weekday_number(SUNDAY) == 1
    assert weekday_number(MONDAY) == 2
    assert weekday_number(SATURDAY) == 7


def test_resolve_occurrences_filters_by_weekday() -> None:
    monday_only = make_scheduled(name="Oats", days=frozenset({2}))
    weekend = make_scheduled(name="Pancakes", days=frozenset({1, 7}))
    plan = DietPlan(name="Plan", scheduled_meals=[monday_only, weekend])

    assert resolve_occurrences(MONDAY, [plan]) == [monday_only]
    assert resolve_occurrences(SUNDAY, [plan]) == [weekend]


def test_resolve_occurrences_spans_plans_and_skips_empty_weekdays() -> None:
    never = make_scheduled(name="Never", days=frozenset())
    daily = make_scheduled(name="Daily")
    other = make_scheduled(name="Other", days=frozenset({2}))
    plans = [
        DietPlan(name="A", scheduled_meals=[never, daily]),
        DietPlan(name="B", scheduled_meals=[other]),
    ]

    assert resolve_occurrences(MONDAY, plans) == [daily, other]
    assert resolve_occurrences(MONDAY, []) == []


def test_next_occurrence_later_today() -> None:
    scheduled = make_scheduled(at=time(18, 30), days=frozenset({2}))
    now = datetime(2024, 3, 11, 12, 0, tzinfo=UTC)

    assert next_occurrence(scheduled, now) == datetime(2024, 3, 11, 18, 30, tzinfo=UTC)


def test_next_occurrence_wraps_to_next_week() -> None:
    scheduled = make_scheduled(at=time(8, 0), days=frozenset({2}))
    now = datetime(2024, 3, 11, 9, 0, tzinfo=UTC)

    assert next_occurrence(scheduled, now) == datetime(2024, 3, 18, 8, 0, tzinfo=UTC)


def test_next_occurrence_none_without_weekdays() -> None:
    scheduled = make_scheduled(days=frozenset())

    assert next_occurrence(scheduled, datetime(2024, 3, 11, tzinfo=UTC)) is None


def test_reminder_slots_are_ordered_and_local() -> None:
    tz = ZoneInfo("Europe/Berlin")
    lunch = make_scheduled(name="Lunch", at=time(12, 0), days=frozenset({2, 3}))
    breakfast = make_scheduled(name="Breakfast", at=time(7, 0), days=frozenset({3}))
    plan = DietPlan(name="Plan", scheduled_meals=[lunch, breakfast])

    slots = reminder_slots([plan], MONDAY, 2, tz)

    assert [slot.name for slot in slots] == ["Lunch", "Breakfast", "Lunch"]
    assert slots[0].fires_at == datetime(2024, 3, 11, 12, 0, tzinfo=tz)
    assert slots[1].fires_at.date() == date(2024, 3, 12)
