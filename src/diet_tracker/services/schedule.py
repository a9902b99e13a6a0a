"""Recurrence expansion for scheduled meals."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from uuid import UUID

from diet_tracker.domain.meals import MealCategory
from diet_tracker.domain.plans import DietPlan, ScheduledMeal

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class ReminderSlot:
    """An occurrence handed to the notification scheduler."""

    scheduled_meal_id: UUID
    name: str
    category: MealCategory
    fires_at: datetime


def weekday_number(day: date) -> int:
    """Return the weekday number of a date, 1 (Sunday) through 7 (Saturday)."""
    return day.isoweekday() % DAYS_PER_WEEK + 1


def resolve_occurrences(day: date, active_plans: list[DietPlan]) -> list[ScheduledMeal]:
    """Return every scheduled meal of the given plans that recurs on a date."""
    number = weekday_number(day)
    return [
        scheduled_meal
        for plan in active_plans
        for scheduled_meal in plan.scheduled_meals
        if number in scheduled_meal.days_of_week
    ]


def next_occurrence(scheduled_meal: ScheduledMeal, now: datetime) -> datetime | None:
    """Return when a scheduled meal fires next, or None if it never recurs.

    Today counts only while its time of day is still ahead of ``now``.
    """
    if not scheduled_meal.days_of_week:
        return None
    for offset in range(DAYS_PER_WEEK + 1):
        day = now.date() + timedelta(days=offset)
        if weekday_number(day) not in scheduled_meal.days_of_week:
            continue
        candidate = datetime.combine(day, scheduled_meal.time_of_day, tzinfo=now.tzinfo)
        if candidate > now:
            return candidate
    return None


def reminder_slots(
    plans: list[DietPlan], start_day: date, days: int, tz: tzinfo
) -> list[ReminderSlot]:
    """Expand the plans into timed occurrences over a range of days."""
    slots: list[ReminderSlot] = []
    for offset in range(days):
        day = start_day + timedelta(days=offset)
        for scheduled_meal in resolve_occurrences(day, plans):
            slots.append(
                ReminderSlot(
                    scheduled_meal_id=scheduled_meal.id,
                    name=scheduled_meal.name,
                    category=scheduled_meal.category,
                    fires_at=datetime.combine(
                        day, scheduled_meal.time_of_day, tzinfo=tz
                    ),
                )
            )
    return sorted(slots, key=lambda slot: slot.fires_at)
