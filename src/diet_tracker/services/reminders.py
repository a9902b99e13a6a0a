"""Meal reminder bookkeeping and scheduled meal completion."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from diet_tracker.domain.meals import Meal
from diet_tracker.domain.plans import MealReminder, ScheduledMeal
from diet_tracker.services.adherence import evaluate_goal
from diet_tracker.services.clock import Clock, day_bounds, local_today
from diet_tracker.services.meals import MealLogService
from diet_tracker.services.plans import PlanRepository
from diet_tracker.services.schedule import (
    ReminderSlot,
    reminder_slots,
    resolve_occurrences,
)
from diet_tracker.services.user_settings import UserSettingsService

_logger = logging.getLogger(__name__)


@dataclass
class ReminderService:
    """Creates reminders for due occurrences and records their completion."""

    repository: PlanRepository
    meal_log_service: MealLogService
    user_settings_service: UserSettingsService
    clock: Clock

    def ensure_reminders(
        self, user_id: UUID, day: date | None = None
    ) -> list[MealReminder]:
        """Create a reminder for every occurrence of the day that lacks one."""
        tz = ZoneInfo(self.user_settings_service.get_timezone(user_id))
        target_day = day or self._today(user_id)
        start, end = day_bounds(target_day, tz)
        existing = self.repository.list_reminders(user_id, start, end)
        covered = {reminder.scheduled_meal_id for reminder in existing}
        reminders = list(existing)
        for scheduled_meal in resolve_occurrences(
            target_day, self.repository.list_active_plans(user_id)
        ):
            if scheduled_meal.id in covered:
                continue
            reminder = MealReminder(
                scheduled_meal_id=scheduled_meal.id,
                reminder_date=datetime.combine(
                    target_day, scheduled_meal.time_of_day, tzinfo=tz
                ),
            )
            self.repository.create_reminder(user_id, reminder)
            reminders.append(reminder)
        return reminders

    def complete_scheduled_meal(
        self, user_id: UUID, scheduled_meal_id: UUID, meal_id: UUID | None = None
    ) -> MealReminder | None:
        """Mark today's occurrence of a scheduled meal as completed.

        Without ``meal_id`` a meal is logged from the slot's template (or an
        empty meal named after the slot). The goal evaluation is stored on the
        reminder when the slot has a template. Returns None unless the slot
        recurs today in one of the user's active plans.
        """
        scheduled_meal = self._occurrence_today(user_id, scheduled_meal_id)
        if scheduled_meal is None:
            return None
        if meal_id is None:
            meal = self._log_from_slot(user_id, scheduled_meal)
        else:
            meal = self.meal_log_service.get_meal(meal_id)
            if meal is None:
                return None

        now = self.clock.now()
        reminder = self._find_reminder(user_id, scheduled_meal_id)
        if reminder is None:
            reminder = MealReminder(
                scheduled_meal_id=scheduled_meal_id,
                reminder_date=now,
                was_completed=True,
                completed_meal_id=meal.id,
                completed_at=now,
            )
            reminder = self._with_goal(reminder, meal, scheduled_meal)
            self.repository.create_reminder(user_id, reminder)
        else:
            reminder = replace(
                reminder,
                was_completed=True,
                completed_meal_id=meal.id,
                completed_at=now,
            )
            reminder = self._with_goal(reminder, meal, scheduled_meal)
            self.repository.update_reminder(reminder)
        _logger.info(
            "Completed scheduled meal %s with meal %s (goal_achieved=%s)",
            scheduled_meal_id,
            meal.id,
            reminder.goal_achieved,
        )
        return reminder

    def upcoming_slots(self, user_id: UUID, days: int = 7) -> list[ReminderSlot]:
        """Return timed occurrences from now on for the notification scheduler."""
        tz = ZoneInfo(self.user_settings_service.get_timezone(user_id))
        now = self.clock.now().astimezone(tz)
        plans = self.repository.list_active_plans(user_id)
        return [
            slot
            for slot in reminder_slots(plans, now.date(), days, tz)
            if slot.fires_at > now
        ]

    def _log_from_slot(self, user_id: UUID, scheduled_meal: ScheduledMeal) -> Meal:
        now = self.clock.now()
        if scheduled_meal.template is not None:
            meal = scheduled_meal.template.create_meal(now, scheduled_meal.category)
        else:
            meal = Meal(
                name=scheduled_meal.name,
                logged_at=now,
                category=scheduled_meal.category,
            )
        self.meal_log_service.save_meal(user_id, meal)
        return meal

    def _occurrence_today(
        self, user_id: UUID, scheduled_meal_id: UUID
    ) -> ScheduledMeal | None:
        occurrences = resolve_occurrences(
            self._today(user_id), self.repository.list_active_plans(user_id)
        )
        for scheduled_meal in occurrences:
            if scheduled_meal.id == scheduled_meal_id:
                return scheduled_meal
        return None

    def _find_reminder(
        self, user_id: UUID, scheduled_meal_id: UUID
    ) -> MealReminder | None:
        tz = ZoneInfo(self.user_settings_service.get_timezone(user_id))
        start, end = day_bounds(self._today(user_id), tz)
        for reminder in self.repository.list_reminders(user_id, start, end):
            if reminder.scheduled_meal_id == scheduled_meal_id:
                return reminder
        return None

    def _today(self, user_id: UUID) -> date:
        return local_today(self.clock, self.user_settings_service.get_timezone(user_id))

    @staticmethod
    def _with_goal(
        reminder: MealReminder, meal: Meal, scheduled_meal: ScheduledMeal
    ) -> MealReminder:
        if scheduled_meal.template is None:
            return reminder
        evaluation = evaluate_goal(meal, scheduled_meal)
        return replace(
            reminder,
            goal_achieved=evaluation.achieved,
            goal_deviation=evaluation.deviation,
        )
