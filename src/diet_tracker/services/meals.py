"""Meal logging service."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from diet_tracker.domain.meals import DaySummary, Meal, MealCategory, MealItem
from diet_tracker.domain.vision import NutritionEstimate
from diet_tracker.services.clock import Clock, day_bounds, local_day, local_today
from diet_tracker.services.plans import PlanRepository
from diet_tracker.services.user_settings import UserSettingsService

_logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for meals and day summaries."""

    def create_meal(self, user_id: UUID, meal: Meal) -> None:
        """Persist a meal and its items."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal with its items by id."""

    def list_meals(self, user_id: UUID, start: datetime, end: datetime) -> list[Meal]:
        """Return meals logged within a time range."""

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal and the items it owns."""

    def count_meals(self, user_id: UUID) -> int:
        """Return the number of meals the user has logged."""

    def get_day_summary(self, user_id: UUID, day: date) -> DaySummary | None:
        """Return the summary for a calendar day."""

    def save_day_summary(self, user_id: UUID, summary: DaySummary) -> None:
        """Create or replace the summary for its day."""

    def list_day_summaries(
        self, user_id: UUID, start: date, end: date
    ) -> list[DaySummary]:
        """Return summaries for days in ``[start, end]``."""


@dataclass
class MealLogService:
    """Service that persists meals and keeps day summaries in step.

    Deleting a meal also clears the completion of any reminder it fulfilled.
    """

    repository: MealRepository
    user_settings_service: UserSettingsService
    clock: Clock
    plan_repository: PlanRepository

    def log_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        items: list[MealItem],
        category: MealCategory | None = None,
        logged_at: datetime | None = None,
        notes: str | None = None,
        confidence: float = 0.0,
    ) -> Meal:
        """Persist a new meal and add it to its day's summary."""
        meal = Meal(
            name=name,
            logged_at=logged_at or self.clock.now(),
            items=items,
            category=category,
            notes=notes,
            confidence=confidence,
        )
        self.save_meal(user_id, meal)
        return meal

    def save_meal(self, user_id: UUID, meal: Meal) -> None:
        """Persist an already built meal and update its day's summary."""
        self.repository.create_meal(user_id, meal)
        day = self._meal_day(user_id, meal)
        summary = self.repository.get_day_summary(user_id, day) or DaySummary(day=day)
        self.repository.save_day_summary(user_id, summary.with_meal_added(meal))
        _logger.info(
            "Logged meal %s (%s kcal) for %s", meal.id, meal.total_calories, day
        )

    def log_estimate(
        self,
        user_id: UUID,
        estimate: NutritionEstimate,
        category: MealCategory | None = None,
    ) -> Meal:
        """Persist a meal built from a photo nutrition estimate."""
        items = [
            MealItem(
                name=item.name,
                portion=item.portion,
                unit=item.unit,
                calories=item.calories,
                protein_g=item.protein_g,
                carbs_g=item.carbs_g,
                fat_g=item.fat_g,
            )
            for item in estimate.items
        ]
        return self.log_meal(
            user_id,
            name=estimate.meal_name,
            items=items,
            category=category,
            notes=estimate.notes,
            confidence=estimate.confidence,
        )

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> Meal | None:
        """Delete a meal and remove it from its day's summary."""
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            return None
        day = self._meal_day(user_id, meal)
        summary = self.repository.get_day_summary(user_id, day)
        if summary is not None:
            self.repository.save_day_summary(user_id, summary.with_meal_removed(meal))
        self.repository.delete_meal(meal_id)
        self._release_reminders(meal_id)
        return meal

    def get_meal(self, meal_id: UUID) -> Meal | None:
        return self.repository.get_meal(meal_id)

    def list_meals_for_day(self, user_id: UUID, day: date) -> list[Meal]:
        """Return meals logged on a calendar day in the user's timezone."""
        tz = ZoneInfo(self.user_settings_service.get_timezone(user_id))
        start, end = day_bounds(day, tz)
        return self.repository.list_meals(user_id, start, end)

    def get_day_summary(self, user_id: UUID, day: date) -> DaySummary:
        """Return a day's summary, empty when nothing was logged."""
        return self.repository.get_day_summary(user_id, day) or DaySummary(day=day)

    def today(self, user_id: UUID) -> date:
        return local_today(self.clock, self.user_settings_service.get_timezone(user_id))

    def _release_reminders(self, meal_id: UUID) -> None:
        for reminder in self.plan_repository.list_reminders_for_meal(meal_id):
            self.plan_repository.update_reminder(
                replace(
                    reminder,
                    was_completed=False,
                    completed_meal_id=None,
                    completed_at=None,
                    goal_achieved=None,
                    goal_deviation=None,
                )
            )
            _logger.info(
                "Cleared reminder %s after deleting meal %s", reminder.id, meal_id
            )

    def _meal_day(self, user_id: UUID, meal: Meal) -> date:
        tz = ZoneInfo(self.user_settings_service.get_timezone(user_id))
        return local_day(meal.logged_at, tz)
