"""Effective daily calorie goal and goal generation."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from diet_tracker.domain.goals import EffectiveGoal, NutritionGoals
from diet_tracker.services.clock import Clock, local_today
from diet_tracker.services.meals import MealRepository
from diet_tracker.services.user_settings import (
    BURNED_CALORIES_CACHE,
    ROLLOVER_CALORIES_CACHE,
    UserSettingsService,
)

if TYPE_CHECKING:
    from diet_tracker.services.activity import ActivityRepository

_logger = logging.getLogger(__name__)

ROLLOVER_CAP = 200
MIN_CALORIES = 1200

_ACTIVITY_CALORIES: dict[str, tuple[int, float]] = {
    "sedentary": (1800, 0.8),
    "lightly_active": (2000, 1.0),
    "light": (2000, 1.0),
    "moderately_active": (2200, 1.1),
    "moderate": (2200, 1.1),
    "very_active": (2500, 1.2),
    "active": (2500, 1.2),
    "extra_active": (2800, 1.3),
    "athlete": (2800, 1.3),
}
_LOSE_GOALS = {"lose_weight", "weight_loss", "lose"}
_GAIN_GOALS = {"gain_weight", "weight_gain", "gain", "build_muscle"}


def is_stale(cached_day: date | None, today: date) -> bool:
    """Return True when a day-scoped cache entry does not belong to today."""
    return cached_day != today


def compute_rollover(base_goal: int, consumed: int) -> int:
    """Return unused calories carried into the next day, capped and non-negative."""
    return max(0, min(ROLLOVER_CAP, base_goal - consumed))


def macros_from_calories(calories: int) -> NutritionGoals:
    """Split calories 30/40/30 into protein, carbs and fat grams."""
    return NutritionGoals(
        calories=calories,
        protein_g=calories * 0.30 / 4.0,
        carbs_g=calories * 0.40 / 4.0,
        fat_g=calories * 0.30 / 9.0,
    )


def generate_goals(activity_level: str | None, goal: str | None) -> NutritionGoals:
    """Suggest base goals from an activity level and a weight goal."""
    calories, protein_multiplier = _ACTIVITY_CALORIES.get(
        (activity_level or "").lower(), (2000, 1.0)
    )
    goal_key = (goal or "").lower()
    if goal_key in _LOSE_GOALS:
        calories = int(calories * 0.8)
    elif goal_key in _GAIN_GOALS:
        calories = int(calories * 1.15)
    calories = max(MIN_CALORIES, calories)
    split = macros_from_calories(calories)
    return NutritionGoals(
        calories=calories,
        protein_g=round(split.protein_g * protein_multiplier),
        carbs_g=round(split.carbs_g),
        fat_g=round(split.fat_g),
    )


@dataclass
class EffectiveGoalService:
    """Combines the base calorie goal with burned and rollover calories.

    Both adjustments are cached in the settings store as ``(day, amount)``
    entries. A burned-calories entry is only valid on its own day; a rollover
    entry is stamped with the day it was computed from and is only valid on
    the following day. Readers verify the stamp and recompute on mismatch.
    """

    user_settings_service: UserSettingsService
    meal_repository: MealRepository
    activity_repository: "ActivityRepository"
    clock: Clock

    def today(self, user_id: UUID) -> date:
        return local_today(self.clock, self.user_settings_service.get_timezone(user_id))

    def cached_burned_calories(self, user_id: UUID, today: date) -> int:
        """Return the cached burned calories, or 0 if the cache is not today's."""
        entry = self.user_settings_service.get_day_cache(user_id, BURNED_CALORIES_CACHE)
        if entry is None or is_stale(entry.day, today):
            return 0
        return entry.amount

    def burned_calories(self, user_id: UUID, today: date | None = None) -> int:
        """Return today's burned calories, recomputing a stale cache."""
        target_day = today or self.today(user_id)
        entry = self.user_settings_service.get_day_cache(user_id, BURNED_CALORIES_CACHE)
        if entry is not None and not is_stale(entry.day, target_day):
            return entry.amount
        return self.refresh_burned_calories(user_id, target_day)

    def refresh_burned_calories(self, user_id: UUID, today: date | None = None) -> int:
        """Recompute burned calories from the day's exercise records."""
        target_day = today or self.today(user_id)
        exercises = self.activity_repository.list_exercises(
            user_id, target_day, target_day
        )
        burned = sum(exercise.calories for exercise in exercises)
        self.user_settings_service.set_day_cache(
            user_id, BURNED_CALORIES_CACHE, target_day, burned
        )
        _logger.info("Burned calories for %s recomputed: %s", target_day, burned)
        return burned

    def cached_rollover(self, user_id: UUID, today: date) -> int:
        """Return the cached rollover if it was computed from yesterday, else 0."""
        entry = self.user_settings_service.get_day_cache(
            user_id, ROLLOVER_CALORIES_CACHE
        )
        if entry is None or is_stale(entry.day, today - timedelta(days=1)):
            return 0
        return entry.amount

    def rollover_calories(self, user_id: UUID, today: date | None = None) -> int:
        """Return today's rollover, computing it once from yesterday's summary."""
        target_day = today or self.today(user_id)
        yesterday = target_day - timedelta(days=1)
        entry = self.user_settings_service.get_day_cache(
            user_id, ROLLOVER_CALORIES_CACHE
        )
        if entry is not None and not is_stale(entry.day, yesterday):
            return entry.amount
        summary = self.meal_repository.get_day_summary(user_id, yesterday)
        if summary is None:
            return 0
        base_goal = self.user_settings_service.get_goals(user_id).calories
        amount = compute_rollover(base_goal, summary.total_calories)
        self.user_settings_service.set_day_cache(
            user_id, ROLLOVER_CALORIES_CACHE, yesterday, amount
        )
        _logger.info("Rollover from %s computed: %s", yesterday, amount)
        return amount

    def effective_goal(self, user_id: UUID, today: date | None = None) -> EffectiveGoal:
        """Return today's calorie goal with its adjustments."""
        target_day = today or self.today(user_id)
        base = self.user_settings_service.get_goals(user_id).calories
        options = self.user_settings_service.get_goal_options(user_id)
        burned = (
            self.burned_calories(user_id, target_day)
            if options.include_burned_calories
            else 0
        )
        rollover = (
            self.rollover_calories(user_id, target_day)
            if options.include_rollover
            else 0
        )
        return EffectiveGoal(
            day=target_day,
            base=base,
            burned=burned,
            rollover=rollover,
            total=base + burned + rollover,
        )

    def remaining_calories(self, user_id: UUID, today: date | None = None) -> int:
        """Return calories left today against the effective goal."""
        goal = self.effective_goal(user_id, today)
        summary = self.meal_repository.get_day_summary(user_id, goal.day)
        consumed = summary.total_calories if summary else 0
        return max(0, goal.total - consumed)
