"""Diet adherence: matching logged meals to scheduled meals and scoring them."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, timedelta, tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from diet_tracker.domain.adherence import (
    CompletedMealInfo,
    DailyAdherence,
    DietAdherenceData,
    GoalEvaluation,
    MatchResult,
)
from diet_tracker.domain.meals import Meal
from diet_tracker.domain.plans import MealReminder, ScheduledMeal
from diet_tracker.services.clock import Clock, day_bounds, local_day, local_today
from diet_tracker.services.meals import MealRepository
from diet_tracker.services.plans import PlanRepository
from diet_tracker.services.schedule import resolve_occurrences
from diet_tracker.services.user_settings import UserSettingsService

GOAL_TOLERANCE = 0.20
STREAK_THRESHOLD = 0.8
STREAK_MAX_DAYS = 30


def evaluate_goal(actual_meal: Meal, scheduled_meal: ScheduledMeal) -> GoalEvaluation:
    """Compare a meal's calories with the scheduled meal's template.

    A slot without a template, or with a zero-calorie template, has no target
    to miss and always counts as achieved.
    """
    template = scheduled_meal.template
    if template is None:
        return GoalEvaluation(achieved=True, deviation=0.0)
    expected = template.total_calories
    if expected <= 0:
        return GoalEvaluation(achieved=True, deviation=0.0)
    deviation = (actual_meal.total_calories - expected) / expected
    return GoalEvaluation(
        achieved=abs(deviation) <= GOAL_TOLERANCE, deviation=deviation
    )


def match_meals(
    day: date,
    scheduled_meals: list[ScheduledMeal],
    reminders: list[MealReminder],
    logged_meals: list[Meal],
    tz: tzinfo,
) -> MatchResult:
    """Classify a day's scheduled meals as completed or missed.

    Completion comes only from reminders of ``day`` marked completed with a
    meal. Logged meals that no reminder of the day points at are off-diet.
    """
    day_reminders = [
        reminder
        for reminder in reminders
        if local_day(reminder.reminder_date, tz) == day
    ]
    completing: dict[UUID, MealReminder] = {}
    for reminder in day_reminders:
        if (
            reminder.was_completed
            and reminder.completed_meal_id is not None
            and reminder.scheduled_meal_id not in completing
        ):
            completing[reminder.scheduled_meal_id] = reminder

    completed: set[UUID] = set()
    missed: list[ScheduledMeal] = []
    for scheduled_meal in scheduled_meals:
        if scheduled_meal.id in completing:
            completed.add(scheduled_meal.id)
        else:
            missed.append(scheduled_meal)

    used_meal_ids = {
        reminder.completed_meal_id
        for reminder in day_reminders
        if reminder.completed_meal_id is not None
    }
    off_diet = [meal for meal in logged_meals if meal.id not in used_meal_ids]
    return MatchResult(
        completed=frozenset(completed),
        missed=missed,
        off_diet=off_diet,
        completing_reminders={
            meal_id: reminder
            for meal_id, reminder in completing.items()
            if meal_id in completed
        },
    )


def build_report(  # noqa: PLR0913
    day: date,
    scheduled_meals: list[ScheduledMeal],
    reminders: list[MealReminder],
    logged_meals: list[Meal],
    tz: tzinfo,
    find_meal: Callable[[UUID], Meal | None],
) -> DietAdherenceData:
    """Fold the matcher and goal evaluator output into a day report.

    A completed reminder whose meal no longer exists counts as missed.
    """
    meals_by_id = {meal.id: meal for meal in logged_meals}
    live_reminders: list[MealReminder] = []
    for reminder in reminders:
        if reminder.was_completed and reminder.completed_meal_id is not None:
            meal = meals_by_id.get(reminder.completed_meal_id) or find_meal(
                reminder.completed_meal_id
            )
            if meal is None:
                reminder = replace(
                    reminder, was_completed=False, completed_meal_id=None
                )
            else:
                meals_by_id[meal.id] = meal
        live_reminders.append(reminder)
    match = match_meals(day, scheduled_meals, live_reminders, logged_meals, tz)
    scheduled_by_id = {meal.id: meal for meal in scheduled_meals}

    achieved: set[UUID] = set()
    goal_missed: set[UUID] = set()
    details: dict[UUID, CompletedMealInfo] = {}
    for scheduled_id, reminder in match.completing_reminders.items():
        meal = meals_by_id[reminder.completed_meal_id]
        scheduled_meal = scheduled_by_id[scheduled_id]
        details[scheduled_id] = CompletedMealInfo.from_meal(meal)
        if evaluate_goal(meal, scheduled_meal).achieved:
            achieved.add(scheduled_id)
        else:
            goal_missed.add(scheduled_id)

    return DietAdherenceData(
        day=day,
        scheduled_meals=list(scheduled_meals),
        completed_meals=match.completed,
        missed_meals=match.missed,
        off_diet_meals=match.off_diet,
        off_diet_calories=sum(meal.total_calories for meal in match.off_diet),
        goal_achieved_meals=frozenset(achieved),
        goal_missed_meals=frozenset(goal_missed),
        completed_meal_details=details,
    )


@dataclass
class AdherenceService:
    """Builds adherence reports from stored plans, reminders and meals."""

    plan_repository: PlanRepository
    meal_repository: MealRepository
    user_settings_service: UserSettingsService
    clock: Clock

    def get_adherence(
        self, user_id: UUID, day: date | None = None
    ) -> DietAdherenceData:
        """Return the adherence report for a day (today by default)."""
        timezone_name = self.user_settings_service.get_timezone(user_id)
        tz = ZoneInfo(timezone_name)
        target_day = day or local_today(self.clock, timezone_name)
        start, end = day_bounds(target_day, tz)
        plans = self.plan_repository.list_active_plans(user_id)
        reminders = self.plan_repository.list_reminders(user_id, start, end)
        meals = self.meal_repository.list_meals(user_id, start, end)
        return build_report(
            day=target_day,
            scheduled_meals=resolve_occurrences(target_day, plans),
            reminders=reminders,
            logged_meals=meals,
            tz=tz,
            find_meal=self.meal_repository.get_meal,
        )

    def get_daily_adherence(
        self, user_id: UUID, start: date, end: date
    ) -> list[DailyAdherence]:
        """Return one adherence row per day in ``[start, end]``."""
        rows = []
        day = start
        while day <= end:
            report = self.get_adherence(user_id, day)
            rows.append(
                DailyAdherence(
                    day=day,
                    completion_rate=report.completion_rate,
                    completed_count=len(report.completed_meals),
                    total_count=len(report.scheduled_meals),
                    goal_achievement_rate=report.goal_achievement_rate,
                )
            )
            day += timedelta(days=1)
        return rows

    def adherence_streak(
        self,
        user_id: UUID,
        threshold: float = STREAK_THRESHOLD,
        max_days: int = STREAK_MAX_DAYS,
    ) -> int:
        """Count consecutive days, ending today, at or above a completion rate."""
        day = local_today(self.clock, self.user_settings_service.get_timezone(user_id))
        streak = 0
        for _ in range(max_days):
            if self.get_adherence(user_id, day).completion_rate < threshold:
                break
            streak += 1
            day -= timedelta(days=1)
        return streak
