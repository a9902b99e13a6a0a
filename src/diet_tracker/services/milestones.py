"""Milestone checks over meal and exercise history."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from uuid import UUID

from diet_tracker.domain.meals import DaySummary
from diet_tracker.domain.milestones import EarnedMilestone, Milestone
from diet_tracker.services.activity import ActivityRepository
from diet_tracker.services.clock import Clock, local_today
from diet_tracker.services.meals import MealRepository
from diet_tracker.services.user_settings import UserSettingsService

_logger = logging.getLogger(__name__)

CALORIE_GOAL_MARGIN = 50
WEEK_DAYS = 7
PROTEIN_STREAK_DAYS = 5

_MEAL_COUNT_MILESTONES = (
    (1, Milestone.FIRST_MEAL),
    (10, Milestone.TEN_MEALS),
    (25, Milestone.TWENTY_FIVE_MEALS),
    (50, Milestone.FIFTY_MEALS),
    (100, Milestone.HUNDRED_MEALS),
)


def _hits_calorie_goal(summary: DaySummary | None, calorie_goal: int) -> bool:
    if summary is None or summary.total_calories <= 0:
        return False
    return abs(summary.total_calories - calorie_goal) <= CALORIE_GOAL_MARGIN


def _trailing_days(today: date, count: int) -> list[date]:
    return [today - timedelta(days=offset) for offset in range(count)]


def check_milestones(  # noqa: PLR0913
    total_meals: int,
    today_summary: DaySummary | None,
    recent_summaries: dict[date, DaySummary],
    total_exercises: int,
    calorie_goal: int,
    protein_goal: float,
    earned: set[Milestone],
    today: date,
) -> list[Milestone]:
    """Return milestones reached now that are not already in ``earned``.

    ``recent_summaries`` maps calendar days to their summaries and must cover
    at least the week ending on ``today``. Every rule is checked on its own.
    """
    reached: list[Milestone] = [
        milestone
        for threshold, milestone in _MEAL_COUNT_MILESTONES
        if total_meals >= threshold
    ]
    if total_exercises >= 1:
        reached.append(Milestone.FIRST_EXERCISE)
    if _hits_calorie_goal(today_summary, calorie_goal):
        reached.append(Milestone.HIT_CALORIE_GOAL)

    week = [recent_summaries.get(day) for day in _trailing_days(today, WEEK_DAYS)]
    if all(summary is not None and summary.meal_count > 0 for summary in week):
        reached.append(Milestone.WEEK_STREAK)
    if all(_hits_calorie_goal(summary, calorie_goal) for summary in week):
        reached.append(Milestone.PERFECT_WEEK)

    if protein_goal > 0:
        protein_days = [
            recent_summaries.get(day)
            for day in _trailing_days(today, PROTEIN_STREAK_DAYS)
        ]
        if all(
            summary is not None and summary.total_protein_g >= protein_goal
            for summary in protein_days
        ):
            reached.append(Milestone.PROTEIN_CHAMPION)

    return [milestone for milestone in reached if milestone not in earned]


@dataclass
class MilestoneService:
    """Loads history, runs the milestone checks and records new milestones."""

    meal_repository: MealRepository
    activity_repository: ActivityRepository
    user_settings_service: UserSettingsService
    clock: Clock

    def check_and_award(self, user_id: UUID) -> list[EarnedMilestone]:
        """Persist and return milestones earned since the last check."""
        timezone_name = self.user_settings_service.get_timezone(user_id)
        today = local_today(self.clock, timezone_name)
        summaries = {
            summary.day: summary
            for summary in self.meal_repository.list_day_summaries(
                user_id, today - timedelta(days=WEEK_DAYS - 1), today
            )
        }
        goals = self.user_settings_service.get_goals(user_id)
        earned = {
            entry.milestone
            for entry in self.user_settings_service.list_earned_milestones(user_id)
        }
        new_milestones = check_milestones(
            total_meals=self.meal_repository.count_meals(user_id),
            today_summary=summaries.get(today),
            recent_summaries=summaries,
            total_exercises=self.activity_repository.count_exercises(user_id),
            calorie_goal=goals.calories,
            protein_goal=goals.protein_g,
            earned=earned,
            today=today,
        )
        awarded = []
        for milestone in new_milestones:
            entry = EarnedMilestone(milestone=milestone, earned_on=today)
            self.user_settings_service.add_earned_milestone(user_id, entry)
            awarded.append(entry)
            _logger.info("Milestone %s earned on %s", milestone, today)
        return awarded

    def list_earned(self, user_id: UUID) -> list[EarnedMilestone]:
        return self.user_settings_service.list_earned_milestones(user_id)
