"""Domain models for milestones."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum


class Milestone(StrEnum):
    FIRST_MEAL = "first_meal"
    TEN_MEALS = "ten_meals"
    TWENTY_FIVE_MEALS = "twenty_five_meals"
    FIFTY_MEALS = "fifty_meals"
    HUNDRED_MEALS = "hundred_meals"
    FIRST_EXERCISE = "first_exercise"
    HIT_CALORIE_GOAL = "hit_calorie_goal"
    WEEK_STREAK = "week_streak"
    PERFECT_WEEK = "perfect_week"
    PROTEIN_CHAMPION = "protein_champion"


MILESTONE_DESCRIPTIONS: dict[Milestone, str] = {
    Milestone.FIRST_MEAL: "Log your first meal",
    Milestone.TEN_MEALS: "Log 10 meals total",
    Milestone.TWENTY_FIVE_MEALS: "Log 25 meals total",
    Milestone.FIFTY_MEALS: "Log 50 meals total",
    Milestone.HUNDRED_MEALS: "Log 100 meals total",
    Milestone.FIRST_EXERCISE: "Log your first exercise",
    Milestone.HIT_CALORIE_GOAL: "Hit your calorie goal (+/- 50 cal)",
    Milestone.WEEK_STREAK: "Log meals for 7 days in a row",
    Milestone.PERFECT_WEEK: "Hit calorie goal every day for a week",
    Milestone.PROTEIN_CHAMPION: "Hit protein goal 5 days in a row",
}


@dataclass(frozen=True)
class EarnedMilestone:
    """A milestone and the day it was earned."""

    milestone: Milestone
    earned_on: date
