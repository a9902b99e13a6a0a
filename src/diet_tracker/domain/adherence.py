"""Domain models for diet adherence reports."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from diet_tracker.domain.meals import Meal
from diet_tracker.domain.plans import MealReminder, ScheduledMeal


@dataclass(frozen=True)
class GoalEvaluation:
    """Outcome of comparing a completed meal with its template."""

    achieved: bool
    deviation: float


@dataclass(frozen=True)
class MatchResult:
    """Scheduled occurrences classified against a day's reminders and meals."""

    completed: frozenset[UUID]
    missed: list[ScheduledMeal]
    off_diet: list[Meal]
    completing_reminders: dict[UUID, MealReminder] = field(default_factory=dict)


@dataclass(frozen=True)
class CompletedMealInfo:
    """Short description of the meal that completed a scheduled slot."""

    meal_id: UUID
    meal_name: str
    calories: int
    items_summary: str

    @classmethod
    def from_meal(cls, meal: Meal) -> "CompletedMealInfo":
        return cls(
            meal_id=meal.id,
            meal_name=meal.name,
            calories=meal.total_calories,
            items_summary=meal.items_summary(),
        )

    @property
    def display(self) -> str:
        if not self.items_summary:
            return f"{self.calories} cal"
        return f"{self.items_summary} • {self.calories} cal"


@dataclass(frozen=True)
class DietAdherenceData:
    """Adherence report for one day, recomputed from stored records."""

    day: date
    scheduled_meals: list[ScheduledMeal]
    completed_meals: frozenset[UUID]
    missed_meals: list[ScheduledMeal]
    off_diet_meals: list[Meal]
    off_diet_calories: int
    goal_achieved_meals: frozenset[UUID]
    goal_missed_meals: frozenset[UUID]
    completed_meal_details: dict[UUID, CompletedMealInfo] = field(
        default_factory=dict
    )

    @property
    def completion_rate(self) -> float:
        if not self.scheduled_meals:
            return 1.0
        return len(self.completed_meals) / len(self.scheduled_meals)

    @property
    def goal_achievement_rate(self) -> float:
        evaluated = len(self.goal_achieved_meals) + len(self.goal_missed_meals)
        if evaluated == 0:
            return 1.0
        return len(self.goal_achieved_meals) / evaluated

    @property
    def has_perfect_adherence(self) -> bool:
        return (
            self.completion_rate == 1.0
            and not self.off_diet_meals
            and not self.goal_missed_meals
        )


@dataclass(frozen=True)
class DailyAdherence:
    """Compact per-day adherence row used for range views."""

    day: date
    completion_rate: float
    completed_count: int
    total_count: int
    goal_achievement_rate: float
