"""Domain models for nutrition goals and goal adjustments."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class NutritionGoals:
    """Base daily targets."""

    calories: int = 2000
    protein_g: float = 150.0
    carbs_g: float = 250.0
    fat_g: float = 65.0


@dataclass(frozen=True)
class GoalOptions:
    """User toggles for adjusting the daily calorie goal."""

    include_burned_calories: bool = False
    include_rollover: bool = False


@dataclass(frozen=True)
class DayScopedAmount:
    """A cached amount stamped with the calendar day it belongs to."""

    day: date
    amount: int


@dataclass(frozen=True)
class EffectiveGoal:
    """Breakdown of today's calorie goal."""

    day: date
    base: int
    burned: int
    rollover: int
    total: int


@dataclass(frozen=True)
class WidgetSnapshot:
    """Today's totals and goals as published to the home-screen widget."""

    day: date
    calories: int
    protein_g: float
    carbs_g: float
    fat_g: float
    calorie_goal: int
    protein_goal: float
    carbs_goal: float
    fat_goal: float
