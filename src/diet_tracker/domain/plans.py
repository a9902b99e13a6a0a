"""Domain models for diet plans, scheduled meals and reminders."""

from dataclasses import dataclass, field
from datetime import datetime, time
from uuid import UUID, uuid4

from diet_tracker.domain.meals import Meal, MealCategory, MealItem

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True)
class TemplateItem:
    """Expected food item of a meal template."""

    name: str
    portion: float
    unit: str
    calories: int
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class MealTemplate:
    """Expected nutrition for a scheduled meal."""

    name: str
    items: list[TemplateItem] = field(default_factory=list)
    notes: str | None = None
    id: UUID = field(default_factory=uuid4)

    @property
    def total_calories(self) -> int:
        return sum(item.calories for item in self.items)

    def create_meal(
        self, logged_at: datetime, category: MealCategory | None = None
    ) -> Meal:
        """Build a concrete meal with fresh items copied from the template."""
        return Meal(
            name=self.name,
            logged_at=logged_at,
            category=category,
            notes=self.notes,
            confidence=1.0,
            items=[
                MealItem(
                    name=item.name,
                    portion=item.portion,
                    unit=item.unit,
                    calories=item.calories,
                    protein_g=item.protein_g,
                    carbs_g=item.carbs_g,
                    fat_g=item.fat_g,
                )
                for item in self.items
            ],
        )


@dataclass(frozen=True)
class ScheduledMeal:
    """A meal that recurs at a time of day on a set of weekdays.

    Weekdays are numbered 1 (Sunday) through 7 (Saturday).
    """

    name: str
    category: MealCategory
    time_of_day: time
    days_of_week: frozenset[int] = frozenset()
    template: MealTemplate | None = None
    id: UUID = field(default_factory=uuid4)

    @property
    def day_names(self) -> str:
        return ", ".join(
            WEEKDAY_NAMES[day - 1] for day in sorted(self.days_of_week) if 1 <= day <= 7
        )


@dataclass(frozen=True)
class DietPlan:
    """A named collection of scheduled meals."""

    name: str
    scheduled_meals: list[ScheduledMeal] = field(default_factory=list)
    description: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class MealReminder:
    """Completion record for one occurrence of a scheduled meal."""

    scheduled_meal_id: UUID
    reminder_date: datetime
    was_completed: bool = False
    completed_meal_id: UUID | None = None
    completed_at: datetime | None = None
    goal_achieved: bool | None = None
    goal_deviation: float | None = None
    id: UUID = field(default_factory=uuid4)
