"""Domain models for logged meals."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID, uuid4


class MealCategory(StrEnum):
    """Meal slot a logged or scheduled meal belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class MacroTotals:
    """Calories and macronutrient grams."""

    calories: int = 0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0

    def __add__(self, other: "MacroTotals") -> "MacroTotals":
        return MacroTotals(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
        )


@dataclass(frozen=True)
class MealItem:
    """Single food item within a meal."""

    name: str
    portion: float
    unit: str
    calories: int
    protein_g: float
    carbs_g: float
    fat_g: float
    id: UUID = field(default_factory=uuid4)

    @property
    def macros(self) -> MacroTotals:
        return MacroTotals(
            calories=self.calories,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fat_g=self.fat_g,
        )


@dataclass(frozen=True)
class Meal:
    """A logged meal and the items it owns."""

    name: str
    logged_at: datetime
    items: list[MealItem] = field(default_factory=list)
    category: MealCategory | None = None
    notes: str | None = None
    confidence: float = 0.0
    id: UUID = field(default_factory=uuid4)

    @property
    def total_macros(self) -> MacroTotals:
        total = MacroTotals()
        for item in self.items:
            total = total + item.macros
        return total

    @property
    def total_calories(self) -> int:
        return self.total_macros.calories

    def items_summary(self, limit: int = 3) -> str:
        """Return the first item names, e.g. "Eggs, Toast, Coffee..."."""
        names = ", ".join(item.name for item in self.items[:limit])
        if len(self.items) > limit:
            return f"{names}..."
        return names


@dataclass(frozen=True)
class DaySummary:
    """Aggregated intake for one calendar day."""

    day: date
    total_calories: int = 0
    total_protein_g: float = 0.0
    total_carbs_g: float = 0.0
    total_fat_g: float = 0.0
    meal_count: int = 0

    @property
    def macros(self) -> MacroTotals:
        return MacroTotals(
            calories=self.total_calories,
            protein_g=self.total_protein_g,
            carbs_g=self.total_carbs_g,
            fat_g=self.total_fat_g,
        )

    def with_meal_added(self, meal: Meal) -> "DaySummary":
        """Return the summary with a meal's macros added."""
        macros = meal.total_macros
        return replace(
            self,
            total_calories=self.total_calories + macros.calories,
            total_protein_g=self.total_protein_g + macros.protein_g,
            total_carbs_g=self.total_carbs_g + macros.carbs_g,
            total_fat_g=self.total_fat_g + macros.fat_g,
            meal_count=self.meal_count + 1,
        )

    def with_meal_removed(self, meal: Meal) -> "DaySummary":
        """Return the summary with a meal's macros removed, clamped at zero."""
        macros = meal.total_macros
        return replace(
            self,
            total_calories=max(0, self.total_calories - macros.calories),
            total_protein_g=max(0.0, self.total_protein_g - macros.protein_g),
            total_carbs_g=max(0.0, self.total_carbs_g - macros.carbs_g),
            total_fat_g=max(0.0, self.total_fat_g - macros.fat_g),
            meal_count=max(0, self.meal_count - 1),
        )
