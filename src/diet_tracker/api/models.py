"""Request models for the HTTP API."""

from dataclasses import replace
from datetime import date, datetime, time
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field

from diet_tracker.domain.activity import ExerciseIntensity, ExerciseType
from diet_tracker.domain.goals import GoalOptions, NutritionGoals
from diet_tracker.domain.meals import MealCategory, MealItem
from diet_tracker.domain.plans import MealTemplate, ScheduledMeal, TemplateItem


class FoodItemIn(BaseModel):
    name: str
    portion: float = Field(ge=0.0)
    unit: str
    calories: int = Field(ge=0)
    protein_g: float = Field(default=0.0, ge=0.0)
    carbs_g: float = Field(default=0.0, ge=0.0)
    fat_g: float = Field(default=0.0, ge=0.0)

    def to_meal_item(self) -> MealItem:
        return MealItem(**self.model_dump())

    def to_template_item(self) -> TemplateItem:
        return TemplateItem(**self.model_dump())


class MealIn(BaseModel):
    name: str
    items: list[FoodItemIn] = Field(default_factory=list)
    category: MealCategory | None = None
    logged_at: datetime | None = None
    notes: str | None = None


class PhotoMealIn(BaseModel):
    """A meal photo as base64 image bytes."""

    image_base64: str
    category: MealCategory | None = None


class TemplateIn(BaseModel):
    name: str
    items: list[FoodItemIn] = Field(default_factory=list)
    notes: str | None = None


class ScheduledMealIn(BaseModel):
    """A scheduled meal; send back its ``id`` to keep it across plan edits."""

    id: UUID | None = None
    name: str
    category: MealCategory
    time_of_day: time
    days_of_week: list[Annotated[int, Field(ge=1, le=7)]] = Field(default_factory=list)
    template: TemplateIn | None = None

    def to_domain(self) -> ScheduledMeal:
        template = None
        if self.template is not None:
            template = MealTemplate(
                name=self.template.name,
                notes=self.template.notes,
                items=[item.to_template_item() for item in self.template.items],
            )
        scheduled_meal = ScheduledMeal(
            name=self.name,
            category=self.category,
            time_of_day=self.time_of_day,
            days_of_week=frozenset(self.days_of_week),
            template=template,
        )
        if self.id is not None:
            scheduled_meal = replace(scheduled_meal, id=self.id)
        return scheduled_meal


class PlanIn(BaseModel):
    name: str
    description: str | None = None
    is_active: bool = True
    scheduled_meals: list[ScheduledMealIn] = Field(default_factory=list)


class CompleteScheduledMealIn(BaseModel):
    meal_id: UUID | None = None


class GoalsIn(BaseModel):
    calories: int = Field(gt=0)
    protein_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)

    def to_domain(self) -> NutritionGoals:
        return NutritionGoals(**self.model_dump())


class GoalOptionsIn(BaseModel):
    include_burned_calories: bool = False
    include_rollover: bool = False

    def to_domain(self) -> GoalOptions:
        return GoalOptions(**self.model_dump())


class GenerateGoalsIn(BaseModel):
    activity_level: str | None = None
    goal: str | None = None
    apply: bool = False


class SettingsIn(BaseModel):
    timezone: str | None = None
    use_metric_units: bool | None = None


class ExerciseIn(BaseModel):
    exercise_type: ExerciseType
    calories: int = Field(ge=0)
    duration_minutes: int = Field(default=0, ge=0)
    intensity: ExerciseIntensity | None = None
    notes: str | None = None
    day: date | None = None


class WeightIn(BaseModel):
    weight: float = Field(gt=0.0)
    use_metric_units: bool | None = None
