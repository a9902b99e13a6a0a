"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time, timedelta
from uuid import UUID

import pytest

from diet_tracker.config import Settings
from diet_tracker.containers import AppContainer
from diet_tracker.domain.activity import ExerciseRecord, WeightEntry
from diet_tracker.domain.goals import (
    DayScopedAmount,
    GoalOptions,
    NutritionGoals,
    WidgetSnapshot,
)
from diet_tracker.domain.meals import DaySummary, Meal, MealCategory, MealItem
from diet_tracker.domain.milestones import EarnedMilestone
from diet_tracker.domain.plans import (
    DietPlan,
    MealReminder,
    MealTemplate,
    ScheduledMeal,
    TemplateItem,
)
from diet_tracker.services.activity import ActivityRepository, ActivityService
from diet_tracker.services.adherence import AdherenceService
from diet_tracker.services.goals import EffectiveGoalService
from diet_tracker.services.meals import MealLogService, MealRepository
from diet_tracker.services.milestones import MilestoneService
from diet_tracker.services.plans import DietPlanService, PlanRepository
from diet_tracker.services.reminders import ReminderService
from diet_tracker.services.snapshot import SnapshotPublisher, SnapshotService
from diet_tracker.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)
from diet_tracker.services.vision import VisionClient, VisionService

# Wednesday; weekday number 4.
NOW = datetime(2024, 3, 13, 12, 0, tzinfo=UTC)
TODAY = NOW.date()


@dataclass
class FixedClock:
    current: datetime = NOW

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@dataclass
class InMemoryMealRepository(MealRepository):
    meals: dict[UUID, tuple[UUID, Meal]] = field(default_factory=dict)
    summaries: dict[tuple[UUID, date], DaySummary] = field(default_factory=dict)

    def create_meal(self, user_id: UUID, meal: Meal) -> None:
        self.meals[meal.id] = (user_id, meal)

    def get_meal(self, meal_id: UUID) -> Meal | None:
        entry = self.meals.get(meal_id)
        return entry[1] if entry else None

    def list_meals(self, user_id: UUID, start: datetime, end: datetime) -> list[Meal]:
        return sorted(
            (
                meal
                for owner, meal in self.meals.values()
                if owner == user_id and start <= meal.logged_at < end
            ),
            key=lambda meal: meal.logged_at,
        )

    def delete_meal(self, meal_id: UUID) -> None:
        self.meals.pop(meal_id, None)

    def count_meals(self, user_id: UUID) -> int:
        return sum(1 for owner, _ in self.meals.values() if owner == user_id)

    def get_day_summary(self, user_id: UUID, day: date) -> DaySummary | None:
        return self.summaries.get((user_id, day))

    def save_day_summary(self, user_id: UUID, summary: DaySummary) -> None:
        self.summaries[(user_id, summary.day)] = summary

    def list_day_summaries(
        self, user_id: UUID, start: date, end: date
    ) -> list[DaySummary]:
        return sorted(
            (
                summary
                for (owner, day), summary in self.summaries.items()
                if owner == user_id and start <= day <= end
            ),
            key=lambda summary: summary.day,
        )


@dataclass
class InMemoryPlanRepository(PlanRepository):
    plans: dict[UUID, tuple[UUID, DietPlan]] = field(default_factory=dict)
    reminders: dict[UUID, tuple[UUID, MealReminder]] = field(default_factory=dict)

    def create_plan(self, user_id: UUID, plan: DietPlan) -> None:
        self.plans[plan.id] = (user_id, plan)

    def update_plan(self, user_id: UUID, plan: DietPlan) -> None:
        self.plans[plan.id] = (user_id, plan)

    def get_plan(self, plan_id: UUID) -> DietPlan | None:
        entry = self.plans.get(plan_id)
        return entry[1] if entry else None

    def list_plans(self, user_id: UUID) -> list[DietPlan]:
        return sorted(
            (plan for owner, plan in self.plans.values() if owner == user_id),
            key=lambda plan: plan.created_at or NOW,
            reverse=True,
        )

    def list_active_plans(self, user_id: UUID) -> list[DietPlan]:
        return [plan for plan in self.list_plans(user_id) if plan.is_active]

    def set_plan_active(self, plan_id: UUID, is_active: bool) -> None:
        owner, plan = self.plans[plan_id]
        self.plans[plan_id] = (owner, replace(plan, is_active=is_active))

    def delete_plan(self, plan_id: UUID) -> None:
        self.plans.pop(plan_id, None)

    def list_reminders(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealReminder]:
        return [
            reminder
            for owner, reminder in self.reminders.values()
            if owner == user_id and start <= reminder.reminder_date < end
        ]

    def create_reminder(self, user_id: UUID, reminder: MealReminder) -> None:
        self.reminders[reminder.id] = (user_id, reminder)

    def update_reminder(self, reminder: MealReminder) -> None:
        owner, _ = self.reminders[reminder.id]
        self.reminders[reminder.id] = (owner, reminder)

    def list_reminders_for_meal(self, meal_id: UUID) -> list[MealReminder]:
        return [
            reminder
            for _, reminder in self.reminders.values()
            if reminder.completed_meal_id == meal_id
        ]


@dataclass
class InMemoryActivityRepository(ActivityRepository):
    exercises: list[tuple[UUID, ExerciseRecord]] = field(default_factory=list)
    weights: list[tuple[UUID, WeightEntry]] = field(default_factory=list)

    def create_exercise(self, user_id: UUID, exercise: ExerciseRecord) -> None:
        self.exercises.append((user_id, exercise))

    def list_exercises(
        self, user_id: UUID, start: date, end: date
    ) -> list[ExerciseRecord]:
        return [
            exercise
            for owner, exercise in self.exercises
            if owner == user_id and start <= exercise.day <= end
        ]

    def count_exercises(self, user_id: UUID) -> int:
        return sum(1 for owner, _ in self.exercises if owner == user_id)

    def create_weight(self, user_id: UUID, entry: WeightEntry) -> None:
        self.weights.append((user_id, entry))

    def list_weights(self, user_id: UUID, limit: int) -> list[WeightEntry]:
        entries = [entry for owner, entry in self.weights if owner == user_id]
        entries.sort(key=lambda entry: entry.recorded_at, reverse=True)
        return entries[:limit]


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    timezones: dict[UUID, str] = field(default_factory=dict)
    metric_units: dict[UUID, bool] = field(default_factory=dict)
    goals: dict[UUID, NutritionGoals] = field(default_factory=dict)
    options: dict[UUID, GoalOptions] = field(default_factory=dict)
    caches: dict[tuple[UUID, str], DayScopedAmount] = field(default_factory=dict)
    milestones: dict[UUID, list[EarnedMilestone]] = field(default_factory=dict)

    def get_timezone(self, user_id: UUID) -> str | None:
        return self.timezones.get(user_id)

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        self.timezones[user_id] = timezone

    def get_use_metric_units(self, user_id: UUID) -> bool | None:
        return self.metric_units.get(user_id)

    def set_use_metric_units(self, user_id: UUID, use_metric_units: bool) -> None:
        self.metric_units[user_id] = use_metric_units

    def get_goals(self, user_id: UUID) -> NutritionGoals | None:
        return self.goals.get(user_id)

    def set_goals(self, user_id: UUID, goals: NutritionGoals) -> None:
        self.goals[user_id] = goals

    def get_goal_options(self, user_id: UUID) -> GoalOptions | None:
        return self.options.get(user_id)

    def set_goal_options(self, user_id: UUID, options: GoalOptions) -> None:
        self.options[user_id] = options

    def get_day_cache(self, user_id: UUID, key: str) -> DayScopedAmount | None:
        return self.caches.get((user_id, key))

    def set_day_cache(self, user_id: UUID, key: str, entry: DayScopedAmount) -> None:
        self.caches[(user_id, key)] = entry

    def list_earned_milestones(self, user_id: UUID) -> list[EarnedMilestone]:
        return list(self.milestones.get(user_id, []))

    def add_earned_milestone(self, user_id: UUID, earned: EarnedMilestone) -> None:
        self.milestones.setdefault(user_id, []).append(earned)


@dataclass
class FakeVisionClient(VisionClient):
    calls: list[dict[str, object]] = field(default_factory=list)
    payload: dict[str, object] = field(
        default_factory=lambda: {
            "meal_name": "Chicken and rice",
            "confidence": 0.8,
            "items": [
                {
                    "name": "chicken breast",
                    "portion": 150,
                    "unit": "g",
                    "calories": 250,
                    "protein_g": 46,
                    "carbs_g": 0,
                    "fat_g": 5,
                },
                {
                    "name": "rice",
                    "portion": 1,
                    "unit": "cup",
                    "calories": 200,
                    "protein_g": 4,
                    "carbs_g": 45,
                    "fat_g": 0.5,
                },
            ],
            "notes": None,
        }
    )

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.calls.append({"model": model, "image_data_url": image_data_url})
        return self.payload


@dataclass
class FakeSnapshotPublisher(SnapshotPublisher):
    published: list[tuple[UUID, WidgetSnapshot]] = field(default_factory=list)
    error: Exception | None = None

    async def publish(self, user_id: UUID, snapshot: WidgetSnapshot) -> None:
        if self.error is not None:
            raise self.error
        self.published.append((user_id, snapshot))


def make_item(calories: int, protein_g: float = 0.0, name: str = "food") -> MealItem:
    return MealItem(
        name=name,
        portion=1.0,
        unit="serving",
        calories=calories,
        protein_g=protein_g,
        carbs_g=0.0,
        fat_g=0.0,
    )


def make_template(calories: int, name: str = "template") -> MealTemplate:
    return MealTemplate(
        name=name,
        items=[
            TemplateItem(
                name=name,
                portion=1.0,
                unit="serving",
                calories=calories,
                protein_g=10.0,
                carbs_g=20.0,
                fat_g=5.0,
            )
        ],
    )


def make_scheduled(  # noqa: PLR0913
    name: str = "Breakfast",
    category: MealCategory = MealCategory.BREAKFAST,
    at: time = time(8, 0),
    days: frozenset[int] = frozenset(range(1, 8)),
    template_calories: int | None = None,
) -> ScheduledMeal:
    template = None
    if template_calories is not None:
        template = make_template(template_calories)
    return ScheduledMeal(
        name=name,
        category=category,
        time_of_day=at,
        days_of_week=days,
        template=template,
    )


@dataclass
class Services:
    clock: FixedClock
    meal_repository: InMemoryMealRepository
    plan_repository: InMemoryPlanRepository
    activity_repository: InMemoryActivityRepository
    settings_repository: InMemoryUserSettingsRepository
    user_settings_service: UserSettingsService
    meal_log_service: MealLogService
    plan_service: DietPlanService
    reminder_service: ReminderService
    adherence_service: AdherenceService
    goal_service: EffectiveGoalService
    activity_service: ActivityService
    milestone_service: MilestoneService


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def services(clock: FixedClock) -> Services:
    meal_repository = InMemoryMealRepository()
    plan_repository = InMemoryPlanRepository()
    activity_repository = InMemoryActivityRepository()
    settings_repository = InMemoryUserSettingsRepository()
    user_settings_service = UserSettingsService(settings_repository)
    meal_log_service = MealLogService(
        meal_repository, user_settings_service, clock, plan_repository
    )
    goal_service = EffectiveGoalService(
        user_settings_service=user_settings_service,
        meal_repository=meal_repository,
        activity_repository=activity_repository,
        clock=clock,
    )
    return Services(
        clock=clock,
        meal_repository=meal_repository,
        plan_repository=plan_repository,
        activity_repository=activity_repository,
        settings_repository=settings_repository,
        user_settings_service=user_settings_service,
        meal_log_service=meal_log_service,
        plan_service=DietPlanService(plan_repository, clock),
        reminder_service=ReminderService(
            plan_repository, meal_log_service, user_settings_service, clock
        ),
        adherence_service=AdherenceService(
            plan_repository, meal_repository, user_settings_service, clock
        ),
        goal_service=goal_service,
        activity_service=ActivityService(activity_repository, goal_service, clock),
        milestone_service=MilestoneService(
            meal_repository, activity_repository, user_settings_service, clock
        ),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def snapshot_publisher() -> FakeSnapshotPublisher:
    return FakeSnapshotPublisher()


@pytest.fixture
def container(
    settings: Settings,
    services: Services,
    snapshot_publisher: FakeSnapshotPublisher,
) -> AppContainer:
    vision_service = VisionService(
        client=FakeVisionClient(),
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        clock=services.clock,
        user_settings_service=services.user_settings_service,
        meal_log_service=services.meal_log_service,
        plan_service=services.plan_service,
        reminder_service=services.reminder_service,
        adherence_service=services.adherence_service,
        goal_service=services.goal_service,
        activity_service=services.activity_service,
        milestone_service=services.milestone_service,
        snapshot_service=SnapshotService(
            services.meal_log_service, services.goal_service, snapshot_publisher
        ),
        vision_service=vision_service,
        close_resources=close_resources,
    )
