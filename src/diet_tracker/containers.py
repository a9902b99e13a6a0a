"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from diet_tracker.adapters.httpx_snapshot_publisher import HttpxSnapshotPublisher
from diet_tracker.adapters.openai_vision_client import OpenAIVisionClient
from diet_tracker.adapters.supabase_activity_repository import (
    SupabaseActivityRepository,
)
from diet_tracker.adapters.supabase_meal_repository import SupabaseMealRepository
from diet_tracker.adapters.supabase_plan_repository import SupabasePlanRepository
from diet_tracker.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from diet_tracker.config import Settings
from diet_tracker.services.activity import ActivityService
from diet_tracker.services.adherence import AdherenceService
from diet_tracker.services.clock import Clock, SystemClock
from diet_tracker.services.goals import EffectiveGoalService
from diet_tracker.services.meals import MealLogService
from diet_tracker.services.milestones import MilestoneService
from diet_tracker.services.plans import DietPlanService
from diet_tracker.services.reminders import ReminderService
from diet_tracker.services.snapshot import SnapshotService
from diet_tracker.services.user_settings import UserSettingsService
from diet_tracker.services.vision import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    clock: Clock
    user_settings_service: UserSettingsService
    meal_log_service: MealLogService
    plan_service: DietPlanService
    reminder_service: ReminderService
    adherence_service: AdherenceService
    goal_service: EffectiveGoalService
    activity_service: ActivityService
    milestone_service: MilestoneService
    snapshot_service: SnapshotService
    vision_service: VisionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    clock = SystemClock()
    meal_repository = SupabaseMealRepository(supabase_client)
    plan_repository = SupabasePlanRepository(supabase_client)
    activity_repository = SupabaseActivityRepository(supabase_client)
    user_settings_service = UserSettingsService(
        SupabaseUserSettingsRepository(supabase_client),
        default_timezone=resolved_settings.default_timezone,
    )
    meal_log_service = MealLogService(
        meal_repository, user_settings_service, clock, plan_repository
    )
    goal_service = EffectiveGoalService(
        user_settings_service=user_settings_service,
        meal_repository=meal_repository,
        activity_repository=activity_repository,
        clock=clock,
    )
    openai_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    vision_service = VisionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    snapshot_publisher = (
        HttpxSnapshotPublisher.create(resolved_settings.snapshot_webhook_url)
        if resolved_settings.snapshot_webhook_url
        else None
    )

    async def close_resources() -> None:
        await openai_client.close()
        if snapshot_publisher is not None:
            await snapshot_publisher.close()

    return AppContainer(
        settings=resolved_settings,
        clock=clock,
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
        snapshot_service=SnapshotService(
            meal_log_service, goal_service, snapshot_publisher
        ),
        vision_service=vision_service,
        close_resources=close_resources,
    )
