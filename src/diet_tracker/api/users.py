"""Per-user API endpoints with token auth."""

from __future__ import annotations

import base64
import binascii
from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from diet_tracker.api.models import (
    CompleteScheduledMealIn,
    ExerciseIn,
    GenerateGoalsIn,
    GoalOptionsIn,
    GoalsIn,
    MealIn,
    PhotoMealIn,
    PlanIn,
    SettingsIn,
    WeightIn,
)
from diet_tracker.api.serializers import (
    adherence_payload,
    daily_adherence_payload,
    day_summary_payload,
    effective_goal_payload,
    exercise_payload,
    goals_payload,
    meal_payload,
    milestone_payload,
    plan_payload,
    reminder_payload,
    scheduled_meal_payload,
    slot_payload,
    weight_payload,
)
from diet_tracker.services.adherence import STREAK_THRESHOLD
from diet_tracker.services.goals import generate_goals
from diet_tracker.services.plans import DietPlanError

if TYPE_CHECKING:
    from diet_tracker.containers import AppContainer
    from diet_tracker.services.user_settings import UserSettingsService

MAX_RANGE_DAYS = 366


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(
    prefix="/users/{user_id}",
    tags=["users"],
    dependencies=[Depends(require_api_token)],
)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _not_found(what: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found"
    )


def _unprocessable(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=detail
    )


@router.post("/meals", status_code=status.HTTP_201_CREATED)
async def log_meal(user_id: UUID, body: MealIn, request: Request) -> dict[str, object]:
    """Log a meal and refresh the day summary."""
    container = _container(request)
    meal = container.meal_log_service.log_meal(
        user_id,
        name=body.name,
        items=[item.to_meal_item() for item in body.items],
        category=body.category,
        logged_at=body.logged_at,
        notes=body.notes,
    )
    await container.snapshot_service.publish(user_id)
    return meal_payload(meal)


@router.post("/meals/photo", status_code=status.HTTP_201_CREATED)
async def log_meal_from_photo(
    user_id: UUID, body: PhotoMealIn, request: Request
) -> dict[str, object]:
    """Estimate a meal from a photo and log it."""
    container = _container(request)
    try:
        image_bytes = base64.b64decode(body.image_base64, validate=True)
    except binascii.Error as exc:
        raise _unprocessable("image_base64 is not valid base64") from exc
    estimate = await container.vision_service.estimate(image_bytes)
    meal = container.meal_log_service.log_estimate(user_id, estimate, body.category)
    await container.snapshot_service.publish(user_id)
    return meal_payload(meal)


@router.get("/meals")
async def list_meals(
    user_id: UUID, request: Request, day: date | None = None
) -> dict[str, object]:
    container = _container(request)
    target_day = day or container.meal_log_service.today(user_id)
    meals = container.meal_log_service.list_meals_for_day(user_id, target_day)
    return {"day": target_day.isoformat(), "meals": [meal_payload(m) for m in meals]}


@router.delete("/meals/{meal_id}")
async def delete_meal(
    user_id: UUID, meal_id: UUID, request: Request
) -> dict[str, object]:
    container = _container(request)
    meal = container.meal_log_service.delete_meal(user_id, meal_id)
    if meal is None:
        raise _not_found("Meal")
    await container.snapshot_service.publish(user_id)
    return {"deleted": str(meal.id)}


@router.get("/summary")
async def day_summary(
    user_id: UUID, request: Request, day: date | None = None
) -> dict[str, object]:
    container = _container(request)
    target_day = day or container.meal_log_service.today(user_id)
    summary = container.meal_log_service.get_day_summary(user_id, target_day)
    payload = day_summary_payload(summary)
    payload["remaining_calories"] = container.goal_service.remaining_calories(
        user_id, target_day
    )
    return payload


@router.post("/plans", status_code=status.HTTP_201_CREATED)
async def create_plan(
    user_id: UUID, body: PlanIn, request: Request
) -> dict[str, object]:
    container = _container(request)
    try:
        plan = container.plan_service.create_plan(
            user_id,
            name=body.name,
            scheduled_meals=[meal.to_domain() for meal in body.scheduled_meals],
            description=body.description,
            is_active=body.is_active,
        )
    except DietPlanError as exc:
        raise _unprocessable(str(exc)) from exc
    return plan_payload(plan)


@router.get("/plans")
async def list_plans(user_id: UUID, request: Request) -> dict[str, object]:
    plans = _container(request).plan_service.list_plans(user_id)
    return {"plans": [plan_payload(plan) for plan in plans]}


@router.put("/plans/{plan_id}")
async def update_plan(
    user_id: UUID, plan_id: UUID, body: PlanIn, request: Request
) -> dict[str, object]:
    container = _container(request)
    try:
        plan = container.plan_service.update_plan(
            user_id,
            plan_id,
            name=body.name,
            scheduled_meals=[meal.to_domain() for meal in body.scheduled_meals],
            description=body.description,
            is_active=body.is_active,
        )
    except DietPlanError as exc:
        raise _unprocessable(str(exc)) from exc
    if plan is None:
        raise _not_found("Plan")
    return plan_payload(plan)


@router.post("/plans/{plan_id}/activate")
async def activate_plan(
    user_id: UUID, plan_id: UUID, request: Request
) -> dict[str, object]:
    plan = _container(request).plan_service.activate_plan(user_id, plan_id)
    if plan is None:
        raise _not_found("Plan")
    return plan_payload(plan)


@router.post("/plans/{plan_id}/deactivate")
async def deactivate_plan(
    user_id: UUID, plan_id: UUID, request: Request
) -> dict[str, object]:
    plan = _container(request).plan_service.deactivate_plan(plan_id)
    if plan is None:
        raise _not_found("Plan")
    return plan_payload(plan)


@router.delete("/plans/{plan_id}")
async def delete_plan(
    user_id: UUID, plan_id: UUID, request: Request
) -> dict[str, str]:
    if _container(request).plan_service.delete_plan(plan_id) is None:
        raise _not_found("Plan")
    return {"deleted": str(plan_id)}


@router.get("/schedule")
async def day_schedule(
    user_id: UUID, request: Request, day: date | None = None
) -> dict[str, object]:
    """Return the scheduled meals that recur on a day."""
    container = _container(request)
    target_day = day or container.meal_log_service.today(user_id)
    scheduled = container.plan_service.schedule_for_day(user_id, target_day)
    return {
        "day": target_day.isoformat(),
        "scheduled_meals": [scheduled_meal_payload(meal) for meal in scheduled],
    }


@router.post("/reminders/ensure")
async def ensure_reminders(
    user_id: UUID, request: Request, day: date | None = None
) -> dict[str, object]:
    reminders = _container(request).reminder_service.ensure_reminders(user_id, day)
    return {"reminders": [reminder_payload(reminder) for reminder in reminders]}


@router.get("/reminders/upcoming")
async def upcoming_reminders(
    user_id: UUID, request: Request, days: int = 7
) -> dict[str, object]:
    """Return timed reminder slots for the notification scheduler."""
    slots = _container(request).reminder_service.upcoming_slots(user_id, days)
    return {"slots": [slot_payload(slot) for slot in slots]}


@router.post("/scheduled-meals/{scheduled_meal_id}/complete")
async def complete_scheduled_meal(
    user_id: UUID,
    scheduled_meal_id: UUID,
    body: CompleteScheduledMealIn,
    request: Request,
) -> dict[str, object]:
    """Mark today's occurrence of a scheduled meal as eaten."""
    container = _container(request)
    reminder = container.reminder_service.complete_scheduled_meal(
        user_id, scheduled_meal_id, body.meal_id
    )
    if reminder is None:
        raise _not_found("Scheduled meal or meal")
    await container.snapshot_service.publish(user_id)
    return reminder_payload(reminder)


@router.get("/adherence")
async def adherence(
    user_id: UUID, request: Request, day: date | None = None
) -> dict[str, object]:
    report = _container(request).adherence_service.get_adherence(user_id, day)
    return adherence_payload(report)


@router.get("/adherence/daily")
async def daily_adherence(
    user_id: UUID, start: date, end: date, request: Request
) -> dict[str, object]:
    if end < start or (end - start).days >= MAX_RANGE_DAYS:
        raise _unprocessable("Invalid date range")
    rows = _container(request).adherence_service.get_daily_adherence(
        user_id, start, end
    )
    return {"days": [daily_adherence_payload(row) for row in rows]}


@router.get("/adherence/streak")
async def adherence_streak(
    user_id: UUID, request: Request, threshold: float = STREAK_THRESHOLD
) -> dict[str, int]:
    streak = _container(request).adherence_service.adherence_streak(
        user_id, threshold=threshold
    )
    return {"streak": streak}


@router.get("/goals")
async def get_goals(user_id: UUID, request: Request) -> dict[str, object]:
    settings = _container(request).user_settings_service
    return _goals_response(settings, user_id)


@router.put("/goals")
async def set_goals(
    user_id: UUID, body: GoalsIn, request: Request
) -> dict[str, object]:
    container = _container(request)
    settings = container.user_settings_service
    settings.set_goals(user_id, body.to_domain())
    await container.snapshot_service.publish(user_id)
    return _goals_response(settings, user_id)


@router.put("/goals/options")
async def set_goal_options(
    user_id: UUID, body: GoalOptionsIn, request: Request
) -> dict[str, object]:
    container = _container(request)
    settings = container.user_settings_service
    settings.set_goal_options(user_id, body.to_domain())
    await container.snapshot_service.publish(user_id)
    return _goals_response(settings, user_id)


@router.post("/goals/generate")
async def suggest_goals(
    user_id: UUID, body: GenerateGoalsIn, request: Request
) -> dict[str, object]:
    """Suggest goals from activity level and weight goal; optionally apply them."""
    container = _container(request)
    suggestion = generate_goals(body.activity_level, body.goal)
    if body.apply:
        container.user_settings_service.set_goals(user_id, suggestion)
        await container.snapshot_service.publish(user_id)
    options = container.user_settings_service.get_goal_options(user_id)
    return goals_payload(suggestion, options)


@router.get("/goals/effective")
async def effective_goal(
    user_id: UUID, request: Request, day: date | None = None
) -> dict[str, object]:
    goal = _container(request).goal_service.effective_goal(user_id, day)
    return effective_goal_payload(goal)


@router.put("/settings")
async def update_settings(
    user_id: UUID, body: SettingsIn, request: Request
) -> dict[str, object]:
    settings = _container(request).user_settings_service
    if body.timezone is not None:
        try:
            ZoneInfo(body.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise _unprocessable(f"Unknown timezone {body.timezone!r}") from exc
        settings.set_timezone(user_id, body.timezone)
    if body.use_metric_units is not None:
        settings.set_use_metric_units(user_id, body.use_metric_units)
    return {
        "timezone": settings.get_timezone(user_id),
        "use_metric_units": settings.uses_metric_units(user_id),
    }


@router.post("/exercises", status_code=status.HTTP_201_CREATED)
async def log_exercise(
    user_id: UUID, body: ExerciseIn, request: Request
) -> dict[str, object]:
    container = _container(request)
    exercise = container.activity_service.log_exercise(
        user_id,
        exercise_type=body.exercise_type,
        calories=body.calories,
        duration_minutes=body.duration_minutes,
        intensity=body.intensity,
        notes=body.notes,
        day=body.day,
    )
    await container.snapshot_service.publish(user_id)
    return exercise_payload(exercise)


@router.get("/exercises")
async def list_exercises(
    user_id: UUID, start: date, end: date, request: Request
) -> dict[str, object]:
    exercises = _container(request).activity_service.list_exercises(
        user_id, start, end
    )
    return {"exercises": [exercise_payload(exercise) for exercise in exercises]}


@router.post("/weights", status_code=status.HTTP_201_CREATED)
async def log_weight(
    user_id: UUID, body: WeightIn, request: Request
) -> dict[str, object]:
    entry = _container(request).activity_service.log_weight(
        user_id, body.weight, body.use_metric_units
    )
    return weight_payload(entry)


@router.get("/weights")
async def weight_history(
    user_id: UUID, request: Request, limit: int = 30
) -> dict[str, object]:
    entries = _container(request).activity_service.weight_history(user_id, limit)
    return {"weights": [weight_payload(entry) for entry in entries]}


@router.post("/milestones/check")
async def check_milestones(user_id: UUID, request: Request) -> dict[str, object]:
    """Award and return milestones earned since the last check."""
    awarded = _container(request).milestone_service.check_and_award(user_id)
    return {"awarded": [milestone_payload(entry) for entry in awarded]}


@router.get("/milestones")
async def list_milestones(user_id: UUID, request: Request) -> dict[str, object]:
    earned = _container(request).milestone_service.list_earned(user_id)
    return {"milestones": [milestone_payload(entry) for entry in earned]}


def _goals_response(
    settings: UserSettingsService, user_id: UUID
) -> dict[str, object]:
    return goals_payload(
        settings.get_goals(user_id), settings.get_goal_options(user_id)
    )
