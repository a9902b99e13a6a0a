"""Diet plan management service."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from diet_tracker.domain.plans import DietPlan, MealReminder, ScheduledMeal
from diet_tracker.services.clock import Clock
from diet_tracker.services.schedule import resolve_occurrences

_logger = logging.getLogger(__name__)


class DietPlanError(ValueError):
    """Raised when a diet plan is invalid."""


class PlanRepository(Protocol):
    """Persistence interface for diet plans and meal reminders."""

    def create_plan(self, user_id: UUID, plan: DietPlan) -> None:
        """Persist a plan with its scheduled meals and templates."""

    def update_plan(self, user_id: UUID, plan: DietPlan) -> None:
        """Replace a plan's fields and scheduled meals."""

    def get_plan(self, plan_id: UUID) -> DietPlan | None:
        """Return a plan with its scheduled meals."""

    def list_plans(self, user_id: UUID) -> list[DietPlan]:
        """Return all plans, newest first."""

    def list_active_plans(self, user_id: UUID) -> list[DietPlan]:
        """Return active plans, newest first."""

    def set_plan_active(self, plan_id: UUID, is_active: bool) -> None:
        """Set a plan's active flag."""

    def delete_plan(self, plan_id: UUID) -> None:
        """Delete a plan and its scheduled meals."""

    def list_reminders(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealReminder]:
        """Return reminders whose date falls within a time range."""

    def create_reminder(self, user_id: UUID, reminder: MealReminder) -> None:
        """Persist a new reminder."""

    def update_reminder(self, reminder: MealReminder) -> None:
        """Persist changes to an existing reminder."""

    def list_reminders_for_meal(self, meal_id: UUID) -> list[MealReminder]:
        """Return reminders completed with a meal."""


@dataclass
class DietPlanService:
    """Service for creating plans and switching the active one."""

    repository: PlanRepository
    clock: Clock

    def create_plan(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        scheduled_meals: list[ScheduledMeal],
        description: str | None = None,
        is_active: bool = True,
    ) -> DietPlan:
        """Create a plan; an active plan deactivates every other plan."""
        if not scheduled_meals:
            raise DietPlanError("A diet plan must have at least one scheduled meal.")
        if is_active:
            self._deactivate_all(user_id)
        plan = DietPlan(
            name=name,
            description=description,
            is_active=is_active,
            created_at=self.clock.now(),
            scheduled_meals=list(scheduled_meals),
        )
        self.repository.create_plan(user_id, plan)
        _logger.info(
            "Created diet plan %s with %s meals (active=%s)",
            plan.id,
            len(scheduled_meals),
            is_active,
        )
        return plan

    def update_plan(  # noqa: PLR0913
        self,
        user_id: UUID,
        plan_id: UUID,
        name: str,
        scheduled_meals: list[ScheduledMeal],
        description: str | None = None,
        is_active: bool = True,
    ) -> DietPlan | None:
        """Replace a plan's details and scheduled meals.

        Scheduled meals that keep an id of this plan keep their reminders; any
        other id is replaced with a new one.
        """
        if not scheduled_meals:
            raise DietPlanError("A diet plan must have at least one scheduled meal.")
        current = self.repository.get_plan(plan_id)
        if current is None:
            return None
        if is_active:
            self._deactivate_all(user_id, except_id=plan_id)
        current_ids = {meal.id for meal in current.scheduled_meals}
        updated = replace(
            current,
            name=name,
            description=description,
            is_active=is_active,
            scheduled_meals=[
                meal if meal.id in current_ids else replace(meal, id=uuid4())
                for meal in scheduled_meals
            ],
        )
        self.repository.update_plan(user_id, updated)
        return updated

    def activate_plan(self, user_id: UUID, plan_id: UUID) -> DietPlan | None:
        """Make a plan the only active one."""
        plan = self.repository.get_plan(plan_id)
        if plan is None:
            return None
        self._deactivate_all(user_id, except_id=plan_id)
        self.repository.set_plan_active(plan_id, True)
        _logger.info("Activated diet plan %s", plan_id)
        return replace(plan, is_active=True)

    def deactivate_plan(self, plan_id: UUID) -> DietPlan | None:
        plan = self.repository.get_plan(plan_id)
        if plan is None:
            return None
        self.repository.set_plan_active(plan_id, False)
        return replace(plan, is_active=False)

    def delete_plan(self, plan_id: UUID) -> DietPlan | None:
        """Delete a plan; return the deleted plan, or None if it does not exist."""
        plan = self.repository.get_plan(plan_id)
        if plan is None:
            return None
        self.repository.delete_plan(plan_id)
        _logger.info("Deleted diet plan %s", plan_id)
        return plan

    def list_plans(self, user_id: UUID) -> list[DietPlan]:
        return self.repository.list_plans(user_id)

    def list_active_plans(self, user_id: UUID) -> list[DietPlan]:
        return self.repository.list_active_plans(user_id)

    def schedule_for_day(self, user_id: UUID, day: date) -> list[ScheduledMeal]:
        """Return the day's scheduled meals ordered by time of day."""
        plans = self.repository.list_active_plans(user_id)
        occurrences = resolve_occurrences(day, plans)
        return sorted(occurrences, key=lambda meal: meal.time_of_day)

    def _deactivate_all(self, user_id: UUID, except_id: UUID | None = None) -> None:
        for plan in self.repository.list_active_plans(user_id):
            if plan.id != except_id:
                self.repository.set_plan_active(plan.id, False)
