"""User settings service."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from diet_tracker.domain.goals import DayScopedAmount, GoalOptions, NutritionGoals
from diet_tracker.domain.milestones import EarnedMilestone

BURNED_CALORIES_CACHE = "burned_calories"
ROLLOVER_CALORIES_CACHE = "rollover_calories"


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the user's timezone if set."""

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        """Update the user's timezone."""

    def get_use_metric_units(self, user_id: UUID) -> bool | None:
        """Return the unit preference if set."""

    def set_use_metric_units(self, user_id: UUID, use_metric_units: bool) -> None:
        """Update the unit preference."""

    def get_goals(self, user_id: UUID) -> NutritionGoals | None:
        """Return the user's base goals if set."""

    def set_goals(self, user_id: UUID, goals: NutritionGoals) -> None:
        """Persist the user's base goals."""

    def get_goal_options(self, user_id: UUID) -> GoalOptions | None:
        """Return the goal adjustment toggles if set."""

    def set_goal_options(self, user_id: UUID, options: GoalOptions) -> None:
        """Persist the goal adjustment toggles."""

    def get_day_cache(self, user_id: UUID, key: str) -> DayScopedAmount | None:
        """Return a day-scoped cache entry."""

    def set_day_cache(self, user_id: UUID, key: str, entry: DayScopedAmount) -> None:
        """Store a day-scoped cache entry, replacing any previous one."""

    def list_earned_milestones(self, user_id: UUID) -> list[EarnedMilestone]:
        """Return milestones the user has earned."""

    def add_earned_milestone(self, user_id: UUID, earned: EarnedMilestone) -> None:
        """Record an earned milestone."""


@dataclass
class UserSettingsService:
    """Service for user settings."""

    repository: UserSettingsRepository
    default_timezone: str = "UTC"

    def get_timezone(self, user_id: UUID) -> str:
        """Return the user timezone or the default if unset."""
        return self.repository.get_timezone(user_id) or self.default_timezone

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        """Persist a user's timezone."""
        self.repository.set_timezone(user_id, timezone)

    def uses_metric_units(self, user_id: UUID) -> bool:
        """Return True unless the user chose imperial units."""
        preference = self.repository.get_use_metric_units(user_id)
        return True if preference is None else preference

    def set_use_metric_units(self, user_id: UUID, use_metric_units: bool) -> None:
        self.repository.set_use_metric_units(user_id, use_metric_units)

    def get_goals(self, user_id: UUID) -> NutritionGoals:
        """Return the user's goals, falling back to the defaults."""
        return self.repository.get_goals(user_id) or NutritionGoals()

    def set_goals(self, user_id: UUID, goals: NutritionGoals) -> None:
        self.repository.set_goals(user_id, goals)

    def get_goal_options(self, user_id: UUID) -> GoalOptions:
        """Return the goal toggles; both are off unless set."""
        return self.repository.get_goal_options(user_id) or GoalOptions()

    def set_goal_options(self, user_id: UUID, options: GoalOptions) -> None:
        self.repository.set_goal_options(user_id, options)

    def get_day_cache(self, user_id: UUID, key: str) -> DayScopedAmount | None:
        return self.repository.get_day_cache(user_id, key)

    def set_day_cache(
        self, user_id: UUID, key: str, day: date, amount: int
    ) -> DayScopedAmount:
        """Stamp an amount with its day and store it."""
        entry = DayScopedAmount(day=day, amount=amount)
        self.repository.set_day_cache(user_id, key, entry)
        return entry

    def list_earned_milestones(self, user_id: UUID) -> list[EarnedMilestone]:
        return self.repository.list_earned_milestones(user_id)

    def add_earned_milestone(self, user_id: UUID, earned: EarnedMilestone) -> None:
        self.repository.add_earned_milestone(user_id, earned)
