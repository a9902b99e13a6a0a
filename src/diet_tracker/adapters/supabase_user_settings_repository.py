"""Supabase repository for user settings."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from diet_tracker.domain.goals import DayScopedAmount, GoalOptions, NutritionGoals
from diet_tracker.domain.milestones import EarnedMilestone, Milestone
from diet_tracker.services.user_settings import UserSettingsRepository


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings, day caches and milestones."""

    client: Client

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the stored timezone for a user."""
        row = self._settings_row(user_id, "timezone")
        return row.get("timezone") if row else None

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        """Update the user's timezone."""
        self._upsert_settings(user_id, {"timezone": timezone})

    def get_use_metric_units(self, user_id: UUID) -> bool | None:
        row = self._settings_row(user_id, "use_metric_units")
        return row.get("use_metric_units") if row else None

    def set_use_metric_units(self, user_id: UUID, use_metric_units: bool) -> None:
        self._upsert_settings(user_id, {"use_metric_units": use_metric_units})

    def get_goals(self, user_id: UUID) -> NutritionGoals | None:
        row = self._settings_row(
            user_id, "calorie_goal, protein_goal, carbs_goal, fat_goal"
        )
        if not row or row.get("calorie_goal") is None:
            return None
        return NutritionGoals(
            calories=int(row["calorie_goal"]),
            protein_g=float(row.get("protein_goal") or 0.0),
            carbs_g=float(row.get("carbs_goal") or 0.0),
            fat_g=float(row.get("fat_goal") or 0.0),
        )

    def set_goals(self, user_id: UUID, goals: NutritionGoals) -> None:
        self._upsert_settings(
            user_id,
            {
                "calorie_goal": goals.calories,
                "protein_goal": goals.protein_g,
                "carbs_goal": goals.carbs_g,
                "fat_goal": goals.fat_g,
            },
        )

    def get_goal_options(self, user_id: UUID) -> GoalOptions | None:
        row = self._settings_row(user_id, "include_burned_calories, include_rollover")
        if not row:
            return None
        return GoalOptions(
            include_burned_calories=bool(row.get("include_burned_calories")),
            include_rollover=bool(row.get("include_rollover")),
        )

    def set_goal_options(self, user_id: UUID, options: GoalOptions) -> None:
        self._upsert_settings(
            user_id,
            {
                "include_burned_calories": options.include_burned_calories,
                "include_rollover": options.include_rollover,
            },
        )

    def get_day_cache(self, user_id: UUID, key: str) -> DayScopedAmount | None:
        response = (
            self.client.table("user_day_caches")
            .select("day, amount")
            .eq("user_id", str(user_id))
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return DayScopedAmount(
            day=date.fromisoformat(str(row["day"])), amount=int(row["amount"])
        )

    def set_day_cache(self, user_id: UUID, key: str, entry: DayScopedAmount) -> None:
        self.client.table("user_day_caches").upsert(
            {
                "user_id": str(user_id),
                "key": key,
                "day": entry.day.isoformat(),
                "amount": entry.amount,
            },
            on_conflict="user_id,key",
        ).execute()

    def list_earned_milestones(self, user_id: UUID) -> list[EarnedMilestone]:
        response = (
            self.client.table("earned_milestones")
            .select("milestone, earned_on")
            .eq("user_id", str(user_id))
            .order("earned_on", desc=False)
            .execute()
        )
        return [
            EarnedMilestone(
                milestone=Milestone(str(row["milestone"])),
                earned_on=date.fromisoformat(str(row["earned_on"])),
            )
            for row in response.data or []
        ]

    def add_earned_milestone(self, user_id: UUID, earned: EarnedMilestone) -> None:
        self.client.table("earned_milestones").upsert(
            {
                "user_id": str(user_id),
                "milestone": earned.milestone.value,
                "earned_on": earned.earned_on.isoformat(),
            },
            on_conflict="user_id,milestone",
        ).execute()

    def _settings_row(self, user_id: UUID, columns: str) -> dict[str, object] | None:
        response = (
            self.client.table("user_settings")
            .select(columns)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def _upsert_settings(self, user_id: UUID, values: dict[str, object]) -> None:
        self.client.table("user_settings").upsert(
            {
                "user_id": str(user_id),
                **values,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
