"""Supabase repository for diet plans and meal reminders."""

from dataclasses import dataclass
from datetime import datetime, time
from uuid import UUID

from supabase import Client

from diet_tracker.domain.meals import MealCategory
from diet_tracker.domain.plans import (
    DietPlan,
    MealReminder,
    MealTemplate,
    ScheduledMeal,
    TemplateItem,
)
from diet_tracker.services.plans import PlanRepository

_PLAN_COLUMNS = "id, name, description, is_active, created_at"
_SCHEDULED_COLUMNS = (
    "id, plan_id, position, name, category, time_of_day, days_of_week, template"
)
_REMINDER_COLUMNS = (
    "id, scheduled_meal_id, reminder_date, was_completed, completed_meal_id, "
    "completed_at, goal_achieved, goal_deviation"
)


@dataclass
class SupabasePlanRepository(PlanRepository):
    """Supabase implementation for diet plans, scheduled meals and reminders."""

    client: Client

    def create_plan(self, user_id: UUID, plan: DietPlan) -> None:
        response = (
            self.client.table("diet_plans")
            .insert(
                {
                    "id": str(plan.id),
                    "user_id": str(user_id),
                    "name": plan.name,
                    "description": plan.description,
                    "is_active": plan.is_active,
                    "created_at": plan.created_at.isoformat()
                    if plan.created_at
                    else None,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create diet plan")
        self._insert_scheduled_meals(plan)

    def update_plan(self, user_id: UUID, plan: DietPlan) -> None:
        """Update the plan row and upsert its scheduled meals by id.

        Scheduled meals no longer in the plan are deleted. Kept ones retain
        their ids, so reminders keep pointing at them.
        """
        self.client.table("diet_plans").update(
            {
                "name": plan.name,
                "description": plan.description,
                "is_active": plan.is_active,
            }
        ).eq("id", str(plan.id)).eq("user_id", str(user_id)).execute()
        kept = {str(scheduled_meal.id) for scheduled_meal in plan.scheduled_meals}
        response = (
            self.client.table("scheduled_meals")
            .select("id")
            .eq("plan_id", str(plan.id))
            .execute()
        )
        stale = [
            str(row["id"]) for row in response.data or [] if str(row["id"]) not in kept
        ]
        if stale:
            self.client.table("scheduled_meals").delete().in_("id", stale).execute()
        rows = _scheduled_meal_rows(plan)
        if rows:
            self.client.table("scheduled_meals").upsert(
                rows, on_conflict="id"
            ).execute()

    def get_plan(self, plan_id: UUID) -> DietPlan | None:
        response = (
            self.client.table("diet_plans")
            .select(_PLAN_COLUMNS)
            .eq("id", str(plan_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._with_scheduled_meals(response.data)[0]

    def list_plans(self, user_id: UUID) -> list[DietPlan]:
        response = (
            self.client.table("diet_plans")
            .select(_PLAN_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return self._with_scheduled_meals(response.data or [])

    def list_active_plans(self, user_id: UUID) -> list[DietPlan]:
        response = (
            self.client.table("diet_plans")
            .select(_PLAN_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("is_active", True)
            .order("created_at", desc=True)
            .execute()
        )
        return self._with_scheduled_meals(response.data or [])

    def set_plan_active(self, plan_id: UUID, is_active: bool) -> None:
        self.client.table("diet_plans").update({"is_active": is_active}).eq(
            "id", str(plan_id)
        ).execute()

    def delete_plan(self, plan_id: UUID) -> None:
        self.client.table("scheduled_meals").delete().eq(
            "plan_id", str(plan_id)
        ).execute()
        self.client.table("diet_plans").delete().eq("id", str(plan_id)).execute()

    def list_reminders(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealReminder]:
        response = (
            self.client.table("meal_reminders")
            .select(_REMINDER_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("reminder_date", start.isoformat())
            .lt("reminder_date", end.isoformat())
            .order("reminder_date", desc=False)
            .execute()
        )
        return [_parse_reminder(row) for row in response.data or []]

    def create_reminder(self, user_id: UUID, reminder: MealReminder) -> None:
        payload = _reminder_payload(reminder)
        payload["user_id"] = str(user_id)
        response = self.client.table("meal_reminders").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create meal reminder")

    def update_reminder(self, reminder: MealReminder) -> None:
        self.client.table("meal_reminders").update(_reminder_payload(reminder)).eq(
            "id", str(reminder.id)
        ).execute()

    def list_reminders_for_meal(self, meal_id: UUID) -> list[MealReminder]:
        response = (
            self.client.table("meal_reminders")
            .select(_REMINDER_COLUMNS)
            .eq("completed_meal_id", str(meal_id))
            .execute()
        )
        return [_parse_reminder(row) for row in response.data or []]

    def _insert_scheduled_meals(self, plan: DietPlan) -> None:
        rows = _scheduled_meal_rows(plan)
        if rows:
            self.client.table("scheduled_meals").insert(rows).execute()

    def _with_scheduled_meals(self, rows: list[dict[str, object]]) -> list[DietPlan]:
        if not rows:
            return []
        response = (
            self.client.table("scheduled_meals")
            .select(_SCHEDULED_COLUMNS)
            .in_("plan_id", [str(row["id"]) for row in rows])
            .order("position", desc=False)
            .execute()
        )
        meals_by_plan: dict[str, list[ScheduledMeal]] = {}
        for meal_row in response.data or []:
            meals_by_plan.setdefault(str(meal_row["plan_id"]), []).append(
                _parse_scheduled_meal(meal_row)
            )
        return [_parse_plan(row, meals_by_plan.get(str(row["id"]), [])) for row in rows]


def _scheduled_meal_rows(plan: DietPlan) -> list[dict[str, object]]:
    return [
        {
            "id": str(scheduled_meal.id),
            "plan_id": str(plan.id),
            "position": position,
            "name": scheduled_meal.name,
            "category": scheduled_meal.category.value,
            "time_of_day": scheduled_meal.time_of_day.isoformat(),
            "days_of_week": sorted(scheduled_meal.days_of_week),
            "template": _template_payload(scheduled_meal.template),
        }
        for position, scheduled_meal in enumerate(plan.scheduled_meals)
    ]


def _template_payload(template: MealTemplate | None) -> dict[str, object] | None:
    if template is None:
        return None
    return {
        "id": str(template.id),
        "name": template.name,
        "notes": template.notes,
        "items": [
            {
                "name": item.name,
                "portion": item.portion,
                "unit": item.unit,
                "calories": item.calories,
                "protein_g": item.protein_g,
                "carbs_g": item.carbs_g,
                "fat_g": item.fat_g,
            }
            for item in template.items
        ],
    }


def _parse_template(raw: dict[str, object] | None) -> MealTemplate | None:
    if not raw:
        return None
    return MealTemplate(
        id=UUID(str(raw["id"])),
        name=str(raw.get("name", "")),
        notes=raw.get("notes"),
        items=[
            TemplateItem(
                name=str(item.get("name", "")),
                portion=float(item.get("portion") or 0.0),
                unit=str(item.get("unit", "")),
                calories=int(item.get("calories") or 0),
                protein_g=float(item.get("protein_g") or 0.0),
                carbs_g=float(item.get("carbs_g") or 0.0),
                fat_g=float(item.get("fat_g") or 0.0),
            )
            for item in raw.get("items") or []
        ],
    )


def _parse_scheduled_meal(row: dict[str, object]) -> ScheduledMeal:
    return ScheduledMeal(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        category=MealCategory(str(row["category"])),
        time_of_day=time.fromisoformat(str(row["time_of_day"])),
        days_of_week=frozenset(int(day) for day in row.get("days_of_week") or []),
        template=_parse_template(row.get("template")),
    )


def _parse_plan(
    row: dict[str, object], scheduled_meals: list[ScheduledMeal]
) -> DietPlan:
    created_at = row.get("created_at")
    return DietPlan(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        description=row.get("description"),
        is_active=bool(row.get("is_active")),
        created_at=datetime.fromisoformat(str(created_at)) if created_at else None,
        scheduled_meals=scheduled_meals,
    )


def _reminder_payload(reminder: MealReminder) -> dict[str, object]:
    return {
        "id": str(reminder.id),
        "scheduled_meal_id": str(reminder.scheduled_meal_id),
        "reminder_date": reminder.reminder_date.isoformat(),
        "was_completed": reminder.was_completed,
        "completed_meal_id": str(reminder.completed_meal_id)
        if reminder.completed_meal_id
        else None,
        "completed_at": reminder.completed_at.isoformat()
        if reminder.completed_at
        else None,
        "goal_achieved": reminder.goal_achieved,
        "goal_deviation": reminder.goal_deviation,
    }


def _parse_reminder(row: dict[str, object]) -> MealReminder:
    completed_meal_id = row.get("completed_meal_id")
    completed_at = row.get("completed_at")
    goal_deviation = row.get("goal_deviation")
    return MealReminder(
        id=UUID(str(row["id"])),
        scheduled_meal_id=UUID(str(row["scheduled_meal_id"])),
        reminder_date=datetime.fromisoformat(str(row["reminder_date"])),
        was_completed=bool(row.get("was_completed")),
        completed_meal_id=UUID(str(completed_meal_id)) if completed_meal_id else None,
        completed_at=(
            datetime.fromisoformat(str(completed_at)) if completed_at else None
        ),
        goal_achieved=row.get("goal_achieved"),
        goal_deviation=float(goal_deviation) if goal_deviation is not None else None,
    )
