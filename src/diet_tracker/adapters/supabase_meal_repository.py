"""Supabase repository for meals and day summaries."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from diet_tracker.domain.meals import DaySummary, Meal, MealCategory, MealItem
from diet_tracker.services.meals import MealRepository

_MEAL_COLUMNS = "id, name, logged_at, category, notes, confidence"
_ITEM_COLUMNS = (
    "id, meal_id, position, name, portion, unit, calories, protein_g, carbs_g, fat_g"
)
_SUMMARY_COLUMNS = (
    "day, total_calories, total_protein_g, total_carbs_g, total_fat_g, meal_count"
)


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals, meal items and day summaries."""

    client: Client

    def create_meal(self, user_id: UUID, meal: Meal) -> None:
        """Insert a meal row followed by its item rows."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "id": str(meal.id),
                    "user_id": str(user_id),
                    "name": meal.name,
                    "logged_at": meal.logged_at.isoformat(),
                    "category": meal.category.value if meal.category else None,
                    "notes": meal.notes,
                    "confidence": meal.confidence,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        payload = [
            {
                "id": str(item.id),
                "meal_id": str(meal.id),
                "position": position,
                "name": item.name,
                "portion": item.portion,
                "unit": item.unit,
                "calories": item.calories,
                "protein_g": item.protein_g,
                "carbs_g": item.carbs_g,
                "fat_g": item.fat_g,
            }
            for position, item in enumerate(meal.items)
        ]
        if payload:
            self.client.table("meal_items").insert(payload).execute()

    def get_meal(self, meal_id: UUID) -> Meal | None:
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._with_items(response.data)[0]

    def list_meals(self, user_id: UUID, start: datetime, end: datetime) -> list[Meal]:
        """Return meals with ``start <= logged_at < end``, oldest first."""
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return self._with_items(response.data or [])

    def delete_meal(self, meal_id: UUID) -> None:
        self.client.table("meal_items").delete().eq("meal_id", str(meal_id)).execute()
        self.client.table("meals").delete().eq("id", str(meal_id)).execute()

    def count_meals(self, user_id: UUID) -> int:
        response = (
            self.client.table("meals")
            .select("id", count="exact")
            .eq("user_id", str(user_id))
            .execute()
        )
        return response.count or 0

    def get_day_summary(self, user_id: UUID, day: date) -> DaySummary | None:
        response = (
            self.client.table("day_summaries")
            .select(_SUMMARY_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("day", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_summary(response.data[0])

    def save_day_summary(self, user_id: UUID, summary: DaySummary) -> None:
        """Upsert the summary keyed by user and day."""
        self.client.table("day_summaries").upsert(
            {
                "user_id": str(user_id),
                "day": summary.day.isoformat(),
                "total_calories": summary.total_calories,
                "total_protein_g": summary.total_protein_g,
                "total_carbs_g": summary.total_carbs_g,
                "total_fat_g": summary.total_fat_g,
                "meal_count": summary.meal_count,
            },
            on_conflict="user_id,day",
        ).execute()

    def list_day_summaries(
        self, user_id: UUID, start: date, end: date
    ) -> list[DaySummary]:
        response = (
            self.client.table("day_summaries")
            .select(_SUMMARY_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("day", start.isoformat())
            .lte("day", end.isoformat())
            .order("day", desc=False)
            .execute()
        )
        return [_parse_summary(row) for row in response.data or []]

    def _with_items(self, rows: list[dict[str, object]]) -> list[Meal]:
        if not rows:
            return []
        response = (
            self.client.table("meal_items")
            .select(_ITEM_COLUMNS)
            .in_("meal_id", [str(row["id"]) for row in rows])
            .order("position", desc=False)
            .execute()
        )
        items_by_meal: dict[str, list[MealItem]] = {}
        for item_row in response.data or []:
            items_by_meal.setdefault(str(item_row["meal_id"]), []).append(
                _parse_item(item_row)
            )
        return [_parse_meal(row, items_by_meal.get(str(row["id"]), [])) for row in rows]


def _parse_meal(row: dict[str, object], items: list[MealItem]) -> Meal:
    category = row.get("category")
    return Meal(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
        category=MealCategory(category) if category else None,
        notes=row.get("notes"),
        confidence=float(row.get("confidence") or 0.0),
        items=items,
    )


def _parse_item(row: dict[str, object]) -> MealItem:
    return MealItem(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        portion=float(row.get("portion") or 0.0),
        unit=str(row.get("unit", "")),
        calories=int(row.get("calories") or 0),
        protein_g=float(row.get("protein_g") or 0.0),
        carbs_g=float(row.get("carbs_g") or 0.0),
        fat_g=float(row.get("fat_g") or 0.0),
    )


def _parse_summary(row: dict[str, object]) -> DaySummary:
    return DaySummary(
        day=date.fromisoformat(str(row["day"])),
        total_calories=int(row.get("total_calories") or 0),
        total_protein_g=float(row.get("total_protein_g") or 0.0),
        total_carbs_g=float(row.get("total_carbs_g") or 0.0),
        total_fat_g=float(row.get("total_fat_g") or 0.0),
        meal_count=int(row.get("meal_count") or 0),
    )
