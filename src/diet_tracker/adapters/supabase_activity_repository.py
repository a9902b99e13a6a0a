"""Supabase repository for exercise and weight entries."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from diet_tracker.domain.activity import (
    ExerciseIntensity,
    ExerciseRecord,
    ExerciseType,
    WeightEntry,
)
from diet_tracker.services.activity import ActivityRepository


@dataclass
class SupabaseActivityRepository(ActivityRepository):
    """Supabase implementation for exercises and weight entries."""

    client: Client

    def create_exercise(self, user_id: UUID, exercise: ExerciseRecord) -> None:
        response = (
            self.client.table("exercises")
            .insert(
                {
                    "id": str(exercise.id),
                    "user_id": str(user_id),
                    "exercise_type": exercise.exercise_type.value,
                    "calories": exercise.calories,
                    "day": exercise.day.isoformat(),
                    "duration_minutes": exercise.duration_minutes,
                    "intensity": exercise.intensity.value
                    if exercise.intensity
                    else None,
                    "notes": exercise.notes,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create exercise")

    def list_exercises(
        self, user_id: UUID, start: date, end: date
    ) -> list[ExerciseRecord]:
        response = (
            self.client.table("exercises")
            .select(
                "id, exercise_type, calories, day, duration_minutes, intensity, notes"
            )
            .eq("user_id", str(user_id))
            .gte("day", start.isoformat())
            .lte("day", end.isoformat())
            .order("day", desc=False)
            .execute()
        )
        return [_parse_exercise(row) for row in response.data or []]

    def count_exercises(self, user_id: UUID) -> int:
        response = (
            self.client.table("exercises")
            .select("id", count="exact")
            .eq("user_id", str(user_id))
            .execute()
        )
        return response.count or 0

    def create_weight(self, user_id: UUID, entry: WeightEntry) -> None:
        response = (
            self.client.table("weight_entries")
            .insert(
                {
                    "id": str(entry.id),
                    "user_id": str(user_id),
                    "weight_kg": entry.weight_kg,
                    "recorded_at": entry.recorded_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create weight entry")

    def list_weights(self, user_id: UUID, limit: int) -> list[WeightEntry]:
        response = (
            self.client.table("weight_entries")
            .select("id, weight_kg, recorded_at")
            .eq("user_id", str(user_id))
            .order("recorded_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [
            WeightEntry(
                id=UUID(str(row["id"])),
                weight_kg=float(row["weight_kg"]),
                recorded_at=datetime.fromisoformat(str(row["recorded_at"])),
            )
            for row in response.data or []
        ]


def _parse_exercise(row: dict[str, object]) -> ExerciseRecord:
    intensity = row.get("intensity")
    return ExerciseRecord(
        id=UUID(str(row["id"])),
        exercise_type=ExerciseType(str(row["exercise_type"])),
        calories=int(row.get("calories") or 0),
        day=date.fromisoformat(str(row["day"])),
        duration_minutes=int(row.get("duration_minutes") or 0),
        intensity=ExerciseIntensity(intensity) if intensity else None,
        notes=row.get("notes"),
    )
