"""Exercise and weight tracking service."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from diet_tracker.domain.activity import (
    ExerciseIntensity,
    ExerciseRecord,
    ExerciseType,
    WeightEntry,
)
from diet_tracker.services.clock import Clock
from diet_tracker.services.goals import EffectiveGoalService

_logger = logging.getLogger(__name__)

KG_PER_LB = 0.453592


class ActivityRepository(Protocol):
    """Persistence interface for exercise and weight entries."""

    def create_exercise(self, user_id: UUID, exercise: ExerciseRecord) -> None:
        """Persist an exercise record."""

    def list_exercises(
        self, user_id: UUID, start: date, end: date
    ) -> list[ExerciseRecord]:
        """Return exercises for days in ``[start, end]``."""

    def count_exercises(self, user_id: UUID) -> int:
        """Return the number of exercises the user has logged."""

    def create_weight(self, user_id: UUID, entry: WeightEntry) -> None:
        """Persist a weight entry."""

    def list_weights(self, user_id: UUID, limit: int) -> list[WeightEntry]:
        """Return recent weight entries, newest first."""


@dataclass
class ActivityService:
    """Service for logging exercise and weight."""

    repository: ActivityRepository
    goal_service: EffectiveGoalService
    clock: Clock

    def log_exercise(  # noqa: PLR0913
        self,
        user_id: UUID,
        exercise_type: ExerciseType,
        calories: int,
        duration_minutes: int = 0,
        intensity: ExerciseIntensity | None = None,
        notes: str | None = None,
        day: date | None = None,
    ) -> ExerciseRecord:
        """Persist an exercise; logging for today refreshes burned calories."""
        today = self.goal_service.today(user_id)
        exercise = ExerciseRecord(
            exercise_type=exercise_type,
            calories=calories,
            day=day or today,
            duration_minutes=duration_minutes,
            intensity=intensity,
            notes=notes,
        )
        self.repository.create_exercise(user_id, exercise)
        if exercise.day == today:
            self.goal_service.refresh_burned_calories(user_id, today)
        return exercise

    def list_exercises(
        self, user_id: UUID, start: date, end: date
    ) -> list[ExerciseRecord]:
        return self.repository.list_exercises(user_id, start, end)

    def log_weight(
        self, user_id: UUID, weight: float, use_metric_units: bool | None = None
    ) -> WeightEntry:
        """Persist a weight given in kilograms, or pounds when not metric.

        The unit defaults to the user's stored preference.
        """
        if use_metric_units is None:
            settings = self.goal_service.user_settings_service
            use_metric_units = settings.uses_metric_units(user_id)
        weight_kg = weight if use_metric_units else weight * KG_PER_LB
        entry = WeightEntry(weight_kg=weight_kg, recorded_at=self.clock.now())
        self.repository.create_weight(user_id, entry)
        _logger.info("Logged weight %.1f kg", weight_kg)
        return entry

    def latest_weight(self, user_id: UUID) -> WeightEntry | None:
        entries = self.repository.list_weights(user_id, limit=1)
        return entries[0] if entries else None

    def weight_history(self, user_id: UUID, limit: int = 30) -> list[WeightEntry]:
        return self.repository.list_weights(user_id, limit)
