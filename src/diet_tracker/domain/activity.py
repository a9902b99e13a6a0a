"""Domain models for exercise and body weight."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID, uuid4


class ExerciseType(StrEnum):
    RUN = "run"
    WEIGHT_LIFTING = "weight_lifting"
    DESCRIBE = "describe"
    MANUAL = "manual"


class ExerciseIntensity(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ExerciseRecord:
    """A logged workout, stored against the calendar day it happened on."""

    exercise_type: ExerciseType
    calories: int
    day: date
    duration_minutes: int = 0
    intensity: ExerciseIntensity | None = None
    notes: str | None = None
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class WeightEntry:
    """A body weight measurement in kilograms."""

    weight_kg: float
    recorded_at: datetime
    id: UUID = field(default_factory=uuid4)
