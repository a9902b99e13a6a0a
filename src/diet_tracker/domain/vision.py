"""Models for photo-based nutrition estimates."""

from pydantic import BaseModel, Field


class EstimatedItem(BaseModel):
    """Single food item detected in a meal photo."""

    name: str
    portion: float = Field(ge=0.0)
    unit: str
    calories: int = Field(ge=0)
    protein_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)


class NutritionEstimate(BaseModel):
    """Structured output of the photo analysis service."""

    meal_name: str
    confidence: float = Field(ge=0.0, le=1.0)
    items: list[EstimatedItem]
    notes: str | None = None
