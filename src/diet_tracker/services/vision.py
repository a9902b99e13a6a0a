"""Photo nutrition estimation using LLMs."""

import base64
from dataclasses import dataclass
from typing import Protocol

from diet_tracker.domain.vision import NutritionEstimate

_NUMBER = {"type": "number", "minimum": 0.0}

ESTIMATE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "meal_name": {"type": "string"},
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "portion": _NUMBER,
                    "unit": {"type": "string"},
                    "calories": {"type": "integer", "minimum": 0},
                    "protein_g": _NUMBER,
                    "carbs_g": _NUMBER,
                    "fat_g": _NUMBER,
                },
                "required": [
                    "name",
                    "portion",
                    "unit",
                    "calories",
                    "protein_g",
                    "carbs_g",
                    "fat_g",
                ],
                "additionalProperties": False,
            },
        },
        "notes": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": ["meal_name", "confidence", "items", "notes"],
    "additionalProperties": False,
}

ESTIMATE_PROMPT = (
    "Identify the meal in the image and every food item on the plate. "
    "For each item return a name, an estimated portion with its unit, "
    "calories and grams of protein, carbs and fat. "
    "Give the meal a short name and an overall confidence (0-1)."
)


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured data extracted from an image."""


@dataclass
class VisionService:
    """Service that prepares vision prompts and validates results."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def estimate(self, image_bytes: bytes) -> NutritionEstimate:
        """Estimate a meal's nutrition from a photo."""
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=ESTIMATE_SCHEMA,
            prompt=ESTIMATE_PROMPT,
        )
        return NutritionEstimate.model_validate(raw)


def _to_data_url(image_bytes: bytes) -> str:
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[4:12] in {b"ftypheic", b"ftypheix", b"ftypmif1"}:
        return "image/heic"
    return "image/jpeg"
