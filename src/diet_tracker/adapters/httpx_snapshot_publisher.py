"""Widget snapshot publisher over HTTP."""

from dataclasses import dataclass
from uuid import UUID

import httpx

from diet_tracker.domain.goals import WidgetSnapshot
from diet_tracker.services.snapshot import SnapshotPublisher


@dataclass
class HttpxSnapshotPublisher(SnapshotPublisher):
    """Posts snapshots as JSON to a webhook URL."""

    webhook_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, webhook_url: str) -> "HttpxSnapshotPublisher":
        """Create a publisher with a managed httpx session."""
        return cls(webhook_url=webhook_url, http_client=httpx.AsyncClient())

    async def publish(self, user_id: UUID, snapshot: WidgetSnapshot) -> None:
        payload = {
            "user_id": str(user_id),
            "date": snapshot.day.isoformat(),
            "calories": snapshot.calories,
            "protein": snapshot.protein_g,
            "carbs": snapshot.carbs_g,
            "fat": snapshot.fat_g,
            "calorie_goal": snapshot.calorie_goal,
            "protein_goal": snapshot.protein_goal,
            "carbs_goal": snapshot.carbs_goal,
            "fat_goal": snapshot.fat_goal,
        }
        response = await self.http_client.post(
            self.webhook_url, json=payload, timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
