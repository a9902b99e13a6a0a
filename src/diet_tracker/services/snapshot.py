"""Publishing today's totals and goals to the widget snapshot endpoint."""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Protocol
from uuid import UUID

import httpx

from diet_tracker.domain.goals import WidgetSnapshot
from diet_tracker.services.goals import EffectiveGoalService
from diet_tracker.services.meals import MealLogService

_logger = logging.getLogger(__name__)


class SnapshotPublisher(Protocol):
    """Interface for delivering widget snapshots."""

    async def publish(self, user_id: UUID, snapshot: WidgetSnapshot) -> None:
        """Deliver a snapshot for a user."""


@dataclass
class SnapshotService:
    """Builds widget snapshots and publishes each one once.

    Delivery failures are logged and the snapshot is retried on the next call.
    Only snapshots dated yesterday or later are remembered.
    """

    meal_log_service: MealLogService
    goal_service: EffectiveGoalService
    publisher: SnapshotPublisher | None = None
    _published: dict[UUID, WidgetSnapshot] = field(default_factory=dict)

    def build_snapshot(self, user_id: UUID) -> WidgetSnapshot:
        """Return today's totals with the effective calorie goal."""
        goal = self.goal_service.effective_goal(user_id)
        goals = self.goal_service.user_settings_service.get_goals(user_id)
        summary = self.meal_log_service.get_day_summary(user_id, goal.day)
        return WidgetSnapshot(
            day=goal.day,
            calories=summary.total_calories,
            protein_g=summary.total_protein_g,
            carbs_g=summary.total_carbs_g,
            fat_g=summary.total_fat_g,
            calorie_goal=goal.total,
            protein_goal=goals.protein_g,
            carbs_goal=goals.carbs_g,
            fat_goal=goals.fat_g,
        )

    async def publish(self, user_id: UUID) -> bool:
        """Publish the current snapshot if it changed; return True if sent."""
        if self.publisher is None:
            return False
        snapshot = self.build_snapshot(user_id)
        if self._published.get(user_id) == snapshot:
            return False
        try:
            await self.publisher.publish(user_id, snapshot)
        except httpx.HTTPError:
            _logger.exception("Failed to publish widget snapshot for %s", user_id)
            return False
        self._published[user_id] = snapshot
        self._evict_before(snapshot.day - timedelta(days=1))
        return True

    def _evict_before(self, day: date) -> None:
        stale = [uid for uid, sent in self._published.items() if sent.day < day]
        for uid in stale:
            del self._published[uid]
