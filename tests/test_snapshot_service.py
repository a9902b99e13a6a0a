"""Tests for widget snapshot publishing."""

import asyncio
import logging
from uuid import uuid4

import httpx

from diet_tracker.domain.activity import ExerciseType
from diet_tracker.domain.goals import GoalOptions
from diet_tracker.services.snapshot import SnapshotService
from tests.conftest import TODAY, FakeSnapshotPublisher, make_item


def _service(services, publisher) -> SnapshotService:
    return SnapshotService(services.meal_log_service, services.goal_service, publisher)


def test_snapshot_uses_effective_goal(services) -> None:
    user_id = uuid4()
    services.user_settings_service.set_goal_options(
        user_id, GoalOptions(include_burned_calories=True)
    )
    services.activity_service.log_exercise(user_id, ExerciseType.RUN, calories=250)
    services.meal_log_service.log_meal(user_id, "Lunch", [make_item(600, 40)])

    snapshot = _service(services, None).build_snapshot(user_id)

    assert snapshot.day == TODAY
    assert snapshot.calories == 600
    assert snapshot.protein_g == 40
    assert snapshot.calorie_goal == 2250
    assert snapshot.protein_goal == 150.0


def test_publish_once_per_change(services) -> None:
    user_id = uuid4()
    publisher = FakeSnapshotPublisher()
    service = _service(services, publisher)

    assert asyncio.run(service.publish(user_id)) is True
    assert asyncio.run(service.publish(user_id)) is False
    services.meal_log_service.log_meal(user_id, "Snack", [make_item(120)])
    assert asyncio.run(service.publish(user_id)) is True

    assert [snapshot.calories for _, snapshot in publisher.published] == [0, 120]


def test_publish_failure_is_logged_and_retried(services, caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("diet_tracker"), "propagate", True)
    user_id = uuid4()
    publisher = FakeSnapshotPublisher(error=httpx.ConnectError("offline"))
    service = _service(services, publisher)

    assert asyncio.run(service.publish(user_id)) is False
    assert "Failed to publish widget snapshot" in caplog.text

    publisher.error = None
    assert asyncio.run(service.publish(user_id)) is True
    assert len(publisher.published) == 1


def test_publish_without_publisher(services) -> None:
    assert asyncio.run(_service(services, None).publish(uuid4())) is False


def test_publish_forgets_snapshots_older_than_yesterday(services) -> None:
    early_user, recent_user, user_id = uuid4(), uuid4(), uuid4()
    publisher = FakeSnapshotPublisher()
    service = _service(services, publisher)
    asyncio.run(service.publish(early_user))
    services.clock.advance(days=1)
    asyncio.run(service.publish(recent_user))
    services.clock.advance(days=1)

    asyncio.run(service.publish(user_id))

    assert set(service._published) == {recent_user, user_id}
