"""Tests for reminders and scheduled meal completion."""

from datetime import time
from uuid import uuid4

import pytest

from tests.conftest import make_item, make_scheduled


def test_ensure_reminders_is_idempotent(services) -> None:
    user_id = uuid4()
    breakfast = make_scheduled()
    lunch = make_scheduled(name="Lunch", at=time(12, 0))
    services.plan_service.create_plan(user_id, "Plan", [breakfast, lunch])

    first = services.reminder_service.ensure_reminders(user_id)
    second = services.reminder_service.ensure_reminders(user_id)

    assert {r.scheduled_meal_id for r in first} == {breakfast.id, lunch.id}
    assert len(second) == 2
    assert len(services.plan_repository.reminders) == 2
    assert not any(reminder.was_completed for reminder in second)


def test_complete_from_template_records_goal(services) -> None:
    user_id = uuid4()
    breakfast = make_scheduled(template_calories=300)
    services.plan_service.create_plan(user_id, "Plan", [breakfast])
    services.reminder_service.ensure_reminders(user_id)

    reminder = services.reminder_service.complete_scheduled_meal(
        user_id, breakfast.id
    )

    assert reminder is not None
    assert reminder.was_completed
    assert reminder.goal_achieved is True
    assert reminder.goal_deviation == 0.0
    meal = services.meal_log_service.get_meal(reminder.completed_meal_id)
    assert meal.total_calories == 300
    assert meal.category == breakfast.category
    assert len(services.plan_repository.reminders) == 1


def test_complete_with_existing_meal(services) -> None:
    user_id = uuid4()
    breakfast = make_scheduled(template_calories=300)
    services.plan_service.create_plan(user_id, "Plan", [breakfast])
    meal = services.meal_log_service.log_meal(user_id, "Big", [make_item(375)])

    reminder = services.reminder_service.complete_scheduled_meal(
        user_id, breakfast.id, meal.id
    )

    assert reminder.completed_meal_id == meal.id
    assert reminder.goal_achieved is False
    assert reminder.goal_deviation == pytest.approx(0.25)
    assert services.meal_repository.count_meals(user_id) == 1


def test_complete_without_template_logs_named_meal(services) -> None:
    user_id = uuid4()
    snack = make_scheduled(name="Fruit")
    services.plan_service.create_plan(user_id, "Plan", [snack])

    reminder = services.reminder_service.complete_scheduled_meal(user_id, snack.id)

    assert reminder.goal_achieved is None
    meal = services.meal_log_service.get_meal(reminder.completed_meal_id)
    assert meal.name == "Fruit"
    assert meal.items == []


def test_complete_unknown_ids(services) -> None:
    user_id = uuid4()
    breakfast = make_scheduled()
    services.plan_service.create_plan(user_id, "Plan", [breakfast])

    assert services.reminder_service.complete_scheduled_meal(user_id, uuid4()) is None
    assert (
        services.reminder_service.complete_scheduled_meal(
            user_id, breakfast.id, uuid4()
        )
        is None
    )


def test_upcoming_slots_skip_past_times(services) -> None:
    user_id = uuid4()
    breakfast = make_scheduled(at=time(8, 0))
    dinner = make_scheduled(name="Dinner", at=time(19, 0))
    services.plan_service.create_plan(user_id, "Plan", [breakfast, dinner])

    slots = services.reminder_service.upcoming_slots(user_id, days=2)

    assert [slot.name for slot in slots] == ["Dinner", "Breakfast", "Dinner"]


def test_complete_rejects_slots_not_due_today(services) -> None:
    user_id = uuid4()
    sunday_only = make_scheduled(days=frozenset({1}))
    inactive = make_scheduled(name="Dinner", at=time(19, 0))
    services.plan_service.create_plan(user_id, "Weekend", [sunday_only])
    services.plan_service.create_plan(user_id, "Old", [inactive], is_active=False)

    assert services.reminder_service.complete_scheduled_meal(
        user_id, sunday_only.id
    ) is None
    assert (
        services.reminder_service.complete_scheduled_meal(user_id, inactive.id) is None
    )
    assert services.plan_repository.reminders == {}
    assert services.meal_repository.meals == {}


def test_complete_rejects_other_users_slot(services) -> None:
    owner = uuid4()
    breakfast = make_scheduled()
    services.plan_service.create_plan(owner, "Plan", [breakfast])

    assert (
        services.reminder_service.complete_scheduled_meal(uuid4(), breakfast.id) is None
    )
