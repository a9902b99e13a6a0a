"""Tests for milestone checks."""

from datetime import timedelta
from uuid import uuid4

from diet_tracker.domain.activity import ExerciseType
from diet_tracker.domain.goals import NutritionGoals
from diet_tracker.domain.meals import DaySummary
from diet_tracker.domain.milestones import Milestone
from diet_tracker.services.milestones import check_milestones
from tests.conftest import TODAY, make_item


def _week(calories: int = 2000, protein: float = 0.0, meals: int = 3, days: int = 7):
    return {
        TODAY - timedelta(days=offset): DaySummary(
            day=TODAY - timedelta(days=offset),
            total_calories=calories,
            total_protein_g=protein,
            meal_count=meals,
        )
        for offset in range(days)
    }


def _check(**overrides) -> list[Milestone]:
    arguments = {
        "total_meals": 0,
        "today_summary": None,
        "recent_summaries": {},
        "total_exercises": 0,
        "calorie_goal": 2000,
        "protein_goal": 150.0,
        "earned": set(),
        "today": TODAY,
    }
    arguments.update(overrides)
    return check_milestones(**arguments)


def test_meal_count_milestones() -> None:
    assert _check(total_meals=0) == []
    assert _check(total_meals=1) == [Milestone.FIRST_MEAL]
    assert _check(total_meals=25) == [
        Milestone.FIRST_MEAL,
        Milestone.TEN_MEALS,
        Milestone.TWENTY_FIVE_MEALS,
    ]


def test_earned_milestones_are_not_reported_again() -> None:
    result = _check(total_meals=10, earned={Milestone.FIRST_MEAL})

    assert result == [Milestone.TEN_MEALS]


def test_first_exercise() -> None:
    assert _check(total_exercises=1) == [Milestone.FIRST_EXERCISE]


def test_calorie_goal_within_fifty() -> None:
    hit = DaySummary(day=TODAY, total_calories=2050, meal_count=1)
    miss = DaySummary(day=TODAY, total_calories=2051, meal_count=1)
    empty = DaySummary(day=TODAY, total_calories=0)

    assert Milestone.HIT_CALORIE_GOAL in _check(today_summary=hit)
    assert Milestone.HIT_CALORIE_GOAL not in _check(today_summary=miss)
    assert Milestone.HIT_CALORIE_GOAL not in _check(today_summary=empty, calorie_goal=0)


def test_week_streak_and_perfect_week() -> None:
    result = _check(recent_summaries=_week(calories=1980))

    assert Milestone.WEEK_STREAK in result
    assert Milestone.PERFECT_WEEK in result


def test_week_streak_needs_seven_days() -> None:
    result = _check(recent_summaries=_week(days=6))

    assert Milestone.WEEK_STREAK not in result
    assert Milestone.PERFECT_WEEK not in result


def test_week_streak_without_hitting_goal() -> None:
    result = _check(recent_summaries=_week(calories=2600))

    assert Milestone.WEEK_STREAK in result
    assert Milestone.PERFECT_WEEK not in result


def test_protein_champion() -> None:
    assert Milestone.PROTEIN_CHAMPION in _check(
        recent_summaries=_week(protein=150.0, days=5)
    )
    assert Milestone.PROTEIN_CHAMPION not in _check(
        recent_summaries=_week(protein=149.0, days=5)
    )
    assert Milestone.PROTEIN_CHAMPION not in _check(
        recent_summaries=_week(protein=150.0, days=5), protein_goal=0.0
    )


def test_check_and_award_persists_once(services) -> None:
    user_id = uuid4()
    services.user_settings_service.set_goals(user_id, NutritionGoals(calories=500))
    services.meal_log_service.log_meal(user_id, "Lunch", [make_item(520)])
    services.activity_service.log_exercise(user_id, ExerciseType.RUN, calories=300)

    awarded = services.milestone_service.check_and_award(user_id)

    assert {entry.milestone for entry in awarded} == {
        Milestone.FIRST_MEAL,
        Milestone.FIRST_EXERCISE,
        Milestone.HIT_CALORIE_GOAL,
    }
    assert all(entry.earned_on == TODAY for entry in awarded)
    assert services.milestone_service.check_and_award(user_id) == []
    assert len(services.milestone_service.list_earned(user_id)) == 3
