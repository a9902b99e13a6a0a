"""Response payloads for the HTTP API."""

from dataclasses import asdict

from diet_tracker.domain.activity import ExerciseRecord, WeightEntry
from diet_tracker.domain.adherence import DailyAdherence, DietAdherenceData
from diet_tracker.domain.goals import EffectiveGoal, GoalOptions, NutritionGoals
from diet_tracker.domain.meals import DaySummary, Meal
from diet_tracker.domain.milestones import MILESTONE_DESCRIPTIONS, EarnedMilestone
from diet_tracker.domain.plans import DietPlan, MealReminder, ScheduledMeal
from diet_tracker.services.schedule import ReminderSlot


def meal_payload(meal: Meal) -> dict[str, object]:
    totals = meal.total_macros
    return {
        "id": str(meal.id),
        "name": meal.name,
        "logged_at": meal.logged_at.isoformat(),
        "category": meal.category,
        "notes": meal.notes,
        "confidence": meal.confidence,
        "items": [
            {
                "id": str(item.id),
                "name": item.name,
                "portion": item.portion,
                "unit": item.unit,
                "calories": item.calories,
                "protein_g": item.protein_g,
                "carbs_g": item.carbs_g,
                "fat_g": item.fat_g,
            }
            for item in meal.items
        ],
        "totals": asdict(totals),
    }


def day_summary_payload(summary: DaySummary) -> dict[str, object]:
    payload = asdict(summary)
    payload["day"] = summary.day.isoformat()
    return payload


def scheduled_meal_payload(scheduled_meal: ScheduledMeal) -> dict[str, object]:
    template = scheduled_meal.template
    return {
        "id": str(scheduled_meal.id),
        "name": scheduled_meal.name,
        "category": scheduled_meal.category,
        "time_of_day": scheduled_meal.time_of_day.strftime("%H:%M"),
        "days_of_week": sorted(scheduled_meal.days_of_week),
        "day_names": scheduled_meal.day_names,
        "template": None
        if template is None
        else {
            "id": str(template.id),
            "name": template.name,
            "notes": template.notes,
            "total_calories": template.total_calories,
            "items": [asdict(item) for item in template.items],
        },
    }


def plan_payload(plan: DietPlan) -> dict[str, object]:
    return {
        "id": str(plan.id),
        "name": plan.name,
        "description": plan.description,
        "is_active": plan.is_active,
        "created_at": plan.created_at.isoformat() if plan.created_at else None,
        "scheduled_meals": [
            scheduled_meal_payload(scheduled_meal)
            for scheduled_meal in plan.scheduled_meals
        ],
    }


def reminder_payload(reminder: MealReminder) -> dict[str, object]:
    return {
        "id": str(reminder.id),
        "scheduled_meal_id": str(reminder.scheduled_meal_id),
        "reminder_date": reminder.reminder_date.isoformat(),
        "was_completed": reminder.was_completed,
        "completed_meal_id": str(reminder.completed_meal_id)
        if reminder.completed_meal_id
        else None,
        "completed_at": reminder.completed_at.isoformat()
        if reminder.completed_at
        else None,
        "goal_achieved": reminder.goal_achieved,
        "goal_deviation": reminder.goal_deviation,
    }


def slot_payload(slot: ReminderSlot) -> dict[str, object]:
    return {
        "scheduled_meal_id": str(slot.scheduled_meal_id),
        "name": slot.name,
        "category": slot.category,
        "fires_at": slot.fires_at.isoformat(),
    }


def adherence_payload(report: DietAdherenceData) -> dict[str, object]:
    """Render a day report with ids as strings and the derived rates."""
    return {
        "day": report.day.isoformat(),
        "scheduled_meals": [
            scheduled_meal_payload(scheduled_meal)
            for scheduled_meal in report.scheduled_meals
        ],
        "completed_meals": sorted(str(meal_id) for meal_id in report.completed_meals),
        "missed_meals": [str(meal.id) for meal in report.missed_meals],
        "off_diet_meals": [meal_payload(meal) for meal in report.off_diet_meals],
        "off_diet_calories": report.off_diet_calories,
        "goal_achieved_meals": sorted(
            str(meal_id) for meal_id in report.goal_achieved_meals
        ),
        "goal_missed_meals": sorted(
            str(meal_id) for meal_id in report.goal_missed_meals
        ),
        "completed_meal_details": {
            str(scheduled_id): {
                "meal_id": str(info.meal_id),
                "meal_name": info.meal_name,
                "calories": info.calories,
                "display": info.display,
            }
            for scheduled_id, info in report.completed_meal_details.items()
        },
        "completion_rate": report.completion_rate,
        "goal_achievement_rate": report.goal_achievement_rate,
        "has_perfect_adherence": report.has_perfect_adherence,
    }


def daily_adherence_payload(row: DailyAdherence) -> dict[str, object]:
    payload = asdict(row)
    payload["day"] = row.day.isoformat()
    return payload


def effective_goal_payload(goal: EffectiveGoal) -> dict[str, object]:
    payload = asdict(goal)
    payload["day"] = goal.day.isoformat()
    return payload


def goals_payload(goals: NutritionGoals, options: GoalOptions) -> dict[str, object]:
    return {**asdict(goals), **asdict(options)}


def exercise_payload(exercise: ExerciseRecord) -> dict[str, object]:
    return {
        "id": str(exercise.id),
        "exercise_type": exercise.exercise_type,
        "calories": exercise.calories,
        "day": exercise.day.isoformat(),
        "duration_minutes": exercise.duration_minutes,
        "intensity": exercise.intensity,
        "notes": exercise.notes,
    }


def weight_payload(entry: WeightEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "weight_kg": round(entry.weight_kg, 2),
        "recorded_at": entry.recorded_at.isoformat(),
    }


def milestone_payload(earned: EarnedMilestone) -> dict[str, object]:
    return {
        "milestone": earned.milestone,
        "description": MILESTONE_DESCRIPTIONS[earned.milestone],
        "earned_on": earned.earned_on.isoformat(),
    }
