"""Structural validation of model-generated workout and diet plans.

The walk reports the first violated field path (``days[2].exercises[0].sets
must be a number``) so a failed attempt logs something a human can act on.
A workout plan that passes is normalized through :class:`WorkoutPlan`; a
diet plan is returned as parsed.
"""
import json
import math
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from fitcoach.core.exceptions import PlanValidationError
from fitcoach.schemas.plan import WorkoutPlan


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def _is_number(value: Any) -> bool:
    # bool is an int subclass, JSON true is not a number
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(_is_string(item) for item in value)


def _check(ok: bool, reason: str) -> None:
    if not ok:
        raise PlanValidationError(reason)


def _check_optional_string(record: dict, key: str, path: str) -> None:
    if key in record and record[key] is not None:
        _check(_is_string(record[key]), f"{path}.{key} must be a string")


def _check_optional_number(record: dict, key: str, path: str) -> None:
    if key in record and record[key] is not None:
        _check(_is_number(record[key]), f"{path}.{key} must be a number")


def _validate_exercise(exercise: Any, path: str) -> None:
    _check(isinstance(exercise, dict), f"{path} must be an object")
    _check(_is_string(exercise.get("name")), f"{path}.name must be a string")
    _check(_is_string(exercise.get("equipment")), f"{path}.equipment must be a string")
    _check(_is_number(exercise.get("sets")), f"{path}.sets must be a number")
    _check(_is_string(exercise.get("reps")), f"{path}.reps must be a string")
    _check(_is_number(exercise.get("restSeconds")), f"{path}.restSeconds must be a number")
    _check(_is_number(exercise.get("order")), f"{path}.order must be a number")
    _check_optional_string(exercise, "tempo", path)
    _check_optional_string(exercise, "notes", path)
    _check_optional_string(exercise, "imageUrl", path)


def _validate_day(day: Any, path: str) -> None:
    _check(isinstance(day, dict), f"{path} must be an object")
    _check(_is_number(day.get("dayIndex")), f"{path}.dayIndex must be a number")
    _check(_is_string(day.get("label")), f"{path}.label must be a string")
    _check(_is_string(day.get("focus")), f"{path}.focus must be a string")
    _check(isinstance(day.get("isRestDay"), bool), f"{path}.isRestDay must be a boolean")
    _check(_is_string(day.get("notes")), f"{path}.notes must be a string")

    exercises = day.get("exercises")
    if day["isRestDay"]:
        if exercises is None:
            day["exercises"] = exercises = []
        _check(isinstance(exercises, list), f"{path}.exercises must be an array")
    else:
        _check(isinstance(exercises, list), f"{path}.exercises must be an array")
        _check(len(exercises) > 0, f"{path}.exercises must not be empty")

    for index, exercise in enumerate(exercises):
        _validate_exercise(exercise, f"{path}.exercises[{index}]")


def validate_workout_plan(value: Any) -> dict:
    """Validate a parsed workout plan and return its normalized document.

    Raises:
        PlanValidationError: on the first field that does not match the schema
    """
    _check(isinstance(value, dict), "expected a JSON object at the root")

    # home | gym | outdoor is only requested in the prompt, any string passes.
    _check(_is_string(value.get("location")), "location must be a string")
    _check(
        _is_string_list(value.get("availableEquipment")),
        "availableEquipment must be an array of strings",
    )
    _check(_is_string(value.get("generalNotes")), "generalNotes must be a string")

    days = value.get("days")
    _check(isinstance(days, list), "days must be an array")
    for index, day in enumerate(days):
        _validate_day(day, f"days[{index}]")

    try:
        plan = WorkoutPlan.model_validate(value)
    except PydanticValidationError as e:
        first = e.errors()[0]
        path = ".".join(str(part) for part in first.get("loc", ()))
        raise PlanValidationError(f"{path or 'plan'}: {first.get('msg', 'invalid value')}") from e
    return plan.to_document()


def _validate_meal_item(item: Any, path: str) -> None:
    _check(isinstance(item, dict), f"{path} must be an object")
    _check(_is_string(item.get("name")), f"{path}.name must be a string")
    _check(_is_string(item.get("portion")), f"{path}.portion must be a string")
    _check_optional_string(item, "notes", path)


def _validate_meal(meal: Any, path: str) -> None:
    _check(isinstance(meal, dict), f"{path} must be an object")
    _check(_is_string(meal.get("mealType")), f"{path}.mealType must be a string")
    _check_optional_string(meal, "time", path)
    _check(_is_string(meal.get("title")), f"{path}.title must be a string")
    _check(_is_string(meal.get("description")), f"{path}.description must be a string")

    items = meal.get("items")
    _check(isinstance(items, list), f"{path}.items must be an array")
    for index, item in enumerate(items):
        _validate_meal_item(item, f"{path}.items[{index}]")

    _check_optional_number(meal, "approxCalories", path)
    _check_optional_string(meal, "prepNotes", path)
    _check_optional_string(meal, "dayPartNotes", path)
    _check_optional_string(meal, "imageUrl", path)


def validate_diet_plan(value: Any) -> dict:
    """Validate a parsed diet plan and return it unchanged.

    Raises:
        PlanValidationError: on the first field that does not match the schema
    """
    _check(isinstance(value, dict), "expected a JSON object at the root")
    _check(_is_string(value.get("dietType")), "dietType must be a string")
    _check(_is_number(value.get("mealsPerDay")), "mealsPerDay must be a number")
    if value.get("calorieTargetApprox") is not None:
        _check(_is_number(value["calorieTargetApprox"]), "calorieTargetApprox must be a number")
    _check(_is_string_list(value.get("allergies")), "allergies must be an array of strings")
    _check(_is_string_list(value.get("dislikedFoods")), "dislikedFoods must be an array of strings")
    _check(_is_string(value.get("generalNotes")), "generalNotes must be a string")

    days = value.get("days")
    _check(isinstance(days, list), "days must be an array")
    for day_index, day in enumerate(days):
        path = f"days[{day_index}]"
        _check(isinstance(day, dict), f"{path} must be an object")
        _check(_is_number(day.get("dayIndex")), f"{path}.dayIndex must be a number")
        _check(_is_string(day.get("label")), f"{path}.label must be a string")
        _check(_is_string(day.get("notes")), f"{path}.notes must be a string")

        meals = day.get("meals")
        _check(isinstance(meals, list), f"{path}.meals must be an array")
        for meal_index, meal in enumerate(meals):
            _validate_meal(meal, f"{path}.meals[{meal_index}]")
    return value


def parse_plan_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise PlanValidationError("Invalid JSON response from model") from e


def serialize_plan(document: Any) -> str:
    """Canonical text mirror of a plan document."""
    return json.dumps(document, indent=2, ensure_ascii=False)
