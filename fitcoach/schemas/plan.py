"""Typed shapes of generated plan documents.

Keys are camelCase on the wire (that is what the models are asked to
produce and what clients read back); attributes are snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class WorkoutExercise(CamelModel):
    name: str
    equipment: str
    sets: int
    reps: str
    rest_seconds: int
    order: int
    tempo: str | None = None
    notes: str | None = None
    image_url: str | None = None


class WorkoutDay(CamelModel):
    day_index: int
    label: str
    focus: str
    is_rest_day: bool
    notes: str
    exercises: list[WorkoutExercise] = Field(default_factory=list)


class WorkoutPlan(CamelModel):
    # home | gym | outdoor is requested in the prompt but not enforced.
    location: str
    available_equipment: list[str] = Field(default_factory=list)
    general_notes: str
    days: list[WorkoutDay] = Field(default_factory=list)


WORKOUT_PLAN_EXAMPLE = {
    "location": "home",
    "availableEquipment": ["dumbbells", "resistance band"],
    "generalNotes": "string",
    "days": [
        {
            "dayIndex": 1,
            "label": "Day 1 - Full Body",
            "focus": "Full body strength",
            "isRestDay": False,
            "notes": "string",
            "exercises": [
                {
                    "name": "Goblet squat",
                    "equipment": "dumbbell",
                    "sets": 3,
                    "reps": "10-12",
                    "restSeconds": 60,
                    "tempo": "2-0-2",
                    "order": 1,
                    "notes": "string",
                }
            ],
        },
        {
            "dayIndex": 2,
            "label": "Day 2 - Rest",
            "focus": "Recovery",
            "isRestDay": True,
            "notes": "string",
            "exercises": [],
        },
    ],
}

DIET_PLAN_EXAMPLE = {
    "dietType": "omnivore",
    "mealsPerDay": 3,
    "calorieTargetApprox": 2000,
    "allergies": ["peanuts"],
    "dislikedFoods": ["mushrooms"],
    "generalNotes": "string",
    "days": [
        {
            "dayIndex": 1,
            "label": "Day 1 - Balanced Day",
            "notes": "string",
            "meals": [
                {
                    "mealType": "breakfast",
                    "time": "07:30",
                    "title": "Oatmeal with fruit",
                    "description": "string",
                    "items": [
                        {"name": "Rolled oats", "portion": "1/2 cup", "notes": "string"}
                    ],
                    "approxCalories": 350,
                    "prepNotes": "string",
                    "dayPartNotes": "string",
                }
            ],
        }
    ],
}


# Requests

class GeneratePlanRequest(CamelModel):
    note: str | None = Field(default=None, max_length=2000)


class WorkoutImageRequest(CamelModel):
    plan_id: int
    day_index: int = Field(ge=0)
    exercise_index: int = Field(ge=0)


class DietImageRequest(CamelModel):
    plan_id: int
    day_index: int = Field(ge=0)
    meal_index: int = Field(ge=0)
