"""Prompt builders for plan generation, image lookup and chat."""
import json

from fitcoach.models.enums import Language
from fitcoach.models.user import UserProfile
from fitcoach.schemas.plan import DIET_PLAN_EXAMPLE, WORKOUT_PLAN_EXAMPLE

BASE_SYSTEM_PROMPT = """You are a helpful fitness and nutrition assistant.
You must NOT give medical advice.
You must NOT suggest extreme diets, dangerous exercises, supplements, drugs, or steroids.
Focus on simple, low to moderate intensity workouts and balanced meals.
Always remind the user that this information is general only and that they should talk to a health professional before following a new workout or diet, especially if they feel strong pain or have health conditions."""

WORKOUT_IMAGE_SYSTEM_PROMPT = """You provide a single safe, public image URL.
Prefer instructional exercise images/diagrams that show how to perform the movement.
Avoid photos that only show a person standing or generic gym selfies.
Return only JSON with the exact key "imageUrl".
Use https URLs from reputable free sources.
No markdown, no extra text."""

MEAL_IMAGE_SYSTEM_PROMPT = """You provide a single safe, public image URL.
Prefer appetizing photos of the prepared dish.
Return only JSON with the exact key "imageUrl".
Use https URLs from reputable free sources.
No markdown, no extra text."""

_LANGUAGE_INSTRUCTIONS = {
    Language.EN: "Respond in English.",
    Language.ES: "Respond in Spanish.",
    Language.PT_BR: "Respond in Portuguese (Brazil).",
}


def normalize_language(value: str | None) -> Language:
    """Map a stored language tag onto a supported one, English by default."""
    try:
        return Language(value)
    except ValueError:
        return Language.EN


def language_instruction(language: Language) -> str:
    return _LANGUAGE_INSTRUCTIONS[language]


def system_prompt(language: Language) -> str:
    return f"{BASE_SYSTEM_PROMPT}\n{language_instruction(language)}"


def _join(values: list[str] | None) -> str:
    return ", ".join(values or []) or "none"


def _or(value, fallback: str = "unspecified") -> str:
    return fallback if value is None or value == "" else str(value)


def workout_prompt(profile: UserProfile, note: str = "") -> str:
    lines = [
        "Create a safe, beginner-friendly workout plan.",
        "Profile:",
        f"- Goal: {profile.goal}",
        f"- Experience: {profile.experience_level}",
        f"- Days per week: {profile.days_per_week}",
        f"- Preferred location: {_or(profile.preferred_location)}",
        f"- Available equipment: {_join(profile.available_equipment)}",
        f"- Injuries/limitations: {_or(profile.injuries_or_limitations, 'none')}",
    ]
    if note:
        lines.append(f"Extra note: {note}")
    lines += [
        "",
        "Output requirements:",
        "- Return ONLY valid JSON. No markdown, no code fences, no extra text.",
        "- JSON keys must match exactly the schema below.",
        "- Use the requested language for all string values, but keep keys in English.",
        '- "location" must be one of "home", "gym" or "outdoor".',
        f"- Cover 7 days with {profile.days_per_week} training days. Rest days have \"isRestDay\": true and an empty exercise list.",
        "- Keep intensity low to moderate and safe for beginners.",
        "- Include a clear safety reminder in generalNotes.",
        "",
        "JSON schema example:",
        json.dumps(WORKOUT_PLAN_EXAMPLE, indent=2),
    ]
    return "\n".join(lines)


def diet_prompt(profile: UserProfile, note: str = "") -> str:
    lines = [
        "Create a safe, balanced diet plan.",
        "Profile:",
        f"- Diet type: {_or(profile.diet_type)}",
        f"- Allergies: {_join(profile.allergies)}",
        f"- Disliked foods: {_join(profile.disliked_foods)}",
        f"- Meals per day: {_or(profile.meals_per_day)}",
        f"- Calorie target (approx): {_or(profile.calorie_target)}",
    ]
    if note:
        lines.append(f"Extra note: {note}")
    lines += [
        "",
        "Output requirements:",
        "- Return ONLY valid JSON. No markdown, no code fences, no extra text.",
        "- JSON keys must match exactly the schema below.",
        "- Use the requested language for all string values, but keep keys in English.",
        "- Keep the plan balanced and easy to follow.",
        "- Include a clear safety reminder in generalNotes.",
        "",
        "JSON schema example:",
        json.dumps(DIET_PLAN_EXAMPLE, indent=2),
    ]
    return "\n".join(lines)


def workout_image_prompt(day: dict, exercise: dict) -> str:
    return (
        "Provide a single instructional image URL for the exercise below. "
        "Check that the image still exists.\n"
        f"Exercise: {exercise.get('name')}\n"
        f"Equipment: {exercise.get('equipment')}\n"
        f"Focus: {day.get('focus')}\n\n"
        'Return JSON only: {"imageUrl":"https://..."}'
    )


def meal_image_prompt(day: dict, meal: dict) -> str:
    return (
        "Provide a single image URL of the meal below. "
        "Check that the image still exists.\n"
        f"Meal: {meal.get('title')}\n"
        f"Description: {meal.get('description')}\n"
        f"Day: {day.get('label')}\n\n"
        'Return JSON only: {"imageUrl":"https://..."}'
    )


def chat_system_prompt(profile: UserProfile | None, active_plan_title: str | None) -> str:
    context = [
        f"Profile goal: {_or(profile.goal if profile else None)}",
        f"Experience: {_or(profile.experience_level if profile else None)}",
        f"Days per week: {_or(profile.days_per_week if profile else None)}",
        f"Diet type: {_or(profile.diet_type if profile else None)}",
        f"Allergies: {_join(profile.allergies if profile else None)}",
        f"Injuries/limitations: {_or(profile.injuries_or_limitations if profile else None, 'none')}",
    ]
    if active_plan_title is not None:
        context.append(f"Active plan title: {active_plan_title or 'none'}")
    return f"{BASE_SYSTEM_PROMPT}\n\nContext:\n" + "\n".join(context)
