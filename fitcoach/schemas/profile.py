"""Profile, settings and password payloads for ``/api/me``."""
from typing import Any

from pydantic import Field, field_validator

from fitcoach.models.enums import Units
from fitcoach.schemas.plan import CamelModel

# Out-of-range numbers are pulled into range rather than rejected.
CLAMP_RANGES: dict[str, tuple[float, float]] = {
    "age": (10, 100),
    "height_cm": (80, 250),
    "weight_kg": (25, 300),
    "days_per_week": (1, 7),
    "meals_per_day": (1, 8),
    "calorie_target": (800, 5000),
}

REQUIRED_ON_CREATE = ("goal", "experience_level", "days_per_week")


def clamp(value: float | None, low: float, high: float) -> float | None:
    if value is None:
        return None
    return min(max(value, low), high)


def _clean_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class ProfileUpdate(CamelModel):
    age: int | None = None
    gender: str | None = Field(default=None, max_length=50)
    height_cm: float | None = None
    weight_kg: float | None = None
    goal: str | None = Field(default=None, max_length=200)
    experience_level: str | None = Field(default=None, max_length=100)
    days_per_week: int | None = None
    preferred_location: str | None = Field(default=None, max_length=50)
    available_equipment: list[str] | None = None
    injuries_or_limitations: str | None = Field(default=None, max_length=2000)
    diet_type: str | None = Field(default=None, max_length=100)
    allergies: list[str] | None = None
    disliked_foods: list[str] | None = None
    meals_per_day: int | None = None
    calorie_target: int | None = None
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("available_equipment", "allergies", "disliked_foods", mode="before")
    @classmethod
    def split_lists(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        return _clean_list(value)

    @field_validator("goal", "experience_level", "gender", "preferred_location", "diet_type", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def clamped_values(self) -> dict:
        """Fields that were sent, with numbers pulled into their allowed range."""
        values = self.model_dump(exclude_unset=True)
        for key, (low, high) in CLAMP_RANGES.items():
            if values.get(key) is not None:
                clamped = clamp(values[key], low, high)
                values[key] = int(clamped) if key in ("age", "days_per_week", "meals_per_day", "calorie_target") else clamped
        return values


class SettingsUpdate(CamelModel):
    language: str | None = None
    units: Units | None = None
    notifications_enabled: bool | None = None


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=200)
