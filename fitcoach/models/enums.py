"""String enums shared by models, schemas and services."""
from enum import Enum


class ProviderType(str, Enum):
    GEMINI = "GEMINI"
    OPENROUTER = "OPENROUTER"
    MISTRAL = "MISTRAL"
    GROQ = "GROQ"
    CEREBRAS = "CEREBRAS"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class PlanType(str, Enum):
    WORKOUT = "WorkoutPlan"
    DIET = "DietPlan"


class WorkoutLocation(str, Enum):
    HOME = "home"
    GYM = "gym"
    OUTDOOR = "outdoor"


class SessionStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    ABORTED = "aborted"


class ExerciseStatus(str, Enum):
    DONE = "done"
    SKIPPED = "skipped"
    PARTIAL = "partial"


class Language(str, Enum):
    EN = "en"
    ES = "es"
    PT_BR = "pt-BR"


class Units(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"
