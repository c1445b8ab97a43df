from pydantic import Field, field_validator

from fitcoach.models.enums import PlanType
from fitcoach.schemas.plan import CamelModel


class MessageCreate(CamelModel):
    content: str = Field(min_length=1, max_length=4000)
    plan_id: int | None = None

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message content required.")
        return value


class MessageRating(CamelModel):
    plan_id: int
    plan_type: PlanType
    rating: int = Field(ge=1, le=5)
