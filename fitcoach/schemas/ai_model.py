from pydantic import BaseModel, Field, field_validator, model_validator

from fitcoach.models.enums import ProviderType


def _provider_type(value):
    if isinstance(value, str):
        return value.strip().upper()
    return value


class AiModelCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    type: ProviderType = ProviderType.GEMINI
    enabled: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, value):
        return _provider_type(value)


class AiModelUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: ProviderType | None = None
    enabled: bool | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, value):
        return _provider_type(value)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one of name, type or enabled is required")
        return self
