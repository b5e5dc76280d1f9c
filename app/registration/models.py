"""Profile contract + registration API payloads — Pydantic v2 models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.registration.fields import PROFILE_FIELDS, field_keys


class RegistrationStep(str, Enum):
    greeting = "greeting"
    collecting_basic = "collecting_basic"
    collecting_level = "collecting_level"
    collecting_goals = "collecting_goals"
    confirmation = "confirmation"
    complete = "complete"


STEP_ORDER: list[RegistrationStep] = list(RegistrationStep)

# Older rows stored the initial step as "incomplete"
LEGACY_STEP_NAMES: dict[str, RegistrationStep] = {"incomplete": RegistrationStep.greeting}


def coerce_step(value: Any) -> RegistrationStep:
    """Map a stored step value onto RegistrationStep; unknown → greeting."""
    if isinstance(value, RegistrationStep):
        return value
    if isinstance(value, str):
        if value in LEGACY_STEP_NAMES:
            return LEGACY_STEP_NAMES[value]
        try:
            return RegistrationStep(value)
        except ValueError:
            return RegistrationStep.greeting
    return RegistrationStep.greeting


class Profile(BaseModel):
    """Per-user registration record. Wire names are camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    language_code: str | None = Field(default=None, alias="languageCode")

    age: int | None = None
    gender: str | None = None
    height: int | None = None
    weight: int | None = None
    fitness_level: str | None = Field(default=None, alias="fitnessLevel")
    fitness_goal: str | None = Field(default=None, alias="fitnessGoal")

    registration_step: RegistrationStep = Field(
        default=RegistrationStep.greeting, alias="registrationStep"
    )

    @field_validator("registration_step", mode="before")
    @classmethod
    def _legacy_step(cls, value: Any) -> RegistrationStep:
        return coerce_step(value)

    def get_field(self, key: str) -> Any:
        """Value of a profile field by wire key (e.g. "fitnessLevel")."""
        definition = PROFILE_FIELDS[key]
        return getattr(self, definition.attr)

    def field_values(self) -> dict[str, Any]:
        """All six profile fields by wire key, present or not."""
        return {key: self.get_field(key) for key in field_keys()}

    def collected_fields(self) -> dict[str, Any]:
        return {k: v for k, v in self.field_values().items() if v is not None}

    def missing_fields(self, keys: list[str] | tuple[str, ...] | None = None) -> list[str]:
        """Keys (default: all six, catalog order) whose value is absent."""
        wanted = field_keys() if keys is None else [k for k in field_keys() if k in keys]
        return [k for k in wanted if self.get_field(k) is None]

    def merge_fields(self, fields: dict[str, Any]) -> Profile:
        """Copy with newly extracted values applied.

        Absent or None values never overwrite stored ones.
        """
        update = {
            PROFILE_FIELDS[key].attr: value
            for key, value in fields.items()
            if key in PROFILE_FIELDS and value is not None
        }
        return self.model_copy(update=update)

    def with_step(self, step: RegistrationStep) -> Profile:
        return self.model_copy(update={"registration_step": step})


class ProcessResult(BaseModel):
    updated_user: Profile
    response: str
    is_complete: bool = False
    extracted: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# HTTP payloads
# ---------------------------------------------------------------------------


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: str = Field(min_length=1, description='Auth provider, e.g. "telegram"')
    provider_user_id: str = Field(min_length=1, alias="providerUserId")
    username: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    language_code: str | None = Field(default=None, alias="languageCode")


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(min_length=1, alias="userId")
    message: str = Field(min_length=1)


class ChatReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str
    timestamp: str
    registration_complete: bool = Field(alias="registrationComplete")


class ChatResponse(BaseModel):
    data: ChatReply


class UserRef(BaseModel):
    id: str


class UserRefResponse(BaseModel):
    data: UserRef
