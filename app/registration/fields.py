"""Profile field catalog — configuration only.

Each FieldDefinition describes one extractable attribute: its wire key (the
JSON/API name, kept verbatim for compatibility), the Profile attribute it maps
to, its type and domain, the hint shown to the LLM and the label shown to
the user.

The same dataclass describes ad-hoc fields for the universal parser
(booleans, constrained strings, ...), which have no Profile attribute.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FieldDefinition:
    key: str
    description: str
    type: str  # "number" | "enum" | "string" | "boolean"
    attr: str | None = None  # Profile attribute; None for universal-parser fields
    minimum: float | None = None
    maximum: float | None = None
    enum_values: tuple[str, ...] = ()
    max_length: int | None = None
    pattern: str | None = None
    label: str = ""
    example: str = ""


GENDERS: tuple[str, ...] = ("male", "female")
FITNESS_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")


PROFILE_FIELDS: dict[str, FieldDefinition] = {
    "age": FieldDefinition(
        key="age",
        attr="age",
        type="number",
        minimum=10,
        maximum=100,
        description="User's age in years (10-100)",
        label="age",
        example='"I am 28 years old" or "28"',
    ),
    "gender": FieldDefinition(
        key="gender",
        attr="gender",
        type="enum",
        enum_values=GENDERS,
        description="User's gender (male or female)",
        label="gender",
        example='"male" or "female"',
    ),
    "height": FieldDefinition(
        key="height",
        attr="height",
        type="number",
        minimum=120,
        maximum=220,
        description="User's height in centimeters (convert from feet/inches if needed)",
        label="height",
        example='"175 cm" or "5\'9""',
    ),
    "weight": FieldDefinition(
        key="weight",
        attr="weight",
        type="number",
        minimum=30,
        maximum=200,
        description="User's weight in kilograms (convert from pounds if needed)",
        label="weight",
        example='"75 kg" or "165 lbs"',
    ),
    "fitnessLevel": FieldDefinition(
        key="fitnessLevel",
        attr="fitness_level",
        type="enum",
        enum_values=FITNESS_LEVELS,
        description="User's fitness experience (beginner, intermediate, advanced)",
        label="fitness level",
        example='"beginner", "intermediate" or "advanced"',
    ),
    "fitnessGoal": FieldDefinition(
        key="fitnessGoal",
        attr="fitness_goal",
        type="string",
        max_length=100,
        description="User's fitness goal (lose weight, build muscle, maintain fitness, etc.)",
        label="training goals",
        example='"lose weight" or "build muscle"',
    ),
}

BASIC_FIELD_KEYS: tuple[str, ...] = ("age", "gender", "height", "weight")
LEVEL_FIELD_KEYS: tuple[str, ...] = ("fitnessLevel",)
GOAL_FIELD_KEYS: tuple[str, ...] = ("fitnessGoal",)


def get_field(key: str) -> FieldDefinition | None:
    return PROFILE_FIELDS.get(key)


def list_fields() -> list[FieldDefinition]:
    return list(PROFILE_FIELDS.values())


def field_keys() -> list[str]:
    return list(PROFILE_FIELDS.keys())


def fields_for(keys: tuple[str, ...] | list[str]) -> list[FieldDefinition]:
    """Definitions for `keys`, in catalog order. Unknown keys are skipped."""
    wanted = set(keys)
    return [f for f in PROFILE_FIELDS.values() if f.key in wanted]


def readable_labels(keys: list[str]) -> list[str]:
    """Human-readable labels for field keys; unknown keys pass through."""
    labels: list[str] = []
    for key in keys:
        definition = get_field(key)
        labels.append(definition.label if definition else key)
    return labels
