"""User-facing registration texts — deterministic templates, never LLM output."""

from __future__ import annotations

from typing import Any

from app.registration.fields import get_field, readable_labels

LEVEL_NAMES: dict[str, str] = {
    "beginner": "Beginner",
    "intermediate": "Intermediate",
    "advanced": "Advanced",
}

NOT_SPECIFIED = "not specified"


def level_name(level: str | None) -> str:
    return LEVEL_NAMES.get(level or "", "Not determined")


def _progress(basic: bool, level: bool, goals: bool) -> str:
    mark = {True: "✅", False: "❌"}
    return (
        "📋 Progress:\n"
        f"{mark[basic]} Basic Information\n"
        f"{mark[level]} Fitness Level\n"
        f"{mark[goals]} Training Goals"
    )


def _or_not_specified(value: Any) -> Any:
    return NOT_SPECIFIED if value is None else value


WELCOME = """Hello! I'm your personal AI fitness coach.

To create a personalized training program, I need to know a bit about you. This will take just a few minutes.

📋 Current Progress:
❌ Basic Information (age, gender, height, weight)
❌ Fitness Level
❌ Training Goals

Let's start with your basic information. Please tell me:
• How old are you?
• What is your gender (male/female)?
• What is your height (in cm)?
• What is your weight (in kg)?

You can answer all questions at once or one at a time."""


def basic_info_success(age: int, gender: str, height: int, weight: int) -> str:
    return f"""Great! I've recorded your information:
• Age: {age} years
• Gender: {gender}
• Height: {height} cm
• Weight: {weight} kg

{_progress(True, False, False)}

Now let's determine your fitness level. Which option best describes you:
• Beginner (never exercised regularly)?
• Intermediate (exercised 1-2 years)?
• Advanced (exercised more than 2 years regularly)?"""


def partial_info_clarification(missing: list[str]) -> str:
    """Ask for exactly the missing basic fields, with example phrasings."""
    readable = ", ".join(readable_labels(missing))
    examples = "\n".join(
        f"• {definition.label.capitalize()}: {definition.example}"
        for definition in map(get_field, missing)
        if definition is not None
    )
    return f"""Thanks! I still need your {readable}.
Please tell me your {readable}.

Examples:
{examples}"""


def fitness_level_success(level: str) -> str:
    return f"""Great! Your level: {level_name(level)}

{_progress(True, True, False)}

Final step - your goals. What do you want to achieve?
• Lose weight and burn fat
• Build muscle mass
• Maintain current fitness
• Improve overall health
• Increase strength and endurance"""


def fitness_level_question(current: str | None = None) -> str:
    current_line = f"\nCurrently recorded: {level_name(current)}\n" if current else ""
    return f"""I couldn't determine your fitness level. Please specify more clearly:
{current_line}
• "beginner" - if you've never exercised regularly
• "intermediate" - if you've exercised for 1-2 years
• "advanced" - if you've exercised for more than 2 years regularly"""


def goal_question(current: str | None = None) -> str:
    current_line = f"\nCurrently recorded: {current}\n" if current else ""
    return f"""I couldn't determine your training goal. Please specify more clearly:
{current_line}
• "lose weight" - for weight loss
• "build muscle" - for muscle gain
• "maintain" - for maintaining current fitness
• "get healthy" - for overall health improvement"""


def profile_summary(values: dict[str, Any]) -> str:
    return f"""👤 Profile:
• Age: {_or_not_specified(values.get("age"))} years
• Gender: {_or_not_specified(values.get("gender"))}
• Height: {_or_not_specified(values.get("height"))} cm
• Weight: {_or_not_specified(values.get("weight"))} kg
• Level: {level_name(values.get("fitnessLevel"))}
• Goal: {_or_not_specified(values.get("fitnessGoal"))}"""


CONFIRMATION_INSTRUCTIONS = """Is everything correct? Reply with:
• "yes" - to confirm and complete registration
• "edit [field]" - to change a specific field (e.g., "edit age")"""


def goals_success(goal: str, values: dict[str, Any]) -> str:
    return f"""Great! Your goal: {goal}

{_progress(True, True, True)}

Let's review all the information:

{profile_summary(values)}

{CONFIRMATION_INSTRUCTIONS}"""


def missing_before_confirmation(missing: list[str]) -> str:
    readable = ", ".join(readable_labels(missing))
    return f"""Before we finish, some information is still missing: {readable}.
Please tell me your {readable} so I can complete your profile."""


PROFILE_RESET = """Okay, let's correct the information.

Please tell me again:
• How old are you?
• What is your gender (male/female)?
• What is your height (in cm)?
• What is your weight (in kg)?"""

REGISTRATION_COMPLETE = """Excellent! Registration completed! 🎉

I now know enough about you to create a personalized training program.
How can I help you today?"""

PROFILE_COMPLETE = "Your profile is already complete! How can I help you?"

