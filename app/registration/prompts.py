"""Prompt construction — LLM extraction prompts and user-facing replies.

Two families:
  * extraction prompts (LLM input) ask for strict JSON, one key per target
    field, with unit-conversion rules and an explicit "null if not mentioned"
    rule to stop the model inventing plausible values;
  * conversational text (user output) is rendered from fixed templates in
    `messages` so every administrative reply is deterministic.
"""

from __future__ import annotations

import json
from typing import Any

from app.registration import messages
from app.registration.fields import FieldDefinition
from app.registration.models import Profile

ChatMessage = dict[str, str]

UNIT_RULES = (
    "Height must be in centimeters: convert feet/inches (1 ft = 30.48 cm, 1 in = 2.54 cm), "
    'e.g. 5\'9" → 175.',
    "Weight must be in kilograms: convert pounds (1 lb = 0.4536 kg) and stones (1 st = 6.35 kg), "
    "e.g. 165 lbs → 75.",
    "Age is in whole years; convert a birth year only if the current year is stated.",
    "Numbers must be JSON numbers, never strings.",
)

EXTRACTION_RULES = (
    "Return ONLY a valid JSON object. No prose, no markdown, no explanation.",
    "Use exactly the keys listed under 'Fields to extract' and no others.",
    "Use null for any field that is not mentioned or not clearly stated. Never guess.",
    "Extract a value only when you can CLEARLY tell which field it belongs to.",
    'ACCEPT approximate language: "around 70kg", "about 25 years", "roughly 175cm".',
    'REJECT ambiguous numbers: "70 and 88" or "25, 175, 70" without units or context → null.',
    "For enum fields use only the listed values, lowercase, in English.",
)


def _describe(definition: FieldDefinition) -> str:
    text = f'"{definition.key}": {definition.description}'
    if definition.type == "enum" and definition.enum_values:
        text += f" (one of: {', '.join(definition.enum_values)})"
    elif definition.type == "number" and definition.minimum is not None and definition.maximum is not None:
        text += f" (range: {definition.minimum:g}-{definition.maximum:g})"
    elif definition.type == "string" and definition.max_length:
        text += f" (short phrase, max {definition.max_length} characters)"
    return text


def _expected_type(definition: FieldDefinition) -> str:
    if definition.type == "number":
        return "number"
    if definition.type == "boolean":
        return "boolean"
    if definition.type == "enum" and definition.enum_values:
        return "|".join(f'"{v}"' for v in definition.enum_values)
    return "string"


class PromptBuilder:
    """Stateless renderer. Safe to share between requests."""

    # -------------------------------------------------------------------
    # Extraction prompts
    # -------------------------------------------------------------------

    def build_profile_parsing_prompt(
        self,
        text: str,
        definitions: list[FieldDefinition],
        already_collected: dict[str, Any] | None = None,
    ) -> list[ChatMessage]:
        """System + user messages asking for a flat JSON object of `definitions`."""
        fields_block = "\n".join(f"  {_describe(d)}" for d in definitions)
        schema = "{\n" + ",\n".join(f'  "{d.key}": {_expected_type(d)} or null' for d in definitions) + "\n}"
        rules = "\n".join(f"- {rule}" for rule in EXTRACTION_RULES + UNIT_RULES)

        known = {k: v for k, v in (already_collected or {}).items() if v is not None}
        known_block = ""
        if known:
            known_block = (
                "\n## Already known (context only, do not repeat unless the user corrects it)\n"
                f"{json.dumps(known, ensure_ascii=False)}\n"
            )

        system = (
            "You are a data extraction engine for a fitness coaching app. "
            "You read one user message and return the requested profile fields as strict JSON."
        )
        user = (
            f"## Fields to extract\n{fields_block}\n"
            f"{known_block}"
            f"\n## Rules\n{rules}\n"
            f"\n## Expected JSON\n{schema}\n"
            f"\n## User message\n{text}\n"
            "\nRespond with valid JSON only:"
        )
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]

    def build_universal_parsing_prompt(self, text: str, definitions: list[FieldDefinition]) -> str:
        """Single-string prompt for arbitrary field sets (booleans, constrained strings, ...)."""
        fields_block = "\n  ".join(_describe(d) for d in definitions)
        expected = ",\n".join(f'  "{d.key}": {_expected_type(d)} or null' for d in definitions)
        return (
            "Extract specific information from the user's message. "
            "Be very careful and accurate. If information is unclear or ambiguous, use null.\n"
            f"Fields to extract:\n  {fields_block}\n"
            "Rules:\n"
            "- Extract only explicitly mentioned information\n"
            "- If you're not confident about a value, use null\n"
            "- Respect field types and validation rules\n"
            "- For enum fields, use only the specified values or null\n"
            "- For number fields, ensure values are reasonable\n"
            "Return ONLY a JSON object with this exact structure:\n"
            f"{{\n{expected}\n}}\n"
            f'User message: "{text}"'
        )

    def build_chat_system_prompt(self) -> str:
        return (
            "You are a friendly AI fitness coach. Respond to user messages briefly, "
            "motivationally and in a friendly way. Do not collect profile data, "
            "just keep the conversation going as a good coach."
        )

    def build_chat_messages(self, text: str) -> list[ChatMessage]:
        return [
            {"role": "system", "content": self.build_chat_system_prompt()},
            {"role": "user", "content": text},
        ]

    # -------------------------------------------------------------------
    # Conversational replies
    # -------------------------------------------------------------------

    def welcome_message(self) -> str:
        return messages.WELCOME

    def basic_info_success_message(self, user: Profile) -> str:
        return messages.basic_info_success(user.age, user.gender, user.height, user.weight)

    def partial_info_message(self, missing: list[str]) -> str:
        return messages.partial_info_clarification(missing)

    def fitness_level_success_message(self, level: str) -> str:
        return messages.fitness_level_success(level)

    def fitness_level_question(self, current: str | None = None) -> str:
        return messages.fitness_level_question(current)

    def goal_question(self, current: str | None = None) -> str:
        return messages.goal_question(current)

    def goals_success_message(self, user: Profile) -> str:
        return messages.goals_success(user.fitness_goal, user.field_values())

    def confirmation_prompt(self, user: Profile) -> str:
        return f"{messages.profile_summary(user.field_values())}\n\n{messages.CONFIRMATION_INSTRUCTIONS}"

    def missing_fields_message(self, missing: list[str]) -> str:
        return messages.missing_before_confirmation(missing)

    def profile_reset_message(self) -> str:
        return messages.PROFILE_RESET

    def registration_complete_message(self) -> str:
        return messages.REGISTRATION_COMPLETE

    def profile_complete_message(self) -> str:
        return messages.PROFILE_COMPLETE
