"""Registration dialogue — the step-by-step profile state machine.

greeting → collecting_basic → collecting_level → collecting_goals
         → confirmation → complete

process_message is a pure transition over (user, text): it returns the
updated Profile and the reply, and never touches storage. Persisting the
result is the caller's job.

Guarantees:
  * a turn with no extractable data changes neither the step nor any field;
  * stored fields are never reset to absent by a later turn;
  * `complete` is only reached with all six fields present and valid.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from app.registration.confirmation import ConfirmationReply, classify_confirmation_reply
from app.registration.errors import InvalidInputError
from app.registration.extractor import ProfileExtractor
from app.registration.fields import BASIC_FIELD_KEYS, GOAL_FIELD_KEYS, LEVEL_FIELD_KEYS, list_fields
from app.registration.models import STEP_ORDER, ProcessResult, Profile, RegistrationStep
from app.registration.prompts import PromptBuilder
from app.registration.validator import validate_field

logger = logging.getLogger(__name__)

StepHandler = Callable[[Profile, str], Awaitable[ProcessResult]]


def next_step(step: RegistrationStep) -> RegistrationStep:
    """Following step in the fixed order; complete is terminal."""
    index = STEP_ORDER.index(step)
    return STEP_ORDER[min(index + 1, len(STEP_ORDER) - 1)]


def is_profile_complete(user: Profile) -> bool:
    return not incomplete_fields(user)


def incomplete_fields(user: Profile) -> list[str]:
    """Keys that are absent or hold a value outside their field's domain."""
    return [
        definition.key
        for definition in list_fields()
        if validate_field(definition, user.get_field(definition.key)) is None
    ]


def _target_fields(user: Profile, keys: tuple[str, ...]) -> list[str]:
    """Still-missing keys of a step; all of them on re-entry after an edit."""
    return user.missing_fields(keys) or list(keys)


class RegistrationStateMachine:
    def __init__(self, extractor: ProfileExtractor, prompts: PromptBuilder | None = None):
        self._extractor = extractor
        self._prompts = prompts or PromptBuilder()
        self._handlers: dict[RegistrationStep, StepHandler] = {
            RegistrationStep.greeting: self._handle_greeting,
            RegistrationStep.collecting_basic: self._handle_basic_info,
            RegistrationStep.collecting_level: self._handle_fitness_level,
            RegistrationStep.collecting_goals: self._handle_goals,
            RegistrationStep.confirmation: self._handle_confirmation,
            RegistrationStep.complete: self._handle_complete,
        }

    async def process_message(self, user: Profile, text: str) -> ProcessResult:
        """Advance the dialogue by one user message.

        Raises InvalidInputError for a non-Profile user or empty text.
        """
        if not isinstance(user, Profile):
            raise InvalidInputError(f"user must be a Profile, got {type(user).__name__}")
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("text must be a non-empty string")

        step = user.registration_step
        result = await self._handlers[step](user, text)

        new_step = result.updated_user.registration_step
        if new_step != step:
            logger.info("User %s registration step %s -> %s", user.id, step.value, new_step.value)
        return result

    # -------------------------------------------------------------------
    # Step handlers
    # -------------------------------------------------------------------

    async def _handle_greeting(self, user: Profile, text: str) -> ProcessResult:
        # First turn is instructional: no extraction call
        return ProcessResult(
            updated_user=user.with_step(next_step(user.registration_step)),
            response=self._prompts.welcome_message(),
        )

    async def _handle_basic_info(self, user: Profile, text: str) -> ProcessResult:
        found = await self._extractor.extract(user, text, _target_fields(user, BASIC_FIELD_KEYS))
        if not found:
            return ProcessResult(
                updated_user=user.model_copy(),
                response=self._prompts.welcome_message(),
            )

        merged = user.merge_fields(found)
        missing = merged.missing_fields(BASIC_FIELD_KEYS)
        if missing:
            return ProcessResult(
                updated_user=merged,
                response=self._prompts.partial_info_message(missing),
                extracted=found,
            )

        return ProcessResult(
            updated_user=merged.with_step(next_step(user.registration_step)),
            response=self._prompts.basic_info_success_message(merged),
            extracted=found,
        )

    async def _handle_fitness_level(self, user: Profile, text: str) -> ProcessResult:
        found = await self._extractor.extract(user, text, _target_fields(user, LEVEL_FIELD_KEYS))
        level = found.get("fitnessLevel")
        if level is None:
            return ProcessResult(
                updated_user=user.model_copy(),
                response=self._prompts.fitness_level_question(user.fitness_level),
            )

        merged = user.merge_fields(found)
        return ProcessResult(
            updated_user=merged.with_step(next_step(user.registration_step)),
            response=self._prompts.fitness_level_success_message(level),
            extracted=found,
        )

    async def _handle_goals(self, user: Profile, text: str) -> ProcessResult:
        found = await self._extractor.extract(user, text, _target_fields(user, GOAL_FIELD_KEYS))
        if found.get("fitnessGoal") is None:
            return ProcessResult(
                updated_user=user.model_copy(),
                response=self._prompts.goal_question(user.fitness_goal),
            )

        merged = user.merge_fields(found)
        return ProcessResult(
            updated_user=merged.with_step(next_step(user.registration_step)),
            response=self._prompts.goals_success_message(merged),
            extracted=found,
        )

    async def _handle_confirmation(self, user: Profile, text: str) -> ProcessResult:
        if not is_profile_complete(user):
            missing = incomplete_fields(user)
            logger.warning("User %s reached confirmation with missing or invalid fields: %s", user.id, missing)
            return ProcessResult(
                updated_user=user.model_copy(),
                response=self._prompts.missing_fields_message(missing),
            )

        reply = classify_confirmation_reply(text)
        if reply is ConfirmationReply.affirm:
            return ProcessResult(
                updated_user=user.with_step(next_step(user.registration_step)),
                response=self._prompts.registration_complete_message(),
                is_complete=True,
            )
        if reply is ConfirmationReply.edit:
            # Fields stay as defaults; the user only restates what is wrong
            return ProcessResult(
                updated_user=user.with_step(RegistrationStep.collecting_basic),
                response=self._prompts.profile_reset_message(),
            )
        return ProcessResult(
            updated_user=user.model_copy(),
            response=self._prompts.confirmation_prompt(user),
        )

    async def _handle_complete(self, user: Profile, text: str) -> ProcessResult:
        return ProcessResult(
            updated_user=user.model_copy(),
            response=self._prompts.profile_complete_message(),
            is_complete=True,
        )
