"""Message handling for one user: load → process → persist, serialised per user."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from app.registration.errors import InvalidInputError
from app.registration.locks import UserLocks
from app.registration.models import ProcessResult, RegistrationStep
from app.registration.prompts import ChatMessage, PromptBuilder
from app.registration.state_machine import RegistrationStateMachine
from app.registration.store import ProfileStore, registration_update

logger = logging.getLogger(__name__)

ChatCompletion = Callable[[list[ChatMessage]], Awaitable[str]]


class RegistrationService:
    def __init__(
        self,
        store: ProfileStore,
        machine: RegistrationStateMachine,
        chat: ChatCompletion,
        locks: UserLocks,
        prompts: PromptBuilder | None = None,
    ):
        self._store = store
        self._machine = machine
        self._chat = chat
        self._locks = locks
        self._prompts = prompts or PromptBuilder()

    async def handle_message(self, user_id: str, text: str) -> ProcessResult | None:
        """Process one inbound message. None when the user does not exist.

        Registered users get free coach chat; everyone else goes through
        the registration state machine, and the result is written back
        only when the profile actually changed.
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("message must be a non-empty string")

        async with self._locks.hold(user_id):
            user = await self._store.get_user(user_id)
            if user is None:
                return None

            if user.registration_step is RegistrationStep.complete:
                reply = await self._chat(self._prompts.build_chat_messages(text))
                return ProcessResult(updated_user=user, response=reply, is_complete=True)

            result = await self._machine.process_message(user, text)
            if result.updated_user != user:
                stored = await self._store.update_profile_data(
                    user_id, registration_update(result.updated_user)
                )
                if stored is None:
                    logger.warning("User %s vanished before profile update", user_id)
            return result
