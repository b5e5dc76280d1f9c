"""FastAPI dependencies — explicit wiring of store, LLM and state machine."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.registration.extractor import ProfileExtractor
from app.registration.llm import OpenAILLM
from app.registration.locks import UserLocks
from app.registration.prompts import PromptBuilder
from app.registration.service import RegistrationService
from app.registration.state_machine import RegistrationStateMachine
from app.registration.store import ProfileStore

USER_LOCKS = UserLocks()
PROMPTS = PromptBuilder()


@lru_cache(maxsize=1)
def get_llm() -> OpenAILLM:
    # The SDK client itself is built on the first completion call
    return OpenAILLM()


def get_profile_store(session: AsyncSession = Depends(get_session)) -> ProfileStore:
    return ProfileStore(session)


def get_registration_service(
    store: ProfileStore = Depends(get_profile_store),
    llm: OpenAILLM = Depends(get_llm),
) -> RegistrationService:
    extractor = ProfileExtractor(llm.extract_json, PROMPTS)
    machine = RegistrationStateMachine(extractor, PROMPTS)
    return RegistrationService(store, machine, llm.chat, USER_LOCKS, PROMPTS)
