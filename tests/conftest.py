"""Shared fixtures for the test suite."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.registration.deps import get_profile_store, get_registration_service
from app.registration.extractor import ProfileExtractor
from app.registration.locks import UserLocks
from app.registration.models import CreateUserRequest, Profile, RegistrationStep
from app.registration.service import RegistrationService
from app.registration.state_machine import RegistrationStateMachine

USER_ID = "7c9e6679-7425-40de-944b-e07fc1f90ae7"


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeSession:
    """Minimal stand-in for AsyncSession used in store tests.

    Each execute() consumes the next queued row list; statements and params
    are recorded for assertions.
    """

    def __init__(self, results: list[list[dict[str, Any]]] | None = None):
        self._results = list(results or [])
        self.statements: list[tuple[str, dict[str, Any] | None]] = []
        self.commits = 0

    async def execute(self, stmt, params=None):
        self.statements.append((str(stmt), params))
        rows = self._results.pop(0) if self._results else []
        return FakeResult(rows)

    async def commit(self):
        self.commits += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]]):
        self._rows = rows
        self._keys = list(rows[0].keys()) if rows else []

    def keys(self):
        return self._keys

    def fetchone(self):
        if not self._rows:
            return None
        return tuple(self._rows[0][k] for k in self._keys)

    def fetchall(self):
        return [tuple(r[k] for k in self._keys) for r in self._rows]


# ---------------------------------------------------------------------------
# In-memory profile store + scripted LLM
# ---------------------------------------------------------------------------

class FakeStore:
    """Dict-backed ProfileStore with the same async surface."""

    def __init__(self, users: list[Profile] | None = None):
        self.users: dict[str, Profile] = {u.id: u for u in users or []}
        self.accounts: dict[tuple[str, str], str] = {}
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self._next = 1

    async def get_user(self, user_id: str) -> Profile | None:
        await asyncio.sleep(0)
        user = self.users.get(user_id)
        return user.model_copy() if user else None

    async def upsert_user(self, data: CreateUserRequest) -> Profile:
        key = (data.provider, data.provider_user_id)
        if key in self.accounts:
            return self.users[self.accounts[key]]
        user_id = f"00000000-0000-0000-0000-{self._next:012d}"
        self._next += 1
        user = Profile(id=user_id, username=data.username, first_name=data.first_name)
        self.users[user_id] = user
        self.accounts[key] = user_id
        return user

    async def update_profile_data(self, user_id: str, values: dict[str, Any]) -> Profile | None:
        await asyncio.sleep(0)
        self.updates.append((user_id, values))
        if user_id not in self.users:
            return None
        self.users[user_id] = self.users[user_id].model_copy(update=values)
        return self.users[user_id]


class ScriptedLLM:
    """Async completion callable returning queued responses in order.

    A queued exception is raised instead of returned. An empty queue
    answers "{}".
    """

    def __init__(self, *responses: str | BaseException):
        self.responses: list[str | BaseException] = list(responses)
        self.calls: list[list[dict[str, str]]] = []

    async def __call__(self, messages: list[dict[str, str]]) -> str:
        self.calls.append(messages)
        await asyncio.sleep(0)
        response = self.responses.pop(0) if self.responses else "{}"
        if isinstance(response, BaseException):
            raise response
        return response

    def prompt_text(self, index: int = -1) -> str:
        return "\n".join(m["content"] for m in self.calls[index])


def make_profile(
    step: RegistrationStep = RegistrationStep.greeting,
    user_id: str = USER_ID,
    **fields: Any,
) -> Profile:
    """Profile at `step` with the given attributes set."""
    return Profile(id=user_id, registration_step=step, **fields)


def complete_fields() -> dict[str, Any]:
    return {
        "age": 28,
        "gender": "male",
        "height": 175,
        "weight": 75,
        "fitness_level": "intermediate",
        "fitness_goal": "build muscle",
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_session():
    """Return a FakeSession with nothing queued (extend _results in tests if needed)."""
    return FakeSession()


@pytest.fixture()
def fake_store():
    return FakeStore()


@pytest.fixture()
def fake_llm():
    return ScriptedLLM()


@pytest.fixture()
def chat_llm():
    return AsyncMock(return_value="Keep it up, champ!")


@pytest.fixture()
def override_deps(fake_store, fake_llm, chat_llm):
    """Override the FastAPI dependencies so no real DB or LLM is needed."""
    locks = UserLocks()

    def _service():
        machine = RegistrationStateMachine(ProfileExtractor(fake_llm))
        return RegistrationService(fake_store, machine, chat_llm, locks)

    app.dependency_overrides[get_profile_store] = lambda: fake_store
    app.dependency_overrides[get_registration_service] = _service
    yield fake_store
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_deps):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
