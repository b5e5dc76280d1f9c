"""Tests for the SQL profile store — FakeSession, no real Postgres."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from app.db import async_database_url
from app.registration.models import CreateUserRequest, RegistrationStep
from app.registration.store import ProfileStore, profile_to_row, registration_update, row_to_profile

from tests.conftest import USER_ID, FakeSession, complete_fields, make_profile


def make_user_row(**overrides) -> dict:
    """Helper to build a fake users row dict."""
    row = {
        "id": uuid.UUID(USER_ID),
        "username": "alex",
        "first_name": "Alex",
        "last_name": None,
        "language_code": "en",
        "profile_status": "collecting_level",
        "age": 28,
        "gender": "male",
        "height": 175,
        "weight": 75,
        "fitness_level": None,
        "fitness_goal": None,
    }
    row.update(overrides)
    return row


class TestRowMapping:
    def test_row_to_profile(self):
        profile = row_to_profile(make_user_row(fitness_level="beginner"))
        assert profile.id == USER_ID
        assert profile.registration_step is RegistrationStep.collecting_level
        assert profile.fitness_level == "beginner"

    def test_legacy_and_null_status(self):
        assert row_to_profile(make_user_row(profile_status="incomplete")).registration_step is RegistrationStep.greeting
        assert row_to_profile(make_user_row(profile_status=None)).registration_step is RegistrationStep.greeting

    def test_profile_to_row(self):
        row = profile_to_row({
            "registration_step": RegistrationStep.confirmation,
            "fitness_goal": "run",
            "created_at": datetime.now(timezone.utc),
        })
        assert row == {"profile_status": "confirmation", "fitness_goal": "run"}

    def test_registration_update_covers_flow_attributes(self):
        values = registration_update(make_profile(RegistrationStep.complete, **complete_fields()))
        assert values["registration_step"] is RegistrationStep.complete
        assert values["fitness_level"] == "intermediate"
        assert "username" not in values


class TestProfileStore:
    @pytest.mark.asyncio
    async def test_get_user(self):
        session = FakeSession([[make_user_row()]])
        profile = await ProfileStore(session).get_user(USER_ID)
        assert profile.age == 28
        sql, params = session.statements[0]
        assert "FROM users WHERE id = :id" in sql
        assert params == {"id": uuid.UUID(USER_ID)}

    @pytest.mark.asyncio
    async def test_get_user_unknown(self):
        session = FakeSession([[]])
        assert await ProfileStore(session).get_user(USER_ID) is None

    @pytest.mark.asyncio
    async def test_get_user_non_uuid_skips_query(self):
        session = FakeSession()
        assert await ProfileStore(session).get_user("not-a-uuid") is None
        assert session.statements == []

    @pytest.mark.asyncio
    async def test_update_profile_data(self):
        session = FakeSession([[make_user_row(profile_status="collecting_goals", fitness_level="advanced")]])
        stored = await ProfileStore(session).update_profile_data(
            USER_ID,
            {"registration_step": RegistrationStep.collecting_goals, "fitness_level": "advanced"},
        )
        assert stored.registration_step is RegistrationStep.collecting_goals
        sql, params = session.statements[0]
        assert sql.startswith("UPDATE users SET profile_status = :profile_status, fitness_level = :fitness_level")
        assert "updated_at = now()" in sql
        assert params["profile_status"] == "collecting_goals"
        assert session.commits == 1

    @pytest.mark.asyncio
    async def test_update_nothing_writable_reads_back(self):
        session = FakeSession([[make_user_row()]])
        stored = await ProfileStore(session).update_profile_data(USER_ID, {"bogus": 1})
        assert stored is not None
        assert session.statements[0][0].startswith("SELECT")
        assert session.commits == 0

    @pytest.mark.asyncio
    async def test_upsert_existing_account(self):
        session = FakeSession([[make_user_row()]])
        request = CreateUserRequest(provider="telegram", provider_user_id="42")
        profile = await ProfileStore(session).upsert_user(request)
        assert profile.id == USER_ID
        assert len(session.statements) == 1
        assert "JOIN users u" in session.statements[0][0]
        assert session.commits == 0

    @pytest.mark.asyncio
    async def test_upsert_creates_user_and_account(self):
        new_row = make_user_row(profile_status="greeting", age=None, gender=None, height=None, weight=None)
        session = FakeSession([[], [new_row], []])
        request = CreateUserRequest(provider="telegram", provider_user_id="42", username="alex")
        profile = await ProfileStore(session).upsert_user(request)

        assert profile.registration_step is RegistrationStep.greeting
        assert profile.age is None
        assert "INSERT INTO users" in session.statements[1][0]
        account_sql, account_params = session.statements[2]
        assert "INSERT INTO user_accounts" in account_sql
        assert account_params["provider_user_id"] == "42"
        assert session.commits == 1


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
            ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
            ("postgresql+asyncpg://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ],
    )
    def test_async_driver_forced(self, url, expected):
        assert async_database_url(url) == expected
