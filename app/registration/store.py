"""Profile store — async access to the users and user_accounts tables.

users: id (UUID), username, first_name, last_name, language_code,
       profile_status, age, gender, height, weight, fitness_level,
       fitness_goal, created_at, updated_at
user_accounts: id (UUID), user_id → users.id, provider, provider_user_id
               (unique per provider)

profile_status holds the registration step; fitness_level / fitness_goal
are the snake_case columns behind the fitnessLevel / fitnessGoal wire keys.
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.registration.models import CreateUserRequest, Profile

logger = logging.getLogger(__name__)

# Profile attribute → users column
COLUMN_MAP: dict[str, str] = {
    "username": "username",
    "first_name": "first_name",
    "last_name": "last_name",
    "language_code": "language_code",
    "registration_step": "profile_status",
    "age": "age",
    "gender": "gender",
    "height": "height",
    "weight": "weight",
    "fitness_level": "fitness_level",
    "fitness_goal": "fitness_goal",
}

# Written back after every registration turn
REGISTRATION_ATTRS: tuple[str, ...] = (
    "registration_step",
    "age",
    "gender",
    "height",
    "weight",
    "fitness_level",
    "fitness_goal",
)

_SELECT_COLUMNS = "id, " + ", ".join(COLUMN_MAP.values())
_JOINED_COLUMNS = ", ".join(f"u.{c}" for c in ("id", *COLUMN_MAP.values()))


def _parse_id(user_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None


def row_to_profile(row: dict[str, Any]) -> Profile:
    """Build a Profile from a users row; unknown steps fall back to greeting."""
    data: dict[str, Any] = {"id": str(row["id"])}
    for attr, column in COLUMN_MAP.items():
        value = row.get(column)
        if value is not None:
            data[attr] = value
    return Profile.model_validate(data)


def profile_to_row(values: dict[str, Any]) -> dict[str, Any]:
    """Profile attributes → column params. Unknown attributes are dropped."""
    row: dict[str, Any] = {}
    for attr, value in values.items():
        column = COLUMN_MAP.get(attr)
        if column is None:
            continue
        row[column] = value.value if isinstance(value, Enum) else value
    return row


def registration_update(profile: Profile) -> dict[str, Any]:
    """Attributes the registration flow owns, ready for update_profile_data."""
    return {attr: getattr(profile, attr) for attr in REGISTRATION_ATTRS}


class ProfileStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def _fetch_one(self, query: str, params: dict[str, Any]) -> dict[str, Any] | None:
        result = await self._session.execute(text(query), params)
        row = result.fetchone()
        if row is None:
            return None
        return dict(zip(result.keys(), row))

    async def get_user(self, user_id: str) -> Profile | None:
        """Returns None for unknown or non-UUID ids."""
        parsed = _parse_id(user_id)
        if parsed is None:
            return None
        row = await self._fetch_one(
            f"SELECT {_SELECT_COLUMNS} FROM users WHERE id = :id",
            {"id": parsed},
        )
        return row_to_profile(row) if row else None

    async def find_by_provider(self, provider: str, provider_user_id: str) -> Profile | None:
        row = await self._fetch_one(
            f"SELECT {_JOINED_COLUMNS} "
            "FROM user_accounts a JOIN users u ON u.id = a.user_id "
            "WHERE a.provider = :provider AND a.provider_user_id = :provider_user_id "
            "LIMIT 1",
            {"provider": provider, "provider_user_id": provider_user_id},
        )
        return row_to_profile(row) if row else None

    async def create_user(self, data: CreateUserRequest) -> Profile:
        row = await self._fetch_one(
            "INSERT INTO users (username, first_name, last_name, language_code, profile_status) "
            "VALUES (:username, :first_name, :last_name, :language_code, 'greeting') "
            f"RETURNING {_SELECT_COLUMNS}",
            {
                "username": data.username,
                "first_name": data.first_name,
                "last_name": data.last_name,
                "language_code": data.language_code,
            },
        )
        if row is None:
            raise RuntimeError("INSERT INTO users returned no row")
        await self._session.execute(
            text(
                "INSERT INTO user_accounts (user_id, provider, provider_user_id) "
                "VALUES (:user_id, :provider, :provider_user_id)"
            ),
            {
                "user_id": row["id"],
                "provider": data.provider,
                "provider_user_id": data.provider_user_id,
            },
        )
        await self._session.commit()
        logger.info("Created user %s for provider %s", row["id"], data.provider)
        return row_to_profile(row)

    async def upsert_user(self, data: CreateUserRequest) -> Profile:
        existing = await self.find_by_provider(data.provider, data.provider_user_id)
        if existing is not None:
            return existing
        return await self.create_user(data)

    async def update_profile_data(self, user_id: str, values: dict[str, Any]) -> Profile | None:
        """Write the given Profile attributes; returns the stored Profile or None."""
        parsed = _parse_id(user_id)
        if parsed is None:
            return None
        params = profile_to_row(values)
        if not params:
            return await self.get_user(user_id)

        assignments = ", ".join(f"{column} = :{column}" for column in params)
        params["id"] = parsed
        row = await self._fetch_one(
            f"UPDATE users SET {assignments}, updated_at = now() WHERE id = :id "
            f"RETURNING {_SELECT_COLUMNS}",
            params,
        )
        await self._session.commit()
        return row_to_profile(row) if row else None
