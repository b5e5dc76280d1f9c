"""User endpoints — provider upsert, lookup, profile read."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.auth import verify_api_key
from app.registration.deps import get_profile_store
from app.registration.models import CreateUserRequest, Profile, UserRef, UserRefResponse
from app.registration.store import ProfileStore

router = APIRouter(prefix="/user", tags=["user"])


@router.post("", response_model=UserRefResponse)
async def upsert_user(
    body: CreateUserRequest,
    _: str = Depends(verify_api_key),
    store: ProfileStore = Depends(get_profile_store),
) -> UserRefResponse:
    """Create or get the user behind (provider, providerUserId)."""
    user = await store.upsert_user(body)
    return UserRefResponse(data=UserRef(id=user.id))


@router.get("/{user_id}", response_model=UserRefResponse)
async def get_user(
    user_id: str,
    _: str = Depends(verify_api_key),
    store: ProfileStore = Depends(get_profile_store),
) -> UserRefResponse:
    user = await store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserRefResponse(data=UserRef(id=user.id))


@router.get("/{user_id}/profile", response_model=Profile)
async def get_profile(
    user_id: str,
    _: str = Depends(verify_api_key),
    store: ProfileStore = Depends(get_profile_store),
) -> Profile:
    user = await store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user
