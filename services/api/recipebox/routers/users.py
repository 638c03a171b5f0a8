"""User profile API router.

Endpoints:
- GET /api/users/me - Current profile, or null when anonymous/unknown
- POST /api/users/me - Create the profile on first sign-in (idempotent)
- PATCH /api/users/me - Update name, email, avatar
- GET /api/users/me/stats - Recipe, favorite and cook counts
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..deps import current_user_or_fail, current_user_or_null, get_db
from ..schemas import ProfileCreate, ProfilePatch, UserOut, UserStatsOut
from ..services import users as user_service

router = APIRouter()


@router.get("/users/me", response_model=Optional[UserOut])
def get_current_user(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return user_service.current(db, user_id)


@router.post("/users/me", response_model=UserOut)
def get_or_create_profile(
    payload: ProfileCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return user_service.get_or_create_profile(db, user_id, payload)


@router.patch("/users/me", response_model=UserOut)
def update_profile(
    payload: ProfilePatch,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return user_service.update_profile(db, user_id, payload)


@router.get("/users/me/stats", response_model=Optional[UserStatsOut])
def get_stats(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return user_service.get_stats(db, user_id)
