import logging
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from ..core.clock import now_ms
from ..errors import NotFound
from ..models import Recipe, User
from ..schemas import ProfileCreate, ProfilePatch

logger = logging.getLogger("recipebox.users")


def current(db: Session, user_id: Optional[str]) -> Optional[User]:
    if not user_id:
        return None
    return db.get(User, user_id)


def get_or_create_profile(db: Session, user_id: str, payload: ProfileCreate) -> User:
    """Return the caller's profile row, creating it on first sign-in."""
    user = db.get(User, user_id)
    if user is not None:
        return user

    now = now_ms()
    user = User(
        id=user_id,
        name=payload.name,
        email=payload.email,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Created profile for {user_id}")
    return user


def update_profile(db: Session, user_id: str, payload: ProfilePatch) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    user.updated_at = now_ms()
    db.commit()
    db.refresh(user)
    return user


def get_stats(db: Session, user_id: Optional[str]) -> Optional[dict]:
    if not user_id:
        return None

    total, favorites, cooked = db.execute(
        select(
            func.count(Recipe.id),
            func.coalesce(func.sum(case((Recipe.is_favorite.is_(True), 1), else_=0)), 0),
            func.coalesce(func.sum(Recipe.cook_count), 0),
        ).where(Recipe.user_id == user_id)
    ).one()
    return {
        "total_recipes": total,
        "total_favorites": int(favorites),
        "total_meals_cooked": int(cooked),
    }
