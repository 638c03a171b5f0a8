"""Direct recipe sharing between friends.

A share grants view access on one recipe to one accepted friend, optionally
until ``expires_at``. Shares never grant write access.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.clock import days_from_now, now_ms
from ..errors import AlreadyShared, NotFriends
from ..models import Recipe, RecipeShare
from .access_control import can_modify, require_owned_recipe
from .enrichment import enrich_recipes, fetch_recipes, fetch_users
from .friendships import are_friends

logger = logging.getLogger("recipebox.sharing")


def _existing_share(db: Session, recipe_id: str, friend_id: str) -> Optional[RecipeShare]:
    return db.scalar(
        select(RecipeShare).where(
            RecipeShare.recipe_id == recipe_id,
            RecipeShare.shared_with_id == friend_id,
        )
    )


def _insert_share(
    db: Session,
    recipe: Recipe,
    owner_id: str,
    friend_id: str,
    message: Optional[str],
    expires_in_days: Optional[float],
) -> RecipeShare:
    now = now_ms()
    share = RecipeShare(
        recipe_id=recipe.id,
        owner_id=owner_id,
        shared_with_id=friend_id,
        permission="view",
        message=message,
        shared_at=now,
        expires_at=days_from_now(expires_in_days, now) if expires_in_days else None,
    )
    db.add(share)
    db.flush()
    return share


# --- Queries ---

def get_shared_with(db: Session, user_id: str, recipe_id: str) -> list[dict]:
    """Users a recipe is shared with. Empty unless the caller owns the recipe."""
    recipe = db.get(Recipe, recipe_id)
    if recipe is None or not can_modify(recipe, user_id):
        return []

    shares = db.scalars(
        select(RecipeShare)
        .where(RecipeShare.recipe_id == recipe_id)
        .order_by(RecipeShare.shared_at)
    ).all()
    users = fetch_users(db, (s.shared_with_id for s in shares))

    result = []
    for share in shares:
        user = users.get(share.shared_with_id)
        if user is None:
            continue
        result.append({
            "share_id": share.id,
            "user_id": user.id,
            "name": user.display_name,
            "email": user.email,
            "image_url": user.image_url,
            "shared_at": share.shared_at,
            "expires_at": share.expires_at,
            "message": share.message,
        })
    return result


def get_shared_with_me(db: Session, user_id: str, now: Optional[int] = None) -> list[dict]:
    """Recipes shared with the caller through non-expired shares."""
    now = now if now is not None else now_ms()
    shares = db.scalars(
        select(RecipeShare)
        .where(RecipeShare.shared_with_id == user_id)
        .order_by(RecipeShare.shared_at.desc())
    ).all()
    shares = [s for s in shares if s.is_active(now)]

    recipes = fetch_recipes(db, (s.recipe_id for s in shares))
    live = [s for s in shares if s.recipe_id in recipes]
    payloads = enrich_recipes(db, [recipes[s.recipe_id] for s in live], user_id)

    for share, payload in zip(live, payloads):
        payload.update({
            "is_shared": True,
            "shared_at": share.shared_at,
            "share_message": share.message,
        })
    return payloads


def can_share(db: Session, user_id: Optional[str], recipe_id: str, friend_id: str) -> dict:
    """Dry-run of ``share`` that reports the blocking reason instead of raising."""
    if not user_id:
        return {"can_share": False, "reason": "Not authenticated"}

    recipe = db.get(Recipe, recipe_id)
    if recipe is None or not can_modify(recipe, user_id):
        return {"can_share": False, "reason": "Not the recipe owner"}
    if not are_friends(db, user_id, friend_id):
        return {"can_share": False, "reason": "Not friends"}
    if _existing_share(db, recipe_id, friend_id) is not None:
        return {"can_share": False, "reason": "Already shared"}
    return {"can_share": True, "reason": None}


# --- Mutations ---

def share(
    db: Session,
    user_id: str,
    recipe_id: str,
    friend_id: str,
    message: Optional[str] = None,
    expires_in_days: Optional[float] = None,
) -> RecipeShare:
    """Share a recipe with one friend.

    Raises:
        NotFound: unknown recipe
        NotOwner: caller does not own the recipe
        NotFriends: no accepted friendship with the target
        AlreadyShared: a share for (recipe, friend) already exists
    """
    recipe = require_owned_recipe(db, recipe_id, user_id)

    if not are_friends(db, user_id, friend_id):
        logger.warning(f"User {user_id} tried to share {recipe_id} with non-friend {friend_id}")
        raise NotFriends()
    if _existing_share(db, recipe_id, friend_id) is not None:
        raise AlreadyShared()

    share_row = _insert_share(db, recipe, user_id, friend_id, message, expires_in_days)
    db.commit()
    db.refresh(share_row)

    logger.info(f"Recipe {recipe_id} shared by {user_id} with {friend_id}")
    return share_row


def share_with_multiple(
    db: Session,
    user_id: str,
    recipe_id: str,
    friend_ids: list[str],
    message: Optional[str] = None,
    expires_in_days: Optional[float] = None,
) -> list[dict]:
    """Share with several friends; per-friend failures are reported, not raised."""
    recipe = require_owned_recipe(db, recipe_id, user_id)

    results = []
    for friend_id in friend_ids:
        if not are_friends(db, user_id, friend_id):
            results.append({"friend_id": friend_id, "success": False, "error": "Not friends"})
            continue
        if _existing_share(db, recipe_id, friend_id) is not None:
            results.append({"friend_id": friend_id, "success": False, "error": "Already shared"})
            continue

        share_row = _insert_share(db, recipe, user_id, friend_id, message, expires_in_days)
        results.append({"friend_id": friend_id, "success": True, "share_id": share_row.id})

    db.commit()
    shared = sum(1 for r in results if r["success"])
    logger.info(f"Recipe {recipe_id} shared by {user_id} with {shared}/{len(friend_ids)} friends")
    return results


def unshare(db: Session, user_id: str, recipe_id: str, friend_id: str) -> bool:
    require_owned_recipe(db, recipe_id, user_id)

    share_row = _existing_share(db, recipe_id, friend_id)
    if share_row is None:
        return False

    db.delete(share_row)
    db.commit()
    logger.info(f"Recipe {recipe_id} unshared from {friend_id}")
    return True


def unshare_all(db: Session, user_id: str, recipe_id: str) -> int:
    require_owned_recipe(db, recipe_id, user_id)

    shares = db.scalars(
        select(RecipeShare).where(RecipeShare.recipe_id == recipe_id)
    ).all()
    for share_row in shares:
        db.delete(share_row)
    db.commit()

    logger.info(f"Recipe {recipe_id}: removed {len(shares)} shares")
    return len(shares)
