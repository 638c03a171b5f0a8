"""Recipe visibility and ownership checks.

Read rules, in order:
1. Global recipes are readable by everyone, including anonymous callers
2. The owner can always read
3. Public recipes are readable by everyone
4. A non-expired direct share grants read to its recipient

Only the owner may modify or delete, and never a global recipe.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.clock import now_ms
from ..errors import NotFound, NotOwner
from ..models import Recipe, RecipeShare

logger = logging.getLogger("recipebox.access")


class ReadAccess(str, enum.Enum):
    GRANTED = "granted"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass
class RecipeAccess:
    outcome: ReadAccess
    recipe: Optional[Recipe] = None

    @property
    def granted(self) -> bool:
        return self.outcome is ReadAccess.GRANTED


def find_active_share(
    db: Session, recipe_id: str, user_id: str, now: Optional[int] = None
) -> Optional[RecipeShare]:
    share = db.scalar(
        select(RecipeShare).where(
            RecipeShare.recipe_id == recipe_id,
            RecipeShare.shared_with_id == user_id,
        )
    )
    if share is None:
        return None
    now = now if now is not None else now_ms()
    return share if share.is_active(now) else None


def can_read(
    db: Session, recipe: Recipe, user_id: Optional[str], now: Optional[int] = None
) -> bool:
    if recipe.is_global:
        return True
    if user_id and recipe.user_id == user_id:
        return True
    if recipe.is_public:
        return True
    if user_id:
        return find_active_share(db, recipe.id, user_id, now) is not None
    return False


def can_modify(recipe: Recipe, user_id: Optional[str]) -> bool:
    if not user_id or recipe.is_global:
        return False
    return recipe.user_id == user_id


def can_delete(recipe: Recipe, user_id: Optional[str]) -> bool:
    return can_modify(recipe, user_id)


def resolve_read(
    db: Session, recipe_id: str, user_id: Optional[str], now: Optional[int] = None
) -> RecipeAccess:
    """Look up a recipe and decide read access in one step.

    Callers at the API edge collapse NOT_FOUND and FORBIDDEN into the same
    null response so private recipes do not leak their existence.
    """
    recipe = db.get(Recipe, recipe_id)
    if recipe is None:
        return RecipeAccess(ReadAccess.NOT_FOUND)
    if not can_read(db, recipe, user_id, now):
        return RecipeAccess(ReadAccess.FORBIDDEN)
    return RecipeAccess(ReadAccess.GRANTED, recipe)


def require_owned_recipe(db: Session, recipe_id: str, user_id: str) -> Recipe:
    """Fetch a recipe the caller may modify.

    Raises:
        NotFound: if the recipe does not exist
        NotOwner: if the caller is not the owner, or the recipe is global
    """
    recipe = db.get(Recipe, recipe_id)
    if recipe is None:
        raise NotFound("Recipe not found")
    if not can_modify(recipe, user_id):
        logger.warning(f"User {user_id} denied write access to recipe {recipe_id}")
        raise NotOwner("Not the recipe owner")
    return recipe
