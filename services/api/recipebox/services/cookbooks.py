"""Cookbooks: named recipe collections.

A cookbook belongs to one user and is never visible to anyone else. It may
hold any recipe its owner can read, but a recipe is only listed while that
still holds, so a share that expires drops out of a friend's cookbook
without the link row being touched.
"""

import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..core.clock import now_ms
from ..errors import NotFound, NotOwner
from ..models import Cookbook, CookbookRecipe
from .access_control import can_read, resolve_read
from .enrichment import enrich_recipes, fetch_recipes

logger = logging.getLogger("recipebox.cookbooks")

FAVORITES_NAME = "Favorites"


def _summary(cookbook: Cookbook, recipe_count: Optional[int] = None) -> dict:
    summary = {
        "id": cookbook.id,
        "name": cookbook.name,
        "description": cookbook.description,
        "color": cookbook.color,
        "is_default": cookbook.is_default,
        "sort_order": cookbook.sort_order,
        "created_at": cookbook.created_at,
        "updated_at": cookbook.updated_at,
    }
    if recipe_count is not None:
        summary["recipe_count"] = recipe_count
    return summary


def _require_owned_cookbook(db: Session, user_id: str, cookbook_id: str) -> Cookbook:
    cookbook = db.get(Cookbook, cookbook_id)
    if cookbook is None:
        raise NotFound("Cookbook not found")
    if cookbook.user_id != user_id:
        logger.warning(f"User {user_id} denied access to cookbook {cookbook_id}")
        raise NotOwner("Not the cookbook owner")
    return cookbook


def _find_by_name(db: Session, user_id: str, name: str) -> Optional[Cookbook]:
    return db.scalar(
        select(Cookbook)
        .where(Cookbook.user_id == user_id, Cookbook.name == name)
        .order_by(Cookbook.sort_order)
        .limit(1)
    )


def _next_sort_order(db: Session, user_id: str) -> int:
    last = db.scalar(select(func.max(Cookbook.sort_order)).where(Cookbook.user_id == user_id))
    return (last or 0) + 1


def _find_link(db: Session, cookbook_id: str, recipe_id: str) -> Optional[CookbookRecipe]:
    return db.scalar(
        select(CookbookRecipe).where(
            CookbookRecipe.cookbook_id == cookbook_id,
            CookbookRecipe.recipe_id == recipe_id,
        )
    )


def _with_recipes(db: Session, cookbook: Cookbook, viewer_id: str) -> dict:
    links = db.scalars(
        select(CookbookRecipe)
        .where(CookbookRecipe.cookbook_id == cookbook.id)
        .order_by(CookbookRecipe.added_at)
    ).all()
    recipes = fetch_recipes(db, (link.recipe_id for link in links))

    readable = []
    added_at = {}
    for link in links:
        recipe = recipes.get(link.recipe_id)
        if recipe is not None and can_read(db, recipe, viewer_id):
            readable.append(recipe)
            added_at[recipe.id] = link.added_at

    payloads = enrich_recipes(db, readable, viewer_id)
    for payload in payloads:
        payload["added_at"] = added_at[payload["id"]]

    result = _summary(cookbook)
    result["recipes"] = payloads
    return result


# --- Queries ---

def list_cookbooks(db: Session, user_id: Optional[str]) -> list[dict]:
    if not user_id:
        return []

    cookbooks = db.scalars(
        select(Cookbook)
        .where(Cookbook.user_id == user_id)
        .order_by(Cookbook.sort_order, Cookbook.created_at)
    ).all()
    if not cookbooks:
        return []

    counts = dict(db.execute(
        select(CookbookRecipe.cookbook_id, func.count(CookbookRecipe.id))
        .where(CookbookRecipe.cookbook_id.in_([c.id for c in cookbooks]))
        .group_by(CookbookRecipe.cookbook_id)
    ).all())
    return [_summary(c, counts.get(c.id, 0)) for c in cookbooks]


def get_by_id(db: Session, user_id: Optional[str], cookbook_id: str) -> Optional[dict]:
    """Cookbook with its readable recipes, or None unless the caller owns it."""
    if not user_id:
        return None
    cookbook = db.get(Cookbook, cookbook_id)
    if cookbook is None or cookbook.user_id != user_id:
        return None
    return _with_recipes(db, cookbook, user_id)


def get_by_name(db: Session, user_id: Optional[str], name: str) -> Optional[dict]:
    if not user_id:
        return None
    cookbook = _find_by_name(db, user_id, name)
    if cookbook is None:
        return None
    return _with_recipes(db, cookbook, user_id)


# --- Mutations ---

def create_cookbook(
    db: Session,
    user_id: str,
    name: str,
    description: Optional[str] = None,
    color: Optional[str] = None,
    is_default: bool = False,
) -> Cookbook:
    """Create a cookbook at the end of the caller's ordering."""
    now = now_ms()
    cookbook = Cookbook(
        user_id=user_id,
        name=name,
        description=description,
        color=color,
        is_default=is_default,
        sort_order=_next_sort_order(db, user_id),
        created_at=now,
        updated_at=now,
    )
    db.add(cookbook)
    db.commit()
    db.refresh(cookbook)

    logger.info(f"Cookbook {cookbook.id} created for {user_id}")
    return cookbook


def add_recipe(db: Session, user_id: str, cookbook_id: str, recipe_id: str) -> dict:
    """Add a readable recipe to an owned cookbook.

    Raises:
        NotFound / NotOwner: cookbook missing or not owned
        NotFound: recipe missing or not readable by the caller
    """
    cookbook = _require_owned_cookbook(db, user_id, cookbook_id)
    if not resolve_read(db, recipe_id, user_id).granted:
        raise NotFound("Recipe not found")

    if _find_link(db, cookbook_id, recipe_id) is not None:
        return {"success": False, "message": "Recipe already in cookbook"}

    now = now_ms()
    db.add(CookbookRecipe(cookbook_id=cookbook_id, recipe_id=recipe_id, added_at=now))
    cookbook.updated_at = now
    db.commit()
    return {"success": True, "message": None}


def remove_recipe(db: Session, user_id: str, cookbook_id: str, recipe_id: str) -> dict:
    cookbook = _require_owned_cookbook(db, user_id, cookbook_id)

    link = _find_link(db, cookbook_id, recipe_id)
    if link is not None:
        db.delete(link)
        cookbook.updated_at = now_ms()
        db.commit()
    return {"success": True, "message": None}


def sync_favorite(db: Session, user_id: str, recipe_id: str, is_favorite: bool) -> None:
    """Mirror a favorite flag into the user's Favorites cookbook. Does not commit.

    The cookbook is created the first time something is favorited.
    """
    now = now_ms()
    cookbook = _find_by_name(db, user_id, FAVORITES_NAME)

    if is_favorite:
        if cookbook is None:
            cookbook = Cookbook(
                user_id=user_id,
                name=FAVORITES_NAME,
                description="My favorite recipes",
                is_default=True,
                sort_order=_next_sort_order(db, user_id),
                created_at=now,
                updated_at=now,
            )
            db.add(cookbook)
            db.flush()
        if _find_link(db, cookbook.id, recipe_id) is None:
            db.add(CookbookRecipe(cookbook_id=cookbook.id, recipe_id=recipe_id, added_at=now))
            cookbook.updated_at = now
    elif cookbook is not None:
        link = _find_link(db, cookbook.id, recipe_id)
        if link is not None:
            db.delete(link)
            cookbook.updated_at = now


def purge_recipe(db: Session, recipe_id: str) -> int:
    """Drop a recipe from every cookbook. Does not commit."""
    return db.execute(
        delete(CookbookRecipe).where(CookbookRecipe.recipe_id == recipe_id)
    ).rowcount
