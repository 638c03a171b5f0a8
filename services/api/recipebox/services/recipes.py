"""Recipe reads and owner mutations.

Reads go through the visibility rules in ``access_control``; a recipe the
caller may not read is reported exactly like a missing one. Writes require
``can_modify``, which global recipes never satisfy.
"""

import logging
from typing import Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from ..core.clock import now_ms
from ..core.text import clean_md, normalize_name
from ..models import (
    Recipe,
    RecipeIngredient,
    RecipeShare,
    RecipeStep,
    RecipeTag,
    ShoppingItem,
    ShoppingListRecipe,
    Tag,
)
from ..schemas import IngredientIn, RecipeCreate, RecipePatch, StepIn
from . import cookbooks, meal_plans
from .access_control import require_owned_recipe, resolve_read
from .enrichment import enrich_recipe, enrich_recipes
from .share_links import purge_recipe_links

logger = logging.getLogger("recipebox.recipes")

SCALAR_FIELDS = (
    "description", "servings", "prep_time", "cook_time", "difficulty",
    "cuisine", "source_url", "notes", "is_public",
)


def _active_shared_ids(user_id: str, now: int):
    """Subquery of recipe ids shared with user_id through non-expired shares."""
    return select(RecipeShare.recipe_id).where(
        RecipeShare.shared_with_id == user_id,
        or_(RecipeShare.expires_at.is_(None), RecipeShare.expires_at > now),
    )


def _build_ingredients(items: list[IngredientIn]) -> list[RecipeIngredient]:
    return [
        RecipeIngredient(
            name=normalize_name(ing.name),
            amount=ing.amount,
            unit=ing.unit,
            preparation=ing.preparation,
            is_optional=ing.is_optional,
            sort_order=idx,
        )
        for idx, ing in enumerate(items)
    ]


def _build_steps(items: list[StepIn]) -> list[RecipeStep]:
    return [
        RecipeStep(
            step_number=idx + 1,
            instruction=clean_md(step.instruction),
            timer_minutes=step.timer_minutes,
            timer_label=step.timer_label,
            tips=step.tips,
        )
        for idx, step in enumerate(items)
    ]


def _resolve_tags(db: Session, user_id: str, names: list[str]) -> list[Tag]:
    """Find or create the caller's tags by name, case-insensitively de-duplicated."""
    wanted: dict[str, str] = {}
    for raw in names:
        name = normalize_name(raw)
        if name and name.lower() not in wanted:
            wanted[name.lower()] = name
    if not wanted:
        return []

    existing = {
        t.name.lower(): t
        for t in db.scalars(select(Tag).where(Tag.user_id == user_id)).all()
    }
    tags = []
    for key, name in wanted.items():
        tag = existing.get(key)
        if tag is None:
            tag = Tag(user_id=user_id, name=name, type="custom")
            db.add(tag)
        tags.append(tag)
    return tags


# --- Queries ---

def get_by_id(
    db: Session, recipe_id: str, viewer_id: Optional[str], now: Optional[int] = None
) -> Optional[dict]:
    """Enriched recipe, or None when it is missing or not readable."""
    access = resolve_read(db, recipe_id, viewer_id, now)
    if not access.granted:
        return None
    return enrich_recipe(db, access.recipe, viewer_id)


def list_recipes(
    db: Session,
    viewer_id: Optional[str],
    include_shared: bool = False,
    include_global: bool = False,
    global_only: bool = False,
    limit: Optional[int] = None,
) -> list[dict]:
    """Own recipes first, then active shares, then global ones, newest first."""
    now = now_ms()

    if global_only or not viewer_id:
        if not (global_only or include_global):
            return []
        stmt = select(Recipe).where(Recipe.is_global.is_(True)).order_by(Recipe.created_at.desc())
        if limit:
            stmt = stmt.limit(limit)
        return enrich_recipes(db, list(db.scalars(stmt).all()), viewer_id)

    recipes = list(db.scalars(
        select(Recipe)
        .where(Recipe.user_id == viewer_id, Recipe.is_global.is_(False))
        .order_by(Recipe.created_at.desc())
    ).all())
    seen = {r.id for r in recipes}
    shared_ids: set[str] = set()

    if include_shared:
        shared = db.scalars(
            select(Recipe)
            .where(Recipe.id.in_(_active_shared_ids(viewer_id, now)))
            .order_by(Recipe.created_at.desc())
        ).all()
        for r in shared:
            if r.id not in seen:
                recipes.append(r)
                seen.add(r.id)
                shared_ids.add(r.id)

    if include_global:
        for r in db.scalars(
            select(Recipe).where(Recipe.is_global.is_(True)).order_by(Recipe.created_at.desc())
        ).all():
            if r.id not in seen:
                recipes.append(r)
                seen.add(r.id)

    if limit:
        recipes = recipes[:limit]

    payloads = enrich_recipes(db, recipes, viewer_id)
    for payload in payloads:
        payload["is_shared"] = payload["id"] in shared_ids
    return payloads


def search(db: Session, viewer_id: Optional[str], query: str, limit: int = 20) -> list[dict]:
    """Title substring search over the recipes the viewer can read."""
    query = (query or "").strip()
    if not query:
        return []

    readable = [Recipe.is_global.is_(True), Recipe.is_public.is_(True)]
    if viewer_id:
        readable.append(Recipe.user_id == viewer_id)
        readable.append(Recipe.id.in_(_active_shared_ids(viewer_id, now_ms())))

    recipes = db.scalars(
        select(Recipe)
        .where(
            func.lower(Recipe.title).contains(query.lower(), autoescape=True),
            or_(*readable),
        )
        .order_by(Recipe.title)
        .limit(limit)
    ).all()
    return enrich_recipes(db, list(recipes), viewer_id)


def _own_recipes(db: Session, user_id: Optional[str], *criteria) -> list[dict]:
    if not user_id:
        return []
    recipes = db.scalars(
        select(Recipe)
        .where(Recipe.user_id == user_id, Recipe.is_global.is_(False), *criteria)
        .order_by(Recipe.created_at.desc())
    ).all()
    return enrich_recipes(db, list(recipes), user_id)


def get_favorites(db: Session, user_id: Optional[str]) -> list[dict]:
    return _own_recipes(db, user_id, Recipe.is_favorite.is_(True))


def get_by_meal_type(db: Session, user_id: Optional[str], meal_type: str) -> list[dict]:
    """Own recipes carrying a tag named after the meal type, any case."""
    tagged = (
        select(RecipeTag.recipe_id)
        .join(Tag, Tag.id == RecipeTag.tag_id)
        .where(func.lower(Tag.name) == meal_type.strip().lower())
    )
    return _own_recipes(db, user_id, Recipe.id.in_(tagged))


def get_quick_recipes(db: Session, user_id: Optional[str], max_minutes: int = 30) -> list[dict]:
    """Own recipes whose prep plus cook time fits in max_minutes; unset times count as 0."""
    total = func.coalesce(Recipe.prep_time, 0) + func.coalesce(Recipe.cook_time, 0)
    return _own_recipes(db, user_id, total <= max_minutes)


# --- Mutations ---

def create_recipe(db: Session, user_id: str, payload: RecipeCreate) -> Recipe:
    now = now_ms()
    recipe = Recipe(
        user_id=user_id,
        title=clean_md(payload.title),
        description=payload.description,
        servings=payload.servings,
        prep_time=payload.prep_time,
        cook_time=payload.cook_time,
        difficulty=payload.difficulty,
        cuisine=payload.cuisine,
        source_url=payload.source_url,
        notes=payload.notes,
        is_public=payload.is_public,
        is_global=False,
        is_favorite=False,
        cook_count=0,
        created_at=now,
        updated_at=now,
    )
    recipe.ingredients = _build_ingredients(payload.ingredients)
    recipe.steps = _build_steps(payload.steps)
    recipe.recipe_tags = [RecipeTag(tag=t) for t in _resolve_tags(db, user_id, payload.tags)]

    db.add(recipe)
    db.commit()
    db.refresh(recipe)

    logger.info(f"Recipe {recipe.id} created by {user_id}")
    return recipe


def update_recipe(db: Session, user_id: str, recipe_id: str, payload: RecipePatch) -> Recipe:
    recipe = require_owned_recipe(db, recipe_id, user_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("title") is not None:
        recipe.title = clean_md(data["title"])
    for field in SCALAR_FIELDS:
        if field in data:
            if field in ("servings", "is_public") and data[field] is None:
                continue
            setattr(recipe, field, data[field])

    # Child rows carry per-recipe unique ordering, so old rows are flushed out first
    if payload.ingredients is not None:
        recipe.ingredients.clear()
        db.flush()
        recipe.ingredients = _build_ingredients(payload.ingredients)
    if payload.steps is not None:
        recipe.steps.clear()
        db.flush()
        recipe.steps = _build_steps(payload.steps)
    if payload.tags is not None:
        recipe.recipe_tags.clear()
        db.flush()
        recipe.recipe_tags = [RecipeTag(tag=t) for t in _resolve_tags(db, user_id, payload.tags)]

    recipe.updated_at = now_ms()
    db.commit()
    db.refresh(recipe)

    logger.info(f"Recipe {recipe_id} updated by {user_id}")
    return recipe


def delete_recipe(db: Session, user_id: str, recipe_id: str) -> None:
    """Delete a recipe with its shares, links, access logs, list links,
    cookbook entries and planned meals.

    Shopping items that came from the recipe stay on their lists with the
    recipe reference cleared.
    """
    recipe = require_owned_recipe(db, recipe_id, user_id)

    shares = db.execute(delete(RecipeShare).where(RecipeShare.recipe_id == recipe_id)).rowcount
    links = purge_recipe_links(db, recipe_id)
    cookbooks.purge_recipe(db, recipe_id)
    meal_plans.purge_recipe(db, recipe_id)
    db.execute(delete(ShoppingListRecipe).where(ShoppingListRecipe.recipe_id == recipe_id))
    db.execute(
        update(ShoppingItem)
        .where(ShoppingItem.recipe_id == recipe_id)
        .values(recipe_id=None)
    )
    db.delete(recipe)
    db.commit()

    logger.info(f"Recipe {recipe_id} deleted by {user_id} ({shares} shares, {links} links)")


def toggle_favorite(db: Session, user_id: str, recipe_id: str) -> bool:
    recipe = require_owned_recipe(db, recipe_id, user_id)
    recipe.is_favorite = not recipe.is_favorite
    recipe.updated_at = now_ms()
    cookbooks.sync_favorite(db, user_id, recipe_id, recipe.is_favorite)
    db.commit()
    return recipe.is_favorite


def mark_cooked(db: Session, user_id: str, recipe_id: str) -> Recipe:
    recipe = require_owned_recipe(db, recipe_id, user_id)
    now = now_ms()
    recipe.cook_count = (recipe.cook_count or 0) + 1
    recipe.last_cooked_at = now
    recipe.updated_at = now
    db.commit()
    db.refresh(recipe)

    logger.info(f"Recipe {recipe_id} cooked ({recipe.cook_count}x)")
    return recipe
