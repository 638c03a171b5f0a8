"""Batch fetch-then-join helpers for recipe payloads.

List endpoints attach ingredients, steps, tag names and owner names to many
recipes at once. Each related table is read with a single ``IN`` query and
joined in memory, so the number of queries does not grow with the page size.
"""

from collections import defaultdict
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Recipe, RecipeIngredient, RecipeStep, RecipeTag, Tag, User


def fetch_users(db: Session, user_ids: Iterable[Optional[str]]) -> dict[str, User]:
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    return {u.id: u for u in db.scalars(select(User).where(User.id.in_(ids))).all()}


def fetch_recipes(db: Session, recipe_ids: Iterable[Optional[str]]) -> dict[str, Recipe]:
    ids = {rid for rid in recipe_ids if rid}
    if not ids:
        return {}
    return {r.id: r for r in db.scalars(select(Recipe).where(Recipe.id.in_(ids))).all()}


def _ingredients_by_recipe(db: Session, recipe_ids: list[str]) -> dict[str, list[RecipeIngredient]]:
    grouped: dict[str, list[RecipeIngredient]] = defaultdict(list)
    rows = db.scalars(
        select(RecipeIngredient)
        .where(RecipeIngredient.recipe_id.in_(recipe_ids))
        .order_by(RecipeIngredient.recipe_id, RecipeIngredient.sort_order)
    ).all()
    for row in rows:
        grouped[row.recipe_id].append(row)
    return grouped


def _steps_by_recipe(db: Session, recipe_ids: list[str]) -> dict[str, list[RecipeStep]]:
    grouped: dict[str, list[RecipeStep]] = defaultdict(list)
    rows = db.scalars(
        select(RecipeStep)
        .where(RecipeStep.recipe_id.in_(recipe_ids))
        .order_by(RecipeStep.recipe_id, RecipeStep.step_number)
    ).all()
    for row in rows:
        grouped[row.recipe_id].append(row)
    return grouped


def _tags_by_recipe(db: Session, recipe_ids: list[str]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = defaultdict(list)
    rows = db.execute(
        select(RecipeTag.recipe_id, Tag.name)
        .join(Tag, Tag.id == RecipeTag.tag_id)
        .where(RecipeTag.recipe_id.in_(recipe_ids))
        .order_by(RecipeTag.recipe_id, Tag.name)
    ).all()
    for recipe_id, name in rows:
        if name:
            grouped[recipe_id].append(name)
    return grouped


def ingredient_payload(ing: RecipeIngredient) -> dict:
    return {
        "id": ing.id,
        "name": ing.name,
        "amount": ing.amount,
        "unit": ing.unit,
        "preparation": ing.preparation,
        "is_optional": ing.is_optional,
        "sort_order": ing.sort_order,
    }


def step_payload(step: RecipeStep) -> dict:
    return {
        "id": step.id,
        "step_number": step.step_number,
        "instruction": step.instruction,
        "timer_minutes": step.timer_minutes,
        "timer_label": step.timer_label,
        "tips": step.tips,
    }


def recipe_payload(
    recipe: Recipe,
    *,
    viewer_id: Optional[str],
    ingredients: list[RecipeIngredient],
    steps: list[RecipeStep],
    tags: list[str],
    owner: Optional[User],
) -> dict:
    return {
        "id": recipe.id,
        "user_id": recipe.user_id,
        "title": recipe.title,
        "description": recipe.description,
        "servings": recipe.servings,
        "prep_time": recipe.prep_time,
        "cook_time": recipe.cook_time,
        "total_time": recipe.total_time,
        "difficulty": recipe.difficulty,
        "cuisine": recipe.cuisine,
        "source_url": recipe.source_url,
        "notes": recipe.notes,
        "is_public": recipe.is_public,
        "is_global": recipe.is_global,
        "is_favorite": recipe.is_favorite,
        "cook_count": recipe.cook_count,
        "last_cooked_at": recipe.last_cooked_at,
        "created_at": recipe.created_at,
        "updated_at": recipe.updated_at,
        "ingredients": [ingredient_payload(i) for i in ingredients],
        "steps": [step_payload(s) for s in steps],
        "tags": tags,
        "owner_name": owner.display_name if owner else "Unknown",
        "is_owner": bool(viewer_id) and recipe.user_id == viewer_id,
    }


def enrich_recipes(
    db: Session, recipes: list[Recipe], viewer_id: Optional[str] = None
) -> list[dict]:
    """Attach ingredients, steps, tags and owner names to each recipe."""
    if not recipes:
        return []

    ids = [r.id for r in recipes]
    ingredients = _ingredients_by_recipe(db, ids)
    steps = _steps_by_recipe(db, ids)
    tags = _tags_by_recipe(db, ids)
    owners = fetch_users(db, (r.user_id for r in recipes))

    return [
        recipe_payload(
            r,
            viewer_id=viewer_id,
            ingredients=ingredients.get(r.id, []),
            steps=steps.get(r.id, []),
            tags=tags.get(r.id, []),
            owner=owners.get(r.user_id) if r.user_id else None,
        )
        for r in recipes
    ]


def enrich_recipe(db: Session, recipe: Recipe, viewer_id: Optional[str] = None) -> dict:
    return enrich_recipes(db, [recipe], viewer_id)[0]
