"""Shopping lists and the merge-or-insert rule for items.

Every user has at most one active list; new items go there unless a list id
is given. Adding an item whose name (case-insensitive) and recipe match an
existing row sums the amount onto that row instead of inserting a duplicate.
The existing unit is kept as-is, no unit conversion happens.
"""

import logging
from collections import defaultdict
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from ..core.clock import now_ms
from ..errors import NotFound, NotOwner
from ..models import Recipe, RecipeIngredient, ShoppingItem, ShoppingList, ShoppingListRecipe
from ..settings import settings
from .access_control import can_read, resolve_read
from .aisles import classify
from .enrichment import fetch_recipes

logger = logging.getLogger("recipebox.shopping")

NO_AISLE = "Other"


# --- Lookups ---

def get_active_list(db: Session, user_id: str) -> Optional[ShoppingList]:
    return db.scalar(
        select(ShoppingList)
        .where(ShoppingList.user_id == user_id, ShoppingList.is_active.is_(True))
        .order_by(ShoppingList.created_at.desc())
        .limit(1)
    )


def _get_or_create_active(db: Session, user_id: str, now: int) -> ShoppingList:
    shopping_list = get_active_list(db, user_id)
    if shopping_list is not None:
        return shopping_list

    shopping_list = ShoppingList(
        user_id=user_id,
        name=settings.default_list_name,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(shopping_list)
    db.flush()
    logger.info(f"Created default shopping list {shopping_list.id} for {user_id}")
    return shopping_list


def _require_owned_list(db: Session, user_id: str, list_id: str) -> ShoppingList:
    shopping_list = db.get(ShoppingList, list_id)
    if shopping_list is None:
        raise NotFound("Shopping list not found")
    if shopping_list.user_id != user_id:
        logger.warning(f"User {user_id} denied access to shopping list {list_id}")
        raise NotOwner("Not the list owner")
    return shopping_list


def _require_owned_item(db: Session, user_id: str, item_id: str) -> ShoppingItem:
    item = db.get(ShoppingItem, item_id)
    if item is None:
        raise NotFound("Item not found")
    if item.list.user_id != user_id:
        logger.warning(f"User {user_id} denied access to shopping item {item_id}")
        raise NotOwner("Not the list owner")
    return item


def _list_items(db: Session, list_id: str) -> list[ShoppingItem]:
    return list(db.scalars(
        select(ShoppingItem)
        .where(ShoppingItem.list_id == list_id)
        .order_by(ShoppingItem.sort_order)
    ).all())


def _find_match(
    items: list[ShoppingItem], name: str, recipe_id: Optional[str]
) -> Optional[ShoppingItem]:
    lowered = name.lower()
    for item in items:
        if item.name.lower() != lowered:
            continue
        if recipe_id and item.recipe_id != recipe_id:
            continue
        return item
    return None


def _next_sort_order(items: list[ShoppingItem]) -> int:
    return max((i.sort_order or 0 for i in items), default=0) + 1


def _add_amount(current: Optional[float], extra: Optional[float]) -> Optional[float]:
    if current is None and extra is None:
        return None
    return (current or 0) + (extra or 0)


# --- Queries ---

def get_active(db: Session, user_id: Optional[str]) -> Optional[dict]:
    """Active list with its items in order, recipe titles and aisle groups."""
    if not user_id:
        return None
    shopping_list = get_active_list(db, user_id)
    if shopping_list is None:
        return None

    items = _list_items(db, shopping_list.id)
    recipes = fetch_recipes(db, (i.recipe_id for i in items))
    # Titles only for recipes the caller can still read
    readable = {rid for rid, r in recipes.items() if can_read(db, r, user_id)}

    payload_items = []
    grouped: dict[str, list[dict]] = defaultdict(list)
    for item in items:
        recipe = recipes.get(item.recipe_id) if item.recipe_id in readable else None
        entry = {
            "id": item.id,
            "list_id": item.list_id,
            "name": item.name,
            "amount": item.amount,
            "unit": item.unit,
            "aisle": item.aisle,
            "recipe_id": item.recipe_id,
            "recipe_title": recipe.title if recipe else None,
            "is_manual": item.is_manual,
            "is_checked": item.is_checked,
            "checked_at": item.checked_at,
            "sort_order": item.sort_order,
        }
        payload_items.append(entry)
        grouped[item.aisle or NO_AISLE].append(entry)

    return {
        "id": shopping_list.id,
        "name": shopping_list.name,
        "is_active": shopping_list.is_active,
        "created_at": shopping_list.created_at,
        "updated_at": shopping_list.updated_at,
        "items": payload_items,
        "grouped_items": dict(grouped),
    }


def list_lists(db: Session, user_id: Optional[str]) -> list[dict]:
    if not user_id:
        return []

    lists = db.scalars(
        select(ShoppingList)
        .where(ShoppingList.user_id == user_id)
        .order_by(ShoppingList.created_at.desc())
    ).all()
    if not lists:
        return []

    counts = {
        list_id: (total, checked or 0)
        for list_id, total, checked in db.execute(
            select(
                ShoppingItem.list_id,
                func.count(ShoppingItem.id),
                func.sum(case((ShoppingItem.is_checked.is_(True), 1), else_=0)),
            )
            .where(ShoppingItem.list_id.in_([sl.id for sl in lists]))
            .group_by(ShoppingItem.list_id)
        ).all()
    }

    return [
        {
            "id": sl.id,
            "name": sl.name,
            "is_active": sl.is_active,
            "created_at": sl.created_at,
            "updated_at": sl.updated_at,
            "total_items": counts.get(sl.id, (0, 0))[0],
            "checked_items": int(counts.get(sl.id, (0, 0))[1]),
        }
        for sl in lists
    ]


# --- Mutations ---

def create_list(db: Session, user_id: str, name: str) -> ShoppingList:
    """Create a list and make it the active one."""
    now = now_ms()
    active = db.scalars(
        select(ShoppingList).where(
            ShoppingList.user_id == user_id,
            ShoppingList.is_active.is_(True),
        )
    ).all()
    for current in active:
        current.is_active = False
        current.updated_at = now

    shopping_list = ShoppingList(
        user_id=user_id,
        name=name,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(shopping_list)
    db.commit()
    db.refresh(shopping_list)

    logger.info(f"Shopping list {shopping_list.id} created for {user_id}")
    return shopping_list


def add_item(
    db: Session,
    user_id: str,
    name: str,
    amount: Optional[float] = None,
    unit: Optional[str] = None,
    aisle: Optional[str] = None,
    recipe_id: Optional[str] = None,
    list_id: Optional[str] = None,
) -> ShoppingItem:
    """Merge into a matching item when an amount is given, else append.

    Raises:
        NotFound: recipe_id names a recipe the caller cannot read
    """
    if recipe_id and not resolve_read(db, recipe_id, user_id).granted:
        raise NotFound("Recipe not found")

    now = now_ms()
    if list_id:
        shopping_list = _require_owned_list(db, user_id, list_id)
    else:
        shopping_list = _get_or_create_active(db, user_id, now)

    items = _list_items(db, shopping_list.id)
    existing = _find_match(items, name, recipe_id)

    if existing is not None and amount is not None:
        existing.amount = _add_amount(existing.amount, amount)
        shopping_list.updated_at = now
        db.commit()
        db.refresh(existing)
        return existing

    item = ShoppingItem(
        list_id=shopping_list.id,
        name=name,
        amount=amount,
        unit=unit,
        aisle=aisle or classify(name),
        recipe_id=recipe_id,
        is_manual=recipe_id is None,
        is_checked=False,
        sort_order=_next_sort_order(items),
    )
    db.add(item)
    shopping_list.updated_at = now
    db.commit()
    db.refresh(item)
    return item


def add_recipe_ingredients(
    db: Session, user_id: str, recipe_id: str, list_id: Optional[str] = None
) -> dict:
    """Add a readable recipe's required ingredients to a list.

    Adding the same recipe again sums amounts onto the rows it contributed
    before and inserts nothing new.
    """
    access = resolve_read(db, recipe_id, user_id)
    if not access.granted:
        raise NotFound("Recipe not found")
    recipe: Recipe = access.recipe

    now = now_ms()
    if list_id:
        shopping_list = _require_owned_list(db, user_id, list_id)
    else:
        shopping_list = _get_or_create_active(db, user_id, now)

    ingredients = db.scalars(
        select(RecipeIngredient)
        .where(RecipeIngredient.recipe_id == recipe_id)
        .order_by(RecipeIngredient.sort_order)
    ).all()
    items = _list_items(db, shopping_list.id)
    next_sort = _next_sort_order(items)

    added = merged = skipped = 0
    for ing in ingredients:
        if ing.is_optional:
            skipped += 1
            continue

        existing = _find_match(items, ing.name, recipe_id)
        if existing is not None:
            existing.amount = _add_amount(existing.amount, ing.amount)
            merged += 1
            continue

        item = ShoppingItem(
            list_id=shopping_list.id,
            name=ing.name,
            amount=ing.amount,
            unit=ing.unit,
            aisle=classify(ing.name),
            recipe_id=recipe_id,
            is_manual=False,
            is_checked=False,
            sort_order=next_sort,
        )
        db.add(item)
        items.append(item)
        next_sort += 1
        added += 1

    link = db.scalar(
        select(ShoppingListRecipe).where(
            ShoppingListRecipe.list_id == shopping_list.id,
            ShoppingListRecipe.recipe_id == recipe_id,
        )
    )
    if link is None:
        db.add(ShoppingListRecipe(
            list_id=shopping_list.id,
            recipe_id=recipe_id,
            servings=recipe.servings,
            added_at=now,
        ))

    shopping_list.updated_at = now
    db.commit()

    logger.info(
        f"Recipe {recipe_id} -> list {shopping_list.id}: "
        f"{added} added, {merged} merged, {skipped} optional skipped"
    )
    return {
        "list_id": shopping_list.id,
        "items_added": added,
        "items_merged": merged,
        "skipped_optional": skipped,
    }


def toggle_item(db: Session, user_id: str, item_id: str) -> ShoppingItem:
    item = _require_owned_item(db, user_id, item_id)
    now = now_ms()

    item.is_checked = not item.is_checked
    item.checked_at = now if item.is_checked else None
    item.list.updated_at = now
    db.commit()
    db.refresh(item)
    return item


def remove_item(db: Session, user_id: str, item_id: str) -> None:
    item = _require_owned_item(db, user_id, item_id)
    shopping_list = item.list

    db.delete(item)
    shopping_list.updated_at = now_ms()
    db.commit()


def clear_checked(db: Session, user_id: str, list_id: str) -> int:
    """Delete every checked item of a list. Returns how many were removed."""
    shopping_list = _require_owned_list(db, user_id, list_id)

    checked = db.scalars(
        select(ShoppingItem).where(
            ShoppingItem.list_id == list_id,
            ShoppingItem.is_checked.is_(True),
        )
    ).all()
    for item in checked:
        db.delete(item)
    shopping_list.updated_at = now_ms()
    db.commit()

    logger.info(f"Cleared {len(checked)} checked items from list {list_id}")
    return len(checked)
