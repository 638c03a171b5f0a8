"""Meal planning: one planned meal per (user, date, meal type) slot.

A slot holds either a recipe the planner can read or a free-text meal name.
The recipe payload is attached only while the planner can still read it.
"""

import logging
from typing import Optional

from sqlalchemy import case, delete, select
from sqlalchemy.orm import Session

from ..core.clock import now_ms
from ..errors import InvalidOperation, NotFound, NotOwner
from ..models import MealPlan
from .access_control import can_read, resolve_read
from .enrichment import enrich_recipes, fetch_recipes

logger = logging.getLogger("recipebox.meal_plans")

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")

# Day order, not alphabetical
_meal_order = case(
    {name: idx for idx, name in enumerate(MEAL_TYPES)},
    value=MealPlan.meal_type,
    else_=len(MEAL_TYPES),
)


def _plan_payloads(db: Session, plans: list[MealPlan], viewer_id: str) -> list[dict]:
    recipes = fetch_recipes(db, (p.recipe_id for p in plans))
    readable = [r for r in recipes.values() if can_read(db, r, viewer_id)]
    enriched = {p["id"]: p for p in enrich_recipes(db, readable, viewer_id)}

    return [
        {
            "id": p.id,
            "date": p.date,
            "meal_type": p.meal_type,
            "recipe_id": p.recipe_id,
            "custom_meal_name": p.custom_meal_name,
            "servings": p.servings,
            "notes": p.notes,
            "created_at": p.created_at,
            "recipe": enriched.get(p.recipe_id) if p.recipe_id else None,
        }
        for p in plans
    ]


# --- Queries ---

def get_by_date(db: Session, user_id: Optional[str], date: str) -> list[dict]:
    if not user_id:
        return []
    plans = db.scalars(
        select(MealPlan)
        .where(MealPlan.user_id == user_id, MealPlan.date == date)
        .order_by(_meal_order)
    ).all()
    return _plan_payloads(db, list(plans), user_id)


def get_by_date_range(
    db: Session, user_id: Optional[str], start_date: str, end_date: str
) -> list[dict]:
    """Plans with start_date <= date <= end_date, by date then meal of the day.

    ISO dates compare correctly as strings.
    """
    if not user_id or start_date > end_date:
        return []
    plans = db.scalars(
        select(MealPlan)
        .where(
            MealPlan.user_id == user_id,
            MealPlan.date >= start_date,
            MealPlan.date <= end_date,
        )
        .order_by(MealPlan.date, _meal_order)
    ).all()
    return _plan_payloads(db, list(plans), user_id)


# --- Mutations ---

def add_meal(
    db: Session,
    user_id: str,
    date: str,
    meal_type: str,
    recipe_id: Optional[str] = None,
    custom_meal_name: Optional[str] = None,
    servings: Optional[int] = None,
    notes: Optional[str] = None,
) -> dict:
    """Plan a meal, replacing whatever already occupies the slot.

    Raises:
        InvalidOperation: unknown meal type, or neither a recipe nor a name given
        NotFound: recipe missing or not readable by the planner
    """
    if meal_type not in MEAL_TYPES:
        raise InvalidOperation(f"Unknown meal type: {meal_type}")

    custom_meal_name = (custom_meal_name or "").strip() or None
    if recipe_id is None and custom_meal_name is None:
        raise InvalidOperation("A meal needs a recipe or a name")
    if recipe_id is not None and not resolve_read(db, recipe_id, user_id).granted:
        raise NotFound("Recipe not found")

    plan = db.scalar(
        select(MealPlan).where(
            MealPlan.user_id == user_id,
            MealPlan.date == date,
            MealPlan.meal_type == meal_type,
        )
    )
    if plan is None:
        plan = MealPlan(user_id=user_id, date=date, meal_type=meal_type, created_at=now_ms())
        db.add(plan)
    else:
        logger.info(f"Replacing {meal_type} on {date} for {user_id}")

    plan.recipe_id = recipe_id
    plan.custom_meal_name = custom_meal_name
    plan.servings = servings
    plan.notes = notes
    db.commit()
    db.refresh(plan)

    return _plan_payloads(db, [plan], user_id)[0]


def remove_meal(db: Session, user_id: str, plan_id: str) -> None:
    plan = db.get(MealPlan, plan_id)
    if plan is None:
        raise NotFound("Meal plan not found")
    if plan.user_id != user_id:
        logger.warning(f"User {user_id} denied access to meal plan {plan_id}")
        raise NotOwner("Not the meal plan owner")

    db.delete(plan)
    db.commit()


def purge_recipe(db: Session, recipe_id: str) -> int:
    """Drop every planned meal that points at a recipe. Does not commit."""
    return db.execute(delete(MealPlan).where(MealPlan.recipe_id == recipe_id)).rowcount
