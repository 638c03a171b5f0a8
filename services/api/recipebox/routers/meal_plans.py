"""Meal plans API router.

Endpoints:
- GET /api/meal-plans?date= - Meals planned for one day
- GET /api/meal-plans/range?start_date=&end_date= - Meals in an inclusive date range
- POST /api/meal-plans - Plan a meal, replacing the slot's current one
- DELETE /api/meal-plans/{id} - Remove a planned meal
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..deps import current_user_or_fail, current_user_or_null, get_db
from ..schemas import MealPlanCreate, MealPlanOut, SuccessOut
from ..services import meal_plans as meal_plan_service

router = APIRouter()

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


@router.get("", response_model=list[MealPlanOut])
def get_by_date(
    date: str = Query(..., pattern=DATE_PATTERN),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return meal_plan_service.get_by_date(db, user_id, date)


@router.get("/range", response_model=list[MealPlanOut])
def get_by_date_range(
    start_date: str = Query(..., pattern=DATE_PATTERN),
    end_date: str = Query(..., pattern=DATE_PATTERN),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return meal_plan_service.get_by_date_range(db, user_id, start_date, end_date)


@router.post("", response_model=MealPlanOut, status_code=201)
def add_meal(
    payload: MealPlanCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return meal_plan_service.add_meal(
        db,
        user_id,
        payload.date,
        payload.meal_type,
        recipe_id=payload.recipe_id,
        custom_meal_name=payload.custom_meal_name,
        servings=payload.servings,
        notes=payload.notes,
    )


@router.delete("/{plan_id}", response_model=SuccessOut)
def remove_meal(
    plan_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    meal_plan_service.remove_meal(db, user_id, plan_id)
    return {"success": True}
