"""Cookbooks API router.

Endpoints:
- GET /api/cookbooks - Own cookbooks with recipe counts
- GET /api/cookbooks/by-name?name= - Cookbook by name, or null
- GET /api/cookbooks/{id} - Cookbook with its readable recipes, or null
- POST /api/cookbooks - Create a cookbook
- POST /api/cookbooks/{id}/recipes - Add a recipe
- DELETE /api/cookbooks/{id}/recipes/{recipe_id} - Remove a recipe
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..deps import current_user_or_fail, current_user_or_null, get_db
from ..schemas import (
    CookbookCreate,
    CookbookDetailOut,
    CookbookOut,
    CookbookRecipeRequest,
    CookbookResultOut,
    CookbookSummaryOut,
)
from ..services import cookbooks as cookbook_service

router = APIRouter()


@router.get("", response_model=list[CookbookSummaryOut])
def list_cookbooks(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return cookbook_service.list_cookbooks(db, user_id)


@router.get("/by-name", response_model=Optional[CookbookDetailOut])
def get_by_name(
    name: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return cookbook_service.get_by_name(db, user_id, name)


@router.get("/{cookbook_id}", response_model=Optional[CookbookDetailOut])
def get_cookbook(
    cookbook_id: str,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return cookbook_service.get_by_id(db, user_id, cookbook_id)


@router.post("", response_model=CookbookOut, status_code=201)
def create_cookbook(
    payload: CookbookCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return cookbook_service.create_cookbook(
        db, user_id, payload.name, description=payload.description, color=payload.color
    )


@router.post("/{cookbook_id}/recipes", response_model=CookbookResultOut)
def add_recipe(
    cookbook_id: str,
    payload: CookbookRecipeRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return cookbook_service.add_recipe(db, user_id, cookbook_id, payload.recipe_id)


@router.delete("/{cookbook_id}/recipes/{recipe_id}", response_model=CookbookResultOut)
def remove_recipe(
    cookbook_id: str,
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return cookbook_service.remove_recipe(db, user_id, cookbook_id, recipe_id)
