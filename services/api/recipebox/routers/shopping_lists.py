"""Shopping lists API router.

Endpoints:
- GET /api/shopping-lists - All lists with item counts
- GET /api/shopping-lists/active - Active list with items grouped by aisle
- POST /api/shopping-lists - Create a list and make it active
- POST /api/shopping-lists/items - Add or merge one item
- POST /api/shopping-lists/recipes - Add a recipe's ingredients
- POST /api/shopping-lists/items/{item_id}/toggle - Check / uncheck
- DELETE /api/shopping-lists/items/{item_id} - Remove an item
- POST /api/shopping-lists/{list_id}/clear-checked - Remove checked items
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..deps import current_user_or_fail, current_user_or_null, get_db
from ..schemas import (
    ActiveListOut,
    AddRecipeRequest,
    AddRecipeResultOut,
    RemovedOut,
    ShoppingItemCreate,
    ShoppingItemOut,
    ShoppingListCreate,
    ShoppingListOut,
    ShoppingListSummaryOut,
    SuccessOut,
)
from ..services import shopping as shopping_service

router = APIRouter()


@router.get("", response_model=list[ShoppingListSummaryOut])
def list_lists(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return shopping_service.list_lists(db, user_id)


@router.get("/active", response_model=Optional[ActiveListOut])
def get_active(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return shopping_service.get_active(db, user_id)


@router.post("", response_model=ShoppingListOut, status_code=201)
def create_list(
    payload: ShoppingListCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return shopping_service.create_list(db, user_id, payload.name)


@router.post("/items", response_model=ShoppingItemOut, status_code=201)
def add_item(
    payload: ShoppingItemCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return shopping_service.add_item(
        db,
        user_id,
        payload.name,
        amount=payload.amount,
        unit=payload.unit,
        aisle=payload.aisle,
        recipe_id=payload.recipe_id,
        list_id=payload.list_id,
    )


@router.post("/recipes", response_model=AddRecipeResultOut)
def add_recipe_ingredients(
    payload: AddRecipeRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return shopping_service.add_recipe_ingredients(db, user_id, payload.recipe_id, payload.list_id)


@router.post("/items/{item_id}/toggle", response_model=ShoppingItemOut)
def toggle_item(
    item_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return shopping_service.toggle_item(db, user_id, item_id)


@router.delete("/items/{item_id}", response_model=SuccessOut)
def remove_item(
    item_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    shopping_service.remove_item(db, user_id, item_id)
    return {"success": True}


@router.post("/{list_id}/clear-checked", response_model=RemovedOut)
def clear_checked(
    list_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return {"removed": shopping_service.clear_checked(db, user_id, list_id)}
