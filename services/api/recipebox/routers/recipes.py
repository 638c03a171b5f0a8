"""Recipes API router.

Endpoints:
- GET /api/recipes - Own recipes, optionally with shared and global ones
- GET /api/recipes/search - Title search over readable recipes
- GET /api/recipes/favorites - Own favorite recipes
- GET /api/recipes/meal-type/{meal_type} - Own recipes tagged with a meal type
- GET /api/recipes/quick - Own recipes ready within max_minutes
- GET /api/recipes/{id} - Recipe or null (missing and forbidden look the same)
- POST /api/recipes - Create recipe with ingredients, steps and tags
- PATCH /api/recipes/{id} - Update (owner only, never global)
- DELETE /api/recipes/{id} - Delete with shares, links, list links and plans
- POST /api/recipes/{id}/favorite - Toggle favorite, mirrored in the Favorites cookbook
- POST /api/recipes/{id}/cooked - Record a cook
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..deps import current_user_or_fail, current_user_or_null, get_db
from ..schemas import CookedOut, FavoriteOut, RecipeCreate, RecipeOut, RecipePatch, SuccessOut
from ..services import recipes as recipe_service
from ..services.enrichment import enrich_recipe

router = APIRouter()


@router.get("/recipes", response_model=list[RecipeOut])
def list_recipes(
    include_shared: bool = Query(False),
    include_global: bool = Query(False),
    global_only: bool = Query(False),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return recipe_service.list_recipes(
        db,
        user_id,
        include_shared=include_shared,
        include_global=include_global,
        global_only=global_only,
        limit=limit,
    )


@router.get("/recipes/search", response_model=list[RecipeOut])
def search_recipes(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return recipe_service.search(db, user_id, q)


@router.get("/recipes/favorites", response_model=list[RecipeOut])
def get_favorites(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return recipe_service.get_favorites(db, user_id)


@router.get("/recipes/meal-type/{meal_type}", response_model=list[RecipeOut])
def get_by_meal_type(
    meal_type: str,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return recipe_service.get_by_meal_type(db, user_id, meal_type)


@router.get("/recipes/quick", response_model=list[RecipeOut])
def get_quick_recipes(
    max_minutes: int = Query(30, ge=1, le=1440),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return recipe_service.get_quick_recipes(db, user_id, max_minutes)


@router.get("/recipes/{recipe_id}", response_model=Optional[RecipeOut])
def get_recipe(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return recipe_service.get_by_id(db, recipe_id, user_id)


@router.post("/recipes", response_model=RecipeOut, status_code=201)
def create_recipe(
    payload: RecipeCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    recipe = recipe_service.create_recipe(db, user_id, payload)
    return enrich_recipe(db, recipe, user_id)


@router.patch("/recipes/{recipe_id}", response_model=RecipeOut)
def update_recipe(
    recipe_id: str,
    payload: RecipePatch,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    recipe = recipe_service.update_recipe(db, user_id, recipe_id, payload)
    return enrich_recipe(db, recipe, user_id)


@router.delete("/recipes/{recipe_id}", response_model=SuccessOut)
def delete_recipe(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    recipe_service.delete_recipe(db, user_id, recipe_id)
    return {"success": True}


@router.post("/recipes/{recipe_id}/favorite", response_model=FavoriteOut)
def toggle_favorite(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return {"is_favorite": recipe_service.toggle_favorite(db, user_id, recipe_id)}


@router.post("/recipes/{recipe_id}/cooked", response_model=CookedOut)
def mark_cooked(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return recipe_service.mark_cooked(db, user_id, recipe_id)
