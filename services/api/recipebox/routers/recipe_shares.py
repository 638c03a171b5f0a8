"""Direct recipe sharing API router.

Endpoints:
- GET /api/recipe-shares/shared-with-me - Recipes shared with the caller
- GET /api/recipe-shares/recipes/{recipe_id} - Who a recipe is shared with (owner only)
- GET /api/recipe-shares/recipes/{recipe_id}/can-share - Dry-run check
- POST /api/recipe-shares/recipes/{recipe_id} - Share with one friend
- POST /api/recipe-shares/recipes/{recipe_id}/batch - Share with several friends
- DELETE /api/recipe-shares/recipes/{recipe_id}/friends/{friend_id} - Unshare
- DELETE /api/recipe-shares/recipes/{recipe_id} - Unshare from everyone
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..deps import current_user_or_fail, current_user_or_null, get_db
from ..schemas import (
    CanShareOut,
    RecipeOut,
    RecipeShareOut,
    RemovedOut,
    ShareCreate,
    SharedWithOut,
    ShareMultipleCreate,
    ShareResultOut,
    SuccessOut,
)
from ..services import recipe_shares as share_service

router = APIRouter()


@router.get("/shared-with-me", response_model=list[RecipeOut])
def shared_with_me(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    if not user_id:
        return []
    return share_service.get_shared_with_me(db, user_id)


@router.get("/recipes/{recipe_id}", response_model=list[SharedWithOut])
def get_shared_with(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    if not user_id:
        return []
    return share_service.get_shared_with(db, user_id, recipe_id)


@router.get("/recipes/{recipe_id}/can-share", response_model=CanShareOut)
def can_share(
    recipe_id: str,
    friend_id: str = Query(...),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return share_service.can_share(db, user_id, recipe_id, friend_id)


@router.post("/recipes/{recipe_id}", response_model=RecipeShareOut, status_code=201)
def share_recipe(
    recipe_id: str,
    payload: ShareCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return share_service.share(
        db,
        user_id,
        recipe_id,
        payload.friend_id,
        message=payload.message,
        expires_in_days=payload.expires_in_days,
    )


@router.post("/recipes/{recipe_id}/batch", response_model=list[ShareResultOut])
def share_with_multiple(
    recipe_id: str,
    payload: ShareMultipleCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return share_service.share_with_multiple(
        db,
        user_id,
        recipe_id,
        payload.friend_ids,
        message=payload.message,
        expires_in_days=payload.expires_in_days,
    )


@router.delete("/recipes/{recipe_id}/friends/{friend_id}", response_model=SuccessOut)
def unshare(
    recipe_id: str,
    friend_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return {"success": share_service.unshare(db, user_id, recipe_id, friend_id)}


@router.delete("/recipes/{recipe_id}", response_model=RemovedOut)
def unshare_all(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return {"removed": share_service.unshare_all(db, user_id, recipe_id)}
