"""Share link management API router (owner side).

Endpoints:
- POST /api/share-links - Create a link for an owned recipe
- GET /api/share-links/mine - All of the caller's links
- GET /api/share-links/recipes/{recipe_id} - Links of one recipe (owner only)
- POST /api/share-links/{link_id}/revoke - Deactivate, keeping history
- POST /api/share-links/{link_id}/reactivate - Re-enable
- DELETE /api/share-links/{link_id} - Delete with access log
- DELETE /api/share-links/recipes/{recipe_id} - Delete every link of a recipe
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..deps import current_user_or_fail, current_user_or_null, get_db
from ..schemas import RemovedOut, ShareLinkCreate, ShareLinkOut, ShareLinkSummaryOut, SuccessOut
from ..services import share_links as link_service

router = APIRouter()


@router.post("", response_model=ShareLinkOut, status_code=201)
def create_link(
    payload: ShareLinkCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return link_service.create_link(db, user_id, payload.recipe_id, payload.expires_in_days)


@router.get("/mine", response_model=list[ShareLinkSummaryOut])
def my_links(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    if not user_id:
        return []
    return link_service.my_links(db, user_id)


@router.get("/recipes/{recipe_id}", response_model=list[ShareLinkSummaryOut])
def links_for_recipe(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    if not user_id:
        return []
    return link_service.links_for_recipe(db, user_id, recipe_id)


@router.post("/{link_id}/revoke", response_model=ShareLinkOut)
def revoke_link(
    link_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return link_service.revoke(db, user_id, link_id)


@router.post("/{link_id}/reactivate", response_model=ShareLinkOut)
def reactivate_link(
    link_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return link_service.reactivate(db, user_id, link_id)


@router.delete("/{link_id}", response_model=SuccessOut)
def delete_link(
    link_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    link_service.delete_link(db, user_id, link_id)
    return {"success": True}


@router.delete("/recipes/{recipe_id}", response_model=RemovedOut)
def delete_all_for_recipe(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return {"removed": link_service.delete_all_for_recipe(db, user_id, recipe_id)}
