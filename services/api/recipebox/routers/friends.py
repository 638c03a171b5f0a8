"""Friends API router.

Endpoints:
- GET /api/friends - Accepted friends
- GET /api/friends/pending - Incoming and outgoing requests
- GET /api/friends/search - Users with no relationship to the caller
- GET /api/friends/stats - Friend and pending counts
- POST /api/friends/requests - Send a request
- POST /api/friends/requests/{id}/accept - Accept (recipient only)
- POST /api/friends/requests/{id}/reject - Reject
- DELETE /api/friends/requests/{id} - Cancel (requester only)
- DELETE /api/friends/{friend_id} - Remove friend and shares between the pair
- POST /api/friends/{user_id}/block - Block
- DELETE /api/friends/{user_id}/block - Unblock (blocker only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..deps import current_user_or_fail, current_user_or_null, get_db
from ..schemas import (
    FriendOut,
    FriendRequestCreate,
    FriendshipOut,
    FriendStatsOut,
    PendingOut,
    RemoveFriendOut,
    SuccessOut,
    UserSearchOut,
)
from ..services import friendships as friend_service

router = APIRouter()


@router.get("", response_model=list[FriendOut])
def list_friends(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    if not user_id:
        return []
    return friend_service.list_friends(db, user_id)


@router.get("/pending", response_model=PendingOut)
def get_pending(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    if not user_id:
        return {"incoming": [], "outgoing": []}
    return friend_service.get_pending(db, user_id)


@router.get("/search", response_model=list[UserSearchOut])
def search_users(
    q: str = Query(""),
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    if not user_id:
        return []
    return friend_service.search_users(db, user_id, q)


@router.get("/stats", response_model=FriendStatsOut)
def get_stats(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    if not user_id:
        return {"friends": 0, "pending_incoming": 0, "pending_outgoing": 0}
    return friend_service.get_stats(db, user_id)


@router.post("/requests", response_model=FriendshipOut, status_code=201)
def send_request(
    payload: FriendRequestCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return friend_service.send_request(db, user_id, payload.friend_id)


@router.post("/requests/{friendship_id}/accept", response_model=FriendshipOut)
def accept_request(
    friendship_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    return friend_service.accept_request(db, user_id, friendship_id)


@router.post("/requests/{friendship_id}/reject", response_model=SuccessOut)
def reject_request(
    friendship_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    friend_service.reject_request(db, user_id, friendship_id)
    return {"success": True}


@router.delete("/requests/{friendship_id}", response_model=SuccessOut)
def cancel_request(
    friendship_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    friend_service.cancel_request(db, user_id, friendship_id)
    return {"success": True}


@router.delete("/{friend_id}", response_model=RemoveFriendOut)
def remove_friend(
    friend_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    removed = friend_service.remove_friend(db, user_id, friend_id)
    return {"success": True, "shares_removed": removed}


@router.post("/{other_id}/block", response_model=SuccessOut)
def block_user(
    other_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    friend_service.block_user(db, user_id, other_id)
    return {"success": True}


@router.delete("/{other_id}/block", response_model=SuccessOut)
def unblock_user(
    other_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_or_fail),
):
    friend_service.unblock_user(db, user_id, other_id)
    return {"success": True}
