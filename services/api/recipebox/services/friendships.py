"""Friendship lifecycle.

A relationship between A and B is one ``Friendship`` row keyed by the sorted
pair, so both directions always change together. States:

    none -> pending(requested_by) -> accepted
    pending -> none          (reject / cancel)
    any -> none              (remove)
    any -> blocked(blocked_by)

Direct recipe sharing is gated on ``accepted``; removing or blocking a friend
deletes every share between the two users in the same commit.
"""

import logging
from typing import Optional

from sqlalchemy import select, or_, and_, func
from sqlalchemy.orm import Session

from ..errors import (
    AlreadyFriends,
    Blocked,
    CannotAcceptOwnRequest,
    InvalidOperation,
    NotAuthorized,
    NotFound,
    NotPending,
    RequestPending,
)
from ..models import Friendship, RecipeShare, User
from ..settings import settings
from .enrichment import fetch_users

logger = logging.getLogger("recipebox.friends")


def pair_key(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a <= b else (b, a)


def get_friendship_between(db: Session, a: str, b: str) -> Optional[Friendship]:
    low, high = pair_key(a, b)
    return db.scalar(
        select(Friendship).where(
            Friendship.user_low == low,
            Friendship.user_high == high,
        )
    )


def directed_status(db: Session, user_id: str, other_id: str) -> Optional[str]:
    """Status of the edge user_id -> other_id as that user sees it."""
    friendship = get_friendship_between(db, user_id, other_id)
    return friendship.status_for(user_id) if friendship else None


def are_friends(db: Session, a: str, b: str) -> bool:
    return directed_status(db, a, b) == "accepted"


def _friendships_of(db: Session, user_id: str, status: Optional[str] = None) -> list[Friendship]:
    stmt = select(Friendship).where(
        or_(Friendship.user_low == user_id, Friendship.user_high == user_id)
    )
    if status:
        stmt = stmt.where(Friendship.status == status)
    return list(db.scalars(stmt).all())


def _delete_shares_between(db: Session, a: str, b: str) -> int:
    shares = db.scalars(
        select(RecipeShare).where(
            or_(
                and_(RecipeShare.owner_id == a, RecipeShare.shared_with_id == b),
                and_(RecipeShare.owner_id == b, RecipeShare.shared_with_id == a),
            )
        )
    ).all()
    for share in shares:
        db.delete(share)
    return len(shares)


def _load_own_friendship(db: Session, user_id: str, friendship_id: str) -> Friendship:
    friendship = db.get(Friendship, friendship_id)
    if friendship is None:
        raise NotFound("Friend request not found")
    # A blocked row is invisible to the blocked party
    if friendship.status_for(user_id) is None:
        logger.warning(f"User {user_id} denied access to friendship {friendship_id}")
        raise NotAuthorized()
    return friendship


# --- Queries ---

def list_friends(db: Session, user_id: str) -> list[dict]:
    friendships = _friendships_of(db, user_id, status="accepted")
    users = fetch_users(db, [f.other(user_id) for f in friendships])

    friends = []
    for f in friendships:
        friend = users.get(f.other(user_id))
        if friend is None:
            continue
        friends.append({
            "friendship_id": f.id,
            "friend_id": friend.id,
            "name": friend.display_name,
            "email": friend.email,
            "image_url": friend.image_url,
            "since": f.updated_at,
        })
    return friends


def get_pending(db: Session, user_id: str) -> dict[str, list[dict]]:
    """Split pending requests into incoming and outgoing."""
    friendships = _friendships_of(db, user_id, status="pending")
    users = fetch_users(db, [f.other(user_id) for f in friendships])

    incoming, outgoing = [], []
    for f in friendships:
        other = users.get(f.other(user_id))
        if other is None:
            continue
        entry = {
            "friendship_id": f.id,
            "user_id": other.id,
            "name": other.display_name,
            "email": other.email,
            "image_url": other.image_url,
            "requested_at": f.created_at,
        }
        if f.requested_by == user_id:
            outgoing.append(entry)
        else:
            incoming.append(entry)
    return {"incoming": incoming, "outgoing": outgoing}


def search_users(db: Session, user_id: str, query: str) -> list[User]:
    """Find users by name or email who have no relationship with the searcher."""
    if len(query) < settings.search_min_query_length:
        return []

    related = {f.other(user_id) for f in _friendships_of(db, user_id)}
    related.add(user_id)

    # Literal substring match; % and _ in the query are not wildcards
    needle = query.lower()
    candidates = db.scalars(
        select(User)
        .where(
            or_(
                func.lower(User.name).contains(needle, autoescape=True),
                func.lower(User.email).contains(needle, autoescape=True),
            )
        )
        .order_by(User.name)
    ).all()

    return [u for u in candidates if u.id not in related][: settings.search_result_limit]


def get_stats(db: Session, user_id: str) -> dict[str, int]:
    friendships = _friendships_of(db, user_id)
    return {
        "friends": sum(1 for f in friendships if f.status == "accepted"),
        "pending_incoming": sum(
            1 for f in friendships if f.status == "pending" and f.requested_by != user_id
        ),
        "pending_outgoing": sum(
            1 for f in friendships if f.status == "pending" and f.requested_by == user_id
        ),
    }


# --- Mutations ---

def send_request(db: Session, user_id: str, friend_id: str) -> Friendship:
    """Open a pending request from user_id to friend_id.

    Raises:
        InvalidOperation: self-request
        NotFound: unknown target user
        AlreadyFriends / RequestPending / Blocked: a relationship already exists
    """
    if user_id == friend_id:
        raise InvalidOperation("Cannot send friend request to yourself")

    if db.get(User, friend_id) is None:
        raise NotFound("User not found")

    existing = get_friendship_between(db, user_id, friend_id)
    if existing is not None:
        if existing.status == "accepted":
            raise AlreadyFriends()
        if existing.status == "pending":
            raise RequestPending()
        raise Blocked()

    low, high = pair_key(user_id, friend_id)
    friendship = Friendship(
        user_low=low,
        user_high=high,
        status="pending",
        requested_by=user_id,
    )
    db.add(friendship)
    db.commit()
    db.refresh(friendship)

    logger.info(f"Friend request {friendship.id}: {user_id} -> {friend_id}")
    return friendship


def accept_request(db: Session, user_id: str, friendship_id: str) -> Friendship:
    friendship = _load_own_friendship(db, user_id, friendship_id)

    if friendship.status != "pending":
        raise NotPending()
    if friendship.requested_by == user_id:
        raise CannotAcceptOwnRequest()

    friendship.status = "accepted"
    db.commit()
    db.refresh(friendship)

    logger.info(f"Friend request {friendship.id} accepted by {user_id}")
    return friendship


def reject_request(db: Session, user_id: str, friendship_id: str) -> None:
    friendship = _load_own_friendship(db, user_id, friendship_id)
    if friendship.status != "pending":
        raise NotPending()

    db.delete(friendship)
    db.commit()
    logger.info(f"Friend request {friendship_id} rejected by {user_id}")


def cancel_request(db: Session, user_id: str, friendship_id: str) -> None:
    friendship = _load_own_friendship(db, user_id, friendship_id)
    if friendship.requested_by != user_id:
        raise NotAuthorized()
    if friendship.status != "pending":
        raise NotPending()

    db.delete(friendship)
    db.commit()
    logger.info(f"Friend request {friendship_id} cancelled by {user_id}")


def remove_friend(db: Session, user_id: str, friend_id: str) -> int:
    """Drop the relationship plus all shares between the pair.

    A block placed by the other user stays in place; only the blocker can
    lift it (``unblock_user``). Returns the number of shares removed.
    """
    friendship = get_friendship_between(db, user_id, friend_id)
    if friendship is not None:
        if friendship.status == "blocked" and friendship.blocked_by != user_id:
            logger.warning(f"User {user_id} cannot lift block placed by {friend_id}")
        else:
            db.delete(friendship)

    removed = _delete_shares_between(db, user_id, friend_id)
    db.commit()

    logger.info(f"User {user_id} removed {friend_id} ({removed} shares dropped)")
    return removed


def block_user(db: Session, user_id: str, other_id: str) -> Friendship:
    if user_id == other_id:
        raise InvalidOperation("Cannot block yourself")

    if db.get(User, other_id) is None:
        raise NotFound("User not found")

    friendship = get_friendship_between(db, user_id, other_id)
    if friendship is None:
        low, high = pair_key(user_id, other_id)
        friendship = Friendship(
            user_low=low,
            user_high=high,
            requested_by=user_id,
        )
        db.add(friendship)

    friendship.status = "blocked"
    friendship.blocked_by = user_id
    removed = _delete_shares_between(db, user_id, other_id)
    db.commit()
    db.refresh(friendship)

    logger.info(f"User {user_id} blocked {other_id} ({removed} shares dropped)")
    return friendship


def unblock_user(db: Session, user_id: str, other_id: str) -> None:
    """Lift a block. Only the blocker can do this."""
    friendship = get_friendship_between(db, user_id, other_id)
    if friendship is None or friendship.status_for(user_id) != "blocked":
        raise NotFound("No block to lift")

    db.delete(friendship)
    db.commit()
    logger.info(f"User {user_id} unblocked {other_id}")
