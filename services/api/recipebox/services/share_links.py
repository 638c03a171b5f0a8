"""Shareable recipe links.

A link is addressed by a random public code and can be used without an
account. Links can expire, are revoked by flipping ``is_active`` (history is
kept), and are only removed by an explicit delete that also drops their
access log.
"""

import logging
import secrets
import string
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..core.clock import days_from_now, now_ms
from ..errors import CodeGenerationExhausted, NotFound, NotOwner
from ..models import Recipe, ShareLink, ShareLinkAccess
from ..settings import settings
from .access_control import can_modify, require_owned_recipe
from .enrichment import enrich_recipe, fetch_recipes

logger = logging.getLogger("recipebox.share_links")

SHARE_CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

# Terminal states of a code lookup
REASON_NOT_FOUND = "not_found"
REASON_REVOKED = "revoked"
REASON_EXPIRED = "expired"


def generate_share_code(length: Optional[int] = None) -> str:
    """Draw each character uniformly from [A-Za-z0-9]."""
    length = length or settings.share_code_length
    return "".join(secrets.choice(SHARE_CODE_ALPHABET) for _ in range(length))


def find_by_code(db: Session, code: str) -> Optional[ShareLink]:
    return db.scalar(select(ShareLink).where(ShareLink.share_code == code))


def link_status(link: Optional[ShareLink], now: int) -> Optional[str]:
    """Reason the link is unusable, or None if it grants access."""
    if link is None:
        return REASON_NOT_FOUND
    if not link.is_active:
        return REASON_REVOKED
    if link.is_expired(now):
        return REASON_EXPIRED
    return None


def _require_owned_link(db: Session, user_id: str, link_id: str) -> ShareLink:
    link = db.get(ShareLink, link_id)
    if link is None:
        raise NotFound("Share link not found")
    if link.owner_id != user_id:
        logger.warning(f"User {user_id} denied access to share link {link_id}")
        raise NotOwner("Not the link owner")
    return link


def _link_summary(link: ShareLink, now: int, recipe_title: Optional[str] = None) -> dict:
    summary = {
        "link_id": link.id,
        "share_code": link.share_code,
        "recipe_id": link.recipe_id,
        "created_at": link.created_at,
        "expires_at": link.expires_at,
        "access_count": link.access_count,
        "last_accessed_at": link.last_accessed_at,
        "is_active": link.is_active,
        "is_expired": link.is_expired(now),
    }
    if recipe_title is not None:
        summary["recipe_title"] = recipe_title
    return summary


# --- Owner queries ---

def links_for_recipe(db: Session, user_id: str, recipe_id: str) -> list[dict]:
    recipe = db.get(Recipe, recipe_id)
    if recipe is None or not can_modify(recipe, user_id):
        return []

    now = now_ms()
    links = db.scalars(
        select(ShareLink)
        .where(ShareLink.recipe_id == recipe_id)
        .order_by(ShareLink.created_at)
    ).all()
    return [_link_summary(link, now) for link in links]


def my_links(db: Session, user_id: str) -> list[dict]:
    now = now_ms()
    links = db.scalars(
        select(ShareLink)
        .where(ShareLink.owner_id == user_id)
        .order_by(ShareLink.created_at.desc())
    ).all()
    recipes = fetch_recipes(db, (link.recipe_id for link in links))
    return [
        _link_summary(
            link,
            now,
            recipe_title=recipes[link.recipe_id].title if link.recipe_id in recipes else "Unknown",
        )
        for link in links
    ]


# --- Owner mutations ---

def create_link(
    db: Session,
    user_id: str,
    recipe_id: str,
    expires_in_days: Optional[float] = None,
) -> ShareLink:
    """Create a share link with a fresh unique code.

    Raises:
        NotFound / NotOwner: recipe missing or not owned
        CodeGenerationExhausted: every generated code collided
    """
    require_owned_recipe(db, recipe_id, user_id)

    share_code = None
    for _ in range(settings.share_code_max_attempts):
        candidate = generate_share_code()
        if find_by_code(db, candidate) is None:
            share_code = candidate
            break
        logger.warning("Share code collision, retrying")

    if share_code is None:
        raise CodeGenerationExhausted()

    now = now_ms()
    link = ShareLink(
        recipe_id=recipe_id,
        owner_id=user_id,
        share_code=share_code,
        created_at=now,
        expires_at=days_from_now(expires_in_days, now) if expires_in_days else None,
        access_count=0,
        is_active=True,
    )
    db.add(link)
    db.commit()
    db.refresh(link)

    logger.info(f"Share link {link.id} created for recipe {recipe_id}")
    return link


def revoke(db: Session, user_id: str, link_id: str) -> ShareLink:
    link = _require_owned_link(db, user_id, link_id)
    link.is_active = False
    db.commit()
    logger.info(f"Share link {link_id} revoked")
    return link


def reactivate(db: Session, user_id: str, link_id: str) -> ShareLink:
    link = _require_owned_link(db, user_id, link_id)
    link.is_active = True
    db.commit()
    logger.info(f"Share link {link_id} reactivated")
    return link


def _purge_link(db: Session, link: ShareLink) -> None:
    db.execute(delete(ShareLinkAccess).where(ShareLinkAccess.share_link_id == link.id))
    db.delete(link)


def delete_link(db: Session, user_id: str, link_id: str) -> None:
    link = _require_owned_link(db, user_id, link_id)
    _purge_link(db, link)
    db.commit()
    logger.info(f"Share link {link_id} deleted")


def delete_all_for_recipe(db: Session, user_id: str, recipe_id: str) -> int:
    require_owned_recipe(db, recipe_id, user_id)
    removed = purge_recipe_links(db, recipe_id)
    db.commit()
    logger.info(f"Recipe {recipe_id}: deleted {removed} share links")
    return removed


def purge_recipe_links(db: Session, recipe_id: str) -> int:
    """Delete every link of a recipe with its access log. Does not commit."""
    links = db.scalars(select(ShareLink).where(ShareLink.recipe_id == recipe_id)).all()
    for link in links:
        _purge_link(db, link)
    db.flush()
    return len(links)


# --- Public (unauthenticated-safe) ---

def validate_code(db: Session, code: str, now: Optional[int] = None) -> dict:
    now = now if now is not None else now_ms()
    reason = link_status(find_by_code(db, code), now)
    return {"valid": reason is None, "reason": reason}


def get_recipe_by_code(
    db: Session, code: str, viewer_id: Optional[str] = None, now: Optional[int] = None
) -> dict:
    """Resolve a code to its recipe without touching counters.

    Returns ``{"reason": None, "recipe": {...}}`` on success, otherwise
    ``{"reason": <not_found|revoked|expired>, "recipe": None}``.
    """
    now = now if now is not None else now_ms()
    link = find_by_code(db, code)
    reason = link_status(link, now)
    if reason is not None:
        return {"reason": reason, "recipe": None}

    recipe = db.get(Recipe, link.recipe_id)
    if recipe is None:
        return {"reason": REASON_NOT_FOUND, "recipe": None}

    payload = enrich_recipe(db, recipe, viewer_id)
    payload.update({
        "is_shared_via_link": True,
        "access_count": link.access_count,
    })
    return {"reason": None, "recipe": payload}


def record_access(
    db: Session, code: str, user_id: Optional[str] = None, now: Optional[int] = None
) -> dict:
    """Count one access and append it to the link's access log."""
    now = now if now is not None else now_ms()
    link = find_by_code(db, code)
    reason = link_status(link, now)
    if reason is not None:
        return {"success": False, "reason": reason}

    link.access_count = link.access_count + 1
    link.last_accessed_at = now
    db.add(ShareLinkAccess(share_link_id=link.id, user_id=user_id, accessed_at=now))
    db.commit()
    return {"success": True, "reason": None}
