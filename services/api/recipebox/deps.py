"""FastAPI dependencies for recipebox API.

Provides:
- Database session dependency
- Principal resolution (Authorization: Bearer <session token> -> user id)
"""

from typing import Optional

from fastapi import Depends, Header

from .db import get_db
from .errors import Unauthenticated
from .infra.sessions import resolve_session

__all__ = ["get_db", "current_user_or_fail", "current_user_or_null"]


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_user_or_null(
    authorization: Optional[str] = Header(None),
) -> Optional[str]:
    """Resolve the caller to a user id, or None for anonymous traffic.

    Used by read paths that also serve public content (global recipes,
    publicly shared recipes, share-code lookups).
    """
    token = _bearer_token(authorization)
    if token is None:
        return None
    return resolve_session(token)


def current_user_or_fail(
    user_id: Optional[str] = Depends(current_user_or_null),
) -> str:
    """Resolve the caller to a user id.

    Raises:
        Unauthenticated: if no valid session is present
    """
    if not user_id:
        raise Unauthenticated()
    return user_id
