"""Unauthenticated share-code endpoints.

Endpoints:
- GET /api/public/share/{code} - Recipe behind a share code (no counters touched)
- GET /api/public/share/{code}/validate - Validity and failure reason
- POST /api/public/share/{code}/access - Record one access

A bearer token is honoured when present so access logs can name the viewer,
but is never required. Failures come back as a reason in a 200 body rather
than as errors so a client can tell missing, revoked and expired links apart.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..deps import current_user_or_null, get_db
from ..schemas import AccessRecordOut, ShareCodeValidationOut, SharedRecipeOut
from ..services import share_links as link_service
from ..settings import settings

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/share/{code}", response_model=SharedRecipeOut)
@limiter.limit(settings.public_rate_limit)
def get_recipe_by_share_code(
    request: Request,  # Required for rate limiter
    code: str,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    result = link_service.get_recipe_by_code(db, code, viewer_id=user_id)
    return {"valid": result["reason"] is None, **result}


@router.get("/share/{code}/validate", response_model=ShareCodeValidationOut)
@limiter.limit(settings.public_rate_limit)
def validate_share_code(
    request: Request,  # Required for rate limiter
    code: str,
    db: Session = Depends(get_db),
):
    return link_service.validate_code(db, code)


@router.post("/share/{code}/access", response_model=AccessRecordOut)
@limiter.limit(settings.public_rate_limit)
def record_share_link_access(
    request: Request,  # Required for rate limiter
    code: str,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(current_user_or_null),
):
    return link_service.record_access(db, code, user_id=user_id)
