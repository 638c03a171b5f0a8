"""Session token lookup.

The auth provider issues opaque bearer tokens and records the owning user id
under ``<session_key_prefix>:<token>`` in Redis. This module only maps a token
back to a user id; issuing tokens is the provider's job.
"""
from typing import Optional

from recipebox.infra.redis_client import get_sync_redis
from recipebox.settings import settings

DEFAULT_SESSION_TTL_SEC = 60 * 60 * 24 * 30


def _session_key(token: str) -> str:
    return f"{settings.session_key_prefix}:{token}"


def resolve_session(token: str) -> Optional[str]:
    if not token:
        return None
    return get_sync_redis().get(_session_key(token))


def store_session(token: str, user_id: str, ttl_sec: int = DEFAULT_SESSION_TTL_SEC) -> None:
    get_sync_redis().set(_session_key(token), user_id, ex=ttl_sec)


def drop_session(token: str) -> None:
    get_sync_redis().delete(_session_key(token))
