import logging

from fastapi import APIRouter

from recipebox.infra.redis_client import get_redis

router = APIRouter()
logger = logging.getLogger("recipebox.ready")


@router.get("/ready")
async def ready():
    redis_ok = False
    try:
        r = await get_redis()
        redis_ok = bool(await r.ping())
    except Exception as exc:
        logger.warning(f"Redis not reachable: {exc}")
    return {"ok": True, "redis_ok": redis_ok}
