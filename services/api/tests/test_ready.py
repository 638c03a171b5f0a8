import pytest

from recipebox.infra.redis_client import get_redis


def test_ready_reports_redis(client):
    response = client.get("/api/ready")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "redis_ok": True}


@pytest.mark.asyncio
async def test_redis_connection():
    r = await get_redis()
    assert await r.ping() is True
