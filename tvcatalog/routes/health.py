# tvcatalog/routes/health.py
from __future__ import annotations

from fastapi import APIRouter
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tvcatalog.database import async_engine
from tvcatalog.infra import cache

router = APIRouter(tags=["Health"])

# --- simple DB ping ---------------------------------------------------------
async def ping_db() -> bool:
    try:
        async with async_engine.begin() as conn:
            res = await conn.execute(text("SELECT 1"))
            return res.scalar() == 1
    except (SQLAlchemyError, OSError):
        return False

# --- Redis ping (stats cache only; not required to serve) ------------------
async def ping_redis() -> bool:
    try:
        return bool(await cache.client().ping())
    except (RedisError, OSError):
        return False

@router.get("/health", summary="Liveness")
async def health():
    # super cheap liveness (no external deps)
    return {"ok": True}

@router.get("/ready", summary="Readiness")
async def ready():
    db_ok = await ping_db()
    return {"ok": db_ok, "db": db_ok, "redis": await ping_redis()}
