# tvcatalog/security.py
from __future__ import annotations

import logging
import re
import uuid
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tvcatalog.core.settings import settings
from tvcatalog.database import get_async_db
from tvcatalog.db_models import ApiKey

logger = logging.getLogger(__name__)

API_KEY_HEADER_NAME = "X-API-Key"
# auto_error=False so we can return our own 401 payloads instead of framework 403
api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)

_UUID4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def generate_api_key() -> str:
    return str(uuid.uuid4())


def is_valid_api_key_format(key: str) -> bool:
    return bool(_UUID4_RE.match(key or ""))


def _unauthorized(message: str, code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": message, "code": code},
    )


async def require_api_key(
    api_key: Optional[str] = Security(api_key_header),
    db: AsyncSession = Depends(get_async_db),
) -> Optional[ApiKey]:
    """
    Guard dependency for catalogue routes.
    Validates the X-API-Key header against api_keys and records usage.
    """
    if not settings.require_api_key:
        return None

    if not api_key:
        raise _unauthorized("API key required - POST /api/api-key to generate one", "AUTH_KEY_REQUIRED")

    # cheap format check before touching the DB
    if not is_valid_api_key_format(api_key):
        raise _unauthorized("Invalid API key format", "AUTH_KEY_INVALID")

    record = (
        await db.execute(select(ApiKey).where(ApiKey.api_key == api_key))
    ).scalar_one_or_none()
    if record is None:
        raise _unauthorized("Invalid API key", "AUTH_KEY_INVALID")
    if not record.is_active:
        logger.info("Rejected revoked API key id=%s (%s)", record.id, record.email)
        raise _unauthorized("API key has been revoked", "AUTH_KEY_REVOKED")

    await db.execute(
        update(ApiKey)
        .where(ApiKey.id == record.id)
        .values(request_count=ApiKey.request_count + 1, last_used_at=func.now())
    )
    await db.commit()
    return record
