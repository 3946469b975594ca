# tvcatalog/routes/api_keys.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tvcatalog.database import get_async_db
from tvcatalog.db_models import ApiKey
from tvcatalog.schemas import ApiKeyIn, ApiKeyOut
from tvcatalog.security import API_KEY_HEADER_NAME, generate_api_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api-key", tags=["API keys"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiKeyOut, summary="Generate an API key")
async def create_api_key(
    body: ApiKeyIn,
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    """
    Keys are shown once. Send it back in the X-API-Key header.
    """
    record = ApiKey(api_key=generate_api_key(), name=body.name, email=str(body.email), is_active=True)
    db.add(record)
    try:
        await db.commit()
        await db.refresh(record)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to store API key for %s", body.email)
        raise HTTPException(status_code=500, detail="Failed to generate API key - please try again")

    created = record.created_at
    return {
        "api_key": record.api_key,
        "name": record.name,
        "created_at": created.isoformat() if hasattr(created, "isoformat") else str(created),
        "usage": f'Include this key in the {API_KEY_HEADER_NAME} header: curl -H "{API_KEY_HEADER_NAME}: {record.api_key}"',
    }
