# tvcatalog/routes/actors.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tvcatalog.database import get_async_db
from tvcatalog.schemas import ActorShowsResponse, ActorSummary, ActorsResponse
from tvcatalog.security import require_api_key
from tvcatalog.services.convert import to_actor_summary
from tvcatalog.services.show_filters import InvalidFilterInput, escape_like, parse_pagination

router = APIRouter(prefix="/actors", tags=["Actors"], dependencies=[Depends(require_api_key)])


async def _get_actor(db: AsyncSession, actor_id: int) -> Dict[str, Any]:
    row = (
        await db.execute(
            text("SELECT actor_id, name, profile_url FROM actors WHERE actor_id = :actor_id"),
            {"actor_id": actor_id},
        )
    ).mappings().first()
    if row is None:
        raise HTTPException(status_code=404, detail="Actor not found.")
    return to_actor_summary(row)


@router.get("", summary="List actors", response_model=ActorsResponse)
async def list_actors(
    name: Optional[str] = Query(None, description="Case-insensitive substring of the actor name"),
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size (1-100)"),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    """
    Same pagination rules as /shows: out-of-range page and limit are clamped.
    """
    try:
        page_n, limit_n = parse_pagination(page, limit)
    except InvalidFilterInput as e:
        raise HTTPException(status_code=400, detail={"field": e.field, "message": e.message})

    where = ""
    params: Dict[str, Any] = {}
    if name and name.strip():
        where = "WHERE name ILIKE :pattern ESCAPE '\\'"
        params["pattern"] = f"%{escape_like(name.strip())}%"

    total = (await db.execute(text(f"SELECT COUNT(*) FROM actors {where}"), params)).scalar_one()
    rows = (
        await db.execute(
            text(
                f"SELECT actor_id, name, profile_url FROM actors {where} "
                "ORDER BY actor_id LIMIT :limit OFFSET :offset"
            ),
            {**params, "limit": limit_n, "offset": (page_n - 1) * limit_n},
        )
    ).mappings().all()
    return {
        "count": int(total or 0),
        "page": page_n,
        "limit": limit_n,
        "data": [to_actor_summary(r) for r in rows],
    }


@router.get("/{actor_id}", summary="Actor by id", response_model=ActorSummary)
async def actor_by_id(
    actor_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    return await _get_actor(db, actor_id)


@router.get("/{actor_id}/shows", summary="Shows an actor appears in", response_model=ActorShowsResponse)
async def actor_shows(
    actor_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    actor = await _get_actor(db, actor_id)
    rows = (
        await db.execute(
            text("""
                SELECT ts.show_id, ts.name, c.name AS character
                FROM tv_show ts
                JOIN characters c ON ts.show_id = c.show_id
                WHERE c.actor_id = :actor_id
                ORDER BY ts.name
            """),
            {"actor_id": actor_id},
        )
    ).mappings().all()
    shows = [
        {"show_id": int(r["show_id"]), "name": r["name"], "character": r["character"]}
        for r in rows
    ]
    return {"actor": actor["name"], "count": len(shows), "shows": shows}
