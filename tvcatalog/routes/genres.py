# tvcatalog/routes/genres.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tvcatalog.database import get_async_db
from tvcatalog.schemas import GenresResponse
from tvcatalog.security import require_api_key

router = APIRouter(prefix="/genres", tags=["Genres"], dependencies=[Depends(require_api_key)])


@router.get("", summary="All genres with show counts", response_model=GenresResponse)
async def list_genres(db: AsyncSession = Depends(get_async_db)) -> Dict[str, Any]:
    rows = (
        await db.execute(
            text("""
                SELECT g.genre_id, g.name, COUNT(sg.show_id) AS show_count
                FROM genres g
                LEFT JOIN show_genres sg ON g.genre_id = sg.genre_id
                GROUP BY g.genre_id, g.name
                ORDER BY g.genre_id ASC
            """)
        )
    ).mappings().all()
    data = [
        {"genre_id": int(r["genre_id"]), "name": r["name"], "show_count": int(r["show_count"] or 0)}
        for r in rows
    ]
    return {"count": len(data), "data": data}
