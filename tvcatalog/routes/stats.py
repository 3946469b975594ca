# tvcatalog/routes/stats.py
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tvcatalog.core.settings import settings
from tvcatalog.database import get_async_db
from tvcatalog.infra import cache
from tvcatalog.security import require_api_key
from tvcatalog.services.convert import to_aggregate

router = APIRouter(prefix="/stats", tags=["Stats"], dependencies=[Depends(require_api_key)])

_RATING_AGGREGATES = """
    AVG(s.tmdb_rating) AS avg_rating,
    MIN(s.tmdb_rating) AS min_rating,
    MAX(s.tmdb_rating) AS max_rating
"""

# kind -> (SQL, group key fields in the response)
# Networks and companies group by name: one name can have several ids (one per country).
STATS_QUERIES: Dict[str, Tuple[str, List[str]]] = {
    "genres": (
        f"""
        SELECT g.genre_id AS id, g.name, COUNT(DISTINCT s.show_id) AS show_count, {_RATING_AGGREGATES}
        FROM genres g
        JOIN show_genres sg ON g.genre_id = sg.genre_id
        JOIN tv_show s ON sg.show_id = s.show_id
        WHERE s.tmdb_rating IS NOT NULL
        GROUP BY g.genre_id, g.name
        ORDER BY show_count DESC
        """,
        ["id", "name"],
    ),
    "networks": (
        f"""
        SELECT n.name, COUNT(DISTINCT s.show_id) AS show_count, {_RATING_AGGREGATES}
        FROM networks n
        JOIN tv_show s ON n.network_id = s.network_id
        WHERE s.tmdb_rating IS NOT NULL
        GROUP BY n.name
        ORDER BY show_count DESC
        """,
        ["name"],
    ),
    "actors": (
        f"""
        SELECT a.actor_id AS id, a.name, COUNT(DISTINCT s.show_id) AS show_count, {_RATING_AGGREGATES}
        FROM actors a
        JOIN characters c ON a.actor_id = c.actor_id
        JOIN tv_show s ON c.show_id = s.show_id
        WHERE s.tmdb_rating IS NOT NULL
        GROUP BY a.actor_id, a.name
        ORDER BY show_count DESC
        LIMIT 100
        """,
        ["id", "name"],
    ),
    "years": (
        f"""
        SELECT EXTRACT(YEAR FROM s.first_air_date) AS year, COUNT(s.show_id) AS show_count, {_RATING_AGGREGATES}
        FROM tv_show s
        WHERE s.first_air_date IS NOT NULL
        GROUP BY EXTRACT(YEAR FROM s.first_air_date)
        ORDER BY year DESC
        """,
        ["year"],
    ),
    "countries": (
        f"""
        SELECT s.network_country AS country, COUNT(s.show_id) AS show_count, {_RATING_AGGREGATES}
        FROM tv_show s
        WHERE s.network_country IS NOT NULL
        GROUP BY s.network_country
        ORDER BY show_count DESC
        """,
        ["country"],
    ),
    "status": (
        f"""
        SELECT s.status, COUNT(s.show_id) AS show_count, {_RATING_AGGREGATES}
        FROM tv_show s
        WHERE s.status IS NOT NULL
        GROUP BY s.status
        ORDER BY show_count DESC
        """,
        ["status"],
    ),
    "companies": (
        f"""
        SELECT co.name, COUNT(DISTINCT s.show_id) AS show_count, {_RATING_AGGREGATES}
        FROM company co
        JOIN show_companies sc ON co.company_id = sc.company_id
        JOIN tv_show s ON sc.show_id = s.show_id
        WHERE s.tmdb_rating IS NOT NULL
        GROUP BY co.name
        ORDER BY show_count DESC
        """,
        ["name"],
    ),
}


@router.get("/{kind}", summary="Rating aggregates grouped by genre, network, actor, year, country, status or company")
async def stats(
    kind: str = Path(..., description="|".join(STATS_QUERIES)),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    if kind not in STATS_QUERIES:
        raise HTTPException(status_code=404, detail=f"Unknown stats kind: {kind}")
    sql, keys = STATS_QUERIES[kind]

    async def load() -> List[Dict[str, Any]]:
        rows = (await db.execute(text(sql))).mappings().all()
        return [to_aggregate(r, keys) for r in rows]

    return await cache.cached_json(f"stats:{kind}", settings.stats_cache_ttl, load)
