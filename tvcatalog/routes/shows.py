# tvcatalog/routes/shows.py
from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, Query, Path, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tvcatalog.database import get_async_db
from tvcatalog.schemas import ShowDetail, ShowSummary, ShowsFilterResponse, ShowsResponse
from tvcatalog.security import require_api_key
from tvcatalog.services.convert import to_show_detail, to_show_summary
from tvcatalog.services.show_filters import (
    InvalidFilterInput,
    QueryExecutionFailed,
    ShowFilters,
    parse_filters,
    parse_pagination,
    search_shows,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/shows", tags=["Shows"], dependencies=[Depends(require_api_key)])

SUMMARY_SELECT = """
    SELECT show_id, name, original_name, first_air_date, status, seasons,
           episodes, tmdb_rating, popularity, poster_url, overview
    FROM tv_show
"""

# Only these columns may be interpolated into ORDER BY
TOP_LIST_ORDER = {
    "longest-running": "episodes",
    "popular": "popularity",
    "top-rated": "tmdb_rating",
}


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------

def _bad_request(e: InvalidFilterInput) -> HTTPException:
    return HTTPException(status_code=400, detail={"field": e.field, "message": e.message})


async def _top_shows(db: AsyncSession, kind: str, limit: int) -> List[Dict[str, Any]]:
    column = TOP_LIST_ORDER[kind]
    sql = text(
        f"{SUMMARY_SELECT} WHERE {column} IS NOT NULL "
        f"ORDER BY {column} DESC, show_id ASC LIMIT :limit"
    )
    try:
        rows = (await db.execute(sql, {"limit": limit})).mappings().all()
    except SQLAlchemyError as e:
        logger.exception("Top list %s failed", kind)
        raise HTTPException(status_code=500, detail=f"{kind} failed: {e!r}")
    return [to_show_summary(r) for r in rows]


async def _load_show(db: AsyncSession, show_id: int) -> Optional[Dict[str, Any]]:
    row = (
        await db.execute(text("SELECT * FROM tv_show WHERE show_id = :show_id"), {"show_id": show_id})
    ).mappings().first()
    return dict(row) if row else None


# ---------------------------------------------------------
# ROUTES
# ---------------------------------------------------------

@router.get("", summary="List shows", response_model=ShowsResponse)
async def list_shows(
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size (1-100)"),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    """
    Unfiltered listing, ordered by show_id. Same pagination rules as /filter.
    """
    try:
        page_n, limit_n = parse_pagination(page, limit)
        result = await search_shows(db, ShowFilters(), page_n, limit_n)
    except InvalidFilterInput as e:
        raise _bad_request(e)
    except QueryExecutionFailed as e:
        raise HTTPException(status_code=500, detail=str(e))
    result.pop("filters", None)
    return result


@router.get("/filter", summary="Search shows by filters", response_model=ShowsFilterResponse)
async def filter_shows(
    actors: Optional[str] = Query(None, description="Comma separated actor names (any of)"),
    genres: Optional[str] = Query(None, description="Comma separated genre names (any of)"),
    network: Optional[str] = Query(None),
    studios: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    min_rating: Optional[str] = Query(None, alias="minRating"),
    max_rating: Optional[str] = Query(None, alias="maxRating"),
    start_date: Optional[str] = Query(None, alias="startDate", description="ISO date, first air date >="),
    end_date: Optional[str] = Query(None, alias="endDate", description="ISO date, last air date <="),
    country: Optional[str] = Query(None),
    creators: Optional[str] = Query(None, description="Comma separated creator names (any of)"),
    name: Optional[str] = Query(None, description="Matches name or original name"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    # snake_case spellings used by older clients
    min_rating_snake: Optional[str] = Query(None, alias="min_rating", include_in_schema=False),
    max_rating_snake: Optional[str] = Query(None, alias="max_rating", include_in_schema=False),
    start_date_snake: Optional[str] = Query(None, alias="start_date", include_in_schema=False),
    end_date_snake: Optional[str] = Query(None, alias="end_date", include_in_schema=False),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    """
    Filters are AND'ed together; items inside a comma separated filter are OR'ed.
    Blank values are ignored.
    """
    raw = {
        "actors": actors,
        "genres": genres,
        "network": network,
        "studios": studios,
        "status": status,
        "minRating": min_rating if min_rating is not None else min_rating_snake,
        "maxRating": max_rating if max_rating is not None else max_rating_snake,
        "startDate": start_date if start_date is not None else start_date_snake,
        "endDate": end_date if end_date is not None else end_date_snake,
        "country": country,
        "creators": creators,
        "name": name,
    }
    try:
        filters = parse_filters(raw)
        page_n, limit_n = parse_pagination(page, limit)
        return await search_shows(db, filters, page_n, limit_n)
    except InvalidFilterInput as e:
        raise _bad_request(e)
    except QueryExecutionFailed as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/random", summary="Random shows", response_model=List[ShowSummary])
async def random_shows(
    count: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    rows = (
        await db.execute(text(f"{SUMMARY_SELECT} ORDER BY RANDOM() LIMIT :count"), {"count": count})
    ).mappings().all()
    return [to_show_summary(r) for r in rows]


@router.get("/longest-running", summary="Shows with the most episodes", response_model=List[ShowSummary])
async def longest_running(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    return await _top_shows(db, "longest-running", limit)


@router.get("/popular", summary="Most popular shows", response_model=List[ShowSummary])
async def popular(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    return await _top_shows(db, "popular", limit)


@router.get("/top-rated", summary="Highest rated shows", response_model=List[ShowSummary])
async def top_rated(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    return await _top_shows(db, "top-rated", limit)


@router.get("/{show_id}/summary", summary="Summary for a show", response_model=ShowSummary)
async def show_summary(
    show_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    show = await _load_show(db, show_id)
    if show is None:
        raise HTTPException(status_code=404, detail=f"No show found with ID: {show_id}")
    return to_show_summary(show)


@router.get("/{show_id}", summary="Full details for a show", response_model=ShowDetail)
async def show_details(
    show_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    """
    Show row plus its network, genres, companies and billed cast.
    """
    show = await _load_show(db, show_id)
    if show is None:
        raise HTTPException(status_code=404, detail=f"No show found with ID: {show_id}")

    params = {"show_id": show_id}
    network = (
        await db.execute(
            text("""
                SELECT n.network_id, n.name, n.logo, ts.network_country AS country
                FROM tv_show ts
                JOIN networks n ON ts.network_id = n.network_id
                WHERE ts.show_id = :show_id
            """),
            params,
        )
    ).mappings().first()
    genres = (
        await db.execute(
            text("""
                SELECT g.genre_id, g.name
                FROM genres g
                JOIN show_genres sg ON g.genre_id = sg.genre_id
                WHERE sg.show_id = :show_id
                ORDER BY g.name
            """),
            params,
        )
    ).mappings().all()
    companies = (
        await db.execute(
            text("""
                SELECT co.company_id, co.name, co.logo, co.countries
                FROM company co
                JOIN show_companies sc ON co.company_id = sc.company_id
                WHERE sc.show_id = :show_id
                ORDER BY co.name
            """),
            params,
        )
    ).mappings().all()
    actors = (
        await db.execute(
            text("""
                SELECT a.actor_id, a.name, a.profile_url, c.name AS character, c.order_num
                FROM actors a
                JOIN characters c ON a.actor_id = c.actor_id
                WHERE c.show_id = :show_id
                ORDER BY c.order_num
            """),
            params,
        )
    ).mappings().all()

    return to_show_detail(
        show,
        genres=list(genres),
        network=network,
        companies=list(companies),
        actors=list(actors),
    )
