# tvcatalog/services/scripts/import_shows_csv.py
"""
Load a TMDB TV export CSV into the catalogue tables.

    python -m tvcatalog.services.scripts.import_shows_csv project_files/tv_last1years.csv

Each CSV row is imported in its own transaction: network, show, genres,
companies, then actors/characters. A failing row is rolled back and
reported; the rest of the file still loads. Re-running is safe (upserts).
"""
from __future__ import annotations

import argparse
import asyncio
import csv
import logging
import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tvcatalog.database import AsyncSessionLocal, async_engine

logger = logging.getLogger(__name__)

MAX_BILLED_ACTORS = 10
LIST_SEP = ";"


@dataclass
class CastEntry:
    name: str
    character: Optional[str]
    profile_url: Optional[str]
    order_num: int


@dataclass
class CompanyEntry:
    name: str
    logo: Optional[str]
    countries: Optional[str]


@dataclass
class ShowRow:
    show_id: int
    name: Optional[str]
    original_name: Optional[str] = None
    first_air_date: Optional[date] = None
    last_air_date: Optional[date] = None
    seasons: Optional[int] = None
    episodes: Optional[int] = None
    status: Optional[str] = None
    overview: Optional[str] = None
    popularity: Optional[float] = None
    tmdb_rating: Optional[float] = None
    vote_count: Optional[int] = None
    creators: Optional[str] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    network: Optional[str] = None
    network_logo: Optional[str] = None
    network_country: Optional[str] = None
    genres: List[str] = field(default_factory=list)
    companies: List[CompanyEntry] = field(default_factory=list)
    cast: List[CastEntry] = field(default_factory=list)


# ---------------------------------------------------------
# ROW PARSING
# ---------------------------------------------------------

def _s(value: Any) -> Optional[str]:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def _i(value: Any) -> Optional[int]:
    v = _s(value)
    return int(float(v)) if v is not None else None


def _f(value: Any) -> Optional[float]:
    v = _s(value)
    return float(v) if v is not None else None


def _d(value: Any) -> Optional[date]:
    """'YYYY-MM-DD' -> date (asyncpg wants date objects, not strings)."""
    v = _s(value)
    return date.fromisoformat(v[:10]) if v is not None else None


def _split(value: Any) -> List[str]:
    # positions matter for parallel columns, so blanks are kept here
    v = _s(value)
    return [p.strip() for p in v.split(LIST_SEP)] if v else []


def parse_row(raw: Dict[str, Any]) -> ShowRow:
    """
    Typed view of one CSV record. Blank cells become None.
    Raises ValueError if the ID is missing or a numeric/date cell is malformed.
    """
    show_id = _i(raw.get("ID"))
    if show_id is None:
        raise ValueError("row has no ID")

    names = _split(raw.get("Studios"))
    logos = _split(raw.get("Company Logos"))
    countries = _split(raw.get("Company Countries"))
    companies = [
        CompanyEntry(
            name=n,
            logo=(logos[i] or None) if i < len(logos) else None,
            countries=(countries[i] or None) if i < len(countries) else None,
        )
        for i, n in enumerate(names)
        if n
    ]

    cast: List[CastEntry] = []
    for n in range(1, MAX_BILLED_ACTORS + 1):
        actor = _s(raw.get(f"Actor {n} Name"))
        if actor:
            cast.append(
                CastEntry(
                    name=actor,
                    character=_s(raw.get(f"Actor {n} Character")),
                    profile_url=_s(raw.get(f"Actor {n} Profile URL")),
                    order_num=n,
                )
            )

    return ShowRow(
        show_id=show_id,
        name=_s(raw.get("Name")),
        original_name=_s(raw.get("Original Name")),
        first_air_date=_d(raw.get("First Air Date")),
        last_air_date=_d(raw.get("Last Air Date")),
        seasons=_i(raw.get("Seasons")),
        episodes=_i(raw.get("Episodes")),
        status=_s(raw.get("Status")),
        overview=_s(raw.get("Overview")),
        popularity=_f(raw.get("Popularity")),
        tmdb_rating=_f(raw.get("TMDb Rating")),
        vote_count=_i(raw.get("Vote Count")),
        creators=_s(raw.get("Creators")),
        poster_url=_s(raw.get("Poster URL")),
        backdrop_url=_s(raw.get("Backdrop URL")),
        network=_s(raw.get("Networks")),
        network_logo=_s(raw.get("Network Logos")),
        network_country=_s(raw.get("Network Countries")),
        genres=[g for g in _split(raw.get("Genres")) if g],
        companies=companies,
        cast=cast,
    )


def read_csv(path: Path) -> Iterator[Dict[str, str]]:
    with open(path, "r", encoding="utf-8", newline="") as f:
        yield from csv.DictReader(f)


# ---------------------------------------------------------
# DB WRITES
# ---------------------------------------------------------

async def _get_or_create_by_identity(
    session: AsyncSession, table: str, id_col: str, name: str, logo: Optional[str], countries: Optional[str]
) -> int:
    """Networks and companies share one identity rule: (name, logo, countries)."""
    params = {"name": name, "logo": logo, "countries": countries}
    existing = (
        await session.execute(
            text(
                f"SELECT {id_col} FROM {table} WHERE name = :name "
                "AND logo IS NOT DISTINCT FROM :logo AND countries IS NOT DISTINCT FROM :countries"
            ),
            params,
        )
    ).scalar_one_or_none()
    if existing is not None:
        return int(existing)
    new_id = (
        await session.execute(
            text(
                f"INSERT INTO {table} (name, logo, countries) VALUES (:name, :logo, :countries) "
                f"RETURNING {id_col}"
            ),
            params,
        )
    ).scalar_one()
    return int(new_id)


async def _upsert_show(session: AsyncSession, row: ShowRow, network_id: Optional[int]) -> None:
    await session.execute(
        text("""
            INSERT INTO tv_show (
                show_id, name, original_name, first_air_date, last_air_date,
                seasons, episodes, status, overview, popularity, tmdb_rating,
                vote_count, creators, poster_url, backdrop_url, network_id, network_country
            ) VALUES (
                :show_id, :name, :original_name, :first_air_date, :last_air_date,
                :seasons, :episodes, :status, :overview, :popularity, :tmdb_rating,
                :vote_count, :creators, :poster_url, :backdrop_url, :network_id, :network_country
            )
            ON CONFLICT (show_id) DO UPDATE SET
                name = EXCLUDED.name,
                original_name = EXCLUDED.original_name,
                first_air_date = EXCLUDED.first_air_date,
                last_air_date = EXCLUDED.last_air_date,
                seasons = EXCLUDED.seasons,
                episodes = EXCLUDED.episodes,
                status = EXCLUDED.status,
                overview = EXCLUDED.overview,
                popularity = EXCLUDED.popularity,
                tmdb_rating = EXCLUDED.tmdb_rating,
                vote_count = EXCLUDED.vote_count,
                creators = EXCLUDED.creators,
                poster_url = EXCLUDED.poster_url,
                backdrop_url = EXCLUDED.backdrop_url,
                network_id = EXCLUDED.network_id,
                network_country = EXCLUDED.network_country
        """),
        {
            "show_id": row.show_id,
            "name": row.name,
            "original_name": row.original_name,
            "first_air_date": row.first_air_date,
            "last_air_date": row.last_air_date,
            "seasons": row.seasons,
            "episodes": row.episodes,
            "status": row.status,
            "overview": row.overview,
            "popularity": row.popularity,
            "tmdb_rating": row.tmdb_rating,
            "vote_count": row.vote_count,
            "creators": row.creators,
            "poster_url": row.poster_url,
            "backdrop_url": row.backdrop_url,
            "network_id": network_id,
            "network_country": row.network_country,
        },
    )


async def import_row(session: AsyncSession, row: ShowRow) -> None:
    network_id: Optional[int] = None
    if row.network:
        network_id = await _get_or_create_by_identity(
            session, "networks", "network_id", row.network, row.network_logo, row.network_country
        )

    await _upsert_show(session, row, network_id)

    for genre in row.genres:
        await session.execute(
            text("INSERT INTO genres (name) VALUES (:name) ON CONFLICT (name) DO NOTHING"),
            {"name": genre},
        )
        await session.execute(
            text("""
                INSERT INTO show_genres (show_id, genre_id)
                SELECT :show_id, genre_id FROM genres WHERE name = :name
                ON CONFLICT DO NOTHING
            """),
            {"show_id": row.show_id, "name": genre},
        )

    for company in row.companies:
        company_id = await _get_or_create_by_identity(
            session, "company", "company_id", company.name, company.logo, company.countries
        )
        await session.execute(
            text("""
                INSERT INTO show_companies (show_id, company_id)
                VALUES (:show_id, :company_id)
                ON CONFLICT DO NOTHING
            """),
            {"show_id": row.show_id, "company_id": company_id},
        )

    for member in row.cast:
        actor_id = (
            await session.execute(
                text("""
                    INSERT INTO actors (name, profile_url) VALUES (:name, :profile_url)
                    ON CONFLICT (name) DO UPDATE
                        SET profile_url = COALESCE(actors.profile_url, EXCLUDED.profile_url)
                    RETURNING actor_id
                """),
                {"name": member.name, "profile_url": member.profile_url},
            )
        ).scalar_one()
        await session.execute(
            text("""
                INSERT INTO characters (show_id, actor_id, name, order_num)
                VALUES (:show_id, :actor_id, :name, :order_num)
                ON CONFLICT (actor_id, show_id) DO UPDATE
                    SET name = EXCLUDED.name, order_num = EXCLUDED.order_num
            """),
            {
                "show_id": row.show_id,
                "actor_id": int(actor_id),
                "name": member.character,
                "order_num": member.order_num,
            },
        )


async def import_rows(session: AsyncSession, records: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Import records one by one, committing each. Returns
    {"processed": n_ok, "failed": [(row_number, reason), ...]}.
    """
    processed = 0
    failed: List[Tuple[int, str]] = []
    for n, raw in enumerate(records, start=1):
        label = raw.get("Name") or raw.get("ID") or f"row {n}"
        try:
            row = parse_row(raw)
        except ValueError as e:
            logger.warning("Skipping %s: %s", label, e)
            failed.append((n, str(e)))
            continue
        try:
            await import_row(session, row)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Failed to import %s: %r", label, e)
            failed.append((n, repr(e)))
            continue
        processed += 1
        logger.info("Imported (%d): %s", n, label)
    return {"processed": processed, "failed": failed}


async def _run(path: Path) -> Dict[str, Any]:
    started = time.time()
    try:
        async with AsyncSessionLocal() as session:
            result = await import_rows(session, read_csv(path))
    finally:
        await async_engine.dispose()
    elapsed = time.time() - started
    logger.info(
        "Done. Imported %d shows, %d failed, in %.1fs",
        result["processed"], len(result["failed"]), elapsed,
    )
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Import a TMDB TV CSV export into the catalogue.")
    parser.add_argument("csv_path", type=Path, help="Path to the CSV file")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    if not args.csv_path.exists():
        raise SystemExit(f"CSV not found: {args.csv_path}")

    result = asyncio.run(_run(args.csv_path))
    for n, reason in result["failed"]:
        print(f"FAILED row {n}: {reason}")


if __name__ == "__main__":
    main()
