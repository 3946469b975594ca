# tvcatalog/tests/test_search_integration.py
"""
Runs the search against a real PostgreSQL. Set TEST_DATABASE_URL to a
throwaway database; all catalogue tables in it are dropped and recreated.
"""
import os
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from tvcatalog.database import _to_async_driver
from tvcatalog.db_models import Actor, Base, Character, Company, Genre, Network, Show, ShowCompany, ShowGenre
from tvcatalog.services.show_filters import ShowFilters, parse_filters, search_shows

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL not set")


def _shows():
    out = []
    for i in range(1, 13):
        out.append(
            Show(
                show_id=i,
                name=f"Show {i}",
                original_name=f"Original {i}",
                first_air_date=date(2016 + (i % 8), 1, 1),
                last_air_date=date(2024, 1, 1),
                status="Ended" if i % 2 else "Returning Series",
                tmdb_rating=5.0 + (i % 5),
                network_id=1 if i <= 6 else 2,
                network_country="US" if i <= 6 else "GB",
                creators="Jane Doe; John Roe" if i == 3 else None,
            )
        )
    return out


@pytest.fixture
async def db():
    engine = create_async_engine(_to_async_driver(TEST_DATABASE_URL))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    Session = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with Session() as session:
        session.add_all([
            Network(network_id=1, name="HBO", logo="hbo.png", countries="US"),
            Network(network_id=2, name="BBC One", logo=None, countries="GB"),
        ])
        await session.flush()
        session.add_all(_shows())
        session.add_all([Genre(genre_id=1, name="Drama"), Genre(genre_id=2, name="Comedy")])
        session.add_all([
            Actor(actor_id=1, name="Ana Garibaldi"),
            Actor(actor_id=2, name="Daniel Dae Kim"),
            Company(company_id=1, name="A24", logo=None, countries="US"),
        ])
        await session.flush()
        # shows 1-6 are Drama, 4-8 Comedy: 4-6 carry both
        session.add_all([ShowGenre(show_id=i, genre_id=1) for i in range(1, 7)])
        session.add_all([ShowGenre(show_id=i, genre_id=2) for i in range(4, 9)])
        # show 5 stars both actors
        session.add_all([
            Character(actor_id=1, show_id=2, name="Lead", order_num=1),
            Character(actor_id=1, show_id=5, name="Lead", order_num=1),
            Character(actor_id=2, show_id=5, name="Sidekick", order_num=2),
            Character(actor_id=2, show_id=9, name="Lead", order_num=1),
        ])
        session.add(ShowCompany(show_id=7, company_id=1))
        await session.commit()

        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


async def test_drama_rating_date_scenario(db):
    f = parse_filters({"genres": "Drama", "minRating": "7", "startDate": "2020-01-01"})
    out = await search_shows(db, f, page=1, limit=10)
    ids = [s["show_id"] for s in out["data"]]
    # Drama 1-6, rating 5+(i%5) >= 7 -> i%5 in (2,3,4), first air 2016+(i%8) >= 2020 -> i%8 >= 4
    assert ids == [4]
    assert out["count"] == 1


async def test_actor_union_is_deduplicated(db):
    out = await search_shows(db, parse_filters({"actors": "Ana Garibaldi,Daniel Dae Kim"}))
    assert [s["show_id"] for s in out["data"]] == [2, 5, 9]
    assert out["count"] == 3


async def test_overlapping_genres_counted_once(db):
    out = await search_shows(db, parse_filters({"genres": "drama,COMEDY"}))
    assert [s["show_id"] for s in out["data"]] == list(range(1, 9))
    assert out["count"] == 8


async def test_unknown_studio_returns_nothing(db):
    out = await search_shows(db, parse_filters({"studios": "Nonexistent Studio Name"}))
    assert out["count"] == 0
    assert out["data"] == []


async def test_second_page_of_unfiltered_listing(db):
    out = await search_shows(db, ShowFilters(), page=2, limit=5)
    assert [s["show_id"] for s in out["data"]] == [6, 7, 8, 9, 10]
    assert out["count"] == 12


async def test_pages_partition_the_result(db):
    seen = []
    for page in (1, 2, 3, 4):
        out = await search_shows(db, ShowFilters(), page=page, limit=4)
        seen.extend(s["show_id"] for s in out["data"])
    assert seen == list(range(1, 13))


async def test_scalar_filters(db):
    out = await search_shows(db, parse_filters({"network": "bbc", "status": "ended"}))
    assert [s["show_id"] for s in out["data"]] == [7, 9, 11]

    out = await search_shows(db, parse_filters({"studios": "a24"}))
    assert [s["show_id"] for s in out["data"]] == [7]

    out = await search_shows(db, parse_filters({"creators": "roe", "country": "us"}))
    assert [s["show_id"] for s in out["data"]] == [3]

    out = await search_shows(db, parse_filters({"name": "original 12"}))
    assert [s["show_id"] for s in out["data"]] == [12]


async def test_exact_rating_bounds(db):
    out = await search_shows(db, parse_filters({"minRating": "8", "maxRating": "8"}))
    assert [s["show_id"] for s in out["data"]] == [3, 8]


async def test_like_wildcards_are_literal(db):
    out = await search_shows(db, parse_filters({"name": "%"}))
    assert out["count"] == 0
