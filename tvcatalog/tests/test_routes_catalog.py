# tvcatalog/tests/test_routes_catalog.py
import json

import pytest
from httpx import AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from conftest import FakeResult
from tvcatalog.infra import cache


# ---------------------------------------------------------
# Actors
# ---------------------------------------------------------

async def test_list_actors_with_name_filter(client: AsyncClient, fake_db):
    fake_db.queue(
        FakeResult(scalar=1),
        FakeResult(rows=[{"actor_id": 4, "name": "Daniel Dae Kim", "profile_url": None}]),
    )
    r = await client.get("/api/actors?name=dae%20kim&limit=10")
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 1
    assert body["data"][0]["name"] == "Daniel Dae Kim"

    (count_sql, count_params), (_, data_params) = fake_db.calls
    assert "ILIKE" in count_sql
    assert count_params == {"pattern": "%dae kim%"}
    assert data_params == {"pattern": "%dae kim%", "limit": 10, "offset": 0}


async def test_list_actors_clamps_like_shows(client: AsyncClient, fake_db):
    fake_db.queue(FakeResult(scalar=0), FakeResult(rows=[]))
    r = await client.get("/api/actors?page=0&limit=500")
    assert r.status_code == 200
    assert (r.json()["page"], r.json()["limit"]) == (1, 100)
    assert fake_db.calls[1][1] == {"limit": 100, "offset": 0}

    r = await client.get("/api/actors?page=abc")
    assert r.status_code == 400
    assert r.json()["detail"]["field"] == "page"


async def test_actor_by_id_and_404(client: AsyncClient, fake_db):
    fake_db.queue(FakeResult(rows=[{"actor_id": 4, "name": "Ana", "profile_url": "http://x/y.jpg"}]))
    r = await client.get("/api/actors/4")
    assert r.status_code == 200
    assert r.json() == {"actor_id": 4, "name": "Ana", "profile_url": "http://x/y.jpg"}

    fake_db.queue(FakeResult(rows=[]))
    r = await client.get("/api/actors/5")
    assert r.status_code == 404


async def test_actor_shows(client: AsyncClient, fake_db):
    fake_db.queue(
        FakeResult(rows=[{"actor_id": 4, "name": "Ana", "profile_url": None}]),
        FakeResult(rows=[
            {"show_id": 2, "name": "Alpha", "character": "Lead"},
            {"show_id": 1, "name": "Beta", "character": None},
        ]),
    )
    r = await client.get("/api/actors/4/shows")
    assert r.status_code == 200
    body = r.json()
    assert body["actor"] == "Ana"
    assert body["count"] == 2
    assert [s["name"] for s in body["shows"]] == ["Alpha", "Beta"]


# ---------------------------------------------------------
# Genres
# ---------------------------------------------------------

async def test_list_genres(client: AsyncClient, fake_db):
    fake_db.queue(FakeResult(rows=[
        {"genre_id": 1, "name": "Comedy", "show_count": 3},
        {"genre_id": 2, "name": "Drama", "show_count": 0},
    ]))
    r = await client.get("/api/genres")
    assert r.status_code == 200
    assert r.json() == {
        "count": 2,
        "data": [
            {"genre_id": 1, "name": "Comedy", "show_count": 3},
            {"genre_id": 2, "name": "Drama", "show_count": 0},
        ],
    }


# ---------------------------------------------------------
# Stats (Redis cached)
# ---------------------------------------------------------

async def test_stats_cached_after_first_call(client: AsyncClient, fake_db, fake_app_cache):
    fake_db.queue(FakeResult(rows=[
        {"id": 1, "name": "Drama", "show_count": 5, "avg_rating": 7.456, "min_rating": 5.0, "max_rating": 9.0},
    ]))
    r1 = await client.get("/api/stats/genres")
    assert r1.status_code == 200
    assert r1.json() == [
        {"id": 1, "name": "Drama", "show_count": 5, "avg_rating": 7.46, "min_rating": 5.0, "max_rating": 9.0}
    ]
    assert json.loads(await fake_app_cache.get("stats:genres")) == r1.json()

    # second call is served from Redis; no query queued
    r2 = await client.get("/api/stats/genres")
    assert r2.json() == r1.json()
    assert len(fake_db.calls) == 1


async def test_stats_years_keys(client: AsyncClient, fake_db):
    fake_db.queue(FakeResult(rows=[
        {"year": 2021.0, "show_count": 2, "avg_rating": None, "min_rating": None, "max_rating": None},
    ]))
    r = await client.get("/api/stats/years")
    assert r.json() == [{"year": 2021, "show_count": 2, "avg_rating": None, "min_rating": None, "max_rating": None}]


@pytest.mark.parametrize("kind", ["genres", "networks", "actors", "years", "countries", "status", "companies"])
async def test_stats_route_names(client: AsyncClient, fake_db, kind):
    fake_db.queue(FakeResult(rows=[]))
    r = await client.get(f"/api/stats/{kind}")
    assert r.status_code == 200
    assert r.json() == []


async def test_stats_unknown_kind(client: AsyncClient, fake_db):
    r = await client.get("/api/stats/planets")
    assert r.status_code == 404
    assert fake_db.calls == []


async def test_stats_survive_redis_outage(client: AsyncClient, fake_db, monkeypatch):
    async def broken_get(key):
        raise RedisConnectionError("redis down")

    monkeypatch.setattr(cache, "get_json", broken_get)
    fake_db.queue(FakeResult(rows=[
        {"status": "Ended", "show_count": 1, "avg_rating": 6.0, "min_rating": 6.0, "max_rating": 6.0},
    ]))
    r = await client.get("/api/stats/status")
    assert r.status_code == 200
    assert r.json()[0]["status"] == "Ended"


async def test_cache_discards_corrupt_entry(fake_app_cache):
    await fake_app_cache.set("stats:bad", "{not json")
    assert await cache.get_json("stats:bad") is None

    async def load():
        return [{"n": 1}]

    assert await cache.cached_json("stats:bad", 60, load) == [{"n": 1}]
    assert json.loads(await fake_app_cache.get("stats:bad")) == [{"n": 1}]
