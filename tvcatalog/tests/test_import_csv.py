# tvcatalog/tests/test_import_csv.py
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import FakeResult, FakeSession
from tvcatalog.services.scripts.import_shows_csv import import_rows, parse_row, read_csv


def _record(**overrides):
    rec = {
        "ID": "1399",
        "Name": "Game of Thrones",
        "Original Name": "Game of Thrones",
        "First Air Date": "2011-04-17",
        "Last Air Date": "2019-05-19",
        "Seasons": "8",
        "Episodes": "73",
        "Status": "Ended",
        "Overview": "Seven noble families fight for control.",
        "Popularity": "369.59",
        "TMDb Rating": "8.456",
        "Vote Count": "24000",
        "Creators": "David Benioff; D. B. Weiss",
        "Poster URL": "https://image.tmdb.org/t/p/w500/poster.jpg",
        "Backdrop URL": "",
        "Networks": "HBO",
        "Network Logos": "https://image.tmdb.org/t/p/w500/hbo.png",
        "Network Countries": "US",
        "Genres": "Sci-Fi & Fantasy; Drama;",
        "Studios": "Revolution Sun Studios;Television 360;",
        "Company Logos": ";https://image.tmdb.org/t/p/w500/t360.png",
        "Company Countries": "US;US",
        "Actor 1 Name": "Emilia Clarke",
        "Actor 1 Character": "Daenerys Targaryen",
        "Actor 1 Profile URL": "https://image.tmdb.org/t/p/w500/ec.jpg",
        "Actor 2 Name": "",
        "Actor 3 Name": "Kit Harington",
        "Actor 3 Character": "Jon Snow",
    }
    rec.update(overrides)
    return rec


def test_parse_row_types_and_blanks():
    row = parse_row(_record())
    assert row.show_id == 1399
    assert row.first_air_date == date(2011, 4, 17)
    assert row.seasons == 8 and row.episodes == 73
    assert row.tmdb_rating == pytest.approx(8.456)
    assert row.backdrop_url is None
    assert row.creators == "David Benioff; D. B. Weiss"
    assert row.genres == ["Sci-Fi & Fantasy", "Drama"]
    assert row.network == "HBO" and row.network_country == "US"


def test_parse_row_pairs_company_columns_by_position():
    row = parse_row(_record())
    assert [(c.name, c.logo, c.countries) for c in row.companies] == [
        ("Revolution Sun Studios", None, "US"),
        ("Television 360", "https://image.tmdb.org/t/p/w500/t360.png", "US"),
    ]


def test_parse_row_keeps_billing_order():
    row = parse_row(_record())
    assert [(m.name, m.character, m.order_num) for m in row.cast] == [
        ("Emilia Clarke", "Daenerys Targaryen", 1),
        ("Kit Harington", "Jon Snow", 3),
    ]
    assert row.cast[1].profile_url is None


@pytest.mark.parametrize("overrides", [{"ID": ""}, {"Seasons": "eight"}, {"First Air Date": "17/04/2011"}])
def test_parse_row_rejects_bad_cells(overrides):
    with pytest.raises(ValueError):
        parse_row(_record(**overrides))


def test_read_csv(tmp_path):
    path = tmp_path / "shows.csv"
    path.write_text("ID,Name,Genres\n1,Alpha,Drama\n2,Beta,\n", encoding="utf-8")
    rows = list(read_csv(path))
    assert [r["Name"] for r in rows] == ["Alpha", "Beta"]


def _results_for_full_row():
    return [
        FakeResult(scalar=None),   # network lookup
        FakeResult(scalar=11),     # network insert
        FakeResult(),              # show upsert
        FakeResult(), FakeResult(),  # genre 1 + link
        FakeResult(), FakeResult(),  # genre 2 + link
        FakeResult(scalar=21),     # company 1 lookup hit
        FakeResult(),              # company 1 link
        FakeResult(scalar=None),   # company 2 lookup miss
        FakeResult(scalar=22),     # company 2 insert
        FakeResult(),              # company 2 link
        FakeResult(scalar=31), FakeResult(),  # actor 1 + character
        FakeResult(scalar=32), FakeResult(),  # actor 3 + character
    ]


async def test_import_rows_writes_everything_in_order():
    db = FakeSession(_results_for_full_row())
    result = await import_rows(db, [_record()])

    assert result == {"processed": 1, "failed": []}
    assert db.commits == 1
    assert db.results == []

    sql = db.sql
    assert "IS NOT DISTINCT FROM" in sql[0]
    assert sql[1].lstrip().startswith("INSERT INTO networks")
    assert "ON CONFLICT (show_id) DO UPDATE" in sql[2]
    assert db.calls[2][1]["network_id"] == 11
    assert db.calls[2][1]["first_air_date"] == date(2011, 4, 17)
    assert "INSERT INTO show_companies" in sql[8]
    assert db.calls[8][1] == {"show_id": 1399, "company_id": 21}
    character_params = [p for s, p in db.calls if "INSERT INTO characters" in s]
    assert [(p["actor_id"], p["order_num"]) for p in character_params] == [(31, 1), (32, 3)]


async def test_import_rows_continues_after_failure():
    minimal = {"ID": "2", "Name": "Second"}
    db = FakeSession([
        FakeResult(scalar=None),
        IntegrityError("INSERT", {}, Exception("boom")),  # first row: network insert fails
        FakeResult(),  # second row: show upsert only
    ])
    result = await import_rows(db, [_record(), {"ID": "", "Name": "No id"}, minimal])

    assert result["processed"] == 1
    assert [n for n, _ in result["failed"]] == [1, 2]
    assert db.rollbacks == 1
    assert db.commits == 1
