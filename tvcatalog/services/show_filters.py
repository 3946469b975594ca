# tvcatalog/services/show_filters.py
"""
Dynamic show search.

Turns a sparse set of user filters into a parameterised SELECT over
``tv_show`` plus a COUNT query over the same joins and WHERE clause.

Filters combine as AND across dimensions and OR inside a list filter
(``genres=Comedy,Drama`` means Comedy OR Drama). Every literal is a bound
parameter named ``:p1, :p2, ...`` in the order predicates were added; LIMIT
and OFFSET take the two positions after the last filter parameter.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import reduce
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tvcatalog.services.convert import to_show_summary

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50
MAX_LIMIT = 100
MIN_RATING, MAX_RATING = 0.0, 10.0
# OFFSET is bound as a Postgres BIGINT
MAX_OFFSET = 2**63 - 1
PARAM_PREFIX = "p"

SUMMARY_COLUMNS = (
    "s.show_id",
    "s.name",
    "s.original_name",
    "s.first_air_date",
    "s.status",
    "s.seasons",
    "s.episodes",
    "s.tmdb_rating",
    "s.popularity",
    "s.poster_url",
    "s.overview",
)

# Join clauses are fixed strings so identical ones compare equal
JOIN_CHARACTERS = "JOIN characters c ON c.show_id = s.show_id"
JOIN_ACTORS = "JOIN actors a ON a.actor_id = c.actor_id"
JOIN_SHOW_GENRES = "JOIN show_genres sg ON sg.show_id = s.show_id"
JOIN_GENRES = "JOIN genres g ON g.genre_id = sg.genre_id"
JOIN_NETWORKS = "JOIN networks n ON n.network_id = s.network_id"
JOIN_SHOW_COMPANIES = "JOIN show_companies sc ON sc.show_id = s.show_id"
JOIN_COMPANIES = "JOIN company co ON co.company_id = sc.company_id"

_ESCAPE = " ESCAPE '\\'"


# ---------------------------------------------------------
# ERRORS
# ---------------------------------------------------------

class InvalidFilterInput(ValueError):
    """A filter or pagination value could not be used; `field` names it."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class QueryExecutionFailed(RuntimeError):
    """The database rejected or failed to run a generated query."""


# ---------------------------------------------------------
# FILTER INPUT
# ---------------------------------------------------------

@dataclass(frozen=True)
class ShowFilters:
    actors: Tuple[str, ...] = ()
    genres: Tuple[str, ...] = ()
    network: Optional[str] = None
    studios: Optional[str] = None
    status: Optional[str] = None
    min_rating: Optional[float] = None
    max_rating: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    country: Optional[str] = None
    creators: Tuple[str, ...] = ()
    name: Optional[str] = None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def split_list(value: Any) -> Tuple[str, ...]:
    """Comma separated string (or sequence) -> trimmed, non-empty items."""
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else list(value)
    return tuple(s for s in (str(i).strip() for i in items) if s)


def _parse_rating(field_name: str, value: Any) -> Optional[float]:
    if isinstance(value, bool):
        raise InvalidFilterInput(field_name, "must be a number")
    s = _clean(value)
    if s is None:
        return None
    try:
        out = float(s)
    except ValueError:
        raise InvalidFilterInput(field_name, "must be a number") from None
    if not math.isfinite(out) or not MIN_RATING <= out <= MAX_RATING:
        raise InvalidFilterInput(field_name, f"must be between {MIN_RATING:g} and {MAX_RATING:g}")
    return out


def _parse_date(field_name: str, value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = _clean(value)
    if s is None:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        raise InvalidFilterInput(field_name, "must be a valid ISO 8601 date") from None


def _parse_int(field_name: str, value: Any, default: int) -> int:
    if isinstance(value, bool):
        raise InvalidFilterInput(field_name, "must be an integer")
    if isinstance(value, int):
        return value
    s = _clean(value)
    if s is None:
        return default
    try:
        return int(s)
    except ValueError:
        raise InvalidFilterInput(field_name, "must be an integer") from None


def parse_filters(raw: Mapping[str, Any]) -> ShowFilters:
    """
    Validate raw query values (camelCase keys) into ShowFilters.
    Blank strings count as "not provided"; nothing is defaulted.
    """
    filters = ShowFilters(
        actors=split_list(raw.get("actors")),
        genres=split_list(raw.get("genres")),
        network=_clean(raw.get("network")),
        studios=_clean(raw.get("studios")),
        status=_clean(raw.get("status")),
        min_rating=_parse_rating("minRating", raw.get("minRating")),
        max_rating=_parse_rating("maxRating", raw.get("maxRating")),
        start_date=_parse_date("startDate", raw.get("startDate")),
        end_date=_parse_date("endDate", raw.get("endDate")),
        country=_clean(raw.get("country")),
        creators=split_list(raw.get("creators")),
        name=_clean(raw.get("name")),
    )
    if (
        filters.min_rating is not None
        and filters.max_rating is not None
        and filters.min_rating > filters.max_rating
    ):
        raise InvalidFilterInput("minRating", "must not be greater than maxRating")
    return filters


def clamp_pagination(page: int, limit: int) -> Tuple[int, int]:
    page, limit = max(page, 1), min(max(limit, 1), MAX_LIMIT)
    if (page - 1) * limit > MAX_OFFSET:
        raise InvalidFilterInput("page", "is too large")
    return page, limit


def parse_pagination(page: Any = None, limit: Any = None) -> Tuple[int, int]:
    return clamp_pagination(
        _parse_int("page", page, DEFAULT_PAGE),
        _parse_int("limit", limit, DEFAULT_LIMIT),
    )


# ---------------------------------------------------------
# PREDICATES
# ---------------------------------------------------------

def escape_like(value: str) -> str:
    """Escape \\, % and _ so user text matches literally inside LIKE."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(value: str) -> str:
    return f"%{escape_like(value)}%"


def _any_ilike(column: str) -> Callable[[Sequence[str]], str]:
    def render(placeholders: Sequence[str]) -> str:
        return "(" + " OR ".join(f"{column} ILIKE {ph}{_ESCAPE}" for ph in placeholders) + ")"
    return render


def _compare(column: str, op: str) -> Callable[[Sequence[str]], str]:
    def render(placeholders: Sequence[str]) -> str:
        return f"{column} {op} {placeholders[0]}"
    return render


def _name_or_original(placeholders: Sequence[str]) -> str:
    ph = placeholders[0]
    return f"(s.name ILIKE {ph}{_ESCAPE} OR s.original_name ILIKE {ph}{_ESCAPE})"


@dataclass(frozen=True)
class Predicate:
    """
    One filter dimension. `render` receives one placeholder per value and
    returns the condition text; it never sees the values themselves.
    """
    field: str
    values: Tuple[Any, ...]
    render: Callable[[Sequence[str]], str]
    joins: Tuple[str, ...] = ()
    echo: Any = None

    @property
    def applies(self) -> bool:
        return len(self.values) > 0


def predicates_for(f: ShowFilters) -> Tuple[Predicate, ...]:
    """Ordered predicate descriptors; the order fixes parameter numbering."""

    def opt(value: Any) -> Tuple[Any, ...]:
        return () if value is None else (value,)

    actors, genres, creators = split_list(f.actors), split_list(f.genres), split_list(f.creators)
    network, studios, status = _clean(f.network), _clean(f.studios), _clean(f.status)
    country, name = _clean(f.country), _clean(f.name)

    return (
        Predicate(
            "actors",
            tuple(_contains(a) for a in actors),
            _any_ilike("a.name"),
            joins=(JOIN_CHARACTERS, JOIN_ACTORS),
            echo=list(actors),
        ),
        Predicate(
            "genres",
            tuple(escape_like(g) for g in genres),
            _any_ilike("g.name"),
            joins=(JOIN_SHOW_GENRES, JOIN_GENRES),
            echo=list(genres),
        ),
        Predicate(
            "network",
            opt(network and _contains(network)),
            _any_ilike("n.name"),
            joins=(JOIN_NETWORKS,),
            echo=network,
        ),
        Predicate(
            "studios",
            opt(studios and _contains(studios)),
            _any_ilike("co.name"),
            joins=(JOIN_SHOW_COMPANIES, JOIN_COMPANIES),
            echo=studios,
        ),
        Predicate(
            "status",
            opt(status and escape_like(status)),
            _any_ilike("s.status"),
            echo=status,
        ),
        Predicate("minRating", opt(f.min_rating), _compare("s.tmdb_rating", ">="), echo=f.min_rating),
        Predicate("maxRating", opt(f.max_rating), _compare("s.tmdb_rating", "<="), echo=f.max_rating),
        Predicate(
            "startDate",
            opt(f.start_date),
            _compare("s.first_air_date", ">="),
            echo=f.start_date.isoformat() if f.start_date else None,
        ),
        Predicate(
            "endDate",
            opt(f.end_date),
            _compare("s.last_air_date", "<="),
            echo=f.end_date.isoformat() if f.end_date else None,
        ),
        Predicate(
            "country",
            opt(country and _contains(country)),
            _any_ilike("s.network_country"),
            echo=country,
        ),
        Predicate(
            "creators",
            tuple(_contains(c) for c in creators),
            _any_ilike("s.creators"),
            echo=list(creators),
        ),
        Predicate("name", opt(name and _contains(name)), _name_or_original, echo=name),
    )


# ---------------------------------------------------------
# BUILDER STATE
# ---------------------------------------------------------

def placeholder(index: int) -> str:
    return f":{PARAM_PREFIX}{index}"


@dataclass(frozen=True)
class QueryState:
    joins: Tuple[str, ...] = ()
    conditions: Tuple[str, ...] = ()
    params: Tuple[Any, ...] = ()
    applied: Tuple[Predicate, ...] = ()

    def add(self, predicate: Predicate) -> "QueryState":
        if not predicate.applies:
            return self
        start = len(self.params) + 1
        placeholders = [placeholder(start + i) for i in range(len(predicate.values))]
        joins = list(self.joins)
        for j in predicate.joins:
            if j not in joins:
                joins.append(j)
        return QueryState(
            joins=tuple(joins),
            conditions=self.conditions + (predicate.render(placeholders),),
            params=self.params + tuple(predicate.values),
            applied=self.applied + (predicate,),
        )

    def _from_where(self) -> str:
        parts = ["FROM tv_show s", *self.joins]
        if self.conditions:
            parts.append("WHERE " + " AND ".join(self.conditions))
        return " ".join(parts)

    def data_query(self, page: int, limit: int) -> Tuple[str, Tuple[Any, ...]]:
        n = len(self.params)
        sql = (
            f"SELECT DISTINCT {', '.join(SUMMARY_COLUMNS)} {self._from_where()} "
            f"ORDER BY s.show_id ASC LIMIT {placeholder(n + 1)} OFFSET {placeholder(n + 2)}"
        )
        return sql, self.params + (limit, (page - 1) * limit)

    def count_query(self) -> Tuple[str, Tuple[Any, ...]]:
        return f"SELECT COUNT(DISTINCT s.show_id) AS total {self._from_where()}", self.params

    def echo(self) -> Dict[str, Any]:
        return {p.field: p.echo for p in self.applied}


@dataclass(frozen=True)
class ShowSearchQuery:
    sql: str
    params: Tuple[Any, ...]
    count_sql: str
    count_params: Tuple[Any, ...]
    page: int
    limit: int
    filters: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def bind(params: Sequence[Any]) -> Dict[str, Any]:
        """Positional values -> {"p1": ..., "p2": ...} for sqlalchemy.text()."""
        return {f"{PARAM_PREFIX}{i}": v for i, v in enumerate(params, start=1)}


def _check_types(f: ShowFilters, page: Any, limit: Any) -> None:
    for name, value in (("minRating", f.min_rating), ("maxRating", f.max_rating)):
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise InvalidFilterInput(name, "must be a number")
    for name, value in (("startDate", f.start_date), ("endDate", f.end_date)):
        if value is not None and not isinstance(value, date):
            raise InvalidFilterInput(name, "must be a date")
    for name, value in (("page", page), ("limit", limit)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidFilterInput(name, "must be an integer")


def build_show_search(
    filters: ShowFilters,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
) -> ShowSearchQuery:
    _check_types(filters, page, limit)
    page, limit = clamp_pagination(page, limit)

    state = reduce(QueryState.add, predicates_for(filters), QueryState())
    sql, params = state.data_query(page, limit)
    count_sql, count_params = state.count_query()
    assert params[:-2] == count_params, "count and data queries disagree on filter parameters"

    return ShowSearchQuery(
        sql=sql,
        params=params,
        count_sql=count_sql,
        count_params=count_params,
        page=page,
        limit=limit,
        filters=state.echo(),
    )


# ---------------------------------------------------------
# EXECUTION
# ---------------------------------------------------------

async def search_shows(
    db: AsyncSession,
    filters: ShowFilters,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """
    Run the count and page queries and return
    {count, page, limit, filters, data}.
    """
    query = build_show_search(filters, page, limit)
    try:
        total = (
            await db.execute(text(query.count_sql), query.bind(query.count_params))
        ).scalar_one()
        rows = (
            await db.execute(text(query.sql), query.bind(query.params))
        ).mappings().all()
    except (SQLAlchemyError, OSError) as e:
        logger.exception("Show search failed (filters=%s)", query.filters)
        raise QueryExecutionFailed(f"show search failed: {e!r}") from e

    data: List[Dict[str, Any]] = [to_show_summary(r) for r in rows]
    return {
        "count": int(total or 0),
        "page": query.page,
        "limit": query.limit,
        "filters": query.filters,
        "data": data,
    }
