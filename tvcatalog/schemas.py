# tvcatalog/schemas.py
from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, EmailStr, ConfigDict


# =========================
# Shows
# =========================

class ShowSummary(BaseModel):
    show_id: int
    name: Optional[str] = None
    original_name: Optional[str] = None
    first_air_date: Optional[str] = None
    status: Optional[str] = None
    seasons: Optional[int] = None
    episodes: Optional[int] = None
    tmdb_rating: Optional[float] = None
    popularity: Optional[float] = None
    poster_url: Optional[str] = None
    overview: Optional[str] = None


class GenreOut(BaseModel):
    genre_id: int
    name: str


class NetworkOut(BaseModel):
    network_id: int
    name: str
    logo: Optional[str] = None
    country: Optional[str] = None


class CompanyOut(BaseModel):
    company_id: int
    name: str
    logo: Optional[str] = None
    countries: Optional[str] = None


class CastMember(BaseModel):
    actor_id: int
    name: str
    character: Optional[str] = None
    profile_url: Optional[str] = None
    order_num: Optional[int] = None


class ShowDetail(ShowSummary):
    last_air_date: Optional[str] = None
    vote_count: Optional[int] = None
    creators: List[str] = []
    backdrop_url: Optional[str] = None
    genres: List[GenreOut] = []
    network: Optional[NetworkOut] = None
    companies: List[CompanyOut] = []
    actors: List[CastMember] = []


class ShowsResponse(BaseModel):
    count: int
    page: int
    limit: int
    data: List[ShowSummary]


class ShowsFilterResponse(ShowsResponse):
    """`filters` echoes only the filters that were applied."""
    filters: Dict[str, Any] = {}


# =========================
# Actors / Genres
# =========================

class ActorSummary(BaseModel):
    actor_id: int
    name: str
    profile_url: Optional[str] = None


class ActorsResponse(BaseModel):
    count: int
    page: int
    limit: int
    data: List[ActorSummary]


class ActorShow(BaseModel):
    show_id: int
    name: Optional[str] = None
    character: Optional[str] = None


class ActorShowsResponse(BaseModel):
    actor: str
    count: int
    shows: List[ActorShow]


class GenreCount(GenreOut):
    show_count: int = 0


class GenresResponse(BaseModel):
    count: int
    data: List[GenreCount]


# =========================
# API keys
# =========================

class ApiKeyIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr


class ApiKeyOut(BaseModel):
    api_key: str
    name: str
    created_at: str
    usage: str

    model_config = ConfigDict(from_attributes=True)
