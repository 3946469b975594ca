# tvcatalog/services/convert.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional


def _iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def split_creators(value: Optional[str]) -> List[str]:
    """Creators are stored as one ';' separated text field."""
    if not value:
        return []
    return [c.strip() for c in value.split(";") if c.strip()]


def to_show_summary(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "show_id": int(row["show_id"]),
        "name": row.get("name"),
        "original_name": row.get("original_name"),
        "first_air_date": _iso(row.get("first_air_date")),
        "status": row.get("status"),
        "seasons": _int(row.get("seasons")),
        "episodes": _int(row.get("episodes")),
        "tmdb_rating": _float(row.get("tmdb_rating")),
        "popularity": _float(row.get("popularity")),
        "poster_url": row.get("poster_url"),
        "overview": row.get("overview"),
    }


def to_show_detail(
    show: Mapping[str, Any],
    *,
    genres: List[Mapping[str, Any]],
    network: Optional[Mapping[str, Any]],
    companies: List[Mapping[str, Any]],
    actors: List[Mapping[str, Any]],
) -> Dict[str, Any]:
    out = to_show_summary(show)
    out.update(
        {
            "last_air_date": _iso(show.get("last_air_date")),
            "vote_count": _int(show.get("vote_count")),
            "creators": split_creators(show.get("creators")),
            "backdrop_url": show.get("backdrop_url"),
            "genres": [{"genre_id": int(g["genre_id"]), "name": g["name"]} for g in genres],
            "network": (
                {
                    "network_id": int(network["network_id"]),
                    "name": network["name"],
                    "logo": network.get("logo"),
                    "country": network.get("country"),
                }
                if network
                else None
            ),
            "companies": [
                {
                    "company_id": int(c["company_id"]),
                    "name": c["name"],
                    "logo": c.get("logo"),
                    "countries": c.get("countries"),
                }
                for c in companies
            ],
            "actors": [
                {
                    "actor_id": int(a["actor_id"]),
                    "name": a["name"],
                    "character": a.get("character"),
                    "profile_url": a.get("profile_url"),
                    "order_num": _int(a.get("order_num")),
                }
                for a in actors
            ],
        }
    )
    return out


def to_actor_summary(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "actor_id": int(row["actor_id"]),
        "name": row["name"],
        "profile_url": row.get("profile_url"),
    }


def to_aggregate(row: Mapping[str, Any], key_fields: List[str]) -> Dict[str, Any]:
    """Shape one stats row: group keys plus rating aggregates."""
    out: Dict[str, Any] = {}
    for k in key_fields:
        v = row.get(k)
        out[k] = int(v) if k in ("id", "year") and v is not None else v
    avg = row.get("avg_rating")
    out.update(
        {
            "show_count": int(row.get("show_count") or 0),
            "avg_rating": round(float(avg), 2) if avg is not None else None,
            "min_rating": _float(row.get("min_rating")),
            "max_rating": _float(row.get("max_rating")),
        }
    )
    return out
