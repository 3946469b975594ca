# tvcatalog/db_models.py
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


# ----------------------------
# Core catalogue
# ----------------------------
class Network(Base):
    """
    Broadcast network. The same name can appear once per (logo, countries),
    so name alone is not an identity.
    """
    __tablename__ = "networks"

    network_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    logo = Column(String(500), nullable=True)
    countries = Column(String(255), nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "logo", "countries", name="uq_networks_identity"),
    )


class Show(Base):
    """
    TV show record keyed by its TMDB id.
    NOTE: Primary key is show_id (not 'id').
    """
    __tablename__ = "tv_show"

    show_id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(500), nullable=True, index=True)
    original_name = Column(String(500), nullable=True)
    first_air_date = Column(Date, nullable=True, index=True)
    last_air_date = Column(Date, nullable=True)
    seasons = Column(Integer, nullable=True)
    episodes = Column(Integer, nullable=True)
    status = Column(String(64), nullable=True)
    overview = Column(Text, nullable=True)
    popularity = Column(Float, nullable=True)
    tmdb_rating = Column(Float, nullable=True, index=True)
    vote_count = Column(Integer, nullable=True)
    # ';' separated list of creator names
    creators = Column(Text, nullable=True)
    poster_url = Column(String(500), nullable=True)
    backdrop_url = Column(String(500), nullable=True)

    network_id = Column(
        Integer,
        ForeignKey("networks.network_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    network_country = Column(String(255), nullable=True)


class Genre(Base):
    __tablename__ = "genres"

    genre_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)


class ShowGenre(Base):
    __tablename__ = "show_genres"

    show_id = Column(Integer, ForeignKey("tv_show.show_id", ondelete="CASCADE"), primary_key=True)
    genre_id = Column(Integer, ForeignKey("genres.genre_id", ondelete="CASCADE"), primary_key=True)


class Company(Base):
    """
    Production company (studio). Identity is (name, logo, countries).
    """
    __tablename__ = "company"

    company_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    logo = Column(String(500), nullable=True)
    countries = Column(String(255), nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "logo", "countries", name="uq_company_identity"),
    )


class ShowCompany(Base):
    __tablename__ = "show_companies"

    show_id = Column(Integer, ForeignKey("tv_show.show_id", ondelete="CASCADE"), primary_key=True)
    company_id = Column(Integer, ForeignKey("company.company_id", ondelete="CASCADE"), primary_key=True)


class Actor(Base):
    __tablename__ = "actors"

    actor_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    profile_url = Column(String(500), nullable=True)


class Character(Base):
    """
    Actor <-> show association carrying the role name and billing order.
    """
    __tablename__ = "characters"

    character_id = Column(Integer, primary_key=True, autoincrement=True)
    actor_id = Column(Integer, ForeignKey("actors.actor_id", ondelete="CASCADE"), nullable=False, index=True)
    show_id = Column(Integer, ForeignKey("tv_show.show_id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(500), nullable=True)
    order_num = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("actor_id", "show_id", name="uq_characters_actor_show"),
    )


# ----------------------------
# API access
# ----------------------------
class ApiKey(Base):
    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, autoincrement=True)
    api_key = Column(String(36), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, server_default="true")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    request_count = Column(Integer, nullable=False, server_default="0")


__all__ = [
    "Base",
    "Network",
    "Show",
    "Genre",
    "ShowGenre",
    "Company",
    "ShowCompany",
    "Actor",
    "Character",
    "ApiKey",
]
