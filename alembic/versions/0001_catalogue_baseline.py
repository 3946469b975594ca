"""catalogue baseline

Revision ID: 0001_catalogue_baseline
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_catalogue_baseline"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "networks",
        sa.Column("network_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("logo", sa.String(500), nullable=True),
        sa.Column("countries", sa.String(255), nullable=True),
        sa.UniqueConstraint("name", "logo", "countries", name="uq_networks_identity"),
    )
    op.create_index("ix_networks_name", "networks", ["name"])

    op.create_table(
        "tv_show",
        sa.Column("show_id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(500), nullable=True),
        sa.Column("original_name", sa.String(500), nullable=True),
        sa.Column("first_air_date", sa.Date(), nullable=True),
        sa.Column("last_air_date", sa.Date(), nullable=True),
        sa.Column("seasons", sa.Integer(), nullable=True),
        sa.Column("episodes", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(64), nullable=True),
        sa.Column("overview", sa.Text(), nullable=True),
        sa.Column("popularity", sa.Float(), nullable=True),
        sa.Column("tmdb_rating", sa.Float(), nullable=True),
        sa.Column("vote_count", sa.Integer(), nullable=True),
        sa.Column("creators", sa.Text(), nullable=True),
        sa.Column("poster_url", sa.String(500), nullable=True),
        sa.Column("backdrop_url", sa.String(500), nullable=True),
        sa.Column(
            "network_id",
            sa.Integer(),
            sa.ForeignKey("networks.network_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("network_country", sa.String(255), nullable=True),
    )
    op.create_index("ix_tv_show_name", "tv_show", ["name"])
    op.create_index("ix_tv_show_first_air_date", "tv_show", ["first_air_date"])
    op.create_index("ix_tv_show_tmdb_rating", "tv_show", ["tmdb_rating"])
    op.create_index("ix_tv_show_network_id", "tv_show", ["network_id"])

    op.create_table(
        "genres",
        sa.Column("genre_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
    )
    op.create_table(
        "show_genres",
        sa.Column("show_id", sa.Integer(), sa.ForeignKey("tv_show.show_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("genre_id", sa.Integer(), sa.ForeignKey("genres.genre_id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "company",
        sa.Column("company_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("logo", sa.String(500), nullable=True),
        sa.Column("countries", sa.String(255), nullable=True),
        sa.UniqueConstraint("name", "logo", "countries", name="uq_company_identity"),
    )
    op.create_index("ix_company_name", "company", ["name"])
    op.create_table(
        "show_companies",
        sa.Column("show_id", sa.Integer(), sa.ForeignKey("tv_show.show_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("company.company_id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "actors",
        sa.Column("actor_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("profile_url", sa.String(500), nullable=True),
    )
    op.create_table(
        "characters",
        sa.Column("character_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.Integer(), sa.ForeignKey("actors.actor_id", ondelete="CASCADE"), nullable=False),
        sa.Column("show_id", sa.Integer(), sa.ForeignKey("tv_show.show_id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(500), nullable=True),
        sa.Column("order_num", sa.Integer(), nullable=True),
        sa.UniqueConstraint("actor_id", "show_id", name="uq_characters_actor_show"),
    )
    op.create_index("ix_characters_actor_id", "characters", ["actor_id"])
    op.create_index("ix_characters_show_id", "characters", ["show_id"])

    op.create_table(
        "api_keys",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("api_key", sa.String(36), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("request_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_api_keys_api_key", "api_keys", ["api_key"])


def downgrade() -> None:
    op.drop_index("ix_api_keys_api_key", table_name="api_keys")
    op.drop_table("api_keys")
    op.drop_index("ix_characters_show_id", table_name="characters")
    op.drop_index("ix_characters_actor_id", table_name="characters")
    op.drop_table("characters")
    op.drop_table("actors")
    op.drop_table("show_companies")
    op.drop_index("ix_company_name", table_name="company")
    op.drop_table("company")
    op.drop_table("show_genres")
    op.drop_table("genres")
    op.drop_index("ix_tv_show_network_id", table_name="tv_show")
    op.drop_index("ix_tv_show_tmdb_rating", table_name="tv_show")
    op.drop_index("ix_tv_show_first_air_date", table_name="tv_show")
    op.drop_index("ix_tv_show_name", table_name="tv_show")
    op.drop_table("tv_show")
    op.drop_index("ix_networks_name", table_name="networks")
    op.drop_table("networks")
