"""Create teams, players and games tables

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-19 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "a1c3e5f7b9d2"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    insp = sa.inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    # main.py hace create_all al arrancar; solo creamos lo que falte
    if not _table_exists("teams"):
        op.create_table(
            "teams",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("slug", sa.String(), nullable=False),
        )
        op.create_index("ix_teams_slug", "teams", ["slug"], unique=True)

    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String()),
            sa.Column("username", sa.String()),
            sa.Column("full_name", sa.String(), nullable=True),
            sa.Column("hashed_password", sa.String()),
            sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
            sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=True),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ix_users_username", "users", ["username"], unique=True)

    if not _table_exists("players"):
        op.create_table(
            "players",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("known_name", sa.String(), nullable=True),
            sa.Column("photo_url", sa.String(), nullable=True),
            sa.Column("position", sa.String(), nullable=False, server_default=""),
            sa.Column("shirt_number", sa.Integer(), nullable=True),
        )
        op.create_index("ix_players_team_id", "players", ["team_id"])

    if not _table_exists("game_daily_player"):
        op.create_table(
            "game_daily_player",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("date_key", sa.String(10), nullable=False),
            sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
            sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
            sa.Column("seed_used", sa.BigInteger(), nullable=False),
            sa.Column("photo_bytes", sa.LargeBinary(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True)),
            sa.UniqueConstraint("date_key", "team_id", name="uq_daily_player_date_team"),
        )
        op.create_index("ix_game_daily_player_date_key", "game_daily_player", ["date_key"])

    if not _table_exists("game_daily_guess_progress"):
        op.create_table(
            "game_daily_guess_progress",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("daily_player_id", sa.Integer(),
                      sa.ForeignKey("game_daily_player.id", ondelete="CASCADE"), nullable=False),
            sa.Column("date_key", sa.String(10), nullable=False),
            sa.Column("status", sa.String(16), nullable=False, server_default="playing"),
            sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("wrong_attempts", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("guesses", sa.JSON(), nullable=False),
            sa.Column("version_id", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True)),
            sa.Column("updated_at", sa.DateTime(timezone=True)),
            sa.UniqueConstraint("user_id", "daily_player_id", name="uq_daily_progress_user_daily"),
        )
        op.create_index("ix_game_daily_guess_progress_user_id", "game_daily_guess_progress", ["user_id"])

    if not _table_exists("game_sets"):
        op.create_table(
            "game_sets",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("slug", sa.String(), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("season", sa.Integer(), nullable=True),
            sa.Column("competition", sa.String(), nullable=True),
            sa.Column("club_name", sa.String(), nullable=False),
            sa.Column("metadata", sa.JSON(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True)),
        )
        op.create_index("ix_game_sets_slug", "game_sets", ["slug"], unique=True)

    if not _table_exists("game_set_players"):
        op.create_table(
            "game_set_players",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("set_id", sa.Integer(), sa.ForeignKey("game_sets.id", ondelete="CASCADE"), nullable=False),
            sa.Column("jersey_number", sa.Integer(), nullable=True),
            sa.Column("display_name", sa.String(), nullable=False),
            sa.Column("normalized_name", sa.String(), nullable=False),
            sa.Column("aliases", sa.JSON(), nullable=True),
            sa.Column("role", sa.String(20), server_default="player"),
            sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        )
        op.create_index("ix_game_set_players_set_id", "game_set_players", ["set_id"])
        op.create_index("ix_game_set_players_normalized_name", "game_set_players", ["normalized_name"])

    if not _table_exists("game_attempts"):
        op.create_table(
            "game_attempts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("set_id", sa.Integer(), sa.ForeignKey("game_sets.id", ondelete="CASCADE"), nullable=False),
            sa.Column("status", sa.String(16), nullable=False, server_default="playing"),
            sa.Column("wrong_attempts", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("version_id", sa.Integer(), nullable=False),
            sa.Column("started_at", sa.DateTime(timezone=True)),
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True)),
            sa.UniqueConstraint("user_id", "set_id", name="uq_game_attempts_user_set"),
        )
        op.create_index("ix_game_attempts_user_id", "game_attempts", ["user_id"])
        op.create_index("ix_game_attempts_set_id", "game_attempts", ["set_id"])

    if not _table_exists("game_attempt_guesses"):
        op.create_table(
            "game_attempt_guesses",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("attempt_id", sa.Integer(),
                      sa.ForeignKey("game_attempts.id", ondelete="CASCADE"), nullable=False),
            sa.Column("set_player_id", sa.Integer(),
                      sa.ForeignKey("game_set_players.id", ondelete="CASCADE"), nullable=True),
            sa.Column("guessed_text", sa.String(), nullable=False),
            sa.Column("is_correct", sa.Boolean(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True)),
            sa.UniqueConstraint("attempt_id", "set_player_id", name="uq_game_attempt_guesses_attempt_player"),
        )
        op.create_index("ix_game_attempt_guesses_attempt_id", "game_attempt_guesses", ["attempt_id"])


def downgrade() -> None:
    for table in (
        "game_attempt_guesses",
        "game_attempts",
        "game_set_players",
        "game_sets",
        "game_daily_guess_progress",
        "game_daily_player",
        "players",
        "users",
        "teams",
    ):
        if _table_exists(table):
            op.drop_table(table)
