from sqlalchemy import (
    BigInteger, Boolean, Column, ForeignKey, Integer, String, LargeBinary, DateTime, JSON, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from db import database


def _utcnow():
    return datetime.now(timezone.utc)


class Team(database.Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)

    players = relationship("Player", back_populates="team")


class User(database.Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, index=True)
    username = Column(String, unique=True, index=True)
    full_name = Column(String, nullable=True)
    hashed_password = Column(String)
    is_active = Column(Boolean, default=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)

    team = relationship("Team")


class Player(database.Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    known_name = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    position = Column(String, nullable=False, default="")
    shirt_number = Column(Integer, nullable=True)

    team = relationship("Team", back_populates="players")

    @property
    def display_name(self) -> str:
        return self.known_name or self.name


# --- Jogador do dia ---

class DailyPlayer(database.Base):
    __tablename__ = "game_daily_player"
    __table_args__ = (UniqueConstraint("date_key", "team_id", name="uq_daily_player_date_team"),)

    id = Column(Integer, primary_key=True)
    date_key = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD (UTC)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    seed_used = Column(BigInteger, nullable=False)
    photo_bytes = Column(LargeBinary, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    player = relationship("Player")


class DailyGuessProgress(database.Base):
    __tablename__ = "game_daily_guess_progress"
    __table_args__ = (UniqueConstraint("user_id", "daily_player_id", name="uq_daily_progress_user_daily"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    daily_player_id = Column(Integer, ForeignKey("game_daily_player.id", ondelete="CASCADE"), nullable=False)
    date_key = Column(String(10), nullable=False)
    status = Column(String(16), nullable=False, default="playing")
    attempts = Column(Integer, nullable=False, default=0)
    wrong_attempts = Column(Integer, nullable=False, default=0)
    # [{text, normalized, correct, feedback}] en orden de envío
    guesses = Column(JSON, nullable=False, default=list)
    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    daily = relationship("DailyPlayer")

    __mapper_args__ = {"version_id_col": version_id}


# --- Adivinhe o elenco ---

class GameSet(database.Base):
    __tablename__ = "game_sets"

    id = Column(Integer, primary_key=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    season = Column(Integer, nullable=True)
    competition = Column(String, nullable=True)
    club_name = Column(String, nullable=False)
    # "metadata" está reservado por SQLAlchemy en los modelos declarativos
    extra = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    players = relationship(
        "GameSetPlayer",
        back_populates="game_set",
        order_by="GameSetPlayer.sort_order",
        cascade="all, delete-orphan",
    )


class GameSetPlayer(database.Base):
    __tablename__ = "game_set_players"

    id = Column(Integer, primary_key=True)
    set_id = Column(Integer, ForeignKey("game_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    jersey_number = Column(Integer, nullable=True)
    display_name = Column(String, nullable=False)
    normalized_name = Column(String, nullable=False, index=True)
    aliases = Column(JSON, nullable=True)
    role = Column(String(20), default="player")
    sort_order = Column(Integer, nullable=False, default=0)

    game_set = relationship("GameSet", back_populates="players")


class GameAttempt(database.Base):
    __tablename__ = "game_attempts"
    __table_args__ = (UniqueConstraint("user_id", "set_id", name="uq_game_attempts_user_set"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    set_id = Column(Integer, ForeignKey("game_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="playing")
    wrong_attempts = Column(Integer, nullable=False, default=0)
    version_id = Column(Integer, nullable=False)
    started_at = Column(DateTime(timezone=True), default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    game_set = relationship("GameSet")
    guesses = relationship(
        "GameAttemptGuess",
        back_populates="attempt",
        order_by="GameAttemptGuess.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def guessed_ids(self) -> set[int]:
        return {g.set_player_id for g in self.guesses if g.set_player_id is not None}


class GameAttemptGuess(database.Base):
    __tablename__ = "game_attempt_guesses"
    __table_args__ = (
        UniqueConstraint("attempt_id", "set_player_id", name="uq_game_attempt_guesses_attempt_player"),
    )

    id = Column(Integer, primary_key=True)
    attempt_id = Column(Integer, ForeignKey("game_attempts.id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL en los intentos fallidos
    set_player_id = Column(Integer, ForeignKey("game_set_players.id", ondelete="CASCADE"), nullable=True)
    guessed_text = Column(String, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    attempt = relationship("GameAttempt", back_populates="guesses")
