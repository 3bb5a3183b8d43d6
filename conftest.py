import os

# Antes de importar config: base en memoria y sin rate limit
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from db import database, models  # noqa: E402


@pytest.fixture
def db():
    database.Base.metadata.create_all(bind=database.engine)
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()
        database.Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def file_sessionmaker(tmp_path):
    """Sessions on separate connections, to reproduce two requests racing on the same row."""
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    database.Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


def commit_rival_before_flush(session, session_factory, make_row) -> dict:
    """
    Right before ``session`` flushes, another session commits ``make_row()``.
    The returned dict gets the rival row id once it is committed.
    """
    rival = {}

    def _commit_rival(flushing_session, flush_context, instances):
        other = session_factory()
        try:
            row = make_row()
            other.add(row)
            other.commit()
            rival["id"] = row.id
        finally:
            other.close()

    event.listen(session, "before_flush", _commit_rival, once=True)
    return rival


def make_team(db, slug: str, players: list[dict]) -> models.Team:
    team = models.Team(name=slug.title(), slug=slug)
    db.add(team)
    db.flush()
    for p in players:
        db.add(models.Player(team_id=team.id, position=p.pop("position", "ST"), **p))
    db.commit()
    db.refresh(team)
    return team


def make_user(db, username: str, team: models.Team | None = None) -> models.User:
    user = models.User(
        username=username,
        email=f"{username}@example.com",
        hashed_password="x",
        is_active=True,
        team_id=team.id if team else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_game_set(db, slug: str, names: list[str], aliases: dict | None = None) -> models.GameSet:
    from utils.name_matching import normalize_for_match

    aliases = aliases or {}
    game_set = models.GameSet(slug=slug, title=slug.replace("-", " ").title(), club_name="Corinthians", season=2005)
    for order, name in enumerate(names, start=1):
        game_set.players.append(models.GameSetPlayer(
            jersey_number=order,
            display_name=name,
            normalized_name=normalize_for_match(name),
            aliases=aliases.get(name),
            sort_order=order,
        ))
    db.add(game_set)
    db.commit()
    db.refresh(game_set)
    return game_set


@pytest.fixture
def gabigol_team(db):
    return make_team(db, "flamengo", [{"name": "Gabriel Barbosa", "shirt_number": 10}])


@pytest.fixture
def player(db, gabigol_team):
    return make_user(db, "torcedor", gabigol_team)
