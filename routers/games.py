from fastapi import APIRouter, Request

from dependencies import CurrentUser, DbSession
from repository import games_repo
from schemas import games_schema
from utils.limiter import limiter

router = APIRouter(
    prefix="/games",
    tags=["Adivinhe o Elenco"]
)


@router.get("/sets", response_model=list[games_schema.GameSetSummary])
def list_sets(db: DbSession):
    return games_repo.list_game_sets(db)


@router.get("/sets/{slug}", response_model=games_schema.GameSetDetail)
def get_set(slug: str, db: DbSession):
    """Roster of a set with every name hidden."""
    return games_repo.get_game_set_by_slug(db, slug)


@router.post("/attempts/start", response_model=games_schema.AttemptState)
def start_attempt(body: games_schema.StartAttemptRequest, db: DbSession, user: CurrentUser):
    attempt = games_repo.start_or_resume(db, user.id, body.set_slug)
    return games_repo.build_attempt_state(attempt)


@router.get("/attempts/{attempt_id}", response_model=games_schema.AttemptState)
def get_attempt(attempt_id: int, db: DbSession, user: CurrentUser):
    return games_repo.get_attempt(db, attempt_id, user.id)


@router.post("/attempts/{attempt_id}/guess", response_model=games_schema.RosterGuessOutcome)
@limiter.limit("30/minute")
def guess(
    request: Request,
    attempt_id: int,
    body: games_schema.RosterGuessRequest,
    db: DbSession,
    user: CurrentUser,
):
    return games_repo.submit_guess(db, attempt_id, user.id, body.text)


@router.post("/attempts/{attempt_id}/reset", response_model=games_schema.AttemptState)
def reset_attempt(attempt_id: int, db: DbSession, user: CurrentUser):
    return games_repo.reset_attempt(db, attempt_id, user.id)


@router.post("/attempts/{attempt_id}/abandon", response_model=games_schema.AttemptState)
def abandon_attempt(attempt_id: int, db: DbSession, user: CurrentUser):
    """Gives up: the attempt is frozen and the whole roster is revealed."""
    return games_repo.abandon_attempt(db, attempt_id, user.id)
