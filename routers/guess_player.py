from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from dependencies import CurrentUser, DbSession, get_current_team_id
from repository import guess_player_repo
from schemas import guess_player_schema
from utils.limiter import limiter

router = APIRouter(
    prefix="/games",
    tags=["Jogador do Dia"]
)


@router.get("/player-of-the-day", response_model=guess_player_schema.PlayerOfTheDayState)
def get_player_of_the_day(db: DbSession, user: CurrentUser):
    """Starts or resumes today's attempt for the caller's team."""
    return guess_player_repo.get_player_of_the_day(db, user)


@router.post("/player-of-the-day/guess", response_model=guess_player_schema.GuessOutcome)
@limiter.limit("30/minute")
def guess_player_of_the_day(
    request: Request,
    guess: guess_player_schema.GuessRequest,
    db: DbSession,
    user: CurrentUser,
):
    return guess_player_repo.submit_guess(db, user, guess.guess)


@router.get("/player-of-the-day/photo")
@limiter.limit("60/minute")
def get_player_of_the_day_photo(request: Request, db: DbSession, user: CurrentUser):
    content = guess_player_repo.get_photo(db, user)
    return Response(content=content, media_type="image/png", headers={"Cache-Control": "private, no-store"})


@router.get("/players/search", response_model=list[guess_player_schema.PlayerSearchResult])
def search_players(
    db: DbSession,
    team_id: Annotated[int, Depends(get_current_team_id)],
    q: str = Query("", max_length=50),
    limit: int = Query(10, ge=1, le=25),
):
    return guess_player_repo.search_players(db, team_id, q, limit)
