"""
"Adivinhe o Elenco": name every player of a historical squad.

State machine: playing -> completed | abandoned. reset() brings any attempt
back to playing with an empty history; the squad itself never changes.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db import models
from db.database import unit_of_work
from schemas import games_schema as schema
from utils.game_errors import GuessValidationError, InvalidStateError, NotFoundError
from utils.name_matching import Candidate, NoMatchReason, evaluate_roster_guess, normalize_for_match

logger = logging.getLogger(__name__)

PLAYING, COMPLETED, ABANDONED = "playing", "completed", "abandoned"
TERMINAL = {COMPLETED, ABANDONED}


def list_game_sets(db: Session) -> list[schema.GameSetSummary]:
    rows = (
        db.query(models.GameSet, func.count(models.GameSetPlayer.id))
        .outerjoin(models.GameSetPlayer, models.GameSetPlayer.set_id == models.GameSet.id)
        .group_by(models.GameSet.id)
        .order_by(models.GameSet.created_at, models.GameSet.id)
        .all()
    )
    return [
        schema.GameSetSummary(
            id=s.id,
            slug=s.slug,
            title=s.title,
            season=s.season,
            competition=s.competition,
            club_name=s.club_name,
            player_count=count,
        )
        for s, count in rows
    ]


def _get_set(db: Session, slug: str) -> models.GameSet:
    game_set = db.query(models.GameSet).filter(models.GameSet.slug == slug).first()
    if not game_set:
        raise NotFoundError("Set não encontrado")
    return game_set


def _roster(game_set: models.GameSet, revealed: set[int], reveal_all: bool = False) -> list[schema.RosterEntry]:
    return [
        schema.RosterEntry(
            id=p.id,
            jersey_number=p.jersey_number,
            sort_order=p.sort_order,
            display_name=p.display_name if (reveal_all or p.id in revealed) else None,
            guessed=p.id in revealed,
        )
        for p in game_set.players
    ]


def get_game_set_by_slug(db: Session, slug: str) -> schema.GameSetDetail:
    game_set = _get_set(db, slug)
    return schema.GameSetDetail(
        id=game_set.id,
        slug=game_set.slug,
        title=game_set.title,
        season=game_set.season,
        competition=game_set.competition,
        club_name=game_set.club_name,
        players=_roster(game_set, set()),
    )


def start_or_resume(db: Session, user_id: int, set_slug: str) -> models.GameAttempt:
    """
    One attempt per (user, set). An existing attempt is returned as is,
    whatever its status; replaying a finished set goes through reset().
    """
    game_set = _get_set(db, set_slug)
    if not game_set.players:
        # Sin elenco no hay nada que adivinar ni forma de completar el intento
        raise NotFoundError("Set sem jogadores")
    query = db.query(models.GameAttempt).filter(
        models.GameAttempt.user_id == user_id,
        models.GameAttempt.set_id == game_set.id,
    )
    attempt = query.first()
    if attempt:
        return attempt

    attempt = models.GameAttempt(user_id=user_id, set_id=game_set.id, status=PLAYING, wrong_attempts=0)
    db.add(attempt)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return query.one()
    db.refresh(attempt)
    logger.info(f"User {user_id} started roster game {set_slug}")
    return attempt


def build_attempt_state(attempt: models.GameAttempt):
    game_set = attempt.game_set
    guessed = attempt.guessed_ids
    fields = dict(
        id=attempt.id,
        set_slug=game_set.slug,
        set_title=game_set.title,
        wrong_attempts=attempt.wrong_attempts,
        guessed_count=len(guessed),
        total=len(game_set.players),
        guessed_ids=sorted(guessed),
        # Abandonar revela el elenco completo desde el servidor
        players=_roster(game_set, guessed, reveal_all=attempt.status == ABANDONED),
    )
    if attempt.status == COMPLETED:
        return schema.CompletedAttempt(**fields)
    if attempt.status == ABANDONED:
        return schema.AbandonedAttempt(**fields)
    return schema.PlayingAttempt(**fields)


def _load_attempt(db: Session, attempt_id: int, user_id: int, lock: bool = False) -> models.GameAttempt:
    query = db.query(models.GameAttempt).filter(
        models.GameAttempt.id == attempt_id,
        models.GameAttempt.user_id == user_id,
    )
    if lock:
        query = query.populate_existing().with_for_update()
    attempt = query.first()
    if not attempt:
        raise NotFoundError("Tentativa não encontrada")
    return attempt


def get_attempt(db: Session, attempt_id: int, user_id: int):
    return build_attempt_state(_load_attempt(db, attempt_id, user_id))


def submit_guess(db: Session, attempt_id: int, user_id: int, text: str):
    """
    match           -> the entry is revealed; the last one completes the attempt
    already_guessed -> nothing changes, no penalty
    no_match        -> recorded as a wrong guess
    """
    with unit_of_work(db):
        attempt = _load_attempt(db, attempt_id, user_id, lock=True)
        if attempt.status in TERMINAL:
            raise InvalidStateError("Tentativa não está em progresso")
        if not normalize_for_match(text):
            raise GuessValidationError("Palpite vazio")

        roster = attempt.game_set.players
        candidates = [
            Candidate(
                id=p.id,
                normalized_name=p.normalized_name or normalize_for_match(p.display_name),
                aliases=tuple(p.aliases or ()),
            )
            for p in roster
        ]
        verdict = evaluate_roster_guess(text, candidates, attempt.guessed_ids)

        if verdict.matched:
            attempt.guesses.append(
                models.GameAttemptGuess(set_player_id=verdict.candidate_id, guessed_text=text, is_correct=True)
            )
            attempt.updated_at = datetime.now(timezone.utc)
            if len(attempt.guessed_ids) >= len(roster):
                attempt.status = COMPLETED
                attempt.completed_at = attempt.updated_at
        elif verdict.reason == NoMatchReason.NO_MATCH:
            attempt.guesses.append(
                models.GameAttemptGuess(set_player_id=None, guessed_text=text, is_correct=False)
            )
            attempt.wrong_attempts += 1

    if not verdict.matched:
        return schema.RosterNoMatch(reason=verdict.reason)

    if attempt.status == COMPLETED:
        logger.info(f"User {user_id} completed roster attempt {attempt_id}")
    player = next(p for p in attempt.game_set.players if p.id == verdict.candidate_id)
    return schema.RosterMatch(
        set_player_id=player.id,
        display_name=player.display_name,
        jersey_number=player.jersey_number,
        status=attempt.status,
    )


def reset_attempt(db: Session, attempt_id: int, user_id: int):
    with unit_of_work(db):
        attempt = _load_attempt(db, attempt_id, user_id, lock=True)
        attempt.guesses.clear()
        attempt.status = PLAYING
        attempt.wrong_attempts = 0
        attempt.completed_at = None
        attempt.updated_at = datetime.now(timezone.utc)

    logger.info(f"User {user_id} reset roster attempt {attempt_id}")
    return build_attempt_state(attempt)


def abandon_attempt(db: Session, attempt_id: int, user_id: int):
    with unit_of_work(db):
        attempt = _load_attempt(db, attempt_id, user_id, lock=True)
        if attempt.status in TERMINAL:
            raise InvalidStateError("Tentativa não está em progresso")
        attempt.status = ABANDONED
        attempt.completed_at = datetime.now(timezone.utc)

    logger.info(f"User {user_id} abandoned roster attempt {attempt_id}")
    return build_attempt_state(attempt)
