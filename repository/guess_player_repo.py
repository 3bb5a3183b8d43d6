"""
"Jogador do Dia": one target player per team and UTC day, ten wrong guesses max.

State machine: playing -> won | lost. Both terminal states freeze the attempt.
"""
import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

import requests
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from db import models
from db.database import unit_of_work
from schemas import guess_player_schema as schema
from utils import reveal
from utils.game_errors import GuessValidationError, InvalidStateError, NotFoundError
from utils.image_processing import obscure_player_photo
from utils.name_matching import ClosePolicy, Feedback, evaluate_single_guess, normalize_for_match

logger = logging.getLogger(__name__)

PLAYING, WON, LOST = "playing", "won", "lost"
TERMINAL = {WON, LOST}


def get_today_date_key() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def date_key_to_seed(key: str) -> int:
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big")


def close_policy() -> ClosePolicy:
    return ClosePolicy(
        similarity=settings.GUESS_CLOSE_SIMILARITY,
        max_distance=settings.GUESS_CLOSE_MAX_DISTANCE,
        min_token_length=settings.GUESS_CLOSE_MIN_TOKEN_LENGTH,
    )


def _fetch_photo(url: Optional[str]) -> Optional[bytes]:
    if not url:
        return None
    try:
        response = requests.get(url, timeout=settings.PHOTO_FETCH_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.content
    except requests.RequestException as e:
        # Sin foto el juego sigue siendo jugable (pistas: posición y número)
        logger.warning(f"Could not download player photo from {url}: {e}")
        return None


def pick_daily_player_id(db: Session, date_key: str, team_id: int) -> tuple[int, int]:
    """
    Deterministic choice for (date_key, team_id): sha256 seed modulo the team
    players ordered by id, preferring players that have a photo.
    Returns (player_id, seed).
    """
    base = db.query(models.Player.id).filter(models.Player.team_id == team_id)
    candidates = base.filter(models.Player.photo_url.isnot(None)).order_by(models.Player.id).all()
    if not candidates:
        candidates = base.order_by(models.Player.id).all()
    if not candidates:
        raise NotFoundError("Nenhum jogador do dia disponível para este time")

    seed = date_key_to_seed(f"{date_key}:{team_id}")
    return candidates[seed % len(candidates)][0], seed


def get_or_create_daily_player(db: Session, date_key: str, team_id: int) -> models.DailyPlayer:
    existing = db.query(models.DailyPlayer).filter(
        models.DailyPlayer.date_key == date_key,
        models.DailyPlayer.team_id == team_id,
    ).first()
    if existing:
        return existing

    player_id, seed = pick_daily_player_id(db, date_key, team_id)
    player = db.get(models.Player, player_id)

    daily = models.DailyPlayer(
        date_key=date_key,
        team_id=team_id,
        player_id=player_id,
        seed_used=seed,
        photo_bytes=_fetch_photo(player.photo_url),
    )
    db.add(daily)
    try:
        db.commit()
    except IntegrityError:
        # Otro request lo creó primero: usamos el suyo
        db.rollback()
        return db.query(models.DailyPlayer).filter(
            models.DailyPlayer.date_key == date_key,
            models.DailyPlayer.team_id == team_id,
        ).one()
    db.refresh(daily)
    logger.info(f"Daily player for team {team_id} on {date_key}: player {player_id}")
    return daily


def require_team(user: models.User) -> int:
    if user.team_id is None:
        raise NotFoundError("Escolha um time para jogar o Jogador do Dia")
    return user.team_id


def start_or_resume(db: Session, user: models.User, date_key: Optional[str] = None) -> models.DailyGuessProgress:
    """
    Returns the caller's attempt for today's challenge, creating it in
    ``playing`` on first call. Existing attempts come back untouched.
    """
    date_key = date_key or get_today_date_key()
    daily = get_or_create_daily_player(db, date_key, require_team(user))

    query = db.query(models.DailyGuessProgress).filter(
        models.DailyGuessProgress.user_id == user.id,
        models.DailyGuessProgress.daily_player_id == daily.id,
    )
    progress = query.first()
    if progress:
        return progress

    progress = models.DailyGuessProgress(
        user_id=user.id,
        daily_player_id=daily.id,
        date_key=date_key,
        status=PLAYING,
        attempts=0,
        wrong_attempts=0,
        guesses=[],
    )
    db.add(progress)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return query.one()
    db.refresh(progress)
    return progress


def build_state(progress: models.DailyGuessProgress):
    max_wrong = settings.GUESS_PLAYER_MAX_WRONG_ATTEMPTS
    finished = progress.status in TERMINAL
    player = progress.daily.player

    hint = schema.DailyPlayerHint(
        id=player.id,
        position=player.position or "",
        shirt_number=player.shirt_number,
        photo_url=player.photo_url if finished else None,
    )
    payload = schema.Progress(
        attempts=progress.attempts,
        wrong_attempts=progress.wrong_attempts,
        max_wrong_attempts=max_wrong,
        attempts_left=0 if finished else reveal.attempts_left(progress.wrong_attempts, max_wrong),
        reveal_percent=reveal.reveal_percent(progress.wrong_attempts, max_wrong, finished=finished),
        blur_percent=reveal.blur_percent(progress.wrong_attempts, max_wrong, finished=finished),
        guesses=[schema.GuessEntry(text=g["text"], correct=g["correct"]) for g in progress.guesses or []],
    )

    if progress.status == WON:
        return schema.WonPlayerOfTheDay(
            date_key=progress.date_key, player=hint, progress=payload, reveal_name=player.display_name
        )
    if progress.status == LOST:
        return schema.LostPlayerOfTheDay(
            date_key=progress.date_key, player=hint, progress=payload, reveal_name=player.display_name
        )
    return schema.PlayingPlayerOfTheDay(date_key=progress.date_key, player=hint, progress=payload)


def get_player_of_the_day(db: Session, user: models.User, date_key: Optional[str] = None):
    return build_state(start_or_resume(db, user, date_key))


def _lock_progress(db: Session, progress_id: int, user_id: int) -> models.DailyGuessProgress:
    progress = (
        db.query(models.DailyGuessProgress)
        .filter(
            models.DailyGuessProgress.id == progress_id,
            models.DailyGuessProgress.user_id == user_id,
        )
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not progress:
        raise NotFoundError("Tentativa não encontrada")
    return progress


def apply_guess(db: Session, progress_id: int, user_id: int, raw_text: str) -> schema.GuessOutcome:
    """
    Evaluates one guess and commits the resulting transition, or nothing.

    correct -> won. close / wrong -> one more wrong attempt; the last allowed
    one moves the attempt to lost and reveals the name.
    """
    with unit_of_work(db):
        progress = _lock_progress(db, progress_id, user_id)
        if progress.status in TERMINAL:
            raise InvalidStateError("O jogo de hoje já terminou")

        normalized = normalize_for_match(raw_text)
        if not normalized:
            raise GuessValidationError("Palpite vazio")
        if len(normalized) > settings.GUESS_MAX_LENGTH:
            raise GuessValidationError("Palpite muito longo")

        player = progress.daily.player
        feedback = evaluate_single_guess(raw_text, [player.display_name, player.name], close_policy())
        correct = feedback == Feedback.CORRECT

        progress.guesses = [
            *(progress.guesses or []),
            {"text": raw_text, "normalized": normalized, "correct": correct, "feedback": feedback.value},
        ]
        progress.attempts += 1

        max_wrong = settings.GUESS_PLAYER_MAX_WRONG_ATTEMPTS
        if correct:
            progress.status = WON
        else:
            progress.wrong_attempts = min(progress.wrong_attempts + 1, max_wrong)
            if progress.wrong_attempts >= max_wrong:
                progress.status = LOST

    db.refresh(progress)
    if progress.status in TERMINAL:
        logger.info(f"User {user_id} {progress.status} player of the day {progress.date_key} "
                    f"after {progress.attempts} guesses")
    return schema.GuessOutcome(correct=correct, feedback=feedback, state=build_state(progress))


def submit_guess(db: Session, user: models.User, raw_text: str, date_key: Optional[str] = None) -> schema.GuessOutcome:
    progress = start_or_resume(db, user, date_key)
    return apply_guess(db, progress.id, user.id, raw_text)


def _ensure_photo(db: Session, daily: models.DailyPlayer) -> Optional[bytes]:
    """Retries the download when it failed at creation time and the player does have a photo."""
    if daily.photo_bytes or not daily.player.photo_url:
        return daily.photo_bytes

    content = _fetch_photo(daily.player.photo_url)
    if content:
        daily.photo_bytes = content
        db.commit()
        logger.info(f"Photo of daily player {daily.id} downloaded on retry")
    return content


def get_photo(db: Session, user: models.User, date_key: Optional[str] = None) -> bytes:
    progress = start_or_resume(db, user, date_key)
    daily = progress.daily
    photo = _ensure_photo(db, daily)
    if not photo:
        raise NotFoundError("Foto do jogador indisponível")

    level = reveal.reveal_percent(
        progress.wrong_attempts,
        settings.GUESS_PLAYER_MAX_WRONG_ATTEMPTS,
        finished=progress.status in TERMINAL,
    )
    return obscure_player_photo(photo, level, seed_key=f"{daily.date_key}:{daily.team_id}")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_players(db: Session, team_id: int, query: str, limit: int = 10) -> list[schema.PlayerSearchResult]:
    term = query.strip()
    if len(term) < 2:
        return []

    # % y _ del usuario se buscan literalmente
    pattern = f"%{_escape_like(term)}%"
    rows = (
        db.query(models.Player)
        .filter(
            models.Player.team_id == team_id,
            or_(
                models.Player.name.ilike(pattern, escape="\\"),
                models.Player.known_name.ilike(pattern, escape="\\"),
            ),
        )
        .order_by(models.Player.name)
        .limit(limit)
        .all()
    )
    return [
        schema.PlayerSearchResult(id=p.id, name=p.display_name, position=p.position or "")
        for p in rows
    ]
