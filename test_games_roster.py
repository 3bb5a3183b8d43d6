import pytest
from sqlalchemy import text

from conftest import commit_rival_before_flush, make_game_set, make_user
from db import models
from db.database import unit_of_work
from repository import games_repo
from schemas import games_schema as schema
from utils.game_errors import ConcurrentUpdateError, GuessValidationError, InvalidStateError, NotFoundError
from utils.name_matching import NoMatchReason

SLUG = "corinthians-2005"


@pytest.fixture
def game_set(db):
    return make_game_set(db, SLUG, ["Cássio", "Fágner"])


@pytest.fixture
def attempt(db, game_set):
    user = make_user(db, "fiel")
    return games_repo.start_or_resume(db, user.id, SLUG)


def _ids(game_set):
    return {p.display_name: p.id for p in game_set.players}


def test_start_or_resume_returns_same_attempt(db, attempt):
    again = games_repo.start_or_resume(db, attempt.user_id, SLUG)
    assert again.id == attempt.id
    assert again.status == games_repo.PLAYING


def test_unknown_set(db):
    user = make_user(db, "perdido")
    with pytest.raises(NotFoundError):
        games_repo.start_or_resume(db, user.id, "nao-existe")
    with pytest.raises(NotFoundError):
        games_repo.get_game_set_by_slug(db, "nao-existe")


def test_already_guessed_variant_is_not_credited_twice(db, game_set, attempt):
    first = games_repo.submit_guess(db, attempt.id, attempt.user_id, "Cássio")
    assert isinstance(first, schema.RosterMatch)
    assert first.set_player_id == _ids(game_set)["Cássio"]
    assert first.status == "playing"

    second = games_repo.submit_guess(db, attempt.id, attempt.user_id, "Cassio")
    assert isinstance(second, schema.RosterNoMatch)
    assert second.reason == NoMatchReason.ALREADY_GUESSED

    state = games_repo.get_attempt(db, attempt.id, attempt.user_id)
    assert state.guessed_ids == [_ids(game_set)["Cássio"]]
    assert state.wrong_attempts == 0


def test_no_match_counts_as_wrong(db, attempt):
    outcome = games_repo.submit_guess(db, attempt.id, attempt.user_id, "Ronaldo")
    assert outcome.matched is False
    assert outcome.reason == NoMatchReason.NO_MATCH

    state = games_repo.get_attempt(db, attempt.id, attempt.user_id)
    assert state.wrong_attempts == 1
    assert state.guessed_count == 0


def test_last_entry_completes_attempt(db, attempt):
    games_repo.submit_guess(db, attempt.id, attempt.user_id, "cassio")
    last = games_repo.submit_guess(db, attempt.id, attempt.user_id, "FAGNER")
    assert last.status == "completed"

    state = games_repo.get_attempt(db, attempt.id, attempt.user_id)
    assert isinstance(state, schema.CompletedAttempt)
    assert state.guessed_count == state.total == 2
    assert all(p.display_name for p in state.players)

    with pytest.raises(InvalidStateError):
        games_repo.submit_guess(db, attempt.id, attempt.user_id, "Tévez")


def test_alias_reveals_the_display_name(db):
    make_game_set(db, "tevez", ["Tévez", "Nilmar"], aliases={"Tévez": ["Carlitos Tevez"]})
    user = make_user(db, "hermano")
    attempt = games_repo.start_or_resume(db, user.id, "tevez")

    outcome = games_repo.submit_guess(db, attempt.id, user.id, "carlitos tevez")
    assert outcome.matched is True
    assert outcome.display_name == "Tévez"


def test_names_hidden_until_guessed(db, game_set, attempt):
    detail = games_repo.get_game_set_by_slug(db, SLUG)
    assert [p.display_name for p in detail.players] == [None, None]

    games_repo.submit_guess(db, attempt.id, attempt.user_id, "Fágner")
    state = games_repo.get_attempt(db, attempt.id, attempt.user_id)
    revealed = {p.id: p.display_name for p in state.players}
    assert revealed == {_ids(game_set)["Cássio"]: None, _ids(game_set)["Fágner"]: "Fágner"}


def test_empty_text_is_rejected(db, attempt):
    with pytest.raises(GuessValidationError):
        games_repo.submit_guess(db, attempt.id, attempt.user_id, " ' ")
    assert games_repo.get_attempt(db, attempt.id, attempt.user_id).wrong_attempts == 0


def test_reset_keeps_the_roster(db, game_set, attempt):
    games_repo.submit_guess(db, attempt.id, attempt.user_id, "Cássio")
    games_repo.submit_guess(db, attempt.id, attempt.user_id, "Zé Maria")
    before = games_repo.get_attempt(db, attempt.id, attempt.user_id)

    state = games_repo.reset_attempt(db, attempt.id, attempt.user_id)
    assert isinstance(state, schema.PlayingAttempt)
    assert state.wrong_attempts == 0
    assert state.guessed_ids == []
    assert state.id == before.id
    assert [p.id for p in state.players] == [p.id for p in before.players]

    # Se puede volver a acertar lo que ya se había acertado
    again = games_repo.submit_guess(db, attempt.id, attempt.user_id, "Cássio")
    assert again.matched is True


def test_reset_after_completion(db, attempt):
    games_repo.submit_guess(db, attempt.id, attempt.user_id, "Cássio")
    games_repo.submit_guess(db, attempt.id, attempt.user_id, "Fágner")

    state = games_repo.reset_attempt(db, attempt.id, attempt.user_id)
    assert state.status == "playing"
    assert state.guessed_count == 0


def test_abandon_reveals_everything_and_freezes(db, attempt):
    games_repo.submit_guess(db, attempt.id, attempt.user_id, "Cássio")

    state = games_repo.abandon_attempt(db, attempt.id, attempt.user_id)
    assert isinstance(state, schema.AbandonedAttempt)
    assert [p.display_name for p in state.players] == ["Cássio", "Fágner"]
    assert state.guessed_count == 1

    with pytest.raises(InvalidStateError):
        games_repo.submit_guess(db, attempt.id, attempt.user_id, "Fágner")
    with pytest.raises(InvalidStateError):
        games_repo.abandon_attempt(db, attempt.id, attempt.user_id)

    # start_or_resume no reinicia un intento terminado
    assert games_repo.start_or_resume(db, attempt.user_id, SLUG).status == games_repo.ABANDONED


def test_attempt_of_another_user(db, attempt):
    other = make_user(db, "rival")
    with pytest.raises(NotFoundError):
        games_repo.get_attempt(db, attempt.id, other.id)
    with pytest.raises(NotFoundError):
        games_repo.submit_guess(db, attempt.id, other.id, "Cássio")


def test_list_game_sets(db, game_set):
    make_game_set(db, "vazio", [])
    summaries = {s.slug: s.player_count for s in games_repo.list_game_sets(db)}
    assert summaries == {SLUG: 2, "vazio": 0}


def test_set_without_players_cannot_be_played(db):
    make_game_set(db, "vazio", [])
    user = make_user(db, "curioso")
    with pytest.raises(NotFoundError):
        games_repo.start_or_resume(db, user.id, "vazio")
    assert db.query(models.GameAttempt).count() == 0


def test_version_conflict_on_attempt(db, attempt):
    db.execute(
        text("UPDATE game_attempts SET version_id = version_id + 1 WHERE id = :id"),
        {"id": attempt.id},
    )

    with pytest.raises(ConcurrentUpdateError):
        with unit_of_work(db):
            attempt.wrong_attempts = 4

    assert games_repo.get_attempt(db, attempt.id, attempt.user_id).wrong_attempts == 0


def test_concurrent_start_keeps_the_first_attempt(file_sessionmaker):
    with file_sessionmaker() as db:
        game_set = make_game_set(db, SLUG, ["Cássio", "Fágner"])
        user = make_user(db, "fiel")
        set_id, user_id = game_set.id, user.id
        rival = commit_rival_before_flush(db, file_sessionmaker, lambda: models.GameAttempt(
            user_id=user_id, set_id=set_id, status="playing", wrong_attempts=3,
        ))

        attempt = games_repo.start_or_resume(db, user_id, SLUG)

        assert attempt.id == rival["id"]
        assert attempt.wrong_attempts == 3
        assert db.query(models.GameAttempt).count() == 1
