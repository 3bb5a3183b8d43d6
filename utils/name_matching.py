# -*- coding: utf-8 -*-
"""
Guess evaluator.

Pure functions: no DB, no clock. Given the same normalized input and the same
target/roster they always return the same verdict.
"""
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from rapidfuzz.distance import Levenshtein

_STRIP_CHARS = re.compile(r"[.,\-']")
_SPACES = re.compile(r"\s+")


class Feedback(str, Enum):
    CORRECT = "correct"
    CLOSE = "close"
    WRONG = "wrong"


class NoMatchReason(str, Enum):
    NO_MATCH = "no_match"
    ALREADY_GUESSED = "already_guessed"


@dataclass(frozen=True)
class ClosePolicy:
    """Thresholds for the "close" feedback tier. A close guess never wins."""
    similarity: float = 0.5
    max_distance: int = 2
    min_token_length: int = 3


@dataclass(frozen=True)
class Candidate:
    id: int
    normalized_name: str
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class RosterVerdict:
    matched: bool
    candidate_id: Optional[int] = None
    reason: Optional[NoMatchReason] = None


def normalize_for_match(text: str) -> str:
    """
    "  João  Victor " -> "joao victor", "Ji-Paraná" -> "jiparana".

    Only used for comparisons; the original text is what gets stored in the
    guess history.
    """
    decomposed = unicodedata.normalize("NFD", text or "")
    without_marks = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    folded = without_marks.casefold().strip()
    folded = _STRIP_CHARS.sub("", folded)
    return _SPACES.sub(" ", folded).strip()


def levenshtein(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """1.0 = identical, 0.0 = nothing in common (normalised by the longer string)."""
    return Levenshtein.normalized_similarity(a, b)


def _is_close(guess: str, target: str, policy: ClosePolicy) -> bool:
    tokens = target.split(" ")
    if len(tokens) > 1 and len(guess) >= policy.min_token_length and guess in tokens:
        return True
    # En nombres cortos ("jo") una o dos letras cualquiera quedarían a distancia <= 2
    if levenshtein(guess, target) <= min(policy.max_distance, len(target) // 3):
        return True
    return similarity(guess, target) >= policy.similarity


def evaluate_single_guess(
    raw_guess: str,
    target_names: Iterable[str],
    policy: ClosePolicy = ClosePolicy(),
) -> Feedback:
    """
    Tiered verdict against one target (which may be known by several names,
    e.g. full name and nickname):

    1. exact normalized equality with any name -> CORRECT
    2. the guess is one token of a name, within ``policy.max_distance`` edits
       (at most a third of the name length),
       or ``similarity >= policy.similarity`` -> CLOSE
    3. anything else -> WRONG
    """
    guess = normalize_for_match(raw_guess)
    names = [n for n in (normalize_for_match(t) for t in target_names) if n]
    if not guess or not names:
        return Feedback.WRONG

    if guess in names:
        return Feedback.CORRECT
    if any(_is_close(guess, name, policy) for name in names):
        return Feedback.CLOSE
    return Feedback.WRONG


def _matches(guess: str, candidate: Candidate) -> bool:
    if candidate.normalized_name == guess:
        return True
    return any(normalize_for_match(alias) == guess for alias in candidate.aliases)


def evaluate_roster_guess(
    raw_guess: str,
    candidates: Sequence[Candidate],
    guessed_ids: Iterable[int],
) -> RosterVerdict:
    """
    Exact match of the normalized guess against each candidate's normalized
    name and aliases. Already revealed candidates are checked first so a repeat
    is reported as ``already_guessed``; otherwise the first remaining candidate
    (in roster order) that matches wins.
    """
    guess = normalize_for_match(raw_guess)
    if not guess:
        return RosterVerdict(matched=False, reason=NoMatchReason.NO_MATCH)

    revealed = set(guessed_ids)
    for candidate in candidates:
        if candidate.id in revealed and _matches(guess, candidate):
            return RosterVerdict(matched=False, reason=NoMatchReason.ALREADY_GUESSED)

    for candidate in candidates:
        if candidate.id not in revealed and _matches(guess, candidate):
            return RosterVerdict(matched=True, candidate_id=candidate.id)

    return RosterVerdict(matched=False, reason=NoMatchReason.NO_MATCH)
