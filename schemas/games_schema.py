from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from utils.name_matching import NoMatchReason


class GameSetSummary(BaseModel):
    id: int
    slug: str
    title: str
    season: Optional[int] = None
    competition: Optional[str] = None
    club_name: str
    player_count: int


class RosterEntry(BaseModel):
    id: int
    jersey_number: Optional[int] = None
    sort_order: int
    # None mientras la entrada no fue adivinada (y el intento no fue abandonado)
    display_name: Optional[str] = None
    guessed: bool = False


class GameSetDetail(BaseModel):
    id: int
    slug: str
    title: str
    season: Optional[int] = None
    competition: Optional[str] = None
    club_name: str
    players: list[RosterEntry]


class StartAttemptRequest(BaseModel):
    set_slug: str = Field(min_length=1)


class RosterGuessRequest(BaseModel):
    text: str = Field(min_length=1, max_length=200)


class _AttemptBase(BaseModel):
    id: int
    set_slug: str
    set_title: str
    wrong_attempts: int
    guessed_count: int
    total: int
    guessed_ids: list[int]
    players: list[RosterEntry]


class PlayingAttempt(_AttemptBase):
    status: Literal["playing"] = "playing"


class CompletedAttempt(_AttemptBase):
    status: Literal["completed"] = "completed"


class AbandonedAttempt(_AttemptBase):
    status: Literal["abandoned"] = "abandoned"


AttemptState = Annotated[
    Union[PlayingAttempt, CompletedAttempt, AbandonedAttempt],
    Field(discriminator="status"),
]


class RosterMatch(BaseModel):
    matched: Literal[True] = True
    set_player_id: int
    display_name: str
    jersey_number: Optional[int] = None
    status: Literal["playing", "completed"]


class RosterNoMatch(BaseModel):
    matched: Literal[False] = False
    reason: NoMatchReason
    status: Literal["playing"] = "playing"


RosterGuessOutcome = Union[RosterMatch, RosterNoMatch]
