from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from utils.name_matching import Feedback


class GuessRequest(BaseModel):
    guess: str = Field(min_length=1, max_length=200)


class GuessEntry(BaseModel):
    text: str
    correct: bool


class DailyPlayerHint(BaseModel):
    id: int
    position: str
    shirt_number: Optional[int] = None
    # Solo se expone cuando el juego terminó; antes la foto sale borrosa por /photo
    photo_url: Optional[str] = None


class Progress(BaseModel):
    attempts: int
    wrong_attempts: int
    max_wrong_attempts: int
    attempts_left: int
    reveal_percent: int
    blur_percent: int
    guesses: list[GuessEntry] = []


class PlayingPlayerOfTheDay(BaseModel):
    status: Literal["playing"] = "playing"
    date_key: str
    player: DailyPlayerHint
    progress: Progress


class WonPlayerOfTheDay(BaseModel):
    status: Literal["won"] = "won"
    date_key: str
    player: DailyPlayerHint
    progress: Progress
    reveal_name: str


class LostPlayerOfTheDay(BaseModel):
    status: Literal["lost"] = "lost"
    date_key: str
    player: DailyPlayerHint
    progress: Progress
    reveal_name: str


PlayerOfTheDayState = Annotated[
    Union[PlayingPlayerOfTheDay, WonPlayerOfTheDay, LostPlayerOfTheDay],
    Field(discriminator="status"),
]


class GuessOutcome(BaseModel):
    correct: bool
    feedback: Feedback
    state: PlayerOfTheDayState


class PlayerSearchResult(BaseModel):
    id: int
    name: str
    position: str
