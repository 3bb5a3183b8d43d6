from typing import Annotated, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jwt.exceptions import InvalidTokenError
import jwt

from db import database, models
from config import settings
from repository.guess_player_repo import require_team

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

SECRET_KEY = settings.SECRET_KEY.get_secret_value()
ALGORITHM = settings.ALGORITHM


def get_db():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


DbSession = Annotated[Session, Depends(get_db)]


def _user_id_from_token(user_token: str) -> Optional[int]:
    # ExpiredSignatureError, DecodeError, etc. heredan de InvalidTokenError
    try:
        payload = jwt.decode(user_token, SECRET_KEY, algorithms=[ALGORITHM])
    except InvalidTokenError:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


async def get_current_user(
    user_token: Annotated[str, Depends(oauth2_scheme)],
    db: DbSession,
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = _user_id_from_token(user_token)
    if user_id is None:
        raise credentials_exception

    user = db.get(models.User, user_id)
    if not user:
        raise credentials_exception
    return user


async def get_current_active_user(
    current_user: Annotated[models.User, Depends(get_current_user)]
):
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


CurrentUser = Annotated[models.User, Depends(get_current_active_user)]


def get_current_team_id(current_user: CurrentUser) -> int:
    """Team whose player of the day the caller plays; NotFoundError (404) if none was chosen."""
    return require_team(current_user)
