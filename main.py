from typing import Annotated
from datetime import timedelta, datetime, timezone
import logging

from fastapi import FastAPI, HTTPException, Depends, status, Request
from fastapi.security import OAuth2PasswordRequestForm
from fastapi.responses import RedirectResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette import status as starlette_status

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from sqlalchemy.orm import Session
from config import settings
from passlib.context import CryptContext

from dependencies import get_db
from repository import users_repo
from schemas import user_schema
from routers import games, guess_player, health, users
from db import database, models
from utils.game_errors import GameError
from utils.limiter import limiter

import jwt

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

database.Base.metadata.create_all(bind=database.engine)

app = FastAPI(title="Jogos do Torcedor")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# === CORS estricto según entorno ===
_local_dev = [
    "http://127.0.0.1:5173", "http://localhost:5173",
    "http://localhost:5000", "http://localhost:3000"
]
allow_origins = (
    settings.ALLOWED_ORIGINS
    if settings.ENV == "production"
    else list({*settings.ALLOWED_ORIGINS, *_local_dev})
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Length", "Content-Type"],
    max_age=600,
)

app.include_router(guess_player.router)
app.include_router(games.router)
app.include_router(users.user_router)
app.include_router(health.router)

# === Healthcheck simple ===
@app.get("/health", tags=["meta"])
def health_check():
    return {"status": "ok"}

# === Handlers de error coherentes ===
@app.exception_handler(StarletteHTTPException)
async def http_exc_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.status_code,
            "message": exc.detail or "HTTP error",
            "path": str(request.url.path),
        },
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(GameError)
async def game_exc_handler(request: Request, exc: GameError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.status_code,
            "message": exc.message,
            "kind": type(exc).__name__,
            "path": str(request.url.path),
        },
    )

@app.exception_handler(RequestValidationError)
async def validation_exc_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "error": 422,
            "message": "Parâmetros inválidos",
            "details": jsonable_errors(exc),
            "path": str(request.url.path),
        },
    )

@app.exception_handler(Exception)
async def unhandled_exc_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=starlette_status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": 500,
            "message": "Ocorreu um erro inesperado",
            "path": str(request.url.path),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # exc.errors() puede traer el ValueError original en "ctx", que no es serializable
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


SECRET_KEY = settings.SECRET_KEY.get_secret_value()
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
ALGORITHM = settings.ALGORITHM

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def authenticate_user(username: str, password: str, db: Session):
    user = users_repo.get_user_by_username_or_email(db, username)
    if not user:
        return False
    if not verify_password(password, user.hashed_password):
        return False
    return user


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


@app.post("/register", response_model=user_schema.UserRegisterResponse, tags=["auth"])
def register_user(user_data: user_schema.UserCreate, db: Session = Depends(get_db)):
    if users_repo.get_user_by_username(db, user_data.username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")
    if users_repo.check_user_exist(db, user_data.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    try:
        new_user = users_repo.create_user(db, user_data, get_password_hash(user_data.password))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    logger.info(f"Registered user {new_user.id}")
    return new_user


@app.post("/token", response_model=user_schema.Token, tags=["auth"])
def issue_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Session = Depends(get_db)
):
    user = authenticate_user(form_data.username, form_data.password, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário ou senha incorretos",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": user.id},
        expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse("/docs")
