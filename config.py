# config.py
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr, field_validator, model_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Obligatorios
    SECRET_KEY: SecretStr
    DATABASE_URL: str

    # Entorno y CORS
    ENV: Literal["development", "production", "test"] = "development"
    ALLOWED_ORIGINS: list[str] = []
    LOG_LEVEL: str = "INFO"

    # Auth
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: float = 2880

    RATE_LIMIT_ENABLED: bool = True

    # Jogador do dia
    GUESS_PLAYER_MAX_WRONG_ATTEMPTS: int = 10
    GUESS_CLOSE_SIMILARITY: float = 0.5
    GUESS_CLOSE_MAX_DISTANCE: int = 2
    GUESS_CLOSE_MIN_TOKEN_LENGTH: int = 3
    GUESS_MAX_LENGTH: int = 80
    PHOTO_FETCH_TIMEOUT_SECONDS: float = 5

    @field_validator("DATABASE_URL")
    @classmethod
    def normalize_db_url(cls, v: str) -> str:
        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql+psycopg2://", 1)
        return v

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        # Permite "a,b,c" en envs además de JSON
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v or []

    @field_validator("GUESS_PLAYER_MAX_WRONG_ATTEMPTS")
    @classmethod
    def positive_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("GUESS_PLAYER_MAX_WRONG_ATTEMPTS debe ser >= 1")
        return v

    @model_validator(mode="after")
    def validate_cors(self):
        if self.ENV == "production":
            if not self.ALLOWED_ORIGINS:
                raise ValueError("ALLOWED_ORIGINS vacío en producción.")
            if "*" in self.ALLOWED_ORIGINS:
                raise ValueError("CORS wildcard (*) prohibido en producción.")
        return self

@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
