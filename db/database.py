from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from config import settings
from utils.game_errors import ConcurrentUpdateError


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}
    # SQLite en memoria: una sola conexión compartida o cada sesión ve una base vacía
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@contextmanager
def unit_of_work(db):
    """
    Commits once at the end of the block or rolls everything back.
    A version conflict on a versioned row becomes ConcurrentUpdateError.
    """
    try:
        yield db
        db.commit()
    except StaleDataError:
        db.rollback()
        raise ConcurrentUpdateError("Tentativa atualizada por outra requisição, tente novamente")
    except Exception:
        db.rollback()
        raise
