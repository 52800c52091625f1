from contextlib import contextmanager
import os
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/app.db")


def _ensure_sqlite_parent(url: str) -> None:
    # Ensure sqlite file parent directory exists to avoid 'unable to open database file'
    if url.startswith("sqlite:///") and ":memory:" not in url:
        db_path = url.split("sqlite:///")[-1]
        Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _build(url: str):
    _ensure_sqlite_parent(url)
    eng = create_engine(url, future=True)
    return eng, sessionmaker(bind=eng, autoflush=False, expire_on_commit=False, future=True)


engine = None
SessionLocal = None


def init_engine(url: str, create_tables: bool = True):
    """Rebind the module-level engine, e.g. from app config or in tests."""
    global engine, SessionLocal
    if engine is not None:
        engine.dispose()
    engine, SessionLocal = _build(url)
    if create_tables:
        from ..models.base import Base
        from ..models import kv_entry, product  # noqa: F401  register tables

        Base.metadata.create_all(engine)
    return engine


@contextmanager
def get_session():
    if SessionLocal is None:
        init_engine(DATABASE_URL)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
