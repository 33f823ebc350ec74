from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from config import DATABASE_URL


class Base(DeclarativeBase):
    pass


engine = create_engine(DATABASE_URL, future=True, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def make_session_factory(url: Optional[str] = None):
    """Session factory for a dataset other than the configured one."""
    if not url:
        return SessionLocal
    other = create_engine(url, future=True, pool_pre_ping=True)
    return sessionmaker(bind=other, autoflush=False, autocommit=False, future=True)


@contextmanager
def get_db(factory=None):
    db = (factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
