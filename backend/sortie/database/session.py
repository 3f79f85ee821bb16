from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sortie.core.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # importing the models registers their tables on Base.metadata
    from sortie import models  # noqa: F401
    from sortie.database.base import Base

    Base.metadata.create_all(bind=bind or engine)


def get_session_factory():
    """For long-lived handlers that open short sessions themselves."""
    return SessionLocal
