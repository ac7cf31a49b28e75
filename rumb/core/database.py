from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from pathlib import Path

from rumb.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # make sure the folder of a file database exists, FastAPI uses the session across threads
        _, _, database = url.partition(":///")
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """Create all tables"""
    from rumb import models  # noqa: F401  registers the tables on Base
    Base.metadata.create_all(bind=engine)


# db session per request
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
