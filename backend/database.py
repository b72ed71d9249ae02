# database.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
import config


def make_engine(url: str = config.DATABASE_URL, echo: bool = config.DEBUG) -> Engine:
    """Engine for ``url``; SQLite connections get foreign keys switched on."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, future=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # an in-memory database lives and dies with its single connection
        kwargs["poolclass"] = StaticPool
    eng = create_engine(url, echo=echo, future=True, **kwargs)

    @event.listens_for(eng, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return eng


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


def init_db(bind=None):
    """Create all tables, including the routine-task unique index."""
    import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
