"""
SQLAlchemy engine, sessions and table creation

Shorts reference climates and styles with ON DELETE SET NULL and scenes
reference shorts with ON DELETE CASCADE. SQLite only honours those when
foreign keys are switched on per connection, which make_engine does.
"""

from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config import settings

logger = structlog.get_logger()

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, echo: bool = False) -> Engine:
    """Engine for `url`; SQLite connections are shared across threads and enforce foreign keys"""
    is_sqlite = url.startswith("sqlite")
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        echo=echo,
        pool_pre_ping=True,
    )
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = None):
    """Create the climates, styles, shorts and short_scenes tables if missing"""
    import models  # noqa: F401  (registers the tables on Base.metadata)

    bind = bind or engine
    try:
        Base.metadata.create_all(bind=bind)
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise
    logger.info(
        "database_initialized",
        url=bind.url.render_as_string(hide_password=True),
        tables=sorted(Base.metadata.tables),
    )


@contextmanager
def get_db_context() -> Iterator[Session]:
    """Session for work outside a request, such as background media generation"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request, closed when the response is sent"""
    with get_db_context() as db:
        yield db
