"""SQLAlchemy database engine, session factory, and connection management.

Provides the shared engine, session factory, and declarative base for all
ORM models. SQLite connections enable WAL mode and foreign keys via an
event listener so target rows can never point at a missing feedback.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from app.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


def configure_sqlite(engine: Engine, wal: bool = True) -> None:
    """Register the per-connection PRAGMAs and transaction handling on a SQLite engine.

    pysqlite defers BEGIN until the first DML statement, so a check-then-write
    sequence would run without holding any lock. Taking over transaction
    control and emitting BEGIN IMMEDIATE makes every transaction acquire the
    database write lock when it starts; a concurrent writer waits for it.
    """

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        # Disable pysqlite's own BEGIN handling; the "begin" hook below emits it
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        if wal:
            cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _get_engine():
    settings = get_settings()
    connect_args = {}
    if settings.DATABASE_URL.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args=connect_args,
        echo=settings.DEBUG,
    )
    if settings.DATABASE_URL.startswith("sqlite"):
        configure_sqlite(engine)
    return engine


engine = _get_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency that yields a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create all tables from ORM metadata (dev convenience)."""
    import app.models  # noqa: F401  (registers the mappers on Base)

    Base.metadata.create_all(bind=engine)
