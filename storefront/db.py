from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base


def make_engine(url: str) -> Engine:
    """
    Create the engine for the embedded store.

    For SQLite the driver's own transaction handling is switched off and the
    BEGIN is emitted from the "begin" event instead, so that SAVEPOINTs work and
    a unit of work can ask for the write lock up front with
    ``session.connection(execution_options={"sqlite_begin": "BEGIN IMMEDIATE"})``.
    """
    is_sqlite = url.startswith("sqlite")
    in_memory = is_sqlite and (":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"))
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    kwargs = {"poolclass": StaticPool} if in_memory else {}
    engine = create_engine(url, pool_pre_ping=True, future=True, connect_args=connect_args, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_conn, _record):
            dbapi_conn.isolation_level = None
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            if not in_memory:
                cur.execute("PRAGMA journal_mode=WAL")
            cur.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql(conn.get_execution_options().get("sqlite_begin", "BEGIN"))

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db(engine: Engine) -> None:
    """Create tables (idempotent). Called once at application startup."""
    Base.metadata.create_all(bind=engine)


def get_session(request: Request):
    """
    FastAPI dependency: yields a DB session, commits on success, rolls back on error.
    """
    s: Session = request.app.state.session_factory()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
