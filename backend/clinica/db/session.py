import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from clinica.core.config import get_database_url, get_sql_echo
from clinica.core.exceptions import ConstraintError, StoreError

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# Internal lazy globals
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None
_notifier = None
_database_url: Optional[str] = None


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    SQLite connections get ``PRAGMA foreign_keys=ON`` so cascades and FK
    checks are enforced; in-memory SQLite shares one connection so every
    session sees the same database.
    """
    url = make_url(database_url)
    is_sqlite = url.drivername.startswith("sqlite")

    if is_sqlite:
        if url.database in (None, "", ":memory:"):
            engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(
                database_url, echo=echo, connect_args={"check_same_thread": False}
            )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    logger.debug(
        "SQLAlchemy engine created",
        extra={"context": {"dialect": engine.dialect.name, "database": url.database}},
    )
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def build_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )


def get_engine() -> Engine:
    """Return a cached SQLAlchemy engine, creating it from DATABASE_URL on
    first call. If DATABASE_URL changes (tests), the engine is rebuilt."""
    global _engine, _SessionLocal, _notifier, _database_url
    database_url = get_database_url()
    if _engine is None or _database_url != database_url:
        if _engine is not None:
            _engine.dispose()
        _engine = build_engine(database_url, echo=get_sql_echo())
        _SessionLocal = None
        _notifier = None
        _database_url = database_url
    return _engine


def get_sessionmaker() -> sessionmaker:
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = build_sessionmaker(engine)
    return _SessionLocal


def get_change_notifier():
    """Return the process change notifier attached to ``get_sessionmaker()``."""
    global _notifier
    factory = get_sessionmaker()
    if _notifier is None:
        from clinica.db.live import ChangeNotifier

        _notifier = ChangeNotifier(factory)
    return _notifier


def SessionLocal() -> Session:
    """Return a new Session from the lazy sessionmaker (live queries attached)."""
    get_change_notifier()
    return get_sessionmaker()()


def get_db() -> Iterator[Session]:
    """Yield a session and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_transaction(db: Session) -> Iterator[Session]:
    """Run the enclosed writes as one all-or-nothing unit.

    Commits on success. On failure everything since the last commit is rolled
    back; store errors are translated into ``ConstraintError``/``StoreError``
    carrying the underlying cause text, anything else is re-raised.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        cause = str(getattr(e, "orig", e))
        logger.warning(
            "Store constraint violated", extra={"context": {"error": cause}}
        )
        raise ConstraintError(cause, cause=e) from e
    except SQLAlchemyError as e:
        db.rollback()
        cause = str(getattr(e, "orig", None) or e)
        logger.error(
            "Store operation failed", extra={"context": {"error": cause}}, exc_info=True
        )
        raise StoreError(cause, cause=e) from e
    except BaseException:
        db.rollback()
        raise


def create_tables(engine: Optional[Engine] = None) -> None:
    """Create all tables from the ORM models."""
    from clinica.db import base  # noqa: F401  (populate Base.metadata)

    Base.metadata.create_all(bind=engine or get_engine())


def reset_engine() -> None:
    """Dispose the cached engine so the next call rebuilds it (used by tests)."""
    global _engine, _SessionLocal, _notifier, _database_url
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
    _notifier = None
    _database_url = None


def database_url_for_logs(database_url: Optional[str] = None) -> str:
    """Mask any password in the URL before it reaches the logs."""
    url = make_url(database_url or os.getenv("DATABASE_URL") or get_database_url())
    return url.render_as_string(hide_password=True)
