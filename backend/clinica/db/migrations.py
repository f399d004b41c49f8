"""
Database migration functions.

Numbered, forward-only, additive schema steps tracked by the single-row
``schema_version`` table. Each step checks what already exists before
touching the schema, so it is safe to run more than once, and it runs in its
own transaction together with the version bump.
"""

import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from clinica.db.session import create_tables, get_engine

logger = logging.getLogger(__name__)


def _pk(conn: Connection) -> str:
    if conn.dialect.name == "postgresql":
        return "SERIAL PRIMARY KEY"
    return "INTEGER PRIMARY KEY AUTOINCREMENT"


def _has_table(conn: Connection, table: str) -> bool:
    return inspect(conn).has_table(table)


def _has_column(conn: Connection, table: str, column: str) -> bool:
    return any(col["name"] == column for col in inspect(conn).get_columns(table))


def _migration_001(conn: Connection) -> None:
    """users (without role), doctors and appointments."""
    pk = _pk(conn)
    conn.execute(
        text(
            f"""
        CREATE TABLE IF NOT EXISTS users (
            id {pk},
            name VARCHAR(100) NOT NULL,
            email VARCHAR(100) NOT NULL,
            password_hash VARCHAR(255) NOT NULL,
            dni VARCHAR(20) NOT NULL
        )
    """
        )
    )
    conn.execute(
        text(
            f"""
        CREATE TABLE IF NOT EXISTS doctors (
            id {pk},
            name VARCHAR(100) NOT NULL,
            specialty VARCHAR(100) NOT NULL,
            schedule VARCHAR(100) NOT NULL DEFAULT ''
        )
    """
        )
    )
    conn.execute(
        text(
            f"""
        CREATE TABLE IF NOT EXISTS appointments (
            id {pk},
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            doctor_id INTEGER NOT NULL REFERENCES doctors(id) ON DELETE CASCADE,
            date DATE NOT NULL,
            time TIME NOT NULL,
            is_cancelled BOOLEAN NOT NULL DEFAULT FALSE
        )
    """
        )
    )
    conn.execute(
        text("CREATE INDEX IF NOT EXISTS ix_appointments_user_id ON appointments (user_id)")
    )
    conn.execute(
        text(
            "CREATE INDEX IF NOT EXISTS ix_appointments_doctor_id ON appointments (doctor_id)"
        )
    )


def _migration_002(conn: Connection) -> None:
    """users.role, existing rows become regular users."""
    if _has_column(conn, "users", "role"):
        logger.debug("Migration 002 already applied - users.role exists")
        return
    conn.execute(
        text("ALTER TABLE users ADD COLUMN role VARCHAR(20) NOT NULL DEFAULT 'user'")
    )


def _migration_003(conn: Connection) -> None:
    """pharmacy_products."""
    conn.execute(
        text(
            f"""
        CREATE TABLE IF NOT EXISTS pharmacy_products (
            id {_pk(conn)},
            name VARCHAR(100) NOT NULL,
            description VARCHAR(255) NOT NULL DEFAULT '',
            price NUMERIC(10, 2) NOT NULL,
            stock INTEGER NOT NULL DEFAULT 0,
            image_url VARCHAR(255)
        )
    """
        )
    )


def _migration_004(conn: Connection) -> None:
    """purchases and purchase_items."""
    conn.execute(
        text(
            f"""
        CREATE TABLE IF NOT EXISTS purchases (
            id {_pk(conn)},
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            purchase_date TIMESTAMP NOT NULL,
            total_amount NUMERIC(10, 2) NOT NULL,
            paid_amount NUMERIC(10, 2) NOT NULL,
            change_amount NUMERIC(10, 2) NOT NULL
        )
    """
        )
    )
    conn.execute(
        text(
            """
        CREATE TABLE IF NOT EXISTS purchase_items (
            purchase_id INTEGER NOT NULL REFERENCES purchases(id) ON DELETE CASCADE,
            product_id INTEGER NOT NULL REFERENCES pharmacy_products(id) ON DELETE CASCADE,
            product_name VARCHAR(100) NOT NULL,
            product_description VARCHAR(255) NOT NULL,
            product_price NUMERIC(10, 2) NOT NULL,
            quantity INTEGER NOT NULL,
            PRIMARY KEY (purchase_id, product_id)
        )
    """
        )
    )
    conn.execute(
        text("CREATE INDEX IF NOT EXISTS ix_purchases_user_id ON purchases (user_id)")
    )
    conn.execute(
        text(
            "CREATE INDEX IF NOT EXISTS ix_purchase_items_purchase_id "
            "ON purchase_items (purchase_id)"
        )
    )
    conn.execute(
        text(
            "CREATE INDEX IF NOT EXISTS ix_purchase_items_product_id "
            "ON purchase_items (product_id)"
        )
    )


def _migration_005(conn: Connection) -> None:
    """Unique email: registration relies on it as the business key."""
    conn.execute(text("CREATE UNIQUE INDEX IF NOT EXISTS ix_users_email ON users (email)"))


MIGRATIONS: List[Tuple[int, str, Callable[[Connection], None]]] = [
    (1, "create users, doctors and appointments", _migration_001),
    (2, "add users.role", _migration_002),
    (3, "create pharmacy_products", _migration_003),
    (4, "create purchases and purchase_items", _migration_004),
    (5, "unique index on users.email", _migration_005),
]

LATEST_VERSION = MIGRATIONS[-1][0]


def _ensure_version_table(conn: Connection) -> None:
    conn.execute(
        text(
            """
        CREATE TABLE IF NOT EXISTS schema_version (
            id INTEGER PRIMARY KEY,
            version INTEGER NOT NULL
        )
    """
        )
    )


def _read_version(conn: Connection) -> int:
    if not _has_table(conn, "schema_version"):
        return 0
    version = conn.execute(text("SELECT version FROM schema_version WHERE id = 1")).scalar()
    return int(version or 0)


def _write_version(conn: Connection, version: int) -> None:
    _ensure_version_table(conn)
    updated = conn.execute(
        text("UPDATE schema_version SET version = :version WHERE id = 1"),
        {"version": version},
    )
    if updated.rowcount == 0:
        conn.execute(
            text("INSERT INTO schema_version (id, version) VALUES (1, :version)"),
            {"version": version},
        )


def get_schema_version(engine: Optional[Engine] = None) -> int:
    """Return the applied migration number (0 for an empty store)."""
    engine = engine or get_engine()
    with engine.connect() as conn:
        return _read_version(conn)


def apply_migrations(engine: Optional[Engine] = None) -> List[int]:
    """
    Apply every migration newer than the stored version, in order.

    Returns the applied version numbers; an up-to-date store returns an empty
    list and is left untouched. A failing step is rolled back with its version
    bump and the error propagates, later steps are not attempted.
    """
    engine = engine or get_engine()
    dialect_name = engine.dialect.name
    with engine.connect() as conn:
        current = _read_version(conn)

    applied: List[int] = []
    for version, description, step in MIGRATIONS:
        if version <= current:
            continue

        logger.info(
            f"Applying Migration {version:03d} - {description}",
            extra={"context": {"dialect": dialect_name, "from_version": current}},
        )
        try:
            with engine.begin() as conn:
                step(conn)
                _write_version(conn, version)
        except Exception as e:
            logger.error(
                f"Failed to apply Migration {version:03d}",
                extra={"context": {"error": str(e)}},
                exc_info=True,
            )
            raise

        logger.info(
            f"Migration {version:03d} applied successfully",
            extra={"context": {"dialect": dialect_name, "version": version}},
        )
        current = version
        applied.append(version)

    if not applied:
        logger.debug(
            "Schema already up to date",
            extra={"context": {"version": current}},
        )
    return applied


def stamp_latest(engine: Optional[Engine] = None) -> None:
    engine = engine or get_engine()
    with engine.begin() as conn:
        _write_version(conn, LATEST_VERSION)


def is_new_store(engine: Optional[Engine] = None) -> bool:
    engine = engine or get_engine()
    inspector = inspect(engine)
    return not (inspector.has_table("schema_version") or inspector.has_table("users"))


def initialize_store(engine: Optional[Engine] = None, seed: bool = True) -> bool:
    """
    Prepare the store for use.

    A brand new store gets the full schema from the ORM models, is stamped
    with the latest version and receives the first-run seed data. An existing
    store only gets its pending migrations, never seed data.

    Returns:
        True when the store was created by this call.
    """
    engine = engine or get_engine()

    if is_new_store(engine):
        logger.info(
            "Creating new store",
            extra={"context": {"dialect": engine.dialect.name, "version": LATEST_VERSION}},
        )
        create_tables(engine)
        stamp_latest(engine)
        if seed:
            from clinica.db.seed import seed_initial_data

            with Session(engine) as db:
                seed_initial_data(db)
        return True

    apply_migrations(engine)
    return False
