"""Management commands for the clinic store."""

from __future__ import annotations

import logging
from typing import Optional

import click
from dotenv import load_dotenv

from clinica.core.config import get_default_admin_credentials
from clinica.db.migrations import (
    LATEST_VERSION,
    apply_migrations,
    get_schema_version,
    initialize_store,
)
from clinica.db.seed import ensure_admin_user, seed_initial_data
from clinica.db.session import SessionLocal, database_url_for_logs, get_engine

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@click.group()
def cli() -> None:
    """Entry point for management commands."""
    load_dotenv()


@cli.command("init-db")
def init_db() -> None:
    """Create a new store (schema + seed data) or migrate an existing one."""
    engine = get_engine()
    created = initialize_store(engine)
    logging.info(
        "%s store at %s (schema version %s).",
        "Created" if created else "Opened",
        database_url_for_logs(str(engine.url)),
        get_schema_version(engine),
    )


@cli.command("migrate")
def migrate() -> None:
    """Apply pending schema migrations."""
    applied = apply_migrations(get_engine())
    if applied:
        logging.info("Applied migrations: %s", ", ".join(str(v) for v in applied))
    else:
        logging.info("Schema already at version %s; nothing to do.", LATEST_VERSION)


@cli.command("seed")
def seed() -> None:
    """Insert default admin, doctors and products where missing."""
    session = SessionLocal()
    try:
        counts = seed_initial_data(session)
    finally:
        session.close()
    logging.info(
        "Seed finished: %s admin, %s doctors, %s products inserted.",
        counts["admins"],
        counts["doctors"],
        counts["products"],
    )


@cli.command("schema-version")
def schema_version() -> None:
    """Print the applied schema version."""
    click.echo(get_schema_version(get_engine()))


@cli.command("ensure-admin")
@click.option(
    "--email",
    "email_override",
    default=None,
    help="Email of the admin. Overrides ADMIN_EMAIL environment variable.",
)
@click.option(
    "--password",
    default=None,
    help="Password for a newly created admin. Overrides ADMIN_PASSWORD.",
)
def ensure_admin(email_override: Optional[str], password: Optional[str]) -> None:
    """Create the admin user, or promote an existing user with that email."""
    target_email = email_override or get_default_admin_credentials()[0]
    session = SessionLocal()
    try:
        changed = ensure_admin_user(session, email=target_email, password=password)
    finally:
        session.close()

    if changed:
        logging.info("Admin %s ensured.", target_email)
    else:
        logging.info("User %s already has admin role. No changes made.", target_email)


if __name__ == "__main__":
    cli()
