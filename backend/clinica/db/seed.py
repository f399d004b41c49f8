"""
First-run seed data.

Every row is inserted only when no row with the same business key (email for
users, name for doctors and products) exists, so running the seed again never
duplicates anything.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from clinica.core.config import (
    DEFAULT_ADMIN_DNI,
    DEFAULT_ADMIN_NAME,
    get_default_admin_credentials,
)
from clinica.core.security import hash_password
from clinica.db.base import Doctor, PharmacyProduct, User
from clinica.db.session import store_transaction

logger = logging.getLogger(__name__)

DEFAULT_DOCTORS = [
    {"name": "Dr. Ana Gómez", "specialty": "Pediatría", "schedule": "L-V 9-17"},
    {"name": "Dra. Laura Flores", "specialty": "Dermatología", "schedule": "M-J 10-18"},
    {"name": "Dr. Carlos Ruiz", "specialty": "Cardiología", "schedule": "L-V 8-16"},
]

DEFAULT_PRODUCTS = [
    {
        "name": "Paracetamol 500mg",
        "description": "Analgésico y antipirético",
        "price": Decimal("5.50"),
        "stock": 100,
    },
    {
        "name": "Ibuprofeno 400mg",
        "description": "Antiinflamatorio no esteroideo",
        "price": Decimal("8.75"),
        "stock": 75,
    },
]


def ensure_admin_user(
    db: Session, email: Optional[str] = None, password: Optional[str] = None
) -> bool:
    """
    Ensure an administrator with ``email`` exists.

    A missing user is created with the given password (hashed). An existing
    user keeps its password and is promoted to admin if needed.

    Returns:
        True when a row was inserted or changed.
    """
    default_email, default_password = get_default_admin_credentials()
    email = (email or default_email).strip().lower()

    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        with store_transaction(db):
            db.add(
                User(
                    name=DEFAULT_ADMIN_NAME,
                    email=email,
                    password_hash=hash_password(password or default_password),
                    dni=DEFAULT_ADMIN_DNI,
                    role="admin",
                )
            )
        logger.info("Admin user created", extra={"context": {"email": email}})
        return True

    if user.role != "admin":
        with store_transaction(db):
            user.role = "admin"
        logger.info("User promoted to admin", extra={"context": {"email": email}})
        return True

    logger.debug("Admin user already exists", extra={"context": {"email": email}})
    return False


def seed_doctors(db: Session) -> int:
    existing = set(db.execute(select(Doctor.name)).scalars())
    missing = [d for d in DEFAULT_DOCTORS if d["name"] not in existing]
    if missing:
        with store_transaction(db):
            db.add_all(Doctor(**data) for data in missing)
    return len(missing)


def seed_products(db: Session) -> int:
    existing = set(db.execute(select(PharmacyProduct.name)).scalars())
    missing = [p for p in DEFAULT_PRODUCTS if p["name"] not in existing]
    if missing:
        with store_transaction(db):
            db.add_all(PharmacyProduct(**data) for data in missing)
    return len(missing)


def seed_initial_data(db: Session) -> Dict[str, int]:
    """Insert the default admin, example doctors and example products."""
    counts = {
        "admins": int(ensure_admin_user(db)),
        "doctors": seed_doctors(db),
        "products": seed_products(db),
    }
    logger.info("Seed data ensured", extra={"context": counts})
    return counts
