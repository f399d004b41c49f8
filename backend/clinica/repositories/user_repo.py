from typing import Optional

from clinica.db.base import User as DbUser
from clinica.db.session import SessionLocal, store_transaction
from clinica.domain.entities import User as DomainUser
from clinica.domain.interfaces import IUserRepository


class UserRepository(IUserRepository):
    """Repository for User persistence operations.

    This implementation:
    - Implements IUserRepository interface (Dependency Inversion)
    - Handles data access only (Single Responsibility)
    - Maps between domain entities and database models
    - Keeps the password hash out of the domain entity
    """

    def __init__(self, db_session=None) -> None:
        self.db = db_session or SessionLocal()

    def get_db_by_email(self, email: str) -> Optional[DbUser]:
        """Get user by email, returning database model."""
        return (
            self.db.query(DbUser)
            .populate_existing()
            .filter_by(email=email.strip().lower())
            .first()
        )

    def get_by_id(self, user_id: int) -> Optional[DomainUser]:
        """Get user by ID, returning domain entity."""
        db_user = self.db.get(DbUser, user_id, populate_existing=True)
        return self._to_domain(db_user) if db_user else None

    def get_by_email(self, email: str) -> Optional[DomainUser]:
        """Get user by email, returning domain entity."""
        db_user = self.get_db_by_email(email)
        return self._to_domain(db_user) if db_user else None

    def get_password_hash(self, user_id: int) -> Optional[str]:
        db_user = self.db.get(DbUser, user_id, populate_existing=True)
        return db_user.password_hash if db_user else None

    def create(self, user: DomainUser, password_hash: str) -> DomainUser:
        """Create a new user; a duplicate email raises ConstraintError."""
        db_user = DbUser(
            name=user.name,
            email=user.email.strip().lower(),
            password_hash=password_hash,
            dni=user.dni,
            role=user.role,
        )
        with store_transaction(self.db):
            self.db.add(db_user)
        self.db.refresh(db_user)
        return self._to_domain(db_user)

    def update(self, user: DomainUser) -> DomainUser:
        """Update an existing user from domain entity."""
        if not user.id:
            raise ValueError("User ID is required for update")

        db_user = self.db.get(DbUser, user.id)
        if not db_user:
            raise ValueError(f"User with ID {user.id} not found")

        with store_transaction(self.db):
            db_user.name = user.name
            db_user.email = user.email.strip().lower()
            db_user.dni = user.dni
            db_user.role = user.role
        self.db.refresh(db_user)
        return self._to_domain(db_user)

    def set_password(self, user_id: int, password_hash: str) -> bool:
        """Set the password hash for a user."""
        db_user = self.db.get(DbUser, user_id)
        if not db_user:
            return False

        with store_transaction(self.db):
            db_user.password_hash = password_hash
        return True

    def _to_domain(self, db_user: DbUser) -> DomainUser:
        """Convert database model to domain entity."""
        return DomainUser(
            id=db_user.id,
            name=db_user.name,
            email=db_user.email,
            dni=db_user.dni,
            role=db_user.role or "user",
        )
