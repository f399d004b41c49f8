import logging
from typing import Optional

from clinica.core.exceptions import ClinicaError, ConstraintError, ValidationError
from clinica.core.security import hash_password, verify_password
from clinica.core.validation import require_text, validate_email
from clinica.domain.entities import ROLE_USER
from clinica.domain.entities import User as DomainUser
from clinica.domain.interfaces import IUserRepository
from clinica.schemas.dtos import (
    AuthError,
    AuthResult,
    AuthSuccess,
    RegisterRequest,
    ServiceResult,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_TAKEN = "Email is already registered."


class UserService:
    """Application service for registration, login and profile use-cases.

    This service:
    - Keeps business rules separate from the presentation layer and repositories
    - Depends on IUserRepository, not on a concrete implementation
    - Works with domain entities; the password hash never leaves the repository
    - Does not hold the logged-in identity (the caller's SessionState does)
    """

    def __init__(self, repo: IUserRepository) -> None:
        self.repo = repo

    def register(self, request: RegisterRequest) -> AuthResult:
        """Create a regular user account.

        Business Rules:
        - name, dni, email and password are required
        - email must look like an email and must not be registered yet
        - the password is stored as a salted hash
        """
        try:
            request.validate()
            if self.repo.get_by_email(request.email) is not None:
                return AuthError(EMAIL_TAKEN)

            user = DomainUser(
                name=request.name, email=request.email, dni=request.dni, role=ROLE_USER
            )
            created = self.repo.create(user, hash_password(request.password))
        except ConstraintError:
            # Lost a race with another registration of the same email
            return AuthError(EMAIL_TAKEN)
        except ClinicaError as e:
            logger.warning(
                "Registration rejected",
                extra={"context": {"email": request.email, "error": e.message}},
            )
            return AuthError(e.message)

        logger.info(
            "User registered",
            extra={"context": {"user_id": created.id, "email": created.email}},
        )
        return AuthSuccess(created)

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Unknown email and wrong password produce the same error.
        """
        try:
            email = validate_email(email)
        except ValidationError:
            return AuthError(INVALID_CREDENTIALS)

        user = self.repo.get_by_email(email)
        if user is None or not verify_password(
            password or "", self.repo.get_password_hash(user.id) or ""
        ):
            logger.info("Login failed", extra={"context": {"email": email}})
            return AuthError(INVALID_CREDENTIALS)

        logger.info(
            "Login succeeded", extra={"context": {"user_id": user.id, "role": user.role}}
        )
        return AuthSuccess(user)

    def get_user(self, user_id: int) -> Optional[DomainUser]:
        """Get user by ID - simple delegation to repository."""
        return self.repo.get_by_id(user_id)

    def update_profile(self, user: DomainUser) -> ServiceResult:
        """Update name, email and dni. The role is kept as stored."""
        try:
            stored = self.repo.get_by_id(user.id) if user.id else None
            if stored is None:
                return ServiceResult.fail("User not found.")

            email = validate_email(user.email)
            other = self.repo.get_by_email(email)
            if other is not None and other.id != stored.id:
                return ServiceResult.fail(EMAIL_TAKEN)

            stored.name = require_text(user.name, "name")
            stored.email = email
            stored.dni = require_text(user.dni, "dni")
            updated = self.repo.update(stored)
        except ConstraintError:
            return ServiceResult.fail(EMAIL_TAKEN)
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        return ServiceResult.ok("Profile updated successfully.", data=updated)

    def change_password(
        self, user_id: int, current_password: str, new_password: str
    ) -> ServiceResult:
        """Replace the password after checking the current one."""
        if not new_password:
            return ServiceResult.fail("New password is required.")

        stored_hash = self.repo.get_password_hash(user_id)
        if stored_hash is None:
            return ServiceResult.fail("User not found.")
        if not verify_password(current_password or "", stored_hash):
            return ServiceResult.fail(INVALID_CREDENTIALS)

        try:
            self.repo.set_password(user_id, hash_password(new_password))
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info("Password changed", extra={"context": {"user_id": user_id}})
        return ServiceResult.ok("Password updated successfully.")
