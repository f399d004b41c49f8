from passlib.context import CryptContext

from clinica.core.exceptions import PermissionDeniedError

# Password hashing configuration
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Salted hash string, safe to store
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Stored hash to verify against

    Returns:
        True if password matches, False otherwise (including unknown hash formats)
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Hash not recognized by the context (e.g. a legacy plain-text row)
        return False


def require_admin(role: str, action: str = "perform this action") -> None:
    """Raise PermissionDeniedError unless ``role`` is the admin role."""
    if role != "admin":
        raise PermissionDeniedError(f"Only administrators can {action}.")
