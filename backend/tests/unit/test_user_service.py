"""
Unit tests for UserService registration, login and profile updates.
"""

from unittest.mock import Mock

import pytest

from clinica.core.exceptions import ConstraintError
from clinica.core.security import hash_password, verify_password
from clinica.domain.entities import User
from clinica.schemas.dtos import AuthError, AuthSuccess, RegisterRequest
from clinica.services.user_service import EMAIL_TAKEN, INVALID_CREDENTIALS, UserService
from tests.factories.repository_factories import UserRepositoryFactory


@pytest.fixture
def mock_user_repo() -> Mock:
    return UserRepositoryFactory.create_mock_full()


@pytest.fixture
def service(mock_user_repo) -> UserService:
    return UserService(mock_user_repo)


@pytest.fixture
def ana() -> User:
    return User(id=5, name="Ana", email="ana@x.com", dni="12345678")


@pytest.mark.unit
@pytest.mark.services
@pytest.mark.auth
class TestRegistration:
    def test_register_hashes_password_and_normalizes_email(self, service, mock_user_repo, ana):
        mock_user_repo.create.return_value = ana

        result = service.register(
            RegisterRequest(name=" Ana ", dni="12345678", email="Ana@X.com", password="secret")
        )

        assert isinstance(result, AuthSuccess)
        assert result.user.role == "user"
        user, password_hash = mock_user_repo.create.call_args.args
        assert user.name == "Ana"
        assert user.email == "ana@x.com"
        assert user.role == "user"
        assert password_hash != "secret"
        assert verify_password("secret", password_hash)

    def test_register_rejects_taken_email(self, service, mock_user_repo, ana):
        mock_user_repo.get_by_email.return_value = ana

        result = service.register(
            RegisterRequest(name="Ana", dni="1", email="ana@x.com", password="x")
        )

        assert result == AuthError(EMAIL_TAKEN)
        mock_user_repo.create.assert_not_called()

    def test_register_race_on_unique_email(self, service, mock_user_repo):
        mock_user_repo.create.side_effect = ConstraintError("UNIQUE constraint failed: users.email")

        result = service.register(
            RegisterRequest(name="Ana", dni="1", email="ana@x.com", password="x")
        )

        assert result == AuthError(EMAIL_TAKEN)

    @pytest.mark.parametrize(
        "name, dni, email, password",
        [
            ("", "1", "ana@x.com", "x"),
            ("Ana", "", "ana@x.com", "x"),
            ("Ana", "1", "not-an-email", "x"),
            ("Ana", "1", "ana@x.com", ""),
        ],
    )
    def test_register_validation_errors(self, service, mock_user_repo, name, dni, email, password):
        result = service.register(RegisterRequest(name=name, dni=dni, email=email, password=password))

        assert isinstance(result, AuthError)
        mock_user_repo.create.assert_not_called()


@pytest.mark.unit
@pytest.mark.services
@pytest.mark.auth
class TestLogin:
    def test_login_success(self, service, mock_user_repo, ana):
        mock_user_repo.get_by_email.return_value = ana
        mock_user_repo.get_password_hash.return_value = hash_password("secret")

        result = service.login("ana@x.com", "secret")

        assert result == AuthSuccess(ana)

    def test_wrong_password(self, service, mock_user_repo, ana):
        mock_user_repo.get_by_email.return_value = ana
        mock_user_repo.get_password_hash.return_value = hash_password("secret")

        assert service.login("ana@x.com", "wrong") == AuthError(INVALID_CREDENTIALS)

    def test_unknown_email_gives_same_error(self, service):
        assert service.login("nobody@x.com", "secret") == AuthError(INVALID_CREDENTIALS)

    def test_malformed_email_gives_same_error(self, service, mock_user_repo):
        assert service.login("", "secret") == AuthError(INVALID_CREDENTIALS)
        mock_user_repo.get_by_email.assert_not_called()


@pytest.mark.unit
@pytest.mark.services
@pytest.mark.user
class TestProfile:
    def test_update_profile_keeps_stored_role(self, service, mock_user_repo):
        stored = User(id=5, name="Ana", email="ana@x.com", dni="1", role="user")
        mock_user_repo.get_by_id.return_value = stored
        mock_user_repo.update.side_effect = lambda u: u

        result = service.update_profile(
            User(id=5, name="Ana María", email="ana@x.com", dni="2", role="admin")
        )

        assert result.success is True
        assert result.data.name == "Ana María"
        assert result.data.role == "user"

    def test_update_profile_email_taken_by_other(self, service, mock_user_repo):
        mock_user_repo.get_by_id.return_value = User(id=5, name="Ana", email="ana@x.com")
        mock_user_repo.get_by_email.return_value = User(id=6, name="Bea", email="bea@x.com")

        result = service.update_profile(User(id=5, name="Ana", email="bea@x.com"))

        assert result.success is False
        assert result.message == EMAIL_TAKEN
        mock_user_repo.update.assert_not_called()

    def test_change_password_checks_current(self, service, mock_user_repo):
        mock_user_repo.get_password_hash.return_value = hash_password("old")

        assert service.change_password(5, "bad", "new").success is False
        mock_user_repo.set_password.assert_not_called()

        assert service.change_password(5, "old", "new").success is True
        user_id, new_hash = mock_user_repo.set_password.call_args.args
        assert user_id == 5
        assert verify_password("new", new_hash)
