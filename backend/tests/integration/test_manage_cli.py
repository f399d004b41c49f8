import pytest
from click.testing import CliRunner

from clinica.db.session import reset_engine


@pytest.fixture
def cli_env(monkeypatch, database_url):
    monkeypatch.setenv("DATABASE_URL", database_url)
    reset_engine()
    yield
    reset_engine()


@pytest.mark.cli
class TestManageCommands:
    def test_init_db_then_schema_version(self, cli_env):
        from manage import cli

        runner = CliRunner()
        assert runner.invoke(cli, ["init-db"]).exit_code == 0

        result = runner.invoke(cli, ["schema-version"])
        assert result.exit_code == 0
        assert result.output.strip() == "5"

    def test_seed_and_migrate_are_repeatable(self, cli_env):
        from manage import cli

        runner = CliRunner()
        runner.invoke(cli, ["init-db"])

        assert runner.invoke(cli, ["migrate"]).exit_code == 0
        assert runner.invoke(cli, ["seed"]).exit_code == 0

    def test_ensure_admin_creates_admin(self, cli_env):
        from manage import cli
        from clinica.db.base import User
        from clinica.db.session import SessionLocal

        runner = CliRunner()
        runner.invoke(cli, ["init-db"])
        result = runner.invoke(cli, ["ensure-admin", "--email", "jefa@clinica.com", "--password", "pw"])

        assert result.exit_code == 0
        session = SessionLocal()
        try:
            assert session.query(User).filter_by(email="jefa@clinica.com").one().role == "admin"
        finally:
            session.close()


@pytest.mark.database
class TestGlobalSession:
    def test_get_db_uses_configured_store(self, cli_env):
        from clinica.db.migrations import initialize_store
        from clinica.db.session import get_db, get_engine
        from clinica.repositories import DoctorRepository

        initialize_store(get_engine())

        sessions = get_db()
        db = next(sessions)
        try:
            assert DoctorRepository(db).get_specialties() == [
                "Cardiología",
                "Dermatología",
                "Pediatría",
            ]
        finally:
            sessions.close()
