"""
Central pytest configuration for the clinic test suite.

Unit tests use mocked repositories; integration tests get a temporary SQLite
store per test from ``tests.fixtures.database_fixtures``.
"""

import os

# Set early so anything touching the global engine stays in memory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("TZ", "UTC")

from tests.config.markers import *  # noqa: E402,F401,F403
from tests.fixtures.database_fixtures import *  # noqa: E402,F401,F403
