from unittest.mock import Mock

import pytest

from clinica.core.session_state import SessionState
from clinica.domain.entities import User


@pytest.mark.unit
@pytest.mark.auth
class TestSessionState:
    def test_starts_unauthenticated(self):
        state = SessionState()

        assert state.current_user is None
        assert state.is_authenticated is False
        assert state.is_admin is False

    def test_subscriber_receives_current_then_changes(self):
        state = SessionState()
        listener = Mock()
        admin = User(id=1, name="Admin", email="admin@clinica.com", role="admin")

        state.subscribe(listener)
        state.set_current_user(admin)
        state.clear()

        assert [c.args[0] for c in listener.call_args_list] == [None, admin, None]

    def test_unsubscribe_stops_notifications(self):
        state = SessionState()
        listener = Mock()

        unsubscribe = state.subscribe(listener)
        unsubscribe()
        state.set_current_user(User(id=2, name="Ana", email="ana@x.com"))

        listener.assert_called_once_with(None)
        assert state.is_authenticated is True
        assert state.is_admin is False
