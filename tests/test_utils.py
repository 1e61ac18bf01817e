from __future__ import annotations

import time

import pytest

from gats_iqtest.core.exceptions import SessionNotFoundError
from gats_iqtest.core.session import SessionState
from gats_iqtest.core.utils import DateTimeUtils, SessionRegistry


@pytest.fixture
def registry():
    return SessionRegistry(expiration_seconds=60, start_cleanup=False)


def test_create_and_get(registry, ada_profile):
    session_id, session = registry.create(ada_profile)

    found, profile = registry.get(session_id)

    assert found is session
    assert profile == ada_profile
    assert session.state == SessionState.EMPTY
    assert registry.stats() == {"active_sessions": 1, "cleanup_thread_alive": False}


def test_unknown_id_raises(registry):
    with pytest.raises(SessionNotFoundError):
        registry.get("missing")


def test_expired_sessions_are_invisible_and_cleaned(registry, ada_profile):
    session_id, session = registry.create(ada_profile)
    session.created_at = time.time() - 120

    with pytest.raises(SessionNotFoundError):
        registry.get(session_id)

    assert registry.cleanup_expired() == 1
    assert registry.stats()["active_sessions"] == 0


def test_cleanup_keeps_fresh_sessions(registry, ada_profile):
    registry.create(ada_profile)
    assert registry.cleanup_expired(now=time.time() + 30) == 0
    assert registry.cleanup_expired(now=time.time() + 90) == 1


def test_remove_resets_session(registry, ada_profile, ada_questions):
    session_id, session = registry.create(ada_profile)
    session.load_questions(ada_questions)

    assert registry.remove(session_id) is True
    assert session.state == SessionState.EMPTY
    assert registry.remove(session_id) is False


def test_format_timestamp():
    assert DateTimeUtils.format_timestamp(0, "%Y") in ("1969", "1970")
