"""
Comprehensive tests for the session module using pytest.

Tests cover:
- Session: authentication state
- sign_in / sign_out: token updates and emitted events
- on_session_change: notification and unsubscription
"""

import pytest

from core.session import Session, SessionEvent


@pytest.mark.unit
def test_session_unauthenticated_by_default():
    session = Session()

    assert not session.is_authenticated
    assert session.user_id is None


@pytest.mark.unit
def test_session_authenticated_with_provider_token():
    assert Session(provider_token="gh").is_authenticated


@pytest.mark.unit
def test_sign_in_emits_signed_in():
    session = Session()
    events = []
    session.on_session_change(lambda event, s: events.append((event, s.provider_token)))

    session.sign_in("gh", access_token="sb", user_id="u1")

    assert events == [(SessionEvent.SIGNED_IN, "gh")]
    assert session.access_token == "sb"
    assert session.user_id == "u1"


@pytest.mark.unit
def test_sign_in_again_emits_token_refreshed():
    session = Session(provider_token="old")
    events = []
    session.on_session_change(lambda event, s: events.append(event))

    session.sign_in("new")

    assert events == [SessionEvent.TOKEN_REFRESHED]
    assert session.provider_token == "new"


@pytest.mark.unit
def test_sign_out_clears_tokens():
    session = Session(provider_token="gh", access_token="sb", user_id="u1")
    events = []
    session.on_session_change(lambda event, s: events.append(event))

    session.sign_out()

    assert events == [SessionEvent.SIGNED_OUT]
    assert not session.is_authenticated
    assert session.access_token is None
    assert session.user_id is None


@pytest.mark.unit
def test_unsubscribe_stops_notifications():
    session = Session()
    events = []
    unsubscribe = session.on_session_change(lambda event, s: events.append(event))

    unsubscribe()
    unsubscribe()
    session.sign_in("gh")

    assert events == []


@pytest.mark.unit
def test_handler_may_unsubscribe_while_notified():
    session = Session()
    events = []
    holder = {}

    def _once(event, s):
        events.append(event)
        holder["unsubscribe"]()

    holder["unsubscribe"] = session.on_session_change(_once)
    other = []
    session.on_session_change(lambda event, s: other.append(event))

    session.sign_in("gh")
    session.sign_out()

    assert events == [SessionEvent.SIGNED_IN]
    assert other == [SessionEvent.SIGNED_IN, SessionEvent.SIGNED_OUT]
