"""
Explicit authentication session.

The session holds the opaque bearer tokens handed out by the identity provider:
`provider_token` is the GitHub OAuth/personal token used against the GitHub API,
`access_token` and `user_id` identify the user at the hosted history store.
Components that need a token receive the session object; nobody reads tokens
from module-level state. Interested parties register for change notifications
with `on_session_change`.
"""

from collections.abc import Callable
from enum import StrEnum


class SessionEvent(StrEnum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    TOKEN_REFRESHED = "token_refreshed"


SessionHandler = Callable[[SessionEvent, "Session"], None]


class Session:
    def __init__(
        self,
        provider_token: str | None = None,
        access_token: str | None = None,
        user_id: str | None = None,
    ):
        self.provider_token = provider_token
        self.access_token = access_token
        self.user_id = user_id
        self._handlers: list[SessionHandler] = []

    @property
    def is_authenticated(self) -> bool:
        return bool(self.provider_token)

    def on_session_change(self, handler: SessionHandler) -> Callable[[], None]:
        """
        Register a handler called with (event, session) after every change.

        Returns:
            A callable that unregisters the handler. Calling it twice is harmless.
        """
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def sign_in(
        self,
        provider_token: str,
        access_token: str | None = None,
        user_id: str | None = None,
    ) -> None:
        event = (
            SessionEvent.TOKEN_REFRESHED
            if self.is_authenticated
            else SessionEvent.SIGNED_IN
        )
        self.provider_token = provider_token
        self.access_token = access_token
        self.user_id = user_id
        self._emit(event)

    def sign_out(self) -> None:
        self.provider_token = None
        self.access_token = None
        self.user_id = None
        self._emit(SessionEvent.SIGNED_OUT)

    def _emit(self, event: SessionEvent) -> None:
        # Copy so handlers may unsubscribe while being notified
        for handler in list(self._handlers):
            handler(event, self)
