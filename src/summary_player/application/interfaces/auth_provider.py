"""Port interface for the signed-in user."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AuthProvider(ABC):
    """Interface for reading who is signed in."""

    @abstractmethod
    def current_user_id(self) -> str | None:
        """Return the signed-in user's id, or None for anonymous visitors."""
        ...

    @abstractmethod
    def is_subscribed(self) -> bool:
        ...

    @property
    def is_authenticated(self) -> bool:
        return self.current_user_id() is not None


class StaticAuthProvider(AuthProvider):
    """Auth provider with a fixed identity, set by the host application."""

    def __init__(self, user_id: str | None = None, *, subscribed: bool = False) -> None:
        self._user_id = user_id
        self._subscribed = subscribed

    def sign_in(self, user_id: str, *, subscribed: bool = False) -> None:
        self._user_id = user_id
        self._subscribed = subscribed

    def sign_out(self) -> None:
        self._user_id = None
        self._subscribed = False

    def current_user_id(self) -> str | None:
        return self._user_id

    def is_subscribed(self) -> bool:
        return self._user_id is not None and self._subscribed
