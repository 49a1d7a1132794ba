"""Identity provider used by the dispatcher and the admin controllers."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from action_dispatch.core.exceptions import IdentityError, InvalidCredentials
from action_dispatch.core.identity_models import Activation, User
from action_dispatch.core.logging import get_logger
from action_dispatch.core.ports import IdentityStorePort

logger = get_logger(__name__)

USERNAME_FIELD = "un"
PASSWORD_FIELD = "pw"


class IdentityProvider:
    """Tracks who is making requests and answers permission questions.

    One provider lives for one interactive session or one web request. A web
    request restores the user from its session token; a successful login opens
    a new token that the transport hands back to the client.
    """

    def __init__(self, store: IdentityStorePort, session_token: Optional[str] = None) -> None:
        self._store = store
        self._user: Optional[User] = None
        self._token: Optional[str] = None
        if session_token:
            self._user = store.resolve_session(session_token)
            if self._user is not None:
                self._token = session_token

    @property
    def session_token(self) -> Optional[str]:
        return self._token

    def is_authenticated(self) -> bool:
        return self._user is not None

    def current_user(self) -> Optional[User]:
        return self._user

    def has_permission(self, permissions: Iterable[str]) -> bool:
        """Whether the current identity holds every permission in ``permissions``.

        An empty requirement is satisfied by anyone, authenticated or not.
        """
        required = frozenset(permissions)
        if not required:
            return True
        if self._user is None:
            return False
        return required <= self._store.user_permissions(self._user.id)

    def login(self, credentials: Mapping[str, Any]) -> User:
        """Authenticate with ``un``/``pw`` credentials and open a session."""
        login = str(credentials.get(USERNAME_FIELD) or "").strip()
        password = str(credentials.get(PASSWORD_FIELD) or "")
        if not login:
            raise InvalidCredentials("Invalid Username.")
        user = self._store.find_user(login)
        if user is None:
            raise InvalidCredentials("Invalid Username.")
        if not self._store.verify_credentials(user, password):
            raise InvalidCredentials("Invalid Password.")
        if not self._store.is_activated(user.id):
            raise InvalidCredentials("User account has not been activated.")

        self._store.record_login(user.id)
        if self._token:
            self._store.close_session(self._token)
        self._token = self._store.open_session(user.id)
        self._user = self._store.get_user_by_id(user.id) or user
        logger.info("User %s logged in.", user.login, extra={"user_id": user.id})
        return self._user

    def logout(self) -> None:
        if self._token:
            self._store.close_session(self._token)
        if self._user is not None:
            logger.info("User %s logged out.", self._user.login, extra={"user_id": self._user.id})
        self._user = None
        self._token = None

    # User management used by the admin controller

    def create_user(
        self, login: str, password: str, first_name: str = "", last_name: str = ""
    ) -> User:
        return self._store.create_user(login, password, first_name, last_name)

    def get_user(self, login: Optional[str]) -> User:
        user = self._store.find_user(login) if login else None
        if user is None:
            raise IdentityError(f"User not found: {login}")
        return user

    def get_user_by_id(self, user_id: Any) -> User:
        try:
            key = int(user_id)
        except (TypeError, ValueError) as exc:
            raise IdentityError(f"Invalid user id: {user_id}") from exc
        user = self._store.get_user_by_id(key)
        if user is None:
            raise IdentityError(f"User not found: {user_id}")
        return user

    def update_user(self, user: User, changes: Mapping[str, Any]) -> User:
        return self._store.update_user(user.id, changes)

    def delete_user(self, user: User) -> None:
        if not self._store.delete_user(user.id):
            raise IdentityError("User could not be deleted.")

    def activation_for(self, user: User) -> Activation:
        """Return the user's pending activation, creating one when needed."""
        return self._store.create_activation(user.id)

    def activate(self, user: User, code: Optional[str] = None) -> None:
        """Complete the user's activation with ``code`` or their pending code."""
        if self._store.is_activated(user.id):
            return
        activation = self._store.get_activation(user.id)
        if activation is None:
            raise IdentityError("No activation record exists for this user.")
        if not self._store.complete_activation(user.id, code or activation.code):
            raise IdentityError("Activation could not be completed.")

    def deactivate(self, user: User) -> None:
        if not self._store.remove_activation(user.id):
            raise IdentityError("Could not remove activation record for user.")


__all__ = ["IdentityProvider", "USERNAME_FIELD", "PASSWORD_FIELD"]
