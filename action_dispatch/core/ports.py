"""Protocol definitions for the collaborators the dispatcher depends on."""

# pylint: disable=unnecessary-ellipsis

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol

from action_dispatch.core.identity_models import Activation, User


class IdentityStorePort(Protocol):
    """Port exposing user, role, activation, and session persistence."""

    def create_user(
        self, login: str, password: str, first_name: str = "", last_name: str = ""
    ) -> User:
        """Create a new, not yet activated, user."""
        ...

    def find_user(self, login: str) -> User | None:
        """Return the user registered under ``login`` if any."""
        ...

    def get_user_by_id(self, user_id: int) -> User | None:
        """Return the user with primary key ``user_id`` if any."""
        ...

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> User:
        """Apply ``changes`` to the user and return the updated record."""
        ...

    def delete_user(self, user_id: int) -> bool:
        """Delete the user permanently."""
        ...

    def verify_credentials(self, user: User, password: str) -> bool:
        """Whether ``password`` matches the stored hash for ``user``."""
        ...

    def record_login(self, user_id: int) -> None:
        """Stamp the last login time for ``user_id``."""
        ...

    def user_permissions(self, user_id: int) -> frozenset[str]:
        """Return the union of permissions granted through roles."""
        ...

    def sync_roles(self, roles: Mapping[str, Iterable[str]]) -> None:
        """Create or update roles with their permission lists."""
        ...

    def assign_role(self, user_id: int, slug: str) -> None:
        """Attach the role ``slug`` to the user."""
        ...

    def create_activation(self, user_id: int) -> Activation:
        """Return the pending activation for the user, creating one if needed."""
        ...

    def get_activation(self, user_id: int) -> Activation | None:
        """Return the latest activation record for the user."""
        ...

    def complete_activation(self, user_id: int, code: str) -> bool:
        """Complete the activation if ``code`` matches."""
        ...

    def remove_activation(self, user_id: int) -> bool:
        """Remove every activation record for the user."""
        ...

    def is_activated(self, user_id: int) -> bool:
        """Whether the user has a completed activation."""
        ...

    def open_session(self, user_id: int) -> str:
        """Persist a new session for ``user_id`` and return its token."""
        ...

    def resolve_session(self, token: str) -> User | None:
        """Return the user owning the session ``token`` if it exists."""
        ...

    def close_session(self, token: str) -> None:
        """Forget the session ``token``."""
        ...


class RendererPort(Protocol):
    """Port exposing template rendering."""

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        """Render ``template`` with ``context`` and return the markup."""
        ...

    def read_raw(self, path: str) -> str:
        """Return the raw contents of a static bootstrap file."""
        ...


class ErrorRecorderPort(Protocol):
    """Port that persists errors encountered while dispatching."""

    def record(self, error: BaseException | str) -> None:
        """Record ``error`` once."""
        ...


__all__ = ["ErrorRecorderPort", "IdentityStorePort", "RendererPort"]
