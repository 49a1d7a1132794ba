"""SQLite-backed adapter for users, roles, activations, and sessions."""

from __future__ import annotations

import json
import secrets
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Iterable, Mapping

import bcrypt

from action_dispatch.core.config import config
from action_dispatch.core.exceptions import IdentityError
from action_dispatch.core.identity_models import Activation, User
from action_dispatch.core.ports import IdentityStorePort

ACTIVATION_CODE_LENGTH = 32
SESSION_TOKEN_LENGTH = 32
UPDATABLE_FIELDS = {"login", "first_name", "last_name", "password"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class IdentityAdapter(IdentityStorePort):
    """SQLite-backed identity storage with bcrypt password hashes."""

    def __init__(self, db_path: Path | None = None) -> None:
        """Initialize the adapter.

        Args:
            db_path: Path to the SQLite database file.
                    Defaults to DATA_DIR/identity.db.
        """
        data_dir = Path(getattr(config, "DATA_DIR", Path("data")))
        self._db_path = db_path or (data_dir / "identity.db")
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Get a SQLite connection with foreign keys enforced."""
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with self._lock, self._get_conn() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    login TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    first_name TEXT NOT NULL DEFAULT '',
                    last_name TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    last_login TEXT
                );
                CREATE TABLE IF NOT EXISTS roles (
                    slug TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    permissions TEXT NOT NULL DEFAULT '[]'
                );
                CREATE TABLE IF NOT EXISTS role_users (
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    role_slug TEXT NOT NULL REFERENCES roles(slug) ON DELETE CASCADE,
                    PRIMARY KEY (user_id, role_slug)
                );
                CREATE TABLE IF NOT EXISTS activations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    code TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    completed_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS sessions (
                    token TEXT PRIMARY KEY,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    created_at TEXT NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_activations_user ON activations(user_id);
            """)

    @staticmethod
    def _hash_password(password: str) -> str:
        """Hash a password with bcrypt."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

    @staticmethod
    def _verify_password(password: str, password_hash: str) -> bool:
        """Verify a password against its hash."""
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except ValueError:
            return False

    def create_user(
        self, login: str, password: str, first_name: str = "", last_name: str = ""
    ) -> User:
        """Create a new user. The account stays inactive until activated."""
        if not login or not password:
            raise IdentityError(
                "Could not create user. Ensure all necessary fields have been entered."
            )
        now = _now()
        try:
            with self._lock, self._get_conn() as conn:
                cursor = conn.execute(
                    """INSERT INTO users
                       (login, password_hash, first_name, last_name, created_at, updated_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (login, self._hash_password(password), first_name, last_name, now, now),
                )
                user_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise IdentityError(f"A user with login {login!r} already exists.") from exc
        user = self.get_user_by_id(int(user_id or 0))
        if user is None:
            raise IdentityError("Could not create user.")
        return user

    def find_user(self, login: str) -> User | None:
        """Get a user by login."""
        with self._lock, self._get_conn() as conn:
            row = conn.execute("SELECT * FROM users WHERE login = ?", (login,)).fetchone()
        return self._row_to_user(row) if row else None

    def get_user_by_id(self, user_id: int) -> User | None:
        """Get a user by primary key."""
        with self._lock, self._get_conn() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row) if row else None

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> User:
        """Apply the supported ``changes`` to the user."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise IdentityError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        assignments: list[str] = []
        params: list[Any] = []
        for key, value in changes.items():
            if value is None:
                continue
            if key == "password":
                assignments.append("password_hash = ?")
                params.append(self._hash_password(str(value)))
            else:
                assignments.append(f"{key} = ?")
                params.append(str(value))
        if assignments:
            assignments.append("updated_at = ?")
            params.extend([_now(), user_id])
            try:
                with self._lock, self._get_conn() as conn:
                    cursor = conn.execute(
                        f"UPDATE users SET {', '.join(assignments)} WHERE id = ?", params
                    )
                    if cursor.rowcount == 0:
                        raise IdentityError("Could not update user.")
            except sqlite3.IntegrityError as exc:
                raise IdentityError("Could not update user: login already taken.") from exc
        user = self.get_user_by_id(user_id)
        if user is None:
            raise IdentityError("User not found.")
        return user

    def delete_user(self, user_id: int) -> bool:
        """Delete a user and everything attached to it."""
        with self._lock, self._get_conn() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        return cursor.rowcount > 0

    def verify_credentials(self, user: User, password: str) -> bool:
        """Check ``password`` against the stored hash."""
        with self._lock, self._get_conn() as conn:
            row = conn.execute(
                "SELECT password_hash FROM users WHERE id = ?", (user.id,)
            ).fetchone()
        if row is None:
            return False
        return self._verify_password(password, row["password_hash"])

    def record_login(self, user_id: int) -> None:
        """Update the last_login timestamp for a user."""
        with self._lock, self._get_conn() as conn:
            conn.execute("UPDATE users SET last_login = ? WHERE id = ?", (_now(), user_id))

    def user_permissions(self, user_id: int) -> frozenset[str]:
        """Collect the permissions granted by every role of the user."""
        with self._lock, self._get_conn() as conn:
            rows = conn.execute(
                """SELECT roles.permissions FROM roles
                   JOIN role_users ON role_users.role_slug = roles.slug
                   WHERE role_users.user_id = ?""",
                (user_id,),
            ).fetchall()
        permissions: set[str] = set()
        for row in rows:
            permissions.update(json.loads(row["permissions"]))
        return frozenset(permissions)

    def sync_roles(self, roles: Mapping[str, Iterable[str]]) -> None:
        """Create missing roles and overwrite permissions of existing ones."""
        with self._lock, self._get_conn() as conn:
            for slug, permissions in roles.items():
                conn.execute(
                    """INSERT INTO roles (slug, name, permissions) VALUES (?, ?, ?)
                       ON CONFLICT(slug) DO UPDATE SET permissions = excluded.permissions""",
                    (slug, slug.capitalize(), json.dumps(sorted(set(permissions)))),
                )

    def assign_role(self, user_id: int, slug: str) -> None:
        """Attach an existing role to the user."""
        try:
            with self._lock, self._get_conn() as conn:
                conn.execute(
                    "INSERT OR IGNORE INTO role_users (user_id, role_slug) VALUES (?, ?)",
                    (user_id, slug),
                )
        except sqlite3.IntegrityError as exc:
            raise IdentityError(f"Unknown role or user: {slug}") from exc

    def ensure_admin(self, login: str, password: str, role: str = "administrator") -> User:
        """Create and activate the administrator account if it does not exist."""
        user = self.find_user(login)
        if user is not None:
            return user
        user = self.create_user(login, password, first_name=login)
        activation = self.create_activation(user.id)
        self.complete_activation(user.id, activation.code)
        if not self._role_exists(role):
            self.sync_roles({role: []})
        self.assign_role(user.id, role)
        return user

    def _role_exists(self, slug: str) -> bool:
        with self._lock, self._get_conn() as conn:
            row = conn.execute("SELECT 1 FROM roles WHERE slug = ?", (slug,)).fetchone()
        return row is not None

    def create_activation(self, user_id: int) -> Activation:
        """Return the pending activation, creating one when none exists."""
        existing = self.get_activation(user_id)
        if existing is not None and not existing.completed:
            return existing
        now = _now()
        code = secrets.token_urlsafe(ACTIVATION_CODE_LENGTH)[:ACTIVATION_CODE_LENGTH]
        try:
            with self._lock, self._get_conn() as conn:
                conn.execute(
                    """INSERT INTO activations (user_id, code, created_at, updated_at)
                       VALUES (?, ?, ?, ?)""",
                    (user_id, code, now, now),
                )
        except sqlite3.IntegrityError as exc:
            raise IdentityError("User not found.") from exc
        activation = self.get_activation(user_id)
        if activation is None:
            raise IdentityError("Could not create activation record.")
        return activation

    def get_activation(self, user_id: int) -> Activation | None:
        """Return the most recent activation record for the user."""
        with self._lock, self._get_conn() as conn:
            row = conn.execute(
                "SELECT * FROM activations WHERE user_id = ? ORDER BY id DESC LIMIT 1",
                (user_id,),
            ).fetchone()
        return self._row_to_activation(row) if row else None

    def complete_activation(self, user_id: int, code: str) -> bool:
        """Mark the pending activation complete when ``code`` matches."""
        now = _now()
        with self._lock, self._get_conn() as conn:
            cursor = conn.execute(
                """UPDATE activations SET completed = 1, completed_at = ?, updated_at = ?
                   WHERE user_id = ? AND code = ? AND completed = 0""",
                (now, now, user_id, code),
            )
        return cursor.rowcount > 0

    def remove_activation(self, user_id: int) -> bool:
        """Delete the activation records, deactivating the user."""
        with self._lock, self._get_conn() as conn:
            cursor = conn.execute("DELETE FROM activations WHERE user_id = ?", (user_id,))
        return cursor.rowcount > 0

    def is_activated(self, user_id: int) -> bool:
        with self._lock, self._get_conn() as conn:
            row = conn.execute(
                "SELECT 1 FROM activations WHERE user_id = ? AND completed = 1", (user_id,)
            ).fetchone()
        return row is not None

    def open_session(self, user_id: int) -> str:
        """Create a session token for the user."""
        token = secrets.token_urlsafe(SESSION_TOKEN_LENGTH)
        with self._lock, self._get_conn() as conn:
            conn.execute(
                "INSERT INTO sessions (token, user_id, created_at) VALUES (?, ?, ?)",
                (token, user_id, _now()),
            )
        return token

    def resolve_session(self, token: str) -> User | None:
        """Return the user owning ``token``."""
        with self._lock, self._get_conn() as conn:
            row = conn.execute(
                """SELECT users.* FROM users
                   JOIN sessions ON sessions.user_id = users.id
                   WHERE sessions.token = ?""",
                (token,),
            ).fetchone()
        return self._row_to_user(row) if row else None

    def close_session(self, token: str) -> None:
        """Delete the session identified by ``token``."""
        with self._lock, self._get_conn() as conn:
            conn.execute("DELETE FROM sessions WHERE token = ?", (token,))

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        """Convert a database row to a User model."""
        return User(
            id=row["id"],
            login=row["login"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            last_login=(
                datetime.fromisoformat(row["last_login"]) if row["last_login"] else None
            ),
        )

    @staticmethod
    def _row_to_activation(row: sqlite3.Row) -> Activation:
        """Convert a database row to an Activation model."""
        return Activation(
            id=row["id"],
            user_id=row["user_id"],
            code=row["code"],
            completed=bool(row["completed"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            completed_at=(
                datetime.fromisoformat(row["completed_at"]) if row["completed_at"] else None
            ),
        )


__all__ = ["IdentityAdapter"]
