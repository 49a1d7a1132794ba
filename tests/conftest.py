"""Pytest configuration: ensure env vars are set early and share fixtures.

This runs before any tests, so settings and logging pick up the test values.
Also load .env before setting defaults so local overrides are respected.
"""
from __future__ import annotations

import copy
import os
import tempfile
from pathlib import Path

import pytest
from dotenv import load_dotenv

load_dotenv(override=False)

# Keep test logs and data out of the repository tree
_TEST_ROOT = Path(tempfile.gettempdir()) / "action-dispatch-tests"
os.environ.setdefault("ACTION_DISPATCH_LOG_DIR", str(_TEST_ROOT / "logs"))
os.environ.setdefault("DATA_DIR", str(_TEST_ROOT / "data"))

# pylint: disable=wrong-import-position,redefined-outer-name
from action_dispatch.adapters.identity import IdentityAdapter  # noqa: E402
from action_dispatch.adapters.renderer import TemplateRenderer  # noqa: E402
from action_dispatch.core.directives import DirectiveStore  # noqa: E402
from action_dispatch.core.identity_models import User  # noqa: E402
from action_dispatch.services import ServiceContainer, build_services  # noqa: E402
from action_dispatch.services.dispatcher import Dispatcher  # noqa: E402

DIRECTIVES = {
    "default_controller": "public",
    "default_action": "home",
    "login_page": "login.html",
    "controllers": {
        "public": {
            "class": "PublicController",
            "is_public": True,
            "template": "page.html",
            "error_template": "error.html",
        },
        "auth": {"class": "AuthController", "template": "page.html"},
        "admin": {
            "class": "AdminController",
            "template": "page.html",
            "error_template": "error.html",
            "error_heading": "Administration error",
        },
    },
    "client_apps": {"admin": "apps/admin.html"},
    "permissions": {
        "auth": {"auth": [], "logout": []},
        "admin": {
            "addUser": ["manage_users"],
            "activateUser": ["manage_users"],
            "createActivation": ["manage_users"],
            "deactivateUser": ["manage_users"],
            "getUserDetails": ["view_users"],
            "updateUser": ["manage_users"],
            "deleteUser": ["manage_users"],
        },
    },
    "roles": {
        "administrator": ["manage_users", "view_users"],
        "viewer": ["view_users"],
    },
}

TEMPLATES = {
    "page.html": (
        "<title>{{ title or '' }}</title>"
        "<div class='message'>{{ message or '' }}</div>"
        "<main>{{ content }}</main>"
    ),
    "error.html": "<h1>{{ heading }}</h1><p>{{ message }}</p>",
    "login.html": '<form class="login" data-next="{{ request_url }}">{{ message }}</form>',
    "apps/admin.html": '<div id="admin-app"></div>',
}

ADMIN_LOGIN = "admin@example.com"
ADMIN_PASSWORD = "correct-horse"


class RecordingRecorder:  # pylint: disable=too-few-public-methods
    """Error recorder that keeps what it was given."""

    def __init__(self) -> None:
        self.errors: list[BaseException | str] = []

    def record(self, error: BaseException | str) -> None:
        self.errors.append(error)


@pytest.fixture
def directives_data() -> dict:
    return copy.deepcopy(DIRECTIVES)


@pytest.fixture
def directive_store(directives_data) -> DirectiveStore:
    return DirectiveStore.from_mapping(directives_data)


@pytest.fixture
def templates_dir(tmp_path) -> Path:
    root = tmp_path / "templates"
    for name, body in TEMPLATES.items():
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(body, encoding="utf-8")
    return root


@pytest.fixture
def identity_store(tmp_path, directive_store) -> IdentityAdapter:
    store = IdentityAdapter(tmp_path / "identity.db")
    store.sync_roles(directive_store.roles())
    return store


@pytest.fixture
def admin_user(identity_store) -> User:
    return identity_store.ensure_admin(ADMIN_LOGIN, ADMIN_PASSWORD)


@pytest.fixture
def recorder() -> RecordingRecorder:
    return RecordingRecorder()


@pytest.fixture
def services(directive_store, identity_store, templates_dir, recorder) -> ServiceContainer:
    return build_services(
        directives=directive_store,
        identity_store=identity_store,
        renderer=TemplateRenderer(templates_dir),
        recorder=recorder,
    )


@pytest.fixture
def dispatcher(services) -> Dispatcher:
    return Dispatcher(services)


@pytest.fixture
def admin_dispatcher(services, admin_user) -> Dispatcher:
    instance = Dispatcher(services)
    instance.identity.login({"un": admin_user.login, "pw": ADMIN_PASSWORD})
    return instance


@pytest.fixture
def admin_credentials(admin_user) -> dict[str, str]:
    return {"un": admin_user.login, "pw": ADMIN_PASSWORD}
