"""Tests for the per-dispatcher identity provider."""
# pylint: disable=missing-function-docstring

import pytest

from action_dispatch.core.exceptions import IdentityError, InvalidCredentials
from action_dispatch.services.identity import IdentityProvider


def test_unauthenticated_defaults(identity_store):
    identity = IdentityProvider(identity_store)
    assert identity.is_authenticated() is False
    assert identity.current_user() is None
    assert identity.session_token is None
    assert identity.has_permission([]) is True
    assert identity.has_permission(["view_users"]) is False


def test_login_opens_session_and_grants_permissions(identity_store, admin_credentials):
    identity = IdentityProvider(identity_store)
    user = identity.login(admin_credentials)
    assert identity.is_authenticated() is True
    assert user.last_login is not None
    assert identity.session_token
    assert identity.has_permission({"manage_users", "view_users"}) is True
    assert identity.has_permission({"manage_users", "launch_rockets"}) is False

    restored = IdentityProvider(identity_store, identity.session_token)
    assert restored.current_user() == identity.current_user()


@pytest.mark.parametrize(
    ("credentials", "message"),
    [
        ({}, "Invalid Username."),
        ({"un": "nobody@example.com", "pw": "x"}, "Invalid Username."),
        ({"un": "admin@example.com", "pw": "wrong"}, "Invalid Password."),
    ],
)
def test_login_failures(identity_store, admin_user, credentials, message):
    identity = IdentityProvider(identity_store)
    with pytest.raises(InvalidCredentials) as excinfo:
        identity.login(credentials)
    assert str(excinfo.value) == message
    assert identity.is_authenticated() is False
    assert admin_user.login == "admin@example.com"


def test_login_requires_activation(identity_store):
    identity_store.create_user("late@example.com", "pw")
    with pytest.raises(InvalidCredentials, match="not been activated"):
        IdentityProvider(identity_store).login({"un": "late@example.com", "pw": "pw"})


def test_logout_closes_session(identity_store, admin_credentials):
    identity = IdentityProvider(identity_store)
    identity.login(admin_credentials)
    token = identity.session_token
    identity.logout()
    assert identity.is_authenticated() is False
    assert identity.session_token is None
    assert identity_store.resolve_session(token) is None


def test_unknown_session_token_is_ignored(identity_store):
    identity = IdentityProvider(identity_store, "stale-token")
    assert identity.is_authenticated() is False
    assert identity.session_token is None


def test_user_management_helpers(identity_store):
    identity = IdentityProvider(identity_store)
    user = identity.create_user("new@example.com", "pw", "New", "User")
    assert identity.get_user("new@example.com") == user
    assert identity.get_user_by_id(str(user.id)) == user
    with pytest.raises(IdentityError):
        identity.get_user("ghost@example.com")
    with pytest.raises(IdentityError, match="Invalid user id"):
        identity.get_user_by_id("abc")

    activation = identity.activation_for(user)
    identity.activate(user, activation.code)
    assert identity_store.is_activated(user.id) is True
    # Already active: nothing to do.
    identity.activate(user, "whatever")

    identity.deactivate(user)
    assert identity_store.is_activated(user.id) is False
    with pytest.raises(IdentityError, match="No activation record"):
        identity.activate(user)
    with pytest.raises(IdentityError, match="Could not remove"):
        identity.deactivate(user)

    identity.delete_user(user)
    with pytest.raises(IdentityError):
        identity.get_user_by_id(user.id)


def test_activate_with_wrong_code(identity_store):
    identity = IdentityProvider(identity_store)
    user = identity.create_user("new@example.com", "pw")
    identity.activation_for(user)
    with pytest.raises(IdentityError, match="could not be completed"):
        identity.activate(user, "wrong")
