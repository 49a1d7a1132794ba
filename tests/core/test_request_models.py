"""Tests for RequestContext, RouteTarget and Response."""
# pylint: disable=missing-function-docstring

from http import HTTPStatus

import pytest
from markupsafe import Markup

from action_dispatch.core.exceptions import InvalidRoute, MalformedInput
from action_dispatch.core.models import (
    SESSION_EXIT,
    Origin,
    RequestContext,
    Response,
    RouteTarget,
    SessionExit,
)


def test_context_is_immutable():
    context = RequestContext(parameters={"ctrl": "admin"})
    with pytest.raises(TypeError):
        context.parameters["ctrl"] = "public"  # type: ignore[index]
    with pytest.raises(AttributeError):
        context.origin = Origin.CLI  # type: ignore[misc]


def test_context_copies_input_mappings():
    params = {"ctrl": "admin"}
    context = RequestContext(parameters=params)
    params["ctrl"] = "public"
    assert context.parameter("ctrl") == "admin"


def test_resolve_controller_label_defaults(directive_store):
    assert RequestContext().resolve_controller_label(directive_store) == "public"


def test_resolve_controller_label_unknown(directive_store):
    context = RequestContext(parameters={"ctrl": "ghost"})
    with pytest.raises(InvalidRoute, match="ghost"):
        context.resolve_controller_label(directive_store)


def test_resolve_action_name_does_not_validate(directive_store):
    context = RequestContext(parameters={"ctrl": "admin", "action": "anything"})
    assert context.resolve_action_name(directive_store) == "anything"
    assert RequestContext().resolve_action_name(directive_store) == "home"


def test_public_resource_and_authentication_attempt(directive_store):
    assert RequestContext().is_for_public_resource(directive_store) is True
    login = RequestContext(parameters={"ctrl": "auth", "action": "auth"})
    assert login.is_authentication_attempt(directive_store) is True
    logout = RequestContext(parameters={"ctrl": "auth", "action": "logout"})
    assert logout.is_authentication_attempt(directive_store) is False
    assert logout.is_for_public_resource(directive_store) is False


def test_decode_json_body_reads_form_then_parameters():
    context = RequestContext(parameters={"data": '{"a": 2}'}, form={"data": '{"a": 1}'})
    assert context.decode_json_body("data") == {"a": 1}
    assert RequestContext(parameters={"data": '{"a": 2}'}).decode_json_body("data") == {"a": 2}


@pytest.mark.parametrize(
    ("form", "message"),
    [
        ({}, "JSON not found."),
        ({"data": "{oops"}, "JSON decode error"),
        ({"data": "{}"}, "empty document"),
    ],
)
def test_decode_json_body_failures(form, message):
    context = RequestContext(form=form)
    with pytest.raises(MalformedInput, match=message):
        context.decode_json_body("data")
    # Side-effect free: a retry fails the same way.
    with pytest.raises(MalformedInput):
        context.decode_json_body("data")


def test_request_url_rebuilds_query():
    context = RequestContext(parameters={"ctrl": "admin", "action": "addUser"})
    assert context.request_url() == "?ctrl=admin&action=addUser"


def test_origin_flags():
    assert RequestContext(origin=Origin.WEB_ASYNC).is_async is True
    assert RequestContext(origin=Origin.CLI).is_from_cli is True
    assert RequestContext().is_async is False


def test_route_target_rejects_invalid_action_name(directive_store):
    entry = directive_store.controller_entry("public")
    with pytest.raises(InvalidRoute):
        RouteTarget("public", object, "../etc/passwd", True, entry)
    target = RouteTarget("public", object, "_private1", True, entry)
    assert target.action_name == "_private1"


def test_response_requires_boolean_success():
    with pytest.raises(TypeError):
        Response(1)  # type: ignore[arg-type]


def test_response_escapes_message():
    response = Response(True, message="<b>bold</b>")
    assert response.message == "&lt;b&gt;bold&lt;/b&gt;"
    assert Response(True, message=Markup("<b>ok</b>")).message == "<b>ok</b>"
    assert Response(True).status is HTTPStatus.OK


def test_session_exit_is_singleton():
    assert SessionExit() is SESSION_EXIT
    assert repr(SESSION_EXIT) == "SESSION_EXIT"
    assert not isinstance(SESSION_EXIT, BaseException)
