"""Tests for building RequestContext values from transport input."""
# pylint: disable=missing-function-docstring

import pytest

from action_dispatch.core.exceptions import MalformedInput
from action_dispatch.core.models import SESSION_EXIT, Origin
from action_dispatch.services.request_context import (
    SYNTAX_ERROR_MESSAGE,
    classify_origin,
    context_from_argv,
    context_from_web,
    parse_command_line,
)


@pytest.mark.parametrize(
    ("form", "argv", "expected"),
    [
        ({"ajrq": "1"}, None, Origin.WEB_ASYNC),
        ({"ajrq": "1"}, ["ctrl=admin"], Origin.WEB_ASYNC),
        ({}, ["ctrl=admin"], Origin.CLI),
        ({"name": "x"}, ["ctrl=admin"], Origin.WEB_SYNC),
        ({}, None, Origin.WEB_SYNC),
        ({}, [], Origin.WEB_SYNC),
    ],
)
def test_classify_origin(form, argv, expected):
    assert classify_origin(form, argv, "ajrq") is expected


def test_context_from_web_uses_async_flag(directive_store):
    context = context_from_web({"ctrl": "admin"}, {"ajrq": "1"}, directive_store)
    assert context.origin is Origin.WEB_ASYNC
    assert context.parameter("ctrl") == "admin"
    assert context.form["ajrq"] == "1"
    assert context_from_web({}, {}, directive_store).origin is Origin.WEB_SYNC


def test_parse_command_line_splits_on_first_equals():
    context = parse_command_line("ctrl=admin  action=addUser token=a=b=c")
    assert context.origin is Origin.CLI
    assert dict(context.parameters) == {"ctrl": "admin", "action": "addUser", "token": "a=b=c"}


def test_parse_command_line_allows_empty_values():
    assert dict(parse_command_line("email=").parameters) == {"email": ""}


def test_parse_command_line_exit():
    assert parse_command_line("exit") is SESSION_EXIT
    assert parse_command_line("  exit  ") is SESSION_EXIT


@pytest.mark.parametrize("line", ["", "   ", "ctrl=admin bogus", "=value", "exit now"])
def test_parse_command_line_syntax_errors(line):
    with pytest.raises(MalformedInput) as excinfo:
        parse_command_line(line)
    assert str(excinfo.value) == SYNTAX_ERROR_MESSAGE


def test_context_from_argv():
    context = context_from_argv(["ctrl=admin", "action=getUserDetails"])
    assert context.origin is Origin.CLI
    assert context.parameter("action") == "getUserDetails"
    with pytest.raises(MalformedInput):
        context_from_argv(["exit"])


def test_context_from_empty_argv_uses_defaults():
    context = context_from_argv([])
    assert context.origin is Origin.CLI
    assert dict(context.parameters) == {}
