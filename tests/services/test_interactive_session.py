"""Tests for the interactive command-line session loop."""
# pylint: disable=missing-function-docstring

import logging

import pytest

from action_dispatch.core.exceptions import InvalidCredentials, MalformedInput
from action_dispatch.services.dispatcher import SESSION_END_MESSAGE
from action_dispatch.services.request_context import SYNTAX_ERROR_MESSAGE


class ScriptedTerminal:
    """Feeds prepared lines to the loop and keeps everything it prints."""

    def __init__(self, *lines: str) -> None:
        self._lines = list(lines)
        self.prompts: list[str] = []
        self.output: list[str] = []

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._lines:
            raise EOFError
        return self._lines.pop(0)

    def write(self, text: str) -> None:
        self.output.append(str(text))


def _run(dispatcher, terminal, credentials=None):
    dispatcher.run_interactive_session(terminal.read_line, terminal.write, credentials)


def test_scenario_c_failed_login_keeps_loop_active(dispatcher, admin_user, recorder):
    terminal = ScriptedTerminal(f"un={admin_user.login} pw=wrong")
    dispatcher.run_interactive_session(terminal.read_line, terminal.write)
    assert terminal.output[0] == "Request could not be completed. Invalid Password."
    # The loop asked for another line after the failure; only end of input stopped it.
    assert len(terminal.prompts) == 2
    assert terminal.output[-1] == SESSION_END_MESSAGE
    assert dispatcher.identity.is_authenticated() is False
    assert [type(e) for e in recorder.errors] == [InvalidCredentials]


def test_scenario_d_exit_ends_without_pass_or_log(dispatcher, recorder, caplog):
    terminal = ScriptedTerminal("exit", "ctrl=public")
    with caplog.at_level(logging.DEBUG):
        _run(dispatcher, terminal)
    assert terminal.output == [SESSION_END_MESSAGE]
    assert len(terminal.prompts) == 1
    assert dispatcher.active is False
    assert dispatcher.controller_name() is None
    assert recorder.errors == []
    assert caplog.records == []


def test_login_line_then_commands(dispatcher, admin_credentials):
    terminal = ScriptedTerminal(
        f"un={admin_credentials['un']} pw={admin_credentials['pw']}",
        "ctrl=public",
        "exit",
    )
    _run(dispatcher, terminal)
    assert terminal.output == [
        f"Logged in as {admin_credentials['un']}.",
        "Welcome, admin@example.com.",
        SESSION_END_MESSAGE,
    ]
    assert dispatcher.identity.is_authenticated() is True


def test_initial_credentials_then_commands(dispatcher, admin_credentials):
    terminal = ScriptedTerminal(
        f"ctrl=admin action=getUserDetails email={admin_credentials['un']}",
        "ctrl=admin action=createActivation",
        "exit",
    )
    _run(dispatcher, terminal, admin_credentials)
    assert terminal.output[0] == f"Logged in as {admin_credentials['un']}."
    assert terminal.output[1].startswith(f"Details for user {admin_credentials['un']}:")
    assert "firstName: " in terminal.output[1]
    # Errors are printed and the session continues.
    assert terminal.output[2] == "Request could not be completed. User not found: None"
    assert terminal.output[3] == SESSION_END_MESSAGE


def test_syntax_errors_are_printed(dispatcher, admin_credentials, recorder):
    terminal = ScriptedTerminal("", "ctrl=public stray", "exit")
    _run(dispatcher, terminal, admin_credentials)
    expected = f"Request could not be completed. {SYNTAX_ERROR_MESSAGE}"
    assert terminal.output[1:] == [expected, expected, SESSION_END_MESSAGE]
    assert [type(e) for e in recorder.errors] == [MalformedInput, MalformedInput]


def test_unauthenticated_lines_are_login_attempts(dispatcher, admin_user):
    terminal = ScriptedTerminal("ctrl=public", "exit")
    _run(dispatcher, terminal)
    assert terminal.output == [
        "Request could not be completed. Invalid Username.",
        SESSION_END_MESSAGE,
    ]
    assert admin_user.id


def test_keyboard_interrupt_ends_session(dispatcher):
    def interrupted(_prompt):
        raise KeyboardInterrupt

    output: list[str] = []
    dispatcher.run_interactive_session(interrupted, output.append)
    assert output == [SESSION_END_MESSAGE]
    assert dispatcher.active is False


def test_prompt_comes_from_settings(dispatcher, monkeypatch):
    from action_dispatch.core.config import config  # pylint: disable=import-outside-toplevel

    monkeypatch.setattr(config, "CLI_PROMPT", "ops> ", raising=True)
    terminal = ScriptedTerminal("exit")
    _run(dispatcher, terminal)
    assert terminal.prompts == ["ops> "]


@pytest.mark.parametrize("line", ["exit", "  exit"])
def test_exit_variants(dispatcher, line):
    terminal = ScriptedTerminal(line)
    _run(dispatcher, terminal)
    assert terminal.output == [SESSION_END_MESSAGE]
