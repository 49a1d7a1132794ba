"""Builders that turn raw transport input into RequestContext values."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from action_dispatch.core.directives import DirectiveStore
from action_dispatch.core.exceptions import MalformedInput
from action_dispatch.core.models import SESSION_EXIT, Origin, RequestContext, SessionExit

EXIT_COMMAND = "exit"
SYNTAX_ERROR_MESSAGE = (
    "Syntax error. Arguments must be separated by spaces and of the form param=value."
)


def classify_origin(
    form: Mapping[str, str],
    argv: Optional[Sequence[str]],
    async_flag: str,
) -> Origin:
    """Decide which channel a request came through.

    The async flag in the form body wins; command-line arguments without a
    form body mean the CLI; everything else is a synchronous web request.
    """
    if async_flag in form:
        return Origin.WEB_ASYNC
    if argv and not form:
        return Origin.CLI
    return Origin.WEB_SYNC


def context_from_web(
    query: Mapping[str, str],
    form: Mapping[str, str],
    config: DirectiveStore,
) -> RequestContext:
    origin = classify_origin(form, None, config.async_flag())
    return RequestContext(parameters=dict(query), form=dict(form), origin=origin)


def _parse_tokens(tokens: Sequence[str]) -> dict[str, str]:
    if not tokens:
        raise MalformedInput(SYNTAX_ERROR_MESSAGE)
    parameters: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep or not key:
            raise MalformedInput(SYNTAX_ERROR_MESSAGE)
        parameters[key] = value
    return parameters


def parse_command_line(line: str) -> RequestContext | SessionExit:
    """Parse one interactive line into a CLI context, or SESSION_EXIT for ``exit``.

    Tokens are split on whitespace and each must contain ``=``; only the
    first ``=`` separates key from value, so values may contain ``=``.
    """
    tokens = line.split()
    if len(tokens) == 1 and tokens[0] == EXIT_COMMAND:
        return SESSION_EXIT
    return RequestContext(parameters=_parse_tokens(tokens), origin=Origin.CLI)


def context_from_argv(argv: Sequence[str]) -> RequestContext:
    """Build a CLI context from process arguments (``ctrl=admin action=x``).

    No arguments at all selects the default controller and action.
    """
    if not argv:
        return RequestContext(origin=Origin.CLI)
    return RequestContext(parameters=_parse_tokens(list(argv)), origin=Origin.CLI)


__all__ = [
    "EXIT_COMMAND",
    "SYNTAX_ERROR_MESSAGE",
    "classify_origin",
    "context_from_argv",
    "context_from_web",
    "parse_command_line",
]
