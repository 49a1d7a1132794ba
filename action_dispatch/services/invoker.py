"""Action invocation with result validation."""

from __future__ import annotations

from typing import Callable, Optional

from action_dispatch.controllers.base import Controller
from action_dispatch.core.exceptions import ContractViolation, UnknownAction
from action_dispatch.core.models import (
    SESSION_EXIT,
    RequestContext,
    Response,
    RouteTarget,
    SessionExit,
)
from action_dispatch.services.errors import ErrorResponder


class ActionInvoker:  # pylint: disable=too-few-public-methods
    """Looks up the action in the controller's table and runs it.

    Failures raised by the action itself are recorded and converted into an
    error Response, and ``on_failure`` is called so the owner can undo any
    presentation state the action changed before failing. Lookup failures and
    contract violations are raised to the dispatcher, which records them.
    """

    def __init__(
        self, errors: ErrorResponder, on_failure: Optional[Callable[[], None]] = None
    ) -> None:
        self._errors = errors
        self._on_failure = on_failure

    def invoke(
        self,
        controller: Controller,
        target: RouteTarget,
        context: RequestContext,
    ) -> Response | SessionExit:
        handler = controller.actions().get(target.action_name)
        if handler is None:
            raise UnknownAction(f"{controller} has no action named {target.action_name!r}")

        try:
            outcome = handler()
        except Exception as exc:  # noqa: BLE001 - action failures become error responses
            response = self._errors.respond(exc, context, target.entry)
            if self._on_failure is not None:
                self._on_failure()
            return response

        if outcome is SESSION_EXIT:
            if context.is_from_cli:
                return SESSION_EXIT
            raise ContractViolation(
                f"{controller}.{target.action_name} ended the session outside the CLI"
            )
        if not isinstance(outcome, Response):
            raise ContractViolation(
                f"{controller}.{target.action_name} must return a Response, "
                f"got {type(outcome).__name__}"
            )
        return outcome


__all__ = ["ActionInvoker"]
