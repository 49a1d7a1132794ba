"""The dispatcher: one pass from RequestContext to ShapedResponse.

Each pass resolves the route, asks the authorization gate, runs the action
(or builds the login / denial / client-app Response), and shapes the result
for the request's origin. Every failure is recorded once and converted into
an error Response here, so ``dispatch`` itself never raises.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Callable, Mapping, Optional

from markupsafe import Markup

from action_dispatch.core.config import config as settings
from action_dispatch.core.directives import ControllerEntry
from action_dispatch.core.exceptions import AuthorizationDenied, DispatchError
from action_dispatch.core.logging import get_logger, request_origin_context
from action_dispatch.core.models import (
    SESSION_EXIT,
    AuthorizationDecision,
    Origin,
    RequestContext,
    Response,
    RouteTarget,
    SessionExit,
    ShapedResponse,
)
from action_dispatch.services import ServiceContainer
from action_dispatch.services.authorization import AuthorizationGate
from action_dispatch.services.errors import ErrorResponder
from action_dispatch.services.identity import IdentityProvider
from action_dispatch.services.invoker import ActionInvoker
from action_dispatch.services.request_context import parse_command_line
from action_dispatch.services.routing import resolve_route
from action_dispatch.services.shaping import ResponseShaper

logger = get_logger(__name__)

LOGIN_REQUIRED_MESSAGE = "Authentication Required. User must log in before making this request."
SESSION_END_MESSAGE = "Bye."


class Dispatcher:
    """Routes requests to controller actions and shapes their results."""

    def __init__(
        self,
        services: ServiceContainer,
        identity: Optional[IdentityProvider] = None,
    ) -> None:
        self.services = services
        self.config = services.directives
        self.identity = identity or IdentityProvider(services.identity_store)
        self.active = False
        self._errors = ErrorResponder(services.recorder, services.renderer)
        self._gate = AuthorizationGate(self.config, self.identity)
        self._invoker = ActionInvoker(self._errors, on_failure=self._failure_recorded)
        self._shaper = ResponseShaper(services.renderer)
        self._serve_content_only = False
        self._failed = False
        self._target: Optional[RouteTarget] = None

    # Accessors for the pass in progress

    @property
    def serve_content_only(self) -> bool:
        return self._serve_content_only

    def toggle_serve_content_only(self, setting: Optional[bool] = None) -> bool:
        """Flip (or set) whether this pass emits the bare content body."""
        self._serve_content_only = (not self._serve_content_only) if setting is None else setting
        return self._serve_content_only

    def controller_name(self) -> Optional[str]:
        return self._target.controller_label if self._target else None

    def action_name(self) -> Optional[str]:
        return self._target.action_name if self._target else None

    # Single pass

    def dispatch(
        self, context: RequestContext, serve_client_app: bool = False
    ) -> ShapedResponse | SessionExit:
        """Run one request through routing, authorization, invocation and shaping."""
        self._serve_content_only = False
        self._failed = False
        self._target = None
        entry: Optional[ControllerEntry] = None

        with request_origin_context(context.origin.value):
            try:
                target = resolve_route(context, self.config, self.services.controllers)
                self._target = target
                entry = target.entry
                outcome = self._run(target, context, serve_client_app)
                if outcome is SESSION_EXIT:
                    return SESSION_EXIT
            except Exception as exc:  # noqa: BLE001 - every failure is shaped, never raised
                entry = entry or self._fallback_entry()
                outcome = self._errors.respond(exc, context, entry)
                self._failure_recorded()
            return self._shape(outcome, context, entry or self._fallback_entry())

    def _run(
        self, target: RouteTarget, context: RequestContext, serve_client_app: bool
    ) -> Response | SessionExit:
        decision = self._gate.evaluate(target, context)
        logger.debug(
            "Authorization decision for %s.%s: %s",
            target.controller_label,
            target.action_name,
            decision.value,
        )
        if decision is AuthorizationDecision.LOGIN_REQUIRED:
            return self._login_required(context)
        if decision is AuthorizationDecision.DENIED:
            logger.info(
                "Permission denied for %s.%s", target.controller_label, target.action_name
            )
            return self._errors.build(AuthorizationDenied(), context, target.entry)
        if serve_client_app and context.origin is Origin.WEB_SYNC:
            return self._client_app(target)
        controller = target.controller_class(self, self.services, context)
        return self._invoker.invoke(controller, target, context)

    def _login_required(self, context: RequestContext) -> Response:
        data = {"error_code": "login_required", "message": LOGIN_REQUIRED_MESSAGE}
        if context.is_async:
            return Response(False, data=data, status=HTTPStatus.UNAUTHORIZED)
        login_page = self.config.login_page()
        if login_page:
            content = self.services.renderer.render(
                login_page,
                {"message": LOGIN_REQUIRED_MESSAGE, "request_url": context.request_url()},
            )
            self.toggle_serve_content_only(True)
        else:
            content = str(Markup("<p>{}</p>").format(LOGIN_REQUIRED_MESSAGE))
        return Response(
            False,
            message=LOGIN_REQUIRED_MESSAGE,
            data=data,
            content=content,
            status=HTTPStatus.UNAUTHORIZED,
        )

    def _client_app(self, target: RouteTarget) -> Response:
        path = self.config.client_app_path(target.controller_label)
        content = self.services.renderer.read_raw(path)
        self.toggle_serve_content_only(True)
        return Response(True, content=content)

    def _shape(
        self, outcome: Response, context: RequestContext, entry: ControllerEntry
    ) -> ShapedResponse:
        try:
            return self._shaper.shape(
                outcome, context, entry, content_only=self._serve_content_only
            )
        except DispatchError as exc:
            # Presentation failed; fall back to the bare error body.
            self._serve_content_only = True
            if self._failed:
                # The pass already recorded its failure.
                logger.warning("Could not present error response: %s", exc)
                error = self._errors.build(exc, context, entry)
            else:
                error = self._errors.respond(exc, context, entry)
                self._failed = True
            return self._shaper.shape(error, context, entry, content_only=True)

    def _failure_recorded(self) -> None:
        """Note that this pass recorded a failure; errors are shown in the page template."""
        self._serve_content_only = False
        self._failed = True

    def _fallback_entry(self) -> ControllerEntry:
        return self.config.controller_entry(self.config.default_controller())

    # Interactive session

    def run_interactive_session(
        self,
        read_line: Optional[Callable[[str], str]] = None,
        write: Optional[Callable[[str], Any]] = None,
        credentials: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Read, dispatch and print commands until ``exit`` or end of input.

        While nobody is logged in, every line is treated as a login attempt
        (``un=<login> pw=<password>``). Errors are printed and the loop goes on.
        """
        read_line = read_line or input
        write = write or print
        self.active = True

        if credentials and not self.identity.is_authenticated():
            self._cli_login(credentials, write)

        while self.active:
            try:
                line = read_line(settings.CLI_PROMPT)
            except (EOFError, KeyboardInterrupt):
                self._end_session(write)
                break
            self._run_command(line, write)

    def _run_command(self, line: str, write: Callable[[str], Any]) -> None:
        cli_context = RequestContext(origin=Origin.CLI)
        try:
            parsed = parse_command_line(line)
        except DispatchError as exc:
            error = self._errors.respond(exc, cli_context)
            write(self._shaper.shape(error, cli_context).body)
            return

        if parsed is SESSION_EXIT:
            self._end_session(write)
            return
        if not self.identity.is_authenticated():
            self._cli_login(parsed.parameters, write)
            return

        result = self.dispatch(parsed)
        if result is SESSION_EXIT:
            self._end_session(write)
            return
        write(result.body)

    def _cli_login(self, credentials: Mapping[str, str], write: Callable[[str], Any]) -> None:
        cli_context = RequestContext(origin=Origin.CLI)
        try:
            user = self.identity.login(credentials)
        except Exception as exc:  # noqa: BLE001 - a failed login leaves the session open
            error = self._errors.respond(exc, cli_context)
            write(self._shaper.shape(error, cli_context).body)
            return
        write(f"Logged in as {user.login}.")

    def _end_session(self, write: Callable[[str], Any]) -> None:
        self.active = False
        write(SESSION_END_MESSAGE)


__all__ = ["Dispatcher", "LOGIN_REQUIRED_MESSAGE", "SESSION_END_MESSAGE"]
