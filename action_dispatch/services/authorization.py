"""Authorization gate deciding whether a resolved route may run."""

from __future__ import annotations

from action_dispatch.core.directives import DirectiveStore
from action_dispatch.core.models import AuthorizationDecision, RequestContext, RouteTarget
from action_dispatch.services.identity import IdentityProvider


class AuthorizationGate:  # pylint: disable=too-few-public-methods
    """Three-step check: public controllers, login, then permissions.

    Permissions are only looked up once the login step has passed, so an
    unauthenticated web request is asked to log in rather than denied.
    """

    def __init__(self, config: DirectiveStore, identity: IdentityProvider) -> None:
        self._config = config
        self._identity = identity

    def evaluate(self, target: RouteTarget, context: RequestContext) -> AuthorizationDecision:
        if target.is_public:
            return AuthorizationDecision.PERMITTED

        if (
            not self._identity.is_authenticated()
            and not context.is_from_cli
            and not context.is_authentication_attempt(self._config)
        ):
            return AuthorizationDecision.LOGIN_REQUIRED

        required = self._config.permissions_for(target.controller_label, target.action_name)
        if self._identity.has_permission(required):
            return AuthorizationDecision.PERMITTED
        return AuthorizationDecision.DENIED


__all__ = ["AuthorizationGate"]
