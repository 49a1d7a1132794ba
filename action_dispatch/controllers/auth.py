"""Login and logout actions."""

from __future__ import annotations

from typing import Mapping

from action_dispatch.core.exceptions import InvalidCredentials, MalformedInput
from action_dispatch.core.models import Response

from .base import Controller, action


class AuthController(Controller):
    """Authenticate the requester with credentials posted as JSON."""

    name = "AuthController"

    @action
    def auth(self) -> Response:
        credentials = self.json_body()
        if not isinstance(credentials, Mapping):
            raise MalformedInput("JSON decode error: expected an object")
        try:
            user = self.identity.login(credentials)
        except InvalidCredentials as exc:
            return Response(False, message=f"Login failed. {exc}", data={"authenticated": False})
        return Response(
            True,
            message="Login successful.",
            data={"authenticated": True, "user": user.details()},
        )

    @action
    def logout(self) -> Response:
        self.identity.logout()
        return Response(True, message="Logged out.", data={"authenticated": False})


__all__ = ["AuthController"]
