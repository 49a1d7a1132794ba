"""Landing page served without authentication."""

from __future__ import annotations

from markupsafe import Markup

from action_dispatch.core.models import PageInfo, Response

from .base import Controller, action


class PublicController(Controller):
    name = "PublicController"

    @action
    def home(self) -> Response:
        user = self.identity.current_user()
        greeting = f"Welcome, {user.full_name}." if user else "Welcome."
        return Response(
            True,
            message=greeting,
            content=str(Markup("<p>{}</p>").format(greeting)),
            page=PageInfo(title="Home", section="home"),
        )


__all__ = ["PublicController"]
