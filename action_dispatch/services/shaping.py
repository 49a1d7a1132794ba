"""Turns a Response into the payload each origin expects."""

from __future__ import annotations

import json
from typing import Any, Optional

from markupsafe import Markup

from action_dispatch.core.directives import ControllerEntry
from action_dispatch.core.exceptions import MissingTemplate
from action_dispatch.core.models import PageInfo, RequestContext, Response, ShapedResponse
from action_dispatch.core.ports import RendererPort

JSON_MEDIA_TYPE = "application/json"
HTML_MEDIA_TYPE = "text/html"
TEXT_MEDIA_TYPE = "text/plain"


def plain_text(message: Optional[str]) -> str:
    """Undo HTML escaping for terminal output."""
    if message is None:
        return ""
    return Markup(message).unescape() if isinstance(message, Markup) else str(message)


class ResponseShaper:
    """Shape Responses as JSON (async), HTML pages (sync) or text (CLI)."""

    def __init__(self, renderer: RendererPort) -> None:
        self._renderer = renderer

    def shape(
        self,
        response: Response,
        context: RequestContext,
        entry: Optional[ControllerEntry] = None,
        *,
        content_only: bool = False,
    ) -> ShapedResponse:
        status = int(response.status)
        if context.is_async:
            return ShapedResponse(JSON_MEDIA_TYPE, self._json_payload(response), status)
        if context.is_from_cli:
            return ShapedResponse(TEXT_MEDIA_TYPE, self._cli_text(response), status)
        if content_only:
            return ShapedResponse(HTML_MEDIA_TYPE, response.content or "", status)
        return ShapedResponse(HTML_MEDIA_TYPE, self._page(response, entry), status)

    @staticmethod
    def _json_payload(response: Response) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": response.success}
        if response.message is not None:
            payload["message"] = str(response.message)
        payload["data"] = dict(response.data) if response.data is not None else None
        return payload

    @staticmethod
    def _cli_text(response: Response) -> str:
        if response.message is not None:
            return plain_text(response.message)
        if response.data is not None:
            return json.dumps(dict(response.data), sort_keys=True, default=str)
        return "OK." if response.success else "Request failed."

    def _page(self, response: Response, entry: Optional[ControllerEntry]) -> str:
        if entry is None or not entry.template:
            raise MissingTemplate("No page template is configured for this controller.")
        page = response.page or PageInfo()
        return self._renderer.render(
            entry.template,
            {
                "content": Markup(response.content or ""),
                "message": response.message,
                "success": response.success,
                "title": page.title,
                "section": page.section,
                "meta_description": page.meta_description,
            },
        )


__all__ = [
    "HTML_MEDIA_TYPE",
    "JSON_MEDIA_TYPE",
    "ResponseShaper",
    "TEXT_MEDIA_TYPE",
    "plain_text",
]
