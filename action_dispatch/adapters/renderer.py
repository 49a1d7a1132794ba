"""Jinja2-backed template renderer."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from action_dispatch.core.config import config
from action_dispatch.core.exceptions import ConfigurationError, MissingTemplate
from action_dispatch.core.ports import RendererPort


class TemplateRenderer(RendererPort):
    """Render page, error, and login templates from a directory."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._templates_dir = Path(templates_dir or getattr(config, "TEMPLATES_DIR", "templates"))
        self._env = Environment(
            loader=FileSystemLoader(self._templates_dir),
            autoescape=select_autoescape(["html", "htm", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        try:
            return self._env.get_template(template).render(dict(context))
        except TemplateNotFound as exc:
            raise MissingTemplate(f"Template not found: {exc.name}") from exc
        except TemplateError as exc:
            raise ConfigurationError(f"Template {template} failed to render: {exc}") from exc

    def read_raw(self, path: str) -> str:
        """Return a client-app bootstrap file, resolved against the templates dir."""
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self._templates_dir / candidate
        try:
            return candidate.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise MissingTemplate(f"Client app not found: {path}") from exc


__all__ = ["TemplateRenderer"]
