"""Application bootstrap helpers for assembling the service container."""

from __future__ import annotations

from pathlib import Path

from action_dispatch.adapters.identity import IdentityAdapter
from action_dispatch.adapters.renderer import TemplateRenderer
from action_dispatch.core.config import config
from action_dispatch.core.directives import DirectiveStore
from action_dispatch.services import ServiceContainer, build_services


def build_default_service_container(
    directives_path: Path | None = None,
    *,
    db_path: Path | None = None,
    templates_dir: Path | None = None,
) -> ServiceContainer:
    """Return the default service container wired to production adapters.

    Roles declared in the directive file are synced into the identity store so
    that permission checks always reflect the loaded configuration.
    """

    directives = DirectiveStore.load(directives_path or config.DIRECTIVES_PATH)
    identity = IdentityAdapter(db_path)
    identity.sync_roles(directives.roles())
    return build_services(
        directives=directives,
        identity_store=identity,
        renderer=TemplateRenderer(templates_dir),
    )


__all__ = ["build_default_service_container"]
