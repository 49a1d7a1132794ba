"""Application service layer scaffolding for request dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from action_dispatch.core.directives import DirectiveStore
from action_dispatch.core.ports import ErrorRecorderPort, IdentityStorePort, RendererPort

if TYPE_CHECKING:  # pragma: no cover - type narrowing only
    from .routing import ControllerRegistry


@dataclass(slots=True)
class ServiceContainer:
    """Collaborators shared by the dispatcher and every controller it builds."""

    directives: DirectiveStore
    controllers: "ControllerRegistry"
    identity_store: IdentityStorePort
    renderer: RendererPort
    recorder: ErrorRecorderPort
    # Opaque database handle handed to controllers untouched.
    data_store: Optional[Any] = None


def build_services(
    *,
    directives: DirectiveStore,
    identity_store: IdentityStorePort,
    renderer: RendererPort,
    recorder: Optional[ErrorRecorderPort] = None,
    controllers: Optional["ControllerRegistry"] = None,
    data_store: Optional[Any] = None,
) -> ServiceContainer:
    """Return a service container with the default controllers and recorder."""

    # pylint: disable=import-outside-toplevel
    from action_dispatch.controllers import build_default_registry

    from .errors import ErrorRecorder

    return ServiceContainer(
        directives=directives,
        controllers=controllers or build_default_registry(),
        identity_store=identity_store,
        renderer=renderer,
        recorder=recorder or ErrorRecorder(),
        data_store=data_store,
    )


__all__ = ["ServiceContainer", "build_services"]
