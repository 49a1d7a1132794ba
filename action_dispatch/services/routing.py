"""Controller registry and route resolution."""

from __future__ import annotations

from typing import Iterable

from action_dispatch.controllers.base import Controller
from action_dispatch.core.directives import DirectiveStore
from action_dispatch.core.exceptions import ConfigurationError
from action_dispatch.core.models import RequestContext, RouteTarget


class ControllerRegistry:
    """Maps the class names used in the directive file to controller classes.

    Only classes registered here can ever be instantiated by the dispatcher,
    whatever the directive file or request says.
    """

    def __init__(self, controllers: Iterable[type[Controller]] = ()) -> None:
        self._controllers: dict[str, type[Controller]] = {}
        for controller in controllers:
            self.register(controller)

    def register(self, controller: type[Controller]) -> type[Controller]:
        if not (isinstance(controller, type) and issubclass(controller, Controller)):
            raise ConfigurationError(f"Not a controller class: {controller!r}")
        if not controller.action_names():
            raise ConfigurationError(f"Controller {controller.name} exposes no actions")
        existing = self._controllers.get(controller.name)
        if existing is not None and existing is not controller:
            raise ConfigurationError(f"Controller name already registered: {controller.name}")
        self._controllers[controller.name] = controller
        return controller

    def get(self, name: str) -> type[Controller]:
        try:
            return self._controllers[name]
        except KeyError as exc:
            raise ConfigurationError(f"No controller class registered as: {name}") from exc

    def __contains__(self, name: object) -> bool:
        return name in self._controllers

    def names(self) -> list[str]:
        return sorted(self._controllers)


def resolve_route(
    context: RequestContext,
    config: DirectiveStore,
    registry: ControllerRegistry,
) -> RouteTarget:
    """Resolve the controller class and action name the request asks for."""
    label = context.resolve_controller_label(config)
    entry = config.controller_entry(label)
    return RouteTarget(
        controller_label=label,
        controller_class=registry.get(entry.class_name),
        action_name=context.resolve_action_name(config),
        is_public=entry.is_public,
        entry=entry,
    )


__all__ = ["ControllerRegistry", "resolve_route"]
