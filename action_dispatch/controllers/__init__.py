"""Built-in controllers and the default registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .admin import AdminController
from .auth import AuthController
from .base import Controller, action
from .public import PublicController

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from action_dispatch.services.routing import ControllerRegistry

DEFAULT_CONTROLLERS: tuple[type[Controller], ...] = (
    AdminController,
    AuthController,
    PublicController,
)


def build_default_registry() -> "ControllerRegistry":
    """Return a registry holding the built-in controllers."""
    # pylint: disable=import-outside-toplevel
    from action_dispatch.services.routing import ControllerRegistry

    return ControllerRegistry(DEFAULT_CONTROLLERS)


__all__ = [
    "AdminController",
    "AuthController",
    "Controller",
    "DEFAULT_CONTROLLERS",
    "PublicController",
    "action",
    "build_default_registry",
]
