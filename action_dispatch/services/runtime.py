"""Process-wide home of the ServiceContainer used by the web transport.

``create_app`` installs the container; request dependencies look it up here
instead of importing bootstrap or adapter modules.
"""

from __future__ import annotations

from typing import Optional

from . import ServiceContainer

_current: Optional[ServiceContainer] = None


def set_services(container: ServiceContainer) -> None:
    global _current  # pylint: disable=global-statement
    _current = container


def has_services() -> bool:
    return _current is not None


def get_services() -> ServiceContainer:
    """Return the installed container; RuntimeError until ``create_app`` ran."""
    if _current is None:
        raise RuntimeError("No service container installed; build the app with create_app().")
    return _current


def clear_services() -> None:
    global _current  # pylint: disable=global-statement
    _current = None


__all__ = ["clear_services", "get_services", "has_services", "set_services"]
