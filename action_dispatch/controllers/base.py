"""Controller base class and the ``@action`` registration decorator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, ClassVar, Mapping, Optional, TypeVar, overload

from action_dispatch.core.exceptions import ConfigurationError
from action_dispatch.core.models import ACTION_NAME_PATTERN, RequestContext, Response, SessionExit

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from action_dispatch.services import ServiceContainer
    from action_dispatch.services.dispatcher import Dispatcher
    from action_dispatch.services.identity import IdentityProvider

ActionResult = Response | SessionExit
ActionCallable = Callable[[], ActionResult]
F = TypeVar("F", bound=Callable[..., Any])

_ACTION_ATTR = "__dispatch_action__"


@overload
def action(name: F) -> F: ...


@overload
def action(name: Optional[str] = None) -> Callable[[F], F]: ...


def action(name: Any = None) -> Any:
    """Mark a controller method as a dispatchable action.

    Use bare (``@action``) to expose the method under its own name, or with a
    name (``@action("addUser")``) to expose it under a different one.
    """

    if callable(name):
        setattr(name, _ACTION_ATTR, name.__name__)
        return name

    def decorator(func: F) -> F:
        setattr(func, _ACTION_ATTR, name or func.__name__)
        return func

    return decorator


class Controller:
    """A named unit exposing a fixed table of actions.

    The table is built once per class from methods marked with ``@action``;
    nothing outside that table can be invoked through the dispatcher.
    """

    name: ClassVar[str] = ""
    _action_table: ClassVar[Mapping[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        table: dict[str, str] = {}
        for klass in reversed(cls.__mro__):
            declared: dict[str, str] = {}
            for attr, value in vars(klass).items():
                action_name = getattr(value, _ACTION_ATTR, None)
                if action_name is None:
                    continue
                if not ACTION_NAME_PATTERN.match(action_name):
                    raise ConfigurationError(
                        f"{cls.__name__}.{attr}: invalid action name {action_name!r}"
                    )
                if action_name in declared:
                    raise ConfigurationError(
                        f"{cls.__name__}: action {action_name!r} declared by both "
                        f"{declared[action_name]} and {attr}"
                    )
                declared[action_name] = attr
            table.update(declared)
        cls._action_table = table
        if not cls.__dict__.get("name"):
            cls.name = cls.__name__

    def __init__(
        self,
        dispatcher: "Dispatcher",
        services: "ServiceContainer",
        request: RequestContext,
    ) -> None:
        self.dispatcher = dispatcher
        self.services = services
        self.request = request

    def __str__(self) -> str:
        return self.name

    @classmethod
    def action_names(cls) -> frozenset[str]:
        return frozenset(cls._action_table)

    def actions(self) -> dict[str, ActionCallable]:
        """Return the action table bound to this instance."""
        return {name: getattr(self, attr) for name, attr in self._action_table.items()}

    @property
    def identity(self) -> "IdentityProvider":
        return self.dispatcher.identity

    def param(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.request.parameter(key, default)

    def json_body(self) -> Any:
        """Decode the JSON document posted under the configured body field."""
        return self.request.decode_json_body(self.services.directives.json_body_field())


__all__ = ["ActionCallable", "ActionResult", "Controller", "action"]
