"""Core data transfer objects shared across the dispatch layers."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

from markupsafe import Markup, escape

from action_dispatch.core.exceptions import InvalidRoute, MalformedInput

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from action_dispatch.core.directives import ControllerEntry, DirectiveStore

ACTION_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Origin(str, Enum):
    """Channel through which a request arrived."""

    WEB_SYNC = "web-sync"
    WEB_ASYNC = "web-async"
    CLI = "cli"


class AuthorizationDecision(str, Enum):
    """Outcome of the authorization gate for one pass."""

    PERMITTED = "permitted"
    LOGIN_REQUIRED = "login_required"
    DENIED = "denied"


class SessionExit:
    """Control signal that ends an interactive session. Not an error."""

    _instance: Optional["SessionExit"] = None

    def __new__(cls) -> "SessionExit":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SESSION_EXIT"


SESSION_EXIT = SessionExit()


def _freeze(mapping: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Immutable view over one inbound request."""

    parameters: Mapping[str, str] = field(default_factory=dict)
    form: Mapping[str, str] = field(default_factory=dict)
    origin: Origin = Origin.WEB_SYNC

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", _freeze(self.parameters))
        object.__setattr__(self, "form", _freeze(self.form))

    @property
    def is_async(self) -> bool:
        return self.origin is Origin.WEB_ASYNC

    @property
    def is_from_cli(self) -> bool:
        return self.origin is Origin.CLI

    def parameter(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return a request parameter, or ``default`` when absent."""
        return self.parameters.get(name, default)

    def request_url(self) -> str:
        """Rebuild the query string that produced this request."""
        return "?" + "&".join(f"{key}={value}" for key, value in self.parameters.items())

    def resolve_controller_label(self, config: "DirectiveStore") -> str:
        """Return the requested controller label, or the configured default.

        An absent label falls back to the default; a label that is present but
        unknown to the configuration is an error.
        """
        label = self.parameters.get(config.query_param_name("controller"))
        if label is None:
            return config.default_controller()
        if not config.has_controller(label):
            raise InvalidRoute(f"Invalid controller requested: {label}")
        return label

    def resolve_action_name(self, config: "DirectiveStore") -> str:
        """Return the requested action name, or the configured default."""
        return self.parameters.get(config.query_param_name("action"), config.default_action())

    def is_for_public_resource(self, config: "DirectiveStore") -> bool:
        label = self.resolve_controller_label(config)
        return config.controller_entry(label).is_public

    def is_authentication_attempt(self, config: "DirectiveStore") -> bool:
        auth = config.auth_route()
        return (
            self.resolve_controller_label(config) == auth.controller
            and self.resolve_action_name(config) == auth.action
        )

    def decode_json_body(self, field_name: str) -> Any:
        """Decode the JSON document posted under ``field_name``."""
        raw = self.form.get(field_name)
        if raw is None:
            raw = self.parameters.get(field_name)
        if raw is None:
            raise MalformedInput("JSON not found.")
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedInput(f"JSON decode error: {exc.msg}") from exc
        if not decoded:
            raise MalformedInput("JSON decode error: empty document")
        return decoded


@dataclass(frozen=True, slots=True)
class RouteTarget:
    """Controller and action resolved for one pass."""

    controller_label: str
    controller_class: type
    action_name: str
    is_public: bool
    entry: "ControllerEntry"

    def __post_init__(self) -> None:
        if not ACTION_NAME_PATTERN.match(self.action_name):
            raise InvalidRoute(f"Invalid action requested: {self.action_name!r}")


@dataclass(frozen=True, slots=True)
class PageInfo:
    """Page metadata made available to synchronous templates."""

    title: Optional[str] = None
    section: Optional[str] = None
    meta_description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Response:
    """Outcome of an action or of error shaping."""

    success: bool
    message: Optional[str] = None
    data: Optional[Mapping[str, Any]] = None
    content: Optional[str] = None
    page: Optional[PageInfo] = None
    status: HTTPStatus = HTTPStatus.OK

    def __post_init__(self) -> None:
        if not isinstance(self.success, bool):
            raise TypeError("Response.success expects a boolean")
        if self.message is not None and not isinstance(self.message, Markup):
            object.__setattr__(self, "message", escape(self.message))


@dataclass(frozen=True, slots=True)
class ShapedResponse:
    """Origin-specific payload ready for the transport to emit."""

    media_type: str
    body: Any
    status_code: int = int(HTTPStatus.OK)


__all__ = [
    "ACTION_NAME_PATTERN",
    "AuthorizationDecision",
    "Origin",
    "PageInfo",
    "RequestContext",
    "Response",
    "RouteTarget",
    "SESSION_EXIT",
    "SessionExit",
    "ShapedResponse",
]
