"""Directive file loading and read-only access (the ConfigStore).

The directive file is a JSON document whose top-level sections describe the
query parameters used for routing, the controller map, per-action permissions,
roles, and the templates used to present results. Sections not known to the
schema are rejected so that typos surface at load time.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from action_dispatch.core.exceptions import ConfigurationError

QueryParamKind = Literal["controller", "action"]


class ControllerEntry(BaseModel):
    """Configuration of a single controller label."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    class_name: str = Field(..., alias="class", description="Registered controller name")
    is_public: bool = Field(default=False, description="Skip authentication entirely")
    template: str | None = Field(default=None, description="Page template for sync replies")
    error_template: str | None = Field(default=None, description="Error body template")
    error_heading: str = Field(default="Something went wrong")


class AuthRoute(BaseModel):
    """Controller/action pair that performs a login attempt."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    controller: str = "auth"
    action: str = "auth"


class Directives(BaseModel):
    """Schema of the directive file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ctrl_query_str: str = "ctrl"
    action_query_str: str = "action"
    async_post_flag: str = "ajrq"
    json_body_field: str = "data"
    default_controller: str
    default_action: str = "home"
    auth_route: AuthRoute = Field(default_factory=AuthRoute)
    login_page: str | None = None
    controllers: dict[str, ControllerEntry]
    client_apps: dict[str, str] = Field(default_factory=dict)
    permissions: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    roles: dict[str, list[str]] = Field(default_factory=dict)


class DirectiveStore:
    """Immutable, validated view over a loaded directive file."""

    def __init__(self, directives: Directives) -> None:
        if directives.default_controller not in directives.controllers:
            raise ConfigurationError(
                f"Default controller is not configured: {directives.default_controller}"
            )
        self._directives = directives

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "DirectiveStore":
        """Build a store from an already-decoded directive mapping."""
        if not isinstance(raw, Mapping):
            raise ConfigurationError(
                "Expected object. Check file location and verify JSON is valid."
            )
        try:
            return cls(Directives.model_validate(dict(raw)))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid directive file: {exc}") from exc

    @classmethod
    def load(cls, path: Path | str) -> "DirectiveStore":
        """Load and validate the directive file at ``path``."""
        file_path = Path(path)
        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigurationError(f"Directive file not found: {file_path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Directive file is not valid JSON: {exc}") from exc
        return cls.from_mapping(raw)

    @property
    def directives(self) -> Directives:
        """Return the underlying validated directives."""
        return self._directives

    def has_controller(self, label: str) -> bool:
        """Whether ``label`` appears in the controller map."""
        return label in self._directives.controllers

    def controller_entry(self, label: str) -> ControllerEntry:
        """Return the configuration entry for ``label``."""
        try:
            return self._directives.controllers[label]
        except KeyError as exc:
            raise ConfigurationError(f"No controller entry configured for: {label}") from exc

    def query_param_name(self, kind: QueryParamKind) -> str:
        """Return the query parameter used to select a controller or action."""
        if kind == "controller":
            return self._directives.ctrl_query_str
        if kind == "action":
            return self._directives.action_query_str
        raise ConfigurationError(f"Unknown query parameter kind: {kind}")

    def default_controller(self) -> str:
        return self._directives.default_controller

    def default_action(self) -> str:
        return self._directives.default_action

    def async_flag(self) -> str:
        return self._directives.async_post_flag

    def json_body_field(self) -> str:
        return self._directives.json_body_field

    def auth_route(self) -> AuthRoute:
        return self._directives.auth_route

    def login_page(self) -> str | None:
        return self._directives.login_page

    def client_app_path(self, label: str) -> str:
        """Return the bootstrap HTML file configured for ``label``."""
        try:
            return self._directives.client_apps[label]
        except KeyError as exc:
            raise ConfigurationError(f"No client app configured for controller: {label}") from exc

    def permissions_for(self, controller_label: str, action_name: str) -> frozenset[str]:
        """Return the permissions required to run ``action_name`` on ``controller_label``.

        A missing entry is an authoring defect and raises ConfigurationError
        instead of silently denying the request.
        """
        by_action = self._directives.permissions.get(controller_label)
        if by_action is None:
            raise ConfigurationError(
                f"No permissions for the given controller could be found: {controller_label}"
            )
        if action_name not in by_action:
            raise ConfigurationError(
                f"No permissions for the given action could be found: "
                f"{controller_label}.{action_name}"
            )
        return frozenset(by_action[action_name])

    def roles(self) -> Mapping[str, list[str]]:
        return dict(self._directives.roles)


__all__ = [
    "AuthRoute",
    "ControllerEntry",
    "DirectiveStore",
    "Directives",
    "QueryParamKind",
]
