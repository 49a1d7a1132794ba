"""Error taxonomy shared across the dispatch layers."""

from __future__ import annotations

from http import HTTPStatus

GENERIC_ERROR_MESSAGE = "The server could not process your request."


class DispatchError(Exception):
    """Base class for every failure the dispatcher knows how to shape."""

    error_code = "server_error"
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    # Whether the raw message is safe and useful to show to web clients.
    user_actionable = False

    def public_message(self) -> str:
        """Return the text a web client is allowed to see."""
        return str(self) if self.user_actionable else GENERIC_ERROR_MESSAGE


class InvalidRoute(DispatchError):
    """Raised when the requested controller or action does not exist."""

    error_code = "invalid_route"
    status = HTTPStatus.NOT_FOUND


class UnknownAction(InvalidRoute):
    """Raised when a controller has no action registered under the name."""

    error_code = "unknown_action"


class ConfigurationError(DispatchError):
    """Raised for authoring defects in the directive file or wiring."""

    error_code = "configuration_error"


class MissingTemplate(ConfigurationError):
    """Raised when a template is required but not configured or not found."""

    error_code = "missing_template"


class AuthenticationRequired(DispatchError):
    """Raised by collaborators that need an authenticated identity."""

    error_code = "login_required"
    status = HTTPStatus.UNAUTHORIZED


class AuthorizationDenied(DispatchError):
    """Raised when the current identity lacks a required permission."""

    error_code = "permission_denied"
    status = HTTPStatus.FORBIDDEN
    user_actionable = True

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Insufficient permission. User does not have the privileges "
            "necessary to perform the requested action."
        )


class ContractViolation(DispatchError):
    """Raised when an action returns something other than a Response."""

    error_code = "contract_violation"


class MalformedInput(DispatchError):
    """Raised for CLI syntax errors and undecodable request payloads."""

    error_code = "malformed_input"
    status = HTTPStatus.BAD_REQUEST
    user_actionable = True


MalformedPayload = MalformedInput


class InvalidCredentials(DispatchError):
    """Raised when a login attempt fails."""

    error_code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED
    user_actionable = True


class IdentityError(DispatchError):
    """Raised when an identity-store operation cannot be completed."""

    error_code = "identity_error"
    status = HTTPStatus.UNPROCESSABLE_ENTITY
    user_actionable = True


__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "DispatchError",
    "InvalidRoute",
    "UnknownAction",
    "ConfigurationError",
    "MissingTemplate",
    "AuthenticationRequired",
    "AuthorizationDenied",
    "ContractViolation",
    "MalformedInput",
    "MalformedPayload",
    "InvalidCredentials",
    "IdentityError",
]
