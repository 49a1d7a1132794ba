"""User administration actions."""

from __future__ import annotations

from action_dispatch.core.exceptions import IdentityError
from action_dispatch.core.models import Response

from .base import Controller, action


class AdminController(Controller):
    """Create, activate, inspect, update and delete user accounts."""

    name = "AdminController"

    @action("addUser")
    def add_user(self) -> Response:
        user = self.identity.create_user(
            login=self.param("email") or "",
            password=self.param("password") or "",
            first_name=self.param("firstname") or "",
            last_name=self.param("lastname") or "",
        )
        activation = self.identity.activation_for(user)
        if self.param("activate") in ("1", "true", "yes"):
            self.identity.activate(user, activation.code)
            return Response(
                True,
                message="User added and activated.",
                data={"user": user.details()},
            )
        return Response(
            True,
            message="User added. Activation code: " + activation.code,
            data={"user": user.details(), "activation": activation.details()},
        )

    @action("activateUser")
    def activate_user(self) -> Response:
        user = self.identity.get_user(self.param("email"))
        self.identity.activate(user, self.param("code"))
        return Response(True, message="User activated successfully.")

    @action("createActivation")
    def create_activation(self) -> Response:
        user = self.identity.get_user(self.param("email"))
        activation = self.identity.activation_for(user)
        return Response(
            True,
            message=f"Activation code for {user.login}: {activation.code}",
            data={"activation": activation.details()},
        )

    @action("deactivateUser")
    def deactivate_user(self) -> Response:
        user = self.identity.get_user(self.param("email"))
        self.identity.deactivate(user)
        return Response(True, message="User deactivated.")

    @action("getUserDetails")
    def get_user_details(self) -> Response:
        user = self.identity.get_user(self.param("email"))
        details = user.details()
        lines = [f"{key}: {value}" for key, value in details.items()]
        return Response(
            True,
            message=f"Details for user {user.login}:\n" + "\n".join(lines),
            data={"user": details},
        )

    @action("updateUser")
    def update_user(self) -> Response:
        user = self.identity.get_user_by_id(self.param("id"))
        changes = {
            "login": self.param("email"),
            "first_name": self.param("firstname"),
            "last_name": self.param("lastname"),
            "password": self.param("password"),
        }
        if all(value is None for value in changes.values()):
            raise IdentityError("Nothing to update.")
        updated = self.identity.update_user(user, changes)
        return Response(
            True, message="User updated successfully.", data={"user": updated.details()}
        )

    @action("deleteUser")
    def delete_user(self) -> Response:
        user = self.identity.get_user_by_id(self.param("id"))
        self.identity.delete_user(user)
        return Response(True, message=f"User {user.login} deleted.")


__all__ = ["AdminController"]
