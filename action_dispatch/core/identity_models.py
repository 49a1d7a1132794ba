"""Domain models for users and their activation records."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class User(BaseModel):
    """Domain model for a user account (never contains the password hash)."""

    id: int = Field(..., description="Primary key")
    login: str = Field(..., description="Login name, usually an email address")
    first_name: str = Field(default="")
    last_name: str = Field(default="")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last modification timestamp")
    last_login: datetime | None = Field(default=None, description="Last successful login")

    @property
    def full_name(self) -> str:
        """Return the first and last name joined by a space, or the login when both are blank."""
        return f"{self.first_name} {self.last_name}".strip() or self.login

    def details(self) -> dict[str, object]:
        """Return a JSON-friendly summary of the account."""
        return {
            "id": self.id,
            "email": self.login,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class Activation(BaseModel):
    """Activation record gating the first login of an account."""

    id: int
    user_id: int
    code: str
    completed: bool = False
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None

    def details(self) -> dict[str, object]:
        """Return a JSON-friendly summary of the activation."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "code": self.code,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


__all__ = ["Activation", "User"]
