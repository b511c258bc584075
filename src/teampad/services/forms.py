"""Form state and pre-submit validation for auth and project screens."""

from __future__ import annotations

from dataclasses import dataclass

from teampad.models.errors import ValidationError
from teampad.models.projects import DESCRIPTION_MAX_LENGTH

MIN_PASSWORD_LENGTH = 6


def validate_credentials(
    email: str,
    password: str,
    *,
    min_password_length: int = MIN_PASSWORD_LENGTH,
) -> ValidationError | None:
    """Check credentials locally so bad input never reaches the provider."""
    if not email.strip() or not password:
        return ValidationError("credentials", "Email and password are required.")
    if len(password) < min_password_length:
        return ValidationError(
            "password",
            f"Password must be at least {min_password_length} characters long.",
        )
    return None


def validate_project(title: str, description: str) -> ValidationError | None:
    if not title.strip():
        return ValidationError("title", "Project title is required.")
    if not description.strip():
        return ValidationError("description", "Project description is required.")
    if len(description.strip()) > DESCRIPTION_MAX_LENGTH:
        return ValidationError(
            "description",
            f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters.",
        )
    return None


@dataclass
class CredentialsForm:
    email: str = ""
    password: str = ""

    def clear(self) -> None:
        self.email = ""
        self.password = ""


@dataclass
class ProjectForm:
    """Create-project form. The description cap rejects input, never truncates."""

    title: str = ""
    description: str = ""
    def set_description(self, value: str) -> bool:
        """Accept ``value`` unless it exceeds the cap; returns whether it was kept."""
        if len(value) > DESCRIPTION_MAX_LENGTH:
            return False
        self.description = value
        return True

    @property
    def remaining(self) -> int:
        return DESCRIPTION_MAX_LENGTH - len(self.description)

    @property
    def counter_text(self) -> str:
        return f"({len(self.description)}/{DESCRIPTION_MAX_LENGTH})"

    @property
    def can_submit(self) -> bool:
        return bool(self.title.strip() and self.description.strip())

    def clear(self) -> None:
        self.title = ""
        self.description = ""
