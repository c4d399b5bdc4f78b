"""Session and authentication DTOs."""

import enum
from typing import Any

from pydantic import Field, ValidationError

from relevant.core.exceptions import FormValidationError
from relevant.models.base import APIModel
from relevant.models.user import User

EMAIL_PATTERN = r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"


class SessionStatus(str, enum.Enum):
    """Lifecycle of the session held by the client."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


def _field_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__root__"
        errors.setdefault(field, err["msg"])
    return errors


class _Form(APIModel):
    """Form base that reports validation problems per field."""

    @classmethod
    def parse_form(cls, **data: Any):
        """Validate form input.

        Raises:
            FormValidationError: With one inline message per failing field
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise FormValidationError(_field_errors(e)) from e


class LoginForm(_Form):
    """Login form."""

    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)


class RegisterForm(_Form):
    """Registration form."""

    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)
    name: str | None = None


class AuthResponse(APIModel):
    """Response of /api/auth/login and /api/auth/register."""

    success: bool = True
    token: str
    user: User


__all__ = [
    "SessionStatus",
    "LoginForm",
    "RegisterForm",
    "AuthResponse",
]
