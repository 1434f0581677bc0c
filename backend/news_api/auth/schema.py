import re

from pydantic import EmailStr, Field, field_validator

from ..models import CustomModel
from ..users.schema import UserPublic

# One upper case letter, one lower case letter and a digit or a symbol
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Z])(?=.*[a-z])(?=.*[\d\W]).+$")


def _check_password(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise ValueError("Password too weak")
    return value


class PasswordMixin(CustomModel):
    password: str = Field(..., min_length=5, max_length=20, json_schema_extra={"example": "Qwerty123"})

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str) -> str:
        return _check_password(v)


class RegisterCredentials(PasswordMixin):
    username: str = Field(..., min_length=1, max_length=50, json_schema_extra={"example": "Maks"})
    email: EmailStr = Field(..., json_schema_extra={"example": "maks@gmail.com"})


class LoginCredentials(PasswordMixin):
    email: EmailStr = Field(..., json_schema_extra={"example": "maks@gmail.com"})


class ForgotPassword(CustomModel):
    email: EmailStr = Field(..., json_schema_extra={"example": "maks@gmail.com"})


class ChangePassword(PasswordMixin):
    pass


class RegisterResponse(CustomModel):
    message: str
    user: UserPublic


class TokenResponse(CustomModel):
    access_token: str
    token_type: str = "bearer"


class MessageOnly(CustomModel):
    message: str
