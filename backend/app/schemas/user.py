import re
from datetime import datetime
from typing import Annotated, Optional
from pydantic import AfterValidator, EmailStr, Field, StringConstraints, model_validator
from app.models.user import UserRole
from app.schemas.common import CamelModel

NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
MAX_EMAIL_LENGTH = 255


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if len(value) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email cannot exceed {MAX_EMAIL_LENGTH} characters")
    return value


def check_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, and one number"
        )
    return value


def check_person_name(value: str) -> str:
    if not NAME_PATTERN.match(value):
        raise ValueError("Name can only contain letters and spaces")
    return value


Email = Annotated[EmailStr, AfterValidator(normalize_email)]
StrongPassword = Annotated[str, Field(min_length=6, max_length=128), AfterValidator(check_password_strength)]
PersonName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=50),
    AfterValidator(check_person_name),
]


class UserRegister(CamelModel):
    email: Email
    password: StrongPassword
    first_name: PersonName
    last_name: PersonName


class UserLogin(CamelModel):
    email: Email
    password: Annotated[str, Field(min_length=1)]


class UserUpdate(CamelModel):
    email: Optional[Email] = None
    first_name: Optional[PersonName] = None
    last_name: Optional[PersonName] = None
    is_active: Optional[bool] = None
    role: Optional[UserRole] = None

    @model_validator(mode="after")
    def require_one_field(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided for update")
        return self


class ChangePassword(CamelModel):
    old_password: Annotated[str, Field(min_length=1)]
    new_password: StrongPassword


class ResetPasswordRequest(CamelModel):
    email: Email


class ResetPasswordConfirm(CamelModel):
    token: Annotated[str, Field(min_length=1)]
    new_password: StrongPassword


class UserResponse(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"
