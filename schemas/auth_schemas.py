from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from models.enums import Role
import re


def check_password_strength(value: str) -> str:
    """
    Password must be at least 8 characters and contain:
    - At least one letter
    - At least one digit
    """
    if len(value) < 8:
        raise ValueError('Password must be at least 8 characters')

    if not re.search(r'[A-Za-z]', value):
        raise ValueError('Password must contain at least one letter')

    if not re.search(r'\d', value):
        raise ValueError('Password must contain at least one digit')

    return value


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str

    @field_validator('username')
    @classmethod
    def validate_username(cls, value):
        value = value.strip()
        if not re.fullmatch(r'[A-Za-z0-9_.-]{3,50}', value):
            raise ValueError('Username may only contain letters, digits, "_", "." and "-"')
        return value

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return check_password_strength(value)


class LoginRequest(BaseModel):
    username: str
    password: str

    @field_validator('username', 'password')
    @classmethod
    def not_blank(cls, value):
        if not value or not value.strip():
            raise ValueError('must not be empty')
        return value


class AuthenticatedUser(BaseModel):
    """
    Identity attached to request.state by the access gate.

    A plain snapshot, so handlers never touch the gate's closed session.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    username: str
    email: str
    role: Role
