"""Account and authentication schemas."""

from pydantic import EmailStr, Field

from grinfood.schemas.base import CamelModel


class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: str = "user"


class SigninRequest(CamelModel):
    email: EmailStr


class EmailRequest(CamelModel):
    email: EmailStr


class UpdateEmailRequest(CamelModel):
    new_email: EmailStr


class ProfileUpdatedRequest(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
