from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from models import UserRole
from utils.response_helpers import CamelModel


class IdentifyRequest(CamelModel):
    """Client-generated identity, sent whenever the client (re)identifies"""
    id: str = Field(alias="_id", min_length=1)
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    role: UserRole
    location: Optional[str] = Field(default=None, max_length=200)

    @field_validator("id", "name", "location", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: str
    location: str
    created_at: datetime


class IdentifyResponse(CamelModel):
    message: str
    user: UserResponse


class SupplierResponse(CamelModel):
    """Public supplier listing (no email, no timestamps)"""
    id: str
    name: str
    role: str
    location: str
