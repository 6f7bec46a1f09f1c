import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field

T = TypeVar("T")

MAX_PAGE_SIZE = 100
MAX_ID = 2**63 - 1


def count_pages(total: int, limit: int) -> int:
    """Return ``ceil(total / limit)``; zero rows give zero pages."""
    return math.ceil(total / limit) if total else 0


class Page(BaseModel, Generic[T]):
    """One page of a list endpoint together with its totals."""

    items: List[T]
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, items: List[T], page: int, limit: int, total: int) -> "Page[T]":
        return cls(
            items=items,
            page=page,
            limit=limit,
            total=total,
            total_pages=count_pages(total, limit),
        )


class Envelope(BaseModel, Generic[T]):
    """Success envelope shared by every endpoint."""

    message: str
    data: Optional[T] = None


class Message(BaseModel):
    """Envelope for operations that return no data."""

    message: str


class UserBase(BaseModel):
    """Shared fields for user schemas."""

    name: str = Field(min_length=3, max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    """Payload for registering or creating a user."""

    password: str = Field(min_length=6)


class UserUpdate(BaseModel):
    """Schema for updating a user (all fields optional)."""

    name: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None


class UserOut(BaseModel):
    """Response schema for user data. The password is never exposed."""

    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    """Credentials posted to ``/auth/login``."""

    email: EmailStr
    password: str = Field(min_length=1)


class AuthOut(BaseModel):
    """User profile together with its current access token."""

    user: UserOut
    access_token: Optional[str] = None


class ContactCreate(BaseModel):
    """Schema for creating new contact."""

    first_name: str = Field(min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)


class ContactUpdate(BaseModel):
    """Schema for updating contact (all fields optional)."""

    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)


class ContactOut(BaseModel):
    """Schema for returning contact with ID."""

    id: int
    user_id: int
    first_name: str
    last_name: Optional[str] = None
    email: str
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AddressFields(BaseModel):
    """Optional address fields shared by create and update payloads."""

    street: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)


class AddressCreate(AddressFields):
    """Schema for creating an address under one of the caller's contacts."""

    contact_id: int = Field(ge=1, le=MAX_ID)
    country: str = Field(min_length=1, max_length=100)


class AddressUpdate(AddressFields):
    """Schema for updating an address (all fields optional)."""

    country: Optional[str] = Field(None, min_length=1, max_length=100)


class AddressOut(BaseModel):
    """Schema for returning an address with its ID and parent contact."""

    id: int
    contact_id: int
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: str

    model_config = ConfigDict(from_attributes=True)
