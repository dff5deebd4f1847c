from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

T = TypeVar("T")

PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"


class _DisplayEnum(str, Enum):
    """String enum persisted by name, with a human readable label."""

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self.value, self.value.replace("_", " ").title())


class Role(_DisplayEnum):
    VISITOR = "VISITOR"
    USER = "USER"
    FOUNDATION_ADMIN = "FOUNDATION_ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class PetSpecies(_DisplayEnum):
    DOG = "DOG"
    CAT = "CAT"
    RABBIT = "RABBIT"
    BIRD = "BIRD"
    HAMSTER = "HAMSTER"
    GUINEA_PIG = "GUINEA_PIG"
    FISH = "FISH"
    REPTILE = "REPTILE"
    OTHER = "OTHER"


class PetGender(_DisplayEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNKNOWN = "UNKNOWN"


class PetSize(_DisplayEnum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    EXTRA_LARGE = "EXTRA_LARGE"


class PetStatus(_DisplayEnum):
    AVAILABLE = "AVAILABLE"
    PENDING = "PENDING"
    ADOPTED = "ADOPTED"
    UNAVAILABLE = "UNAVAILABLE"


class AdoptionRequestStatus(_DisplayEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not AdoptionRequestStatus.PENDING


# Labels that differ from the title-cased member name.
_DISPLAY_NAMES = {
    "FOUNDATION_ADMIN": "Foundation Admin",
    "SUPER_ADMIN": "Super Admin",
    "GUINEA_PIG": "Guinea Pig",
    "EXTRA_LARGE": "Extra Large",
}


# Requests


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)


class RegisterRequest(BaseModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    city: Optional[str] = Field(default=None, max_length=100)


class UserCreateRequest(RegisterRequest):
    role: Optional[Role] = None
    active: Optional[bool] = None


class UserUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6, max_length=100)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    city: Optional[str] = Field(default=None, max_length=100)
    role: Optional[Role] = None
    active: Optional[bool] = None


class ProfileUpdateRequest(BaseModel):
    """Blank fields are left unchanged; non-blank ones follow the registration rules."""

    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = None
    city: Optional[str] = Field(default=None, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def check_name_length(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value.strip() and len(value.strip()) < 2:
            raise ValueError("must have at least 2 characters")
        return value

    @field_validator("phone")
    @classmethod
    def check_phone_format(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value.strip() and not re.match(PHONE_PATTERN, value.strip()):
            raise ValueError("must be a valid phone number")
        return value


class PasswordChangeRequest(BaseModel):
    password: str = Field(min_length=6, max_length=100)


class FoundationCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    contact_email: EmailStr
    website: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, max_length=20)
    verified: Optional[bool] = None


class FoundationUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    city: Optional[str] = Field(default=None, min_length=1, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    website: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, max_length=20)
    verified: Optional[bool] = None


class PetCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    species: PetSpecies
    breed: Optional[str] = Field(default=None, max_length=100)
    age: Optional[int] = Field(default=None, gt=0)
    gender: Optional[PetGender] = None
    size: Optional[PetSize] = None
    description: Optional[str] = None
    status: Optional[PetStatus] = None
    foundation_id: UUID


class PetUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    species: Optional[PetSpecies] = None
    breed: Optional[str] = Field(default=None, max_length=100)
    age: Optional[int] = Field(default=None, gt=0)
    gender: Optional[PetGender] = None
    size: Optional[PetSize] = None
    description: Optional[str] = None
    status: Optional[PetStatus] = None


class PetStatusUpdateRequest(BaseModel):
    status: PetStatus


class PetImageCreateRequest(BaseModel):
    image_url: str = Field(min_length=1, max_length=500)
    is_primary: bool = False
    alt_text: Optional[str] = Field(default=None, max_length=255)
    pet_id: UUID


class PetImageUpdateRequest(BaseModel):
    image_url: str = Field(min_length=1, max_length=500)
    is_primary: bool = False
    alt_text: Optional[str] = Field(default=None, max_length=255)


class AdoptionRequestCreateRequest(BaseModel):
    pet_id: UUID
    message: str = Field(min_length=1, max_length=2000)
    experience: Optional[str] = Field(default=None, max_length=2000)
    living_situation: Optional[str] = Field(default=None, max_length=2000)


class AdoptionRequestUpdateRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    experience: Optional[str] = Field(default=None, max_length=2000)
    living_situation: Optional[str] = Field(default=None, max_length=2000)


class ReviewRequest(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=2000)


class ContactMessageCreateRequest(BaseModel):
    sender_name: str = Field(min_length=1, max_length=255)
    sender_email: EmailStr
    subject: Optional[str] = Field(default=None, max_length=255)
    message: str = Field(min_length=1, max_length=2000)
    foundation_id: UUID


class ContactMessageUpdateRequest(BaseModel):
    sender_name: str = Field(min_length=1, max_length=255)
    sender_email: EmailStr
    subject: Optional[str] = Field(default=None, max_length=255)
    message: str = Field(min_length=1, max_length=2000)


# Responses


class MessageResponse(BaseModel):
    message: str


class JwtAuthenticationResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"


class UserResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    city: Optional[str] = None
    role: Role
    active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class FoundationResponse(BaseModel):
    id: UUID
    name: str
    city: str
    state: Optional[str] = None
    description: Optional[str] = None
    contact_email: str
    website: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    verified: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class PetResponse(BaseModel):
    id: UUID
    name: str
    species: PetSpecies
    breed: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[PetGender] = None
    size: Optional[PetSize] = None
    description: Optional[str] = None
    status: PetStatus
    foundation_id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None


class PetImageResponse(BaseModel):
    id: UUID
    image_url: str
    is_primary: bool
    alt_text: Optional[str] = None
    pet_id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None


class AdoptionRequestResponse(BaseModel):
    id: UUID
    user_id: int
    pet_id: UUID
    message: str
    experience: Optional[str] = None
    living_situation: Optional[str] = None
    review_notes: Optional[str] = None
    status: AdoptionRequestStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None


class ContactMessageResponse(BaseModel):
    id: UUID
    foundation_id: UUID
    sender_name: str
    sender_email: str
    subject: Optional[str] = None
    message: str
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None


class UserStatistics(BaseModel):
    total_users: int
    active_users: int
    visitors: int
    standard_users: int
    foundation_admins: int
    super_admins: int


class FoundationStatistics(BaseModel):
    total_pets: int
    available_pets: int
    adopted_pets: int
    pending_adoptions: int


class PetStatistics(BaseModel):
    total_pets: int
    available_pets: int
    adopted_pets: int
    pending_pets: int
    unavailable_pets: int


class PetImageStatistics(BaseModel):
    total_images: int
    primary_images: int
    images_without_pet: int
    average_images_per_pet: int


class AdoptionRequestStatistics(BaseModel):
    total_requests: int
    pending_requests: int
    approved_requests: int
    rejected_requests: int
    cancelled_requests: int


class ContactMessageStatistics(BaseModel):
    total_messages: int
    unread_messages: int
    read_messages: int
    today_messages: int
    week_messages: int
    month_messages: int


class PageResponse(BaseModel, Generic[T]):
    content: List[T]
    total_elements: int
    total_pages: int
    number: int
    size: int
    first: bool
    last: bool
    number_of_elements: int
    empty: bool


class HealthResponse(BaseModel):
    status: str
    database: str


class InfoResponse(BaseModel):
    name: str
    version: str
    description: str
