"""
Internal records for the PetFriendly domain.

Repositories build these from database rows and services mutate them. The
API never exposes them directly: every record converts itself to its
response model with ``to_response()``, so password hashes and other
storage details stay inside the service layer.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4

from .database import deserialize_datetime
from .models import (
    AdoptionRequestResponse,
    AdoptionRequestStatus,
    ContactMessageResponse,
    FoundationResponse,
    PetGender,
    PetImageResponse,
    PetResponse,
    PetSize,
    PetSpecies,
    PetStatus,
    Role,
    UserResponse,
)


def new_id() -> str:
    return str(uuid4())


def _enum_or_none(enum_cls, value):
    return enum_cls(value) if value else None


@dataclass
class User:
    email: str
    password: str
    first_name: str
    last_name: str
    role: Role = Role.USER
    phone: Optional[str] = None
    city: Optional[str] = None
    active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "User":
        return cls(
            id=row["id"],
            email=row["email"],
            password=row["password"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            role=Role(row["role"]),
            phone=row["phone"],
            city=row["city"],
            active=bool(row["active"]),
            created_at=deserialize_datetime(row["created_at"]),
            updated_at=deserialize_datetime(row["updated_at"]),
        )

    def to_response(self) -> UserResponse:
        return UserResponse(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            city=self.city,
            role=self.role,
            active=self.active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class Foundation:
    name: str
    city: str
    contact_email: str
    state: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    verified: bool = False
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Foundation":
        return cls(
            id=row["id"],
            name=row["name"],
            city=row["city"],
            state=row["state"],
            description=row["description"],
            contact_email=row["contact_email"],
            website=row["website"],
            address=row["address"],
            phone_number=row["phone_number"],
            verified=bool(row["verified"]),
            created_at=deserialize_datetime(row["created_at"]),
            updated_at=deserialize_datetime(row["updated_at"]),
        )

    def to_response(self) -> FoundationResponse:
        return FoundationResponse(
            id=self.id,
            name=self.name,
            city=self.city,
            state=self.state,
            description=self.description,
            contact_email=self.contact_email,
            website=self.website,
            address=self.address,
            phone_number=self.phone_number,
            verified=self.verified,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class Pet:
    name: str
    species: PetSpecies
    foundation_id: str
    breed: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[PetGender] = None
    size: Optional[PetSize] = None
    description: Optional[str] = None
    status: PetStatus = PetStatus.AVAILABLE
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Pet":
        return cls(
            id=row["id"],
            name=row["name"],
            species=PetSpecies(row["species"]),
            breed=row["breed"],
            age=row["age"],
            gender=_enum_or_none(PetGender, row["gender"]),
            size=_enum_or_none(PetSize, row["size"]),
            description=row["description"],
            status=PetStatus(row["status"]),
            foundation_id=row["foundation_id"],
            created_at=deserialize_datetime(row["created_at"]),
            updated_at=deserialize_datetime(row["updated_at"]),
        )

    def to_response(self) -> PetResponse:
        return PetResponse(
            id=self.id,
            name=self.name,
            species=self.species,
            breed=self.breed,
            age=self.age,
            gender=self.gender,
            size=self.size,
            description=self.description,
            status=self.status,
            foundation_id=self.foundation_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class PetImage:
    image_url: str
    pet_id: str
    is_primary: bool = False
    alt_text: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "PetImage":
        return cls(
            id=row["id"],
            image_url=row["image_url"],
            is_primary=bool(row["is_primary"]),
            alt_text=row["alt_text"],
            pet_id=row["pet_id"],
            created_at=deserialize_datetime(row["created_at"]),
            updated_at=deserialize_datetime(row["updated_at"]),
        )

    def to_response(self) -> PetImageResponse:
        return PetImageResponse(
            id=self.id,
            image_url=self.image_url,
            is_primary=self.is_primary,
            alt_text=self.alt_text,
            pet_id=self.pet_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class AdoptionRequest:
    """
    A user's application to adopt one pet.

    Attributes:
        user_id: Applicant (``users.id``)
        pet_id: Pet applied for (``pets.id``)
        status: Lifecycle state; starts PENDING
        review_notes: Notes left by the reviewer, or "Cancelled by user"
        reviewed_at: Set whenever the status is changed by a review or cancel
    """

    user_id: int
    pet_id: str
    message: str
    experience: Optional[str] = None
    living_situation: Optional[str] = None
    status: AdoptionRequestStatus = AdoptionRequestStatus.PENDING
    review_notes: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "AdoptionRequest":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            pet_id=row["pet_id"],
            message=row["message"],
            experience=row["experience"],
            living_situation=row["living_situation"],
            status=AdoptionRequestStatus(row["status"]),
            review_notes=row["review_notes"],
            created_at=deserialize_datetime(row["created_at"]),
            updated_at=deserialize_datetime(row["updated_at"]),
            reviewed_at=deserialize_datetime(row["reviewed_at"]),
        )

    def to_response(self) -> AdoptionRequestResponse:
        return AdoptionRequestResponse(
            id=self.id,
            user_id=self.user_id,
            pet_id=self.pet_id,
            message=self.message,
            experience=self.experience,
            living_situation=self.living_situation,
            review_notes=self.review_notes,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
            reviewed_at=self.reviewed_at,
        )


@dataclass
class ContactMessage:
    sender_name: str
    sender_email: str
    message: str
    foundation_id: str
    subject: Optional[str] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "ContactMessage":
        return cls(
            id=row["id"],
            sender_name=row["sender_name"],
            sender_email=row["sender_email"],
            subject=row["subject"],
            message=row["message"],
            foundation_id=row["foundation_id"],
            is_read=bool(row["is_read"]),
            read_at=deserialize_datetime(row["read_at"]),
            created_at=deserialize_datetime(row["created_at"]),
        )

    def to_response(self) -> ContactMessageResponse:
        return ContactMessageResponse(
            id=self.id,
            foundation_id=self.foundation_id,
            sender_name=self.sender_name,
            sender_email=self.sender_email,
            subject=self.subject,
            message=self.message,
            is_read=self.is_read,
            created_at=self.created_at,
            read_at=self.read_at,
        )
