"""
Process-wide service instances handed to routes through ``Depends``.

Everything is built lazily from the resolved settings on first use, so tests
can point ``PETFRIENDLY_DB_PATH`` and ``UPLOAD_DIR`` elsewhere before the
first request.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from .adoption_service import AdoptionRequestService
from .configuration import get_settings
from .contact_service import ContactMessageService
from .database import Database
from .entities import User
from .foundation_service import FoundationService
from .pet_image_service import PetImageService
from .pet_service import PetService
from .storage import ImageStorage
from .user_service import UserService


@lru_cache(maxsize=1)
def get_database() -> Database:
    return Database(Path(get_settings().database.path))


@lru_cache(maxsize=1)
def get_storage() -> ImageStorage:
    storage = get_settings().storage
    return ImageStorage(
        upload_dir=Path(storage.upload_dir),
        s3_bucket=storage.s3_bucket,
        presign_expiration=int(storage.presign_expiration),
        max_upload_bytes=int(storage.max_upload_bytes),
    )


@lru_cache(maxsize=1)
def get_user_service() -> UserService:
    return UserService(get_database())


@lru_cache(maxsize=1)
def get_foundation_service() -> FoundationService:
    return FoundationService(get_database())


@lru_cache(maxsize=1)
def get_pet_service() -> PetService:
    return PetService(get_database())


@lru_cache(maxsize=1)
def get_pet_image_service() -> PetImageService:
    return PetImageService(get_database(), get_storage())


@lru_cache(maxsize=1)
def get_adoption_service() -> AdoptionRequestService:
    return AdoptionRequestService(get_database())


@lru_cache(maxsize=1)
def get_contact_service() -> ContactMessageService:
    return ContactMessageService(get_database())


def load_user_by_email(email: str) -> Optional[User]:
    return get_user_service().find_by_email(email)
