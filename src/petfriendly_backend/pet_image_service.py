"""
Pet photos and the one-primary-image-per-pet rule.

Every write that can make an image primary first clears the flag on the
pet's other images, in the same transaction as the write itself, so a pet
never ends up with two primary images.
"""

from __future__ import annotations

import logging
from typing import Optional

from .database import Database
from .entities import PetImage
from .errors import NotFoundError, ValidationError
from .models import PetImageCreateRequest, PetImageStatistics, PetImageUpdateRequest
from .pagination import Page, PageRequest
from .repositories import PetImageRepository, PetRepository
from .storage import ImageStorage
from .utils import utcnow

logger = logging.getLogger(__name__)


class PetImageService:
    def __init__(self, db: Database, storage: ImageStorage):
        self.db = db
        self.storage = storage
        self.images = PetImageRepository(db)
        self.pets = PetRepository(db)

    def _require_pet(self, pet_id: str) -> str:
        pet_id = str(pet_id)
        if not self.pets.exists_by_id(pet_id):
            raise NotFoundError(f"Pet not found with id: {pet_id}")
        return pet_id

    def create(self, payload: PetImageCreateRequest) -> PetImage:
        pet_id = self._require_pet(payload.pet_id)
        now = utcnow()
        image = PetImage(
            image_url=payload.image_url,
            pet_id=pet_id,
            is_primary=payload.is_primary,
            alt_text=payload.alt_text,
            created_at=now,
            updated_at=now,
        )
        with self.db.connect() as conn:
            if image.is_primary:
                self.images.clear_primary(pet_id, now, conn=conn)
            self.images.insert(image, conn=conn)
        logger.info(f"Created image {image.id} for pet {pet_id} (primary={image.is_primary})")
        return image

    def upload(
        self,
        pet_id: str,
        filename: Optional[str],
        data: bytes,
        content_type: Optional[str] = None,
        is_primary: bool = False,
        alt_text: Optional[str] = None,
    ) -> PetImage:
        """Store an uploaded file and register it as an image of the pet."""
        pet_id = self._require_pet(pet_id)
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > self.storage.max_upload_bytes:
            raise ValidationError(f"Uploaded file exceeds {self.storage.max_upload_bytes} bytes")
        try:
            url = self.storage.save(pet_id, filename, data, content_type)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        payload = PetImageCreateRequest(image_url=url, is_primary=is_primary, alt_text=alt_text, pet_id=pet_id)
        return self.create(payload)

    def get(self, image_id: str) -> PetImage:
        image = self.images.find_by_id(str(image_id))
        if image is None:
            raise NotFoundError(f"Pet image not found with id: {image_id}")
        return image

    def find_all(self, pageable: Optional[PageRequest] = None) -> Page[PetImage]:
        return self.images.find_all(pageable)

    def find_by_pet(self, pet_id: str, pageable: Optional[PageRequest] = None) -> Page[PetImage]:
        return self.images.find_by(pageable, pet_id=str(pet_id))

    def get_primary(self, pet_id: str) -> PetImage:
        image = self.images.find_primary_by_pet(str(pet_id))
        if image is None:
            raise NotFoundError(f"Pet {pet_id} has no primary image")
        return image

    def find_secondary(self, pet_id: str, pageable: Optional[PageRequest] = None) -> Page[PetImage]:
        return self.images.find_by(pageable, pet_id=str(pet_id), is_primary=False)

    def search_by_url(self, fragment: str, pageable: Optional[PageRequest] = None) -> Page[PetImage]:
        return self.images.search_by_url(fragment, pageable)

    def update(self, image_id: str, payload: PetImageUpdateRequest) -> PetImage:
        now = utcnow()
        with self.db.connect() as conn:
            image = self.images.find_by_id(str(image_id), conn=conn)
            if image is None:
                raise NotFoundError(f"Pet image not found with id: {image_id}")
            if payload.is_primary and not image.is_primary:
                self.images.clear_primary(image.pet_id, now, conn=conn)
            image.image_url = payload.image_url
            image.is_primary = payload.is_primary
            image.alt_text = payload.alt_text
            image.updated_at = now
            self.images.update(image, conn=conn)
        logger.info(f"Updated image {image.id}")
        return image

    def set_primary(self, image_id: str) -> PetImage:
        now = utcnow()
        with self.db.connect() as conn:
            image = self.images.find_by_id(str(image_id), conn=conn)
            if image is None:
                raise NotFoundError(f"Pet image not found with id: {image_id}")
            self.images.clear_primary(image.pet_id, now, conn=conn)
            image.is_primary = True
            image.updated_at = now
            self.images.update(image, conn=conn)
        logger.info(f"Image {image.id} is now primary for pet {image.pet_id}")
        return image

    def remove_primary(self, image_id: str) -> PetImage:
        image = self.get(image_id)
        image.is_primary = False
        image.updated_at = utcnow()
        self.images.update(image)
        logger.info(f"Removed primary flag from image {image.id}")
        return image

    def delete(self, image_id: str) -> None:
        if not self.images.delete_by_id(str(image_id)):
            raise NotFoundError(f"Pet image not found with id: {image_id}")
        logger.info(f"Deleted image {image_id}")

    def delete_by_pet(self, pet_id: str) -> int:
        deleted = self.images.delete_by_pet(str(pet_id))
        logger.info(f"Deleted {deleted} images of pet {pet_id}")
        return deleted

    def exists_by_id(self, image_id: str) -> bool:
        return self.images.exists_by_id(str(image_id))

    def has_primary(self, pet_id: str) -> bool:
        return self.images.exists_by(pet_id=str(pet_id), is_primary=True)

    def count(self) -> int:
        return self.images.count()

    def count_by_pet(self, pet_id: str) -> int:
        return self.images.count_by(pet_id=str(pet_id))

    def count_primary(self) -> int:
        return self.images.count_by(is_primary=True)

    def statistics(self, pet_id: Optional[str] = None) -> PetImageStatistics:
        if pet_id is not None:
            total = self.count_by_pet(pet_id)
            return PetImageStatistics(
                total_images=total,
                primary_images=self.images.count_by(pet_id=str(pet_id), is_primary=True),
                images_without_pet=0,
                average_images_per_pet=total,
            )

        total = self.count()
        pets_with_images = self.images.count_distinct_pets()
        return PetImageStatistics(
            total_images=total,
            primary_images=self.count_primary(),
            images_without_pet=self.images.count_by(pet_id=None),
            average_images_per_pet=total // pets_with_images if pets_with_images else 0,
        )
