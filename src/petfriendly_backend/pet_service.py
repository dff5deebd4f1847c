from __future__ import annotations

import logging
from typing import Optional

from .database import Database
from .entities import Pet
from .errors import NotFoundError, ValidationError
from .models import PetCreateRequest, PetGender, PetSize, PetSpecies, PetStatistics, PetStatus, PetUpdateRequest
from .pagination import Page, PageRequest
from .repositories import FoundationRepository, PetRepository
from .utils import utcnow

logger = logging.getLogger(__name__)


class PetService:
    def __init__(self, db: Database):
        self.pets = PetRepository(db)
        self.foundations = FoundationRepository(db)

    def create(self, payload: PetCreateRequest) -> Pet:
        foundation_id = str(payload.foundation_id)
        if not self.foundations.exists_by_id(foundation_id):
            raise ValidationError(f"Foundation not found with id: {foundation_id}")

        now = utcnow()
        data = payload.model_dump(exclude={"foundation_id", "status"})
        pet = Pet(
            foundation_id=foundation_id,
            status=payload.status or PetStatus.AVAILABLE,
            created_at=now,
            updated_at=now,
            **data,
        )
        self.pets.insert(pet)
        logger.info(f"Created pet {pet.id} ({pet.name}) for foundation {foundation_id}")
        return pet

    def get(self, pet_id: str) -> Pet:
        pet = self.pets.find_by_id(str(pet_id))
        if pet is None:
            raise NotFoundError(f"Pet not found with id: {pet_id}")
        return pet

    def find_all(self, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self.pets.find_all(pageable)

    def find_by_foundation(self, foundation_id: str, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self.pets.find_by(pageable, foundation_id=str(foundation_id))

    def find_by_status(self, status: PetStatus, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self.pets.find_by(pageable, status=status)

    def find_by_species(self, species: PetSpecies, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self.pets.find_by(pageable, species=species)

    def find_by_breed(self, breed: str, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self.pets.find_by_breed(breed, pageable)

    def find_by_age_range(self, min_age: int, max_age: int, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        if min_age > max_age:
            raise ValidationError("min_age must not be greater than max_age")
        return self.pets.find_by_age_between(min_age, max_age, pageable)

    def search_by_name(self, name: str, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self.pets.search_by_name(name, pageable)

    def find_by_foundation_and_status(
        self, foundation_id: str, status: PetStatus, pageable: Optional[PageRequest] = None
    ) -> Page[Pet]:
        return self.pets.find_by(pageable, foundation_id=str(foundation_id), status=status)

    def find_available(self, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self.find_by_status(PetStatus.AVAILABLE, pageable)

    def find_available_with_filters(
        self,
        species: Optional[PetSpecies] = None,
        size: Optional[PetSize] = None,
        gender: Optional[PetGender] = None,
        city: Optional[str] = None,
        pageable: Optional[PageRequest] = None,
    ) -> Page[Pet]:
        return self.pets.find_available_with_filters(species, size, gender, city, pageable)

    def update(self, pet_id: str, payload: PetUpdateRequest) -> Pet:
        pet = self.get(pet_id)
        for field_name, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(pet, field_name, value)
        pet.updated_at = utcnow()
        self.pets.update(pet)
        logger.info(f"Updated pet {pet.id}")
        return pet

    def update_status(self, pet_id: str, status: PetStatus) -> Pet:
        pet = self.get(pet_id)
        previous = pet.status
        pet.status = status
        pet.updated_at = utcnow()
        self.pets.update(pet)
        logger.info(f"Pet {pet.id} status changed {previous.value} -> {status.value}")
        return pet

    def mark_adopted(self, pet_id: str) -> Pet:
        return self.update_status(pet_id, PetStatus.ADOPTED)

    def mark_available(self, pet_id: str) -> Pet:
        return self.update_status(pet_id, PetStatus.AVAILABLE)

    def delete(self, pet_id: str) -> None:
        if not self.pets.delete_by_id(str(pet_id)):
            raise NotFoundError(f"Pet not found with id: {pet_id}")
        logger.info(f"Deleted pet {pet_id}")

    def exists_by_id(self, pet_id: str) -> bool:
        return self.pets.exists_by_id(str(pet_id))

    def count(self) -> int:
        return self.pets.count()

    def count_by_foundation(self, foundation_id: str) -> int:
        return self.pets.count_by(foundation_id=str(foundation_id))

    def count_by_status(self, status: PetStatus) -> int:
        return self.pets.count_by(status=status)

    def count_by_foundation_and_status(self, foundation_id: str, status: PetStatus) -> int:
        return self.pets.count_by(foundation_id=str(foundation_id), status=status)

    def count_by_species(self, species: PetSpecies) -> int:
        return self.pets.count_by(species=species)

    def statistics(self, foundation_id: Optional[str] = None) -> PetStatistics:
        criteria = {} if foundation_id is None else {"foundation_id": str(foundation_id)}
        return PetStatistics(
            total_pets=self.pets.count_by(**criteria),
            available_pets=self.pets.count_by(status=PetStatus.AVAILABLE, **criteria),
            adopted_pets=self.pets.count_by(status=PetStatus.ADOPTED, **criteria),
            pending_pets=self.pets.count_by(status=PetStatus.PENDING, **criteria),
            unavailable_pets=self.pets.count_by(status=PetStatus.UNAVAILABLE, **criteria),
        )
